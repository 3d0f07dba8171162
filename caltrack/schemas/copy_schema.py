from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from caltrack.utils.enums import MEAL_FILTER_ALL, MEAL_VALUES, CopyRangeName


class CopyEntriesSchema(Schema):
    date = fields.Date(load_default=None)
    entry_ids = fields.List(fields.Int(), load_default=list)
    group_keys = fields.List(fields.Str(), load_default=list)
    range = fields.Str(allow_none=True, load_default=None, validate=validate.OneOf([e.value for e in CopyRangeName]))
    source_date = fields.Date(allow_none=True, load_default=None)
    # Filters the picker showed the groups under; groups expand within them only
    meal = fields.Str(load_default=MEAL_FILTER_ALL, validate=validate.OneOf([MEAL_FILTER_ALL, *MEAL_VALUES]))
    search = fields.Str(load_default="")

    @validates_schema
    def validate_selection(self, data, **kwargs):
        if not data.get("entry_ids") and not data.get("group_keys"):
            raise ValidationError("Select at least one entry to copy.", field_name="entry_ids")
        if data.get("group_keys") and not (data.get("range") or data.get("source_date")):
            raise ValidationError("range or source_date is required with group_keys", field_name="group_keys")
