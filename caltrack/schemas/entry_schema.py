from marshmallow import Schema, fields, validate, pre_load

from caltrack.schemas.fields import LenientInt, WeightKg
from caltrack.utils.enums import MEAL_VALUES, Meal


def _strip_name(data):
    if isinstance(data, dict) and isinstance(data.get("name"), str):
        data = dict(data)
        data["name"] = data["name"].strip()
    return data


class CreateEntrySchema(Schema):
    date = fields.Date(load_default=None)
    name = fields.Str(required=True, validate=validate.Length(min=1, error="Food name is required."))
    grams = LenientInt(nullable=True, load_default=None)
    calories = LenientInt(load_default=0)
    protein_g = LenientInt(load_default=0)
    carbs_g = LenientInt(load_default=0)
    fat_g = LenientInt(load_default=0)
    meal = fields.Str(load_default=Meal.SNACK.value, validate=validate.OneOf(MEAL_VALUES))

    @pre_load
    def strip_name(self, data, **kwargs):
        return _strip_name(data)


class UpdateEntrySchema(Schema):
    name = fields.Str(validate=validate.Length(min=1, error="Food name is required."))
    grams = LenientInt(nullable=True)
    calories = LenientInt()
    protein_g = LenientInt()
    carbs_g = LenientInt()
    fat_g = LenientInt()
    meal = fields.Str(validate=validate.OneOf(MEAL_VALUES))

    @pre_load
    def strip_name(self, data, **kwargs):
        return _strip_name(data)


class WeightSchema(Schema):
    date = fields.Date(load_default=None)
    weight_kg = WeightKg(load_default=None)
