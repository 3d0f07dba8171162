from marshmallow import Schema, fields, validate


class ToggleReactionSchema(Schema):
    entry_id = fields.Int(required=True)
    emoji = fields.Str(required=True, validate=validate.Length(min=1, max=16))
