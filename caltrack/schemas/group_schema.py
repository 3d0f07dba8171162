from marshmallow import Schema, fields, validate


class ProfileSchema(Schema):
    display_name = fields.Str(load_default="", validate=validate.Length(max=120))
    group_code = fields.Str(load_default="", validate=validate.Length(max=120))
