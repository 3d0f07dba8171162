from marshmallow import fields

from caltrack.utils.parsing import parse_weight_kg, to_int_or_zero, to_nullable_int


class LenientInt(fields.Field):
    """Integer field that floors, clamps at zero and never rejects input."""

    def __init__(self, nullable: bool = False, **kwargs):
        self.nullable = nullable
        kwargs.setdefault("allow_none", True)
        super().__init__(**kwargs)

    def deserialize(self, value, attr=None, data=None, **kwargs):
        if value is None:
            return None if self.nullable else 0
        return super().deserialize(value, attr, data, **kwargs)

    def _deserialize(self, value, attr, data, **kwargs):
        return to_nullable_int(value) if self.nullable else to_int_or_zero(value)


class WeightKg(fields.Field):
    def __init__(self, **kwargs):
        kwargs.setdefault("allow_none", True)
        super().__init__(**kwargs)

    def _deserialize(self, value, attr, data, **kwargs):
        return parse_weight_kg(value)
