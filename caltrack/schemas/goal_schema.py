from marshmallow import Schema, fields, validate

from caltrack.schemas.fields import LenientInt
from caltrack.utils.enums import GoalMode


class WeeklyGoalSchema(Schema):
    # Any day of the week; stored against its Monday
    week = fields.Date(load_default=None)
    mode = fields.Str(load_default=GoalMode.CUT.value, validate=validate.OneOf([e.value for e in GoalMode]))
    calorie_goal = LenientInt(nullable=True, load_default=None)
    protein_goal_g = LenientInt(nullable=True, load_default=None)
