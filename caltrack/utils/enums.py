from enum import Enum, IntEnum

class Meal(str, Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"

class GoalMode(str, Enum):
    BULK = "bulk"
    CUT = "cut"

class CopyRangeName(str, Enum):
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"

class ColorTier(IntEnum):
    RED = 0
    ORANGE = 1
    YELLOW = 2
    GREEN = 3

MEAL_VALUES = [m.value for m in Meal]
MEAL_FILTER_ALL = "All"
