from caltrack.models.user import User
from caltrack.models.profile import Profile
from caltrack.models.daily_log import DailyLog
from caltrack.models.food_entry import FoodEntry
from caltrack.models.weekly_goal import WeeklyGoal
from caltrack.models.entry_reaction import EntryReaction

__all__ = ["User", "Profile", "DailyLog", "FoodEntry", "WeeklyGoal", "EntryReaction"]
