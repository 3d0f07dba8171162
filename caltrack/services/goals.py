"""
Goal Progress Service

Evaluates totals against weekly goals and persists the goals themselves.

Goal values are *daily* targets stored once per Monday-anchored week. Weekly
views multiply them by the number of days shown.
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, Optional

from caltrack.extensions import db
from caltrack.models.weekly_goal import WeeklyGoal
from caltrack.services.totals import Totals
from caltrack.utils.dates import DateLike, start_of_week_monday, to_iso_date
from caltrack.utils.db import upsert
from caltrack.utils.enums import ColorTier, GoalMode

logger = logging.getLogger(__name__)

DEFAULT_MODE = GoalMode.CUT.value

TIER_COLORS = {
    ColorTier.RED: "rgba(239, 68, 68, 0.92)",
    ColorTier.ORANGE: "rgba(245, 158, 11, 0.92)",
    ColorTier.YELLOW: "rgba(234, 179, 8, 0.92)",
    ColorTier.GREEN: "rgba(16, 185, 129, 0.92)",
}


def _finite_or_zero(value: Any) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0


def raw_percent(actual: Any, goal: Optional[float]) -> float:
    if goal is None or goal <= 0:
        return 0.0
    return (_finite_or_zero(actual) / goal) * 100


def clamped_percent(actual: Any, goal: Optional[float]) -> float:
    return max(0.0, min(100.0, raw_percent(actual, goal)))


def _more_is_better_tier(p: float) -> ColorTier:
    if p < 50:
        return ColorTier.RED
    if p < 75:
        return ColorTier.ORANGE
    if p < 90:
        return ColorTier.YELLOW
    return ColorTier.GREEN


def calorie_color_tier(percent_raw: Any, mode: str) -> ColorTier:
    """Bulk treats the goal as a floor to reach, cut as a ceiling not to pass."""
    p = _finite_or_zero(percent_raw)

    if mode == GoalMode.BULK.value:
        return _more_is_better_tier(p)

    if p >= 100:
        return ColorTier.RED
    if p >= 90:
        return ColorTier.ORANGE
    if p >= 75:
        return ColorTier.YELLOW
    return ColorTier.GREEN


def protein_color_tier(percent_raw: Any) -> ColorTier:
    return _more_is_better_tier(_finite_or_zero(percent_raw))


def tier_color(tier: ColorTier) -> str:
    return TIER_COLORS[tier]


def _progress_block(actual: int, target: Optional[int], tier: ColorTier) -> Dict[str, Any]:
    return {
        "actual": actual,
        "target": target,
        "raw_percent": round(raw_percent(actual, target), 1),
        "clamped_percent": round(clamped_percent(actual, target), 1),
        "tier": tier.name.lower(),
        "color": tier_color(tier),
    }


def evaluate_progress(totals: Totals, goal: Optional[Dict[str, Any]], days: int = 1) -> Dict[str, Any]:
    """
    Build calorie and protein progress blocks for ``totals``.

    Args:
        totals: Aggregated intake over the period
        goal: Serialized weekly goal or None
        days: Number of days the totals cover (7 for a week)
    """
    goal = goal or {}
    mode = goal.get("mode") or DEFAULT_MODE
    cal_goal = goal.get("calorie_goal")
    prot_goal = goal.get("protein_goal_g")
    cal_target = cal_goal * days if cal_goal is not None else None
    prot_target = prot_goal * days if prot_goal is not None else None

    cal_tier = calorie_color_tier(raw_percent(totals.calories, cal_target), mode)
    prot_tier = protein_color_tier(raw_percent(totals.protein, prot_target))

    return {
        "mode": mode,
        "days": days,
        "calories": _progress_block(totals.calories, cal_target, cal_tier),
        "protein": _progress_block(totals.protein, prot_target, prot_tier),
    }


def serialize_goal(goal: Optional[WeeklyGoal]) -> Optional[Dict[str, Any]]:
    if goal is None:
        return None
    return {
        "week_start": to_iso_date(goal.week_start),
        "mode": GoalMode.BULK.value if goal.mode == GoalMode.BULK.value else GoalMode.CUT.value,
        "calorie_goal": goal.calorie_goal,
        "protein_goal_g": goal.protein_goal_g,
        "updated_at": goal.updated_at.isoformat() if goal.updated_at else None,
    }


def get_weekly_goal(user_id: int, any_day: DateLike) -> Optional[Dict[str, Any]]:
    week_start = start_of_week_monday(any_day)
    goal = WeeklyGoal.query.filter_by(user_id=user_id, week_start=week_start).first()
    return serialize_goal(goal)


def upsert_weekly_goal(
    user_id: int,
    any_day: DateLike,
    mode: str,
    calorie_goal: Optional[int],
    protein_goal_g: Optional[int],
) -> Dict[str, Any]:
    """Insert or replace the goal for the week containing ``any_day``."""
    week_start: date = start_of_week_monday(any_day)
    values = {
        "user_id": user_id,
        "week_start": week_start,
        "mode": mode,
        "calorie_goal": calorie_goal,
        "protein_goal_g": protein_goal_g,
        "updated_at": datetime.utcnow(),
    }
    upsert(
        WeeklyGoal,
        values,
        key=["user_id", "week_start"],
        update=["mode", "calorie_goal", "protein_goal_g", "updated_at"],
    )
    db.session.commit()
    logger.info("Saved weekly goal for user %s week %s", user_id, week_start)
    return get_weekly_goal(user_id, week_start)
