"""
Day Log Service

Daily logs are created lazily the first time a date is visited and are never
deleted. Every food entry belongs to exactly one log owned by the same user.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from caltrack.extensions import db
from caltrack.models.daily_log import DailyLog
from caltrack.models.entry_reaction import EntryReaction
from caltrack.models.food_entry import FoodEntry
from caltrack.services.goals import evaluate_progress, get_weekly_goal
from caltrack.services.reactions import reactions_for_entries, summarize
from caltrack.services.totals import aggregate, combine_all
from caltrack.utils.dates import (
    DateLike,
    day_label,
    enumerate_days,
    parse_iso_date,
    start_of_week_monday,
    to_iso_date,
)
from caltrack.utils.db import upsert
from caltrack.utils.enums import Meal

logger = logging.getLogger(__name__)

ENTRY_FIELDS = ["name", "grams", "calories", "protein_g", "carbs_g", "fat_g", "meal"]


def serialize_entry(entry: FoodEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "daily_log_id": entry.daily_log_id,
        "user_id": entry.user_id,
        "name": entry.name,
        "grams": entry.grams,
        "calories": entry.calories or 0,
        "protein_g": entry.protein_g or 0,
        "carbs_g": entry.carbs_g or 0,
        "fat_g": entry.fat_g or 0,
        "meal": entry.meal or Meal.SNACK.value,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def _weight(log: Optional[DailyLog]) -> Optional[float]:
    if log is None or log.weight_kg is None:
        return None
    return float(log.weight_kg)


def find_daily_log(user_id: int, day: DateLike) -> Optional[DailyLog]:
    return DailyLog.query.filter_by(user_id=user_id, log_date=parse_iso_date(day)).first()


def ensure_daily_log(user_id: int, day: DateLike) -> DailyLog:
    """Return the user's log for ``day``, creating it if needed."""
    log_date = parse_iso_date(day)
    log = find_daily_log(user_id, log_date)
    if log is not None:
        return log
    # Insert-or-ignore keeps concurrent first visits from creating duplicates
    upsert(DailyLog, {"user_id": user_id, "log_date": log_date}, key=["user_id", "log_date"])
    db.session.commit()
    logger.debug("Created daily log for user %s on %s", user_id, log_date)
    return find_daily_log(user_id, log_date)


def list_entries(log_id: int) -> List[FoodEntry]:
    return (
        FoodEntry.query
        .filter_by(daily_log_id=log_id)
        .order_by(FoodEntry.created_at.asc(), FoodEntry.id.asc())
        .all()
    )


def load_day(user_id: int, day: DateLike) -> Dict[str, Any]:
    """
    Load a user's day: entries, totals, weight and goal progress.

    The log is created on first visit.
    """
    log = ensure_daily_log(user_id, day)
    entries = list_entries(log.id)
    totals = aggregate(entries)
    goal = get_weekly_goal(user_id, log.log_date)

    reactions = reactions_for_entries([e.id for e in entries])
    items = []
    for entry in entries:
        payload = serialize_entry(entry)
        payload["reactions"] = summarize(reactions.get(entry.id, []), user_id)
        items.append(payload)

    return {
        "date": to_iso_date(log.log_date),
        "label": day_label(log.log_date),
        "daily_log_id": log.id,
        "weight_kg": _weight(log),
        "week_start": to_iso_date(start_of_week_monday(log.log_date)),
        "entries": items,
        "totals": totals.to_dict(),
        "goal": goal,
        "progress": evaluate_progress(totals, goal, days=1),
    }


def add_entry(user_id: int, day: DateLike, data: Dict[str, Any]) -> Dict[str, Any]:
    log = ensure_daily_log(user_id, day)
    entry = FoodEntry(
        daily_log_id=log.id,
        user_id=user_id,
        **{field: data[field] for field in ENTRY_FIELDS if field in data},
    )
    db.session.add(entry)
    db.session.commit()
    return serialize_entry(entry)


def log_date_of(daily_log_id: int) -> date:
    return db.session.get(DailyLog, daily_log_id).log_date


def _owned_entry(user_id: int, entry_id: int) -> FoodEntry:
    entry = FoodEntry.query.filter_by(id=entry_id, user_id=user_id).first()
    if entry is None:
        raise ValueError("ENTRY_NOT_FOUND: entry does not exist")
    return entry


def update_entry(user_id: int, entry_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
    entry = _owned_entry(user_id, entry_id)
    for field in ENTRY_FIELDS:
        if field in data:
            setattr(entry, field, data[field])
    db.session.commit()
    return serialize_entry(entry)


def delete_entry(user_id: int, entry_id: int) -> date:
    """Delete an entry with its reactions and return the date of its log."""
    entry = _owned_entry(user_id, entry_id)
    log_date = log_date_of(entry.daily_log_id)
    EntryReaction.query.filter_by(entry_id=entry.id).delete(synchronize_session=False)
    db.session.delete(entry)
    db.session.commit()
    return log_date


def save_weight(user_id: int, day: DateLike, weight_kg: Optional[float]) -> Dict[str, Any]:
    log = ensure_daily_log(user_id, day)
    log.weight_kg = Decimal(str(weight_kg)) if weight_kg is not None else None
    db.session.commit()
    return {"date": to_iso_date(log.log_date), "weight_kg": _weight(log)}


def load_week(user_id: int, any_day: DateLike) -> Dict[str, Any]:
    """
    Load the Monday-anchored week containing ``any_day``.

    Days without a log are reported with zero totals. Logs are not created.
    """
    week_start: date = start_of_week_monday(any_day)
    days = enumerate_days(week_start, 7)
    day_dates = [parse_iso_date(d) for d in days]

    logs = (
        DailyLog.query
        .filter(DailyLog.user_id == user_id, DailyLog.log_date.in_(day_dates))
        .all()
    )
    log_by_date = {to_iso_date(log.log_date): log for log in logs}
    log_ids = [log.id for log in logs]

    entries_by_log: Dict[int, List[FoodEntry]] = {}
    if log_ids:
        for entry in FoodEntry.query.filter(FoodEntry.daily_log_id.in_(log_ids)).all():
            entries_by_log.setdefault(entry.daily_log_id, []).append(entry)

    rows = []
    for d in days:
        log = log_by_date.get(d)
        totals = aggregate(entries_by_log.get(log.id, []) if log else [])
        rows.append({
            "date": d,
            "label": day_label(d),
            "totals": totals,
            "weight_kg": _weight(log),
        })

    week_totals = combine_all(r["totals"] for r in rows)
    goal = get_weekly_goal(user_id, week_start)

    return {
        "week_start": to_iso_date(week_start),
        "days": [{**r, "totals": r["totals"].to_dict()} for r in rows],
        "totals": week_totals.to_dict(),
        "week_weight_kg": _weight(log_by_date.get(days[0])),
        "goal": goal,
        "progress": evaluate_progress(week_totals, goal, days=7),
    }
