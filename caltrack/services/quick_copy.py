"""
Quick Copy Service

Loads past food entries from a rolling window or a single source date, lets the
caller filter and group them by name, and re-inserts a selection into another
day's log as one batch.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Hashable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db
from caltrack.models.daily_log import DailyLog
from caltrack.models.food_entry import FoodEntry
from caltrack.services.day_log_service import ensure_daily_log, serialize_entry
from caltrack.services.sequencing import RequestSequencer
from caltrack.services.totals import aggregate
from caltrack.utils.dates import DateLike, parse_iso_date, shift_days, to_iso_date, yesterday_local
from caltrack.utils.enums import MEAL_FILTER_ALL, CopyRangeName, Meal

logger = logging.getLogger(__name__)

RANGE_DAYS = {
    CopyRangeName.YESTERDAY.value: 1,
    CopyRangeName.WEEK.value: 7,
    CopyRangeName.MONTH.value: 30,
}

RANGE_LABELS = {
    CopyRangeName.YESTERDAY.value: "yesterday",
    CopyRangeName.WEEK.value: "the last 7 days",
    CopyRangeName.MONTH.value: "the last 30 days",
}

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class CopyRange:
    start: date
    end: date
    single_day: bool
    label: str


def resolve_range(
    range_name: Optional[str] = None,
    source_date: Optional[DateLike] = None,
    today: Optional[date] = None,
) -> CopyRange:
    """
    Turn a named window or an explicit source date into an inclusive date range.

    Named windows all end yesterday relative to ``today``.
    """
    if source_date:
        day = parse_iso_date(source_date)
        return CopyRange(start=day, end=day, single_day=True, label=to_iso_date(day))

    name = (range_name or CopyRangeName.YESTERDAY.value).strip().lower()
    if name not in RANGE_DAYS:
        raise ValueError(f"INVALID_RANGE: range must be one of {', '.join(RANGE_DAYS)}")

    end = shift_days(today, -1) if today else yesterday_local()
    start = shift_days(end, 1 - RANGE_DAYS[name])
    return CopyRange(start=start, end=end, single_day=name == CopyRangeName.YESTERDAY.value, label=RANGE_LABELS[name])


def normalize_name(name: Optional[str]) -> str:
    return _WHITESPACE_RE.sub(" ", (name or "").strip()).lower()


def load_copy_candidates(user_id: int, copy_range: CopyRange) -> List[Dict[str, Any]]:
    """Entries the user logged inside the range, each tagged with its source date."""
    logs = (
        DailyLog.query
        .filter(
            DailyLog.user_id == user_id,
            DailyLog.log_date >= copy_range.start,
            DailyLog.log_date <= copy_range.end,
        )
        .all()
    )
    day_by_log = {log.id: log.log_date for log in logs}
    if not day_by_log:
        return []

    entries = FoodEntry.query.filter(FoodEntry.daily_log_id.in_(list(day_by_log))).all()

    def sort_key(e: FoodEntry):
        return (day_by_log[e.daily_log_id], e.created_at, e.id)

    # Single day reads top-down like the day view, windows show the newest first
    entries.sort(key=sort_key, reverse=not copy_range.single_day)

    candidates = []
    for entry in entries:
        item = serialize_entry(entry)
        item["source_date"] = to_iso_date(day_by_log[entry.daily_log_id])
        candidates.append(item)
    return candidates


def filter_candidates(
    candidates: Iterable[Dict[str, Any]],
    meal: Optional[str] = MEAL_FILTER_ALL,
    search: Optional[str] = "",
) -> List[Dict[str, Any]]:
    q = (search or "").strip().lower()
    meal = meal or MEAL_FILTER_ALL
    out = []
    for c in candidates:
        if meal != MEAL_FILTER_ALL and (c.get("meal") or "") != meal:
            continue
        if q and q not in (c.get("name") or "").lower():
            continue
        out.append(c)
    return out


def group_by_name(candidates: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Merge candidates whose names normalize to the same key.

    Groups keep first-seen order. Selecting a group means copying every entry in
    ``entry_ids``.
    """
    groups: Dict[str, Dict[str, Any]] = {}
    members: Dict[str, List[Dict[str, Any]]] = {}
    for c in candidates:
        key = normalize_name(c.get("name"))
        if key not in groups:
            groups[key] = {"key": key, "name": (c.get("name") or "").strip(), "meals": [], "days": [], "entry_ids": []}
            members[key] = []
        g = groups[key]
        members[key].append(c)
        g["entry_ids"].append(c["id"])
        meal = c.get("meal")
        if meal and meal not in g["meals"]:
            g["meals"].append(meal)
        day = c.get("source_date")
        if day and day not in g["days"]:
            g["days"].append(day)

    result = []
    for key, g in groups.items():
        g["count"] = len(members[key])
        g["totals"] = aggregate(members[key]).to_dict()
        g["days"] = sorted(g["days"], reverse=True)
        result.append(g)
    return result


def expand_group_keys(candidates: Iterable[Dict[str, Any]], keys: Iterable[str]) -> List[int]:
    wanted = {normalize_name(k) for k in keys}
    return [c["id"] for c in candidates if normalize_name(c.get("name")) in wanted]


def load_copy_view(
    user_id: int,
    copy_range: CopyRange,
    meal: Optional[str] = MEAL_FILTER_ALL,
    search: Optional[str] = "",
    grouped: bool = False,
    sequencer: Optional[RequestSequencer] = None,
) -> Dict[str, Any]:
    """
    Candidate listing for the copy picker.

    When a ``sequencer`` is given, a response overtaken by a newer load of the
    same user is returned as ``stale`` with no items.
    """
    family: Hashable = ("copy", user_id)
    token = sequencer.issue(family) if sequencer else None

    candidates = load_copy_candidates(user_id, copy_range)

    payload: Dict[str, Any] = {
        "request_token": token,
        "stale": False,
        "start": to_iso_date(copy_range.start),
        "end": to_iso_date(copy_range.end),
        "grouped": grouped,
    }
    if sequencer and not sequencer.is_current(family, token):
        payload.update({"stale": True, "status": "stale", "items": [], "message": None})
        return payload

    if not candidates:
        payload.update({
            "status": "empty",
            "items": [],
            "total": 0,
            "message": f"No entries found for {copy_range.label}.",
        })
        return payload

    visible = filter_candidates(candidates, meal=meal, search=search)
    payload.update({
        "status": "ok",
        "total": len(candidates),
        "items": group_by_name(visible) if grouped else visible,
        "message": None if visible else "No entries match the current filter.",
    })
    return payload


def copy_entries(user_id: int, dest_day: DateLike, entry_ids: List[int]) -> Dict[str, Any]:
    """
    Copy the selected entries into the user's log for ``dest_day``.

    All rows are inserted in one transaction. If any id is unknown nothing is
    written; if the insert fails it is rolled back and the error re-raised.
    """
    ids = list(dict.fromkeys(int(i) for i in entry_ids))
    if not ids:
        raise ValueError("NOTHING_SELECTED: Select at least one entry to copy.")

    found = {
        e.id: e
        for e in FoodEntry.query.filter(FoodEntry.id.in_(ids), FoodEntry.user_id == user_id).all()
    }
    missing = [i for i in ids if i not in found]
    if missing:
        raise ValueError(f"ENTRY_NOT_FOUND: unknown entries: {', '.join(str(i) for i in missing)}")

    dest = ensure_daily_log(user_id, dest_day)
    rows = [
        FoodEntry(
            daily_log_id=dest.id,
            user_id=user_id,
            name=src.name,
            calories=src.calories or 0,
            protein_g=src.protein_g or 0,
            carbs_g=src.carbs_g or 0,
            fat_g=src.fat_g or 0,
            grams=src.grams,
            meal=src.meal or Meal.SNACK.value,
        )
        for src in (found[i] for i in ids)
    ]

    try:
        db.session.add_all(rows)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Quick copy of %s entries to %s failed", len(rows), dest.log_date)
        raise

    day = to_iso_date(dest.log_date)
    return {
        "date": day,
        "copied": len(rows),
        "entries": [serialize_entry(r) for r in rows],
        "message": f"Copied {len(rows)} item{'' if len(rows) == 1 else 's'} to {day}.",
    }
