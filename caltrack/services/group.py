"""
Group Day Service

Joins several members' logs and entries for one date into per-member totals, a
grand total and a flat, display-ordered row list.
"""

from typing import Any, Dict, Hashable, List, Optional

from caltrack.models.daily_log import DailyLog
from caltrack.models.food_entry import FoodEntry
from caltrack.services.day_log_service import serialize_entry
from caltrack.services.profiles import list_group_members, member_sort_key
from caltrack.services.sequencing import RequestSequencer
from caltrack.services.reactions import reactions_for_entries, summarize
from caltrack.services.totals import Totals, aggregate, combine
from caltrack.utils.dates import DateLike, parse_iso_date, to_iso_date

UNKNOWN_MEMBER = "(unknown)"


def empty_group_day() -> Dict[str, Any]:
    return {"rows": [], "totals_by_user": {}, "grand_total": Totals.zero().to_dict()}


def load_group_day(
    member_ids: List[int],
    day: DateLike,
    names: Optional[Dict[int, str]] = None,
    viewer_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Aggregate the given members' entries for ``day``.

    Members without a log for the day get zero totals. Totals follow the
    caller's member order; rows are sorted by member name, then creation time.
    """
    names = names or {}
    log_date = parse_iso_date(day)
    if not member_ids:
        return {"date": to_iso_date(log_date), **empty_group_day()}

    logs = (
        DailyLog.query
        .filter(DailyLog.user_id.in_(member_ids), DailyLog.log_date == log_date)
        .all()
    )
    log_to_user = {log.id: log.user_id for log in logs}

    entries: List[FoodEntry] = []
    if log_to_user:
        entries = (
            FoodEntry.query
            .filter(FoodEntry.daily_log_id.in_(list(log_to_user)))
            .order_by(FoodEntry.created_at.asc(), FoodEntry.id.asc())
            .all()
        )

    reactions = reactions_for_entries([e.id for e in entries]) if viewer_id is not None else {}

    by_member: Dict[int, List[FoodEntry]] = {}
    rows = []
    for entry in entries:
        # Ownership comes from the log, not the entry's own user_id
        member_id = log_to_user.get(entry.daily_log_id)
        if member_id is None:
            continue
        by_member.setdefault(member_id, []).append(entry)
        row = serialize_entry(entry)
        row["member_id"] = member_id
        row["member_name"] = names.get(member_id, UNKNOWN_MEMBER)
        if viewer_id is not None:
            row["reactions"] = summarize(reactions.get(entry.id, []), viewer_id)
        rows.append(row)

    totals_by_user: Dict[int, Totals] = {}
    grand_total = Totals.zero()
    for member_id in member_ids:
        t = aggregate(by_member.get(member_id, []))
        totals_by_user[member_id] = t
        grand_total = combine(grand_total, t)

    rows.sort(key=lambda r: (member_sort_key(r["member_name"]), r["created_at"] or ""))

    return {
        "date": to_iso_date(log_date),
        "rows": rows,
        "totals_by_user": {str(uid): t.to_dict() for uid, t in totals_by_user.items()},
        "grand_total": grand_total.to_dict(),
    }


def load_visible_group_day(
    me: int,
    member_ids: List[int],
    day: DateLike,
    sequencer: Optional[RequestSequencer] = None,
) -> Dict[str, Any]:
    """
    Load a group day for ``me``, restricted to members of my group.

    With a ``sequencer``, a load overtaken by a newer group load of mine comes
    back ``stale`` with empty outputs.

    Raises:
        ValueError: FORBIDDEN if a requested member is outside my group
    """
    family: Hashable = ("group", me)
    token = sequencer.issue(family) if sequencer else None

    members = list_group_members(me)
    names = {m["user_id"]: m["display_name"] for m in members}
    outside = [uid for uid in member_ids if uid not in names]
    if outside:
        raise ValueError(f"FORBIDDEN: not in your group: {', '.join(str(u) for u in outside)}")
    # De-duplicate while keeping the caller's order
    ordered = list(dict.fromkeys(member_ids))
    result = load_group_day(ordered, day, names=names, viewer_id=me)
    if sequencer and not sequencer.is_current(family, token):
        return {"date": result["date"], "request_token": token, "stale": True, **empty_group_day()}
    return {**result, "request_token": token, "stale": False}
