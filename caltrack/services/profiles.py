"""
Profile Service

Profiles carry a display name and a free-text group code. Users with the same
non-empty group code can see each other's logs.
"""

from typing import Any, Dict, List, Optional

from caltrack.extensions import db
from caltrack.models.profile import Profile
from caltrack.utils.db import upsert

NO_NAME = "(no name)"


def serialize_profile(profile: Optional[Profile]) -> Optional[Dict[str, Any]]:
    if profile is None:
        return None
    return {
        "user_id": profile.user_id,
        "display_name": profile.display_name or "",
        "group_code": profile.group_code or "",
    }


def get_profile(user_id: int) -> Optional[Profile]:
    return db.session.get(Profile, user_id)


def upsert_profile(user_id: int, display_name: str, group_code: str) -> Dict[str, Any]:
    values = {
        "user_id": user_id,
        "display_name": (display_name or "").strip(),
        "group_code": (group_code or "").strip(),
    }
    upsert(Profile, values, key=["user_id"], update=["display_name", "group_code"])
    db.session.commit()
    return serialize_profile(get_profile(user_id))


def group_code_of(user_id: int) -> str:
    profile = get_profile(user_id)
    return (profile.group_code or "").strip() if profile else ""


def can_view_user(viewer_id: int, owner_id: int) -> bool:
    if viewer_id == owner_id:
        return True
    code = group_code_of(viewer_id)
    return bool(code) and code == group_code_of(owner_id)


def member_sort_key(name: str):
    """Case-insensitive name order, ties broken by the exact spelling."""
    return (name or "").lower(), name or ""


def list_group_members(me: int) -> List[Dict[str, Any]]:
    """
    List everyone sharing my group code, me included and listed first.

    Raises:
        ValueError: NO_PROFILE if I have no profile, NO_GROUP_CODE if it is blank
    """
    mine = get_profile(me)
    if mine is None:
        raise ValueError("NO_PROFILE: No profile found for your user. Save your profile once.")

    code = (mine.group_code or "").strip()
    if not code:
        raise ValueError("NO_GROUP_CODE: Set a group code first.")

    members = [
        {"user_id": p.user_id, "display_name": (p.display_name or "").strip() or NO_NAME}
        for p in Profile.query.filter_by(group_code=code).all()
    ]

    my_name = (mine.display_name or "").strip()
    for m in members:
        if m["user_id"] == me:
            m["display_name"] = f"{my_name} (you)" if my_name else "You"
            m["is_me"] = True
        else:
            m["is_me"] = False

    members.sort(key=lambda m: (not m["is_me"], member_sort_key(m["display_name"])))
    return members


def default_selection(members: List[Dict[str, Any]], me: int, previous: Optional[List[int]] = None) -> List[int]:
    """Keep still-valid previous picks, else select me, else the first member."""
    valid = {m["user_id"] for m in members}
    kept = [uid for uid in (previous or []) if uid in valid]
    if kept:
        return kept
    if me in valid:
        return [me]
    return [members[0]["user_id"]] if members else []
