from flask import Blueprint
from caltrack.utils.auth import require_auth
from caltrack.controllers.group_controller import (
    get_profile_handler,
    save_profile_handler,
    list_members_handler,
    group_day_handler,
)

group_bp = Blueprint("group", __name__, url_prefix="/api/group")

@group_bp.get("/profile")
@require_auth
def get_profile():
    return get_profile_handler()


@group_bp.put("/profile")
@require_auth
def save_profile():
    return save_profile_handler()


@group_bp.get("/members")
@require_auth
def list_members():
    return list_members_handler()


@group_bp.get("/day")
@require_auth
def group_day():
    return group_day_handler()
