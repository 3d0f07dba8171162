from flask import Blueprint
from caltrack.utils.auth import require_auth
from caltrack.controllers.week_controller import get_week_handler, get_goal_handler, save_goal_handler

week_bp = Blueprint("week", __name__, url_prefix="/api")

@week_bp.get("/week")
@require_auth
def get_week():
    return get_week_handler()


@week_bp.get("/goals")
@require_auth
def get_goal():
    return get_goal_handler()


@week_bp.put("/goals")
@require_auth
def save_goal():
    return save_goal_handler()
