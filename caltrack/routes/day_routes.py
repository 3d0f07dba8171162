from flask import Blueprint
from caltrack.utils.auth import require_auth
from caltrack.controllers.day_controller import (
    get_day_handler,
    create_entry_handler,
    update_entry_handler,
    delete_entry_handler,
    save_weight_handler,
)

day_bp = Blueprint("day", __name__, url_prefix="/api/day")

@day_bp.get("")
@require_auth
def get_day():
    return get_day_handler()


@day_bp.post("/entries")
@require_auth
def create_entry():
    return create_entry_handler()


@day_bp.put("/entries/<int:entry_id>")
@require_auth
def update_entry(entry_id):
    return update_entry_handler(entry_id)


@day_bp.delete("/entries/<int:entry_id>")
@require_auth
def delete_entry(entry_id):
    return delete_entry_handler(entry_id)


@day_bp.put("/weight")
@require_auth
def save_weight():
    return save_weight_handler()
