from flask import Blueprint
from caltrack.utils.auth import require_auth
from caltrack.controllers.copy_controller import copy_candidates_handler, copy_entries_handler

copy_bp = Blueprint("copy", __name__, url_prefix="/api/copy")

@copy_bp.get("/candidates")
@require_auth
def copy_candidates():
    return copy_candidates_handler()


@copy_bp.post("")
@require_auth
def copy_entries():
    return copy_entries_handler()
