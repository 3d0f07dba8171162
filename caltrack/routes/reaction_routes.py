from flask import Blueprint
from caltrack.utils.auth import require_auth
from caltrack.controllers.reaction_controller import (
    list_emojis_handler,
    list_reactions_handler,
    toggle_reaction_handler,
)

reaction_bp = Blueprint("reactions", __name__, url_prefix="/api/reactions")

@reaction_bp.get("/emojis")
@require_auth
def list_emojis():
    return list_emojis_handler()


@reaction_bp.get("")
@require_auth
def list_reactions():
    return list_reactions_handler()


@reaction_bp.post("/toggle")
@require_auth
def toggle_reaction():
    return toggle_reaction_handler()
