from flask import request, current_app
from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db
from caltrack.schemas.reaction_schema import ToggleReactionSchema
from caltrack.models.food_entry import FoodEntry
from caltrack.services.profiles import can_view_user
from caltrack.services.reactions import ALLOWED_EMOJIS, reactions_for_entries, summarize, toggle_reaction
from caltrack.utils.http import ok, error, json_body, validate_schema, arg_int_list, service_error


def list_emojis_handler():
    return ok({"emojis": ALLOWED_EMOJIS})


def list_reactions_handler():
    user_id = request.user_id
    entry_ids = arg_int_list("entry_ids")
    if not entry_ids:
        return ok({"items": {}})

    try:
        visible = [
            e.id for e in FoodEntry.query.filter(FoodEntry.id.in_(entry_ids)).all()
            if can_view_user(user_id, e.user_id)
        ]
        grouped = reactions_for_entries(visible)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Loading reactions failed")
        return error("BACKEND_ERROR", str(e), 500, items={})

    return ok({"items": {str(eid): summarize(grouped.get(eid, []), user_id) for eid in visible}})


def toggle_reaction_handler():
    data, errors = validate_schema(ToggleReactionSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid reaction", 400, details=errors)

    try:
        result = toggle_reaction(request.user_id, data["entry_id"], data["emoji"])
    except ValueError as e:
        return service_error(e)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Toggling reaction failed")
        return error("BACKEND_ERROR", str(e), 500)

    if result["rolled_back"]:
        state = {k: v for k, v in result.items() if k != "error"}
        return error("REACTION_FAILED", result["error"] or "Reaction could not be saved", 500, **state)
    return ok(result)
