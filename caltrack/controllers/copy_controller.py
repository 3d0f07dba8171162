"""
Quick Copy Controller

Candidate listing and batch copy of past entries into a day.
"""

from flask import request, current_app
from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db, sequencer
from caltrack.schemas.copy_schema import CopyEntriesSchema
from caltrack.services.day_log_service import load_day
from caltrack.services.quick_copy import (
    copy_entries,
    expand_group_keys,
    filter_candidates,
    load_copy_candidates,
    load_copy_view,
    resolve_range,
)
from caltrack.utils.dates import today_local
from caltrack.utils.enums import MEAL_FILTER_ALL, MEAL_VALUES
from caltrack.utils.http import ok, error, json_body, validate_schema, arg_str, arg_bool, service_error


def copy_candidates_handler():
    """
    Query Parameters:
        - range: yesterday | week | month (default: yesterday)
        - source_date: explicit single day, overrides range
        - meal: All | Breakfast | Lunch | Dinner | Snack
        - search: case-insensitive name filter
        - grouped: merge entries with the same normalized name
    """
    meal = arg_str("meal", MEAL_FILTER_ALL) or MEAL_FILTER_ALL
    if meal != MEAL_FILTER_ALL and meal not in MEAL_VALUES:
        return error("VALIDATION_ERROR", f"meal must be {MEAL_FILTER_ALL} or one of {', '.join(MEAL_VALUES)}", 400)

    try:
        copy_range = resolve_range(arg_str("range"), arg_str("source_date"))
    except ValueError as e:
        return service_error(e, items=[])

    try:
        payload = load_copy_view(
            request.user_id,
            copy_range,
            meal=meal,
            search=arg_str("search", ""),
            grouped=arg_bool("grouped"),
            sequencer=sequencer,
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Loading copy candidates failed")
        return error("BACKEND_ERROR", str(e), 500, items=[])

    return ok(payload)


def copy_entries_handler():
    data, errors = validate_schema(CopyEntriesSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Select at least one entry to copy.", 400, details=errors)

    user_id = request.user_id
    dest_day = data["date"] or today_local()
    try:
        entry_ids = list(data["entry_ids"])
        if data["group_keys"]:
            copy_range = resolve_range(data["range"], data["source_date"])
            candidates = filter_candidates(
                load_copy_candidates(user_id, copy_range),
                meal=data["meal"],
                search=data["search"],
            )
            entry_ids.extend(expand_group_keys(candidates, data["group_keys"]))

        result = copy_entries(user_id, dest_day, entry_ids)
    except ValueError as e:
        return service_error(e)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Quick copy failed")
        return error("BACKEND_ERROR", str(e), 500, copied=0)

    # Rows are committed here, a reload failure leaves them in place
    try:
        result["day"] = load_day(user_id, dest_day)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Reloading %s after quick copy failed", dest_day)
        result["day"] = None
        result["reload_error"] = str(e)

    return ok(result, 201)
