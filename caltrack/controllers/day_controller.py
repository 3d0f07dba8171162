"""
Day Controller

Handles the single-day view: entries, totals, weight and goal progress, plus
entry mutations. Every mutation answers with the reloaded day.
"""

from flask import request, current_app
from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db
from caltrack.schemas.entry_schema import CreateEntrySchema, UpdateEntrySchema, WeightSchema
from caltrack.services.day_log_service import (
    add_entry,
    delete_entry,
    load_day,
    log_date_of,
    save_weight,
    update_entry,
)
from caltrack.services.totals import Totals
from caltrack.utils.dates import today_local, to_iso_date
from caltrack.utils.http import ok, error, json_body, validate_schema, arg_date, service_error


def _backend_error(exc: Exception, day=None):
    db.session.rollback()
    current_app.logger.exception("Day operation failed")
    # Never show a partially loaded day
    return error(
        "BACKEND_ERROR",
        str(exc),
        500,
        day={
            "date": to_iso_date(day) if day else None,
            "entries": [],
            "totals": Totals.zero().to_dict(),
            "daily_log_id": None,
        },
    )


def get_day_handler():
    try:
        day = arg_date("date")
    except ValueError as e:
        return service_error(e)

    try:
        return ok(load_day(request.user_id, day))
    except SQLAlchemyError as e:
        return _backend_error(e, day)


def create_entry_handler():
    data, errors = validate_schema(CreateEntrySchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid food entry", 400, details=errors)

    day = data.pop("date") or today_local()
    try:
        entry = add_entry(request.user_id, day, data)
        return ok({"entry": entry, "day": load_day(request.user_id, day)}, 201)
    except SQLAlchemyError as e:
        return _backend_error(e, day)


def update_entry_handler(entry_id: int):
    data, errors = validate_schema(UpdateEntrySchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid food entry", 400, details=errors)

    try:
        entry = update_entry(request.user_id, entry_id, data)
        day = log_date_of(entry["daily_log_id"])
        return ok({"entry": entry, "day": load_day(request.user_id, day)})
    except ValueError as e:
        return service_error(e)
    except SQLAlchemyError as e:
        return _backend_error(e)


def delete_entry_handler(entry_id: int):
    try:
        day = delete_entry(request.user_id, entry_id)
        return ok({"id": entry_id, "message": "Entry deleted", "day": load_day(request.user_id, day)})
    except ValueError as e:
        return service_error(e)
    except SQLAlchemyError as e:
        return _backend_error(e)


def save_weight_handler():
    data, errors = validate_schema(WeightSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid weight", 400, details=errors)

    day = data["date"] or today_local()
    try:
        saved = save_weight(request.user_id, day, data["weight_kg"])
        return ok({**saved, "day": load_day(request.user_id, day)})
    except SQLAlchemyError as e:
        return _backend_error(e, day)
