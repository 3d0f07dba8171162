from flask import request, current_app
from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db, sequencer
from caltrack.schemas.group_schema import ProfileSchema
from caltrack.services.group import empty_group_day, load_visible_group_day
from caltrack.services.profiles import (
    default_selection,
    get_profile,
    list_group_members,
    serialize_profile,
    upsert_profile,
)
from caltrack.utils.http import ok, error, json_body, validate_schema, arg_date, arg_int_list, service_error


def get_profile_handler():
    profile = serialize_profile(get_profile(request.user_id))
    if profile is None:
        return error("NO_PROFILE", "No profile found for your user", 404)
    return ok(profile)


def save_profile_handler():
    data, errors = validate_schema(ProfileSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid profile", 400, details=errors)

    try:
        profile = upsert_profile(request.user_id, data["display_name"], data["group_code"])
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Saving profile failed")
        return error("BACKEND_ERROR", str(e), 500)

    return ok({**profile, "message": "Saved. Share the same group code with your friends."})


def list_members_handler():
    previous = arg_int_list("selected")
    try:
        members = list_group_members(request.user_id)
    except ValueError as e:
        return service_error(e, members=[], selected=[])
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Loading group members failed")
        return error("BACKEND_ERROR", str(e), 500, members=[], selected=[])

    return ok({
        "members": members,
        "selected": default_selection(members, request.user_id, previous),
    })


def group_day_handler():
    try:
        day = arg_date("date")
    except ValueError as e:
        return service_error(e, **empty_group_day())

    member_ids = arg_int_list("members")
    try:
        return ok(load_visible_group_day(request.user_id, member_ids, day, sequencer=sequencer))
    except ValueError as e:
        return service_error(e, **empty_group_day())
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Loading group day %s failed", day)
        return error("BACKEND_ERROR", str(e), 500, **empty_group_day())
