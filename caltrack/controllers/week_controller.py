from flask import request, current_app
from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db
from caltrack.schemas.goal_schema import WeeklyGoalSchema
from caltrack.services.day_log_service import load_week
from caltrack.services.goals import get_weekly_goal, upsert_weekly_goal
from caltrack.services.totals import Totals
from caltrack.utils.dates import start_of_week_monday, to_iso_date, today_local
from caltrack.utils.http import ok, error, json_body, validate_schema, arg_date, service_error


def get_week_handler():
    try:
        day = arg_date("date")
    except ValueError as e:
        return service_error(e)

    try:
        return ok(load_week(request.user_id, day))
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Loading week of %s failed", day)
        return error(
            "BACKEND_ERROR",
            str(e),
            500,
            week={"week_start": to_iso_date(start_of_week_monday(day)), "days": [], "totals": Totals.zero().to_dict()},
        )


def get_goal_handler():
    try:
        day = arg_date("week")
    except ValueError as e:
        return service_error(e)

    try:
        goal = get_weekly_goal(request.user_id, day)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Loading goal failed")
        return error("BACKEND_ERROR", str(e), 500)

    return ok({"week_start": to_iso_date(start_of_week_monday(day)), "goal": goal})


def save_goal_handler():
    data, errors = validate_schema(WeeklyGoalSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid weekly goal", 400, details=errors)

    try:
        goal = upsert_weekly_goal(
            request.user_id,
            data["week"] or today_local(),
            data["mode"],
            data["calorie_goal"],
            data["protein_goal_g"],
        )
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Saving goal failed")
        return error("BACKEND_ERROR", str(e), 500)

    return ok({"goal": goal, "message": "Saved goals for this week."})
