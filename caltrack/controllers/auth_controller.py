from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from caltrack.extensions import db
from caltrack.models.profile import Profile
from caltrack.models.user import User
from caltrack.schemas.auth_schema import LoginSchema, RegisterSchema
from caltrack.utils.auth import create_token, check_password_hash, hash_password
from caltrack.utils.http import ok, error, json_body, validate_schema


def _user_payload(user: User):
    profile = user.profile
    return {
        "id": user.id,
        "email": user.email,
        "display_name": profile.display_name if profile else "",
    }


def login_handler():
    data, errors = validate_schema(LoginSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Email and password are required.", 400, details=errors)

    email = data["email"].strip().lower()
    user = User.query.filter_by(email=email).first()
    if not user or not check_password_hash(user.password, data["password"]):
        return error("INVALID_CREDENTIALS", "Email or password incorrect", 401)

    return ok({"token": create_token(user.id), "user": _user_payload(user)})


def register_handler():
    data, errors = validate_schema(RegisterSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid registration data", 400, details=errors)

    email = data["email"].strip().lower()
    if User.query.filter_by(email=email).first():
        return error("EMAIL_IN_USE", "email already registered", 409)

    try:
        user = User(email=email, password=hash_password(data["password"]))
        db.session.add(user)
        db.session.flush()
        db.session.add(Profile(user_id=user.id, display_name=data["display_name"].strip(), group_code=""))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Registration failed for %s", email)
        return error("BACKEND_ERROR", str(e), 500)

    return ok({"token": create_token(user.id), "user": _user_payload(user)}, 201)


def logout_handler():
    """
    JWT tokens are stateless; the client discards its token. This endpoint only
    confirms the logout.
    """
    return ok({"message": "Logged out successfully"})
