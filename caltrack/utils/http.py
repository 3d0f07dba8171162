from typing import Any, Dict, List, Optional, Tuple
from flask import request, jsonify
from marshmallow import ValidationError

from caltrack.utils.dates import parse_iso_date, today_local

STATUS_BY_CODE = {
    "NOT_FOUND": 404,
    "ENTRY_NOT_FOUND": 404,
    "FORBIDDEN": 403,
    "NO_PROFILE": 404,
}


def ok(payload: Any, status: int = 200):
    return jsonify(payload), status


def error(code: str, message: str, status: int = 400, **extra):
    body: Dict[str, Any] = {"error": {"code": code, "message": message}}
    if extra:
        body["error"].update(extra)
    return jsonify(body), status


def service_error(exc: ValueError, **extra):
    """Map a ``ValueError("CODE: message")`` raised by a service to a response."""
    text = str(exc)
    code, sep, message = text.partition(":")
    if not sep or not code.isupper():
        code, message = "VALIDATION_ERROR", text
    code = code.strip()
    return error(code, message.strip(), STATUS_BY_CODE.get(code, 400), **extra)


def json_body() -> Dict[str, Any]:
    # force=True allows a missing Content-Type header
    data = request.get_json(force=True, silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict() if request.form else {}


def validate_schema(schema_cls, data: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    try:
        return schema_cls().load(data), None
    except ValidationError as e:
        return None, e.messages


def arg_str(name: str, default: Optional[str] = None) -> Optional[str]:
    val = request.args.get(name)
    if val is None:
        return default
    return val


def arg_bool(name: str, default: bool = False) -> bool:
    val = request.args.get(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def arg_date(name: str = "date"):
    """Read a ``YYYY-MM-DD`` query arg, defaulting to today. Raises ValueError."""
    val = (request.args.get(name) or "").strip()
    if not val:
        return today_local()
    return parse_iso_date(val)


def arg_int_list(name: str) -> List[int]:
    raw = (request.args.get(name) or "").strip()
    ids: List[int] = []
    for token in raw.replace(",", " ").split():
        try:
            ids.append(int(token))
        except ValueError:
            pass
    return ids
