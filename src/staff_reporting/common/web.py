"""Shared Flask helpers for the JSON controllers."""

from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import ErrorCode, Role
from ..core.exceptions import DomainError, ValidationError
from .datetime_utils import parse_iso_date

HTTP_STATUS = {
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.INVALID_FORMAT: 400,
    ErrorCode.ALREADY_RECORDED: 409,
    ErrorCode.STAGE_LOCKED: 423,
    ErrorCode.WRITE_FAILED: 500,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.INTERNAL_ERROR: 500,
}


def error_response(code: ErrorCode, message: str):
    return jsonify({"error": {"code": code.value, "message": message}}), HTTP_STATUS[code]


def domain_error_response(e: DomainError):
    return error_response(e.code, e.message)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(ErrorCode.UNAUTHORIZED, "Login required")
        return view(*args, **kwargs)

    return wrapper


def manager_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(ErrorCode.UNAUTHORIZED, "Login required")
        if session.get("role") != Role.MANAGER.value:
            return error_response(ErrorCode.FORBIDDEN, "Manager access only")
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    return Role(session.get("role"))


def json_body() -> dict[str, Any]:
    return request.get_json(silent=True) or {}


def date_arg(name: str, default: Optional[date] = None) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return default
    return parse_iso_date(value)


def id_field(value: Any, name: str) -> int:
    """Numeric id from a JSON body; digit strings are accepted too."""
    if isinstance(value, bool) or not str(value).isdigit():
        raise ValidationError(f"{name} must be a numeric id", ErrorCode.INVALID_FORMAT)
    return int(value)
