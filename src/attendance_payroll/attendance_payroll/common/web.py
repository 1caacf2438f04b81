"""Helpers shared by the Flask JSON controllers."""

from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.actor import Actor
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConcurrencyConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

_STATUS_BY_ERROR = (
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConcurrencyConflictError, 409),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_actor() -> Actor:
    """Build the explicit Actor from the login session at the HTTP edge."""
    return Actor(
        user_id=int(session["user_id"]),
        role=Role(session.get("role", Role.EMPLOYEE.value)),
        managed_user_ids=frozenset(int(i) for i in session.get("managed_user_ids", [])),
    )


def error_response(exc: DomainError):
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return jsonify({"error": str(exc)}), status
    return jsonify({"error": str(exc)}), 400


def date_arg(name: str, default: Optional[date] = None) -> date:
    value = request.args.get(name)
    if not value:
        if default is None:
            raise ValidationError(f"Missing parameter: {name}")
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON body required")
    return data
