from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Callable, TypeVar, Any, cast
from flask import current_app, jsonify, request

from extensions import db
from utils.tenant import get_admin_id_from_request

F = TypeVar("F", bound=Callable[..., Any])


def admin_scope_required(func: F) -> F:
    """Decorator that requires a valid ``x-admin-id`` header.

    - With a positive integer header, proceeds to the view.
    - Otherwise, answers 401 with a JSON error.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        if get_admin_id_from_request() is None:
            return jsonify({"error": "Admin scope required"}), 401
        return func(*args, **kwargs)

    return cast(F, wrapper)


def parse_iso_date(value: Any) -> date | None:
    """``YYYY-MM-DD`` (or a longer ISO timestamp) to a date; None when empty.

    Raises ValueError for text that is not a date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def parse_int(value: Any) -> int | None:
    if value is None or str(value).strip() == "":
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def server_error(message: str = "Internal server error", status: int = 500):
    """Roll back, log the active exception and answer ``{"error": message}``."""
    db.session.rollback()
    current_app.logger.exception(message)
    return jsonify({"error": message}), status
