from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    NOT_FOUND_CODES,
    AuthenticationError,
    AuthorizationError,
    CheckInError,
    DomainError,
    ValidationError,
)

logger = logging.getLogger(__name__)

CONFLICT_CODES = frozenset(
    {
        CheckInError.ALREADY_CHECKED_IN,
        CheckInError.ATTENDEE_ALREADY_CHECKED_IN,
        "DUPLICATE_EMAIL",
    }
)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def serialize(value: Any) -> Any:
    """JSON-friendly copy: dataclasses get camelCase keys, enums their value."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): serialize(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [serialize(v) for v in value]
    return value


def ok(data: Any = None, status: int = 200, **extra):
    body = {"success": True, **extra}
    if data is not None:
        body["data"] = serialize(data)
    return jsonify(body), status


def fail(message: str, code: str, status: int = 400, **details):
    return jsonify({"success": False, "code": code, "message": message, **serialize(details)}), status


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_int(value: Any, field_name: str):
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def status_for(error: DomainError) -> int:
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if error.code in NOT_FOUND_CODES:
        return 404
    if error.code in CONFLICT_CODES:
        return 409
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return fail(e.message, e.code, status_for(e), **e.details)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.name.upper().replace(" ", "_"), e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if bool(app.config.get("DEBUG", False)):
            return fail(f"Something went wrong: {e}", "INTERNAL_ERROR", 500)
        return fail("Something went wrong", "INTERNAL_ERROR", 500)
