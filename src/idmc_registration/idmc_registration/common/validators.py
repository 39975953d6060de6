from __future__ import annotations

import re

from ..core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_non_empty(value: str | None, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str | None, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def is_valid_email(value: str | None) -> bool:
    return bool(value) and bool(EMAIL_PATTERN.match(str(value).strip()))


def require_email(value: str | None, field_name: str = "Email") -> str:
    value = require_non_empty(value, field_name)
    if not is_valid_email(value):
        raise ValidationError(f"{field_name} is not a valid email address")
    return value
