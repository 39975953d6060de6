from __future__ import annotations

import re

PH_MOBILE_PATTERN = re.compile(r"^(\+63|0)?9\d{9}$")


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def normalize_phone(value: str | None) -> str:
    return re.sub(r"[\s-]", "", value or "")


def is_ph_mobile(value: str | None) -> bool:
    return bool(PH_MOBILE_PATTERN.match(normalize_phone(value)))


def phone_variants(value: str | None) -> list[str]:
    """Stored numbers may use either 09xx or +639xx; return both spellings."""
    phone = normalize_phone(value)
    if not PH_MOBILE_PATTERN.match(phone):
        return [phone] if phone else []

    if phone.startswith("+63"):
        local = phone[3:]
    elif phone.startswith("0"):
        local = phone[1:]
    else:
        local = phone

    variants = [phone, f"0{local}", f"+63{local}"]
    return list(dict.fromkeys(variants))
