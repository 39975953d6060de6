from __future__ import annotations

import random
import re
import secrets

from ..core.constants import (
    CONFERENCE_YEAR,
    REGISTRATION_ID_PREFIX,
    SAFE_SHORT_CODE_CHARS,
    SHORT_CODE_LENGTH,
    SHORT_CODE_SUFFIX_LENGTH,
)

REGISTRATION_ID_PATTERN = re.compile(rf"^{REGISTRATION_ID_PREFIX}-(\d{{4}})-([A-Z0-9]+)$")
SHORT_CODE_PATTERN = re.compile(rf"^[A-Z0-9]{{{SHORT_CODE_LENGTH}}}$")
SUFFIX_PATTERN = re.compile(rf"^[A-Z0-9]{{{SHORT_CODE_SUFFIX_LENGTH}}}$")


def generate_short_code(rng: random.Random | None = None) -> str:
    """Random 6-char code from the unambiguous alphabet.

    ``secrets`` is used unless a seeded ``rng`` is given (tests, seeding).
    """
    if rng is not None:
        return "".join(rng.choice(SAFE_SHORT_CODE_CHARS) for _ in range(SHORT_CODE_LENGTH))
    return "".join(secrets.choice(SAFE_SHORT_CODE_CHARS) for _ in range(SHORT_CODE_LENGTH))


def short_code_suffix(short_code: str) -> str:
    return short_code[-SHORT_CODE_SUFFIX_LENGTH:]


def build_registration_id(short_code: str, year: int = CONFERENCE_YEAR) -> str:
    return f"{REGISTRATION_ID_PREFIX}-{year}-{short_code}"


def short_code_from_registration_id(registration_id: str) -> str | None:
    match = REGISTRATION_ID_PATTERN.match((registration_id or "").strip().upper())
    return match.group(2) if match else None


def is_registration_id(value: str) -> bool:
    return bool(REGISTRATION_ID_PATTERN.match((value or "").strip().upper()))


def is_short_code(value: str) -> bool:
    return bool(SHORT_CODE_PATTERN.match((value or "").strip().upper()))


def is_short_code_suffix(value: str) -> bool:
    return bool(SUFFIX_PATTERN.match((value or "").strip().upper()))
