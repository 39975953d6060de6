from __future__ import annotations

import random

from src.idmc_registration.idmc_registration.core.constants import SAFE_SHORT_CODE_CHARS
from src.idmc_registration.idmc_registration.registrations.short_code import (
    build_registration_id,
    generate_short_code,
    is_registration_id,
    is_short_code,
    is_short_code_suffix,
    short_code_from_registration_id,
    short_code_suffix,
)


def test_generated_codes_use_only_unambiguous_characters():
    rng = random.Random(7)
    for _ in range(200):
        code = generate_short_code(rng)
        assert len(code) == 6
        assert set(code) <= set(SAFE_SHORT_CODE_CHARS)
        for confusable in "0O1IL25SZ8B":
            assert confusable not in code


def test_suffix_is_last_four_characters():
    rng = random.Random(11)
    for _ in range(50):
        code = generate_short_code(rng)
        assert short_code_suffix(code) == code[-4:]


def test_registration_id_round_trip():
    registration_id = build_registration_id("A3K7MN", 2026)
    assert registration_id == "REG-2026-A3K7MN"
    assert short_code_from_registration_id(registration_id) == "A3K7MN"
    assert short_code_from_registration_id("reg-2026-a3k7mn") == "A3K7MN"
    assert short_code_from_registration_id("A3K7MN") is None


def test_identifier_shapes():
    assert is_registration_id("REG-2026-A3K7MN")
    assert not is_registration_id("REG-26-A3K7MN")
    assert is_short_code("a3k7mn")
    assert not is_short_code("A3K7M")
    assert is_short_code_suffix("K7MN")
    assert not is_short_code_suffix("K7MN9")
