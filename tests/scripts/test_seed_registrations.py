from __future__ import annotations

import importlib.util
import random
from datetime import datetime, timezone
from pathlib import Path

import pytest

from src.idmc_registration.idmc_registration.checkin.state import are_all_attendees_checked_in
from src.idmc_registration.idmc_registration.core.enums import RegistrationStatus
from src.idmc_registration.idmc_registration.registrations.short_code import is_short_code

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "seed_registrations.py"
NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def seed():
    module_spec = importlib.util.spec_from_file_location("seed_registrations", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_static_fixtures(seed):
    items = seed.build_seed_registrations(50, static_only=True, now=NOW)

    assert [r.short_code for r in items][:2] == ["A3K7MN", "C9HTPQ"]
    assert len(items) == len(seed.STATIC_FIXTURES)
    by_code = {r.short_code: r for r in items}
    assert are_all_attendees_checked_in(by_code["A3K7MN"])
    assert by_code["M3HUVF"].total_attendees == 3
    assert by_code["M3HUVF"].total_amount == 7500
    assert by_code["G6DNXA"].status == RegistrationStatus.CANCELLED
    assert by_code["G6DNXA"].attendee_qr_codes == ()


def test_topped_up_to_count(seed):
    items = seed.build_seed_registrations(25, rng=random.Random(7), now=NOW)

    assert len(items) == 25
    assert len({r.registration_id for r in items}) == 25
    for r in items:
        assert is_short_code(r.short_code)
        assert r.short_code_suffix == r.short_code[-4:]
        assert r.registration_id == f"REG-2026-{r.short_code}"
        assert len(r.attendee_check_ins) == r.total_attendees
        if r.status == RegistrationStatus.CONFIRMED:
            assert [c.attendee_index for c in r.attendee_qr_codes] == list(range(r.total_attendees))


def test_parse_args(seed):
    args = seed.parse_args(["--clear", "--count", "5"])
    assert args.clear and not args.force and not args.static
    assert args.count == 5
