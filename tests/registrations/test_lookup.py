from __future__ import annotations

import pytest

from src.idmc_registration.idmc_registration.common.normalize import is_ph_mobile, phone_variants
from src.idmc_registration.idmc_registration.core.enums import RegistrationStatus
from tests.fakes import make_backend, make_container, make_registration


@pytest.fixture()
def registrations():
    backend = make_backend(
        [
            make_registration("A3K7MN", cellphone="09171234567"),
            make_registration("C9HTPQ", email="maria.reyes@gmail.com", cellphone="+639181112222"),
            make_registration(
                "D4FJNR", email="cancelled@x.com", cellphone="09990000000", status=RegistrationStatus.CANCELLED
            ),
        ]
    )
    return make_container(backend).registration_service


@pytest.mark.parametrize(
    "identifier",
    ["REG-2026-A3K7MN", "reg-2026-a3k7mn", "A3K7MN", " a3k7mn ", "K7MN", "JUAN.SANTOS@gmail.com", "0917 123 4567"],
)
def test_lookup_resolves_every_identifier_shape(registrations, identifier):
    found = registrations.lookup_registration(identifier)
    assert found is not None
    assert found.registration_id == "REG-2026-A3K7MN"


def test_lookup_matches_either_phone_spelling(registrations):
    assert registrations.lookup_registration("09181112222").registration_id == "REG-2026-C9HTPQ"


def test_lookup_partial_code_skips_inactive_registrations(registrations):
    assert registrations.lookup_registration("JNR") is None
    assert registrations.lookup_registration("7MN").registration_id == "REG-2026-A3K7MN"


def test_lookup_unknown_returns_none(registrations):
    assert registrations.lookup_registration("") is None
    assert registrations.lookup_registration("nobody@x.com") is None


def test_phone_variants():
    assert phone_variants("0917-123-4567") == ["09171234567", "+639171234567"]
    assert phone_variants("+639171234567") == ["+639171234567", "09171234567"]
    assert phone_variants("9171234567") == ["9171234567", "09171234567", "+639171234567"]
    assert is_ph_mobile("0917 123 4567")
    assert not is_ph_mobile("02 8123 4567")
