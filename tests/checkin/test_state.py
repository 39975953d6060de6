from __future__ import annotations

import dataclasses

import pytest

from src.idmc_registration.idmc_registration.admins.model import Actor
from src.idmc_registration.idmc_registration.checkin.state import (
    apply_check_in,
    apply_undo,
    are_all_attendees_checked_in,
    build_check_in_slots,
    get_attendee_check_in_status,
    get_checked_in_attendee_count,
    pending_attendee_indexes,
)
from src.idmc_registration.idmc_registration.core.enums import CheckInMethod, RegistrationStatus
from src.idmc_registration.idmc_registration.core.exceptions import CheckInError
from tests.fakes import NOW, make_registration

VOLUNTEER = Actor(admin_id="vol-1", email="vol@idmc.org", name="Volunteer")


def _check_in(registration, index):
    return apply_check_in(registration, index, actor=VOLUNTEER, method=CheckInMethod.QR, now=NOW)


def test_checking_in_one_attendee_leaves_others_pending():
    registration = _check_in(make_registration(guests=2), 1)

    assert get_checked_in_attendee_count(registration) == 1
    assert pending_attendee_indexes(registration) == [0, 2]
    assert registration.checked_in is False
    slot = get_attendee_check_in_status(registration, 1)
    assert slot.checked_in_by == "vol-1"
    assert slot.checked_in_by_name == "Volunteer"
    assert slot.method == CheckInMethod.QR


def test_last_attendee_sets_the_aggregate_flag():
    registration = make_registration(guests=1)
    registration = _check_in(_check_in(registration, 0), 1)

    assert registration.checked_in is True
    assert registration.checked_in_at == NOW
    assert are_all_attendees_checked_in(registration)


def test_same_attendee_twice_is_rejected():
    registration = _check_in(make_registration(guests=1), 0)

    with pytest.raises(CheckInError) as exc:
        _check_in(registration, 0)
    assert exc.value.code == CheckInError.ATTENDEE_ALREADY_CHECKED_IN
    assert exc.value.details["checked_in_at"] == NOW


def test_check_in_all_then_again_is_already_checked_in():
    registration = apply_check_in(make_registration(guests=2), None, actor=VOLUNTEER, method=CheckInMethod.MANUAL, now=NOW)
    assert get_checked_in_attendee_count(registration) == 3

    with pytest.raises(CheckInError) as exc:
        apply_check_in(registration, None, actor=VOLUNTEER, method=CheckInMethod.MANUAL, now=NOW)
    assert exc.value.code == CheckInError.ALREADY_CHECKED_IN


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_out_of_range_index(index):
    with pytest.raises(CheckInError) as exc:
        _check_in(make_registration(guests=2), index)
    assert exc.value.code == CheckInError.INVALID_ATTENDEE_INDEX


@pytest.mark.parametrize(
    "status, code",
    [
        (RegistrationStatus.CANCELLED, CheckInError.CANCELLED),
        (RegistrationStatus.REFUNDED, CheckInError.CANCELLED),
        (RegistrationStatus.PENDING_PAYMENT, CheckInError.NOT_CONFIRMED),
        (RegistrationStatus.WAITLISTED, CheckInError.NOT_CONFIRMED),
    ],
)
def test_only_confirmed_registrations_check_in(status, code):
    with pytest.raises(CheckInError) as exc:
        _check_in(make_registration(status=status), 0)
    assert exc.value.code == code


def test_missing_slots_are_materialized():
    registration = make_registration(guests=2, attendee_check_ins=())

    slots = build_check_in_slots(registration)
    assert [s.attendee_index for s in slots] == [0, 1, 2]
    assert not any(s.checked_in for s in slots)
    assert are_all_attendees_checked_in(registration) is False

    updated = _check_in(registration, 2)
    assert len(updated.attendee_check_ins) == 3


def test_undo_single_attendee_clears_aggregate():
    registration = apply_check_in(make_registration(guests=1), None, actor=VOLUNTEER, method=CheckInMethod.QR, now=NOW)

    undone = apply_undo(registration, 1, actor=VOLUNTEER, reason="wrong person", now=NOW)

    assert undone.checked_in is False
    assert undone.checked_in_at is None
    assert [s.checked_in for s in undone.attendee_check_ins] == [True, False]
    assert undone.check_in_undo.reason == "wrong person"
    assert undone.check_in_undo.attendee_index == 1


def test_undo_primary_of_fully_checked_in_pair():
    registration = _check_in(_check_in(make_registration(guests=1), 0), 1)
    assert registration.checked_in is True

    undone = apply_undo(registration, 0, actor=VOLUNTEER, reason="", now=NOW)

    assert undone.checked_in is False
    assert are_all_attendees_checked_in(undone) is False
    assert get_attendee_check_in_status(undone, 0).checked_in is False
    assert get_attendee_check_in_status(undone, 1).checked_in is True
    assert get_checked_in_attendee_count(undone) == 1


def test_undo_on_legacy_document_flips_the_flag():
    legacy = make_registration(guests=1, attendee_check_ins=(), checked_in=True, checked_in_at=NOW)

    undone = apply_undo(legacy, None, actor=VOLUNTEER, reason="", now=NOW)

    assert undone.checked_in is False
    assert get_checked_in_attendee_count(undone) == 0


def test_undo_when_not_checked_in():
    with pytest.raises(CheckInError) as exc:
        apply_undo(make_registration(), 0, actor=VOLUNTEER, reason="", now=NOW)
    assert exc.value.code == CheckInError.NOT_CHECKED_IN

    with pytest.raises(CheckInError):
        apply_undo(make_registration(), None, actor=VOLUNTEER, reason="", now=NOW)


def test_functions_do_not_mutate_input():
    original = make_registration(guests=1)
    snapshot = dataclasses.asdict(original)
    _check_in(original, 0)
    assert dataclasses.asdict(original) == snapshot
