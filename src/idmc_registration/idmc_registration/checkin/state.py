"""Per-attendee check-in state for a registration.

Each attendee (primary first, then additional attendees in order) owns one
slot in ``attendee_check_ins``. The legacy ``checked_in`` flag on the
registration is always the AND of all slots. Functions here are pure: they
return a new ``Registration`` and never touch storage.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

from ..admins.model import Actor
from ..core.enums import CheckInMethod, RegistrationStatus
from ..core.exceptions import CheckInError
from ..registrations.model import Attendee, AttendeeCheckIn, CheckInUndo, Registration


def build_check_in_slots(registration: Registration) -> tuple[AttendeeCheckIn, ...]:
    """One slot per attendee, filling gaps in older documents.

    Documents written before per-attendee tracking only have the aggregate
    flag; when it is set, every attendee counts as checked in.
    """

    total = registration.total_attendees
    if not registration.attendee_check_ins and registration.checked_in:
        return tuple(
            AttendeeCheckIn(
                attendee_index=i,
                checked_in=True,
                checked_in_at=registration.checked_in_at,
                checked_in_by=registration.checked_in_by,
                method=registration.checked_in_method,
            )
            for i in range(total)
        )

    existing = {slot.attendee_index: slot for slot in registration.attendee_check_ins}
    return tuple(existing.get(i) or AttendeeCheckIn(attendee_index=i) for i in range(total))


def get_attendee_check_in_status(registration: Registration, attendee_index: int) -> Optional[AttendeeCheckIn]:
    slots = build_check_in_slots(registration)
    if 0 <= attendee_index < len(slots):
        return slots[attendee_index]
    return None


def get_checked_in_attendee_count(registration: Registration) -> int:
    return sum(1 for slot in build_check_in_slots(registration) if slot.checked_in)


def are_all_attendees_checked_in(registration: Registration) -> bool:
    slots = registration.attendee_check_ins
    if len(slots) != registration.total_attendees:
        return False
    return all(slot.checked_in for slot in slots)


def get_attendee_by_index(registration: Registration, attendee_index: int) -> Optional[Attendee]:
    attendees = registration.attendees
    if 0 <= attendee_index < len(attendees):
        return attendees[attendee_index]
    return None


def validate_for_check_in(registration: Registration) -> None:
    if registration.status in (RegistrationStatus.CANCELLED, RegistrationStatus.REFUNDED):
        raise CheckInError(
            f"Registration {registration.registration_id} has been {registration.status.value}",
            CheckInError.CANCELLED,
        )
    if registration.status != RegistrationStatus.CONFIRMED:
        raise CheckInError(
            f"Registration {registration.registration_id} is not confirmed (status: {registration.status.value})",
            CheckInError.NOT_CONFIRMED,
        )


def _require_index(registration: Registration, attendee_index: int) -> None:
    if not isinstance(attendee_index, int) or not 0 <= attendee_index < registration.total_attendees:
        raise CheckInError(
            f"Attendee #{attendee_index} does not exist on {registration.registration_id}",
            CheckInError.INVALID_ATTENDEE_INDEX,
        )


def _with_slots(registration: Registration, slots: list[AttendeeCheckIn], **changes) -> Registration:
    all_in = len(slots) == registration.total_attendees and all(s.checked_in for s in slots)
    return dataclasses.replace(registration, attendee_check_ins=tuple(slots), checked_in=all_in, **changes)


def pending_attendee_indexes(registration: Registration) -> list[int]:
    return [slot.attendee_index for slot in build_check_in_slots(registration) if not slot.checked_in]


def apply_check_in(
    registration: Registration,
    attendee_index: Optional[int],
    *,
    actor: Actor,
    method: CheckInMethod,
    now: datetime,
) -> Registration:
    """Check in one attendee, or every remaining attendee when index is None."""

    validate_for_check_in(registration)
    slots = list(build_check_in_slots(registration))

    if attendee_index is None:
        targets = [s.attendee_index for s in slots if not s.checked_in]
        if not targets:
            raise CheckInError(
                f"All attendees on {registration.registration_id} are already checked in",
                CheckInError.ALREADY_CHECKED_IN,
            )
    else:
        _require_index(registration, attendee_index)
        if slots[attendee_index].checked_in:
            raise CheckInError(
                f"Attendee #{attendee_index} on {registration.registration_id} is already checked in",
                CheckInError.ATTENDEE_ALREADY_CHECKED_IN,
                checked_in_at=slots[attendee_index].checked_in_at,
            )
        targets = [attendee_index]

    for i in targets:
        slots[i] = AttendeeCheckIn(
            attendee_index=i,
            checked_in=True,
            checked_in_at=now,
            checked_in_by=actor.admin_id,
            checked_in_by_name=actor.label,
            method=method,
        )

    all_in = all(s.checked_in for s in slots)
    return _with_slots(
        registration,
        slots,
        checked_in_at=now if all_in else None,
        checked_in_by=actor.admin_id if all_in else None,
        checked_in_method=method if all_in else None,
    )


def apply_undo(
    registration: Registration,
    attendee_index: Optional[int],
    *,
    actor: Actor,
    reason: str,
    now: datetime,
) -> Registration:
    """Reverse one slot, or every checked-in slot when index is None."""

    slots = list(build_check_in_slots(registration))

    if attendee_index is None:
        targets = [s.attendee_index for s in slots if s.checked_in]
        if not targets:
            raise CheckInError(
                f"No attendee on {registration.registration_id} is checked in",
                CheckInError.NOT_CHECKED_IN,
            )
    else:
        _require_index(registration, attendee_index)
        if not slots[attendee_index].checked_in:
            raise CheckInError(
                f"Attendee #{attendee_index} on {registration.registration_id} is not checked in",
                CheckInError.NOT_CHECKED_IN,
            )
        targets = [attendee_index]

    for i in targets:
        slots[i] = AttendeeCheckIn(attendee_index=i)

    return _with_slots(
        registration,
        slots,
        checked_in_at=None,
        checked_in_by=None,
        checked_in_method=None,
        check_in_undo=CheckInUndo(undone_at=now, undone_by=actor.admin_id, reason=reason or "", attendee_index=attendee_index),
    )
