from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..activity_log.service import ActivityLogService
from ..admins.model import Actor
from ..common.datetime_utils import now_utc
from ..common.normalize import normalize_email, normalize_phone
from ..core.constants import (
    CHECKIN_HOUR_END,
    CHECKIN_HOUR_START,
    RECENT_CHECKINS_LIMIT,
    SEARCH_MIN_LENGTH,
    SEARCH_RESULT_LIMIT,
    SEARCH_SCAN_LIMIT,
    SEARCH_SCAN_MIN_LENGTH,
)
from ..core.enums import ActivityType, CheckInMethod, EntityType, RegistrationStatus
from ..core.exceptions import CheckInError, RegistrationError
from ..registrations.model import Registration
from ..registrations.repository import RegistrationRepository
from ..registrations.short_code import is_registration_id, is_short_code, is_short_code_suffix
from .model import CheckInLogEntry, CheckInStats, HourlyCheckIns
from .qr import parse_qr_code
from .repository import CheckInLogRepository
from .state import (
    apply_check_in,
    apply_undo,
    build_check_in_slots,
    get_attendee_by_index,
    pending_attendee_indexes,
    validate_for_check_in,
)

logger = logging.getLogger(__name__)


def hour_label(hour: int) -> str:
    if hour == 0:
        return "12AM"
    if hour == 12:
        return "12PM"
    return f"{hour}AM" if hour < 12 else f"{hour - 12}PM"


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


class CheckInService:
    """Event-day check-in: QR or manual, per attendee, with undo."""

    def __init__(
        self,
        registrations: RegistrationRepository,
        logs: CheckInLogRepository,
        activity: ActivityLogService,
        *,
        timezone: str = "Asia/Manila",
    ):
        self._registrations = registrations
        self._logs = logs
        self._activity = activity
        self._tz = ZoneInfo(timezone)

    def _require(self, registration_id: str) -> Registration:
        registration = self._registrations.get_by_id(registration_id)
        if not registration:
            raise CheckInError(
                f"Registration {registration_id} not found",
                CheckInError.REGISTRATION_NOT_FOUND,
            )
        return registration

    def get_registration(self, registration_id: str) -> Registration:
        return self._require(registration_id)

    def validate_registration_for_check_in(self, registration: Registration) -> None:
        validate_for_check_in(registration)
        if not pending_attendee_indexes(registration):
            raise CheckInError(
                f"All attendees on {registration.registration_id} are already checked in",
                CheckInError.ALREADY_CHECKED_IN,
            )

    def check_in_attendee(
        self,
        registration_id: str,
        attendee_index: Optional[int] = None,
        *,
        actor: Actor,
        method: CheckInMethod = CheckInMethod.MANUAL,
        station_id: Optional[str] = None,
        now: datetime | None = None,
    ) -> Registration:
        """Check in one attendee (or all remaining when index is None).

        The slot update is a transactional read-modify-write, so two stations
        checking in different attendees of the same registration both land.
        """

        now = now or now_utc()
        checked: list[int] = []

        def _transition(current: Registration) -> Registration:
            checked[:] = (
                pending_attendee_indexes(current) if attendee_index is None else [attendee_index]
            )
            return apply_check_in(current, attendee_index, actor=actor, method=method, now=now)

        try:
            registration = self._registrations.mutate(registration_id, _transition)
        except RegistrationError as e:
            if e.code == RegistrationError.REGISTRATION_NOT_FOUND:
                raise CheckInError(e.message, CheckInError.REGISTRATION_NOT_FOUND)
            raise

        for index in checked:
            attendee = get_attendee_by_index(registration, index)
            self._append_log(
                registration,
                index,
                attendee.full_name if attendee else "",
                actor=actor,
                method=method,
                station_id=station_id,
                now=now,
            )

        self._activity.log_activity(
            type=ActivityType.CHECKIN,
            action="check_in",
            entity_type=EntityType.REGISTRATION,
            entity_id=registration.registration_id,
            description=f"Checked in {len(checked)} attendee(s) for {registration.primary_attendee.full_name}",
            actor=actor,
            metadata={"attendeeIndexes": checked, "method": method.value, "stationId": station_id},
            now=now,
        )
        logger.info("Checked in %s attendee(s) %s via %s", registration.registration_id, checked, method.value)
        return registration

    def _append_log(self, registration, index, name, *, actor, method, station_id, now) -> None:
        try:
            self._logs.add(
                {
                    "registrationId": registration.registration_id,
                    "shortCode": registration.short_code,
                    "attendeeIndex": index,
                    "attendeeName": name,
                    "method": method.value,
                    "adminId": actor.admin_id,
                    "adminName": actor.label,
                    "stationId": station_id,
                    "checkedInAt": now,
                }
            )
        except Exception:
            logger.exception("Failed to write check-in log for %s #%s", registration.registration_id, index)

    def check_in_by_qr(
        self,
        raw: str,
        *,
        actor: Actor,
        station_id: Optional[str] = None,
        now: datetime | None = None,
    ) -> Registration:
        parsed = parse_qr_code(raw)
        if not parsed.valid:
            raise CheckInError(parsed.error or "Invalid QR code", CheckInError.INVALID_QR_CODE)
        return self.check_in_attendee(
            parsed.registration_id,
            parsed.attendee_index,
            actor=actor,
            method=CheckInMethod.QR,
            station_id=station_id,
            now=now,
        )

    def undo_check_in(
        self,
        registration_id: str,
        attendee_index: Optional[int] = None,
        *,
        actor: Actor,
        reason: str = "",
        now: datetime | None = None,
    ) -> Registration:
        now = now or now_utc()
        try:
            registration = self._registrations.mutate(
                registration_id,
                lambda current: apply_undo(current, attendee_index, actor=actor, reason=reason, now=now),
            )
        except RegistrationError as e:
            if e.code == RegistrationError.REGISTRATION_NOT_FOUND:
                raise CheckInError(e.message, CheckInError.REGISTRATION_NOT_FOUND)
            raise

        target = "all attendees" if attendee_index is None else f"attendee #{attendee_index}"
        self._activity.log_activity(
            type=ActivityType.CHECKIN,
            action="undo_check_in",
            entity_type=EntityType.REGISTRATION,
            entity_id=registration.registration_id,
            description=f"Undid check-in of {target} for {registration.primary_attendee.full_name}",
            actor=actor,
            metadata={"attendeeIndex": attendee_index, "reason": reason},
            now=now,
        )
        return registration

    # ---- search ----

    def search_registrations(self, term: str) -> list[Registration]:
        term = (term or "").strip()
        if len(term) < SEARCH_MIN_LENGTH:
            return []

        upper = term.upper()
        results: dict[str, Registration] = {}

        def _add(reg: Optional[Registration]) -> None:
            if reg and reg.registration_id not in results:
                results[reg.registration_id] = reg

        if "@" in term:
            _add(self._registrations.find_by_email(normalize_email(term)))
        if is_short_code(upper):
            _add(self._registrations.find_by_short_code(upper))
        if is_short_code_suffix(upper):
            for reg in self._registrations.find_by_suffix(upper):
                _add(reg)
        if is_registration_id(upper):
            _add(self._registrations.get_by_id(upper))

        if not results and len(term) >= SEARCH_SCAN_MIN_LENGTH:
            needle = term.lower()
            phone_needle = normalize_phone(term)
            candidates = self._registrations.list_by_status([RegistrationStatus.CONFIRMED], limit=SEARCH_SCAN_LIMIT)
            for reg in candidates:
                for attendee in reg.attendees:
                    names = f"{attendee.first_name} {attendee.last_name}".lower()
                    phone_hit = phone_needle.isdigit() and phone_needle in normalize_phone(attendee.cellphone)
                    if needle in names or phone_hit:
                        _add(reg)
                        break
                if len(results) >= SEARCH_RESULT_LIMIT:
                    break

        return list(results.values())[:SEARCH_RESULT_LIMIT]

    # ---- stats ----

    def get_check_in_stats(self) -> CheckInStats:
        confirmed = self._registrations.list_by_status([RegistrationStatus.CONFIRMED])
        total = len(confirmed)
        fully_checked = 0
        total_attendees = 0
        checked_attendees = 0
        for reg in confirmed:
            slots = build_check_in_slots(reg)
            done = sum(1 for s in slots if s.checked_in)
            total_attendees += len(slots)
            checked_attendees += done
            if slots and done == len(slots):
                fully_checked += 1

        return CheckInStats(
            total_confirmed=total,
            checked_in=fully_checked,
            pending=total - fully_checked,
            percentage=_percent(fully_checked, total),
            total_attendees=total_attendees,
            checked_in_attendees=checked_attendees,
            pending_attendees=total_attendees - checked_attendees,
            attendee_percentage=_percent(checked_attendees, total_attendees),
        )

    def get_recent_check_ins(self, count: int = RECENT_CHECKINS_LIMIT) -> list[CheckInLogEntry]:
        return list(self._logs.list_recent(limit=max(1, int(count))))

    def get_check_ins_by_hour(self, *, now: datetime | None = None) -> list[HourlyCheckIns]:
        """Today's check-ins (conference timezone) bucketed 7AM..6PM."""
        local_now = (now or now_utc()).astimezone(self._tz)
        start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)

        counts = {hour: 0 for hour in range(CHECKIN_HOUR_START, CHECKIN_HOUR_END + 1)}
        for entry in self._logs.list_between(start=start, end=end):
            if entry.checked_in_at is None:
                continue
            hour = entry.checked_in_at.astimezone(self._tz).hour
            if hour in counts:
                counts[hour] += 1

        return [HourlyCheckIns(hour=h, label=hour_label(h), count=c) for h, c in counts.items()]
