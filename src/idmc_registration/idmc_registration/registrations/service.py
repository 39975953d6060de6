from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ..activity_log.service import ActivityLogService
from ..admins.model import Actor
from ..common.datetime_utils import now_utc, parse_iso_datetime
from ..common.normalize import is_ph_mobile, normalize_email, normalize_phone, phone_variants
from ..common.validators import is_valid_email, require_non_empty
from ..core.constants import (
    ADMIN_SEARCH_SCAN_MAX_LENGTH,
    CONFERENCE_YEAR,
    LOOKUP_SCAN_LIMIT,
    PAYMENT_DEADLINE_DAYS,
    REGISTRATION_PAGE_SIZE,
    SEARCH_MIN_LENGTH,
    SEARCH_RESULT_LIMIT,
    WAITLIST_DEADLINE_HOURS,
)
from ..core.enums import ActivityType, AvailabilityStatus, EmailType, EntityType, InvoiceStatus, RegistrationStatus
from ..core.exceptions import DuplicateEmailError, RegistrationError, ValidationError
from ..settings.service import SettingsService
from ..workshops.model import WorkshopAttendee
from ..workshops.service import WorkshopService
from ..checkin.state import build_check_in_slots
from .documents import attendee_from_dict, invoice_from_dict
from .model import (
    Attendee,
    AttendeeCheckIn,
    AttendeeQRCode,
    Availability,
    Cancellation,
    Church,
    InvoiceRequest,
    Payment,
    Refund,
    Registration,
    RegistrationPage,
    RegistrationStatusCounts,
    Transfer,
)
from .repository import RegistrationRepository
from .short_code import (
    build_registration_id,
    generate_short_code,
    is_registration_id,
    is_short_code,
    is_short_code_suffix,
    short_code_suffix,
)

logger = logging.getLogger(__name__)

# Statuses that hold a seat (count toward conference capacity).
SEAT_HOLDING_STATUSES = (RegistrationStatus.CONFIRMED, RegistrationStatus.PENDING_VERIFICATION)
# Statuses whose workshop selections are counted in sessions.registeredCount.
WORKSHOP_COUNTED_STATUSES = (
    RegistrationStatus.PENDING_PAYMENT,
    RegistrationStatus.PENDING_VERIFICATION,
    RegistrationStatus.CONFIRMED,
    RegistrationStatus.WAITLIST_OFFERED,
)
ACTIVE_LOOKUP_STATUSES = (
    RegistrationStatus.CONFIRMED,
    RegistrationStatus.PENDING_PAYMENT,
    RegistrationStatus.PENDING_VERIFICATION,
)
PAYABLE_STATUSES = (
    RegistrationStatus.PENDING_PAYMENT,
    RegistrationStatus.PENDING_VERIFICATION,
    RegistrationStatus.WAITLIST_OFFERED,
)


def _normalize_attendee(data: dict[str, Any]) -> Attendee:
    attendee = attendee_from_dict(data)
    return dataclasses.replace(
        attendee,
        first_name=attendee.first_name.strip(),
        last_name=attendee.last_name.strip(),
        middle_name=attendee.middle_name.strip(),
        email=normalize_email(attendee.email),
        cellphone=normalize_phone(attendee.cellphone),
    )


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _status_filter(status: Optional[str]) -> Optional[RegistrationStatus]:
    if not status or status == "all":
        return None
    try:
        return RegistrationStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown status: {status}")


def _matches_search(registration: Registration, needle: str) -> bool:
    attendee = registration.primary_attendee
    fields = (
        attendee.first_name,
        attendee.last_name,
        attendee.full_name,
        attendee.email,
        registration.short_code,
        registration.registration_id,
    )
    return any(needle in value.lower() for value in fields)


def _requested_invoice(data) -> Optional[InvoiceRequest]:
    invoice = invoice_from_dict(data)
    if invoice and invoice.requested and invoice.status is None:
        return dataclasses.replace(invoice, status=InvoiceStatus.PENDING)
    return invoice


def build_attendee_qr_codes(registration_id: str, total_attendees: int) -> tuple[AttendeeQRCode, ...]:
    return tuple(AttendeeQRCode(attendee_index=i, qr_data=f"{registration_id}-{i}") for i in range(total_attendees))


def waitlist_offer_deadline(conference_start: datetime, *, now: datetime, hours: Optional[int] = None) -> datetime:
    """Offer window shrinks as the conference nears; never past the start."""
    if not hours:
        hours_left = (conference_start - now).total_seconds() / 3600
        if hours_left <= 12:
            hours = WAITLIST_DEADLINE_HOURS["LESS_THAN_12H"]
        elif hours_left <= 24:
            hours = WAITLIST_DEADLINE_HOURS["LESS_THAN_24H"]
        elif hours_left <= 48:
            hours = WAITLIST_DEADLINE_HOURS["LESS_THAN_48H"]
        else:
            hours = WAITLIST_DEADLINE_HOURS["DEFAULT"]
    return min(now + timedelta(hours=hours), conference_start)


class RegistrationService:
    def __init__(
        self,
        registrations: RegistrationRepository,
        workshops: WorkshopService,
        settings: SettingsService,
        activity: ActivityLogService,
        *,
        year: int = CONFERENCE_YEAR,
    ):
        self._registrations = registrations
        self._workshops = workshops
        self._settings = settings
        self._activity = activity
        self._year = int(year)

    # ---- helpers ----

    def _require(self, registration_id: str) -> Registration:
        registration = self._registrations.get_by_id(registration_id)
        if not registration:
            raise RegistrationError(
                f"Registration {registration_id} not found",
                RegistrationError.REGISTRATION_NOT_FOUND,
            )
        return registration

    def _require_status(self, registration: Registration, allowed, action: str) -> None:
        if registration.status not in allowed:
            raise RegistrationError(
                f"Cannot {action} a registration with status {registration.status.value}",
                RegistrationError.INVALID_STATUS,
            )

    def _log(self, type: ActivityType, registration: Registration, description: str, actor: Optional[Actor], **metadata):
        if actor is None:
            return
        self._activity.log_activity(
            type=type,
            action=f"registration_{type.value}",
            entity_type=EntityType.REGISTRATION,
            entity_id=registration.registration_id,
            description=f"{description}: {registration.primary_attendee.full_name or registration.registration_id}",
            actor=actor,
            metadata=metadata,
        )

    def new_identifiers(self) -> tuple[str, str]:
        """Fresh ``(registration_id, short_code)`` pair, retrying on collision."""
        for _ in range(10):
            code = generate_short_code()
            registration_id = build_registration_id(code, self._year)
            if not self._registrations.get_by_id(registration_id):
                return registration_id, code
        raise RegistrationError("Could not allocate a registration code", RegistrationError.INVALID_DATA)

    def _build(self, data: dict[str, Any], *, status: RegistrationStatus, now: datetime) -> Registration:
        registration_id = (data.get("registrationId") or "").strip()
        short_code = (data.get("shortCode") or "").strip().upper()
        primary_data = data.get("primaryAttendee")
        if not registration_id or not short_code or not isinstance(primary_data, dict):
            raise RegistrationError(
                "registrationId, shortCode and primaryAttendee are required",
                RegistrationError.INVALID_DATA,
            )

        primary = _normalize_attendee(primary_data)
        require_non_empty(primary.first_name, "First name")
        require_non_empty(primary.last_name, "Last name")
        if not is_valid_email(primary.email):
            raise ValidationError("Primary attendee email is not valid")

        additional = tuple(_normalize_attendee(a) for a in (data.get("additionalAttendees") or []) if isinstance(a, dict))
        church = data.get("church") or {}
        payment_data = data.get("payment") or {}
        proof_url = payment_data.get("proofUrl") or data.get("paymentProofUrl")
        total_amount = float(data.get("totalAmount") or 0)

        registration = Registration(
            registration_id=registration_id,
            short_code=short_code,
            short_code_suffix=short_code_suffix(short_code),
            primary_attendee=primary,
            status=status,
            additional_attendees=additional,
            church=Church(name=str(church.get("name") or "").strip(), city=str(church.get("city") or "").strip()),
            category=str(data.get("category") or primary.category or ""),
            pricing_tier=str(data.get("pricingTier") or ""),
            total_amount=total_amount,
            payment=Payment(
                status=status,
                method=payment_data.get("method"),
                reference_number=payment_data.get("referenceNumber"),
                proof_url=proof_url,
                uploaded_at=now if proof_url else None,
            ),
            invoice=_requested_invoice(data.get("invoice")),
            created_at=now,
            updated_at=now,
        )
        return dataclasses.replace(
            registration,
            attendee_check_ins=tuple(AttendeeCheckIn(attendee_index=i) for i in range(registration.total_attendees)),
        )

    # ---- creation ----

    def create_registration(self, data: dict[str, Any], *, now: datetime | None = None) -> Registration:
        now = now or now_utc()
        payment_data = data.get("payment") or {}
        has_proof = bool(payment_data.get("proofUrl") or data.get("paymentProofUrl"))
        status = (
            RegistrationStatus.PENDING_VERIFICATION
            if float(data.get("totalAmount") or 0) == 0 or has_proof
            else RegistrationStatus.PENDING_PAYMENT
        )

        registration = self._build(data, status=status, now=now)
        registration = dataclasses.replace(registration, payment_deadline=now + timedelta(days=PAYMENT_DEADLINE_DAYS))

        self._registrations.create_unique(registration)
        self._workshops.adjust_many(registration.workshop_session_ids, +1)
        logger.info("Registration %s created (%s)", registration.registration_id, status.value)
        return registration

    def create_waitlist_registration(
        self,
        data: dict[str, Any],
        *,
        position: Optional[int] = None,
        now: datetime | None = None,
    ) -> Registration:
        now = now or now_utc()
        registration = self._build(data, status=RegistrationStatus.WAITLISTED, now=now)
        registration = dataclasses.replace(
            registration,
            waitlisted_at=now,
            waitlist_position=position,
            payment_deadline=None,
        )
        # Waitlisted seats do not reserve workshop places until offered.
        self._registrations.create_unique(registration)
        logger.info("Registration %s waitlisted at position %s", registration.registration_id, position)
        return registration

    def price_registration(self, data: dict[str, Any], *, now: datetime | None = None) -> dict[str, Any]:
        """Copy of ``data`` with ``pricingTier`` and ``totalAmount`` set from the active tier.

        Whatever amount the client sent is discarded.
        """
        tier = self._settings.get_active_pricing_tier(now=now)
        if tier is None:
            raise RegistrationError("No pricing tier is open for registration", RegistrationError.REGISTRATION_CLOSED)

        default_category = data.get("category")
        attendees = [data.get("primaryAttendee") or {}]
        attendees += [a for a in (data.get("additionalAttendees") or []) if isinstance(a, dict)]
        total = sum(tier.price_for(a.get("category") or default_category) for a in attendees)
        return {**data, "pricingTier": tier.tier_id, "totalAmount": total}

    def register(self, data: dict[str, Any], *, now: datetime | None = None) -> Registration:
        """Public entry point: honors the open flag, capacity and waitlist."""
        if not self._settings.is_registration_open():
            raise RegistrationError("Registration is closed", RegistrationError.REGISTRATION_CLOSED)

        attendee_count = 1 + len(data.get("additionalAttendees") or [])
        availability = self.check_registration_availability(attendee_count)
        if availability.status == AvailabilityStatus.OPEN.value:
            return self.create_registration(self.price_registration(data, now=now), now=now)
        if availability.status == AvailabilityStatus.WAITLIST.value:
            return self.create_waitlist_registration(
                self.price_registration(data, now=now),
                position=availability.waitlist_position,
                now=now,
            )

        settings = self._settings.get_conference_settings()
        code = RegistrationError.WAITLIST_FULL if (settings.get("waitlist") or {}).get("enabled") else RegistrationError.CONFERENCE_FULL
        raise RegistrationError(availability.message, code)

    # ---- capacity / waitlist ----

    def get_total_confirmed_attendee_count(self) -> int:
        return sum(r.total_attendees for r in self._registrations.list_by_status(SEAT_HOLDING_STATUSES))

    def get_waitlist_count(self) -> int:
        return self._registrations.count_by_status(
            [RegistrationStatus.WAITLISTED, RegistrationStatus.WAITLIST_OFFERED]
        )

    def get_waitlisted_only_count(self) -> int:
        return self._registrations.count_by_status([RegistrationStatus.WAITLISTED])

    def check_registration_availability(self, attendee_count: int = 1) -> Availability:
        settings = self._settings.get_conference_settings()
        capacity = settings.get("conferenceCapacity")
        waitlist = settings.get("waitlist") or {}

        if not capacity:
            return Availability(status=AvailabilityStatus.OPEN.value)

        remaining = int(capacity) - self.get_total_confirmed_attendee_count()
        if remaining >= attendee_count:
            return Availability(status=AvailabilityStatus.OPEN.value, remaining_slots=remaining)

        if not waitlist.get("enabled"):
            return Availability(
                status=AvailabilityStatus.CLOSED.value,
                remaining_slots=max(0, remaining),
                message="Registration is closed. The conference has reached maximum capacity.",
            )

        waitlist_capacity = waitlist.get("capacity")
        if waitlist_capacity and self.get_waitlist_count() >= int(waitlist_capacity):
            return Availability(
                status=AvailabilityStatus.CLOSED.value,
                remaining_slots=max(0, remaining),
                message="Registration is closed. Both the conference and waitlist are full.",
            )

        return Availability(
            status=AvailabilityStatus.WAITLIST.value,
            remaining_slots=max(0, remaining),
            waitlist_position=self.get_waitlisted_only_count() + 1,
            message="The conference is full, but you can join the waitlist.",
        )

    def get_waitlisted_registrations(self) -> list[Registration]:
        return list(self._registrations.list_waitlisted())

    def get_next_waitlisted_registration(self) -> Optional[Registration]:
        waitlisted = self.get_waitlisted_registrations()
        return waitlisted[0] if waitlisted else None

    def get_waitlist_position(self, registration_id: str) -> Optional[int]:
        for position, registration in enumerate(self.get_waitlisted_registrations(), start=1):
            if registration.registration_id == registration_id:
                return position
        return None

    def offer_waitlist_slot(
        self,
        registration_id: str,
        *,
        hours: Optional[int] = None,
        actor: Optional[Actor] = None,
        now: datetime | None = None,
    ) -> Registration:
        now = now or now_utc()
        settings = self._settings.get_conference_settings()
        start = parse_iso_datetime(f"{settings.get('startDate')}T{settings.get('startTime') or '00:00'}:00+08:00")
        deadline = waitlist_offer_deadline(start, now=now, hours=hours)

        def _offer(r: Registration) -> Registration:
            self._require_status(r, (RegistrationStatus.WAITLISTED,), "offer a slot to")
            return dataclasses.replace(
                r,
                status=RegistrationStatus.WAITLIST_OFFERED,
                payment=dataclasses.replace(r.payment, status=RegistrationStatus.WAITLIST_OFFERED),
                payment_deadline=deadline,
                waitlist_offered_at=now,
                waitlist_offer_expires_at=deadline,
            )

        registration = self._registrations.mutate(registration_id, _offer)
        self._workshops.adjust_many(registration.workshop_session_ids, +1)
        self._log(ActivityType.UPDATE, registration, "Offered waitlist slot to", actor)
        return registration

    def expire_waitlist_offer(self, registration_id: str) -> Registration:
        def _expire(r: Registration) -> Registration:
            self._require_status(r, (RegistrationStatus.WAITLIST_OFFERED,), "expire the offer of")
            return dataclasses.replace(
                r,
                status=RegistrationStatus.WAITLIST_EXPIRED,
                payment=dataclasses.replace(r.payment, status=RegistrationStatus.WAITLIST_EXPIRED),
            )

        registration = self._registrations.mutate(registration_id, _expire)
        self._workshops.adjust_many(registration.workshop_session_ids, -1)
        return registration

    def promote_from_waitlist(
        self,
        registration_id: str,
        *,
        actor: Optional[Actor] = None,
        now: datetime | None = None,
    ) -> Registration:
        now = now or now_utc()

        def _promote(r: Registration) -> Registration:
            self._require_status(
                r, (RegistrationStatus.WAITLISTED, RegistrationStatus.WAITLIST_EXPIRED), "promote"
            )
            return dataclasses.replace(
                r,
                status=RegistrationStatus.PENDING_PAYMENT,
                payment=dataclasses.replace(r.payment, status=RegistrationStatus.PENDING_PAYMENT),
                payment_deadline=now + timedelta(days=PAYMENT_DEADLINE_DAYS),
                waitlist_position=None,
            )

        registration = self._registrations.mutate(registration_id, _promote)
        self._workshops.adjust_many(registration.workshop_session_ids, +1)
        self._log(ActivityType.UPDATE, registration, "Promoted from waitlist", actor)
        return registration

    # ---- payment ----

    def update_payment_proof(
        self,
        registration_id: str,
        proof_url: str,
        *,
        method: Optional[str] = None,
        now: datetime | None = None,
    ) -> Registration:
        proof_url = require_non_empty(proof_url, "Payment proof URL")
        now = now or now_utc()

        def _upload(r: Registration) -> Registration:
            self._require_status(
                r,
                (
                    RegistrationStatus.PENDING_PAYMENT,
                    RegistrationStatus.PENDING_VERIFICATION,
                    RegistrationStatus.WAITLIST_OFFERED,
                ),
                "upload payment for",
            )
            return dataclasses.replace(
                r,
                status=RegistrationStatus.PENDING_VERIFICATION,
                payment=dataclasses.replace(
                    r.payment,
                    status=RegistrationStatus.PENDING_VERIFICATION,
                    proof_url=proof_url,
                    method=method or r.payment.method,
                    uploaded_at=now,
                ),
            )

        return self._registrations.mutate(registration_id, _upload)

    def verify_payment(
        self,
        registration_id: str,
        *,
        amount_paid: float,
        method: Optional[str] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        rejection_reason: Optional[str] = None,
        actor: Optional[Actor] = None,
        now: datetime | None = None,
    ) -> Registration:
        """Record a verified amount; confirms when the balance is fully covered."""
        now = now or now_utc()
        try:
            amount_paid = float(amount_paid or 0)
        except (TypeError, ValueError):
            raise ValidationError("Amount paid must be a number")
        if amount_paid < 0:
            raise ValidationError("Amount paid cannot be negative")

        def _verify(r: Registration) -> Registration:
            self._require_status(r, PAYABLE_STATUSES, "verify payment for")
            balance = r.total_amount - amount_paid
            fully_paid = balance <= 0
            payment = dataclasses.replace(
                r.payment,
                amount_paid=amount_paid,
                balance=max(0.0, balance),
                overpayment=max(0.0, amount_paid - r.total_amount),
                method=method or r.payment.method,
                reference_number=reference_number or r.payment.reference_number,
                verified_by=actor.admin_id if actor else None,
                verified_at=now,
                notes=notes,
            )
            if fully_paid:
                confirmed = dataclasses.replace(
                    r,
                    status=RegistrationStatus.CONFIRMED,
                    payment=dataclasses.replace(payment, status=RegistrationStatus.CONFIRMED, rejection_reason=None),
                )
                if r.total_amount == 0:
                    return confirmed
                return dataclasses.replace(
                    confirmed,
                    qr_code_data=r.registration_id,
                    attendee_qr_codes=build_attendee_qr_codes(r.registration_id, r.total_attendees),
                )
            return dataclasses.replace(
                r,
                status=RegistrationStatus.PENDING_PAYMENT,
                payment=dataclasses.replace(
                    payment,
                    status=RegistrationStatus.PENDING_PAYMENT,
                    rejection_reason=rejection_reason or f"Partial payment received. Balance: PHP {balance:,.2f}",
                ),
            )

        registration = self._registrations.mutate(registration_id, _verify)
        if registration.status == RegistrationStatus.CONFIRMED:
            self._log(ActivityType.APPROVE, registration, f"Confirmed full payment ({amount_paid:,.2f})", actor)
        else:
            self._log(
                ActivityType.REJECT,
                registration,
                f"Partial payment verified ({amount_paid:,.2f} of {registration.total_amount:,.2f})",
                actor,
            )
        return registration

    def confirm_payment(
        self,
        registration_id: str,
        *,
        method: Optional[str] = None,
        reference_number: Optional[str] = None,
        actor: Optional[Actor] = None,
        now: datetime | None = None,
    ) -> Registration:
        """Mark the full amount as paid without entering an amount."""
        registration = self._require(registration_id)
        return self.verify_payment(
            registration_id,
            amount_paid=registration.total_amount,
            method=method,
            reference_number=reference_number,
            actor=actor,
            now=now,
        )

    def mark_email_sent(self, registration_id: str, email_type: str, *, now: datetime | None = None) -> None:
        try:
            kind = EmailType(email_type)
        except ValueError:
            raise ValidationError(f"Unknown email type: {email_type}")
        now = now or now_utc()
        self._require(registration_id)
        prefix = {EmailType.CONFIRMATION: "confirmation", EmailType.REMINDER: "reminder", EmailType.TICKET: "ticket"}[kind]
        self._registrations.update_fields(
            registration_id,
            {f"{prefix}EmailSent": True, f"{prefix}EmailSentAt": now},
        )

    # ---- cancel / refund / transfer ----

    def cancel_registration(
        self,
        registration_id: str,
        *,
        reason: str,
        cancelled_by: str = "admin",
        actor: Optional[Actor] = None,
        now: datetime | None = None,
    ) -> Registration:
        now = now or now_utc()
        previous: dict[str, RegistrationStatus] = {}

        def _cancel(r: Registration) -> Registration:
            self._require_status(
                r,
                (
                    RegistrationStatus.PENDING_PAYMENT,
                    RegistrationStatus.PENDING_VERIFICATION,
                    RegistrationStatus.CONFIRMED,
                    RegistrationStatus.WAITLISTED,
                    RegistrationStatus.WAITLIST_OFFERED,
                ),
                "cancel",
            )
            previous["status"] = r.status
            return dataclasses.replace(
                r,
                status=RegistrationStatus.CANCELLED,
                payment=dataclasses.replace(r.payment, status=RegistrationStatus.CANCELLED),
                cancellation=Cancellation(reason=reason or "", cancelled_by=cancelled_by, cancelled_at=now),
            )

        registration = self._registrations.mutate(registration_id, _cancel)
        if previous.get("status") in WORKSHOP_COUNTED_STATUSES:
            self._workshops.adjust_many(registration.workshop_session_ids, -1)
        self._log(ActivityType.UPDATE, registration, "Cancelled registration", actor, reason=reason)
        return registration

    def refund_registration(
        self,
        registration_id: str,
        *,
        amount: float,
        reason: str,
        method: str,
        reference_number: str = "",
        notes: str = "",
        actor: Actor,
        now: datetime | None = None,
    ) -> Registration:
        now = now or now_utc()
        previous: dict[str, RegistrationStatus] = {}
        try:
            amount = float(amount)
        except (TypeError, ValueError):
            raise ValidationError("Refund amount must be a number")
        if amount < 0:
            raise ValidationError("Refund amount cannot be negative")

        def _refund(r: Registration) -> Registration:
            self._require_status(r, (RegistrationStatus.CANCELLED, RegistrationStatus.CONFIRMED), "refund")
            previous["status"] = r.status
            return dataclasses.replace(
                r,
                status=RegistrationStatus.REFUNDED,
                payment=dataclasses.replace(r.payment, status=RegistrationStatus.REFUNDED),
                refund=Refund(
                    amount=amount,
                    reason=reason or "",
                    method=method or "",
                    processed_by=actor.admin_id,
                    processed_at=now,
                    reference_number=reference_number or "",
                    notes=notes or "",
                ),
            )

        registration = self._registrations.mutate(registration_id, _refund)
        # Cancelled registrations already released their workshop seats.
        if previous.get("status") == RegistrationStatus.CONFIRMED:
            self._workshops.adjust_many(registration.workshop_session_ids, -1)
        self._log(ActivityType.UPDATE, registration, f"Refunded {amount:,.2f}", actor, method=method)
        return registration

    def transfer_registration(
        self,
        registration_id: str,
        new_attendee: dict[str, Any],
        *,
        reason: str = "",
        transferred_by: str = "user",
        actor: Optional[Actor] = None,
        now: datetime | None = None,
    ) -> Registration:
        now = now or now_utc()
        incoming = _normalize_attendee(new_attendee or {})
        require_non_empty(incoming.first_name, "First name")
        require_non_empty(incoming.last_name, "Last name")
        if not is_valid_email(incoming.email):
            raise ValidationError("New attendee email is not valid")

        existing = self._registrations.find_by_email(incoming.email)
        if existing and existing.registration_id != registration_id:
            raise DuplicateEmailError(incoming.email, existing.registration_id)

        def _transfer(r: Registration) -> Registration:
            self._require_status(r, ACTIVE_LOOKUP_STATUSES, "transfer")
            original = r.primary_attendee
            replacement = dataclasses.replace(
                original,
                first_name=incoming.first_name,
                last_name=incoming.last_name,
                middle_name=incoming.middle_name,
                email=incoming.email,
                cellphone=incoming.cellphone,
                ministry_role=incoming.ministry_role or original.ministry_role,
            )
            slots = list(build_check_in_slots(r))
            slots[0] = AttendeeCheckIn(attendee_index=0)
            return dataclasses.replace(
                r,
                primary_attendee=replacement,
                attendee_check_ins=tuple(slots),
                checked_in=False,
                checked_in_at=None,
                checked_in_by=None,
                checked_in_method=None,
                check_in_undo=None,
                transfer=Transfer(
                    transferred_at=now,
                    transferred_by=transferred_by,
                    original_attendee=original,
                    reason=reason or "",
                ),
            )

        registration = self._registrations.mutate(registration_id, _transfer)
        self._log(ActivityType.UPDATE, registration, "Transferred registration to", actor)
        return registration

    # ---- lookup ----

    def get_registration(self, registration_id: str) -> Registration:
        return self._require(registration_id)

    def list_registrations(self, *, status: Optional[str] = None, limit: Optional[int] = None) -> list[Registration]:
        wanted = _status_filter(status)
        if wanted:
            return list(self._registrations.list_by_status([wanted], limit=limit))
        return list(self._registrations.list_all(limit=limit))

    def list_registrations_page(
        self,
        *,
        status: Optional[str] = None,
        page_size: int = REGISTRATION_PAGE_SIZE,
        start_after: Optional[str] = None,
    ) -> RegistrationPage:
        if page_size < 1:
            raise ValidationError("Page size must be at least 1")
        # One extra row tells us whether another page exists.
        rows = list(
            self._registrations.list_page(status=_status_filter(status), limit=page_size + 1, start_after=start_after)
        )
        has_more = len(rows) > page_size
        rows = rows[:page_size]
        return RegistrationPage(
            registrations=tuple(rows),
            last_id=rows[-1].registration_id if rows else None,
            has_more=has_more,
        )

    def get_registrations_count(self, *, status: Optional[str] = None) -> dict[str, int]:
        total = self._registrations.count_all()
        wanted = _status_filter(status)
        filtered = self._registrations.count_by_status([wanted]) if wanted else total
        return {"total": total, "filtered": filtered}

    def get_registration_status_counts(self) -> RegistrationStatusCounts:
        def count(status: RegistrationStatus) -> int:
            return self._registrations.count_by_status([status])

        return RegistrationStatusCounts(
            total=self._registrations.count_all(),
            confirmed=count(RegistrationStatus.CONFIRMED),
            pending_verification=count(RegistrationStatus.PENDING_VERIFICATION),
            pending_payment=count(RegistrationStatus.PENDING_PAYMENT),
            cancelled=count(RegistrationStatus.CANCELLED),
            refunded=count(RegistrationStatus.REFUNDED),
        )

    def search_registrations(self, term: str, *, status: Optional[str] = None) -> list[Registration]:
        """Admin search across ID, short code, email, phone and names, newest first."""
        term = (term or "").strip()
        if len(term) < SEARCH_MIN_LENGTH:
            return []
        wanted = _status_filter(status)
        upper = term.upper()
        results: dict[str, Registration] = {}

        def _add(reg: Optional[Registration]) -> None:
            if reg and (wanted is None or reg.status == wanted):
                results.setdefault(reg.registration_id, reg)

        if is_short_code(upper):
            _add(self._registrations.find_by_short_code(upper))
        if is_short_code_suffix(upper):
            for reg in self._registrations.find_by_suffix(upper):
                _add(reg)
        if "@" in term:
            _add(self._registrations.find_by_email(normalize_email(term)))
        if is_ph_mobile(term):
            _add(self._registrations.find_by_phone(phone_variants(term)))
        if upper.startswith("REG-") or len(term) >= 4:
            candidate = upper if upper.startswith("REG-") else build_registration_id(upper, self._year)
            _add(self._registrations.get_by_id(candidate))

        if len(term) <= ADMIN_SEARCH_SCAN_MAX_LENGTH and len(results) < SEARCH_RESULT_LIMIT:
            needle = term.lower()
            if wanted:
                candidates = self._registrations.list_by_status([wanted], limit=LOOKUP_SCAN_LIMIT)
            else:
                candidates = self._registrations.list_all(limit=LOOKUP_SCAN_LIMIT)
            for reg in candidates:
                if _matches_search(reg, needle):
                    _add(reg)

        return sorted(results.values(), key=lambda r: r.created_at or _EPOCH, reverse=True)

    def lookup_registration(self, identifier: str) -> Optional[Registration]:
        """Resolve a user-typed identifier.

        Tried in order: registration ID, 6-char short code, 4-char suffix,
        email, Philippine mobile number, then a bounded partial short-code
        scan.
        """

        raw = (identifier or "").strip()
        if not raw:
            return None
        upper = raw.upper()

        if is_registration_id(upper):
            return self._registrations.get_by_id(upper)

        if is_short_code(upper):
            found = self._registrations.find_by_short_code(upper)
            if found:
                return found

        if is_short_code_suffix(upper):
            matches = self._registrations.find_by_suffix(upper)
            if matches:
                return matches[0]

        if "@" in raw:
            return self._registrations.find_by_email(normalize_email(raw))

        if is_ph_mobile(raw):
            found = self._registrations.find_by_phone(phone_variants(raw))
            if found:
                return found

        return self._find_by_partial_short_code(upper)

    def _find_by_partial_short_code(self, term: str) -> Optional[Registration]:
        term = normalize_phone(term).upper()
        if len(term) < 2:
            return None
        for registration in self._registrations.list_by_status(ACTIVE_LOOKUP_STATUSES, limit=LOOKUP_SCAN_LIMIT):
            code = registration.short_code.upper()
            if code == term or code.endswith(term):
                return registration
        return None

    def get_workshop_attendees(self, workshop_id: str) -> list[WorkshopAttendee]:
        if not workshop_id:
            return []
        attendees: list[WorkshopAttendee] = []
        for registration in self._registrations.list_by_status([RegistrationStatus.CONFIRMED]):
            slots = build_check_in_slots(registration)
            for index, attendee in enumerate(registration.attendees):
                if not any(sel.session_id == workshop_id for sel in attendee.workshop_selections):
                    continue
                attendees.append(
                    WorkshopAttendee(
                        registration_id=registration.registration_id,
                        short_code=registration.short_code,
                        attendee_index=index,
                        first_name=attendee.first_name,
                        last_name=attendee.last_name,
                        email=attendee.email,
                        cellphone=attendee.cellphone,
                        church_name=registration.church.name,
                        ministry_role=attendee.ministry_role,
                        category=attendee.category,
                        checked_in=slots[index].checked_in,
                        is_primary=index == 0,
                    )
                )
        attendees.sort(key=lambda a: (a.last_name.lower(), a.first_name.lower()))
        return attendees
