from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import CheckInMethod, InvoiceStatus, RegistrationStatus


@dataclass(frozen=True)
class WorkshopSelection:
    session_id: str
    time_slot: Optional[str] = None


@dataclass(frozen=True)
class Attendee:
    first_name: str
    last_name: str
    email: str = ""
    cellphone: str = ""
    middle_name: str = ""
    ministry_role: str = ""
    category: str = ""
    food_choice: str = ""
    workshop_selections: tuple[WorkshopSelection, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Church:
    name: str = ""
    city: str = ""


@dataclass(frozen=True)
class Payment:
    status: RegistrationStatus = RegistrationStatus.PENDING_PAYMENT
    method: Optional[str] = None
    reference_number: Optional[str] = None
    proof_url: Optional[str] = None
    amount_paid: float = 0.0
    balance: float = 0.0
    overpayment: float = 0.0
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    uploaded_at: Optional[datetime] = None


@dataclass(frozen=True)
class InvoiceRequest:
    requested: bool = False
    name: str = ""
    tin: str = ""
    address: str = ""
    status: Optional[InvoiceStatus] = None
    invoice_number: Optional[str] = None
    invoice_url: Optional[str] = None
    generated_at: Optional[datetime] = None
    uploaded_at: Optional[datetime] = None
    uploaded_by: Optional[str] = None
    sent_at: Optional[datetime] = None
    sent_by: Optional[str] = None
    email_delivery_status: Optional[str] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class AttendeeCheckIn:
    """Check-in slot for one attendee inside a registration."""

    attendee_index: int
    checked_in: bool = False
    checked_in_at: Optional[datetime] = None
    checked_in_by: Optional[str] = None
    checked_in_by_name: Optional[str] = None
    method: Optional[CheckInMethod] = None


@dataclass(frozen=True)
class AttendeeQRCode:
    attendee_index: int
    qr_data: str


@dataclass(frozen=True)
class CheckInUndo:
    undone_at: datetime
    undone_by: str
    reason: str = ""
    attendee_index: Optional[int] = None


@dataclass(frozen=True)
class Cancellation:
    reason: str
    cancelled_by: str
    cancelled_at: datetime


@dataclass(frozen=True)
class Refund:
    amount: float
    reason: str
    method: str
    processed_by: str
    processed_at: datetime
    reference_number: str = ""
    notes: str = ""


@dataclass(frozen=True)
class Transfer:
    transferred_at: datetime
    transferred_by: str
    original_attendee: Attendee
    reason: str = ""


@dataclass(frozen=True)
class Registration:
    """Domain entity: one registration document (a primary attendee plus guests)."""

    registration_id: str
    short_code: str
    short_code_suffix: str
    primary_attendee: Attendee
    status: RegistrationStatus
    additional_attendees: tuple[Attendee, ...] = ()
    church: Church = field(default_factory=Church)
    category: str = ""
    pricing_tier: str = ""
    total_amount: float = 0.0
    payment: Payment = field(default_factory=Payment)
    invoice: Optional[InvoiceRequest] = None
    payment_deadline: Optional[datetime] = None

    confirmation_email_sent: bool = False
    confirmation_email_sent_at: Optional[datetime] = None
    reminder_email_sent: bool = False
    reminder_email_sent_at: Optional[datetime] = None
    ticket_email_sent: bool = False
    ticket_email_sent_at: Optional[datetime] = None

    attendee_check_ins: tuple[AttendeeCheckIn, ...] = ()
    # Legacy aggregate, kept equal to "every slot checked in".
    checked_in: bool = False
    checked_in_at: Optional[datetime] = None
    checked_in_by: Optional[str] = None
    checked_in_method: Optional[CheckInMethod] = None
    check_in_undo: Optional[CheckInUndo] = None

    qr_code_data: Optional[str] = None
    attendee_qr_codes: tuple[AttendeeQRCode, ...] = ()

    cancellation: Optional[Cancellation] = None
    refund: Optional[Refund] = None
    transfer: Optional[Transfer] = None

    waitlisted_at: Optional[datetime] = None
    waitlist_position: Optional[int] = None
    waitlist_offered_at: Optional[datetime] = None
    waitlist_offer_expires_at: Optional[datetime] = None

    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def attendees(self) -> tuple[Attendee, ...]:
        return (self.primary_attendee, *self.additional_attendees)

    @property
    def total_attendees(self) -> int:
        return 1 + len(self.additional_attendees)

    @property
    def workshop_session_ids(self) -> list[str]:
        return [
            sel.session_id
            for attendee in self.attendees
            for sel in attendee.workshop_selections
            if sel.session_id
        ]


@dataclass(frozen=True)
class Availability:
    status: str
    remaining_slots: Optional[int] = None
    waitlist_position: Optional[int] = None
    message: str = ""


@dataclass(frozen=True)
class RegistrationPage:
    registrations: tuple[Registration, ...]
    # Pass back as ``start_after`` to fetch the next page.
    last_id: Optional[str] = None
    has_more: bool = False


@dataclass(frozen=True)
class RegistrationStatusCounts:
    total: int = 0
    confirmed: int = 0
    pending_verification: int = 0
    pending_payment: int = 0
    cancelled: int = 0
    refunded: int = 0
