"""Mapping between Firestore registration documents (camelCase) and domain objects."""

from __future__ import annotations

from typing import Any, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..core.enums import CheckInMethod, InvoiceStatus, RegistrationStatus
from .model import (
    Attendee,
    AttendeeCheckIn,
    AttendeeQRCode,
    Cancellation,
    CheckInUndo,
    Church,
    InvoiceRequest,
    Payment,
    Refund,
    Registration,
    Transfer,
    WorkshopSelection,
)


def _enum(enum_cls, value, default=None):
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _value(value):
    return value.value if hasattr(value, "value") else value


def attendee_from_dict(data: dict[str, Any] | None) -> Attendee:
    data = data or {}
    selections = tuple(
        WorkshopSelection(session_id=str(s.get("sessionId") or ""), time_slot=s.get("timeSlot"))
        for s in (data.get("workshopSelections") or [])
        if isinstance(s, dict)
    )
    return Attendee(
        first_name=str(data.get("firstName") or ""),
        last_name=str(data.get("lastName") or ""),
        email=str(data.get("email") or ""),
        cellphone=str(data.get("cellphone") or ""),
        middle_name=str(data.get("middleName") or ""),
        ministry_role=str(data.get("ministryRole") or ""),
        category=str(data.get("category") or ""),
        food_choice=str(data.get("foodChoice") or ""),
        workshop_selections=selections,
    )


def attendee_to_dict(attendee: Attendee) -> dict[str, Any]:
    return {
        "firstName": attendee.first_name,
        "lastName": attendee.last_name,
        "middleName": attendee.middle_name,
        "email": attendee.email,
        "cellphone": attendee.cellphone,
        "ministryRole": attendee.ministry_role,
        "category": attendee.category,
        "foodChoice": attendee.food_choice,
        "workshopSelections": [
            {"sessionId": s.session_id, "timeSlot": s.time_slot} for s in attendee.workshop_selections
        ],
    }


def _payment_from_dict(data: dict[str, Any] | None, status: RegistrationStatus) -> Payment:
    data = data or {}
    return Payment(
        status=_enum(RegistrationStatus, data.get("status"), status),
        method=data.get("method"),
        reference_number=data.get("referenceNumber"),
        proof_url=data.get("proofUrl"),
        amount_paid=float(data.get("amountPaid") or 0),
        balance=float(data.get("balance") or 0),
        overpayment=float(data.get("overpayment") or 0),
        verified_by=data.get("verifiedBy"),
        verified_at=parse_iso_datetime(data.get("verifiedAt")),
        rejection_reason=data.get("rejectionReason"),
        notes=data.get("notes"),
        uploaded_at=parse_iso_datetime(data.get("uploadedAt")),
    )


def _payment_to_dict(p: Payment) -> dict[str, Any]:
    return {
        "status": _value(p.status),
        "method": p.method,
        "referenceNumber": p.reference_number,
        "proofUrl": p.proof_url,
        "amountPaid": p.amount_paid,
        "balance": p.balance,
        "overpayment": p.overpayment,
        "verifiedBy": p.verified_by,
        "verifiedAt": p.verified_at,
        "rejectionReason": p.rejection_reason,
        "notes": p.notes,
        "uploadedAt": p.uploaded_at,
    }


def invoice_from_dict(data: dict[str, Any] | None) -> Optional[InvoiceRequest]:
    if not data:
        return None
    return InvoiceRequest(
        requested=bool(data.get("requested")),
        name=str(data.get("name") or ""),
        tin=str(data.get("tin") or ""),
        address=str(data.get("address") or ""),
        status=_enum(InvoiceStatus, data.get("status")),
        invoice_number=data.get("invoiceNumber"),
        invoice_url=data.get("invoiceUrl"),
        generated_at=parse_iso_datetime(data.get("generatedAt")),
        uploaded_at=parse_iso_datetime(data.get("uploadedAt")),
        uploaded_by=data.get("uploadedBy"),
        sent_at=parse_iso_datetime(data.get("sentAt")),
        sent_by=data.get("sentBy"),
        email_delivery_status=data.get("emailDeliveryStatus"),
        error_message=data.get("errorMessage"),
    )


def invoice_to_dict(inv: InvoiceRequest) -> dict[str, Any]:
    return {
        "requested": inv.requested,
        "name": inv.name,
        "tin": inv.tin,
        "address": inv.address,
        "status": _value(inv.status),
        "invoiceNumber": inv.invoice_number,
        "invoiceUrl": inv.invoice_url,
        "generatedAt": inv.generated_at,
        "uploadedAt": inv.uploaded_at,
        "uploadedBy": inv.uploaded_by,
        "sentAt": inv.sent_at,
        "sentBy": inv.sent_by,
        "emailDeliveryStatus": inv.email_delivery_status,
        "errorMessage": inv.error_message,
    }


def check_in_slot_from_dict(data: dict[str, Any], fallback_index: int) -> AttendeeCheckIn:
    index = data.get("attendeeIndex")
    return AttendeeCheckIn(
        attendee_index=int(index) if index is not None else fallback_index,
        checked_in=bool(data.get("checkedIn")),
        checked_in_at=parse_iso_datetime(data.get("checkedInAt")),
        checked_in_by=data.get("checkedInBy"),
        checked_in_by_name=data.get("checkedInByName"),
        method=_enum(CheckInMethod, data.get("method")),
    )


def check_in_slot_to_dict(slot: AttendeeCheckIn) -> dict[str, Any]:
    return {
        "attendeeIndex": slot.attendee_index,
        "checkedIn": slot.checked_in,
        "checkedInAt": slot.checked_in_at,
        "checkedInBy": slot.checked_in_by,
        "checkedInByName": slot.checked_in_by_name,
        "method": _value(slot.method),
    }


def registration_from_document(data: dict[str, Any]) -> Registration:
    status = _enum(RegistrationStatus, data.get("status"), RegistrationStatus.PENDING_PAYMENT)
    short_code = str(data.get("shortCode") or "")

    cancellation = None
    if data.get("cancellation"):
        c = data["cancellation"]
        cancellation = Cancellation(
            reason=str(c.get("reason") or ""),
            cancelled_by=str(c.get("cancelledBy") or ""),
            cancelled_at=parse_iso_datetime(c.get("cancelledAt")),
        )

    refund = None
    if data.get("refund"):
        r = data["refund"]
        refund = Refund(
            amount=float(r.get("amount") or 0),
            reason=str(r.get("reason") or ""),
            method=str(r.get("method") or ""),
            processed_by=str(r.get("processedBy") or ""),
            processed_at=parse_iso_datetime(r.get("processedAt")),
            reference_number=str(r.get("referenceNumber") or ""),
            notes=str(r.get("notes") or ""),
        )

    transfer = None
    if data.get("transfer"):
        t = data["transfer"]
        transfer = Transfer(
            transferred_at=parse_iso_datetime(t.get("transferredAt")),
            transferred_by=str(t.get("transferredBy") or ""),
            original_attendee=attendee_from_dict(t.get("originalAttendee")),
            reason=str(t.get("reason") or ""),
        )

    undo = None
    if data.get("checkInUndoneAt"):
        undo = CheckInUndo(
            undone_at=parse_iso_datetime(data.get("checkInUndoneAt")),
            undone_by=str(data.get("checkInUndoneBy") or ""),
            reason=str(data.get("checkInUndoReason") or ""),
            attendee_index=data.get("checkInUndoAttendeeIndex"),
        )

    church = data.get("church") or {}
    # Older documents keep the primary meal choice at the top level.
    primary = dict(data.get("primaryAttendee") or {})
    if not primary.get("foodChoice"):
        primary["foodChoice"] = data.get("foodChoice")
    return Registration(
        registration_id=str(data.get("registrationId") or data.get("id") or ""),
        short_code=short_code,
        short_code_suffix=str(data.get("shortCodeSuffix") or short_code[-4:]),
        primary_attendee=attendee_from_dict(primary),
        status=status,
        additional_attendees=tuple(attendee_from_dict(a) for a in (data.get("additionalAttendees") or [])),
        church=Church(name=str(church.get("name") or ""), city=str(church.get("city") or "")),
        category=str(data.get("category") or ""),
        pricing_tier=str(data.get("pricingTier") or ""),
        total_amount=float(data.get("totalAmount") or 0),
        payment=_payment_from_dict(data.get("payment"), status),
        invoice=invoice_from_dict(data.get("invoice")),
        payment_deadline=parse_iso_datetime(data.get("paymentDeadline")),
        confirmation_email_sent=bool(data.get("confirmationEmailSent")),
        confirmation_email_sent_at=parse_iso_datetime(data.get("confirmationEmailSentAt")),
        reminder_email_sent=bool(data.get("reminderEmailSent")),
        reminder_email_sent_at=parse_iso_datetime(data.get("reminderEmailSentAt")),
        ticket_email_sent=bool(data.get("ticketEmailSent")),
        ticket_email_sent_at=parse_iso_datetime(data.get("ticketEmailSentAt")),
        attendee_check_ins=tuple(
            check_in_slot_from_dict(s, i) for i, s in enumerate(data.get("attendeeCheckIns") or [])
        ),
        checked_in=bool(data.get("checkedIn")),
        checked_in_at=parse_iso_datetime(data.get("checkedInAt")),
        checked_in_by=data.get("checkedInBy"),
        checked_in_method=_enum(CheckInMethod, data.get("checkedInMethod")),
        check_in_undo=undo,
        qr_code_data=data.get("qrCodeData"),
        attendee_qr_codes=tuple(
            AttendeeQRCode(attendee_index=int(q.get("attendeeIndex", i)), qr_data=str(q.get("qrData") or ""))
            for i, q in enumerate(data.get("attendeeQRCodes") or [])
        ),
        cancellation=cancellation,
        refund=refund,
        transfer=transfer,
        waitlisted_at=parse_iso_datetime(data.get("waitlistedAt")),
        waitlist_position=data.get("waitlistPosition"),
        waitlist_offered_at=parse_iso_datetime(data.get("waitlistOfferedAt")),
        waitlist_offer_expires_at=parse_iso_datetime(data.get("waitlistOfferExpiresAt")),
        version=int(data.get("version") or 0),
        created_at=parse_iso_datetime(data.get("createdAt")),
        updated_at=parse_iso_datetime(data.get("updatedAt")),
    )


def registration_to_document(r: Registration) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "registrationId": r.registration_id,
        "shortCode": r.short_code,
        "shortCodeSuffix": r.short_code_suffix,
        "primaryAttendee": attendee_to_dict(r.primary_attendee),
        "additionalAttendees": [attendee_to_dict(a) for a in r.additional_attendees],
        "church": {"name": r.church.name, "city": r.church.city},
        "category": r.category,
        "pricingTier": r.pricing_tier,
        "totalAmount": r.total_amount,
        "status": _value(r.status),
        "payment": _payment_to_dict(r.payment),
        "invoice": invoice_to_dict(r.invoice) if r.invoice else None,
        "paymentDeadline": r.payment_deadline,
        "confirmationEmailSent": r.confirmation_email_sent,
        "confirmationEmailSentAt": r.confirmation_email_sent_at,
        "reminderEmailSent": r.reminder_email_sent,
        "reminderEmailSentAt": r.reminder_email_sent_at,
        "ticketEmailSent": r.ticket_email_sent,
        "ticketEmailSentAt": r.ticket_email_sent_at,
        "attendeeCheckIns": [check_in_slot_to_dict(s) for s in r.attendee_check_ins],
        "checkedIn": r.checked_in,
        "checkedInAt": r.checked_in_at,
        "checkedInBy": r.checked_in_by,
        "checkedInMethod": _value(r.checked_in_method),
        "checkInUndoneAt": r.check_in_undo.undone_at if r.check_in_undo else None,
        "checkInUndoneBy": r.check_in_undo.undone_by if r.check_in_undo else None,
        "checkInUndoReason": r.check_in_undo.reason if r.check_in_undo else None,
        "checkInUndoAttendeeIndex": r.check_in_undo.attendee_index if r.check_in_undo else None,
        "qrCodeData": r.qr_code_data,
        "attendeeQRCodes": [{"attendeeIndex": q.attendee_index, "qrData": q.qr_data} for q in r.attendee_qr_codes],
        "cancellation": None,
        "refund": None,
        "transfer": None,
        "waitlistedAt": r.waitlisted_at,
        "waitlistPosition": r.waitlist_position,
        "waitlistOfferedAt": r.waitlist_offered_at,
        "waitlistOfferExpiresAt": r.waitlist_offer_expires_at,
        "version": r.version,
        "createdAt": r.created_at,
        "updatedAt": r.updated_at,
    }
    if r.cancellation:
        doc["cancellation"] = {
            "reason": r.cancellation.reason,
            "cancelledBy": r.cancellation.cancelled_by,
            "cancelledAt": r.cancellation.cancelled_at,
        }
    if r.refund:
        doc["refund"] = {
            "amount": r.refund.amount,
            "reason": r.refund.reason,
            "method": r.refund.method,
            "referenceNumber": r.refund.reference_number,
            "notes": r.refund.notes,
            "processedBy": r.refund.processed_by,
            "processedAt": r.refund.processed_at,
        }
    if r.transfer:
        doc["transfer"] = {
            "transferredAt": r.transfer.transferred_at,
            "transferredBy": r.transfer.transferred_by,
            "reason": r.transfer.reason,
            "originalAttendee": attendee_to_dict(r.transfer.original_attendee),
        }
    return doc
