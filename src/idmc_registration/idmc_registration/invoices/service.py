from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..activity_log.service import ActivityLogService
from ..admins.model import Actor
from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.constants import INVOICE_LIST_LIMIT, INVOICE_SEARCH_LIMIT, INVOICE_SEARCH_MIN_LENGTH
from ..core.enums import ActivityType, EntityType, InvoiceStatus, RegistrationStatus
from ..core.exceptions import InvoiceError, RegistrationError
from ..registrations.model import InvoiceRequest, Registration
from ..registrations.repository import RegistrationRepository
from .repository import InvoiceRepository

logger = logging.getLogger(__name__)


def format_invoice_number(year: int, number: int) -> str:
    return f"INV-{int(year)}-{int(number):04d}"


@dataclass(frozen=True)
class InvoiceRequestCounts:
    total: int
    pending: int
    uploaded: int
    sent: int
    failed: int


class InvoiceService:
    def __init__(
        self,
        invoices: InvoiceRepository,
        registrations: RegistrationRepository,
        activity: ActivityLogService,
    ):
        self._invoices = invoices
        self._registrations = registrations
        self._activity = activity

    def get_invoice_requests(
        self,
        *,
        status: Optional[str] = None,
        confirmed_only: bool = True,
        limit: int = INVOICE_LIST_LIMIT,
    ) -> list[Registration]:
        if status:
            try:
                InvoiceStatus(status)
            except ValueError:
                raise InvoiceError(f"Unknown invoice status: {status}", InvoiceError.INVALID_STATUS)
        return list(self._invoices.list_requests(status=status, confirmed_only=confirmed_only, limit=limit))

    def get_registration_with_invoice(self, registration_id: str) -> Registration:
        registration = self._registrations.get_by_id(registration_id) if registration_id else None
        if not registration:
            raise InvoiceError(f"Registration {registration_id} not found", InvoiceError.INVOICE_NOT_FOUND)
        if not registration.invoice or not registration.invoice.requested:
            raise InvoiceError(
                f"Registration {registration_id} did not request an invoice",
                InvoiceError.NO_INVOICE_REQUEST,
            )
        return registration

    def _mutate_invoice(self, registration_id: str, fn) -> Registration:
        def _apply(r: Registration) -> Registration:
            if not r.invoice or not r.invoice.requested:
                raise InvoiceError(
                    f"Registration {registration_id} did not request an invoice",
                    InvoiceError.NO_INVOICE_REQUEST,
                )
            return dataclasses.replace(r, invoice=fn(r))

        try:
            return self._registrations.mutate(registration_id, _apply)
        except RegistrationError as e:
            if e.code == RegistrationError.REGISTRATION_NOT_FOUND:
                raise InvoiceError(e.message, InvoiceError.INVOICE_NOT_FOUND)
            raise

    def generate_and_reserve_invoice_number(self, registration_id: str, *, now: datetime | None = None) -> str:
        now = now or now_utc()
        self.get_registration_with_invoice(registration_id)
        try:
            number = self._invoices.reserve_next_number(now.year)
        except Exception as e:
            logger.exception("Invoice counter transaction failed for %s", registration_id)
            raise InvoiceError("Could not generate an invoice number", InvoiceError.GENERATION_FAILED) from e
        invoice_number = format_invoice_number(now.year, number)

        self._mutate_invoice(
            registration_id,
            lambda r: dataclasses.replace(r.invoice, invoice_number=invoice_number, generated_at=now),
        )
        logger.info("Reserved %s for %s", invoice_number, registration_id)
        return invoice_number

    def update_invoice_upload(
        self,
        registration_id: str,
        *,
        invoice_url: str,
        invoice_number: Optional[str] = None,
        actor: Actor,
        now: datetime | None = None,
    ) -> Registration:
        invoice_url = require_non_empty(invoice_url, "Invoice URL")
        now = now or now_utc()

        def _upload(r: Registration) -> InvoiceRequest:
            if r.status != RegistrationStatus.CONFIRMED:
                raise InvoiceError(
                    f"Registration {registration_id} is not confirmed",
                    InvoiceError.REGISTRATION_NOT_CONFIRMED,
                )
            return dataclasses.replace(
                r.invoice,
                invoice_url=invoice_url,
                invoice_number=invoice_number or r.invoice.invoice_number,
                status=InvoiceStatus.UPLOADED,
                uploaded_at=now,
                uploaded_by=actor.email or actor.admin_id,
                error_message=None,
            )

        registration = self._mutate_invoice(registration_id, _upload)
        self._activity.log_activity(
            type=ActivityType.UPDATE,
            action="upload_invoice",
            entity_type=EntityType.INVOICE,
            entity_id=registration_id,
            description=f"Uploaded invoice {registration.invoice.invoice_number or ''}".strip(),
            actor=actor,
        )
        return registration

    def mark_invoice_sent(self, registration_id: str, *, actor: Actor, now: datetime | None = None) -> Registration:
        now = now or now_utc()

        def _sent(r: Registration) -> InvoiceRequest:
            if not r.invoice.invoice_url:
                raise InvoiceError(
                    f"No invoice has been uploaded for {registration_id}",
                    InvoiceError.INVALID_STATUS,
                )
            return dataclasses.replace(
                r.invoice,
                status=InvoiceStatus.SENT,
                sent_at=now,
                sent_by=actor.email or actor.admin_id,
                email_delivery_status="sent",
            )

        return self._mutate_invoice(registration_id, _sent)

    def mark_invoice_failed(self, registration_id: str, error_message: str) -> Registration:
        return self._mutate_invoice(
            registration_id,
            lambda r: dataclasses.replace(
                r.invoice,
                status=InvoiceStatus.FAILED,
                email_delivery_status="failed",
                error_message=error_message or "Unknown error",
            ),
        )

    def get_invoice_request_counts(self) -> InvoiceRequestCounts:
        # Requests stored before statuses existed have none; they count as pending.
        total = self._invoices.count_requests()
        uploaded = self._invoices.count_requests(status=InvoiceStatus.UPLOADED.value)
        sent = self._invoices.count_requests(status=InvoiceStatus.SENT.value)
        failed = self._invoices.count_requests(status=InvoiceStatus.FAILED.value)
        return InvoiceRequestCounts(
            total=total,
            pending=max(0, total - uploaded - sent - failed),
            uploaded=uploaded,
            sent=sent,
            failed=failed,
        )

    def search_invoice_requests(self, term: str) -> list[Registration]:
        term = (term or "").strip().lower()
        if len(term) < INVOICE_SEARCH_MIN_LENGTH:
            return []
        rows = self._invoices.list_requests(confirmed_only=True, limit=INVOICE_SEARCH_LIMIT)
        matches = []
        for r in rows:
            haystack = " ".join(
                [
                    r.registration_id,
                    r.short_code,
                    r.primary_attendee.full_name,
                    r.primary_attendee.email,
                    r.invoice.name,
                    r.invoice.tin,
                    r.invoice.invoice_number or "",
                ]
            ).lower()
            if term in haystack:
                matches.append(r)
        return matches
