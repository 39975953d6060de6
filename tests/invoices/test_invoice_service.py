from __future__ import annotations

import pytest

from src.idmc_registration.idmc_registration.admins.model import Actor
from src.idmc_registration.idmc_registration.core.enums import InvoiceStatus, RegistrationStatus
from src.idmc_registration.idmc_registration.core.exceptions import InvoiceError
from src.idmc_registration.idmc_registration.invoices.service import format_invoice_number
from src.idmc_registration.idmc_registration.registrations.model import InvoiceRequest
from tests.fakes import NOW, make_backend, make_container, make_registration

FINANCE = Actor(admin_id="admin-9", email="finance@idmc.org", name="Finance")


def _with_invoice(code, status=RegistrationStatus.CONFIRMED, invoice_status=InvoiceStatus.PENDING, **kwargs):
    return make_registration(
        code,
        status=status,
        email=f"{code.lower()}@example.com",
        invoice=InvoiceRequest(requested=True, name="GCF South Metro", tin="123-456-789-000", status=invoice_status),
        **kwargs,
    )


@pytest.fixture
def backend():
    return make_backend(
        [
            _with_invoice("A3K7MN"),
            _with_invoice("C9HTPQ", invoice_status=InvoiceStatus.SENT),
            _with_invoice("D4FJNR", status=RegistrationStatus.PENDING_VERIFICATION),
            make_registration("E7GKUV", email="plain@example.com"),
        ]
    )


@pytest.fixture
def service(backend):
    return make_container(backend).invoice_service


def test_format_invoice_number():
    assert format_invoice_number(2026, 7) == "INV-2026-0007"
    assert format_invoice_number(2026, 12345) == "INV-2026-12345"


def test_numbers_are_sequential(service, backend):
    first = service.generate_and_reserve_invoice_number("REG-2026-A3K7MN", now=NOW)
    second = service.generate_and_reserve_invoice_number("REG-2026-C9HTPQ", now=NOW)

    assert (first, second) == ("INV-2026-0001", "INV-2026-0002")
    assert backend.invoices.counter == {"year": 2026, "lastNumber": 2}
    stored = backend.registrations.get_by_id("REG-2026-A3K7MN")
    assert stored.invoice.invoice_number == "INV-2026-0001"
    assert stored.invoice.generated_at == NOW


def test_counter_resets_on_new_year(service, backend):
    backend.invoices.counter = {"year": 2025, "lastNumber": 88}
    assert service.generate_and_reserve_invoice_number("REG-2026-A3K7MN", now=NOW) == "INV-2026-0001"


def test_no_invoice_request(service, backend):
    with pytest.raises(InvoiceError) as exc:
        service.generate_and_reserve_invoice_number("REG-2026-E7GKUV", now=NOW)
    assert exc.value.code == InvoiceError.NO_INVOICE_REQUEST
    assert backend.invoices.counter == {}


def test_unknown_registration(service):
    with pytest.raises(InvoiceError) as exc:
        service.get_registration_with_invoice("REG-2026-ZZZZZZ")
    assert exc.value.code == InvoiceError.INVOICE_NOT_FOUND


def test_counter_failure_is_generation_failed(service, backend):
    def boom(year):
        raise RuntimeError("aborted")

    backend.invoices.reserve_next_number = boom
    with pytest.raises(InvoiceError) as exc:
        service.generate_and_reserve_invoice_number("REG-2026-A3K7MN", now=NOW)
    assert exc.value.code == InvoiceError.GENERATION_FAILED


def test_upload_then_send(service, backend):
    uploaded = service.update_invoice_upload(
        "REG-2026-A3K7MN",
        invoice_url="https://storage.example.com/inv/A3K7MN.pdf",
        invoice_number="INV-2026-0042",
        actor=FINANCE,
        now=NOW,
    )
    assert uploaded.invoice.status == InvoiceStatus.UPLOADED
    assert uploaded.invoice.invoice_number == "INV-2026-0042"
    assert uploaded.invoice.uploaded_by == "finance@idmc.org"

    sent = service.mark_invoice_sent("REG-2026-A3K7MN", actor=FINANCE, now=NOW)
    assert sent.invoice.status == InvoiceStatus.SENT
    assert sent.invoice.sent_at == NOW
    assert sent.invoice.email_delivery_status == "sent"

    actions = [d["action"] for d in backend.activity_logs.docs.values()]
    assert actions == ["upload_invoice"]


def test_upload_requires_confirmed(service):
    with pytest.raises(InvoiceError) as exc:
        service.update_invoice_upload("REG-2026-D4FJNR", invoice_url="https://x/y.pdf", actor=FINANCE, now=NOW)
    assert exc.value.code == InvoiceError.REGISTRATION_NOT_CONFIRMED


def test_send_requires_upload(service):
    with pytest.raises(InvoiceError) as exc:
        service.mark_invoice_sent("REG-2026-A3K7MN", actor=FINANCE, now=NOW)
    assert exc.value.code == InvoiceError.INVALID_STATUS


def test_mark_failed(service):
    failed = service.mark_invoice_failed("REG-2026-A3K7MN", "mailbox full")
    assert failed.invoice.status == InvoiceStatus.FAILED
    assert failed.invoice.error_message == "mailbox full"


def test_counts_only_confirmed(service):
    counts = service.get_invoice_request_counts()
    assert (counts.total, counts.pending, counts.sent, counts.uploaded, counts.failed) == (2, 1, 1, 0, 0)


def test_list_filters_by_status(service):
    rows = service.get_invoice_requests(status="sent")
    assert [r.short_code for r in rows] == ["C9HTPQ"]

    with pytest.raises(InvoiceError):
        service.get_invoice_requests(status="shredded")


def test_search(service):
    assert {r.short_code for r in service.search_invoice_requests("south metro")} == {"A3K7MN", "C9HTPQ"}
    assert [r.short_code for r in service.search_invoice_requests("c9htpq")] == ["C9HTPQ"]
    assert service.search_invoice_requests("ab") == []


def test_counts_treat_requests_without_status_as_pending(service, backend):
    backend.registrations.put(_with_invoice("F3HJKM", invoice_status=None))
    backend.registrations.put(_with_invoice("G6KMPQ", invoice_status=InvoiceStatus.FAILED))

    counts = service.get_invoice_request_counts()

    assert (counts.total, counts.pending, counts.sent, counts.uploaded, counts.failed) == (4, 2, 1, 0, 1)
