from __future__ import annotations

import dataclasses

import pytest

from src.idmc_registration.idmc_registration.core.enums import RegistrationStatus
from src.idmc_registration.idmc_registration.core.exceptions import (
    DuplicateEmailError,
    NotFoundError,
    RegistrationError,
)
from src.idmc_registration.idmc_registration.invoices.firestore_invoice_repository import next_invoice_number
from src.idmc_registration.idmc_registration.registrations.documents import registration_to_document
from src.idmc_registration.idmc_registration.registrations.firestore_registration_repository import (
    apply_mutation,
    create_if_email_unused,
)
from src.idmc_registration.idmc_registration.workshops.firestore_session_repository import adjust_count
from tests.fakes import MemoryDocument, MemorySnapshot, MemoryTransaction, make_registration


@pytest.fixture
def store():
    return {}


def test_invoice_counter_starts_at_one(store):
    transaction = MemoryTransaction()

    assert next_invoice_number(transaction, MemoryDocument(store, "invoiceCounter"), 2026) == 1

    kind, doc_id, written = transaction.writes[0]
    assert (kind, doc_id) == ("set", "invoiceCounter")
    assert (written["year"], written["lastNumber"]) == (2026, 1)
    assert "updatedAt" in written


def test_invoice_counter_continues_within_the_year(store):
    store["invoiceCounter"] = {"year": 2026, "lastNumber": 41}
    ref = MemoryDocument(store, "invoiceCounter")

    assert next_invoice_number(MemoryTransaction(), ref, 2026) == 42
    assert next_invoice_number(MemoryTransaction(), ref, 2026) == 43
    assert store["invoiceCounter"]["lastNumber"] == 43


def test_invoice_counter_restarts_for_a_new_year(store):
    store["invoiceCounter"] = {"year": 2025, "lastNumber": 88}

    assert next_invoice_number(MemoryTransaction(), MemoryDocument(store, "invoiceCounter"), 2026) == 1
    assert store["invoiceCounter"]["year"] == 2026


def test_mutation_bumps_version_and_keeps_created_at(store):
    original = make_registration(status=RegistrationStatus.PENDING_VERIFICATION, version=3)
    store[original.registration_id] = registration_to_document(original)
    transaction = MemoryTransaction()

    updated = apply_mutation(
        transaction,
        MemoryDocument(store, original.registration_id),
        lambda r: dataclasses.replace(r, status=RegistrationStatus.CONFIRMED),
    )

    assert updated.version == 4
    assert updated.status == RegistrationStatus.CONFIRMED
    _, _, written = transaction.writes[0]
    assert written["version"] == 4
    assert written["status"] == "confirmed"
    assert "createdAt" not in written
    assert store[original.registration_id]["createdAt"] == original.created_at


def test_mutation_of_missing_registration(store):
    with pytest.raises(RegistrationError) as exc:
        apply_mutation(MemoryTransaction(), MemoryDocument(store, "REG-2026-ZZZZZZ"), lambda r: r)
    assert exc.value.code == RegistrationError.REGISTRATION_NOT_FOUND


def test_mutation_that_raises_writes_nothing(store):
    original = make_registration()
    store[original.registration_id] = registration_to_document(original)
    transaction = MemoryTransaction()

    def refuse(r):
        raise RegistrationError("nope", RegistrationError.INVALID_STATUS)

    with pytest.raises(RegistrationError):
        apply_mutation(transaction, MemoryDocument(store, original.registration_id), refuse)
    assert transaction.writes == []


def test_create_rejects_an_email_already_in_use(store):
    taken = MemorySnapshot("REG-2026-C9HTPQ", {"primaryAttendee": {"email": "juan.santos@gmail.com"}})
    transaction = MemoryTransaction()

    with pytest.raises(DuplicateEmailError) as exc:
        create_if_email_unused(transaction, MemoryDocument(store, "REG-2026-A3K7MN"), [taken], make_registration())

    assert exc.value.existing_registration_id == "REG-2026-C9HTPQ"
    assert transaction.writes == []


def test_create_rejects_a_taken_registration_id(store):
    store["REG-2026-A3K7MN"] = {"status": "confirmed"}
    with pytest.raises(RegistrationError) as exc:
        create_if_email_unused(MemoryTransaction(), MemoryDocument(store, "REG-2026-A3K7MN"), [], make_registration())
    assert exc.value.code == RegistrationError.INVALID_DATA


def test_create_writes_the_document(store):
    transaction = MemoryTransaction()
    create_if_email_unused(transaction, MemoryDocument(store, "REG-2026-A3K7MN"), [], make_registration())

    assert [w[0] for w in transaction.writes] == ["create"]
    assert store["REG-2026-A3K7MN"]["shortCode"] == "A3K7MN"


def test_workshop_count_never_goes_negative(store):
    store["ws-men"] = {"registeredCount": 1}
    ref = MemoryDocument(store, "ws-men")

    assert adjust_count(MemoryTransaction(), ref, +2) == 3
    assert adjust_count(MemoryTransaction(), ref, -5) == 0
    assert store["ws-men"]["registeredCount"] == 0


def test_workshop_count_for_unknown_session(store):
    with pytest.raises(NotFoundError):
        adjust_count(MemoryTransaction(), MemoryDocument(store, "ws-404"), 1)
