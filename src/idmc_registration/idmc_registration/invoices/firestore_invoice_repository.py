from __future__ import annotations

from typing import Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import now_utc
from ..core.enums import RegistrationStatus
from ..firestore import collections
from ..registrations.documents import registration_from_document


def next_invoice_number(transaction, counter_ref, year: int) -> int:
    """Transaction body: bump the yearly counter, restarting at 1 in a new year."""
    snap = counter_ref.get(transaction=transaction)
    data = (snap.to_dict() or {}) if snap.exists else {}
    if int(data.get("year") or 0) == int(year):
        next_number = int(data.get("lastNumber") or 0) + 1
    else:
        next_number = 1
    transaction.set(counter_ref, {"year": int(year), "lastNumber": next_number, "updatedAt": now_utc()})
    return next_number


class FirestoreInvoiceRepository:
    def __init__(self, client):
        self._client = client

    def _requests_query(self, *, status: Optional[str], confirmed_only: bool):
        query = self._client.collection(collections.REGISTRATIONS)
        if confirmed_only:
            query = query.where(filter=FieldFilter("status", "==", RegistrationStatus.CONFIRMED.value))
        query = query.where(filter=FieldFilter("invoice.requested", "==", True))
        if status:
            query = query.where(filter=FieldFilter("invoice.status", "==", status))
        return query

    def list_requests(self, *, status: Optional[str] = None, confirmed_only: bool = True, limit: int = 50):
        query = self._requests_query(status=status, confirmed_only=confirmed_only)
        query = query.order_by("payment.verifiedAt", direction=firestore.Query.DESCENDING).limit(int(limit))

        rows = []
        for snap in query.stream():
            data = snap.to_dict() or {}
            data.setdefault("registrationId", snap.id)
            rows.append(registration_from_document(data))
        return rows

    def count_requests(self, *, status: Optional[str] = None) -> int:
        result = self._requests_query(status=status, confirmed_only=True).count().get()
        return int(result[0][0].value)

    def reserve_next_number(self, year: int) -> int:
        counter_ref = self._client.collection(collections.SETTINGS).document(collections.INVOICE_COUNTER_DOC)
        reserve = firestore.transactional(next_invoice_number)
        return reserve(self._client.transaction(), counter_ref, year)
