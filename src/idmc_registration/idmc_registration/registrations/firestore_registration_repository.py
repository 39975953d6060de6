from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Optional, Sequence

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import now_utc
from ..core.enums import RegistrationStatus
from ..core.exceptions import DuplicateEmailError, RegistrationError
from ..firestore import collections
from .documents import registration_from_document, registration_to_document
from .model import Registration

logger = logging.getLogger(__name__)


def registration_from_snapshot(snap) -> Registration:
    data = snap.to_dict() or {}
    data.setdefault("registrationId", snap.id)
    return registration_from_document(data)


def create_if_email_unused(transaction, doc_ref, email_query, registration: Registration) -> None:
    """Transaction body: the email check and the create commit together."""
    for snap in transaction.get(email_query):
        raise DuplicateEmailError(registration.primary_attendee.email, snap.id)
    if doc_ref.get(transaction=transaction).exists:
        raise RegistrationError(
            f"Registration {registration.registration_id} already exists",
            RegistrationError.INVALID_DATA,
        )
    transaction.create(doc_ref, registration_to_document(registration))


def apply_mutation(transaction, doc_ref, fn: Callable[[Registration], Registration]) -> Registration:
    """Transaction body: read, transform with ``fn``, bump ``version`` and write back."""
    snap = doc_ref.get(transaction=transaction)
    if not snap.exists:
        raise RegistrationError(
            f"Registration {doc_ref.id} not found",
            RegistrationError.REGISTRATION_NOT_FOUND,
        )
    current = registration_from_snapshot(snap)
    updated = fn(current)
    updated = dataclasses.replace(updated, version=current.version + 1, updated_at=now_utc())
    document = registration_to_document(updated)
    document.pop("createdAt", None)
    transaction.update(doc_ref, document)
    return updated


class FirestoreRegistrationRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _col(self):
        return self._client.collection(collections.REGISTRATIONS)

    def _first(self, query) -> Optional[Registration]:
        for snap in query.limit(1).stream():
            return registration_from_snapshot(snap)
        return None

    def get_by_id(self, registration_id: str) -> Optional[Registration]:
        if not registration_id:
            return None
        snap = self._col.document(registration_id).get()
        return registration_from_snapshot(snap) if snap.exists else None

    def find_by_email(self, email: str) -> Optional[Registration]:
        return self._first(self._col.where(filter=FieldFilter("primaryAttendee.email", "==", email)))

    def find_by_short_code(self, short_code: str) -> Optional[Registration]:
        return self._first(self._col.where(filter=FieldFilter("shortCode", "==", short_code)))

    def find_by_suffix(self, suffix: str) -> Sequence[Registration]:
        query = self._col.where(filter=FieldFilter("shortCodeSuffix", "==", suffix))
        return [registration_from_snapshot(s) for s in query.stream()]

    def find_by_phone(self, phones: Sequence[str]) -> Optional[Registration]:
        phones = [p for p in phones if p]
        if not phones:
            return None
        # "in" accepts up to 30 values; variants are at most 3.
        return self._first(self._col.where(filter=FieldFilter("primaryAttendee.cellphone", "in", list(phones))))

    def list_by_status(self, statuses: Sequence[RegistrationStatus], *, limit: Optional[int] = None):
        query = self._col.where(filter=FieldFilter("status", "in", [s.value for s in statuses]))
        if limit:
            query = query.limit(int(limit))
        return [registration_from_snapshot(s) for s in query.stream()]

    def list_all(self, *, limit: Optional[int] = None):
        query = self._col.order_by("createdAt", direction=firestore.Query.DESCENDING)
        if limit:
            query = query.limit(int(limit))
        return [registration_from_snapshot(s) for s in query.stream()]

    def list_waitlisted(self):
        query = self._col.where(filter=FieldFilter("status", "==", RegistrationStatus.WAITLISTED.value)).order_by(
            "waitlistedAt"
        )
        return [registration_from_snapshot(s) for s in query.stream()]

    def count_by_status(self, statuses: Sequence[RegistrationStatus]) -> int:
        query = self._col.where(filter=FieldFilter("status", "in", [s.value for s in statuses]))
        result = query.count().get()
        return int(result[0][0].value)

    def count_all(self) -> int:
        result = self._col.count().get()
        return int(result[0][0].value)

    def list_page(
        self,
        *,
        status: Optional[RegistrationStatus] = None,
        limit: int,
        start_after: Optional[str] = None,
    ):
        query = self._col
        if status:
            query = query.where(filter=FieldFilter("status", "==", status.value))
        query = query.order_by("createdAt", direction=firestore.Query.DESCENDING)
        if start_after:
            cursor = self._col.document(start_after).get()
            if not cursor.exists:
                raise RegistrationError(
                    f"Registration {start_after} not found",
                    RegistrationError.REGISTRATION_NOT_FOUND,
                )
            query = query.start_after(cursor)
        return [registration_from_snapshot(s) for s in query.limit(int(limit)).stream()]

    def create_unique(self, registration: Registration) -> Registration:
        email = registration.primary_attendee.email
        doc_ref = self._col.document(registration.registration_id)
        email_query = self._col.where(filter=FieldFilter("primaryAttendee.email", "==", email)).limit(1)

        create = firestore.transactional(create_if_email_unused)
        create(self._client.transaction(), doc_ref, email_query, registration)
        logger.info("Created registration %s", registration.registration_id)
        return registration

    def update_fields(self, registration_id: str, fields: dict[str, Any]) -> None:
        payload = dict(fields)
        payload.setdefault("updatedAt", now_utc())
        self._col.document(registration_id).update(payload)

    def mutate(self, registration_id: str, fn: Callable[[Registration], Registration]) -> Registration:
        doc_ref = self._col.document(registration_id)
        mutate = firestore.transactional(apply_mutation)
        return mutate(self._client.transaction(), doc_ref, fn)
