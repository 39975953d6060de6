from __future__ import annotations

from typing import Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import now_utc
from ..core.exceptions import NotFoundError
from ..firestore import collections
from .model import Session


def session_from_dict(session_id: str, data: dict) -> Session:
    capacity = data.get("capacity")
    return Session(
        session_id=session_id,
        title=str(data.get("title") or ""),
        session_type=str(data.get("sessionType") or "plenary"),
        day=data.get("day"),
        time=data.get("time"),
        order=int(data.get("order") or 0),
        is_published=bool(data.get("isPublished", True)),
        capacity=int(capacity) if capacity is not None else None,
        registered_count=int(data.get("registeredCount") or 0),
        time_slot=data.get("timeSlot"),
        track=data.get("track"),
    )


def adjust_count(transaction, doc_ref, delta: int) -> int:
    """Transaction body: apply ``delta`` to registeredCount, never below zero."""
    snap = doc_ref.get(transaction=transaction)
    if not snap.exists:
        raise NotFoundError(f"Workshop {doc_ref.id} not found")
    current = int((snap.to_dict() or {}).get("registeredCount") or 0)
    new_count = max(0, current + int(delta))
    transaction.update(doc_ref, {"registeredCount": new_count, "updatedAt": now_utc()})
    return new_count


class FirestoreSessionRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _col(self):
        return self._client.collection(collections.SESSIONS)

    def get_by_id(self, session_id: str) -> Optional[Session]:
        snap = self._col.document(session_id).get()
        return session_from_dict(snap.id, snap.to_dict() or {}) if snap.exists else None

    def list_workshops(self):
        query = self._col.where(filter=FieldFilter("sessionType", "==", "workshop")).order_by("order")
        return [session_from_dict(s.id, s.to_dict() or {}) for s in query.stream()]

    def adjust_registered_count(self, session_id: str, delta: int) -> int:
        adjust = firestore.transactional(adjust_count)
        return adjust(self._client.transaction(), self._col.document(session_id), delta)
