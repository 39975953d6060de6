from __future__ import annotations

from typing import Any, Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import parse_iso_datetime
from ..core.enums import InquiryStatus
from ..firestore import collections
from .model import ContactInquiry


def inquiry_from_dict(inquiry_id: str, data: dict[str, Any]) -> ContactInquiry:
    return ContactInquiry(
        inquiry_id=inquiry_id,
        name=str(data.get("name") or ""),
        email=str(data.get("email") or ""),
        subject=str(data.get("subject") or ""),
        message=str(data.get("message") or ""),
        status=InquiryStatus(data.get("status") or InquiryStatus.NEW.value),
        created_at=parse_iso_datetime(data.get("createdAt")),
        replied_at=parse_iso_datetime(data.get("repliedAt")),
        replied_by=data.get("repliedBy"),
    )


class FirestoreInquiryRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _col(self):
        return self._client.collection(collections.CONTACT_INQUIRIES)

    def add(self, data: dict[str, Any]) -> str:
        _, ref = self._col.add(data)
        return ref.id

    def get_by_id(self, inquiry_id: str) -> Optional[ContactInquiry]:
        snap = self._col.document(inquiry_id).get()
        return inquiry_from_dict(snap.id, snap.to_dict() or {}) if snap.exists else None

    def list_recent(self, *, status: Optional[str] = None, limit: int = 100):
        query = self._col
        if status:
            query = query.where(filter=FieldFilter("status", "==", status))
        query = query.order_by("createdAt", direction=firestore.Query.DESCENDING).limit(int(limit))
        return [inquiry_from_dict(s.id, s.to_dict() or {}) for s in query.stream()]

    def update(self, inquiry_id: str, fields: dict[str, Any]) -> None:
        self._col.document(inquiry_id).update(fields)
