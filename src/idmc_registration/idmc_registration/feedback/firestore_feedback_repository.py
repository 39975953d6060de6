from __future__ import annotations

from typing import Any, Optional

from firebase_admin import firestore

from ..common.datetime_utils import parse_iso_datetime
from ..firestore import collections
from .model import FeedbackResponse


def feedback_from_dict(feedback_id: str, data: dict[str, Any]) -> FeedbackResponse:
    answers = {k: v for k, v in data.items() if k not in ("id", "createdAt")}
    return FeedbackResponse(
        feedback_id=feedback_id,
        answers=answers,
        created_at=parse_iso_datetime(data.get("createdAt")),
    )


class FirestoreFeedbackRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _col(self):
        return self._client.collection(collections.FEEDBACK)

    def add(self, data: dict[str, Any]) -> str:
        _, ref = self._col.add(data)
        return ref.id

    def get_by_id(self, feedback_id: str) -> Optional[FeedbackResponse]:
        snap = self._col.document(feedback_id).get()
        return feedback_from_dict(snap.id, snap.to_dict() or {}) if snap.exists else None

    def list_recent(self):
        query = self._col.order_by("createdAt", direction=firestore.Query.DESCENDING)
        return [feedback_from_dict(s.id, s.to_dict() or {}) for s in query.stream()]

    def delete(self, feedback_id: str) -> None:
        self._col.document(feedback_id).delete()
