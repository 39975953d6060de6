from __future__ import annotations

from typing import Any, Optional

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import parse_iso_datetime
from ..core.enums import ActivityType, EntityType
from ..firestore import collections
from .model import ActivityLogEntry

FILTER_FIELDS = {"type": "type", "entity_type": "entityType", "admin_id": "adminId"}


def entry_from_dict(log_id: str, data: dict[str, Any]) -> ActivityLogEntry:
    return ActivityLogEntry(
        log_id=log_id,
        type=ActivityType(data.get("type") or ActivityType.UPDATE.value),
        action=str(data.get("action") or ""),
        entity_type=EntityType(data.get("entityType") or EntityType.SETTINGS.value),
        entity_id=data.get("entityId"),
        description=str(data.get("description") or ""),
        admin_id=data.get("adminId"),
        admin_email=data.get("adminEmail"),
        timestamp=parse_iso_datetime(data.get("timestamp")),
        metadata=dict(data.get("metadata") or {}),
    )


class FirestoreActivityLogRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _col(self):
        return self._client.collection(collections.ACTIVITY_LOGS)

    def _filtered(self, filters: Optional[dict[str, str]]):
        query = self._col
        for key, value in (filters or {}).items():
            if value and key in FILTER_FIELDS:
                query = query.where(filter=FieldFilter(FILTER_FIELDS[key], "==", value))
        return query

    def add(self, data: dict[str, Any]) -> str:
        _, ref = self._col.add(data)
        return ref.id

    def list_entries(self, *, limit: int, start_after: Optional[str] = None, filters=None):
        query = self._filtered(filters).order_by("timestamp", direction=firestore.Query.DESCENDING)
        if start_after:
            cursor = self._col.document(start_after).get()
            if cursor.exists:
                query = query.start_after(cursor)
        return [entry_from_dict(s.id, s.to_dict() or {}) for s in query.limit(int(limit)).stream()]

    def count(self, *, filters=None) -> int:
        result = self._filtered(filters).count().get()
        return int(result[0][0].value)
