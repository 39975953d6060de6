from __future__ import annotations

from datetime import datetime
from typing import Any

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import parse_iso_datetime
from ..core.enums import CheckInMethod
from ..firestore import collections
from .model import CheckInLogEntry


def log_from_dict(log_id: str, data: dict[str, Any]) -> CheckInLogEntry:
    return CheckInLogEntry(
        log_id=log_id,
        registration_id=str(data.get("registrationId") or ""),
        attendee_index=data.get("attendeeIndex"),
        attendee_name=str(data.get("attendeeName") or ""),
        short_code=str(data.get("shortCode") or ""),
        method=CheckInMethod(data.get("method") or CheckInMethod.MANUAL.value),
        admin_id=str(data.get("adminId") or ""),
        admin_name=str(data.get("adminName") or ""),
        station_id=data.get("stationId"),
        checked_in_at=parse_iso_datetime(data.get("checkedInAt")),
    )


class FirestoreCheckInLogRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _col(self):
        return self._client.collection(collections.CHECKIN_LOGS)

    def add(self, data: dict[str, Any]) -> str:
        _, ref = self._col.add(data)
        return ref.id

    def list_recent(self, *, limit: int):
        query = self._col.order_by("checkedInAt", direction=firestore.Query.DESCENDING).limit(int(limit))
        return [log_from_dict(s.id, s.to_dict() or {}) for s in query.stream()]

    def list_between(self, *, start: datetime, end: datetime):
        query = (
            self._col.where(filter=FieldFilter("checkedInAt", ">=", start))
            .where(filter=FieldFilter("checkedInAt", "<", end))
            .order_by("checkedInAt")
        )
        return [log_from_dict(s.id, s.to_dict() or {}) for s in query.stream()]
