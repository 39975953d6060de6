from __future__ import annotations

from typing import Any, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from ..common.datetime_utils import now_utc, parse_iso_datetime
from ..core.enums import AdminRole, AdminStatus
from ..firestore import collections
from .model import Admin


def admin_from_dict(admin_id: str, data: dict[str, Any]) -> Admin:
    return Admin(
        admin_id=admin_id,
        email=str(data.get("email") or ""),
        display_name=str(data.get("displayName") or ""),
        role=AdminRole(data.get("role") or AdminRole.VOLUNTEER.value),
        status=AdminStatus(data.get("status") or AdminStatus.PENDING.value),
        permissions=dict(data.get("permissions") or {}),
        password_hash=data.get("passwordHash"),
        invitation_token_hash=data.get("invitationTokenHash"),
        invitation_expires_at=parse_iso_datetime(data.get("invitationExpiresAt")),
        invited_by=data.get("invitedBy"),
        invited_at=parse_iso_datetime(data.get("invitedAt")),
        last_login_at=parse_iso_datetime(data.get("lastLoginAt")),
        created_at=parse_iso_datetime(data.get("createdAt")),
        updated_at=parse_iso_datetime(data.get("updatedAt")),
    )


class FirestoreAdminRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _col(self):
        return self._client.collection(collections.ADMINS)

    def get_by_id(self, admin_id: str) -> Optional[Admin]:
        snap = self._col.document(admin_id).get()
        return admin_from_dict(snap.id, snap.to_dict() or {}) if snap.exists else None

    def get_by_email(self, email: str) -> Optional[Admin]:
        for snap in self._col.where(filter=FieldFilter("email", "==", email)).limit(1).stream():
            return admin_from_dict(snap.id, snap.to_dict() or {})
        return None

    def list_all(self):
        return [admin_from_dict(s.id, s.to_dict() or {}) for s in self._col.order_by("email").stream()]

    def create(self, data: dict[str, Any]) -> str:
        _, ref = self._col.add(data)
        return ref.id

    def update(self, admin_id: str, fields: dict[str, Any]) -> None:
        self._col.document(admin_id).update({**fields, "updatedAt": now_utc()})
