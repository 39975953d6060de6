from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from ..activity_log.service import ActivityLogService
from ..admins.model import Actor
from ..common.datetime_utils import now_utc
from ..core.enums import ActivityType
from ..core.exceptions import NotFoundError, ValidationError
from .model import CONTENT_KINDS, ContentKind
from .repository import ContentRepository

PROTECTED_FIELDS = {"id", "createdAt"}


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")
    return slug[:60]


class ContentService:
    """CRUD for speakers, sessions, FAQs and the other seeded collections."""

    def __init__(self, content: ContentRepository, activity: ActivityLogService):
        self._content = content
        self._activity = activity

    @staticmethod
    def kind(name: str) -> ContentKind:
        try:
            return CONTENT_KINDS[name]
        except KeyError:
            raise NotFoundError(f"Unknown content type: {name}")

    def list_all(self, kind: ContentKind) -> list[dict[str, Any]]:
        return list(self._content.list_ordered(kind.collection, kind.order_field))

    def list_published(self, kind: ContentKind) -> list[dict[str, Any]]:
        return list(self._content.list_visible(kind.collection, kind.visibility_field, kind.order_field))

    def get(self, kind: ContentKind, doc_id: str) -> dict[str, Any]:
        doc = self._content.get(kind.collection, doc_id)
        if not doc:
            raise NotFoundError(f"{kind.name} item {doc_id} not found")
        return doc

    def save(
        self,
        kind: ContentKind,
        data: dict[str, Any],
        *,
        doc_id: Optional[str] = None,
        actor: Actor,
        now: datetime | None = None,
    ) -> str:
        label = str(data.get(kind.required_field) or "").strip()
        if not label:
            raise ValidationError(f"{kind.required_field} is required")
        doc_id = doc_id or slugify(label)
        if not doc_id:
            raise ValidationError("Could not derive an ID for this item")

        now = now or now_utc()
        payload = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        payload.setdefault(kind.order_field, 0)
        payload.setdefault(kind.visibility_field, True)
        payload.update({"createdAt": now, "updatedAt": now})
        self._content.save(kind.collection, doc_id, payload)
        self._log(ActivityType.CREATE, kind, doc_id, f"Created {kind.name} item {label}", actor)
        return doc_id

    def update(self, kind: ContentKind, doc_id: str, data: dict[str, Any], *, actor: Actor, now: datetime | None = None) -> None:
        self.get(kind, doc_id)
        payload = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        if not payload:
            raise ValidationError("Nothing to update")
        payload["updatedAt"] = now or now_utc()
        self._content.update(kind.collection, doc_id, payload)
        self._log(ActivityType.UPDATE, kind, doc_id, f"Updated {kind.name} item {doc_id}", actor)

    def delete(self, kind: ContentKind, doc_id: str, *, actor: Actor) -> None:
        self.get(kind, doc_id)
        self._content.delete(kind.collection, doc_id)
        self._log(ActivityType.DELETE, kind, doc_id, f"Deleted {kind.name} item {doc_id}", actor)

    def _log(self, type: ActivityType, kind: ContentKind, doc_id: str, description: str, actor: Actor) -> None:
        self._activity.log_activity(
            type=type,
            action=f"{type.value}_{kind.name}",
            entity_type=kind.entity_type,
            entity_id=doc_id,
            description=description,
            actor=actor,
        )
