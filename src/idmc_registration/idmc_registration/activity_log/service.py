from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..admins.model import Actor
from ..common.datetime_utils import now_utc
from ..core.constants import ACTIVITY_PAGE_SIZE
from ..core.enums import ActivityType, EntityType
from .model import ActivityLogPage
from .repository import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityLogService:
    """Append-only audit trail of admin actions.

    Writing a log entry must never break the action being audited, so
    ``log_activity`` swallows storage errors (they are logged, not raised).
    """

    def __init__(self, logs: ActivityLogRepository):
        self._logs = logs

    def log_activity(
        self,
        *,
        type: ActivityType,
        action: str,
        entity_type: EntityType,
        entity_id: Optional[str] = None,
        description: str = "",
        actor: Optional[Actor] = None,
        metadata: Optional[dict[str, Any]] = None,
        now: datetime | None = None,
    ) -> Optional[str]:
        data = {
            "type": type.value,
            "action": action,
            "entityType": entity_type.value,
            "entityId": entity_id,
            "description": description,
            "adminId": actor.admin_id if actor else None,
            "adminEmail": actor.email if actor else None,
            "metadata": metadata or {},
            "timestamp": now or now_utc(),
        }
        try:
            return self._logs.add(data)
        except Exception:
            logger.exception("Failed to write activity log (%s %s %s)", type.value, entity_type.value, entity_id)
            return None

    def get_activity_logs(
        self,
        *,
        page_size: int = ACTIVITY_PAGE_SIZE,
        start_after: Optional[str] = None,
        type: Optional[str] = None,
        entity_type: Optional[str] = None,
        admin_id: Optional[str] = None,
    ) -> ActivityLogPage:
        page_size = max(1, int(page_size))
        filters = {"type": type, "entity_type": entity_type, "admin_id": admin_id}
        rows = list(self._logs.list_entries(limit=page_size + 1, start_after=start_after, filters=filters))
        has_more = len(rows) > page_size
        entries = rows[:page_size]
        return ActivityLogPage(entries=entries, has_more=has_more, last_id=entries[-1].log_id if entries else None)

    def get_activity_logs_count(self, *, type: Optional[str] = None, entity_type: Optional[str] = None) -> int:
        return self._logs.count(filters={"type": type, "entity_type": entity_type})

    def get_admin_recent_activity(self, admin_id: str, *, limit: int = 10):
        return list(self._logs.list_entries(limit=int(limit), filters={"admin_id": admin_id}))
