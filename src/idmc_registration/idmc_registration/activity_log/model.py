from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import ActivityType, EntityType


@dataclass(frozen=True)
class ActivityLogEntry:
    log_id: str
    type: ActivityType
    action: str
    entity_type: EntityType
    entity_id: Optional[str]
    description: str
    admin_id: Optional[str]
    admin_email: Optional[str]
    timestamp: datetime
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ActivityLogPage:
    entries: list[ActivityLogEntry]
    has_more: bool
    last_id: Optional[str]
