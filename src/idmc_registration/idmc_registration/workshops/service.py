from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Optional

from .model import Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def has_available_capacity(workshop: Optional[Session]) -> bool:
    if workshop is None:
        return False
    if workshop.capacity is None:
        return True
    return workshop.registered_count < workshop.capacity


def get_remaining_capacity(workshop: Optional[Session]) -> Optional[int]:
    """None means unlimited."""
    if workshop is None or workshop.capacity is None:
        return None
    return max(0, workshop.capacity - workshop.registered_count)


def group_workshops_by_time_slot(workshops: Iterable[Session]) -> dict[str, list[Session]]:
    groups: dict[str, list[Session]] = defaultdict(list)
    for w in workshops:
        groups[w.time_slot or "unspecified"].append(w)
    return dict(groups)


class WorkshopService:
    def __init__(self, sessions: SessionRepository):
        self._sessions = sessions

    def get_workshops(self):
        return list(self._sessions.list_workshops())

    def get_workshop_by_id(self, workshop_id: str) -> Optional[Session]:
        return self._sessions.get_by_id(workshop_id)

    def increment_workshop_count(self, workshop_id: str, by: int = 1) -> int:
        return self._sessions.adjust_registered_count(workshop_id, abs(int(by)))

    def decrement_workshop_count(self, workshop_id: str, by: int = 1) -> int:
        return self._sessions.adjust_registered_count(workshop_id, -abs(int(by)))

    def adjust_many(self, workshop_ids: Iterable[str], delta: int) -> None:
        """Best effort: a failed count update is logged, never raised."""

        for workshop_id in workshop_ids:
            try:
                self._sessions.adjust_registered_count(workshop_id, delta)
            except Exception:
                logger.exception("Failed to adjust workshop %s count by %s", workshop_id, delta)
