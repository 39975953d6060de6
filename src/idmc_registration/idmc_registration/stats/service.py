from __future__ import annotations

import copy
import logging
from typing import Any

from ..functions.client import CallableFunctionsClient
from .repository import StatsRepository

logger = logging.getLogger(__name__)

DEFAULT_STATS: dict[str, Any] = {
    "registeredAttendeeCount": 0,
    "workshopCounts": {},
    "lastSyncedAt": None,
    "lastUpdatedAt": None,
}


class StatsService:
    """Aggregates maintained by the ``triggerStatsSync`` cloud function."""

    def __init__(self, stats: StatsRepository, functions: CallableFunctionsClient):
        self._stats = stats
        self._functions = functions

    def get_conference_stats(self) -> dict[str, Any]:
        result = copy.deepcopy(DEFAULT_STATS)
        try:
            stored = self._stats.get_stats()
        except Exception:
            logger.exception("Failed to read conference stats, using defaults")
            stored = None
        result.update(stored or {})
        return result

    def trigger_stats_sync(self) -> Any:
        logger.info("Triggering stats sync")
        return self._functions.call("triggerStatsSync", {})
