from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import ActivityLogEntry


class ActivityLogRepository(Protocol):
    def add(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    def list_entries(
        self,
        *,
        limit: int,
        start_after: Optional[str] = None,
        filters: Optional[dict[str, str]] = None,
    ) -> Sequence[ActivityLogEntry]:
        """Newest first."""

        raise NotImplementedError

    def count(self, *, filters: Optional[dict[str, str]] = None) -> int:
        raise NotImplementedError
