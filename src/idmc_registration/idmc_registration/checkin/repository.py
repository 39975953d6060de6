from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence

from .model import CheckInLogEntry


class CheckInLogRepository(Protocol):
    def add(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    def list_recent(self, *, limit: int) -> Sequence[CheckInLogEntry]:
        raise NotImplementedError

    def list_between(self, *, start: datetime, end: datetime) -> Sequence[CheckInLogEntry]:
        raise NotImplementedError
