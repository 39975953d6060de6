from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Session


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def list_workshops(self) -> Sequence[Session]:
        raise NotImplementedError

    def adjust_registered_count(self, session_id: str, delta: int) -> int:
        """Atomically add ``delta`` (floored at 0); returns the new count."""

        raise NotImplementedError
