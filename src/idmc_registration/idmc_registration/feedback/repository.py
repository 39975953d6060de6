from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import FeedbackResponse


class FeedbackRepository(Protocol):
    def add(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    def get_by_id(self, feedback_id: str) -> Optional[FeedbackResponse]:
        raise NotImplementedError

    def list_recent(self) -> Sequence[FeedbackResponse]:
        """Newest ``createdAt`` first."""

        raise NotImplementedError

    def delete(self, feedback_id: str) -> None:
        raise NotImplementedError
