from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence


class ContentRepository(Protocol):
    def list_ordered(self, collection: str, order_field: str) -> Sequence[dict[str, Any]]:
        raise NotImplementedError

    def list_visible(self, collection: str, visibility_field: str, order_field: str) -> Sequence[dict[str, Any]]:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def save(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError
