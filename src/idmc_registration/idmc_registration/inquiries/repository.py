from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import ContactInquiry


class InquiryRepository(Protocol):
    def add(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    def get_by_id(self, inquiry_id: str) -> Optional[ContactInquiry]:
        raise NotImplementedError

    def list_recent(self, *, status: Optional[str] = None, limit: int = 100) -> Sequence[ContactInquiry]:
        raise NotImplementedError

    def update(self, inquiry_id: str, fields: dict[str, Any]) -> None:
        raise NotImplementedError
