from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Admin


class AdminRepository(Protocol):
    def get_by_id(self, admin_id: str) -> Optional[Admin]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Admin]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Admin]:
        raise NotImplementedError

    def create(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    def update(self, admin_id: str, fields: dict[str, Any]) -> None:
        raise NotImplementedError
