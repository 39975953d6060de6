from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import AdminRole, AdminStatus


@dataclass(frozen=True)
class Admin:
    admin_id: str
    email: str
    display_name: str
    role: AdminRole
    status: AdminStatus
    permissions: dict[str, bool] = field(default_factory=dict)
    password_hash: Optional[str] = None
    invitation_token_hash: Optional[str] = None
    invitation_expires_at: Optional[datetime] = None
    invited_by: Optional[str] = None
    invited_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == AdminStatus.ACTIVE


@dataclass(frozen=True)
class Actor:
    """Who performed an action; stored in audit fields and activity logs."""

    admin_id: str
    email: str = ""
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or self.email or self.admin_id
