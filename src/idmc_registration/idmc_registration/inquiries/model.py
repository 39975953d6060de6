from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import InquiryStatus


@dataclass(frozen=True)
class ContactInquiry:
    inquiry_id: str
    name: str
    email: str
    subject: str
    message: str
    status: InquiryStatus
    created_at: Optional[datetime] = None
    replied_at: Optional[datetime] = None
    replied_by: Optional[str] = None
