from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..activity_log.service import ActivityLogService
from ..admins.model import Actor
from ..common.datetime_utils import now_utc
from ..common.normalize import normalize_email
from ..common.validators import is_valid_email
from ..core.enums import ActivityType, EntityType, InquiryStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..functions.client import CallableFunctionsClient
from .model import ContactInquiry
from .repository import InquiryRepository

logger = logging.getLogger(__name__)


class InquiryService:
    def __init__(
        self,
        inquiries: InquiryRepository,
        functions: CallableFunctionsClient,
        activity: ActivityLogService,
    ):
        self._inquiries = inquiries
        self._functions = functions
        self._activity = activity

    def submit_contact_inquiry(
        self,
        *,
        name: str,
        email: str,
        subject: str,
        message: str,
        now: datetime | None = None,
    ) -> str:
        if not all((value or "").strip() for value in (name, email, subject, message)):
            raise ValidationError("All fields are required")
        if not is_valid_email(email):
            raise ValidationError("Invalid email address")

        return self._inquiries.add(
            {
                "name": name.strip(),
                "email": normalize_email(email),
                "subject": subject.strip(),
                "message": message.strip(),
                "status": InquiryStatus.NEW.value,
                "createdAt": now or now_utc(),
            }
        )

    def list_inquiries(self, *, status: Optional[str] = None, limit: int = 100) -> list[ContactInquiry]:
        return list(self._inquiries.list_recent(status=status, limit=limit))

    def _require(self, inquiry_id: str) -> ContactInquiry:
        inquiry = self._inquiries.get_by_id(inquiry_id)
        if not inquiry:
            raise NotFoundError(f"Inquiry {inquiry_id} not found")
        return inquiry

    def mark_as_read(self, inquiry_id: str) -> None:
        inquiry = self._require(inquiry_id)
        if inquiry.status == InquiryStatus.NEW:
            self._inquiries.update(inquiry_id, {"status": InquiryStatus.READ.value})

    def send_inquiry_reply(
        self,
        inquiry_id: str,
        *,
        subject: str,
        message: str,
        actor: Actor,
        now: datetime | None = None,
    ) -> None:
        """Email is sent by the ``sendInquiryReply`` callable; we record the outcome."""
        inquiry = self._require(inquiry_id)
        if not (subject or "").strip() or not (message or "").strip():
            raise ValidationError("Subject and message are required")

        self._functions.call(
            "sendInquiryReply",
            {"inquiryId": inquiry_id, "subject": subject.strip(), "message": message.strip()},
        )
        self._inquiries.update(
            inquiry_id,
            {"status": InquiryStatus.REPLIED.value, "repliedAt": now or now_utc(), "repliedBy": actor.admin_id},
        )
        self._activity.log_activity(
            type=ActivityType.UPDATE,
            action="reply_inquiry",
            entity_type=EntityType.INQUIRY,
            entity_id=inquiry_id,
            description=f"Replied to inquiry from {inquiry.email}",
            actor=actor,
        )
