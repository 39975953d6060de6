from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..activity_log.service import ActivityLogService
from ..admins.model import Actor
from ..common.datetime_utils import now_utc
from ..core.enums import ActivityType, EntityType
from ..core.exceptions import NotFoundError, ValidationError
from .model import FeedbackResponse
from .repository import FeedbackRepository

logger = logging.getLogger(__name__)

RESERVED_FIELDS = {"id", "createdAt"}


def clean_answer(value: Any) -> Any:
    """Normalize one submitted answer; None means "leave it out".

    Strings are trimmed and blank ones dropped. Checkbox groups arrive as
    ``{option: bool}`` and keep only the ticked options.
    """

    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, bool):
        return value
    if isinstance(value, dict):
        ticked = {str(k): True for k, v in value.items() if v is True}
        return ticked or None
    return value


class FeedbackService:
    """Post-conference feedback form submissions."""

    def __init__(self, feedback: FeedbackRepository, activity: ActivityLogService):
        self._feedback = feedback
        self._activity = activity

    def submit_feedback(self, data: Any, *, now: datetime | None = None) -> str:
        if not isinstance(data, dict):
            raise ValidationError("Invalid feedback data")

        answers = {}
        for key, value in data.items():
            if key in RESERVED_FIELDS:
                continue
            cleaned = clean_answer(value)
            if cleaned is not None:
                answers[str(key)] = cleaned
        if not answers:
            raise ValidationError("Feedback has no answers")

        feedback_id = self._feedback.add({**answers, "createdAt": now or now_utc()})
        logger.info("Received feedback %s with %d answers", feedback_id, len(answers))
        return feedback_id

    def list_feedback_responses(self) -> list[FeedbackResponse]:
        return list(self._feedback.list_recent())

    def delete_feedback_response(self, feedback_id: str, *, actor: Optional[Actor] = None) -> None:
        if not (feedback_id or "").strip():
            raise ValidationError("Invalid feedback ID")
        if not self._feedback.get_by_id(feedback_id):
            raise NotFoundError(f"Feedback {feedback_id} not found")

        self._feedback.delete(feedback_id)
        if actor is not None:
            self._activity.log_activity(
                type=ActivityType.DELETE,
                action="delete_feedback",
                entity_type=EntityType.FEEDBACK,
                entity_id=feedback_id,
                description=f"Deleted feedback response: {feedback_id}",
                actor=actor,
            )
