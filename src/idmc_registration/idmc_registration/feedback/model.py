from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class FeedbackResponse:
    feedback_id: str
    # Form answers keyed by field ID, as the feedback form submitted them.
    answers: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
