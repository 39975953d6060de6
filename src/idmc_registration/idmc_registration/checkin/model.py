from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CheckInMethod


@dataclass(frozen=True)
class CheckInLogEntry:
    log_id: str
    registration_id: str
    attendee_index: Optional[int]
    attendee_name: str
    short_code: str
    method: CheckInMethod
    admin_id: str
    admin_name: str
    station_id: Optional[str]
    checked_in_at: datetime


@dataclass(frozen=True)
class CheckInStats:
    total_confirmed: int
    checked_in: int
    pending: int
    percentage: int
    total_attendees: int
    checked_in_attendees: int
    pending_attendees: int
    attendee_percentage: int


@dataclass(frozen=True)
class HourlyCheckIns:
    hour: int
    label: str
    count: int
