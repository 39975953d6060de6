from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Session:
    """A program session; workshops additionally carry capacity and a time slot."""

    session_id: str
    title: str
    session_type: str = "plenary"
    day: Optional[str] = None
    time: Optional[str] = None
    order: int = 0
    is_published: bool = True
    capacity: Optional[int] = None
    registered_count: int = 0
    time_slot: Optional[str] = None
    track: Optional[str] = None

    @property
    def is_workshop(self) -> bool:
        return self.session_type == "workshop"


@dataclass(frozen=True)
class WorkshopAttendee:
    registration_id: str
    short_code: str
    attendee_index: int
    first_name: str
    last_name: str
    email: str
    cellphone: str
    church_name: str
    ministry_role: str
    category: str
    checked_in: bool
    is_primary: bool
