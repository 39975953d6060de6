from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

DEFAULT_SETTINGS: dict[str, Any] = {
    "title": "IDMC 2026",
    "theme": "All In for Jesus and His Kingdom",
    "tagline": "Intentional Disciple-Making Churches Conference",
    "year": 2026,
    "startDate": "2026-03-28",
    "endDate": "2026-03-28",
    "startTime": "07:00",
    "endTime": "17:30",
    "timezone": "Asia/Manila",
    "venue": {
        "name": "GCF South Metro",
        "address": "Daang Hari Road, Versailles, Almanza Dos, Las Piñas City 1750 Philippines",
    },
    "contact": {
        "email": "email@gcfsouthmetro.org",
        "mobile": "0917 650 0011",
        "website": "https://gcfsouthmetro.org",
    },
    "registrationOpen": True,
    "conferenceCapacity": None,
    "waitlist": {"enabled": False, "capacity": None, "offerHours": 48},
}


def default_settings() -> dict[str, Any]:
    return copy.deepcopy(DEFAULT_SETTINGS)


@dataclass(frozen=True)
class PricingTier:
    tier_id: str
    name: str
    regular_price: float
    student_price: float
    start_date: date
    end_date: date
    is_active: bool = True

    def applies_on(self, day: date) -> bool:
        # end date is inclusive
        return self.is_active and self.start_date <= day <= self.end_date

    def price_for(self, category: Optional[str]) -> float:
        return self.student_price if (category or "").lower().startswith("student") else self.regular_price
