from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import now_utc
from ..content.repository import ContentRepository
from ..core.constants import DASHBOARD_CHART_DAYS, RECENT_REGISTRATIONS_LIMIT
from ..core.enums import RegistrationStatus
from ..core.exceptions import ValidationError
from ..firestore import collections
from ..registrations.model import Registration
from ..registrations.repository import RegistrationRepository
from .model import (
    ChurchDelegates,
    ChurchStats,
    DailyRegistrations,
    DashboardStats,
    DownloadCount,
    DownloadStats,
    FoodChoiceCount,
    FoodStats,
)

logger = logging.getLogger(__name__)

# Registrations whose amount counts as revenue and whose delegates are expected on site.
COUNTED_STATUSES = (RegistrationStatus.CONFIRMED, RegistrationStatus.PENDING_VERIFICATION)
UNKNOWN_CHURCH = "Unknown Church"


def day_label(day) -> str:
    """``Mar 5`` style label for chart axes."""
    return f"{day:%b} {day.day}"


class DashboardService:
    """Admin dashboard figures computed from the registrations collection."""

    def __init__(
        self,
        registrations: RegistrationRepository,
        content: ContentRepository,
        *,
        timezone: str = "Asia/Manila",
    ):
        self._registrations = registrations
        self._content = content
        self._tz = ZoneInfo(timezone)

    def _counted(self) -> list[Registration]:
        return list(self._registrations.list_by_status(COUNTED_STATUSES))

    def get_dashboard_stats(self) -> DashboardStats:
        try:
            rows = list(self._registrations.list_all())
        except Exception:
            logger.exception("Failed to load registrations for dashboard stats")
            return DashboardStats()

        by_status = Counter(r.status for r in rows)
        return DashboardStats(
            total_registrations=len(rows),
            confirmed=by_status[RegistrationStatus.CONFIRMED],
            pending_payment=by_status[RegistrationStatus.PENDING_PAYMENT],
            pending_verification=by_status[RegistrationStatus.PENDING_VERIFICATION],
            total_revenue=sum(r.total_amount for r in rows if r.status in COUNTED_STATUSES),
            checked_in=sum(1 for r in rows if r.status == RegistrationStatus.CONFIRMED and r.checked_in),
        )

    def get_recent_registrations(self, count: int = RECENT_REGISTRATIONS_LIMIT) -> list[Registration]:
        return list(self._registrations.list_all(limit=max(1, int(count))))

    def get_registration_chart_data(
        self,
        days: int = DASHBOARD_CHART_DAYS,
        *,
        now: Optional[datetime] = None,
    ) -> list[DailyRegistrations]:
        """One bucket per local calendar day, oldest first, ending today."""
        if days < 1:
            raise ValidationError("days must be at least 1")
        today = (now or now_utc()).astimezone(self._tz).date()
        first = today - timedelta(days=days - 1)
        registrations = {first + timedelta(days=i): 0 for i in range(days)}
        revenue = {day: 0.0 for day in registrations}

        for r in self._registrations.list_all():
            if r.created_at is None:
                continue
            day = r.created_at.astimezone(self._tz).date()
            if day not in registrations:
                continue
            registrations[day] += 1
            if r.status in COUNTED_STATUSES:
                revenue[day] += r.total_amount

        return [
            DailyRegistrations(date=day.isoformat(), label=day_label(day), registrations=count, revenue=revenue[day])
            for day, count in registrations.items()
        ]

    def get_church_stats(self, limit: Optional[int] = None) -> ChurchStats:
        churches: dict[tuple[str, str], ChurchDelegates] = {}
        for r in self._counted():
            key = (r.church.name or UNKNOWN_CHURCH, r.church.city)
            current = churches.get(key) or ChurchDelegates(name=key[0], city=key[1])
            churches[key] = ChurchDelegates(
                name=current.name,
                city=current.city,
                delegate_count=current.delegate_count + r.total_attendees,
                registration_count=current.registration_count + 1,
            )

        ranked = sorted(churches.values(), key=lambda c: c.delegate_count, reverse=True)
        return ChurchStats(
            churches=tuple(ranked[:limit] if limit else ranked),
            total_churches=len(ranked),
            total_delegates=sum(c.delegate_count for c in ranked),
        )

    def get_food_stats(self) -> FoodStats:
        choices: Counter[str] = Counter()
        without = 0
        for r in self._counted():
            for attendee in r.attendees:
                if attendee.food_choice:
                    choices[attendee.food_choice] += 1
                else:
                    without += 1

        names = {
            item["id"]: item.get("name") or item["id"]
            for item in self._content.list_ordered(collections.FOOD_MENU, "order")
        }
        distribution = tuple(
            FoodChoiceCount(food_id=food_id, name=names.get(food_id, food_id), count=count)
            for food_id, count in choices.most_common()
        )
        with_choice = sum(choices.values())
        return FoodStats(
            distribution=distribution,
            total_with_choice=with_choice,
            total_without_choice=without,
            total_attendees=with_choice + without,
        )

    def get_download_stats(self) -> DownloadStats:
        items = tuple(
            DownloadCount(
                download_id=item["id"],
                title=str(item.get("title") or ""),
                download_count=int(item.get("downloadCount") or 0),
                status=str(item.get("status") or ""),
            )
            for item in self._content.list_ordered(collections.DOWNLOADS, "order")
        )
        return DownloadStats(
            items=items,
            total_downloads=sum(i.download_count for i in items),
            total_files=len(items),
        )
