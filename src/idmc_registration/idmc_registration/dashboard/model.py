from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DashboardStats:
    total_registrations: int = 0
    confirmed: int = 0
    pending_payment: int = 0
    pending_verification: int = 0
    # Confirmed plus pending-verification amounts.
    total_revenue: float = 0.0
    checked_in: int = 0


@dataclass(frozen=True)
class DailyRegistrations:
    date: str
    label: str
    registrations: int = 0
    revenue: float = 0.0


@dataclass(frozen=True)
class ChurchDelegates:
    name: str
    city: str
    delegate_count: int = 0
    registration_count: int = 0


@dataclass(frozen=True)
class ChurchStats:
    churches: tuple[ChurchDelegates, ...] = ()
    total_churches: int = 0
    total_delegates: int = 0


@dataclass(frozen=True)
class FoodChoiceCount:
    food_id: str
    name: str
    count: int = 0


@dataclass(frozen=True)
class FoodStats:
    distribution: tuple[FoodChoiceCount, ...] = ()
    total_with_choice: int = 0
    total_without_choice: int = 0
    total_attendees: int = 0


@dataclass(frozen=True)
class DownloadCount:
    download_id: str
    title: str
    download_count: int = 0
    status: str = ""


@dataclass(frozen=True)
class DownloadStats:
    items: tuple[DownloadCount, ...] = field(default_factory=tuple)
    total_downloads: int = 0
    total_files: int = 0
