from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.idmc_registration.idmc_registration.activity_log.service import ActivityLogService
from src.idmc_registration.idmc_registration.core.exceptions import ValidationError
from src.idmc_registration.idmc_registration.settings.service import SettingsService
from tests.fakes import InMemoryActivityLogs, InMemorySettings

TIERS = {
    "early": {"name": "Early Bird", "regularPrice": 2000, "studentPrice": 1200, "startDate": "2025-10-01", "endDate": "2025-12-31"},
    "regular": {"name": "Regular", "regularPrice": 2500, "studentPrice": 1500, "startDate": "2026-01-01", "endDate": "2026-03-27"},
}


class BrokenSettings(InMemorySettings):
    def get_conference_settings(self):
        raise RuntimeError("permission denied")


def test_defaults_when_nothing_stored():
    settings = SettingsService(InMemorySettings()).get_conference_settings()
    assert settings["title"] == "IDMC 2026"
    assert settings["registrationOpen"] is True
    assert settings["waitlist"]["enabled"] is False


def test_stored_values_merge_over_defaults():
    repo = InMemorySettings({"venue": {"name": "Main Hall"}, "registrationOpen": False})
    service = SettingsService(repo)

    settings = service.get_conference_settings()
    assert settings["venue"]["name"] == "Main Hall"
    assert settings["venue"]["address"].startswith("Daang Hari Road")
    assert service.is_registration_open() is False


def test_unreadable_settings_fall_back_to_defaults():
    assert SettingsService(BrokenSettings()).get_conference_settings()["timezone"] == "Asia/Manila"


def test_update_strips_protected_keys_and_logs():
    repo = InMemorySettings()
    logs = InMemoryActivityLogs()
    service = SettingsService(repo, ActivityLogService(logs))

    result = service.update_conference_settings({"conferenceCapacity": 400, "id": "x", "updatedAt": "now"})

    assert repo.stored == {"conferenceCapacity": 400}
    assert result["conferenceCapacity"] == 400
    (entry,) = logs.docs.values()
    assert entry["metadata"] == {"fields": ["conferenceCapacity"]}


def test_update_requires_data():
    with pytest.raises(ValidationError):
        SettingsService(InMemorySettings()).update_conference_settings({})


@pytest.mark.parametrize(
    "day, expected",
    [
        (datetime(2025, 12, 31, 12, tzinfo=timezone.utc), "Early Bird"),
        (datetime(2026, 1, 1, tzinfo=timezone.utc), "Regular"),
        (datetime(2026, 3, 27, 23, tzinfo=timezone.utc), "Regular"),
        (datetime(2026, 3, 28, tzinfo=timezone.utc), None),
    ],
)
def test_active_tier_end_date_inclusive(day, expected):
    tier = SettingsService(InMemorySettings(tiers=TIERS)).get_active_pricing_tier(now=day)
    assert (tier.name if tier else None) == expected


def test_inactive_tier_is_skipped():
    tiers = {"early": dict(TIERS["early"], isActive=False)}
    service = SettingsService(InMemorySettings(tiers=tiers))
    assert service.get_active_pricing_tier(now=datetime(2025, 11, 1, tzinfo=timezone.utc)) is None


def test_student_price():
    tier = SettingsService(InMemorySettings(tiers=TIERS)).get_pricing_tiers()[0]
    assert tier.price_for("student") == 1200
    assert tier.price_for("student_senior") == 1200
    assert tier.price_for("regular") == 2000
    assert tier.price_for(None) == 2000


def test_create_pricing_tier_normalizes():
    repo = InMemorySettings()
    tier_id = SettingsService(repo).create_pricing_tier(
        {"name": " Late ", "regularPrice": "3000", "studentPrice": 1800, "startDate": "2026-03-01T00:00:00Z", "endDate": "2026-03-27"}
    )
    assert repo.tiers[tier_id] == {
        "name": "Late",
        "regularPrice": 3000.0,
        "studentPrice": 1800.0,
        "startDate": "2026-03-01",
        "endDate": "2026-03-27",
        "isActive": True,
    }


@pytest.mark.parametrize(
    "changes",
    [
        {"name": ""},
        {"regularPrice": "free"},
        {"studentPrice": -1},
        {"endDate": "2025-09-01"},
        {"startDate": "03/01/2026"},
    ],
)
def test_invalid_pricing_tier(changes):
    with pytest.raises(ValidationError):
        SettingsService(InMemorySettings()).create_pricing_tier(dict(TIERS["early"], **changes))


def test_update_and_delete_pricing_tier():
    repo = InMemorySettings(tiers=TIERS)
    service = SettingsService(repo)

    service.update_pricing_tier("regular", dict(TIERS["regular"], regularPrice=2700))
    assert repo.tiers["regular"]["regularPrice"] == 2700.0

    service.delete_pricing_tier("early")
    assert [t.tier_id for t in service.get_pricing_tiers()] == ["regular"]
