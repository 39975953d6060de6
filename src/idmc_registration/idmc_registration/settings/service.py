from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from ..admins.model import Actor
from ..activity_log.service import ActivityLogService
from ..common.datetime_utils import now_utc, parse_iso_date
from ..common.validators import require_non_empty
from ..core.enums import ActivityType, EntityType
from ..core.exceptions import ValidationError
from .model import PricingTier, default_settings
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class SettingsService:
    def __init__(self, settings: SettingsRepository, activity: ActivityLogService | None = None):
        self._settings = settings
        self._activity = activity

    def get_conference_settings(self) -> dict[str, Any]:
        """Stored settings layered over the defaults; defaults alone if unreadable."""
        try:
            stored = self._settings.get_conference_settings()
        except Exception:
            logger.exception("Failed to read conference settings, using defaults")
            stored = None
        return _deep_merge(default_settings(), stored or {})

    def update_conference_settings(self, data: dict[str, Any], *, actor: Optional[Actor] = None) -> dict[str, Any]:
        if not isinstance(data, dict) or not data:
            raise ValidationError("No settings to update")
        data = {k: v for k, v in data.items() if k not in {"id", "createdAt", "updatedAt"}}
        self._settings.merge_conference_settings(data)
        if self._activity:
            self._activity.log_activity(
                type=ActivityType.SETTINGS,
                action="update_settings",
                entity_type=EntityType.SETTINGS,
                entity_id="conference-settings",
                description="Updated conference settings",
                actor=actor,
                metadata={"fields": sorted(data)},
            )
        return self.get_conference_settings()

    def is_registration_open(self) -> bool:
        return bool(self.get_conference_settings().get("registrationOpen", True))

    # ---- pricing tiers ----

    def get_pricing_tiers(self) -> list[PricingTier]:
        return list(self._settings.list_pricing_tiers())

    @staticmethod
    def _tier_payload(data: dict[str, Any]) -> dict[str, Any]:
        name = require_non_empty(data.get("name"), "Tier name")
        try:
            start = parse_iso_date(str(data.get("startDate") or "")[:10])
            end = parse_iso_date(str(data.get("endDate") or "")[:10])
            regular = float(data.get("regularPrice"))
            student = float(data.get("studentPrice"))
        except (TypeError, ValueError):
            raise ValidationError("Pricing tier needs valid prices and YYYY-MM-DD dates")
        if end < start:
            raise ValidationError("Pricing tier end date is before its start date")
        if regular < 0 or student < 0:
            raise ValidationError("Prices cannot be negative")
        return {
            "name": name,
            "regularPrice": regular,
            "studentPrice": student,
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "isActive": bool(data.get("isActive", True)),
        }

    def create_pricing_tier(self, data: dict[str, Any], *, actor: Optional[Actor] = None) -> str:
        payload = self._tier_payload(data)
        tier_id = self._settings.create_pricing_tier(payload)
        if self._activity:
            self._activity.log_activity(
                type=ActivityType.CREATE,
                action="create_pricing_tier",
                entity_type=EntityType.PRICING,
                entity_id=tier_id,
                description=f"Created pricing tier {payload['name']}",
                actor=actor,
            )
        return tier_id

    def update_pricing_tier(self, tier_id: str, data: dict[str, Any], *, actor: Optional[Actor] = None) -> None:
        payload = self._tier_payload(data)
        self._settings.update_pricing_tier(tier_id, payload)
        if self._activity:
            self._activity.log_activity(
                type=ActivityType.UPDATE,
                action="update_pricing_tier",
                entity_type=EntityType.PRICING,
                entity_id=tier_id,
                description=f"Updated pricing tier {payload['name']}",
                actor=actor,
            )

    def delete_pricing_tier(self, tier_id: str, *, actor: Optional[Actor] = None) -> None:
        self._settings.delete_pricing_tier(tier_id)
        if self._activity:
            self._activity.log_activity(
                type=ActivityType.DELETE,
                action="delete_pricing_tier",
                entity_type=EntityType.PRICING,
                entity_id=tier_id,
                description="Deleted pricing tier",
                actor=actor,
            )

    def get_active_pricing_tier(self, *, now: datetime | None = None) -> Optional[PricingTier]:
        today = (now or now_utc()).date()
        for tier in self.get_pricing_tiers():
            if tier.applies_on(today):
                return tier
        return None
