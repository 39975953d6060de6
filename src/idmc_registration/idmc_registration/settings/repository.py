from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import PricingTier


class SettingsRepository(Protocol):
    def get_conference_settings(self) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def merge_conference_settings(self, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def list_pricing_tiers(self) -> Sequence[PricingTier]:
        """Ordered by start date."""

        raise NotImplementedError

    def create_pricing_tier(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    def update_pricing_tier(self, tier_id: str, data: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_pricing_tier(self, tier_id: str) -> None:
        raise NotImplementedError
