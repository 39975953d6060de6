from __future__ import annotations

from typing import Any, Optional

from ..common.datetime_utils import now_utc, parse_iso_date
from ..firestore import collections
from .model import PricingTier


def tier_from_dict(tier_id: str, data: dict[str, Any]) -> PricingTier:
    return PricingTier(
        tier_id=tier_id,
        name=str(data.get("name") or ""),
        regular_price=float(data.get("regularPrice") or 0),
        student_price=float(data.get("studentPrice") or 0),
        start_date=parse_iso_date(str(data["startDate"])[:10]),
        end_date=parse_iso_date(str(data["endDate"])[:10]),
        is_active=bool(data.get("isActive", True)),
    )


class FirestoreSettingsRepository:
    def __init__(self, client):
        self._client = client

    @property
    def _settings_ref(self):
        return self._client.collection(collections.CONFERENCES).document(collections.CONFERENCE_SETTINGS_DOC)

    @property
    def _tiers(self):
        return self._settings_ref.collection(collections.PRICING_TIERS)

    def get_conference_settings(self) -> Optional[dict[str, Any]]:
        snap = self._settings_ref.get()
        return snap.to_dict() if snap.exists else None

    def merge_conference_settings(self, data: dict[str, Any]) -> None:
        self._settings_ref.set({**data, "updatedAt": now_utc()}, merge=True)

    def list_pricing_tiers(self):
        return [tier_from_dict(s.id, s.to_dict() or {}) for s in self._tiers.order_by("startDate").stream()]

    def create_pricing_tier(self, data: dict[str, Any]) -> str:
        now = now_utc()
        _, ref = self._tiers.add({**data, "createdAt": now, "updatedAt": now})
        return ref.id

    def update_pricing_tier(self, tier_id: str, data: dict[str, Any]) -> None:
        self._tiers.document(tier_id).update({**data, "updatedAt": now_utc()})

    def delete_pricing_tier(self, tier_id: str) -> None:
        self._tiers.document(tier_id).delete()
