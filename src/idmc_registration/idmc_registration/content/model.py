from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import EntityType
from ..firestore import collections


@dataclass(frozen=True)
class ContentKind:
    """A simple ordered collection managed from the admin pages."""

    name: str
    collection: str
    entity_type: EntityType
    visibility_field: str = "isPublished"
    order_field: str = "order"
    required_field: str = "title"


CONTENT_KINDS: dict[str, ContentKind] = {
    kind.name: kind
    for kind in (
        ContentKind("speakers", collections.SPEAKERS, EntityType.SPEAKER, required_field="name"),
        ContentKind("sessions", collections.SESSIONS, EntityType.SESSION),
        ContentKind("faq", collections.FAQ, EntityType.FAQ, required_field="question"),
        ContentKind("downloads", collections.DOWNLOADS, EntityType.SETTINGS),
        ContentKind("what-to-bring", collections.WHAT_TO_BRING, EntityType.SETTINGS, required_field="text"),
        ContentKind("food-menu", collections.FOOD_MENU, EntityType.SETTINGS, required_field="name"),
        ContentKind(
            "bank-accounts",
            collections.BANK_ACCOUNTS,
            EntityType.SETTINGS,
            visibility_field="isActive",
            required_field="bankName",
        ),
    )
}
