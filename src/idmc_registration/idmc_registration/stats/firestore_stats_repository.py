from __future__ import annotations

from typing import Any, Optional

from ..firestore import collections


class FirestoreStatsRepository:
    def __init__(self, client):
        self._client = client

    def get_stats(self) -> Optional[dict[str, Any]]:
        snap = self._client.collection(collections.STATS).document(collections.STATS_DOC).get()
        return snap.to_dict() if snap.exists else None
