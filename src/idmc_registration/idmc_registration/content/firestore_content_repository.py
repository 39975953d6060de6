from __future__ import annotations

from typing import Any, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from ..firestore.client import snapshot_to_dict


class FirestoreContentRepository:
    def __init__(self, client):
        self._client = client

    def list_ordered(self, collection: str, order_field: str):
        return [snapshot_to_dict(s) for s in self._client.collection(collection).order_by(order_field).stream()]

    def list_visible(self, collection: str, visibility_field: str, order_field: str):
        query = (
            self._client.collection(collection)
            .where(filter=FieldFilter(visibility_field, "==", True))
            .order_by(order_field)
        )
        return [snapshot_to_dict(s) for s in query.stream()]

    def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        if not doc_id:
            return None
        return snapshot_to_dict(self._client.collection(collection).document(doc_id).get())

    def save(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._client.collection(collection).document(doc_id).set(data)

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self._client.collection(collection).document(doc_id).update(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._client.collection(collection).document(doc_id).delete()
