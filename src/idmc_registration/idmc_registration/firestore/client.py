from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud import firestore as gcloud_firestore

from ..core.constants import FIRESTORE_BATCH_LIMIT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FirestoreConfig:
    project_id: str
    credentials_path: Optional[str] = None
    emulator_host: Optional[str] = None
    app_name: str = "idmc-registration"


def create_client(config: FirestoreConfig) -> gcloud_firestore.Client:
    """Build a Firestore client for ``config``.

    The firebase app is registered under its own name and the client is
    returned to the caller; nothing is stored at module level.
    """

    if config.emulator_host:
        os.environ["FIRESTORE_EMULATOR_HOST"] = config.emulator_host
        logger.info("Using Firestore emulator at %s (project=%s)", config.emulator_host, config.project_id)
        return gcloud_firestore.Client(project=config.project_id)

    try:
        app = firebase_admin.get_app(config.app_name)
    except ValueError:
        if config.credentials_path:
            cred = credentials.Certificate(config.credentials_path)
        else:
            cred = credentials.ApplicationDefault()
        app = firebase_admin.initialize_app(cred, {"projectId": config.project_id}, name=config.app_name)
        logger.info("Initialized firebase app %s (project=%s)", config.app_name, config.project_id)

    return firestore.client(app)


def snapshot_to_dict(snapshot) -> Optional[dict[str, Any]]:
    """Document data plus its ``id``; None when the document does not exist."""
    if snapshot is None or not snapshot.exists:
        return None
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    return data


def commit_in_batches(client, operations: Iterable[tuple[str, Any, Optional[dict]]]) -> int:
    """Apply ``(op, doc_ref, data)`` tuples in batches under Firestore's write limit.

    ``op`` is one of ``set``, ``update`` or ``delete``. Returns the number of
    operations committed.
    """

    batch = client.batch()
    pending = 0
    total = 0
    for op, ref, data in operations:
        if op == "set":
            batch.set(ref, data)
        elif op == "update":
            batch.update(ref, data)
        elif op == "delete":
            batch.delete(ref)
        else:
            raise ValueError(f"Unknown batch operation: {op}")
        pending += 1
        total += 1
        if pending >= FIRESTORE_BATCH_LIMIT:
            batch.commit()
            batch = client.batch()
            pending = 0

    if pending:
        batch.commit()
    return total
