from __future__ import annotations

from src.idmc_registration.idmc_registration.firestore import collections
from src.idmc_registration.idmc_registration.stats.firestore_stats_repository import FirestoreStatsRepository
from tests.fakes import MemoryDocument


class _Collection:
    def __init__(self, docs):
        self._docs = docs

    def document(self, doc_id):
        return MemoryDocument(self._docs, doc_id)


class _Client:
    def __init__(self, data):
        self.data = data

    def collection(self, name):
        return _Collection(self.data.setdefault(name, {}))


def test_reads_the_conference_stats_document():
    client = _Client({collections.STATS: {collections.STATS_DOC: {"totalRegistrations": 12, "checkedIn": 4}}})

    assert FirestoreStatsRepository(client).get_stats() == {"totalRegistrations": 12, "checkedIn": 4}


def test_missing_stats_document_is_none():
    assert FirestoreStatsRepository(_Client({})).get_stats() is None
