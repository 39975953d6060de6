from __future__ import annotations

import pytest

from src.idmc_registration.idmc_registration.activity_log.service import ActivityLogService
from src.idmc_registration.idmc_registration.admins.model import Actor
from src.idmc_registration.idmc_registration.content.service import ContentService, slugify
from src.idmc_registration.idmc_registration.core.exceptions import NotFoundError, ValidationError
from tests.fakes import NOW, InMemoryActivityLogs, InMemoryContent

EDITOR = Actor(admin_id="admin-3", email="editor@idmc.org")


@pytest.fixture
def logs():
    return InMemoryActivityLogs()


@pytest.fixture
def service(logs):
    return ContentService(InMemoryContent(), ActivityLogService(logs))


@pytest.mark.parametrize(
    "value, slug",
    [
        ("Rev. Dr. Juan Dela Cruz", "rev-dr-juan-dela-cruz"),
        ("  What to bring?  ", "what-to-bring"),
        ("Plenary #1: All In!", "plenary-1-all-in"),
        ("", ""),
    ],
)
def test_slugify(value, slug):
    assert slugify(value) == slug


def test_unknown_kind():
    with pytest.raises(NotFoundError):
        ContentService.kind("recipes")


def test_save_derives_id_and_defaults(service, logs):
    speakers = ContentService.kind("speakers")
    doc_id = service.save(speakers, {"name": "Ptr. Ana Reyes", "id": "ignored"}, actor=EDITOR, now=NOW)

    assert doc_id == "ptr-ana-reyes"
    doc = service.get(speakers, doc_id)
    assert doc["isPublished"] is True
    assert doc["order"] == 0
    assert doc["createdAt"] == NOW
    (entry,) = logs.docs.values()
    assert entry["action"] == "create_speakers"
    assert entry["entityType"] == "speaker"


def test_save_requires_label(service):
    with pytest.raises(ValidationError):
        service.save(ContentService.kind("faq"), {"answer": "Yes"}, actor=EDITOR)


def test_list_published_filters_and_orders(service):
    faq = ContentService.kind("faq")
    service.save(faq, {"question": "Is lunch provided?", "order": 2}, actor=EDITOR, now=NOW)
    service.save(faq, {"question": "Where do I park?", "order": 1}, actor=EDITOR, now=NOW)
    service.save(faq, {"question": "Draft", "order": 0, "isPublished": False}, actor=EDITOR, now=NOW)

    assert [d["question"] for d in service.list_published(faq)] == ["Where do I park?", "Is lunch provided?"]
    assert len(service.list_all(faq)) == 3


def test_bank_accounts_use_is_active(service):
    banks = ContentService.kind("bank-accounts")
    service.save(banks, {"bankName": "BDO", "isActive": False}, actor=EDITOR, now=NOW)
    service.save(banks, {"bankName": "BPI"}, actor=EDITOR, now=NOW)

    assert [d["bankName"] for d in service.list_published(banks)] == ["BPI"]


def test_update_and_delete(service):
    faq = ContentService.kind("faq")
    doc_id = service.save(faq, {"question": "Dress code?"}, actor=EDITOR, now=NOW)

    service.update(faq, doc_id, {"answer": "Smart casual", "createdAt": "tampered"}, actor=EDITOR, now=NOW)
    doc = service.get(faq, doc_id)
    assert doc["answer"] == "Smart casual"
    assert doc["createdAt"] == NOW

    with pytest.raises(ValidationError):
        service.update(faq, doc_id, {"id": "x"}, actor=EDITOR)

    service.delete(faq, doc_id, actor=EDITOR)
    with pytest.raises(NotFoundError):
        service.get(faq, doc_id)
