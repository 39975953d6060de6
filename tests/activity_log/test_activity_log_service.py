from __future__ import annotations

from datetime import timedelta

from src.idmc_registration.idmc_registration.activity_log.service import ActivityLogService
from src.idmc_registration.idmc_registration.admins.model import Actor
from src.idmc_registration.idmc_registration.core.enums import ActivityType, EntityType
from tests.fakes import NOW, InMemoryActivityLogs

ALICE = Actor(admin_id="admin-1", email="alice@idmc.org")
BOB = Actor(admin_id="admin-2", email="bob@idmc.org")


def _seed(service, count, actor=ALICE, type=ActivityType.UPDATE):
    for i in range(count):
        service.log_activity(
            type=type,
            action="update_settings",
            entity_type=EntityType.SETTINGS,
            description=f"change {i}",
            actor=actor,
            now=NOW + timedelta(minutes=i),
        )


def test_log_activity_records_actor():
    logs = InMemoryActivityLogs()
    log_id = ActivityLogService(logs).log_activity(
        type=ActivityType.APPROVE,
        action="approve_payment",
        entity_type=EntityType.REGISTRATION,
        entity_id="REG-2026-A3K7MN",
        actor=ALICE,
        now=NOW,
    )

    doc = logs.docs[log_id]
    assert doc["type"] == "approve"
    assert doc["adminEmail"] == "alice@idmc.org"
    assert doc["metadata"] == {}
    assert doc["timestamp"] == NOW


def test_storage_failure_is_swallowed():
    service = ActivityLogService(InMemoryActivityLogs(fail=True))
    assert service.log_activity(type=ActivityType.LOGIN, action="login", entity_type=EntityType.USER, actor=ALICE) is None


def test_paging_newest_first():
    service = ActivityLogService(InMemoryActivityLogs())
    _seed(service, 5)

    first = service.get_activity_logs(page_size=2)
    assert [e.description for e in first.entries] == ["change 4", "change 3"]
    assert first.has_more

    second = service.get_activity_logs(page_size=2, start_after=first.last_id)
    assert [e.description for e in second.entries] == ["change 2", "change 1"]

    last = service.get_activity_logs(page_size=2, start_after=second.last_id)
    assert [e.description for e in last.entries] == ["change 0"]
    assert not last.has_more


def test_filters_and_count():
    service = ActivityLogService(InMemoryActivityLogs())
    _seed(service, 3, actor=ALICE)
    _seed(service, 2, actor=BOB, type=ActivityType.CHECKIN)

    assert service.get_activity_logs_count() == 5
    assert service.get_activity_logs_count(type="checkin") == 2
    page = service.get_activity_logs(type="update")
    assert len(page.entries) == 3
    assert {e.admin_id for e in service.get_admin_recent_activity("admin-2")} == {"admin-2"}


def test_empty_page():
    page = ActivityLogService(InMemoryActivityLogs()).get_activity_logs()
    assert page.entries == []
    assert page.last_id is None
    assert not page.has_more
