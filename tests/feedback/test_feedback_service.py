from __future__ import annotations

from datetime import timedelta

import pytest

from src.idmc_registration.idmc_registration.admins.model import Actor
from src.idmc_registration.idmc_registration.core.exceptions import NotFoundError, ValidationError
from src.idmc_registration.idmc_registration.feedback.service import clean_answer
from tests.fakes import NOW, make_backend, make_container

STAFF = Actor(admin_id="admin-5", email="staff@idmc.org")


@pytest.fixture
def backend():
    return make_backend()


@pytest.fixture
def service(backend):
    return make_container(backend).feedback_service


@pytest.mark.parametrize(
    "value, expected",
    [
        ("  great  ", "great"),
        ("   ", None),
        (None, None),
        (False, False),
        (4, 4),
        ({"worship": True, "teaching": False, "food": "yes"}, {"worship": True}),
        ({"worship": False}, None),
        (["a", "b"], ["a", "b"]),
    ],
)
def test_clean_answer(value, expected):
    assert clean_answer(value) == expected


def test_submit_keeps_only_answered_fields(service, backend):
    feedback_id = service.submit_feedback(
        {"name": " Liza ", "church": "", "rating": 5, "id": "forged", "createdAt": "2000-01-01"},
        now=NOW,
    )

    assert backend.feedback.docs[feedback_id] == {"name": "Liza", "rating": 5, "createdAt": NOW}


@pytest.mark.parametrize("data", [None, "text", ["a"], {}, {"comments": "  "}])
def test_submit_rejects_empty_or_malformed(service, data):
    with pytest.raises(ValidationError):
        service.submit_feedback(data, now=NOW)


def test_list_newest_first(service):
    older = service.submit_feedback({"rating": 3}, now=NOW - timedelta(hours=1))
    newer = service.submit_feedback({"rating": 4}, now=NOW)

    responses = service.list_feedback_responses()

    assert [r.feedback_id for r in responses] == [newer, older]
    assert responses[0].answers == {"rating": 4}
    assert responses[0].created_at == NOW


def test_delete_logs_activity(service, backend):
    feedback_id = service.submit_feedback({"rating": 5}, now=NOW)

    service.delete_feedback_response(feedback_id, actor=STAFF)

    assert backend.feedback.docs == {}
    entry = next(iter(backend.activity_logs.docs.values()))
    assert entry["action"] == "delete_feedback"
    assert entry["entityType"] == "feedback"
    assert entry["entityId"] == feedback_id


def test_delete_validation(service, backend):
    with pytest.raises(ValidationError):
        service.delete_feedback_response(" ", actor=STAFF)
    with pytest.raises(NotFoundError):
        service.delete_feedback_response("feedback-404", actor=STAFF)
    assert backend.activity_logs.docs == {}
