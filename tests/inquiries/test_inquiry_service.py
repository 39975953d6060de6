from __future__ import annotations

import pytest

from src.idmc_registration.idmc_registration.admins.model import Actor
from src.idmc_registration.idmc_registration.core.enums import InquiryStatus
from src.idmc_registration.idmc_registration.core.exceptions import NotFoundError, ValidationError
from tests.fakes import NOW, make_backend, make_container

STAFF = Actor(admin_id="admin-5", email="staff@idmc.org")


@pytest.fixture
def backend():
    return make_backend()


@pytest.fixture
def service(backend):
    return make_container(backend).inquiry_service


def _submit(service, **changes):
    data = {"name": "Liza", "email": "Liza@Example.com ", "subject": "Parking", "message": "Is there parking?"}
    data.update(changes)
    return service.submit_contact_inquiry(now=NOW, **data)


def test_submit_stores_new_inquiry(service, backend):
    inquiry_id = _submit(service)

    doc = backend.inquiries.docs[inquiry_id]
    assert doc["email"] == "liza@example.com"
    assert doc["status"] == "new"
    assert doc["createdAt"] == NOW


@pytest.mark.parametrize("changes", [{"name": " "}, {"message": ""}, {"email": "liza"}])
def test_submit_validation(service, changes):
    with pytest.raises(ValidationError):
        _submit(service, **changes)


def test_mark_as_read_only_moves_new(service, backend):
    inquiry_id = _submit(service)
    service.mark_as_read(inquiry_id)
    assert service.list_inquiries()[0].status == InquiryStatus.READ

    backend.inquiries.docs[inquiry_id]["status"] = "replied"
    service.mark_as_read(inquiry_id)
    assert backend.inquiries.docs[inquiry_id]["status"] == "replied"


def test_reply_calls_function_and_records(service, backend):
    inquiry_id = _submit(service)

    service.send_inquiry_reply(inquiry_id, subject=" Re: Parking ", message="Yes, free parking.", actor=STAFF, now=NOW)

    assert backend.functions.calls == [
        ("sendInquiryReply", {"inquiryId": inquiry_id, "subject": "Re: Parking", "message": "Yes, free parking."})
    ]
    doc = backend.inquiries.docs[inquiry_id]
    assert doc["status"] == "replied"
    assert doc["repliedBy"] == "admin-5"
    assert [d["action"] for d in backend.activity_logs.docs.values()] == ["reply_inquiry"]


def test_reply_validation(service, backend):
    inquiry_id = _submit(service)
    with pytest.raises(ValidationError):
        service.send_inquiry_reply(inquiry_id, subject="", message="x", actor=STAFF)
    with pytest.raises(NotFoundError):
        service.send_inquiry_reply("inquiry-404", subject="s", message="m", actor=STAFF)
    assert backend.functions.calls == []


def test_list_by_status(service):
    first = _submit(service)
    _submit(service, name="Ben")
    service.mark_as_read(first)

    assert [i.name for i in service.list_inquiries(status="new")] == ["Ben"]
