from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from src.idmc_registration.idmc_registration.core.enums import RegistrationStatus
from src.idmc_registration.idmc_registration.main import create_app
from src.idmc_registration.idmc_registration.registrations.model import AttendeeQRCode
from src.idmc_registration.idmc_registration.workshops.model import Session
from tests.fakes import make_backend, make_container, make_registration

PASSWORD = "correct-horse"


@pytest.fixture
def backend():
    backend = make_backend(
        [
            make_registration(
                "A3K7MN",
                guests=1,
                attendee_qr_codes=(
                    AttendeeQRCode(attendee_index=0, qr_data="REG-2026-A3K7MN-0"),
                    AttendeeQRCode(attendee_index=1, qr_data="REG-2026-A3K7MN-1"),
                ),
            ),
            make_registration("D4FJNR", email="pending@example.com", cellphone="09990000000", status=RegistrationStatus.PENDING_PAYMENT),
        ],
        sessions=[
            Session(session_id="ws-men", title="Men", session_type="workshop", capacity=30, registered_count=30, time_slot="am"),
            Session(session_id="ws-youth", title="Youth", session_type="workshop", capacity=None, time_slot="pm"),
        ],
        tiers={
            "open": {"name": "Open", "regularPrice": 2500, "studentPrice": 1500, "startDate": "2000-01-01", "endDate": "2099-12-31"},
        },
    )
    for email, role in (("owner@idmc.org", "superadmin"), ("gate@idmc.org", "volunteer")):
        backend.admins.add(
            {
                "email": email,
                "displayName": email.split("@")[0].title(),
                "role": role,
                "status": "active",
                "passwordHash": generate_password_hash(PASSWORD),
            }
        )
    return backend


@pytest.fixture
def client(backend, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=make_container(backend))
    return app.test_client()


def _login(client, email):
    resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200
    return resp


def test_login_and_me(client):
    body = _login(client, "owner@idmc.org").get_json()
    assert body["data"]["email"] == "owner@idmc.org"

    me = client.get("/api/auth/me").get_json()
    assert me["data"]["role"] == "superadmin"
    assert "passwordHash" not in me["data"]

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_bad_login(client):
    resp = client.post("/api/auth/login", json={"email": "owner@idmc.org", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "AUTHENTICATION_FAILED"


def test_admin_routes_need_a_session(client):
    resp = client.get("/api/admin/registrations")
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "UNAUTHENTICATED"


def test_volunteer_is_limited_to_check_in(client):
    _login(client, "gate@idmc.org")

    assert client.get("/api/admin/registrations").status_code == 403
    assert client.get("/api/admin/registrations/REG-2026-A3K7MN").status_code == 403
    assert client.get("/api/admin/admins").status_code == 403
    assert client.get("/api/checkin/stats").status_code == 200


def test_deactivated_admin_loses_access_immediately(client, backend):
    _login(client, "gate@idmc.org")
    backend.admins.docs["admin-2"]["status"] = "inactive"

    assert client.get("/api/checkin/stats").status_code == 403
    assert client.post("/api/auth/password", json={"password": "another-pass"}).status_code == 401
    assert client.get("/api/auth/me").status_code == 401


def test_deactivated_manager_cannot_read_registration_detail(client, backend):
    _login(client, "owner@idmc.org")
    assert client.get("/api/admin/registrations/REG-2026-A3K7MN").status_code == 200

    backend.admins.docs["admin-1"]["status"] = "inactive"
    assert client.get("/api/admin/registrations/REG-2026-A3K7MN").status_code == 403


def _invite(client, email="newboss@idmc.org", role="superadmin"):
    _login(client, "owner@idmc.org")
    resp = client.post("/api/admin/admins", json={"email": email, "displayName": "New Boss", "role": role})
    assert resp.status_code == 201
    client.post("/api/auth/logout")
    return resp.get_json()["data"]


def test_invitation_accept_requires_the_token(client):
    invited = _invite(client)
    assert "invitationTokenHash" not in invited
    url = f"/api/auth/invitations/{invited['adminId']}/accept"

    missing = client.post(url, json={"password": "brand-new-pass"})
    assert missing.status_code == 403
    assert missing.get_json()["code"] == "INVALID_INVITATION"
    wrong = client.post(url, json={"token": "guessed", "password": "brand-new-pass"})
    assert wrong.status_code == 403
    assert client.post("/api/auth/login", json={"email": "newboss@idmc.org", "password": "brand-new-pass"}).status_code == 401

    accepted = client.post(url, json={"token": invited["invitationToken"], "password": "brand-new-pass"})
    assert accepted.status_code == 200
    assert accepted.get_json()["data"]["status"] == "active"
    assert client.post("/api/auth/login", json={"email": "newboss@idmc.org", "password": "brand-new-pass"}).status_code == 200

    client.post("/api/auth/logout")
    reused = client.post(url, json={"token": invited["invitationToken"], "password": "other-pass-123"})
    assert reused.status_code == 403


def test_resent_invitation_replaces_the_old_token(client):
    invited = _invite(client, email="vol@idmc.org", role="volunteer")
    _login(client, "owner@idmc.org")
    resent = client.post(f"/api/admin/admins/{invited['adminId']}/resend").get_json()["data"]
    client.post("/api/auth/logout")
    url = f"/api/auth/invitations/{invited['adminId']}/accept"

    assert client.post(url, json={"token": invited["invitationToken"], "password": "brand-new-pass"}).status_code == 403
    assert client.post(url, json={"token": resent["invitationToken"], "password": "brand-new-pass"}).status_code == 200


def test_check_in_then_conflict(client):
    _login(client, "gate@idmc.org")

    first = client.post("/api/checkin/REG-2026-A3K7MN", json={"attendeeIndex": 0, "stationId": "gate-a"})
    assert first.status_code == 200
    data = first.get_json()["data"]
    assert data["checkedInCount"] == 1
    assert data["allCheckedIn"] is False
    assert data["attendees"][0]["checkedInBy"] == "Gate"

    again = client.post("/api/checkin/REG-2026-A3K7MN", json={"attendeeIndex": 0})
    assert again.status_code == 409
    assert again.get_json()["code"] == "ATTENDEE_ALREADY_CHECKED_IN"


def test_scan_and_status(client):
    _login(client, "gate@idmc.org")

    resp = client.post("/api/checkin/scan", json={"qrCode": "REG-2026-A3K7MN"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["allCheckedIn"] is True

    status = client.get("/api/checkin/REG-2026-A3K7MN/status").get_json()["data"]
    assert status["checkedInCount"] == 2

    undo = client.post("/api/checkin/REG-2026-A3K7MN/undo", json={"attendeeIndex": 1, "reason": "left early"})
    assert undo.get_json()["data"]["checkedInCount"] == 1


def test_check_in_errors(client):
    _login(client, "gate@idmc.org")

    assert client.post("/api/checkin/REG-2026-ZZZZZZ", json={}).status_code == 404
    pending = client.post("/api/checkin/REG-2026-D4FJNR", json={})
    assert pending.status_code == 400
    assert pending.get_json()["code"] == "NOT_CONFIRMED"
    assert client.post("/api/checkin/scan", json={"qrCode": "garbage"}).get_json()["code"] == "INVALID_QR_CODE"
    assert client.post("/api/checkin/scan-image", data={}).status_code == 400


def test_public_registration(client, backend):
    payload = {
        "primaryAttendee": {"firstName": "Ana", "lastName": "Reyes", "email": "ana@example.com", "cellphone": "09181234567"},
        "church": {"name": "GCF Alabang", "city": "Muntinlupa"},
        "totalAmount": 0,
    }

    resp = client.post("/api/registrations", json=payload)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["status"] == "pending_payment"
    assert data["totalAmount"] == 2500
    assert data["pricingTier"] == "open"
    assert data["registrationId"] == f"REG-2026-{data['shortCode']}"
    assert backend.registrations.get_by_id(data["registrationId"]) is not None

    duplicate = client.post("/api/registrations", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.get_json()["existing_registration_id"] == data["registrationId"]


def test_registration_body_must_be_json(client):
    resp = client.post("/api/registrations", data="nope", content_type="text/plain")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_DATA"


def test_lookup(client):
    assert client.get("/api/registrations/lookup?q=a3k7mn").get_json()["data"]["shortCode"] == "A3K7MN"
    missing = client.get("/api/registrations/lookup?q=nobody@example.com")
    assert missing.status_code == 404
    assert missing.get_json()["code"] == "REGISTRATION_NOT_FOUND"


def test_qr_png(client):
    resp = client.get("/api/registrations/REG-2026-A3K7MN/qr/1.png")
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")

    assert client.get("/api/registrations/REG-2026-A3K7MN/qr/5.png").status_code == 404
    assert client.get("/api/registrations/REG-2026-D4FJNR/qr/0.png").status_code == 400


def test_workshops_grouped_by_slot(client):
    data = client.get("/api/workshops").get_json()["data"]

    assert set(data) == {"am", "pm"}
    men = data["am"][0]
    assert men["remainingCapacity"] == 0
    assert men["isAvailable"] is False
    assert data["pm"][0]["remainingCapacity"] is None
    assert client.get("/api/workshops/ws-none").status_code == 404


def test_public_settings(client):
    data = client.get("/api/settings").get_json()["data"]
    assert data["timezone"] == "Asia/Manila"


def test_unknown_route_is_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_dashboard_needs_registration_access(client):
    _login(client, "gate@idmc.org")
    assert client.get("/api/admin/dashboard/stats").status_code == 403
    client.post("/api/auth/logout")

    _login(client, "owner@idmc.org")
    stats = client.get("/api/admin/dashboard/stats").get_json()["data"]
    assert stats["totalRegistrations"] == 2
    assert stats["confirmed"] == 1
    chart = client.get("/api/admin/dashboard/chart?days=7").get_json()["data"]
    assert len(chart) == 7
    churches = client.get("/api/admin/dashboard/churches").get_json()["data"]
    assert churches["churches"][0]["delegateCount"] == 2
    assert client.get("/api/admin/dashboard/downloads").get_json()["data"]["totalFiles"] == 0


def test_admin_registration_search_and_counts(client):
    _login(client, "owner@idmc.org")

    found = client.get("/api/admin/registrations/search?q=pending@example.com").get_json()
    assert [r["shortCode"] for r in found["data"]] == ["D4FJNR"]

    counts = client.get("/api/admin/registrations/counts").get_json()["data"]
    assert (counts["total"], counts["confirmed"], counts["pendingPayment"]) == (2, 1, 1)
    filtered = client.get("/api/admin/registrations/counts?status=confirmed").get_json()["data"]
    assert filtered == {"total": 2, "filtered": 1}

    page = client.get("/api/admin/registrations/page?pageSize=1").get_json()["data"]
    assert len(page["registrations"]) == 1
    assert page["hasMore"] is True


def test_feedback_submit_and_manage(client, backend):
    resp = client.post(
        "/api/feedback",
        json={"rating": 5, "comments": "  Blessed!  ", "sessions": {"plenary": True, "youth": False}, "other": " "},
    )
    assert resp.status_code == 201
    feedback_id = resp.get_json()["data"]["id"]
    assert client.post("/api/feedback", json={"comments": "   "}).status_code == 400

    assert client.get("/api/admin/feedback").status_code == 401
    _login(client, "owner@idmc.org")
    items = client.get("/api/admin/feedback").get_json()["data"]
    assert items[0]["answers"] == {"rating": 5, "comments": "Blessed!", "sessions": {"plenary": True}}

    assert client.delete(f"/api/admin/feedback/{feedback_id}").status_code == 200
    assert client.delete(f"/api/admin/feedback/{feedback_id}").status_code == 404
    assert backend.feedback.docs == {}
