from __future__ import annotations

from flask import Flask, request

from ..admins.guards import current_actor, make_guards
from ..common.web import fail, json_body, ok, optional_int
from ..container import Container
from ..core.enums import CheckInMethod
from ..core.exceptions import CheckInError
from ..registrations.model import Registration
from .qr import decode_qr_image
from .state import (
    are_all_attendees_checked_in,
    build_check_in_slots,
    get_checked_in_attendee_count,
)


def _status_payload(registration: Registration) -> dict:
    return {
        "registrationId": registration.registration_id,
        "status": registration.status.value,
        "totalAttendees": registration.total_attendees,
        "checkedInCount": get_checked_in_attendee_count(registration),
        "allCheckedIn": are_all_attendees_checked_in(registration),
        "attendees": [
            {
                "attendeeIndex": slot.attendee_index,
                "name": attendee.full_name,
                "checkedIn": slot.checked_in,
                "checkedInAt": slot.checked_in_at.isoformat() if slot.checked_in_at else None,
                "checkedInBy": slot.checked_in_by_name or slot.checked_in_by,
            }
            for slot, attendee in zip(build_check_in_slots(registration), registration.attendees)
        ],
    }


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    checkin = container.checkin_service

    @app.route("/api/checkin/<registration_id>", methods=["POST"], endpoint="api_checkin_attendee")
    @permission_required("canCheckIn")
    def api_checkin_attendee(registration_id: str):
        data = request.get_json(silent=True) or {}
        method = CheckInMethod.QR if data.get("method") == CheckInMethod.QR.value else CheckInMethod.MANUAL
        registration = checkin.check_in_attendee(
            registration_id,
            optional_int(data.get("attendeeIndex"), "attendeeIndex"),
            actor=current_actor(),
            method=method,
            station_id=data.get("stationId"),
        )
        return ok(_status_payload(registration))

    @app.route("/api/checkin/scan", methods=["POST"], endpoint="api_checkin_scan")
    @permission_required("canCheckIn")
    def api_checkin_scan():
        data = json_body()
        qr_code = str(data.get("qrCode") or "").strip()
        if not qr_code:
            return fail("QR code is required", CheckInError.INVALID_QR_CODE, 400)
        registration = checkin.check_in_by_qr(qr_code, actor=current_actor(), station_id=data.get("stationId"))
        return ok(_status_payload(registration))

    @app.route("/api/checkin/scan-image", methods=["POST"], endpoint="api_checkin_scan_image")
    @permission_required("canCheckIn")
    def api_checkin_scan_image():
        upload = request.files.get("image")
        if upload is None or not upload.filename:
            return fail("Upload an image containing the QR code", CheckInError.INVALID_QR_CODE, 400)

        try:
            payloads = decode_qr_image(upload.stream)
        except OSError:
            return fail("Could not read the uploaded image", CheckInError.INVALID_QR_CODE, 400)
        if not payloads:
            return fail("No QR code found in the image", CheckInError.INVALID_QR_CODE, 400)

        registration = checkin.check_in_by_qr(
            payloads[0],
            actor=current_actor(),
            station_id=request.form.get("stationId"),
        )
        return ok(_status_payload(registration))

    @app.route("/api/checkin/<registration_id>/undo", methods=["POST"], endpoint="api_checkin_undo")
    @permission_required("canCheckIn")
    def api_checkin_undo(registration_id: str):
        data = request.get_json(silent=True) or {}
        registration = checkin.undo_check_in(
            registration_id,
            optional_int(data.get("attendeeIndex"), "attendeeIndex"),
            actor=current_actor(),
            reason=str(data.get("reason") or ""),
        )
        return ok(_status_payload(registration))

    @app.route("/api/checkin/<registration_id>/status", methods=["GET"], endpoint="api_checkin_status")
    @permission_required("canCheckIn")
    def api_checkin_status(registration_id: str):
        return ok(_status_payload(checkin.get_registration(registration_id)))

    @app.route("/api/checkin/search", methods=["GET"], endpoint="api_checkin_search")
    @permission_required("canCheckIn")
    def api_checkin_search():
        results = checkin.search_registrations(request.args.get("q", ""))
        return ok([_status_payload(r) for r in results], count=len(results))

    @app.route("/api/checkin/stats", methods=["GET"], endpoint="api_checkin_stats")
    @permission_required("canCheckIn")
    def api_checkin_stats():
        return ok(checkin.get_check_in_stats())

    @app.route("/api/checkin/recent", methods=["GET"], endpoint="api_checkin_recent")
    @permission_required("canCheckIn")
    def api_checkin_recent():
        count = optional_int(request.args.get("count"), "count")
        return ok(checkin.get_recent_check_ins(count) if count else checkin.get_recent_check_ins())

    @app.route("/api/checkin/by-hour", methods=["GET"], endpoint="api_checkin_by_hour")
    @permission_required("canCheckIn")
    def api_checkin_by_hour():
        return ok(checkin.get_check_ins_by_hour())
