from __future__ import annotations

from flask import Flask, request, send_file

from ..admins.guards import current_actor, make_guards
from ..checkin.qr import render_qr_png
from ..common.web import fail, json_body, ok, optional_int
from ..container import Container
from ..core.enums import RegistrationStatus
from ..core.exceptions import CheckInError, RegistrationError


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    registrations = container.registration_service

    # ---- public ----

    @app.route("/api/registrations", methods=["POST"], endpoint="api_registrations_create")
    def api_registrations_create():
        data = json_body()
        if not data.get("registrationId") or not data.get("shortCode"):
            data["registrationId"], data["shortCode"] = registrations.new_identifiers()
        registration = registrations.register(data)
        return ok(registration, 201)

    @app.route("/api/registrations/lookup", methods=["GET"], endpoint="api_registrations_lookup")
    def api_registrations_lookup():
        registration = registrations.lookup_registration(request.args.get("q", ""))
        if registration is None:
            return fail("No registration matches that code, email or phone", RegistrationError.REGISTRATION_NOT_FOUND, 404)
        return ok(registration)

    @app.route("/api/registrations/availability", methods=["GET"], endpoint="api_registrations_availability")
    def api_registrations_availability():
        count = optional_int(request.args.get("count"), "count") or 1
        return ok(registrations.check_registration_availability(count))

    @app.route(
        "/api/registrations/<registration_id>/payment-proof",
        methods=["POST"],
        endpoint="api_registrations_payment_proof",
    )
    def api_registrations_payment_proof(registration_id: str):
        data = json_body()
        registration = registrations.update_payment_proof(
            registration_id,
            str(data.get("proofUrl") or ""),
            method=data.get("method"),
        )
        return ok(registration)

    @app.route(
        "/api/registrations/<registration_id>/qr/<int:attendee_index>.png",
        methods=["GET"],
        endpoint="api_registrations_qr",
    )
    def api_registrations_qr(registration_id: str, attendee_index: int):
        registration = registrations.get_registration(registration_id)
        if registration.status != RegistrationStatus.CONFIRMED or not registration.attendee_qr_codes:
            return fail("QR codes are issued once payment is confirmed", RegistrationError.INVALID_STATUS, 400)

        code = next((c for c in registration.attendee_qr_codes if c.attendee_index == attendee_index), None)
        if code is None:
            return fail(f"No attendee #{attendee_index} on this registration", CheckInError.INVALID_ATTENDEE_INDEX, 404)

        return send_file(
            render_qr_png(code.qr_data),
            mimetype="image/png",
            download_name=f"{registration_id}-{attendee_index}.png",
        )

    # ---- admin ----

    @app.route("/api/admin/registrations", methods=["GET"], endpoint="api_admin_registrations")
    @permission_required("canManageRegistrations")
    def api_admin_registrations():
        items = registrations.list_registrations(
            status=request.args.get("status") or None,
            limit=optional_int(request.args.get("limit"), "limit"),
        )
        return ok(items, count=len(items))

    @app.route("/api/admin/registrations/page", methods=["GET"], endpoint="api_admin_registrations_page")
    @permission_required("canManageRegistrations")
    def api_admin_registrations_page():
        page = registrations.list_registrations_page(
            status=request.args.get("status") or None,
            page_size=optional_int(request.args.get("pageSize"), "pageSize") or 50,
            start_after=request.args.get("startAfter") or None,
        )
        return ok(page)

    @app.route("/api/admin/registrations/search", methods=["GET"], endpoint="api_admin_registrations_search")
    @permission_required("canManageRegistrations")
    def api_admin_registrations_search():
        items = registrations.search_registrations(
            request.args.get("q") or "",
            status=request.args.get("status") or None,
        )
        return ok(items, count=len(items))

    @app.route("/api/admin/registrations/counts", methods=["GET"], endpoint="api_admin_registrations_counts")
    @permission_required("canManageRegistrations")
    def api_admin_registrations_counts():
        if request.args.get("status"):
            return ok(registrations.get_registrations_count(status=request.args.get("status")))
        return ok(registrations.get_registration_status_counts())

    @app.route("/api/admin/registrations/<registration_id>", methods=["GET"], endpoint="api_admin_registration_detail")
    @permission_required("canManageRegistrations")
    def api_admin_registration_detail(registration_id: str):
        return ok(registrations.get_registration(registration_id))

    @app.route(
        "/api/admin/registrations/<registration_id>/verify-payment",
        methods=["POST"],
        endpoint="api_admin_verify_payment",
    )
    @permission_required("canManageRegistrations")
    def api_admin_verify_payment(registration_id: str):
        data = json_body()
        registration = registrations.verify_payment(
            registration_id,
            amount_paid=data.get("amountPaid"),
            method=data.get("method"),
            reference_number=data.get("referenceNumber"),
            notes=data.get("notes"),
            rejection_reason=data.get("rejectionReason"),
            actor=current_actor(),
        )
        return ok(registration)

    @app.route(
        "/api/admin/registrations/<registration_id>/confirm-payment",
        methods=["POST"],
        endpoint="api_admin_confirm_payment",
    )
    @permission_required("canManageRegistrations")
    def api_admin_confirm_payment(registration_id: str):
        data = request.get_json(silent=True) or {}
        registration = registrations.confirm_payment(
            registration_id,
            method=data.get("method"),
            reference_number=data.get("referenceNumber"),
            actor=current_actor(),
        )
        return ok(registration)

    @app.route("/api/admin/registrations/<registration_id>/cancel", methods=["POST"], endpoint="api_admin_cancel")
    @permission_required("canManageRegistrations")
    def api_admin_cancel(registration_id: str):
        data = json_body()
        registration = registrations.cancel_registration(
            registration_id,
            reason=str(data.get("reason") or ""),
            cancelled_by=str(data.get("cancelledBy") or "admin"),
            actor=current_actor(),
        )
        return ok(registration)

    @app.route("/api/admin/registrations/<registration_id>/refund", methods=["POST"], endpoint="api_admin_refund")
    @permission_required("canManageRegistrations")
    def api_admin_refund(registration_id: str):
        data = json_body()
        registration = registrations.refund_registration(
            registration_id,
            amount=data.get("amount"),
            reason=str(data.get("reason") or ""),
            method=str(data.get("method") or ""),
            reference_number=str(data.get("referenceNumber") or ""),
            notes=str(data.get("notes") or ""),
            actor=current_actor(),
        )
        return ok(registration)

    @app.route("/api/admin/registrations/<registration_id>/transfer", methods=["POST"], endpoint="api_admin_transfer")
    @permission_required("canManageRegistrations")
    def api_admin_transfer(registration_id: str):
        data = json_body()
        registration = registrations.transfer_registration(
            registration_id,
            data.get("newAttendee") or {},
            reason=str(data.get("reason") or ""),
            transferred_by=str(data.get("transferredBy") or "admin"),
            actor=current_actor(),
        )
        return ok(registration)

    @app.route(
        "/api/admin/registrations/<registration_id>/email-sent",
        methods=["POST"],
        endpoint="api_admin_email_sent",
    )
    @permission_required("canManageRegistrations")
    def api_admin_email_sent(registration_id: str):
        data = json_body()
        registrations.mark_email_sent(registration_id, str(data.get("emailType") or ""))
        return ok()

    # ---- waitlist ----

    @app.route("/api/admin/waitlist", methods=["GET"], endpoint="api_admin_waitlist")
    @permission_required("canManageRegistrations")
    def api_admin_waitlist():
        items = registrations.get_waitlisted_registrations()
        return ok(items, count=len(items))

    @app.route("/api/admin/waitlist/<registration_id>/offer", methods=["POST"], endpoint="api_admin_waitlist_offer")
    @permission_required("canManageRegistrations")
    def api_admin_waitlist_offer(registration_id: str):
        data = request.get_json(silent=True) or {}
        hours = optional_int(data.get("hours"), "hours")
        return ok(registrations.offer_waitlist_slot(registration_id, hours=hours, actor=current_actor()))

    @app.route("/api/admin/waitlist/<registration_id>/promote", methods=["POST"], endpoint="api_admin_waitlist_promote")
    @permission_required("canManageRegistrations")
    def api_admin_waitlist_promote(registration_id: str):
        return ok(registrations.promote_from_waitlist(registration_id, actor=current_actor()))

    @app.route("/api/admin/waitlist/<registration_id>/expire", methods=["POST"], endpoint="api_admin_waitlist_expire")
    @permission_required("canManageRegistrations")
    def api_admin_waitlist_expire(registration_id: str):
        return ok(registrations.expire_waitlist_offer(registration_id))
