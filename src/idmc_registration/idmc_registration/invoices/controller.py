from __future__ import annotations

from flask import Flask, request

from ..admins.guards import current_actor, make_guards
from ..common.web import json_body, ok, optional_int
from ..container import Container
from ..core.constants import INVOICE_LIST_LIMIT


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    invoices = container.invoice_service

    @app.route("/api/admin/invoices", methods=["GET"], endpoint="api_admin_invoices")
    @permission_required("canManageRegistrations")
    def api_admin_invoices():
        term = request.args.get("q", "").strip()
        if term:
            items = invoices.search_invoice_requests(term)
        else:
            items = invoices.get_invoice_requests(
                status=request.args.get("status") or None,
                confirmed_only=request.args.get("all") != "1",
                limit=optional_int(request.args.get("limit"), "limit") or INVOICE_LIST_LIMIT,
            )
        return ok(items, count=len(items))

    @app.route("/api/admin/invoices/counts", methods=["GET"], endpoint="api_admin_invoice_counts")
    @permission_required("canManageRegistrations")
    def api_admin_invoice_counts():
        return ok(invoices.get_invoice_request_counts())

    @app.route("/api/admin/invoices/<registration_id>", methods=["GET"], endpoint="api_admin_invoice_detail")
    @permission_required("canManageRegistrations")
    def api_admin_invoice_detail(registration_id: str):
        return ok(invoices.get_registration_with_invoice(registration_id))

    @app.route(
        "/api/admin/invoices/<registration_id>/number",
        methods=["POST"],
        endpoint="api_admin_invoice_number",
    )
    @permission_required("canManageRegistrations")
    def api_admin_invoice_number(registration_id: str):
        number = invoices.generate_and_reserve_invoice_number(registration_id)
        return ok({"invoiceNumber": number}, 201)

    @app.route(
        "/api/admin/invoices/<registration_id>/upload",
        methods=["POST"],
        endpoint="api_admin_invoice_upload",
    )
    @permission_required("canManageRegistrations")
    def api_admin_invoice_upload(registration_id: str):
        data = json_body()
        registration = invoices.update_invoice_upload(
            registration_id,
            invoice_url=str(data.get("invoiceUrl") or ""),
            invoice_number=data.get("invoiceNumber"),
            actor=current_actor(),
        )
        return ok(registration)

    @app.route("/api/admin/invoices/<registration_id>/sent", methods=["POST"], endpoint="api_admin_invoice_sent")
    @permission_required("canManageRegistrations")
    def api_admin_invoice_sent(registration_id: str):
        return ok(invoices.mark_invoice_sent(registration_id, actor=current_actor()))

    @app.route("/api/admin/invoices/<registration_id>/failed", methods=["POST"], endpoint="api_admin_invoice_failed")
    @permission_required("canManageRegistrations")
    def api_admin_invoice_failed(registration_id: str):
        data = request.get_json(silent=True) or {}
        return ok(invoices.mark_invoice_failed(registration_id, str(data.get("errorMessage") or "")))
