from __future__ import annotations

from flask import Flask, request

from ..admins.guards import current_actor, make_guards
from ..common.web import json_body, ok, optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    inquiries = container.inquiry_service

    @app.route("/api/inquiries", methods=["POST"], endpoint="api_inquiries_submit")
    def api_inquiries_submit():
        data = json_body()
        inquiry_id = inquiries.submit_contact_inquiry(
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            subject=str(data.get("subject") or ""),
            message=str(data.get("message") or ""),
        )
        return ok({"id": inquiry_id}, 201)

    @app.route("/api/admin/inquiries", methods=["GET"], endpoint="api_admin_inquiries")
    @permission_required("canManageContent")
    def api_admin_inquiries():
        items = inquiries.list_inquiries(
            status=request.args.get("status") or None,
            limit=optional_int(request.args.get("limit"), "limit") or 100,
        )
        return ok(items, count=len(items))

    @app.route("/api/admin/inquiries/<inquiry_id>/read", methods=["POST"], endpoint="api_admin_inquiry_read")
    @permission_required("canManageContent")
    def api_admin_inquiry_read(inquiry_id: str):
        inquiries.mark_as_read(inquiry_id)
        return ok()

    @app.route("/api/admin/inquiries/<inquiry_id>/reply", methods=["POST"], endpoint="api_admin_inquiry_reply")
    @permission_required("canManageContent")
    def api_admin_inquiry_reply(inquiry_id: str):
        data = json_body()
        inquiries.send_inquiry_reply(
            inquiry_id,
            subject=str(data.get("subject") or ""),
            message=str(data.get("message") or ""),
            actor=current_actor(),
        )
        return ok()
