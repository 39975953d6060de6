from __future__ import annotations

from flask import Flask, request

from ..admins.guards import make_guards
from ..common.web import ok, optional_int
from ..container import Container
from ..core.constants import ACTIVITY_PAGE_SIZE


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    activity = container.activity_service

    @app.route("/api/admin/activity", methods=["GET"], endpoint="api_admin_activity")
    @permission_required("canManageSettings")
    def api_admin_activity():
        page = activity.get_activity_logs(
            page_size=optional_int(request.args.get("pageSize"), "pageSize") or ACTIVITY_PAGE_SIZE,
            start_after=request.args.get("startAfter") or None,
            type=request.args.get("type") or None,
            entity_type=request.args.get("entityType") or None,
            admin_id=request.args.get("adminId") or None,
        )
        return ok(page)

    @app.route("/api/admin/activity/count", methods=["GET"], endpoint="api_admin_activity_count")
    @permission_required("canManageSettings")
    def api_admin_activity_count():
        count = activity.get_activity_logs_count(
            type=request.args.get("type") or None,
            entity_type=request.args.get("entityType") or None,
        )
        return ok({"count": count})
