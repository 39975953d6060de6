from __future__ import annotations

from flask import Flask, request

from ..admins.guards import make_guards
from ..common.web import ok, optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    dashboard = container.dashboard_service

    @app.route("/api/admin/dashboard/stats", methods=["GET"], endpoint="api_admin_dashboard_stats")
    @permission_required("canManageRegistrations")
    def api_admin_dashboard_stats():
        return ok(dashboard.get_dashboard_stats())

    @app.route("/api/admin/dashboard/recent", methods=["GET"], endpoint="api_admin_dashboard_recent")
    @permission_required("canManageRegistrations")
    def api_admin_dashboard_recent():
        count = optional_int(request.args.get("count"), "count")
        items = dashboard.get_recent_registrations(count) if count else dashboard.get_recent_registrations()
        return ok(items, count=len(items))

    @app.route("/api/admin/dashboard/chart", methods=["GET"], endpoint="api_admin_dashboard_chart")
    @permission_required("canManageRegistrations")
    def api_admin_dashboard_chart():
        days = optional_int(request.args.get("days"), "days")
        return ok(dashboard.get_registration_chart_data(days) if days else dashboard.get_registration_chart_data())

    @app.route("/api/admin/dashboard/churches", methods=["GET"], endpoint="api_admin_dashboard_churches")
    @permission_required("canManageRegistrations")
    def api_admin_dashboard_churches():
        return ok(dashboard.get_church_stats(optional_int(request.args.get("limit"), "limit")))

    @app.route("/api/admin/dashboard/food", methods=["GET"], endpoint="api_admin_dashboard_food")
    @permission_required("canManageRegistrations")
    def api_admin_dashboard_food():
        return ok(dashboard.get_food_stats())

    @app.route("/api/admin/dashboard/downloads", methods=["GET"], endpoint="api_admin_dashboard_downloads")
    @permission_required("canManageContent")
    def api_admin_dashboard_downloads():
        return ok(dashboard.get_download_stats())
