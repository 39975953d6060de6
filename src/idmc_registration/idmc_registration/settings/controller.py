from __future__ import annotations

from flask import Flask

from ..admins.guards import current_actor, make_guards
from ..common.web import json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required, permission_required = make_guards(container.auth_service)
    settings = container.settings_service
    stats = container.stats_service

    @app.route("/api/settings", methods=["GET"], endpoint="api_settings")
    def api_settings():
        return ok(settings.get_conference_settings())

    @app.route("/api/pricing/active", methods=["GET"], endpoint="api_pricing_active")
    def api_pricing_active():
        return ok(settings.get_active_pricing_tier())

    @app.route("/api/pricing", methods=["GET"], endpoint="api_pricing")
    def api_pricing():
        return ok(settings.get_pricing_tiers())

    @app.route("/api/stats", methods=["GET"], endpoint="api_stats")
    def api_stats():
        return ok(stats.get_conference_stats())

    # ---- admin ----

    @app.route("/api/admin/settings", methods=["PATCH"], endpoint="api_admin_settings_update")
    @permission_required("canManageSettings")
    def api_admin_settings_update():
        return ok(settings.update_conference_settings(json_body(), actor=current_actor()))

    @app.route("/api/admin/pricing", methods=["POST"], endpoint="api_admin_pricing_create")
    @permission_required("canManageSettings")
    def api_admin_pricing_create():
        tier_id = settings.create_pricing_tier(json_body(), actor=current_actor())
        return ok({"id": tier_id}, 201)

    @app.route("/api/admin/pricing/<tier_id>", methods=["PATCH"], endpoint="api_admin_pricing_update")
    @permission_required("canManageSettings")
    def api_admin_pricing_update(tier_id: str):
        settings.update_pricing_tier(tier_id, json_body(), actor=current_actor())
        return ok()

    @app.route("/api/admin/pricing/<tier_id>", methods=["DELETE"], endpoint="api_admin_pricing_delete")
    @permission_required("canManageSettings")
    def api_admin_pricing_delete(tier_id: str):
        settings.delete_pricing_tier(tier_id, actor=current_actor())
        return ok()

    @app.route("/api/admin/stats/sync", methods=["POST"], endpoint="api_admin_stats_sync")
    @login_required
    def api_admin_stats_sync():
        return ok({"result": stats.trigger_stats_sync()})
