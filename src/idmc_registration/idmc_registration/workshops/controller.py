from __future__ import annotations

from flask import Flask

from ..admins.guards import make_guards
from ..common.web import fail, ok, serialize
from ..container import Container
from ..core.exceptions import NotFoundError
from .service import get_remaining_capacity, group_workshops_by_time_slot, has_available_capacity


def _workshop_json(workshop) -> dict:
    data = serialize(workshop)
    data["remainingCapacity"] = get_remaining_capacity(workshop)
    data["isAvailable"] = has_available_capacity(workshop)
    return data


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    workshops = container.workshop_service

    @app.route("/api/workshops", methods=["GET"], endpoint="api_workshops")
    def api_workshops():
        grouped = group_workshops_by_time_slot(workshops.get_workshops())
        return ok({slot: [_workshop_json(w) for w in items] for slot, items in grouped.items()})

    @app.route("/api/workshops/<workshop_id>", methods=["GET"], endpoint="api_workshop_detail")
    def api_workshop_detail(workshop_id: str):
        workshop = workshops.get_workshop_by_id(workshop_id)
        if workshop is None:
            return fail(f"Workshop {workshop_id} not found", NotFoundError.default_code, 404)
        return ok(_workshop_json(workshop))

    @app.route("/api/admin/workshops/<workshop_id>/attendees", methods=["GET"], endpoint="api_admin_workshop_attendees")
    @permission_required("canManageRegistrations")
    def api_admin_workshop_attendees(workshop_id: str):
        attendees = container.registration_service.get_workshop_attendees(workshop_id)
        return ok(attendees, count=len(attendees))
