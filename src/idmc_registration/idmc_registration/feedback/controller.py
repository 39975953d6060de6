from __future__ import annotations

from flask import Flask, request

from ..admins.guards import current_actor, make_guards
from ..common.web import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    feedback = container.feedback_service

    @app.route("/api/feedback", methods=["POST"], endpoint="api_feedback_submit")
    def api_feedback_submit():
        feedback_id = feedback.submit_feedback(request.get_json(silent=True))
        return ok({"id": feedback_id}, 201)

    @app.route("/api/admin/feedback", methods=["GET"], endpoint="api_admin_feedback")
    @permission_required("canManageContent")
    def api_admin_feedback():
        items = feedback.list_feedback_responses()
        return ok(items, count=len(items))

    @app.route("/api/admin/feedback/<feedback_id>", methods=["DELETE"], endpoint="api_admin_feedback_delete")
    @permission_required("canManageContent")
    def api_admin_feedback_delete(feedback_id: str):
        feedback.delete_feedback_response(feedback_id, actor=current_actor())
        return ok()
