from __future__ import annotations

from flask import Flask

from ..admins.guards import current_actor, make_guards
from ..common.web import json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    _, permission_required = make_guards(container.auth_service)
    content = container.content_service

    @app.route("/api/content/<kind_name>", methods=["GET"], endpoint="api_content_list")
    def api_content_list(kind_name: str):
        items = content.list_published(content.kind(kind_name))
        return ok(items, count=len(items))

    @app.route("/api/admin/content/<kind_name>", methods=["GET"], endpoint="api_admin_content_list")
    @permission_required("canManageContent")
    def api_admin_content_list(kind_name: str):
        items = content.list_all(content.kind(kind_name))
        return ok(items, count=len(items))

    @app.route("/api/admin/content/<kind_name>", methods=["POST"], endpoint="api_admin_content_create")
    @permission_required("canManageContent")
    def api_admin_content_create(kind_name: str):
        data = json_body()
        doc_id = content.save(content.kind(kind_name), data, doc_id=data.get("id") or None, actor=current_actor())
        return ok({"id": doc_id}, 201)

    @app.route("/api/admin/content/<kind_name>/<doc_id>", methods=["GET"], endpoint="api_admin_content_detail")
    @permission_required("canManageContent")
    def api_admin_content_detail(kind_name: str, doc_id: str):
        return ok(content.get(content.kind(kind_name), doc_id))

    @app.route("/api/admin/content/<kind_name>/<doc_id>", methods=["PATCH"], endpoint="api_admin_content_update")
    @permission_required("canManageContent")
    def api_admin_content_update(kind_name: str, doc_id: str):
        content.update(content.kind(kind_name), doc_id, json_body(), actor=current_actor())
        return ok()

    @app.route("/api/admin/content/<kind_name>/<doc_id>", methods=["DELETE"], endpoint="api_admin_content_delete")
    @permission_required("canManageContent")
    def api_admin_content_delete(kind_name: str, doc_id: str):
        content.delete(content.kind(kind_name), doc_id, actor=current_actor())
        return ok()
