from __future__ import annotations

from flask import Flask, request, session

from ..common.web import fail, json_body, ok, serialize
from ..container import Container
from .guards import current_actor, make_guards
from .model import Admin
from .service import Invitation


def _admin_json(admin: Admin) -> dict:
    data = serialize(admin)
    data.pop("passwordHash", None)
    data.pop("invitationTokenHash", None)
    return data


def _invitation_json(invitation: Invitation) -> dict:
    data = _admin_json(invitation.admin)
    data["invitationToken"] = invitation.token
    data["invitationExpiresAt"] = serialize(invitation.expires_at)
    return data


def register(app: Flask, container: Container) -> None:
    login_required, permission_required = make_guards(container.auth_service)
    admins = container.admin_service

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_auth_login")
    def api_auth_login():
        data = json_body()
        admin = container.auth_service.authenticate(str(data.get("email") or ""), str(data.get("password") or ""))

        session.clear()
        session["admin_id"] = admin.admin_id
        session["email"] = admin.email
        session["name"] = admin.display_name
        session["role"] = admin.role.value
        return ok(admin)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_auth_logout")
    def api_auth_logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_auth_me")
    @login_required
    def api_auth_me():
        admin = container.auth_service.load_admin(str(session["admin_id"]))
        if admin is None or not admin.is_active:
            session.clear()
            return fail("Please sign in to continue", "UNAUTHENTICATED", 401)
        return ok(_admin_json(admin))

    @app.route("/api/auth/invitations/<admin_id>/accept", methods=["POST"], endpoint="api_auth_accept_invitation")
    def api_auth_accept_invitation(admin_id: str):
        data = json_body()
        admin = admins.accept_invitation(
            admin_id,
            str(data.get("token") or ""),
            str(data.get("password") or ""),
        )
        return ok(_admin_json(admin))

    @app.route("/api/auth/password", methods=["POST"], endpoint="api_auth_password")
    @login_required
    def api_auth_password():
        data = json_body()
        admins.set_password(str(session["admin_id"]), str(data.get("password") or ""))
        return ok()

    # ---- admin management ----

    @app.route("/api/admin/admins", methods=["GET"], endpoint="api_admin_admins")
    @permission_required("canManageUsers")
    def api_admin_admins():
        items = [_admin_json(a) for a in admins.list_admins()]
        return ok(items, count=len(items))

    @app.route("/api/admin/admins", methods=["POST"], endpoint="api_admin_admins_create")
    @permission_required("canManageUsers")
    def api_admin_admins_create():
        data = json_body()
        invitation = admins.create_admin(
            email=str(data.get("email") or ""),
            display_name=str(data.get("displayName") or ""),
            role=str(data.get("role") or ""),
            invited_by=current_actor(),
        )
        return ok(_invitation_json(invitation), 201)

    @app.route("/api/admin/admins/<admin_id>", methods=["GET"], endpoint="api_admin_admin_detail")
    @permission_required("canManageUsers")
    def api_admin_admin_detail(admin_id: str):
        return ok(_admin_json(admins.get_admin(admin_id)))

    @app.route("/api/admin/admins/<admin_id>", methods=["PATCH"], endpoint="api_admin_admin_update")
    @permission_required("canManageUsers")
    def api_admin_admin_update(admin_id: str):
        data = json_body()
        admin = admins.update_admin(admin_id, display_name=data.get("displayName"), actor=current_actor())
        return ok(_admin_json(admin))

    @app.route("/api/admin/admins/<admin_id>/role", methods=["POST"], endpoint="api_admin_admin_role")
    @permission_required("canManageUsers")
    def api_admin_admin_role(admin_id: str):
        data = json_body()
        admin = admins.update_admin_role(admin_id, str(data.get("role") or ""), actor=current_actor())
        return ok(_admin_json(admin))

    @app.route("/api/admin/admins/<admin_id>/activate", methods=["POST"], endpoint="api_admin_admin_activate")
    @permission_required("canManageUsers")
    def api_admin_admin_activate(admin_id: str):
        return ok(_admin_json(admins.activate_admin(admin_id, actor=current_actor())))

    @app.route("/api/admin/admins/<admin_id>/deactivate", methods=["POST"], endpoint="api_admin_admin_deactivate")
    @permission_required("canManageUsers")
    def api_admin_admin_deactivate(admin_id: str):
        return ok(_admin_json(admins.deactivate_admin(admin_id, actor=current_actor())))

    @app.route("/api/admin/admins/<admin_id>/resend", methods=["POST"], endpoint="api_admin_admin_resend")
    @permission_required("canManageUsers")
    def api_admin_admin_resend(admin_id: str):
        return ok(_invitation_json(admins.resend_invitation(admin_id, actor=current_actor())))

    @app.route("/api/admin/admins/<admin_id>/activity", methods=["GET"], endpoint="api_admin_admin_activity")
    @permission_required("canManageUsers")
    def api_admin_admin_activity(admin_id: str):
        limit = request.args.get("limit", type=int) or 10
        return ok(container.activity_service.get_admin_recent_activity(admin_id, limit=limit))
