from __future__ import annotations

from functools import wraps

from flask import session

from ..common.web import fail
from .model import Actor
from .service import AuthService, has_permission


def current_actor() -> Actor:
    return Actor(
        admin_id=str(session.get("admin_id") or ""),
        email=str(session.get("email") or ""),
        name=str(session.get("name") or ""),
    )


def make_guards(auth_service: AuthService):
    """Build ``login_required`` and ``permission_required`` bound to ``auth_service``."""

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "admin_id" not in session:
                return fail("Please sign in to continue", "UNAUTHENTICATED", 401)

            # Sessions outlive deactivation; check the stored status on every request.
            admin = auth_service.load_admin(str(session["admin_id"]))
            if admin is None or not admin.is_active:
                session.clear()
                return fail("Please sign in to continue", "UNAUTHENTICATED", 401)
            return view(*args, **kwargs)

        return wrapper

    def permission_required(permission: str):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                if "admin_id" not in session:
                    return fail("Please sign in to continue", "UNAUTHENTICATED", 401)

                # Re-read the admin so deactivation and role changes apply immediately.
                admin = auth_service.load_admin(str(session["admin_id"]))
                if not has_permission(admin, permission):
                    return fail("You do not have permission for this action", "FORBIDDEN", 403)
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return login_required, permission_required
