from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..activity_log.service import ActivityLogService
from ..common.datetime_utils import now_utc
from ..common.normalize import normalize_email
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import INVITATION_EXPIRY_DAYS, ROLE_PERMISSIONS
from ..core.enums import ActivityType, AdminRole, AdminStatus, EntityType
from ..core.exceptions import AdminError, AuthenticationError, AuthorizationError
from .model import Actor, Admin
from .repository import AdminRepository

logger = logging.getLogger(__name__)


def _parse_role(role: Any) -> AdminRole:
    try:
        return AdminRole(role)
    except ValueError:
        raise AdminError(f"Invalid role: {role}", AdminError.INVALID_ROLE)


def has_permission(admin: Optional[Admin], permission: str) -> bool:
    if admin is None or not admin.is_active:
        return False
    if admin.role == AdminRole.SUPERADMIN:
        return True
    return bool(admin.permissions.get(permission, ROLE_PERMISSIONS[admin.role].get(permission, False)))


def is_super_admin(admin: Optional[Admin]) -> bool:
    return bool(admin) and admin.role == AdminRole.SUPERADMIN and admin.is_active


@dataclass(frozen=True)
class SessionAdmin:
    """What we store into Flask session after login."""

    admin_id: str
    email: str
    display_name: str
    role: AdminRole

    def as_actor(self) -> Actor:
        return Actor(admin_id=self.admin_id, email=self.email, name=self.display_name)


@dataclass(frozen=True)
class Invitation:
    """A freshly issued invitation. ``token`` is only ever returned here; the store keeps its hash."""

    admin: Admin
    token: str
    expires_at: datetime


def _issue_invitation_token(now: datetime) -> tuple[str, dict[str, Any]]:
    token = secrets.token_urlsafe(32)
    expires_at = now + timedelta(days=INVITATION_EXPIRY_DAYS)
    return token, {"invitationTokenHash": generate_password_hash(token), "invitationExpiresAt": expires_at}


def _token_matches(token_hash: Optional[str], token: str) -> bool:
    if not token_hash or not token:
        return False
    try:
        return check_password_hash(token_hash, token)
    except ValueError:
        return False


class AdminService:
    """Use cases: invite and manage admin accounts."""

    def __init__(self, admins: AdminRepository, activity: ActivityLogService):
        self._admins = admins
        self._activity = activity

    def _require(self, admin_id: str) -> Admin:
        admin = self._admins.get_by_id(admin_id)
        if not admin:
            raise AdminError(f"Admin {admin_id} not found", AdminError.ADMIN_NOT_FOUND)
        return admin

    def get_admin(self, admin_id: str) -> Admin:
        return self._require(admin_id)

    def list_admins(self) -> list[Admin]:
        return list(self._admins.list_all())

    def create_admin(
        self,
        *,
        email: str,
        display_name: str,
        role: str,
        invited_by: Actor,
        now: datetime | None = None,
    ) -> Invitation:
        email = normalize_email(require_email(email))
        display_name = require_non_empty(display_name, "Display name")
        admin_role = _parse_role(role)
        if self._admins.get_by_email(email):
            raise AdminError(f"An admin with email {email} already exists", AdminError.DUPLICATE_EMAIL)

        now = now or now_utc()
        token, token_fields = _issue_invitation_token(now)
        data = {
            **token_fields,
            "email": email,
            "displayName": display_name,
            "role": admin_role.value,
            "permissions": dict(ROLE_PERMISSIONS[admin_role]),
            "status": AdminStatus.PENDING.value,
            "invitedBy": invited_by.admin_id,
            "invitedAt": now,
            "createdAt": now,
            "updatedAt": now,
        }
        admin_id = self._admins.create(data)
        self._activity.log_activity(
            type=ActivityType.CREATE,
            action="invite_admin",
            entity_type=EntityType.USER,
            entity_id=admin_id,
            description=f"Invited {email} as {admin_role.value}",
            actor=invited_by,
        )
        return Invitation(admin=self._require(admin_id), token=token, expires_at=token_fields["invitationExpiresAt"])

    def resend_invitation(self, admin_id: str, *, actor: Actor, now: datetime | None = None) -> Invitation:
        """Issue a new token; the previous link stops working."""
        admin = self._require(admin_id)
        if admin.status != AdminStatus.PENDING:
            raise AdminError("Only pending invitations can be resent", AdminError.INVALID_STATUS)
        now = now or now_utc()
        token, token_fields = _issue_invitation_token(now)
        self._admins.update(admin_id, {**token_fields, "invitedAt": now, "invitedBy": actor.admin_id})
        return Invitation(admin=self._require(admin_id), token=token, expires_at=token_fields["invitationExpiresAt"])

    def accept_invitation(self, admin_id: str, token: str, password: str, *, now: datetime | None = None) -> Admin:
        admin = self._admins.get_by_id(admin_id)
        now = now or now_utc()
        if (
            admin is None
            or admin.status != AdminStatus.PENDING
            or not _token_matches(admin.invitation_token_hash, token)
            or admin.invitation_expires_at is None
            or admin.invitation_expires_at <= now
        ):
            raise AuthorizationError("This invitation link is invalid or has expired", AdminError.INVALID_INVITATION)

        require_min_length(password, "Password", 8)
        self._admins.update(
            admin_id,
            {
                "passwordHash": generate_password_hash(password),
                "status": AdminStatus.ACTIVE.value,
                "invitationTokenHash": None,
                "invitationExpiresAt": None,
            },
        )
        logger.info("Admin %s accepted their invitation", admin.email)
        return self._require(admin_id)

    def update_admin(self, admin_id: str, *, display_name: Optional[str] = None, actor: Actor) -> Admin:
        self._require(admin_id)
        fields: dict[str, Any] = {}
        if display_name is not None:
            fields["displayName"] = require_non_empty(display_name, "Display name")
        if fields:
            self._admins.update(admin_id, fields)
            self._activity.log_activity(
                type=ActivityType.UPDATE,
                action="update_admin",
                entity_type=EntityType.USER,
                entity_id=admin_id,
                description="Updated admin profile",
                actor=actor,
            )
        return self._require(admin_id)

    def update_admin_role(self, admin_id: str, role: str, *, actor: Actor) -> Admin:
        self._require(admin_id)
        admin_role = _parse_role(role)
        if admin_id == actor.admin_id:
            raise AuthorizationError("You cannot change your own role")
        self._admins.update(
            admin_id,
            {"role": admin_role.value, "permissions": dict(ROLE_PERMISSIONS[admin_role])},
        )
        self._activity.log_activity(
            type=ActivityType.UPDATE,
            action="update_admin_role",
            entity_type=EntityType.USER,
            entity_id=admin_id,
            description=f"Changed role to {admin_role.value}",
            actor=actor,
        )
        return self._require(admin_id)

    def _set_status(self, admin_id: str, status: AdminStatus, *, actor: Actor) -> Admin:
        self._require(admin_id)
        if admin_id == actor.admin_id and status == AdminStatus.INACTIVE:
            raise AuthorizationError("You cannot deactivate your own account")
        self._admins.update(admin_id, {"status": status.value})
        self._activity.log_activity(
            type=ActivityType.UPDATE,
            action=f"set_admin_{status.value}",
            entity_type=EntityType.USER,
            entity_id=admin_id,
            description=f"Set admin status to {status.value}",
            actor=actor,
        )
        return self._require(admin_id)

    def activate_admin(self, admin_id: str, *, actor: Actor) -> Admin:
        return self._set_status(admin_id, AdminStatus.ACTIVE, actor=actor)

    def deactivate_admin(self, admin_id: str, *, actor: Actor) -> Admin:
        return self._set_status(admin_id, AdminStatus.INACTIVE, actor=actor)

    def set_password(self, admin_id: str, password: str) -> None:
        """Password change for a signed-in admin."""
        self._require(admin_id)
        require_min_length(password, "Password", 8)
        self._admins.update(admin_id, {"passwordHash": generate_password_hash(password)})


class AuthService:
    """Use case: authenticate admin (login)."""

    def __init__(self, admins: AdminRepository, activity: ActivityLogService):
        self._admins = admins
        self._activity = activity

    def authenticate(self, email: str, password: str, *, now: datetime | None = None) -> SessionAdmin:
        admin = self._admins.get_by_email(normalize_email(email))
        if not admin or not admin.is_active or not admin.password_hash:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(admin.password_hash, password or "")
        except ValueError:
            ok = False
        if not ok:
            raise AuthenticationError("Invalid email or password")

        self._admins.update(admin.admin_id, {"lastLoginAt": now or now_utc()})
        session_admin = SessionAdmin(
            admin_id=admin.admin_id,
            email=admin.email,
            display_name=admin.display_name,
            role=admin.role,
        )
        self._activity.log_activity(
            type=ActivityType.LOGIN,
            action="login",
            entity_type=EntityType.USER,
            entity_id=admin.admin_id,
            description=f"{admin.email} signed in",
            actor=session_admin.as_actor(),
        )
        return session_admin

    def load_admin(self, admin_id: str) -> Optional[Admin]:
        return self._admins.get_by_id(admin_id)
