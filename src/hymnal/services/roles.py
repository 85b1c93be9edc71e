"""Admin role resolution and granting.

The role is read from users/{uid}/role. When the record is missing, the
lookup times out, or the database fails, the configured e-mail lists decide.
Resolved statuses are cached per uid for a short time.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from hymnal.core.logging_config import get_logger
from hymnal.db.models import Role, Session
from hymnal.services.auth import NotSignedInError
from hymnal.services.remote import RealtimeDatabaseClient, RemoteDatabaseError, RemoteTimeoutError

logger = get_logger(__name__)

DEFAULT_ADMIN_PERMISSIONS = ("manage_songs", "view_analytics", "access_debug")

# Fields only admins carry; removed on demotion
ADMIN_ONLY_FIELDS = ("adminGrantedAt", "permissions")


class InvalidRoleError(ValueError):
    """Role is not one of user, admin, super_admin."""


@dataclass
class AdminStatus:
    """Resolved role of a user.

    Attributes:
        is_admin: admin or super_admin
        is_super_admin: super_admin only
        role: Resolved role
        source: "database", "fallback" or "none"
        permissions: Permissions stored on the user record
    """

    is_admin: bool = False
    is_super_admin: bool = False
    role: Role = Role.USER
    source: str = "none"
    permissions: tuple[str, ...] = ()


@dataclass
class AuthorizationResult:
    authorized: bool
    role: Role
    reason: str = ""


class RoleResolver:
    """Resolves and grants user roles.

    Attributes:
        db: Realtime Database client
        admin_emails: Fallback admin e-mails
        super_admin_emails: Fallback super admin e-mails
        timeout_seconds: Timeout of the users/{uid} read
        cache_ttl_seconds: Lifetime of cached statuses
    """

    def __init__(
        self,
        db: Optional[RealtimeDatabaseClient],
        admin_emails: Iterable[str] = (),
        super_admin_emails: Iterable[str] = (),
        timeout_seconds: float = 8,
        cache_ttl_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.db = db
        self.admin_emails = {e.strip().lower() for e in admin_emails if e.strip()}
        self.super_admin_emails = {e.strip().lower() for e in super_admin_emails if e.strip()}
        self.timeout_seconds = timeout_seconds
        self.cache_ttl_seconds = cache_ttl_seconds
        self.clock = clock
        self._cache: dict[str, tuple[float, AdminStatus]] = {}

    def _fallback(self, email: str) -> AdminStatus:
        email = email.lower()
        if email in self.super_admin_emails:
            return AdminStatus(True, True, Role.SUPER_ADMIN, "fallback")
        if email in self.admin_emails:
            return AdminStatus(True, False, Role.ADMIN, "fallback")
        return AdminStatus(False, False, Role.USER, "fallback")

    def _lookup(self, session: Session) -> AdminStatus:
        if self.db is None:
            return self._fallback(session.email)

        db = self.db.with_token(session.id_token)
        try:
            record = db.get(f"users/{session.uid}", timeout=self.timeout_seconds)
        except RemoteTimeoutError:
            logger.warning("Role lookup for %s timed out, using e-mail lists", session.uid)
            return self._fallback(session.email)
        except RemoteDatabaseError as e:
            logger.warning("Role lookup for %s failed: %s", session.uid, e)
            return self._fallback(session.email)

        if not isinstance(record, dict):
            return self._fallback(session.email)

        role = Role.parse(record.get("role"))
        permissions = record.get("permissions") or []
        if isinstance(permissions, dict):
            permissions = [k for k, v in permissions.items() if v]
        return AdminStatus(
            is_admin=role.is_admin,
            is_super_admin=role == Role.SUPER_ADMIN,
            role=role,
            source="database",
            permissions=tuple(str(p) for p in permissions),
        )

    def resolve(self, session: Optional[Session]) -> AdminStatus:
        """Resolve the role of a session.

        Guests and sessions without an e-mail are never admins.
        """
        if session is None or session.is_anonymous or not session.email:
            return AdminStatus()

        cached = self._cache.get(session.uid)
        if cached is not None and self.clock() - cached[0] < self.cache_ttl_seconds:
            return cached[1]

        status = self._lookup(session)
        self._cache[session.uid] = (self.clock(), status)
        logger.debug("Resolved %s as %s (%s)", session.uid, status.role.value, status.source)
        return status

    def clear_cache(self, uid: Optional[str] = None) -> None:
        if uid is None:
            self._cache.clear()
        else:
            self._cache.pop(uid, None)

    def force_refresh(self, session: Session) -> AdminStatus:
        self.clear_cache(session.uid)
        return self.resolve(session)

    def check_role(self, session: Optional[Session], required: Role) -> AuthorizationResult:
        """Check that a session holds at least `required`."""
        status = self.resolve(session)
        if session is None or session.is_anonymous:
            return AuthorizationResult(False, status.role, "Not signed in")

        if required == Role.SUPER_ADMIN:
            authorized = status.is_super_admin
        elif required == Role.ADMIN:
            authorized = status.is_admin
        else:
            authorized = True

        reason = "" if authorized else f"Requires {required.value} role"
        return AuthorizationResult(authorized, status.role, reason)

    def has_permission(self, session: Optional[Session], permission: str) -> bool:
        status = self.resolve(session)
        if status.is_super_admin:
            return True
        return status.is_admin and permission in status.permissions

    def grant_role(
        self,
        session: Optional[Session],
        target_uid: str,
        role: str,
        permissions: Optional[Iterable[str]] = None,
    ) -> dict[str, Any]:
        """Set the role of another user.

        Args:
            session: Caller's session
            target_uid: uid of the user to change
            role: "user", "admin" or "super_admin"
            permissions: Admin permissions (defaults to DEFAULT_ADMIN_PERMISSIONS)

        Returns:
            The fields written (None values are deletions)

        Raises:
            NotSignedInError: If the caller isn't signed in
            InvalidRoleError: If role isn't valid
        """
        if session is None or session.is_anonymous:
            raise NotSignedInError("granting roles requires an account")

        try:
            new_role = Role(role)
        except ValueError:
            raise InvalidRoleError(f"Invalid role: {role}. Use one of: user, admin, super_admin")

        if self.db is None:
            raise RemoteDatabaseError("Realtime Database is not configured")

        now = datetime.now().isoformat()
        updates: dict[str, Any] = {
            "role": new_role.value,
            "updatedAt": now,
            "updatedBy": session.email or session.uid,
        }
        if new_role.is_admin:
            updates["adminGrantedAt"] = now
            updates["permissions"] = list(permissions or DEFAULT_ADMIN_PERMISSIONS)
        else:
            for name in ADMIN_ONLY_FIELDS:
                updates[name] = None

        self.db.with_token(session.id_token).update(f"users/{target_uid}", updates)
        self.clear_cache(target_uid)
        logger.info("%s set role of %s to %s", session.uid, target_uid, new_role.value)
        return updates
