from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import ErrorCode, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import AccessLog, User
from .repository import AccessLogRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    email: str
    role: Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    """Use case: log staff and managers in and out."""

    def __init__(self, users: UserRepository, access_logs: AccessLogRepository):
        self._users = users
        self._access_logs = access_logs

    def authenticate(
        self,
        email: str,
        password: str,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: datetime | None = None,
    ) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.warning("failed login for user=%s", user.user_id)
            raise AuthenticationError("Invalid email or password")

        self._access_logs.record_login(
            user_id=user.user_id,
            login_time=now or _utcnow(),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info("user=%s logged in (%s)", user.user_id, user.role.value)

        return SessionUser(user_id=user.user_id, full_name=user.full_name, email=user.email, role=user.role)

    def logout(self, user_id: int, *, now: datetime | None = None) -> None:
        if not self._access_logs.record_logout(user_id=user_id, logout_time=now or _utcnow()):
            logger.info("user=%s logged out without an open access log", user_id)

    def current_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Session is no longer valid")
        return user


class UserService:
    """Use case: manage staff accounts (manager)."""

    def __init__(self, users: UserRepository, access_logs: AccessLogRepository):
        self._users = users
        self._access_logs = access_logs

    def register_staff(
        self,
        *,
        current_role: Role,
        full_name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
    ) -> int:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Manager access only")

        full_name = require_non_empty(full_name, "Full name")
        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email address is not valid", ErrorCode.INVALID_FORMAT)
        require_min_length(password, "Password", 6)

        if self._users.get_by_email(email):
            raise ValidationError("That email address is already registered", ErrorCode.INVALID_FORMAT)

        user_id = self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.STAFF,
            phone=optional_text(phone),
        )
        logger.info("registered staff user=%s", user_id)
        return user_id

    def _require_staff(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user or user.role != Role.STAFF:
            raise NotFoundError("Staff member not found")
        return user

    def set_active(self, *, current_role: Role, user_id: int, is_active: bool) -> None:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Manager access only")
        self._require_staff(user_id)
        self._users.set_active(user_id, is_active=is_active)
        logger.info("staff user=%s active=%s", user_id, is_active)

    def set_next_day_active(self, *, current_role: Role, user_id: int, next_day_active: bool) -> None:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Manager access only")
        self._require_staff(user_id)
        self._users.set_next_day_active(user_id, next_day_active=next_day_active)
        logger.info("staff user=%s next_day_active=%s", user_id, next_day_active)

    def list_staff(self) -> Sequence[User]:
        return self._users.list_by_role(Role.STAFF)

    def list_active_staff(self) -> list[User]:
        return [u for u in self._users.list_by_role(Role.STAFF) if u.is_active]

    def access_history(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AccessLog]:
        return self._access_logs.list_recent(user_id, limit)
