from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import AccessLog, User


class UserRepository(Protocol):
    """Port for account storage; services depend on this, never on MySQL directly."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        phone: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def set_next_day_active(self, user_id: int, *, next_day_active: bool) -> bool:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[User]:
        raise NotImplementedError


class AccessLogRepository(Protocol):
    def record_login(self, *, user_id: int, login_time: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> int:
        raise NotImplementedError

    def record_logout(self, *, user_id: int, logout_time: datetime) -> bool:
        """Close the user's latest open session row."""

        raise NotImplementedError

    def list_recent(self, user_id: int, limit: int) -> Sequence[AccessLog]:
        raise NotImplementedError
