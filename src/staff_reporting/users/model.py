from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Staff or manager account.

    ``is_active`` switches the account off entirely; ``next_day_active`` is the
    manager's flag for whether the staff member is expected at work tomorrow.
    """

    user_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role
    phone: Optional[str] = None
    is_active: bool = True
    next_day_active: bool = True


@dataclass(frozen=True)
class AccessLog:
    log_id: int
    user_id: int
    login_time: datetime
    logout_time: Optional[datetime] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
