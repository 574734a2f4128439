from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_db_datetime
from .model import AccessLog, User
from .repository import AccessLogRepository, UserRepository

_USER_COLUMNS = "user_id, full_name, email, password_hash, role, phone, is_active, next_day_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        phone=row.get("phone"),
        is_active=bool(row.get("is_active", True)),
        next_day_active=bool(row.get("next_day_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        phone: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, phone, is_active, next_day_active)
                VALUES(%s,%s,%s,%s,%s,1,1)
                """,
                (full_name, email, password_hash, role.value, phone),
            )
            return int(cur.lastrowid)

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET is_active=%s WHERE user_id=%s AND role=%s",
                (1 if is_active else 0, int(user_id), Role.STAFF.value),
            )
            return cur.rowcount > 0

    def set_next_day_active(self, user_id: int, *, next_day_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET next_day_active=%s WHERE user_id=%s AND role=%s",
                (1 if next_day_active else 0, int(user_id), Role.STAFF.value),
            )
            return cur.rowcount > 0

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE role=%s ORDER BY full_name, user_id", (role.value,))
            return [_to_user(r) for r in fetchall(cur)]


class MySQLAccessLogRepository(AccessLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record_login(self, *, user_id: int, login_time: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO access_logs(user_id, login_time, ip_address, user_agent) VALUES(%s,%s,%s,%s)",
                (int(user_id), to_db_datetime(login_time), ip_address, user_agent),
            )
            return int(cur.lastrowid)

    def record_logout(self, *, user_id: int, logout_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE access_logs
                SET logout_time=%s
                WHERE user_id=%s AND logout_time IS NULL
                ORDER BY login_time DESC
                LIMIT 1
                """,
                (to_db_datetime(logout_time), int(user_id)),
            )
            return cur.rowcount > 0

    def list_recent(self, user_id: int, limit: int) -> Sequence[AccessLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, user_id, login_time, logout_time, ip_address, user_agent
                FROM access_logs
                WHERE user_id=%s
                ORDER BY login_time DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [
                AccessLog(
                    log_id=int(r["log_id"]),
                    user_id=int(r["user_id"]),
                    login_time=r["login_time"],
                    logout_time=r.get("logout_time"),
                    ip_address=r.get("ip_address"),
                    user_agent=r.get("user_agent"),
                )
                for r in fetchall(cur)
            ]
