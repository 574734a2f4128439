from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AlertStatus, AlertType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_db_datetime
from .model import Alert
from .repository import AlertRepository

_SELECT = """
    SELECT a.alert_id, a.staff_id, a.type, a.message, a.status, a.triggered_at, a.dismissed_at,
           u.full_name AS staff_name
    FROM alerts a
    LEFT JOIN users u ON u.user_id = a.staff_id
"""


def _to_alert(r: dict) -> Alert:
    return Alert(
        alert_id=int(r["alert_id"]),
        staff_id=int(r["staff_id"]),
        type=AlertType(r["type"]),
        message=r["message"],
        status=AlertStatus(r["status"]),
        triggered_at=r["triggered_at"],
        dismissed_at=r.get("dismissed_at"),
        staff_name=r.get("staff_name"),
    )


class MySQLAlertRepository(AlertRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active(self, staff_id: int, alert_type: AlertType) -> Optional[Alert]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE a.staff_id=%s AND a.type=%s AND a.status=%s ORDER BY a.triggered_at DESC LIMIT 1",
                (int(staff_id), alert_type.value, AlertStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_alert(r) if r else None

    def create(self, *, staff_id: int, alert_type: AlertType, message: str, triggered_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO alerts(staff_id, type, message, status, triggered_at) VALUES(%s,%s,%s,%s,%s)",
                (int(staff_id), alert_type.value, message, AlertStatus.ACTIVE.value, to_db_datetime(triggered_at)),
            )
            return int(cur.lastrowid)

    def dismiss(self, *, alert_id: int, dismissed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE alerts
                SET status=%s, dismissed_at=%s, updated_at=UTC_TIMESTAMP()
                WHERE alert_id=%s AND status=%s
                """,
                (AlertStatus.DISMISSED.value, to_db_datetime(dismissed_at), int(alert_id), AlertStatus.ACTIVE.value),
            )
            return cur.rowcount > 0

    def list_active(self) -> Sequence[Alert]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE a.status=%s ORDER BY a.triggered_at DESC", (AlertStatus.ACTIVE.value,))
            return [_to_alert(r) for r in fetchall(cur)]
