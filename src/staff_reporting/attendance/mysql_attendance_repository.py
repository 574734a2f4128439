from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from mysql.connector import errorcode, errors

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrentUpdateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, set_clause, to_db_datetime
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, staff_id, work_date, status, version,
    wake_up_time, wake_up_notes,
    departure_time, departure_notes, destination, route_photo_url, appearance_photo_url,
    arrival_time, arrival_location, arrival_gps_location, arrival_notes,
    created_at, updated_at
"""

_WRITABLE = frozenset(
    {
        "status",
        "wake_up_time",
        "wake_up_notes",
        "departure_time",
        "departure_notes",
        "destination",
        "route_photo_url",
        "appearance_photo_url",
        "arrival_time",
        "arrival_location",
        "arrival_gps_location",
        "arrival_notes",
    }
)

_CURRENT_STATUSES = tuple(s.value for s in AttendanceStatus if s.is_current)


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        version=int(r.get("version") or 1),
        wake_up_time=r.get("wake_up_time"),
        wake_up_notes=r.get("wake_up_notes"),
        departure_time=r.get("departure_time"),
        departure_notes=r.get("departure_notes"),
        destination=r.get("destination"),
        route_photo_url=r.get("route_photo_url"),
        appearance_photo_url=r.get("appearance_photo_url"),
        arrival_time=r.get("arrival_time"),
        arrival_location=r.get("arrival_location"),
        arrival_gps_location=r.get("arrival_gps_location"),
        arrival_notes=r.get("arrival_notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _db_values(fields: dict[str, Any]) -> dict[str, Any]:
    out = {}
    for k, v in fields.items():
        if isinstance(v, AttendanceStatus):
            v = v.value
        out[k] = to_db_datetime(v)
    return out


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_latest_for_date(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE staff_id=%s AND work_date=%s
                ORDER BY created_at DESC, attendance_id DESC
                LIMIT 1
                """,
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_current(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        placeholders = ",".join(["%s"] * len(_CURRENT_STATUSES))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE staff_id=%s AND work_date=%s AND status IN ({placeholders})
                ORDER BY created_at DESC, attendance_id DESC
                LIMIT 1
                """,
                (int(staff_id), work_date, *_CURRENT_STATUSES),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_staff(self, staff_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE staff_id=%s
                ORDER BY work_date DESC, created_at DESC
                LIMIT %s
                """,
                (int(staff_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_range_for_staff(self, staff_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE staff_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC, created_at DESC
                """,
                (int(staff_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create(self, *, staff_id: int, work_date: date, status: AttendanceStatus, fields: dict[str, Any]) -> AttendanceRecord:
        values = _db_values(fields)
        unknown = set(values) - _WRITABLE
        if unknown:
            raise ValueError(f"Unknown columns: {sorted(unknown)}")
        cols = ["staff_id", "work_date", "status", "version", *sorted(values)]
        params = [int(staff_id), work_date, status.value, 1, *[values[c] for c in sorted(values)]]

        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    f"INSERT INTO attendance_records({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
                    tuple(params),
                )
            except errors.IntegrityError as exc:
                # uq_attendance_current: another request opened the day first.
                if exc.errno != errorcode.ER_DUP_ENTRY:
                    raise
                raise ConcurrentUpdateError(
                    "Today's attendance record was created by another request, reload and retry"
                ) from exc
            new_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (new_id,))
            return _to_record(fetchone(cur))

    def update(self, *, attendance_id: int, expected_version: int, fields: dict[str, Any]) -> AttendanceRecord:
        assignments, params = set_clause(_db_values(fields), _WRITABLE)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {assignments}, version=version+1, updated_at=UTC_TIMESTAMP()
                WHERE attendance_id=%s AND version=%s
                """,
                (*params, int(attendance_id), int(expected_version)),
            )
            if cur.rowcount == 0:
                raise ConcurrentUpdateError("The attendance record was changed by another request, reload and retry")

            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return _to_record(fetchone(cur))
