from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..core.enums import ShiftStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ShiftSchedule, StaffAvailability, Worksite
from .repository import AvailabilityRepository, ShiftScheduleRepository

_SELECT = """
    SELECT
        sc.schedule_id, sc.staff_id, sc.work_date, sc.start_time, sc.end_time,
        sc.status, sc.location, sc.notes,
        u.full_name AS staff_name
    FROM shift_schedules sc
    LEFT JOIN users u ON u.user_id = sc.staff_id
"""


def _to_shift(r: dict) -> ShiftSchedule:
    return ShiftSchedule(
        schedule_id=int(r["schedule_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        status=ShiftStatus(r["status"]),
        location=r.get("location"),
        notes=r.get("notes"),
        staff_name=r.get("staff_name"),
    )


class MySQLShiftScheduleRepository(ShiftScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[ShiftSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE sc.schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def create(
        self,
        *,
        staff_id: int,
        work_date: date,
        start_time: time,
        end_time: time,
        status: ShiftStatus,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_schedules(staff_id, work_date, start_time, end_time, status, location, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(staff_id), work_date, start_time, end_time, status.value, location, notes),
            )
            return int(cur.lastrowid)

    def set_status(self, *, schedule_id: int, status: ShiftStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shift_schedules SET status=%s, updated_at=UTC_TIMESTAMP() WHERE schedule_id=%s",
                (status.value, int(schedule_id)),
            )
            return cur.rowcount > 0

    def set_end_time(self, *, schedule_id: int, end_time: time) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shift_schedules SET end_time=%s, updated_at=UTC_TIMESTAMP() WHERE schedule_id=%s",
                (end_time, int(schedule_id)),
            )
            return cur.rowcount > 0

    def delete(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def list_range(self, *, start: date, end: date, staff_id: Optional[int] = None) -> Sequence[ShiftSchedule]:
        clauses = ["sc.work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if staff_id is not None:
            clauses.append("sc.staff_id=%s")
            params.append(int(staff_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY sc.work_date, sc.start_time, sc.schedule_id",
                tuple(params),
            )
            return [_to_shift(r) for r in fetchall(cur)]


class MySQLAvailabilityRepository(AvailabilityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_date(self, staff_id: int, work_date: date) -> Optional[StaffAvailability]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    sa.availability_id, sa.staff_id, sa.work_date, sa.notes,
                    w.worksite_id, w.name, w.address, w.description
                FROM staff_availability sa
                LEFT JOIN worksites w ON w.worksite_id = sa.worksite_id
                WHERE sa.staff_id=%s AND sa.work_date=%s
                LIMIT 1
                """,
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None

            worksite = None
            if r.get("worksite_id") is not None:
                worksite = Worksite(
                    worksite_id=int(r["worksite_id"]),
                    name=r["name"],
                    address=r.get("address"),
                    description=r.get("description"),
                )
            return StaffAvailability(
                availability_id=int(r["availability_id"]),
                staff_id=int(r["staff_id"]),
                work_date=r["work_date"],
                worksite=worksite,
                notes=r.get("notes"),
            )
