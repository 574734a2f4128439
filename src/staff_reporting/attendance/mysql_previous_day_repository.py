from __future__ import annotations

from datetime import date, time
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import PreviousDayReport
from .repository import PreviousDayReportRepository

_COLUMNS = """
    report_id, staff_id, report_date,
    next_wake_up_time, next_departure_time, next_arrival_time,
    appearance_photo_url, route_photo_url, notes,
    actual_attendance_record_id, created_at
"""


def _to_report(r: dict) -> PreviousDayReport:
    linked = r.get("actual_attendance_record_id")
    return PreviousDayReport(
        report_id=int(r["report_id"]),
        staff_id=int(r["staff_id"]),
        report_date=r["report_date"],
        next_wake_up_time=normalize_mysql_time(r["next_wake_up_time"]),
        next_departure_time=normalize_mysql_time(r["next_departure_time"]),
        next_arrival_time=normalize_mysql_time(r["next_arrival_time"]),
        appearance_photo_url=r["appearance_photo_url"],
        route_photo_url=r["route_photo_url"],
        notes=r.get("notes"),
        actual_attendance_record_id=int(linked) if linked is not None else None,
        created_at=r.get("created_at"),
    )


class MySQLPreviousDayReportRepository(PreviousDayReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_by_id(self, cur, report_id: int) -> PreviousDayReport:
        cur.execute(f"SELECT {_COLUMNS} FROM previous_day_reports WHERE report_id=%s", (int(report_id),))
        return _to_report(fetchone(cur))

    def get_latest_unused(self, staff_id: int) -> Optional[PreviousDayReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM previous_day_reports
                WHERE staff_id=%s AND actual_attendance_record_id IS NULL
                ORDER BY created_at DESC, report_id DESC
                LIMIT 1
                """,
                (int(staff_id),),
            )
            r = fetchone(cur)
            return _to_report(r) if r else None

    def get_for_record(self, attendance_id: int) -> Optional[PreviousDayReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM previous_day_reports WHERE actual_attendance_record_id=%s LIMIT 1",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_report(r) if r else None

    def get_linked_for_date(self, staff_id: int, work_date: date) -> Optional[PreviousDayReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.report_id, p.staff_id, p.report_date,
                       p.next_wake_up_time, p.next_departure_time, p.next_arrival_time,
                       p.appearance_photo_url, p.route_photo_url, p.notes,
                       p.actual_attendance_record_id, p.created_at
                FROM previous_day_reports p
                JOIN attendance_records ar ON ar.attendance_id = p.actual_attendance_record_id
                WHERE ar.staff_id=%s AND ar.work_date=%s
                ORDER BY p.created_at DESC, p.report_id DESC
                LIMIT 1
                """,
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _to_report(r) if r else None

    def create(
        self,
        *,
        staff_id: int,
        report_date: date,
        next_wake_up_time: time,
        next_departure_time: time,
        next_arrival_time: time,
        appearance_photo_url: str,
        route_photo_url: str,
        notes: Optional[str] = None,
    ) -> PreviousDayReport:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO previous_day_reports(
                    staff_id, report_date, next_wake_up_time, next_departure_time, next_arrival_time,
                    appearance_photo_url, route_photo_url, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(staff_id),
                    report_date,
                    next_wake_up_time,
                    next_departure_time,
                    next_arrival_time,
                    appearance_photo_url,
                    route_photo_url,
                    notes,
                ),
            )
            return self._get_by_id(cur, int(cur.lastrowid))

    def update(
        self,
        *,
        report_id: int,
        report_date: date,
        next_wake_up_time: time,
        next_departure_time: time,
        next_arrival_time: time,
        appearance_photo_url: str,
        route_photo_url: str,
        notes: Optional[str] = None,
    ) -> PreviousDayReport:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE previous_day_reports
                SET report_date=%s, next_wake_up_time=%s, next_departure_time=%s, next_arrival_time=%s,
                    appearance_photo_url=%s, route_photo_url=%s, notes=%s, updated_at=UTC_TIMESTAMP()
                WHERE report_id=%s
                """,
                (
                    report_date,
                    next_wake_up_time,
                    next_departure_time,
                    next_arrival_time,
                    appearance_photo_url,
                    route_photo_url,
                    notes,
                    int(report_id),
                ),
            )
            return self._get_by_id(cur, report_id)

    def link(self, *, report_id: int, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE previous_day_reports
                SET actual_attendance_record_id=%s, updated_at=UTC_TIMESTAMP()
                WHERE report_id=%s AND actual_attendance_record_id IS NULL
                """,
                (int(attendance_id), int(report_id)),
            )
            return cur.rowcount > 0
