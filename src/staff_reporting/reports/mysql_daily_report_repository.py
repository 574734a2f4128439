from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import ReportStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_db_datetime
from .model import DailyReport
from .repository import DailyReportRepository

_COLUMNS = """
    report_id, staff_id, work_date, content, status,
    work_hours, achievements, challenges, tomorrow_plan, submitted_at, created_at
"""


def _to_report(r: dict) -> DailyReport:
    return DailyReport(
        report_id=int(r["report_id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        content=r["content"],
        status=ReportStatus(r["status"]),
        work_hours=r.get("work_hours"),
        achievements=r.get("achievements"),
        challenges=r.get("challenges"),
        tomorrow_plan=r.get("tomorrow_plan"),
        submitted_at=r.get("submitted_at"),
        created_at=r.get("created_at"),
    )


class MySQLDailyReportRepository(DailyReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_date(self, staff_id: int, work_date: date) -> Optional[DailyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_reports
                WHERE staff_id=%s AND work_date=%s AND status IN (%s, %s)
                ORDER BY created_at DESC, report_id DESC
                LIMIT 1
                """,
                (int(staff_id), work_date, ReportStatus.DRAFT.value, ReportStatus.SUBMITTED.value),
            )
            r = fetchone(cur)
            return _to_report(r) if r else None

    def list_recent(self, staff_id: int, limit: int) -> Sequence[DailyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_reports
                WHERE staff_id=%s AND status <> %s
                ORDER BY work_date DESC, created_at DESC
                LIMIT %s
                """,
                (int(staff_id), ReportStatus.SUPERSEDED.value, int(limit)),
            )
            return [_to_report(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        staff_id: int,
        work_date: date,
        content: str,
        status: ReportStatus,
        work_hours: Optional[str] = None,
        achievements: Optional[str] = None,
        challenges: Optional[str] = None,
        tomorrow_plan: Optional[str] = None,
        submitted_at: Optional[datetime] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_reports(
                    staff_id, work_date, content, status, work_hours, achievements, challenges,
                    tomorrow_plan, submitted_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(staff_id),
                    work_date,
                    content,
                    status.value,
                    work_hours,
                    achievements,
                    challenges,
                    tomorrow_plan,
                    to_db_datetime(submitted_at),
                ),
            )
            return int(cur.lastrowid)

    def update_draft(
        self,
        *,
        report_id: int,
        content: str,
        work_hours: Optional[str] = None,
        achievements: Optional[str] = None,
        challenges: Optional[str] = None,
        tomorrow_plan: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_reports
                SET content=%s, work_hours=%s, achievements=%s, challenges=%s, tomorrow_plan=%s,
                    updated_at=UTC_TIMESTAMP()
                WHERE report_id=%s AND status=%s
                """,
                (content, work_hours, achievements, challenges, tomorrow_plan, int(report_id), ReportStatus.DRAFT.value),
            )
            return cur.rowcount > 0

    def transition_for_date(
        self,
        *,
        staff_id: int,
        work_date: date,
        from_statuses: Iterable[ReportStatus],
        to_status: ReportStatus,
        submitted_at: Optional[datetime] = None,
    ) -> int:
        statuses = [s.value for s in from_statuses]
        if not statuses:
            return 0
        placeholders = ",".join(["%s"] * len(statuses))

        set_parts = ["status=%s", "updated_at=UTC_TIMESTAMP()"]
        params: list[object] = [to_status.value]
        if to_status in {ReportStatus.SUBMITTED, ReportStatus.DRAFT}:
            set_parts.append("submitted_at=%s")
            params.append(to_db_datetime(submitted_at))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE daily_reports
                SET {", ".join(set_parts)}
                WHERE staff_id=%s AND work_date=%s AND status IN ({placeholders})
                """,
                (*params, int(staff_id), work_date, *statuses),
            )
            return int(cur.rowcount)
