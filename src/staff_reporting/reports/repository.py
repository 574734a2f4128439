from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import ReportStatus
from .model import DailyReport


class DailyReportRepository(Protocol):
    def get_active_for_date(self, staff_id: int, work_date: date) -> Optional[DailyReport]:
        """Latest draft or submitted report of the day."""

        raise NotImplementedError

    def list_recent(self, staff_id: int, limit: int) -> Sequence[DailyReport]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def transition_for_date(
        self,
        *,
        staff_id: int,
        work_date: date,
        from_statuses: Iterable[ReportStatus],
        to_status: ReportStatus,
        submitted_at: Optional[datetime] = None,
    ) -> int:
        """Move every report of the day in ``from_statuses`` to ``to_status``.

        Returns the number of rows changed.
        """

        raise NotImplementedError
