from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import ReportStatus
from ..core.exceptions import WriteFailedError
from .model import DailyReport
from .repository import DailyReportRepository

logger = logging.getLogger(__name__)


class DailyReportService:
    """Daily work reports. Stage gating is applied by the attendance service."""

    def __init__(self, reports: DailyReportRepository):
        self._reports = reports

    def submit(
        self,
        *,
        staff_id: int,
        work_date: date,
        content: str,
        now: datetime,
        work_hours: Optional[str] = None,
        achievements: Optional[str] = None,
        challenges: Optional[str] = None,
        tomorrow_plan: Optional[str] = None,
    ) -> int:
        """Submit the day's report; earlier drafts/submissions become superseded."""

        content = require_non_empty(content, "Report content")

        superseded = self._reports.transition_for_date(
            staff_id=staff_id,
            work_date=work_date,
            from_statuses=(ReportStatus.DRAFT, ReportStatus.SUBMITTED),
            to_status=ReportStatus.SUPERSEDED,
        )
        if superseded:
            logger.info("superseded %d report(s) for staff=%s date=%s", superseded, staff_id, work_date)

        return self._reports.create(
            staff_id=staff_id,
            work_date=work_date,
            content=content,
            status=ReportStatus.SUBMITTED,
            work_hours=optional_text(work_hours),
            achievements=optional_text(achievements),
            challenges=optional_text(challenges),
            tomorrow_plan=optional_text(tomorrow_plan),
            submitted_at=now,
        )

    def save_draft(
        self,
        *,
        staff_id: int,
        work_date: date,
        content: str,
        work_hours: Optional[str] = None,
        achievements: Optional[str] = None,
        challenges: Optional[str] = None,
        tomorrow_plan: Optional[str] = None,
    ) -> int:
        content = require_non_empty(content, "Report content")
        current = self._reports.get_active_for_date(staff_id, work_date)

        if current and current.status == ReportStatus.DRAFT:
            ok = self._reports.update_draft(
                report_id=current.report_id,
                content=content,
                work_hours=optional_text(work_hours),
                achievements=optional_text(achievements),
                challenges=optional_text(challenges),
                tomorrow_plan=optional_text(tomorrow_plan),
            )
            if not ok:
                raise WriteFailedError("Failed to save the draft report")
            return current.report_id

        return self._reports.create(
            staff_id=staff_id,
            work_date=work_date,
            content=content,
            status=ReportStatus.DRAFT,
            work_hours=optional_text(work_hours),
            achievements=optional_text(achievements),
            challenges=optional_text(challenges),
            tomorrow_plan=optional_text(tomorrow_plan),
        )

    def get_for_date(self, staff_id: int, work_date: date) -> Optional[DailyReport]:
        return self._reports.get_active_for_date(staff_id, work_date)

    def is_submitted(self, staff_id: int, work_date: date) -> bool:
        report = self._reports.get_active_for_date(staff_id, work_date)
        return bool(report and report.status == ReportStatus.SUBMITTED)

    def submit_drafts(self, *, staff_id: int, work_date: date, now: datetime) -> int:
        return self._reports.transition_for_date(
            staff_id=staff_id,
            work_date=work_date,
            from_statuses=(ReportStatus.DRAFT,),
            to_status=ReportStatus.SUBMITTED,
            submitted_at=now,
        )

    def archive_day(self, *, staff_id: int, work_date: date) -> int:
        return self._reports.transition_for_date(
            staff_id=staff_id,
            work_date=work_date,
            from_statuses=(ReportStatus.DRAFT, ReportStatus.SUBMITTED),
            to_status=ReportStatus.ARCHIVED,
        )

    def reopen_submitted(self, *, staff_id: int, work_date: date) -> int:
        return self._reports.transition_for_date(
            staff_id=staff_id,
            work_date=work_date,
            from_statuses=(ReportStatus.SUBMITTED,),
            to_status=ReportStatus.DRAFT,
            submitted_at=None,
        )

    def list_history(self, staff_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        return [
            {
                "report_id": r.report_id,
                "date": r.work_date.strftime("%Y-%m-%d"),
                "status": r.status.value,
                "content": r.content,
                "work_hours": r.work_hours or "",
                "achievements": r.achievements or "",
                "challenges": r.challenges or "",
                "tomorrow_plan": r.tomorrow_plan or "",
                "submitted_at": r.submitted_at.isoformat() if r.submitted_at else None,
            }
            for r in self._reports.list_recent(staff_id, limit)
        ]
