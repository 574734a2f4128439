from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ReportStatus


@dataclass(frozen=True)
class DailyReport:
    """Domain entity: the free-text work report closing a staff day."""

    report_id: int
    staff_id: int
    work_date: date
    content: str
    status: ReportStatus
    work_hours: Optional[str] = None
    achievements: Optional[str] = None
    challenges: Optional[str] = None
    tomorrow_plan: Optional[str] = None
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
