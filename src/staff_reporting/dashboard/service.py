"""Manager overview of every staff member's progress for a day.

Progress flags come from ``AttendanceService.get_status`` so the manager sees
exactly what the staff member's own status endpoint reports.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from ..alerts.service import AlertService
from ..attendance.service import AttendanceService
from ..attendance.workflow import DerivedStatus
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import STAGE_ORDER
from ..users.model import User
from ..users.service import UserService

OVERALL_STATUSES = ("complete", "partial", "not_started", "inactive")


@dataclass(frozen=True)
class StaffProgress:
    staff_id: int
    name: str
    email: str
    active: bool
    tasks: dict[str, bool]
    completed: int
    total: int
    overall: str
    next_action: Optional[str] = None
    active_alerts: int = 0

    @property
    def percentage(self) -> int:
        return round(self.completed * 100 / self.total) if self.total else 0

    def as_dict(self) -> dict:
        return {
            "staffId": self.staff_id,
            "name": self.name,
            "email": self.email,
            "active": self.active,
            "tasks": self.tasks,
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
            "status": self.overall,
            "nextAction": self.next_action,
            "activeAlerts": self.active_alerts,
        }


@dataclass(frozen=True)
class Overview:
    work_date: date
    rows: list[StaffProgress]
    totals: dict[str, int] = field(default_factory=dict)
    total_alerts: int = 0

    def as_dict(self) -> dict:
        total = len(self.rows)
        started = total - self.totals.get("not_started", 0) - self.totals.get("inactive", 0)
        return {
            "date": self.work_date.isoformat(),
            "staff": [r.as_dict() for r in self.rows],
            "totals": {"staff": total, **self.totals},
            "totalAlerts": self.total_alerts,
            "activityRate": round(started * 100 / total) if total else 0,
        }


def overall_status(user: User, status: DerivedStatus) -> str:
    if not user.is_active:
        return "inactive"
    if status.day_completed or status.is_all_tasks_complete:
        return "complete"
    if any(status.is_satisfied(s) for s in STAGE_ORDER):
        return "partial"
    return "not_started"


class ManagerDashboardService:
    def __init__(
        self,
        attendance: AttendanceService,
        users: UserService,
        alerts: AlertService,
        *,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        self._attendance = attendance
        self._users = users
        self._alerts = alerts
        self._tz = tz_name

    def build_overview(self, work_date: date) -> Overview:
        # Midday in the staff timezone stands in for "now" on the requested date.
        now = datetime.combine(work_date, time(12, 0), tzinfo=ZoneInfo(self._tz))
        alerts_by_staff = Counter(a.staff_id for a in self._alerts.list_active())

        rows: list[StaffProgress] = []
        for user in self._users.list_staff():
            status = self._attendance.get_status(user.user_id, now=now)
            tasks = {s.value: status.is_satisfied(s) for s in STAGE_ORDER}
            rows.append(
                StaffProgress(
                    staff_id=user.user_id,
                    name=user.full_name,
                    email=user.email,
                    active=user.is_active,
                    tasks=tasks,
                    completed=sum(tasks.values()),
                    total=len(tasks),
                    overall=overall_status(user, status),
                    next_action=status.next_action.value if status.next_action else None,
                    active_alerts=alerts_by_staff.get(user.user_id, 0),
                )
            )

        counts = Counter(r.overall for r in rows)
        return Overview(
            work_date=work_date,
            rows=rows,
            totals={k: counts.get(k, 0) for k in OVERALL_STATUSES},
            total_alerts=sum(alerts_by_staff.values()),
        )
