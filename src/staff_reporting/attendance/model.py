from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus, Stage

# Record column holding the timestamp that satisfies each on-record stage.
STAGE_TIME_FIELDS = {
    Stage.WAKEUP: "wake_up_time",
    Stage.DEPARTURE: "departure_time",
    Stage.ARRIVAL: "arrival_time",
}


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one staff member's check-ins for one calendar date.

    A date may hold several rows once a day has been completed and restarted;
    only the row in a current status (pending/partial/active) is mutated.
    """

    attendance_id: int
    staff_id: int
    work_date: date
    status: AttendanceStatus
    version: int = 1
    wake_up_time: Optional[datetime] = None
    wake_up_notes: Optional[str] = None
    departure_time: Optional[datetime] = None
    departure_notes: Optional[str] = None
    destination: Optional[str] = None
    route_photo_url: Optional[str] = None
    appearance_photo_url: Optional[str] = None
    arrival_time: Optional[datetime] = None
    arrival_location: Optional[str] = None
    arrival_gps_location: Optional[str] = None
    arrival_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_stage(self, stage: Stage) -> bool:
        field = STAGE_TIME_FIELDS.get(stage)
        return bool(field and getattr(self, field) is not None)

    @property
    def stage_count(self) -> int:
        return sum(1 for s in STAGE_TIME_FIELDS if self.has_stage(s))


@dataclass(frozen=True)
class PreviousDayReport:
    """Plan filed ahead of a work day (``report_date`` is the target day).

    ``actual_attendance_record_id`` stays None while the report is unused.
    """

    report_id: int
    staff_id: int
    report_date: date
    next_wake_up_time: time
    next_departure_time: time
    next_arrival_time: time
    appearance_photo_url: str
    route_photo_url: str
    notes: Optional[str] = None
    actual_attendance_record_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_unused(self) -> bool:
        return self.actual_attendance_record_id is None


@dataclass(frozen=True)
class CompletionOutcome:
    record_id: int
    message: str
    all_tasks_complete: bool
    missing_stages: tuple[Stage, ...] = ()
    already_completed: bool = False


@dataclass(frozen=True)
class DayTransitionOutcome:
    """Result of start-new-day and reopen-day."""

    message: str
    record_id: Optional[int] = None
    reset: bool = False
    reopened: bool = False
    already_active: bool = False
