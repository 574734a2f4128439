from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import now_local, parse_hhmm, parse_iso_datetime, to_local
from ..common.events import AttendanceEvents, AttendanceUpdated
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import AttendanceStatus, ErrorCode, Stage
from ..core.exceptions import AlreadyRecordedError, NotFoundError, StageLockedError, ValidationError
from ..reports.service import DailyReportService
from .model import STAGE_TIME_FIELDS, AttendanceRecord, CompletionOutcome, DayTransitionOutcome, PreviousDayReport
from .repository import AttendanceRepository, PreviousDayReportRepository
from .workflow import DerivedStatus, WorkflowState, derive_status

logger = logging.getLogger(__name__)

# Stage fields carried over when a completed day is reopened.
_REOPEN_FIELDS = (
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
)


class AttendanceService:
    """Use cases of the daily check-in workflow for one staff member."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        previous_day: PreviousDayReportRepository,
        reports: DailyReportService,
        *,
        events: AttendanceEvents | None = None,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        self._attendance = attendance
        self._previous_day = previous_day
        self._reports = reports
        self._events = events or AttendanceEvents()
        self._tz = tz_name

    @property
    def events(self) -> AttendanceEvents:
        return self._events

    def _now(self, now: datetime | None) -> datetime:
        return now or now_local(self._tz)

    # ----- status -----

    def _relevant_report(self, staff_id: int, today: date, latest: Optional[AttendanceRecord]) -> Optional[PreviousDayReport]:
        linked = self._previous_day.get_linked_for_date(staff_id, today)
        if latest is not None and latest.status.is_current and linked is not None:
            return linked

        unused = self._previous_day.get_latest_unused(staff_id)
        if unused is not None and unused.report_date >= today:
            return unused
        return linked

    def get_state(self, staff_id: int, *, now: datetime | None = None) -> WorkflowState:
        today = self._now(now).date()
        latest = self._attendance.get_latest_for_date(staff_id, today)
        report = self._relevant_report(staff_id, today, latest)

        return WorkflowState(
            previous_day_reported=report is not None,
            report_date=report.report_date if report else None,
            wake_up_reported=bool(latest and latest.has_stage(Stage.WAKEUP)),
            departure_reported=bool(latest and latest.has_stage(Stage.DEPARTURE)),
            arrival_reported=bool(latest and latest.has_stage(Stage.ARRIVAL)),
            daily_report_submitted=self._reports.is_submitted(staff_id, today),
            day_completed=bool(latest and latest.status == AttendanceStatus.COMPLETE),
        )

    def get_status(self, staff_id: int, *, now: datetime | None = None) -> DerivedStatus:
        now = self._now(now)
        return derive_status(self.get_state(staff_id, now=now), now.date())

    def get_previous_day_report(self, staff_id: int, *, now: datetime | None = None) -> Optional[PreviousDayReport]:
        today = self._now(now).date()
        return self._relevant_report(staff_id, today, self._attendance.get_latest_for_date(staff_id, today))

    # ----- stage submissions -----

    def _ensure_enabled(self, staff_id: int, stage: Stage, now: datetime) -> DerivedStatus:
        status = self.get_status(staff_id, now=now)
        if status.is_enabled(stage):
            return status

        if status.day_completed:
            raise StageLockedError("Today's report is already completed. Start a new day to continue.")
        if status.is_waiting_for_next_day:
            raise StageLockedError(
                f"Your plan is filed for {status.state.report_date:%Y-%m-%d}. Check-ins open on that day."
            )
        if stage is Stage.PREVIOUS_DAY:
            raise StageLockedError("The previous-day report cannot be submitted right now.")
        raise StageLockedError("Submit the previous-day report first.")

    def _notify(self, staff_id: int, work_date: date, kind: str, *, stage: Stage | None = None, record_id: int | None = None) -> None:
        self._events.publish(
            AttendanceUpdated(staff_id=staff_id, work_date=work_date, kind=kind, stage=stage, record_id=record_id)
        )

    def _record_stage(self, staff_id: int, stage: Stage, now: datetime, fields: dict[str, Any]) -> AttendanceRecord:
        self._ensure_enabled(staff_id, stage, now)
        today = now.date()

        record = self._attendance.get_current(staff_id, today)
        if record is None:
            record = self._attendance.create(
                staff_id=staff_id,
                work_date=today,
                status=AttendanceStatus.PARTIAL,
                fields=fields,
            )
        else:
            if record.has_stage(stage):
                raise AlreadyRecordedError(f"The {stage.value} time for today is already recorded.")
            if record.status == AttendanceStatus.PENDING:
                fields = {**fields, "status": AttendanceStatus.PARTIAL}
            record = self._attendance.update(
                attendance_id=record.attendance_id,
                expected_version=record.version,
                fields=fields,
            )

        logger.info("staff=%s recorded %s on %s (record=%s)", staff_id, stage.value, today, record.attendance_id)
        return record

    def submit_previous_day(
        self,
        staff_id: int,
        *,
        next_wake_up_time: str,
        next_departure_time: str,
        next_arrival_time: str,
        appearance_photo_url: str,
        route_photo_url: str,
        notes: str | None = None,
        report_date: date | None = None,
        now: datetime | None = None,
    ) -> PreviousDayReport:
        """File the plan for a work day (tomorrow unless ``report_date`` says today).

        A staff member holds at most one unused plan: an existing one is
        updated and retargeted instead of adding a second row. An unused plan
        for today is never moved to tomorrow; it has to be consumed by the
        wake-up check-in first.
        """

        now = self._now(now)
        today = now.date()
        self._ensure_enabled(staff_id, Stage.PREVIOUS_DAY, now)

        wake = parse_hhmm(next_wake_up_time, "Planned wake-up time")
        depart = parse_hhmm(next_departure_time, "Planned departure time")
        arrive = parse_hhmm(next_arrival_time, "Planned arrival time")
        appearance = require_non_empty(appearance_photo_url, "Appearance photo")
        route = require_non_empty(route_photo_url, "Route screenshot")

        target = report_date or today + timedelta(days=1)
        if target not in (today, today + timedelta(days=1)):
            raise ValidationError("The plan must be for today or tomorrow", ErrorCode.INVALID_FORMAT)

        values = dict(
            report_date=target,
            next_wake_up_time=wake,
            next_departure_time=depart,
            next_arrival_time=arrive,
            appearance_photo_url=appearance,
            route_photo_url=route,
            notes=optional_text(notes),
        )

        existing = self._previous_day.get_latest_unused(staff_id)
        if existing is not None and existing.report_date == today and target > today:
            raise StageLockedError("Today's plan has not been used yet. Check in for today before filing tomorrow's plan.")
        if existing is not None:
            report = self._previous_day.update(report_id=existing.report_id, **values)
            logger.info("staff=%s updated unused plan %s -> %s", staff_id, report.report_id, target)
        else:
            report = self._previous_day.create(staff_id=staff_id, **values)
            logger.info("staff=%s filed plan %s for %s", staff_id, report.report_id, target)

        self._notify(staff_id, today, "previous_day_submitted", stage=Stage.PREVIOUS_DAY)
        return report

    def submit_wakeup(self, staff_id: int, *, wake_up_time: str, notes: str | None = None, now: datetime | None = None) -> AttendanceRecord:
        now = self._now(now)
        record = self._record_stage(
            staff_id,
            Stage.WAKEUP,
            now,
            {
                "wake_up_time": parse_iso_datetime(wake_up_time, "Wake-up time", self._tz),
                "wake_up_notes": optional_text(notes),
            },
        )
        self.link_previous_day_report(staff_id, record.attendance_id)
        self._notify(staff_id, now.date(), "stage_submitted", stage=Stage.WAKEUP, record_id=record.attendance_id)
        return record

    def submit_departure(
        self,
        staff_id: int,
        *,
        departure_time: str,
        destination: str | None = None,
        route_photo_url: str | None = None,
        appearance_photo_url: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = self._now(now)
        fields: dict[str, Any] = {
            "departure_time": parse_iso_datetime(departure_time, "Departure time", self._tz),
            "departure_notes": optional_text(notes),
            "destination": optional_text(destination),
        }
        # Photos are optional here; only overwrite when provided.
        if optional_text(route_photo_url):
            fields["route_photo_url"] = route_photo_url.strip()
        if optional_text(appearance_photo_url):
            fields["appearance_photo_url"] = appearance_photo_url.strip()

        record = self._record_stage(staff_id, Stage.DEPARTURE, now, fields)
        self._notify(staff_id, now.date(), "stage_submitted", stage=Stage.DEPARTURE, record_id=record.attendance_id)
        return record

    def submit_arrival(
        self,
        staff_id: int,
        *,
        arrival_time: str,
        arrival_location: str,
        arrival_gps_location: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = self._now(now)
        arrived = parse_iso_datetime(arrival_time, "Arrival time", self._tz)
        location = require_non_empty(arrival_location, "Arrival location")

        record = self._record_stage(
            staff_id,
            Stage.ARRIVAL,
            now,
            {
                "arrival_time": arrived,
                "arrival_location": location,
                "arrival_gps_location": optional_text(arrival_gps_location),
                "arrival_notes": optional_text(notes),
            },
        )
        self._notify(staff_id, now.date(), "stage_submitted", stage=Stage.ARRIVAL, record_id=record.attendance_id)
        return record

    def submit_daily_report(
        self,
        staff_id: int,
        *,
        content: str,
        work_hours: str | None = None,
        achievements: str | None = None,
        challenges: str | None = None,
        tomorrow_plan: str | None = None,
        now: datetime | None = None,
    ) -> int:
        now = self._now(now)
        self._ensure_enabled(staff_id, Stage.DAILY_REPORT, now)

        report_id = self._reports.submit(
            staff_id=staff_id,
            work_date=now.date(),
            content=content,
            now=now,
            work_hours=work_hours,
            achievements=achievements,
            challenges=challenges,
            tomorrow_plan=tomorrow_plan,
        )
        logger.info("staff=%s submitted daily report %s", staff_id, report_id)
        self._notify(staff_id, now.date(), "stage_submitted", stage=Stage.DAILY_REPORT)
        return report_id

    # ----- report linking -----

    def link_previous_day_report(self, staff_id: int, attendance_record_id: int) -> Optional[int]:
        """Attach the staff member's latest unused plan to an attendance record.

        Returns the linked report id, or None when there was nothing to link
        (no unused plan, the plan targets a later day, or the record already
        has one).
        """

        record = self._attendance.get_by_id(attendance_record_id)
        if record is None or record.staff_id != staff_id:
            raise NotFoundError("Attendance record not found")

        if self._previous_day.get_for_record(record.attendance_id) is not None:
            return None

        report = self._previous_day.get_latest_unused(staff_id)
        if report is None or report.report_date > record.work_date:
            return None

        if not self._previous_day.link(report_id=report.report_id, attendance_id=record.attendance_id):
            logger.warning("plan %s was linked concurrently; record %s left unlinked", report.report_id, record.attendance_id)
            return None

        logger.info("linked plan %s to record %s", report.report_id, record.attendance_id)
        return report.report_id

    # ----- day transitions -----

    def complete_day(self, staff_id: int, *, now: datetime | None = None) -> CompletionOutcome:
        """End the reporting day, whatever stages are still missing."""

        now = self._now(now)
        today = now.date()

        promoted = self._reports.submit_drafts(staff_id=staff_id, work_date=today, now=now)
        if promoted:
            logger.info("staff=%s: %d draft report(s) submitted on completion", staff_id, promoted)

        status = self.get_status(staff_id, now=now)
        latest = self._attendance.get_latest_for_date(staff_id, today)
        if status.day_completed and latest is not None:
            return CompletionOutcome(
                record_id=latest.attendance_id,
                message="Today's work has already been completed.",
                all_tasks_complete=status.is_all_tasks_complete,
                missing_stages=status.missing_stages,
                already_completed=True,
            )

        record = self._attendance.get_current(staff_id, today)
        if record is not None:
            record = self._attendance.update(
                attendance_id=record.attendance_id,
                expected_version=record.version,
                fields={"status": AttendanceStatus.COMPLETE},
            )
        else:
            record = self._attendance.create(
                staff_id=staff_id,
                work_date=today,
                status=AttendanceStatus.COMPLETE,
                fields={},
            )

        if status.is_all_tasks_complete:
            message = "Today's work is complete. Thank you for your hard work!"
        else:
            missing = ", ".join(s.value for s in status.missing_stages)
            message = f"Today's work was closed with unfinished tasks: {missing}."

        logger.info("staff=%s completed %s (record=%s, missing=%s)", staff_id, today, record.attendance_id, len(status.missing_stages))
        self._notify(staff_id, today, "day_completed", record_id=record.attendance_id)
        return CompletionOutcome(
            record_id=record.attendance_id,
            message=message,
            all_tasks_complete=status.is_all_tasks_complete,
            missing_stages=status.missing_stages,
        )

    def start_new_day(self, staff_id: int, *, now: datetime | None = None) -> DayTransitionOutcome:
        now = self._now(now)
        today = now.date()
        latest = self._attendance.get_latest_for_date(staff_id, today)

        if latest is not None and latest.status.is_current:
            return DayTransitionOutcome(
                message="Today's record is already active.",
                record_id=latest.attendance_id,
                already_active=True,
            )

        reset = False
        if latest is not None and latest.status == AttendanceStatus.COMPLETE:
            self._attendance.update(
                attendance_id=latest.attendance_id,
                expected_version=latest.version,
                fields={"status": AttendanceStatus.RESET},
            )
            archived = self._reports.archive_day(staff_id=staff_id, work_date=today)
            logger.info("staff=%s reset record %s, archived %d report(s)", staff_id, latest.attendance_id, archived)
            reset = True

        record = self._attendance.create(staff_id=staff_id, work_date=today, status=AttendanceStatus.PENDING, fields={})
        logger.info("staff=%s started a new day on %s (record=%s)", staff_id, today, record.attendance_id)
        self._notify(staff_id, today, "day_started", record_id=record.attendance_id)
        return DayTransitionOutcome(
            message="A new day has started. Have a good day!",
            record_id=record.attendance_id,
            reset=reset,
        )

    def reopen_day(self, staff_id: int, *, now: datetime | None = None) -> DayTransitionOutcome:
        """Undo a completion: the completed row is kept for history and copied."""

        now = self._now(now)
        today = now.date()
        latest = self._attendance.get_latest_for_date(staff_id, today)

        if latest is None or latest.status != AttendanceStatus.COMPLETE:
            return DayTransitionOutcome(
                message="There is no completed day to reopen.",
                record_id=latest.attendance_id if latest else None,
                already_active=bool(latest and latest.status.is_current),
            )

        self._attendance.update(
            attendance_id=latest.attendance_id,
            expected_version=latest.version,
            fields={"status": AttendanceStatus.REOPENED},
        )
        copy = self._attendance.create(
            staff_id=staff_id,
            work_date=today,
            status=AttendanceStatus.ACTIVE,
            fields={f: getattr(latest, f) for f in _REOPEN_FIELDS if getattr(latest, f) is not None},
        )
        reopened_reports = self._reports.reopen_submitted(staff_id=staff_id, work_date=today)

        logger.info("staff=%s reopened %s (record %s -> %s, reports=%d)", staff_id, today, latest.attendance_id, copy.attendance_id, reopened_reports)
        self._notify(staff_id, today, "day_reopened", record_id=copy.attendance_id)
        return DayTransitionOutcome(message="Work on today's report has been reopened.", record_id=copy.attendance_id, reopened=True)

    # ----- history -----

    def get_history_ui(self, staff_id: int, *, limit: int = 15) -> list[dict]:
        rows = self._attendance.get_recent_for_staff(staff_id, limit)
        return [self._to_ui(r) for r in rows]

    def get_history_range_ui(self, staff_id: int, *, start: date, end: date) -> list[dict]:
        if end < start:
            raise ValidationError("End date must not be before start date", ErrorCode.INVALID_FORMAT)
        return [self._to_ui(r) for r in self._attendance.list_range_for_staff(staff_id, start, end)]

    def _fmt(self, value: datetime | None) -> str:
        local = to_local(value, self._tz)
        return local.strftime("%H:%M") if local else "-"

    def _to_ui(self, r: AttendanceRecord) -> dict:
        label = {
            AttendanceStatus.PENDING: "Not started",
            AttendanceStatus.PARTIAL: "In progress",
            AttendanceStatus.ACTIVE: "In progress",
            AttendanceStatus.COMPLETE: "Completed",
            AttendanceStatus.RESET: "Completed (reset)",
            AttendanceStatus.REOPENED: "Reopened",
        }.get(r.status, r.status.value)

        css = {
            AttendanceStatus.PENDING: "bg-secondary",
            AttendanceStatus.PARTIAL: "bg-warning text-dark",
            AttendanceStatus.ACTIVE: "bg-warning text-dark",
            AttendanceStatus.COMPLETE: "bg-success",
            AttendanceStatus.RESET: "bg-success",
            AttendanceStatus.REOPENED: "bg-info",
        }.get(r.status, "bg-secondary")

        return {
            "attendance_id": r.attendance_id,
            "date": r.work_date.strftime("%Y-%m-%d"),
            "wake_up": self._fmt(r.wake_up_time),
            "departure": self._fmt(r.departure_time),
            "arrival": self._fmt(r.arrival_time),
            "arrival_location": r.arrival_location or "",
            "status": label,
            "status_code": r.status.value,
            "css_class": css,
        }
