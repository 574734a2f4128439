from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, parse_hhmm
from ..common.validators import optional_text
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import ConflictType, ErrorCode, Role, ShiftStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError, WriteFailedError
from .conflicts import detect_conflicts
from .model import ShiftConflict, ShiftSchedule, StaffAvailability
from .repository import AvailabilityRepository, ShiftScheduleRepository

logger = logging.getLogger(__name__)


class ShiftService:
    def __init__(
        self,
        schedules: ShiftScheduleRepository,
        availability: AvailabilityRepository,
        *,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        self._schedules = schedules
        self._availability = availability
        self._tz = tz_name

    def submit(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        work_date: date,
        start_time: str,
        end_time: str,
        staff_id: Optional[int] = None,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Staff propose their own shifts; managers may schedule anyone (pre-confirmed)."""

        target = int(staff_id) if staff_id is not None else int(current_user_id)
        if current_role != Role.MANAGER and target != int(current_user_id):
            raise AuthorizationError("You can only submit your own shifts")

        start = parse_hhmm(start_time, "Start time")
        end = parse_hhmm(end_time, "End time")
        if end <= start:
            raise ValidationError("End time must be after start time", ErrorCode.INVALID_FORMAT)

        status = ShiftStatus.CONFIRMED if current_role == Role.MANAGER else ShiftStatus.SCHEDULED
        schedule_id = self._schedules.create(
            staff_id=target,
            work_date=work_date,
            start_time=start,
            end_time=end,
            status=status,
            location=optional_text(location),
            notes=optional_text(notes),
        )
        logger.info("shift %s created for staff=%s on %s (%s)", schedule_id, target, work_date, status.value)
        return schedule_id

    def _require(self, schedule_id: int) -> ShiftSchedule:
        shift = self._schedules.get_by_id(int(schedule_id))
        if shift is None:
            raise NotFoundError("Shift not found")
        return shift

    def _transition(self, *, current_role: Role, schedule_id: int, status: ShiftStatus) -> None:
        if current_role != Role.MANAGER:
            raise AuthorizationError("Manager access only")
        self._require(schedule_id)
        if not self._schedules.set_status(schedule_id=int(schedule_id), status=status):
            raise WriteFailedError("Failed to update the shift")
        logger.info("shift %s -> %s", schedule_id, status.value)

    def approve(self, *, current_role: Role, schedule_id: int) -> None:
        self._transition(current_role=current_role, schedule_id=schedule_id, status=ShiftStatus.CONFIRMED)

    def complete(self, *, current_role: Role, schedule_id: int) -> None:
        self._transition(current_role=current_role, schedule_id=schedule_id, status=ShiftStatus.COMPLETED)

    def delete(self, *, current_user_id: int, current_role: Role, schedule_id: int) -> None:
        shift = self._require(schedule_id)
        if current_role != Role.MANAGER:
            # Staff may withdraw their own proposals until a manager confirms them.
            if shift.staff_id != int(current_user_id) or shift.status != ShiftStatus.SCHEDULED:
                raise AuthorizationError("You cannot delete this shift")

        if not self._schedules.delete(schedule_id=int(schedule_id)):
            raise WriteFailedError("Failed to delete the shift")
        logger.info("shift %s deleted", schedule_id)

    def list_range(self, *, start: date, end: date, staff_id: Optional[int] = None) -> Sequence[ShiftSchedule]:
        if end < start:
            raise ValidationError("End date must not be before start date", ErrorCode.INVALID_FORMAT)
        return self._schedules.list_range(start=start, end=end, staff_id=staff_id)

    def detect_conflicts(self, *, start: date, end: date) -> list[ShiftConflict]:
        return detect_conflicts(self.list_range(start=start, end=end))

    def resolve_conflict(self, *, current_role: Role, conflict: ShiftConflict, resolution: str) -> int:
        """Apply a manager's fix to a detected conflict.

        ``delete`` removes every shift but the first; ``trim`` (overlaps only)
        moves the first shift's end to the second shift's start. Returns the
        number of shifts changed.
        """

        if current_role != Role.MANAGER:
            raise AuthorizationError("Manager access only")

        first_id, *rest = conflict.schedule_ids
        if resolution == "delete":
            changed = sum(1 for sid in rest if self._schedules.delete(schedule_id=sid))
        elif resolution == "trim":
            if conflict.type != ConflictType.OVERLAP or len(rest) != 1:
                raise ValidationError("Only overlapping pairs can be trimmed", ErrorCode.INVALID_FORMAT)
            second = self._require(rest[0])
            changed = int(self._schedules.set_end_time(schedule_id=first_id, end_time=second.start_time))
        else:
            raise ValidationError(f"Unknown resolution: {resolution}", ErrorCode.INVALID_FORMAT)

        logger.info("resolved %s conflict for staff=%s with %s (%d shift(s))", conflict.type.value, conflict.staff_id, resolution, changed)
        return changed

    def today_worksite(self, staff_id: int, *, now: datetime | None = None) -> Optional[StaffAvailability]:
        today = (now or now_local(self._tz)).date()
        return self._availability.get_for_date(staff_id, today)
