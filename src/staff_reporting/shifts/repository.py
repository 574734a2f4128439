from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftStatus
from .model import ShiftSchedule, StaffAvailability


class ShiftScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[ShiftSchedule]:
        raise NotImplementedError

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
        raise NotImplementedError

    def set_status(self, *, schedule_id: int, status: ShiftStatus) -> bool:
        raise NotImplementedError

    def set_end_time(self, *, schedule_id: int, end_time: time) -> bool:
        raise NotImplementedError

    def delete(self, *, schedule_id: int) -> bool:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, staff_id: Optional[int] = None) -> Sequence[ShiftSchedule]:
        """Shifts in [start, end], ordered by date then start time, with staff names."""

        raise NotImplementedError


class AvailabilityRepository(Protocol):
    def get_for_date(self, staff_id: int, work_date: date) -> Optional[StaffAvailability]:
        raise NotImplementedError
