from __future__ import annotations

from datetime import date, time
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, PreviousDayReport


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_latest_for_date(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        """Most recently created record for the pair, whatever its status."""

        raise NotImplementedError

    def get_current(self, staff_id: int, work_date: date) -> Optional[AttendanceRecord]:
        """Most recent record for the pair still in pending/partial/active."""

        raise NotImplementedError

    def get_recent_for_staff(self, staff_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_range_for_staff(self, staff_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, *, staff_id: int, work_date: date, status: AttendanceStatus, fields: dict[str, Any]) -> AttendanceRecord:
        """Insert a record; raises ConcurrentUpdateError when ``status`` is current
        and the pair already has a current record."""

        raise NotImplementedError

    def update(self, *, attendance_id: int, expected_version: int, fields: dict[str, Any]) -> AttendanceRecord:
        """Apply ``fields`` only if the stored version still matches.

        Raises ConcurrentUpdateError when the row changed in between.
        """

        raise NotImplementedError


class PreviousDayReportRepository(Protocol):
    def get_latest_unused(self, staff_id: int) -> Optional[PreviousDayReport]:
        raise NotImplementedError

    def get_for_record(self, attendance_id: int) -> Optional[PreviousDayReport]:
        raise NotImplementedError

    def get_linked_for_date(self, staff_id: int, work_date: date) -> Optional[PreviousDayReport]:
        """Most recent report linked to any of the staff member's records on ``work_date``."""

        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def link(self, *, report_id: int, attendance_id: int) -> bool:
        """Set the back-reference only while it is still null."""

        raise NotImplementedError
