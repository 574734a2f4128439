from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import ConflictType, Severity, ShiftStatus


@dataclass(frozen=True)
class ShiftSchedule:
    """One planned shift of a staff member on a given date."""

    schedule_id: int
    staff_id: int
    work_date: date
    start_time: time
    end_time: time
    status: ShiftStatus = ShiftStatus.SCHEDULED
    location: Optional[str] = None
    notes: Optional[str] = None
    staff_name: Optional[str] = None


@dataclass(frozen=True)
class Worksite:
    worksite_id: int
    name: str
    address: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class StaffAvailability:
    """Where a staff member is expected to work on a date."""

    availability_id: int
    staff_id: int
    work_date: date
    worksite: Optional[Worksite] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ShiftConflict:
    type: ConflictType
    severity: Severity
    staff_id: int
    message: str
    schedule_ids: tuple[int, ...]
    total_hours: Optional[float] = None
