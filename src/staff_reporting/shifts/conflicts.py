"""Shift conflict detection.

Three kinds of problems are reported for a batch of shifts:

* ``overlap``: two shifts of the same staff member on the same date overlap
  in time (high severity).
* ``double_booking``: more than two shifts for one staff member on one date
  (medium severity).
* ``excessive_hours``: more than 40 scheduled hours for one staff member in
  one week, weeks starting on Sunday (high above 50 hours, medium otherwise).
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

from ..common.datetime_utils import hours_between, week_start
from ..core.constants import MAX_SHIFTS_PER_DAY, WEEKLY_HOURS_LIMIT, WEEKLY_HOURS_SEVERE
from ..core.enums import ConflictType, Severity
from .model import ShiftConflict, ShiftSchedule


def _name(shift: ShiftSchedule) -> str:
    return shift.staff_name or f"Staff #{shift.staff_id}"


def detect_conflicts(shifts: Iterable[ShiftSchedule]) -> list[ShiftConflict]:
    by_day: dict[tuple[int, date], list[ShiftSchedule]] = defaultdict(list)
    by_week: dict[tuple[int, date], list[ShiftSchedule]] = defaultdict(list)

    for s in shifts:
        by_day[(s.staff_id, s.work_date)].append(s)
        by_week[(s.staff_id, week_start(s.work_date))].append(s)

    conflicts: list[ShiftConflict] = []

    for (staff_id, work_date), day_shifts in sorted(by_day.items()):
        if len(day_shifts) < 2:
            continue
        day_shifts.sort(key=lambda s: (s.start_time, s.schedule_id))

        for current, nxt in zip(day_shifts, day_shifts[1:]):
            if current.end_time > nxt.start_time:
                conflicts.append(
                    ShiftConflict(
                        type=ConflictType.OVERLAP,
                        severity=Severity.HIGH,
                        staff_id=staff_id,
                        message=f"{_name(current)} has overlapping shifts on {work_date:%Y-%m-%d}",
                        schedule_ids=(current.schedule_id, nxt.schedule_id),
                    )
                )

        if len(day_shifts) > MAX_SHIFTS_PER_DAY:
            conflicts.append(
                ShiftConflict(
                    type=ConflictType.DOUBLE_BOOKING,
                    severity=Severity.MEDIUM,
                    staff_id=staff_id,
                    message=f"{_name(day_shifts[0])} has {len(day_shifts)} shifts on {work_date:%Y-%m-%d}",
                    schedule_ids=tuple(s.schedule_id for s in day_shifts),
                )
            )

    for (staff_id, week), week_shifts in sorted(by_week.items()):
        total = sum(hours_between(s.start_time, s.end_time) for s in week_shifts)
        if total <= WEEKLY_HOURS_LIMIT:
            continue
        conflicts.append(
            ShiftConflict(
                type=ConflictType.EXCESSIVE_HOURS,
                severity=Severity.HIGH if total > WEEKLY_HOURS_SEVERE else Severity.MEDIUM,
                staff_id=staff_id,
                message=f"{_name(week_shifts[0])} is scheduled for {total:.1f} hours in the week of {week:%Y-%m-%d}",
                schedule_ids=tuple(s.schedule_id for s in week_shifts),
                total_hours=round(total, 2),
            )
        )

    return conflicts
