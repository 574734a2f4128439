from __future__ import annotations

from datetime import date, time

from staff_reporting.core.enums import ConflictType, Severity
from staff_reporting.shifts.conflicts import detect_conflicts
from staff_reporting.shifts.model import ShiftSchedule


def _shift(sid, day, start, end, staff_id=2, name="Aoki Staff"):
    return ShiftSchedule(
        schedule_id=sid,
        staff_id=staff_id,
        work_date=day,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        staff_name=name,
    )


def test_no_conflicts_for_back_to_back_shifts():
    shifts = [
        _shift(1, date(2026, 2, 10), "08:00", "12:00"),
        _shift(2, date(2026, 2, 10), "12:00", "16:00"),
    ]

    assert detect_conflicts(shifts) == []


def test_overlap_is_high_severity():
    shifts = [
        _shift(1, date(2026, 2, 10), "08:00", "13:00"),
        _shift(2, date(2026, 2, 10), "12:00", "16:00"),
    ]

    [conflict] = detect_conflicts(shifts)

    assert conflict.type is ConflictType.OVERLAP
    assert conflict.severity is Severity.HIGH
    assert conflict.schedule_ids == (1, 2)
    assert conflict.message == "Aoki Staff has overlapping shifts on 2026-02-10"


def test_overlap_only_within_the_same_staff_member():
    shifts = [
        _shift(1, date(2026, 2, 10), "08:00", "13:00"),
        _shift(2, date(2026, 2, 10), "12:00", "16:00", staff_id=3, name="Baba Staff"),
    ]

    assert detect_conflicts(shifts) == []


def test_three_shifts_in_a_day_is_double_booking():
    day = date(2026, 2, 10)
    shifts = [
        _shift(3, day, "15:00", "17:00"),
        _shift(1, day, "06:00", "08:00"),
        _shift(2, day, "09:00", "11:00"),
    ]

    [conflict] = detect_conflicts(shifts)

    assert conflict.type is ConflictType.DOUBLE_BOOKING
    assert conflict.severity is Severity.MEDIUM
    assert conflict.schedule_ids == (1, 2, 3)


def test_weekly_hours_over_forty_is_medium():
    # Sunday 2026-02-08 through Thursday 2026-02-12, 9 hours each.
    shifts = [_shift(i, date(2026, 2, 8 + i), "08:00", "17:00") for i in range(5)]

    [conflict] = detect_conflicts(shifts)

    assert conflict.type is ConflictType.EXCESSIVE_HOURS
    assert conflict.severity is Severity.MEDIUM
    assert conflict.total_hours == 45.0
    assert "week of 2026-02-08" in conflict.message


def test_weekly_hours_over_fifty_is_high():
    shifts = [_shift(i, date(2026, 2, 8 + i), "07:00", "18:00") for i in range(5)]

    [conflict] = detect_conflicts(shifts)

    assert conflict.severity is Severity.HIGH
    assert conflict.total_hours == 55.0


def test_weeks_start_on_sunday():
    # Saturday and the following Sunday fall in different weeks.
    shifts = [
        _shift(1, date(2026, 2, 14), "00:00", "23:00"),
        _shift(2, date(2026, 2, 15), "00:00", "23:00"),
    ]

    assert detect_conflicts(shifts) == []


def test_unnamed_staff_falls_back_to_id():
    shifts = [
        _shift(1, date(2026, 2, 10), "08:00", "13:00", name=None),
        _shift(2, date(2026, 2, 10), "12:00", "16:00", name=None),
    ]

    [conflict] = detect_conflicts(shifts)

    assert conflict.message.startswith("Staff #2 ")
