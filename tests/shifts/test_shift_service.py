from __future__ import annotations

from datetime import date, time

import pytest

from fakes import MANAGER_ID, OTHER_STAFF_ID, STAFF_ID
from staff_reporting.core.enums import ConflictType, ErrorCode, Role, ShiftStatus
from staff_reporting.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from staff_reporting.shifts.model import StaffAvailability, Worksite

DAY = date(2026, 2, 10)


@pytest.fixture()
def shifts(container):
    return container.shift_service


def test_staff_proposal_is_scheduled(shifts, repos):
    sid = shifts.submit(
        current_user_id=STAFF_ID,
        current_role=Role.STAFF,
        work_date=DAY,
        start_time="09:00",
        end_time="17:00",
        location=" Site A ",
    )

    shift = repos["shifts_repo"].get_by_id(sid)
    assert shift.status is ShiftStatus.SCHEDULED
    assert shift.location == "Site A"
    assert shift.start_time == time(9, 0)


def test_manager_schedules_anyone_pre_confirmed(shifts, repos):
    sid = shifts.submit(
        current_user_id=MANAGER_ID,
        current_role=Role.MANAGER,
        staff_id=OTHER_STAFF_ID,
        work_date=DAY,
        start_time="09:00",
        end_time="17:00",
    )

    shift = repos["shifts_repo"].get_by_id(sid)
    assert shift.staff_id == OTHER_STAFF_ID
    assert shift.status is ShiftStatus.CONFIRMED


def test_staff_cannot_submit_for_someone_else(shifts):
    with pytest.raises(AuthorizationError):
        shifts.submit(
            current_user_id=STAFF_ID,
            current_role=Role.STAFF,
            staff_id=OTHER_STAFF_ID,
            work_date=DAY,
            start_time="09:00",
            end_time="17:00",
        )


def test_end_must_follow_start(shifts):
    with pytest.raises(ValidationError) as exc:
        shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time="17:00", end_time="09:00")
    assert exc.value.code is ErrorCode.INVALID_FORMAT


def test_approve_and_complete_are_manager_only(shifts, repos):
    sid = shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time="09:00", end_time="12:00")

    with pytest.raises(AuthorizationError):
        shifts.approve(current_role=Role.STAFF, schedule_id=sid)

    shifts.approve(current_role=Role.MANAGER, schedule_id=sid)
    assert repos["shifts_repo"].get_by_id(sid).status is ShiftStatus.CONFIRMED

    shifts.complete(current_role=Role.MANAGER, schedule_id=sid)
    assert repos["shifts_repo"].get_by_id(sid).status is ShiftStatus.COMPLETED


def test_approve_unknown_shift(shifts):
    with pytest.raises(NotFoundError):
        shifts.approve(current_role=Role.MANAGER, schedule_id=999)


def test_staff_withdraws_only_unconfirmed_own_shifts(shifts, repos):
    own = shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time="09:00", end_time="12:00")
    confirmed = shifts.submit(
        current_user_id=MANAGER_ID, current_role=Role.MANAGER, staff_id=STAFF_ID, work_date=DAY, start_time="13:00", end_time="15:00"
    )

    with pytest.raises(AuthorizationError):
        shifts.delete(current_user_id=OTHER_STAFF_ID, current_role=Role.STAFF, schedule_id=own)
    with pytest.raises(AuthorizationError):
        shifts.delete(current_user_id=STAFF_ID, current_role=Role.STAFF, schedule_id=confirmed)

    shifts.delete(current_user_id=STAFF_ID, current_role=Role.STAFF, schedule_id=own)
    shifts.delete(current_user_id=MANAGER_ID, current_role=Role.MANAGER, schedule_id=confirmed)
    assert repos["shifts_repo"].rows == {}


def test_conflicts_are_detected_over_the_range(shifts):
    shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time="08:00", end_time="13:00")
    shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time="12:00", end_time="16:00")

    [conflict] = shifts.detect_conflicts(start=DAY, end=DAY)

    assert conflict.type is ConflictType.OVERLAP
    assert "Aoki Staff" in conflict.message
    assert shifts.detect_conflicts(start=date(2026, 2, 11), end=date(2026, 2, 12)) == []


def test_trim_resolves_an_overlap(shifts, repos):
    first = shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time="08:00", end_time="13:00")
    shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time="12:00", end_time="16:00")
    [conflict] = shifts.detect_conflicts(start=DAY, end=DAY)

    changed = shifts.resolve_conflict(current_role=Role.MANAGER, conflict=conflict, resolution="trim")

    assert changed == 1
    assert repos["shifts_repo"].get_by_id(first).end_time == time(12, 0)
    assert shifts.detect_conflicts(start=DAY, end=DAY) == []


def test_delete_keeps_the_first_shift(shifts, repos):
    ids = [
        shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time=s, end_time=e)
        for s, e in (("06:00", "08:00"), ("09:00", "11:00"), ("15:00", "17:00"))
    ]
    [conflict] = shifts.detect_conflicts(start=DAY, end=DAY)
    assert conflict.type is ConflictType.DOUBLE_BOOKING

    changed = shifts.resolve_conflict(current_role=Role.MANAGER, conflict=conflict, resolution="delete")

    assert changed == 2
    assert list(repos["shifts_repo"].rows) == [ids[0]]


def test_trim_is_only_for_overlaps(shifts):
    for s, e in (("06:00", "08:00"), ("09:00", "11:00"), ("15:00", "17:00")):
        shifts.submit(current_user_id=STAFF_ID, current_role=Role.STAFF, work_date=DAY, start_time=s, end_time=e)
    [conflict] = shifts.detect_conflicts(start=DAY, end=DAY)

    with pytest.raises(ValidationError):
        shifts.resolve_conflict(current_role=Role.MANAGER, conflict=conflict, resolution="trim")
    with pytest.raises(AuthorizationError):
        shifts.resolve_conflict(current_role=Role.STAFF, conflict=conflict, resolution="delete")


def test_today_worksite(shifts, repos, fixed_now):
    site = Worksite(worksite_id=1, name="North Plant", address="1-2-3 Kita")
    repos["availability_repo"].rows.append(StaffAvailability(1, STAFF_ID, fixed_now.date(), site))

    availability = shifts.today_worksite(STAFF_ID, now=fixed_now)

    assert availability.worksite.name == "North Plant"
    assert shifts.today_worksite(OTHER_STAFF_ID, now=fixed_now) is None
