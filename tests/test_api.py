from __future__ import annotations

from datetime import timedelta

import pytest

from fakes import MANAGER_ID, STAFF_ID, login_as
from staff_reporting.common.datetime_utils import now_local
from staff_reporting.core.enums import Role


def _today():
    return now_local("Asia/Tokyo").date()


def _plan(client, report_date=None):
    body = {
        "nextWakeUpTime": "06:00",
        "nextDepartureTime": "07:30",
        "nextArrivalTime": "08:45",
        "appearancePhotoUrl": "photos/appearance.jpg",
        "routePhotoUrl": "photos/route.png",
    }
    if report_date:
        body["reportDate"] = report_date.isoformat()
    return client.post("/api/attendance/previous-day", json=body)


@pytest.fixture()
def staff(client):
    login_as(client, STAFF_ID, Role.STAFF)
    return client


@pytest.fixture()
def manager(client):
    login_as(client, MANAGER_ID, Role.MANAGER)
    return client


def test_status_requires_login(client):
    resp = client.get("/api/attendance/status")

    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "UNAUTHORIZED"


def test_manager_routes_reject_staff(staff):
    resp = staff.get("/api/manager/overview")

    assert resp.status_code == 403
    assert resp.get_json()["error"]["code"] == "FORBIDDEN"


def test_login_and_current_user(client, repos):
    resp = client.post("/api/auth/login", json={"email": "aoki@example.com", "password": "staff123"})

    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "staff"
    assert client.get("/api/auth/user").get_json()["user"]["email"] == "aoki@example.com"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/user").status_code == 401
    assert repos["access_logs_repo"].rows[0].logout_time is not None


def test_login_failure(client):
    resp = client.post("/api/auth/login", json={"email": "aoki@example.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["message"] == "Invalid email or password"


def test_fresh_status(staff):
    payload = staff.get("/api/attendance/status").get_json()

    assert payload["nextAction"] == "previous_day"
    assert payload["enabledStages"] == ["previous_day"]
    assert payload["previousDayReported"] is False


def test_locked_stage_returns_423(staff):
    resp = staff.post("/api/attendance/wakeup", json={"wakeUpTime": "2026-02-10T06:30:00+09:00"})

    assert resp.status_code == 423
    assert resp.get_json()["error"]["code"] == "STAGE_LOCKED"


def test_plan_for_tomorrow_then_wait(staff):
    resp = _plan(staff)

    assert resp.status_code == 201
    assert resp.get_json()["report"]["reportDate"] == (_today() + timedelta(days=1)).isoformat()

    status = staff.get("/api/attendance/status").get_json()
    assert status["isWaitingForNextDay"] is True
    assert status["shouldHidePreviousDayCard"] is True
    assert status["nextAction"] is None


def test_walk_the_day(staff):
    assert _plan(staff, _today()).status_code == 201

    resp = staff.post("/api/attendance/wakeup", json={"wakeUpTime": "2026-02-10T06:30:00+09:00"})
    assert resp.status_code == 200
    assert resp.get_json()["record"]["status"] == "partial"

    again = staff.post("/api/attendance/wakeup", json={"wakeUpTime": "2026-02-10T06:31:00+09:00"})
    assert again.status_code == 409
    assert again.get_json()["error"]["code"] == "ALREADY_RECORDED"

    plan = staff.get("/api/attendance/previous-day").get_json()["report"]
    assert plan["attendanceRecordId"] == resp.get_json()["record"]["attendanceId"]

    staff.post("/api/attendance/departure", json={"departureTime": "2026-02-10T07:40:00+09:00"})
    staff.post("/api/attendance/arrival", json={"arrivalTime": "2026-02-10T08:50:00+09:00", "arrivalLocation": "Gate 2"})
    assert staff.post("/api/reports/daily", json={"content": "Done"}).status_code == 201

    status = staff.get("/api/attendance/status").get_json()
    assert status["isAllTasksComplete"] is True
    assert status["completionPrompt"].startswith("End today's report?")

    done = staff.post("/api/attendance/complete-day").get_json()
    assert done["allTasksComplete"] is True
    assert done["missingStages"] == []

    assert staff.get("/api/attendance/status").get_json()["canStartNewDay"] is True

    new_day = staff.post("/api/attendance/start-new-day").get_json()
    assert new_day["reset"] is True
    assert staff.get("/api/attendance/status").get_json()["nextAction"] == "wakeup"


def test_missing_fields_are_400(staff):
    _plan(staff, _today())

    resp = staff.post("/api/attendance/arrival", json={"arrivalTime": "2026-02-10T08:50:00+09:00"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "MISSING_REQUIRED_FIELD"

    resp = staff.post("/api/attendance/wakeup", json={"wakeUpTime": "yesterday"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "INVALID_FORMAT"

    resp = staff.post("/api/attendance/link-previous-day", json={})
    assert resp.status_code == 400


def test_link_unknown_record_is_404(staff):
    resp = staff.post("/api/attendance/link-previous-day", json={"attendanceRecordId": 404})

    assert resp.status_code == 404


@pytest.mark.parametrize(
    "path,body",
    [
        ("/api/attendance/wakeup", {"wakeUpTime": 1700000000}),
        ("/api/attendance/wakeup", {"wakeUpTime": "2026-02-10T06:30:00+09:00", "notes": True}),
        ("/api/attendance/arrival", {"arrivalTime": "2026-02-10T08:50:00+09:00", "arrivalLocation": 12}),
        ("/api/attendance/previous-day", {"nextWakeUpTime": 600}),
        ("/api/attendance/link-previous-day", {"attendanceRecordId": "abc"}),
        ("/api/attendance/link-previous-day", {"attendanceRecordId": True}),
    ],
)
def test_non_text_values_are_invalid_format(staff, path, body):
    _plan(staff, _today())

    resp = staff.post(path, json=body)

    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "INVALID_FORMAT"


def test_conflict_resolution_rejects_non_numeric_ids(manager):
    resp = manager.post(
        "/api/manager/shifts/conflicts/resolve",
        json={"type": "overlap", "staffId": STAFF_ID, "scheduleIds": [1, "x"], "resolution": "trim"},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "INVALID_FORMAT"


def test_reopen_without_completion(staff):
    payload = staff.post("/api/attendance/reopen-day").get_json()

    assert payload["success"] is False


def test_draft_then_history(staff):
    _plan(staff, _today())
    staff.post("/api/reports/daily/draft", json={"content": "half"})

    report = staff.get("/api/reports/daily").get_json()["report"]
    assert report["status"] == "draft"

    staff.post("/api/attendance/complete-day")
    [row] = staff.get("/api/reports/history").get_json()["rows"]
    assert row["status"] == "submitted"


def test_history_range_validation(staff):
    resp = staff.get("/api/attendance/history?start=2026-02-10&end=2026-02-01")
    assert resp.status_code == 400

    resp = staff.get("/api/attendance/history?start=bad&end=2026-02-01")
    assert resp.get_json()["error"]["code"] == "INVALID_FORMAT"


def test_manager_overview_and_alerts(manager, attendance_service):
    attendance_service.submit_previous_day(
        STAFF_ID,
        next_wake_up_time="06:00",
        next_departure_time="07:30",
        next_arrival_time="08:45",
        appearance_photo_url="a.jpg",
        route_photo_url="r.png",
        report_date=_today(),
    )

    created = manager.post("/api/manager/alerts/scan").get_json()["created"]
    assert len(created) == 1
    [alert] = manager.get("/api/manager/alerts").get_json()["alerts"]
    assert alert["type"] == "missing_wakeup"

    overview = manager.get(f"/api/manager/overview?date={_today().isoformat()}").get_json()
    assert overview["totalAlerts"] == 1
    assert [r["name"] for r in overview["staff"]] == ["Aoki Staff", "Baba Staff"]

    assert manager.post(f"/api/manager/alerts/{alert['id']}/dismiss").status_code == 200
    assert manager.post(f"/api/manager/alerts/{alert['id']}/dismiss").status_code == 404


def test_manager_registers_and_deactivates_staff(manager):
    resp = manager.post("/api/staff", json={"name": "Chiba Staff", "email": "chiba@example.com", "password": "secret1"})
    assert resp.status_code == 201
    user_id = resp.get_json()["userId"]

    assert manager.patch(f"/api/staff/{user_id}/active", json={"active": "no"}).status_code == 400
    assert manager.patch(f"/api/staff/{user_id}/active", json={"active": False}).status_code == 200

    staff = {u["id"]: u for u in manager.get("/api/staff").get_json()["staff"]}
    assert staff[user_id]["active"] is False


def test_shift_conflicts_over_http(manager):
    day = _today().isoformat()
    for start, end in (("08:00", "13:00"), ("12:00", "16:00")):
        resp = manager.post(
            "/api/shifts", json={"date": day, "startTime": start, "endTime": end, "staffId": STAFF_ID}
        )
        assert resp.status_code == 201

    [conflict] = manager.get("/api/manager/shifts/conflicts").get_json()["conflicts"]
    assert conflict["type"] == "overlap"
    assert conflict["severity"] == "high"

    resp = manager.post(
        "/api/manager/shifts/conflicts/resolve",
        json={"scheduleIds": conflict["scheduleIds"], "type": "overlap", "staffId": STAFF_ID, "resolution": "trim"},
    )
    assert resp.get_json()["changed"] == 1
    assert manager.get("/api/manager/shifts/conflicts").get_json()["conflicts"] == []


def test_today_worksite_when_unscheduled(staff):
    payload = staff.get("/api/attendance/today-worksite").get_json()

    assert payload["hasWorksite"] is False


def test_unexpected_errors_become_500(staff, container, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("db went away")

    monkeypatch.setattr(container.attendance_service, "get_status", boom)

    resp = staff.get("/api/attendance/status")

    assert resp.status_code == 500
    assert resp.get_json()["error"]["code"] == "INTERNAL_ERROR"


def test_unknown_route_stays_404(client):
    assert client.get("/api/nowhere").status_code == 404
