from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from werkzeug.security import generate_password_hash

from fakes import (
    MANAGER_ID,
    OTHER_STAFF_ID,
    STAFF_ID,
    InMemoryAccessLogRepo,
    InMemoryAlertRepo,
    InMemoryAttendanceRepo,
    InMemoryAvailabilityRepo,
    InMemoryDailyReportRepo,
    InMemoryPreviousDayRepo,
    InMemoryShiftRepo,
    InMemoryUserRepo,
)
from staff_reporting.container import assemble
from staff_reporting.core.enums import Role
from staff_reporting.users.model import User

TOKYO = ZoneInfo("Asia/Tokyo")


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 2, 10, 9, 0, 0, tzinfo=TOKYO)


@pytest.fixture()
def users_repo():
    return InMemoryUserRepo(
        [
            User(MANAGER_ID, "Mori Manager", "manager@example.com", generate_password_hash("manager123"), Role.MANAGER),
            User(STAFF_ID, "Aoki Staff", "aoki@example.com", generate_password_hash("staff123"), Role.STAFF),
            User(OTHER_STAFF_ID, "Baba Staff", "baba@example.com", generate_password_hash("staff123"), Role.STAFF),
        ]
    )


@pytest.fixture()
def repos(users_repo):
    attendance = InMemoryAttendanceRepo()
    return {
        "users_repo": users_repo,
        "access_logs_repo": InMemoryAccessLogRepo(),
        "attendance_repo": attendance,
        "previous_day_repo": InMemoryPreviousDayRepo(attendance),
        "daily_reports_repo": InMemoryDailyReportRepo(),
        "shifts_repo": InMemoryShiftRepo({STAFF_ID: "Aoki Staff", OTHER_STAFF_ID: "Baba Staff"}),
        "availability_repo": InMemoryAvailabilityRepo(),
        "alerts_repo": InMemoryAlertRepo(),
    }


@pytest.fixture()
def container(repos):
    return assemble(**repos, tz_name="Asia/Tokyo")


@pytest.fixture()
def attendance_service(container):
    return container.attendance_service


@pytest.fixture()
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from staff_reporting.main import create_app

    return create_app(container)


@pytest.fixture()
def client(app):
    return app.test_client()
