from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .alerts.mysql_alert_repository import MySQLAlertRepository
from .alerts.service import AlertService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_previous_day_repository import MySQLPreviousDayReportRepository
from .attendance.service import AttendanceService
from .common.events import AttendanceEvents
from .core.constants import DEFAULT_TIMEZONE
from .dashboard.service import ManagerDashboardService
from .database.connection import DBConfig, DatabaseConnection
from .reports.mysql_daily_report_repository import MySQLDailyReportRepository
from .reports.service import DailyReportService
from .shifts.mysql_shift_repository import MySQLAvailabilityRepository, MySQLShiftScheduleRepository
from .shifts.service import ShiftService
from .users.mysql_user_repository import MySQLAccessLogRepository, MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    """Wired services. Tests build one from in-memory repositories via ``assemble``."""

    timezone: str
    events: AttendanceEvents

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    daily_report_service: DailyReportService
    shift_service: ShiftService
    alert_service: AlertService
    dashboard_service: ManagerDashboardService

    conn: Any = None


def assemble(
    *,
    users_repo,
    access_logs_repo,
    attendance_repo,
    previous_day_repo,
    daily_reports_repo,
    shifts_repo,
    availability_repo,
    alerts_repo,
    tz_name: str = DEFAULT_TIMEZONE,
    conn: Any = None,
) -> Container:
    events = AttendanceEvents()

    auth_service = AuthService(users_repo, access_logs_repo)
    user_service = UserService(users_repo, access_logs_repo)
    daily_report_service = DailyReportService(daily_reports_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        previous_day_repo,
        daily_report_service,
        events=events,
        tz_name=tz_name,
    )
    shift_service = ShiftService(shifts_repo, availability_repo, tz_name=tz_name)
    alert_service = AlertService(alerts_repo, attendance_service, user_service)
    alert_service.subscribe(events)
    dashboard_service = ManagerDashboardService(attendance_service, user_service, alert_service, tz_name=tz_name)

    return Container(
        timezone=tz_name,
        events=events,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        daily_report_service=daily_report_service,
        shift_service=shift_service,
        alert_service=alert_service,
        dashboard_service=dashboard_service,
        conn=conn,
    )


def build_container(*, db_config: dict, tz_name: str = DEFAULT_TIMEZONE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        users_repo=MySQLUserRepository(conn),
        access_logs_repo=MySQLAccessLogRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        previous_day_repo=MySQLPreviousDayReportRepository(conn),
        daily_reports_repo=MySQLDailyReportRepository(conn),
        shifts_repo=MySQLShiftScheduleRepository(conn),
        availability_repo=MySQLAvailabilityRepository(conn),
        alerts_repo=MySQLAlertRepository(conn),
        tz_name=tz_name,
        conn=conn,
    )
