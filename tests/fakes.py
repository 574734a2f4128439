"""In-memory stand-ins for the repository ports, shared by the test modules."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from staff_reporting.alerts.model import Alert
from staff_reporting.attendance.model import AttendanceRecord, PreviousDayReport
from staff_reporting.core.enums import AlertStatus, ReportStatus, Role
from staff_reporting.core.exceptions import ConcurrentUpdateError
from staff_reporting.reports.model import DailyReport
from staff_reporting.shifts.model import ShiftSchedule, StaffAvailability
from staff_reporting.users.model import AccessLog, User

CREATED = datetime(2026, 2, 1, 0, 0, 0)

MANAGER_ID = 1
STAFF_ID = 2
OTHER_STAFF_ID = 3


def login_as(client, user_id: int, role: Role) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role.value


class InMemoryAttendanceRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}
        self.updates = 0

    def get_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def _for_date(self, staff_id, work_date):
        rows = [r for r in self.rows.values() if r.staff_id == staff_id and r.work_date == work_date]
        return sorted(rows, key=lambda r: r.attendance_id)

    def get_latest_for_date(self, staff_id, work_date):
        rows = self._for_date(staff_id, work_date)
        return rows[-1] if rows else None

    def get_current(self, staff_id, work_date):
        rows = [r for r in self._for_date(staff_id, work_date) if r.status.is_current]
        return rows[-1] if rows else None

    def get_recent_for_staff(self, staff_id, limit):
        rows = [r for r in self.rows.values() if r.staff_id == staff_id]
        rows.sort(key=lambda r: (r.work_date, r.attendance_id), reverse=True)
        return rows[:limit]

    def list_range_for_staff(self, staff_id, start, end):
        rows = [r for r in self.rows.values() if r.staff_id == staff_id and start <= r.work_date <= end]
        rows.sort(key=lambda r: (r.work_date, r.attendance_id), reverse=True)
        return rows

    def create(self, *, staff_id, work_date, status, fields):
        if status.is_current and any(r.status.is_current for r in self._for_date(staff_id, work_date)):
            raise ConcurrentUpdateError("duplicate current record")
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = AttendanceRecord(
            attendance_id=rid,
            staff_id=staff_id,
            work_date=work_date,
            status=status,
            created_at=CREATED,
            **fields,
        )
        return self.rows[rid]

    def update(self, *, attendance_id, expected_version, fields):
        current = self.rows.get(int(attendance_id))
        if current is None or current.version != expected_version:
            raise ConcurrentUpdateError("stale version")
        self.updates += 1
        self.rows[current.attendance_id] = replace(current, version=current.version + 1, **fields)
        return self.rows[current.attendance_id]


class InMemoryPreviousDayRepo:
    def __init__(self, attendance: InMemoryAttendanceRepo):
        self._attendance = attendance
        self._next_id = 1
        self.rows: dict[int, PreviousDayReport] = {}

    def get_latest_unused(self, staff_id):
        rows = [r for r in self.rows.values() if r.staff_id == staff_id and r.is_unused]
        return max(rows, key=lambda r: r.report_id) if rows else None

    def get_for_record(self, attendance_id):
        for r in self.rows.values():
            if r.actual_attendance_record_id == attendance_id:
                return r
        return None

    def get_linked_for_date(self, staff_id, work_date):
        rows = []
        for r in self.rows.values():
            record = self._attendance.get_by_id(r.actual_attendance_record_id) if r.actual_attendance_record_id else None
            if record and record.staff_id == staff_id and record.work_date == work_date:
                rows.append(r)
        return max(rows, key=lambda r: r.report_id) if rows else None

    def create(self, *, staff_id, report_date, **values):
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = PreviousDayReport(report_id=rid, staff_id=staff_id, report_date=report_date, created_at=CREATED, **values)
        return self.rows[rid]

    def update(self, *, report_id, **values):
        self.rows[report_id] = replace(self.rows[report_id], **values)
        return self.rows[report_id]

    def link(self, *, report_id, attendance_id):
        report = self.rows.get(report_id)
        if report is None or report.actual_attendance_record_id is not None:
            return False
        self.rows[report_id] = replace(report, actual_attendance_record_id=attendance_id)
        return True


class InMemoryDailyReportRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, DailyReport] = {}

    def get_active_for_date(self, staff_id, work_date):
        rows = [
            r
            for r in self.rows.values()
            if r.staff_id == staff_id
            and r.work_date == work_date
            and r.status in (ReportStatus.DRAFT, ReportStatus.SUBMITTED)
        ]
        return max(rows, key=lambda r: r.report_id) if rows else None

    def list_recent(self, staff_id, limit):
        rows = [r for r in self.rows.values() if r.staff_id == staff_id and r.status != ReportStatus.SUPERSEDED]
        rows.sort(key=lambda r: (r.work_date, r.report_id), reverse=True)
        return rows[:limit]

    def create(self, *, staff_id, work_date, content, status, submitted_at=None, **extra):
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = DailyReport(
            report_id=rid,
            staff_id=staff_id,
            work_date=work_date,
            content=content,
            status=status,
            submitted_at=submitted_at,
            created_at=CREATED,
            **extra,
        )
        return rid

    def update_draft(self, *, report_id, content, **extra):
        report = self.rows.get(report_id)
        if report is None or report.status != ReportStatus.DRAFT:
            return False
        self.rows[report_id] = replace(report, content=content, **extra)
        return True

    def transition_for_date(self, *, staff_id, work_date, from_statuses, to_status, submitted_at=None):
        from_statuses = set(from_statuses)
        changed = 0
        for rid, r in list(self.rows.items()):
            if r.staff_id == staff_id and r.work_date == work_date and r.status in from_statuses:
                stamp = submitted_at if to_status in (ReportStatus.SUBMITTED, ReportStatus.DRAFT) else r.submitted_at
                self.rows[rid] = replace(r, status=to_status, submitted_at=stamp)
                changed += 1
        return changed


class InMemoryShiftRepo:
    def __init__(self, names: dict[int, str] | None = None):
        self._next_id = 1
        self._names = names or {}
        self.rows: dict[int, ShiftSchedule] = {}

    def get_by_id(self, schedule_id):
        return self.rows.get(int(schedule_id))

    def create(self, *, staff_id, work_date, start_time, end_time, status, location=None, notes=None):
        sid = self._next_id
        self._next_id += 1
        self.rows[sid] = ShiftSchedule(
            schedule_id=sid,
            staff_id=staff_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
            location=location,
            notes=notes,
            staff_name=self._names.get(staff_id),
        )
        return sid

    def set_status(self, *, schedule_id, status):
        if schedule_id not in self.rows:
            return False
        self.rows[schedule_id] = replace(self.rows[schedule_id], status=status)
        return True

    def set_end_time(self, *, schedule_id, end_time):
        if schedule_id not in self.rows:
            return False
        self.rows[schedule_id] = replace(self.rows[schedule_id], end_time=end_time)
        return True

    def delete(self, *, schedule_id):
        return self.rows.pop(int(schedule_id), None) is not None

    def list_range(self, *, start, end, staff_id=None):
        rows = [
            s
            for s in self.rows.values()
            if start <= s.work_date <= end and (staff_id is None or s.staff_id == staff_id)
        ]
        return sorted(rows, key=lambda s: (s.work_date, s.start_time, s.schedule_id))


class InMemoryAvailabilityRepo:
    def __init__(self, rows: list[StaffAvailability] | None = None):
        self.rows = list(rows or [])

    def get_for_date(self, staff_id, work_date):
        for a in self.rows:
            if a.staff_id == staff_id and a.work_date == work_date:
                return a
        return None


class InMemoryUserRepo:
    def __init__(self, users: list[User] | None = None):
        self.rows: dict[int, User] = {u.user_id: u for u in users or []}

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def get_by_email(self, email):
        for u in self.rows.values():
            if u.email == email:
                return u
        return None

    def create_user(self, *, full_name, email, password_hash, role, phone=None):
        uid = max(self.rows, default=0) + 1
        self.rows[uid] = User(user_id=uid, full_name=full_name, email=email, password_hash=password_hash, role=role, phone=phone)
        return uid

    def set_active(self, user_id, *, is_active):
        user = self.rows.get(user_id)
        if not user or user.role != Role.STAFF:
            return False
        self.rows[user_id] = replace(user, is_active=is_active)
        return True

    def set_next_day_active(self, user_id, *, next_day_active):
        user = self.rows.get(user_id)
        if not user or user.role != Role.STAFF:
            return False
        self.rows[user_id] = replace(user, next_day_active=next_day_active)
        return True

    def list_by_role(self, role):
        return sorted((u for u in self.rows.values() if u.role == role), key=lambda u: (u.full_name, u.user_id))


class InMemoryAccessLogRepo:
    def __init__(self):
        self.rows: list[AccessLog] = []

    def record_login(self, *, user_id, login_time, ip_address, user_agent):
        log = AccessLog(log_id=len(self.rows) + 1, user_id=user_id, login_time=login_time, ip_address=ip_address, user_agent=user_agent)
        self.rows.append(log)
        return log.log_id

    def record_logout(self, *, user_id, logout_time):
        for i in range(len(self.rows) - 1, -1, -1):
            log = self.rows[i]
            if log.user_id == user_id and log.logout_time is None:
                self.rows[i] = replace(log, logout_time=logout_time)
                return True
        return False

    def list_recent(self, user_id, limit):
        return [log for log in reversed(self.rows) if log.user_id == user_id][:limit]


class InMemoryAlertRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, Alert] = {}

    def get_active(self, staff_id, alert_type):
        for a in self.rows.values():
            if a.staff_id == staff_id and a.type == alert_type and a.status == AlertStatus.ACTIVE:
                return a
        return None

    def create(self, *, staff_id, alert_type, message, triggered_at):
        aid = self._next_id
        self._next_id += 1
        self.rows[aid] = Alert(
            alert_id=aid,
            staff_id=staff_id,
            type=alert_type,
            message=message,
            status=AlertStatus.ACTIVE,
            triggered_at=triggered_at,
        )
        return aid

    def dismiss(self, *, alert_id, dismissed_at):
        alert = self.rows.get(alert_id)
        if alert is None or alert.status != AlertStatus.ACTIVE:
            return False
        self.rows[alert_id] = replace(alert, status=AlertStatus.DISMISSED, dismissed_at=dismissed_at)
        return True

    def list_active(self):
        return [a for a in self.rows.values() if a.status == AlertStatus.ACTIVE]
