from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    MANAGER = "manager"
    STAFF = "staff"


class Stage(str, Enum):
    """Daily check-in stages, declared in the order staff must walk them."""

    PREVIOUS_DAY = "previous_day"
    WAKEUP = "wakeup"
    DEPARTURE = "departure"
    ARRIVAL = "arrival"
    DAILY_REPORT = "daily_report"


STAGE_ORDER: tuple[Stage, ...] = tuple(Stage)


class AttendanceStatus(str, Enum):
    """Lifecycle of one attendance record as stored in the database."""

    PENDING = "pending"
    PARTIAL = "partial"
    ACTIVE = "active"
    COMPLETE = "complete"
    RESET = "reset"
    REOPENED = "reopened"

    @property
    def is_current(self) -> bool:
        return self in {AttendanceStatus.PENDING, AttendanceStatus.PARTIAL, AttendanceStatus.ACTIVE}


class ReportStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    ARCHIVED = "archived"
    SUPERSEDED = "superseded"


class ShiftStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


class ConflictType(str, Enum):
    OVERLAP = "overlap"
    DOUBLE_BOOKING = "double_booking"
    EXCESSIVE_HOURS = "excessive_hours"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AlertType(str, Enum):
    MISSING_WAKEUP = "missing_wakeup"
    MISSING_DEPARTURE = "missing_departure"
    MISSING_ARRIVAL = "missing_arrival"
    MISSING_REPORT = "missing_report"


class AlertStatus(str, Enum):
    ACTIVE = "active"
    DISMISSED = "dismissed"


class ErrorCode(str, Enum):
    """Flat, user-facing error codes returned by the API."""

    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"
    ALREADY_RECORDED = "ALREADY_RECORDED"
    STAGE_LOCKED = "STAGE_LOCKED"
    WRITE_FAILED = "WRITE_FAILED"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL_ERROR = "INTERNAL_ERROR"
