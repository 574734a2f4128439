from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import ErrorCode
from ..core.exceptions import ValidationError
from .validators import as_text


def parse_iso_date(value: Any, field_name: str = "Date") -> date:
    """Parse YYYY-MM-DD string into date."""
    v = as_text(value, field_name)
    try:
        return datetime.strptime(v, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date (YYYY-MM-DD)", ErrorCode.INVALID_FORMAT)


def parse_iso_datetime(value: Any, field_name: str, tz_name: Optional[str] = None) -> datetime:
    """Parse an ISO-8601 timestamp as sent by the check-in forms.

    A timestamp without an offset is wall-clock time in the staff timezone.
    """
    v = as_text(value, field_name)
    if not v:
        raise ValidationError(f"{field_name} is required")
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid timestamp", ErrorCode.INVALID_FORMAT)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo(tz_name or DEFAULT_TIMEZONE))
    return parsed


def parse_hhmm(value: Any, field_name: str) -> time:
    v = as_text(value, field_name)
    if not v:
        raise ValidationError(f"{field_name} is required")
    try:
        return datetime.strptime(v[:5], "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM", ErrorCode.INVALID_FORMAT)


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current wall-clock time in the staff timezone.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(ZoneInfo(tz_name or DEFAULT_TIMEZONE))


def week_start(day: date) -> date:
    """Sunday that opens the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def hours_between(start: time, end: time) -> float:
    s = start.hour * 60 + start.minute
    e = end.hour * 60 + end.minute
    return (e - s) / 60.0


def to_local(value: Optional[datetime], tz_name: Optional[str] = None) -> Optional[datetime]:
    """Stored timestamps are naive UTC; render them in the staff timezone."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name or DEFAULT_TIMEZONE))
