"""Small helpers shared by the mysql-connector repositories."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .connection import DatabaseConnection

Row = Dict[str, Any]


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """One connection and cursor per unit of work; commit on success, roll back on error."""

    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Row]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Row]:
    return list(cur.fetchall() or ())


def set_clause(fields: Dict[str, Any], allowed: frozenset[str]) -> tuple[str, list[Any]]:
    """Build ``col=%s, ...`` for an UPDATE from whitelisted column names."""

    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown columns: {sorted(unknown)}")
    cols = sorted(fields)
    return ", ".join(f"{c}=%s" for c in cols), [fields[c] for c in cols]


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns come back as ``timedelta`` (C extension), ``time`` or text."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        minutes, seconds = divmod(int(value.total_seconds()) % 86400, 60)
        return time(minutes // 60, minutes % 60, seconds)
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise TypeError(f"Unsupported MySQL TIME value: {value!r}")


def to_db_datetime(value: Any) -> Any:
    """DATETIME columns hold naive UTC; convert aware datetimes on the way in."""

    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
