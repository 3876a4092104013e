from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` for one repository call.

    Inside ``conn_factory.transaction()`` the shared connection is reused and
    left open; commit and rollback belong to the transaction.
    """

    shared = conn_factory.active()
    if shared is not None:
        cur = shared.cursor(dictionary=dictionary)
        try:
            yield shared, cur
        finally:
            cur.close()
        return

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


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def seconds_or_none(value: Optional[timedelta]) -> Optional[int]:
    """Durations are stored as whole seconds (INT columns)."""

    if value is None:
        return None
    return int(value.total_seconds())


def timedelta_or_none(value: Any) -> Optional[timedelta]:
    if value is None:
        return None
    return timedelta(seconds=int(value))


def branch_start_time(value: Any) -> Optional[time]:
    """``branches.work_start_time`` as a ``time``.

    The connector hands TIME columns back as ``timedelta``; some drivers give
    ``time`` or an ``HH:MM[:SS]`` string.
    """

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise TypeError(f"Unsupported work_start_time value: {value!r}")
