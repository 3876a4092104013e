from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, Optional, Sequence

from ..core.enums import BreakApprovalStatus, BreakType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, seconds_or_none, timedelta_or_none
from .model import BreakRecord
from .repository import BreakRepository

_COLUMNS = """
    break_id, attendance_id, break_type, start_time, end_time, location, reason,
    is_paid, max_allowed_minutes, duration_seconds, is_exceeding, exceeded_seconds,
    approval_status
"""


def _to_break(r: Dict[str, Any]) -> BreakRecord:
    return BreakRecord(
        break_id=int(r["break_id"]),
        attendance_id=int(r["attendance_id"]),
        break_type=BreakType(r["break_type"]),
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        location=r.get("location"),
        reason=r.get("reason"),
        is_paid=bool(r["is_paid"]),
        max_allowed_minutes=int(r["max_allowed_minutes"]) if r.get("max_allowed_minutes") is not None else None,
        duration=timedelta_or_none(r.get("duration_seconds")),
        is_exceeding=bool(r["is_exceeding"]),
        exceeded_by=timedelta_or_none(r.get("exceeded_seconds")),
        approval_status=BreakApprovalStatus(r["approval_status"]),
    )


class MySQLBreakRepository(BreakRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_break(self, attendance_id: int) -> Optional[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM break_records
                WHERE attendance_id=%s AND end_time IS NULL
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_break(r) if r else None

    def list_for_attendance(self, attendance_id: int) -> Sequence[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM break_records
                WHERE attendance_id=%s
                ORDER BY start_time ASC, break_id ASC
                """,
                (int(attendance_id),),
            )
            return [_to_break(r) for r in fetchall(cur)]

    def add(self, brk: BreakRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO break_records(
                    attendance_id, break_type, start_time, end_time, location, reason,
                    is_paid, max_allowed_minutes, duration_seconds, is_exceeding,
                    exceeded_seconds, approval_status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(brk.attendance_id),
                    brk.break_type.value,
                    brk.start_time,
                    brk.end_time,
                    brk.location,
                    brk.reason,
                    int(brk.is_paid),
                    brk.max_allowed_minutes,
                    seconds_or_none(brk.duration),
                    int(brk.is_exceeding),
                    seconds_or_none(brk.exceeded_by),
                    brk.approval_status.value,
                ),
            )
            return int(cur.lastrowid)

    def update(self, brk: BreakRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE break_records
                SET end_time=%s, duration_seconds=%s, is_exceeding=%s, exceeded_seconds=%s,
                    approval_status=%s, reason=%s
                WHERE break_id=%s
                """,
                (
                    brk.end_time,
                    seconds_or_none(brk.duration),
                    int(brk.is_exceeding),
                    seconds_or_none(brk.exceeded_by),
                    brk.approval_status.value,
                    brk.reason,
                    int(brk.break_id),
                ),
            )
            return cur.rowcount > 0
