from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, seconds_or_none, timedelta_or_none
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in_time, check_out_time, status,
    is_manual_entry, check_in_location, check_out_location, check_in_ip, check_in_device,
    check_out_ip, check_out_device, check_in_latitude, check_in_longitude,
    check_out_latitude, check_out_longitude, expected_check_in_time, late_arrival_seconds,
    early_departure_seconds, total_working_seconds, break_seconds, overtime_seconds,
    break_adjusted, working_hours_adjusted, manual_entry_reason, manual_entry_by, notes
"""

# Every column after (employee_id, work_date), in _params order.
_WRITABLE = (
    "check_in_time",
    "check_out_time",
    "status",
    "is_manual_entry",
    "check_in_location",
    "check_out_location",
    "check_in_ip",
    "check_in_device",
    "check_out_ip",
    "check_out_device",
    "check_in_latitude",
    "check_in_longitude",
    "check_out_latitude",
    "check_out_longitude",
    "expected_check_in_time",
    "late_arrival_seconds",
    "early_departure_seconds",
    "total_working_seconds",
    "break_seconds",
    "overtime_seconds",
    "break_adjusted",
    "working_hours_adjusted",
    "manual_entry_reason",
    "manual_entry_by",
    "notes",
)


def _float_or_none(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        is_manual_entry=bool(r["is_manual_entry"]),
        check_in_location=r.get("check_in_location"),
        check_out_location=r.get("check_out_location"),
        check_in_ip=r.get("check_in_ip"),
        check_in_device=r.get("check_in_device"),
        check_out_ip=r.get("check_out_ip"),
        check_out_device=r.get("check_out_device"),
        check_in_latitude=_float_or_none(r.get("check_in_latitude")),
        check_in_longitude=_float_or_none(r.get("check_in_longitude")),
        check_out_latitude=_float_or_none(r.get("check_out_latitude")),
        check_out_longitude=_float_or_none(r.get("check_out_longitude")),
        expected_check_in_time=r.get("expected_check_in_time"),
        late_arrival=timedelta_or_none(r.get("late_arrival_seconds")),
        early_departure=timedelta_or_none(r.get("early_departure_seconds")),
        total_working=timedelta_or_none(r.get("total_working_seconds")),
        break_duration=timedelta_or_none(r.get("break_seconds")),
        overtime=timedelta_or_none(r.get("overtime_seconds")),
        break_duration_adjusted=bool(r.get("break_adjusted")),
        working_hours_adjusted=bool(r.get("working_hours_adjusted")),
        manual_entry_reason=r.get("manual_entry_reason"),
        manual_entry_by=int(r["manual_entry_by"]) if r.get("manual_entry_by") is not None else None,
        notes=r.get("notes"),
    )


def _params(record: AttendanceRecord) -> tuple:
    return (
        record.check_in_time,
        record.check_out_time,
        record.status.value,
        int(record.is_manual_entry),
        record.check_in_location,
        record.check_out_location,
        record.check_in_ip,
        record.check_in_device,
        record.check_out_ip,
        record.check_out_device,
        record.check_in_latitude,
        record.check_in_longitude,
        record.check_out_latitude,
        record.check_out_longitude,
        record.expected_check_in_time,
        seconds_or_none(record.late_arrival),
        seconds_or_none(record.early_departure),
        seconds_or_none(record.total_working),
        seconds_or_none(record.break_duration),
        seconds_or_none(record.overtime),
        int(record.break_duration_adjusted),
        int(record.working_hours_adjusted),
        record.manual_entry_reason,
        record.manual_entry_by,
        record.notes,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE attendance_id=%s
                """,
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def add(self, record: AttendanceRecord) -> int:
        columns = ", ".join(("employee_id", "work_date") + _WRITABLE)
        placeholders = ",".join(["%s"] * (len(_WRITABLE) + 2))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO attendance_records({columns}) VALUES({placeholders})",
                    (int(record.employee_id), record.work_date, *_params(record)),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ConflictError(f"Attendance record already exists for {record.work_date:%Y-%m-%d}") from e
            raise

    def update(self, record: AttendanceRecord) -> bool:
        assignments = ", ".join(f"{c}=%s" for c in _WRITABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance_records SET {assignments} WHERE attendance_id=%s",
                (*_params(record), int(record.attendance_id)),
            )
            return cur.rowcount > 0

    def list_for_employee(self, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_branch_and_date(self, branch_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date=%s
                  AND employee_id IN (SELECT employee_id FROM employees WHERE branch_id=%s)
                ORDER BY check_in_time, employee_id
                """,
                (work_date, int(branch_id)),
            )
            return [_to_record(r) for r in fetchall(cur)]
