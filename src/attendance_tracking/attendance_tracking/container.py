from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditSink
from .audit.sink import AuditSink, LoggingAuditSink
from .breaks.mysql_break_repository import MySQLBreakRepository
from .common.datetime_utils import PytzTimeProvider
from .common.locks import KeyedLock
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_LOCK_TIMEOUT_SECONDS
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .database.connection import DatabaseConnection, DBConfig
from .employees.mysql_employee_repository import MySQLEmployeeDirectory


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeDirectory
    attendance_repo: MySQLAttendanceRepository
    breaks_repo: MySQLBreakRepository
    corrections_repo: MySQLCorrectionRepository
    audit_sink: AuditSink

    attendance_service: AttendanceService


def build_container(
    *,
    db_config: dict,
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    audit_backend: str = "mysql",
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeDirectory(conn, default_grace_minutes=late_grace_minutes)
    attendance_repo = MySQLAttendanceRepository(conn)
    breaks_repo = MySQLBreakRepository(conn)
    corrections_repo = MySQLCorrectionRepository(conn)
    audit_sink: AuditSink = MySQLAuditSink(conn) if audit_backend == "mysql" else LoggingAuditSink()

    attendance_service = AttendanceService(
        employees_repo,
        attendance_repo,
        breaks_repo,
        corrections_repo,
        audit_sink,
        time_provider=PytzTimeProvider(),
        lock=KeyedLock(timeout=lock_timeout_seconds),
        strategy_factory=AttendanceStrategyFactory(),
        unit_of_work=conn,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        breaks_repo=breaks_repo,
        corrections_repo=corrections_repo,
        audit_sink=audit_sink,
        attendance_service=attendance_service,
    )
