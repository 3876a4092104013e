from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_NORMAL_WORKING_HOURS, DEFAULT_TIMEZONE, DEFAULT_WORK_START
from ..database.connection import DatabaseConnection
from ..database.mysql_base import branch_start_time, db_cursor, fetchone
from .model import Branch, Employee
from .repository import EmployeeDirectory

_BRANCH_COLUMNS = """
    b.branch_id, b.branch_name, b.timezone, b.work_start_time,
    b.normal_working_hours, b.late_grace_minutes
"""


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection, *, default_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES):
        self._conn_factory = conn_factory
        self._default_grace_minutes = int(default_grace_minutes)

    def _to_branch(self, r: Dict[str, Any]) -> Branch:
        return Branch(
            branch_id=int(r["branch_id"]),
            name=r["branch_name"],
            timezone=r.get("timezone") or DEFAULT_TIMEZONE,
            work_start_time=branch_start_time(r.get("work_start_time")) or DEFAULT_WORK_START,
            normal_working_hours=float(r.get("normal_working_hours") or DEFAULT_NORMAL_WORKING_HOURS),
            late_grace_minutes=int(
                r["late_grace_minutes"] if r.get("late_grace_minutes") is not None else self._default_grace_minutes
            ),
        )

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT e.employee_id, e.employee_code, e.full_name, e.is_active, {_BRANCH_COLUMNS}
                FROM employees e
                JOIN branches b ON b.branch_id = e.branch_id
                WHERE e.employee_id=%s
                """,
                (int(employee_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                employee_code=r["employee_code"],
                full_name=r["full_name"],
                branch=self._to_branch(r),
                is_active=bool(r["is_active"]),
            )

    def get_branch(self, branch_id: int) -> Optional[Branch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_BRANCH_COLUMNS} FROM branches b WHERE b.branch_id=%s", (int(branch_id),))
            r = fetchone(cur)
            return self._to_branch(r) if r else None
