from __future__ import annotations

from datetime import date, timedelta
from typing import List

from ..core.enums import AttendanceStatus
from .manager import AttendanceRecordManager
from .model import AttendanceRecord
from .repository import AttendanceRepository


class AttendanceReportService:
    """Read-only views: a branch on one work date, an employee over a period."""

    def __init__(self, attendance: AttendanceRepository, records: AttendanceRecordManager):
        self._attendance = attendance
        self._records = records

    # -------- branch, one day --------
    def branch_day(self, branch_id: int, work_date: date) -> List[AttendanceRecord]:
        rows = self._attendance.list_for_branch_and_date(branch_id, work_date)
        return [self._records.hydrate(r) for r in rows]

    def currently_present(self, branch_id: int, work_date: date) -> List[AttendanceRecord]:
        """Checked in and not yet checked out; on-break employees count as present."""

        return [r for r in self.branch_day(branch_id, work_date) if r.is_open()]

    def on_break(self, branch_id: int, work_date: date) -> List[AttendanceRecord]:
        return [r for r in self.branch_day(branch_id, work_date) if r.status == AttendanceStatus.ON_BREAK]

    def late_arrivals(self, branch_id: int, work_date: date) -> List[AttendanceRecord]:
        return [r for r in self.branch_day(branch_id, work_date) if r.is_late()]

    # -------- employee, period --------
    def _period(self, employee_id: int, start: date, end: date) -> List[AttendanceRecord]:
        return self._records.list_for_employee(employee_id, start, end)

    def average_working_time(self, employee_id: int, start: date, end: date) -> timedelta:
        worked = [r.total_working for r in self._period(employee_id, start, end) if r.total_working is not None]
        if not worked:
            return timedelta(0)
        return sum(worked, timedelta(0)) / len(worked)

    def late_count(self, employee_id: int, start: date, end: date) -> int:
        return sum(1 for r in self._period(employee_id, start, end) if r.is_late())

    def total_overtime(self, employee_id: int, start: date, end: date) -> timedelta:
        return sum((r.overtime for r in self._period(employee_id, start, end) if r.overtime), timedelta(0))
