from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..audit.trail import AuditTrail
from ..common.validators import optional_text, require_non_empty, require_ordered
from ..core.constants import AUDIT_ENTITY_ATTENDANCE
from ..core.enums import AttendanceStatus, AuditAction
from ..core.exceptions import ConflictError, InvalidStateError
from ..employees.model import Employee
from .manager import AttendanceRecordManager, with_totals
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class ManualEntryHandler:
    """Back-office creation and editing of attendance records."""

    def __init__(self, attendance: AttendanceRepository, records: AttendanceRecordManager, audit: AuditTrail):
        self._attendance = attendance
        self._records = records
        self._audit = audit

    def create(
        self,
        employee: Employee,
        *,
        work_date: date,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        status: AttendanceStatus,
        reason: str,
        entered_by: int,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        reason = require_non_empty(reason, "Manual entry reason")
        require_ordered(check_in, check_out)

        if self._attendance.get_for_employee_and_date(employee.employee_id, work_date):
            logger.warning("Manual entry rejected: employee %s already has a record on %s", employee.employee_id, work_date)
            raise ConflictError(f"Attendance record already exists for {work_date:%Y-%m-%d}")

        record = AttendanceRecord(
            attendance_id=0,
            employee_id=employee.employee_id,
            work_date=work_date,
            check_in_time=check_in,
            check_out_time=check_out,
            status=status,
            is_manual_entry=True,
            check_in_location=optional_text(location),
            manual_entry_reason=reason,
            manual_entry_by=int(entered_by),
            notes=optional_text(notes),
        )
        record = with_totals(record, normal_hours=employee.branch.normal_working_hours)
        record = replace(record, attendance_id=self._attendance.add(record))

        self._audit.record(
            actor_id=entered_by,
            entity_type=AUDIT_ENTITY_ATTENDANCE,
            entity_id=record.attendance_id,
            action=AuditAction.MANUAL_CREATE,
            after=record,
            extra={"entered_by": int(entered_by), "reason": reason},
        )
        logger.info("Manual entry %s created for employee %s by %s", record.attendance_id, employee.employee_id, entered_by)
        return record

    def update(
        self,
        employee: Employee,
        attendance_id: int,
        *,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        status: AttendanceStatus,
        reason: str,
        entered_by: int,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        reason = require_non_empty(reason, "Manual entry reason")
        require_ordered(check_in, check_out)

        before = self._records.get_record(attendance_id)
        if not before.is_manual_entry:
            logger.warning("Manual update rejected: attendance %s was not entered manually", attendance_id)
            raise InvalidStateError("Only manual entries can be updated manually")

        after = replace(
            before,
            check_in_time=check_in,
            check_out_time=check_out,
            status=status,
            check_in_location=optional_text(location),
            manual_entry_reason=reason,
            manual_entry_by=int(entered_by),
            notes=optional_text(notes),
        )
        after = with_totals(after, normal_hours=employee.branch.normal_working_hours)
        if after.check_out_time is None:
            after = replace(
                after,
                total_working=None,
                overtime=None,
                break_duration_adjusted=False,
                working_hours_adjusted=False,
            )
        self._records.save(after)

        self._audit.record(
            actor_id=entered_by,
            entity_type=AUDIT_ENTITY_ATTENDANCE,
            entity_id=after.attendance_id,
            action=AuditAction.MANUAL_UPDATE,
            before=before,
            after=after,
            extra={"entered_by": int(entered_by), "reason": reason},
        )
        logger.info("Manual entry %s updated by %s", attendance_id, entered_by)
        return after
