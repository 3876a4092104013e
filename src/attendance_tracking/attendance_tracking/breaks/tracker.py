from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..attendance.manager import AttendanceRecordManager
from ..audit.trail import AuditTrail
from ..core.constants import AUDIT_ENTITY_BREAK
from ..core.enums import AttendanceStatus, AuditAction, BreakType
from ..core.exceptions import ConflictError, InvalidStateError
from ..employees.model import Employee
from .model import BreakRecord
from .policy import policy_for
from .repository import BreakRepository

logger = logging.getLogger(__name__)


class BreakTracker:
    """Open and close breaks inside today's attendance record."""

    def __init__(self, records: AttendanceRecordManager, breaks: BreakRepository, audit: AuditTrail):
        self._records = records
        self._breaks = breaks
        self._audit = audit

    def start_break(
        self,
        employee: Employee,
        break_type: BreakType,
        *,
        now: datetime,
        location: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> BreakRecord:
        record = self._records.find(employee.employee_id, now.date())
        if record is None or record.check_in_time is None:
            logger.warning("Break rejected: employee %s has not checked in", employee.employee_id)
            raise InvalidStateError("Employee has not checked in today")
        if record.check_out_time is not None:
            logger.warning("Break rejected: employee %s already checked out", employee.employee_id)
            raise InvalidStateError("Employee has already checked out today")
        if record.is_on_break():
            logger.warning("Break rejected: employee %s is already on a break", employee.employee_id)
            raise ConflictError("Employee is already on a break")

        policy = policy_for(break_type)
        brk = BreakRecord(
            break_id=0,
            attendance_id=record.attendance_id,
            break_type=break_type,
            start_time=max(now, record.check_in_time),
            location=location,
            reason=reason,
            is_paid=policy.is_paid,
            max_allowed_minutes=policy.max_minutes,
        )
        brk = replace(brk, break_id=self._breaks.add(brk))
        self._records.save(replace(record, status=AttendanceStatus.ON_BREAK, breaks=record.breaks + (brk,)))

        self._audit.record(
            actor_id=employee.employee_id,
            entity_type=AUDIT_ENTITY_BREAK,
            entity_id=brk.break_id,
            action=AuditAction.BREAK_START,
            after=brk,
        )
        logger.info("Employee %s started %s break at %s", employee.employee_id, break_type.value, brk.start_time)
        return brk

    def end_break(self, employee: Employee, *, now: datetime) -> BreakRecord:
        record = self._records.find(employee.employee_id, now.date())
        open_break = record.active_break() if record else None
        if open_break is None:
            logger.warning("End break rejected: employee %s is not on a break", employee.employee_id)
            raise InvalidStateError("Employee is not currently on a break")

        closed = open_break.closed_at(now)
        self._breaks.update(closed)

        breaks = tuple(closed if b.break_id == closed.break_id else b for b in record.breaks)
        updated = replace(record, breaks=breaks, status=record.arrival_status())
        self._records.save(replace(updated, break_duration=updated.total_break_time(now)))

        self._audit.record(
            actor_id=employee.employee_id,
            entity_type=AUDIT_ENTITY_BREAK,
            entity_id=closed.break_id,
            action=AuditAction.BREAK_END,
            before=open_break,
            after=closed,
        )
        if closed.is_exceeding:
            logger.warning(
                "Employee %s exceeded %s break by %s",
                employee.employee_id,
                closed.break_type.value,
                closed.exceeded_by,
            )
        else:
            logger.info("Employee %s ended %s break after %s", employee.employee_id, closed.break_type.value, closed.duration)
        return closed

    def get_active_break(self, employee_id: int, today: date) -> Optional[BreakRecord]:
        record = self._records.find(employee_id, today)
        return record.active_break() if record else None
