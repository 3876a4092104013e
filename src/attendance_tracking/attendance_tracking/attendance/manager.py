from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from ..audit.trail import AuditTrail
from ..breaks.model import BreakRecord
from ..breaks.repository import BreakRepository
from ..core.constants import AUDIT_ENTITY_ATTENDANCE, AUDIT_ENTITY_BREAK, DEFAULT_NORMAL_WORKING_HOURS
from ..core.enums import AttendanceStatus, AuditAction
from ..core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ..employees.model import Branch, Employee
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, SourceMetadata
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def overtime_for(worked: timedelta, normal_hours: float) -> timedelta:
    return max(worked - timedelta(hours=normal_hours), timedelta(0))


def with_totals(
    record: AttendanceRecord,
    *,
    normal_hours: float,
    break_duration: Optional[timedelta] = None,
) -> AttendanceRecord:
    """Re-derive break, working and overtime durations of a closed day.

    Open days (no check-in or no check-out) are returned unchanged. A break
    duration or working time fixed by an approved correction is kept.
    """

    if record.check_in_time is None or record.check_out_time is None:
        return record

    if break_duration is None:
        if record.break_duration_adjusted:
            break_duration = record.break_duration or timedelta(0)
        elif record.breaks:
            break_duration = record.total_break_time(record.check_out_time)
        else:
            break_duration = record.break_duration or timedelta(0)

    if record.working_hours_adjusted:
        return replace(record, break_duration=break_duration)

    worked = max(record.check_out_time - record.check_in_time - break_duration, timedelta(0))
    return replace(
        record,
        break_duration=break_duration,
        total_working=worked,
        overtime=overtime_for(worked, normal_hours),
    )


def _join_notes(*notes: Optional[str]) -> Optional[str]:
    parts = [n for n in notes if n]
    return "; ".join(parts) or None


class AttendanceRecordManager:
    """Check-in / check-out lifecycle of the daily attendance record.

    Callers resolve the employee and the branch-local ``now`` and hold the
    per-(employee, date) lock; this class only applies the state transitions.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        breaks: BreakRepository,
        audit: AuditTrail,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._breaks = breaks
        self._audit = audit
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def hydrate(self, record: AttendanceRecord) -> AttendanceRecord:
        breaks = self._breaks.list_for_attendance(record.attendance_id)
        return replace(record, breaks=tuple(sorted(breaks, key=lambda b: b.start_time)))

    def find(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        record = self._attendance.get_for_employee_and_date(employee_id, work_date)
        return self.hydrate(record) if record else None

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError(f"Attendance record with ID {attendance_id} not found")
        return self.hydrate(record)

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        if not self._attendance.update(record):
            raise NotFoundError(f"Attendance record with ID {record.attendance_id} not found")
        return record

    def check_in(
        self,
        employee: Employee,
        *,
        now: datetime,
        location: Optional[str] = None,
        source: Optional[SourceMetadata] = None,
    ) -> AttendanceRecord:
        today = now.date()
        if self._attendance.get_for_employee_and_date(employee.employee_id, today):
            logger.warning("Check-in rejected: employee %s already checked in on %s", employee.employee_id, today)
            raise ConflictError("Employee has already checked in today")

        branch = employee.branch
        expected = self._factory.expected_start(today=today, branch=branch)
        strategy = self._factory.for_checkin(now=now, today=today, branch=branch)
        decision = strategy.decide_checkin(now=now, expected_start=expected)

        late_arrival = timedelta(0)
        if decision.status == AttendanceStatus.LATE and expected is not None:
            late_arrival = now - expected

        source = source or SourceMetadata()
        record = AttendanceRecord(
            attendance_id=0,
            employee_id=employee.employee_id,
            work_date=today,
            check_in_time=now,
            check_out_time=None,
            status=decision.status,
            check_in_location=location,
            check_in_ip=source.ip_address,
            check_in_device=source.device_info,
            check_in_latitude=source.latitude,
            check_in_longitude=source.longitude,
            expected_check_in_time=expected,
            late_arrival=late_arrival,
            notes=_join_notes(decision.note, source.notes),
        )
        record = replace(record, attendance_id=self._attendance.add(record))

        self._audit.record(
            actor_id=employee.employee_id,
            entity_type=AUDIT_ENTITY_ATTENDANCE,
            entity_id=record.attendance_id,
            action=AuditAction.CHECK_IN,
            after=record,
        )
        logger.info(
            "Employee %s checked in at %s (%s)", employee.employee_id, now.isoformat(), record.status.value
        )
        return record

    def finish_day(
        self,
        before: AttendanceRecord,
        *,
        at: datetime,
        branch: Optional[Branch],
    ) -> Tuple[AttendanceRecord, Optional[BreakRecord], Optional[BreakRecord]]:
        """Close an open day at ``at``.

        Ends the open break (written to the break store), derives totals and
        early departure, and re-runs the check-out strategy. Returns the record,
        unsaved, with the break as it was and as it was closed.
        """

        # An open break ends with the day.
        breaks = list(before.breaks)
        open_break = before.active_break()
        closed_break = None
        if open_break is not None:
            closed_break = open_break.closed_at(at)
            self._breaks.update(closed_break)
            breaks = [closed_break if b.break_id == open_break.break_id else b for b in breaks]

        check_out = max(at, before.check_in_time)
        normal_hours = branch.normal_working_hours if branch else DEFAULT_NORMAL_WORKING_HOURS
        record = replace(before, breaks=tuple(breaks), check_out_time=check_out)
        record = with_totals(record, normal_hours=normal_hours)

        early_departure = timedelta(0)
        expected_end = self._factory.expected_end(today=before.work_date, branch=branch)
        if expected_end is not None and check_out < expected_end:
            early_departure = expected_end - check_out

        current = record.arrival_status() if record.status == AttendanceStatus.ON_BREAK else record.status
        strategy = self._factory.for_checkout(worked=record.total_working, branch=branch, current_status=current)
        decision = strategy.decide_checkout(worked=record.total_working, normal_hours=normal_hours, current=current)
        record = replace(
            record,
            early_departure=early_departure,
            status=decision.status,
            notes=_join_notes(record.notes, decision.note),
        )
        return record, open_break, closed_break

    def check_out(
        self,
        employee: Employee,
        *,
        now: datetime,
        location: Optional[str] = None,
        source: Optional[SourceMetadata] = None,
    ) -> AttendanceRecord:
        before = self.find(employee.employee_id, now.date())
        if before is None or before.check_in_time is None:
            logger.warning("Check-out rejected: employee %s has no check-in on %s", employee.employee_id, now.date())
            raise InvalidStateError("Employee has not checked in today")
        if before.check_out_time is not None:
            logger.warning("Check-out rejected: employee %s already checked out", employee.employee_id)
            raise InvalidStateError("Employee has already checked out today")

        record, open_break, closed_break = self.finish_day(before, at=now, branch=employee.branch)
        source = source or SourceMetadata()
        record = replace(
            record,
            check_out_location=location,
            check_out_ip=source.ip_address,
            check_out_device=source.device_info,
            check_out_latitude=source.latitude,
            check_out_longitude=source.longitude,
            notes=_join_notes(record.notes, source.notes),
        )
        self.save(record)

        if closed_break is not None:
            self._audit.record(
                actor_id=employee.employee_id,
                entity_type=AUDIT_ENTITY_BREAK,
                entity_id=closed_break.break_id,
                action=AuditAction.BREAK_END,
                before=open_break,
                after=closed_break,
            )
        self._audit.record(
            actor_id=employee.employee_id,
            entity_type=AUDIT_ENTITY_ATTENDANCE,
            entity_id=record.attendance_id,
            action=AuditAction.CHECK_OUT,
            before=before,
            after=record,
        )
        if record.is_early_out():
            logger.info("Employee %s left %s early", employee.employee_id, record.early_departure)
        logger.info(
            "Employee %s checked out at %s, worked %s",
            employee.employee_id,
            record.check_out_time.isoformat(),
            record.total_working,
        )
        return record

        return record

    def current_status(self, employee_id: int, today: date) -> AttendanceStatus:
        record = self._attendance.get_for_employee_and_date(employee_id, today)
        return record.status if record else AttendanceStatus.ABSENT

    def list_for_employee(self, employee_id: int, start_date: date, end_date: date) -> List[AttendanceRecord]:
        if end_date < start_date:
            raise ValidationError("End date cannot be earlier than start date")
        rows = self._attendance.list_for_employee(employee_id, start_date, end_date)
        return [self.hydrate(r) for r in rows]
