from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Tuple, Union

from ..audit.sink import AuditSink
from ..audit.trail import AuditTrail
from ..breaks.model import BreakRecord
from ..breaks.repository import BreakRepository
from ..breaks.tracker import BreakTracker
from ..common.datetime_utils import PytzTimeProvider, TimeProvider, parse_iso_date, parse_time_on
from ..common.locks import KeyedLock
from ..common.validators import coerce_enum
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import AttendanceStatus, BreakType, CorrectionType
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ..corrections.model import AttendanceCorrection
from ..corrections.repository import CorrectionRepository
from ..corrections.service import CorrectionWorkflow
from ..database.unit_of_work import AutoCommit, UnitOfWork
from ..employees.model import Branch, Employee
from ..employees.repository import EmployeeDirectory
from .factory import AttendanceStrategyFactory
from .manager import AttendanceRecordManager
from .manual_entry import ManualEntryHandler
from .model import AttendanceRecord, SourceMetadata
from .reports import AttendanceReportService
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

DateInput = Union[date, str]
TimeInput = Union[datetime, str, None]


def _as_date(value: DateInput) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date((value or "").strip())
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def _as_datetime(value: TimeInput, work_date: date) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if not value.strip():
        return None
    return parse_time_on(value, work_date)


class AttendanceService:
    """Entry point for every attendance operation.

    Resolves the employee and the branch-local clock, serializes work on the
    same (employee, date), runs each change in one unit of work and delegates
    to the record manager, break tracker, correction workflow, manual entry
    handler and report queries.
    """

    def __init__(
        self,
        employees: EmployeeDirectory,
        attendance: AttendanceRepository,
        breaks: BreakRepository,
        corrections: CorrectionRepository,
        audit: AuditSink,
        *,
        time_provider: TimeProvider | None = None,
        lock: KeyedLock | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        unit_of_work: UnitOfWork | None = None,
    ):
        self._employees = employees
        self._clock = time_provider or PytzTimeProvider()
        self._lock = lock or KeyedLock()
        self._uow = unit_of_work or AutoCommit()

        trail = AuditTrail(audit)
        self._records = AttendanceRecordManager(attendance, breaks, trail, strategy_factory=strategy_factory)
        self._breaks = BreakTracker(self._records, breaks, trail)
        self._corrections = CorrectionWorkflow(corrections, self._records, trail)
        self._manual = ManualEntryHandler(attendance, self._records, trail)
        self._reports = AttendanceReportService(attendance, self._records)

    # -------- helpers --------
    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            logger.warning("Unknown employee %s", employee_id)
            raise NotFoundError(f"Employee with ID {employee_id} not found")
        return employee

    def _active_employee(self, employee_id: int) -> Employee:
        employee = self._employee(employee_id)
        if not employee.is_active:
            logger.warning("Inactive employee %s", employee_id)
            raise InvalidStateError(f"Employee with ID {employee_id} is not active")
        return employee

    def _now(self, employee: Optional[Employee], now: Optional[datetime]) -> datetime:
        if now is not None:
            return now
        timezone = employee.branch.timezone if employee else DEFAULT_TIMEZONE
        return self._clock.now(timezone)

    def _branch(self, branch_id: int) -> Branch:
        branch = self._employees.get_branch(int(branch_id))
        if not branch:
            raise NotFoundError(f"Branch with ID {branch_id} not found")
        return branch

    def _branch_date(self, branch: Branch, work_date: Optional[DateInput], now: Optional[datetime]) -> date:
        if work_date is not None:
            return _as_date(work_date)
        return (now or self._clock.now(branch.timezone)).date()

    @contextmanager
    def _unit(self, key: Tuple[int, date]) -> Iterator[None]:
        """Hold the (employee, date) lock and one transaction for a change."""

        with self._lock.hold(key), self._uow.transaction():
            yield

    def _record_context(self, attendance_id: int) -> Tuple[AttendanceRecord, Optional[Employee]]:
        record = self._records.get_record(int(attendance_id))
        return record, self._employees.get_by_id(record.employee_id)

    # -------- check-in / check-out --------
    def check_in(
        self,
        employee_id: int,
        location: Optional[str] = None,
        source: Optional[SourceMetadata] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        employee = self._active_employee(employee_id)
        now = self._now(employee, now)
        with self._unit((employee.employee_id, now.date())):
            return self._records.check_in(employee, now=now, location=location, source=source)

    def check_out(
        self,
        employee_id: int,
        location: Optional[str] = None,
        source: Optional[SourceMetadata] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        employee = self._employee(employee_id)
        now = self._now(employee, now)
        with self._unit((employee.employee_id, now.date())):
            return self._records.check_out(employee, now=now, location=location, source=source)

    def get_current_status(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceStatus:
        employee = self._employees.get_by_id(int(employee_id))
        return self._records.current_status(int(employee_id), self._now(employee, now).date())

    def get_today_record(self, employee_id: int, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        employee = self._employee(employee_id)
        return self._records.find(employee.employee_id, self._now(employee, now).date())

    def get_record(self, attendance_id: int) -> AttendanceRecord:
        return self._records.get_record(int(attendance_id))

    def get_employee_attendance(self, employee_id: int, start: DateInput, end: DateInput) -> List[AttendanceRecord]:
        employee = self._employee(employee_id)
        return self._records.list_for_employee(employee.employee_id, _as_date(start), _as_date(end))

    # -------- breaks --------
    def start_break(
        self,
        employee_id: int,
        break_type: Union[BreakType, str],
        location: Optional[str] = None,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> BreakRecord:
        break_type = coerce_enum(BreakType, break_type, "break type")
        employee = self._employee(employee_id)
        now = self._now(employee, now)
        with self._unit((employee.employee_id, now.date())):
            return self._breaks.start_break(employee, break_type, now=now, location=location, reason=reason)

    def end_break(self, employee_id: int, *, now: Optional[datetime] = None) -> BreakRecord:
        employee = self._employee(employee_id)
        now = self._now(employee, now)
        with self._unit((employee.employee_id, now.date())):
            return self._breaks.end_break(employee, now=now)

    def get_active_break(self, employee_id: int, *, now: Optional[datetime] = None) -> Optional[BreakRecord]:
        employee = self._employee(employee_id)
        return self._breaks.get_active_break(employee.employee_id, self._now(employee, now).date())

    # -------- corrections --------
    def request_correction(
        self,
        attendance_id: int,
        requested_by: int,
        correction_type: Union[CorrectionType, str],
        original_value: Optional[str],
        corrected_value: str,
        reason: str,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceCorrection:
        correction_type = coerce_enum(CorrectionType, correction_type, "correction type")
        record, employee = self._record_context(attendance_id)
        now = self._now(employee, now)
        with self._unit((record.employee_id, record.work_date)):
            return self._corrections.request(
                attendance_id=record.attendance_id,
                requested_by=requested_by,
                correction_type=correction_type,
                original_value=original_value,
                corrected_value=corrected_value,
                reason=reason,
                now=now,
            )

    def approve_correction(
        self,
        correction_id: int,
        approved_by: int,
        comment: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceCorrection:
        correction = self._corrections.get(int(correction_id))
        record, employee = self._record_context(correction.attendance_id)
        now = self._now(employee, now)
        with self._unit((record.employee_id, record.work_date)):
            return self._corrections.approve(
                correction.correction_id,
                approved_by=approved_by,
                comment=comment,
                now=now,
                branch=employee.branch if employee else None,
            )

    def reject_correction(
        self,
        correction_id: int,
        rejected_by: int,
        reason: str,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceCorrection:
        correction = self._corrections.get(int(correction_id))
        record, employee = self._record_context(correction.attendance_id)
        now = self._now(employee, now)
        with self._unit((record.employee_id, record.work_date)):
            return self._corrections.reject(correction.correction_id, rejected_by=rejected_by, reason=reason, now=now)

    def list_pending_corrections(self, branch_id: Optional[int] = None) -> List[AttendanceCorrection]:
        return self._corrections.list_pending(branch_id)

    # -------- manual entries --------
    def create_manual_entry(
        self,
        employee_id: int,
        work_date: DateInput,
        check_in: TimeInput,
        check_out: TimeInput,
        status: Union[AttendanceStatus, str],
        reason: str,
        entered_by: int,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        employee = self._employee(employee_id)
        work_date = _as_date(work_date)
        status = coerce_enum(AttendanceStatus, status, "attendance status")
        check_in_at = _as_datetime(check_in, work_date)
        check_out_at = _as_datetime(check_out, work_date)
        with self._unit((employee.employee_id, work_date)):
            return self._manual.create(
                employee,
                work_date=work_date,
                check_in=check_in_at,
                check_out=check_out_at,
                status=status,
                reason=reason,
                entered_by=entered_by,
                location=location,
                notes=notes,
            )

    def update_manual_entry(
        self,
        attendance_id: int,
        check_in: TimeInput,
        check_out: TimeInput,
        status: Union[AttendanceStatus, str],
        reason: str,
        entered_by: int,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        status = coerce_enum(AttendanceStatus, status, "attendance status")
        record = self._records.get_record(int(attendance_id))
        employee = self._employee(record.employee_id)
        check_in_at = _as_datetime(check_in, record.work_date)
        check_out_at = _as_datetime(check_out, record.work_date)
        with self._unit((record.employee_id, record.work_date)):
            return self._manual.update(
                employee,
                record.attendance_id,
                check_in=check_in_at,
                check_out=check_out_at,
                status=status,
                reason=reason,
                entered_by=entered_by,
                location=location,
                notes=notes,
            )

    # -------- reports --------
    def get_branch_attendance(
        self, branch_id: int, work_date: Optional[DateInput] = None, *, now: Optional[datetime] = None
    ) -> List[AttendanceRecord]:
        branch = self._branch(branch_id)
        return self._reports.branch_day(branch.branch_id, self._branch_date(branch, work_date, now))

    def get_currently_present(
        self, branch_id: int, work_date: Optional[DateInput] = None, *, now: Optional[datetime] = None
    ) -> List[AttendanceRecord]:
        branch = self._branch(branch_id)
        return self._reports.currently_present(branch.branch_id, self._branch_date(branch, work_date, now))

    def get_employees_on_break(
        self, branch_id: int, work_date: Optional[DateInput] = None, *, now: Optional[datetime] = None
    ) -> List[AttendanceRecord]:
        branch = self._branch(branch_id)
        return self._reports.on_break(branch.branch_id, self._branch_date(branch, work_date, now))

    def get_late_employees(
        self, branch_id: int, work_date: Optional[DateInput] = None, *, now: Optional[datetime] = None
    ) -> List[AttendanceRecord]:
        branch = self._branch(branch_id)
        return self._reports.late_arrivals(branch.branch_id, self._branch_date(branch, work_date, now))

    def get_average_working_time(self, employee_id: int, start: DateInput, end: DateInput) -> timedelta:
        employee = self._employee(employee_id)
        return self._reports.average_working_time(employee.employee_id, _as_date(start), _as_date(end))

    def get_late_count(self, employee_id: int, start: DateInput, end: DateInput) -> int:
        employee = self._employee(employee_id)
        return self._reports.late_count(employee.employee_id, _as_date(start), _as_date(end))

    def get_total_overtime(self, employee_id: int, start: DateInput, end: DateInput) -> timedelta:
        employee = self._employee(employee_id)
        return self._reports.total_overtime(employee.employee_id, _as_date(start), _as_date(end))
