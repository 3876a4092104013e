from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from contextlib import contextmanager
from typing import Optional

import pytest

from src.attendance_tracking.attendance_tracking.attendance.model import AttendanceRecord
from src.attendance_tracking.attendance_tracking.attendance.service import AttendanceService
from src.attendance_tracking.attendance_tracking.breaks.model import BreakRecord
from src.attendance_tracking.attendance_tracking.common.locks import KeyedLock
from src.attendance_tracking.attendance_tracking.core.enums import CorrectionStatus, CorrectionType
from src.attendance_tracking.attendance_tracking.core.exceptions import ConflictError
from src.attendance_tracking.attendance_tracking.corrections.model import AttendanceCorrection
from src.attendance_tracking.attendance_tracking.employees.model import Branch, Employee


class InMemoryEmployees:
    def __init__(self, *employees: Employee):
        self.by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def get_branch(self, branch_id: int) -> Optional[Branch]:
        return next((e.branch for e in self.by_id.values() if e.branch.branch_id == branch_id), None)


class InMemoryAttendance:
    def __init__(self, employees: Optional[InMemoryEmployees] = None):
        self.rows: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._employees = employees

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next((r for r in self.rows.values() if r.employee_id == employee_id and r.work_date == work_date), None)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(attendance_id)

    def add(self, record: AttendanceRecord) -> int:
        if self.get_for_employee_and_date(record.employee_id, record.work_date):
            raise ConflictError("duplicate")
        self._id += 1
        # Breaks live in their own repository.
        self.rows[self._id] = replace(record, attendance_id=self._id, breaks=())
        return self._id

    def update(self, record: AttendanceRecord) -> bool:
        if record.attendance_id not in self.rows:
            return False
        self.rows[record.attendance_id] = replace(record, breaks=())
        return True

    def list_for_employee(self, employee_id: int, start_date: date, end_date: date):
        rows = [r for r in self.rows.values() if r.employee_id == employee_id and start_date <= r.work_date <= end_date]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)

    def list_for_branch_and_date(self, branch_id: int, work_date: date):
        rows = [
            r
            for r in self.rows.values()
            if r.work_date == work_date and self._employees.get_by_id(r.employee_id).branch.branch_id == branch_id
        ]
        return sorted(rows, key=lambda r: (r.check_in_time or datetime.max, r.employee_id))


class InMemoryBreaks:
    def __init__(self):
        self.rows: dict[int, BreakRecord] = {}
        self._id = 0

    def get_active_break(self, attendance_id: int) -> Optional[BreakRecord]:
        return next((b for b in self.rows.values() if b.attendance_id == attendance_id and b.end_time is None), None)

    def list_for_attendance(self, attendance_id: int):
        return sorted((b for b in self.rows.values() if b.attendance_id == attendance_id), key=lambda b: b.start_time)

    def add(self, brk: BreakRecord) -> int:
        self._id += 1
        self.rows[self._id] = replace(brk, break_id=self._id)
        return self._id

    def update(self, brk: BreakRecord) -> bool:
        if brk.break_id not in self.rows:
            return False
        self.rows[brk.break_id] = brk
        return True


class InMemoryCorrections:
    def __init__(self, attendance: InMemoryAttendance, employees: InMemoryEmployees):
        self.rows: dict[int, AttendanceCorrection] = {}
        self._id = 0
        self._attendance = attendance
        self._employees = employees

    def add(self, correction: AttendanceCorrection) -> int:
        self._id += 1
        self.rows[self._id] = replace(correction, correction_id=self._id)
        return self._id

    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        return self.rows.get(correction_id)

    def update(self, correction: AttendanceCorrection) -> bool:
        if correction.correction_id not in self.rows:
            return False
        self.rows[correction.correction_id] = correction
        return True

    def find_pending(self, attendance_id: int, correction_type: CorrectionType):
        return next(
            (
                c
                for c in self.rows.values()
                if c.attendance_id == attendance_id
                and c.correction_type == correction_type
                and c.status == CorrectionStatus.PENDING
            ),
            None,
        )

    def list_pending(self, branch_id: Optional[int] = None):
        out = []
        for c in sorted(self.rows.values(), key=lambda c: c.correction_id):
            if c.status != CorrectionStatus.PENDING:
                continue
            if branch_id is not None:
                record = self._attendance.get_by_id(c.attendance_id)
                employee = self._employees.get_by_id(record.employee_id)
                if employee.branch.branch_id != branch_id:
                    continue
            out.append(c)
        return out


class InMemoryUnitOfWork:
    """Restores the given stores when the wrapped block raises."""

    def __init__(self, *stores):
        self.stores = stores
        self.committed = 0
        self.rolled_back = 0

    @contextmanager
    def transaction(self):
        saved = [(dict(s.rows), s._id) for s in self.stores]
        try:
            yield
        except Exception:
            for store, (rows, last_id) in zip(self.stores, saved):
                store.rows, store._id = rows, last_id
            self.rolled_back += 1
            raise
        self.committed += 1


class RecordingAuditSink:
    def __init__(self):
        self.events: list[dict] = []

    def log_data_modification(self, *, actor_id, entity_type, entity_id, action, before, after) -> None:
        self.events.append(
            {
                "actor_id": actor_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "before": before,
                "after": after,
            }
        )

    def actions(self) -> list[str]:
        return [e["action"] for e in self.events]


class FailingAuditSink:
    def log_data_modification(self, **kwargs) -> None:
        raise RuntimeError("audit store unavailable")


class FixedTimeProvider:
    def __init__(self, now: datetime):
        self.current = now
        self.zones: list[str] = []

    def now(self, timezone: str) -> datetime:
        self.zones.append(timezone)
        return self.current


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 55, 0)


@pytest.fixture
def branch() -> Branch:
    return Branch(
        branch_id=1,
        name="Head Office",
        timezone="Asia/Ho_Chi_Minh",
        work_start_time=time(9, 0),
        normal_working_hours=8.0,
        late_grace_minutes=5,
    )


@pytest.fixture
def employee(branch) -> Employee:
    return Employee(employee_id=1, employee_code="EMP001", full_name="Nguyen Van An", branch=branch)


@pytest.fixture
def other_branch_employee() -> Employee:
    london = Branch(branch_id=2, name="London Office", timezone="Europe/London", normal_working_hours=7.5)
    return Employee(employee_id=2, employee_code="EMP002", full_name="Oliver Smith", branch=london)


@pytest.fixture
def inactive_employee(branch) -> Employee:
    return Employee(employee_id=3, employee_code="EMP003", full_name="Le Van Cuong", branch=branch, is_active=False)


@pytest.fixture
def employees(employee, other_branch_employee, inactive_employee) -> InMemoryEmployees:
    return InMemoryEmployees(employee, other_branch_employee, inactive_employee)


@pytest.fixture
def attendance_repo(employees) -> InMemoryAttendance:
    return InMemoryAttendance(employees)


@pytest.fixture
def breaks_repo() -> InMemoryBreaks:
    return InMemoryBreaks()


@pytest.fixture
def corrections_repo(attendance_repo, employees) -> InMemoryCorrections:
    return InMemoryCorrections(attendance_repo, employees)


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def clock(fixed_now) -> FixedTimeProvider:
    return FixedTimeProvider(fixed_now)


@pytest.fixture
def unit_of_work(attendance_repo, breaks_repo, corrections_repo) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(attendance_repo, breaks_repo, corrections_repo)


@pytest.fixture
def service(employees, attendance_repo, breaks_repo, corrections_repo, audit_sink, clock, unit_of_work) -> AttendanceService:
    return AttendanceService(
        employees,
        attendance_repo,
        breaks_repo,
        corrections_repo,
        audit_sink,
        time_provider=clock,
        lock=KeyedLock(timeout=0.5),
        unit_of_work=unit_of_work,
    )


@pytest.fixture
def failing_audit_sink() -> FailingAuditSink:
    return FailingAuditSink()
