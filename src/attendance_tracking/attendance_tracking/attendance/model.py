from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from ..breaks.model import BreakRecord
from ..core.enums import AttendanceStatus, BreakType


@dataclass(frozen=True)
class SourceMetadata:
    """Where a check-in/check-out came from: client IP, device, GPS fix and free notes."""

    ip_address: Optional[str] = None
    device_info: Optional[str] = None
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day.

    Timestamps are naive branch-local wall-clock datetimes. ``breaks`` is
    ordered by start time and is populated by the record manager, not by the
    attendance repository. The ``*_adjusted`` flags mark totals set by an
    approved correction; recomputation leaves those values alone.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    is_manual_entry: bool = False
    breaks: Tuple[BreakRecord, ...] = ()
    check_in_location: Optional[str] = None
    check_out_location: Optional[str] = None
    check_in_ip: Optional[str] = None
    check_in_device: Optional[str] = None
    check_out_ip: Optional[str] = None
    check_out_device: Optional[str] = None
    check_in_latitude: Optional[float] = None
    check_in_longitude: Optional[float] = None
    check_out_latitude: Optional[float] = None
    check_out_longitude: Optional[float] = None
    expected_check_in_time: Optional[datetime] = None
    late_arrival: Optional[timedelta] = None
    early_departure: Optional[timedelta] = None
    total_working: Optional[timedelta] = None
    break_duration: Optional[timedelta] = None
    overtime: Optional[timedelta] = None
    break_duration_adjusted: bool = False
    working_hours_adjusted: bool = False
    manual_entry_reason: Optional[str] = None
    manual_entry_by: Optional[int] = None
    notes: Optional[str] = None

    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    def active_break(self) -> Optional[BreakRecord]:
        return next((b for b in self.breaks if b.end_time is None), None)

    def is_on_break(self) -> bool:
        return self.active_break() is not None

    def current_break_type(self) -> Optional[BreakType]:
        active = self.active_break()
        return active.break_type if active else None

    def total_break_time(self, now: Optional[datetime] = None) -> timedelta:
        return sum((b.elapsed(now) for b in self.breaks), timedelta(0))

    def worked_duration(self, now: Optional[datetime] = None) -> timedelta:
        """(check-out or now) - check-in - breaks, never negative."""

        if self.check_in_time is None:
            return timedelta(0)
        end = self.check_out_time or now
        if end is None:
            return timedelta(0)
        worked = end - self.check_in_time - self.total_break_time(end)
        return max(worked, timedelta(0))

    def arrival_status(self) -> AttendanceStatus:
        """Status earned at check-in, used to restore after a break."""

        if self.is_late():
            return AttendanceStatus.LATE
        return AttendanceStatus.PRESENT

    def is_late(self) -> bool:
        return bool(self.late_arrival and self.late_arrival > timedelta(0))

    def is_early_out(self) -> bool:
        return bool(self.early_departure and self.early_departure > timedelta(0))
