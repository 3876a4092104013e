from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..core.constants import (
    DEFAULT_LATE_GRACE_MINUTES,
    DEFAULT_NORMAL_WORKING_HOURS,
    DEFAULT_TIMEZONE,
    DEFAULT_WORK_START,
)


@dataclass(frozen=True)
class Branch:
    """Organizational location: timezone and working-hours configuration."""

    branch_id: int
    name: str
    timezone: str = DEFAULT_TIMEZONE
    work_start_time: time = DEFAULT_WORK_START
    normal_working_hours: float = DEFAULT_NORMAL_WORKING_HOURS
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Plain data object; directory lookups live behind ``EmployeeDirectory``.
    """

    employee_id: int
    employee_code: str
    full_name: str
    branch: Branch
    is_active: bool = True
