from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..core.enums import AttendanceStatus
from ..employees.model import Branch
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on branch rules."""

    def expected_start(self, *, today: date, branch: Optional[Branch]) -> Optional[datetime]:
        if not branch:
            return None
        return datetime.combine(today, branch.work_start_time)

    def expected_end(self, *, today: date, branch: Optional[Branch]) -> Optional[datetime]:
        start = self.expected_start(today=today, branch=branch)
        if start is None:
            return None
        return start + timedelta(hours=branch.normal_working_hours)

    def for_checkin(self, *, now: datetime, today: date, branch: Optional[Branch]) -> AttendanceStrategy:
        expected = self.expected_start(today=today, branch=branch)
        if expected is None:
            return NormalStrategy()

        if now <= expected + timedelta(minutes=branch.late_grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self, *, worked: timedelta, branch: Optional[Branch], current_status: AttendanceStatus) -> AttendanceStrategy:
        if not branch or branch.normal_working_hours <= 0:
            return NormalStrategy()

        if worked < timedelta(hours=branch.normal_working_hours) / 2:
            return HalfDayStrategy()
        if current_status == AttendanceStatus.LATE:
            return LateStrategy()
        return NormalStrategy()
