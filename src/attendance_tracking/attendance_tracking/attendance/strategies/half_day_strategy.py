from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...common.datetime_utils import format_duration
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Check-out after working less than half of the normal day."""

    def decide_checkin(self, *, now: datetime, expected_start: Optional[datetime]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, worked: timedelta, normal_hours: float, current: AttendanceStatus) -> StatusDecision:
        normal = timedelta(hours=normal_hours)
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY,
            note=f"Worked {format_duration(worked)} of {format_duration(normal)}",
        )
