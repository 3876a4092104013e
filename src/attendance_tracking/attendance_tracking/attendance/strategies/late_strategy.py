from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, expected_start: Optional[datetime]) -> StatusDecision:
        note = None
        if expected_start is not None:
            minutes = int((now - expected_start).total_seconds() // 60)
            note = f"Late by {minutes} min"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)

    def decide_checkout(self, *, worked: timedelta, normal_hours: float, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
