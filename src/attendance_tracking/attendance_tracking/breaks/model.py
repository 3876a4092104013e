from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from ..core.enums import BreakApprovalStatus, BreakType


@dataclass(frozen=True)
class BreakRecord:
    """Domain entity: one break interval inside an attendance day."""

    break_id: int
    attendance_id: int
    break_type: BreakType
    start_time: datetime
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    reason: Optional[str] = None
    is_paid: bool = True
    max_allowed_minutes: Optional[int] = None
    duration: Optional[timedelta] = None
    is_exceeding: bool = False
    exceeded_by: Optional[timedelta] = None
    approval_status: BreakApprovalStatus = BreakApprovalStatus.NOT_REQUIRED

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    def elapsed(self, now: Optional[datetime] = None) -> timedelta:
        end = self.end_time or now
        if end is None:
            return timedelta(0)
        return max(end - self.start_time, timedelta(0))

    def closed_at(self, now: datetime) -> "BreakRecord":
        """Return this break closed at ``now`` with duration and overrun flags."""

        end = max(now, self.start_time)
        duration = end - self.start_time
        exceeded_by = None
        approval = self.approval_status
        if self.max_allowed_minutes is not None and duration > timedelta(minutes=self.max_allowed_minutes):
            exceeded_by = duration - timedelta(minutes=self.max_allowed_minutes)
            approval = BreakApprovalStatus.PENDING

        return replace(
            self,
            end_time=end,
            duration=duration,
            is_exceeding=exceeded_by is not None,
            exceeded_by=exceeded_by,
            approval_status=approval,
        )
