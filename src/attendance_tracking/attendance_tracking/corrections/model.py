from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CorrectionStatus, CorrectionType


@dataclass(frozen=True)
class AttendanceCorrection:
    """A request to change one field of an attendance record.

    ``original_value`` and ``corrected_value`` are kept as the text the
    requester submitted; they are parsed only when the correction is approved.
    """

    correction_id: int
    attendance_id: int
    requested_by: int
    correction_type: CorrectionType
    original_value: Optional[str]
    corrected_value: str
    reason: str
    status: CorrectionStatus = CorrectionStatus.PENDING
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_comment: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == CorrectionStatus.PENDING
