from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import CorrectionType
from .model import AttendanceCorrection


class CorrectionRepository(Protocol):
    def add(self, correction: AttendanceCorrection) -> int:
        raise NotImplementedError

    def get_by_id(self, correction_id: int) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def update(self, correction: AttendanceCorrection) -> bool:
        raise NotImplementedError

    def find_pending(self, attendance_id: int, correction_type: CorrectionType) -> Optional[AttendanceCorrection]:
        raise NotImplementedError

    def list_pending(self, branch_id: Optional[int] = None) -> Sequence[AttendanceCorrection]:
        """Pending corrections, oldest first; ``branch_id`` filters by the employee's branch."""

        raise NotImplementedError
