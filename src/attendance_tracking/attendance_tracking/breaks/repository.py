from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import BreakRecord


class BreakRepository(Protocol):
    def get_active_break(self, attendance_id: int) -> Optional[BreakRecord]:
        raise NotImplementedError

    def list_for_attendance(self, attendance_id: int) -> Sequence[BreakRecord]:
        """Breaks of one attendance record ordered by start time."""

        raise NotImplementedError

    def add(self, brk: BreakRecord) -> int:
        raise NotImplementedError

    def update(self, brk: BreakRecord) -> bool:
        raise NotImplementedError
