from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import BreakType


@dataclass(frozen=True)
class BreakPolicy:
    max_minutes: Optional[int]
    is_paid: bool


# None means no limit.
BREAK_POLICIES: dict[BreakType, BreakPolicy] = {
    BreakType.TEA: BreakPolicy(max_minutes=15, is_paid=True),
    BreakType.LUNCH: BreakPolicy(max_minutes=60, is_paid=False),
    BreakType.PERSONAL: BreakPolicy(max_minutes=10, is_paid=True),
    BreakType.MEETING: BreakPolicy(max_minutes=None, is_paid=True),
    BreakType.PRAYER: BreakPolicy(max_minutes=15, is_paid=True),
    BreakType.MEDICAL: BreakPolicy(max_minutes=30, is_paid=True),
    BreakType.EMERGENCY: BreakPolicy(max_minutes=None, is_paid=True),
    BreakType.OTHER: BreakPolicy(max_minutes=15, is_paid=True),
}


def policy_for(break_type: BreakType) -> BreakPolicy:
    return BREAK_POLICIES.get(break_type, BREAK_POLICIES[BreakType.OTHER])
