from __future__ import annotations

from typing import Optional, Protocol

from .model import Branch, Employee


class EmployeeDirectory(Protocol):
    """Read-only employee lookup.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_branch(self, branch_id: int) -> Optional[Branch]:
        raise NotImplementedError
