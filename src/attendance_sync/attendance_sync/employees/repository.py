from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    """Read-only view of the employee directory."""

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError
