from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Employee:
    """Directory entry used to resolve device user ids.

    ``employee_code`` is the id enrolled on the punch clocks; ``employee_id``
    is the internal key attendance rows are stored under.
    """

    employee_id: int
    employee_code: str
    full_name: str
    is_active: bool = True
