from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: the employee marking their own attendance."""

    employee_id: int
    full_name: str
    email: Optional[str] = None
    shift_id: Optional[int] = None
    is_active: bool = True
