from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..model import HourBreakdown


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for the hour breakdown)."""

    @abstractmethod
    def breakdown(self, check_in: datetime, check_out: datetime) -> HourBreakdown:
        raise NotImplementedError
