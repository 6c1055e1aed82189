from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.constants import BREAK_HOURS, BREAK_THRESHOLD_HOURS, STANDARD_WORKING_HOURS
from ..model import HourBreakdown
from .base import HoursCalculator


def _positive(value: float) -> Optional[float]:
    return round(value, 2) if value > 0 else None


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: one break hour past the threshold, overtime above the standard day."""

    def __init__(
        self,
        *,
        standard_hours: float = STANDARD_WORKING_HOURS,
        break_threshold_hours: float = BREAK_THRESHOLD_HOURS,
        break_hours: float = BREAK_HOURS,
    ):
        self._standard_hours = float(standard_hours)
        self._break_threshold_hours = float(break_threshold_hours)
        self._break_hours = float(break_hours)

    def breakdown(self, check_in: datetime, check_out: datetime) -> HourBreakdown:
        total = max((check_out - check_in).total_seconds(), 0) / 3600
        break_hours = self._break_hours if total > self._break_threshold_hours else 0.0
        actual = total - break_hours
        regular = min(actual, self._standard_hours)
        overtime = actual - self._standard_hours if actual > self._standard_hours else 0.0
        return HourBreakdown(
            total_hours=round(total, 2),
            regular_hours=_positive(regular),
            overtime_hours=_positive(overtime),
            break_hours=_positive(break_hours),
        )
