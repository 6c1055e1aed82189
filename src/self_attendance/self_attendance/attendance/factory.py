from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_LATE_AFTER_HOUR, DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import AttendanceStatus
from ..shifts.model import Shift
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    late_after_hour: int = DEFAULT_LATE_AFTER_HOUR

    def for_checkin(self, *, now: datetime, shift: Optional[Shift]) -> AttendanceStrategy:
        if not shift:
            return LateStrategy() if now.hour > self.late_after_hour else NormalStrategy()

        shift_start = datetime.combine(now.date(), shift.start_time)
        if now <= shift_start + timedelta(minutes=self.grace_minutes):
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self, *, now: datetime, shift: Optional[Shift], current_status: AttendanceStatus) -> AttendanceStrategy:
        if not shift:
            return NormalStrategy()

        shift_end = datetime.combine(now.date(), shift.end_time)
        if now < shift_end and current_status == AttendanceStatus.PRESENT:
            return EarlyLeaveStrategy()
        return NormalStrategy()
