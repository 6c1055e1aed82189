from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, shift: Optional[Shift]) -> StatusDecision:
        if shift:
            return StatusDecision(status=AttendanceStatus.LATE, note=f"Late for {shift.shift_name}")
        return StatusDecision(status=AttendanceStatus.LATE)

    def decide_checkout(self, *, now: datetime, shift: Optional[Shift], current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
