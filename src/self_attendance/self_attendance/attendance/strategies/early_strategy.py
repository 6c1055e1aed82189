from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Early leave on checkout (only when check-in was PRESENT)."""

    def decide_checkin(self, *, now: datetime, shift: Optional[Shift]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, now: datetime, shift: Optional[Shift], current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.EARLY_LEAVE)
