from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, validate_coordinates
from ..core.enums import DayPhase
from ..core.exceptions import ConflictError
from .model import LocationSample
from .repository import LocationSampleRepository

logger = logging.getLogger(__name__)


class LocationTrackingService:
    """Stores the periodic location samples of an open attendance record."""

    def __init__(self, samples: LocationSampleRepository, attendance: AttendanceRepository):
        self._samples = samples
        self._attendance = attendance

    def track(
        self,
        employee_id: int,
        *,
        attendance_id: int,
        latitude: float,
        longitude: float,
        accuracy: Optional[float] = None,
        address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LocationSample:
        validate_coordinates(latitude, longitude)

        record = self._attendance.get_by_id(attendance_id)
        if not record or record.employee_id != employee_id or record.phase is not DayPhase.CHECKED_IN:
            raise ConflictError("No active attendance session found", code="NO_ACTIVE_SESSION")

        sample = self._samples.append(
            attendance_id=record.attendance_id,
            employee_id=employee_id,
            latitude=latitude,
            longitude=longitude,
            captured_at=now or now_local(),
            accuracy=accuracy,
            address=optional_text(address),
        )
        logger.debug("Location sample %s stored for attendance %s", sample.sample_id, attendance_id)
        return sample

    def stop(self, employee_id: int, attendance_id: int) -> int:
        changed = self._samples.deactivate(attendance_id=attendance_id, employee_id=employee_id)
        logger.info("Location tracking stopped for attendance %s (%d samples closed)", attendance_id, changed)
        return changed

    def history(self, employee_id: int, attendance_id: int) -> Sequence[LocationSample]:
        return self._samples.list_for_attendance(attendance_id=attendance_id, employee_id=employee_id)
