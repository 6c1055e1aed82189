from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import LocationSample


class LocationSampleRepository(Protocol):
    def append(
        self,
        *,
        attendance_id: int,
        employee_id: int,
        latitude: float,
        longitude: float,
        captured_at: datetime,
        accuracy: Optional[float] = None,
        address: Optional[str] = None,
    ) -> LocationSample:
        raise NotImplementedError

    def deactivate(self, *, attendance_id: int, employee_id: int) -> int:
        raise NotImplementedError

    def list_for_attendance(self, *, attendance_id: int, employee_id: int) -> Sequence[LocationSample]:
        raise NotImplementedError
