from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import parse_iso_datetime, to_iso


@dataclass(frozen=True)
class LocationSample:
    """One tracker tick; append-only, ordered by ``captured_at``."""

    sample_id: int
    attendance_id: int
    employee_id: int
    latitude: float
    longitude: float
    captured_at: datetime
    accuracy: Optional[float] = None
    address: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.sample_id,
            "attendanceId": self.attendance_id,
            "employeeId": self.employee_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "address": self.address,
            "timestamp": to_iso(self.captured_at),
            "isActive": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocationSample":
        return cls(
            sample_id=int(data["id"]),
            attendance_id=int(data["attendanceId"]),
            employee_id=int(data["employeeId"]),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            captured_at=parse_iso_datetime(data["timestamp"]),
            accuracy=data.get("accuracy"),
            address=data.get("address"),
            is_active=bool(data.get("isActive", True)),
        )
