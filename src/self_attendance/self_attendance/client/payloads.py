from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..attendance.model import DeviceFingerprint, GeoLocation


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


@dataclass(frozen=True)
class CheckInRequest:
    selfie: str
    location: GeoLocation
    device_info: Optional[DeviceFingerprint] = None
    is_remote: bool = False
    notes: Optional[str] = None
    shift_id: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return _compact(
            {
                "checkInSelfie": self.selfie,
                "checkInLocation": self.location.to_dict(),
                "deviceInfo": self.device_info.to_dict() if self.device_info else None,
                "isRemote": self.is_remote,
                "notes": self.notes,
                "shiftId": self.shift_id,
            }
        )


@dataclass(frozen=True)
class CheckOutRequest:
    selfie: str
    location: GeoLocation
    notes: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _compact(
            {
                "checkOutSelfie": self.selfie,
                "checkOutLocation": self.location.to_dict(),
                "notes": self.notes,
            }
        )
