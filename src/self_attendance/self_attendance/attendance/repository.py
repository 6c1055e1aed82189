from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, DeviceFingerprint, GeoLocation, HourBreakdown


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        is_remote: bool = False,
        shift_id: Optional[int] = None,
        selfie: Optional[str] = None,
        location: Optional[GeoLocation] = None,
        device_info: Optional[DeviceFingerprint] = None,
        ip_address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        hours: HourBreakdown,
        selfie: Optional[str] = None,
        location: Optional[GeoLocation] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """Only updates a record that has no check-out yet."""

        raise NotImplementedError
