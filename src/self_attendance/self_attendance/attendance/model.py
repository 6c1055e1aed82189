from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime, to_iso
from ..core.enums import AttendanceStatus, DayPhase


@dataclass(frozen=True)
class GeoLocation:
    """Coordinates are authoritative; ``address`` is best-effort."""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["GeoLocation"]:
        if not data:
            return None
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            accuracy=float(data["accuracy"]) if data.get("accuracy") is not None else None,
            address=data.get("address") or None,
        )


@dataclass(frozen=True)
class DeviceFingerprint:
    """Audit metadata derived from a user-agent string."""

    device_type: str
    os: str
    browser: str
    user_agent: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "deviceType": self.device_type,
            "os": self.os,
            "browser": self.browser,
            "userAgent": self.user_agent,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["DeviceFingerprint"]:
        if not data:
            return None
        return cls(
            device_type=str(data.get("deviceType") or "desktop"),
            os=str(data.get("os") or "Unknown"),
            browser=str(data.get("browser") or "Unknown"),
            user_agent=str(data.get("userAgent") or ""),
        )


@dataclass(frozen=True)
class HourBreakdown:
    total_hours: float
    regular_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    break_hours: Optional[float] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (employee, calendar date)."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    is_remote: bool = False
    shift_id: Optional[int] = None
    check_in_selfie: Optional[str] = None
    check_out_selfie: Optional[str] = None
    check_in_location: Optional[GeoLocation] = None
    check_out_location: Optional[GeoLocation] = None
    device_info: Optional[DeviceFingerprint] = None
    ip_address: Optional[str] = None
    hours: Optional[HourBreakdown] = None
    notes: Optional[str] = None

    @property
    def phase(self) -> DayPhase:
        if self.check_in_time is None:
            return DayPhase.NOT_STARTED
        if self.check_out_time is None:
            return DayPhase.CHECKED_IN
        return DayPhase.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        hours = self.hours
        return {
            "id": self.attendance_id,
            "employeeId": self.employee_id,
            "date": to_iso(self.work_date),
            "checkIn": to_iso(self.check_in_time),
            "checkOut": to_iso(self.check_out_time),
            "status": self.status.value,
            "isRemote": self.is_remote,
            "shiftId": self.shift_id,
            "checkInSelfie": self.check_in_selfie,
            "checkOutSelfie": self.check_out_selfie,
            "checkInLocation": self.check_in_location.to_dict() if self.check_in_location else None,
            "checkOutLocation": self.check_out_location.to_dict() if self.check_out_location else None,
            "deviceInfo": self.device_info.to_dict() if self.device_info else None,
            "ipAddress": self.ip_address,
            "totalHours": hours.total_hours if hours else None,
            "regularHours": hours.regular_hours if hours else None,
            "overtimeHours": hours.overtime_hours if hours else None,
            "breakHours": hours.break_hours if hours else None,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttendanceRecord":
        hours = None
        if data.get("totalHours") is not None:
            hours = HourBreakdown(
                total_hours=float(data["totalHours"]),
                regular_hours=data.get("regularHours"),
                overtime_hours=data.get("overtimeHours"),
                break_hours=data.get("breakHours"),
            )
        return cls(
            attendance_id=int(data["id"]),
            employee_id=int(data["employeeId"]),
            work_date=parse_iso_date(data["date"]),
            check_in_time=parse_iso_datetime(data.get("checkIn")),
            check_out_time=parse_iso_datetime(data.get("checkOut")),
            status=AttendanceStatus(data["status"]),
            is_remote=bool(data.get("isRemote", False)),
            shift_id=data.get("shiftId"),
            check_in_selfie=data.get("checkInSelfie"),
            check_out_selfie=data.get("checkOutSelfie"),
            check_in_location=GeoLocation.from_dict(data.get("checkInLocation")),
            check_out_location=GeoLocation.from_dict(data.get("checkOutLocation")),
            device_info=DeviceFingerprint.from_dict(data.get("deviceInfo")),
            ip_address=data.get("ipAddress"),
            hours=hours,
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class AttendanceDayStatus:
    """Which self-attendance action is valid today."""

    can_check_in: bool
    can_check_out: bool
    is_completed: bool
    current_time: Optional[datetime] = None
    today: Optional[date] = None
    attendance: Optional[AttendanceRecord] = None

    @classmethod
    def for_record(cls, record: Optional[AttendanceRecord], *, now: datetime) -> "AttendanceDayStatus":
        phase = record.phase if record else DayPhase.NOT_STARTED
        return cls(
            can_check_in=phase is DayPhase.NOT_STARTED,
            can_check_out=phase is DayPhase.CHECKED_IN,
            is_completed=phase is DayPhase.COMPLETED,
            current_time=now,
            today=now.date(),
            attendance=record,
        )

    @property
    def phase(self) -> Optional[DayPhase]:
        if self.is_completed:
            return DayPhase.COMPLETED
        if self.can_check_out:
            return DayPhase.CHECKED_IN
        if self.can_check_in:
            return DayPhase.NOT_STARTED
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": {
                "canCheckIn": self.can_check_in,
                "canCheckOut": self.can_check_out,
                "isCompleted": self.is_completed,
                "currentTime": to_iso(self.current_time),
                "today": to_iso(self.today),
            },
            "attendance": self.attendance.to_dict() if self.attendance else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttendanceDayStatus":
        status = data.get("status") or {}
        attendance = data.get("attendance")
        return cls(
            can_check_in=bool(status.get("canCheckIn")),
            can_check_out=bool(status.get("canCheckOut")),
            is_completed=bool(status.get("isCompleted")),
            current_time=parse_iso_datetime(status.get("currentTime")),
            today=parse_iso_date(status.get("today")),
            attendance=AttendanceRecord.from_dict(attendance) if attendance else None,
        )
