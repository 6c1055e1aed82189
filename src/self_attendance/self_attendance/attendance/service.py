from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, validate_coordinates
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import DayPhase
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..shifts.repository import ShiftRepository
from .factory import AttendanceStrategyFactory
from .hours.base import HoursCalculator
from .hours.standard_calculator import StandardHoursCalculator
from .model import AttendanceDayStatus, AttendanceRecord, DeviceFingerprint, GeoLocation
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class SelfAttendanceService:
    """Check-in/check-out performed by employees on their own device.

    The server is the authority on the day's state: a client acting on stale
    status gets a ``ConflictError`` with a stable ``code``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        shifts: ShiftRepository | None = None,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        hours_calculator: HoursCalculator | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._shifts = shifts
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._hours = hours_calculator or StandardHoursCalculator()

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee or not employee.is_active:
            raise NotFoundError("Employee profile not found", code="EMPLOYEE_NOT_FOUND")
        return employee

    def _get_shift(self, shift_id: Optional[int]):
        if shift_id is None or self._shifts is None:
            return None
        return self._shifts.get_by_id(int(shift_id))

    def self_check_in(
        self,
        employee_id: int,
        *,
        is_remote: bool = False,
        notes: Optional[str] = None,
        selfie: Optional[str] = None,
        location: Optional[GeoLocation] = None,
        device_info: Optional[DeviceFingerprint] = None,
        shift_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        employee = self._require_employee(employee_id)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if existing and existing.phase is DayPhase.CHECKED_IN:
            raise ConflictError(
                "Already checked in for today. You can only check out now.",
                code="ALREADY_CHECKED_IN",
            )
        if existing and existing.phase is DayPhase.COMPLETED:
            raise ConflictError("Already completed attendance for today", code="ATTENDANCE_COMPLETED")

        if location:
            validate_coordinates(location.latitude, location.longitude)

        effective_shift_id = shift_id if shift_id is not None else employee.shift_id
        shift = self._get_shift(effective_shift_id)
        strategy = self._factory.for_checkin(now=now, shift=shift)
        decision = strategy.decide_checkin(now=now, shift=shift)

        attendance_id = self._attendance.create_checkin(
            employee_id=employee.employee_id,
            work_date=today,
            check_in_time=now,
            status=decision.status,
            is_remote=bool(is_remote),
            shift_id=shift.shift_id if shift else None,
            selfie=selfie or None,
            location=location,
            device_info=device_info,
            ip_address=ip_address,
            notes=optional_text(notes) or decision.note,
        )
        logger.info(
            "Employee %s checked in (attendance=%s, status=%s, remote=%s)",
            employee.employee_id, attendance_id, decision.status.value, bool(is_remote),
        )
        record = self._attendance.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found after check-in")
        return record

    def self_check_out(
        self,
        employee_id: int,
        *,
        notes: Optional[str] = None,
        selfie: Optional[str] = None,
        location: Optional[GeoLocation] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        employee = self._require_employee(employee_id)

        record = self._attendance.get_for_employee_and_date(employee.employee_id, now.date())
        if not record or record.check_in_time is None:
            raise ConflictError("No active check-in for today", code="NO_CHECKIN")
        if record.check_out_time is not None:
            raise ConflictError("Already checked out today", code="ALREADY_CHECKED_OUT")
        if now <= record.check_in_time:
            raise ValidationError("Check-out time must be later than check-in time")

        if location:
            validate_coordinates(location.latitude, location.longitude)

        shift = self._get_shift(record.shift_id)
        strategy = self._factory.for_checkout(now=now, shift=shift, current_status=record.status)
        decision = strategy.decide_checkout(now=now, shift=shift, current=record.status)
        hours = self._hours.breakdown(record.check_in_time, now)

        updated = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out_time=now,
            status=decision.status,
            hours=hours,
            selfie=selfie or None,
            location=location,
            notes=optional_text(notes) or record.notes,
        )
        if not updated:
            # Lost a race with another device checking out.
            raise ConflictError("Already checked out today", code="ALREADY_CHECKED_OUT")

        logger.info(
            "Employee %s checked out (attendance=%s, total_hours=%.2f)",
            employee.employee_id, record.attendance_id, hours.total_hours,
        )
        result = self._attendance.get_by_id(record.attendance_id)
        if result is None:
            raise NotFoundError("Attendance record not found after check-out")
        return result

    def get_status(self, employee_id: int, *, now: Optional[datetime] = None) -> AttendanceDayStatus:
        now = now or now_local()
        employee = self._require_employee(employee_id)
        record = self._attendance.get_for_employee_and_date(employee.employee_id, now.date())
        return AttendanceDayStatus.for_record(record, now=now)

    def get_history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        employee = self._require_employee(employee_id)
        return self._attendance.get_recent_for_employee(employee.employee_id, max(1, int(limit)))
