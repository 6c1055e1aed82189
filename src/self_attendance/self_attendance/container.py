from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import SelfAttendanceService
from .core.constants import DEFAULT_LATE_GRACE_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .tracking.mysql_location_repository import MySQLLocationSampleRepository
from .tracking.repository import LocationSampleRepository
from .tracking.service import LocationTrackingService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    shifts_repo: ShiftRepository
    attendance_repo: AttendanceRepository
    samples_repo: LocationSampleRepository

    attendance_service: SelfAttendanceService
    tracking_service: LocationTrackingService


def build_services(
    *,
    employees_repo: EmployeeRepository,
    shifts_repo: ShiftRepository,
    attendance_repo: AttendanceRepository,
    samples_repo: LocationSampleRepository,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
) -> Container:
    attendance_service = SelfAttendanceService(
        attendance_repo,
        employees_repo,
        shifts_repo,
        strategy_factory=AttendanceStrategyFactory(grace_minutes=int(grace_minutes)),
    )
    tracking_service = LocationTrackingService(samples_repo, attendance_repo)

    return Container(
        employees_repo=employees_repo,
        shifts_repo=shifts_repo,
        attendance_repo=attendance_repo,
        samples_repo=samples_repo,
        attendance_service=attendance_service,
        tracking_service=tracking_service,
    )


def build_container(*, db_config: dict, grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        employees_repo=MySQLEmployeeRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        samples_repo=MySQLLocationSampleRepository(conn),
        grace_minutes=grace_minutes,
    )
