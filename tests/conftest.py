from __future__ import annotations

from datetime import datetime, time

import pytest

from self_attendance.attendance.factory import AttendanceStrategyFactory
from self_attendance.attendance.service import SelfAttendanceService
from self_attendance.employees.model import Employee
from self_attendance.shifts.model import Shift
from self_attendance.tracking.service import LocationTrackingService

from fakes import (
    BackendApi,
    InMemoryAttendance,
    InMemoryEmployees,
    InMemorySamples,
    InMemoryShifts,
    ManualScheduler,
)

EMPLOYEE_ID = 7


@pytest.fixture
def morning_shift():
    return Shift(shift_id=1, shift_name="Morning", start_time=time(8, 0), end_time=time(17, 0), break_minutes=60)


@pytest.fixture
def employees():
    return InMemoryEmployees({
        EMPLOYEE_ID: Employee(employee_id=EMPLOYEE_ID, full_name="Nguyen Van A", shift_id=1),
        8: Employee(employee_id=8, full_name="Tran Thi B"),
        9: Employee(employee_id=9, full_name="Le Van C", is_active=False),
    })


@pytest.fixture
def shifts(morning_shift):
    return InMemoryShifts({1: morning_shift})


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def samples_repo():
    return InMemorySamples()


@pytest.fixture
def attendance_service(attendance_repo, employees, shifts):
    return SelfAttendanceService(
        attendance_repo,
        employees,
        shifts,
        strategy_factory=AttendanceStrategyFactory(grace_minutes=5),
    )


@pytest.fixture
def tracking_service(samples_repo, attendance_repo):
    return LocationTrackingService(samples_repo, attendance_repo)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def backend_api(attendance_service, tracking_service):
    return BackendApi(
        attendance_service,
        tracking_service,
        employee_id=EMPLOYEE_ID,
        now=datetime(2025, 3, 3, 8, 2, 0),
    )
