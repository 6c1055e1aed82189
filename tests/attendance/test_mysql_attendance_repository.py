from datetime import date, datetime

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from self_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from self_attendance.container import build_services
from self_attendance.core.enums import AttendanceStatus
from self_attendance.core.exceptions import ConflictError
from self_attendance.main import create_app


class ScriptedCursor:
    """Answers SELECTs with no rows and fails INSERTs with ``insert_error``."""

    def __init__(self, insert_error):
        self.insert_error = insert_error
        self.lastrowid = None
        self.closed = False

    def execute(self, sql, params=None):
        if sql.strip().upper().startswith("INSERT") and self.insert_error is not None:
            raise self.insert_error
        self.lastrowid = 41

    def fetchone(self):
        return None

    def fetchall(self):
        return []

    def close(self):
        self.closed = True


class ScriptedConnection:
    def __init__(self, insert_error):
        self.cursors = []
        self.insert_error = insert_error
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        cur = ScriptedCursor(self.insert_error)
        self.cursors.append(cur)
        return cur

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class ScriptedConnectionFactory:
    def __init__(self, insert_error=None):
        self.insert_error = insert_error
        self.connections = []

    def connect(self):
        conn = ScriptedConnection(self.insert_error)
        self.connections.append(conn)
        return conn


def duplicate_entry():
    return IntegrityError(
        msg="Duplicate entry '7-2025-03-03' for key 'attendance_records.uq_attendance_employee_date'",
        errno=errorcode.ER_DUP_ENTRY,
    )


def create_checkin(repo):
    return repo.create_checkin(
        employee_id=7,
        work_date=date(2025, 3, 3),
        check_in_time=datetime(2025, 3, 3, 8, 1),
        status=AttendanceStatus.PRESENT,
    )


def test_insert_returns_new_id():
    factory = ScriptedConnectionFactory()

    assert create_checkin(MySQLAttendanceRepository(factory)) == 41
    assert factory.connections[0].committed


def test_duplicate_day_row_becomes_already_checked_in():
    factory = ScriptedConnectionFactory(duplicate_entry())

    with pytest.raises(ConflictError) as exc:
        create_checkin(MySQLAttendanceRepository(factory))

    assert exc.value.code == "ALREADY_CHECKED_IN"
    conn = factory.connections[0]
    assert conn.rolled_back and conn.closed and not conn.committed


def test_other_integrity_errors_propagate():
    error = IntegrityError(msg="Cannot add or update a child row", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    factory = ScriptedConnectionFactory(error)

    with pytest.raises(IntegrityError):
        create_checkin(MySQLAttendanceRepository(factory))


def test_concurrent_check_in_losing_insert_gets_conflict_response(
    monkeypatch, employees, shifts, samples_repo
):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setattr("self_attendance.attendance.service.now_local", lambda: datetime(2025, 3, 3, 8, 1))
    container = build_services(
        employees_repo=employees,
        shifts_repo=shifts,
        attendance_repo=MySQLAttendanceRepository(ScriptedConnectionFactory(duplicate_entry())),
        samples_repo=samples_repo,
    )
    client = create_app(container=container).test_client()

    res = client.post(
        "/attendance/self-checkin",
        json={"checkInSelfie": "data:image/jpeg;base64,AAAA"},
        headers={"X-Employee-Id": "7"},
    )

    body = res.get_json()
    assert res.status_code == 400
    assert body["code"] == "ALREADY_CHECKED_IN"
