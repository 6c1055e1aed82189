from datetime import datetime

import pytest
import requests

from self_attendance.attendance.model import GeoLocation
from self_attendance.client.api import AttendanceApiClient
from self_attendance.client.payloads import CheckInRequest, CheckOutRequest
from self_attendance.core.enums import DayPhase
from self_attendance.core.exceptions import ApiError

RECORD = {
    "id": 12,
    "employeeId": 7,
    "date": "2025-03-03",
    "checkIn": "2025-03-03T08:02:00",
    "checkOut": None,
    "status": "PRESENT",
    "isRemote": False,
}


class FakeResponse:
    def __init__(self, status_code, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, *responses, error=None):
        self.responses = list(responses)
        self.error = error
        self.calls = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    def close(self):
        self.closed = True


def make_client(session):
    return AttendanceApiClient("http://api.local/", employee_id=7, token="t0k", timeout=5, session=session)


def test_check_in_posts_camel_case_payload_and_identity_headers():
    session = FakeSession(FakeResponse(201, {"success": True, "data": {"attendance": RECORD}}))
    request = CheckInRequest(
        selfie="data:image/jpeg;base64,AAAA",
        location=GeoLocation(10.5, 106.5, accuracy=9.0, address="Somewhere"),
        notes="Hi",
    )

    record = make_client(session).self_check_in(request)

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://api.local/attendance/self-checkin")
    assert kwargs["json"] == {
        "checkInSelfie": "data:image/jpeg;base64,AAAA",
        "checkInLocation": {"latitude": 10.5, "longitude": 106.5, "accuracy": 9.0, "address": "Somewhere"},
        "isRemote": False,
        "notes": "Hi",
    }
    assert kwargs["headers"]["X-Employee-Id"] == "7"
    assert kwargs["headers"]["Authorization"] == "Bearer t0k"
    assert kwargs["timeout"] == 5.0
    assert record.attendance_id == 12
    assert record.check_in_time == datetime(2025, 3, 3, 8, 2)


def test_check_out_payload_has_no_device_info():
    done = dict(RECORD, checkOut="2025-03-03T17:05:00", totalHours=9.05)
    session = FakeSession(FakeResponse(200, {"success": True, "data": {"attendance": done}}))

    record = make_client(session).self_check_out(CheckOutRequest(selfie="data:image/jpeg;base64,BB", location=GeoLocation(1.0, 2.0)))

    assert set(session.calls[0][2]["json"]) == {"checkOutSelfie", "checkOutLocation"}
    assert record.phase is DayPhase.COMPLETED
    assert record.hours.total_hours == pytest.approx(9.05)


def test_status_is_parsed():
    payload = {"success": True, "data": {"status": {"canCheckIn": False, "canCheckOut": True, "isCompleted": False}, "attendance": RECORD}}
    status = make_client(FakeSession(FakeResponse(200, payload))).get_status()

    assert status.phase is DayPhase.CHECKED_IN
    assert status.attendance.attendance_id == 12


def test_server_error_carries_message_status_and_code():
    session = FakeSession(FakeResponse(400, {"success": False, "error": "Already checked in for today.", "code": "ALREADY_CHECKED_IN"}))

    with pytest.raises(ApiError) as exc:
        make_client(session).self_check_in(CheckInRequest(selfie="x", location=GeoLocation(1, 2)))

    assert str(exc.value) == "Already checked in for today."
    assert exc.value.status_code == 400
    assert exc.value.code == "ALREADY_CHECKED_IN"


def test_non_json_error_uses_default_message():
    session = FakeSession(FakeResponse(502, None, text="Bad gateway"))

    with pytest.raises(ApiError) as exc:
        make_client(session).self_check_out(CheckOutRequest(selfie="x", location=GeoLocation(1, 2)))

    assert str(exc.value) == "Failed to check out"
    assert exc.value.status_code == 502


@pytest.mark.parametrize("error", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_transport_failures_are_cannot_connect(error):
    with pytest.raises(ApiError) as exc:
        make_client(FakeSession(error=error)).get_status()

    assert str(exc.value).startswith("Cannot connect to server")
    assert exc.value.status_code is None


def test_tracking_calls():
    sample = {"id": 1, "attendanceId": 12, "employeeId": 7, "latitude": 1.0, "longitude": 2.0,
              "timestamp": "2025-03-03T08:30:00", "isActive": True}
    session = FakeSession(
        FakeResponse(201, {"success": True, "data": {"locationRecord": sample}}),
        FakeResponse(200, {"success": True, "message": "Location tracking stopped"}),
        FakeResponse(200, {"success": True, "data": {"locationHistory": [sample]}}),
    )
    client = make_client(session)

    tracked = client.track_location(12, GeoLocation(1.0, 2.0, accuracy=3.0))
    client.stop_tracking(12)
    history = client.get_location_history(12)

    assert session.calls[0][2]["json"] == {"attendanceId": 12, "latitude": 1.0, "longitude": 2.0, "accuracy": 3.0, "address": None}
    assert session.calls[1][:2] == ("POST", "http://api.local/location-tracking/stop/12")
    assert session.calls[2][:2] == ("GET", "http://api.local/location-tracking/attendance/12")
    assert tracked.sample_id == 1
    assert [s.attendance_id for s in history] == [12]

    client.close()
    assert session.closed


def test_my_attendance_history():
    session = FakeSession(FakeResponse(200, {"success": True, "data": {"attendances": [RECORD]}}))

    records = make_client(session).get_my_attendance()

    assert session.calls[0][:2] == ("GET", "http://api.local/attendance/me")
    assert [r.attendance_id for r in records] == [12]
