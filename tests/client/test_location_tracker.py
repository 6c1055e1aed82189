import pytest

from self_attendance.client.tracker import LocationTracker
from self_attendance.core.enums import GeolocationFailure
from self_attendance.core.exceptions import ApiError, GeolocationError

from fakes import StaticResolver


class RecordingApi:
    def __init__(self):
        self.tracked = []
        self.stopped = []
        self.track_error = None
        self.stop_error = None

    def track_location(self, attendance_id, location):
        if self.track_error is not None:
            raise self.track_error
        self.tracked.append((attendance_id, location))

    def stop_tracking(self, attendance_id):
        self.stopped.append(attendance_id)
        if self.stop_error is not None:
            raise self.stop_error


@pytest.fixture
def api():
    return RecordingApi()


@pytest.fixture
def resolver():
    return StaticResolver()


@pytest.fixture
def tracker(resolver, api, scheduler):
    return LocationTracker(resolver, api, scheduler=scheduler, interval=30)


def test_start_samples_immediately_then_every_interval(tracker, api, scheduler):
    tracker.start_tracking(12)
    assert len(api.tracked) == 1

    scheduler.advance(90)

    assert len(api.tracked) == 4
    assert {attendance_id for attendance_id, _ in api.tracked} == {12}
    assert api.tracked[0][1].address == "District 1, Ho Chi Minh City"


def test_second_start_does_not_create_second_timer(tracker, api, scheduler):
    tracker.start_tracking(12)
    tracker.start_tracking(12)
    tracker.start_tracking(13)

    scheduler.advance(60)

    assert len(scheduler.active) == 1
    assert len(api.tracked) == 3
    assert tracker.attendance_id == 12


def test_stop_when_idle_is_noop(tracker, api):
    tracker.stop_tracking()

    assert api.stopped == []
    assert not tracker.is_active


def test_stop_cancels_timer_then_notifies_server(tracker, api, scheduler):
    tracker.start_tracking(12)

    tracker.stop_tracking()
    tracker.stop_tracking()
    scheduler.advance(120)

    assert api.stopped == [12]
    assert len(api.tracked) == 1
    assert scheduler.active == []
    assert tracker.status().is_active is False
    assert tracker.status().attendance_id is None


def test_stop_clears_state_even_if_server_fails(tracker, api):
    api.stop_error = ApiError("Cannot connect to server")
    tracker.start_tracking(12)

    tracker.stop_tracking()

    assert not tracker.is_active
    assert tracker.attendance_id is None


def test_failed_tick_is_swallowed_and_tracking_continues(tracker, api, resolver, scheduler):
    tracker.start_tracking(12)

    resolver.error = GeolocationError(GeolocationFailure.POSITION_UNAVAILABLE)
    scheduler.advance(30)
    resolver.error = None
    api.track_error = ApiError("Cannot connect to server")
    scheduler.advance(30)
    api.track_error = None
    scheduler.advance(30)

    assert tracker.is_active
    assert len(api.tracked) == 2


def test_set_interval_rearms_and_keeps_attendance(tracker, api, scheduler):
    tracker.start_tracking(12)

    tracker.set_interval(10)
    scheduler.advance(30)

    assert tracker.attendance_id == 12
    assert len(scheduler.active) == 1
    assert len(api.tracked) == 4


def test_set_interval_while_idle_only_stores_value(tracker, scheduler):
    tracker.set_interval(5)

    assert tracker.interval == 5
    assert scheduler.active == []


def test_non_positive_interval_rejected(tracker):
    with pytest.raises(ValueError):
        tracker.set_interval(0)


def test_dispose_stops(tracker, api):
    tracker.start_tracking(12)

    tracker.dispose()

    assert api.stopped == [12]


def test_unexpected_error_on_first_sample_keeps_timer_running(tracker, api, scheduler):
    api.track_error = KeyError("locationRecord")

    tracker.start_tracking(12)

    assert tracker.is_active
    assert len(scheduler.active) == 1

    api.track_error = None
    scheduler.advance(60)

    assert len(api.tracked) == 2
