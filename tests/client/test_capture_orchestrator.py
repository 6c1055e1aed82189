from datetime import datetime

import pytest

from self_attendance.client.camera import LiveCameraController
from self_attendance.client.orchestrator import CaptureOrchestrator, auto_submit_delay
from self_attendance.client.status_gate import AttendanceStatusGate
from self_attendance.client.tracker import LocationTracker
from self_attendance.core.enums import (
    AttendanceIntent,
    CameraFailure,
    CaptureState,
    DayPhase,
    FailureKind,
    GeolocationFailure,
)
from self_attendance.core.exceptions import GeolocationError

from fakes import FakeMediaDevices, StaticResolver

ANDROID_UA = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Mobile Safari/537.36"


class Harness:
    def __init__(self, api, scheduler, *, resolver=None, devices=None):
        self.api = api
        self.scheduler = scheduler
        self.resolver = resolver or StaticResolver()
        self.devices = devices or FakeMediaDevices()
        self.camera = LiveCameraController(self.devices)
        self.gate = AttendanceStatusGate(api, scheduler=scheduler)
        self.tracker = LocationTracker(self.resolver, api, scheduler=scheduler, interval=30)
        self.orchestrator = CaptureOrchestrator(
            api,
            self.gate,
            self.resolver,
            self.camera,
            self.tracker,
            scheduler=scheduler,
            user_agent=ANDROID_UA,
        )

    def submissions(self):
        return [c for c in self.api.calls if c in ("self_check_in", "self_check_out")]


@pytest.fixture
def harness(backend_api, scheduler):
    return Harness(backend_api, scheduler)


def test_successful_check_in_starts_tracking(harness, attendance_repo, samples_repo):
    harness.gate.refresh()
    orch = harness.orchestrator

    assert orch.begin() is True
    assert orch.intent is AttendanceIntent.CHECK_IN
    assert orch.state is CaptureState.AWAITING_SELFIE
    assert harness.camera.is_streaming

    assert orch.capture() is True
    assert orch.state is CaptureState.READY_TO_SUBMIT
    assert harness.submissions() == []

    harness.scheduler.advance(3)

    record = orch.last_record
    assert orch.state is CaptureState.DONE
    assert harness.submissions() == ["self_check_in"]
    assert record.attendance_id == 1
    assert record.check_in_time == datetime(2025, 3, 3, 8, 2)
    assert record.check_in_selfie.startswith("data:image/jpeg;base64,")
    assert record.device_info.os == "Android"
    assert record.check_in_location.address == "District 1, Ho Chi Minh City"
    assert harness.tracker.is_active
    assert harness.tracker.attendance_id == 1
    assert len(samples_repo.samples) == 1
    assert harness.gate.phase is DayPhase.CHECKED_IN
    assert orch.image is None and orch.location is None
    assert harness.devices.streams[0].live_tracks == 0


def test_successful_check_out_stops_tracking(harness, attendance_service, backend_api):
    attendance_service.self_check_in(7, now=datetime(2025, 3, 3, 8, 0))
    harness.tracker.start_tracking(1)
    backend_api.now = datetime(2025, 3, 3, 17, 30)
    orch = harness.orchestrator

    assert orch.begin(notes="Done for today") is True
    assert orch.intent is AttendanceIntent.CHECK_OUT
    orch.capture()
    harness.scheduler.advance(3)

    record = orch.last_record
    assert orch.state is CaptureState.DONE
    assert record.check_out_time > record.check_in_time
    assert record.notes == "Done for today"
    assert not harness.tracker.is_active
    assert "stop_tracking" in backend_api.calls
    assert harness.gate.is_completed
    assert harness.devices.streams[0].live_tracks == 0


def test_stale_check_in_shows_check_out_guidance(harness, attendance_service):
    harness.gate.refresh()
    attendance_service.self_check_in(7, now=datetime(2025, 3, 3, 7, 55))
    orch = harness.orchestrator

    assert orch.begin() is True
    assert orch.intent is AttendanceIntent.CHECK_IN
    orch.capture()
    harness.scheduler.advance(3)

    assert orch.state is CaptureState.FAILED
    assert orch.failure.message == "You have already checked in today. Please check out first."
    assert orch.failure.kind is FailureKind.CONFLICT
    assert orch.failure.expected is True
    assert harness.gate.phase is DayPhase.CHECKED_IN
    assert not harness.tracker.is_active
    assert harness.devices.streams[0].live_tracks == 0


def test_check_out_without_check_in_shows_check_in_guidance(harness):
    orch = harness.orchestrator

    orch.begin(AttendanceIntent.CHECK_OUT)
    orch.capture()
    harness.scheduler.advance(3)

    assert orch.failure.message == "Please check in first before checking out."
    assert orch.failure.expected is True


def test_completed_day_refuses_to_start(harness, attendance_service):
    attendance_service.self_check_in(7, now=datetime(2025, 3, 3, 7, 0))
    attendance_service.self_check_out(7, now=datetime(2025, 3, 3, 8, 0))
    orch = harness.orchestrator

    assert orch.begin() is False
    assert orch.state is CaptureState.FAILED
    assert orch.failure.kind is FailureKind.COMPLETED
    assert orch.failure.message == "You have already completed attendance for today."
    assert harness.devices.requests == []


def test_only_location_never_submits(harness):
    harness.gate.refresh()
    orch = harness.orchestrator
    orch.begin()

    harness.scheduler.advance(60)

    assert orch.state is CaptureState.AWAITING_SELFIE
    assert harness.submissions() == []


class SelfieFirstResolver(StaticResolver):
    """Delivers the selfie while the location lookup is still pending."""

    def __init__(self, scheduler):
        super().__init__()
        self.scheduler = scheduler
        self.orchestrator = None
        self.seen = None

    def get_complete_location(self):
        if self.seen is None:
            self.orchestrator.provide_selfie("data:image/jpeg;base64," + "A" * 1000)
            self.seen = {"state": self.orchestrator.state, "timers": len(self.scheduler.active)}
            self.scheduler.advance(60)
            self.seen["submitted"] = self.orchestrator.last_record is not None
        return super().get_complete_location()


def test_selfie_before_location_waits_for_location(backend_api, scheduler):
    resolver = SelfieFirstResolver(scheduler)
    harness = Harness(backend_api, scheduler, resolver=resolver)
    resolver.orchestrator = harness.orchestrator
    harness.gate.refresh()

    harness.orchestrator.begin()

    assert resolver.seen == {"state": CaptureState.AWAITING_LOCATION, "timers": 0, "submitted": False}
    assert harness.orchestrator.state is CaptureState.READY_TO_SUBMIT

    scheduler.advance(3)
    assert harness.submissions() == ["self_check_in"]


def test_both_artifacts_trigger_exactly_one_submission(harness):
    harness.gate.refresh()
    orch = harness.orchestrator
    orch.begin()
    orch.capture()

    record = orch.submit()
    harness.scheduler.advance(10)

    assert record is not None
    assert orch.submit() is None
    assert harness.submissions() == ["self_check_in"]


def test_recapture_rearms_single_timer(harness):
    harness.gate.refresh()
    orch = harness.orchestrator
    orch.begin()
    orch.capture()
    orch.capture()

    assert len([t for t in harness.scheduler.active if t.interval is None]) == 1
    harness.scheduler.advance(3)
    assert harness.submissions() == ["self_check_in"]


def test_retake_discards_artifacts_and_reresolves(harness):
    harness.gate.refresh()
    orch = harness.orchestrator
    orch.begin()
    orch.capture()

    assert orch.retake() is True
    harness.scheduler.advance(10)

    assert orch.state is CaptureState.AWAITING_SELFIE
    assert orch.image is None
    assert harness.resolver.calls == 2
    assert harness.submissions() == []


def test_cancel_mid_flow_discards_everything(harness):
    harness.gate.refresh()
    orch = harness.orchestrator
    orch.begin()
    orch.capture()

    assert orch.cancel() is True
    harness.scheduler.advance(10)

    assert orch.state is CaptureState.IDLE
    assert orch.image is None and orch.location is None
    assert harness.submissions() == []
    assert harness.devices.streams[0].live_tracks == 0


def test_location_failure_aborts_before_camera(backend_api, scheduler):
    error = GeolocationError(GeolocationFailure.PERMISSION_DENIED)
    harness = Harness(backend_api, scheduler, resolver=StaticResolver(error=error))
    harness.gate.refresh()

    assert harness.orchestrator.begin() is False

    failure = harness.orchestrator.failure
    assert harness.orchestrator.state is CaptureState.FAILED
    assert failure.kind is FailureKind.LOCATION
    assert failure.expected is False
    assert "enable location access" in failure.message
    assert harness.devices.requests == []


def test_camera_failure_aborts_attempt(backend_api, scheduler):
    harness = Harness(backend_api, scheduler, devices=FakeMediaDevices(error=CameraFailure.BUSY))
    harness.gate.refresh()

    assert harness.orchestrator.begin() is False

    assert harness.orchestrator.failure.kind is FailureKind.CAMERA
    assert "already in use" in harness.orchestrator.failure.message
    assert harness.orchestrator.location is None


def test_begin_refused_while_attempt_in_flight(harness):
    harness.gate.refresh()
    orch = harness.orchestrator
    orch.begin()

    assert orch.begin() is False
    assert not orch.action_enabled(AttendanceIntent.CHECK_IN)


def test_failed_attempt_can_be_retried(backend_api, scheduler):
    resolver = StaticResolver(error=GeolocationError(GeolocationFailure.TIMEOUT))
    harness = Harness(backend_api, scheduler, resolver=resolver)
    harness.gate.refresh()
    harness.orchestrator.begin()

    resolver.error = None
    assert harness.orchestrator.begin() is True
    assert harness.orchestrator.failure is None


def test_listeners_follow_state_changes(harness):
    harness.gate.refresh()
    seen = []
    harness.orchestrator.subscribe(seen.append)

    harness.orchestrator.begin()
    harness.orchestrator.capture()
    harness.scheduler.advance(3)

    assert seen == [
        CaptureState.AWAITING_LOCATION,
        CaptureState.AWAITING_SELFIE,
        CaptureState.READY_TO_SUBMIT,
        CaptureState.SUBMITTING,
        CaptureState.DONE,
    ]


def test_auto_submit_delay_grows_with_image_and_is_capped():
    assert auto_submit_delay("") == pytest.approx(0.5)
    assert auto_submit_delay("x" * 200_000) == pytest.approx(1.5)
    assert auto_submit_delay("x" * 10_000_000) == pytest.approx(3.0)


def test_completed_day_refuses_explicit_intent(harness, attendance_service):
    attendance_service.self_check_in(7, now=datetime(2025, 3, 3, 7, 0))
    attendance_service.self_check_out(7, now=datetime(2025, 3, 3, 8, 0))
    orch = harness.orchestrator

    assert orch.begin(AttendanceIntent.CHECK_IN) is False
    assert orch.failure.kind is FailureKind.COMPLETED
    assert harness.resolver.calls == 0
    assert harness.devices.requests == []
