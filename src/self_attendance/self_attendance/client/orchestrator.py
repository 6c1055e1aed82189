"""Turns "mark my attendance" into one validated check-in or check-out.

An attempt is a small state machine::

    IDLE -> AWAITING_LOCATION <-> AWAITING_SELFIE -> READY_TO_SUBMIT -> SUBMITTING -> DONE

Any step can end in FAILED instead. Location and selfie may arrive in either
order. Once both are held the submission fires by itself after a short,
size-dependent delay; ``submit()`` does the same thing immediately. Every
attempt carries a generation number so results that arrive after a cancel
or retake are discarded.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from ..attendance.model import AttendanceRecord, GeoLocation
from ..common.timers import Scheduler, ThreadingScheduler, TimerHandle
from ..core.constants import AUTO_SUBMIT_BASE_DELAY, AUTO_SUBMIT_BYTES_PER_SECOND, AUTO_SUBMIT_MAX_DELAY
from ..core.enums import AttendanceIntent, CaptureState, DayPhase, FailureKind
from ..core.exceptions import ApiError, CameraError, GeolocationError
from .fingerprint import build_device_fingerprint
from .imaging import compress_data_uri
from .messages import COMPLETED_MESSAGE, CaptureFailure, translate_submission_error
from .payloads import CheckInRequest, CheckOutRequest

logger = logging.getLogger(__name__)

StateListener = Callable[[CaptureState], None]

AWAITING_STATES = frozenset(
    {CaptureState.AWAITING_LOCATION, CaptureState.AWAITING_SELFIE, CaptureState.READY_TO_SUBMIT}
)
IN_FLIGHT_STATES = AWAITING_STATES | {CaptureState.SUBMITTING}


def auto_submit_delay(image: str) -> float:
    """Seconds to wait before auto-submitting; grows with the encoded image size."""
    delay = AUTO_SUBMIT_BASE_DELAY + len(image) / AUTO_SUBMIT_BYTES_PER_SECOND
    return min(delay, AUTO_SUBMIT_MAX_DELAY)


class CaptureOrchestrator:
    def __init__(
        self,
        api,
        gate,
        resolver,
        camera,
        tracker,
        *,
        scheduler: Optional[Scheduler] = None,
        user_agent: str = "",
        compress: Callable[[str], str] = compress_data_uri,
    ):
        self._api = api
        self._gate = gate
        self._resolver = resolver
        self._camera = camera
        self._tracker = tracker
        self._scheduler = scheduler or ThreadingScheduler()
        self._compress = compress
        self.user_agent = user_agent

        self.state = CaptureState.IDLE
        self.intent: Optional[AttendanceIntent] = None
        self.image: Optional[str] = None
        self.location: Optional[GeoLocation] = None
        self.failure: Optional[CaptureFailure] = None
        self.last_record: Optional[AttendanceRecord] = None

        self._options: Dict[str, Any] = {}
        self._generation = 0
        self._arm_count = 0
        self._auto_submit_handle: Optional[TimerHandle] = None
        self._listeners: List[StateListener] = []
        self._lock = threading.RLock()

    # -- observation ---------------------------------------------------

    @property
    def is_pending(self) -> bool:
        return self.state is CaptureState.SUBMITTING

    @property
    def in_flight(self) -> bool:
        return self.state in IN_FLIGHT_STATES

    def action_enabled(self, intent: AttendanceIntent) -> bool:
        if self.in_flight:
            return False
        if intent is AttendanceIntent.CHECK_IN:
            return self._gate.check_in_enabled()
        return self._gate.check_out_enabled()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, state: CaptureState) -> None:
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    # -- attempt lifecycle ---------------------------------------------

    def _resolve_intent(self, intent: Optional[AttendanceIntent]) -> Optional[AttendanceIntent]:
        if self._gate.phase is None:
            self._gate.refresh()
        if self._gate.is_completed:
            return None
        if intent is not None:
            return intent
        phase = self._gate.phase
        if phase is DayPhase.NOT_STARTED:
            return AttendanceIntent.CHECK_IN
        if phase is DayPhase.CHECKED_IN:
            return AttendanceIntent.CHECK_OUT
        return None

    def begin(
        self,
        intent: Optional[AttendanceIntent] = None,
        *,
        is_remote: bool = False,
        notes: Optional[str] = None,
        shift_id: Optional[int] = None,
    ) -> bool:
        """Start an attempt: resolve location, then open the camera.

        Returns False when an attempt is already running or this one failed.
        """
        if self.in_flight:
            logger.info("Capture attempt already in progress (%s)", self.state.value)
            return False

        resolved = self._resolve_intent(intent)
        with self._lock:
            if self.in_flight:
                return False
            self._generation += 1
            generation = self._generation
            self._cancel_auto_submit()
            self._clear_held()
            self.failure = None
            self.intent = resolved
            if resolved is None:
                if self._gate.is_completed:
                    failure = CaptureFailure(COMPLETED_MESSAGE, FailureKind.COMPLETED, expected=True)
                else:
                    failure = CaptureFailure(
                        "Unable to determine today's attendance status. Please try again.",
                        FailureKind.SUBMISSION,
                    )
                self._fail(failure)
                return False
            self._options = {"is_remote": is_remote, "notes": notes, "shift_id": shift_id}
            logger.info("Starting %s attempt", resolved.value)
            self._set_state(CaptureState.AWAITING_LOCATION)

        if not self._acquire_location(generation):
            return False
        return self._open_camera(generation)

    def retake(self) -> bool:
        """Discard the held image and location and resolve both again."""
        with self._lock:
            if self.state not in AWAITING_STATES:
                return False
            self._generation += 1
            generation = self._generation
            self._cancel_auto_submit()
            self._clear_held()
            self._set_state(CaptureState.AWAITING_LOCATION)

        if not self._acquire_location(generation):
            return False
        return self._open_camera(generation)

    def cancel(self) -> bool:
        """Close the capture flow. A submission already sent cannot be cancelled."""
        with self._lock:
            if self.state is CaptureState.SUBMITTING:
                logger.info("Submission in progress, cancel ignored")
                return False
            self._generation += 1
            self._cancel_auto_submit()
            self._clear_held()
            self.failure = None
            self.intent = None
            self._camera.close()
            self._set_state(CaptureState.IDLE)
            return True

    def dispose(self) -> None:
        self.cancel()
        self._camera.close()

    # -- artifacts -------------------------------------------------------

    def _acquire_location(self, generation: int) -> bool:
        try:
            location = self._resolver.get_complete_location()
        except GeolocationError as e:
            logger.warning("Location unavailable for attendance: %s", e)
            self._abort(generation, CaptureFailure(str(e), FailureKind.LOCATION))
            return False
        return self._accept(generation, location=location)

    def _open_camera(self, generation: int) -> bool:
        if self._camera.is_streaming:
            return True
        try:
            self._camera.open()
        except CameraError as e:
            logger.warning("Camera unavailable for attendance: %s", e)
            self._abort(generation, CaptureFailure(str(e), FailureKind.CAMERA))
            return False
        with self._lock:
            if generation != self._generation:
                self._camera.close()
                return False
        return True

    def capture(self) -> bool:
        """Grab one frame from the live camera and hold it as the selfie."""
        with self._lock:
            if self.state not in AWAITING_STATES:
                return False
            generation = self._generation
        try:
            image = self._compress(self._camera.capture())
        except (CameraError, ValueError) as e:
            logger.warning("Selfie capture failed: %s", e)
            self._abort(generation, CaptureFailure(str(e), FailureKind.CAMERA))
            return False
        return self._accept(generation, image=image)

    def provide_location(self, location: GeoLocation) -> bool:
        return self._accept(self._generation, location=location)

    def provide_selfie(self, image: str) -> bool:
        return self._accept(self._generation, image=image)

    def _accept(self, generation: int, *, location: Optional[GeoLocation] = None, image: Optional[str] = None) -> bool:
        with self._lock:
            if generation != self._generation or self.state not in AWAITING_STATES:
                logger.debug("Discarding artifact from a stale attempt")
                return False
            if location is not None:
                self.location = location
            if image is not None:
                self.image = image
            self._advance()
            return True

    def _advance(self) -> None:
        if self.location is None:
            self._set_state(CaptureState.AWAITING_LOCATION)
        elif self.image is None:
            self._set_state(CaptureState.AWAITING_SELFIE)
        else:
            self._set_state(CaptureState.READY_TO_SUBMIT)
            self._arm_auto_submit()

    # -- submission ------------------------------------------------------

    def _arm_auto_submit(self) -> None:
        self._cancel_auto_submit()
        token = self._arm_count
        delay = auto_submit_delay(self.image)
        self._auto_submit_handle = self._scheduler.call_later(delay, lambda: self._auto_submit(token))

    def _cancel_auto_submit(self) -> None:
        self._arm_count += 1
        handle, self._auto_submit_handle = self._auto_submit_handle, None
        if handle is not None:
            handle.cancel()

    def _auto_submit(self, token: int) -> None:
        with self._lock:
            if token != self._arm_count or self.state is not CaptureState.READY_TO_SUBMIT:
                return
        self.submit()

    def submit(self) -> Optional[AttendanceRecord]:
        with self._lock:
            if self.state is not CaptureState.READY_TO_SUBMIT:
                logger.info("Nothing to submit (%s)", self.state.value)
                return None
            self._cancel_auto_submit()
            generation = self._generation
            intent = self.intent
            request = self._build_request(intent)
            self._set_state(CaptureState.SUBMITTING)

        try:
            if intent is AttendanceIntent.CHECK_IN:
                record = self._api.self_check_in(request)
            else:
                record = self._api.self_check_out(request)
        except ApiError as e:
            failure = translate_submission_error(e, intent)
            if failure.expected:
                logger.info("Attendance %s rejected: %s", intent.value, e)
            else:
                logger.error("Attendance %s failed: %s", intent.value, e)
            self._abort(generation, failure)
            if failure.expected:
                self._gate.refresh()
            return None
        except Exception:
            self._abort(generation, CaptureFailure("Unexpected error while submitting attendance", FailureKind.SUBMISSION))
            raise

        self._complete(intent, record)
        return record

    def _build_request(self, intent: AttendanceIntent):
        if intent is AttendanceIntent.CHECK_IN:
            return CheckInRequest(
                selfie=self.image,
                location=self.location,
                device_info=build_device_fingerprint(self.user_agent),
                is_remote=bool(self._options.get("is_remote")),
                notes=self._options.get("notes"),
                shift_id=self._options.get("shift_id"),
            )
        return CheckOutRequest(selfie=self.image, location=self.location, notes=self._options.get("notes"))

    def _complete(self, intent: AttendanceIntent, record: AttendanceRecord) -> None:
        with self._lock:
            self.last_record = record
            self._clear_held()
            self._camera.close()
            self._set_state(CaptureState.DONE)
        logger.info("Attendance %s recorded (attendance %s)", intent.value, record.attendance_id)

        self._gate.observe_record(record)
        self._gate.invalidate()
        if intent is AttendanceIntent.CHECK_IN:
            self._tracker.start_tracking(record.attendance_id)
        else:
            self._tracker.stop_tracking()

    # -- failure ---------------------------------------------------------

    def _clear_held(self) -> None:
        self.image = None
        self.location = None

    def _fail(self, failure: CaptureFailure) -> None:
        self.failure = failure
        self._set_state(CaptureState.FAILED)

    def _abort(self, generation: int, failure: CaptureFailure) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._cancel_auto_submit()
            self._clear_held()
            self._camera.close()
            self._fail(failure)
