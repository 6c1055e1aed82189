from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored with each record."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    HALF_DAY = "HALF_DAY"


class DayPhase(str, Enum):
    """Where an employee stands for one calendar day."""

    NOT_STARTED = "NOT_STARTED"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED = "COMPLETED"


class AttendanceIntent(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class FacingMode(str, Enum):
    USER = "user"
    ENVIRONMENT = "environment"

    def opposite(self) -> "FacingMode":
        return FacingMode.ENVIRONMENT if self is FacingMode.USER else FacingMode.USER


class CameraState(str, Enum):
    CLOSED = "closed"
    OPENING = "opening"
    STREAMING = "streaming"
    CAPTURING = "capturing"


class CaptureState(str, Enum):
    """States of one check-in/check-out attempt."""

    IDLE = "idle"
    AWAITING_LOCATION = "awaiting_location"
    AWAITING_SELFIE = "awaiting_selfie"
    READY_TO_SUBMIT = "ready_to_submit"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


class GeolocationFailure(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


class CameraFailure(str, Enum):
    UNAVAILABLE = "unavailable"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    BUSY = "busy"
    OVERCONSTRAINED = "overconstrained"


class FailureKind(str, Enum):
    """Why a capture attempt ended without a submitted record."""

    LOCATION = "location"
    CAMERA = "camera"
    CONFLICT = "conflict"
    COMPLETED = "completed"
    SUBMISSION = "submission"
