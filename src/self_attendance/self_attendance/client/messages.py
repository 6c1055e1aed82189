from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AttendanceIntent, FailureKind
from ..core.exceptions import ApiError


@dataclass(frozen=True)
class CaptureFailure:
    message: str
    kind: FailureKind
    expected: bool = False


# (server code, message fragment, guidance, kind)
_CONFLICT_GUIDANCE = (
    (
        "ALREADY_CHECKED_IN",
        "already checked in",
        "You have already checked in today. Please check out first.",
        FailureKind.CONFLICT,
    ),
    (
        "ATTENDANCE_COMPLETED",
        "already completed",
        "You have already completed attendance for today.",
        FailureKind.COMPLETED,
    ),
    (
        "NO_CHECKIN",
        "no active check-in",
        "Please check in first before checking out.",
        FailureKind.CONFLICT,
    ),
    (
        "ALREADY_CHECKED_OUT",
        "already checked out",
        "You have already checked out today.",
        FailureKind.CONFLICT,
    ),
)

COMPLETED_MESSAGE = "You have already completed attendance for today."

_DEFAULT_MESSAGES = {
    AttendanceIntent.CHECK_IN: "Failed to check in",
    AttendanceIntent.CHECK_OUT: "Failed to check out",
}


def translate_submission_error(error: ApiError, intent: AttendanceIntent) -> CaptureFailure:
    """Turn a rejected submission into user guidance; conflicts are expected outcomes."""
    if error.code:
        for code, _, guidance, kind in _CONFLICT_GUIDANCE:
            if error.code == code:
                return CaptureFailure(guidance, kind, expected=True)

    text = str(error).lower()
    for _, fragment, guidance, kind in _CONFLICT_GUIDANCE:
        if fragment in text:
            return CaptureFailure(guidance, kind, expected=True)

    return CaptureFailure(str(error) or _DEFAULT_MESSAGES[intent], FailureKind.SUBMISSION)
