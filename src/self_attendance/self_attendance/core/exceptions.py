from __future__ import annotations

from typing import Optional

from .enums import CameraFailure, GeolocationFailure


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the acting employee cannot be identified."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, message: str, *, code: str = "NOT_FOUND"):
        super().__init__(message)
        self.code = code


class ConflictError(DomainError):
    """Raised when an action does not fit the current attendance state."""

    def __init__(self, message: str, *, code: str):
        super().__init__(message)
        self.code = code


GEOLOCATION_MESSAGES = {
    GeolocationFailure.PERMISSION_DENIED: "Location permission denied. Please enable location access.",
    GeolocationFailure.POSITION_UNAVAILABLE: "Location information is unavailable.",
    GeolocationFailure.TIMEOUT: "Location request timed out.",
    GeolocationFailure.UNSUPPORTED: "Geolocation is not supported on this device.",
}

CAMERA_MESSAGES = {
    CameraFailure.UNAVAILABLE: "Camera is not available on this device. Please use a different device.",
    CameraFailure.PERMISSION_DENIED: "Camera permission denied. Please click Allow to grant camera access.",
    CameraFailure.NOT_FOUND: "No camera found on this device. Please use a different device.",
    CameraFailure.BUSY: "Camera is already in use by another application. Please close it and try again.",
    CameraFailure.OVERCONSTRAINED: "Camera does not support the requested video settings.",
}


class GeolocationError(DomainError):
    """Raised when the current position cannot be resolved."""

    def __init__(self, failure: GeolocationFailure, message: Optional[str] = None):
        super().__init__(message or GEOLOCATION_MESSAGES[failure])
        self.failure = failure


class CameraError(DomainError):
    """Raised when the camera cannot be opened or read."""

    def __init__(self, failure: CameraFailure, message: Optional[str] = None):
        super().__init__(message or CAMERA_MESSAGES[failure])
        self.failure = failure


class ApiError(DomainError):
    """Raised by the API client for non-2xx responses and transport failures."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
