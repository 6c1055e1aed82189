"""HTTP client for the self-attendance and location-tracking endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..attendance.model import AttendanceDayStatus, AttendanceRecord, GeoLocation
from ..common.web import EMPLOYEE_HEADER
from ..core.constants import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT_SECONDS
from ..core.exceptions import ApiError
from ..tracking.model import LocationSample
from .payloads import CheckInRequest, CheckOutRequest

logger = logging.getLogger(__name__)


class AttendanceApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        employee_id: Optional[int] = None,
        token: Optional[str] = None,
        timeout: float = DEFAULT_API_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.employee_id = employee_id
        self.token = token
        self.timeout = float(timeout)
        self._session = session or requests.Session()

    def close(self) -> None:
        self._session.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.employee_id is not None:
            headers[EMPLOYEE_HEADER] = str(self.employee_id)
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, *, json: Optional[dict] = None, default_error: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self._session.request(method, url, json=json, headers=self._headers(), timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timed out: {method} {url}")
            raise ApiError("Cannot connect to server. The request timed out.") from e
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Cannot reach backend: {method} {url}: {e}")
            raise ApiError("Cannot connect to server. Please check if the backend is running.") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {method} {url}: {e}")
            raise ApiError(str(e) or default_error) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not response.ok:
            message = payload.get("error") or payload.get("message") or default_error
            logger.error(f"API error {response.status_code} on {method} {url}: {message}")
            raise ApiError(message, status_code=response.status_code, code=payload.get("code"))
        return payload.get("data") or {}

    def self_check_in(self, request: CheckInRequest) -> AttendanceRecord:
        data = self._request(
            "POST", "attendance/self-checkin", json=request.to_payload(), default_error="Failed to check in"
        )
        return AttendanceRecord.from_dict(data["attendance"])

    def self_check_out(self, request: CheckOutRequest) -> AttendanceRecord:
        data = self._request(
            "POST", "attendance/self-checkout", json=request.to_payload(), default_error="Failed to check out"
        )
        return AttendanceRecord.from_dict(data["attendance"])

    def get_status(self) -> AttendanceDayStatus:
        data = self._request("GET", "attendance/status", default_error="Failed to get attendance status")
        return AttendanceDayStatus.from_dict(data)

    def get_my_attendance(self) -> List[AttendanceRecord]:
        data = self._request("GET", "attendance/me", default_error="Failed to get attendance history")
        return [AttendanceRecord.from_dict(item) for item in data.get("attendances", [])]

    def track_location(self, attendance_id: int, location: GeoLocation) -> LocationSample:
        payload = {"attendanceId": attendance_id, **location.to_dict()}
        data = self._request("POST", "location-tracking/track", json=payload, default_error="Failed to track location")
        return LocationSample.from_dict(data["locationRecord"])

    def stop_tracking(self, attendance_id: int) -> None:
        self._request(
            "POST",
            f"location-tracking/stop/{attendance_id}",
            default_error="Failed to stop location tracking",
        )

    def get_location_history(self, attendance_id: int) -> List[LocationSample]:
        data = self._request(
            "GET",
            f"location-tracking/attendance/{attendance_id}",
            default_error="Failed to get location history",
        )
        return [LocationSample.from_dict(item) for item in data.get("locationHistory", [])]
