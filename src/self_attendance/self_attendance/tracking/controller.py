from __future__ import annotations

from flask import Flask

from ..common.validators import coerce_float, optional_text, require_float
from ..common.web import api_endpoint, current_employee_id, json_body, json_ok
from ..core.exceptions import ValidationError
from ..container import Container


def _require_attendance_id(value) -> int:
    if value in (None, ""):
        raise ValidationError("attendanceId is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid attendanceId") from None


def register(app: Flask, container: Container) -> None:
    service = container.tracking_service

    @app.route("/location-tracking/track", methods=["POST"], endpoint="track_location")
    @api_endpoint("Failed to track location", "TRACK_LOCATION_ERROR")
    def track_location():
        employee_id = current_employee_id()
        body = json_body()
        sample = service.track(
            employee_id,
            attendance_id=_require_attendance_id(body.get("attendanceId")),
            latitude=require_float(body.get("latitude"), "latitude"),
            longitude=require_float(body.get("longitude"), "longitude"),
            accuracy=coerce_float(body.get("accuracy"), "accuracy"),
            address=optional_text(body.get("address")),
        )
        return json_ok({"locationRecord": sample.to_dict()}, message="Location tracked successfully", status=201)

    @app.route("/location-tracking/stop/<attendance_id>", methods=["POST"], endpoint="stop_tracking")
    @api_endpoint("Failed to stop location tracking", "STOP_LOCATION_TRACKING_ERROR")
    def stop_tracking(attendance_id: str):
        employee_id = current_employee_id()
        service.stop(employee_id, _require_attendance_id(attendance_id))
        return json_ok(message="Location tracking stopped")

    @app.route("/location-tracking/attendance/<attendance_id>", methods=["GET"], endpoint="location_history")
    @api_endpoint("Failed to get location history", "GET_LOCATION_HISTORY_ERROR")
    def location_history(attendance_id: str):
        employee_id = current_employee_id()
        samples = service.history(employee_id, _require_attendance_id(attendance_id))
        return json_ok({"locationHistory": [s.to_dict() for s in samples]})
