from __future__ import annotations

from flask import Flask, request

from ..common.validators import coerce_float, optional_text, require_float
from ..common.web import api_endpoint, client_ip, current_employee_id, json_body, json_ok
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ValidationError
from ..container import Container
from .model import DeviceFingerprint, GeoLocation


def _parse_location(value, field_label: str):
    if value in (None, "", {}):
        return None
    if not isinstance(value, dict):
        raise ValidationError(f"{field_label} must be an object")
    return GeoLocation(
        latitude=require_float(value.get("latitude"), f"{field_label}.latitude"),
        longitude=require_float(value.get("longitude"), f"{field_label}.longitude"),
        accuracy=coerce_float(value.get("accuracy"), f"{field_label}.accuracy"),
        address=optional_text(value.get("address")),
    )


def _parse_device_info(value):
    if value in (None, "", {}):
        return None
    if not isinstance(value, dict):
        raise ValidationError("deviceInfo must be an object")
    return DeviceFingerprint.from_dict(value)


def _parse_shift_id(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid shiftId") from None


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/attendance/self-checkin", methods=["POST"], endpoint="self_checkin")
    @api_endpoint("Failed to check in", "SELF_CHECKIN_ERROR")
    def self_checkin():
        employee_id = current_employee_id()
        body = json_body()
        record = service.self_check_in(
            employee_id,
            is_remote=bool(body.get("isRemote", False)),
            notes=optional_text(body.get("notes")),
            selfie=optional_text(body.get("checkInSelfie")),
            location=_parse_location(body.get("checkInLocation"), "checkInLocation"),
            device_info=_parse_device_info(body.get("deviceInfo")),
            shift_id=_parse_shift_id(body.get("shiftId")),
            ip_address=client_ip(),
        )
        return json_ok({"attendance": record.to_dict()}, message="Check-in recorded", status=201)

    @app.route("/attendance/self-checkout", methods=["POST"], endpoint="self_checkout")
    @api_endpoint("Failed to check out", "SELF_CHECKOUT_ERROR")
    def self_checkout():
        employee_id = current_employee_id()
        body = json_body()
        record = service.self_check_out(
            employee_id,
            notes=optional_text(body.get("notes")),
            selfie=optional_text(body.get("checkOutSelfie")),
            location=_parse_location(body.get("checkOutLocation"), "checkOutLocation"),
        )
        return json_ok({"attendance": record.to_dict()}, message="Check-out recorded")

    @app.route("/attendance/status", methods=["GET"], endpoint="attendance_status")
    @api_endpoint("Failed to get attendance status", "GET_STATUS_ERROR")
    def attendance_status():
        status = service.get_status(current_employee_id())
        return json_ok(status.to_dict())

    @app.route("/attendance/me", methods=["GET"], endpoint="my_attendance")
    @api_endpoint("Failed to get attendance history", "GET_HISTORY_ERROR")
    def my_attendance():
        limit = request.args.get("limit", type=int) or DEFAULT_HISTORY_LIMIT
        records = service.get_history(current_employee_id(), limit=limit)
        return json_ok({"attendances": [r.to_dict() for r in records]})
