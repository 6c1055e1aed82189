from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def coerce_float(value: Any, field_label: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field_label}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_label}") from None


def require_float(value: Any, field_label: str) -> float:
    result = coerce_float(value, field_label)
    if result is None:
        raise ValidationError(f"{field_label} is required")
    return result


def validate_coordinates(latitude: Optional[float], longitude: Optional[float]) -> None:
    if latitude is None or longitude is None:
        return
    if not (-90 <= latitude <= 90):
        raise ValidationError("Latitude must be between -90 and 90")
    if not (-180 <= longitude <= 180):
        raise ValidationError("Longitude must be between -180 and 180")


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
