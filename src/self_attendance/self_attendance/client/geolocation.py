"""Current position plus a best-effort human-readable address.

Coordinates are authoritative. Reverse geocoding may fail for any reason
(rate limit, offline, bad payload); the address then falls back to the
formatted coordinates instead of failing the whole lookup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from ..attendance.model import GeoLocation
from ..core.constants import DEFAULT_GEOCODER_USER_AGENT, GEOLOCATION_TIMEOUT_SECONDS, NOMINATIM_REVERSE_URL
from ..core.enums import GeolocationFailure
from ..core.exceptions import GeolocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


class PositionSource(Protocol):
    def get_current_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> Position:
        ...


class Geocoder(Protocol):
    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        ...


class FixedPositionSource:
    """Position of a stationary check-in station, taken from configuration."""

    def __init__(self, latitude: float, longitude: float, accuracy: Optional[float] = None):
        self._position = Position(latitude=float(latitude), longitude=float(longitude), accuracy=accuracy)

    def get_current_position(self, *, high_accuracy: bool, timeout: float, maximum_age: float) -> Position:
        return self._position


class NominatimGeocoder:
    def __init__(
        self,
        *,
        url: str = NOMINATIM_REVERSE_URL,
        user_agent: str = DEFAULT_GEOCODER_USER_AGENT,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.user_agent = user_agent
        self.timeout = float(timeout)
        self._session = session or requests.Session()

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        response = self._session.get(
            self.url,
            params={
                "format": "json",
                "lat": latitude,
                "lon": longitude,
                "zoom": 18,
                "addressdetails": 1,
            },
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json().get("display_name") or None


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"


class GeolocationResolver:
    """One-shot, high-accuracy, uncached position lookups. No retries."""

    def __init__(
        self,
        source: Optional[PositionSource],
        geocoder: Optional[Geocoder] = None,
        *,
        timeout: float = GEOLOCATION_TIMEOUT_SECONDS,
    ):
        self._source = source
        self._geocoder = geocoder
        self.timeout = float(timeout)

    def is_available(self) -> bool:
        return self._source is not None

    def get_current_location(self) -> GeoLocation:
        if self._source is None:
            raise GeolocationError(GeolocationFailure.UNSUPPORTED)
        try:
            position = self._source.get_current_position(high_accuracy=True, timeout=self.timeout, maximum_age=0)
        except GeolocationError:
            raise
        except PermissionError as e:
            raise GeolocationError(GeolocationFailure.PERMISSION_DENIED) from e
        except TimeoutError as e:
            raise GeolocationError(GeolocationFailure.TIMEOUT) from e
        except OSError as e:
            raise GeolocationError(GeolocationFailure.POSITION_UNAVAILABLE) from e
        return GeoLocation(latitude=position.latitude, longitude=position.longitude, accuracy=position.accuracy)

    def address_for(self, latitude: float, longitude: float) -> str:
        if self._geocoder is not None:
            try:
                address = self._geocoder.reverse(latitude, longitude)
                if address:
                    return address
            except Exception as e:
                logger.warning("Reverse geocoding failed, using coordinates: %s", e)
        return format_coordinates(latitude, longitude)

    def get_complete_location(self) -> GeoLocation:
        location = self.get_current_location()
        return GeoLocation(
            latitude=location.latitude,
            longitude=location.longitude,
            accuracy=location.accuracy,
            address=self.address_for(location.latitude, location.longitude),
        )
