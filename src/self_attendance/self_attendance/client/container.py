from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Dict, Optional

import requests
from dotenv import load_dotenv

from config import get_settings_module

from ..common.timers import Scheduler, ThreadingScheduler
from ..core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_API_TIMEOUT_SECONDS,
    DEFAULT_GEOCODER_USER_AGENT,
    GEOLOCATION_TIMEOUT_SECONDS,
    NOMINATIM_REVERSE_URL,
    STATUS_POLL_SECONDS,
    TRACKING_INTERVAL_SECONDS,
)
from ..core.enums import FacingMode
from .api import AttendanceApiClient
from .camera import LiveCameraController, MediaDevices, OpenCVMediaDevices
from .geolocation import FixedPositionSource, GeolocationResolver, NominatimGeocoder, PositionSource
from .orchestrator import CaptureOrchestrator
from .status_gate import AttendanceStatusGate
from .tracker import LocationTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientContainer:
    api: AttendanceApiClient
    resolver: GeolocationResolver
    camera: LiveCameraController
    gate: AttendanceStatusGate
    tracker: LocationTracker
    orchestrator: CaptureOrchestrator

    def close(self) -> None:
        self.gate.stop()
        self.orchestrator.dispose()
        self.tracker.dispose()
        self.camera.close()
        self.api.close()


def load_client_settings() -> ModuleType:
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def parse_camera_indexes(value) -> Dict[FacingMode, int]:
    """Accept a mapping or a "user=0,environment=1" string."""
    if isinstance(value, dict):
        return {FacingMode(k): int(v) for k, v in value.items()}
    indexes: Dict[FacingMode, int] = {}
    for part in str(value or "").split(","):
        if not part.strip():
            continue
        name, sep, index = part.partition("=")
        if not sep:
            raise ValueError(f"Invalid camera index entry: {part!r}")
        indexes[FacingMode(name.strip().lower())] = int(index)
    return indexes or {FacingMode.USER: 0}


def _position_source(settings) -> Optional[PositionSource]:
    latitude = getattr(settings, "FIXED_LATITUDE", None)
    longitude = getattr(settings, "FIXED_LONGITUDE", None)
    if latitude is None or longitude is None:
        return None
    return FixedPositionSource(latitude, longitude, getattr(settings, "FIXED_ACCURACY", None))


def build_client(
    settings=None,
    *,
    scheduler: Optional[Scheduler] = None,
    position_source: Optional[PositionSource] = None,
    media_devices: Optional[MediaDevices] = None,
    session: Optional[requests.Session] = None,
) -> ClientContainer:
    settings = settings or load_client_settings()
    scheduler = scheduler or ThreadingScheduler()

    api = AttendanceApiClient(
        getattr(settings, "API_BASE_URL", DEFAULT_API_BASE_URL),
        employee_id=getattr(settings, "EMPLOYEE_ID", None),
        token=getattr(settings, "API_TOKEN", None),
        timeout=getattr(settings, "API_TIMEOUT_SECONDS", DEFAULT_API_TIMEOUT_SECONDS),
        session=session,
    )
    geocoder = NominatimGeocoder(
        url=getattr(settings, "GEOCODER_URL", NOMINATIM_REVERSE_URL),
        user_agent=getattr(settings, "GEOCODER_USER_AGENT", DEFAULT_GEOCODER_USER_AGENT),
    )
    resolver = GeolocationResolver(
        position_source or _position_source(settings),
        geocoder,
        timeout=getattr(settings, "GEOLOCATION_TIMEOUT_SECONDS", GEOLOCATION_TIMEOUT_SECONDS),
    )
    if media_devices is None:
        media_devices = OpenCVMediaDevices(parse_camera_indexes(getattr(settings, "CAMERA_INDEXES", None)))
    camera = LiveCameraController(media_devices)
    gate = AttendanceStatusGate(
        api,
        scheduler=scheduler,
        poll_interval=getattr(settings, "STATUS_POLL_SECONDS", STATUS_POLL_SECONDS),
    )
    tracker = LocationTracker(
        resolver,
        api,
        scheduler=scheduler,
        interval=getattr(settings, "TRACKING_INTERVAL_SECONDS", TRACKING_INTERVAL_SECONDS),
    )
    orchestrator = CaptureOrchestrator(
        api,
        gate,
        resolver,
        camera,
        tracker,
        scheduler=scheduler,
        user_agent=getattr(settings, "USER_AGENT", ""),
    )
    logger.info("Client wired against %s (employee=%s)", api.base_url, api.employee_id)
    return ClientContainer(
        api=api,
        resolver=resolver,
        camera=camera,
        gate=gate,
        tracker=tracker,
        orchestrator=orchestrator,
    )
