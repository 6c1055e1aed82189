"""Periodic location sampling bound to one open attendance record."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ..common.timers import Scheduler, ThreadingScheduler, TimerHandle
from ..core.constants import TRACKING_INTERVAL_SECONDS
from ..core.exceptions import ApiError, GeolocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingStatus:
    is_active: bool
    attendance_id: Optional[int]
    interval: float


class LocationTracker:
    """Create, start, stop, dispose. At most one timer is armed at a time."""

    def __init__(
        self,
        resolver,
        api,
        *,
        scheduler: Optional[Scheduler] = None,
        interval: float = TRACKING_INTERVAL_SECONDS,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._resolver = resolver
        self._api = api
        self._scheduler = scheduler or ThreadingScheduler()
        self.interval = float(interval)
        self._attendance_id: Optional[int] = None
        self._timer: Optional[TimerHandle] = None
        self._active = False
        self._lock = threading.RLock()

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def attendance_id(self) -> Optional[int]:
        return self._attendance_id

    def status(self) -> TrackingStatus:
        return TrackingStatus(is_active=self._active, attendance_id=self._attendance_id, interval=self.interval)

    def start_tracking(self, attendance_id: int) -> None:
        with self._lock:
            if self._active:
                logger.info("Location tracking already active for attendance %s", self._attendance_id)
                return
            self._attendance_id = attendance_id
            self._active = True
            self._timer = self._scheduler.call_every(self.interval, self._tick)
            logger.info("Starting location tracking for attendance %s", attendance_id)

        self._tick()

    def stop_tracking(self) -> None:
        with self._lock:
            if not self._active:
                return
            attendance_id = self._attendance_id
            self._cancel_timer()
            try:
                if attendance_id is not None:
                    self._api.stop_tracking(attendance_id)
                    logger.info("Location tracking stopped for attendance %s", attendance_id)
            except ApiError as e:
                logger.warning("Server did not acknowledge tracking stop for %s: %s", attendance_id, e)
            finally:
                self._attendance_id = None
                self._active = False

    def set_interval(self, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        with self._lock:
            self.interval = float(interval)
            if self._active:
                self._cancel_timer()
                self._timer = self._scheduler.call_every(self.interval, self._tick)

    def dispose(self) -> None:
        self.stop_tracking()

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def _tick(self) -> None:
        attendance_id = self._attendance_id
        if not self._active or attendance_id is None:
            return
        try:
            location = self._resolver.get_complete_location()
            self._api.track_location(attendance_id, location)
            logger.debug("Tracked location for attendance %s: %s", attendance_id, location.address)
        except (GeolocationError, ApiError) as e:
            logger.warning("Location tracking tick failed for attendance %s: %s", attendance_id, e)
        except Exception:
            logger.exception("Unexpected error while tracking location for attendance %s", attendance_id)
