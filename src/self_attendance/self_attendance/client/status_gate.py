"""Client-side view of today's attendance phase.

The gate only pre-empts obviously invalid actions; the server stays the
final arbiter of every check-in and check-out.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from ..attendance.model import AttendanceDayStatus, AttendanceRecord
from ..common.timers import Scheduler, ThreadingScheduler, TimerHandle
from ..core.constants import STATUS_POLL_SECONDS
from ..core.enums import DayPhase
from ..core.exceptions import ApiError

logger = logging.getLogger(__name__)

StatusListener = Callable[[Optional[AttendanceDayStatus]], None]


class AttendanceStatusGate:
    def __init__(self, api, *, scheduler: Optional[Scheduler] = None, poll_interval: float = STATUS_POLL_SECONDS):
        self._api = api
        self._scheduler = scheduler or ThreadingScheduler()
        self.poll_interval = poll_interval
        self._status: Optional[AttendanceDayStatus] = None
        self._listeners: List[StatusListener] = []
        self._poll_handle: Optional[TimerHandle] = None
        self._lock = threading.Lock()

    @property
    def status(self) -> Optional[AttendanceDayStatus]:
        return self._status

    @property
    def phase(self) -> Optional[DayPhase]:
        return self._status.phase if self._status else None

    @property
    def can_check_in(self) -> bool:
        return self.phase is DayPhase.NOT_STARTED

    @property
    def can_check_out(self) -> bool:
        return self.phase is DayPhase.CHECKED_IN

    @property
    def is_completed(self) -> bool:
        return self.phase is DayPhase.COMPLETED

    def check_in_enabled(self, *, pending: bool = False) -> bool:
        return not pending and self.can_check_in

    def check_out_enabled(self, *, pending: bool = False) -> bool:
        return not pending and self.can_check_out

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, status: Optional[AttendanceDayStatus]) -> None:
        with self._lock:
            self._status = status
        for listener in list(self._listeners):
            listener(status)

    def refresh(self) -> Optional[AttendanceDayStatus]:
        """Fetch today's status; on failure the last known status is kept."""
        try:
            status = self._api.get_status()
        except ApiError as e:
            logger.warning("Could not refresh attendance status: %s", e)
            return self._status
        self._publish(status)
        return status

    def on_focus(self) -> Optional[AttendanceDayStatus]:
        return self.refresh()

    def invalidate(self) -> Optional[AttendanceDayStatus]:
        return self.refresh()

    def observe_record(self, record: AttendanceRecord, *, now: Optional[datetime] = None) -> None:
        """Apply a record returned by a successful mutation before the next poll."""
        self._publish(AttendanceDayStatus.for_record(record, now=now or datetime.now()))

    def start(self) -> None:
        if self._poll_handle is not None:
            return
        self.refresh()
        self._poll_handle = self._scheduler.call_every(self.poll_interval, self.refresh)

    def stop(self) -> None:
        handle, self._poll_handle = self._poll_handle, None
        if handle is not None:
            handle.cancel()

    @property
    def polling(self) -> bool:
        return self._poll_handle is not None
