"""Live camera preview and still capture.

The controller owns at most one stream at a time. Every exit path
(close, switch, failed open, context-manager exit) stops all tracks
of the held stream so the device is released.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

import cv2
import numpy as np

from ..core.constants import (
    CAMERA_IDEAL_HEIGHT,
    CAMERA_IDEAL_WIDTH,
    CAMERA_MIN_HEIGHT,
    CAMERA_MIN_WIDTH,
    CAPTURE_JPEG_QUALITY,
)
from ..core.enums import CameraFailure, CameraState, FacingMode
from ..core.exceptions import CameraError
from .imaging import encode_frame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoConstraints:
    facing_mode: Optional[FacingMode] = None
    ideal_width: Optional[int] = None
    ideal_height: Optional[int] = None
    min_width: Optional[int] = None
    min_height: Optional[int] = None


class MediaTrack(Protocol):
    kind: str

    @property
    def ready_state(self) -> str:
        ...

    def stop(self) -> None:
        ...


class MediaStream(Protocol):
    def get_tracks(self) -> List[MediaTrack]:
        ...

    def read_frame(self) -> np.ndarray:
        ...


class MediaDevices(Protocol):
    def get_user_media(self, constraints: VideoConstraints) -> MediaStream:
        ...


def constraint_chain(facing_mode: FacingMode) -> List[VideoConstraints]:
    """Constraints to try, from most to least specific."""
    return [
        VideoConstraints(
            facing_mode=facing_mode,
            ideal_width=CAMERA_IDEAL_WIDTH,
            ideal_height=CAMERA_IDEAL_HEIGHT,
            min_width=CAMERA_MIN_WIDTH,
            min_height=CAMERA_MIN_HEIGHT,
        ),
        VideoConstraints(facing_mode=facing_mode),
        VideoConstraints(),
    ]


def stop_stream(stream: Optional[MediaStream]) -> None:
    if stream is None:
        return
    for track in stream.get_tracks():
        track.stop()


class LiveCameraController:
    def __init__(self, devices: Optional[MediaDevices], *, quality: float = CAPTURE_JPEG_QUALITY):
        self._devices = devices
        self.quality = quality
        self.state = CameraState.CLOSED
        self.facing_mode = FacingMode.USER
        self._stream: Optional[MediaStream] = None

    @property
    def is_streaming(self) -> bool:
        return self.state is CameraState.STREAMING

    @property
    def stream(self) -> Optional[MediaStream]:
        return self._stream

    def open(self, facing_mode: Optional[FacingMode] = None) -> None:
        if self._devices is None:
            raise CameraError(CameraFailure.UNAVAILABLE)
        if self._stream is not None:
            self.close()

        facing_mode = facing_mode or self.facing_mode
        self.state = CameraState.OPENING
        try:
            self._stream = self._acquire(facing_mode)
        except BaseException:
            self.close()
            raise
        self.facing_mode = facing_mode
        self.state = CameraState.STREAMING
        logger.info("Camera streaming (facing=%s)", facing_mode.value)

    def _acquire(self, facing_mode: FacingMode) -> MediaStream:
        last_error: Optional[CameraError] = None
        for constraints in constraint_chain(facing_mode):
            try:
                return self._devices.get_user_media(constraints)
            except CameraError as e:
                if e.failure is not CameraFailure.OVERCONSTRAINED:
                    raise
                logger.info("Camera constraints not satisfiable, relaxing: %s", constraints)
                last_error = e
        raise last_error

    def switch_camera(self) -> None:
        """Reopen with the opposite facing mode; the old stream is released first."""
        target = self.facing_mode.opposite()
        self.close()
        self.open(target)

    def capture(self) -> str:
        if self.state is not CameraState.STREAMING or self._stream is None:
            raise CameraError(CameraFailure.UNAVAILABLE, "Camera is not streaming")
        self.state = CameraState.CAPTURING
        try:
            frame = self._stream.read_frame()
            return encode_frame(frame, quality=self.quality)
        finally:
            if self._stream is not None:
                self.state = CameraState.STREAMING

    def close(self) -> None:
        stream, self._stream = self._stream, None
        try:
            stop_stream(stream)
        finally:
            self.state = CameraState.CLOSED

    def __enter__(self) -> "LiveCameraController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class OpenCVTrack:
    kind = "video"

    def __init__(self, capture: cv2.VideoCapture):
        self._capture = capture
        self._stopped = False

    @property
    def ready_state(self) -> str:
        return "ended" if self._stopped else "live"

    def stop(self) -> None:
        if not self._stopped:
            self._stopped = True
            self._capture.release()


class OpenCVStream:
    def __init__(self, capture: cv2.VideoCapture):
        self._capture = capture
        self._track = OpenCVTrack(capture)

    def get_tracks(self) -> List[OpenCVTrack]:
        return [self._track]

    def read_frame(self) -> np.ndarray:
        if self._track.ready_state != "live":
            raise CameraError(CameraFailure.UNAVAILABLE, "Camera stream has ended")
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise CameraError(CameraFailure.BUSY)
        return frame


class OpenCVMediaDevices:
    """Maps facing modes onto local camera indexes opened through OpenCV."""

    def __init__(
        self,
        camera_indexes: Optional[Dict[FacingMode, int]] = None,
        *,
        capture_factory: Callable[[int], cv2.VideoCapture] = cv2.VideoCapture,
    ):
        self.camera_indexes = dict(camera_indexes or {FacingMode.USER: 0})
        self._capture_factory = capture_factory

    def _index_for(self, facing_mode: Optional[FacingMode]) -> int:
        if facing_mode is None:
            return next(iter(self.camera_indexes.values()))
        if facing_mode not in self.camera_indexes:
            raise CameraError(CameraFailure.OVERCONSTRAINED, f"No camera facing {facing_mode.value}")
        return self.camera_indexes[facing_mode]

    def get_user_media(self, constraints: VideoConstraints) -> OpenCVStream:
        index = self._index_for(constraints.facing_mode)
        capture = self._capture_factory(index)
        if not capture.isOpened():
            capture.release()
            raise CameraError(CameraFailure.NOT_FOUND)

        if constraints.ideal_width and constraints.ideal_height:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.ideal_width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.ideal_height)
        if constraints.min_width and constraints.min_height:
            width = capture.get(cv2.CAP_PROP_FRAME_WIDTH)
            height = capture.get(cv2.CAP_PROP_FRAME_HEIGHT)
            if width < constraints.min_width or height < constraints.min_height:
                capture.release()
                raise CameraError(CameraFailure.OVERCONSTRAINED)

        # An opened device that yields no frames is held by another process.
        ok, _ = capture.read()
        if not ok:
            capture.release()
            raise CameraError(CameraFailure.BUSY)
        return OpenCVStream(capture)
