from __future__ import annotations

import base64
import binascii
import io

import cv2
import numpy as np
from PIL import Image

from ..core.constants import CAPTURE_JPEG_QUALITY, SELFIE_MAX_WIDTH, THUMBNAIL_MAX_WIDTH

JPEG_DATA_URI_PREFIX = "data:image/jpeg;base64,"


def to_data_uri(jpeg_bytes: bytes) -> str:
    return JPEG_DATA_URI_PREFIX + base64.b64encode(jpeg_bytes).decode("ascii")


def decode_data_uri(data_uri: str) -> bytes:
    header, sep, payload = data_uri.partition(",")
    if not sep or not header.startswith("data:image/") or ";base64" not in header:
        raise ValueError("Not a base64 image data URI")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError("Invalid base64 image payload") from e


def encode_frame(frame: np.ndarray, *, quality: float = CAPTURE_JPEG_QUALITY) -> str:
    """Encode a BGR video frame at its native size as a JPEG data URI."""
    ok, buffer = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, int(round(quality * 100))])
    if not ok:
        raise ValueError("Could not encode frame as JPEG")
    return to_data_uri(buffer.tobytes())


def compress_data_uri(
    data_uri: str,
    *,
    max_width: int = SELFIE_MAX_WIDTH,
    quality: float = CAPTURE_JPEG_QUALITY,
) -> str:
    image = Image.open(io.BytesIO(decode_data_uri(data_uri)))
    image = image.convert("RGB")
    if image.width > max_width:
        height = max(1, round(image.height * max_width / image.width))
        image = image.resize((max_width, height), Image.LANCZOS)

    out = io.BytesIO()
    image.save(out, format="JPEG", quality=int(round(quality * 100)))
    return to_data_uri(out.getvalue())


def thumbnail(data_uri: str) -> str:
    return compress_data_uri(data_uri, max_width=THUMBNAIL_MAX_WIDTH)
