import io

import numpy as np
import pytest
from PIL import Image

from self_attendance.client.imaging import compress_data_uri, decode_data_uri, encode_frame, thumbnail


def _image_size(data_uri):
    return Image.open(io.BytesIO(decode_data_uri(data_uri))).size


def test_encode_frame_keeps_native_size():
    frame = np.zeros((720, 1280, 3), dtype=np.uint8)

    data_uri = encode_frame(frame, quality=0.85)

    assert data_uri.startswith("data:image/jpeg;base64,")
    assert _image_size(data_uri) == (1280, 720)


def test_compress_scales_down_to_max_width():
    data_uri = encode_frame(np.full((1080, 1920, 3), 200, dtype=np.uint8))

    assert _image_size(compress_data_uri(data_uri, max_width=1200)) == (1200, 675)


def test_compress_leaves_small_images_unscaled():
    data_uri = encode_frame(np.full((480, 640, 3), 50, dtype=np.uint8))

    assert _image_size(compress_data_uri(data_uri)) == (640, 480)


def test_thumbnail_width():
    data_uri = encode_frame(np.full((480, 640, 3), 50, dtype=np.uint8))

    assert _image_size(thumbnail(data_uri))[0] == 200


def test_decode_rejects_non_image_uri():
    with pytest.raises(ValueError):
        decode_data_uri("hello")
