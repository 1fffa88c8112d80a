import numpy as np
import pytest

SKIN = (128, 128, 128)  # log(R/G) ~ 0
LIP = (200, 50, 50)     # log(R/G) ~ 1.4


def make_frame(height, width, blobs=(), background=SKIN):
    """RGB uint8 frame with lip-colored rectangles given as (row, col, h, w)."""
    frame = np.empty((height, width, 3), dtype=np.uint8)
    frame[:, :] = background
    for row, col, h, w in blobs:
        frame[row:row + h, col:col + w] = LIP
    return frame


@pytest.fixture
def face_frame():
    """320x240 frame with a lips-like band and a smaller red patch."""
    rng = np.random.default_rng(0)
    frame = make_frame(240, 320)
    # Noise keeps the skin ratios distinct but below the lip ratios
    frame[:, :, 0] = np.clip(frame[:, :, 0].astype(int) + rng.integers(-10, 10, (240, 320)), 0, 255)
    frame[150:180, 100:220] = LIP   # Lips: 3600 px
    frame[40:50, 20:30] = LIP       # Small red patch: 100 px
    return frame


@pytest.fixture
def video_path(tmp_path):
    """Five 64x48 frames, frame i filled with gray level 40 * i."""
    import cv2

    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (64, 48))
    if not writer.isOpened():
        pytest.skip("MJPG video writer not available")
    for i in range(5):
        writer.write(np.full((48, 64, 3), 40 * i, dtype=np.uint8))
    writer.release()
    return path
