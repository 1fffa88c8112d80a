import cv2
import numpy as np
import pytest

from liptrack.video.frame_source import VideoFrameSource



def test_open_missing_file(tmp_path):
    source = VideoFrameSource()

    assert source.open(str(tmp_path / "missing.avi")) is False
    assert not source.is_open()
    assert source.frame_count == 0
    assert source.get_frame(0) is None


def test_random_access_frames(video_path):
    source = VideoFrameSource(width=32, height=24)
    assert source.open(str(video_path))

    assert source.frame_count == 5
    assert source.get_frame_dimensions() == (64, 48)

    later = source.get_frame(3)
    earlier = source.get_frame(1)

    assert later.shape == (24, 32, 3)
    assert later.dtype == np.uint8
    assert abs(int(later.mean()) - 120) <= 6
    assert abs(int(earlier.mean()) - 40) <= 6

    source.release()
    assert source.frame_count == 0


def test_out_of_range_index(video_path):
    source = VideoFrameSource()
    source.open(str(video_path))

    assert source.get_frame(-1) is None
    assert source.get_frame(5) is None
    source.release()


def test_prepare_converts_bgr_to_rgb():
    bgr = np.zeros((48, 64, 3), dtype=np.uint8)
    bgr[:, :, 2] = 200  # Red in BGR order

    rgb = VideoFrameSource(width=16, height=12).prepare(bgr)

    assert rgb.shape == (12, 16, 3)
    assert (rgb[:, :, 0] == 200).all()
    assert not rgb[:, :, 2].any()
