import numpy as np
import pytest

from liptrack.errors import InvalidInput, InvalidParameter
from liptrack.vision.lip_segmenter import (
    LipSegmenter,
    compute_ratio_field,
    label_components,
    rank_threshold,
    select_largest_component,
)
from tests.conftest import make_frame


def test_ratio_field_matches_log_red_over_green():
    frame = np.array([[[255, 51, 0], [51, 255, 0]]], dtype=np.uint8)

    ratio = compute_ratio_field(frame)

    assert ratio.dtype == np.float32
    assert ratio.shape == (1, 2)
    assert ratio[0, 0] == pytest.approx(np.log(1.0 / (0.2 + 1e-6)), rel=1e-5)
    assert ratio[0, 1] == pytest.approx(np.log(0.2 / (1.0 + 1e-6)), rel=1e-5)


def test_ratio_field_handles_black_pixels():
    frame = np.zeros((2, 2, 3), dtype=np.uint8)
    frame[0, 0] = (10, 0, 0)  # Zero green is guarded by epsilon

    ratio = compute_ratio_field(frame)

    assert np.isfinite(ratio[0, 0])
    assert np.isneginf(ratio[1, 1])


def test_float_frames_are_used_as_is():
    frame = np.zeros((1, 1, 3), dtype=np.float64)
    frame[0, 0] = (0.5, 0.25, 0.0)

    assert compute_ratio_field(frame)[0, 0] == pytest.approx(np.log(0.5 / 0.250001), rel=1e-5)


def test_rank_threshold_uses_floor_of_kept_fraction():
    ratio = np.arange(100, dtype=np.float32).reshape(10, 10)

    # floor(100 * 0.82) = 82
    assert rank_threshold(ratio, 0.18) == 82.0
    assert rank_threshold(ratio, 0.5) == 50.0
    assert rank_threshold(np.array([[3.0]], dtype=np.float32), 0.9) == 3.0


def test_candidate_mask_keeps_top_fraction():
    ratio = np.arange(100, dtype=np.float32).reshape(10, 10)

    threshold = rank_threshold(ratio, 0.18)

    assert int((ratio > threshold).sum()) == 17


def test_threshold_monotonicity(face_frame):
    segmenter = LipSegmenter()
    counts = [
        int(segmenter.analyze(face_frame, fraction).candidate_mask.sum())
        for fraction in (0.9, 0.5, 0.3, 0.18, 0.1, 0.05, 0.01)
    ]

    assert counts == sorted(counts, reverse=True)


def test_keeps_largest_of_two_blobs():
    # 10 px blob and 50 px blob on a 20x20 frame; 0.18 keeps both as candidates
    frame = make_frame(20, 20, blobs=[(1, 1, 2, 5), (10, 5, 5, 10)])

    result = LipSegmenter().analyze(frame, 0.18)

    assert sorted(result.component_sizes.values()) == [10, 50]
    expected = np.zeros((20, 20), dtype=bool)
    expected[10:15, 5:15] = True
    np.testing.assert_array_equal(result.mask, expected)


def test_label_components_is_eight_connected_and_raster_ordered():
    mask = np.zeros((6, 8), dtype=bool)
    mask[3, 0] = mask[4, 1] = True  # Diagonal pair, first pixel at row 3
    mask[0, 6] = mask[1, 6] = True  # Vertical pair, first pixel at row 0

    labels, sizes = label_components(mask)

    assert sizes == {1: 2, 2: 2}
    assert labels[0, 6] == labels[1, 6] == 1
    assert labels[3, 0] == labels[4, 1] == 2
    assert labels[2, 2] == 0


def test_tie_goes_to_lowest_label():
    assert select_largest_component({1: 9, 2: 9}) == 1
    assert select_largest_component({1: 4, 2: 9, 3: 9}) == 2
    assert select_largest_component({}) == 0


def test_equal_blobs_resolve_to_first_in_raster_order():
    # Lower-right blob starts on an earlier row than the left one
    frame = make_frame(20, 20, blobs=[(4, 1, 3, 3), (2, 14, 3, 3)])
    segmenter = LipSegmenter(0.1)

    masks = [segmenter.segment(frame) for _ in range(3)]

    expected = np.zeros((20, 20), dtype=bool)
    expected[2:5, 14:17] = True
    for mask in masks:
        np.testing.assert_array_equal(mask, expected)


def test_black_frame_gives_empty_mask():
    mask = LipSegmenter().segment(np.zeros((24, 32, 3), dtype=np.uint8))

    assert mask.shape == (24, 32)
    assert mask.dtype == bool
    assert not mask.any()


def test_uniform_frame_gives_empty_mask():
    mask = LipSegmenter().segment(make_frame(10, 10))

    assert not mask.any()


def test_segment_is_deterministic_and_does_not_mutate(face_frame):
    original = face_frame.copy()
    segmenter = LipSegmenter()

    first = segmenter.segment(face_frame)
    second = segmenter.segment(face_frame)

    np.testing.assert_array_equal(first, second)
    np.testing.assert_array_equal(face_frame, original)
    assert first[150:180, 100:220].all()
    assert not first[40:50, 20:30].any()


def test_single_pixel_frame():
    mask = LipSegmenter(0.5).segment(np.array([[[200, 50, 50]]], dtype=np.uint8))

    assert mask.shape == (1, 1)
    assert not mask.any()


def test_two_channel_frame_is_accepted():
    frame = make_frame(20, 20, blobs=[(5, 5, 4, 4)])[:, :, :2]

    assert LipSegmenter().segment(frame).sum() == 16


@pytest.mark.parametrize("fraction", [0, 1, -0.1, 1.5, "0.2", float("nan"), True])
def test_invalid_threshold_fraction(fraction):
    frame = make_frame(4, 4)
    with pytest.raises(InvalidParameter):
        LipSegmenter().segment(frame, fraction)


def test_invalid_threshold_fraction_at_construction():
    with pytest.raises(InvalidParameter):
        LipSegmenter(1.0)


@pytest.mark.parametrize("frame", [
    np.zeros((0, 5, 3), dtype=np.uint8),
    np.zeros((5, 0, 3), dtype=np.uint8),
    np.zeros((5, 5, 1), dtype=np.uint8),
    np.zeros((5, 5), dtype=np.uint8),
    [[[1, 2, 3]]],
])
def test_invalid_frame(frame):
    with pytest.raises(InvalidInput):
        LipSegmenter().segment(frame)


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        LipSegmenter(0)
