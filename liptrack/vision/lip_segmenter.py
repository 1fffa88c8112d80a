"""
Lip segmentation from RGB frames.

Lips reflect proportionally more red than the surrounding skin, so the
log(R/G) ratio separates them. The threshold is chosen per frame by rank
so it follows lighting and skin tone, and only the largest 8-connected
region of passing pixels is kept.
"""

import cv2
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import logging

from ..errors import InvalidInput, InvalidParameter

logger = logging.getLogger(__name__)

RATIO_EPSILON = 1e-6
DEFAULT_THRESHOLD_FRACTION = 0.18


@dataclass
class SegmentationResult:
    """Intermediate and final grids produced while segmenting one frame."""
    ratio_field: np.ndarray  # float32 log(R / (G + eps))
    threshold: float  # Ratio value at the cutoff rank
    candidate_mask: np.ndarray  # Ratio strictly above threshold
    labels: np.ndarray  # int32 component labels, 0 = background
    component_sizes: Dict[int, int] = field(default_factory=dict)  # label -> pixel count
    selected_label: int = 0  # 0 when no component exists
    mask: np.ndarray = None  # Pixels of the selected component only


def validate_threshold_fraction(threshold_fraction: float) -> float:
    """Return threshold_fraction as a float, or raise InvalidParameter."""
    if isinstance(threshold_fraction, bool) or not isinstance(threshold_fraction, (int, float, np.floating)):
        raise InvalidParameter(f"threshold_fraction must be a number, got {threshold_fraction!r}")
    if not 0 < threshold_fraction < 1:
        raise InvalidParameter(f"threshold_fraction must be in (0, 1), got {threshold_fraction}")
    return float(threshold_fraction)


def _validate_frame(frame) -> None:
    if not isinstance(frame, np.ndarray):
        raise InvalidInput(f"Frame must be a numpy array, got {type(frame).__name__}")
    if frame.ndim != 3:
        raise InvalidInput(f"Frame must be an (H, W, C) array, got shape {frame.shape}")
    if frame.shape[0] == 0 or frame.shape[1] == 0:
        raise InvalidInput(f"Frame has no pixels: shape {frame.shape}")
    if frame.shape[2] < 2:
        raise InvalidInput(f"Frame needs red and green channels, got {frame.shape[2]} channel(s)")


def normalize_channels(frame: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split an RGB frame into red and green planes scaled to [0, 1].

    Integer frames are divided by the largest value of their dtype.
    Floating point frames are assumed to be normalized already.
    """
    _validate_frame(frame)

    if np.issubdtype(frame.dtype, np.integer):
        scale = float(np.iinfo(frame.dtype).max)
        planes = frame[:, :, :2].astype(np.float32) / scale
    else:
        planes = frame[:, :, :2].astype(np.float32)

    return planes[:, :, 0], planes[:, :, 1]


def compute_ratio_field(frame: np.ndarray) -> np.ndarray:
    """
    Compute log(R / (G + eps)) for every pixel.

    Args:
        frame: RGB image (H x W x C), C >= 2

    Returns:
        float32 array (H x W). Pixels with no red give -inf.
    """
    red, green = normalize_channels(frame)

    with np.errstate(divide='ignore'):
        ratio = np.log(red / (green + np.float32(RATIO_EPSILON)))

    return ratio.astype(np.float32, copy=False)


def rank_threshold(ratio_field: np.ndarray, threshold_fraction: float) -> float:
    """
    Ratio value at rank floor(N * (1 - threshold_fraction)) of the sorted field.

    Pixels strictly above this value make up at most the top
    threshold_fraction of the frame.
    """
    threshold_fraction = validate_threshold_fraction(threshold_fraction)

    values = np.sort(ratio_field, axis=None)
    if values.size == 0:
        raise InvalidInput("Ratio field is empty")

    cutoff = int(np.floor(values.size * (1.0 - threshold_fraction)))
    cutoff = min(cutoff, values.size - 1)

    return float(values[cutoff])


def label_components(mask: np.ndarray) -> Tuple[np.ndarray, Dict[int, int]]:
    """
    Label 8-connected foreground components.

    Labels follow raster order of each component's first pixel, so the
    lowest label belongs to the component reached first scanning rows
    top to bottom, left to right.

    Args:
        mask: Binary mask (H x W), non-zero = foreground

    Returns:
        Tuple of (int32 label grid with 0 = background, {label: pixel count})
    """
    binary = (np.asarray(mask) != 0).astype(np.uint8)

    num_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
        binary, connectivity=8, ltype=cv2.CV_32S
    )

    if num_labels <= 1:
        return labels, {}

    # OpenCV's block-based labelling does not promise raster order; renumber
    found, first_index = np.unique(labels, return_index=True)
    foreground = found != 0
    old_labels = found[foreground][np.argsort(first_index[foreground], kind='stable')]

    remap = np.zeros(num_labels, dtype=np.int32)
    remap[old_labels] = np.arange(1, len(old_labels) + 1, dtype=np.int32)

    sizes = {
        new_label: int(stats[old_label, cv2.CC_STAT_AREA])
        for new_label, old_label in enumerate(old_labels, start=1)
    }

    return remap[labels], sizes


def select_largest_component(sizes: Dict[int, int]) -> int:
    """
    Pick the label with the greatest pixel count.

    Ties go to the lowest label. Returns 0 when there are no components.
    """
    best_label = 0
    best_size = 0

    for label in sorted(sizes):
        if sizes[label] > best_size:
            best_label = label
            best_size = sizes[label]

    return best_label


class LipSegmenter:
    """
    Converts an RGB frame into a binary mask of the lips.

    Holds only its default threshold fraction. Every call works on its
    own copies, so one instance can serve several threads.
    """

    def __init__(self, threshold_fraction: float = DEFAULT_THRESHOLD_FRACTION):
        """
        Initialize lip segmenter.

        Args:
            threshold_fraction: Fraction of pixels, by ratio rank, that pass the
                color test (lower = stricter, smaller lip region)
        """
        self.threshold_fraction = validate_threshold_fraction(threshold_fraction)

    def analyze(self, frame: np.ndarray, threshold_fraction: Optional[float] = None) -> SegmentationResult:
        """
        Run the full segmentation and keep every intermediate grid.

        Args:
            frame: RGB image (H x W x C)
            threshold_fraction: Overrides the instance default when given

        Returns:
            SegmentationResult whose mask is the selected lip region.
        """
        if threshold_fraction is None:
            threshold_fraction = self.threshold_fraction
        threshold_fraction = validate_threshold_fraction(threshold_fraction)

        ratio_field = compute_ratio_field(frame)
        threshold = rank_threshold(ratio_field, threshold_fraction)
        candidate_mask = ratio_field > threshold

        labels, sizes = label_components(candidate_mask)
        selected = select_largest_component(sizes)

        if selected:
            mask = labels == selected
        else:
            mask = np.zeros(candidate_mask.shape, dtype=bool)

        logger.debug(
            f"Ratio threshold {threshold:.4f}: {int(candidate_mask.sum())} candidate pixels, "
            f"{len(sizes)} components, kept label {selected} ({sizes.get(selected, 0)} px)"
        )

        return SegmentationResult(
            ratio_field=ratio_field,
            threshold=threshold,
            candidate_mask=candidate_mask,
            labels=labels,
            component_sizes=sizes,
            selected_label=selected,
            mask=mask,
        )

    def segment(self, frame: np.ndarray, threshold_fraction: Optional[float] = None) -> np.ndarray:
        """
        Extract the lips as a binary mask.

        Args:
            frame: RGB image (H x W x C)
            threshold_fraction: Overrides the instance default when given

        Returns:
            Boolean mask (H x W), True only on the largest lip-colored region.
            All False when no pixel passes the threshold.
        """
        return self.analyze(frame, threshold_fraction).mask
