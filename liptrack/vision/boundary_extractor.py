"""
Boundary point extraction from a binary lips mask.

Scans a subset of columns and records where each column enters the
foreground and where it finally leaves it, giving an upper and a lower lip edge.
"""

import cv2
import numpy as np
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple
import logging

from ..errors import InvalidInput, InvalidParameter

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_SAMPLE_COUNT = 50

Point = Tuple[int, int]


@dataclass
class BoundaryCurve:
    """Ordered lip boundary, drawable as a single connected loop."""
    upper: List[Point] = field(default_factory=list)  # Increasing x
    lower: List[Point] = field(default_factory=list)  # Decreasing x

    @property
    def points(self) -> List[Point]:
        return self.upper + self.lower

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.upper) + len(self.lower)

    def to_array(self) -> np.ndarray:
        """Points as an (N, 2) int32 array for OpenCV drawing."""
        return np.array(self.points, dtype=np.int32).reshape(-1, 2)


def validate_column_sample_count(column_sample_count: int) -> int:
    """Return column_sample_count, or raise InvalidParameter."""
    if isinstance(column_sample_count, bool) or not isinstance(column_sample_count, (int, np.integer)):
        raise InvalidParameter(f"column_sample_count must be an integer, got {column_sample_count!r}")
    if column_sample_count < 1:
        raise InvalidParameter(f"column_sample_count must be >= 1, got {column_sample_count}")
    return int(column_sample_count)


def column_stride(width: int, column_sample_count: int) -> int:
    """Distance between scanned columns."""
    return max(1, width // column_sample_count)


class BoundaryExtractor:
    """
    Converts a lips mask into upper and lower boundary points.

    Every column with foreground yields one upper point (first foreground
    row) and one lower point (last row of the last foreground band, which
    is the bottom row when the band reaches the edge).
    Background gaps inside the lips, such as visible teeth, are skipped.
    """

    def __init__(self, column_sample_count: int = DEFAULT_COLUMN_SAMPLE_COUNT):
        """
        Initialize boundary extractor.

        Args:
            column_sample_count: Approximate number of columns to scan; the
                stride between columns is width // column_sample_count
        """
        self.column_sample_count = validate_column_sample_count(column_sample_count)

    def extract(self, mask: np.ndarray, column_sample_count: int = None) -> BoundaryCurve:
        """
        Extract boundary points from a binary mask.

        Args:
            mask: Binary image (H x W), non-zero = lips
            column_sample_count: Overrides the instance default when given

        Returns:
            BoundaryCurve with upper points left to right followed by
            lower points right to left. Empty if the mask has no foreground.
        """
        if column_sample_count is None:
            column_sample_count = self.column_sample_count
        column_sample_count = validate_column_sample_count(column_sample_count)

        if not isinstance(mask, np.ndarray) or mask.ndim != 2:
            raise InvalidInput(f"Mask must be a 2-D numpy array, got {getattr(mask, 'shape', type(mask))}")
        height, width = mask.shape
        if height == 0 or width == 0:
            raise InvalidInput(f"Mask has no pixels: shape {mask.shape}")

        foreground = mask != 0
        stride = column_stride(width, column_sample_count)

        curve = BoundaryCurve()
        for col_idx in range(0, width, stride):
            rows = np.flatnonzero(foreground[:, col_idx])
            if rows.size == 0:
                continue

            # Edge rows of the first and the last foreground band; background
            # gaps in between are skipped. A band running off the bottom ends at height - 1.
            upper_row = int(rows[0])
            lower_row = int(rows[-1])

            curve.upper.append((col_idx, upper_row))
            curve.lower.insert(0, (col_idx, lower_row))

        logger.debug(f"Extracted {len(curve)} boundary points (stride={stride})")
        return curve

    def visualize(
        self,
        image: np.ndarray,
        curve: BoundaryCurve,
        color: Sequence[int] = (0, 255, 0),
        marker_radius: int = 2
    ) -> np.ndarray:
        """
        Draw a boundary curve as a connected line with point markers.

        Args:
            image: Image to draw on (not modified)
            curve: Curve from extract()
            color: Line color in the image's channel order
            marker_radius: Circle radius for each point (0 = no markers)

        Returns:
            Copy of the image with the curve drawn.
        """
        canvas = image.copy()
        if len(curve) == 0:
            return canvas

        color = tuple(int(c) for c in color)
        points = curve.to_array()

        cv2.polylines(canvas, [points.reshape(-1, 1, 2)], False, color, 1)

        if marker_radius > 0:
            for x, y in points:
                cv2.circle(canvas, (int(x), int(y)), marker_radius, color, 1)

        return canvas
