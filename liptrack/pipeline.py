"""
Per-frame lip tracking pipeline: segment, then extract the boundary.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import Config
from .diagnostics import MatrixDumper
from .vision.boundary_extractor import BoundaryCurve, BoundaryExtractor
from .vision.lip_segmenter import LipSegmenter, SegmentationResult

logger = logging.getLogger(__name__)


@dataclass
class FrameAnalysis:
    """Everything produced for one frame."""
    mask: np.ndarray
    curve: BoundaryCurve
    segmentation: SegmentationResult


class LipTrackingPipeline:
    """
    Runs LipSegmenter and BoundaryExtractor on a single frame.

    Nothing is carried from one frame to the next, so frames can be
    processed in any order, or concurrently.
    """

    def __init__(
        self,
        segmenter: Optional[LipSegmenter] = None,
        extractor: Optional[BoundaryExtractor] = None,
        dumper: Optional[MatrixDumper] = None
    ):
        self.segmenter = segmenter or LipSegmenter()
        self.extractor = extractor or BoundaryExtractor()
        self.dumper = dumper

    @classmethod
    def from_config(cls, config: Config) -> "LipTrackingPipeline":
        """Build a pipeline from loaded configuration."""
        dumper = None
        if config.diagnostics.enabled:
            dumper = MatrixDumper(config.diagnostics.output_dir)

        return cls(
            segmenter=LipSegmenter(config.segmentation.threshold_fraction),
            extractor=BoundaryExtractor(config.boundary.column_sample_count),
            dumper=dumper,
        )

    def process(self, frame: np.ndarray, frame_index: Optional[int] = None) -> FrameAnalysis:
        """
        Extract the lips mask and boundary curve from an RGB frame.

        Args:
            frame: RGB image at the processing resolution
            frame_index: Used only to name diagnostic dumps

        Returns:
            FrameAnalysis for this frame.
        """
        segmentation = self.segmenter.analyze(frame)
        curve = self.extractor.extract(segmentation.mask)

        if self.dumper is not None:
            self.dumper.dump(segmentation, frame_index)

        logger.debug(
            f"Frame {frame_index if frame_index is not None else '-'}: "
            f"{int(segmentation.mask.sum())} lip pixels, {len(curve)} boundary points"
        )

        return FrameAnalysis(mask=segmentation.mask, curve=curve, segmentation=segmentation)
