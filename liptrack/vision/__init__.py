"""Vision processing modules for lip segmentation and boundary extraction."""

from .lip_segmenter import LipSegmenter, SegmentationResult
from .boundary_extractor import BoundaryExtractor, BoundaryCurve

__all__ = ['LipSegmenter', 'SegmentationResult', 'BoundaryExtractor', 'BoundaryCurve']
