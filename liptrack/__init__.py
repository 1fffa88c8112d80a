"""Lip Boundary Tracking.

Extracts the contour of a speaker's lips from video frames:
- LipSegmenter: isolates lip-colored pixels into a binary mask
- BoundaryExtractor: turns the mask into an ordered upper/lower point loop
"""

__version__ = "0.1.0"
