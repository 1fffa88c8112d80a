"""Video input for the lip tracker."""

from .frame_source import VideoFrameSource

__all__ = ['VideoFrameSource']
