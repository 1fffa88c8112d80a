"""
Random-access frame reader for video files.
"""

import cv2
import numpy as np
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class VideoFrameSource:
    """
    Reads frames from a video file by index.

    Frames come back as RGB at the processing resolution, so they can be
    passed straight to LipSegmenter.
    """

    def __init__(self, width: int = 320, height: int = 240):
        """
        Initialize frame source.

        Args:
            width: Width frames are resized to
            height: Height frames are resized to
        """
        self.width = width
        self.height = height
        self.path: Optional[str] = None
        self.cap: Optional[cv2.VideoCapture] = None
        self._frame_count = 0
        self._is_open = False

    def open(self, path: str) -> bool:
        """
        Open a video file, releasing any previously opened one.

        Returns:
            True if the video opened successfully, False otherwise.
        """
        self.release()

        try:
            cap = cv2.VideoCapture(str(path))
            if not cap.isOpened():
                logger.error(f"The video cannot be opened: {path}")
                cap.release()
                return False

            self.cap = cap
            self.path = str(path)
            self._frame_count = max(0, int(cap.get(cv2.CAP_PROP_FRAME_COUNT)))
            self._is_open = True
            logger.info(f"Opened video {path}: {self._frame_count} frames")
            return True

        except cv2.error as e:
            logger.error(f"Error opening video {path}: {e}")
            return False

    def is_open(self) -> bool:
        """Check if a video is open and readable."""
        return self._is_open and self.cap is not None and self.cap.isOpened()

    @property
    def frame_count(self) -> int:
        """Total number of frames reported by the container (0 if closed)."""
        return self._frame_count if self.is_open() else 0

    def get_frame(self, index: int) -> Optional[np.ndarray]:
        """
        Read one frame by index.

        Args:
            index: Zero-based frame index

        Returns:
            RGB image (height x width x 3) as uint8, or None if the index is out
            of range or the frame cannot be decoded.
        """
        if not self.is_open():
            logger.warning("No video open for frame retrieval")
            return None

        if not 0 <= index < self._frame_count:
            logger.warning(f"Frame index {index} out of range (0..{self._frame_count - 1})")
            return None

        self.cap.set(cv2.CAP_PROP_POS_FRAMES, index)
        ret, frame = self.cap.read()
        if not ret or frame is None:
            logger.warning(f"Failed to read frame {index}")
            return None

        return self.prepare(frame)

    def prepare(self, frame: np.ndarray) -> np.ndarray:
        """Resize a decoded BGR frame to the processing resolution and convert to RGB."""
        resized = cv2.resize(frame, (self.width, self.height), interpolation=cv2.INTER_AREA)
        return cv2.cvtColor(resized, cv2.COLOR_BGR2RGB)

    def get_frame_dimensions(self) -> Tuple[int, int]:
        """
        Get the native dimensions of the open video.

        Returns:
            Tuple of (width, height)
        """
        if self.cap is not None:
            w = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
            h = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
            return (w, h)
        return (self.width, self.height)

    def release(self):
        """Release video resources."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            self._is_open = False
            self._frame_count = 0
            logger.info(f"Released video {self.path}")

    def __del__(self):
        """Cleanup on destruction."""
        self.release()
