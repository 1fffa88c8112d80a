"""
Lip Tracking Viewer - Main Entry Point

Opens a video and shows, for the selected frame:
1. The frame with the detected lip boundary drawn over it
2. The binary lips mask the boundary was extracted from

A trackbar selects the frame. Every frame is analyzed on its own, so
jumping around the video gives the same result as stepping through it.

Usage:
    liptrack video.avi
    liptrack video.avi --frame 120 --save output/frame120.png
    python -m liptrack.main video.avi --dump
"""

import os
import sys
import logging
import argparse
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

import cv2
import numpy as np

from liptrack.config import load_config, validate_config, Config
from liptrack.pipeline import LipTrackingPipeline, FrameAnalysis
from liptrack.video.frame_source import VideoFrameSource

logger = logging.getLogger(__name__)

FRAME_WINDOW = "Lip Tracking"
MASK_WINDOW = "Lips Mask"
TRACKBAR = "Frame"


class LipTrackingViewer:
    """
    Connects a video, the tracking pipeline and the display windows.

    The viewer owns the video and windows; the pipeline it calls holds no
    per-frame state.
    """

    def __init__(self, config: Config, pipeline: Optional[LipTrackingPipeline] = None):
        self.config = config
        self.pipeline = pipeline or LipTrackingPipeline.from_config(config)
        self.source = VideoFrameSource(config.video.width, config.video.height)
        self.current_index = 0
        self._windows_created = False

    def open(self, video_path: str) -> bool:
        """
        Open a video for tracking.

        Returns:
            True if the video can be read.
        """
        if not self.source.open(video_path):
            return False

        if self.source.frame_count <= 0:
            logger.error(f"Video has no frames: {video_path}")
            self.source.release()
            return False

        return True

    def analyze(self, index: int) -> Optional[tuple]:
        """
        Read and analyze one frame.

        Returns:
            Tuple of (RGB frame, FrameAnalysis), or None if the frame cannot be read.
        """
        frame = self.source.get_frame(index)
        if frame is None:
            return None

        self.current_index = index
        return frame, self.pipeline.process(frame, frame_index=index)

    def render(self, frame: np.ndarray, analysis: FrameAnalysis) -> tuple:
        """
        Build the display images for an analyzed frame.

        Returns:
            Tuple of (BGR overlay at display size, grayscale mask at display size).
        """
        display = self.config.display

        overlay = self.pipeline.extractor.visualize(
            frame, analysis.curve, color=display.curve_color, marker_radius=display.marker_radius
        )
        overlay = cv2.cvtColor(overlay, cv2.COLOR_RGB2BGR)
        overlay = cv2.resize(overlay, (display.frame_width, display.frame_height), interpolation=cv2.INTER_NEAREST)

        mask_img = analysis.mask.astype(np.uint8) * 255
        mask_img = cv2.resize(mask_img, (display.mask_width, display.mask_height), interpolation=cv2.INTER_NEAREST)

        return overlay, mask_img

    def on_frame_changed(self, value: int):
        """Trackbar callback: analyze and show the selected frame."""
        result = self.analyze(value)
        if result is None:
            return

        frame, analysis = result
        overlay, mask_img = self.render(frame, analysis)

        cv2.imshow(FRAME_WINDOW, overlay)
        cv2.imshow(MASK_WINDOW, mask_img)

    def save(self, index: int, output_path: str) -> bool:
        """
        Analyze one frame and write the overlay and mask images.

        The mask goes next to the overlay with a _mask suffix.

        Returns:
            True if both images were written.
        """
        result = self.analyze(index)
        if result is None:
            return False

        frame, analysis = result
        overlay, mask_img = self.render(frame, analysis)

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        mask_path = output.with_name(f"{output.stem}_mask{output.suffix}")

        if not cv2.imwrite(str(output), overlay) or not cv2.imwrite(str(mask_path), mask_img):
            logger.error(f"Failed to write images to {output.parent}")
            return False

        logger.info(f"Saved frame {index}: {len(analysis.curve)} boundary points -> {output}, {mask_path}")
        return True

    def run(self, start_index: int = 0):
        """Show the interactive viewer until 'q' or Esc is pressed."""
        cv2.namedWindow(FRAME_WINDOW)
        cv2.namedWindow(MASK_WINDOW)
        self._windows_created = True

        last_index = max(0, self.source.frame_count - 1)
        start_index = min(max(start_index, 0), last_index)
        cv2.createTrackbar(TRACKBAR, FRAME_WINDOW, start_index, last_index, self.on_frame_changed)

        # Creating the trackbar does not fire the callback
        self.on_frame_changed(start_index)

        logger.info("Move the Frame slider to browse, press 'q' to quit")
        while True:
            key = cv2.waitKey(30) & 0xFF
            if key in (ord('q'), 27):
                break
            if cv2.getWindowProperty(FRAME_WINDOW, cv2.WND_PROP_VISIBLE) < 1:
                break

    def shutdown(self):
        """Release the video and close windows."""
        if self._windows_created:
            cv2.destroyAllWindows()
            self._windows_created = False
        self.source.release()


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def main(argv=None):
    """Main entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Lip boundary tracking viewer"
    )
    parser.add_argument(
        'video',
        help='Path to the video file'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=os.environ.get('LIPTRACK_CONFIG'),
        help='Path to configuration file (default: $LIPTRACK_CONFIG or config/settings.yaml)'
    )
    parser.add_argument(
        '--frame',
        type=int,
        default=0,
        help='Frame index to show first, or to save with --save'
    )
    parser.add_argument(
        '--save',
        type=str,
        default=None,
        help='Write the overlay for --frame to this image and exit (no window)'
    )
    parser.add_argument(
        '--dump',
        action='store_true',
        help='Dump intermediate grids as text files'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        help='Logging level (default: $LIPTRACK_LOG_LEVEL or system.log_level)'
    )
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.dump:
        config.diagnostics.enabled = True

    setup_logging(args.log_level or os.environ.get('LIPTRACK_LOG_LEVEL') or config.system.log_level)

    errors = validate_config(config)
    if errors:
        logger.error("Configuration errors:")
        for error in errors:
            logger.error(f"  - {error}")
        return 1

    viewer = LipTrackingViewer(config)

    try:
        if not viewer.open(args.video):
            logger.error(f"The video cannot be opened: {args.video}")
            return 1

        if args.save:
            return 0 if viewer.save(args.frame, args.save) else 1

        viewer.run(args.frame)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    finally:
        viewer.shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
