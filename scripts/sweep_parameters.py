#!/usr/bin/env python3
"""
Parameter sweep for lip segmentation and boundary extraction.

Runs one video frame through the tracker with a range of values for one
parameter and saves a labeled grid of the results, to help pick settings.

Usage:
    python scripts/sweep_parameters.py data/speaker.avi
    python scripts/sweep_parameters.py data/speaker.avi --frame 40 --sweep column_sample_count
    python scripts/sweep_parameters.py data/speaker.avi --output-dir output/sweeps
"""

import sys
import argparse
from pathlib import Path
from typing import Any, Dict, List
import logging

import cv2
import numpy as np

from liptrack.config import load_config
from liptrack.video.frame_source import VideoFrameSource
from liptrack.vision.boundary_extractor import BoundaryExtractor
from liptrack.vision.lip_segmenter import LipSegmenter

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


# Parameter sweep definitions
PARAMETER_SWEEPS = {
    "threshold_fraction": [0.05, 0.1, 0.15, 0.18, 0.25, 0.35],
    "column_sample_count": [10, 20, 35, 50, 80, 160],
}


def visualize_result(frame: np.ndarray, params: Dict[str, Any], title: str) -> np.ndarray:
    """Run the tracker with params and draw the mask and curve side by side."""
    segmenter = LipSegmenter(params["threshold_fraction"])
    extractor = BoundaryExtractor(params["column_sample_count"])

    mask = segmenter.segment(frame)
    curve = extractor.extract(mask)

    overlay = cv2.cvtColor(extractor.visualize(frame, curve), cv2.COLOR_RGB2BGR)
    mask_img = cv2.cvtColor(mask.astype(np.uint8) * 255, cv2.COLOR_GRAY2BGR)
    viz = np.hstack([overlay, mask_img])

    lines = [title, f"Lip px: {int(mask.sum())} | Points: {len(curve)}"]
    y_offset = 16
    for line in lines:
        cv2.putText(viz, line, (6, y_offset), cv2.FONT_HERSHEY_SIMPLEX, 0.4, (0, 0, 0), 2)
        cv2.putText(viz, line, (6, y_offset), cv2.FONT_HERSHEY_SIMPLEX, 0.4, (255, 255, 255), 1)
        y_offset += 14

    return viz


def create_grid(images: List[np.ndarray], cols: int = 2) -> np.ndarray:
    """Tile equally sized images into a grid."""
    h, w = images[0].shape[:2]
    rows = (len(images) + cols - 1) // cols
    padding = 4

    grid = np.full((rows * (h + padding) + padding, cols * (w + padding) + padding, 3), 240, dtype=np.uint8)

    for i, img in enumerate(images):
        y1 = (i // cols) * (h + padding) + padding
        x1 = (i % cols) * (w + padding) + padding
        grid[y1:y1 + h, x1:x1 + w] = img

    return grid


def run_parameter_sweep(frame: np.ndarray, param_name: str, base_params: Dict[str, Any], output_dir: Path) -> Path:
    """Sweep one parameter and save the comparison grid."""
    values = PARAMETER_SWEEPS[param_name]
    logger.info(f"Sweeping {param_name}: {values}")

    panels = []
    for val in values:
        params = dict(base_params)
        params[param_name] = val
        panels.append(visualize_result(frame, params, f"{param_name}={val}"))

    grid_path = output_dir / f"sweep_{param_name}.png"
    cv2.imwrite(str(grid_path), create_grid(panels))
    logger.info(f"Saved: {grid_path}")
    return grid_path


def main():
    parser = argparse.ArgumentParser(description="Sweep lip tracking parameters on one frame")
    parser.add_argument('video', help='Path to the video file')
    parser.add_argument('--frame', type=int, default=0, help='Frame index (default: 0)')
    parser.add_argument('--sweep', choices=sorted(PARAMETER_SWEEPS), default='threshold_fraction',
                        help='Parameter to sweep (default: threshold_fraction)')
    parser.add_argument('--config', default=None, help='Path to configuration file')
    parser.add_argument('--output-dir', default=None, help='Where to write the grid (default: system.output_dir)')
    args = parser.parse_args()

    config = load_config(args.config)

    source = VideoFrameSource(config.video.width, config.video.height)
    if not source.open(args.video):
        return 1

    frame = source.get_frame(args.frame)
    source.release()
    if frame is None:
        return 1

    output_dir = Path(args.output_dir or config.system.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    base_params = {
        "threshold_fraction": config.segmentation.threshold_fraction,
        "column_sample_count": config.boundary.column_sample_count,
    }
    run_parameter_sweep(frame, args.sweep, base_params, output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
