"""
Text dumps of intermediate grids for offline inspection.

Each grid is written row-major, one row per line, values separated by a
single space. The files are never read back by the tracker.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np

from .vision.lip_segmenter import SegmentationResult

logger = logging.getLogger(__name__)


def _format_for(grid: np.ndarray) -> str:
    if grid.dtype == bool:
        return '%d'
    if np.issubdtype(grid.dtype, np.integer):
        return '%d'
    return '%g'


def dump_matrix(grid: np.ndarray, path: Union[str, Path]) -> Path:
    """
    Write a 2-D grid to a whitespace-separated text file.

    Boolean grids are written as 0/255 like an 8-bit mask image.

    Returns:
        Path of the written file.
    """
    grid = np.asarray(grid)
    if grid.ndim == 1:
        grid = grid.reshape(1, -1)
    if grid.ndim != 2:
        raise ValueError(f"Can only dump 2-D grids, got shape {grid.shape}")

    if grid.dtype == bool:
        grid = grid.astype(np.uint8) * 255

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(path, grid, fmt=_format_for(grid), delimiter=' ')
    return path


def component_size_table(sizes: Dict[int, int]) -> np.ndarray:
    """Two-column (label, pixel count) table, one row per component."""
    if not sizes:
        return np.zeros((0, 2), dtype=np.int64)
    return np.array(sorted(sizes.items()), dtype=np.int64)


class MatrixDumper:
    """Writes the grids of a SegmentationResult to an output directory."""

    def __init__(self, output_dir: Union[str, Path] = "output/diagnostics", enabled: bool = True):
        self.output_dir = Path(output_dir)
        self.enabled = enabled

    def _path(self, name: str, frame_index: Optional[int]) -> Path:
        if frame_index is None:
            return self.output_dir / f"{name}.txt"
        return self.output_dir / f"frame{frame_index:05d}_{name}.txt"

    def dump(self, result: SegmentationResult, frame_index: Optional[int] = None) -> Dict[str, Path]:
        """
        Dump ratio field, masks and component labels.

        Returns:
            Mapping of grid name to written file (empty when disabled).
        """
        if not self.enabled:
            return {}

        grids = {
            'ratio_field': result.ratio_field,
            'candidate_mask': result.candidate_mask,
            'component_labels': result.labels,
            'component_sizes': component_size_table(result.component_sizes),
            'lips_mask': result.mask,
        }

        written = {}
        for name, grid in grids.items():
            written[name] = dump_matrix(grid, self._path(name, frame_index))

        logger.info(f"Wrote {len(written)} diagnostic grids to {self.output_dir}")
        return written
