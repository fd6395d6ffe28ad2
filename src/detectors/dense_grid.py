"""
Dense grid keypoint detector.

Places keypoints on a regular lattice instead of searching for corners or
scale-space extrema.  Points are emitted column by column (x outer, y inner)
starting ``bound`` pixels in from the top-left corner, and a point is kept
only while it stays more than ``bound`` pixels away from the far edges.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from src.utils.errors import DegenerateGeometryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Keypoint:
    """A sample location with its patch diameter and orientation."""

    x: float
    y: float
    size: float
    angle: float = 0.0


def dense_grid_keypoints(shape: Tuple[int, ...], scale: float, step: int,
                         bound: int, levels: int = 1, scale_mul: float = 0.1,
                         vary_xy_step: bool = True,
                         vary_img_bound: bool = False) -> List[Keypoint]:
    """Generate keypoints on a regular grid.

    Parameters
    ----------
    shape : tuple
        Image shape; only ``(rows, cols)`` are used.
    scale : float
        Keypoint size at the first level.
    step : int
        Grid spacing in pixels at the first level.
    bound : int
        Distance of the first sample from the top and left edges, and the
        minimum clearance kept from the bottom and right edges.
    levels : int
        Number of scale levels.
    scale_mul : float
        Factor applied to the scale between levels.
    vary_xy_step, vary_img_bound : bool
        Whether step and bound are rescaled with the scale between levels.

    Returns
    -------
    list of Keypoint
        Keypoints in column-major order, angle 0.
    """
    if step <= 0:
        raise DegenerateGeometryError(f"grid step must be positive, got {step}",
                                      {"step": step})

    rows, cols = shape[:2]
    cur_scale = float(scale)
    cur_step = int(step)
    cur_bound = int(bound)
    keypoints = []

    for level in range(levels):
        xs = np.arange(cur_bound, cols - cur_bound, cur_step)
        ys = np.arange(cur_bound, rows - cur_bound, cur_step)
        for x in xs:
            for y in ys:
                keypoints.append(Keypoint(float(x), float(y), cur_scale))

        cur_scale = cur_scale * scale_mul
        if vary_xy_step:
            cur_step = int(cur_step * scale_mul + 0.5)
        if vary_img_bound:
            cur_bound = int(cur_bound * scale_mul + 0.5)
        if cur_step <= 0 and level + 1 < levels:
            logger.debug("grid step vanished after level %d; stopping", level)
            break

    return keypoints
