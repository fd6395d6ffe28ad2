"""
Grid-parameter solver for dense sampling.

Given the image size and the number of features wanted, derives the spacing
of a regular sampling grid, the patch scale of each sample and a single
boundary offset that centres the grid on the image.  The offset is shared by
both axes and is only an analytic estimate: the sampling loop corrects it
until the detector returns exactly the requested count.
"""

import logging
import math
from dataclasses import dataclass

from src.utils.errors import DegenerateGeometryError, InfeasibleDensityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridParameters:
    """Sampling grid description.

    Attributes
    ----------
    interval : float
        Grid spacing in pixels.
    patch_scale : float
        Keypoint size handed to the detector (half the interval).
    offset : float
        Shift of the first sample from the top-left corner, applied to
        both x and y.
    """

    interval: float
    patch_scale: float
    offset: float


def solve_grid(width: int, height: int, feature_num: int) -> GridParameters:
    """Compute grid parameters that place ``feature_num`` samples on the image.

    Parameters
    ----------
    width, height : int
        Working image size in pixels.
    feature_num : int
        Number of samples requested, ``1 <= feature_num <= width * height``.

    Returns
    -------
    GridParameters
        Interval, patch scale and offset.  The result depends only on the
        arguments.

    Raises
    ------
    DegenerateGeometryError
        If a dimension or the derived interval is not positive.
    InfeasibleDensityError
        If ``feature_num`` is outside the valid range.
    """
    if width <= 0 or height <= 0:
        raise DegenerateGeometryError(
            f"image dimensions must be positive, got {width}x{height}",
            {"width": width, "height": height},
        )
    if feature_num <= 0 or feature_num > width * height:
        raise InfeasibleDensityError(
            f"cannot place {feature_num} samples on a {width}x{height} image",
            {"width": width, "height": height, "feature_num": feature_num},
        )

    # 1. Spacing that tiles the image with feature_num square cells
    interval = math.sqrt((width * height) / feature_num)
    if interval <= 0:
        raise DegenerateGeometryError(f"non-positive interval {interval}",
                                      {"interval": interval})

    # 2. Patch scale
    patch_scale = interval / 2.0

    # 3. Full grid steps that fit along each axis
    step = math.floor(interval)
    sample_cols = width // step
    sample_rows = height // step

    # 4. Leftover margins
    odd_cols, odd_rows = _margins(width, height, step, sample_cols, sample_rows)

    # 5. One offset for both axes, from the margin area
    offset = math.sqrt((odd_cols * odd_rows) / 4.0)

    # 6. Re-centre square grids
    if width == height:
        offset = _centre_square(width, feature_num, step, offset)

    logger.debug("grid %dx%d n=%d: interval=%.3f scale=%.3f margins=(%d, %d) "
                 "offset=%.3f", width, height, feature_num, interval,
                 patch_scale, odd_cols, odd_rows, offset)
    return GridParameters(interval=interval, patch_scale=patch_scale,
                          offset=offset)


def _margins(width: int, height: int, step: int,
             sample_cols: int, sample_rows: int):
    """Pixels left over on each axis after laying out the grid steps.

    An axis whose extent divides evenly by its sample count keeps one step
    fewer, so its margin never collapses to zero.  An axis with no full step
    is never divisible and keeps its whole extent as margin.
    """
    cols_divisible = sample_cols > 0 and width % sample_cols == 0
    rows_divisible = sample_rows > 0 and height % sample_rows == 0

    if cols_divisible and rows_divisible:
        odd_cols = width - (sample_cols - 1) * step
        odd_rows = height - (sample_rows - 1) * step
    elif cols_divisible:
        odd_cols = width - (sample_cols - 1) * step
        odd_rows = height - sample_rows * step
    elif rows_divisible:
        odd_cols = width - sample_cols * step
        odd_rows = height - (sample_rows - 1) * step
    else:
        odd_cols = width - sample_cols * step
        odd_rows = height - sample_rows * step
    return odd_cols, odd_rows


def _centre_square(side: int, feature_num: int, step: int,
                   offset: float) -> float:
    residual = side - 2 * math.floor(offset) - step * (math.sqrt(feature_num) - 1)
    if residual == 0:
        # keep the last row/column off the image boundary
        offset -= 1
    else:
        offset += residual / 2.0
    return max(offset, 0.0)
