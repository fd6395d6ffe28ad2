"""
Offset correction loop for dense sampling.

The solver's offset is an estimate; integer rounding of the interval and
offset usually leaves the detector a few points short or over.  The loop
nudges the offset one pixel at a time (down for more points, up for fewer)
until the detector returns exactly the requested count.
"""

import logging
import math
from dataclasses import replace
from typing import List, Optional, Tuple

import numpy as np

from src.detectors.dense_grid import Keypoint
from src.sampling.grid_solver import GridParameters
from src.utils.errors import ConvergenceTimeoutError, UnsatisfiableGridError

logger = logging.getLogger(__name__)

DEFAULT_EXTRA_ITERATIONS = 16


def iteration_cap(interval: float,
                  extra: int = DEFAULT_EXTRA_ITERATIONS) -> int:
    """Maximum number of detector calls for a grid of the given interval."""
    return int(2 * interval) + extra


def extract_exactly_with_params(engine, image: np.ndarray,
                                params: GridParameters, feature_num: int,
                                max_iterations: Optional[int] = None
                                ) -> Tuple[List[Keypoint], GridParameters]:
    """Run the grid detector until it yields exactly ``feature_num`` keypoints.

    Parameters
    ----------
    engine
        Object exposing ``detect_grid_keypoints(image, scale, interval, offset)``.
    image : np.ndarray
        Working image passed through to the detector.
    params : GridParameters
        Solver output; only the offset is changed by the search.
    feature_num : int
        Exact number of keypoints required.
    max_iterations : int, optional
        Detector call budget; defaults to :func:`iteration_cap`.

    Returns
    -------
    keypoints : list of Keypoint
        Exactly ``feature_num`` keypoints.
    params : GridParameters
        Parameters carrying the offset the search converged to.

    Raises
    ------
    UnsatisfiableGridError
        If the offset must drop below zero.
    ConvergenceTimeoutError
        If the budget is spent without an exact match.
    """
    if max_iterations is None:
        max_iterations = iteration_cap(params.interval)

    scale = math.floor(params.patch_scale)
    interval = math.floor(params.interval)
    offset = params.offset
    count = None

    for attempt in range(1, max_iterations + 1):
        if offset < 0:
            raise UnsatisfiableGridError(
                f"no non-negative offset yields {feature_num} keypoints "
                f"(last count {count})",
                {"feature_num": feature_num, "last_count": count,
                 "attempts": attempt - 1},
            )

        keypoints = engine.detect_grid_keypoints(image, scale, interval,
                                                 math.floor(offset))
        count = len(keypoints)
        logger.debug("attempt %d: offset=%.3f -> %d keypoints (want %d)",
                     attempt, offset, count, feature_num)

        if count == feature_num:
            logger.info("grid converged after %d attempt(s) at offset %.3f",
                        attempt, offset)
            return keypoints, replace(params, offset=offset)
        if count < feature_num:
            offset -= 1
        else:
            offset += 1

    raise ConvergenceTimeoutError(
        f"offset search did not reach {feature_num} keypoints within "
        f"{max_iterations} attempts (last count {count})",
        {"feature_num": feature_num, "last_count": count,
         "max_iterations": max_iterations},
    )


def extract_exactly(engine, image: np.ndarray, params: GridParameters,
                    feature_num: int,
                    max_iterations: Optional[int] = None) -> List[Keypoint]:
    """Keypoints-only form of :func:`extract_exactly_with_params`."""
    keypoints, _ = extract_exactly_with_params(engine, image, params,
                                               feature_num, max_iterations)
    return keypoints
