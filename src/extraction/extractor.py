"""
Per-image SIFT extraction driver.

Loads one image, optionally stretches it to a square, samples a fixed number
of keypoints on a dense grid, computes their descriptors and writes the
results.  Output methods refuse to run until extraction has completed, and a
failed extraction leaves no partial result behind.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from src.detectors.dense_grid import Keypoint
from src.sampling.grid_solver import GridParameters, solve_grid
from src.sampling.normalizer import invert, prepare
from src.sampling.sampling_loop import (DEFAULT_EXTRA_ITERATIONS,
                                        extract_exactly_with_params,
                                        iteration_cap)
from src.utils.errors import (ExtractionError, NotExtractedError,
                              SamplingNotImplementedError)
from src.utils.feature_io import write_features
from src.utils.image_io import load_image, to_grayscale
from src.utils.visualization import save_keypoint_overlay

logger = logging.getLogger(__name__)


class SamplingMode(enum.IntEnum):
    DOG = 0
    DENSE = 1


@dataclass(frozen=True)
class ExtractionResult:
    """Keypoints paired row-for-row with their descriptors."""

    keypoints: Tuple[Keypoint, ...]
    descriptors: np.ndarray
    params: Optional[GridParameters] = None

    def __post_init__(self):
        if len(self.keypoints) != self.descriptors.shape[0]:
            raise ExtractionError(
                f"{len(self.keypoints)} keypoints but "
                f"{self.descriptors.shape[0]} descriptor rows")


class SiftExtractor:
    """Extract a fixed number of SIFT features from one image.

    Parameters
    ----------
    image_path : str
        Image to process.
    engine
        Descriptor engine (see :class:`src.descriptors.sift.SiftDescriptorEngine`).
    resize : bool
        Stretch the image to a square before sampling.
    max_extra_iterations : int
        Added to ``2 * interval`` to bound the offset search.
    """

    def __init__(self, image_path: str, engine, resize: bool = False,
                 max_extra_iterations: int = DEFAULT_EXTRA_ITERATIONS):
        self.image_path = image_path
        self.engine = engine
        self.max_extra_iterations = max_extra_iterations

        self.ref_image = load_image(image_path)
        self.working_image, self.scale_factors = prepare(self.ref_image, resize)
        self.gray_image = to_grayscale(self.working_image)
        self.result: Optional[ExtractionResult] = None

        h, w = self.ref_image.shape[:2]
        wh, ww = self.working_image.shape[:2]
        logger.info("loaded %s (%dx%d, working %dx%d)", image_path, w, h, ww, wh)

    @property
    def extracted(self) -> bool:
        return self.result is not None

    def extract(self, mode: SamplingMode = SamplingMode.DENSE,
                feature_num: int = 100) -> ExtractionResult:
        """Run extraction with the given sampling mode."""
        try:
            mode = SamplingMode(mode)
        except ValueError:
            raise SamplingNotImplementedError(f"unknown sampling mode {mode!r}",
                                              {"mode": mode}) from None
        if mode is SamplingMode.DOG:
            raise SamplingNotImplementedError("DoG sampling is not implemented")

        self.result = None
        self.result = self._extract_dense(feature_num)
        return self.result

    def _extract_dense(self, feature_num: int) -> ExtractionResult:
        height, width = self.gray_image.shape[:2]
        params = solve_grid(width, height, feature_num)

        cap = iteration_cap(params.interval, self.max_extra_iterations)
        keypoints, params = extract_exactly_with_params(
            self.engine, self.gray_image, params, feature_num,
            max_iterations=cap)

        descriptors = self.engine.compute_descriptors(self.gray_image, keypoints)
        logger.info("extracted %d descriptors (interval=%.2f, scale=%.2f, "
                    "offset=%.2f)", len(keypoints), params.interval,
                    params.patch_scale, params.offset)
        return ExtractionResult(tuple(keypoints), descriptors, params)

    def _require_result(self) -> ExtractionResult:
        if self.result is None:
            raise NotExtractedError("image features could not extract yet",
                                    {"image": self.image_path})
        return self.result

    def save_features(self, path: str) -> None:
        """Write the feature file with coordinates in original-image space."""
        result = self._require_result()
        keypoints = [invert(kp, self.scale_factors) for kp in result.keypoints]
        write_features(path, keypoints, result.descriptors,
                       self.engine.descriptor_dimension())
        logger.info("wrote %d features to %s", len(keypoints), path)

    def save_image(self, prefix: str) -> str:
        """Write ``<prefix>_sift.png`` with keypoints drawn on the working image."""
        result = self._require_result()
        path = save_keypoint_overlay(self.working_image, result.keypoints, prefix)
        logger.info("wrote keypoint overlay to %s", path)
        return path
