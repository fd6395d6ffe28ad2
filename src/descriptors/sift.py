"""
SIFT descriptor engine.

Wraps OpenCV's SIFT implementation behind the three calls the extractor
needs: dense grid detection, descriptor computation at given keypoints, and
the descriptor length.  All engine settings are fixed when the engine is
constructed from an :class:`EngineConfig`.
"""

from dataclasses import dataclass, fields
from typing import Sequence

import cv2
import numpy as np

from src.detectors.dense_grid import Keypoint, dense_grid_keypoints
from src.utils.errors import ConfigError, ExtractionError


@dataclass(frozen=True)
class EngineConfig:
    """Startup settings for :class:`SiftDescriptorEngine`."""

    # dense detector
    feature_scale_levels: int = 1
    feature_scale_mul: float = 0.1
    vary_xy_step_with_scale: bool = True
    vary_img_bound_with_scale: bool = False
    # SIFT
    n_octave_layers: int = 3
    contrast_threshold: float = 0.04
    edge_threshold: float = 10.0
    sigma: float = 1.6

    @classmethod
    def from_dict(cls, section: dict) -> "EngineConfig":
        """Build a config from the ``engine`` section of the YAML file."""
        if not isinstance(section, dict):
            raise ConfigError(f"engine section must be a mapping, got {section!r}")

        types = {f.name: f.type for f in fields(cls)}
        unknown = set(section) - set(types)
        if unknown:
            raise ConfigError(f"unknown engine settings: {sorted(unknown)}")

        values = {}
        for name, value in section.items():
            values[name] = _coerce(name, value, types[name])
        if values.get("feature_scale_levels", 1) < 1:
            raise ConfigError("engine.feature_scale_levels must be at least 1")
        return cls(**values)


def _coerce(name: str, value, kind):
    # bool is an int subclass; only accept it for bool fields
    if kind is bool:
        ok = isinstance(value, bool)
    elif kind is int:
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    if not ok:
        raise ConfigError(f"engine.{name} must be {kind.__name__}, got {value!r}",
                          {"setting": name, "value": value})
    return kind(value)


class SiftDescriptorEngine:
    """Dense grid detection plus OpenCV SIFT description."""

    def __init__(self, config: EngineConfig = EngineConfig()):
        self.config = config
        self._sift = cv2.SIFT_create(
            nOctaveLayers=config.n_octave_layers,
            contrastThreshold=config.contrast_threshold,
            edgeThreshold=config.edge_threshold,
            sigma=config.sigma,
        )

    def detect_grid_keypoints(self, image: np.ndarray, scale: int,
                              interval: int, offset: int):
        """Keypoints of size *scale* every *interval* pixels, *offset* in from the corner."""
        cfg = self.config
        return dense_grid_keypoints(
            image.shape, scale, interval, offset,
            levels=cfg.feature_scale_levels,
            scale_mul=cfg.feature_scale_mul,
            vary_xy_step=cfg.vary_xy_step_with_scale,
            vary_img_bound=cfg.vary_img_bound_with_scale,
        )

    def compute_descriptors(self, image: np.ndarray,
                            keypoints: Sequence[Keypoint]) -> np.ndarray:
        """Compute one SIFT descriptor per keypoint.

        Parameters
        ----------
        image : np.ndarray
            H x W uint8 grayscale image.
        keypoints : sequence of Keypoint
            Sample locations in *image* coordinates.

        Returns
        -------
        np.ndarray
            len(keypoints) x descriptor_dimension() float32 matrix; row i
            describes keypoints[i].
        """
        cv_keypoints = [cv2.KeyPoint(float(kp.x), float(kp.y), float(kp.size),
                                     float(kp.angle))
                        for kp in keypoints]
        cv_keypoints, descriptors = self._sift.compute(image, cv_keypoints)

        if descriptors is None:
            descriptors = np.empty((0, self.descriptor_dimension()),
                                   dtype=np.float32)
        if len(cv_keypoints) != len(keypoints) or \
                descriptors.shape[0] != len(keypoints):
            raise ExtractionError(
                f"SIFT returned {descriptors.shape[0]} descriptors for "
                f"{len(keypoints)} keypoints",
                {"keypoints": len(keypoints), "descriptors": descriptors.shape[0]},
            )
        return descriptors

    def descriptor_dimension(self) -> int:
        return int(self._sift.descriptorSize())
