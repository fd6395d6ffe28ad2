"""
Square-canvas resizing and the matching keypoint coordinate mapping.

Stretching the image to a square makes the dense grid symmetric.  The
recorded scale factors let keypoints found on the stretched image be written
out in the coordinates of the original image.
"""

from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np
from skimage.transform import resize as sk_resize

from src.detectors.dense_grid import Keypoint


@dataclass(frozen=True)
class ScaleFactors:
    """Per-axis stretch applied to the original image (both >= 1)."""

    scale_x: float = 1.0
    scale_y: float = 1.0


def prepare(image: np.ndarray, resize: bool) -> Tuple[np.ndarray, ScaleFactors]:
    """Return the working image and the scale factors used to make it.

    Parameters
    ----------
    image : np.ndarray
        H x W (x C) uint8 image.
    resize : bool
        Stretch the shorter side so the image becomes ``longer x longer``.

    Returns
    -------
    working : np.ndarray
        Resized uint8 image, or *image* itself when *resize* is False.
    factors : ScaleFactors
        Identity when *resize* is False.
    """
    if not resize:
        return image, ScaleFactors()

    height, width = image.shape[:2]
    if width > height:
        factors = ScaleFactors(scale_x=1.0, scale_y=width / height)
    else:
        factors = ScaleFactors(scale_x=height / width, scale_y=1.0)

    side = max(width, height)
    out_shape = (side, side) + image.shape[2:]
    working = sk_resize(image, out_shape, order=1, preserve_range=True,
                        anti_aliasing=False)
    return np.rint(working).astype(np.uint8), factors


def invert(keypoint: Keypoint, factors: ScaleFactors) -> Keypoint:
    """Map a working-image keypoint back to original-image coordinates."""
    return replace(keypoint, x=keypoint.x / factors.scale_x,
                   y=keypoint.y / factors.scale_y)


def forward(keypoint: Keypoint, factors: ScaleFactors) -> Keypoint:
    """Map an original-image keypoint onto the working image."""
    return replace(keypoint, x=keypoint.x * factors.scale_x,
                   y=keypoint.y * factors.scale_y)
