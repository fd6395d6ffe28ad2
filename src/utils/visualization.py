"""
Keypoint overlay drawing.

Marks every sampled keypoint on a copy of the working image: a yellow circle
whose radius is the keypoint size and a filled green dot at its centre.
"""

import numpy as np
from skimage.draw import circle_perimeter, disk

from src.utils.image_io import write_image

CIRCLE_COLOUR = (255, 255, 0)   # yellow (RGB)
CENTRE_COLOUR = (0, 255, 0)     # green
CENTRE_RADIUS = 1.5


def draw_keypoints(img: np.ndarray, keypoints) -> np.ndarray:
    """Return an RGB copy of *img* with the keypoints drawn on it."""
    canvas = img.copy()
    if canvas.ndim == 2:
        canvas = np.stack([canvas] * 3, axis=-1)
    shape = canvas.shape[:2]

    for kp in keypoints:
        r, c = int(round(kp.y)), int(round(kp.x))
        rr, cc = circle_perimeter(r, c, int(round(kp.size)), shape=shape)
        canvas[rr, cc] = CIRCLE_COLOUR
        rr, cc = disk((r, c), CENTRE_RADIUS, shape=shape)
        canvas[rr, cc] = CENTRE_COLOUR

    return canvas


def save_keypoint_overlay(img: np.ndarray, keypoints, prefix: str) -> str:
    """Save the overlay as ``<prefix>_sift.png`` and return that path."""
    path = f"{prefix}_sift.png"
    write_image(path, draw_keypoints(img, keypoints))
    return path
