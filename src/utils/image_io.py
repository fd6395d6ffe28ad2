"""
Image I/O helpers.

Thin wrappers around PIL and scikit-image for loading the input image,
converting it to the grayscale form SIFT expects, and writing result images.
"""

import numpy as np
from PIL import Image, UnidentifiedImageError
from skimage.color import rgb2gray
from skimage.util import img_as_ubyte

from src.utils.errors import ImageLoadError, ImageWriteError


def load_image(path: str) -> np.ndarray:
    """Load an image as a uint8 RGB array.

    Parameters
    ----------
    path : str
        Image file path.

    Returns
    -------
    np.ndarray
        H x W x 3 uint8 array.

    Raises
    ------
    ImageLoadError
        If the file is missing or cannot be decoded.
    """
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGB"))
    except FileNotFoundError as exc:
        raise ImageLoadError(f"cannot open image file: {path}",
                             {"path": path}) from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageLoadError(f"cannot decode image file: {path}",
                             {"path": path}) from exc


def to_grayscale(img: np.ndarray) -> np.ndarray:
    """Convert a uint8 RGB image to a uint8 grayscale image.

    Parameters
    ----------
    img : np.ndarray
        H x W x 3 uint8 image.  A 2-D image is returned unchanged.

    Returns
    -------
    np.ndarray
        H x W uint8 image.
    """
    if img.ndim == 2:
        return img
    return img_as_ubyte(rgb2gray(img))


def write_image(path: str, img: np.ndarray) -> None:
    """Write a uint8 image, raising :class:`ImageWriteError` on failure."""
    try:
        Image.fromarray(img).save(path)
    except (OSError, ValueError) as exc:
        raise ImageWriteError(f"cannot write image file: {path}",
                              {"path": path}) from exc

