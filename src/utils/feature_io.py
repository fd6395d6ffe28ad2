"""
Feature file reading and writing.

The file is plain text.  The first line holds the keypoint count and the
descriptor length; each following line holds one keypoint::

    <x>\\t<y>\\t<size>\\t<angle>\\t<d0>\\t...\\t<d(dim-1)>

x, y, size and angle are written with six fractional digits; descriptor
values are truncated to integers.
"""

from typing import Sequence, Tuple

import numpy as np

from src.detectors.dense_grid import Keypoint
from src.utils.errors import FeatureReadError, FeatureWriteError


def format_features(keypoints: Sequence[Keypoint], descriptors: np.ndarray,
                    dim: int) -> str:
    """Render keypoints and their descriptors in feature-file format."""
    lines = [f"{len(keypoints)}\t{dim}"]
    values = np.trunc(descriptors).astype(np.int64)
    for kp, row in zip(keypoints, values):
        fields = [f"{kp.x:.6f}", f"{kp.y:.6f}", f"{kp.size:.6f}",
                  f"{kp.angle:.6f}"]
        fields.extend(str(int(v)) for v in row[:dim])
        lines.append("\t".join(fields))
    return "\n".join(lines) + "\n"


def write_features(path: str, keypoints: Sequence[Keypoint],
                   descriptors: np.ndarray, dim: int) -> None:
    """Write a feature file.

    Parameters
    ----------
    path : str
        Output file path.
    keypoints : sequence of Keypoint
        Keypoints in the coordinates to be stored.
    descriptors : np.ndarray
        len(keypoints) x dim matrix.
    dim : int
        Descriptor length.

    Raises
    ------
    FeatureWriteError
        If the file cannot be opened or written.
    """
    text = format_features(keypoints, descriptors, dim)
    try:
        with open(path, "w", newline="\n") as fh:
            fh.write(text)
    except OSError as exc:
        raise FeatureWriteError(f"cannot open feature file: {path}",
                                {"path": path}) from exc


def read_features(path: str) -> Tuple[np.ndarray, np.ndarray]:
    """Read a feature file.

    Returns
    -------
    keypoints : np.ndarray
        N x 4 float64 array of (x, y, size, angle).
    descriptors : np.ndarray
        N x dim int64 array.

    Raises
    ------
    FeatureReadError
        If the file cannot be opened, is truncated, or a line has the wrong
        number of fields.
    """
    try:
        with open(path, "r") as fh:
            count, dim = (int(v) for v in fh.readline().split("\t"))
            keypoints = np.empty((count, 4), dtype=np.float64)
            descriptors = np.empty((count, dim), dtype=np.int64)
            for i in range(count):
                fields = fh.readline().rstrip("\n").split("\t")
                if len(fields) != 4 + dim:
                    raise FeatureReadError(
                        f"line {i + 2} of {path} has {len(fields)} fields, "
                        f"expected {4 + dim}",
                        {"path": path, "line": i + 2})
                keypoints[i] = [float(v) for v in fields[:4]]
                descriptors[i] = [int(v) for v in fields[4:]]
    except OSError as exc:
        raise FeatureReadError(f"cannot open feature file: {path}",
                               {"path": path}) from exc
    except ValueError as exc:
        raise FeatureReadError(f"malformed feature file: {path}",
                               {"path": path}) from exc
    return keypoints, descriptors
