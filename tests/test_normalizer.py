import numpy as np
import pytest

from src.detectors.dense_grid import Keypoint
from src.sampling.normalizer import ScaleFactors, forward, invert, prepare


def test_no_resize_returns_same_image():
    img = np.zeros((30, 50, 3), dtype=np.uint8)
    working, factors = prepare(img, resize=False)
    assert working is img
    assert factors == ScaleFactors(1.0, 1.0)


def test_wide_image_stretched_vertically():
    img = np.zeros((100, 200, 3), dtype=np.uint8)
    working, factors = prepare(img, resize=True)
    assert working.shape == (200, 200, 3)
    assert working.dtype == np.uint8
    assert factors == ScaleFactors(scale_x=1.0, scale_y=2.0)


def test_tall_image_stretched_horizontally():
    img = np.zeros((150, 50), dtype=np.uint8)
    working, factors = prepare(img, resize=True)
    assert working.shape == (150, 150)
    assert factors == ScaleFactors(scale_x=3.0, scale_y=1.0)


def test_square_image_keeps_identity_factors():
    img = np.zeros((64, 64, 3), dtype=np.uint8)
    working, factors = prepare(img, resize=True)
    assert working.shape == img.shape
    assert factors == ScaleFactors()


def test_resize_preserves_intensity_range():
    img = np.full((10, 20, 3), 200, dtype=np.uint8)
    working, _ = prepare(img, resize=True)
    assert np.all(working == 200)


def test_invert_divides_coordinates_only():
    kp = Keypoint(x=30.0, y=80.0, size=12.0, angle=0.0)
    out = invert(kp, ScaleFactors(scale_x=1.0, scale_y=2.0))
    assert out == Keypoint(x=30.0, y=40.0, size=12.0, angle=0.0)


@pytest.mark.parametrize("factors", [
    ScaleFactors(), ScaleFactors(1.0, 2.0), ScaleFactors(1.7, 1.0),
    ScaleFactors(1.0, 640 / 480),
])
def test_round_trip(factors):
    for x, y in [(0.0, 0.0), (12.5, 99.25), (319.0, 1.0), (7.125, 460.5)]:
        original = Keypoint(x, y, 10.0)
        back = invert(forward(original, factors), factors)
        assert back.x == pytest.approx(x)
        assert back.y == pytest.approx(y)
        assert back.size == original.size
