import numpy as np
import pytest

from src.detectors.dense_grid import Keypoint, dense_grid_keypoints
from src.sampling.grid_solver import GridParameters, solve_grid
from src.sampling.sampling_loop import (extract_exactly,
                                        extract_exactly_with_params,
                                        iteration_cap)
from src.utils.errors import ConvergenceTimeoutError, UnsatisfiableGridError


class CountingEngine:
    """Detector whose keypoint count is a function of the offset."""

    def __init__(self, count_for_offset):
        self.count_for_offset = count_for_offset
        self.calls = []

    def detect_grid_keypoints(self, image, scale, interval, offset):
        self.calls.append((scale, interval, offset))
        n = max(0, self.count_for_offset(offset))
        return [Keypoint(float(i), 0.0, float(scale)) for i in range(n)]


class GridEngine:
    def detect_grid_keypoints(self, image, scale, interval, offset):
        return dense_grid_keypoints(image.shape, scale, interval, offset)


IMAGE = np.zeros((10, 10), dtype=np.uint8)


def test_monotonic_detector_converges_from_above():
    engine = CountingEngine(lambda off: 40 - 2 * off)
    params = GridParameters(interval=10.0, patch_scale=5.0, offset=15.7)
    kps, final = extract_exactly_with_params(engine, IMAGE, params, 20)
    assert len(kps) == 20
    assert int(final.offset) == 10
    assert final.interval == params.interval
    assert len(engine.calls) <= iteration_cap(params.interval)


def test_monotonic_detector_converges_from_below():
    engine = CountingEngine(lambda off: 40 - 2 * off)
    params = GridParameters(interval=10.0, patch_scale=5.0, offset=3.2)
    kps = extract_exactly(engine, IMAGE, params, 20)
    assert len(kps) == 20
    assert engine.calls[-1][2] == 10


def test_detector_receives_floored_parameters():
    engine = CountingEngine(lambda off: 4)
    params = GridParameters(interval=70.71, patch_scale=35.36, offset=5.9)
    extract_exactly(engine, IMAGE, params, 4)
    assert engine.calls == [(35, 70, 5)]


def test_exhausted_offset_is_unsatisfiable():
    engine = CountingEngine(lambda off: 0)
    params = GridParameters(interval=10.0, patch_scale=5.0, offset=3.5)
    with pytest.raises(UnsatisfiableGridError):
        extract_exactly(engine, IMAGE, params, 5)
    assert [c[2] for c in engine.calls] == [3, 2, 1, 0]


def test_oscillation_times_out():
    engine = CountingEngine(lambda off: 30 if off <= 5 else 10)
    params = GridParameters(interval=10.0, patch_scale=5.0, offset=5.0)
    with pytest.raises(ConvergenceTimeoutError) as info:
        extract_exactly(engine, IMAGE, params, 20)
    assert len(engine.calls) == iteration_cap(10.0)
    assert info.value.details["max_iterations"] == iteration_cap(10.0)


def test_explicit_iteration_budget():
    engine = CountingEngine(lambda off: 30 if off <= 5 else 10)
    params = GridParameters(interval=10.0, patch_scale=5.0, offset=5.0)
    with pytest.raises(ConvergenceTimeoutError):
        extract_exactly(engine, IMAGE, params, 20, max_iterations=3)
    assert len(engine.calls) == 3


def test_real_grid_square_image():
    image = np.zeros((100, 100), dtype=np.uint8)
    params = solve_grid(100, 100, 4)
    kps = extract_exactly(GridEngine(), image, params, 4)
    coords = sorted((kp.x, kp.y) for kp in kps)
    expected = [(25, 25), (25, 75), (75, 25), (75, 75)]
    for (x, y), (ex, ey) in zip(coords, expected):
        assert x == pytest.approx(ex, abs=1.5)
        assert y == pytest.approx(ey, abs=1.5)


@pytest.mark.parametrize("side, n", [(100, 9), (120, 16), (300, 25), (256, 64)])
def test_real_grid_perfect_square_counts(side, n):
    image = np.zeros((side, side), dtype=np.uint8)
    kps = extract_exactly(GridEngine(), image, solve_grid(side, side, n), n)
    assert len(kps) == n


def test_iteration_cap_grows_with_interval():
    assert iteration_cap(10.0) == 36
    assert iteration_cap(10.9, extra=0) == 21
