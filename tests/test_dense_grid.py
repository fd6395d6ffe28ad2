import pytest

from src.detectors.dense_grid import Keypoint, dense_grid_keypoints
from src.utils.errors import DegenerateGeometryError


def test_column_major_order_and_bounds():
    kps = dense_grid_keypoints((100, 100), 25, 50, 24)
    assert [(kp.x, kp.y) for kp in kps] == [
        (24.0, 24.0), (24.0, 74.0), (74.0, 24.0), (74.0, 74.0),
    ]
    assert all(kp.size == 25.0 and kp.angle == 0.0 for kp in kps)


def test_far_edge_keeps_bound_clearance():
    # rows 0..9, bound 2: y must stay below 8
    kps = dense_grid_keypoints((10, 5), 1, 3, 2)
    assert sorted({kp.y for kp in kps}) == [2.0, 5.0]
    assert sorted({kp.x for kp in kps}) == [2.0]


def test_larger_bound_gives_fewer_points():
    counts = [len(dense_grid_keypoints((120, 160), 10, 20, b)) for b in range(0, 40)]
    assert counts == sorted(counts, reverse=True)


def test_bound_past_centre_gives_nothing():
    assert dense_grid_keypoints((50, 50), 5, 10, 30) == []


def test_extra_levels_shrink_scale_and_step():
    kps = dense_grid_keypoints((20, 20), 10, 10, 0, levels=2, scale_mul=0.5)
    first = [kp for kp in kps if kp.size == 10.0]
    second = [kp for kp in kps if kp.size == 5.0]
    assert len(first) == 4
    assert len(second) == 16


def test_non_positive_step_rejected():
    with pytest.raises(DegenerateGeometryError):
        dense_grid_keypoints((10, 10), 1, 0, 0)


def test_keypoint_defaults_to_zero_angle():
    assert Keypoint(1.0, 2.0, 3.0).angle == 0.0
