"""Tests for fold_kinematics module."""
import math

import numpy as np
import pytest

from fold_kinematics import FLOOR_DIR, FLOOR_NORMAL, fold_pose


class TestFoldPose:
    """Floor stays put, wall rotates about the hinge."""

    def test_flat(self):
        pose = fold_pose(0.0)
        assert pose.angle_rad == 0.0
        np.testing.assert_allclose(pose.wall_dir, [0.0, 1.0, 0.0])
        np.testing.assert_allclose(pose.wall_normal, [0.0, 0.0, 1.0])

    def test_upright(self):
        pose = fold_pose(1.0)
        assert pose.angle_rad == pytest.approx(math.pi / 2)
        np.testing.assert_allclose(pose.wall_dir, [0.0, 0.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(pose.wall_normal, [0.0, -1.0, 0.0], atol=1e-12)

    def test_floor_constant(self):
        for t in (0.0, 0.3, 1.0):
            pose = fold_pose(t)
            np.testing.assert_array_equal(pose.floor_dir, FLOOR_DIR)
            np.testing.assert_array_equal(pose.floor_normal, FLOOR_NORMAL)

    def test_wall_frame_orthonormal(self):
        for t in np.linspace(0.0, 1.0, 11):
            pose = fold_pose(float(t))
            assert np.linalg.norm(pose.wall_dir) == pytest.approx(1.0)
            assert np.linalg.norm(pose.wall_normal) == pytest.approx(1.0)
            assert float(pose.wall_dir @ pose.wall_normal) == pytest.approx(0.0, abs=1e-12)
            # The hinge is the x axis; the wall never leaves the y/z plane.
            assert pose.wall_dir[0] == 0.0

    def test_halfway_angle(self):
        pose = fold_pose(0.5)
        assert pose.angle_rad == pytest.approx(math.pi / 4)
        assert pose.wall_dir[1] == pytest.approx(pose.wall_dir[2])

    @pytest.mark.parametrize("t, expected", [
        (2.0, 1.0),
        (-1.0, 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
    ])
    def test_out_of_range_clamped(self, t, expected):
        assert fold_pose(t).angle_rad == pytest.approx(expected * math.pi / 2)

    def test_pose_arrays_independent(self):
        pose = fold_pose(0.0)
        pose.floor_dir[1] = 5.0
        assert FLOOR_DIR[1] == 1.0
