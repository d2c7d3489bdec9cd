"""Tests for the Pose type and its geometry_msgs conversions."""

import math
from types import SimpleNamespace

import numpy as np
import pytest

from carto_initpose.common.pose import Pose, fill_pose_msg, pose_from_msg
from conftest import pose_msg, random_pose


class TestPoseConstruction:

    def test_rotation_is_normalized(self):
        pose = Pose([1.0, 2.0, 3.0], [0.0, 0.0, 3.0, 4.0])
        assert math.isclose(np.linalg.norm(pose.rotation), 1.0, abs_tol=1e-15)
        assert np.allclose(pose.rotation, [0.0, 0.0, 0.6, 0.8])

    def test_degenerate_rotation_rejected(self):
        with pytest.raises(ValueError):
            Pose([0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 0.0])

    def test_non_finite_translation_rejected(self):
        with pytest.raises(ValueError, match="non-finite"):
            Pose([0.0, float("inf"), 0.0], [0.0, 0.0, 0.0, 1.0])

    def test_arrays_are_read_only(self):
        pose = Pose.identity()
        with pytest.raises(ValueError):
            pose.translation[0] = 1.0
        with pytest.raises(ValueError):
            pose.rotation[3] = 0.0

    def test_input_arrays_are_copied(self):
        t = np.array([1.0, 2.0, 3.0])
        pose = Pose(t, [0.0, 0.0, 0.0, 1.0])
        t[0] = 99.0
        assert pose.x == 1.0

    def test_from_xyz_yaw(self):
        pose = Pose.from_xyz_yaw(1.0, -2.0, 0.5, math.pi / 2)
        assert (pose.x, pose.y, pose.z) == (1.0, -2.0, 0.5)
        assert math.isclose(pose.yaw, math.pi / 2, abs_tol=1e-12)


class TestPoseDict:

    def test_roundtrip(self, rng):
        pose = random_pose(rng)
        again = Pose.from_dict(pose.to_dict())
        assert np.array_equal(again.translation, pose.translation)
        assert np.array_equal(again.rotation, pose.rotation)

    def test_defaults(self):
        pose = Pose.from_dict({"position": {"x": 1.5}})
        assert np.array_equal(pose.translation, [1.5, 0.0, 0.0])
        assert np.array_equal(pose.rotation, [0.0, 0.0, 0.0, 1.0])


class TestPoseOperations:

    def test_with_z_only_changes_z(self, rng):
        pose = random_pose(rng)
        lifted = pose.with_z(42.0)
        assert lifted.z == 42.0
        assert lifted.x == pose.x and lifted.y == pose.y
        assert np.array_equal(lifted.rotation, pose.rotation)

    def test_mul_is_compose(self, rng):
        a, b = random_pose(rng), random_pose(rng)
        assert (a * b).allclose(a.compose(b), atol=0.0)

    def test_mul_rejects_non_pose(self):
        with pytest.raises(TypeError):
            Pose.identity() * 2

    def test_inverse(self, rng):
        pose = random_pose(rng)
        assert (pose * pose.inverse()).allclose(Pose.identity(), atol=1e-12)
        assert (pose.inverse() * pose).allclose(Pose.identity(), atol=1e-12)

    def test_allclose_ignores_quaternion_sign(self):
        a = Pose([1.0, 2.0, 3.0], [0.0, 0.0, 0.6, 0.8])
        b = Pose([1.0, 2.0, 3.0], [0.0, 0.0, -0.6, -0.8])
        assert a.allclose(b)

    def test_allclose_detects_translation_change(self):
        a = Pose.identity()
        b = Pose([0.0, 0.0, 1e-6], [0.0, 0.0, 0.0, 1.0])
        assert not a.allclose(b)


class TestMessageConversion:

    def test_pose_from_msg(self):
        pose = pose_from_msg(pose_msg(1.0, 2.0, 3.0, 0.0, 0.0, 0.6, 0.8))
        assert np.array_equal(pose.translation, [1.0, 2.0, 3.0])
        assert np.allclose(pose.rotation, [0.0, 0.0, 0.6, 0.8])

    def test_fill_pose_msg(self, rng):
        pose = random_pose(rng)
        msg = pose_msg()
        out = fill_pose_msg(pose, msg)
        assert out is msg
        assert (msg.position.x, msg.position.y, msg.position.z) == tuple(pose.translation)
        assert (msg.orientation.x, msg.orientation.y, msg.orientation.z, msg.orientation.w) == tuple(pose.rotation)

    def test_msg_roundtrip(self, rng):
        pose = random_pose(rng)
        msg = fill_pose_msg(pose, SimpleNamespace(
            position=SimpleNamespace(x=0.0, y=0.0, z=0.0),
            orientation=SimpleNamespace(x=0.0, y=0.0, z=0.0, w=1.0),
        ))
        again = pose_from_msg(msg)
        assert np.array_equal(again.translation, pose.translation)
        assert np.array_equal(again.rotation, pose.rotation)
