"""Tests for the geometry module."""

import math

import numpy as np
import pytest

from smart_hit_test.core.geometry import (
    direction_from_angles,
    make_transform,
    normalize,
    plane_rotation,
    rotation_from_normal,
    to_local,
    to_world,
    translation,
)


class TestDirectionFromAngles:
    """Tests for direction_from_angles function."""

    def test_straight_ahead(self):
        np.testing.assert_array_almost_equal(direction_from_angles(0, 0), [0.0, 0.0, -1.0])

    def test_turned_left(self):
        """Positive yaw turns counter-clockwise seen from above."""
        np.testing.assert_array_almost_equal(direction_from_angles(90, 0), [-1.0, 0.0, 0.0])

    def test_looking_down(self):
        np.testing.assert_array_almost_equal(direction_from_angles(0, -90), [0.0, -1.0, 0.0])

    def test_pitch_30_down(self):
        direction = direction_from_angles(0, -30)
        np.testing.assert_array_almost_equal(direction, [0.0, -0.5, -math.sqrt(3) / 2])


class TestPlaneRotation:
    """Tests for plane orientation helpers."""

    def test_horizontal_normal_is_up(self):
        rotation = plane_rotation(False, 37.0)
        np.testing.assert_array_almost_equal(rotation[:, 1], [0.0, 1.0, 0.0])

    def test_vertical_normal_is_horizontal(self):
        rotation = plane_rotation(True, 90.0)
        np.testing.assert_array_almost_equal(rotation[:, 1], [1.0, 0.0, 0.0])

    def test_vertical_extent_axis_is_vertical(self):
        rotation = plane_rotation(True, 0.0)
        assert abs(rotation[1, 2]) == pytest.approx(1.0)

    def test_rotation_from_normal(self):
        normal = normalize(np.array([1.0, 1.0, 0.0]))
        rotation = rotation_from_normal(normal)

        np.testing.assert_array_almost_equal(rotation[:, 1], normal)
        np.testing.assert_array_almost_equal(rotation.T @ rotation, np.eye(3))
        assert np.linalg.det(rotation) == pytest.approx(1.0)

    def test_rotation_from_up_normal_is_identity(self):
        np.testing.assert_array_almost_equal(rotation_from_normal(np.array([0.0, 2.0, 0.0])), np.eye(3))


class TestTransforms:
    """Tests for 4x4 transform helpers."""

    def test_translation(self):
        transform = make_transform([1.0, 2.0, 3.0])
        np.testing.assert_array_equal(translation(transform), [1.0, 2.0, 3.0])

    def test_local_world_inverse(self):
        transform = make_transform([1.0, 0.5, -2.0], plane_rotation(True, 30.0))
        point = np.array([0.3, -0.2, 0.7])
        np.testing.assert_array_almost_equal(to_local(transform, to_world(transform, point)), point)

    def test_normalize_zero_vector(self):
        with pytest.raises(ValueError):
            normalize(np.zeros(3))
