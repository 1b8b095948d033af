"""Geometric utilities for transforms and vector math.

This module provides the small amount of linear algebra the placement code
needs: building and decomposing 4x4 world transforms and orienting planes.

Coordinate System (AR world frame):
    - x = right
    - y = up (gravity aligned)
    - z = toward the viewer; a camera with zero yaw and pitch looks along -z

Angle Convention:
    - yaw rotates about +y, counter-clockwise when viewed from above
    - pitch rotates about the camera's +x axis; positive looks up
"""

import math
from typing import Optional

import numpy as np


def normalize(v: np.ndarray) -> np.ndarray:
    """Normalize a vector to unit length.

    Args:
        v: Input vector.

    Returns:
        Unit vector in the same direction.

    Raises:
        ValueError: If the vector has zero length.
    """
    v = np.asarray(v, dtype=float)
    length = np.linalg.norm(v)
    if length < 1e-10:
        raise ValueError("Cannot normalize zero-length vector")
    return v / length


def dot(a: np.ndarray, b: np.ndarray) -> float:
    """Compute dot product of two vectors."""
    return float(np.dot(a, b))


def rotation_about_y(yaw_deg: float) -> np.ndarray:
    """3x3 rotation matrix about the world up axis."""
    yaw = math.radians(yaw_deg)
    c, s = math.cos(yaw), math.sin(yaw)
    return np.array(
        [
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ]
    )


def rotation_about_x(pitch_deg: float) -> np.ndarray:
    """3x3 rotation matrix about the x axis."""
    pitch = math.radians(pitch_deg)
    c, s = math.cos(pitch), math.sin(pitch)
    return np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, c, -s],
            [0.0, s, c],
        ]
    )


def camera_rotation(yaw_deg: float, pitch_deg: float) -> np.ndarray:
    """Rotation taking camera-local axes to world axes.

    Yaw is applied first (about world up), then pitch about the
    resulting right axis.
    """
    return rotation_about_y(yaw_deg) @ rotation_about_x(pitch_deg)


def direction_from_angles(yaw_deg: float, pitch_deg: float) -> np.ndarray:
    """Convert camera yaw and pitch to a forward (viewing) direction.

    Args:
        yaw_deg: Heading in degrees; 0 looks along -z, 90 looks along -x.
        pitch_deg: Elevation in degrees; -90 looks straight down.

    Returns:
        Unit vector in world coordinates.
    """
    return camera_rotation(yaw_deg, pitch_deg) @ np.array([0.0, 0.0, -1.0])


def plane_rotation(vertical: bool, yaw_deg: float = 0.0) -> np.ndarray:
    """Rotation for a plane anchor whose local +y axis is the plane normal.

    Horizontal planes face straight up, optionally spun about the normal by
    ``yaw_deg``. Vertical planes are tipped upright so the normal points
    horizontally along ``(sin(yaw), 0, cos(yaw))``; their local z extent
    then runs vertically.

    Args:
        vertical: Whether the plane is upright (a wall) rather than flat.
        yaw_deg: Heading of the plane about world up.

    Returns:
        3x3 rotation matrix.
    """
    if vertical:
        return rotation_about_y(yaw_deg) @ rotation_about_x(90.0)
    return rotation_about_y(yaw_deg)


def rotation_from_normal(normal: np.ndarray) -> np.ndarray:
    """Build a right-handed rotation whose local +y axis equals ``normal``.

    The in-plane axes are arbitrary but deterministic.
    """
    n = normalize(normal)
    # Pick a reference axis that is not parallel to the normal
    reference = np.array([0.0, 0.0, 1.0])
    if abs(dot(n, reference)) > 0.9:
        reference = np.array([1.0, 0.0, 0.0])
    x_axis = normalize(np.cross(n, reference))
    z_axis = np.cross(x_axis, n)
    return np.column_stack([x_axis, n, z_axis])


def make_transform(position: np.ndarray, rotation: Optional[np.ndarray] = None) -> np.ndarray:
    """Compose a 4x4 world transform from a position and 3x3 rotation."""
    transform = np.eye(4)
    if rotation is not None:
        transform[:3, :3] = rotation
    transform[:3, 3] = np.asarray(position, dtype=float)
    return transform


def translation(transform: np.ndarray) -> np.ndarray:
    """Position component of a 4x4 transform."""
    return np.array(transform[:3, 3], dtype=float)


def rotation_part(transform: np.ndarray) -> np.ndarray:
    """3x3 rotation component of a 4x4 transform."""
    return np.array(transform[:3, :3], dtype=float)


def to_local(transform: np.ndarray, world_point: np.ndarray) -> np.ndarray:
    """Express a world-space point in the local frame of ``transform``.

    Assumes the rotation block is orthonormal, so its inverse is its transpose.
    """
    offset = np.asarray(world_point, dtype=float) - translation(transform)
    return rotation_part(transform).T @ offset


def to_world(transform: np.ndarray, local_point: np.ndarray) -> np.ndarray:
    """Map a point from the local frame of ``transform`` to world space."""
    return rotation_part(transform) @ np.asarray(local_point, dtype=float) + translation(transform)
