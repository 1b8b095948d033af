"""Ray casting against plane anchors and estimated planes.

This module provides a reference hit-test provider: it unprojects a screen
point through the AR camera and intersects the resulting ray with the planes
of a scene, producing one result per (surface, kind) pair.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

from .geometry import make_transform, normalize, rotation_from_normal, rotation_part
from .models import (
    Camera,
    EstimatedPlane,
    HitTestResult,
    IntersectionKind,
    PlaneAlignment,
    PlaneAnchor,
    SceneConfig,
    ScreenPoint,
)


@dataclass
class RayIntersection:
    """Result of a ray-plane intersection test.

    Attributes:
        intersects: Whether the ray hits the plane in front of its origin.
        point: The intersection point (if intersects is True).
        t: The parameter t such that intersection = origin + t * direction.
    """

    intersects: bool
    point: Optional[np.ndarray] = None
    t: Optional[float] = None


def screen_point_to_ray(camera: Camera, point: ScreenPoint) -> tuple[np.ndarray, np.ndarray]:
    """Unproject a screen point into a world-space ray.

    Screen coordinates have their origin at the top-left corner with y
    growing downward, as in UIKit view coordinates.

    Args:
        camera: The AR camera.
        point: Screen point (x, y).

    Returns:
        Tuple of (origin, unit direction).
    """
    x, y = point
    x_ndc = 2.0 * x / camera.viewport_width - 1.0
    y_ndc = 1.0 - 2.0 * y / camera.viewport_height

    tan_half = math.tan(math.radians(camera.fov_deg) / 2)
    direction_camera = np.array([x_ndc * tan_half * camera.aspect, y_ndc * tan_half, -1.0])

    direction = normalize(camera.rotation @ direction_camera)
    return camera.position.copy(), direction


def ray_plane_intersection(
    ray_origin: np.ndarray,
    ray_direction: np.ndarray,
    plane_point: np.ndarray,
    plane_normal: np.ndarray,
    epsilon: float = 1e-10,
) -> RayIntersection:
    """Intersect a ray with an unbounded plane.

    Planes are two-sided: a ray may hit them from either face.

    Args:
        ray_origin: Starting point of the ray.
        ray_direction: Direction of the ray (should be normalized).
        plane_point: Any point on the plane.
        plane_normal: Plane normal (need not be unit length).
        epsilon: Small value for numerical comparisons.

    Returns:
        RayIntersection with details about the intersection.
    """
    denom = float(np.dot(ray_direction, plane_normal))

    # Ray parallel to plane
    if abs(denom) < epsilon:
        return RayIntersection(intersects=False)

    t = float(np.dot(np.asarray(plane_point) - ray_origin, plane_normal)) / denom

    # Plane behind the ray origin
    if t < 0:
        return RayIntersection(intersects=False)

    return RayIntersection(intersects=True, point=ray_origin + t * ray_direction, t=t)


def point_in_polygon(x: float, z: float, polygon: Sequence[tuple[float, float]]) -> bool:
    """Even-odd test of a 2D point against a simple polygon."""
    inside = False
    n = len(polygon)
    for i in range(n):
        x1, z1 = polygon[i]
        x2, z2 = polygon[(i + 1) % n]
        if (z1 > z) != (z2 > z):
            x_cross = x1 + (z - z1) * (x2 - x1) / (z2 - z1)
            if x < x_cross:
                inside = not inside
    return inside


def point_in_anchor_geometry(
    anchor: PlaneAnchor,
    world_point: np.ndarray,
    epsilon: float = 1e-9,
) -> bool:
    """Check whether a point on the anchor's plane lies inside its detected shape.

    Uses the boundary polygon when the anchor has one, otherwise the extent
    rectangle centered on the anchor origin.
    """
    local = anchor.to_local(world_point)
    lx, lz = local[0], local[2]

    if anchor.boundary is not None:
        return point_in_polygon(lx, lz, anchor.boundary)

    within_x = abs(lx) <= anchor.extent_x / 2 + epsilon
    within_z = abs(lz) <= anchor.extent_z / 2 + epsilon
    return within_x and within_z


class SceneHitTester:
    """Hit-test provider backed by a static scene description.

    Results for each query are returned nearest first.
    """

    def __init__(
        self,
        camera: Camera,
        anchors: Iterable[PlaneAnchor] = (),
        estimated_planes: Iterable[EstimatedPlane] = (),
    ):
        self.camera = camera
        self.anchors = list(anchors)
        self.estimated_planes = list(estimated_planes)

    @classmethod
    def from_config(cls, config: SceneConfig) -> "SceneHitTester":
        return cls(config.camera, config.anchors, config.estimated_planes)

    def viewport_center(self) -> ScreenPoint:
        return self.camera.viewport_center()

    def query(
        self, point: ScreenPoint, kinds: Iterable[IntersectionKind]
    ) -> list[HitTestResult]:
        """Hit-test the scene under a screen point.

        Args:
            point: Screen point (x, y).
            kinds: Result kinds to produce.

        Returns:
            List of HitTestResult sorted by distance from the camera.
        """
        kinds = set(kinds)
        origin, direction = screen_point_to_ray(self.camera, point)
        results = []

        want_exact = IntersectionKind.EXACT_PLANE_GEOMETRY in kinds
        want_infinite = IntersectionKind.INFINITE_EXISTING_PLANE in kinds
        if want_exact or want_infinite:
            for anchor in self.anchors:
                hit = ray_plane_intersection(origin, direction, anchor.center, anchor.normal)
                if not hit.intersects:
                    continue
                transform = make_transform(hit.point, rotation_part(anchor.transform))
                if want_exact and point_in_anchor_geometry(anchor, hit.point):
                    results.append(
                        HitTestResult(
                            kind=IntersectionKind.EXACT_PLANE_GEOMETRY,
                            distance=hit.t,
                            world_transform=transform,
                            anchor=anchor,
                        )
                    )
                if want_infinite:
                    results.append(
                        HitTestResult(
                            kind=IntersectionKind.INFINITE_EXISTING_PLANE,
                            distance=hit.t,
                            world_transform=transform.copy(),
                            anchor=anchor,
                        )
                    )

        for plane in self.estimated_planes:
            if plane.alignment == PlaneAlignment.HORIZONTAL:
                kind = IntersectionKind.ESTIMATED_HORIZONTAL_PLANE
            else:
                kind = IntersectionKind.ESTIMATED_VERTICAL_PLANE
            if kind not in kinds:
                continue
            hit = ray_plane_intersection(origin, direction, plane.point, plane.normal)
            if not hit.intersects:
                continue
            results.append(
                HitTestResult(
                    kind=kind,
                    distance=hit.t,
                    world_transform=make_transform(hit.point, rotation_from_normal(plane.normal)),
                )
            )

        results.sort(key=lambda r: r.distance)
        return results
