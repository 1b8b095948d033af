"""Core placement algorithm components."""

from .models import (
    ALL_ALIGNMENTS,
    Camera,
    EstimatedPlane,
    HitTestProvider,
    HitTestResult,
    IntersectionKind,
    PlaneAlignment,
    PlaneAnchor,
    ResolutionRequest,
    SceneConfig,
)
from .hit_test import (
    OBJECT_HEIGHT_TOLERANCE,
    resolve_placement,
    smart_hit_test,
    get_detailed_placement_info,
)
from .ray_casting import SceneHitTester, screen_point_to_ray

__all__ = [
    "ALL_ALIGNMENTS",
    "Camera",
    "EstimatedPlane",
    "HitTestProvider",
    "HitTestResult",
    "IntersectionKind",
    "PlaneAlignment",
    "PlaneAnchor",
    "ResolutionRequest",
    "SceneConfig",
    "OBJECT_HEIGHT_TOLERANCE",
    "resolve_placement",
    "smart_hit_test",
    "get_detailed_placement_info",
    "SceneHitTester",
    "screen_point_to_ray",
]
