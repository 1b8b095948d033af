"""Pick the best placement for virtual objects from AR hit-test results."""

from .core.hit_test import resolve_placement, smart_hit_test
from .core.models import IntersectionKind, PlaneAlignment, ResolutionRequest

__version__ = "0.1.0"

__all__ = [
    "resolve_placement",
    "smart_hit_test",
    "IntersectionKind",
    "PlaneAlignment",
    "ResolutionRequest",
]
