"""Service functions for scripting object placement against a scene file.

This module provides simple, automation-friendly functions around the
placement resolver. They load a scene description once (cached per path),
run the reference hit tester and return plain Python values that are easy to
print, serialize or feed into other tools.

Example:
    ```python
    from smart_hit_test.integration import find_placement

    position = find_placement(500, 400, config_path="config/default_scene.json")
    if position is not None:
        print("Place object at", position)
    ```
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from ..core.hit_test import smart_hit_test_with_tier
from ..core.models import PlaneAlignment, ResolutionRequest, SceneConfig
from ..core.ray_casting import SceneHitTester

logger = logging.getLogger(__name__)

# Default scene path (can be overridden)
DEFAULT_SCENE_PATH = Path(__file__).parent.parent.parent / "config" / "default_scene.json"

# Cached scene to avoid reloading on every call
_cached_scene: Optional[SceneConfig] = None
_cached_scene_path: Optional[str] = None

_STATES = {
    "existing_plane_geometry": "exact_plane",
    "infinite_plane": "infinite_plane",
    "estimated_plane": "estimated_plane",
}


def load_scene(config_path: Optional[Union[str, Path]] = None) -> SceneConfig:
    """Load a scene, with caching for performance.

    Args:
        config_path: Path to scene file. If None, uses default.

    Returns:
        SceneConfig object.
    """
    global _cached_scene, _cached_scene_path

    if config_path is None:
        config_path = DEFAULT_SCENE_PATH

    config_path_str = str(config_path)

    # Return cached scene if path matches
    if _cached_scene is not None and _cached_scene_path == config_path_str:
        return _cached_scene

    # Load and cache
    logger.debug("Scene cache miss for %s", config_path_str)
    _cached_scene = SceneConfig.from_json_file(config_path)
    _cached_scene_path = config_path_str

    return _cached_scene


def clear_scene_cache() -> None:
    """Clear the cached scene.

    Call this if you've modified the scene file and want to reload it.
    """
    global _cached_scene, _cached_scene_path
    _cached_scene = None
    _cached_scene_path = None


def _resolve(
    x: Optional[float],
    y: Optional[float],
    infinite_plane: Optional[bool],
    object_position: Optional[Sequence[float]],
    allowed_alignments: Optional[Iterable[Union[PlaneAlignment, str]]],
    config_path: Optional[Union[str, Path]],
):
    scene = load_scene(config_path)

    if (x is None) != (y is None):
        raise ValueError("Provide both x and y, or neither for the viewport center")
    point = (float(x), float(y)) if x is not None else None

    request = ResolutionRequest(
        point=point,
        infinite_plane=scene.placement.infinite_plane if infinite_plane is None else infinite_plane,
        object_position=object_position,
        allowed_alignments=(
            scene.placement.allowed_alignments if allowed_alignments is None else allowed_alignments
        ),
    )
    provider = SceneHitTester.from_config(scene)
    result, tier = smart_hit_test_with_tier(provider, request)
    return request, result, tier


def find_placement(
    x: Optional[float] = None,
    y: Optional[float] = None,
    infinite_plane: Optional[bool] = None,
    object_position: Optional[Sequence[float]] = None,
    allowed_alignments: Optional[Iterable[Union[PlaneAlignment, str]]] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> Optional[list[float]]:
    """Find where to place an object under a screen point.

    This is the simplest entry point: it returns the world position as a
    plain list, or None when nothing suitable is under the point.

    Args:
        x: Screen x (None with y=None means the viewport center).
        y: Screen y.
        infinite_plane: Override the scene's infinite-plane default.
        object_position: Current object position (x, y, z), if dragging.
        allowed_alignments: Override the scene's allowed alignments.
        config_path: Optional path to scene file.

    Returns:
        [x, y, z] world position, or None.

    Example:
        >>> from smart_hit_test.integration import find_placement
        >>> position = find_placement(500, 400)
        >>> if position is not None:
        ...     print("Placing at", position)
    """
    _, result, _ = _resolve(x, y, infinite_plane, object_position, allowed_alignments, config_path)
    if result is None:
        return None
    return result.position.tolist()


def get_placement_details(
    x: Optional[float] = None,
    y: Optional[float] = None,
    infinite_plane: Optional[bool] = None,
    object_position: Optional[Sequence[float]] = None,
    allowed_alignments: Optional[Iterable[Union[PlaneAlignment, str]]] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> dict:
    """Get detailed information about a placement.

    Returns more information than find_placement(), useful for dashboards
    or debugging.

    Returns:
        Dictionary with:
        - is_placed: Whether a placement was found
        - tier: Resolver tier that produced it
        - kind: Result kind
        - position: World position [x, y, z]
        - distance: Distance from the camera
        - anchor_id: Backing anchor, if any
        - point: The screen point that was tested
    """
    request, result, tier = _resolve(
        x, y, infinite_plane, object_position, allowed_alignments, config_path
    )
    point = request.point if request.point is not None else load_scene(config_path).camera.viewport_center()

    details = {
        "is_placed": result is not None,
        "tier": tier,
        "kind": None,
        "position": None,
        "distance": None,
        "anchor_id": None,
        "point": [float(point[0]), float(point[1])],
    }
    if result is not None:
        summary = result.to_dict()
        details.update(
            kind=summary["kind"],
            position=summary["position"],
            distance=summary["distance"],
            anchor_id=summary["anchor_id"],
        )
    return details


def get_placement_state(
    x: Optional[float] = None,
    y: Optional[float] = None,
    infinite_plane: Optional[bool] = None,
    object_position: Optional[Sequence[float]] = None,
    allowed_alignments: Optional[Iterable[Union[PlaneAlignment, str]]] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> str:
    """Get a short state string for the placement under a screen point.

    Returns:
        One of: "exact_plane", "infinite_plane", "estimated_plane", "no_placement"
    """
    _, _, tier = _resolve(x, y, infinite_plane, object_position, allowed_alignments, config_path)
    if tier is None:
        return "no_placement"
    return _STATES[tier]
