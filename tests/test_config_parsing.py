"""Tests for scene loading behavior."""

from pathlib import Path

import numpy as np
import pytest

from smart_hit_test.core.hit_test import smart_hit_test_from_config
from smart_hit_test.core.models import (
    ALL_ALIGNMENTS,
    IntersectionKind,
    PlaneAlignment,
    SceneConfig,
)

DEFAULT_SCENE = Path(__file__).parent.parent / "config" / "default_scene.json"


def _base_scene_dict() -> dict:
    return {
        "camera": {
            "viewport": [100, 100],
            "fov_deg": 90,
            "position": [0.0, 1.0, 0.0],
            "pitch_deg": -90,
        },
        "anchors": [
            {"id": "floor", "alignment": "horizontal", "center": [0.0, 0.0, 0.0], "extent": [1.0, 1.0]},
            {"id": "wall", "alignment": "vertical", "center": [0.0, 1.0, -2.0], "yaw_deg": 90, "extent": [2.0, 2.0]},
        ],
        "estimated_planes": [
            {"id": "est_floor", "alignment": "horizontal", "point": [0.0, 0.0, 0.0]},
            {"id": "est_wall", "alignment": "vertical", "point": [0.0, 0.0, -3.0], "yaw_deg": 90},
        ],
    }


def test_anchor_transforms_are_derived_from_center_and_yaw():
    config = SceneConfig.from_dict(_base_scene_dict())

    floor = config.get_anchor("floor")
    wall = config.get_anchor("wall")

    assert floor.alignment == PlaneAlignment.HORIZONTAL
    np.testing.assert_array_almost_equal(floor.normal, [0.0, 1.0, 0.0])

    assert wall.alignment == PlaneAlignment.VERTICAL
    np.testing.assert_array_almost_equal(wall.center, [0.0, 1.0, -2.0])
    np.testing.assert_array_almost_equal(wall.normal, [1.0, 0.0, 0.0])
    assert wall.extent_x == pytest.approx(2.0)


def test_explicit_transform_is_used():
    data = _base_scene_dict()
    transform = np.eye(4)
    transform[:3, 3] = [0.5, 0.25, -1.0]
    data["anchors"][0] = {
        "id": "floor",
        "alignment": "HORIZONTAL",
        "transform": transform.tolist(),
        "extent": [1.0, 1.0],
    }

    config = SceneConfig.from_dict(data)

    np.testing.assert_array_almost_equal(config.anchors[0].center, [0.5, 0.25, -1.0])


def test_estimated_plane_normals():
    config = SceneConfig.from_dict(_base_scene_dict())
    est_floor, est_wall = config.estimated_planes

    np.testing.assert_array_almost_equal(est_floor.normal, [0.0, 1.0, 0.0])
    np.testing.assert_array_almost_equal(est_wall.normal, [1.0, 0.0, 0.0])


def test_placement_defaults():
    config = SceneConfig.from_dict(_base_scene_dict())
    assert config.placement.infinite_plane is False
    assert config.placement.allowed_alignments == ALL_ALIGNMENTS


def test_placement_overrides():
    data = _base_scene_dict()
    data["placement"] = {"infinite_plane": True, "allowed_alignments": ["vertical"]}

    config = SceneConfig.from_dict(data)

    assert config.placement.infinite_plane is True
    assert config.placement.allowed_alignments == frozenset({PlaneAlignment.VERTICAL})


def test_unknown_alignment_rejected():
    data = _base_scene_dict()
    data["anchors"][0]["alignment"] = "diagonal"
    with pytest.raises(ValueError, match="Unknown plane alignment"):
        SceneConfig.from_dict(data)


def test_missing_extent_rejected():
    data = _base_scene_dict()
    del data["anchors"][0]["extent"]
    with pytest.raises(ValueError, match="extent"):
        SceneConfig.from_dict(data)


def test_missing_camera_rejected():
    data = _base_scene_dict()
    del data["camera"]
    with pytest.raises(ValueError, match="camera"):
        SceneConfig.from_dict(data)


def test_degenerate_boundary_rejected():
    data = _base_scene_dict()
    data["anchors"][0]["boundary"] = [[0.0, 0.0], [1.0, 0.0]]
    with pytest.raises(ValueError, match="boundary"):
        SceneConfig.from_dict(data)


def test_to_dict_reloads_same_scene():
    config = SceneConfig.from_dict(_base_scene_dict())
    reloaded = SceneConfig.from_dict(config.to_dict())

    assert [a.id for a in reloaded.anchors] == ["floor", "wall"]
    for original, copy in zip(config.anchors, reloaded.anchors):
        np.testing.assert_array_almost_equal(copy.transform, original.transform)
    assert reloaded.camera.pitch_deg == pytest.approx(-90)


def test_default_scene_places_on_floor():
    """The shipped scene's viewport center lands inside the floor anchor."""
    config = SceneConfig.from_json_file(DEFAULT_SCENE)

    result = smart_hit_test_from_config(config)

    assert result is not None
    assert result.kind == IntersectionKind.EXACT_PLANE_GEOMETRY
    assert result.anchor.id == "floor"
    np.testing.assert_array_almost_equal(result.position, [0.0, 0.0, -1.5 * np.sqrt(3)])
