"""Tests for the drag simulation module."""

import json

import numpy as np
import pytest

from smart_hit_test.core.geometry import make_transform
from smart_hit_test.core.hit_test import TIER_EXISTING_PLANE_GEOMETRY, TIER_INFINITE_PLANE
from smart_hit_test.core.models import (
    Camera,
    EstimatedPlane,
    HitTestResult,
    IntersectionKind,
    PlaneAlignment,
    PlaneAnchor,
)
from smart_hit_test.core.ray_casting import SceneHitTester
from smart_hit_test.simulator.drag import (
    DragSample,
    FramePlacement,
    consolidate_to_intervals,
    load_drag_path_from_json,
    save_drag_result,
    simulate_drag,
)


def create_table_scene() -> SceneHitTester:
    """Camera 1 m above the floor looking down at a small table.

    With a 90° view the table (0.4 m wide at y=0.5) covers screen x 30..70.
    The floor is only known as an estimated plane.
    """
    camera = Camera(
        viewport_width=100,
        viewport_height=100,
        fov_deg=90,
        position=np.array([0.0, 1.0, 0.0]),
        pitch_deg=-90,
    )
    table = PlaneAnchor(
        id="table",
        alignment=PlaneAlignment.HORIZONTAL,
        transform=make_transform([0.0, 0.5, 0.0]),
        extent_x=0.4,
        extent_z=0.4,
    )
    floor = EstimatedPlane(
        id="floor",
        alignment=PlaneAlignment.HORIZONTAL,
        point=np.zeros(3),
        normal=np.array([0.0, 1.0, 0.0]),
    )
    return SceneHitTester(camera, [table], [floor])


def _frame(index, surface):
    if surface is None:
        return FramePlacement(frame=index, result=None, tier=None, object_position=None)
    anchor = PlaneAnchor(
        id=surface,
        alignment=PlaneAlignment.HORIZONTAL,
        transform=np.eye(4),
        extent_x=1.0,
        extent_z=1.0,
    )
    result = HitTestResult(
        kind=IntersectionKind.EXACT_PLANE_GEOMETRY,
        distance=1.0,
        world_transform=np.eye(4),
        anchor=anchor,
    )
    return FramePlacement(frame=index, result=result, tier="existing_plane_geometry", object_position=np.zeros(3))


class TestSimulateDrag:
    """Tests for simulate_drag function."""

    def test_drag_past_table_edge_stays_on_table(self):
        """Infinite planes keep a dragged object at the table's height."""
        samples = [DragSample(0, 50, 50), DragSample(1, 90, 50)]

        result = simulate_drag(samples, create_table_scene())

        assert result.placed_count == 2
        assert result.frames[0].tier == TIER_EXISTING_PLANE_GEOMETRY
        assert result.frames[1].tier == TIER_INFINITE_PLANE
        assert result.final_position[1] == pytest.approx(0.5)
        assert result.final_position[0] == pytest.approx(0.4)

        assert len(result.surface_intervals) == 1
        interval = result.surface_intervals[0]
        assert interval.surface_id == "table"
        assert interval.n_frames == 2

    def test_object_on_floor_does_not_snap_to_table_plane(self):
        """The table's infinite plane is rejected for an object on the floor."""
        samples = [DragSample(0, 90, 50)]

        result = simulate_drag(samples, create_table_scene(), initial_position=np.zeros(3))

        frame = result.frames[0]
        assert frame.result.kind == IntersectionKind.ESTIMATED_HORIZONTAL_PLANE
        assert frame.object_position[1] == pytest.approx(0.0)
        assert result.surface_intervals[0].surface_id == "estimated_horizontal_plane"

    def test_missed_frames_keep_position(self):
        samples = [DragSample(0, 50, 50), DragSample(1, 60, 50)]
        start = np.array([0.1, 0.2, 0.3])

        result = simulate_drag(
            samples, create_table_scene(), allowed_alignments=set(), initial_position=start
        )

        assert result.placed_count == 0
        assert result.missed_count == 2
        assert result.surface_intervals == []
        np.testing.assert_array_equal(result.final_position, start)
        assert result.placed_percentage == pytest.approx(0.0)

    def test_without_details(self):
        result = simulate_drag([DragSample(0, 50, 50)], create_table_scene(), keep_details=False)
        assert result.frames == []
        assert result.total_frames == 1

    def test_to_dict(self):
        result = simulate_drag([DragSample(0, 50, 50)], create_table_scene())
        data = result.to_dict(include_details=True)

        assert data["placed_percentage"] == pytest.approx(100.0)
        assert data["frames"][0]["surface_id"] == "table"
        assert data["final_position"] == pytest.approx([0.0, 0.5, 0.0])


class TestConsolidateToIntervals:
    """Tests for consolidate_to_intervals function."""

    def test_gaps_and_surface_changes_split_intervals(self):
        frames = [
            _frame(0, "a"),
            _frame(1, "a"),
            _frame(2, None),
            _frame(3, "a"),
            _frame(4, "b"),
        ]

        intervals = consolidate_to_intervals(frames)

        assert [(i.start_frame, i.end_frame, i.surface_id, i.n_frames) for i in intervals] == [
            (0, 1, "a", 2),
            (3, 3, "a", 1),
            (4, 4, "b", 1),
        ]

    def test_empty(self):
        assert consolidate_to_intervals([]) == []


class TestDragFiles:
    """Tests for loading and saving drag data."""

    def test_load_object_format(self, tmp_path):
        path = tmp_path / "drag.json"
        path.write_text(json.dumps({"samples": [{"frame": 0, "x": 10, "y": 20}]}))

        samples = load_drag_path_from_json(path)

        assert samples == [DragSample(frame=0, x=10.0, y=20.0)]

    def test_load_array_format(self, tmp_path):
        path = tmp_path / "drag.json"
        path.write_text(json.dumps([{"frame": 3, "x": 1.5, "y": 2.5}]))

        assert load_drag_path_from_json(path)[0].frame == 3

    def test_load_invalid_format(self, tmp_path):
        path = tmp_path / "drag.json"
        path.write_text(json.dumps({"points": []}))

        with pytest.raises(ValueError):
            load_drag_path_from_json(path)

    def test_save_result(self, tmp_path):
        result = simulate_drag([DragSample(0, 50, 50)], create_table_scene())
        path = tmp_path / "result.json"

        save_drag_result(result, path)

        data = json.loads(path.read_text())
        assert data["placed_count"] == 1
        assert data["surface_intervals"][0]["surface_id"] == "table"
