"""Drag simulation for replaying a gesture frame by frame.

This module feeds a sequence of screen points (one per rendered frame) through
the placement resolver with infinite planes enabled, the way an app moves an
object while the user drags it. The object's position after each frame is
used as the reference height for the next one.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import numpy as np

from ..core.hit_test import smart_hit_test_with_tier
from ..core.models import (
    ALL_ALIGNMENTS,
    HitTestProvider,
    HitTestResult,
    PlaneAlignment,
    ResolutionRequest,
)


@dataclass
class DragSample:
    """A single screen point of a drag gesture.

    Attributes:
        frame: Frame index.
        x: Screen x in view coordinates.
        y: Screen y in view coordinates.
    """

    frame: int
    x: float
    y: float

    @classmethod
    def from_dict(cls, data: dict) -> "DragSample":
        """Create from dictionary."""
        return cls(
            frame=int(data["frame"]),
            x=float(data["x"]),
            y=float(data["y"]),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"frame": self.frame, "x": self.x, "y": self.y}


@dataclass
class FramePlacement:
    """Outcome of one drag frame.

    Attributes:
        frame: Frame index.
        result: The placement chosen this frame (None if skipped).
        tier: Which resolver tier produced the placement.
        object_position: Object position after this frame.
    """

    frame: int
    result: Optional[HitTestResult]
    tier: Optional[str]
    object_position: Optional[np.ndarray]


@dataclass
class SurfaceInterval:
    """Consecutive frames during which the object stayed on one surface.

    Attributes:
        start_frame: First frame of the interval.
        end_frame: Last frame of the interval.
        surface_id: Anchor id, or the result kind for estimated planes.
        n_frames: Number of frames in this interval.
    """

    start_frame: int
    end_frame: int
    surface_id: str
    n_frames: int

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "start": self.start_frame,
            "end": self.end_frame,
            "surface_id": self.surface_id,
            "n_frames": self.n_frames,
        }


@dataclass
class DragResult:
    """Result of a drag simulation.

    Attributes:
        total_frames: Total number of frames processed.
        placed_count: Frames that produced a placement.
        missed_count: Frames skipped because nothing matched.
        surface_intervals: Runs of consecutive frames on the same surface.
        final_position: Object position after the last frame.
        frames: Per-frame results (optional, for detailed analysis).
    """

    total_frames: int
    placed_count: int
    missed_count: int
    surface_intervals: list[SurfaceInterval]
    final_position: Optional[np.ndarray] = None
    frames: list[FramePlacement] = field(default_factory=list)

    @property
    def placed_percentage(self) -> float:
        """Percentage of frames with a placement."""
        if self.total_frames == 0:
            return 0.0
        return 100.0 * self.placed_count / self.total_frames

    def to_dict(self, include_details: bool = False) -> dict:
        """Convert to dictionary."""
        result = {
            "total_frames": self.total_frames,
            "placed_count": self.placed_count,
            "missed_count": self.missed_count,
            "placed_percentage": round(self.placed_percentage, 2),
            "surface_intervals": [i.to_dict() for i in self.surface_intervals],
            "final_position": (
                self.final_position.tolist() if self.final_position is not None else None
            ),
        }
        if include_details:
            result["frames"] = [
                {
                    "frame": f.frame,
                    "is_placed": f.result is not None,
                    "tier": f.tier,
                    "surface_id": surface_id(f.result),
                    "position": (
                        f.object_position.tolist() if f.object_position is not None else None
                    ),
                }
                for f in self.frames
            ]
        return result


def surface_id(result: Optional[HitTestResult]) -> Optional[str]:
    """Identify the surface a result lies on.

    Anchored results are identified by anchor id; estimated planes, which
    have no identity, by their result kind.
    """
    if result is None:
        return None
    if result.anchor is not None:
        return result.anchor.id
    return result.kind.value


def consolidate_to_intervals(frames: list[FramePlacement]) -> list[SurfaceInterval]:
    """Group consecutive placed frames on the same surface into intervals.

    A skipped frame, or a change of surface, closes the current interval.

    Args:
        frames: Frame placements in frame order.

    Returns:
        List of SurfaceInterval objects.
    """
    intervals = []
    current_surface = None
    current_start = None
    current_end = None
    current_count = 0

    for frame in frames:
        surface = surface_id(frame.result)

        if current_surface is not None and surface != current_surface:
            intervals.append(
                SurfaceInterval(
                    start_frame=current_start,
                    end_frame=current_end,
                    surface_id=current_surface,
                    n_frames=current_count,
                )
            )
            current_surface = None

        if surface is None:
            continue

        if current_surface is None:
            current_surface = surface
            current_start = frame.frame
            current_count = 0
        current_end = frame.frame
        current_count += 1

    # Handle final interval if the drag ends on a surface
    if current_surface is not None:
        intervals.append(
            SurfaceInterval(
                start_frame=current_start,
                end_frame=current_end,
                surface_id=current_surface,
                n_frames=current_count,
            )
        )

    return intervals


def simulate_drag(
    samples: list[DragSample],
    provider: HitTestProvider,
    allowed_alignments: Iterable[PlaneAlignment] = ALL_ALIGNMENTS,
    initial_position: Optional[np.ndarray] = None,
    keep_details: bool = True,
) -> DragResult:
    """Replay a drag gesture against a hit-test provider.

    Each frame resolves a placement with infinite planes enabled and the
    object's current position as reference. Frames without a placement leave
    the object where it was.

    Args:
        samples: Screen points of the gesture in frame order.
        provider: Hit-test provider.
        allowed_alignments: Plane alignments the object may be placed on.
        initial_position: Object position before the drag starts, if placed.
        keep_details: Whether to keep per-frame results.

    Returns:
        DragResult with counts, surface intervals and optionally per-frame details.
    """
    position = np.asarray(initial_position, dtype=float) if initial_position is not None else None
    frames = []

    for sample in samples:
        request = ResolutionRequest(
            point=(sample.x, sample.y),
            infinite_plane=True,
            object_position=position,
            allowed_alignments=allowed_alignments,
        )
        result, tier = smart_hit_test_with_tier(provider, request)
        if result is not None:
            position = result.position
        frames.append(
            FramePlacement(
                frame=sample.frame,
                result=result,
                tier=tier,
                object_position=position,
            )
        )

    placed_count = sum(1 for f in frames if f.result is not None)

    return DragResult(
        total_frames=len(frames),
        placed_count=placed_count,
        missed_count=len(frames) - placed_count,
        surface_intervals=consolidate_to_intervals(frames),
        final_position=position,
        frames=frames if keep_details else [],
    )


def load_drag_path_from_json(path: str | Path) -> list[DragSample]:
    """Load a drag gesture from a JSON file.

    Expected format:
    {
        "samples": [
            {"frame": 0, "x": 500, "y": 400},
            ...
        ]
    }

    Or simply an array of samples.

    Args:
        path: Path to the JSON file.

    Returns:
        List of DragSample objects.
    """
    with open(path, "r") as f:
        data = json.load(f)

    if isinstance(data, list):
        samples = data
    elif isinstance(data, dict) and "samples" in data:
        samples = data["samples"]
    else:
        raise ValueError("Invalid drag path format")

    return [DragSample.from_dict(s) for s in samples]


def save_drag_result(
    result: DragResult,
    path: str | Path,
    include_details: bool = False,
) -> None:
    """Save a drag result to a JSON file."""
    with open(path, "w") as f:
        json.dump(result.to_dict(include_details), f, indent=2)
