"""Data models for AR hit testing and object placement."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

import numpy as np

from .geometry import (
    camera_rotation,
    make_transform,
    normalize,
    plane_rotation,
    rotation_part,
    to_local,
    to_world,
    translation,
)

logger = logging.getLogger(__name__)

ScreenPoint = tuple[float, float]


class PlaneAlignment(Enum):
    """Orientation of a detected or estimated plane relative to gravity."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @classmethod
    def parse(cls, value: PlaneAlignment | str) -> PlaneAlignment:
        """Accept an enum member or its (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown plane alignment: {value!r}") from None


class IntersectionKind(Enum):
    """Kind of surface a hit-test result was computed against.

    Attributes:
        EXACT_PLANE_GEOMETRY: Inside the detected shape of an existing plane.
        INFINITE_EXISTING_PLANE: On an existing plane, ignoring its extent.
        ESTIMATED_VERTICAL_PLANE: On a wall guessed from feature points.
        ESTIMATED_HORIZONTAL_PLANE: On a floor/table guessed from feature points.
    """

    EXACT_PLANE_GEOMETRY = "existing_plane_using_geometry"
    INFINITE_EXISTING_PLANE = "existing_plane"
    ESTIMATED_VERTICAL_PLANE = "estimated_vertical_plane"
    ESTIMATED_HORIZONTAL_PLANE = "estimated_horizontal_plane"


ALL_ALIGNMENTS = frozenset({PlaneAlignment.HORIZONTAL, PlaneAlignment.VERTICAL})


def parse_alignments(values: Iterable[PlaneAlignment | str]) -> frozenset[PlaneAlignment]:
    """Normalize any iterable of alignments (or names) to a frozenset."""
    if isinstance(values, (str, PlaneAlignment)):
        values = [values]
    return frozenset(PlaneAlignment.parse(v) for v in values)


@dataclass
class PlaneAnchor:
    """A plane detected and tracked by the AR session.

    Attributes:
        id: Unique identifier for the anchor.
        alignment: Horizontal (floor, table) or vertical (wall).
        transform: 4x4 world transform; local +y is the plane normal.
        extent_x: Size of the detected plane along local x in meters.
        extent_z: Size of the detected plane along local z in meters.
        boundary: Optional polygon [(x, z), ...] in local coordinates giving the
            detected shape. When absent the extent rectangle is used.
    """

    id: str
    alignment: PlaneAlignment
    transform: np.ndarray
    extent_x: float
    extent_z: float
    boundary: Optional[list[tuple[float, float]]] = None

    def __post_init__(self) -> None:
        self.alignment = PlaneAlignment.parse(self.alignment)
        self.transform = np.asarray(self.transform, dtype=float)
        if self.transform.shape != (4, 4):
            raise ValueError(f"Anchor {self.id} transform must be 4x4, got {self.transform.shape}")
        if self.boundary is not None:
            self.boundary = [(float(x), float(z)) for x, z in self.boundary]
            if len(self.boundary) < 3:
                raise ValueError(f"Anchor {self.id} boundary needs at least 3 vertices")

    @property
    def center(self) -> np.ndarray:
        """Anchor origin in world coordinates."""
        return translation(self.transform)

    @property
    def normal(self) -> np.ndarray:
        """Unit plane normal in world coordinates."""
        return normalize(rotation_part(self.transform)[:, 1])

    def to_local(self, world_point: np.ndarray) -> np.ndarray:
        """Express a world point in the anchor's frame."""
        return to_local(self.transform, world_point)

    def outline(self) -> list[np.ndarray]:
        """World-space outline of the detected shape.

        Uses the boundary polygon when present, else the extent rectangle
        corners in order: (-x, -z), (+x, -z), (+x, +z), (-x, +z).
        """
        if self.boundary is not None:
            local = [(x, z) for x, z in self.boundary]
        else:
            hx = self.extent_x / 2
            hz = self.extent_z / 2
            local = [(-hx, -hz), (hx, -hz), (hx, hz), (-hx, hz)]
        return [to_world(self.transform, np.array([x, 0.0, z])) for x, z in local]


@dataclass
class EstimatedPlane:
    """A surface guessed from feature points, not (yet) tracked as an anchor.

    Estimated planes have no extent; hit tests treat them as unbounded.

    Attributes:
        id: Identifier used for reporting.
        alignment: Horizontal or vertical.
        point: Any point on the plane in world coordinates.
        normal: Unit normal in world coordinates.
    """

    id: str
    alignment: PlaneAlignment
    point: np.ndarray
    normal: np.ndarray

    def __post_init__(self) -> None:
        self.alignment = PlaneAlignment.parse(self.alignment)
        self.point = np.asarray(self.point, dtype=float)
        self.normal = normalize(self.normal)


@dataclass(eq=False)
class HitTestResult:
    """One candidate intersection produced by a hit-test provider.

    Results compare by identity: the resolver hands back one of the objects
    it was given, never a copy.

    Attributes:
        kind: Which kind of surface the ray was tested against.
        distance: Distance from the ray origin to the intersection in meters.
        world_transform: 4x4 transform of the intersection (position plus the
            orientation of the surface that was hit).
        anchor: The plane anchor the result was computed against, or None for
            estimated planes.
    """

    kind: IntersectionKind
    distance: float
    world_transform: np.ndarray
    anchor: Optional[PlaneAnchor] = None

    @property
    def position(self) -> np.ndarray:
        """World-space intersection point."""
        return translation(self.world_transform)

    @property
    def alignment(self) -> Optional[PlaneAlignment]:
        """Alignment of the backing anchor (None when there is no anchor)."""
        if self.anchor is None:
            return None
        return self.anchor.alignment

    def to_dict(self) -> dict:
        """Summary suitable for JSON output."""
        return {
            "kind": self.kind.value,
            "distance": float(self.distance),
            "position": self.position.tolist(),
            "anchor_id": self.anchor.id if self.anchor is not None else None,
            "alignment": self.alignment.value if self.alignment is not None else None,
        }


@dataclass
class ResolutionRequest:
    """Parameters of a single placement query.

    Attributes:
        point: Screen point (x, y) in view coordinates; None means the
            viewport center.
        infinite_plane: Treat existing planes as unbounded (useful while
            dragging an object past the detected edge of a surface).
        object_position: Current world position of the object being placed.
            Only its y component is used, as the reference height.
        allowed_alignments: Plane alignments the caller accepts.
    """

    point: Optional[ScreenPoint] = None
    infinite_plane: bool = False
    object_position: Optional[np.ndarray] = None
    allowed_alignments: frozenset[PlaneAlignment] = ALL_ALIGNMENTS

    def __post_init__(self) -> None:
        self.allowed_alignments = parse_alignments(self.allowed_alignments)
        if self.object_position is not None:
            self.object_position = np.asarray(self.object_position, dtype=float)

    @property
    def reference_height(self) -> Optional[float]:
        """World y of the object being placed, if known."""
        if self.object_position is None:
            return None
        return float(self.object_position[1])


class HitTestProvider(Protocol):
    """Interface of the ray-casting engine the resolver consults.

    Implementations return results in their own order; the resolver does not
    assume any sort order.
    """

    def viewport_center(self) -> ScreenPoint:
        """Return the center of the view in screen coordinates."""

    def query(
        self, point: ScreenPoint, kinds: Iterable[IntersectionKind]
    ) -> Sequence[HitTestResult]:
        """Return all results of the requested kinds under ``point``."""


@dataclass
class Camera:
    """Pinhole camera of the AR view.

    Attributes:
        viewport_width: View width in points.
        viewport_height: View height in points.
        fov_deg: Vertical field of view in degrees.
        position: Camera position in world coordinates.
        yaw_deg: Heading about world up (0 looks along -z).
        pitch_deg: Elevation (negative looks down).
    """

    viewport_width: float
    viewport_height: float
    fov_deg: float = 60.0
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    yaw_deg: float = 0.0
    pitch_deg: float = 0.0

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=float)
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ValueError("Camera viewport must have positive width and height")
        if not 0.0 < self.fov_deg < 180.0:
            raise ValueError(f"Camera fov_deg must be in (0, 180), got {self.fov_deg}")

    @property
    def rotation(self) -> np.ndarray:
        """Camera-to-world rotation."""
        return camera_rotation(self.yaw_deg, self.pitch_deg)

    @property
    def aspect(self) -> float:
        return self.viewport_width / self.viewport_height

    def viewport_center(self) -> ScreenPoint:
        return (self.viewport_width / 2, self.viewport_height / 2)


@dataclass
class PlacementConfig:
    """Default placement parameters for a scene.

    Attributes:
        infinite_plane: Default for ResolutionRequest.infinite_plane.
        allowed_alignments: Default accepted plane alignments.
    """

    infinite_plane: bool = False
    allowed_alignments: frozenset[PlaneAlignment] = ALL_ALIGNMENTS


@dataclass
class SceneConfig:
    """Complete description of an AR scene for the reference hit tester.

    Attributes:
        camera: The AR camera.
        anchors: Detected plane anchors.
        estimated_planes: Estimated (untracked) planes.
        placement: Default placement parameters.
        units: Units for measurements (default "meters").
    """

    camera: Camera
    anchors: list[PlaneAnchor] = field(default_factory=list)
    estimated_planes: list[EstimatedPlane] = field(default_factory=list)
    placement: PlacementConfig = field(default_factory=PlacementConfig)
    units: str = "meters"

    def get_anchor(self, anchor_id: str) -> PlaneAnchor:
        for anchor in self.anchors:
            if anchor.id == anchor_id:
                return anchor
        raise KeyError(anchor_id)

    @classmethod
    def from_json_file(cls, path: str | Path) -> SceneConfig:
        """Load a scene from a JSON file."""
        with open(path, "r") as f:
            data = json.load(f)
        config = cls.from_dict(data)
        logger.info(
            "Loaded scene %s: %d anchors, %d estimated planes",
            path,
            len(config.anchors),
            len(config.estimated_planes),
        )
        return config

    @classmethod
    def from_dict(cls, data: dict) -> SceneConfig:
        """Create a scene from a dictionary."""
        camera_data = data.get("camera")
        if not camera_data:
            raise ValueError("Scene must define a camera")

        viewport = camera_data.get("viewport")
        if viewport is None or len(viewport) != 2:
            raise ValueError("Camera viewport must be [width, height]")

        camera = Camera(
            viewport_width=float(viewport[0]),
            viewport_height=float(viewport[1]),
            fov_deg=float(camera_data.get("fov_deg", 60.0)),
            position=np.array(camera_data.get("position", [0.0, 0.0, 0.0]), dtype=float),
            yaw_deg=float(camera_data.get("yaw_deg", 0.0)),
            pitch_deg=float(camera_data.get("pitch_deg", 0.0)),
        )

        def _anchor_transform(anchor_dict: dict, alignment: PlaneAlignment) -> np.ndarray:
            if anchor_dict.get("transform") is not None:
                return np.array(anchor_dict["transform"], dtype=float)
            center = anchor_dict.get("center")
            if center is None or len(center) != 3:
                raise ValueError(
                    f"Anchor {anchor_dict.get('id', '<unknown>')} must define transform or center [x, y, z]"
                )
            rotation = plane_rotation(
                alignment == PlaneAlignment.VERTICAL,
                float(anchor_dict.get("yaw_deg", 0.0)),
            )
            return make_transform(np.array(center, dtype=float), rotation)

        anchors = []
        for a in data.get("anchors", []):
            if "id" not in a:
                raise ValueError("Every anchor needs an id")
            if "alignment" not in a:
                raise ValueError(f"Anchor {a['id']} missing alignment")
            alignment = PlaneAlignment.parse(a["alignment"])

            extent = a.get("extent")
            if extent is None or len(extent) != 2:
                raise ValueError(f"Anchor {a['id']} extent must be [x, z]")

            anchors.append(
                PlaneAnchor(
                    id=a["id"],
                    alignment=alignment,
                    transform=_anchor_transform(a, alignment),
                    extent_x=float(extent[0]),
                    extent_z=float(extent[1]),
                    boundary=a.get("boundary"),
                )
            )

        def _estimated_normal(plane_dict: dict, alignment: PlaneAlignment) -> np.ndarray:
            if plane_dict.get("normal") is not None:
                return np.array(plane_dict["normal"], dtype=float)
            if alignment == PlaneAlignment.HORIZONTAL:
                return np.array([0.0, 1.0, 0.0])
            yaw = math.radians(float(plane_dict.get("yaw_deg", 0.0)))
            return np.array([math.sin(yaw), 0.0, math.cos(yaw)])

        estimated_planes = []
        for p in data.get("estimated_planes", []):
            if "id" not in p:
                raise ValueError("Every estimated plane needs an id")
            if "alignment" not in p or "point" not in p:
                raise ValueError(f"Estimated plane {p['id']} missing alignment/point")
            alignment = PlaneAlignment.parse(p["alignment"])
            estimated_planes.append(
                EstimatedPlane(
                    id=p["id"],
                    alignment=alignment,
                    point=np.array(p["point"], dtype=float),
                    normal=_estimated_normal(p, alignment),
                )
            )

        placement_data = data.get("placement", {})
        placement = PlacementConfig(
            infinite_plane=bool(placement_data.get("infinite_plane", False)),
            allowed_alignments=parse_alignments(
                placement_data.get("allowed_alignments", ["horizontal", "vertical"])
            ),
        )

        return cls(
            camera=camera,
            anchors=anchors,
            estimated_planes=estimated_planes,
            placement=placement,
            units=data.get("units", "meters"),
        )

    def to_dict(self) -> dict:
        """Convert the scene to a dictionary."""
        return {
            "units": self.units,
            "camera": {
                "viewport": [self.camera.viewport_width, self.camera.viewport_height],
                "fov_deg": self.camera.fov_deg,
                "position": self.camera.position.tolist(),
                "yaw_deg": self.camera.yaw_deg,
                "pitch_deg": self.camera.pitch_deg,
            },
            "anchors": [self._anchor_to_dict(a) for a in self.anchors],
            "estimated_planes": [
                {
                    "id": p.id,
                    "alignment": p.alignment.value,
                    "point": p.point.tolist(),
                    "normal": p.normal.tolist(),
                }
                for p in self.estimated_planes
            ],
            "placement": {
                "infinite_plane": self.placement.infinite_plane,
                "allowed_alignments": sorted(a.value for a in self.placement.allowed_alignments),
            },
        }

    @staticmethod
    def _anchor_to_dict(anchor: PlaneAnchor) -> dict:
        data = {
            "id": anchor.id,
            "alignment": anchor.alignment.value,
            "transform": anchor.transform.tolist(),
            "extent": [anchor.extent_x, anchor.extent_z],
        }
        if anchor.boundary is not None:
            data["boundary"] = [list(v) for v in anchor.boundary]
        return data
