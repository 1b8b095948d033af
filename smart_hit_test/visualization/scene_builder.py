"""Plotly 3D visualization of AR scenes and placement decisions.

This module provides functions to create interactive 3D visualizations
of the plane anchors, estimated planes, camera, query ray and the chosen
placement.

Plotly draws its z axis upward, so world coordinates (x, y-up, z) are
plotted as (x, z, y).
"""

from typing import Optional

import numpy as np
import plotly.graph_objects as go

from ..core.geometry import make_transform, rotation_from_normal, to_world
from ..core.hit_test import smart_hit_test_with_tier
from ..core.models import (
    Camera,
    EstimatedPlane,
    HitTestResult,
    PlaneAlignment,
    PlaneAnchor,
    ResolutionRequest,
    SceneConfig,
    ScreenPoint,
)
from ..core.ray_casting import SceneHitTester, screen_point_to_ray

ALIGNMENT_COLORS = {
    PlaneAlignment.HORIZONTAL: "lightgreen",
    PlaneAlignment.VERTICAL: "lightblue",
}


def _plot_coords(points: list[np.ndarray]) -> tuple[list[float], list[float], list[float]]:
    """Split world points into plotly x, y, z lists (y-up mapped to z-up)."""
    x = [float(p[0]) for p in points]
    y = [float(p[2]) for p in points]
    z = [float(p[1]) for p in points]
    return x, y, z


def create_anchor_mesh(anchor: PlaneAnchor, opacity: float = 0.5) -> go.Mesh3d:
    """Create a Plotly mesh for a plane anchor's detected shape.

    The outline is triangulated as a fan, which is exact for convex shapes.

    Args:
        anchor: The anchor to visualize.
        opacity: Transparency (0-1).

    Returns:
        Plotly Mesh3d trace.
    """
    outline = anchor.outline()
    x, y, z = _plot_coords(outline)
    n = len(outline)

    return go.Mesh3d(
        x=x,
        y=y,
        z=z,
        i=[0] * (n - 2),
        j=list(range(1, n - 1)),
        k=list(range(2, n)),
        color=ALIGNMENT_COLORS[anchor.alignment],
        opacity=opacity,
        name=f"Anchor {anchor.id}",
        showlegend=True,
    )


def create_anchor_outline(anchor: PlaneAnchor, color: str = "gray", width: int = 3) -> go.Scatter3d:
    """Create a Plotly line trace around the anchor's detected shape."""
    outline = anchor.outline()
    # Close the loop by repeating the first vertex
    outline.append(outline[0])
    x, y, z = _plot_coords(outline)

    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="lines",
        line=dict(color=color, width=width),
        name=f"Outline {anchor.id}",
        showlegend=False,
    )


def create_estimated_plane_patch(
    plane: EstimatedPlane,
    size: float = 0.6,
    opacity: float = 0.25,
) -> go.Mesh3d:
    """Create a small square patch marking an estimated (unbounded) plane."""
    transform = make_transform(plane.point, rotation_from_normal(plane.normal))
    h = size / 2
    corners = [
        to_world(transform, np.array(c))
        for c in ([-h, 0.0, -h], [h, 0.0, -h], [h, 0.0, h], [-h, 0.0, h])
    ]
    x, y, z = _plot_coords(corners)

    return go.Mesh3d(
        x=x,
        y=y,
        z=z,
        i=[0, 0],
        j=[1, 2],
        k=[2, 3],
        color=ALIGNMENT_COLORS[plane.alignment],
        opacity=opacity,
        name=f"Estimated {plane.id}",
        showlegend=True,
    )


def create_camera_marker(camera: Camera, size: int = 8) -> go.Scatter3d:
    x, y, z = _plot_coords([camera.position])
    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="markers",
        marker=dict(size=size, color="black", symbol="diamond"),
        name="Camera",
        showlegend=True,
    )


def create_query_ray(
    camera: Camera,
    point: ScreenPoint,
    length: float = 5.0,
    color: str = "orange",
) -> go.Scatter3d:
    """Create a line trace for the ray cast through a screen point.

    Args:
        camera: The AR camera.
        point: Screen point the ray passes through.
        length: Length of the ray line to draw.
        color: Line color.

    Returns:
        Plotly Scatter3d trace.
    """
    origin, direction = screen_point_to_ray(camera, point)
    end = origin + length * direction
    x, y, z = _plot_coords([origin, end])

    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="lines",
        line=dict(color=color, width=4),
        name="Query ray",
        showlegend=True,
    )


def create_placement_marker(
    result: HitTestResult,
    color: str = "red",
    size: int = 10,
) -> go.Scatter3d:
    """Create a marker at the chosen placement."""
    x, y, z = _plot_coords([result.position])
    label = result.anchor.id if result.anchor is not None else result.kind.value

    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="markers",
        marker=dict(size=size, color=color, symbol="x"),
        name=f"Placement ({label})",
        showlegend=True,
    )


def create_coordinate_axes(
    origin: tuple[float, float, float] = (0, 0, 0),
    length: float = 1.0,
) -> list[go.Scatter3d]:
    """Create coordinate axis indicators (X=red, Y/up=green, Z=blue)."""
    o = np.array(origin, dtype=float)
    axes = [
        (np.array([length, 0.0, 0.0]), "red", "X"),
        (np.array([0.0, length, 0.0]), "green", "Up"),
        (np.array([0.0, 0.0, length]), "blue", "Z"),
    ]
    traces = []
    for offset, color, label in axes:
        x, y, z = _plot_coords([o, o + offset])
        traces.append(
            go.Scatter3d(
                x=x,
                y=y,
                z=z,
                mode="lines+text",
                line=dict(color=color, width=4),
                text=["", label],
                textposition="top center",
                name=label,
                showlegend=False,
            )
        )
    return traces


def build_scene(
    config: SceneConfig,
    point: Optional[ScreenPoint] = None,
    result: Optional[HitTestResult] = None,
    show_estimated: bool = True,
    show_axes: bool = True,
    title: str = "AR Placement Visualization",
) -> go.Figure:
    """Build a complete Plotly 3D scene.

    Args:
        config: Scene with camera, anchors and estimated planes.
        point: Screen point whose ray should be drawn.
        result: Optional placement to mark.
        show_estimated: Whether to show estimated planes.
        show_axes: Whether to show coordinate axes.
        title: Plot title.

    Returns:
        Plotly Figure object.
    """
    fig = go.Figure()

    if show_axes:
        for trace in create_coordinate_axes():
            fig.add_trace(trace)

    for anchor in config.anchors:
        fig.add_trace(create_anchor_mesh(anchor))
        fig.add_trace(create_anchor_outline(anchor))

    if show_estimated:
        for plane in config.estimated_planes:
            fig.add_trace(create_estimated_plane_patch(plane))

    fig.add_trace(create_camera_marker(config.camera))

    if point is not None:
        fig.add_trace(create_query_ray(config.camera, point))

    if result is not None:
        fig.add_trace(create_placement_marker(result))

    fig.update_layout(
        title=dict(text=title, x=0.5),
        scene=dict(
            xaxis_title="X (m)",
            yaxis_title="Z (m)",
            zaxis_title="Up (m)",
            aspectmode="data",
            camera=dict(
                eye=dict(x=1.5, y=1.5, z=1.0),
            ),
        ),
        legend=dict(
            yanchor="top",
            y=0.99,
            xanchor="left",
            x=0.01,
        ),
        margin=dict(l=0, r=0, t=40, b=0),
    )

    return fig


def visualize_placement(
    config: SceneConfig,
    point: Optional[ScreenPoint] = None,
    object_position: Optional[np.ndarray] = None,
) -> go.Figure:
    """Convenience function to visualize a single placement.

    Runs the resolver with the scene's placement defaults and creates a
    visualization with the result.
    """
    provider = SceneHitTester.from_config(config)
    if point is None:
        point = provider.viewport_center()

    request = ResolutionRequest(
        point=point,
        infinite_plane=config.placement.infinite_plane,
        object_position=object_position,
        allowed_alignments=config.placement.allowed_alignments,
    )
    result, tier = smart_hit_test_with_tier(provider, request)

    status = tier.upper() if tier is not None else "NO PLACEMENT"
    title = f"Placement: {status} (point={point[0]:.0f}, {point[1]:.0f})"

    return build_scene(config=config, point=point, result=result, title=title)
