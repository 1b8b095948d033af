"""Plotly 3D visualization module."""

from .scene_builder import build_scene, create_anchor_mesh, visualize_placement

__all__ = [
    "build_scene",
    "create_anchor_mesh",
    "visualize_placement",
]
