"""Drag gesture simulation module."""

from .drag import simulate_drag, DragSample, DragResult, SurfaceInterval

__all__ = [
    "simulate_drag",
    "DragSample",
    "DragResult",
    "SurfaceInterval",
]
