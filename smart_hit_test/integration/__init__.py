"""Scripting and automation integration module."""

from .service import find_placement, get_placement_details, get_placement_state

__all__ = [
    "find_placement",
    "get_placement_details",
    "get_placement_state",
]
