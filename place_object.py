#!/usr/bin/env python3
"""Command-line tool for resolving an object placement in an AR scene.

It hit-tests a screen point against a scene file and prints where a virtual
object should be placed.

Usage:
    # Viewport center with the default scene:
    python place_object.py

    # Explicit screen point:
    python place_object.py 500 400
    python place_object.py 500 400 --config /path/to/scene.json

    # Dragging an object that currently sits at y=0.75:
    python place_object.py 700 380 --infinite-plane --object-position 1.2 0.75 -2.5

    # Only accept walls, JSON output:
    python place_object.py 500 200 --alignments vertical --json

Returns:
    Prints "x y z" of the placement, or "none" if nothing is under the point.
    Exit code 0 on success.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from smart_hit_test.integration.service import get_placement_details


def main():
    parser = argparse.ArgumentParser(description="Find where to place a virtual object")
    parser.add_argument("x", nargs="?", type=float, help="Screen x (default: viewport center)")
    parser.add_argument("y", nargs="?", type=float, help="Screen y (default: viewport center)")
    parser.add_argument("--config", type=str, help="Path to scene file")
    parser.add_argument(
        "--infinite-plane",
        dest="infinite_plane",
        action="store_true",
        default=None,
        help="Treat existing planes as infinite",
    )
    parser.add_argument(
        "--object-position",
        nargs=3,
        type=float,
        metavar=("X", "Y", "Z"),
        help="Current position of the object being dragged",
    )
    parser.add_argument(
        "--alignments",
        nargs="+",
        choices=["horizontal", "vertical"],
        help="Plane alignments to accept",
    )
    parser.add_argument("--json", action="store_true", help="Output JSON format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        details = get_placement_details(
            args.x,
            args.y,
            infinite_plane=args.infinite_plane,
            object_position=args.object_position,
            allowed_alignments=args.alignments,
            config_path=args.config,
        )

        if args.json:
            print(json.dumps(details))
        elif details["is_placed"]:
            print(" ".join(f"{v:.4f}" for v in details["position"]))
        else:
            print("none")

    except Exception as e:
        if args.json:
            print(json.dumps({"is_placed": False, "error": str(e)}))
        else:
            print("none", file=sys.stdout)
            print(f"Error: {e}", file=sys.stderr)
        sys.exit(0)  # Always exit 0 so callers can treat errors as "no placement"


if __name__ == "__main__":
    main()
