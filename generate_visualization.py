#!/usr/bin/env python3
"""Generate the placement visualization from the current scene.

Run this script after editing config/default_scene.json to update the visualization.

Usage:
    python generate_visualization.py              # Viewport center
    python generate_visualization.py 700 380      # Specific screen point
"""

import sys
from pathlib import Path

from smart_hit_test.core.models import SceneConfig
from smart_hit_test.visualization.scene_builder import visualize_placement


def main():
    config_path = Path("config/default_scene.json")
    output_path = Path("examples/placement.html")

    point = None
    if len(sys.argv) > 2:
        try:
            point = (float(sys.argv[1]), float(sys.argv[2]))
        except ValueError:
            print(f"Invalid screen point: {sys.argv[1]} {sys.argv[2]}")
            print("Use two numbers, e.g. 500 375")
            sys.exit(1)

    print("=" * 60)
    print("AR Placement Visualization Generator")
    print("=" * 60)

    print("\nLoading scene...")
    config = SceneConfig.from_json_file(config_path)
    print(f"  Anchors: {len(config.anchors)}")
    print(f"  Estimated planes: {len(config.estimated_planes)}")

    print("\nGenerating visualization...")
    fig = visualize_placement(config, point)
    fig.write_html(str(output_path))

    print(f"\nSaved to: {output_path}")
    print("Open in a web browser to view.")


if __name__ == "__main__":
    main()
