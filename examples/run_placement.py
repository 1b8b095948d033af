#!/usr/bin/env python3
"""Example script demonstrating the placement resolver.

This script shows how to:
1. Load a scene
2. Resolve a single placement
3. Replay a drag gesture
4. Generate a 3D visualization

Usage:
    python examples/run_placement.py
"""

from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from smart_hit_test.core.hit_test import get_detailed_placement_info, smart_hit_test_from_config
from smart_hit_test.core.models import SceneConfig
from smart_hit_test.core.ray_casting import SceneHitTester
from smart_hit_test.simulator.drag import load_drag_path_from_json, simulate_drag
from smart_hit_test.visualization.scene_builder import visualize_placement


def main():
    """Run example placement."""
    project_root = Path(__file__).parent.parent
    config_path = project_root / "config" / "default_scene.json"
    drag_path = project_root / "data" / "sample_drag_path.json"

    print("=" * 60)
    print("Smart Hit Test - Example")
    print("=" * 60)

    print("\n1. Loading scene...")
    config = SceneConfig.from_json_file(config_path)
    print(f"   - Loaded {len(config.anchors)} anchors")
    print(f"   - Loaded {len(config.estimated_planes)} estimated planes")

    print("\n2. Resolving placement at viewport center...")
    result = smart_hit_test_from_config(config)
    if result is not None:
        x, y, z = result.position
        print(f"   - Kind: {result.kind.value}")
        print(f"   - Position: ({x:.3f}, {y:.3f}, {z:.3f})")
        print(f"   - Distance: {result.distance:.3f} m")
    else:
        print("   - No placement")

    print("\n3. Replaying drag gesture...")
    provider = SceneHitTester.from_config(config)
    if drag_path.exists():
        samples = load_drag_path_from_json(drag_path)
        print(f"   - Loaded {len(samples)} frames")

        drag = simulate_drag(
            samples,
            provider,
            allowed_alignments=config.placement.allowed_alignments,
            initial_position=result.position if result is not None else None,
        )
        print(f"   - Placed frames: {drag.placed_count}/{drag.total_frames}")
        for interval in drag.surface_intervals:
            print(f"     - frames {interval.start_frame}-{interval.end_frame} on {interval.surface_id}")
    else:
        print(f"   - Warning: Drag path not found at {drag_path}")

    print("\n4. Creating visualization...")
    try:
        fig = visualize_placement(config)
        output_path = project_root / "examples" / "placement.html"
        fig.write_html(str(output_path))
        print(f"   - Saved interactive visualization to: {output_path}")
    except Exception as e:
        print(f"   - Visualization skipped (error: {e})")
        print("   - Make sure plotly is installed: pip install plotly")

    print("\n5. Detailed placement analysis...")
    details = get_detailed_placement_info(
        provider,
        infinite_plane=True,
        allowed_alignments=config.placement.allowed_alignments,
    )
    print(f"   - Candidates considered: {details['n_candidates']}")
    print(f"   - Tier: {details['tier']}")

    print("\n" + "=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
