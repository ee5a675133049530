#!/usr/bin/env python3
"""Render an SDF scene to a PNG, or a turntable to an animated GIF.

The scene is a built-in preset or a JSON scene file written by
SceneManager.save_json(). The orbit camera starts from the preset's framing
and can be adjusted from the command line.

Usage:
    python -m examples.render_scene [options]

Options:
    --preset NAME       Built-in scene: default or showcase (default: showcase)
    --scene PATH        Load primitives from a JSON scene file instead
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 360)
    --yaw RADIANS       Camera yaw around the target
    --pitch RADIANS     Camera pitch above the target
    --distance D        Camera distance from the target
    --orbit-frames N    Render an N-frame turntable instead of one frame
    --tone-map METHOD   none or reinhard (default: none)
    --output OUTPUT     Output file path (default: scene.png, or scene.gif)
    --save-scene PATH   Also write the scene as JSON
    --quiet             Suppress progress output
    --verbose           Enable debug logging

Example:
    python -m examples.render_scene --preset showcase --width 320 --height 180
    python -m examples.render_scene --orbit-frames 36 --output turntable.gif
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render an SDF scene with sphere tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--preset",
        type=str,
        default="showcase",
        help="Built-in scene preset (default: showcase)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to load instead of the preset primitives",
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Image height in pixels (default: 360)")
    parser.add_argument("--yaw", type=float, default=None, help="Camera yaw in radians")
    parser.add_argument("--pitch", type=float, default=None, help="Camera pitch in radians")
    parser.add_argument("--distance", type=float, default=None, help="Camera distance from the target")
    parser.add_argument(
        "--orbit-frames",
        type=int,
        default=0,
        help="Render a turntable with this many frames (default: single frame)",
    )
    parser.add_argument(
        "--tone-map",
        type=str,
        choices=("none", "reinhard"),
        default="none",
        help="Tone mapping for single-frame output (default: none)",
    )
    parser.add_argument("--output", type=str, default=None, help="Output file path")
    parser.add_argument("--save-scene", type=str, default=None, help="Write the scene as JSON")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def render_scene(args: argparse.Namespace) -> Path:
    """Build the scene and camera from the arguments and render.

    Returns:
        Path to the saved image or animation.
    """
    # Lazy imports to allow Taichi initialization first
    from sdfmarch.core.renderer import FrameRenderer
    from sdfmarch.preview.export import save_gif, save_png
    from sdfmarch.scene.presets import create_scene

    scene, camera = create_scene(args.preset)
    if args.scene is not None:
        scene.load_json(args.scene)
    if args.save_scene is not None:
        scene.save_json(args.save_scene)

    overrides = {
        name: value
        for name, value in (("yaw", args.yaw), ("pitch", args.pitch), ("distance", args.distance))
        if value is not None
    }
    # replace() re-runs the camera limits
    camera = dataclasses.replace(camera, **overrides)

    if not args.quiet:
        print(f"Scene: {scene.count} primitives, {args.width}x{args.height}")

    renderer = FrameRenderer(args.width, args.height)
    start_time = time.time()

    if args.orbit_frames > 0:
        output_file = Path(args.output or "scene.gif")

        def progress_callback(done: int, total: int) -> None:
            if not args.quiet:
                elapsed = time.time() - start_time
                fps = done / elapsed if elapsed > 0 else 0.0
                print(f"\r  Progress: {done}/{total} frames - {fps:.1f} fps", end="", flush=True)

        frames = renderer.render_orbit(camera, args.orbit_frames, callback=progress_callback)
        if not args.quiet:
            print()  # Newline after progress
        save_gif(frames, output_file)
    else:
        output_file = Path(args.output or "scene.png")
        renderer.render_camera(camera)
        save_png(renderer, output_file, tone_map=args.tone_map, gamma=2.2)

    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_scene(args)
        return 0
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
