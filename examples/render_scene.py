#!/usr/bin/env python3
"""Render a scene built in code rather than loaded from a file.

Builds a small still life (a red ellipsoid, a mirror ball and a large
floor sphere lit by two point lights), renders it and saves the image.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 300)
    --max-depth N       Reflection recursion limit (default: 3)
    --output OUTPUT     Output file path (default: still_life.ppm)
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --width 800 --height 600 --output still_life.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

from whitted.scene.model import LightInfo, Scene, SphereInfo, ViewPlane


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene built in code.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width", type=int, default=400, help="Image width in pixels (default: 400)"
    )
    parser.add_argument(
        "--height", type=int, default=300, help="Image height in pixels (default: 300)"
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=3,
        help="Reflection recursion limit (default: 3)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="still_life.ppm",
        help="Output file path (default: still_life.ppm)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def build_still_life(width: int, height: int) -> Scene:
    """Build the still-life scene with a view plane matching the aspect ratio."""
    aspect = width / height
    return Scene(
        view=ViewPlane(near=1.0, left=-aspect, right=aspect, top=1.0, bottom=-1.0),
        width=width,
        height=height,
        spheres=(
            SphereInfo(
                name="floor",
                position=(0.0, -102.0, -10.0),
                scale=(100.0, 100.0, 100.0),
                color=(0.7, 0.7, 0.6),
                ka=0.2,
                kd=0.7,
                ks=0.1,
                kr=0.2,
                specular_exponent=10.0,
            ),
            SphereInfo(
                name="ellipsoid",
                position=(-2.0, -0.5, -9.0),
                scale=(1.5, 1.0, 1.0),
                color=(0.9, 0.1, 0.1),
                ka=0.2,
                kd=0.8,
                ks=0.6,
                kr=0.1,
                specular_exponent=30.0,
            ),
            SphereInfo(
                name="mirror",
                position=(2.0, 0.0, -11.0),
                scale=(1.8, 1.8, 1.8),
                color=(0.1, 0.1, 0.1),
                ka=0.1,
                kd=0.1,
                ks=0.9,
                kr=0.9,
                specular_exponent=200.0,
            ),
        ),
        lights=(
            LightInfo(name="key", position=(6.0, 8.0, 0.0), color=(0.9, 0.9, 0.8)),
            LightInfo(name="fill", position=(-8.0, 3.0, -2.0), color=(0.2, 0.2, 0.4)),
        ),
        background=(0.05, 0.05, 0.1),
        ambient=(0.3, 0.3, 0.3),
        output="still_life.ppm",
    )


def render_still_life(
    width: int = 400,
    height: int = 300,
    max_depth: int = 3,
    output_path: str = "still_life.ppm",
    quiet: bool = False,
) -> Path:
    """Render the still life and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy import to allow Taichi initialization first
    from whitted.core.renderer import Renderer

    if not quiet:
        print(f"Building still life ({width}x{height})...")

    renderer = Renderer(build_still_life(width, height), max_depth=max_depth)

    start_time = time.time()
    renderer.render()
    output_file = renderer.save_image(output_path)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    ti.init(arch=ti.cpu)

    try:
        render_still_life(
            width=args.width,
            height=args.height,
            max_depth=args.max_depth,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
