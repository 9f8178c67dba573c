"""Render a scene file to an image.

Usage:
    whitted SCENE [options]
    python -m whitted SCENE [options]

Options:
    --output OUTPUT       Output file path (default: the scene's OUTPUT name)
    --max-depth N         Reflection recursion limit (default: 3)
    --arch {cpu,gpu}      Taichi backend (default: cpu)
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    whitted examples/scenes/three_spheres.txt --output three_spheres.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from whitted.scene.loader import load_scene


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="whitted",
        description="Render a scene of spheres and point lights with ray tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scene", type=str, help="Scene description file")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path (default: the scene's OUTPUT name)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Reflection recursion limit (default: 3)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)
    if args.max_depth is not None and args.max_depth < 0:
        parser.error("--max-depth must be non-negative")
    return args


def render_scene_file(
    scene_path: str,
    output_path: str | None = None,
    max_depth: int | None = None,
    quiet: bool = False,
) -> Path:
    """Render a scene file and save the image.

    Taichi must already be initialized.

    Args:
        scene_path: Path to the scene description.
        output_path: Output file path; defaults to the scene's OUTPUT name,
            relative to the working directory.
        max_depth: Reflection recursion limit; None keeps the renderer default.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy import: the renderer allocates Taichi fields
    from whitted.core.renderer import Renderer

    scene = load_scene(scene_path)
    if not quiet:
        print(
            f"Loaded {scene_path}: {scene.width}x{scene.height}, "
            f"{len(scene.spheres)} spheres, {len(scene.lights)} lights"
        )

    if output_path is None:
        output_file = Path(scene.output)
    else:
        output_file = Path(output_path)

    start_time = time.time()
    renderer = Renderer(scene) if max_depth is None else Renderer(scene, max_depth=max_depth)
    renderer.render()
    renderer.save_image(output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    try:
        render_scene_file(
            args.scene,
            output_path=args.output,
            max_depth=args.max_depth,
            quiet=args.quiet,
        )
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
