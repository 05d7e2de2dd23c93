#!/usr/bin/env python3
"""Render the default scene to a PNG.

Renders the floor plane, three spheres and point light of the default scene
either in basic mode (one pixel-center ray, no shadows, no gamma) or in
sampled mode (jittered supersampling with shadows and gamma correction).

Usage:
    python -m examples.render_default_scene [options]

Options:
    --width WIDTH        Image width in pixels (default: 512)
    --height HEIGHT      Image height in pixels (default: 512)
    --mode MODE          "basic" or "sampled" (default: sampled)
    --samples SAMPLES    Samples per pixel in sampled mode (default: 64)
    --gamma GAMMA        Display gamma in sampled mode (default: 2.2)
    --seed SEED          Seed for the jitter generator (default: random)
    --bound-shadows      Ignore occluders beyond the light
    --output OUTPUT      Output file path (default: default_scene.png)
    --quiet              Suppress progress output
    --verbose            Enable debug logging

Example:
    python -m examples.render_default_scene --width 256 --height 256 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the default Phong scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=512,
        help="Image height in pixels (default: 512)",
    )
    parser.add_argument(
        "--mode",
        choices=("basic", "sampled"),
        default="sampled",
        help="Rendering mode (default: sampled)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=64,
        help="Samples per pixel in sampled mode (default: 64)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=2.2,
        help="Display gamma in sampled mode (default: 2.2)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the jitter generator (default: random)",
    )
    parser.add_argument(
        "--bound-shadows",
        action="store_true",
        help="Ignore occluders farther away than the light",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="default_scene.png",
        help="Output file path (default: default_scene.png)",
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
    return parser.parse_args(argv)


def render_default_scene(args: argparse.Namespace) -> Path:
    """Render the default scene and save it to ``args.output``.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from phongtrace.config import RenderConfig
    from phongtrace.core.renderer import Renderer

    if args.mode == "basic":
        config = RenderConfig.basic(width=args.width, height=args.height)
    else:
        config = RenderConfig.sampled(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            gamma=args.gamma,
            bound_shadows_to_light=args.bound_shadows,
            seed=args.seed,
        )

    if not args.quiet:
        print(f"Creating default scene ({args.width}x{args.height}, {args.mode} mode)...")

    renderer = Renderer(config)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not args.quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            passes_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} passes "
                f"({progress_pct:.1f}%) - {passes_per_sec:.1f} passes/s",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback)

    if not args.quiet:
        print()  # Newline after progress

    output_file = Path(args.output)
    renderer.save_image(str(output_file))

    total_time = time.time() - start_time
    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

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
        render_default_scene(args)
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
