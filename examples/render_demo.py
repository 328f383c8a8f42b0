#!/usr/bin/env python3
"""Render the demo scene.

This script renders the demo scene (five spheres over a green ground plane)
end to end: it builds the scene, renders it column by column with a seeded
random stream and writes the image as a PNG.

Usage:
    python -m examples.render_demo [options]

Options:
    --width WIDTH           Image width in pixels (default: 1000)
    --height HEIGHT         Image height in pixels (default: 1000)
    --samples SAMPLES       Number of samples per pixel (default: 500)
    --max-bounces BOUNCES   Bounce budget per path (default: 10)
    --seed SEED             Seed for the random stream (default: 0)
    --output OUTPUT         Output file path (default: img.png)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_demo --width 200 --height 200 --samples 20
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1000,
        help="Image width in pixels (default: 1000)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=1000,
        help="Image height in pixels (default: 1000)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Number of samples per pixel (default: 500)",
    )
    parser.add_argument(
        "--max-bounces",
        type=int,
        default=10,
        help="Bounce budget per path (default: 10)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random stream (default: 0)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="img.png",
        help="Output file path (default: img.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_demo(
    width: int = 1000,
    height: int = 1000,
    samples: int = 500,
    max_bounces: int = 10,
    seed: int = 0,
    output_path: str = "img.png",
    quiet: bool = False,
) -> Path:
    """Render the demo scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Number of samples per pixel.
        max_bounces: Bounce budget per path.
        seed: Seed for the random stream.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.solver import Solver
    from pathtracer.preview.export import save_png
    from pathtracer.scene.demo import create_demo_scene

    if not quiet:
        print(f"Creating demo scene ({width}x{height})...")

    _, camera = create_demo_scene()
    solver = Solver(camera, (width, height), samples=samples, max_bounces=max_bounces)

    if not quiet:
        print("Beginning render...")

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            progress_pct = (done / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {done}/{total} columns ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    image = solver.solve(seed=seed, callback=progress_callback)

    render_time = time.time() - start_time
    if not quiet:
        print()  # Newline after progress
        print(f"Render complete in {render_time:.2f} secs.")

    output_file = Path(output_path)
    if not quiet:
        print(f"Writing to {output_file}...")
    save_png(image, output_file)

    if not quiet:
        print(f"File written to '{output_file.absolute()}'")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Initialize Taichi
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
        render_demo(
            width=args.width,
            height=args.height,
            samples=args.samples,
            max_bounces=args.max_bounces,
            seed=args.seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
