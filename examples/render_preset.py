#!/usr/bin/env python3
"""Render one of the preset scenes to a PNG file.

Usage:
    python examples/render_preset.py [options]

Options:
    --scene INDEX       Preset scene index (default: 0)
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 300)
    --samples SAMPLES   Number of samples per pixel (default: 64)
    --angle RADIANS     Camera orbit angle (default: 0.0)
    --seed SEED         Random seed (default: 42)
    --output OUTPUT     Output file path (default: preset_<scene>.png)
    --batch-size SIZE   Samples per progress update (default: 8)
    --show              Display the result with Matplotlib
    --quiet             Suppress progress output

Example:
    python examples/render_preset.py --scene 1 --samples 256 --show
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset scene to a PNG file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", type=int, default=0, help="Preset scene index (default: 0)")
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument("--height", type=int, default=300, help="Image height in pixels (default: 300)")
    parser.add_argument(
        "--samples", type=int, default=64, help="Number of samples per pixel (default: 64)"
    )
    parser.add_argument("--angle", type=float, default=0.0, help="Camera orbit angle (default: 0.0)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--output", type=str, default=None, help="Output file path (default: preset_<scene>.png)"
    )
    parser.add_argument(
        "--batch-size", type=int, default=8, help="Samples per progress update (default: 8)"
    )
    parser.add_argument("--show", action="store_true", help="Display the result with Matplotlib")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def initialize_taichi() -> str:
    """Start Taichi on the GPU and return the backend name.

    ti.gpu picks CUDA, Vulkan or Metal, and Taichi drops to the CPU with a
    warning when none is usable.
    """
    ti.init(arch=ti.gpu)
    return ti.lang.impl.current_cfg().arch.name


def render_preset(args: argparse.Namespace) -> Path:
    """Render the requested preset and save it.

    Returns:
        Path to the saved image file.
    """
    from pathtracer.config import RenderConfig
    from pathtracer.core.simulation import RaytracerSimulation
    from pathtracer.preview.export import save_png

    config = RenderConfig(
        width=args.width,
        height=args.height,
        seed=args.seed,
        initial_scene=args.scene,
    )
    sim = RaytracerSimulation(config)
    sim.camera.set_angle(args.angle)
    sim.reset_accumulation()

    if not args.quiet:
        print(f"Rendering scene {args.scene} at {args.width}x{args.height}, {args.samples} spp...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not args.quiet:
            elapsed = time.time() - start_time
            rate = current / elapsed if elapsed > 0 else 0.0
            print(
                f"\r  Progress: {current}/{target} samples - {rate:.1f} passes/s",
                end="",
                flush=True,
            )

    sim.renderer.render(args.samples, batch_size=args.batch_size, callback=progress_callback)

    if not args.quiet:
        print()

    output_file = Path(args.output or f"preset_{args.scene}.png")
    save_png(sim.frame, output_file)

    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    if args.show:
        from pathtracer.preview.display import show_frame

        show_frame(sim.frame, hud_lines=sim.hud_lines())

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    backend = initialize_taichi()
    if not args.quiet:
        print(f"Taichi backend: {backend}")

    try:
        render_preset(args)
        return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
