#!/usr/bin/env python3
"""Interactive progressive path tracer.

Opens a window that refines the image by one sample per pixel every frame.

Usage:
    python examples/interactive_demo.py [--scene INDEX] [--scale N] [--frames N]

Controls:
    A / Left, D / Right   Orbit the camera
    Tab                   Next scene
    Space                 Pause / resume
    R                     Reset accumulation
    P                     Save a PNG snapshot
    Escape                Quit

Without a display, pass --frames to render headless and save the result.
"""

from __future__ import annotations

import argparse
import logging
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Start Taichi on the GPU and return the backend name.

    ti.gpu picks CUDA, Vulkan or Metal, and Taichi drops to the CPU with a
    warning when none is usable.
    """
    ti.init(arch=ti.gpu)
    return ti.lang.impl.current_cfg().arch.name


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive progressive path tracer.")
    parser.add_argument("--scene", type=int, default=0, help="Initial preset scene (default: 0)")
    parser.add_argument("--scale", type=int, default=2, help="Window scale factor (default: 2)")
    parser.add_argument(
        "--frames", type=int, default=None, help="Stop after this many frames (default: run until closed)"
    )
    parser.add_argument(
        "--reseed-on-reset",
        action="store_true",
        help="Restart the random streams whenever accumulation is reset",
    )
    return parser.parse_args()


def main() -> int:
    """Main entry point for the interactive renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Initialize Taichi first (before creating any fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from pathtracer.config import RenderConfig
    from pathtracer.core.simulation import RaytracerSimulation
    from pathtracer.preview.interactive import InteractivePreview, is_display_available

    try:
        config = RenderConfig(initial_scene=args.scene, reseed_on_reset=args.reseed_on_reset)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sim = RaytracerSimulation(config)
    preview = InteractivePreview(sim, scale=args.scale)

    if not is_display_available() and args.frames is None:
        print("Error: No display available. Pass --frames to render headless.")
        return 1

    try:
        preview.run(max_frames=args.frames)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()

    if not is_display_available():
        path = preview.snapshot()
        print(f"Saved {sim.sample_count} spp to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
