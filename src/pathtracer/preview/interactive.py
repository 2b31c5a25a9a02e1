"""Keyboard-driven GGUI window around a RaytracerSimulation.

Every frame the window turns keyboard state into simulation commands, runs
one tick and shows the latest frame with a HUD overlay.

Controls:
    A / Left     rotate the camera left (while held)
    D / Right    rotate the camera right (while held)
    Tab          next scene
    Space        pause / resume
    R            reset accumulation
    P            save a PNG snapshot
    Escape       quit

When no display is available the preview logs a warning. Headless ticking
only happens when run() is given max_frames; without a frame limit it
returns at once and the simulation is left untouched.

Example:
    >>> from pathtracer.core.simulation import RaytracerSimulation
    >>> from pathtracer.preview.interactive import InteractivePreview
    >>>
    >>> preview = InteractivePreview(RaytracerSimulation(), scale=2)
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from pathtracer.preview.export import save_snapshot

if TYPE_CHECKING:
    from pathtracer.core.simulation import RaytracerSimulation

logger = logging.getLogger(__name__)

ROTATE_LEFT_KEYS = (ti.ui.LEFT, "a")
ROTATE_RIGHT_KEYS = (ti.ui.RIGHT, "d")
NEXT_SCENE_KEY = ti.ui.TAB
PAUSE_KEY = ti.ui.SPACE
RESET_KEY = "r"
SNAPSHOT_KEY = "p"
QUIT_KEY = ti.ui.ESCAPE

# Keys polled every frame for held-down rotation
HELD_KEYS = ROTATE_LEFT_KEYS + ROTATE_RIGHT_KEYS


@dataclass(frozen=True)
class InputResult:
    """Outcome of one frame of keyboard input.

    Attributes:
        quit: The user asked to close the window.
        snapshot: The user asked for a PNG snapshot.
    """

    quit: bool = False
    snapshot: bool = False


def apply_key_input(
    simulation: RaytracerSimulation,
    pressed: Iterable[str],
    held: Iterable[str],
) -> InputResult:
    """Apply one frame of keyboard state to ``simulation``.

    Args:
        simulation: The simulation to drive.
        pressed: Keys that went down this frame.
        held: Keys currently held down.

    Returns:
        Requests the window itself has to handle.
    """
    pressed = set(pressed)
    held = set(held)

    if NEXT_SCENE_KEY in pressed:
        simulation.next_scene()
    if PAUSE_KEY in pressed:
        simulation.toggle_pause()
    if RESET_KEY in pressed:
        simulation.reset_accumulation()

    speed = simulation.config.rotate_speed
    delta = 0.0
    if any(key in held for key in ROTATE_LEFT_KEYS):
        delta -= speed
    if any(key in held for key in ROTATE_RIGHT_KEYS):
        delta += speed
    if delta != 0.0:
        simulation.rotate_camera(delta)

    return InputResult(quit=QUIT_KEY in pressed, snapshot=SNAPSHOT_KEY in pressed)


def frame_to_display(frame: np.ndarray) -> np.ndarray:
    """Convert an RGBA8 frame to the float RGB (width, height, 3) canvas layout.

    Taichi fields use (x, y) indexing with the origin at the bottom-left,
    so rows are flipped and the axes transposed.
    """
    rgb = frame[..., :3].astype(np.float32) / 255.0
    return np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))


def is_display_available() -> bool:
    """False on headless machines, where opening a GGUI window would fail."""
    if os.name == "nt":
        return True
    has_x_or_wayland = bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
    if sys.platform == "darwin":
        # Local macOS sessions always have a window server
        return has_x_or_wayland or not os.environ.get("SSH_CONNECTION")
    return has_x_or_wayland


class InteractivePreview:
    """GGUI window that shows and steers a RaytracerSimulation.

    Args:
        simulation: The simulation to display and control.
        scale: Integer window scale relative to the render resolution.
        title: Window title.
        snapshot_dir: Directory for PNG snapshots.
    """

    def __init__(
        self,
        simulation: RaytracerSimulation,
        *,
        scale: int = 2,
        title: str = "Path Tracer - Interactive Preview",
        snapshot_dir: str = ".",
    ) -> None:
        if scale < 1:
            raise ValueError(f"scale must be at least 1, got {scale}")

        self.simulation = simulation
        self.scale = scale
        self.snapshot_dir = snapshot_dir
        self._title = title

        self.width = simulation.config.width
        self.height = simulation.config.height

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for the canvas, RGB values stored as vec3
        self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(self.width, self.height))

    def _initialize_window(self) -> bool:
        """Create the GGUI window. Returns False if no window could be opened."""
        if self._window is not None:
            return True

        if not is_display_available():
            logger.warning("No display available; the preview window is disabled")
            return False

        try:
            self._window = ti.ui.Window(
                name=self._title,
                res=(self.width * self.scale, self.height * self.scale),
                vsync=True,
            )
        except RuntimeError as exc:
            logger.warning("Could not open preview window: %s", exc)
            return False

        self._canvas = self._window.get_canvas()
        return True

    def update_image(self, frame: np.ndarray) -> None:
        """Copy an RGBA8 frame into the display field."""
        expected_shape = (self.height, self.width, 4)
        if frame.shape != expected_shape:
            raise ValueError(f"Frame shape {frame.shape} doesn't match expected {expected_shape}")
        self.display_image.from_numpy(frame_to_display(frame))

    def _poll_input(self) -> InputResult:
        assert self._window is not None
        pressed = [event.key for event in self._window.get_events(ti.ui.PRESS)]
        held = [key for key in HELD_KEYS if self._window.is_pressed(key)]
        return apply_key_input(self.simulation, pressed, held)

    def _draw_hud(self) -> None:
        assert self._window is not None
        with self._window.GUI.sub_window("Status", 0.01, 0.01, 0.42, 0.16) as gui:
            for line in self.simulation.hud_lines():
                gui.text(line)

    def snapshot(self) -> str:
        """Save the current frame as a timestamped PNG. Returns its path."""
        return save_snapshot(self.simulation.frame, self.snapshot_dir)

    def run_headless(self, max_frames: int) -> int:
        """Tick the simulation ``max_frames`` times without a window.

        Returns:
            The number of sampling passes that ran.
        """
        return sum(1 for _ in range(max_frames) if self.simulation.tick())

    def run(self, max_frames: int | None = None) -> None:
        """Show frames and handle keys until the user quits.

        Blocks until the window is closed, Escape is pressed, or
        ``max_frames`` frames have been shown.

        Args:
            max_frames: Optional frame limit. Without a display the
                simulation is ticked this many times headless, and if it
                is None, run() returns immediately without ticking.
        """
        if not self._initialize_window():
            if max_frames is not None:
                passes = self.run_headless(max_frames)
                logger.info("Rendered %d passes headless", passes)
            return

        assert self._window is not None and self._canvas is not None

        frames = 0
        while self._window.running:
            result = self._poll_input()
            if result.quit:
                break
            if result.snapshot:
                self.snapshot()

            self.simulation.tick()
            self.update_image(self.simulation.frame)
            self._canvas.set_image(self.display_image)
            self._draw_hud()
            self._window.show()

            frames += 1
            if max_frames is not None and frames >= max_frames:
                break

        self.close()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False
