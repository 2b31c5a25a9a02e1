"""Interactive path tracing simulation.

RaytracerSimulation ties a preset scene, an orbiting camera and a
progressive renderer together behind a small command surface:

    rotate_camera(delta)   orbit the camera; any movement resets accumulation
    next_scene()           cycle to the next preset and reset
    toggle_pause()         stop or resume sampling
    reset_accumulation()   discard all samples
    tick()                 one sampling pass per frame when not paused

Finished frames are handed to an optional sink callable. The simulation
never talks to a window directly; see pathtracer.preview for that.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.simulation import RaytracerSimulation
    >>> sim = RaytracerSimulation()
    >>> sim.tick()
    True
    >>> sim.status.sample_count
    1
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from pathtracer.camera.orbit import OrbitCamera
from pathtracer.config import RenderConfig
from pathtracer.core.progressive import ProgressiveRenderer
from pathtracer.scene.model import Scene
from pathtracer.scene.presets import PRESET_COUNT, PRESET_NAMES, build_preset

logger = logging.getLogger(__name__)

# Receives every completed (height, width, 4) RGBA8 frame
FrameSink = Callable[[npt.NDArray[np.uint8]], None]

CONTROLS_HELP = "A/D: rotate camera | TAB: scene | SPACE: pause | R: reset | ESC: quit"


@dataclass(frozen=True)
class SimulationStatus:
    """Snapshot of the values shown on the HUD.

    Attributes:
        sample_count: Passes accumulated since the last reset.
        scene_index: Active preset index (0-based).
        scene_count: Number of available presets.
        paused: Whether sampling is paused.
    """

    sample_count: int
    scene_index: int
    scene_count: int
    paused: bool


class RaytracerSimulation:
    """Scene, camera and progressive renderer driven by discrete commands.

    Args:
        config: Render settings; defaults to RenderConfig().
        sink: Optional callable receiving each completed frame.
    """

    def __init__(self, config: RenderConfig | None = None, sink: FrameSink | None = None) -> None:
        self.config = config if config is not None else RenderConfig()
        self.sink = sink
        self.paused = False

        self.scene = Scene()
        self.scene_index = build_preset(self.scene, self.config.initial_scene)
        self.camera = OrbitCamera(self.config.camera)
        self.renderer = ProgressiveRenderer(
            self.scene,
            self.camera,
            self.config.width,
            self.config.height,
            seed=self.config.seed,
        )

        logger.info(
            "Simulation ready: %dx%d, scene %d (%s), seed %d",
            self.config.width,
            self.config.height,
            self.scene_index,
            PRESET_NAMES[self.scene_index],
            self.config.seed,
        )

    # =========================================================================
    # Commands
    # =========================================================================

    def rotate_camera(self, delta: float) -> bool:
        """Orbit the camera by ``delta`` radians.

        Returns:
            True if the view changed (and accumulation was reset).
        """
        if not self.camera.rotate(delta):
            return False
        self.reset_accumulation()
        return True

    def next_scene(self) -> int:
        """Switch to the next preset, wrapping around. Returns its index."""
        return self.load_scene((self.scene_index + 1) % PRESET_COUNT)

    def load_scene(self, index: int) -> int:
        """Rebuild the scene from preset ``index`` and reset accumulation.

        Unknown indices fall back to preset 0.

        Returns:
            The index of the preset that was loaded.
        """
        self.scene_index = build_preset(self.scene, index)
        logger.info("Loaded scene %d (%s)", self.scene_index, PRESET_NAMES[self.scene_index])
        self.reset_accumulation()
        return self.scene_index

    def toggle_pause(self) -> bool:
        """Pause or resume sampling. Returns the new paused state."""
        self.paused = not self.paused
        logger.debug("Rendering %s", "paused" if self.paused else "resumed")
        return self.paused

    def reset_accumulation(self) -> None:
        """Discard all accumulated samples."""
        if self.config.reseed_on_reset:
            self.renderer.reseed(self.config.seed)
        self.renderer.reset()

    def tick(self) -> bool:
        """Advance one frame.

        Returns:
            True if a sampling pass ran, False while paused.
        """
        if self.paused:
            return False

        self.renderer.render_pass()
        if self.sink is not None:
            self.sink(self.renderer.frame)
        return True

    # =========================================================================
    # Status
    # =========================================================================

    @property
    def frame(self) -> npt.NDArray[np.uint8]:
        """Read-only view of the current RGBA8 frame."""
        return self.renderer.frame

    @property
    def sample_count(self) -> int:
        """Passes accumulated since the last reset."""
        return self.renderer.sample_count

    @property
    def status(self) -> SimulationStatus:
        """Current HUD values."""
        return SimulationStatus(
            sample_count=self.renderer.sample_count,
            scene_index=self.scene_index,
            scene_count=PRESET_COUNT,
            paused=self.paused,
        )

    def hud_lines(self) -> list[str]:
        """HUD text, one entry per line."""
        status = self.status
        return [
            f"Samples: {status.sample_count}",
            f"Scene: {status.scene_index + 1}/{status.scene_count}",
            "PAUSED" if status.paused else "Rendering...",
            CONTROLS_HELP,
        ]

    def __repr__(self) -> str:
        return (
            f"RaytracerSimulation(scene={self.scene_index}, samples={self.sample_count}, "
            f"paused={self.paused})"
        )
