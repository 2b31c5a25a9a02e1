"""Render configuration.

Example:
    >>> from pathtracer.config import RenderConfig
    >>> config = RenderConfig(width=200, height=150, initial_scene=1)
"""

from dataclasses import dataclass, field

from pathtracer.camera.orbit import OrbitCameraParams
from pathtracer.core.progressive import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from pathtracer.scene.presets import PRESET_COUNT


@dataclass(frozen=True)
class RenderConfig:
    """Settings for a RaytracerSimulation.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Base seed of the per-pixel random streams.
        initial_scene: Preset index loaded at startup.
        rotate_speed: Camera rotation per tick of a held key, in radians.
        reseed_on_reset: Restart the random streams on every accumulation
            reset. Off by default, so a reset continues the existing streams.
        camera: Orbit geometry and field of view.

    Raises:
        ValueError: If any setting is out of range.
    """

    width: int = 400
    height: int = 300
    seed: int = 42
    initial_scene: int = 0
    rotate_speed: float = 0.02
    reseed_on_reset: bool = False
    camera: OrbitCameraParams = field(default_factory=OrbitCameraParams)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"{self.width}x{self.height} is larger than the {MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT} limit"
            )
        if self.seed < 0:
            raise ValueError(f"Seed must be non-negative, got {self.seed}")
        if not 0 <= self.initial_scene < PRESET_COUNT:
            raise ValueError(
                f"initial_scene = {self.initial_scene} is outside [0, {PRESET_COUNT})"
            )
        if self.rotate_speed <= 0.0:
            raise ValueError(f"rotate_speed must be positive, got {self.rotate_speed}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height
