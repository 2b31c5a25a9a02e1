"""Orbiting pinhole camera with jittered per-pixel ray generation.

The camera sits on a horizontal circle around a fixed look-at point and is
parameterized by a single angle:

    position = (look_at.x + sin(angle) * radius,
                height,
                look_at.z + cos(angle) * radius)

At angle 0 it looks down the -z axis. The orthonormal basis is rebuilt on
the Python side with NumPy whenever the angle changes and stored in 0-d
Taichi fields for use inside kernels:

    forward = normalize(look_at - position)
    right   = normalize(cross(forward, world_up))
    up      = cross(right, forward)

Image coordinates map onto a plane one unit in front of the camera. Row 0 is
the top of the image and the horizontal extent is scaled by the aspect ratio:

    u = ((px + jx) / width * 2 - 1) * aspect * fov_scale
    v = (1 - (py + jy) / height * 2) * fov_scale

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.orbit import OrbitCamera, OrbitCameraParams
    >>> camera = OrbitCamera(OrbitCameraParams())
    >>> camera.get_camera_info()["origin"]
    (0.0, 1.5, 2.0)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize_safe
from pathtracer.core.rng import next_uniform

vec3 = tm.vec3


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class OrbitCameraParams:
    """Configuration for an orbiting camera.

    Attributes:
        look_at: Point the camera orbits around and looks at (x, y, z).
        radius: Horizontal distance from the look-at point.
        height: World-space height of the camera.
        fov_scale: Half-height of the image plane at unit distance
            (the tangent of half the vertical field of view).
        world_up: Up direction used to build the basis.
    """

    look_at: tuple[float, float, float] = (0.0, 0.5, -3.0)
    radius: float = 5.0
    height: float = 1.5
    fov_scale: float = 1.0
    world_up: tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"Orbit radius must be positive, got {self.radius}")
        if self.fov_scale <= 0.0:
            raise ValueError(f"fov_scale must be positive, got {self.fov_scale}")
        if np.linalg.norm(np.asarray(self.world_up, dtype=np.float64)) < 1e-8:
            raise ValueError("world_up must have non-zero length")


@ti.data_oriented
class OrbitCamera:
    """A pinhole camera that orbits a fixed look-at point.

    Args:
        params: Orbit geometry and field of view.
        angle: Initial orbit angle in radians.
    """

    def __init__(self, params: OrbitCameraParams | None = None, angle: float = 0.0) -> None:
        self.params = params if params is not None else OrbitCameraParams()
        self.angle = float(angle)

        self._origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._forward = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._right = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._up = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._fov_scale = ti.field(dtype=ti.f32, shape=())

        self._update_basis()

    # =========================================================================
    # Camera Setup (Python-side)
    # =========================================================================

    def position(self) -> tuple[float, float, float]:
        """World-space camera position for the current angle."""
        look_at = self.params.look_at
        return (
            look_at[0] + math.sin(self.angle) * self.params.radius,
            self.params.height,
            look_at[2] + math.cos(self.angle) * self.params.radius,
        )

    def _update_basis(self) -> None:
        origin = np.array(self.position(), dtype=np.float32)
        look_at = np.array(self.params.look_at, dtype=np.float32)
        world_up = np.array(self.params.world_up, dtype=np.float32)

        forward = look_at - origin
        forward = forward / np.linalg.norm(forward)

        right = np.cross(forward, world_up)
        right = right / np.linalg.norm(right)

        up = np.cross(right, forward)

        self._origin[None] = origin.tolist()
        self._forward[None] = forward.tolist()
        self._right[None] = right.tolist()
        self._up[None] = up.tolist()
        self._fov_scale[None] = self.params.fov_scale

    def set_angle(self, angle: float) -> bool:
        """Move the camera to ``angle``.

        Returns:
            True if the view changed.
        """
        angle = float(angle)
        if angle == self.angle:
            return False
        self.angle = angle
        self._update_basis()
        return True

    def rotate(self, delta: float) -> bool:
        """Orbit by ``delta`` radians. Returns True if the view changed."""
        if delta == 0.0:
            return False
        return self.set_angle(self.angle + delta)

    # =========================================================================
    # Ray Generation (Taichi-side)
    # =========================================================================

    @ti.func
    def generate_ray(self, px: ti.i32, py: ti.i32, width: ti.i32, height: ti.i32, state):
        """Generate a jittered primary ray through pixel (px, py).

        The x jitter is drawn before the y jitter.

        Args:
            px: Pixel column (0 = left).
            py: Pixel row (0 = top).
            width: Image width in pixels.
            height: Image height in pixels.
            state: RNG state of the pixel's stream.

        Returns:
            A tuple (origin, direction, new_state) with a unit direction.
        """
        jx, rng = next_uniform(state)
        jy, rng2 = next_uniform(rng)

        fw = ti.cast(width, ti.f32)
        fh = ti.cast(height, ti.f32)
        aspect = fw / fh
        fov_scale = self._fov_scale[None]

        u = ((ti.cast(px, ti.f32) + jx) / fw * 2.0 - 1.0) * aspect * fov_scale
        v = (1.0 - (ti.cast(py, ti.f32) + jy) / fh * 2.0) * fov_scale

        direction = normalize_safe(self._forward[None] + self._right[None] * u + self._up[None] * v)
        return self._origin[None], direction, rng2

    # =========================================================================
    # Utility Functions
    # =========================================================================

    def get_camera_info(self) -> dict[str, tuple[float, float, float]]:
        """Get current camera state for debugging.

        Returns:
            Dictionary with origin, forward, right and up vectors.
        """
        info = {}
        for name, field in (
            ("origin", self._origin),
            ("forward", self._forward),
            ("right", self._right),
            ("up", self._up),
        ):
            vec = field[None]
            info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
        return info

    def __repr__(self) -> str:
        return f"OrbitCamera(angle={self.angle:.4f}, radius={self.params.radius})"
