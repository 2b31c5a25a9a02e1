"""Path tracing integrator for Monte Carlo light transport.

This module implements the bounce loop that estimates the radiance arriving
along a camera ray. Each path is traced iteratively for at most MAX_BOUNCES
surface interactions:

    1. Find the nearest hit; a miss picks up the sky color and ends the path.
    2. Add the surface emission, weighted by the current throughput.
    3. End the path when the throughput has dropped below RR_THRESHOLD.
    4. Scatter: blend the mirror direction and a cosine-like diffuse
       direction (normal + random unit vector) by the surface roughness.
    5. Tint the throughput by the surface albedo and continue from a point
       nudged RAY_EPSILON along the normal.

Step 3 is a plain cutoff; surviving paths are not reweighted.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene import Scene, build_preset
    >>> from pathtracer.core.integrator import PathTracer
    >>> scene = Scene()
    >>> build_preset(scene, 0)
    0
    >>> tracer = PathTracer(scene, seed=42)
    >>> r, g, b = tracer.trace((0.0, 1.5, 2.0), (0.0, 0.0, -1.0))
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import lerp, max_component, normalize_safe, reflect
from pathtracer.core.rng import DEFAULT_SEED, random_in_unit_ball, seed_state
from pathtracer.scene.intersection import T_MAX, T_MIN, nearest_hit

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum surface interactions per path
MAX_BOUNCES = 6

# Paths whose largest throughput component falls below this are terminated
RR_THRESHOLD = 0.01

# Offset along the normal for continuation rays to avoid self-intersection
RAY_EPSILON = 0.001


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def scatter_direction(incident: vec3, normal: vec3, roughness: ti.f32, state):
    """Sample the continuation direction at a surface hit.

    Args:
        incident: Direction of the arriving ray.
        normal: Unit surface normal at the hit.
        roughness: 0 gives the mirror direction, 1 the diffuse direction.
        state: Current RNG state.

    Returns:
        A tuple (direction, new_state).
    """
    ball, rng = random_in_unit_ball(state)
    diffuse_dir = normalize_safe(normal + ball)
    reflect_dir = reflect(incident, normal)
    return normalize_safe(lerp(reflect_dir, diffuse_dir, roughness)), rng


@ti.func
def trace_path(scene: ti.template(), ray_origin: vec3, ray_direction: vec3, state):
    """Trace a single path from ``ray_origin`` through the scene.

    Args:
        scene: The Scene to trace against.
        ray_origin: Origin of the primary ray.
        ray_direction: Direction of the primary ray (unit length).
        state: RNG state for this path.

    Returns:
        A tuple (radiance, new_state). Radiance is non-negative. Each bounce
        can add emission, so a single path may return up to MAX_BOUNCES times
        the brightest emission in the scene plus the sky color.
    """
    rng = state
    origin = ray_origin
    direction = ray_direction

    # Accumulated radiance for this path
    radiance = vec3(0.0, 0.0, 0.0)

    # Product of albedos along the path
    throughput = vec3(1.0, 1.0, 1.0)

    # Taichi doesn't support break in ti.func loops
    active = 1

    for _ in range(MAX_BOUNCES):
        if active == 1:
            rec = nearest_hit(scene, origin, direction, T_MIN, T_MAX)

            if rec.hit == 0:
                # Ray escaped
                radiance += throughput * scene.sky_color(direction)
                active = 0
            else:
                radiance += throughput * rec.emission

                if max_component(throughput) < RR_THRESHOLD:
                    active = 0
                else:
                    new_direction, rng = scatter_direction(direction, rec.normal, rec.roughness, rng)
                    throughput *= rec.albedo
                    origin = rec.point + rec.normal * RAY_EPSILON
                    direction = new_direction

    return radiance, rng


# =============================================================================
# Single-ray tracing from Python
# =============================================================================


@ti.data_oriented
class PathTracer:
    """Trace individual rays against a scene from Python scope.

    Used for inspection and tests; full images go through
    ProgressiveRenderer, which traces every pixel in one kernel launch.

    Args:
        scene: The Scene to trace against.
        seed: Seed for the tracer's own random stream.
    """

    def __init__(self, scene, seed: int = DEFAULT_SEED) -> None:
        self.scene = scene
        self._rng_state = ti.Vector.field(4, dtype=ti.u32, shape=())
        self._radiance = ti.Vector.field(3, dtype=ti.f32, shape=())
        self.reseed(seed)

    def reseed(self, seed: int) -> None:
        """Restart the tracer's random stream from ``seed``."""
        self.seed = seed
        self._rng_state.from_numpy(seed_state(seed))

    @property
    def state(self) -> npt.NDArray[np.uint32]:
        """Copy of the current four state words."""
        return self._rng_state.to_numpy()

    @ti.kernel
    def _trace(self, ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
        ti.loop_config(serialize=True)
        for _ in range(1):
            radiance, rng = trace_path(
                self.scene, vec3(ox, oy, oz), normalize_safe(vec3(dx, dy, dz)), self._rng_state[None]
            )
            self._rng_state[None] = rng
            self._radiance[None] = radiance

    def trace(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> tuple[float, float, float]:
        """Trace one path and return its radiance estimate.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z); normalized before tracing.

        Returns:
            Tuple of (R, G, B) radiance values.
        """
        self._trace(
            float(origin[0]), float(origin[1]), float(origin[2]),
            float(direction[0]), float(direction[1]), float(direction[2]),
        )
        color = self._radiance[None]
        return (float(color[0]), float(color[1]), float(color[2]))

    def trace_mean(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        num_samples: int,
    ) -> tuple[float, float, float]:
        """Average ``num_samples`` independent paths along the same ray."""
        if num_samples <= 0:
            raise ValueError(f"num_samples must be positive, got {num_samples}")
        total = [0.0, 0.0, 0.0]
        for _ in range(num_samples):
            sample = self.trace(origin, direction)
            for c in range(3):
                total[c] += sample[c]
        return (total[0] / num_samples, total[1] / num_samples, total[2] / num_samples)
