"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers
    rng: Deterministic xoshiro128+ random streams
    integrator: Iterative path tracing bounce loop
    tonemap: Radiance to RGBA8 display pipeline
    progressive: Per-pixel sample accumulation
    simulation: Command surface driving scene, camera and renderer

All per-pixel work runs inside Taichi kernels; NumPy handles seeding and the
display pipeline.
"""

from .ray import Ray, length_squared, lerp, max_component, normalize_safe, ray_at, reflect, vec3
from .rng import RandomStream, seed_state, seed_streams
from .tonemap import gamma_correct, radiance_to_rgba8, to_uint8, tone_map_reinhard

# Note: integrator, progressive and simulation are NOT imported here to avoid circular imports.
# Import directly from pathtracer.core.progressive or pathtracer.core.simulation when needed.

__all__ = [
    "Ray",
    "ray_at",
    "vec3",
    "length_squared",
    "normalize_safe",
    "reflect",
    "lerp",
    "max_component",
    "RandomStream",
    "seed_state",
    "seed_streams",
    "tone_map_reinhard",
    "gamma_correct",
    "to_uint8",
    "radiance_to_rgba8",
]
