"""Progressive Monte Carlo path tracer built on Taichi.

This package renders small sphere/plane scenes with global illumination,
accumulating one jittered sample per pixel per frame:
- Iterative path tracing with roughness-blended mirror/diffuse bounces
- Deterministic xoshiro128+ random streams, one per pixel
- Progressive accumulation with Reinhard tone mapping to RGBA8
- Orbiting camera and compiled-in preset scenes

Subpackages:
    core: Vector utilities, RNG, integrator, accumulation and the simulation shell
    geometry: Sphere and plane primitives with intersection routines
    materials: Surface material value types and field storage
    scene: Bounded scene model, nearest-hit queries and presets
    camera: Orbiting pinhole camera with jittered ray generation
    preview: PNG export and the interactive GGUI window
"""

__version__ = "0.1.0"
