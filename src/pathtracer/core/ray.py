"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the small set of vector helpers
used by the intersection and sampling code. All helpers are Taichi functions
so they can be inlined into kernels.

Degenerate inputs never raise: normalizing a (near) zero-length vector yields
the zero vector instead of NaNs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.ray import Ray, ray_at
    >>> camera_ray = Ray(origin=ti.math.vec3(0, 1.5, 2), direction=ti.math.vec3(0, 0, -1))
    >>> # ray_at(camera_ray, t) inside a kernel gives the point at distance t
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Vectors shorter than this normalize to zero
NORMALIZE_EPSILON = 1e-4


@ti.dataclass
class Ray:
    """Half-line origin + t * direction, t >= 0.

    Attributes:
        origin: Where the ray starts (vec3).
        direction: The direction vector of the ray (vec3). Intersection code
            does not require it to be normalized; sampling code does.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def normalize_safe(v: vec3) -> vec3:
    """Unit vector along ``v``; the zero vector when ``v`` is shorter than NORMALIZE_EPSILON."""
    result = vec3(0.0, 0.0, 0.0)
    len_v = tm.length(v)
    if len_v >= NORMALIZE_EPSILON:
        result = v / len_v
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror ``incident`` about the unit ``normal``: d - 2 (d . n) n."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def lerp(a: vec3, b: vec3, t: ti.f32) -> vec3:
    """Linearly interpolate between a (t = 0) and b (t = 1)."""
    return a * (1.0 - t) + b * t


@ti.func
def max_component(v: vec3) -> ti.f32:
    """Largest of the three components."""
    return ti.max(v.x, ti.max(v.y, v.z))
