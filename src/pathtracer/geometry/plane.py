"""Infinite plane primitive with ray-plane intersection and checker pattern.

A plane is defined by a point on it and a unit normal. Rays nearly parallel
to the plane are rejected rather than divided through, so a grazing ray is a
miss instead of a hit at an enormous distance.

Ground planes are shaded with a 2x2-unit checkerboard: squares where
floor(x / 2) + floor(z / 2) is even have their albedo darkened. The darkened
albedo only lives in the per-hit copy of the material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.plane import Plane, hit_plane
    >>> ground = Plane(point=ti.math.vec3(0, 0, 0), normal=ti.math.vec3(0, 1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.geometry.sphere import HitRecord, make_miss_record

vec3 = tm.vec3

# Denominators below this magnitude count as parallel to the plane
PARALLEL_EPSILON = 1e-4

# Checker cells are 1 / CHECKER_FREQUENCY units wide
CHECKER_FREQUENCY = 0.5

# Albedo multiplier on dark checker cells
CHECKER_DARKEN = 0.4


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point on the plane (vec3).
        normal: Unit normal of the plane (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        plane: The plane to test against.
        t_min: Minimum accepted t (inclusive).
        t_max: Maximum accepted t (inclusive).

    Returns:
        A HitRecord whose normal is the plane normal. Near-parallel rays
        and hits outside [t_min, t_max] are misses.
        The checkerboard is not applied here; nearest_hit in
        pathtracer.scene.intersection tints the albedo with checker_albedo
        when it resolves the material.
    """
    result = make_miss_record()

    denom = tm.dot(plane.normal, ray_direction)
    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
        if t >= t_min and t <= t_max:
            result = HitRecord(
                hit=1,
                t=t,
                point=ray_origin + t * ray_direction,
                normal=plane.normal,
            )

    return result


@ti.func
def is_dark_checker(point: vec3) -> ti.i32:
    """1 if ``point`` lies on a dark checker cell, 0 otherwise."""
    cell_x = ti.cast(ti.floor(point.x * CHECKER_FREQUENCY), ti.i32)
    cell_z = ti.cast(ti.floor(point.z * CHECKER_FREQUENCY), ti.i32)
    # Even sums are dark; the test is independent of the sign convention of %
    return ti.select((cell_x + cell_z) % 2 == 0, 1, 0)


@ti.func
def checker_albedo(point: vec3, albedo: vec3) -> vec3:
    """Apply the checkerboard pattern to ``albedo`` at ``point``."""
    result = albedo
    if is_dark_checker(point) == 1:
        result = albedo * CHECKER_DARKEN
    return result
