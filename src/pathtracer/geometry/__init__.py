"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive, the shared HitRecord and ray-sphere intersection
    plane: Infinite plane with ray-plane intersection and checker pattern

All intersection routines are implemented as Taichi functions (@ti.func) so
they inline into the rendering kernel. Scenes are small enough that the
scene-level query is a linear scan; there is no acceleration structure.

Ray-object intersection follows the pattern:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .plane import (
    CHECKER_DARKEN,
    PARALLEL_EPSILON,
    Plane,
    checker_albedo,
    hit_plane,
    is_dark_checker,
)
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "Plane",
    "hit_plane",
    "checker_albedo",
    "is_dark_checker",
    "CHECKER_DARKEN",
    "PARALLEL_EPSILON",
]
