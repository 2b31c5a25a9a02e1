"""Bounded scene model: spheres, planes and a sky gradient.

The scene stores a small, fixed number of primitives in Taichi fields
(Structure-of-Arrays layout) together with one material per primitive.
Capacity is fixed at MAX_SPHERES spheres and MAX_PLANES planes; adding a
primitive to a full scene is a silent drop. The add methods return False in
that case so callers can detect it.

Rays that escape the scene pick up a vertical sky gradient that blends from
the horizon color (looking straight down) to the zenith color (looking
straight up).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials import Material
    >>> from pathtracer.scene.model import Scene
    >>> scene = Scene()
    >>> scene.add_sphere((0, 0.5, -3), 0.5, Material(albedo=(0.1, 0.1, 0.9)))
    True
    >>> scene.add_plane((0, 0, 0), (0, 1, 0), Material(albedo=(0.8, 0.8, 0.8)))
    True
"""

import logging
import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import lerp, normalize_safe
from pathtracer.geometry.plane import Plane
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.material import Material, MaterialTable

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Maximum number of primitives supported in the scene
MAX_SPHERES = 16
MAX_PLANES = 4

# Default sky gradient
DEFAULT_SKY_HORIZON = (1.0, 1.0, 1.0)
DEFAULT_SKY_ZENITH = (0.3, 0.5, 1.0)


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material of the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material: Material


@dataclass(frozen=True)
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        plane_index: The index in the plane storage arrays.
        point: A point on the plane.
        normal: The unit normal of the plane.
        material: The material of the plane.
    """

    plane_index: int
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material: Material


@ti.data_oriented
class Scene:
    """Fixed-capacity scene of spheres and planes.

    Scenes are built wholesale (see pathtracer.scene.presets) and are not
    modified while a sampling pass is running.

    Attributes:
        spheres: SphereInfo for every stored sphere, in storage order.
        planes: PlaneInfo for every stored plane, in storage order.
        sky_horizon: Sky color for directions pointing straight down.
        sky_zenith: Sky color for directions pointing straight up.
    """

    def __init__(self) -> None:
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []

        # Sphere storage
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
        self.sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
        self.sphere_materials = MaterialTable(MAX_SPHERES)
        self.num_spheres = ti.field(dtype=ti.i32, shape=())

        # Plane storage
        self.plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
        self.plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
        self.plane_materials = MaterialTable(MAX_PLANES)
        self.num_planes = ti.field(dtype=ti.i32, shape=())

        # Sky gradient
        self._sky_horizon = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._sky_zenith = ti.Vector.field(3, dtype=ti.f32, shape=())

        self.clear()

    def clear(self) -> None:
        """Remove all primitives and restore the default sky."""
        self.spheres.clear()
        self.planes.clear()
        self.num_spheres[None] = 0
        self.num_planes[None] = 0
        self.set_sky(DEFAULT_SKY_HORIZON, DEFAULT_SKY_ZENITH)

    # =========================================================================
    # Building
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> bool:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material: The sphere's material.

        Returns:
            True if the sphere was stored, False if the scene was full.

        Raises:
            ValueError: If the radius is not positive.
        """
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        idx = len(self.spheres)
        if idx >= MAX_SPHERES:
            logger.debug("Sphere capacity (%d) reached; dropping sphere at %s", MAX_SPHERES, center)
            return False

        center = (float(center[0]), float(center[1]), float(center[2]))
        self.sphere_centers[idx] = list(center)
        self.sphere_radii[idx] = radius
        self.sphere_materials.set(idx, material)
        self.num_spheres[None] = idx + 1

        self.spheres.append(
            SphereInfo(sphere_index=idx, center=center, radius=float(radius), material=material)
        )
        return True

    def add_plane(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        material: Material,
    ) -> bool:
        """Add an infinite plane to the scene.

        The normal is normalized before it is stored.

        Args:
            point: Any point on the plane as (x, y, z).
            normal: The plane normal as (x, y, z).
            material: The plane's material.

        Returns:
            True if the plane was stored, False if the scene was full.

        Raises:
            ValueError: If the normal has zero length.
        """
        length = math.sqrt(normal[0] ** 2 + normal[1] ** 2 + normal[2] ** 2)
        if length < 1e-8:
            raise ValueError("Plane normal must have non-zero length")

        idx = len(self.planes)
        if idx >= MAX_PLANES:
            logger.debug("Plane capacity (%d) reached; dropping plane at %s", MAX_PLANES, point)
            return False

        point = (float(point[0]), float(point[1]), float(point[2]))
        unit_normal = (normal[0] / length, normal[1] / length, normal[2] / length)
        self.plane_points[idx] = list(point)
        self.plane_normals[idx] = list(unit_normal)
        self.plane_materials.set(idx, material)
        self.num_planes[None] = idx + 1

        self.planes.append(
            PlaneInfo(plane_index=idx, point=point, normal=unit_normal, material=material)
        )
        return True

    def set_sky(
        self,
        horizon: tuple[float, float, float],
        zenith: tuple[float, float, float],
    ) -> None:
        """Set the sky gradient colors."""
        for name, color in (("horizon", horizon), ("zenith", zenith)):
            if any(c < 0.0 for c in color):
                raise ValueError(f"Sky {name} color {color} has a negative component")
        self.sky_horizon = (float(horizon[0]), float(horizon[1]), float(horizon[2]))
        self.sky_zenith = (float(zenith[0]), float(zenith[1]), float(zenith[2]))
        self._sky_horizon[None] = list(self.sky_horizon)
        self._sky_zenith[None] = list(self.sky_zenith)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def sphere_count(self) -> int:
        """Number of spheres in the scene."""
        return len(self.spheres)

    @property
    def plane_count(self) -> int:
        """Number of planes in the scene."""
        return len(self.planes)

    @property
    def primitive_count(self) -> int:
        """Total number of primitives in the scene."""
        return self.sphere_count + self.plane_count

    @ti.func
    def get_sphere(self, index: ti.i32) -> Sphere:
        """Load sphere ``index`` as a Sphere value."""
        return Sphere(center=self.sphere_centers[index], radius=self.sphere_radii[index])

    @ti.func
    def get_plane(self, index: ti.i32) -> Plane:
        """Load plane ``index`` as a Plane value."""
        return Plane(point=self.plane_points[index], normal=self.plane_normals[index])

    @ti.func
    def sky_color(self, direction: vec3) -> vec3:
        """Sky radiance seen along ``direction``."""
        t = 0.5 * (normalize_safe(direction).y + 1.0)
        return lerp(self._sky_horizon[None], self._sky_zenith[None], t)

    def __repr__(self) -> str:
        return f"Scene(spheres={self.sphere_count}, planes={self.plane_count})"
