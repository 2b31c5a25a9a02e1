"""Nearest-hit query over every primitive in a Scene.

The scan is linear: spheres first, then planes, with the upper bound shrunk
to the closest hit found so far. Ties keep the earlier primitive because each
later test is bounded by the current best ``t``.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.geometry.plane import checker_albedo, hit_plane
from pathtracer.geometry.sphere import hit_sphere

vec3 = tm.vec3

# Ray parameter bounds used by the path tracer
T_MIN = 0.001
T_MAX = 1e30


@ti.dataclass
class SceneHitRecord:
    """Closest intersection with its resolved material.

    Attributes:
        hit: 1 if anything was hit, 0 otherwise.
        t: Ray parameter of the hit.
        point: World-space hit point.
        normal: Unit surface normal.
        albedo: Albedo after per-hit modifiers (checker pattern on planes).
        emission: Emitted radiance.
        roughness: Surface roughness.
        metallic: Surface metalness (carried, unused).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    albedo: vec3
    emission: vec3
    roughness: ti.f32
    metallic: ti.f32


@ti.func
def make_scene_miss() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    zero = vec3(0.0, 0.0, 0.0)
    return SceneHitRecord(
        hit=0, t=0.0, point=zero, normal=zero, albedo=zero, emission=zero, roughness=0.0, metallic=0.0
    )


@ti.func
def nearest_hit(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest intersection of a ray with the scene.

    Args:
        scene: The Scene to query.
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        t_min: Minimum accepted t.
        t_max: Maximum accepted t.

    Returns:
        A SceneHitRecord for the closest hit in [t_min, t_max], or a miss.
    """
    result = make_scene_miss()
    closest = t_max

    for i in range(scene.num_spheres[None]):
        rec = hit_sphere(ray_origin, ray_direction, scene.get_sphere(i), t_min, closest)
        if rec.hit == 1:
            closest = rec.t
            mat = scene.sphere_materials.get(i)
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                albedo=mat.albedo,
                emission=mat.emission,
                roughness=mat.roughness,
                metallic=mat.metallic,
            )

    for i in range(scene.num_planes[None]):
        rec = hit_plane(ray_origin, ray_direction, scene.get_plane(i), t_min, closest)
        if rec.hit == 1:
            closest = rec.t
            mat = scene.plane_materials.get(i)
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                albedo=checker_albedo(rec.point, mat.albedo),
                emission=mat.emission,
                roughness=mat.roughness,
                metallic=mat.metallic,
            )

    return result


@ti.data_oriented
class SceneQuery:
    """Run nearest-hit queries from Python, mostly for inspection and tests.

    Args:
        scene: The Scene to query.
    """

    def __init__(self, scene) -> None:
        self.scene = scene
        self._hit = ti.field(dtype=ti.i32, shape=())
        self._t = ti.field(dtype=ti.f32, shape=())
        self._point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._emission = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._roughness = ti.field(dtype=ti.f32, shape=())

    @ti.kernel
    def _query(self, ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
        # Keep the primitive scan out of the top-level parallel loop
        ti.loop_config(serialize=True)
        for _ in range(1):
            rec = nearest_hit(self.scene, vec3(ox, oy, oz), vec3(dx, dy, dz), T_MIN, T_MAX)
            self._hit[None] = rec.hit
            self._t[None] = rec.t
            self._point[None] = rec.point
            self._normal[None] = rec.normal
            self._albedo[None] = rec.albedo
            self._emission[None] = rec.emission
            self._roughness[None] = rec.roughness

    def cast(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> dict | None:
        """Cast one ray.

        Returns:
            None on a miss, otherwise a dict with keys ``t``, ``point``,
            ``normal``, ``albedo``, ``emission`` and ``roughness``.
        """
        self._query(
            float(origin[0]), float(origin[1]), float(origin[2]),
            float(direction[0]), float(direction[1]), float(direction[2]),
        )
        if self._hit[None] == 0:
            return None
        return {
            "t": float(self._t[None]),
            "point": tuple(float(c) for c in self._point[None].to_numpy()),
            "normal": tuple(float(c) for c in self._normal[None].to_numpy()),
            "albedo": tuple(float(c) for c in self._albedo[None].to_numpy()),
            "emission": tuple(float(c) for c in self._emission[None].to_numpy()),
            "roughness": float(self._roughness[None]),
        }
