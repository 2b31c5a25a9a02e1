"""Scene description: primitives, materials, sky and presets."""

from pathtracer.scene.intersection import SceneHitRecord, SceneQuery, nearest_hit, T_MAX, T_MIN
from pathtracer.scene.model import MAX_PLANES, MAX_SPHERES, PlaneInfo, Scene, SphereInfo
from pathtracer.scene.presets import PRESET_COUNT, PRESET_NAMES, build_preset, hsv_to_rgb, preset_primitive_counts

__all__ = [
    "MAX_PLANES",
    "MAX_SPHERES",
    "PRESET_COUNT",
    "PRESET_NAMES",
    "PlaneInfo",
    "Scene",
    "SceneHitRecord",
    "SceneQuery",
    "SphereInfo",
    "T_MAX",
    "T_MIN",
    "build_preset",
    "hsv_to_rgb",
    "nearest_hit",
    "preset_primitive_counts",
]
