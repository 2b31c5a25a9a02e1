"""Surface material model for the path tracer.

A single material model covers every surface in the scene. It blends between
a perfect mirror and a diffuse scatterer using ``roughness``, tints the path
throughput with ``albedo`` and adds ``emission`` as a light source:

    roughness = 0.0  -> perfect mirror reflection
    roughness = 1.0  -> fully diffuse (normal + random unit vector)

``metallic`` is stored alongside the other parameters but does not currently
influence scattering or color.

This module provides:
- Material: Python-side value type with range validation (scene building)
- SurfaceMaterial: Taichi dataclass copied into hit records (kernels)
- MaterialTable: fixed-capacity field storage indexed by primitive

Example:
    >>> red = Material(albedo=(0.9, 0.1, 0.1), roughness=0.3)
    >>> light = Material(albedo=(1.0, 1.0, 1.0), emission=(8.0, 7.0, 5.0))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Material:
    """Material parameters for a scene primitive.

    Attributes:
        albedo: Reflectance color (R, G, B), each component in [0, 1].
        emission: Emitted radiance (R, G, B), each component >= 0.
        roughness: 0 for a mirror, 1 for a diffuse surface.
        metallic: Metalness in [0, 1]; carried but not used for shading.

    Raises:
        ValueError: If any parameter is out of range.
    """

    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0)
    emission: tuple[float, float, float] = (0.0, 0.0, 0.0)
    roughness: float = 1.0
    metallic: float = 0.0

    def __post_init__(self) -> None:
        if len(self.albedo) != 3 or len(self.emission) != 3:
            raise ValueError("Albedo and emission must have exactly 3 components.")

        for i, component in enumerate(self.albedo):
            if component < 0.0 or component > 1.0:
                raise ValueError(
                    f"Albedo component {i} = {component} is outside [0, 1]. "
                    "This would violate energy conservation."
                )

        for i, component in enumerate(self.emission):
            if component < 0.0:
                raise ValueError(f"Emission component {i} = {component} is negative.")

        if self.roughness < 0.0 or self.roughness > 1.0:
            raise ValueError(f"Roughness = {self.roughness} is outside [0, 1].")

        if self.metallic < 0.0 or self.metallic > 1.0:
            raise ValueError(f"Metallic = {self.metallic} is outside [0, 1].")

    @property
    def is_emissive(self) -> bool:
        """Whether the material emits any light."""
        return any(c > 0.0 for c in self.emission)


@ti.dataclass
class SurfaceMaterial:
    """Material values as seen by a single ray hit.

    Copies are free to be modified per hit (e.g. checker darkening of the
    albedo) without touching the stored scene material.
    """

    albedo: vec3
    emission: vec3
    roughness: ti.f32
    metallic: ti.f32


@ti.data_oriented
class MaterialTable:
    """Structure-of-arrays material storage for one primitive kind.

    Args:
        capacity: Number of material slots.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.albedo = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.emission = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self.roughness = ti.field(dtype=ti.f32, shape=capacity)
        self.metallic = ti.field(dtype=ti.f32, shape=capacity)

    def set(self, index: int, material: Material) -> None:
        """Store ``material`` in slot ``index``."""
        if not 0 <= index < self.capacity:
            raise IndexError(f"Material slot {index} is outside [0, {self.capacity}).")
        self.albedo[index] = list(material.albedo)
        self.emission[index] = list(material.emission)
        self.roughness[index] = material.roughness
        self.metallic[index] = material.metallic

    @ti.func
    def get(self, index: ti.i32) -> SurfaceMaterial:
        """Load slot ``index`` as a SurfaceMaterial value."""
        return SurfaceMaterial(
            albedo=self.albedo[index],
            emission=self.emission[index],
            roughness=self.roughness[index],
            metallic=self.metallic[index],
        )
