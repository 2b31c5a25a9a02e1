"""Materials module for surface scattering parameters.

This module implements the single blended mirror/diffuse material model:

Components:
    material: Material value type, Taichi-side SurfaceMaterial and the
        fixed-capacity MaterialTable used by the scene

Every primitive owns one material. The path tracer reads albedo (throughput
tint), emission (light source), roughness (mirror/diffuse blend) and carries
metallic unused.
"""

from .material import Material, MaterialTable, SurfaceMaterial

__all__ = [
    "Material",
    "MaterialTable",
    "SurfaceMaterial",
]
