"""Compiled-in scene presets.

Two scenes are available:

    0  showcase     one area light over four spheres of different materials
    1  sphere grid  a 5 x 3 grid of spheres with rainbow hues and increasing
                    roughness; the front row is metallic

Both scenes have a single checkered ground plane at y = 0.
"""

import logging

from pathtracer.materials.material import Material
from pathtracer.scene.model import Scene

logger = logging.getLogger(__name__)

PRESET_COUNT = 2

PRESET_NAMES = ("showcase", "sphere grid")

GROUND_POINT = (0.0, 0.0, 0.0)
GROUND_NORMAL = (0.0, 1.0, 0.0)


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[float, float, float]:
    """Convert an HSV color (all components in [0, 1]) to RGB."""
    hh = (h * 6.0) % 6.0
    sector = int(hh // 1.0)
    f = hh - sector
    p = v * (1.0 - s)
    q = v * (1.0 - s * f)
    t = v * (1.0 - s * (1.0 - f))

    if sector == 0:
        return (v, t, p)
    if sector == 1:
        return (q, v, p)
    if sector == 2:
        return (p, v, t)
    if sector == 3:
        return (p, q, v)
    if sector == 4:
        return (t, p, v)
    return (v, p, q)


def _build_showcase(scene: Scene) -> None:
    # Area light
    scene.add_sphere(
        (0.0, 5.0, -3.0), 2.0, Material(albedo=(1.0, 1.0, 1.0), emission=(8.0, 7.0, 5.0))
    )
    # Red, slightly glossy
    scene.add_sphere((-1.5, 0.5, -4.0), 0.5, Material(albedo=(0.9, 0.1, 0.1), roughness=0.3))
    # Blue, mostly diffuse
    scene.add_sphere((0.0, 0.5, -3.0), 0.5, Material(albedo=(0.1, 0.1, 0.9), roughness=0.8))
    # Mirror
    scene.add_sphere(
        (1.5, 0.5, -4.0), 0.5, Material(albedo=(0.9, 0.9, 0.9), roughness=0.05, metallic=1.0)
    )
    # Gold
    scene.add_sphere(
        (0.5, 1.0, -5.0), 1.0, Material(albedo=(1.0, 0.8, 0.3), roughness=0.2, metallic=1.0)
    )

    scene.add_plane(GROUND_POINT, GROUND_NORMAL, Material(albedo=(0.8, 0.8, 0.8), roughness=0.9))


def _build_sphere_grid(scene: Scene) -> None:
    scene.add_sphere(
        (0.0, 10.0, -5.0), 3.0, Material(albedo=(1.0, 1.0, 1.0), emission=(10.0, 9.0, 7.0))
    )

    for i in range(-2, 3):
        for j in range(-2, 1):
            hue = ((i + 2) + (j + 2) * 0.3) / 5.0
            scene.add_sphere(
                (i * 1.2, 0.4, -4.0 + j * 1.5),
                0.4,
                Material(
                    albedo=hsv_to_rgb(hue, 0.8, 0.9),
                    roughness=0.1 + (i + 2) * 0.2,
                    metallic=1.0 if j == 0 else 0.0,
                ),
            )

    scene.add_plane(GROUND_POINT, GROUND_NORMAL, Material(albedo=(0.7, 0.7, 0.75), roughness=0.5))


_BUILDERS = (_build_showcase, _build_sphere_grid)


def build_preset(scene: Scene, index: int) -> int:
    """Clear ``scene`` and fill it with preset ``index``.

    Args:
        scene: The scene to rebuild.
        index: Preset index in [0, PRESET_COUNT). Anything else falls back
            to preset 0.

    Returns:
        The index of the preset that was actually built.
    """
    if not 0 <= index < PRESET_COUNT:
        logger.warning("Unknown scene preset %r, falling back to preset 0", index)
        index = 0

    scene.clear()
    _BUILDERS[index](scene)
    logger.debug(
        "Built preset %d (%s): %d spheres, %d planes",
        index,
        PRESET_NAMES[index],
        scene.sphere_count,
        scene.plane_count,
    )
    return index


def preset_primitive_counts(index: int) -> tuple[int, int]:
    """Expected (spheres, planes) for preset ``index``."""
    if index == 1:
        return (16, 1)
    return (5, 1)
