"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def empty_scene():
    """A scene with no primitives and the default sky."""
    from pathtracer.scene.model import Scene

    return Scene()


@pytest.fixture
def showcase_scene():
    """A scene holding preset 0."""
    from pathtracer.scene.model import Scene
    from pathtracer.scene.presets import build_preset

    scene = Scene()
    build_preset(scene, 0)
    return scene


@pytest.fixture
def small_config():
    """A RenderConfig small enough for quick sampling passes."""
    from pathtracer.config import RenderConfig

    return RenderConfig(width=16, height=12)
