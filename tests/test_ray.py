"""Unit tests for ray structure and vector helpers.

Tests cover:
- Ray construction and ray_at
- normalize_safe including the zero-vector guard
- reflect, lerp and max_component
"""

import math

import pytest
import taichi as ti


class TestRay:
    """Tests for the Ray dataclass."""

    def test_ray_at(self):
        """Test point evaluation along a ray."""
        from pathtracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        p = result[None]
        assert p[0] == pytest.approx(1.0)
        assert p[1] == pytest.approx(2.0)
        assert p[2] == pytest.approx(0.5)


class TestVectorHelpers:
    """Tests for vector utility functions."""

    def test_normalize_safe_unit_length(self):
        """Test that normalize_safe returns a unit vector."""
        from pathtracer.core.ray import normalize_safe, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize_safe(vec3(3.0, 0.0, 4.0))

        test_kernel()
        v = result[None]
        assert v[0] == pytest.approx(0.6, abs=1e-6)
        assert v[1] == pytest.approx(0.0, abs=1e-6)
        assert v[2] == pytest.approx(0.8, abs=1e-6)

    def test_normalize_safe_zero_vector(self):
        """Test that a zero-length vector normalizes to zero instead of NaN."""
        from pathtracer.core.ray import normalize_safe, vec3

        result = ti.field(dtype=ti.math.vec3, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = normalize_safe(vec3(0.0, 0.0, 0.0))
            result[1] = normalize_safe(vec3(1e-6, 0.0, 0.0))

        test_kernel()
        for i in range(2):
            v = result[i]
            assert not any(math.isnan(float(c)) for c in v)
            assert all(float(c) == 0.0 for c in v)

    def test_reflect(self):
        """Test mirror reflection about a normal."""
        from pathtracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(1.0)
        assert r[2] == pytest.approx(0.0)

    def test_lerp_endpoints_and_midpoint(self):
        """Test linear interpolation at t = 0, 0.5 and 1."""
        from pathtracer.core.ray import lerp, vec3

        result = ti.field(dtype=ti.math.vec3, shape=3)

        @ti.kernel
        def test_kernel():
            a = vec3(1.0, 1.0, 1.0)
            b = vec3(0.3, 0.5, 1.0)
            result[0] = lerp(a, b, 0.0)
            result[1] = lerp(a, b, 0.5)
            result[2] = lerp(a, b, 1.0)

        test_kernel()
        assert result[0].to_numpy().tolist() == pytest.approx([1.0, 1.0, 1.0])
        assert result[1].to_numpy().tolist() == pytest.approx([0.65, 0.75, 1.0])
        assert result[2].to_numpy().tolist() == pytest.approx([0.3, 0.5, 1.0])

    def test_max_component(self):
        """Test largest-component selection."""
        from pathtracer.core.ray import max_component, vec3

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = max_component(vec3(0.1, 0.5, 0.2))
            result[1] = max_component(vec3(0.7, 0.5, 0.2))
            result[2] = max_component(vec3(-1.0, -2.0, -0.5))

        test_kernel()
        assert result[0] == pytest.approx(0.5)
        assert result[1] == pytest.approx(0.7)
        assert result[2] == pytest.approx(-0.5)
