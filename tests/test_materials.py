"""Tests for the material model.

Tests cover:
- Material validation
- MaterialTable storage and kernel-side lookup
"""

import pytest
import taichi as ti


class TestMaterial:
    """Tests for the Material value type."""

    def test_defaults(self):
        """Test default material values."""
        from pathtracer.materials import Material

        mat = Material()
        assert mat.albedo == (1.0, 1.0, 1.0)
        assert mat.emission == (0.0, 0.0, 0.0)
        assert mat.roughness == 1.0
        assert mat.metallic == 0.0
        assert not mat.is_emissive

    def test_emissive(self):
        """Test emissive detection."""
        from pathtracer.materials import Material

        assert Material(emission=(8.0, 7.0, 5.0)).is_emissive

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"albedo": (1.5, 0.0, 0.0)},
            {"albedo": (-0.1, 0.0, 0.0)},
            {"albedo": (0.5, 0.5)},
            {"emission": (-1.0, 0.0, 0.0)},
            {"roughness": 1.1},
            {"roughness": -0.1},
            {"metallic": 2.0},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        """Test that out-of-range parameters are rejected."""
        from pathtracer.materials import Material

        with pytest.raises(ValueError):
            Material(**kwargs)

    def test_frozen(self):
        """Test that materials are immutable."""
        from dataclasses import FrozenInstanceError

        from pathtracer.materials import Material

        mat = Material()
        with pytest.raises(FrozenInstanceError):
            mat.roughness = 0.5


class TestMaterialTable:
    """Tests for field-backed material storage."""

    def test_set_and_get(self):
        """Test that stored materials are visible inside kernels."""
        from pathtracer.materials import Material, MaterialTable

        table = MaterialTable(4)
        table.set(2, Material(albedo=(0.9, 0.1, 0.1), emission=(1.0, 2.0, 3.0), roughness=0.3, metallic=1.0))

        albedo = ti.field(dtype=ti.math.vec3, shape=())
        emission = ti.field(dtype=ti.math.vec3, shape=())
        roughness = ti.field(dtype=ti.f32, shape=())
        metallic = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            mat = table.get(2)
            albedo[None] = mat.albedo
            emission[None] = mat.emission
            roughness[None] = mat.roughness
            metallic[None] = mat.metallic

        test_kernel()
        assert albedo[None].to_numpy().tolist() == pytest.approx([0.9, 0.1, 0.1])
        assert emission[None].to_numpy().tolist() == pytest.approx([1.0, 2.0, 3.0])
        assert roughness[None] == pytest.approx(0.3)
        assert metallic[None] == pytest.approx(1.0)

    def test_out_of_range_slot(self):
        """Test that slots outside the capacity raise IndexError."""
        from pathtracer.materials import Material, MaterialTable

        table = MaterialTable(2)
        with pytest.raises(IndexError):
            table.set(2, Material())
        with pytest.raises(IndexError):
            table.set(-1, Material())
