"""Tests for progressive sample accumulation.

This module tests the ProgressiveRenderer class which handles:
- Accumulation buffer management
- Sample counting and frame derivation
- Reset and reseed behavior
- Progress callbacks and generator-based rendering
- Determinism of the per-pixel random streams

Note: Imports are done inside test methods so that Taichi is initialized
by the conftest.py fixture before any fields are created.
"""

import numpy as np
import pytest

WIDTH = 16
HEIGHT = 12


def _renderer(scene, seed=42, width=WIDTH, height=HEIGHT):
    from pathtracer.camera import OrbitCamera
    from pathtracer.core.progressive import ProgressiveRenderer

    return ProgressiveRenderer(scene, OrbitCamera(), width, height, seed=seed)


class TestRendererSetup:
    """Tests for construction and validation."""

    def test_initial_state(self, showcase_scene):
        """Test dimensions, counter and the initial black frame."""
        renderer = _renderer(showcase_scene)

        assert renderer.width == WIDTH
        assert renderer.height == HEIGHT
        assert renderer.sample_count == 0
        assert renderer.seed == 42
        assert renderer.frame.shape == (HEIGHT, WIDTH, 4)
        assert renderer.frame.dtype == np.uint8
        assert (renderer.frame[..., :3] == 0).all()
        assert (renderer.frame[..., 3] == 255).all()
        assert (renderer.get_accumulation_numpy() == 0).all()

    @pytest.mark.parametrize(("width", "height"), [(0, 10), (10, 0), (-1, 5), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, showcase_scene, width, height):
        """Test that unsupported dimensions are rejected."""
        with pytest.raises(ValueError):
            _renderer(showcase_scene, width=width, height=height)

    def test_negative_seed(self, showcase_scene):
        """Test that reseeding with a negative seed is rejected."""
        renderer = _renderer(showcase_scene)
        with pytest.raises(ValueError):
            renderer.reseed(-1)

    def test_frame_is_read_only(self, showcase_scene):
        """Test that callers cannot write into the frame."""
        renderer = _renderer(showcase_scene)
        with pytest.raises(ValueError):
            renderer.frame[0, 0, 0] = 1


class TestAccumulation:
    """Tests for passes and the derived frame."""

    def test_render_pass_counts(self, showcase_scene):
        """Test that each pass adds exactly one sample."""
        renderer = _renderer(showcase_scene)
        renderer.render_pass()
        assert renderer.sample_count == 1
        renderer.render_pass()
        renderer.render_pass()
        assert renderer.sample_count == 3

    def test_frame_matches_mean_radiance(self, showcase_scene):
        """Test that the frame is the tone-mapped mean of the accumulation."""
        from pathtracer.core.tonemap import radiance_to_rgba8

        renderer = _renderer(showcase_scene)
        renderer.render(3)

        expected = radiance_to_rgba8(renderer.get_accumulation_numpy() / 3.0)
        np.testing.assert_array_equal(renderer.frame, expected)
        np.testing.assert_allclose(
            renderer.get_radiance_numpy(), renderer.get_accumulation_numpy() / 3.0, rtol=1e-6
        )

    def test_samples_are_non_negative_and_finite(self, showcase_scene):
        """Test that accumulated radiance is finite and non-negative."""
        renderer = _renderer(showcase_scene)
        renderer.render(4)

        accum = renderer.get_accumulation_numpy()
        assert np.isfinite(accum).all()
        assert (accum >= 0.0).all()
        assert accum.sum() > 0.0

    def test_sky_gradient_orientation(self, empty_scene):
        """Test that row 0 is the top of the image."""
        renderer = _renderer(empty_scene)
        renderer.render(2)

        radiance = renderer.get_radiance_numpy()
        # The zenith is bluer (less red) than the horizon
        assert radiance[0, :, 0].mean() < radiance[-1, :, 0].mean()
        assert renderer.frame[0, :, 0].mean() < renderer.frame[-1, :, 0].mean()

    def test_radiance_before_first_pass(self, showcase_scene):
        """Test that the mean radiance is zero without samples."""
        renderer = _renderer(showcase_scene)
        assert (renderer.get_radiance_numpy() == 0).all()

    def test_noise_decreases_with_samples(self, showcase_scene):
        """Test that more samples move the frame closer to a converged reference."""
        from pathtracer.preview.export import compute_rmse

        reference = _renderer(showcase_scene, seed=1234)
        reference.render(128)

        renderer = _renderer(showcase_scene, seed=7)
        renderer.render(1)
        error_1spp = compute_rmse(renderer.frame, reference.frame)
        renderer.render(15)
        error_16spp = compute_rmse(renderer.frame, reference.frame)

        assert error_16spp < error_1spp


class TestReset:
    """Tests for reset and reseed."""

    def test_reset_clears(self, showcase_scene):
        """Test that reset zeroes sums, counter and frame."""
        renderer = _renderer(showcase_scene)
        renderer.render(2)
        renderer.reset()

        assert renderer.sample_count == 0
        assert (renderer.get_accumulation_numpy() == 0).all()
        assert (renderer.frame[..., :3] == 0).all()
        assert (renderer.frame[..., 3] == 255).all()

    def test_pass_after_reset(self, showcase_scene):
        """Test that a pass after reset holds exactly one sample."""
        from pathtracer.core.tonemap import radiance_to_rgba8

        renderer = _renderer(showcase_scene)
        renderer.render(3)
        renderer.reset()
        renderer.render_pass()

        assert renderer.sample_count == 1
        np.testing.assert_array_equal(
            renderer.frame, radiance_to_rgba8(renderer.get_accumulation_numpy())
        )

    def test_reset_continues_streams(self, showcase_scene):
        """Test that reset without reseed draws fresh random numbers."""
        renderer = _renderer(showcase_scene)
        renderer.render_pass()
        first = renderer.get_accumulation_numpy()

        renderer.reset()
        renderer.render_pass()
        assert not np.array_equal(renderer.get_accumulation_numpy(), first)

    def test_reseed_restarts_streams(self, showcase_scene):
        """Test that reseed plus reset reproduces the first pass."""
        renderer = _renderer(showcase_scene)
        renderer.render_pass()
        first = renderer.get_accumulation_numpy()

        renderer.reseed(42)
        renderer.reset()
        renderer.render_pass()
        np.testing.assert_array_equal(renderer.get_accumulation_numpy(), first)


class TestDeterminism:
    """Tests for reproducibility across renderers."""

    def test_same_seed_identical(self, showcase_scene):
        """Test that equal seeds give bit-identical accumulation."""
        a = _renderer(showcase_scene, seed=5)
        b = _renderer(showcase_scene, seed=5)
        a.render(3)
        b.render(3)

        np.testing.assert_array_equal(a.get_accumulation_numpy(), b.get_accumulation_numpy())
        np.testing.assert_array_equal(a.frame, b.frame)

    def test_different_seed_differs(self, showcase_scene):
        """Test that different seeds give different noise."""
        a = _renderer(showcase_scene, seed=5)
        b = _renderer(showcase_scene, seed=6)
        a.render_pass()
        b.render_pass()

        assert not np.array_equal(a.get_accumulation_numpy(), b.get_accumulation_numpy())


class TestProgressReporting:
    """Tests for callbacks and the progressive generator."""

    def test_callback_batches(self, showcase_scene):
        """Test callback arguments for an uneven final batch."""
        renderer = _renderer(showcase_scene)
        calls = []
        renderer.render(5, batch_size=2, callback=lambda current, target: calls.append((current, target)))

        assert calls == [(2, 5), (4, 5), (5, 5)]
        assert renderer.sample_count == 5

    def test_generator_yields(self, showcase_scene):
        """Test that render_progressive yields after each batch."""
        renderer = _renderer(showcase_scene)
        renderer.render_pass()

        progress = list(renderer.render_progressive(4, batch_size=3))
        assert progress == [(4, 5), (5, 5)]

    def test_zero_samples_is_noop(self, showcase_scene):
        """Test that rendering zero samples does nothing."""
        renderer = _renderer(showcase_scene)
        assert list(renderer.render_progressive(0)) == []
        renderer.render(0)
        assert renderer.sample_count == 0

    def test_invalid_batch_size(self, showcase_scene):
        """Test that non-positive batch sizes are rejected."""
        renderer = _renderer(showcase_scene)
        with pytest.raises(ValueError):
            renderer.render(4, batch_size=0)
