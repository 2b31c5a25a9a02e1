"""Tests for the xoshiro128+ random streams.

Tests cover:
- Seed expansion and the zero-word fallback
- Bit-exact agreement of next_u32 with a pure-Python reference
- Value ranges of uniform, signed, unit-ball and hemisphere draws
- Determinism and reseeding of RandomStream
- Independence of per-pixel streams
"""

import numpy as np
import pytest
import taichi as ti

MASK32 = 0xFFFFFFFF


def reference_next(state):
    """Pure-Python xoshiro128+ step used as ground truth."""
    s0, s1, s2, s3 = (int(w) for w in state)
    result = (s0 + s3) & MASK32
    t = (s1 << 9) & MASK32
    s2 ^= s0
    s3 ^= s1
    s1 ^= s2
    s0 ^= s3
    s2 ^= t
    s3 = ((s3 << 11) | (s3 >> 21)) & MASK32
    return result, [s0, s1, s2, s3]


class TestSeeding:
    """Tests for seed_state and seed_streams."""

    def test_seed_state_splits_words(self):
        """Test that the seed is split at 0, 16, 32 and 48 bits."""
        from pathtracer.core.rng import seed_state

        state = seed_state(0x0001_0002_0003_0004)
        assert state.dtype == np.uint32
        assert state.tolist() == [0x00030004, 0x00020003, 0x00010002, 0x00000001]

    def test_seed_state_small_seed(self):
        """Test that a small seed only populates the first word."""
        from pathtracer.core.rng import seed_state

        assert seed_state(42).tolist() == [42, 0, 0, 0]

    def test_seed_state_zero_uses_fallback(self):
        """Test that seed 0 never yields a zero first word."""
        from pathtracer.core.rng import ZERO_SEED_FALLBACK, seed_state

        state = seed_state(0)
        assert state[0] == ZERO_SEED_FALLBACK
        assert np.any(state != 0)

    def test_seed_streams_shape_and_dtype(self):
        """Test per-pixel stream array layout."""
        from pathtracer.core.rng import seed_streams

        states = seed_streams(42, 100)
        assert states.shape == (100, 4)
        assert states.dtype == np.uint32

    def test_seed_streams_are_distinct(self):
        """Test that neighbouring streams start from different states."""
        from pathtracer.core.rng import seed_streams

        states = seed_streams(42, 256)
        unique_rows = {tuple(row) for row in states.tolist()}
        assert len(unique_rows) == 256
        assert np.all(states[:, 0] != 0)

    def test_seed_streams_deterministic(self):
        """Test that the same seed gives the same streams."""
        from pathtracer.core.rng import seed_streams

        np.testing.assert_array_equal(seed_streams(7, 32), seed_streams(7, 32))
        assert not np.array_equal(seed_streams(7, 32), seed_streams(8, 32))


class TestNextU32:
    """Tests for the raw generator step."""

    def test_matches_reference(self):
        """Test that the Taichi step is bit-identical to the reference."""
        from pathtracer.core.rng import next_u32, seed_state

        count = 16
        out = ti.field(dtype=ti.u32, shape=count)
        state = ti.Vector.field(4, dtype=ti.u32, shape=())
        initial = seed_state(0x1234_5678_9ABC_DEF0)
        state.from_numpy(initial)

        @ti.kernel
        def draw():
            ti.loop_config(serialize=True)
            for k in range(count):
                value, new_state = next_u32(state[None])
                state[None] = new_state
                out[k] = value

        draw()

        expected = []
        ref_state = initial.tolist()
        for _ in range(count):
            value, ref_state = reference_next(ref_state)
            expected.append(value)

        assert out.to_numpy().tolist() == expected
        assert state.to_numpy().tolist() == ref_state


class TestRandomStream:
    """Tests for RandomStream draws."""

    def test_uniform_range(self):
        """Test that uniform draws lie in [0, 1)."""
        from pathtracer.core.rng import RandomStream

        samples = RandomStream(seed=1).uniform(2000)
        assert samples.shape == (2000,)
        assert np.all(samples >= 0.0)
        assert np.all(samples < 1.0)

    def test_uniform_mean(self):
        """Test that uniform draws are centred on 0.5."""
        from pathtracer.core.rng import RandomStream

        samples = RandomStream(seed=3).uniform(10000)
        assert abs(float(samples.mean()) - 0.5) < 0.02

    def test_uniform_matches_top_bits(self):
        """Test that uniform values are the top 24 bits of the raw output."""
        from pathtracer.core.rng import RandomStream, seed_state

        samples = RandomStream(seed=99).uniform(4)
        ref_state = seed_state(99).tolist()
        for sample in samples:
            bits, ref_state = reference_next(ref_state)
            assert sample == pytest.approx(((bits >> 8) & 0xFFFFFF) / 16777216.0, abs=1e-7)

    def test_signed_range(self):
        """Test that signed draws lie in [-1, 1)."""
        from pathtracer.core.rng import RandomStream

        samples = RandomStream(seed=2).signed(2000)
        assert np.all(samples >= -1.0)
        assert np.all(samples < 1.0)
        assert samples.min() < -0.5
        assert samples.max() > 0.5

    def test_same_seed_same_sequence(self):
        """Test that equal seeds produce identical sequences."""
        from pathtracer.core.rng import RandomStream

        a = RandomStream(seed=1234).uniform(64)
        b = RandomStream(seed=1234).uniform(64)
        np.testing.assert_array_equal(a, b)

    def test_different_seeds_differ(self):
        """Test that different seeds produce different sequences."""
        from pathtracer.core.rng import RandomStream

        a = RandomStream(seed=1).uniform(64)
        b = RandomStream(seed=2).uniform(64)
        assert not np.array_equal(a, b)

    def test_reseed_restarts_sequence(self):
        """Test that reseeding replays the sequence from the start."""
        from pathtracer.core.rng import RandomStream

        stream = RandomStream(seed=5)
        first = stream.uniform(10)
        stream.uniform(10)
        stream.reseed(5)
        np.testing.assert_array_equal(stream.uniform(10), first)

    def test_state_advances(self):
        """Test that drawing changes the state."""
        from pathtracer.core.rng import RandomStream

        stream = RandomStream(seed=5)
        before = stream.state
        stream.uniform(1)
        assert not np.array_equal(before, stream.state)

    def test_empty_draw(self):
        """Test that drawing zero values leaves the state untouched."""
        from pathtracer.core.rng import RandomStream

        stream = RandomStream(seed=5)
        before = stream.state
        assert stream.uniform(0).shape == (0,)
        np.testing.assert_array_equal(before, stream.state)


class TestDirectionSampling:
    """Tests for unit-ball and hemisphere sampling."""

    def test_unit_ball_is_unit_length(self):
        """Test that unit-ball samples are normalized."""
        from pathtracer.core.rng import RandomStream

        dirs = RandomStream(seed=11).unit_ball(500)
        lengths = np.linalg.norm(dirs, axis=1)
        np.testing.assert_allclose(lengths, 1.0, atol=1e-5)

    def test_unit_ball_covers_sphere(self):
        """Test that samples point in all directions."""
        from pathtracer.core.rng import RandomStream

        dirs = RandomStream(seed=12).unit_ball(2000)
        mean = dirs.mean(axis=0)
        assert np.all(np.abs(mean) < 0.1)
        for axis in range(3):
            assert dirs[:, axis].min() < -0.9
            assert dirs[:, axis].max() > 0.9

    def test_hemisphere_faces_normal(self):
        """Test that hemisphere samples never face away from the normal."""
        from pathtracer.core.rng import RandomStream

        normal = np.array([0.0, 0.6, 0.8])
        dirs = RandomStream(seed=13).hemisphere(tuple(normal), 500)
        assert np.all(dirs @ normal >= -1e-6)
        np.testing.assert_allclose(np.linalg.norm(dirs, axis=1), 1.0, atol=1e-5)
