"""Deterministic xoshiro128+ random streams for Monte Carlo sampling.

Taichi's built-in ``ti.random`` shares hidden global state between threads,
which makes renders irreproducible. This module instead implements the
xoshiro128+ generator with explicit, caller-owned state: every sampling
function takes a state vector (4 x u32) and returns the drawn value together
with the advanced state.

    value, state = next_uniform(state)

The progressive renderer keeps one state per pixel so the parallel sampling
pass stays deterministic regardless of thread scheduling. Two streams seeded
with the same value and drawn in the same order produce bit-identical
sequences.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.rng import RandomStream
    >>> stream = RandomStream(seed=42)
    >>> samples = stream.uniform(8)  # NumPy array of 8 floats in [0, 1)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import length_squared, normalize_safe

vec3 = tm.vec3

# State vector type: 128 bits as four 32-bit words
uvec4 = ti.types.vector(4, ti.u32)

DEFAULT_SEED = 42

# Replaces an all-zero first word, which would otherwise allow the
# degenerate all-zero state
ZERO_SEED_FALLBACK = 0xDEADBEEF

# Rejection window for unit ball sampling (squared length)
MIN_BALL_LENGTH_SQ = 0.001
MAX_BALL_LENGTH_SQ = 1.0

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


# =============================================================================
# Seeding (Python-side)
# =============================================================================


def seed_state(seed: int) -> npt.NDArray[np.uint32]:
    """Expand a 64-bit seed into a 128-bit xoshiro128+ state.

    The four words are the seed shifted right by 0, 16, 32 and 48 bits and
    truncated to 32 bits.

    Args:
        seed: Seed value (only the low 64 bits are used).

    Returns:
        Array of four uint32 words.
    """
    seed &= _MASK64
    words = [(seed >> shift) & _MASK32 for shift in (0, 16, 32, 48)]
    if words[0] == 0:
        words[0] = ZERO_SEED_FALLBACK
    return np.array(words, dtype=np.uint32)


def _splitmix64(x: npt.NDArray[np.uint64]) -> npt.NDArray[np.uint64]:
    """Vectorized splitmix64 finalizer (wrapping uint64 arithmetic)."""
    z = x + np.uint64(0x9E3779B97F4A7C15)
    z = (z ^ (z >> np.uint64(30))) * np.uint64(0xBF58476D1CE4E5B9)
    z = (z ^ (z >> np.uint64(27))) * np.uint64(0x94D049BB133111EB)
    return z ^ (z >> np.uint64(31))


def seed_streams(seed: int, count: int) -> npt.NDArray[np.uint32]:
    """Create independent states for ``count`` parallel streams.

    Stream k is seeded with splitmix64(seed + k) so that neighbouring
    pixels do not start from correlated states.

    Args:
        seed: Base seed shared by all streams.
        count: Number of streams (typically width * height).

    Returns:
        Array of shape (count, 4) with dtype uint32.
    """
    indices = np.arange(count, dtype=np.uint64)
    mixed = _splitmix64(np.uint64(seed & _MASK64) + indices)

    states = np.empty((count, 4), dtype=np.uint32)
    for word, shift in enumerate((0, 16, 32, 48)):
        states[:, word] = ((mixed >> np.uint64(shift)) & np.uint64(_MASK32)).astype(np.uint32)

    zero_first = states[:, 0] == 0
    states[zero_first, 0] = ZERO_SEED_FALLBACK
    return states


# =============================================================================
# Sampling (Taichi-side)
# =============================================================================


@ti.func
def next_u32(state):
    """Advance a xoshiro128+ state by one step.

    Args:
        state: Current state (uvec4).

    Returns:
        A tuple (value, new_state) where value is a u32.
    """
    s0 = state[0]
    s1 = state[1]
    s2 = state[2]
    s3 = state[3]

    result = s0 + s3
    t = s1 << ti.cast(9, ti.u32)

    s2 = s2 ^ s0
    s3 = s3 ^ s1
    s1 = s1 ^ s2
    s0 = s0 ^ s3
    s2 = s2 ^ t
    s3 = (s3 << ti.cast(11, ti.u32)) | ((s3 >> ti.cast(21, ti.u32)) & ti.cast(0x7FF, ti.u32))

    return result, uvec4(s0, s1, s2, s3)


@ti.func
def next_uniform(state):
    """Draw a float in [0, 1) from the top 24 bits of the next value."""
    bits, rng = next_u32(state)
    mantissa = (bits >> ti.cast(8, ti.u32)) & ti.cast(0xFFFFFF, ti.u32)
    return ti.cast(mantissa, ti.f32) / 16777216.0, rng


@ti.func
def next_signed(state):
    """Draw a float in [-1, 1)."""
    value, rng = next_uniform(state)
    return value * 2.0 - 1.0, rng


@ti.func
def random_in_unit_ball(state):
    """Draw a random unit vector by rejection sampling the unit ball.

    A signed 3-vector is drawn until its squared length lies in
    (MIN_BALL_LENGTH_SQ, MAX_BALL_LENGTH_SQ]; the accepted vector is
    returned normalized. Termination is expected after about two tries.

    Returns:
        A tuple (direction, new_state).
    """
    rng = state
    v = vec3(0.0, 0.0, 0.0)
    accepted = 0
    while accepted == 0:
        x, rng = next_signed(rng)
        y, rng = next_signed(rng)
        z, rng = next_signed(rng)
        v = vec3(x, y, z)
        len_sq = length_squared(v)
        if len_sq > MIN_BALL_LENGTH_SQ and len_sq <= MAX_BALL_LENGTH_SQ:
            accepted = 1
    return normalize_safe(v), rng


@ti.func
def hemisphere_sample(normal: vec3, state):
    """Draw a random unit vector in the hemisphere around ``normal``.

    Args:
        normal: Hemisphere orientation.
        state: Current RNG state.

    Returns:
        A tuple (direction, new_state) with dot(direction, normal) >= 0.
    """
    v, rng = random_in_unit_ball(state)
    result = v
    if tm.dot(v, normal) < 0.0:
        result = -v
    return result, rng


# =============================================================================
# Python-side stream
# =============================================================================


@ti.data_oriented
class RandomStream:
    """A single xoshiro128+ stream with its state stored in a Taichi field.

    Draws are performed serially inside kernels, so the sequence is the
    same one a kernel would see when threading the state by hand.

    Attributes:
        seed: The seed the stream was last (re)seeded with.
    """

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self._state = ti.Vector.field(4, dtype=ti.u32, shape=())
        self.seed = seed
        self.reseed(seed)

    def reseed(self, seed: int) -> None:
        """Restart the stream from ``seed``."""
        self.seed = seed
        self._state.from_numpy(seed_state(seed))

    @property
    def state(self) -> npt.NDArray[np.uint32]:
        """Copy of the current four state words."""
        return self._state.to_numpy()

    def uniform(self, n: int) -> npt.NDArray[np.float32]:
        """Draw ``n`` floats in [0, 1)."""
        out = np.zeros(n, dtype=np.float32)
        if n > 0:
            self._fill_uniform(out)
        return out

    def signed(self, n: int) -> npt.NDArray[np.float32]:
        """Draw ``n`` floats in [-1, 1)."""
        out = np.zeros(n, dtype=np.float32)
        if n > 0:
            self._fill_signed(out)
        return out

    def unit_ball(self, n: int) -> npt.NDArray[np.float32]:
        """Draw ``n`` unit vectors; returns an array of shape (n, 3)."""
        out = np.zeros((n, 3), dtype=np.float32)
        if n > 0:
            self._fill_unit_ball(out)
        return out

    def hemisphere(
        self, normal: tuple[float, float, float], n: int
    ) -> npt.NDArray[np.float32]:
        """Draw ``n`` unit vectors in the hemisphere around ``normal``."""
        out = np.zeros((n, 3), dtype=np.float32)
        if n > 0:
            self._fill_hemisphere(float(normal[0]), float(normal[1]), float(normal[2]), out)
        return out

    @ti.kernel
    def _fill_uniform(self, out: ti.types.ndarray()):
        ti.loop_config(serialize=True)
        for k in range(out.shape[0]):
            value, rng = next_uniform(self._state[None])
            self._state[None] = rng
            out[k] = value

    @ti.kernel
    def _fill_signed(self, out: ti.types.ndarray()):
        ti.loop_config(serialize=True)
        for k in range(out.shape[0]):
            value, rng = next_signed(self._state[None])
            self._state[None] = rng
            out[k] = value

    @ti.kernel
    def _fill_unit_ball(self, out: ti.types.ndarray()):
        ti.loop_config(serialize=True)
        for k in range(out.shape[0]):
            v, rng = random_in_unit_ball(self._state[None])
            self._state[None] = rng
            for c in ti.static(range(3)):
                out[k, c] = v[c]

    @ti.kernel
    def _fill_hemisphere(self, nx: ti.f32, ny: ti.f32, nz: ti.f32, out: ti.types.ndarray()):
        ti.loop_config(serialize=True)
        for k in range(out.shape[0]):
            v, rng = hemisphere_sample(vec3(nx, ny, nz), self._state[None])
            self._state[None] = rng
            for c in ti.static(range(3)):
                out[k, c] = v[c]

    def __repr__(self) -> str:
        return f"RandomStream(seed={self.seed})"
