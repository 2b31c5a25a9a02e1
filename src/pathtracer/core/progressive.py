"""Progressive renderer for iterative sample accumulation.

The renderer owns everything that changes from frame to frame:

- a per-pixel running sum of radiance samples (Taichi field)
- one xoshiro128+ stream per pixel (Taichi field)
- the global sample counter
- the RGBA8 frame derived from sum / count

A pass adds exactly one jittered sample to every pixel. The pass is a single
kernel launch that runs in parallel over pixels; each pixel touches only its
own accumulation cell and its own RNG stream, so the result does not depend
on thread scheduling. The frame is rebuilt after the kernel returns.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera import OrbitCamera
    >>> from pathtracer.core.progressive import ProgressiveRenderer
    >>> from pathtracer.scene import Scene, build_preset
    >>>
    >>> scene = Scene()
    >>> build_preset(scene, 0)
    0
    >>> renderer = ProgressiveRenderer(scene, OrbitCamera(), 400, 300)
    >>> renderer.render(16)  # Render 16 SPP
    >>> frame = renderer.frame  # (300, 400, 4) uint8
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.core.integrator import trace_path
from pathtracer.core.rng import DEFAULT_SEED, seed_streams
from pathtracer.core.tonemap import OPAQUE_ALPHA, radiance_to_rgba8

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Maximum supported image dimensions
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Called with (samples so far, samples requested) after every batch
ProgressCallback = Callable[[int, int], None]


@ti.data_oriented
class ProgressiveRenderer:
    """Accumulates one jittered sample per pixel per pass.

    Args:
        scene: The Scene to render.
        camera: The OrbitCamera generating primary rays.
        width: Image width in pixels.
        height: Image height in pixels.
        seed: Base seed of the per-pixel RNG streams.

    Raises:
        ValueError: If the dimensions are not positive or exceed the
            supported maximum.
    """

    def __init__(self, scene, camera, width: int, height: int, seed: int = DEFAULT_SEED) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
            raise ValueError(f"{width}x{height} is larger than the {MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT} limit")

        self.scene = scene
        self.camera = camera
        self._width = width
        self._height = height
        self._sample_count = 0

        # Indexed [row, column] with row 0 at the top of the image
        self._accum = ti.Vector.field(3, dtype=ti.f32, shape=(height, width))
        self._rng_state = ti.Vector.field(4, dtype=ti.u32, shape=(height, width))

        self._frame = np.zeros((height, width, 4), dtype=np.uint8)
        self._frame[..., 3] = OPAQUE_ALPHA

        self.reseed(seed)
        self._accum.fill(0.0)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def width(self) -> int:
        """Width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Height in pixels."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Number of completed passes since the last reset."""
        return self._sample_count

    @property
    def seed(self) -> int:
        """Base seed the per-pixel streams were last seeded with."""
        return self._seed

    @property
    def frame(self) -> npt.NDArray[np.uint8]:
        """Read-only view of the current (height, width, 4) RGBA8 frame."""
        view = self._frame.view()
        view.flags.writeable = False
        return view

    # =========================================================================
    # Accumulation control
    # =========================================================================

    def reset(self) -> None:
        """Discard all accumulated samples.

        Zeroes the running sums and the sample counter and clears the frame
        to opaque black. The per-pixel RNG streams continue where they are;
        call reseed() to restart them.
        """
        self._accum.fill(0.0)
        self._sample_count = 0
        self._frame[..., :3] = 0
        self._frame[..., 3] = OPAQUE_ALPHA

    def reseed(self, seed: int) -> None:
        """Restart every per-pixel stream from ``seed``."""
        if seed < 0:
            raise ValueError(f"Seed must be non-negative, got {seed}")
        self._seed = seed
        states = seed_streams(seed, self._width * self._height)
        self._rng_state.from_numpy(states.reshape(self._height, self._width, 4))
        logger.debug("Seeded %d pixel streams from %d", self._width * self._height, seed)

    # =========================================================================
    # Rendering
    # =========================================================================

    @ti.kernel
    def _sample_pass(self, width: ti.i32, height: ti.i32):
        """Add one sample to every pixel."""
        for py, px in self._accum:
            origin, direction, rng = self.camera.generate_ray(px, py, width, height, self._rng_state[py, px])
            radiance, rng = trace_path(self.scene, origin, direction, rng)

            # NaN, infinite and negative channels contribute nothing
            color = vec3(0.0, 0.0, 0.0)
            for c in ti.static(range(3)):
                value = radiance[c]
                if not (tm.isnan(value) or tm.isinf(value)) and value > 0.0:
                    color[c] = value

            self._rng_state[py, px] = rng
            self._accum[py, px] += color

    def _update_frame(self) -> None:
        self._frame[...] = radiance_to_rgba8(self.get_radiance_numpy())

    def render_pass(self) -> None:
        """Add exactly one sample per pixel and rebuild the frame."""
        self._sample_pass(self._width, self._height)
        self._sample_count += 1
        self._update_frame()

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add ``num_samples`` passes on top of what is already accumulated.

        Args:
            num_samples: Passes to run. Zero or less does nothing.
            batch_size: Passes between frame rebuilds and callback calls.
            callback: Receives (sample_count, target_count) after each batch.

        Example:
            >>> renderer.render(64, batch_size=16, callback=lambda n, total: print(n, "/", total))
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Generator form of render().

        The frame is rebuilt once per batch, then (sample_count, target_count)
        is yielded, so a caller can display intermediate results.

        Raises:
            ValueError: If ``batch_size`` is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            for _ in range(batch):
                self._sample_pass(self._width, self._height)
                self._sample_count += 1
            remaining -= batch
            self._update_frame()
            yield (self.sample_count, target_samples)

    # =========================================================================
    # Readback
    # =========================================================================

    def get_accumulation_numpy(self) -> npt.NDArray[np.float32]:
        """Raw per-pixel radiance sums as a (height, width, 3) array."""
        return self._accum.to_numpy()

    def get_radiance_numpy(self) -> npt.NDArray[np.float32]:
        """Mean radiance per pixel; all zeros before the first pass."""
        accum = self.get_accumulation_numpy()
        if self._sample_count == 0:
            return np.zeros_like(accum)
        return accum / np.float32(self._sample_count)

    def __repr__(self) -> str:
        return f"ProgressiveRenderer({self._width}x{self._height}, samples={self._sample_count}, seed={self._seed})"
