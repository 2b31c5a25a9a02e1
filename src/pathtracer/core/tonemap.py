"""Display pipeline from accumulated radiance to RGBA8.

Every step works per channel on NumPy arrays:

    radiance -> Reinhard c / (c + 1) -> sqrt gamma -> clip to [0, 1] * 255

The 8-bit conversion truncates rather than rounds. Each step is monotonic,
so a brighter channel value never maps to a darker byte.
"""

import numpy as np
import numpy.typing as npt

OPAQUE_ALPHA = 255


def tone_map_reinhard(radiance: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """Compress [0, inf) radiance into [0, 1) with c / (c + 1).

    Negative inputs are treated as zero.
    """
    c = np.maximum(np.asarray(radiance, dtype=np.float32), 0.0)
    return c / (c + 1.0)


def gamma_correct(values: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """Apply a gamma of 2 (square root); negative values become 0."""
    return np.sqrt(np.maximum(np.asarray(values, dtype=np.float32), 0.0))


def to_uint8(values: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Scale [0, 1] values to bytes, clamping outside the range."""
    clipped = np.clip(np.asarray(values, dtype=np.float32), 0.0, 1.0)
    return (clipped * 255.0).astype(np.uint8)


def radiance_to_rgba8(radiance: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Convert a (height, width, 3) radiance image to an opaque RGBA8 frame.

    Non-finite values are treated as zero.

    Args:
        radiance: Mean radiance per pixel.

    Returns:
        Array of shape (height, width, 4) with dtype uint8 and alpha 255.

    Raises:
        ValueError: If the input does not have shape (height, width, 3).
    """
    image = np.asarray(radiance, dtype=np.float32)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected radiance of shape (height, width, 3), got {image.shape}")

    image = np.nan_to_num(image, nan=0.0, posinf=0.0, neginf=0.0)

    frame = np.empty(image.shape[:2] + (4,), dtype=np.uint8)
    frame[..., :3] = to_uint8(gamma_correct(tone_map_reinhard(image)))
    frame[..., 3] = OPAQUE_ALPHA
    return frame
