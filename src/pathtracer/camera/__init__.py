"""Camera models for primary ray generation.

Ray generation uses pixel coordinates with row 0 at the top of the image.
Sub-pixel jitter is drawn from the caller's RNG stream, so every pixel's
sequence of primary rays is reproducible.
"""

from .orbit import OrbitCamera, OrbitCameraParams

__all__ = [
    "OrbitCamera",
    "OrbitCameraParams",
]
