"""Image export utilities for rendered frames.

Frames are the (height, width, 4) uint8 RGBA arrays produced by
ProgressiveRenderer; they are already tone mapped, so export is a plain
Pillow write.

Example:
    >>> from pathtracer.preview.export import save_png
    >>> save_png(simulation.frame, "output.png")
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def validate_frame(frame: npt.NDArray[np.uint8]) -> None:
    """Check that ``frame`` is a (height, width, 4) uint8 array.

    Raises:
        ValueError: If the shape or dtype is wrong.
    """
    if frame.dtype != np.uint8:
        raise ValueError(f"Frame dtype must be uint8, got {frame.dtype}")
    if frame.ndim != 3 or frame.shape[2] != 4:
        raise ValueError(f"Frame shape must be (height, width, 4), got {frame.shape}")


def save_png(frame: npt.NDArray[np.uint8], filepath: str | os.PathLike[str]) -> None:
    """Save an RGBA8 frame as a PNG file.

    Args:
        frame: Array of shape (height, width, 4) with dtype uint8.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the frame has the wrong shape or dtype.
    """
    validate_frame(frame)
    pil_image = PILImage.fromarray(np.ascontiguousarray(frame))
    pil_image.save(filepath)


def load_png(filepath: str | os.PathLike[str]) -> npt.NDArray[np.uint8]:
    """Read a PNG back as a (height, width, 4) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGBA"), dtype=np.uint8).copy()


def snapshot_filename(prefix: str = "pathtracer") -> str:
    """Timestamped file name in the format <prefix>_YYYYMMDD_HHMMSS.png."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.png"


def save_snapshot(
    frame: npt.NDArray[np.uint8],
    directory: str | os.PathLike[str] = ".",
    *,
    prefix: str = "pathtracer",
) -> str:
    """Save ``frame`` under a timestamped name in ``directory``.

    Returns:
        The path of the written file.
    """
    path = os.path.join(directory, snapshot_filename(prefix))
    save_png(frame, path)
    logger.info("Exported %s", path)
    return path


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
