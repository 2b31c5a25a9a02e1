"""Matplotlib-based static display of rendered frames.

Example:
    >>> from pathtracer.preview.display import show_frame
    >>> show_frame(simulation.frame, hud_lines=simulation.hud_lines())
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from pathtracer.preview.export import validate_frame


def frame_title(hud_lines: Sequence[str] | None, title: str | None = None) -> str:
    """Build a figure title from an explicit title or the first HUD lines."""
    if title is not None:
        return title
    if not hud_lines:
        return "Render Preview"
    # Samples and scene; the help line is for the interactive window only
    return " | ".join(hud_lines[:2])


def show_frame(
    frame: npt.NDArray[np.uint8],
    *,
    hud_lines: Sequence[str] | None = None,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display an RGBA8 frame in a Matplotlib figure.

    Args:
        frame: Array of shape (height, width, 4) with dtype uint8.
        hud_lines: Simulation HUD lines used for the default title.
        title: Custom title (overrides hud_lines).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.

    Raises:
        ValueError: If the frame has the wrong shape or dtype.
    """
    import matplotlib.pyplot as plt

    validate_frame(frame)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(np.asarray(frame))
    ax.axis("off")
    ax.set_title(frame_title(hud_lines, title))

    plt.tight_layout()
    plt.show(block=block)
