"""Preview module for output and visualization.

Components:
    export: PNG export of RGBA8 frames (Pillow)
    display: Matplotlib-based static frame display
    interactive: Taichi GGUI-based interactive preview window

Example:
    >>> from pathtracer.core.simulation import RaytracerSimulation
    >>> from pathtracer.preview import InteractivePreview, save_png
    >>>
    >>> sim = RaytracerSimulation()
    >>> for _ in range(64):
    ...     sim.tick()
    >>> save_png(sim.frame, "output.png")
    >>> InteractivePreview(sim).run()
"""

from pathtracer.preview.display import frame_title, show_frame
from pathtracer.preview.export import (
    compute_rmse,
    load_png,
    save_png,
    save_snapshot,
    snapshot_filename,
    validate_frame,
)
from pathtracer.preview.interactive import (
    InputResult,
    InteractivePreview,
    apply_key_input,
    frame_to_display,
    is_display_available,
)

__all__ = [
    # Interactive preview
    "InteractivePreview",
    "InputResult",
    "apply_key_input",
    "frame_to_display",
    "is_display_available",
    # Display functions
    "show_frame",
    "frame_title",
    # Export functions
    "save_png",
    "load_png",
    "save_snapshot",
    "snapshot_filename",
    "validate_frame",
    "compute_rmse",
]
