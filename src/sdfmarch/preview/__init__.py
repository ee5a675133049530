"""Preview module for viewing and saving rendered frames.

Components:
    display: Tone mapping, gamma and Matplotlib preview windows
    export: PNG, numbered PNG sequences and animated GIF export

Matplotlib is imported only when a window is opened, so export works
without the ``preview`` extra installed.

Example:
    >>> from sdfmarch.preview import save_png, show_preview
    >>> renderer.render_camera(camera)
    >>> show_preview(renderer, tone_map="reinhard")
    >>> save_png(renderer, "output.png")
"""

from .display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    renderer_linear_image,
    show_frames,
    show_preview,
    tone_map_reinhard,
)
from .export import (
    compute_rmse,
    image_to_uint8,
    save_frames,
    save_gif,
    save_png,
    save_png_from_array,
)

__all__ = [
    # Display
    "show_preview",
    "show_frames",
    "renderer_linear_image",
    # Tone mapping
    "ToneMapMethod",
    "tone_map_reinhard",
    "apply_gamma",
    "process_image_for_display",
    # Export
    "save_png",
    "save_png_from_array",
    "save_frames",
    "save_gif",
    "image_to_uint8",
    "compute_rmse",
]
