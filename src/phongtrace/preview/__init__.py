"""Preview module for rendered output.

Components:
    export: PNG export, 8-bit conversion and image comparison helpers

Example:
    >>> from phongtrace.preview import save_png
    >>> from phongtrace.core.renderer import Renderer
    >>>
    >>> renderer = Renderer()
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from phongtrace.preview.export import (
    compute_rmse,
    frame_buffer_to_image,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "frame_buffer_to_image",
    "compute_rmse",
]
