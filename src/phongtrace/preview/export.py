"""Image export utilities for rendered frames.

Frames come out of the renderer already clamped to [0, 1] and, for the
SHADOWED model, already gamma-encoded, so export only quantizes to 8 bits
and writes the file.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from phongtrace.core.renderer import Renderer
    >>> from phongtrace.preview.export import save_png
    >>>
    >>> renderer = Renderer()
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from phongtrace.core.renderer import Renderer


def image_to_uint8(image: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to uint8.

    Values are clamped to [0, 1] and rounded to the nearest level.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    clamped = np.clip(image.astype(np.float64), 0.0, 1.0)
    return np.round(clamped * 255.0).astype(np.uint8)


def save_png_from_array(image: npt.NDArray[np.floating[npt.NBitBase]], filepath: str) -> None:
    """Save a top-down float image as a PNG file.

    Args:
        image: Image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {image.shape}")

    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath)


def save_png(renderer: Renderer, filepath: str) -> None:
    """Save the renderer's current frame as a PNG file.

    Args:
        renderer: The Renderer whose frame to save.
        filepath: Output file path (should end in .png).
    """
    save_png_from_array(renderer.get_image_numpy(), filepath)


def frame_buffer_to_image(
    buffer: npt.NDArray[np.floating[npt.NBitBase]], width: int, height: int
) -> npt.NDArray[np.float32]:
    """Convert a flat bottom-to-top frame buffer to a top-down image.

    Args:
        buffer: Flat array of width*height*3 values, row 0 at the bottom.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Array of shape (height, width, 3), row 0 at the top.

    Raises:
        ValueError: If the buffer size does not match the dimensions.
    """
    if buffer.size != width * height * 3:
        raise ValueError(
            f"Frame buffer has {buffer.size} values, expected {width}x{height}x3"
        )
    rows = np.asarray(buffer, dtype=np.float32).reshape(height, width, 3)
    return np.ascontiguousarray(np.flipud(rows))


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
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
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
