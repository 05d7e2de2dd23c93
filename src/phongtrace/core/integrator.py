"""Render target and per-pass rendering kernels.

This module owns the accumulation buffer and the Taichi kernels that fill it.
A render pass traces exactly one sample through every pixel: pixel (i, j) is
sampled at camera coordinate (i + dx, j + dy), where (dx, dy) is read from a
jitter array supplied by the caller, and the shaded color is folded into a
running per-pixel average.

Supplying (0.5, 0.5) everywhere gives one pixel-center ray per pixel;
supplying uniform random offsets and running several passes gives box-filtered
supersampling. The random numbers are generated by the caller, so this module
holds no random state of its own.

Frame buffer layout:
    get_frame_buffer() returns width*height*3 floats, row-major, rows ordered
    bottom to top (row 0 is pixel row j = 0, the bottom of the image), columns
    left to right, channels R, G, B. get_image_numpy() returns the same pixels
    as a top-down (height, width, 3) array for image export.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.core.integrator import render_pass, setup_render_target
    >>> setup_render_target(64, 48)
    >>> render_pass(np.full((64, 48, 2), 0.5, dtype=np.float32))
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from phongtrace.camera.pinhole import get_pixel_ray
from phongtrace.scene.shading import DEFAULT_GAMMA, ShadingModel, trace_ray

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color accumulation buffer, indexed [i, j] with j = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Sample count per pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Output slot for single-pixel renders
_pixel_result = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so a resize never
    reallocates fields or recompiles kernels.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is below 1 or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be at least 1x1, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Every pass touches every pixel, so pixel (0, 0) is representative.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[0, 0])


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass_kernel(
    jitter: ti.types.ndarray(),
    width: ti.i32,
    height: ti.i32,
    model: ti.i32,
    gamma: ti.f32,
    bound_shadows: ti.i32,
):
    """Trace one sample through every pixel and fold it into the average."""
    for i, j in ti.ndrange(width, height):
        ray = get_pixel_ray(i, j, jitter[i, j, 0], jitter[i, j, 1])
        color = trace_ray(ray.origin, ray.direction, model, gamma, bound_shadows)

        _sample_count[i, j] += 1
        n = _sample_count[i, j]

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f32)


@ti.kernel
def _render_pixel_kernel(
    jitter: ti.types.ndarray(),
    num_samples: ti.i32,
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    model: ti.i32,
    gamma: ti.f32,
    bound_shadows: ti.i32,
):
    """Average ``num_samples`` jittered samples of one pixel into _pixel_result."""
    # Single-iteration outer loop keeps the sample loop serial
    for _ in range(1):
        total = vec3(0.0, 0.0, 0.0)
        for s in range(num_samples):
            ray = get_pixel_ray(pixel_i, pixel_j, jitter[s, 0], jitter[s, 1])
            total += trace_ray(ray.origin, ray.direction, model, gamma, bound_shadows)
        _pixel_result[None] = total / ti.cast(num_samples, ti.f32)


# =============================================================================
# Public Rendering API
# =============================================================================


def _as_jitter(jitter: npt.ArrayLike, shape: tuple[int, ...]) -> npt.NDArray[np.float32]:
    arr = np.ascontiguousarray(jitter, dtype=np.float32)
    if arr.shape != shape:
        raise ValueError(f"Jitter array must have shape {shape}, got {arr.shape}")
    return arr


def render_pass(
    jitter: npt.ArrayLike,
    model: ShadingModel = ShadingModel.SHADOWED,
    gamma: float = DEFAULT_GAMMA,
    bound_shadows: bool = False,
) -> None:
    """Render one sample per pixel into the accumulation buffer.

    Args:
        jitter: Sub-pixel offsets of shape (width, height, 2), each in [0, 1).
            jitter[i, j] is added to pixel corner (i, j).
        model: The shading model to evaluate.
        gamma: Display gamma for the SHADOWED model.
        bound_shadows: Clip shadow rays at the light distance.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the jitter array has the wrong shape.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    offsets = _as_jitter(jitter, (width, height, 2))
    _render_pass_kernel(offsets, width, height, int(model), gamma, int(bound_shadows))


def render_pixel(
    pixel_i: int,
    pixel_j: int,
    jitter: npt.ArrayLike,
    model: ShadingModel = ShadingModel.SHADOWED,
    gamma: float = DEFAULT_GAMMA,
    bound_shadows: bool = False,
) -> tuple[float, float, float]:
    """Render the average of several samples of one pixel.

    Does not touch the accumulation buffer.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        jitter: Sub-pixel offsets of shape (num_samples, 2).
        model: The shading model to evaluate.
        gamma: Display gamma for the SHADOWED model.
        bound_shadows: Clip shadow rays at the light distance.

    Returns:
        The averaged color as (R, G, B).

    Raises:
        ValueError: If the jitter array is empty or badly shaped.
    """
    offsets = np.ascontiguousarray(jitter, dtype=np.float32)
    if offsets.ndim != 2 or offsets.shape[1] != 2 or offsets.shape[0] < 1:
        raise ValueError(f"Jitter array must have shape (num_samples, 2), got {offsets.shape}")

    _render_pixel_kernel(
        offsets,
        offsets.shape[0],
        pixel_i,
        pixel_j,
        int(model),
        gamma,
        int(bound_shadows),
    )
    color = _pixel_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Buffer Readout
# =============================================================================


def _active_rows_bottom_up() -> npt.NDArray[np.float32]:
    """Active region as (height, width, 3), row 0 at the bottom, clamped."""
    width, height = get_image_dimensions()

    # Raw buffer is indexed [i, j]; transpose to [row, column]
    image = _color_buffer.to_numpy()[:width, :height, :]
    image = np.transpose(image, (1, 0, 2))

    return np.clip(image, 0.0, 1.0).astype(np.float32)


def get_frame_buffer() -> npt.NDArray[np.float32]:
    """Get the rendered image as a flat frame buffer.

    Returns:
        A contiguous float32 array of width*height*3 values in [0, 1], rows
        bottom to top, columns left to right, channels R, G, B.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return np.ascontiguousarray(_active_rows_bottom_up()).reshape(-1)


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a top-down NumPy array.

    Returns:
        Array of shape (height, width, 3), row 0 at the top, values in [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return np.ascontiguousarray(np.flipud(_active_rows_bottom_up()))
