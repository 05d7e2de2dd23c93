"""Renderer driving the per-pass kernels over a whole frame.

The Renderer owns a RenderConfig and a NumPy random generator. A frame is
``samples_per_pixel`` render passes; before each pass the generator draws a
(width, height, 2) array of uniform sub-pixel offsets which the pass kernel
adds to every pixel corner. With jitter disabled every pass samples the pixel
centers, so a single pass gives the classic one-ray-per-pixel image.

All randomness flows through the injected generator: two renderers built with
the same seed produce identical frame buffers.

The renderer also implements the display-harness contract through
on_resize(): rebuild the scene and camera for the new resolution, render a
full frame and hand the buffer to an optional ``present`` callback.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.config import RenderConfig
    >>> from phongtrace.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(RenderConfig.sampled(width=128, height=128, seed=1))
    >>> buffer = renderer.render()
    >>> buffer.shape
    (49152,)
"""

import logging
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from phongtrace.camera.pinhole import PinholeCamera, setup_camera
from phongtrace.config import RenderConfig
from phongtrace.core.integrator import (
    clear_render_target,
    get_frame_buffer,
    get_total_samples,
    render_pass,
    render_pixel,
    setup_render_target,
)
from phongtrace.core.integrator import get_image_numpy as _get_image_numpy
from phongtrace.preview.export import image_to_uint8, save_png_from_array
from phongtrace.scene.default_scene import create_default_scene
from phongtrace.scene.manager import Scene

logger = logging.getLogger(__name__)

# Callback receives (completed_passes, total_passes)
ProgressCallback = Callable[[int, int], None]

# Callback receives (frame_buffer, width, height)
PresentCallback = Callable[[npt.NDArray[np.float32], int, int], None]

# Builds (scene, camera) for a (width, height) resolution
SceneFactory = Callable[[int, int], tuple[Scene, PinholeCamera]]


class Renderer:
    """Render frames of a scene with optional jittered supersampling.

    The renderer builds its scene through ``scene_factory`` whenever the
    resolution is set, so the scene and camera always match the output size.
    Scene storage is global: building another Scene after the renderer
    replaces the surfaces it renders. The render target is global too, so a
    second Renderer at another resolution leaves this one unable to render
    until it is resized again.

    Attributes:
        scene: The scene built for the current resolution.
        camera: The camera built for the current resolution.
        present: Optional callback invoked by on_resize() with the finished
            frame buffer.
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        rng: np.random.Generator | None = None,
        scene_factory: SceneFactory = create_default_scene,
        present: PresentCallback | None = None,
    ) -> None:
        """Initialize the renderer and build the scene at the configured size.

        Args:
            config: Render settings. Defaults to RenderConfig.sampled().
            rng: Generator for sub-pixel jitter. Defaults to
                np.random.default_rng(config.seed).
            scene_factory: Callable returning (scene, camera) for a
                resolution.
            present: Optional callback receiving each frame from on_resize().

        Raises:
            ValueError: If the configuration is invalid or the resolution
                exceeds the maximum supported size.
        """
        self._config = config if config is not None else RenderConfig.sampled()
        self._config.validate()
        self._rng = rng if rng is not None else np.random.default_rng(self._config.seed)
        self._scene_factory = scene_factory
        self.present = present
        self.scene: Scene
        self.camera: PinholeCamera
        self._build(self._config)

    def _build(self, config: RenderConfig) -> None:
        width, height = config.width, config.height
        setup_render_target(width, height)
        self.scene, self.camera = self._scene_factory(width, height)
        setup_camera(self.camera)
        logger.debug("Built scene for %dx%d: %r", width, height, self.scene)

    @property
    def config(self) -> RenderConfig:
        """Get the render configuration."""
        return self._config

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._config.height

    @property
    def sample_count(self) -> int:
        """Get the number of passes accumulated into the current frame."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulated frame without changing the resolution."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Set a new resolution and rebuild the scene and camera.

        Args:
            width: New image width in pixels.
            height: New image height in pixels.

        Raises:
            ValueError: If a dimension is below 1 or exceeds the maximum
                supported size.
        """
        config = self._config.with_resolution(width, height)
        config.validate()
        # Old state stays in place if the new size is rejected
        self._build(config)
        self._config = config
        logger.debug("Resized to %dx%d", width, height)

    # =========================================================================
    # Sampling
    # =========================================================================

    def _jitter(self, shape: tuple[int, ...]) -> npt.NDArray[np.float32]:
        if self._config.jitter:
            return self._rng.random(shape, dtype=np.float32)
        return np.full(shape, 0.5, dtype=np.float32)

    def _render_one_pass(self) -> None:
        render_pass(
            self._jitter((self.width, self.height, 2)),
            model=self._config.shading_model,
            gamma=self._config.gamma,
            bound_shadows=self._config.bound_shadows_to_light,
        )

    def render(self, callback: ProgressCallback | None = None) -> npt.NDArray[np.float32]:
        """Render a full frame.

        Clears the accumulator, then runs ``samples_per_pixel`` passes.

        Args:
            callback: Optional callback called after each pass with
                (completed_passes, total_passes).

        Returns:
            The frame buffer (see frame_buffer()).

        Example:
            >>> def progress(done, total):
            ...     print(f"{done}/{total} passes")
            >>> buffer = renderer.render(callback=progress)
        """
        for completed, total in self.render_progressive():
            if callback is not None:
                callback(completed, total)
        return self.frame_buffer()

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render a full frame, yielding progress after each pass.

        Generator-based alternative to render() with a callback. The frame
        buffer holds the running average of the passes completed so far.

        Yields:
            Tuple of (completed_passes, total_passes).
        """
        total = self._config.samples_per_pixel
        self.reset()
        logger.debug("Rendering %dx%d with %d passes", self.width, self.height, total)
        for completed in range(1, total + 1):
            self._render_one_pass()
            yield (completed, total)

    def render_pixel(
        self, i: int, j: int, num_samples: int | None = None
    ) -> tuple[float, float, float]:
        """Estimate the color of a single pixel.

        Uses the configured shading and jitter settings but leaves the frame
        buffer untouched.

        Args:
            i: Pixel column (0 = left).
            j: Pixel row (0 = bottom).
            num_samples: Samples to average. Defaults to samples_per_pixel.

        Returns:
            The averaged color as (R, G, B).

        Raises:
            ValueError: If the pixel is out of range or num_samples < 1.
        """
        if not (0 <= i < self.width and 0 <= j < self.height):
            raise ValueError(f"Pixel ({i}, {j}) is outside the {self.width}x{self.height} image")
        if num_samples is None:
            num_samples = self._config.samples_per_pixel
        if num_samples < 1:
            raise ValueError(f"num_samples must be at least 1, got {num_samples}")

        return render_pixel(
            i,
            j,
            self._jitter((num_samples, 2)),
            model=self._config.shading_model,
            gamma=self._config.gamma,
            bound_shadows=self._config.bound_shadows_to_light,
        )

    def on_resize(self, width: int, height: int) -> npt.NDArray[np.float32]:
        """Handle a resize from the display harness.

        Rebuilds the scene and camera for the new size, renders a full frame
        and passes it to ``present`` when one is set.

        Returns:
            The new frame buffer.
        """
        self.resize(width, height)
        buffer = self.render()
        if self.present is not None:
            self.present(buffer, width, height)
        return buffer

    # =========================================================================
    # Output
    # =========================================================================

    def frame_buffer(self) -> npt.NDArray[np.float32]:
        """Get the flat frame buffer.

        Returns:
            float32 array of width*height*3 values in [0, 1]; rows bottom to
            top, columns left to right, channels R, G, B.
        """
        return get_frame_buffer()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the frame as a top-down (height, width, 3) array."""
        return _get_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the frame as a top-down 8-bit array.

        Gamma is already applied by the SHADOWED model, so values are only
        quantized.
        """
        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str) -> None:
        """Save the frame to an image file (e.g., "output.png")."""
        save_png_from_array(self.get_image_numpy(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self._config.samples_per_pixel}, "
            f"model={self._config.shading_model.name})"
        )
