"""Pinhole camera with an explicit image plane.

The camera is described by an eye point, a view frame (u, v, w) and the
bounds of an image plane placed at ``distance`` in front of the eye:

- u: points right in the image plane
- v: points up in the image plane
- w: points opposite the view direction (the camera looks down -w)

A pixel coordinate (px, py) in [0, nx] x [0, ny] maps to the image-plane
point

    u_s = left   + (right - left) * px / nx
    v_s = bottom + (top - bottom) * py / ny

and the primary ray leaves the eye along normalize(u_s*u + v_s*v - distance*w).
py = 0 is the bottom edge of the image, so row 0 of the frame buffer is the
bottom row.

Integer coordinates address pixel corners: the pixel center is (i + 0.5,
j + 0.5), and anti-aliasing adds a jitter in [0, 1) to (i, j).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(nx=256, ny=256)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(128.0, 128.0)  # Ray through the image center
"""

from dataclasses import dataclass, replace
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from phongtrace.core.ray import Ray, make_ray, vec3

Vector3 = tuple[float, float, float]

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole camera with an explicit image plane.

    By default the eye sits at the origin looking down -z through a 0.2 x 0.2
    window placed 0.1 in front of it, rendering 512 x 512 pixels.

    Attributes:
        eye: Camera position in world space (x, y, z).
        u: Right direction of the view frame.
        v: Up direction of the view frame.
        w: Backward direction of the view frame (opposite the view direction).
        left: Image-plane coordinate of the left edge.
        right: Image-plane coordinate of the right edge.
        bottom: Image-plane coordinate of the bottom edge.
        top: Image-plane coordinate of the top edge.
        distance: Distance from the eye to the image plane along -w.
        nx: Horizontal resolution in pixels.
        ny: Vertical resolution in pixels.

    Raises:
        ValueError: If the resolution is below 1, the image-plane bounds are
            empty, the distance is not positive or a basis vector is zero.
    """

    eye: Vector3 = (0.0, 0.0, 0.0)
    u: Vector3 = (1.0, 0.0, 0.0)
    v: Vector3 = (0.0, 1.0, 0.0)
    w: Vector3 = (0.0, 0.0, 1.0)
    left: float = -0.1
    right: float = 0.1
    bottom: float = -0.1
    top: float = 0.1
    distance: float = 0.1
    nx: int = 512
    ny: int = 512

    def __post_init__(self) -> None:
        if self.nx < 1 or self.ny < 1:
            raise ValueError(f"Camera resolution must be at least 1x1, got {self.nx}x{self.ny}")
        if self.right == self.left or self.top == self.bottom:
            raise ValueError("Image plane bounds must span a non-empty window")
        if self.distance <= 0.0:
            raise ValueError(f"Image plane distance must be positive, got {self.distance}")
        for name in ("u", "v", "w"):
            if np.linalg.norm(np.asarray(getattr(self, name), dtype=np.float64)) == 0.0:
                raise ValueError(f"Camera basis vector {name} must be non-zero")

    @classmethod
    def look_at(
        cls,
        eye: Vector3,
        target: Vector3,
        up: Vector3 = (0.0, 1.0, 0.0),
        **kwargs: Any,
    ) -> "PinholeCamera":
        """Create a camera at ``eye`` looking toward ``target``.

        Builds an orthonormal (u, v, w) frame with w pointing from the target
        back to the eye. Remaining keyword arguments (bounds, distance,
        resolution) are passed through to the constructor.

        Raises:
            ValueError: If eye and target coincide or up is parallel to the
                view direction.
        """
        eye_arr = np.array(eye, dtype=np.float64)
        target_arr = np.array(target, dtype=np.float64)
        up_arr = np.array(up, dtype=np.float64)

        w = eye_arr - target_arr
        w_len = np.linalg.norm(w)
        if w_len == 0.0:
            raise ValueError("Camera eye and target must differ")
        w = w / w_len

        u = np.cross(up_arr, w)
        u_len = np.linalg.norm(u)
        if u_len < 1e-12:
            raise ValueError("Camera up vector must not be parallel to the view direction")
        u = u / u_len

        v = np.cross(w, u)

        return cls(
            eye=_as_tuple(eye_arr),
            u=_as_tuple(u),
            v=_as_tuple(v),
            w=_as_tuple(w),
            **kwargs,
        )

    def with_resolution(self, nx: int, ny: int) -> "PinholeCamera":
        """Return a copy of this camera for a different pixel resolution."""
        return replace(self, nx=nx, ny=ny)

    def image_plane_coords(self, px: float, py: float) -> tuple[float, float]:
        """Map pixel coordinates to image-plane coordinates (u_s, v_s)."""
        u_s = self.left + (self.right - self.left) * px / self.nx
        v_s = self.bottom + (self.top - self.bottom) * py / self.ny
        return u_s, v_s

    def direction_through(self, px: float, py: float) -> npt.NDArray[np.float64]:
        """Host-side ray direction through pixel coordinates (px, py).

        Mirrors get_ray() in double precision for code that runs outside
        Taichi kernels.
        """
        u_s, v_s = self.image_plane_coords(px, py)
        u = np.asarray(self.u, dtype=np.float64)
        v = np.asarray(self.v, dtype=np.float64)
        w = np.asarray(self.w, dtype=np.float64)
        d = u_s * u + v_s * v - self.distance * w
        return d / np.linalg.norm(d)

    def pixel_toward(self, point: Vector3) -> tuple[float, float]:
        """Pixel coordinates whose ray passes through a world-space point.

        Inverse of direction_through() for an orthonormal view frame.

        Raises:
            ValueError: If the point is not in front of the camera.
        """
        d = np.asarray(point, dtype=np.float64) - np.asarray(self.eye, dtype=np.float64)
        depth = -float(np.dot(d, self.w))
        if depth <= 0.0:
            raise ValueError(f"Point {point} is behind the camera")
        scale = self.distance / depth
        u_s = float(np.dot(d, self.u)) * scale
        v_s = float(np.dot(d, self.v)) * scale
        px = (u_s - self.left) / (self.right - self.left) * self.nx
        py = (v_s - self.bottom) / (self.top - self.bottom) * self.ny
        return px, py


def _as_tuple(a: npt.NDArray[np.float64]) -> Vector3:
    return (float(a[0]), float(a[1]), float(a[2]))


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())

# (left, right, bottom, top)
_image_plane_bounds = ti.Vector.field(4, dtype=ti.f32, shape=())
_image_plane_distance = ti.field(dtype=ti.f32, shape=())

# (nx, ny) stored as floats for the coordinate mapping
_camera_resolution = ti.Vector.field(2, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Upload camera parameters to the GPU-side camera state.

    The u, v and w vectors are used as given; w is normalized only through
    the final ray normalization, matching the image-plane formula.

    Args:
        camera: The camera to make current.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    _camera_eye[None] = list(camera.eye)
    _camera_u[None] = list(camera.u)
    _camera_v[None] = list(camera.v)
    _camera_w[None] = list(camera.w)
    _image_plane_bounds[None] = [camera.left, camera.right, camera.bottom, camera.top]
    _image_plane_distance[None] = camera.distance
    _camera_resolution[None] = [float(camera.nx), float(camera.ny)]


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(px: ti.f32, py: ti.f32) -> Ray:
    """Generate the primary ray through pixel coordinates (px, py).

    Args:
        px: Horizontal pixel coordinate (0 = left edge, nx = right edge).
        py: Vertical pixel coordinate (0 = bottom edge, ny = top edge).

    Returns:
        A unit-direction Ray leaving the eye through the image plane.
    """
    bounds = _image_plane_bounds[None]
    resolution = _camera_resolution[None]

    u_s = bounds[0] + (bounds[1] - bounds[0]) * px / resolution[0]
    v_s = bounds[2] + (bounds[3] - bounds[2]) * py / resolution[1]

    direction = (
        u_s * _camera_u[None]
        + v_s * _camera_v[None]
        - _image_plane_distance[None] * _camera_w[None]
    )

    return make_ray(_camera_eye[None], direction)


@ti.func
def get_pixel_ray(pixel_i: ti.i32, pixel_j: ti.i32, offset_x: ti.f32, offset_y: ti.f32) -> Ray:
    """Generate a ray through pixel (i, j) displaced by a sub-pixel offset.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        offset_x: Horizontal offset inside the pixel, in [0, 1).
        offset_y: Vertical offset inside the pixel, in [0, 1).

    Returns:
        The primary ray for that sample position. An offset of (0.5, 0.5)
        gives the pixel-center ray.
    """
    return get_ray(ti.cast(pixel_i, ti.f32) + offset_x, ti.cast(pixel_j, ti.f32) + offset_y)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera eye point in world space."""
    return _camera_eye[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with eye, u, v, w, bounds (left, right, bottom, top),
        distance and resolution as read back from the Taichi fields.
    """
    eye = _camera_eye[None]
    u_vec = _camera_u[None]
    v_vec = _camera_v[None]
    w_vec = _camera_w[None]
    bounds = _image_plane_bounds[None]
    resolution = _camera_resolution[None]

    return {
        "eye": (float(eye[0]), float(eye[1]), float(eye[2])),
        "u": (float(u_vec[0]), float(u_vec[1]), float(u_vec[2])),
        "v": (float(v_vec[0]), float(v_vec[1]), float(v_vec[2])),
        "w": (float(w_vec[0]), float(w_vec[1]), float(w_vec[2])),
        "bounds": tuple(float(bounds[i]) for i in range(4)),
        "distance": (float(_image_plane_distance[None]),),
        "resolution": (float(resolution[0]), float(resolution[1])),
    }


@ti.kernel
def _probe_ray(px: ti.f32, py: ti.f32) -> vec3:
    return get_ray(px, py).direction


def camera_ray_direction(px: float, py: float) -> tuple[float, float, float]:
    """Evaluate get_ray() for one coordinate from Python.

    Useful for verifying camera setup against PinholeCamera.direction_through().

    Args:
        px: Horizontal pixel coordinate.
        py: Vertical pixel coordinate.

    Returns:
        The unit ray direction as (x, y, z).
    """
    d = _probe_ray(px, py)
    return (float(d[0]), float(d[1]), float(d[2]))
