"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera with an explicit image plane

Camera responsibilities:
    - Map (possibly fractional) pixel coordinates to world-space rays
    - Accept sub-pixel offsets for jittered anti-aliasing
    - Provide a look-at constructor for arbitrary view frames

Pixel coordinates:
    px in [0, nx]: left to right across the image
    py in [0, ny]: bottom to top across the image
"""

from .pinhole import (
    PinholeCamera,
    camera_ray_direction,
    get_camera_info,
    get_camera_origin,
    get_pixel_ray,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_pixel_ray",
    "get_camera_origin",
    "get_camera_info",
    "camera_ray_direction",
]
