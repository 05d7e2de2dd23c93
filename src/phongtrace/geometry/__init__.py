"""Geometry module for the analytic surface primitives.

Components:
    sphere: Sphere primitive, the shared HitRecord and ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are Taichi functions (@ti.func) and follow the
same pattern:
    record = hit_shape(ray_origin, ray_direction, shape)

A record with hit == 0 means the ray missed; missing is never an error.
"""

from .plane import Plane, hit_plane, make_plane
from .sphere import HitRecord, Sphere, hit_sphere, make_miss, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss",
    "Plane",
    "hit_plane",
    "make_plane",
]
