"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and the epsilon constants
    integrator: Render target fields and the per-pass rendering kernels
    renderer: Renderer driving a full frame of jittered render passes

All per-ray work runs inside Taichi kernels; the Python side only generates
jitter arrays and reads the frame buffer back.
"""

from .ray import (
    EPSILON,
    PARALLEL_EPSILON,
    T_MAX,
    Ray,
    clamp01,
    length_squared,
    make_ray,
    ray_at,
    reflect,
    safe_pow,
    safe_pow_vec,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from phongtrace.core.integrator or phongtrace.core.renderer.
#
# For rendering frames, use:
#   from phongtrace.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "safe_pow",
    "safe_pow_vec",
    "clamp01",
    "EPSILON",
    "PARALLEL_EPSILON",
    "T_MAX",
]
