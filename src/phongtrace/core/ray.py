"""Ray data structure and vector helpers shared by every kernel.

This module provides the fundamental Ray dataclass, the epsilon constants used
by the intersection code, and the handful of vector operations the Phong
shader needs on top of ``taichi.math``. All functions are Taichi functions and
must be called from within kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 5.0).z
    >>> probe()
    -5.0
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Minimum ray parameter accepted as a hit (guards against shadow acne)
EPSILON = 1e-3

# |dot(n, d)| below this means the ray runs parallel to a plane
PARALLEL_EPSILON = 1e-5

# Upper bound used for "unbounded" queries
T_MAX = 1e10


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Unit length when the ray
            is built through make_ray().
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and a direction.

    The direction is normalized so every ray in the renderer is unit length.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A new Ray instance.
    """
    return Ray(origin=origin, direction=tm.normalize(direction))


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length of a vector."""
    return tm.dot(v, v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Matches the GLSL/GLM convention: the incident vector points toward the
    surface and the result points away from it.

    Args:
        incident: The incoming direction vector.
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def safe_pow(base: ti.f32, exponent: ti.f32) -> ti.f32:
    """Raise a scalar to a power after clamping the base to be non-negative.

    Args:
        base: The value to exponentiate. Negative values are treated as 0.
        exponent: The exponent.

    Returns:
        max(base, 0) ** exponent.
    """
    return tm.pow(tm.max(base, 0.0), exponent)


@ti.func
def safe_pow_vec(v: vec3, exponent: ti.f32) -> vec3:
    """Component-wise safe_pow() for colors."""
    return vec3(
        safe_pow(v.x, exponent),
        safe_pow(v.y, exponent),
        safe_pow(v.z, exponent),
    )


@ti.func
def clamp01(v: vec3) -> vec3:
    """Clamp each component of a color to [0, 1]."""
    return tm.clamp(v, 0.0, 1.0)
