"""Infinite plane primitive with ray-plane intersection.

A plane is stored in Hessian normal form: a unit normal n and a signed offset
so that every point p on the plane satisfies

    dot(n, p) + offset = 0

e.g. the floor y = -2 is n = (0, 1, 0), offset = 2.

Substituting the ray o + t*d gives

    t = -(dot(n, o) + offset) / dot(n, d)

Rays with |dot(n, d)| below PARALLEL_EPSILON are treated as parallel and
never hit. The reported normal is the stored plane normal; it is not flipped
toward the viewer, so the underside of a plane shades as if lit from behind.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.geometry.plane import Plane
    >>> floor = Plane(normal=ti.math.vec3(0, 1, 0), offset=2.0)
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import EPSILON, PARALLEL_EPSILON, Ray, ray_at, vec3
from phongtrace.geometry.sphere import HitRecord


@ti.dataclass
class Plane:
    """An infinite plane dot(normal, p) + offset = 0.

    Attributes:
        normal: The unit plane normal (vec3).
        offset: Signed distance term of the plane equation.
    """

    normal: vec3
    offset: ti.f32


@ti.func
def hit_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane: The plane to test intersection against.

    Returns:
        A HitRecord with t > EPSILON and the plane normal, or a miss if the
        ray is parallel to the plane or the plane lies behind the ray.
    """
    denom = tm.dot(plane.normal, ray_direction)

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = -(tm.dot(plane.normal, ray_origin) + plane.offset) / denom
        if t > EPSILON:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(Ray(origin=ray_origin, direction=ray_direction), t)
            hit_normal = plane.normal

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)


@ti.func
def make_plane(normal: vec3, offset: ti.f32) -> Plane:
    """Create a plane inside a kernel, normalizing the normal."""
    return Plane(normal=tm.normalize(normal), offset=offset)
