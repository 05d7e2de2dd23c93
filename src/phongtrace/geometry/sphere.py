"""Sphere primitive with ray-sphere intersection.

The intersection solves |o + t*d - c|^2 = r^2 for a unit direction d using the
half-chord substitution:

    p     = o - c
    t_m   = -dot(p, d)             (parameter of the closest approach)
    delta = t_m^2 - |p|^2 + r^2    (squared half-chord length)

so the roots are t_m -/+ sqrt(delta). The nearer root is used when it lies in
front of the epsilon guard, otherwise the farther one; a ray whose origin is
inside the sphere therefore reports the exit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -5), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import EPSILON, Ray, ray_at, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Shared by every surface type.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The 3D point where the ray met the surface.
            Only valid if hit == 1.
        normal: The outward unit surface normal at the intersection point.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord describing no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
    )


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord for the nearest root with t > EPSILON. The normal always
        points away from the sphere center, including for rays that start
        inside the sphere.
    """
    p = ray_origin - sphere.center

    t_m = -tm.dot(p, ray_direction)
    delta2 = t_m * t_m - tm.dot(p, p) + sphere.radius * sphere.radius

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if delta2 >= 0.0:
        delta = ti.sqrt(delta2)
        t0 = t_m - delta
        t1 = t_m + delta

        if t0 > EPSILON:
            did_hit = 1
            hit_t = t0
        elif t1 > EPSILON:
            did_hit = 1
            hit_t = t1

        if did_hit == 1:
            hit_point = ray_at(Ray(origin=ray_origin, direction=ray_direction), hit_t)
            hit_normal = tm.normalize(hit_point - sphere.center)

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius)
