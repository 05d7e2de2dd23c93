"""Scene-level surface storage, nearest-hit and shadow queries.

Surfaces are stored as a tagged variant in a single Structure-of-Arrays so the
scan order is exactly the insertion order, whatever the surface type:

    kind     SurfaceKind tag (sphere or plane)
    vector   sphere center / plane unit normal
    scalar   sphere radius / plane offset
    material index into the Phong material registry

intersect_surface() is the single dispatch point over the variants.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.intersection import add_plane, add_sphere, clear_scene
    >>> clear_scene()
    >>> add_plane((0.0, 1.0, 0.0), 2.0, material_id=0)
    0
    >>> add_sphere((-4.0, 0.0, -7.0), 1.0, material_id=1)
    1
    >>> # Use intersect_scene / in_shadow within a Taichi kernel
"""

import math
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import EPSILON, T_MAX, vec3
from phongtrace.geometry.plane import Plane, hit_plane
from phongtrace.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss

Vector3 = tuple[float, float, float]


class SurfaceKind(IntEnum):
    """Tag identifying the variant stored in a surface slot."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any surface (1 if hit, 0 if miss).
        t: The ray parameter of the nearest intersection.
            Only valid if hit == 1.
        point: The 3D point of the nearest intersection.
            Only valid if hit == 1.
        normal: The outward unit surface normal at the intersection.
            Only valid if hit == 1.
        surface_id: Index of the hit surface in insertion order.
            -1 for a miss.
        material_id: Material index of the hit surface. -1 for a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    surface_id: ti.i32
    material_id: ti.i32


# Maximum number of surfaces supported in the scene
MAX_SURFACES = 64

surface_kinds = ti.field(dtype=ti.i32, shape=MAX_SURFACES)
surface_vectors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SURFACES)
surface_scalars = ti.field(dtype=ti.f32, shape=MAX_SURFACES)
surface_material_ids = ti.field(dtype=ti.i32, shape=MAX_SURFACES)
num_surfaces = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all surfaces from the scene.

    Resets the surface count to zero. The field data is overwritten when new
    surfaces are added.
    """
    num_surfaces[None] = 0


def _add_surface(kind: SurfaceKind, vector: Vector3, scalar: float, material_id: int) -> int:
    idx = num_surfaces[None]
    if idx >= MAX_SURFACES:
        raise RuntimeError(f"Maximum number of surfaces ({MAX_SURFACES}) exceeded")
    surface_kinds[idx] = int(kind)
    surface_vectors[idx] = [vector[0], vector[1], vector[2]]
    surface_scalars[idx] = scalar
    surface_material_ids[idx] = material_id
    num_surfaces[None] = idx + 1
    return idx


def add_sphere(center: Vector3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The material index to associate with this sphere.

    Returns:
        The surface index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of surfaces is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    return _add_surface(SurfaceKind.SPHERE, center, radius, material_id)


def add_plane(normal: Vector3, offset: float, material_id: int = 0) -> int:
    """Add a plane dot(normal, p) + offset = 0 to the scene.

    The normal is normalized before storage; the offset is used as given.

    Args:
        normal: The plane normal (any non-zero length).
        offset: The plane equation offset.
        material_id: The material index to associate with this plane.

    Returns:
        The surface index of the added plane.

    Raises:
        ValueError: If the normal has zero length.
        RuntimeError: If the maximum number of surfaces is exceeded.
    """
    length = require_nonzero(normal, "Plane normal")
    unit = (normal[0] / length, normal[1] / length, normal[2] / length)
    return _add_surface(SurfaceKind.PLANE, unit, offset, material_id)


def get_surface_count() -> int:
    """Get the number of surfaces in the scene."""
    return int(num_surfaces[None])


# =============================================================================
# Intersection (Taichi functions)
# =============================================================================


@ti.func
def intersect_surface(idx: ti.i32, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Intersect a ray with the surface stored in slot ``idx``.

    Dispatches on the surface kind tag.

    Args:
        idx: The surface index.
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        The HitRecord from the matching primitive test.
    """
    rec = make_miss()
    kind = surface_kinds[idx]
    if kind == int(SurfaceKind.SPHERE):
        sphere = Sphere(center=surface_vectors[idx], radius=surface_scalars[idx])
        rec = hit_sphere(ray_origin, ray_direction, sphere)
    elif kind == int(SurfaceKind.PLANE):
        plane = Plane(normal=surface_vectors[idx], offset=surface_scalars[idx])
        rec = hit_plane(ray_origin, ray_direction, plane)
    return rec


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        surface_id=-1,
        material_id=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Surfaces are scanned in insertion order and only a strictly smaller t
    replaces the current best, so ties go to the surface added first.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest_t = T_MAX
    result = _make_miss_record()

    for i in range(num_surfaces[None]):
        rec = intersect_surface(i, ray_origin, ray_direction)
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                surface_id=i,
                material_id=surface_material_ids[i],
            )

    return result


@ti.func
def in_shadow(point: vec3, light_dir: vec3, t_max: ti.f32) -> ti.i32:
    """Test whether a point is shadowed along the direction to the light.

    The shadow ray starts at point + EPSILON * light_dir. Any surface hit with
    t < t_max shadows the point; callers pass T_MAX for the unbounded test,
    in which occluders beyond the light also cast shadows.

    Args:
        point: The surface point being shaded.
        light_dir: Unit direction from the point toward the light.
        t_max: Largest shadow-ray parameter that counts as an occluder.

    Returns:
        1 if the point is in shadow, 0 otherwise.
    """
    origin = point + EPSILON * light_dir
    shadowed = 0

    for i in range(num_surfaces[None]):
        if shadowed == 0:
            rec = intersect_surface(i, origin, light_dir)
            if rec.hit == 1 and rec.t < t_max:
                shadowed = 1

    return shadowed


# =============================================================================
# Host-side Queries
# =============================================================================


@dataclass(frozen=True)
class NearestHit:
    """Python-side result of a nearest-hit query.

    Attributes:
        surface_id: Index of the hit surface in insertion order.
        t: Ray parameter of the hit.
        point: World-space hit point.
        normal: Outward unit normal at the hit.
    """

    surface_id: int
    t: float
    point: Vector3
    normal: Vector3


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_surface = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_nearest_kernel(ray_origin: vec3, ray_direction: vec3):
    # Single-iteration outer loop keeps the surface scan serial
    for _ in range(1):
        rec = intersect_scene(ray_origin, tm.normalize(ray_direction))
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.point
        _query_normal[None] = rec.normal
        _query_surface[None] = rec.surface_id


@ti.kernel
def _query_shadow_kernel(point: vec3, light_dir: vec3, t_max: ti.f32):
    for _ in range(1):
        _query_hit[None] = in_shadow(point, tm.normalize(light_dir), t_max)


def _vec(v: Vector3) -> vec3:
    return vec3(float(v[0]), float(v[1]), float(v[2]))


def require_nonzero(v: Vector3, name: str) -> float:
    """Return the length of ``v``, raising ValueError if it is zero."""
    length = math.sqrt(v[0] ** 2 + v[1] ** 2 + v[2] ** 2)
    if length == 0.0:
        raise ValueError(f"{name} must be non-zero")
    return length


def query_nearest(origin: Vector3, direction: Vector3) -> NearestHit | None:
    """Run a nearest-hit query from Python.

    Args:
        origin: The ray origin.
        direction: The ray direction (normalized before tracing).

    Returns:
        A NearestHit, or None when the ray misses every surface.

    Raises:
        ValueError: If the direction has zero length.
    """
    require_nonzero(direction, "Ray direction")
    _query_nearest_kernel(_vec(origin), _vec(direction))
    if _query_hit[None] == 0:
        return None
    p = _query_point[None]
    n = _query_normal[None]
    return NearestHit(
        surface_id=int(_query_surface[None]),
        t=float(_query_t[None]),
        point=(float(p[0]), float(p[1]), float(p[2])),
        normal=(float(n[0]), float(n[1]), float(n[2])),
    )


def query_shadow(point: Vector3, light_dir: Vector3, t_max: float = T_MAX) -> bool:
    """Run a shadow query from Python.

    Args:
        point: The surface point.
        light_dir: Direction toward the light (normalized before tracing).
        t_max: Largest shadow-ray parameter that counts as an occluder.

    Returns:
        True if the point is in shadow.

    Raises:
        ValueError: If the light direction has zero length.
    """
    require_nonzero(light_dir, "Light direction")
    _query_shadow_kernel(_vec(point), _vec(light_dir), t_max)
    return bool(_query_hit[None])
