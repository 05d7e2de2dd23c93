"""Local Phong shading of scene hits.

For a hit at ``point`` with unit ``normal`` seen along ``ray_direction``:

    L    = normalize(light_position - point)
    V    = normalize(-ray_direction)
    R    = reflect(-L, normal)
    diff = max(dot(normal, L), 0)
    spec = max(dot(R, V), 0) ** specular_power

Two shading models are supported:

BASIC
    clamp(ka*Lc + diff*kd*Lc + spec*ks*Lc, 0, 1), with Lc the light color.
    No shadows, no gamma.

SHADOWED
    diff and spec are zeroed when a shadow ray toward the light is blocked;
    color = clamp(ka + diff*kd + spec*ks, 0, 1) ** (1/gamma).

Rays that miss every surface return BACKGROUND_COLOR (black).
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import T_MAX, clamp01, reflect, safe_pow, safe_pow_vec, vec3
from phongtrace.materials.phong import get_phong_material
from phongtrace.scene.intersection import (
    SceneHitRecord,
    in_shadow,
    intersect_scene,
    require_nonzero,
)
from phongtrace.scene.light import get_light_color, get_light_position

Vector3 = tuple[float, float, float]

BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)

DEFAULT_GAMMA = 2.2


class ShadingModel(IntEnum):
    """Which variant of the local illumination model to evaluate."""

    BASIC = 0
    SHADOWED = 1


@ti.func
def diffuse_factor(normal: vec3, light_dir: vec3) -> ti.f32:
    """Lambertian cosine term, zero when the light is behind the surface."""
    return tm.max(tm.dot(normal, light_dir), 0.0)


@ti.func
def specular_factor(reflected: vec3, view_dir: vec3, specular_power: ti.f32) -> ti.f32:
    """Mirror-lobe term max(dot(R, V), 0) ** specular_power."""
    return safe_pow(tm.dot(reflected, view_dir), specular_power)


@ti.func
def apply_gamma(color: vec3, gamma: ti.f32) -> vec3:
    """Gamma-encode a color: color ** (1 / gamma), negatives clamped to 0."""
    return safe_pow_vec(color, 1.0 / gamma)


@ti.func
def shade_hit(
    rec: SceneHitRecord,
    ray_direction: vec3,
    model: ti.i32,
    gamma: ti.f32,
    bound_shadows: ti.i32,
) -> vec3:
    """Evaluate the Phong model for a scene hit.

    Args:
        rec: A SceneHitRecord with hit == 1.
        ray_direction: Unit direction of the ray that produced the hit.
        model: A ShadingModel value.
        gamma: Display gamma, used by the SHADOWED model only.
        bound_shadows: 1 to ignore occluders farther away than the light,
            0 for the unbounded shadow test.

    Returns:
        The shaded color in [0, 1].
    """
    material = get_phong_material(rec.material_id)
    light_position = get_light_position()

    to_light = light_position - rec.point
    light_dir = tm.normalize(to_light)
    view_dir = tm.normalize(-ray_direction)
    reflected = reflect(-light_dir, rec.normal)

    diff = diffuse_factor(rec.normal, light_dir)
    spec = specular_factor(reflected, view_dir, material.specular_power)

    color = vec3(0.0, 0.0, 0.0)
    if model == int(ShadingModel.BASIC):
        light_color = get_light_color()
        color = clamp01(
            material.ambient * light_color
            + diff * material.diffuse * light_color
            + spec * material.specular * light_color
        )
    else:
        t_max = T_MAX
        if bound_shadows == 1:
            t_max = tm.length(to_light)
        if in_shadow(rec.point, light_dir, t_max) == 1:
            diff = 0.0
            spec = 0.0
        color = clamp01(material.ambient + diff * material.diffuse + spec * material.specular)
        color = apply_gamma(color, gamma)

    return color


@ti.func
def trace_ray(
    ray_origin: vec3,
    ray_direction: vec3,
    model: ti.i32,
    gamma: ti.f32,
    bound_shadows: ti.i32,
) -> vec3:
    """Trace one primary ray: nearest hit, then local shading.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        model: A ShadingModel value.
        gamma: Display gamma for the SHADOWED model.
        bound_shadows: 1 to bound shadow rays at the light distance.

    Returns:
        The shaded color, or BACKGROUND_COLOR on a miss.
    """
    color = BACKGROUND_COLOR
    rec = intersect_scene(ray_origin, ray_direction)
    if rec.hit == 1:
        color = shade_hit(rec, ray_direction, model, gamma, bound_shadows)
    return color


# =============================================================================
# Host-side Evaluation
# =============================================================================

_shade_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _shade_ray_kernel(
    ray_origin: vec3,
    ray_direction: vec3,
    model: ti.i32,
    gamma: ti.f32,
    bound_shadows: ti.i32,
):
    # Single-iteration outer loop keeps the surface scan serial
    for _ in range(1):
        _shade_result[None] = trace_ray(
            ray_origin, tm.normalize(ray_direction), model, gamma, bound_shadows
        )


def shade_ray(
    origin: Vector3,
    direction: Vector3,
    model: ShadingModel = ShadingModel.SHADOWED,
    gamma: float = DEFAULT_GAMMA,
    bound_shadows: bool = False,
) -> Vector3:
    """Trace and shade a single ray from Python.

    Args:
        origin: The ray origin.
        direction: The ray direction (normalized before tracing).
        model: The shading model to evaluate.
        gamma: Display gamma for the SHADOWED model. Must be positive.
        bound_shadows: Clip shadow rays at the light distance.

    Returns:
        The color as (R, G, B).

    Raises:
        ValueError: If gamma is not positive or the direction has zero
            length.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    require_nonzero(direction, "Ray direction")
    _shade_ray_kernel(
        vec3(float(origin[0]), float(origin[1]), float(origin[2])),
        vec3(float(direction[0]), float(direction[1]), float(direction[2])),
        int(model),
        gamma,
        int(bound_shadows),
    )
    color = _shade_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
