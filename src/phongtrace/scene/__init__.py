"""Scene module: surface storage, lighting, shading and scene building.

Components:
    intersection: Tagged surface storage, nearest-hit and shadow queries
    light: The single point light
    shading: Phong shading, shadows and gamma
    manager: Scene owner object coordinating surfaces, materials and light
    default_scene: Floor plane, three spheres and a point light

Scene data lives in preallocated Taichi fields:
    - Structure-of-Arrays surface storage scanned in insertion order
    - Material indices into the Phong material registry
    - 0-d fields for the light
"""

from .default_scene import DefaultSceneParams, create_default_scene
from .intersection import (
    MAX_SURFACES,
    NearestHit,
    SceneHitRecord,
    SurfaceKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_surface_count,
    in_shadow,
    intersect_scene,
    query_nearest,
    query_shadow,
)
from .light import PointLight, clear_light, get_light_info, setup_light
from .manager import PlaneInfo, Scene, SceneConfig, SphereInfo
from .shading import BACKGROUND_COLOR, DEFAULT_GAMMA, ShadingModel, shade_ray, trace_ray

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "SurfaceKind",
    "NearestHit",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_surface_count",
    "intersect_scene",
    "in_shadow",
    "query_nearest",
    "query_shadow",
    "MAX_SURFACES",
    # Light module
    "PointLight",
    "setup_light",
    "clear_light",
    "get_light_info",
    # Shading module
    "ShadingModel",
    "BACKGROUND_COLOR",
    "DEFAULT_GAMMA",
    "trace_ray",
    "shade_ray",
    # Manager module
    "Scene",
    "SceneConfig",
    "SphereInfo",
    "PlaneInfo",
    # Default scene module
    "create_default_scene",
    "DefaultSceneParams",
]
