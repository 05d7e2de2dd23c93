"""Scene owner coordinating surfaces, materials and the light.

The Scene class is the Python-side owner of everything a render reads:
the ordered surface list, the Phong materials those surfaces reference and
the single point light. Every mutation is mirrored into the Taichi fields
used by the kernels (surface storage, material registry, light fields).

Surface and material storage is global, so only one Scene is live at a time:
constructing a Scene (or calling clear()) wipes whatever the previous one
uploaded.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.materials.phong import PhongMaterial
    >>> from phongtrace.scene.manager import Scene
    >>> scene = Scene()
    >>> red = PhongMaterial(ambient=(0.2, 0.0, 0.0), diffuse=(1.0, 0.0, 0.0))
    >>> scene.add_sphere((-4.0, 0.0, -7.0), 1.0, red)
    0
    >>> hit = scene.trace_nearest((0.0, 0.0, 0.0), (-4.0, 0.0, -7.0))
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from phongtrace.core.ray import T_MAX
from phongtrace.materials.phong import (
    MAX_PHONG_MATERIALS,
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
)
from phongtrace.scene.intersection import (
    MAX_SURFACES,
    NearestHit,
    SurfaceKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_surface_count,
    query_nearest,
    query_shadow,
)
from phongtrace.scene.light import PointLight, setup_light
from phongtrace.scene.shading import DEFAULT_GAMMA, ShadingModel, shade_ray

logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        surface_index: The slot in the surface storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    surface_index: int
    center: Vector3
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        surface_index: The slot in the surface storage arrays.
        normal: The plane normal as given (stored normalized).
        offset: The plane equation offset.
        material_id: The material ID assigned to the plane.
    """

    surface_index: int
    normal: Vector3
    offset: float
    material_id: int


SurfaceInfo = SphereInfo | PlaneInfo


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        surfaces: List of surface configurations in insertion order. Each has
            a "type" key ("sphere" or "plane").
        light: Light configuration.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    surfaces: list[dict[str, Any]] = field(default_factory=list)
    light: dict[str, Any] = field(default_factory=lambda: PointLight().to_dict())


def _as_vector3(values: Any, default: Vector3) -> Vector3:
    if values is None:
        return default
    return (float(values[0]), float(values[1]), float(values[2]))


class Scene:
    """Ordered surfaces, their materials and one point light.

    Attributes:
        materials: Registered materials, indexed by material ID.
        surfaces: SphereInfo / PlaneInfo records in insertion order.
        light: The current point light.

    Example:
        >>> scene = Scene(PointLight(position=(-4.0, 4.0, -3.0)))
        >>> floor = PhongMaterial(ambient=(0.2, 0.2, 0.2), diffuse=(1.0, 1.0, 1.0))
        >>> scene.add_plane((0.0, 1.0, 0.0), 2.0, floor)
        0
        >>> scene.in_shadow((0.0, -2.0, -7.0), (-4.0, 6.0, 4.0))
        False
    """

    def __init__(self, light: PointLight | None = None) -> None:
        """Initialize an empty scene, replacing any previously uploaded one.

        Args:
            light: The scene light. Defaults to a white light at (-4, 4, -3).
        """
        self.materials: list[PhongMaterial] = []
        self.surfaces: list[SurfaceInfo] = []
        self.light = light if light is not None else PointLight()
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_phong_materials()
        self.materials.clear()
        self.surfaces.clear()
        setup_light(self.light)

    def clear(self) -> None:
        """Remove every surface and material. The light is kept."""
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Materials and Light
    # =========================================================================

    def add_material(self, material: PhongMaterial) -> int:
        """Register a material and return its ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
        """
        material_id = add_phong_material(material)
        self.materials.append(material)
        return material_id

    def _resolve_material(self, material: PhongMaterial | int) -> int:
        if isinstance(material, PhongMaterial):
            return self.add_material(material)
        if not 0 <= material < len(self.materials):
            raise ValueError(f"Invalid material_id: {material}")
        return material

    def set_light(self, light: PointLight) -> None:
        """Replace the scene light."""
        self.light = light
        setup_light(light)

    # =========================================================================
    # Surfaces
    # =========================================================================

    def add_sphere(self, center: Vector3, radius: float, material: PhongMaterial | int) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material: A PhongMaterial to register, or the ID of one already
                registered.

        Returns:
            The surface index of the sphere.

        Raises:
            ValueError: If the radius is not positive or the material ID is
                invalid.
            RuntimeError: If scene or material storage is full.
        """
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        material_id = self._resolve_material(material)
        index = add_sphere(center, radius, material_id)
        self.surfaces.append(
            SphereInfo(
                surface_index=index,
                center=_as_vector3(center, (0.0, 0.0, 0.0)),
                radius=float(radius),
                material_id=material_id,
            )
        )
        return index

    def add_plane(self, normal: Vector3, offset: float, material: PhongMaterial | int) -> int:
        """Add a plane dot(normal, p) + offset = 0 to the scene.

        Args:
            normal: The plane normal (any non-zero length).
            offset: The plane equation offset.
            material: A PhongMaterial to register, or the ID of one already
                registered.

        Returns:
            The surface index of the plane.

        Raises:
            ValueError: If the normal is zero or the material ID is invalid.
            RuntimeError: If scene or material storage is full.
        """
        if normal[0] == 0.0 and normal[1] == 0.0 and normal[2] == 0.0:
            raise ValueError("Plane normal must be non-zero")
        material_id = self._resolve_material(material)
        index = add_plane(normal, offset, material_id)
        self.surfaces.append(
            PlaneInfo(
                surface_index=index,
                normal=_as_vector3(normal, (0.0, 1.0, 0.0)),
                offset=float(offset),
                material_id=material_id,
            )
        )
        return index

    def get_surface_count(self) -> int:
        """Get the number of surfaces in the scene."""
        return get_surface_count()

    def get_material_count(self) -> int:
        """Get the number of registered materials."""
        return len(self.materials)

    def material_of(self, surface_index: int) -> PhongMaterial:
        """Get the material of a surface."""
        return self.materials[self.surfaces[surface_index].material_id]

    # =========================================================================
    # Queries
    # =========================================================================

    def trace_nearest(self, origin: Vector3, direction: Vector3) -> NearestHit | None:
        """Nearest intersection of a ray with the scene, or None on a miss.

        Ties between surfaces at equal t go to the surface added first.
        """
        return query_nearest(origin, direction)

    def in_shadow(self, point: Vector3, light_dir: Vector3, t_max: float = T_MAX) -> bool:
        """Whether ``point`` is occluded along ``light_dir``.

        The default t_max counts every surface along the ray, including those
        beyond the light. Pass the distance to the light to bound the test.
        """
        return query_shadow(point, light_dir, t_max)

    def shade(
        self,
        origin: Vector3,
        direction: Vector3,
        model: ShadingModel = ShadingModel.SHADOWED,
        gamma: float = DEFAULT_GAMMA,
        bound_shadows: bool = False,
    ) -> Vector3:
        """Trace and shade a single ray. Misses return black."""
        return shade_ray(origin, direction, model, gamma, bound_shadows)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing the materials, surfaces and light.
        """
        config = SceneConfig(light=self.light.to_dict())

        for material in self.materials:
            config.materials.append(material.to_dict())

        for surface in self.surfaces:
            if isinstance(surface, SphereInfo):
                config.surfaces.append(
                    {
                        "type": SurfaceKind.SPHERE.name.lower(),
                        "center": list(surface.center),
                        "radius": surface.radius,
                        "material_id": surface.material_id,
                    }
                )
            else:
                config.surfaces.append(
                    {
                        "type": SurfaceKind.PLANE.name.lower(),
                        "normal": list(surface.normal),
                        "offset": surface.offset,
                        "material_id": surface.material_id,
                    }
                )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.set_light(PointLight.from_dict(config.light))
        self.clear()

        # Materials first, surfaces refer to them by ID
        for material_config in config.materials:
            self.add_material(PhongMaterial.from_dict(material_config))

        for surface_config in config.surfaces:
            surface_type = str(surface_config.get("type", "")).lower()
            material_id = int(surface_config.get("material_id", 0))
            if surface_type == "sphere":
                center = _as_vector3(surface_config.get("center"), (0.0, 0.0, 0.0))
                radius = float(surface_config.get("radius", 1.0))
                self.add_sphere(center, radius, material_id)
            elif surface_type == "plane":
                normal = _as_vector3(surface_config.get("normal"), (0.0, 1.0, 0.0))
                offset = float(surface_config.get("offset", 0.0))
                self.add_plane(normal, offset, material_id)
            else:
                raise ValueError(f"Unknown surface type: {surface_type}")

        logger.debug(
            "Loaded scene with %d surfaces and %d materials",
            len(self.surfaces),
            len(self.materials),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        return {
            "materials": config.materials,
            "surfaces": config.surfaces,
            "light": config.light,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a scene from a dictionary produced by to_dict().

        Args:
            data: Dictionary with 'materials', 'surfaces' and 'light' keys.

        Raises:
            ValueError: If the dictionary contains invalid data.
        """
        scene = cls()
        config = SceneConfig(
            materials=data.get("materials", []),
            surfaces=data.get("surfaces", []),
            light=data.get("light", PointLight().to_dict()),
        )
        scene.from_config(config)
        return scene

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_surfaces() -> int:
        """Get the maximum number of surfaces supported."""
        return MAX_SURFACES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_PHONG_MATERIALS

    def __repr__(self) -> str:
        return (
            f"Scene(surfaces={len(self.surfaces)}, materials={len(self.materials)}, "
            f"light={self.light})"
        )
