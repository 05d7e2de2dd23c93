"""Phong material: ambient, diffuse and specular reflectances.

A Phong material is the coefficient set of the local illumination model

    color = ka + diff * kd + spec * ks

where ``diff`` is the Lambertian cosine term and ``spec`` is the mirror-lobe
term raised to ``specular_power``. All reflectances are RGB triples in
[0, 1].

Materials are described on the Python side by the frozen PhongMaterial
dataclass and uploaded into a registry of Taichi fields so kernels can look
them up by index.

Example:
    >>> red = PhongMaterial(
    ...     ambient=(0.2, 0.0, 0.0),
    ...     diffuse=(1.0, 0.0, 0.0),
    ...     specular=(0.0, 0.0, 0.0),
    ...     specular_power=0.0,
    ... )
    >>> idx = add_phong_material(red)
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]


@ti.dataclass
class MaterialRecord:
    """GPU-side view of a Phong material.

    Attributes:
        ambient: Ambient reflectance (RGB).
        diffuse: Diffuse reflectance (RGB).
        specular: Specular reflectance (RGB).
        specular_power: Phong exponent (>= 0).
    """

    ambient: vec3
    diffuse: vec3
    specular: vec3
    specular_power: ti.f32


def _validate_color(name: str, color: Color) -> None:
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"{name} component {i} = {component} is outside [0, 1]")


@dataclass(frozen=True)
class PhongMaterial:
    """Python-side description of a Phong material.

    Attributes:
        ambient: Ambient reflectance as (R, G, B), each in [0, 1].
        diffuse: Diffuse reflectance as (R, G, B), each in [0, 1].
        specular: Specular reflectance as (R, G, B), each in [0, 1].
        specular_power: Phong exponent. Must be non-negative.

    Raises:
        ValueError: If a reflectance component is outside [0, 1] or the
            specular power is negative.
    """

    ambient: Color
    diffuse: Color
    specular: Color = (0.0, 0.0, 0.0)
    specular_power: float = 0.0

    def __post_init__(self) -> None:
        _validate_color("ambient", self.ambient)
        _validate_color("diffuse", self.diffuse)
        _validate_color("specular", self.specular)
        if self.specular_power < 0.0:
            raise ValueError(f"specular_power must be non-negative, got {self.specular_power}")

    def to_dict(self) -> dict[str, Any]:
        """Export the material as a plain dictionary."""
        return {
            "ambient": list(self.ambient),
            "diffuse": list(self.diffuse),
            "specular": list(self.specular),
            "specular_power": self.specular_power,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PhongMaterial":
        """Build a material from a dictionary produced by to_dict()."""
        ambient = data.get("ambient", [0.0, 0.0, 0.0])
        diffuse = data.get("diffuse", [0.0, 0.0, 0.0])
        specular = data.get("specular", [0.0, 0.0, 0.0])
        return cls(
            ambient=(ambient[0], ambient[1], ambient[2]),
            diffuse=(diffuse[0], diffuse[1], diffuse[2]),
            specular=(specular[0], specular[1], specular[2]),
            specular_power=float(data.get("specular_power", 0.0)),
        )


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_PHONG_MATERIALS = 64

phong_ambient = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_specular_power = ti.field(dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
num_phong_materials = ti.field(dtype=ti.i32, shape=())


def clear_phong_materials() -> None:
    """Clear all registered materials.

    Resets the material count to zero. Existing data in the fields is
    overwritten when new materials are added.
    """
    num_phong_materials[None] = 0


def add_phong_material(material: PhongMaterial) -> int:
    """Add a material to the registry.

    Args:
        material: The (already validated) material to upload.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_phong_materials[None]
    if idx >= MAX_PHONG_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_PHONG_MATERIALS}) exceeded")

    phong_ambient[idx] = list(material.ambient)
    phong_diffuse[idx] = list(material.diffuse)
    phong_specular[idx] = list(material.specular)
    phong_specular_power[idx] = material.specular_power
    num_phong_materials[None] = idx + 1
    return idx


def get_phong_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_phong_materials[None])


@ti.func
def get_phong_material(material_idx: ti.i32) -> MaterialRecord:
    """Look up a material by registry index.

    Args:
        material_idx: The index returned by add_phong_material().

    Returns:
        The MaterialRecord for the material.
    """
    return MaterialRecord(
        ambient=phong_ambient[material_idx],
        diffuse=phong_diffuse[material_idx],
        specular=phong_specular[material_idx],
        specular_power=phong_specular_power[material_idx],
    )
