"""Materials module for surface reflectance.

Components:
    phong: Phong material (ambient + diffuse + specular lobe) and its
        registry of Taichi fields

Materials are registered once when a scene is built and looked up by index
from the shading kernels.
"""

from .phong import (
    MAX_PHONG_MATERIALS,
    MaterialRecord,
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
    get_phong_material,
    get_phong_material_count,
)

__all__ = [
    "PhongMaterial",
    "MaterialRecord",
    "add_phong_material",
    "clear_phong_materials",
    "get_phong_material",
    "get_phong_material_count",
    "MAX_PHONG_MATERIALS",
]
