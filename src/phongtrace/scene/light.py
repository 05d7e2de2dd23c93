"""Single point light source.

The scene is lit by exactly one point light with a position and an RGB color.
The light is not itself a surface: it is never hit by rays and never occludes
anything.
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

Vector3 = tuple[float, float, float]

DEFAULT_LIGHT_POSITION: Vector3 = (-4.0, 4.0, -3.0)
DEFAULT_LIGHT_COLOR: Vector3 = (1.0, 1.0, 1.0)


@dataclass(frozen=True)
class PointLight:
    """A point light.

    Attributes:
        position: World-space position of the light.
        color: RGB intensity of the light. Components must be non-negative.

    Raises:
        ValueError: If a color component is negative.
    """

    position: Vector3 = DEFAULT_LIGHT_POSITION
    color: Vector3 = DEFAULT_LIGHT_COLOR

    def __post_init__(self) -> None:
        for i, component in enumerate(self.color):
            if component < 0.0:
                raise ValueError(f"Light color component {i} = {component} is negative")

    def to_dict(self) -> dict[str, Any]:
        return {"position": list(self.position), "color": list(self.color)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PointLight":
        position = data.get("position", list(DEFAULT_LIGHT_POSITION))
        color = data.get("color", list(DEFAULT_LIGHT_COLOR))
        return cls(
            position=(position[0], position[1], position[2]),
            color=(color[0], color[1], color[2]),
        )


_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_light(light: PointLight) -> None:
    """Make ``light`` the current scene light."""
    _light_position[None] = list(light.position)
    _light_color[None] = list(light.color)


def clear_light() -> None:
    """Reset the light to black at the origin."""
    _light_position[None] = [0.0, 0.0, 0.0]
    _light_color[None] = [0.0, 0.0, 0.0]


def get_light_info() -> dict[str, Vector3]:
    """Read the current light back from the Taichi fields."""
    p = _light_position[None]
    c = _light_color[None]
    return {
        "position": (float(p[0]), float(p[1]), float(p[2])),
        "color": (float(c[0]), float(c[1]), float(c[2])),
    }


@ti.func
def get_light_position() -> vec3:
    return _light_position[None]


@ti.func
def get_light_color() -> vec3:
    return _light_color[None]
