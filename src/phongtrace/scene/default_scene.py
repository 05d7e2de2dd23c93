"""Default scene: a floor plane, three spheres and one point light.

The scene viewed from the origin looking down -z:

- Floor plane y = -2 (normal (0, 1, 0), offset 2), grey diffuse
- Red diffuse sphere at (-4, 0, -7), radius 1
- Green sphere at (0, 0, -7), radius 2, with a specular highlight
- Blue diffuse sphere at (4, 0, -7), radius 1
- White point light at (-4, 4, -3)

The camera is the default PinholeCamera: eye at the origin, a 0.2 x 0.2 image
window 0.1 in front of it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.camera.pinhole import setup_camera
    >>> from phongtrace.scene.default_scene import create_default_scene
    >>>
    >>> scene, camera = create_default_scene(width=256, height=256)
    >>> setup_camera(camera)
"""

from dataclasses import dataclass

from phongtrace.camera.pinhole import PinholeCamera
from phongtrace.materials.phong import PhongMaterial
from phongtrace.scene.light import DEFAULT_LIGHT_COLOR, DEFAULT_LIGHT_POSITION, PointLight
from phongtrace.scene.manager import Scene

Vector3 = tuple[float, float, float]

# =============================================================================
# Scene Constants
# =============================================================================

FLOOR_NORMAL: Vector3 = (0.0, 1.0, 0.0)
FLOOR_OFFSET = 2.0
FLOOR_MATERIAL = PhongMaterial(
    ambient=(0.2, 0.2, 0.2),
    diffuse=(1.0, 1.0, 1.0),
    specular=(0.0, 0.0, 0.0),
    specular_power=0.0,
)

RED_SPHERE_CENTER: Vector3 = (-4.0, 0.0, -7.0)
RED_SPHERE_RADIUS = 1.0
RED_MATERIAL = PhongMaterial(
    ambient=(0.2, 0.0, 0.0),
    diffuse=(1.0, 0.0, 0.0),
    specular=(0.0, 0.0, 0.0),
    specular_power=0.0,
)

GREEN_SPHERE_CENTER: Vector3 = (0.0, 0.0, -7.0)
GREEN_SPHERE_RADIUS = 2.0
GREEN_MATERIAL = PhongMaterial(
    ambient=(0.0, 0.2, 0.0),
    diffuse=(0.0, 0.5, 0.0),
    specular=(0.5, 0.5, 0.5),
    specular_power=32.0,
)

BLUE_SPHERE_CENTER: Vector3 = (4.0, 0.0, -7.0)
BLUE_SPHERE_RADIUS = 1.0
BLUE_MATERIAL = PhongMaterial(
    ambient=(0.0, 0.0, 0.2),
    diffuse=(0.0, 0.0, 1.0),
    specular=(0.0, 0.0, 0.0),
    specular_power=0.0,
)


@dataclass
class DefaultSceneParams:
    """Tunable parts of the default scene.

    Attributes:
        light_position: World-space position of the point light.
        light_color: RGB color of the light.
        include_floor: Whether to add the floor plane.
    """

    light_position: Vector3 = DEFAULT_LIGHT_POSITION
    light_color: Vector3 = DEFAULT_LIGHT_COLOR
    include_floor: bool = True


def create_default_scene(
    width: int = 512,
    height: int = 512,
    params: DefaultSceneParams | None = None,
) -> tuple[Scene, PinholeCamera]:
    """Build the default scene and its camera.

    Surfaces are added in the order plane, red, green, blue, so surface
    indices are 0..3 (0..2 without the floor).

    Args:
        width: Camera horizontal resolution.
        height: Camera vertical resolution.
        params: Optional overrides for the light and floor.

    Returns:
        Tuple of (scene, camera). The camera is not uploaded; call
        setup_camera() before rendering.
    """
    if params is None:
        params = DefaultSceneParams()

    scene = Scene(PointLight(position=params.light_position, color=params.light_color))

    if params.include_floor:
        scene.add_plane(FLOOR_NORMAL, FLOOR_OFFSET, FLOOR_MATERIAL)
    scene.add_sphere(RED_SPHERE_CENTER, RED_SPHERE_RADIUS, RED_MATERIAL)
    scene.add_sphere(GREEN_SPHERE_CENTER, GREEN_SPHERE_RADIUS, GREEN_MATERIAL)
    scene.add_sphere(BLUE_SPHERE_CENTER, BLUE_SPHERE_RADIUS, BLUE_MATERIAL)

    camera = PinholeCamera(nx=width, ny=height)
    return scene, camera
