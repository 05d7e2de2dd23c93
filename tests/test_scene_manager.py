"""Tests for the Scene owner object.

Tests cover:
- Building scenes with materials, surfaces and a light
- Validation of surfaces and material references
- Host-side queries (trace_nearest, in_shadow, shade)
- Serialization round trips
"""

import pytest


class TestSceneBuilding:
    """Test adding surfaces, materials and the light."""

    def test_new_scene_is_empty_with_default_light(self):
        """A new scene has no surfaces and the default white light."""
        from phongtrace.scene.light import get_light_info
        from phongtrace.scene.manager import Scene

        scene = Scene()
        assert scene.get_surface_count() == 0
        assert scene.get_material_count() == 0
        info = get_light_info()
        assert info["position"] == pytest.approx((-4.0, 4.0, -3.0))
        assert info["color"] == pytest.approx((1.0, 1.0, 1.0))

    def test_new_scene_replaces_previous(self, red_material):
        """Constructing a Scene wipes surfaces uploaded by an earlier one."""
        from phongtrace.scene.manager import Scene

        first = Scene()
        first.add_sphere((0.0, 0.0, -5.0), 1.0, red_material)
        second = Scene()
        assert second.get_surface_count() == 0

    def test_add_surfaces_in_order(self, red_material, grey_material):
        """Surface indices follow insertion order across types."""
        from phongtrace.scene.manager import PlaneInfo, Scene, SphereInfo

        scene = Scene()
        assert scene.add_plane((0.0, 1.0, 0.0), 2.0, grey_material) == 0
        assert scene.add_sphere((-4.0, 0.0, -7.0), 1.0, red_material) == 1

        assert isinstance(scene.surfaces[0], PlaneInfo)
        assert isinstance(scene.surfaces[1], SphereInfo)
        assert scene.material_of(1) == red_material
        assert scene.get_surface_count() == 2
        assert scene.get_material_count() == 2

    def test_share_material_by_id(self, red_material):
        """Surfaces can reference an already registered material."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        material_id = scene.add_material(red_material)
        scene.add_sphere((-4.0, 0.0, -7.0), 1.0, material_id)
        scene.add_sphere((4.0, 0.0, -7.0), 1.0, material_id)
        assert scene.get_material_count() == 1
        assert scene.surfaces[1].material_id == material_id

    def test_rejects_unknown_material_id(self):
        """A material ID that was never registered raises ValueError."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        with pytest.raises(ValueError, match="Invalid material_id"):
            scene.add_sphere((0.0, 0.0, -5.0), 1.0, 3)

    def test_rejects_bad_geometry(self, red_material):
        """Non-positive radius and zero normals raise ValueError."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        with pytest.raises(ValueError, match="radius"):
            scene.add_sphere((0.0, 0.0, -5.0), 0.0, red_material)
        with pytest.raises(ValueError, match="non-zero"):
            scene.add_plane((0.0, 0.0, 0.0), 1.0, red_material)
        assert scene.get_surface_count() == 0

    def test_set_light(self):
        """set_light uploads the new light."""
        from phongtrace.scene.light import PointLight, get_light_info
        from phongtrace.scene.manager import Scene

        scene = Scene()
        scene.set_light(PointLight(position=(1.0, 2.0, 3.0), color=(0.5, 0.5, 0.5)))
        info = get_light_info()
        assert info["position"] == pytest.approx((1.0, 2.0, 3.0))
        assert info["color"] == pytest.approx((0.5, 0.5, 0.5))

    def test_clear_keeps_light(self, red_material):
        """clear() removes surfaces and materials but keeps the light."""
        from phongtrace.scene.light import PointLight
        from phongtrace.scene.manager import Scene

        light = PointLight(position=(0.0, 5.0, 0.0))
        scene = Scene(light)
        scene.add_sphere((0.0, 0.0, -5.0), 1.0, red_material)
        scene.clear()
        assert scene.get_surface_count() == 0
        assert scene.get_material_count() == 0
        assert scene.light == light

    def test_capacity(self):
        """Capacity helpers report the preallocated sizes."""
        from phongtrace.materials.phong import MAX_PHONG_MATERIALS
        from phongtrace.scene.intersection import MAX_SURFACES
        from phongtrace.scene.manager import Scene

        assert Scene.get_max_surfaces() == MAX_SURFACES
        assert Scene.get_max_materials() == MAX_PHONG_MATERIALS


class TestSceneQueries:
    """Test host-side ray queries."""

    def test_trace_nearest(self, red_material, grey_material):
        """trace_nearest returns the closest surface and its geometry."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        scene.add_plane((0.0, 1.0, 0.0), 2.0, grey_material)
        scene.add_sphere((0.0, 0.0, -7.0), 2.0, red_material)

        hit = scene.trace_nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.surface_id == 1
        assert hit.t == pytest.approx(5.0, abs=1e-5)
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

        assert scene.trace_nearest((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) is None

    def test_in_shadow(self, red_material, grey_material):
        """in_shadow sees the sphere between the floor and the light."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        scene.add_plane((0.0, 1.0, 0.0), 2.0, grey_material)
        scene.add_sphere((0.0, 0.0, -7.0), 1.0, red_material)

        assert scene.in_shadow((0.0, -2.0, -7.0), (0.0, 1.0, 0.0)) is True
        assert scene.in_shadow((5.0, -2.0, -7.0), (0.0, 1.0, 0.0)) is False

    def test_shade_miss_is_black(self, red_material):
        """shade() returns black for rays hitting nothing."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 0.0, -7.0), 1.0, red_material)
        assert scene.shade((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)

    def test_queries_reject_zero_direction(self, red_material):
        """Zero-length directions raise instead of returning a miss."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 0.0, -7.0), 1.0, red_material)
        origin = (0.0, 0.0, 0.0)
        zero = (0.0, 0.0, 0.0)

        with pytest.raises(ValueError, match="Ray direction must be non-zero"):
            scene.trace_nearest(origin, zero)
        with pytest.raises(ValueError, match="Light direction must be non-zero"):
            scene.in_shadow(origin, zero)
        with pytest.raises(ValueError, match="Ray direction must be non-zero"):
            scene.shade(origin, zero)


class TestSceneSerialization:
    """Test scene export and import."""

    def test_to_dict_layout(self, red_material, grey_material):
        """to_dict lists materials, typed surfaces and the light."""
        from phongtrace.scene.manager import Scene

        scene = Scene()
        scene.add_plane((0.0, 1.0, 0.0), 2.0, grey_material)
        scene.add_sphere((-4.0, 0.0, -7.0), 1.0, red_material)

        data = scene.to_dict()
        assert [s["type"] for s in data["surfaces"]] == ["plane", "sphere"]
        assert data["surfaces"][1]["center"] == [-4.0, 0.0, -7.0]
        assert data["surfaces"][1]["material_id"] == 1
        assert data["materials"][1]["diffuse"] == [1.0, 0.0, 0.0]
        assert data["light"]["position"] == [-4.0, 4.0, -3.0]

    def test_round_trip(self, red_material, grey_material):
        """from_dict(to_dict()) rebuilds an equivalent scene."""
        from phongtrace.scene.light import PointLight
        from phongtrace.scene.manager import Scene

        scene = Scene(PointLight(position=(1.0, 5.0, 0.0)))
        scene.add_plane((0.0, 1.0, 0.0), 2.0, grey_material)
        scene.add_sphere((-4.0, 0.0, -7.0), 1.0, red_material)
        data = scene.to_dict()

        rebuilt = Scene.from_dict(data)
        assert rebuilt.to_dict() == data
        assert rebuilt.get_surface_count() == 2
        assert rebuilt.light.position == (1.0, 5.0, 0.0)

        hit = rebuilt.trace_nearest((0.0, 0.0, 0.0), (-4.0, 0.0, -7.0))
        assert hit is not None
        assert hit.surface_id == 1

    def test_from_dict_rejects_unknown_surface(self):
        """Unknown surface types raise ValueError."""
        from phongtrace.scene.manager import Scene

        data = {
            "materials": [{"ambient": [0.1, 0.1, 0.1], "diffuse": [0.5, 0.5, 0.5]}],
            "surfaces": [{"type": "torus", "material_id": 0}],
        }
        with pytest.raises(ValueError, match="Unknown surface type"):
            Scene.from_dict(data)
