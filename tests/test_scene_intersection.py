"""Tests for scene surface storage and scene queries.

Tests cover:
- Adding spheres and planes to the tagged surface storage
- Nearest-hit selection across mixed surface types
- Tie-breaking by insertion order
- Shadow queries, bounded and unbounded
"""

import pytest
import taichi as ti


class TestSurfaceStorage:
    """Tests for adding and clearing surfaces."""

    def test_add_returns_insertion_indices(self):
        """Spheres and planes share one index space in insertion order."""
        from phongtrace.scene.intersection import (
            SurfaceKind,
            add_plane,
            add_sphere,
            get_surface_count,
            surface_kinds,
        )

        assert add_plane((0.0, 1.0, 0.0), 2.0) == 0
        assert add_sphere((-4.0, 0.0, -7.0), 1.0) == 1
        assert add_sphere((4.0, 0.0, -7.0), 1.0) == 2
        assert get_surface_count() == 3
        assert surface_kinds[0] == int(SurfaceKind.PLANE)
        assert surface_kinds[1] == int(SurfaceKind.SPHERE)

    def test_add_plane_normalizes_normal(self):
        """The stored plane normal has unit length."""
        from phongtrace.scene.intersection import add_plane, surface_vectors

        idx = add_plane((0.0, 5.0, 0.0), 2.0)
        n = surface_vectors[idx]
        assert (n[0], n[1], n[2]) == pytest.approx((0.0, 1.0, 0.0))

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_add_sphere_rejects_non_positive_radius(self, radius):
        """Sphere radius must be positive."""
        from phongtrace.scene.intersection import add_sphere

        with pytest.raises(ValueError, match="radius"):
            add_sphere((0.0, 0.0, 0.0), radius)

    def test_add_plane_rejects_zero_normal(self):
        """Plane normal must be non-zero."""
        from phongtrace.scene.intersection import add_plane

        with pytest.raises(ValueError, match="non-zero"):
            add_plane((0.0, 0.0, 0.0), 1.0)

    def test_clear_scene(self):
        """clear_scene resets the surface count."""
        from phongtrace.scene.intersection import add_sphere, clear_scene, get_surface_count

        add_sphere((0.0, 0.0, -5.0), 1.0)
        clear_scene()
        assert get_surface_count() == 0

    def test_capacity_exceeded(self):
        """Adding past MAX_SURFACES raises RuntimeError."""
        from phongtrace.scene.intersection import MAX_SURFACES, add_sphere

        for i in range(MAX_SURFACES):
            add_sphere((float(i), 0.0, -10.0), 0.1)

        with pytest.raises(RuntimeError, match="Maximum number of surfaces"):
            add_sphere((0.0, 0.0, -10.0), 0.1)


class TestNearestHit:
    """Tests for intersect_scene through query_nearest."""

    def test_empty_scene_misses(self):
        """Nothing to hit in an empty scene."""
        from phongtrace.scene.intersection import query_nearest

        assert query_nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_nearest_of_two_spheres(self):
        """The closer sphere wins even when added last."""
        from phongtrace.scene.intersection import add_sphere, query_nearest

        add_sphere((0.0, 0.0, -10.0), 1.0)
        add_sphere((0.0, 0.0, -5.0), 1.0)

        hit = query_nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.surface_id == 1
        assert hit.t == pytest.approx(4.0, abs=1e-5)
        assert hit.normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_sphere_in_front_of_plane(self):
        """A sphere resting in front of the floor occludes it."""
        from phongtrace.scene.intersection import add_plane, add_sphere, query_nearest

        add_plane((0.0, 1.0, 0.0), 2.0)
        add_sphere((0.0, -1.0, -5.0), 1.0)

        hit = query_nearest((0.0, 0.0, 0.0), (0.0, -1.0, -5.0))
        assert hit is not None
        assert hit.surface_id == 1

    def test_plane_hit_past_spheres(self):
        """A ray that misses every sphere reaches the floor."""
        from phongtrace.scene.intersection import add_plane, add_sphere, query_nearest

        add_plane((0.0, 1.0, 0.0), 2.0)
        add_sphere((-4.0, 0.0, -7.0), 1.0)

        hit = query_nearest((0.0, 0.0, 0.0), (0.0, -1.0, -1.0))
        assert hit is not None
        assert hit.surface_id == 0
        assert hit.point == pytest.approx((0.0, -2.0, -2.0), abs=1e-5)

    def test_ties_go_to_first_added(self):
        """Coincident surfaces: the one added first is reported."""
        from phongtrace.scene.intersection import add_sphere, query_nearest

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=3)
        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=4)

        hit = query_nearest((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit is not None
        assert hit.surface_id == 0

    def test_scene_hit_record_material_id(self):
        """intersect_scene reports the material of the hit surface, -1 on a miss."""
        from phongtrace.scene.intersection import add_sphere, intersect_scene, vec3

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=7)

        hit_mat = ti.field(dtype=ti.i32, shape=())
        miss_mat = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                hit = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
                miss = intersect_scene(vec3(0.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))
                hit_mat[None] = hit.material_id
                miss_mat[None] = miss.material_id

        test_kernel()
        assert hit_mat[None] == 7
        assert miss_mat[None] == -1


class TestShadowQuery:
    """Tests for in_shadow through query_shadow."""

    def test_unoccluded_point(self):
        """Nothing between the point and the light."""
        from phongtrace.scene.intersection import add_plane, query_shadow

        add_plane((0.0, 1.0, 0.0), 2.0)
        assert query_shadow((0.0, -2.0, -7.0), (-4.0, 6.0, 4.0)) is False

    def test_occluder_blocks_light(self):
        """A sphere between the point and the light shadows it."""
        from phongtrace.scene.intersection import add_plane, add_sphere, query_shadow

        add_plane((0.0, 1.0, 0.0), 2.0)
        add_sphere((0.0, 0.0, -7.0), 1.0)

        assert query_shadow((0.0, -2.0, -7.0), (0.0, 1.0, 0.0)) is True

    def test_surface_does_not_shadow_itself(self):
        """The epsilon offset keeps a lit sphere point out of its own shadow."""
        from phongtrace.scene.intersection import add_sphere, query_shadow

        add_sphere((0.0, 0.0, -7.0), 2.0)
        assert query_shadow((0.0, 2.0, -7.0), (0.0, 1.0, 0.0)) is False

    def test_occluder_beyond_light_unbounded(self):
        """With the default t_max an occluder past the light still shadows."""
        from phongtrace.scene.intersection import add_sphere, query_shadow

        add_sphere((0.0, 10.0, 0.0), 1.0)
        assert query_shadow((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) is True

    def test_occluder_beyond_light_bounded(self):
        """Bounding t_max at the light distance ignores the far occluder."""
        from phongtrace.scene.intersection import add_sphere, query_shadow

        add_sphere((0.0, 10.0, 0.0), 1.0)
        assert query_shadow((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), t_max=4.0) is False


class TestQueryValidation:
    """Tests for direction checks at the host boundary."""

    def test_query_nearest_rejects_zero_direction(self):
        """A zero-length ray direction is rejected before tracing."""
        from phongtrace.scene.intersection import add_sphere, query_nearest

        add_sphere((0.0, 0.0, -7.0), 1.0)
        with pytest.raises(ValueError, match="Ray direction must be non-zero"):
            query_nearest((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_query_shadow_rejects_zero_light_direction(self):
        """A zero-length light direction is rejected before tracing."""
        from phongtrace.scene.intersection import add_sphere, query_shadow

        add_sphere((0.0, 0.0, -7.0), 1.0)
        with pytest.raises(ValueError, match="Light direction must be non-zero"):
            query_shadow((0.0, -2.0, -7.0), (0.0, 0.0, 0.0))
