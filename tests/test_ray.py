"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- make_ray normalization
- reflect, safe_pow and clamp01 helpers
"""

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from phongtrace.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_positive_t(self):
        """Test ray_at computes correct point along ray."""
        from phongtrace.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 1.0, 0.0), direction=vec3(1.0, 0.0, 0.0))
            result[None] = ray_at(ray, 5.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 5.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_make_ray_normalizes_direction(self):
        """Test make_ray produces a unit direction."""
        from phongtrace.core.ray import make_ray, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(3.0, 0.0, -4.0))
            direction[None] = ray.direction

        test_kernel()
        d = direction[None]
        assert abs(d[0] - 0.6) < 1e-6
        assert abs(d[1]) < 1e-6
        assert abs(d[2] + 0.8) < 1e-6


class TestVectorHelpers:
    """Tests for the vector helper functions."""

    def test_length_squared(self):
        """Test length_squared of a 3-4-0 vector."""
        from phongtrace.core.ray import length_squared, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length_squared(vec3(3.0, 4.0, 0.0))

        test_kernel()
        assert abs(result[None] - 25.0) < 1e-5

    def test_reflect(self):
        """Test reflection of a 45-degree ray off a horizontal surface."""
        from phongtrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    @pytest.mark.parametrize(
        "base, exponent, expected",
        [
            (0.5, 2.0, 0.25),
            (-0.5, 2.0, 0.0),
            (0.25, 0.5, 0.5),
            (0.7, 1.0, 0.7),
        ],
    )
    def test_safe_pow(self, base, exponent, expected):
        """Test safe_pow clamps negative bases to zero."""
        from phongtrace.core.ray import safe_pow

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(b: ti.f32, e: ti.f32):
            result[None] = safe_pow(b, e)

        test_kernel(base, exponent)
        assert result[None] == pytest.approx(expected, abs=1e-6)

    def test_safe_pow_vec(self):
        """Test component-wise safe_pow."""
        from phongtrace.core.ray import safe_pow_vec, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = safe_pow_vec(vec3(0.25, -1.0, 1.0), 0.5)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(0.5, abs=1e-6)
        assert r[1] == pytest.approx(0.0, abs=1e-6)
        assert r[2] == pytest.approx(1.0, abs=1e-6)

    def test_clamp01(self):
        """Test colors are clamped to [0, 1] per component."""
        from phongtrace.core.ray import clamp01, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = clamp01(vec3(-0.5, 0.3, 1.7))

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(0.0)
        assert r[1] == pytest.approx(0.3, abs=1e-6)
        assert r[2] == pytest.approx(1.0)
