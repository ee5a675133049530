"""Unit tests for the ray module.

Tests cover:
- Ray evaluation
- Reflection about a normal
- Refraction, including the zero-vector result on total internal reflection
- Schlick Fresnel reflectance
- Ray origin offsetting
"""

import math

import pytest
import taichi as ti


class TestRayAt:
    """Tests for ray evaluation."""

    def test_ray_at(self):
        from sdfmarch.core.ray import Ray, ray_at

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=ti.math.vec3(0.0, 0.0, 5.0), direction=ti.math.vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 4.0)

        test_kernel()
        p = result[None]
        assert p[0] == pytest.approx(0.0)
        assert p[1] == pytest.approx(0.0)
        assert p[2] == pytest.approx(1.0)


class TestReflect:
    """Tests for mirror reflection."""

    def test_reflect_head_on(self):
        from sdfmarch.core.ray import reflect

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0))

        test_kernel()
        d = result[None]
        assert d[0] == pytest.approx(0.0, abs=1e-6)
        assert d[1] == pytest.approx(1.0, abs=1e-6)
        assert d[2] == pytest.approx(0.0, abs=1e-6)

    def test_reflect_keeps_tangential_component(self):
        from sdfmarch.core.ray import reflect

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(ti.math.vec3(1.0, -1.0, 0.5))
            result[None] = reflect(incident, ti.math.vec3(0.0, 1.0, 0.0))

        test_kernel()
        d = result[None]
        norm = math.sqrt(2.25)
        assert d[0] == pytest.approx(1.0 / norm, abs=1e-5)
        assert d[1] == pytest.approx(1.0 / norm, abs=1e-5)
        assert d[2] == pytest.approx(0.5 / norm, abs=1e-5)


class TestRefract:
    """Tests for refraction."""

    def test_refract_normal_incidence_passes_straight(self):
        from sdfmarch.core.ray import refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(
                ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0), 1.0 / 1.5
            )

        test_kernel()
        d = result[None]
        assert d[0] == pytest.approx(0.0, abs=1e-6)
        assert d[1] == pytest.approx(-1.0, abs=1e-5)
        assert d[2] == pytest.approx(0.0, abs=1e-6)

    def test_refract_follows_snell(self):
        """Entering glass at 45 degrees bends toward the normal."""
        from sdfmarch.core.ray import refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(ti.math.vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, ti.math.vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        d = result[None]
        sin_t = math.sin(math.pi / 4.0) / 1.5
        assert d[0] == pytest.approx(sin_t, abs=1e-5)
        assert d[1] == pytest.approx(-math.sqrt(1.0 - sin_t * sin_t), abs=1e-5)
        assert d[0] * d[0] + d[1] * d[1] + d[2] * d[2] == pytest.approx(1.0, abs=1e-5)

    def test_refract_total_internal_reflection_returns_zero(self):
        from sdfmarch.core.ray import is_total_internal_reflection, refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        tir = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Leaving glass at a grazing angle
            incident = ti.math.normalize(ti.math.vec3(1.0, 0.2, 0.0))
            refracted = refract(incident, ti.math.vec3(0.0, -1.0, 0.0), 1.5)
            result[None] = refracted
            tir[None] = is_total_internal_reflection(refracted)

        test_kernel()
        d = result[None]
        assert (d[0], d[1], d[2]) == (0.0, 0.0, 0.0)
        assert tir[None] == 1

    def test_refract_is_never_nan(self):
        from sdfmarch.core.ray import refract

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(ti.math.vec3(1.0, 0.01, 0.0))
            result[None] = refract(incident, ti.math.vec3(0.0, -1.0, 0.0), 2.0)

        test_kernel()
        d = result[None]
        assert all(not math.isnan(float(d[i])) for i in range(3))


class TestFresnel:
    """Tests for Schlick's approximation."""

    def test_normal_incidence_equals_r0_exactly(self):
        from sdfmarch.core.ray import schlick_fresnel, schlick_r0

        fresnel = ti.field(dtype=ti.f32, shape=())
        r0 = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            fresnel[None] = schlick_fresnel(1.0, 1.0 / 1.5)
            r0[None] = schlick_r0(1.0 / 1.5)

        test_kernel()
        assert fresnel[None] == r0[None]
        assert r0[None] == pytest.approx(0.04, abs=1e-6)

    def test_grazing_incidence_reflects_everything(self):
        from sdfmarch.core.ray import schlick_fresnel

        fresnel = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            fresnel[None] = schlick_fresnel(0.0, 1.0 / 1.5)

        test_kernel()
        assert fresnel[None] == pytest.approx(1.0, abs=1e-6)

    def test_reflectance_increases_toward_grazing(self):
        from sdfmarch.core.ray import schlick_fresnel

        values = ti.field(dtype=ti.f32, shape=5)

        @ti.kernel
        def test_kernel():
            for i in range(5):
                values[i] = schlick_fresnel(1.0 - 0.25 * i, 1.0 / 1.33)

        test_kernel()
        samples = values.to_numpy()
        assert all(samples[i] < samples[i + 1] for i in range(4))


class TestOffsetRayOrigin:
    """Tests for moving continuation origins off the surface."""

    def test_offset_toward_outgoing_side(self):
        from sdfmarch.core.ray import RAY_BIAS, offset_ray_origin

        above = ti.Vector.field(3, dtype=ti.f32, shape=())
        below = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            point = ti.math.vec3(0.0, 1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            above[None] = offset_ray_origin(point, normal, ti.math.vec3(0.0, 1.0, 0.0))
            below[None] = offset_ray_origin(point, normal, ti.math.vec3(0.0, -1.0, 0.0))

        test_kernel()
        assert above[None][1] == pytest.approx(1.0 + RAY_BIAS, abs=1e-6)
        assert below[None][1] == pytest.approx(1.0 - RAY_BIAS, abs=1e-6)
