"""Unit tests for the dielectric (glass/water) material.

Tests cover:
- Entering and exiting the medium
- Refraction direction and Fresnel reflectance
- Total internal reflection
- Index of refraction per material
"""

import math

import pytest
import taichi as ti

from sdfmarch.scene.primitive import MaterialId


def scatter(ior, incident, normal):
    """Run scatter_dielectric in a kernel and return the bounce as a dict."""
    from sdfmarch.materials.dielectric import scatter_dielectric

    reflected = ti.Vector.field(3, dtype=ti.f32, shape=())
    refracted = ti.Vector.field(3, dtype=ti.f32, shape=())
    facing = ti.Vector.field(3, dtype=ti.f32, shape=())
    reflectance = ti.field(dtype=ti.f32, shape=())
    flags = ti.field(dtype=ti.i32, shape=2)

    @ti.kernel
    def test_kernel(eta: ti.f32, ix: ti.f32, iy: ti.f32, iz: ti.f32, nx: ti.f32, ny: ti.f32, nz: ti.f32):
        bounce = scatter_dielectric(
            eta,
            ti.math.normalize(ti.math.vec3(ix, iy, iz)),
            ti.math.vec3(nx, ny, nz),
        )
        reflected[None] = bounce.reflected
        refracted[None] = bounce.refracted
        facing[None] = bounce.facing_normal
        reflectance[None] = bounce.reflectance
        flags[0] = bounce.total_internal
        flags[1] = bounce.entering

    test_kernel(ior, *incident, *normal)
    return {
        "reflected": tuple(float(v) for v in reflected.to_numpy()),
        "refracted": tuple(float(v) for v in refracted.to_numpy()),
        "facing": tuple(float(v) for v in facing.to_numpy()),
        "reflectance": float(reflectance[None]),
        "total_internal": int(flags[0]),
        "entering": int(flags[1]),
    }


class TestEnteringAndExiting:
    """Tests for the side of the interface."""

    def test_entering_glass_head_on(self):
        bounce = scatter(1.5, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        assert bounce["entering"] == 1
        assert bounce["total_internal"] == 0
        assert bounce["facing"] == pytest.approx((0.0, 1.0, 0.0))
        assert bounce["refracted"] == pytest.approx((0.0, -1.0, 0.0), abs=1e-5)
        assert bounce["reflected"] == pytest.approx((0.0, 1.0, 0.0), abs=1e-5)
        assert bounce["reflectance"] == pytest.approx(0.04, abs=1e-5)

    def test_exiting_flips_normal(self):
        bounce = scatter(1.5, (0.0, 1.0, 0.0), (0.0, 1.0, 0.0))
        assert bounce["entering"] == 0
        assert bounce["facing"] == pytest.approx((0.0, -1.0, 0.0))
        assert bounce["refracted"] == pytest.approx((0.0, 1.0, 0.0), abs=1e-5)
        assert bounce["reflectance"] == pytest.approx(0.04, abs=1e-5)


class TestRefraction:
    """Tests for the refracted direction."""

    def test_snell_entering_glass(self):
        bounce = scatter(1.5, (1.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        sin_t = math.sin(math.pi / 4.0) / 1.5
        assert bounce["refracted"] == pytest.approx((sin_t, -math.sqrt(1.0 - sin_t**2), 0.0), abs=1e-5)

    def test_refracted_is_unit_length(self):
        bounce = scatter(1.33, (0.3, -1.0, 0.2), (0.0, 1.0, 0.0))
        assert math.sqrt(sum(c * c for c in bounce["refracted"])) == pytest.approx(1.0, abs=1e-5)

    def test_reflectance_grows_at_grazing_angles(self):
        head_on = scatter(1.5, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        grazing = scatter(1.5, (1.0, -0.05, 0.0), (0.0, 1.0, 0.0))
        assert grazing["reflectance"] > head_on["reflectance"]
        assert grazing["reflectance"] <= 1.0


class TestTotalInternalReflection:
    """Tests for rays that cannot leave the medium."""

    def test_grazing_exit_reflects(self):
        bounce = scatter(1.5, (1.0, 0.2, 0.0), (0.0, 1.0, 0.0))
        assert bounce["entering"] == 0
        assert bounce["total_internal"] == 1
        assert bounce["refracted"] == (0.0, 0.0, 0.0)

        length = math.sqrt(1.04)
        assert bounce["reflected"] == pytest.approx((1.0 / length, -0.2 / length, 0.0), abs=1e-5)

    def test_no_tir_when_entering(self):
        bounce = scatter(1.5, (1.0, -0.05, 0.0), (0.0, 1.0, 0.0))
        assert bounce["total_internal"] == 0


class TestMaterialIor:
    """Tests for dielectric_ior and is_dielectric."""

    def test_ior_and_classification(self):
        from sdfmarch.materials.dielectric import GLASS_IOR, WATER_IOR, dielectric_ior, is_dielectric

        iors = ti.field(dtype=ti.f32, shape=5)
        dielectric = ti.field(dtype=ti.i32, shape=5)

        @ti.kernel
        def test_kernel():
            for i in range(5):
                iors[i] = dielectric_ior(i)
                dielectric[i] = is_dielectric(i)

        test_kernel()
        assert iors[int(MaterialId.GLASS)] == pytest.approx(GLASS_IOR)
        assert iors[int(MaterialId.WATER)] == pytest.approx(WATER_IOR)
        assert [dielectric[i] for i in range(5)] == [0, 0, 1, 1, 0]
