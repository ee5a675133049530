"""Unit tests for finite-difference surface normals."""

import math

import pytest

from sdfmarch.scene.encoder import encode_scene
from sdfmarch.scene.primitive import Primitive


def load(primitives):
    from sdfmarch.scene.distance_field import load_scene_buffer

    load_scene_buffer(encode_scene(primitives))


def assert_unit(n):
    assert math.sqrt(sum(c * c for c in n)) == pytest.approx(1.0, abs=5e-3)


class TestEstimateNormal:
    """Tests for estimate_normal."""

    def test_sphere_normal_is_radial(self):
        from sdfmarch.core.normal import normal_at

        load([Primitive.sphere((0.0, 0.0, 0.0), 1.0)])
        n = normal_at((0.0, 0.0, 1.0))
        assert n == pytest.approx((0.0, 0.0, 1.0), abs=1e-3)

        s = 1.0 / math.sqrt(3.0)
        n = normal_at((s, s, s))
        assert n == pytest.approx((s, s, s), abs=5e-3)
        assert_unit(n)

    def test_offset_sphere(self):
        from sdfmarch.core.normal import normal_at

        load([Primitive.sphere((2.0, 1.0, 0.0), 0.5)])
        n = normal_at((2.0, 0.5, 0.0))
        assert n == pytest.approx((0.0, -1.0, 0.0), abs=1e-3)

    def test_plane_normal(self):
        from sdfmarch.core.normal import normal_at

        load([Primitive.plane((0.0, 1.0, 0.0), 1.0)])
        n = normal_at((3.0, -1.0, -2.0))
        assert n == pytest.approx((0.0, 1.0, 0.0), abs=1e-3)

    def test_box_face_normal(self):
        from sdfmarch.core.normal import normal_at

        load([Primitive.box((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))])
        n = normal_at((1.0, 0.2, -0.3))
        assert n == pytest.approx((1.0, 0.0, 0.0), abs=1e-3)

    def test_zero_gradient_uses_fallback(self):
        from sdfmarch.core.normal import FALLBACK_NORMAL, normal_at

        # Empty scene: the distance is constant everywhere
        assert normal_at((0.3, 0.4, 0.5)) == FALLBACK_NORMAL

    def test_sphere_center_uses_fallback(self):
        from sdfmarch.core.normal import FALLBACK_NORMAL, normal_at

        load([Primitive.sphere((0.0, 0.0, 0.0), 1.0)])
        assert normal_at((0.0, 0.0, 0.0)) == FALLBACK_NORMAL
