"""Surface normals from the scene distance field.

The normal is the normalized gradient of the scene distance, estimated with
central differences (two evaluations per axis, six in total). The estimate
is exact up to O(eps^2) on smooth surfaces and only approximate at creases
such as box edges.
"""

import taichi as ti
import taichi.math as tm

from sdfmarch.scene.distance_field import scene_distance

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Central difference step
NORMAL_EPSILON = 1e-4

# Returned where the gradient vanishes (e.g. exactly at a sphere center)
FALLBACK_NORMAL = (0.0, 1.0, 0.0)


@ti.func
def estimate_normal(p: vec3) -> vec3:
    """Estimate the unit surface normal at a point.

    Args:
        p: A point on or near a surface.

    Returns:
        The normalized distance gradient, or FALLBACK_NORMAL if the
        gradient is zero.
    """
    ex = vec3(NORMAL_EPSILON, 0.0, 0.0)
    ey = vec3(0.0, NORMAL_EPSILON, 0.0)
    ez = vec3(0.0, 0.0, NORMAL_EPSILON)
    gradient = vec3(
        scene_distance(p + ex).distance - scene_distance(p - ex).distance,
        scene_distance(p + ey).distance - scene_distance(p - ey).distance,
        scene_distance(p + ez).distance - scene_distance(p - ez).distance,
    )

    n = vec3(FALLBACK_NORMAL[0], FALLBACK_NORMAL[1], FALLBACK_NORMAL[2])
    if tm.dot(gradient, gradient) > 0.0:
        n = tm.normalize(gradient)
    return n


_normal_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _normal_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
    for _ in range(1):
        _normal_result[None] = estimate_normal(vec3(x, y, z))


def normal_at(point: tuple[float, float, float]) -> tuple[float, float, float]:
    """Estimate the surface normal at a point from Python."""
    _normal_kernel(float(point[0]), float(point[1]), float(point[2]))
    n = _normal_result[None]
    return (float(n[0]), float(n[1]), float(n[2]))
