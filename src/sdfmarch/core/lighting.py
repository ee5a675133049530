"""Fixed lighting environment: sky gradient, sun glint, point light and fog.

The environment is not part of the scene buffer. It is the same for every
frame and lives in module-level constants.

    sky(d)          horizon-to-zenith gradient on d.y plus a sun highlight
    diffuse_term    Lambert cosine toward the point light
    shadow_factor   binary occlusion test toward the point light
    apply_fog       blend toward the sky by the last traveled distance
"""

import math

import taichi as ti
import taichi.math as tm

from sdfmarch.core.marcher import march
from sdfmarch.core.ray import RAY_BIAS

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Environment Constants
# =============================================================================

SKY_HORIZON_COLOR = vec3(0.75, 0.82, 0.9)
SKY_ZENITH_COLOR = vec3(0.25, 0.45, 0.8)


def _unit(x: float, y: float, z: float) -> tuple[float, float, float]:
    length = math.sqrt(x * x + y * y + z * z)
    return (x / length, y / length, z / length)


SUN_DIRECTION = vec3(*_unit(0.5, 0.6, 0.4))
SUN_EXPONENT = 128
SUN_INTENSITY = 2.0

LIGHT_POSITION = vec3(4.0, 6.0, 3.0)

# Shadow factor for points that cannot see the light
SHADOW_OCCLUDED = 0.3

FOG_DENSITY = 0.02


@ti.func
def sky(direction: vec3) -> vec3:
    """Radiance arriving from the environment along a direction.

    Args:
        direction: A unit direction.

    Returns:
        The gradient color for ``direction.y`` plus the sun term, added
        equally to all channels.
    """
    t = tm.clamp(direction.y, 0.0, 1.0)
    base = tm.mix(SKY_HORIZON_COLOR, SKY_ZENITH_COLOR, t)
    sun = tm.max(tm.dot(direction, SUN_DIRECTION), 0.0) ** SUN_EXPONENT * SUN_INTENSITY
    return base + vec3(sun, sun, sun)


@ti.func
def diffuse_term(p: vec3, normal: vec3) -> ti.f32:
    """Lambert cosine ``max(dot(n, l), 0)`` toward the point light."""
    to_light = tm.normalize(LIGHT_POSITION - p)
    return tm.max(tm.dot(normal, to_light), 0.0)


@ti.func
def shadow_factor(p: vec3, normal: vec3) -> ti.f32:
    """Hard occlusion test toward the point light.

    A shadow ray starts RAY_BIAS off the surface along the normal. The point
    is occluded if the ray hits something before reaching the light.

    Args:
        p: The surface point.
        normal: The surface normal at p.

    Returns:
        SHADOW_OCCLUDED if occluded, 1.0 otherwise.
    """
    origin = p + normal * RAY_BIAS
    to_light = LIGHT_POSITION - origin
    light_distance = tm.length(to_light)
    result = march(origin, to_light / light_distance)

    factor = 1.0
    if result.hit == 1 and result.distance < light_distance:
        factor = SHADOW_OCCLUDED
    return factor


@ti.func
def apply_fog(color: vec3, direction: vec3, traveled: ti.f32) -> vec3:
    """Blend a color toward the sky with ``exp(-traveled * FOG_DENSITY)``.

    Args:
        color: The shaded color.
        direction: Direction used for the sky color.
        traveled: Traveled distance of the last march.

    Returns:
        ``mix(sky(direction), color, fog)``.
    """
    fog = tm.exp(-traveled * FOG_DENSITY)
    return tm.mix(sky(direction), color, fog)


# =============================================================================
# Host-side Queries
# =============================================================================

_sky_result = ti.Vector.field(3, dtype=ti.f32, shape=())
_scalar_result = ti.field(dtype=ti.f32, shape=())


@ti.kernel
def _sky_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
    _sky_result[None] = sky(tm.normalize(vec3(x, y, z)))


@ti.kernel
def _shadow_kernel(px: ti.f32, py: ti.f32, pz: ti.f32, nx: ti.f32, ny: ti.f32, nz: ti.f32):
    for _ in range(1):
        _scalar_result[None] = shadow_factor(vec3(px, py, pz), vec3(nx, ny, nz))


def sky_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate sky() from Python. The direction is normalized first."""
    _sky_kernel(float(direction[0]), float(direction[1]), float(direction[2]))
    c = _sky_result[None]
    return (float(c[0]), float(c[1]), float(c[2]))


def shadow_at(
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
) -> float:
    """Evaluate shadow_factor() from Python against the loaded scene."""
    _shadow_kernel(
        float(point[0]),
        float(point[1]),
        float(point[2]),
        float(normal[0]),
        float(normal[1]),
        float(normal[2]),
    )
    return float(_scalar_result[None])
