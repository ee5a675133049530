"""Ray data structure and vector utilities for sphere tracing.

This module provides the Ray dataclass and the vector helpers shared by the
marcher, the normal estimator and the material models. All operations are
Taichi functions for use inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 5.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 4.0)  # Point 4 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance a continuation or shadow ray starts away from the surface
RAY_BIAS = 0.01

# Squared length below which a refracted direction counts as total internal reflection
TIR_EPSILON = 1e-4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Marching assumes
            unit length, so that distances along the ray are world distances.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract an incident vector through a surface.

    Uses the shading-language convention: with
    ``k = 1 - eta^2 (1 - dot(n, i)^2)``, the result is the zero vector when
    ``k < 0`` (total internal reflection) and
    ``eta * i - (eta * dot(n, i) + sqrt(k)) * n`` otherwise. The square root
    is only taken for non-negative k, so the result is never NaN.

    Args:
        incident: The incoming direction vector (should be normalized).
        normal: The surface normal facing the incident ray (should be
            normalized).
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector, or the zero vector on total internal
        reflection.
    """
    cos_i = tm.dot(normal, incident)
    k = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if k >= 0.0:
        result = eta * incident - (eta * cos_i + ti.sqrt(k)) * normal
    return result


@ti.func
def is_total_internal_reflection(refracted: vec3) -> ti.i32:
    """Check whether refract() reported total internal reflection.

    Args:
        refracted: The vector returned by refract().

    Returns:
        1 if the squared length is below TIR_EPSILON, 0 otherwise.
    """
    return ti.cast(tm.dot(refracted, refracted) < TIR_EPSILON, ti.i32)


@ti.func
def schlick_r0(ratio: ti.f32) -> ti.f32:
    """Reflectance at normal incidence, ``((1 - ratio) / (1 + ratio))^2``."""
    r = (1.0 - ratio) / (1.0 + ratio)
    return r * r


@ti.func
def schlick_fresnel(cosine: ti.f32, ratio: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    At ``cosine == 1`` the power term vanishes and the result is exactly
    schlick_r0(ratio).

    Args:
        cosine: Cosine of the angle between the incident direction and the
            facing normal.
        ratio: Ratio of refractive indices.

    Returns:
        The approximate Fresnel reflectance ``r0 + (1 - r0)(1 - cos)^5``.
    """
    r0 = schlick_r0(ratio)
    m = 1.0 - cosine
    return r0 + (1.0 - r0) * (m * m * m * m * m)


@ti.func
def offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset a ray origin off the surface to avoid re-hitting it.

    Pushes the point along the normal toward the side the new ray travels
    (above the surface for reflection, below for refraction).

    Args:
        point: The surface point.
        normal: The surface normal.
        direction: The new ray direction.

    Returns:
        The offset origin point.
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + RAY_BIAS * offset_dir
