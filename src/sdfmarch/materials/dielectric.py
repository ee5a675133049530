"""Dielectric (glass/water) material implementation.

This module implements the deterministic dielectric bounce used by the
integrator. Unlike a stochastic BSDF, it never picks between reflection and
refraction at random:

    - The reflected direction only contributes sky light, weighted by the
      Fresnel reflectance F, and is added to the color immediately.
    - The path then continues along exactly one direction: the refracted
      ray with mask *= (1 - F) * albedo, or, on total internal reflection,
      the reflected ray with mask *= albedo.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when the refracted vector vanishes

Entering vs exiting is decided by ``dot(direction, normal) < 0`` with the
outward normal from the distance field gradient.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # bounce = scatter_dielectric(GLASS_IOR, incident_dir, normal)
"""

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import (
    is_total_internal_reflection,
    reflect,
    refract,
    schlick_fresnel,
)
from sdfmarch.scene.primitive import MaterialId

# Type alias for 3D vectors
vec3 = tm.vec3

# Indices of refraction
AIR_IOR = 1.0
GLASS_IOR = 1.5
WATER_IOR = 1.33


@ti.dataclass
class DielectricBounce:
    """Outcome of a dielectric interaction.

    Attributes:
        reflected: Mirror direction about the facing normal (normalized).
        refracted: Refracted direction (normalized), or the zero vector on
            total internal reflection.
        facing_normal: The normal flipped to face the incident ray.
        reflectance: Schlick Fresnel reflectance F.
        total_internal: 1 on total internal reflection, 0 otherwise.
        entering: 1 when the ray enters the medium, 0 when it exits.
    """

    reflected: vec3
    refracted: vec3
    facing_normal: vec3
    reflectance: ti.f32
    total_internal: ti.i32
    entering: ti.i32


@ti.func
def dielectric_ior(material_id: ti.i32) -> ti.f32:
    """Index of refraction for a dielectric material id (glass otherwise)."""
    ior = GLASS_IOR
    if material_id == int(MaterialId.WATER):
        ior = WATER_IOR
    return ior


@ti.func
def is_dielectric(material_id: ti.i32) -> ti.i32:
    return ti.cast(
        material_id == int(MaterialId.GLASS) or material_id == int(MaterialId.WATER),
        ti.i32,
    )


@ti.func
def scatter_dielectric(ior: ti.f32, incident_direction: vec3, normal: vec3) -> DielectricBounce:
    """Compute reflection, refraction and Fresnel weight at an interface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (should be normalized).
        normal: The outward surface normal (should be normalized).

    Returns:
        A DielectricBounce describing both candidate directions.
    """
    entering = 1
    facing = normal
    refraction_ratio = AIR_IOR / ior
    if tm.dot(incident_direction, normal) >= 0.0:
        # Exiting the medium: flip the normal toward the incident ray
        entering = 0
        facing = -normal
        refraction_ratio = ior / AIR_IOR

    cos_theta = tm.min(-tm.dot(incident_direction, facing), 1.0)
    reflectance = schlick_fresnel(cos_theta, refraction_ratio)

    reflected = tm.normalize(reflect(incident_direction, facing))
    refracted = refract(incident_direction, facing, refraction_ratio)
    total_internal = is_total_internal_reflection(refracted)
    if total_internal == 0:
        refracted = tm.normalize(refracted)
    else:
        refracted = vec3(0.0, 0.0, 0.0)

    return DielectricBounce(
        reflected=reflected,
        refracted=refracted,
        facing_normal=facing,
        reflectance=reflectance,
        total_internal=total_internal,
        entering=entering,
    )
