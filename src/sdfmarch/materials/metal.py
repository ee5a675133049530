"""Metal (mirror) material.

A metal hit adds a small lit contribution and always continues as a perfect
mirror reflection:

    color += mask * albedo * diffuse * shadow * METAL_DIRECT_WEIGHT
    direction = R = I - 2(I . N)N
    mask *= METAL_REFLECTANCE

Metal never ends a path by itself; only the bounce budget or a negligible
mask stops it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction = scatter_metal(incident_dir, normal)
"""

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import reflect

# Type alias for 3D vectors
vec3 = tm.vec3

# Weight of the lit (diffuse) part of a metal surface
METAL_DIRECT_WEIGHT = 0.2

# Mask attenuation per mirror bounce
METAL_REFLECTANCE = 0.8


@ti.func
def shade_metal(albedo: vec3, diffuse: ti.f32, shadow: ti.f32) -> vec3:
    """Direct contribution of a metal hit, before the mask is applied."""
    return albedo * diffuse * shadow * METAL_DIRECT_WEIGHT


@ti.func
def scatter_metal(incident_direction: vec3, normal: vec3) -> vec3:
    """Mirror-reflect the incident direction about the normal.

    Args:
        incident_direction: The incoming ray direction (normalized).
        normal: The surface normal (normalized).

    Returns:
        The reflected direction.
    """
    return reflect(incident_direction, normal)
