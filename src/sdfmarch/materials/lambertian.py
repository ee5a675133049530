"""Lambertian (diffuse) shading for ground and diffuse surfaces.

Diffuse materials are shaded once and end the path:

    color += mask * albedo * (AMBIENT + diffuse * shadow * DIRECT)
    mask = 0

There is no indirect diffuse light. Any material id that is neither metal
nor a dielectric is shaded this way.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Constant ambient term
AMBIENT = 0.2

# Weight of the light-facing term
DIRECT = 0.8


@ti.func
def shade_lambertian(albedo: vec3, diffuse: ti.f32, shadow: ti.f32) -> vec3:
    """Shaded color of a diffuse hit.

    Args:
        albedo: Base color of the surface.
        diffuse: Lambert cosine toward the light, in [0, 1].
        shadow: Shadow factor from the occlusion test.

    Returns:
        ``albedo * (AMBIENT + diffuse * shadow * DIRECT)``.
    """
    return albedo * (AMBIENT + diffuse * shadow * DIRECT)
