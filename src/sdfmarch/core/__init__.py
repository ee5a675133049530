"""Core rendering module.

This module contains the building blocks of the sphere tracer:

Components:
    ray: Ray data structure and vector helpers (reflect, refract, Fresnel)
    marcher: Sphere tracing over the scene distance field
    normal: Finite-difference surface normals
    lighting: Sky, sun, point light, hard shadows and fog
    integrator: Multi-bounce shading loop and the render target
    renderer: FrameRenderer, a host-side wrapper around the integrator

Each pixel is shaded independently by one kernel thread. Kernels only read
the scene and camera fields; the host replaces them between frames.
"""

from .ray import (
    RAY_BIAS,
    Ray,
    is_total_internal_reflection,
    make_ray,
    offset_ray_origin,
    ray_at,
    reflect,
    refract,
    schlick_fresnel,
    schlick_r0,
    vec3,
)

# Note: marcher, normal, lighting, integrator and renderer allocate Taichi
# fields on import and are NOT imported here, so that ti.init() runs first.
# Import them directly, e.g.:
#   from sdfmarch.core.renderer import FrameRenderer

__all__ = [
    "RAY_BIAS",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "reflect",
    "refract",
    "is_total_internal_reflection",
    "schlick_r0",
    "schlick_fresnel",
    "offset_ray_origin",
]
