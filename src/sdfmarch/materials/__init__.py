"""Materials module: material palette and per-material shading rules.

Components:
    palette: Base color of each material id (ground checkerboard included)
    lambertian: One-shot diffuse shading for ground and diffuse surfaces
    metal: Mirror reflection with a small lit contribution
    dielectric: Fresnel-weighted sky reflection plus a single refracted or
        totally reflected continuation

All shading computations are Taichi functions for GPU execution. The
integrator dispatches on the MaterialId stored in the scene buffer.
"""

from .dielectric import (
    AIR_IOR,
    GLASS_IOR,
    WATER_IOR,
    DielectricBounce,
    dielectric_ior,
    is_dielectric,
    scatter_dielectric,
)
from .lambertian import shade_lambertian
from .metal import METAL_DIRECT_WEIGHT, METAL_REFLECTANCE, scatter_metal, shade_metal
from .palette import checker_parity, ground_color, material_color

__all__ = [
    # Palette
    "material_color",
    "ground_color",
    "checker_parity",
    # Lambertian
    "shade_lambertian",
    # Metal
    "METAL_DIRECT_WEIGHT",
    "METAL_REFLECTANCE",
    "shade_metal",
    "scatter_metal",
    # Dielectric
    "AIR_IOR",
    "GLASS_IOR",
    "WATER_IOR",
    "DielectricBounce",
    "dielectric_ior",
    "is_dielectric",
    "scatter_dielectric",
]
