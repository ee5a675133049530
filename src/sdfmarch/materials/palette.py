"""Material palette: the base color (albedo) of each material id.

Every material has a fixed color except the ground, which is a procedural
checkerboard on the XZ grid of unit cells. Ids outside MaterialId get
FALLBACK_COLOR.
"""

import taichi as ti
import taichi.math as tm

from sdfmarch.scene.primitive import MaterialId

# Type alias for 3D vectors
vec3 = tm.vec3

GROUND_LIGHT_COLOR = vec3(0.8, 0.8, 0.8)
GROUND_DARK_COLOR = vec3(0.3, 0.3, 0.3)
METAL_COLOR = vec3(0.9, 0.9, 0.9)
GLASS_COLOR = vec3(0.95, 0.95, 0.95)
WATER_COLOR = vec3(0.6, 0.8, 1.0)
DIFFUSE_COLOR = vec3(1.0, 0.5, 0.2)
FALLBACK_COLOR = vec3(0.5, 0.5, 0.5)


@ti.func
def checker_parity(p: vec3) -> ti.f32:
    """Parity of the unit cell containing p on the XZ grid.

    Computed in floating point as ``cell - 2 * floor(cell / 2)`` with
    ``cell = floor(x) + floor(z)``, which stays 0 or 1 for negative cells.

    Returns:
        0.0 for even cells, 1.0 for odd cells.
    """
    cell = tm.floor(p.x) + tm.floor(p.z)
    return cell - 2.0 * tm.floor(cell * 0.5)


@ti.func
def ground_color(p: vec3) -> vec3:
    color = GROUND_LIGHT_COLOR
    if checker_parity(p) > 0.5:
        color = GROUND_DARK_COLOR
    return color


@ti.func
def material_color(material_id: ti.i32, p: vec3) -> vec3:
    """Albedo of a material at a surface point.

    Args:
        material_id: A MaterialId value.
        p: The surface point (used by the ground checkerboard).

    Returns:
        The base color.
    """
    color = FALLBACK_COLOR
    if material_id == int(MaterialId.GROUND):
        color = ground_color(p)
    elif material_id == int(MaterialId.METAL):
        color = METAL_COLOR
    elif material_id == int(MaterialId.GLASS):
        color = GLASS_COLOR
    elif material_id == int(MaterialId.WATER):
        color = WATER_COLOR
    elif material_id == int(MaterialId.DIFFUSE):
        color = DIFFUSE_COLOR
    return color
