"""Sphere tracing over the scene distance field.

The marcher advances a point along a ray by the absolute scene distance at
each step. Because a signed distance never overestimates the distance to the
nearest surface, a step of that length cannot jump past a surface.

Termination:
    HIT     ``|distance| < SURF_DIST``
    MISS    traveled distance exceeds MAX_DIST
    BUDGET  MAX_STEPS iterations without either of the above; reported with
            ``hit == 0`` and treated as a miss by callers

The traveled distance never decreases.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.core.marcher import march_ray
    >>> # After loading a unit sphere at the origin:
    >>> result = march_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
    >>> round(result.distance, 3), result.hit
    (4.0, True)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from sdfmarch.scene.distance_field import MAX_DIST, scene_distance

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# =============================================================================
# Marching Constants
# =============================================================================

# Hit threshold on the absolute scene distance
SURF_DIST = 1e-4

# Maximum marching iterations per ray
MAX_STEPS = 256

__all__ = [
    "MAX_DIST",
    "MAX_STEPS",
    "SURF_DIST",
    "MarchResult",
    "MarchInfo",
    "march",
    "march_ray",
]


@ti.dataclass
class MarchResult:
    """Outcome of marching one ray.

    Attributes:
        distance: Total distance traveled along the ray.
        material_id: Material reported by the last scene evaluation. Only
            meaningful when hit == 1.
        hit: 1 if the ray converged on a surface, 0 otherwise.
        steps: Number of scene evaluations performed.
    """

    distance: ti.f32
    material_id: ti.i32
    hit: ti.i32
    steps: ti.i32


@ti.func
def march(origin: vec3, direction: vec3) -> MarchResult:
    """Sphere-trace a ray through the scene.

    Args:
        origin: The ray origin.
        direction: The ray direction (should be normalized).

    Returns:
        A MarchResult. A ray that runs out of steps has hit == 0.
    """
    traveled = 0.0
    material_id = -1
    hit = 0
    steps = 0

    # Active flag for loop termination (Taichi doesn't support break in ti.func loops)
    active = 1
    for _ in range(MAX_STEPS):
        if active == 1:
            sample = scene_distance(origin + direction * traveled)
            d = ti.abs(sample.distance)
            traveled += d
            material_id = sample.material_id
            steps += 1
            if d < SURF_DIST:
                hit = 1
                active = 0
            elif traveled > MAX_DIST:
                active = 0

    return MarchResult(distance=traveled, material_id=material_id, hit=hit, steps=steps)


# =============================================================================
# Host-side Query
# =============================================================================


@dataclass
class MarchInfo:
    """Python-side copy of a MarchResult."""

    distance: float
    material_id: int
    hit: bool
    steps: int


_march_distance = ti.field(dtype=ti.f32, shape=())
_march_material = ti.field(dtype=ti.i32, shape=())
_march_hit = ti.field(dtype=ti.i32, shape=())
_march_steps = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _march_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    for _ in range(1):
        result = march(vec3(ox, oy, oz), tm.normalize(vec3(dx, dy, dz)))
        _march_distance[None] = result.distance
        _march_material[None] = result.material_id
        _march_hit[None] = result.hit
        _march_steps[None] = result.steps


def march_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> MarchInfo:
    """March a single ray from Python.

    Used for testing and for picking. The direction is normalized before
    marching.

    Args:
        origin: The ray origin.
        direction: The ray direction (must be non-zero).

    Returns:
        A MarchInfo with the traveled distance, material, hit flag and step
        count.

    Raises:
        ValueError: If direction is the zero vector.
    """
    if all(float(c) == 0.0 for c in direction):
        raise ValueError("Ray direction must be non-zero")

    _march_kernel(
        float(origin[0]),
        float(origin[1]),
        float(origin[2]),
        float(direction[0]),
        float(direction[1]),
        float(direction[2]),
    )
    return MarchInfo(
        distance=float(_march_distance[None]),
        material_id=int(_march_material[None]),
        hit=bool(_march_hit[None]),
        steps=int(_march_steps[None]),
    )
