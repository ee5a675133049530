"""Scene-level signed distance field backed by Taichi fields.

The host encodes its primitive list into a scene buffer (see
``sdfmarch.scene.encoder``) and uploads it with load_scene_buffer(). The
buffer is unpacked into a Structure of Arrays layout that kernels read
through scene_distance().

Evaluation is a brute-force linear scan over the active records. The running
minimum is replaced only on strict improvement, so when two primitives are
equally close the lower-index one wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.scene.encoder import encode_scene
    >>> from sdfmarch.scene.primitive import Primitive
    >>> from sdfmarch.scene.distance_field import load_scene_buffer, scene_distance_at
    >>> load_scene_buffer(encode_scene([Primitive.sphere((0.0, 0.0, 0.0), 1.0)]))
    >>> scene_distance_at((0.0, 0.0, 3.0))
    (2.0, 4)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from sdfmarch.geometry.sdf import primitive_distance
from sdfmarch.scene.encoder import MAX_PRIMITIVES, decode_records
from sdfmarch.scene.primitive import MATERIAL_NONE

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance reported when no primitive is closer (also the marcher's miss bound)
MAX_DIST = 100.0


@ti.dataclass
class SdfSample:
    """Result of a scene distance query.

    Attributes:
        distance: Distance to the closest primitive, or MAX_DIST for an
            empty scene.
        material_id: Material of the closest primitive, or MATERIAL_NONE.
    """

    distance: ti.f32
    material_id: ti.i32


# Scene storage: Structure of Arrays layout mirroring the record groups
prim_count = ti.field(dtype=ti.i32, shape=())
prim_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
prim_materials = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
prim_center_param0 = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_params1 = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)
prim_params2 = ti.Vector.field(4, dtype=ti.f32, shape=MAX_PRIMITIVES)

# Single-point query results
_query_distance = ti.field(dtype=ti.f32, shape=())
_query_material = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Mark the scene as empty.

    Record data is left in place; entries at or beyond the count are never
    read.
    """
    prim_count[None] = 0


def get_primitive_count() -> int:
    """Get the number of active primitives on the device."""
    return int(prim_count[None])


def load_scene_buffer(data: bytes) -> int:
    """Replace the device scene with the contents of a scene buffer.

    Records beyond the device capacity (MAX_PRIMITIVES) are dropped.

    Args:
        data: A buffer produced by encode_scene().

    Returns:
        The number of active primitives after the upload.

    Raises:
        ValueError: If the buffer is not a valid scene buffer.
    """
    count, records = decode_records(data)
    kept = min(len(records), MAX_PRIMITIVES)
    if count > MAX_PRIMITIVES:
        logger.warning(
            "Scene buffer holds %d primitives; only the first %d are evaluated",
            count,
            MAX_PRIMITIVES,
        )
    count = min(count, kept)

    kinds = np.zeros(MAX_PRIMITIVES, dtype=np.int32)
    materials = np.zeros(MAX_PRIMITIVES, dtype=np.int32)
    center_param0 = np.zeros((MAX_PRIMITIVES, 4), dtype=np.float32)
    params1 = np.zeros((MAX_PRIMITIVES, 4), dtype=np.float32)
    params2 = np.zeros((MAX_PRIMITIVES, 4), dtype=np.float32)

    # u32 words are reinterpreted as i32 so that -1 style ids survive
    kinds[:kept] = records["kind"][:kept].astype(np.uint32).view(np.int32)
    materials[:kept] = records["material_id"][:kept].astype(np.uint32).view(np.int32)
    center_param0[:kept, :3] = records["center"][:kept]
    center_param0[:kept, 3] = records["param0"][:kept]
    params1[:kept] = records["params1"][:kept]
    params2[:kept] = records["params2"][:kept]

    prim_kinds.from_numpy(kinds)
    prim_materials.from_numpy(materials)
    prim_center_param0.from_numpy(center_param0)
    prim_params1.from_numpy(params1)
    prim_params2.from_numpy(params2)
    prim_count[None] = count

    logger.debug("Uploaded scene buffer: %d bytes, %d active primitives", len(data), count)
    return count


@ti.func
def scene_distance(p: vec3) -> SdfSample:
    """Distance from a point to the closest active primitive.

    Args:
        p: The query point.

    Returns:
        An SdfSample with the minimum distance and the material of the
        first primitive that attains it. An empty scene yields
        (MAX_DIST, MATERIAL_NONE).
    """
    best_distance = MAX_DIST
    best_material = MATERIAL_NONE
    for i in range(prim_count[None]):
        d = primitive_distance(
            prim_kinds[i],
            prim_center_param0[i],
            prim_params1[i],
            prim_params2[i],
            p,
        )
        if d < best_distance:
            best_distance = d
            best_material = prim_materials[i]
    return SdfSample(distance=best_distance, material_id=best_material)


# =============================================================================
# Host-side Queries
# =============================================================================


@ti.kernel
def _scene_distance_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
    # Single-iteration outer loop keeps the scan inside one serial task
    for _ in range(1):
        sample = scene_distance(vec3(x, y, z))
        _query_distance[None] = sample.distance
        _query_material[None] = sample.material_id


@ti.kernel
def _sample_distances_kernel(
    points: ti.types.ndarray(),
    distances: ti.types.ndarray(),
    materials: ti.types.ndarray(),
):
    for i in range(points.shape[0]):
        sample = scene_distance(vec3(points[i, 0], points[i, 1], points[i, 2]))
        distances[i] = sample.distance
        materials[i] = sample.material_id


def scene_distance_at(point: tuple[float, float, float]) -> tuple[float, int]:
    """Evaluate the scene distance at one point from Python.

    Args:
        point: The query point (x, y, z).

    Returns:
        Tuple of (distance, material_id).
    """
    _scene_distance_kernel(float(point[0]), float(point[1]), float(point[2]))
    return float(_query_distance[None]), int(_query_material[None])


def sample_distances(
    points: npt.ArrayLike,
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.int32]]:
    """Evaluate the scene distance at many points in parallel.

    Args:
        points: Array-like of shape (n, 3).

    Returns:
        Tuple of (distances, material_ids), each of shape (n,).

    Raises:
        ValueError: If points is not of shape (n, 3).
    """
    array = np.ascontiguousarray(points, dtype=np.float32)
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"Expected points of shape (n, 3), got {array.shape}")

    distances = np.zeros(array.shape[0], dtype=np.float32)
    materials = np.zeros(array.shape[0], dtype=np.int32)
    if array.shape[0] > 0:
        _sample_distances_kernel(array, distances, materials)
    return distances, materials
