"""Scene module: primitive records, the binary scene buffer and scene editing.

Components:
    primitive: Primitive record, kind/material enums and editor defaults
    encoder: Fixed-layout binary encoding of the primitive list
    distance_field: Taichi-side mirror of the scene buffer and the
        scene-level distance query
    manager: SceneManager, the mutable primitive list that re-encodes and
        re-uploads on every edit
    presets: Ready-made scenes with matching orbit cameras

Data flow:
    SceneManager edit -> encode_scene() -> bytes -> load_scene_buffer()
    -> Taichi fields read by scene_distance() inside kernels
"""

from .encoder import (
    HEADER_SIZE,
    MAX_PRIMITIVES,
    RECORD_SIZE,
    DecodedScene,
    decode_scene,
    encode_scene,
    scene_buffer_size,
)
from .primitive import (
    MATERIAL_NONE,
    MaterialId,
    Primitive,
    PrimitiveKind,
    make_default_primitive,
)

# Note: distance_field, manager and presets allocate Taichi fields on import
# and are NOT imported here, so that ti.init() can run first.
# Import them directly, e.g.:
#   from sdfmarch.scene.manager import SceneManager

__all__ = [
    "HEADER_SIZE",
    "RECORD_SIZE",
    "MAX_PRIMITIVES",
    "DecodedScene",
    "encode_scene",
    "decode_scene",
    "scene_buffer_size",
    "MATERIAL_NONE",
    "MaterialId",
    "Primitive",
    "PrimitiveKind",
    "make_default_primitive",
]
