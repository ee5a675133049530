"""Fixed-layout binary encoding of the primitive list.

The scene buffer is what the evaluator reads: a 32-byte header followed by
``capacity`` records of 64 bytes each, all little-endian 4-byte words.

Header (8 words):
    word 0      count (u32), number of active records
    words 1-7   reserved, zero

Record (16 words, four 16-byte groups):
    words 0-3   kind (u32), material id (u32), reserved, reserved
    words 4-7   center.xyz, param0 (f32)
    words 8-11  params1 (f32)
    words 12-15 params2 (f32)

The buffer size depends only on the capacity. Primitives beyond the capacity
are dropped without notice and ``count`` reflects only the kept entries.

Example:
    >>> from sdfmarch.scene.encoder import encode_scene, decode_scene
    >>> from sdfmarch.scene.primitive import Primitive
    >>> data = encode_scene([Primitive.sphere((0.0, 0.0, 0.0), 1.0)])
    >>> len(data)
    1056
    >>> decode_scene(data).count
    1
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from sdfmarch.scene.primitive import Primitive

# Number of primitive slots in the scene buffer
MAX_PRIMITIVES = 16

HEADER_SIZE = 32
RECORD_SIZE = 64

HEADER_DTYPE = np.dtype(
    [
        ("count", "<u4"),
        ("reserved", "<u4", (7,)),
    ]
)

RECORD_DTYPE = np.dtype(
    [
        ("kind", "<u4"),
        ("material_id", "<u4"),
        ("reserved", "<u4", (2,)),
        ("center", "<f4", (3,)),
        ("param0", "<f4"),
        ("params1", "<f4", (4,)),
        ("params2", "<f4", (4,)),
    ]
)


@dataclass
class DecodedScene:
    """Result of decoding a scene buffer.

    Attributes:
        count: The header count, capped at the capacity.
        capacity: Number of record slots in the buffer.
        primitives: The first ``count`` records as Primitive objects.
    """

    count: int
    capacity: int
    primitives: list[Primitive]


def scene_buffer_size(capacity: int = MAX_PRIMITIVES) -> int:
    """Size in bytes of a scene buffer with ``capacity`` record slots."""
    return HEADER_SIZE + capacity * RECORD_SIZE


def encode_scene(primitives: Sequence[Primitive], capacity: int = MAX_PRIMITIVES) -> bytes:
    """Encode a primitive list into a scene buffer.

    Args:
        primitives: Primitives in evaluation order.
        capacity: Number of record slots. Defaults to MAX_PRIMITIVES.

    Returns:
        ``HEADER_SIZE + capacity * RECORD_SIZE`` bytes.

    Raises:
        ValueError: If capacity is negative.
    """
    if capacity < 0:
        raise ValueError(f"Scene capacity must be non-negative, got {capacity}")

    count = min(len(primitives), capacity)

    header = np.zeros(1, dtype=HEADER_DTYPE)
    header["count"] = count

    records = np.zeros(capacity, dtype=RECORD_DTYPE)
    for index, primitive in zip(range(count), primitives):
        # Kinds outside the enum are still written; they evaluate to the sentinel.
        records["kind"][index] = int(primitive.kind) & 0xFFFFFFFF
        records["material_id"][index] = int(primitive.material_id) & 0xFFFFFFFF
        records["center"][index] = primitive.center
        records["param0"][index] = primitive.param0
        records["params1"][index] = primitive.params1
        records["params2"][index] = primitive.params2

    return header.tobytes() + records.tobytes()


def decode_records(data: bytes) -> tuple[int, npt.NDArray[np.void]]:
    """Split a scene buffer into its header count and record array.

    Args:
        data: A buffer produced by encode_scene().

    Returns:
        Tuple of (count, records) where count is capped at the record
        capacity and records is a structured array of RECORD_DTYPE.

    Raises:
        ValueError: If the buffer length is not ``HEADER_SIZE + k * RECORD_SIZE``.
    """
    size = len(data)
    if size < HEADER_SIZE or (size - HEADER_SIZE) % RECORD_SIZE != 0:
        raise ValueError(
            f"Scene buffer of {size} bytes is not a {HEADER_SIZE}-byte header "
            f"followed by {RECORD_SIZE}-byte records"
        )

    header = np.frombuffer(data, dtype=HEADER_DTYPE, count=1)
    if size == HEADER_SIZE:
        records = np.zeros(0, dtype=RECORD_DTYPE)
    else:
        records = np.frombuffer(data, dtype=RECORD_DTYPE, offset=HEADER_SIZE)
    count = min(int(header["count"][0]), len(records))
    return count, records


def _to_signed(word: int) -> int:
    return word - (1 << 32) if word >= (1 << 31) else word


def decode_scene(data: bytes) -> DecodedScene:
    """Decode a scene buffer back into primitives.

    Float values come back exactly as stored (float32), so a round trip
    is bit-exact for inputs that are representable in float32.
    """
    count, records = decode_records(data)
    primitives = []
    for record in records[:count]:
        primitives.append(
            Primitive(
                _to_signed(int(record["kind"])),
                _to_signed(int(record["material_id"])),
                center=tuple(float(v) for v in record["center"]),
                param0=float(record["param0"]),
                params1=tuple(float(v) for v in record["params1"]),
                params2=tuple(float(v) for v in record["params2"]),
            )
        )
    return DecodedScene(count=count, capacity=len(records), primitives=primitives)
