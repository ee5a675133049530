"""Scene manager: the host-owned, editable primitive list.

The SceneManager holds the one mutable list of primitives that an editor
works on. Every edit re-encodes the whole list into a fresh scene buffer and,
when uploading is enabled, replaces the device scene with it. There is no
incremental patching and no aliasing between the list and the buffer: the
manager hands out copies of its primitives, and the device only ever sees
complete buffers.

Edits follow the editor's rules:
    - add(kind) appends a kind-appropriate default primitive while there is
      room and is a no-op (returning None) once the scene is full.
    - remove(index) deletes an entry and shifts later entries down.
    - update(index, field, value) mutates one field in place.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.scene.manager import SceneManager
    >>> from sdfmarch.scene.primitive import PrimitiveKind
    >>> scene = SceneManager()
    >>> index = scene.add(PrimitiveKind.TORUS)
    >>> scene.update(index, "material_id", "glass")
    >>> scene.save_json("scene.json")
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sdfmarch.scene.distance_field import load_scene_buffer
from sdfmarch.scene.encoder import MAX_PRIMITIVES, encode_scene
from sdfmarch.scene.primitive import Primitive, make_default_primitive

logger = logging.getLogger(__name__)

# Version tag written to scene files
SCENE_FORMAT_VERSION = 1


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        version: Scene file format version.
        capacity: Number of primitive slots in the scene buffer.
        primitives: Primitive dictionaries in evaluation order, as produced
            by Primitive.to_dict().
    """

    version: int = SCENE_FORMAT_VERSION
    capacity: int = MAX_PRIMITIVES
    primitives: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Mutable primitive list with automatic re-encoding.

    Attributes:
        capacity: Maximum number of primitives (the buffer's record slots).
        count: Number of primitives currently in the scene.
        buffer: The scene buffer for the current list.
    """

    def __init__(
        self,
        primitives: Iterable[Primitive] | None = None,
        capacity: int = MAX_PRIMITIVES,
        upload: bool = True,
    ) -> None:
        """Create a scene.

        Primitives beyond the capacity are dropped, matching the encoder.

        Args:
            primitives: Initial primitives, copied into the scene.
            capacity: Number of record slots (0 to MAX_PRIMITIVES).
            upload: Whether every edit also replaces the device scene.
                Disable for pure host-side editing and encoding.

        Raises:
            ValueError: If capacity is out of range.
        """
        if not 0 <= capacity <= MAX_PRIMITIVES:
            raise ValueError(f"Scene capacity must be between 0 and {MAX_PRIMITIVES}, got {capacity}")

        self._capacity = capacity
        self._upload = upload
        self._primitives: list[Primitive] = []
        self._buffer = b""
        if primitives is not None:
            self._primitives = [p.copy() for p in primitives][:capacity]
        self._commit()

    # =========================================================================
    # Scene State
    # =========================================================================

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def count(self) -> int:
        return len(self._primitives)

    def __len__(self) -> int:
        return len(self._primitives)

    @property
    def is_full(self) -> bool:
        return len(self._primitives) >= self._capacity

    @property
    def primitives(self) -> list[Primitive]:
        """Copies of the primitives in evaluation order."""
        return [p.copy() for p in self._primitives]

    def get(self, index: int) -> Primitive:
        """Get a copy of one primitive.

        Raises:
            IndexError: If index is out of range.
        """
        self._check_index(index)
        return self._primitives[index].copy()

    @property
    def buffer(self) -> bytes:
        """The encoded scene buffer for the current list."""
        return self._buffer

    def encode(self) -> bytes:
        """Encode the current list without touching the device."""
        return encode_scene(self._primitives, self._capacity)

    def upload(self) -> None:
        """Replace the device scene with the current buffer."""
        load_scene_buffer(self._buffer)

    def _commit(self) -> None:
        """Re-encode after an edit and upload if enabled."""
        self._buffer = self.encode()
        logger.debug("Scene re-encoded: %d/%d primitives", len(self._primitives), self._capacity)
        if self._upload:
            self.upload()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._primitives):
            raise IndexError(
                f"Primitive index {index} out of range for scene with {len(self._primitives)} primitives"
            )

    # =========================================================================
    # Primitive List API
    # =========================================================================

    def add(self, kind: int) -> int | None:
        """Append a default primitive of the given kind.

        Args:
            kind: A PrimitiveKind. Unknown kinds get the default sphere.

        Returns:
            The index of the new primitive, or None if the scene is full.
        """
        return self.add_primitive(make_default_primitive(kind))

    def add_primitive(self, primitive: Primitive) -> int | None:
        """Append a copy of a primitive.

        Returns:
            The index of the new primitive, or None if the scene is full.
        """
        if self.is_full:
            logger.debug("Scene full (%d primitives); add ignored", self._capacity)
            return None
        self._primitives.append(primitive.copy())
        self._commit()
        return len(self._primitives) - 1

    def remove(self, index: int) -> Primitive:
        """Delete a primitive; later primitives shift down by one.

        Returns:
            The removed primitive.

        Raises:
            IndexError: If index is out of range.
        """
        self._check_index(index)
        removed = self._primitives.pop(index)
        self._commit()
        return removed

    def update(self, index: int, field_name: str, value: Any) -> None:
        """Set one field of a primitive in place.

        Args:
            index: Index of the primitive.
            field_name: One of kind, material_id, center, param0, params1,
                params2.
            value: New value; kind and material_id also accept names.

        Raises:
            IndexError: If index is out of range.
            ValueError: If the field is unknown or the value has the wrong shape.
        """
        self._check_index(index)
        self._primitives[index].set_field(field_name, value)
        self._commit()

    def replace(self, primitives: Iterable[Primitive]) -> None:
        """Replace the whole list (extra primitives beyond capacity are dropped)."""
        self._primitives = [p.copy() for p in primitives][: self._capacity]
        self._commit()

    def clear(self) -> None:
        """Remove all primitives."""
        self._primitives = []
        self._commit()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        return SceneConfig(
            capacity=self._capacity,
            primitives=[p.to_dict() for p in self._primitives],
        )

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Replaces the current primitives. The capacity of this manager is
        kept; primitives beyond it are dropped.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        if config.version != SCENE_FORMAT_VERSION:
            raise ValueError(f"Unsupported scene format version: {config.version}")
        if len(config.primitives) > self._capacity:
            logger.warning(
                "Scene config has %d primitives; keeping the first %d",
                len(config.primitives),
                self._capacity,
            )
        self.replace(Primitive.from_dict(entry) for entry in config.primitives)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "version": config.version,
            "capacity": config.capacity,
            "primitives": config.primitives,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with a 'primitives' key."""
        config = SceneConfig(
            version=data.get("version", SCENE_FORMAT_VERSION),
            capacity=data.get("capacity", self._capacity),
            primitives=data.get("primitives", []),
        )
        self.from_config(config)

    def save_json(self, path: str | Path) -> None:
        """Write the scene to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.info("Saved scene with %d primitives to %s", self.count, path)

    def load_json(self, path: str | Path) -> None:
        """Replace the scene with the contents of a JSON file.

        Raises:
            ValueError: If the file is not a valid scene description.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Scene file {path} must contain a JSON object")
        self.from_dict(data)
        logger.info("Loaded scene with %d primitives from %s", self.count, path)

    def __repr__(self) -> str:
        return f"SceneManager(count={self.count}, capacity={self.capacity})"
