"""Primitive records for the signed-distance scene.

A primitive is a flat, positionally tagged record: the meaning of ``center``,
``param0``, ``params1`` and ``params2`` depends on ``kind``. This mirrors the
fixed-width slots of the binary scene buffer (see ``sdfmarch.scene.encoder``).

Field meaning per kind:

    ========== ============ ================ ============== ==============
    kind       center       param0           params1        params2
    ========== ============ ================ ============== ==============
    SPHERE     center       radius           unused         unused
    PLANE      unused       offset           normal.xyz     unused
    BOX        center       unused           half-size.xyz  unused
    ROUNDED    center       corner radius    half-size.xyz  unused
    CYLINDER   center       height           radius in x    unused
    TORUS      center       major radius     minor in x     unused
    CAPSULE    unused       radius           point A.xyz    point B.xyz
    ========== ============ ================ ============== ==============

Example:
    >>> from sdfmarch.scene.primitive import Primitive, MaterialId
    >>> ball = Primitive.sphere((0.0, 0.5, 0.0), 0.6, MaterialId.GLASS)
    >>> ball.param0
    0.6000000238418579

Values are stored rounded to float32, the precision of the scene buffer, so
encoding and decoding a primitive gives back an equal primitive.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import numpy as np

Vec3 = tuple[float, float, float]
Vec4 = tuple[float, float, float, float]


class PrimitiveKind(IntEnum):
    """Shape identifiers as stored in word 0 of a scene record."""

    SPHERE = 0
    PLANE = 1
    BOX = 2
    ROUNDED_BOX = 3
    CYLINDER = 4
    TORUS = 5
    CAPSULE = 6


class MaterialId(IntEnum):
    """Material identifiers as stored in word 1 of a scene record."""

    GROUND = 0
    METAL = 1
    GLASS = 2
    WATER = 3
    DIFFUSE = 4


# Material id reported when no primitive is closer than MAX_DIST
MATERIAL_NONE = -1

# Fields that update() may touch, mapped to their component count (0 = scalar)
PRIMITIVE_FIELDS: dict[str, int] = {
    "kind": 0,
    "material_id": 0,
    "center": 3,
    "param0": 0,
    "params1": 4,
    "params2": 4,
}


def _f32(value: Any) -> float:
    """Round a number to the nearest float32, returned as a Python float."""
    return float(np.float32(value))


def _vec(values: Any, size: int, name: str) -> tuple[float, ...]:
    """Coerce a sequence into a tuple of ``size`` float32-rounded floats."""
    items = tuple(_f32(v) for v in values)
    if len(items) != size:
        raise ValueError(f"{name} needs {size} components, got {len(items)}")
    return items


def _enum_or_int(enum_type: type[IntEnum], value: Any) -> int:
    """Resolve an enum member from a member, a name or a raw integer.

    Raw integers outside the enum are kept as plain ints: an unknown kind is
    a valid (if invisible) primitive.
    """
    if isinstance(value, str) and not value.lstrip("-").isdigit():
        try:
            return enum_type[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown {enum_type.__name__} name: {value!r}") from None
    number = int(value)
    try:
        return enum_type(number)
    except ValueError:
        return number


def kind_label(kind: int) -> str:
    """Return the lower-case name of a kind, or its number if unknown."""
    try:
        return PrimitiveKind(kind).name.lower()
    except ValueError:
        return str(int(kind))


def material_label(material_id: int) -> str:
    """Return the lower-case name of a material, or its number if unknown."""
    try:
        return MaterialId(material_id).name.lower()
    except ValueError:
        return str(int(material_id))


@dataclass
class Primitive:
    """One signed-distance primitive.

    Attributes:
        kind: Shape identifier (a PrimitiveKind, or any int for the
            sentinel fallback).
        material_id: Material identifier (a MaterialId).
        center: Shape center (x, y, z); meaning depends on kind.
        param0: Scalar parameter; meaning depends on kind.
        params1: First 4-float group; meaning depends on kind.
        params2: Second 4-float group; meaning depends on kind.
    """

    kind: int
    material_id: int
    center: Vec3 = (0.0, 0.0, 0.0)
    param0: float = 0.0
    params1: Vec4 = (0.0, 0.0, 0.0, 0.0)
    params2: Vec4 = (0.0, 0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        self.kind = _enum_or_int(PrimitiveKind, self.kind)
        self.material_id = _enum_or_int(MaterialId, self.material_id)
        self.center = _vec(self.center, 3, "center")  # type: ignore[assignment]
        self.param0 = _f32(self.param0)
        self.params1 = _vec(self.params1, 4, "params1")  # type: ignore[assignment]
        self.params2 = _vec(self.params2, 4, "params2")  # type: ignore[assignment]

    # =========================================================================
    # Per-kind constructors
    # =========================================================================

    @classmethod
    def sphere(cls, center: Vec3, radius: float, material_id: int = MaterialId.DIFFUSE) -> Primitive:
        return cls(PrimitiveKind.SPHERE, material_id, center=center, param0=radius)

    @classmethod
    def plane(
        cls,
        normal: Vec3 = (0.0, 1.0, 0.0),
        offset: float = 0.0,
        material_id: int = MaterialId.GROUND,
    ) -> Primitive:
        """Plane ``dot(p, normalize(normal)) + offset = 0``."""
        return cls(PrimitiveKind.PLANE, material_id, param0=offset, params1=(*normal, 0.0))

    @classmethod
    def box(cls, center: Vec3, half_size: Vec3, material_id: int = MaterialId.DIFFUSE) -> Primitive:
        return cls(PrimitiveKind.BOX, material_id, center=center, params1=(*half_size, 0.0))

    @classmethod
    def rounded_box(
        cls,
        center: Vec3,
        half_size: Vec3,
        corner_radius: float,
        material_id: int = MaterialId.DIFFUSE,
    ) -> Primitive:
        return cls(
            PrimitiveKind.ROUNDED_BOX,
            material_id,
            center=center,
            param0=corner_radius,
            params1=(*half_size, 0.0),
        )

    @classmethod
    def cylinder(
        cls,
        center: Vec3,
        radius: float,
        height: float,
        material_id: int = MaterialId.DIFFUSE,
    ) -> Primitive:
        """Y-aligned cylinder of the given full height."""
        return cls(
            PrimitiveKind.CYLINDER,
            material_id,
            center=center,
            param0=height,
            params1=(radius, 0.0, 0.0, 0.0),
        )

    @classmethod
    def torus(
        cls,
        center: Vec3,
        major_radius: float,
        minor_radius: float,
        material_id: int = MaterialId.METAL,
    ) -> Primitive:
        """Torus lying in the XZ plane."""
        return cls(
            PrimitiveKind.TORUS,
            material_id,
            center=center,
            param0=major_radius,
            params1=(minor_radius, 0.0, 0.0, 0.0),
        )

    @classmethod
    def capsule(
        cls,
        point_a: Vec3,
        point_b: Vec3,
        radius: float,
        material_id: int = MaterialId.DIFFUSE,
    ) -> Primitive:
        """Capsule around segment A-B. ``center`` is set to the midpoint for display only."""
        midpoint = tuple((a + b) * 0.5 for a, b in zip(point_a, point_b))
        return cls(
            PrimitiveKind.CAPSULE,
            material_id,
            center=midpoint,  # type: ignore[arg-type]
            param0=radius,
            params1=(*point_a, 0.0),
            params2=(*point_b, 0.0),
        )

    # =========================================================================
    # Mutation and serialization
    # =========================================================================

    def set_field(self, name: str, value: Any) -> None:
        """Set one field by name, coercing the value to the field's shape.

        Raises:
            ValueError: If ``name`` is not a primitive field or the value has
                the wrong number of components.
        """
        if name not in PRIMITIVE_FIELDS:
            raise ValueError(
                f"Unknown primitive field: {name!r} (expected one of {sorted(PRIMITIVE_FIELDS)})"
            )
        if name == "kind":
            self.kind = _enum_or_int(PrimitiveKind, value)
        elif name == "material_id":
            self.material_id = _enum_or_int(MaterialId, value)
        elif name == "param0":
            self.param0 = _f32(value)
        else:
            setattr(self, name, _vec(value, PRIMITIVE_FIELDS[name], name))

    def copy(self) -> Primitive:
        return Primitive(
            self.kind,
            self.material_id,
            center=self.center,
            param0=self.param0,
            params1=self.params1,
            params2=self.params2,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": kind_label(self.kind),
            "material": material_label(self.material_id),
            "center": list(self.center),
            "param0": self.param0,
            "params1": list(self.params1),
            "params2": list(self.params2),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Primitive:
        """Build a primitive from ``to_dict()`` output.

        Kind and material may be given by name or number. Missing groups
        default to zeros.
        """
        return cls(
            data.get("kind", PrimitiveKind.SPHERE),
            data.get("material", data.get("material_id", MaterialId.DIFFUSE)),
            center=data.get("center", (0.0, 0.0, 0.0)),
            param0=data.get("param0", 0.0),
            params1=data.get("params1", (0.0, 0.0, 0.0, 0.0)),
            params2=data.get("params2", (0.0, 0.0, 0.0, 0.0)),
        )


def make_default_primitive(kind: int) -> Primitive:
    """Create a kind-appropriate primitive with editor default values.

    Unknown kinds fall back to the default sphere.

    Args:
        kind: A PrimitiveKind (or its integer value).

    Returns:
        A new Primitive placed around the origin.
    """
    try:
        kind = PrimitiveKind(int(kind))
    except ValueError:
        kind = PrimitiveKind.SPHERE

    if kind == PrimitiveKind.PLANE:
        return Primitive.plane((0.0, 1.0, 0.0), 1.0, MaterialId.GROUND)
    if kind == PrimitiveKind.BOX:
        return Primitive.box((0.0, 0.5, 0.0), (0.5, 0.5, 0.5), MaterialId.DIFFUSE)
    if kind == PrimitiveKind.ROUNDED_BOX:
        return Primitive.rounded_box((0.0, 0.5, 0.0), (0.7, 0.5, 0.7), 0.1, MaterialId.WATER)
    if kind == PrimitiveKind.CYLINDER:
        return Primitive.cylinder((0.0, 0.5, 0.0), 0.4, 1.0, MaterialId.DIFFUSE)
    if kind == PrimitiveKind.TORUS:
        return Primitive.torus((0.0, 0.5, 0.0), 1.0, 0.25, MaterialId.METAL)
    if kind == PrimitiveKind.CAPSULE:
        return Primitive.capsule((0.0, 1.0, 0.0), (0.0, 0.0, 0.0), 0.3, MaterialId.DIFFUSE)
    return Primitive.sphere((0.0, 0.5, 0.0), 0.6, MaterialId.DIFFUSE)
