"""Signed distance functions for the scene primitives.

Each function returns the signed distance from a point to one analytic
surface: negative inside, zero on the surface, positive outside. The
functions are exact for spheres, planes, boxes, tori and capsules, and a
lower bound (still safe for sphere tracing) for the rounded box and the
cylinder corners.

Primitive data is passed in the flat layout of a scene record so that the
evaluator can dispatch without building a per-kind struct:

    center_param0  (center.x, center.y, center.z, param0)
    params1        4 floats, meaning depends on kind
    params2        4 floats, meaning depends on kind

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.geometry.sdf import sd_sphere
    >>> # Use within a Taichi kernel:
    >>> # d = sd_sphere(p, vec3(0.0, 0.0, 0.0), 1.0)
"""

import taichi as ti
import taichi.math as tm

from sdfmarch.scene.primitive import PrimitiveKind

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3
vec4 = tm.vec4

# Distance returned for kinds the evaluator does not know. Large enough that
# such a primitive is never the closest one.
UNKNOWN_KIND_DISTANCE = 1e6


@ti.func
def sd_sphere(p: vec3, center: vec3, radius: ti.f32) -> ti.f32:
    """Distance to a sphere.

    Args:
        p: The query point.
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        ``|p - center| - radius``.
    """
    return tm.length(p - center) - radius


@ti.func
def sd_plane(p: vec3, normal: vec3, offset: ti.f32) -> ti.f32:
    """Distance to the plane ``dot(p, n) + offset = 0``.

    The normal does not need to be unit length. A zero normal is treated as
    the world up axis.

    Args:
        p: The query point.
        normal: The plane normal, normalized here.
        offset: Signed offset along the normal.

    Returns:
        The signed distance, positive on the side the normal points to.
    """
    n = vec3(0.0, 1.0, 0.0)
    if tm.dot(normal, normal) > 1e-12:
        n = tm.normalize(normal)
    return tm.dot(p, n) + offset


@ti.func
def sd_box(p: vec3, center: vec3, half_size: vec3) -> ti.f32:
    """Distance to an axis-aligned box.

    Args:
        p: The query point.
        center: The box center.
        half_size: Half the box extent along each axis.

    Returns:
        Exact signed distance (negative inside, measured to the nearest face).
    """
    q = ti.abs(p - center) - half_size
    outside = tm.length(tm.max(q, vec3(0.0, 0.0, 0.0)))
    inside = tm.min(tm.max(q.x, tm.max(q.y, q.z)), 0.0)
    return outside + inside


@ti.func
def sd_rounded_box(p: vec3, center: vec3, half_size: vec3, corner_radius: ti.f32) -> ti.f32:
    """Box distance shrunk by the corner radius."""
    return sd_box(p, center, half_size) - corner_radius


@ti.func
def sd_cylinder(p: vec3, center: vec3, radius: ti.f32, height: ti.f32) -> ti.f32:
    """Distance to a capped cylinder along the Y axis.

    Args:
        p: The query point.
        center: Center of the cylinder (midway between the caps).
        radius: Cylinder radius.
        height: Full height between the caps.

    Returns:
        The signed distance.
    """
    radial = tm.length(vec2(p.x - center.x, p.z - center.z))
    q = ti.abs(vec2(radial, p.y - center.y)) - vec2(radius, height * 0.5)
    return tm.min(tm.max(q.x, q.y), 0.0) + tm.length(tm.max(q, vec2(0.0, 0.0)))


@ti.func
def sd_torus(p: vec3, center: vec3, major_radius: ti.f32, minor_radius: ti.f32) -> ti.f32:
    """Distance to a torus lying in the XZ plane.

    Args:
        p: The query point.
        center: The torus center.
        major_radius: Distance from the center to the tube center line.
        minor_radius: Tube radius.

    Returns:
        The signed distance.
    """
    ring = tm.length(vec2(p.x - center.x, p.z - center.z)) - major_radius
    q = vec2(ring, p.y - center.y)
    return tm.length(q) - minor_radius


@ti.func
def sd_capsule(p: vec3, a: vec3, b: vec3, radius: ti.f32) -> ti.f32:
    """Distance to a capsule around the segment A-B.

    A degenerate segment (A == B) gives a sphere around A.

    Args:
        p: The query point.
        a: First segment end point.
        b: Second segment end point.
        radius: Capsule radius.

    Returns:
        Distance from p to the segment, minus the radius.
    """
    pa = p - a
    ba = b - a
    h = 0.0
    denom = tm.dot(ba, ba)
    if denom > 1e-12:
        h = tm.clamp(tm.dot(pa, ba) / denom, 0.0, 1.0)
    return tm.length(pa - ba * h) - radius


# =============================================================================
# Kind Dispatch
# =============================================================================


@ti.func
def primitive_distance(
    kind: ti.i32,
    center_param0: vec4,
    params1: vec4,
    params2: vec4,
    p: vec3,
) -> ti.f32:
    """Evaluate the distance to one scene record.

    Args:
        kind: The PrimitiveKind value of the record.
        center_param0: Record center in xyz and param0 in w.
        params1: First parameter group.
        params2: Second parameter group.
        p: The query point.

    Returns:
        The signed distance, or UNKNOWN_KIND_DISTANCE for unknown kinds.
    """
    center = vec3(center_param0.x, center_param0.y, center_param0.z)
    param0 = center_param0.w
    group1 = vec3(params1.x, params1.y, params1.z)

    d = UNKNOWN_KIND_DISTANCE
    if kind == int(PrimitiveKind.SPHERE):
        d = sd_sphere(p, center, param0)
    elif kind == int(PrimitiveKind.PLANE):
        d = sd_plane(p, group1, param0)
    elif kind == int(PrimitiveKind.BOX):
        d = sd_box(p, center, group1)
    elif kind == int(PrimitiveKind.ROUNDED_BOX):
        d = sd_rounded_box(p, center, group1, param0)
    elif kind == int(PrimitiveKind.CYLINDER):
        d = sd_cylinder(p, center, params1.x, param0)
    elif kind == int(PrimitiveKind.TORUS):
        d = sd_torus(p, center, param0, params1.x)
    elif kind == int(PrimitiveKind.CAPSULE):
        d = sd_capsule(p, group1, vec3(params2.x, params2.y, params2.z), param0)
    return d
