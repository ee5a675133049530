"""Geometry module: signed distance functions for the scene primitives.

Components:
    sdf: Per-kind distance functions and the kind dispatch used by the
        scene evaluator

All distance routines are Taichi functions (@ti.func) evaluated inside
kernels. Primitive records are read in their flat buffer layout:
    d = primitive_distance(kind, center_param0, params1, params2, p)
"""

from .sdf import (
    UNKNOWN_KIND_DISTANCE,
    primitive_distance,
    sd_box,
    sd_capsule,
    sd_cylinder,
    sd_plane,
    sd_rounded_box,
    sd_sphere,
    sd_torus,
)

__all__ = [
    "UNKNOWN_KIND_DISTANCE",
    "primitive_distance",
    "sd_sphere",
    "sd_plane",
    "sd_box",
    "sd_rounded_box",
    "sd_cylinder",
    "sd_torus",
    "sd_capsule",
]
