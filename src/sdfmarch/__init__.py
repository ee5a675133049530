"""Taichi sphere-tracing renderer for scenes of signed-distance primitives.

This package evaluates a small, editable list of implicit primitives on the
GPU (or CPU) with Taichi, using sphere tracing plus a deterministic
reflection/refraction bounce loop.

Subpackages:
    core: Vector helpers, ray marching, normals, lighting, the shading
        integrator and the frame renderer
    geometry: Per-primitive signed distance functions
    materials: Material palette and per-material shading rules
    scene: Primitive records, the binary scene buffer and the scene manager
    camera: Orbit camera model, frame uniforms and primary ray generation
    preview: Display processing and image export
"""

__version__ = "0.1.0"
