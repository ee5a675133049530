"""Primary ray generation from the frame uniforms.

setup_camera() builds an orthonormal basis on the host with NumPy and stores
it in Taichi fields:

    forward: unit view direction
    right:   normalize(cross(forward, up))
    up:      cross(right, forward)

Pixel (i, j), with j = 0 at the bottom row, maps to

    uv = ((i, j) + 0.5 - resolution / 2) / resolution.y
    direction = normalize(forward * FOCAL_LENGTH + uv.x * right + uv.y * up)

so the vertical field of view is fixed by FOCAL_LENGTH and the horizontal one
follows the aspect ratio.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.camera.orbit import OrbitCamera
    >>> from sdfmarch.camera.rays import setup_camera, get_ray
    >>> setup_camera(OrbitCamera().to_uniforms(320, 240))
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(160, 120)  # Ray through the image center
"""

import logging
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from sdfmarch.camera.orbit import FrameUniforms
from sdfmarch.core.ray import Ray, make_ray

logger = logging.getLogger(__name__)

# Distance from the eye to the image plane, in units of the image height
FOCAL_LENGTH = 1.5

# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_resolution = ti.Vector.field(2, dtype=ti.f32, shape=())
_frame = ti.field(dtype=ti.i32, shape=())
_time = ti.field(dtype=ti.f32, shape=())
_pointer_down = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per frame)
# =============================================================================


def setup_camera(uniforms: FrameUniforms) -> None:
    """Load the frame uniforms into the camera fields.

    Args:
        uniforms: Camera position, direction, up vector and frame state.

    Raises:
        ValueError: If the resolution is not positive, the direction is zero
            or the direction is parallel to the up vector.
    """
    if uniforms.width <= 0 or uniforms.height <= 0:
        raise ValueError(
            f"Resolution must be positive, got {uniforms.width}x{uniforms.height}"
        )

    forward = np.array(uniforms.direction, dtype=np.float64)
    up_hint = np.array(uniforms.up, dtype=np.float64)

    forward_length = np.linalg.norm(forward)
    if forward_length < 1e-12:
        raise ValueError("Camera direction must be non-zero")
    forward = forward / forward_length

    right = np.cross(forward, up_hint)
    right_length = np.linalg.norm(right)
    if right_length < 1e-8:
        raise ValueError(
            f"Camera direction {tuple(uniforms.direction)} is parallel to up vector "
            f"{tuple(uniforms.up)}"
        )
    right = right / right_length
    up = np.cross(right, forward)

    _camera_origin[None] = [float(v) for v in uniforms.position]
    _camera_forward[None] = forward.astype(np.float32).tolist()
    _camera_right[None] = right.astype(np.float32).tolist()
    _camera_up[None] = up.astype(np.float32).tolist()
    _resolution[None] = [float(uniforms.width), float(uniforms.height)]
    _frame[None] = int(uniforms.frame)
    _time[None] = float(uniforms.time)
    _pointer_down[None] = 1 if uniforms.pointer_down else 0


def upload_uniform_buffer(data: bytes) -> FrameUniforms:
    """Load a packed 64-byte uniform record into the camera fields.

    Returns:
        The decoded FrameUniforms.

    Raises:
        ValueError: If the record has the wrong size or describes an
            invalid camera.
    """
    uniforms = FrameUniforms.unpack(data)
    setup_camera(uniforms)
    logger.debug("Uploaded frame uniforms for frame %d", uniforms.frame)
    return uniforms


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Generate the primary ray through the center of a pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).

    Returns:
        A Ray from the camera position with a unit direction.
    """
    resolution = _resolution[None]
    u = (ti.cast(pixel_i, ti.f32) + 0.5 - resolution.x * 0.5) / resolution.y
    v = (ti.cast(pixel_j, ti.f32) + 0.5 - resolution.y * 0.5) / resolution.y
    direction = tm.normalize(
        _camera_forward[None] * FOCAL_LENGTH + u * _camera_right[None] + v * _camera_up[None]
    )
    return make_ray(_camera_origin[None], direction)


# =============================================================================
# Python-side Utility Functions
# =============================================================================

_ray_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _primary_ray_kernel(pixel_i: ti.i32, pixel_j: ti.i32):
    _ray_direction[None] = get_ray(pixel_i, pixel_j).direction


def primary_ray_direction(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Direction of the primary ray through a pixel, for testing and picking."""
    _primary_ray_kernel(pixel_i, pixel_j)
    d = _ray_direction[None]
    return (float(d[0]), float(d[1]), float(d[2]))


def _vec3_tuple(field: Any) -> tuple[float, float, float]:
    value = field[None]
    return (float(value[0]), float(value[1]), float(value[2]))


def get_camera_info() -> dict[str, Any]:
    """Get the current camera state for debugging.

    Returns:
        Dictionary with origin, basis vectors, resolution and frame state.
    """
    resolution = _resolution[None]
    return {
        "origin": _vec3_tuple(_camera_origin),
        "forward": _vec3_tuple(_camera_forward),
        "right": _vec3_tuple(_camera_right),
        "up": _vec3_tuple(_camera_up),
        "resolution": (float(resolution[0]), float(resolution[1])),
        "frame": int(_frame[None]),
        "time": float(_time[None]),
        "pointer_down": bool(_pointer_down[None]),
    }
