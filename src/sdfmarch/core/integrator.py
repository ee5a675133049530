"""Multi-bounce shading integrator for sphere-traced scenes.

This module implements the per-pixel shading loop. Each pixel follows a
single deterministic path: there is no random sampling, no accumulation over
frames and no global illumination.

Per bounce (at most MAX_BOUNCES):
    1. March the current ray through the scene.
    2. Miss: add ``mask * sky(direction)`` and stop.
    3. Hit, by material:
        - Metal: add a small lit term, mirror-reflect, ``mask *= 0.8``.
        - Glass / Water: add the Fresnel-weighted reflected sky, then
          continue along the refracted ray (or the reflected one on total
          internal reflection).
        - Anything else: add Lambert shading with a hard shadow and stop.
    4. Stop once ``dot(mask, mask)`` drops below MASK_CUTOFF.

If the bounce budget runs out with energy left, one last sky term is added.
The result is blended toward the sky by fog computed from the distance
traveled in the final march.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from sdfmarch.core.integrator import render_frame, setup_render_target
    >>> from sdfmarch.camera.rays import setup_camera
    >>> from sdfmarch.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera.to_uniforms(640, 360))
    >>> setup_render_target(640, 360)
    >>> render_frame()
"""

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from sdfmarch.camera.rays import get_ray
from sdfmarch.core.lighting import apply_fog, diffuse_term, shadow_factor, sky
from sdfmarch.core.marcher import march
from sdfmarch.core.normal import estimate_normal
from sdfmarch.core.ray import offset_ray_origin
from sdfmarch.materials.dielectric import dielectric_ior, is_dielectric, scatter_dielectric
from sdfmarch.materials.lambertian import shade_lambertian
from sdfmarch.materials.metal import METAL_REFLECTANCE, scatter_metal, shade_metal
from sdfmarch.materials.palette import material_color
from sdfmarch.scene.primitive import MaterialId

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum bounces per path
MAX_BOUNCES = 16

# Paths stop once the squared mask length falls below this
MASK_CUTOFF = 0.001


@ti.dataclass
class PathSample:
    """Result of shading one path.

    Attributes:
        color: Final color after fog.
        radiance: Accumulated color before fog.
        mask: Attenuation left when the path stopped.
        bounces: Number of marches along the primary and continuation rays.
        distance: Traveled distance of the final march (drives the fog).
    """

    color: vec3
    radiance: vec3
    mask: vec3
    bounces: ti.i32
    distance: ti.f32


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_path(ray_origin: vec3, ray_direction: vec3) -> PathSample:
    """Shade one path starting at a camera ray.

    Args:
        ray_origin: The ray origin.
        ray_direction: The unit ray direction.

    Returns:
        A PathSample with the final color and the path's end state.
    """
    origin = ray_origin
    direction = ray_direction
    color = vec3(0.0, 0.0, 0.0)
    mask = vec3(1.0, 1.0, 1.0)
    last_distance = 0.0
    bounces = 0

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1
    for _ in range(MAX_BOUNCES):
        if active == 1:
            result = march(origin, direction)
            last_distance = result.distance
            bounces += 1

            if result.hit == 0:
                # Escaped, or ran out of marching steps
                color += mask * sky(direction)
                mask = vec3(0.0, 0.0, 0.0)
                active = 0
            else:
                material_id = result.material_id
                hit_point = origin + direction * result.distance
                normal = estimate_normal(hit_point)
                albedo = material_color(material_id, hit_point)

                if material_id == int(MaterialId.METAL):
                    diffuse = diffuse_term(hit_point, normal)
                    shadow = shadow_factor(hit_point, normal)
                    color += mask * shade_metal(albedo, diffuse, shadow)
                    direction = scatter_metal(direction, normal)
                    origin = offset_ray_origin(hit_point, normal, direction)
                    mask *= METAL_REFLECTANCE

                elif is_dielectric(material_id) == 1:
                    bounce = scatter_dielectric(dielectric_ior(material_id), direction, normal)
                    # Reflected branch is approximated by the sky it sees
                    color += mask * bounce.reflectance * sky(bounce.reflected)
                    if bounce.total_internal == 1:
                        direction = bounce.reflected
                        mask *= albedo
                    else:
                        direction = bounce.refracted
                        mask *= (1.0 - bounce.reflectance) * albedo
                    origin = offset_ray_origin(hit_point, normal, direction)

                else:
                    diffuse = diffuse_term(hit_point, normal)
                    shadow = shadow_factor(hit_point, normal)
                    color += mask * shade_lambertian(albedo, diffuse, shadow)
                    mask = vec3(0.0, 0.0, 0.0)
                    active = 0

            if tm.dot(mask, mask) < MASK_CUTOFF:
                active = 0

    if tm.dot(mask, mask) > MASK_CUTOFF:
        # Bounce budget exhausted with energy left
        color += mask * sky(direction)

    return PathSample(
        color=apply_fog(color, direction, last_distance),
        radiance=color,
        mask=mask,
        bounces=bounces,
        distance=last_distance,
    )


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Clamp negatives and replace NaN/Inf components with zero."""
    result = tm.max(color, vec3(0.0, 0.0, 0.0))
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer (preallocated to max size), indexed [x, y] with y = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target.

    Sets the active image dimensions and clears the color buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()
    logger.debug("Render target set to %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the color buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image() -> "ti.MatrixField":
    """Get the color buffer.

    Note: This returns the full preallocated buffer. Use get_image_dimensions()
    to determine the active region.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return _color_buffer


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame_kernel(width: ti.i32, height: ti.i32):
    """Shade every pixel of the active region once."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray(i, j)
        sample = trace_path(ray.origin, ray.direction)
        _color_buffer[i, j] = _sanitize(sample.color)


_path_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_path_radiance = ti.Vector.field(3, dtype=ti.f32, shape=())
_path_mask = ti.Vector.field(3, dtype=ti.f32, shape=())
_path_bounces = ti.field(dtype=ti.i32, shape=())
_path_distance = ti.field(dtype=ti.f32, shape=())


@ti.func
def _store_path(sample: PathSample):
    _path_color[None] = sample.color
    _path_radiance[None] = sample.radiance
    _path_mask[None] = sample.mask
    _path_bounces[None] = sample.bounces
    _path_distance[None] = sample.distance


@ti.kernel
def _render_pixel_kernel(pixel_i: ti.i32, pixel_j: ti.i32):
    for _ in range(1):
        ray = get_ray(pixel_i, pixel_j)
        _store_path(trace_path(ray.origin, ray.direction))


@ti.kernel
def _trace_ray_kernel(ox: ti.f32, oy: ti.f32, oz: ti.f32, dx: ti.f32, dy: ti.f32, dz: ti.f32):
    for _ in range(1):
        _store_path(trace_path(vec3(ox, oy, oz), tm.normalize(vec3(dx, dy, dz))))


# =============================================================================
# Public Rendering API
# =============================================================================


@dataclass
class PathResult:
    """Python-side copy of a PathSample."""

    color: tuple[float, float, float]
    radiance: tuple[float, float, float]
    mask: tuple[float, float, float]
    bounces: int
    distance: float


def _read_vec3(field: "ti.MatrixField") -> tuple[float, float, float]:
    value = field[None]
    return (float(value[0]), float(value[1]), float(value[2]))


def _read_path() -> PathResult:
    return PathResult(
        color=_read_vec3(_path_color),
        radiance=_read_vec3(_path_radiance),
        mask=_read_vec3(_path_mask),
        bounces=int(_path_bounces[None]),
        distance=float(_path_distance[None]),
    )


def render_frame() -> None:
    """Shade every pixel of the render target with the current scene and camera.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    _render_frame_kernel(width, height)


def render_pixel(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Shade a single pixel and return its final color.

    This is a Python-callable function for testing. For rendering, use
    render_frame() which processes all pixels in parallel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).

    Returns:
        Tuple of (R, G, B) color values.
    """
    _render_pixel_kernel(pixel_i, pixel_j)
    return _read_path().color


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> PathResult:
    """Shade one path from an arbitrary ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (normalized before tracing).

    Returns:
        A PathResult describing the color and how the path ended.

    Raises:
        ValueError: If direction is the zero vector.
    """
    if all(float(c) == 0.0 for c in direction):
        raise ValueError("Ray direction must be non-zero")

    _trace_ray_kernel(
        float(origin[0]),
        float(origin[1]),
        float(origin[2]),
        float(direction[0]),
        float(direction[1]),
        float(direction[2]),
    )
    return _read_path()


def get_hdr_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image without clamping.

    Highlights may exceed 1.0; use this as input to tone mapping. The
    array shape is (height, width, 3) with dtype float32, top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # (width, height, 3) with y up -> (height, width, 3) with the top row first
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))
    return np.ascontiguousarray(np.flipud(image), dtype=np.float32)


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Returns the color buffer with values in [0, 1] range (clamped).
    The array shape is (height, width, 3) with dtype float32, top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    return np.clip(get_hdr_image_numpy(), 0.0, 1.0).astype(np.float32)
