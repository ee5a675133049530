"""Camera module for view state and primary ray generation.

Components:
    orbit: OrbitCamera (orbit/pan/zoom around a target) and FrameUniforms,
        the per-frame record packed into a 64-byte uniform buffer
    rays: Camera basis setup and the get_ray() Taichi function

Ray generation uses pixel-center coordinates normalized by the image height:
    uv = (pixel + 0.5 - resolution / 2) / resolution.y
"""

from .orbit import UNIFORM_DTYPE, UNIFORM_SIZE, FrameUniforms, OrbitCamera

# Note: rays allocates Taichi fields on import and is NOT imported here.
# Import it directly:
#   from sdfmarch.camera.rays import setup_camera, get_ray

__all__ = [
    "UNIFORM_DTYPE",
    "UNIFORM_SIZE",
    "FrameUniforms",
    "OrbitCamera",
]
