"""Frame renderer: a host-side wrapper around the shading integrator.

This module provides a convenient wrapper around the core integrator that supports:
- Rendering a frame from FrameUniforms or directly from an OrbitCamera
- Automatic resizing when the requested resolution changes
- Turntable sequences around the camera target with progress callbacks
- Image access as float or 8-bit NumPy arrays, and PNG export

Rendering is deterministic: rendering the same scene from the same camera
twice gives the same image, so there is no sample accumulation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from sdfmarch.core.renderer import FrameRenderer
    >>> from sdfmarch.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> renderer = FrameRenderer(640, 360)
    >>> renderer.render_camera(camera)
    >>> renderer.save_image("scene.png")
"""

import logging
from collections.abc import Callable, Generator
from typing import Any

import numpy as np
import numpy.typing as npt

from sdfmarch.camera.orbit import FrameUniforms, OrbitCamera
from sdfmarch.camera.rays import setup_camera
from sdfmarch.core.integrator import (
    clear_render_target,
    get_hdr_image_numpy,
    get_image,
    get_normalized_image_numpy,
    render_frame,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (frames_done, total_frames)
ProgressCallback = Callable[[int, int], None]


class FrameRenderer:
    """Renders frames of the current scene into the shared render target.

    The renderer keeps the image size and a frame counter; the pixel data
    lives in the integrator's global buffers (Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        frame_count: Number of frames rendered so far.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum
                supported size.
        """
        self._width = width
        self._height = height
        self._frame_count = 0
        setup_render_target(width, height)
        logger.info("FrameRenderer ready at %dx%d", width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def reset(self) -> None:
        """Clear the image and the frame counter."""
        clear_render_target()
        self._frame_count = 0

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and clear it.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum
                supported size.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(self, uniforms: FrameUniforms) -> None:
        """Render one frame for the given camera state.

        The render target is resized first if the uniforms ask for a
        different resolution.

        Args:
            uniforms: Camera and frame state for this frame.

        Raises:
            ValueError: If the uniforms describe an invalid camera or size.
        """
        if (uniforms.width, uniforms.height) != (self._width, self._height):
            self.resize(uniforms.width, uniforms.height)
        setup_camera(uniforms)
        render_frame()
        self._frame_count += 1

    def render_camera(self, camera: OrbitCamera, time: float = 0.0) -> None:
        """Render one frame from an orbit camera at the current size."""
        self.render(camera.to_uniforms(self._width, self._height, frame=self._frame_count, time=time))

    def iter_orbit(
        self,
        camera: OrbitCamera,
        num_frames: int,
        yaw_step: float,
    ) -> Generator[tuple[int, npt.NDArray[np.uint8]], None, None]:
        """Render a turntable, yielding each frame as it completes.

        The camera's yaw is advanced by ``yaw_step`` radians after every
        frame, so the camera ends up rotated by ``num_frames * yaw_step``.

        Args:
            camera: The orbit camera to rotate (modified in place).
            num_frames: Number of frames to render.
            yaw_step: Yaw increment per frame in radians.

        Yields:
            Tuple of (frame_index, image) with image as (height, width, 3)
            uint8.
        """
        for index in range(num_frames):
            self.render_camera(camera, time=float(index))
            yield index, self.get_image_uint8()
            camera.yaw += yaw_step

    def render_orbit(
        self,
        camera: OrbitCamera,
        num_frames: int,
        yaw_step: float = 2.0 * np.pi / 36.0,
        callback: ProgressCallback | None = None,
    ) -> list[npt.NDArray[np.uint8]]:
        """Render a turntable and collect the frames.

        Args:
            camera: The orbit camera to rotate (modified in place).
            num_frames: Number of frames to render.
            yaw_step: Yaw increment per frame in radians.
            callback: Optional callback called after each frame with
                (frames_done, num_frames).

        Returns:
            List of (height, width, 3) uint8 images.

        Example:
            >>> def progress(done, total):
            ...     print(f"Frame {done}/{total}")
            >>> frames = renderer.render_orbit(camera, 12, callback=progress)
        """
        frames = []
        for index, image in self.iter_orbit(camera, num_frames, yaw_step):
            frames.append(image)
            if callback is not None:
                callback(index + 1, num_frames)
        return frames

    def get_image(self) -> Any:
        """Get the raw Taichi color buffer field.

        Note: This returns the full preallocated buffer. Use width/height
        properties to determine the active region.
        """
        return get_image()

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).
                Use 2.2 for sRGB display.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        image = get_normalized_image_numpy()

        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)

        return image

    def get_hdr_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the unclamped linear image, shape (height, width, 3)."""
        return get_hdr_image_numpy()

    def get_image_uint8(self, gamma: float = 2.2) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Args:
            gamma: Gamma correction value. Default 2.2 for sRGB.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        image = self.get_image_numpy(gamma=gamma)
        return (image * 255).astype(np.uint8)

    def save_image(self, filepath: str, gamma: float = 2.2) -> None:
        """Save the rendered image to a file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. Default 2.2 for sRGB.
        """
        from PIL import Image as PILImage

        image_uint8 = self.get_image_uint8(gamma=gamma)
        PILImage.fromarray(image_uint8).save(filepath)
        logger.info("Saved %dx%d image to %s", self._width, self._height, filepath)

    def __repr__(self) -> str:
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"frames={self.frame_count})"
        )
