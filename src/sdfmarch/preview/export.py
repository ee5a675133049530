"""Image export for rendered frames and turntable sequences.

Supported formats:
    - PNG (8-bit sRGB via Pillow), single frames or numbered sequences
    - Animated GIF (via Pillow) for turntables

Example:
    >>> from sdfmarch.preview.export import save_png, save_gif
    >>> renderer.render_camera(camera)
    >>> save_png(renderer, "frame.png", tone_map="reinhard")
    >>> frames = renderer.render_orbit(camera, 36)
    >>> save_gif(frames, "turntable.gif", fps=24)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from sdfmarch.preview.display import (
    ToneMapMethod,
    process_image_for_display,
    renderer_linear_image,
)

if TYPE_CHECKING:
    from sdfmarch.core.renderer import FrameRenderer

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8 bits.

    Args:
        image: Linear image array of shape (H, W, 3).
        tone_map: "none" or "reinhard".
        gamma: Gamma correction value (default 2.2 for sRGB).

    Returns:
        Array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, tone_map=tone_map, gamma=gamma)
    return (processed * 255.0 + 0.5).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> None:
    """Save a linear float image as an 8-bit PNG."""
    PILImage.fromarray(image_to_uint8(image, tone_map=tone_map, gamma=gamma)).save(filepath)


def save_png(
    renderer: FrameRenderer,
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> None:
    """Save the renderer's current frame as an 8-bit PNG.

    Args:
        renderer: The FrameRenderer holding the frame.
        filepath: Output file path (should end in .png).
        tone_map: "none" or "reinhard". Reinhard reads the unclamped frame.
        gamma: Gamma correction value (default 2.2 for sRGB).
    """
    save_png_from_array(
        renderer_linear_image(renderer, tone_map),
        filepath,
        tone_map=tone_map,
        gamma=gamma,
    )
    logger.info("Saved frame %d to %s", renderer.frame_count, filepath)


def save_frames(
    frames: Sequence[npt.NDArray[np.uint8]],
    directory: str | Path,
    prefix: str = "frame",
) -> list[Path]:
    """Write 8-bit frames as numbered PNGs (``<prefix>_0000.png``, ...).

    The directory is created if needed.

    Returns:
        The written paths in frame order.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    paths = []
    for index, frame in enumerate(frames):
        path = directory / f"{prefix}_{index:04d}.png"
        PILImage.fromarray(frame).save(path)
        paths.append(path)

    logger.info("Saved %d frames to %s", len(paths), directory)
    return paths


def save_gif(
    frames: Sequence[npt.NDArray[np.uint8]],
    filepath: str | Path,
    *,
    fps: float = 24.0,
    loop: int = 0,
) -> None:
    """Write 8-bit frames as an animated GIF.

    Args:
        frames: Images of shape (H, W, 3), all the same size.
        filepath: Output file path (should end in .gif).
        fps: Playback rate in frames per second.
        loop: Number of loops, 0 for forever.

    Raises:
        ValueError: If there are no frames or fps is not positive.
    """
    if not frames:
        raise ValueError("No frames to save")
    if fps <= 0.0:
        raise ValueError(f"fps must be positive, got {fps}")

    images = [PILImage.fromarray(frame) for frame in frames]
    images[0].save(
        filepath,
        save_all=True,
        append_images=images[1:],
        duration=int(round(1000.0 / fps)),
        loop=loop,
    )
    logger.info("Saved %d-frame animation to %s", len(images), filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Root mean squared error between two images of the same shape.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = np.asarray(image_a, dtype=np.float64) - np.asarray(image_b, dtype=np.float64)
    return float(np.sqrt(np.mean(diff * diff)))
