"""Display processing and Matplotlib preview for rendered frames.

The integrator writes linear colors that may exceed 1.0 (the sun highlight
alone can reach 2.0). Before display a frame goes through:

    1. optional Reinhard tone mapping (c / (1 + c)) of the unclamped image
    2. gamma encoding (default 2.2)
    3. clamping to [0, 1]

Example:
    >>> from sdfmarch.preview.display import show_preview
    >>> from sdfmarch.core.renderer import FrameRenderer
    >>>
    >>> renderer = FrameRenderer(640, 360)
    >>> renderer.render_camera(camera)
    >>> show_preview(renderer, tone_map="reinhard")
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from sdfmarch.core.renderer import FrameRenderer


# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard"]


def tone_map_reinhard(image: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Compress linear colors into [0, 1) with ``c / (1 + c)``.

    Negative inputs are treated as zero.
    """
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Gamma-encode a linear image for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2.2). 1.0 returns the input unchanged.

    Returns:
        ``clip(image, 0, 1) ** (1 / gamma)``.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image
    return np.power(np.clip(image, 0.0, 1.0), 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Run the display pipeline on a linear image.

    Args:
        image: Linear image array of shape (H, W, 3).
        tone_map: "none" or "reinhard".
        gamma: Gamma correction value (default 2.2).

    Returns:
        Display-ready image in [0, 1].

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = np.array(image, dtype=np.float32, copy=True)

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    return np.clip(result, 0.0, 1.0).astype(np.float32)


def renderer_linear_image(
    renderer: FrameRenderer,
    tone_map: ToneMapMethod = "none",
) -> npt.NDArray[np.float32]:
    """Read the frame from a renderer as a linear image for the given tone map."""
    # Tone mapping needs the values above 1.0 that the clamped image drops
    if tone_map == "none":
        return renderer.get_image_numpy(gamma=1.0)
    return renderer.get_hdr_image_numpy()


def show_preview(
    renderer: FrameRenderer,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Show the current frame in a Matplotlib window.

    Args:
        renderer: The FrameRenderer holding the frame.
        tone_map: "none" or "reinhard".
        gamma: Gamma correction value (default 2.2).
        title: Custom title (default shows the frame count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(
        renderer_linear_image(renderer, tone_map),
        tone_map=tone_map,
        gamma=gamma,
    )

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"{renderer.width}x{renderer.height} - frame {renderer.frame_count}"
        if tone_map != "none":
            title += f" ({tone_map})"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_frames(
    frames: Sequence[npt.NDArray[np.uint8]],
    *,
    columns: int = 4,
    figsize: tuple[float, float] | None = None,
    block: bool = True,
) -> None:
    """Show a sequence of 8-bit frames (e.g. a turntable) as a grid.

    Raises:
        ValueError: If frames is empty or columns is not positive.
    """
    import matplotlib.pyplot as plt

    if not frames:
        raise ValueError("No frames to show")
    if columns <= 0:
        raise ValueError(f"columns must be positive, got {columns}")

    columns = min(columns, len(frames))
    rows = (len(frames) + columns - 1) // columns
    if figsize is None:
        figsize = (3.0 * columns, 2.5 * rows)

    fig, axes = plt.subplots(rows, columns, figsize=figsize, squeeze=False)
    for index, ax in enumerate(axes.flat):
        ax.axis("off")
        if index < len(frames):
            ax.imshow(frames[index])
            ax.set_title(f"Frame {index}")

    plt.tight_layout()
    plt.show(block=block)
