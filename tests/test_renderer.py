"""Tests for the frame renderer.

This module tests the FrameRenderer class including:
- Initialization and resizing
- Rendering from uniforms and from an orbit camera
- Turntable sequences with progress callbacks
- Image output in various formats

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import math

import numpy as np
import pytest


def default_scene():
    from sdfmarch.scene.presets import create_default_scene

    return create_default_scene()


class TestFrameRendererInit:
    """Test FrameRenderer initialization."""

    def test_init_sets_dimensions(self):
        from sdfmarch.core.renderer import FrameRenderer

        renderer = FrameRenderer(32, 24)
        assert renderer.width == 32
        assert renderer.height == 24
        assert renderer.frame_count == 0

    def test_init_rejects_oversized_dimensions(self):
        from sdfmarch.core.renderer import FrameRenderer

        with pytest.raises(ValueError, match="exceed maximum"):
            FrameRenderer(4096, 100)

    def test_repr(self):
        from sdfmarch.core.renderer import FrameRenderer

        assert repr(FrameRenderer(16, 8)) == "FrameRenderer(width=16, height=8, frames=0)"


class TestRender:
    """Test single-frame rendering."""

    def test_render_camera_counts_frames(self):
        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(8, 6)
        renderer.render_camera(camera)
        renderer.render_camera(camera)
        assert renderer.frame_count == 2

    def test_render_resizes_to_uniforms(self):
        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(8, 6)
        renderer.render(camera.to_uniforms(12, 10))
        assert (renderer.width, renderer.height) == (12, 10)
        assert renderer.get_image_numpy().shape == (10, 12, 3)

    def test_render_rejects_bad_camera(self):
        from sdfmarch.camera.orbit import FrameUniforms
        from sdfmarch.core.renderer import FrameRenderer

        renderer = FrameRenderer(8, 6)
        uniforms = FrameUniforms(8, 6, position=(0.0, 5.0, 0.0), direction=(0.0, -1.0, 0.0))
        with pytest.raises(ValueError, match="parallel"):
            renderer.render(uniforms)
        assert renderer.frame_count == 0

    def test_reset(self):
        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(8, 6)
        renderer.render_camera(camera)
        renderer.reset()
        assert renderer.frame_count == 0
        assert np.all(renderer.get_image_numpy() == 0.0)


class TestImageOutput:
    """Test image access and saving."""

    def test_float_and_uint8_images(self):
        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(8, 6)
        renderer.render_camera(camera)

        linear = renderer.get_image_numpy()
        encoded = renderer.get_image_uint8()
        assert linear.dtype == np.float32
        assert encoded.dtype == np.uint8
        assert encoded.shape == (6, 8, 3)

        hdr = renderer.get_hdr_image_numpy()
        assert np.all(hdr >= linear - 1e-6)

    def test_gamma_brightens_midtones(self):
        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(8, 6)
        renderer.render_camera(camera)
        assert np.all(renderer.get_image_numpy(gamma=2.2) >= renderer.get_image_numpy() - 1e-6)

    def test_save_image(self, tmp_path):
        from PIL import Image

        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(8, 6)
        renderer.render_camera(camera)

        path = tmp_path / "frame.png"
        renderer.save_image(str(path))
        with Image.open(path) as image:
            assert image.size == (8, 6)
            assert image.mode == "RGB"


class TestOrbit:
    """Test turntable rendering."""

    def test_render_orbit_with_callback(self):
        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(8, 6)
        calls = []
        step = math.pi / 6.0

        frames = renderer.render_orbit(camera, 3, yaw_step=step, callback=lambda done, total: calls.append((done, total)))

        assert len(frames) == 3
        assert all(frame.shape == (6, 8, 3) for frame in frames)
        assert calls == [(1, 3), (2, 3), (3, 3)]
        assert camera.yaw == pytest.approx(3 * step)
        assert renderer.frame_count == 3

    def test_orbit_frames_differ(self):
        from sdfmarch.core.renderer import FrameRenderer

        _, camera = default_scene()
        renderer = FrameRenderer(16, 12)
        frames = [image for _, image in renderer.iter_orbit(camera, 2, yaw_step=math.pi / 2.0)]
        assert not np.array_equal(frames[0], frames[1])
