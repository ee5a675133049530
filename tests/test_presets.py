"""Tests for the preset scenes."""

import pytest

from sdfmarch.camera.orbit import OrbitCamera
from sdfmarch.scene.primitive import MaterialId, PrimitiveKind


class TestDefaultScene:
    """Tests for create_default_scene."""

    def test_contents(self):
        from sdfmarch.scene.presets import create_default_scene

        scene, camera = create_default_scene(upload=False)
        kinds = [p.kind for p in scene.primitives]
        assert kinds == [PrimitiveKind.PLANE, PrimitiveKind.SPHERE]
        assert scene.get(1).material_id == MaterialId.METAL
        assert camera == OrbitCamera()

    def test_uploaded_distance(self):
        from sdfmarch.scene.distance_field import scene_distance_at
        from sdfmarch.scene.presets import create_default_scene

        create_default_scene()
        distance, material = scene_distance_at((0.0, 3.0, 0.0))
        assert distance == pytest.approx(2.2, abs=1e-5)
        assert material == MaterialId.METAL

        distance, material = scene_distance_at((3.0, 0.0, 0.0))
        # The ground at y = -1 is closer than the sphere surface
        assert distance == pytest.approx(1.0, abs=1e-5)
        assert material == MaterialId.GROUND

    def test_upload_disabled(self):
        from sdfmarch.scene.distance_field import get_primitive_count
        from sdfmarch.scene.presets import create_default_scene

        create_default_scene(upload=False)
        assert get_primitive_count() == 0


class TestShowcaseScene:
    """Tests for create_showcase_scene."""

    def test_covers_every_kind_and_material(self):
        from sdfmarch.scene.presets import create_showcase_scene

        scene, _ = create_showcase_scene(upload=False)
        assert scene.count == 8
        assert {p.kind for p in scene.primitives} == set(PrimitiveKind)
        assert {p.material_id for p in scene.primitives} == set(MaterialId)

    def test_camera_looks_at_the_scene(self):
        from sdfmarch.scene.presets import create_showcase_scene

        _, camera = create_showcase_scene(upload=False)
        assert camera.distance == 7.0
        assert camera.forward()[1] < 0.0


class TestCreateScene:
    """Tests for create_scene lookup."""

    @pytest.mark.parametrize("name", ["default", "showcase"])
    def test_known_presets(self, name):
        from sdfmarch.scene.presets import create_scene

        scene, camera = create_scene(name, upload=False)
        assert scene.count > 0
        assert isinstance(camera, OrbitCamera)

    def test_unknown_preset(self):
        from sdfmarch.scene.presets import create_scene

        with pytest.raises(ValueError, match="Unknown scene preset"):
            create_scene("cornell")
