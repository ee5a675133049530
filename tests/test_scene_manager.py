"""Unit tests for the SceneManager.

Tests cover:
- Adding default primitives up to capacity
- Removing and updating primitives
- Re-encoding and device upload after every edit
- Scene serialization (to_config, from_config, JSON files)
"""

import json
import logging

import pytest

from sdfmarch.scene.encoder import MAX_PRIMITIVES, decode_scene, encode_scene
from sdfmarch.scene.primitive import MaterialId, Primitive, PrimitiveKind


@pytest.fixture
def fresh_scene():
    """Create an empty SceneManager that uploads on every edit."""
    from sdfmarch.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestPrimitiveList:
    """Tests for add, remove and update."""

    def test_add_returns_indices(self, fresh_scene):
        assert fresh_scene.add(PrimitiveKind.SPHERE) == 0
        assert fresh_scene.add(PrimitiveKind.TORUS) == 1
        assert fresh_scene.count == 2
        assert fresh_scene.get(1).kind == PrimitiveKind.TORUS

    def test_add_unknown_kind_makes_sphere(self, fresh_scene):
        index = fresh_scene.add(42)
        assert fresh_scene.get(index).kind == PrimitiveKind.SPHERE

    def test_add_when_full_is_ignored(self, fresh_scene):
        for _ in range(MAX_PRIMITIVES):
            assert fresh_scene.add(PrimitiveKind.BOX) is not None
        assert fresh_scene.is_full
        before = fresh_scene.buffer

        assert fresh_scene.add(PrimitiveKind.BOX) is None
        assert fresh_scene.count == MAX_PRIMITIVES
        assert fresh_scene.buffer == before

    def test_remove_shifts_later_entries(self, fresh_scene):
        fresh_scene.add(PrimitiveKind.SPHERE)
        fresh_scene.add(PrimitiveKind.BOX)
        fresh_scene.add(PrimitiveKind.CAPSULE)

        removed = fresh_scene.remove(0)
        assert removed.kind == PrimitiveKind.SPHERE
        assert [p.kind for p in fresh_scene.primitives] == [PrimitiveKind.BOX, PrimitiveKind.CAPSULE]

    def test_update_fields(self, fresh_scene):
        index = fresh_scene.add(PrimitiveKind.SPHERE)
        fresh_scene.update(index, "material_id", "glass")
        fresh_scene.update(index, "center", (1.0, 2.0, 3.0))
        fresh_scene.update(index, "param0", 0.25)

        primitive = fresh_scene.get(index)
        assert primitive.material_id == MaterialId.GLASS
        assert primitive.center == (1.0, 2.0, 3.0)
        assert primitive.param0 == 0.25

    def test_update_unknown_field(self, fresh_scene):
        index = fresh_scene.add(PrimitiveKind.SPHERE)
        with pytest.raises(ValueError):
            fresh_scene.update(index, "radius", 1.0)

    def test_update_wrong_shape(self, fresh_scene):
        index = fresh_scene.add(PrimitiveKind.SPHERE)
        with pytest.raises(ValueError):
            fresh_scene.update(index, "center", (1.0, 2.0))

    @pytest.mark.parametrize("operation", ["get", "remove"])
    def test_index_out_of_range(self, fresh_scene, operation):
        fresh_scene.add(PrimitiveKind.SPHERE)
        with pytest.raises(IndexError):
            getattr(fresh_scene, operation)(1)

    def test_primitives_are_copies(self, fresh_scene):
        index = fresh_scene.add(PrimitiveKind.SPHERE)
        primitive = fresh_scene.get(index)
        primitive.param0 = 99.0
        assert fresh_scene.get(index).param0 != 99.0

    def test_repr(self, fresh_scene):
        fresh_scene.add(PrimitiveKind.SPHERE)
        assert repr(fresh_scene) == f"SceneManager(count=1, capacity={MAX_PRIMITIVES})"


class TestEncoding:
    """Tests for re-encoding and upload."""

    def test_buffer_matches_encoder(self, fresh_scene):
        fresh_scene.add(PrimitiveKind.PLANE)
        fresh_scene.add(PrimitiveKind.TORUS)
        assert fresh_scene.buffer == encode_scene(fresh_scene.primitives)

        decoded = decode_scene(fresh_scene.buffer)
        assert decoded.count == 2

    def test_edits_reach_the_device(self, fresh_scene):
        from sdfmarch.scene.distance_field import get_primitive_count, scene_distance_at

        fresh_scene.add_primitive(Primitive.sphere((0.0, 0.0, 0.0), 1.0, MaterialId.WATER))
        assert get_primitive_count() == 1
        distance, material = scene_distance_at((0.0, 0.0, 3.0))
        assert distance == pytest.approx(2.0, abs=1e-5)
        assert material == MaterialId.WATER

        fresh_scene.update(0, "param0", 2.0)
        distance, _ = scene_distance_at((0.0, 0.0, 3.0))
        assert distance == pytest.approx(1.0, abs=1e-5)

        fresh_scene.remove(0)
        assert get_primitive_count() == 0

    def test_upload_disabled(self):
        from sdfmarch.scene.distance_field import get_primitive_count
        from sdfmarch.scene.manager import SceneManager

        scene = SceneManager([Primitive.sphere((0.0, 0.0, 0.0), 1.0)], upload=False)
        assert scene.count == 1
        assert get_primitive_count() == 0

        scene.upload()
        assert get_primitive_count() == 1

    def test_small_capacity(self):
        from sdfmarch.scene.manager import SceneManager

        primitives = [Primitive.sphere((float(i), 0.0, 0.0), 0.5) for i in range(4)]
        scene = SceneManager(primitives, capacity=2, upload=False)
        assert scene.count == 2
        assert scene.add(PrimitiveKind.BOX) is None
        assert decode_scene(scene.buffer).capacity == 2

    @pytest.mark.parametrize("capacity", [-1, MAX_PRIMITIVES + 1])
    def test_capacity_out_of_range(self, capacity):
        from sdfmarch.scene.manager import SceneManager

        with pytest.raises(ValueError):
            SceneManager(capacity=capacity)


class TestSceneSerialization:
    """Tests for scene save/load functionality."""

    def _populated(self):
        from sdfmarch.scene.manager import SceneManager

        return SceneManager(
            [
                Primitive.plane((0.0, 1.0, 0.0), 1.0, MaterialId.GROUND),
                Primitive.torus((0.0, 0.5, 0.0), 1.0, 0.25, MaterialId.GLASS),
                Primitive.capsule((0.0, 1.0, 0.0), (0.0, 0.0, 0.0), 0.3),
            ],
            upload=False,
        )

    def test_config_round_trip(self):
        from sdfmarch.scene.manager import SceneManager

        scene = self._populated()
        config = scene.to_config()
        assert len(config.primitives) == 3
        assert config.primitives[1]["kind"] == "torus"
        assert config.primitives[1]["material"] == "glass"

        restored = SceneManager(upload=False)
        restored.from_config(config)
        assert restored.buffer == scene.buffer

    def test_json_round_trip(self, tmp_path):
        from sdfmarch.scene.manager import SceneManager

        scene = self._populated()
        path = tmp_path / "scene.json"
        scene.save_json(path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert len(data["primitives"]) == 3

        restored = SceneManager(upload=False)
        restored.load_json(path)
        assert restored.primitives == scene.primitives

    def test_unsupported_version(self):
        from sdfmarch.scene.manager import SceneManager

        scene = SceneManager(upload=False)
        with pytest.raises(ValueError, match="version"):
            scene.from_dict({"version": 99, "primitives": []})

    def test_json_must_be_object(self, tmp_path):
        from sdfmarch.scene.manager import SceneManager

        path = tmp_path / "scene.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(ValueError):
            SceneManager(upload=False).load_json(path)

    def test_oversized_config_is_truncated(self, caplog):
        from sdfmarch.scene.manager import SceneConfig, SceneManager

        entries = [Primitive.sphere((float(i), 0.0, 0.0), 0.5).to_dict() for i in range(5)]
        scene = SceneManager(capacity=3, upload=False)
        with caplog.at_level(logging.WARNING, logger="sdfmarch.scene.manager"):
            scene.from_config(SceneConfig(primitives=entries))

        assert scene.count == 3
        assert "keeping the first 3" in caplog.text

    def test_clear(self):
        scene = self._populated()
        scene.clear()
        assert scene.count == 0
        assert decode_scene(scene.buffer).count == 0
