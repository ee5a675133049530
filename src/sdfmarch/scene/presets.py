"""Ready-made scenes, each paired with an orbit camera that frames it.

Scenes:
    default: ground plane under a metal sphere (the editor's startup scene)
    showcase: one primitive of every kind, covering all materials

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sdfmarch.scene.presets import create_scene
    >>> scene, camera = create_scene("showcase")
"""

from collections.abc import Callable

from sdfmarch.camera.orbit import OrbitCamera
from sdfmarch.scene.manager import SceneManager
from sdfmarch.scene.primitive import MaterialId, Primitive

# The ground plane sits at y = -1
GROUND_OFFSET = 1.0


def create_default_scene(upload: bool = True) -> tuple[SceneManager, OrbitCamera]:
    """Ground plane and a metal sphere of radius 0.8 at the origin.

    Args:
        upload: Whether the scene manager uploads to the device.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager(
        [
            Primitive.plane((0.0, 1.0, 0.0), GROUND_OFFSET, MaterialId.GROUND),
            Primitive.sphere((0.0, 0.0, 0.0), 0.8, MaterialId.METAL),
        ],
        upload=upload,
    )
    return scene, OrbitCamera()


def create_showcase_scene(upload: bool = True) -> tuple[SceneManager, OrbitCamera]:
    """Every primitive kind on the ground plane.

    Front row, left to right: box, metal sphere, rounded water box. Back
    row: cylinder, capsule, glass torus. A glass sphere sits in front.

    Args:
        upload: Whether the scene manager uploads to the device.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager(
        [
            Primitive.plane((0.0, 1.0, 0.0), GROUND_OFFSET, MaterialId.GROUND),
            Primitive.sphere((0.0, -0.2, 0.0), 0.8, MaterialId.METAL),
            Primitive.box((-2.2, -0.5, 0.0), (0.5, 0.5, 0.5), MaterialId.DIFFUSE),
            Primitive.rounded_box((2.2, -0.5, 0.0), (0.6, 0.4, 0.6), 0.1, MaterialId.WATER),
            Primitive.cylinder((-1.4, -0.4, -2.2), 0.4, 1.2, MaterialId.DIFFUSE),
            Primitive.capsule((0.0, -0.7, -2.8), (0.0, 0.5, -2.8), 0.3, MaterialId.DIFFUSE),
            Primitive.torus((1.4, -0.75, -2.2), 0.6, 0.25, MaterialId.GLASS),
            Primitive.sphere((0.0, -0.5, 1.6), 0.5, MaterialId.GLASS),
        ],
        upload=upload,
    )
    camera = OrbitCamera(target=(0.0, -0.3, -0.5), distance=7.0, yaw=0.0, pitch=0.45)
    return scene, camera


PRESETS: dict[str, Callable[..., tuple[SceneManager, OrbitCamera]]] = {
    "default": create_default_scene,
    "showcase": create_showcase_scene,
}


def create_scene(name: str, upload: bool = True) -> tuple[SceneManager, OrbitCamera]:
    """Build a preset scene by name.

    Raises:
        ValueError: If the name is not in PRESETS.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown scene preset: {name!r} (expected one of {sorted(PRESETS)})") from None
    return factory(upload=upload)
