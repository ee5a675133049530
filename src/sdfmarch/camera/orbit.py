"""Orbit camera and the per-frame uniform record.

The orbit camera circles a target point. Its position is derived from the
orbit parameters:

    position = target + distance * (sin(yaw) cos(pitch),
                                    sin(pitch),
                                    cos(yaw) cos(pitch))

and it always looks at the target with world up (0, 1, 0). Drag deltas are
in screen pixels, with y growing downward.

Each frame the camera state is packed into a 64-byte uniform record:

    bytes  0-7    resolution (2 x f32)
    bytes  8-11   frame index (u32)
    bytes 12-15   time in seconds (f32)
    bytes 16-31   camera position (xyz, w = 0)
    bytes 32-47   camera direction (xyz, w = pointer down flag)
    bytes 48-63   camera up (xyz, w = 0)

Example:
    >>> from sdfmarch.camera.orbit import OrbitCamera
    >>> camera = OrbitCamera()
    >>> camera.orbit(40.0, 0.0)
    >>> uniforms = camera.to_uniforms(640, 360)
    >>> len(uniforms.pack())
    64
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

Vec3 = tuple[float, float, float]

# Default orbit parameters
DEFAULT_DISTANCE = 4.0
DEFAULT_PITCH = 0.5

ROTATE_SPEED = 0.005
PAN_SPEED = 0.0015
ZOOM_SPEED = 0.01
WHEEL_ZOOM_SPEED = 0.001
MIN_DISTANCE = 0.5
PITCH_LIMIT = math.pi / 2.0 - 0.01

WORLD_UP: Vec3 = (0.0, 1.0, 0.0)

UNIFORM_SIZE = 64

UNIFORM_DTYPE = np.dtype(
    [
        ("resolution", "<f4", (2,)),
        ("frame", "<u4"),
        ("time", "<f4"),
        ("cam_pos", "<f4", (4,)),
        ("cam_dir", "<f4", (4,)),
        ("cam_up", "<f4", (4,)),
    ]
)


# =============================================================================
# Frame Uniforms
# =============================================================================


@dataclass
class FrameUniforms:
    """Camera and frame state handed to the renderer once per frame.

    Attributes:
        width: Output width in pixels.
        height: Output height in pixels.
        position: Camera position.
        direction: Unit view direction.
        up: Up vector used to build the image plane.
        frame: Frame index.
        time: Time in seconds.
        pointer_down: Whether the pointer is pressed.
    """

    width: int
    height: int
    position: Vec3
    direction: Vec3
    up: Vec3 = WORLD_UP
    frame: int = 0
    time: float = 0.0
    pointer_down: bool = False

    def pack(self) -> bytes:
        """Pack into the 64-byte uniform record."""
        record = np.zeros(1, dtype=UNIFORM_DTYPE)
        record["resolution"] = (self.width, self.height)
        record["frame"] = self.frame
        record["time"] = self.time
        record["cam_pos"] = (*self.position, 0.0)
        record["cam_dir"] = (*self.direction, 1.0 if self.pointer_down else 0.0)
        record["cam_up"] = (*self.up, 0.0)
        return record.tobytes()

    @classmethod
    def unpack(cls, data: bytes) -> FrameUniforms:
        """Read a 64-byte uniform record.

        Raises:
            ValueError: If data is not exactly UNIFORM_SIZE bytes.
        """
        if len(data) != UNIFORM_SIZE:
            raise ValueError(f"Uniform record must be {UNIFORM_SIZE} bytes, got {len(data)}")
        record = np.frombuffer(data, dtype=UNIFORM_DTYPE, count=1)[0]
        resolution = record["resolution"]
        return cls(
            width=int(resolution[0]),
            height=int(resolution[1]),
            position=tuple(float(v) for v in record["cam_pos"][:3]),  # type: ignore[arg-type]
            direction=tuple(float(v) for v in record["cam_dir"][:3]),  # type: ignore[arg-type]
            up=tuple(float(v) for v in record["cam_up"][:3]),  # type: ignore[arg-type]
            frame=int(record["frame"]),
            time=float(record["time"]),
            pointer_down=bool(record["cam_dir"][3] != 0.0),
        )


# =============================================================================
# Orbit Camera
# =============================================================================


@dataclass
class OrbitCamera:
    """Camera orbiting a target point.

    Attributes:
        target: The point the camera looks at and orbits around.
        distance: Distance from the target (at least MIN_DISTANCE).
        yaw: Rotation around the world Y axis in radians.
        pitch: Elevation in radians, within +-PITCH_LIMIT.
    """

    target: Vec3 = (0.0, 0.0, 0.0)
    distance: float = DEFAULT_DISTANCE
    yaw: float = 0.0
    pitch: float = DEFAULT_PITCH

    def __post_init__(self) -> None:
        self.target = tuple(float(v) for v in self.target)  # type: ignore[assignment]
        self.distance = max(MIN_DISTANCE, float(self.distance))
        self.pitch = _clamp(float(self.pitch), -PITCH_LIMIT, PITCH_LIMIT)

    def position(self) -> Vec3:
        cos_pitch = math.cos(self.pitch)
        return (
            self.target[0] + self.distance * math.sin(self.yaw) * cos_pitch,
            self.target[1] + self.distance * math.sin(self.pitch),
            self.target[2] + self.distance * math.cos(self.yaw) * cos_pitch,
        )

    def forward(self) -> Vec3:
        """Unit direction from the camera position toward the target."""
        px, py, pz = self.position()
        dx = self.target[0] - px
        dy = self.target[1] - py
        dz = self.target[2] - pz
        length = math.sqrt(dx * dx + dy * dy + dz * dz)
        return (dx / length, dy / length, dz / length)

    def orbit(self, dx: float, dy: float) -> None:
        """Rotate around the target by a drag of (dx, dy) pixels."""
        self.yaw -= dx * ROTATE_SPEED
        self.pitch = _clamp(self.pitch + dy * ROTATE_SPEED, -PITCH_LIMIT, PITCH_LIMIT)

    def pan(self, dx: float, dy: float) -> None:
        """Move the target in the plane of the horizontal right axis and world up.

        The step scales with the orbit distance.
        """
        speed = PAN_SPEED * self.distance
        fx, _, fz = self.forward()
        right = (fz, 0.0, -fx)
        self.target = (
            self.target[0] + dx * speed * right[0],
            self.target[1] + dy * speed,
            self.target[2] + dx * speed * right[2],
        )

    def zoom(self, dy: float) -> None:
        """Drag zoom: the change is proportional to the current distance."""
        speed = ZOOM_SPEED * self.distance
        self.distance = max(MIN_DISTANCE, self.distance * (1.0 + dy * speed * 0.1))

    def wheel(self, delta: float) -> None:
        """Mouse wheel zoom by a scroll delta."""
        self.distance = max(MIN_DISTANCE, self.distance * (1.0 + delta * WHEEL_ZOOM_SPEED))

    def to_uniforms(
        self,
        width: int,
        height: int,
        frame: int = 0,
        time: float = 0.0,
        pointer_down: bool = False,
    ) -> FrameUniforms:
        """Snapshot the camera into a FrameUniforms record."""
        return FrameUniforms(
            width=width,
            height=height,
            position=self.position(),
            direction=self.forward(),
            up=WORLD_UP,
            frame=frame,
            time=time,
            pointer_down=pointer_down,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": list(self.target),
            "distance": self.distance,
            "yaw": self.yaw,
            "pitch": self.pitch,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrbitCamera:
        return cls(
            target=tuple(data.get("target", (0.0, 0.0, 0.0))),  # type: ignore[arg-type]
            distance=data.get("distance", DEFAULT_DISTANCE),
            yaw=data.get("yaw", 0.0),
            pitch=data.get("pitch", DEFAULT_PITCH),
        )


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)
