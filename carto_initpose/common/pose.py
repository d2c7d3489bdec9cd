"""
Pose type and geometry_msgs conversions.

Pose is an immutable rigid transform with a unit quaternion rotation.
Arrays are stored read-only so a Pose can be shared between threads and
between snapshots without copying.

The message helpers are duck-typed against geometry_msgs/Pose
(`position.{x,y,z}`, `orientation.{x,y,z,w}`) so they work on rclpy
messages and on plain test doubles alike.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

import numpy as np

from carto_initpose.common import se3
from carto_initpose.common.constants import POSE_ATOL


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Pose:
    """
    Rigid transform: translation (x, y, z) and rotation quaternion (x, y, z, w).

    The rotation is normalized on construction; ValueError on a degenerate
    or non-finite quaternion, or non-finite translation.
    """
    translation: np.ndarray
    rotation: np.ndarray

    def __post_init__(self) -> None:
        t = np.array(self.translation, dtype=float).reshape(-1)
        if t.shape != (3,):
            raise ValueError(f"Translation must have 3 components, got shape {t.shape}")
        if not np.all(np.isfinite(t)):
            raise ValueError(f"Translation has non-finite components: {t.tolist()}")
        q = se3.quat_normalize(self.rotation)
        object.__setattr__(self, "translation", _frozen(t))
        object.__setattr__(self, "rotation", _frozen(q))

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> "Pose":
        return cls(np.zeros(3), se3.quat_identity())

    @classmethod
    def from_xyz_yaw(cls, x: float, y: float, z: float = 0.0, yaw: float = 0.0) -> "Pose":
        return cls(np.array([x, y, z], dtype=float), se3.yaw_to_quat(yaw))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pose":
        """
        Build from {"position": {x, y, z}, "orientation": {x, y, z, w}}.

        Missing position components default to 0, a missing orientation to
        identity.
        """
        position = data.get("position") or {}
        orientation = data.get("orientation") or {}
        t = [float(position.get(k, 0.0)) for k in ("x", "y", "z")]
        q = [
            float(orientation.get("x", 0.0)),
            float(orientation.get("y", 0.0)),
            float(orientation.get("z", 0.0)),
            float(orientation.get("w", 1.0)),
        ]
        return cls(np.array(t), np.array(q))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def x(self) -> float:
        return float(self.translation[0])

    @property
    def y(self) -> float:
        return float(self.translation[1])

    @property
    def z(self) -> float:
        return float(self.translation[2])

    @property
    def yaw(self) -> float:
        return se3.quat_to_yaw(*self.rotation)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        tx, ty, tz = (float(v) for v in self.translation)
        qx, qy, qz, qw = (float(v) for v in self.rotation)
        return {
            "position": {"x": tx, "y": ty, "z": tz},
            "orientation": {"x": qx, "y": qy, "z": qz, "w": qw},
        }

    # -------------------------------------------------------------------------
    # Group operations
    # -------------------------------------------------------------------------

    def compose(self, other: "Pose") -> "Pose":
        """self * other (apply other first, then self)."""
        t, q = se3.se3_compose(self.translation, self.rotation, other.translation, other.rotation)
        return Pose(t, q)

    def __mul__(self, other: "Pose") -> "Pose":
        if not isinstance(other, Pose):
            return NotImplemented
        return self.compose(other)

    def inverse(self) -> "Pose":
        t, q = se3.se3_inverse(self.translation, self.rotation)
        return Pose(t, q)

    def with_z(self, z: float) -> "Pose":
        """Copy with the translation's z replaced; x, y and rotation unchanged."""
        t = self.translation.copy()
        t[2] = float(z)
        return Pose(t, self.rotation)

    def allclose(self, other: "Pose", atol: float = POSE_ATOL) -> bool:
        """Componentwise comparison; q and -q are treated as equal."""
        if not np.allclose(self.translation, other.translation, rtol=0.0, atol=atol):
            return False
        return bool(np.allclose(
            se3.quat_canonical(self.rotation),
            se3.quat_canonical(other.rotation),
            rtol=0.0,
            atol=atol,
        ))

    def __repr__(self) -> str:
        t = ", ".join(f"{v:.6g}" for v in self.translation)
        q = ", ".join(f"{v:.6g}" for v in self.rotation)
        return f"Pose(t=[{t}], q=[{q}])"


# =============================================================================
# geometry_msgs conversions
# =============================================================================


def pose_from_msg(msg: Any) -> Pose:
    """geometry_msgs/Pose -> Pose."""
    p = msg.position
    o = msg.orientation
    return Pose(
        np.array([p.x, p.y, p.z], dtype=float),
        np.array([o.x, o.y, o.z, o.w], dtype=float),
    )


def fill_pose_msg(pose: Pose, msg: Any) -> Any:
    """Write `pose` into an existing geometry_msgs/Pose in place and return it."""
    msg.position.x = float(pose.translation[0])
    msg.position.y = float(pose.translation[1])
    msg.position.z = float(pose.translation[2])
    msg.orientation.x = float(pose.rotation[0])
    msg.orientation.y = float(pose.rotation[1])
    msg.orientation.z = float(pose.rotation[2])
    msg.orientation.w = float(pose.rotation[3])
    return msg
