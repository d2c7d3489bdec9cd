"""
Reconcile report for audit and diagnostics.

Every reconciliation emits a ReconcileReport that records:
1. The raw hint and the height-corrected absolute pose
2. Which submap supplied the height, and how far away it was
3. The reference origin and the resulting relative pose

The node logs the report and publishes it as JSON so a restart can be
traced back to the map data it was anchored to.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any

import numpy as np


def _json_safe(obj):
    """
    Convert numpy types, tuples and Pose-like objects to JSON-serializable values.

    Unknown objects fall back to repr (still visible in the report, not dropped).
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    # Containers
    if isinstance(obj, (list, tuple)):
        return [_json_safe(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _json_safe(v) for k, v in obj.items()}

    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()

    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return _json_safe(to_dict())

    return repr(obj)


@dataclass
class ReconcileReport:
    """
    Audit record of one reconciliation.

    Attributes:
        hint: Raw hint pose (z as received)
        corrected: Hint with recovered z, map frame
        relative: Pose relative to the reference origin
        reference_trajectory_id: Trajectory the pose is anchored to
        reference_origin: Origin pose of the reference trajectory
        nearest_submap: Id of the submap that supplied the height
        horizontal_distance: Hint-to-submap distance in the XY plane (m)
        candidates: Number of submaps scanned
        timestamp: When the report was generated
    """
    hint: Any
    corrected: Any
    relative: Any
    reference_trajectory_id: int
    reference_origin: Any
    nearest_submap: Any
    horizontal_distance: float
    candidates: int
    timestamp: float = field(default_factory=time.time)

    @property
    def height_correction(self) -> float:
        """Change applied to the hint's z (m)."""
        return float(self.corrected.z - self.hint.z)

    def validate(self) -> None:
        """
        Check internal consistency.

        Raises ValueError if validation fails.
        """
        if self.candidates < 1:
            raise ValueError("Report must reference at least one candidate submap.")
        if not np.isfinite(self.horizontal_distance) or self.horizontal_distance < 0.0:
            raise ValueError(f"Invalid horizontal distance: {self.horizontal_distance}")
        if self.hint.x != self.corrected.x or self.hint.y != self.corrected.y:
            raise ValueError("Height recovery must not move the hint horizontally.")

    def to_dict(self) -> dict:
        return {
            "hint": _json_safe(self.hint),
            "corrected": _json_safe(self.corrected),
            "relative": _json_safe(self.relative),
            "reference_trajectory_id": int(self.reference_trajectory_id),
            "reference_origin": _json_safe(self.reference_origin),
            "nearest_submap": _json_safe(self.nearest_submap),
            "horizontal_distance": float(self.horizontal_distance),
            "height_correction": self.height_correction,
            "candidates": int(self.candidates),
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    def summary(self) -> str:
        return (
            f"hint=({self.hint.x:.3f}, {self.hint.y:.3f}) "
            f"z {self.hint.z:.3f} -> {self.corrected.z:.3f} "
            f"from submap {self.nearest_submap} at {self.horizontal_distance:.3f} m "
            f"({self.candidates} candidates); "
            f"relative to trajectory {self.reference_trajectory_id}: "
            f"({self.relative.x:.3f}, {self.relative.y:.3f}, {self.relative.z:.3f})"
        )
