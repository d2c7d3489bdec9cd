"""
Map snapshot: frozen submap poses and trajectory origins.

A MapSnapshot is the read-only view of the pose graph that one
reconciliation works on. It is immutable after construction, so it can be
handed to concurrent reconcile calls without locking.

Submaps are kept sorted by SubmapId (trajectory_id, submap_index), the
iteration order of Cartographer's MapById. Nearest-submap ties resolve to
the first submap in this order.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, NamedTuple, Optional, Tuple

from carto_initpose.common.pose import Pose, pose_from_msg

_logger = logging.getLogger(__name__)


class SubmapId(NamedTuple):
    trajectory_id: int
    submap_index: int

    def __str__(self) -> str:
        return f"({self.trajectory_id}, {self.submap_index})"


class MapSnapshot:
    """
    Immutable snapshot of submap poses and trajectory origins.

    Args:
        submap_poses: SubmapId -> Pose (any order; stored sorted)
        trajectory_origins: trajectory_id -> first node pose
    """

    __slots__ = ("_submaps", "_submap_view", "_origins")

    def __init__(
        self,
        submap_poses: Optional[Mapping[SubmapId, Pose]] = None,
        trajectory_origins: Optional[Mapping[int, Pose]] = None,
    ) -> None:
        items = sorted(
            ((SubmapId(int(k[0]), int(k[1])), v) for k, v in (submap_poses or {}).items()),
            key=lambda kv: kv[0],
        )
        self._submaps: Tuple[Tuple[SubmapId, Pose], ...] = tuple(items)
        self._submap_view = MappingProxyType(dict(self._submaps))
        self._origins = MappingProxyType(
            {int(k): v for k, v in (trajectory_origins or {}).items()}
        )

    # -------------------------------------------------------------------------
    # Construction from ROS messages
    # -------------------------------------------------------------------------

    @classmethod
    def from_submap_entries(
        cls,
        entries: Iterable[Any],
        trajectory_origins: Optional[Mapping[int, Pose]] = None,
    ) -> "MapSnapshot":
        """
        Build from cartographer_ros_msgs/SubmapEntry items.

        Entries are duck-typed: `trajectory_id`, `submap_index`, `pose`
        (geometry_msgs/Pose). A repeated SubmapId keeps the last entry.
        """
        poses = {}
        for entry in entries:
            key = SubmapId(int(entry.trajectory_id), int(entry.submap_index))
            poses[key] = pose_from_msg(entry.pose)
        return cls(poses, trajectory_origins)

    @classmethod
    def from_submap_list(
        cls,
        msg: Any,
        trajectory_origins: Optional[Mapping[int, Pose]] = None,
    ) -> "MapSnapshot":
        """Build from a cartographer_ros_msgs/SubmapList message."""
        return cls.from_submap_entries(msg.submap, trajectory_origins)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MapSnapshot":
        """
        Build from the YAML layout:

            submaps:
              - {trajectory_id: 0, submap_index: 0, pose: {position: ..., orientation: ...}}
            trajectory_origins:
              0: {position: ..., orientation: ...}
        """
        poses = {}
        for i, entry in enumerate(data.get("submaps") or []):
            try:
                key = SubmapId(int(entry["trajectory_id"]), int(entry["submap_index"]))
            except KeyError as e:
                raise ValueError(f"submaps[{i}] missing field {e}") from e
            poses[key] = Pose.from_dict(entry.get("pose") or {})
        # A null origin means the trajectory has no recorded first node.
        origins = {
            int(k): Pose.from_dict(v)
            for k, v in (data.get("trajectory_origins") or {}).items()
            if v is not None
        }
        return cls(poses, origins)

    def with_origin(self, trajectory_id: int, origin: Optional[Pose]) -> "MapSnapshot":
        """Copy with the origin of `trajectory_id` set (None removes it)."""
        origins = dict(self._origins)
        if origin is None:
            origins.pop(int(trajectory_id), None)
        else:
            origins[int(trajectory_id)] = origin
        return MapSnapshot(self._submap_view, origins)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def submap_poses(self) -> Mapping[SubmapId, Pose]:
        """Read-only SubmapId -> Pose view, in SubmapId order."""
        return self._submap_view

    @property
    def trajectory_origins(self) -> Mapping[int, Pose]:
        return self._origins

    def origin_of(self, trajectory_id: int) -> Optional[Pose]:
        return self._origins.get(int(trajectory_id))

    def items(self) -> Iterator[Tuple[SubmapId, Pose]]:
        return iter(self._submaps)

    def trajectory_ids(self) -> Tuple[int, ...]:
        return tuple(sorted({k.trajectory_id for k, _ in self._submaps}))

    def __len__(self) -> int:
        return len(self._submaps)

    def __bool__(self) -> bool:
        return bool(self._submaps)

    def __repr__(self) -> str:
        return (
            f"MapSnapshot(submaps={len(self._submaps)}, "
            f"trajectories={list(self.trajectory_ids())}, "
            f"origins={sorted(self._origins)})"
        )


def load_snapshot(path: str) -> MapSnapshot:
    """Load a MapSnapshot from a YAML file (see MapSnapshot.from_dict)."""
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot file must contain a mapping (from {path})")
    snapshot = MapSnapshot.from_dict(data)
    _logger.info(f"Loaded {snapshot!r} from {path}")
    return snapshot
