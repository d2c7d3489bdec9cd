"""
Height recovery for 2D pose hints.

RViz's "2D Pose Estimate" carries x, y and heading but no meaningful z.
The hint's z is replaced by the z of the submap whose origin is closest in
the horizontal plane; vertical offset is not part of the distance.

Selection rule:
    best = +inf
    for each submap in iteration order:
        d = ||(submap.xy - hint.xy)||
        if d < best: take submap.z, best = d

Strict `<` means ties keep the first submap in iteration order. For a
MapSnapshot that order is SubmapId order; for a plain mapping it is the
mapping's own order; for a sequence it is the sequence index.
"""

from typing import Any, Hashable, Iterable, List, Mapping, NamedTuple, Tuple, Union

import numpy as np

from carto_initpose.common.pose import Pose
from carto_initpose.reconcile.errors import EmptyMapError
from carto_initpose.reconcile.snapshot import MapSnapshot

FragmentPoses = Union[MapSnapshot, Mapping[Hashable, Pose], Iterable[Pose]]


class NearestFragment(NamedTuple):
    """Submap chosen for height recovery."""
    fragment_id: Any  # SubmapId, mapping key, or sequence index
    distance: float  # horizontal distance to the hint (m)
    height: float  # submap z (m)
    candidates: int  # number of submaps scanned


def _fragment_items(fragment_poses: FragmentPoses) -> List[Tuple[Any, Pose]]:
    if isinstance(fragment_poses, MapSnapshot):
        return list(fragment_poses.items())
    if isinstance(fragment_poses, Mapping):
        return list(fragment_poses.items())
    return list(enumerate(fragment_poses))


def nearest_fragment(hint: Pose, fragment_poses: FragmentPoses) -> NearestFragment:
    """
    Find the submap horizontally closest to the hint.

    Raises EmptyMapError if there are no submaps.
    """
    items = _fragment_items(fragment_poses)
    if not items:
        raise EmptyMapError()

    xyz = np.array([pose.translation for _, pose in items], dtype=float).reshape(-1, 3)
    dist = np.hypot(xyz[:, 0] - hint.x, xyz[:, 1] - hint.y)
    # argmin returns the first index among equal minima.
    best = int(np.argmin(dist))

    return NearestFragment(
        fragment_id=items[best][0],
        distance=float(dist[best]),
        height=float(xyz[best, 2]),
        candidates=len(items),
    )


def recover_height(hint: Pose, fragment_poses: FragmentPoses) -> Pose:
    """
    Return the hint with z set to the nearest submap's z.

    x, y and rotation pass through unchanged. Raises EmptyMapError if there
    are no submaps.
    """
    return hint.with_z(nearest_fragment(hint, fragment_poses).height)
