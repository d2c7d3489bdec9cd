"""
Relative initial pose against the reference trajectory.

cartographer_node's StartTrajectory with `relative_to_trajectory_id` expects
the initial pose expressed in the frame of that trajectory's first node:

    T_rel = T_ref^{-1} * T_map

where T_ref is the reference trajectory's origin in the map frame and T_map
the height-corrected hint.
"""

from typing import Optional, Sequence

from carto_initpose.common.pose import Pose
from carto_initpose.reconcile.errors import MissingReferenceOriginError


def reference_origin_from_nodes(
    node_poses: Sequence[Pose], trajectory_id: Optional[int] = None
) -> Pose:
    """First node pose of a trajectory; MissingReferenceOriginError if it has none."""
    if not node_poses:
        raise MissingReferenceOriginError(trajectory_id)
    return node_poses[0]


def relative_transform(
    corrected: Pose,
    reference_origin: Optional[Pose],
    trajectory_id: Optional[int] = None,
) -> Pose:
    """
    Express `corrected` in the frame of `reference_origin`.

    Raises MissingReferenceOriginError if `reference_origin` is None.
    """
    if reference_origin is None:
        raise MissingReferenceOriginError(trajectory_id)
    return reference_origin.inverse() * corrected
