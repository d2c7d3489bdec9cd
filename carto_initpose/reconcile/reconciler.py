"""
Pose reconciliation: 2D hint -> relative 3D initial pose.

Pipeline (fixed order, first error wins):
    1. recover_height     hint.z := z of the horizontally nearest submap
    2. relative_transform T_ref^{-1} * corrected

Both steps are pure; nothing is cached between calls, so concurrent calls
on independent (or immutable) snapshots do not interact.
"""

import logging
from typing import Optional, Tuple

from carto_initpose.common.constants import FROZEN_TRAJECTORY_ID
from carto_initpose.common.pose import Pose
from carto_initpose.common.report import ReconcileReport
from carto_initpose.reconcile.height import FragmentPoses, nearest_fragment, recover_height
from carto_initpose.reconcile.relative import relative_transform
from carto_initpose.reconcile.snapshot import MapSnapshot

_logger = logging.getLogger(__name__)


def reconcile(
    hint: Pose,
    fragment_snapshot: FragmentPoses,
    reference_origin: Optional[Pose],
) -> Pose:
    """
    Turn a 2D hint into a pose relative to the reference origin.

    Raises:
        EmptyMapError: `fragment_snapshot` has no submaps
        MissingReferenceOriginError: `reference_origin` is None
    """
    corrected = recover_height(hint, fragment_snapshot)
    return relative_transform(corrected, reference_origin)


def reconcile_with_report(
    hint: Pose,
    fragment_snapshot: FragmentPoses,
    reference_origin: Optional[Pose],
    reference_trajectory_id: int = FROZEN_TRAJECTORY_ID,
) -> Tuple[Pose, ReconcileReport]:
    """reconcile() plus a ReconcileReport describing how the pose was obtained."""
    nearest = nearest_fragment(hint, fragment_snapshot)
    corrected = hint.with_z(nearest.height)
    relative = relative_transform(corrected, reference_origin, reference_trajectory_id)

    report = ReconcileReport(
        hint=hint,
        corrected=corrected,
        relative=relative,
        reference_trajectory_id=reference_trajectory_id,
        reference_origin=reference_origin,
        nearest_submap=nearest.fragment_id,
        horizontal_distance=nearest.distance,
        candidates=nearest.candidates,
    )
    report.validate()
    _logger.debug(report.summary())
    return relative, report


def reconcile_snapshot(
    hint: Pose,
    snapshot: MapSnapshot,
    reference_trajectory_id: int = FROZEN_TRAJECTORY_ID,
) -> Tuple[Pose, ReconcileReport]:
    """Reconcile against a MapSnapshot, anchoring to `reference_trajectory_id`."""
    return reconcile_with_report(
        hint,
        snapshot,
        snapshot.origin_of(reference_trajectory_id),
        reference_trajectory_id,
    )
