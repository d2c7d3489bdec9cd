"""
Pose reconciliation for carto_initpose.

Pure functions only: no ROS imports, no state between calls.

Modules:
- snapshot: MapSnapshot / SubmapId (frozen pose-graph view)
- height: nearest-submap height recovery
- relative: relative transform against the reference origin
- reconciler: reconcile() entry point
- errors: ReconcileError hierarchy
"""

from carto_initpose.reconcile.errors import (
    EmptyMapError,
    MissingReferenceOriginError,
    ReconcileError,
)
from carto_initpose.reconcile.height import NearestFragment, nearest_fragment, recover_height
from carto_initpose.reconcile.reconciler import (
    reconcile,
    reconcile_snapshot,
    reconcile_with_report,
)
from carto_initpose.reconcile.relative import reference_origin_from_nodes, relative_transform
from carto_initpose.reconcile.snapshot import MapSnapshot, SubmapId, load_snapshot

__all__ = [
    "EmptyMapError",
    "MissingReferenceOriginError",
    "ReconcileError",
    "NearestFragment",
    "nearest_fragment",
    "recover_height",
    "reconcile",
    "reconcile_snapshot",
    "reconcile_with_report",
    "reference_origin_from_nodes",
    "relative_transform",
    "MapSnapshot",
    "SubmapId",
    "load_snapshot",
]
