"""
Trajectory control for carto_initpose.

ORCHESTRATION ONLY: pose math lives in carto_initpose.reconcile.
"""

from carto_initpose.controller.errors import TrajectoryServiceError
from carto_initpose.controller.services import (
    ServiceStatus,
    StartTrajectoryRequest,
    StartTrajectoryResult,
    TrajectoryServices,
)
from carto_initpose.controller.trajectory_controller import RestartResult, TrajectoryController

__all__ = [
    "TrajectoryServiceError",
    "ServiceStatus",
    "StartTrajectoryRequest",
    "StartTrajectoryResult",
    "TrajectoryServices",
    "RestartResult",
    "TrajectoryController",
]
