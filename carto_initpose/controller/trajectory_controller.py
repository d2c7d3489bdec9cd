"""
Trajectory controller: restart localization at a reconciled pose.

Owns the id of the running trajectory (the only mutable state in the
restart path) and sequences the service calls:

    reconcile -> finish_trajectory(current) -> start_trajectory(relative pose)

Reconciliation runs first, so a hint that cannot be reconciled leaves the
running trajectory untouched.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from carto_initpose.common import constants
from carto_initpose.common.pose import Pose
from carto_initpose.common.report import ReconcileReport
from carto_initpose.controller.errors import TrajectoryServiceError
from carto_initpose.controller.services import (
    StartTrajectoryRequest,
    TrajectoryServices,
)
from carto_initpose.reconcile.reconciler import reconcile_snapshot
from carto_initpose.reconcile.snapshot import MapSnapshot

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestartResult:
    finished_trajectory_id: Optional[int]
    started_trajectory_id: int
    relative_pose: Pose
    report: ReconcileReport


class TrajectoryController:
    """
    Finishes the running trajectory and starts a new one at a hint.

    If start_trajectory times out after a successful finish, the id of any
    trajectory cartographer_node did start is unknown; current_trajectory_id
    becomes None and that trajectory is not finished by the next restart.

    Args:
        services: Cartographer trajectory services
        configuration_directory: Lua configuration directory for StartTrajectory
        configuration_basename: Lua configuration file for StartTrajectory
        reference_trajectory_id: Frozen trajectory new trajectories are anchored to
        initial_trajectory_id: Trajectory running when the controller starts
    """

    def __init__(
        self,
        services: TrajectoryServices,
        configuration_directory: str,
        configuration_basename: str,
        reference_trajectory_id: int = constants.FROZEN_TRAJECTORY_ID,
        initial_trajectory_id: Optional[int] = constants.INITIAL_TRAJECTORY_ID_DEFAULT,
    ) -> None:
        self.services = services
        self.configuration_directory = configuration_directory
        self.configuration_basename = configuration_basename
        self.reference_trajectory_id = int(reference_trajectory_id)
        self._current_trajectory_id = initial_trajectory_id
        self._last_trajectory_id = initial_trajectory_id
        # Serializes restarts; hints arriving during a restart wait their turn.
        self._lock = threading.Lock()

    @property
    def current_trajectory_id(self) -> Optional[int]:
        """Running trajectory, or None if the last restart finished it but failed to start."""
        return self._current_trajectory_id

    def resolve_snapshot(self, snapshot: MapSnapshot) -> MapSnapshot:
        """Add the reference origin from the trajectory query service if missing."""
        if snapshot.origin_of(self.reference_trajectory_id) is not None:
            return snapshot
        origin = self.services.query_trajectory_origin(self.reference_trajectory_id)
        return snapshot.with_origin(self.reference_trajectory_id, origin)

    def restart(self, hint: Pose, snapshot: MapSnapshot) -> RestartResult:
        """
        Restart localization at `hint`.

        Raises:
            ReconcileError: hint could not be reconciled (nothing was finished)
            TrajectoryServiceError: a service call failed
        """
        with self._lock:
            snapshot = self.resolve_snapshot(snapshot)
            relative, report = reconcile_snapshot(hint, snapshot, self.reference_trajectory_id)
            _logger.info(f"Reconciled initial pose: {report.summary()}")

            finished = self._current_trajectory_id
            if finished is not None:
                status = self.services.finish_trajectory(finished)
                if not status.ok:
                    raise TrajectoryServiceError("finish_trajectory", status.message, status.code)
                self._current_trajectory_id = None
                _logger.info(f"Finished trajectory {finished}")

            request = StartTrajectoryRequest(
                configuration_directory=self.configuration_directory,
                configuration_basename=self.configuration_basename,
                use_initial_pose=True,
                initial_pose=relative,
                relative_to_trajectory_id=self.reference_trajectory_id,
            )
            try:
                result = self.services.start_trajectory(request)
            except TrajectoryServiceError as e:
                if e.code is None:
                    _logger.warning(
                        "start_trajectory got no response; cartographer_node may be "
                        "running a trajectory this controller does not track"
                    )
                raise
            if not result.status.ok:
                raise TrajectoryServiceError(
                    "start_trajectory", result.status.message, result.status.code
                )

            if result.trajectory_id is not None:
                started = int(result.trajectory_id)
            elif self._last_trajectory_id is not None:
                started = self._last_trajectory_id + 1
            else:
                started = self.reference_trajectory_id + 1
            self._current_trajectory_id = started
            self._last_trajectory_id = started
            _logger.info(f"Started trajectory {started} relative to trajectory {self.reference_trajectory_id}")

            return RestartResult(
                finished_trajectory_id=finished,
                started_trajectory_id=started,
                relative_pose=relative,
                report=report,
            )
