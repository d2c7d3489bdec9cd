"""
Trajectory service interface used by the controller.

TrajectoryServices abstracts cartographer_node's FinishTrajectory,
StartTrajectory and TrajectoryQuery services. The ROS node implements it
with rclpy clients; tests implement it in memory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from carto_initpose.common import constants
from carto_initpose.common.pose import Pose


@dataclass(frozen=True)
class ServiceStatus:
    """cartographer_ros_msgs/StatusResponse."""
    code: int
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code == constants.STATUS_OK

    @property
    def code_name(self) -> str:
        return constants.STATUS_NAMES.get(self.code, str(self.code))


@dataclass(frozen=True)
class StartTrajectoryRequest:
    """Fields of cartographer_ros_msgs/srv/StartTrajectory request."""
    configuration_directory: str
    configuration_basename: str
    use_initial_pose: bool
    initial_pose: Pose
    relative_to_trajectory_id: int


@dataclass(frozen=True)
class StartTrajectoryResult:
    status: ServiceStatus
    trajectory_id: Optional[int] = None


class TrajectoryServices(Protocol):
    def finish_trajectory(self, trajectory_id: int) -> ServiceStatus:
        ...

    def start_trajectory(self, request: StartTrajectoryRequest) -> StartTrajectoryResult:
        ...

    def query_trajectory_origin(self, trajectory_id: int) -> Optional[Pose]:
        """First node pose of the trajectory, or None if it has no nodes."""
        ...
