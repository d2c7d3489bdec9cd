"""
=============================================================================
INITPOSE NODE - Restart Cartographer Localization at an RViz Pose Estimate
=============================================================================

Listens for "2D Pose Estimate" clicks and restarts cartographer_node's
localization trajectory there, anchored to the frozen (pbstream) trajectory.

Topic / Service Flow:
    /initialpose (PoseWithCovarianceStamped) ─┐
    /submap_list (SubmapList, latest kept) ───┼→ [this node]
                                              │     reconcile (height + relative pose)
    trajectory_query (reference origin) ──────┘     finish_trajectory(current)
                                                    start_trajectory(relative pose)
    /initpose/report (String, JSON ReconcileReport)

The hint's z is replaced by the z of the horizontally nearest submap, since
RViz only supplies a 2D position.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

import rclpy
from cartographer_ros_msgs.msg import SubmapList
from cartographer_ros_msgs.srv import FinishTrajectory, StartTrajectory, TrajectoryQuery
from geometry_msgs.msg import PoseWithCovarianceStamped
from rclpy.callback_groups import MutuallyExclusiveCallbackGroup, ReentrantCallbackGroup
from rclpy.executors import MultiThreadedExecutor
from rclpy.node import Node
from rclpy.parameter import Parameter
from rclpy.qos import DurabilityPolicy, HistoryPolicy, QoSProfile, ReliabilityPolicy
from std_msgs.msg import String

from carto_initpose.common import constants
from carto_initpose.common.param_models import InitposeParams
from carto_initpose.common.pose import Pose, fill_pose_msg, pose_from_msg
from carto_initpose.controller import (
    ServiceStatus,
    StartTrajectoryRequest,
    StartTrajectoryResult,
    TrajectoryController,
    TrajectoryServiceError,
)
from carto_initpose.reconcile import (
    MapSnapshot,
    MissingReferenceOriginError,
    ReconcileError,
    reference_origin_from_nodes,
)


class RosTrajectoryServices:
    """TrajectoryServices backed by rclpy service clients of cartographer_node."""

    def __init__(self, node: Node, params: InitposeParams) -> None:
        self._node = node
        self._timeout_sec = params.service_timeout_sec
        self._wait_sec = params.service_wait_sec
        # Responses must be processed while the /initialpose callback blocks.
        group = ReentrantCallbackGroup()
        self._finish = node.create_client(
            FinishTrajectory, params.finish_trajectory_service, callback_group=group
        )
        self._start = node.create_client(
            StartTrajectory, params.start_trajectory_service, callback_group=group
        )
        self._query = node.create_client(
            TrajectoryQuery, params.trajectory_query_service, callback_group=group
        )

    def _call(self, client, request, name: str):
        if not client.wait_for_service(timeout_sec=self._wait_sec):
            raise TrajectoryServiceError(name, "service not available")
        done = threading.Event()
        future = client.call_async(request)
        future.add_done_callback(lambda _: done.set())
        if not done.wait(timeout=self._timeout_sec):
            client.remove_pending_request(future)
            raise TrajectoryServiceError(name, f"no response within {self._timeout_sec:.1f}s")
        if future.exception() is not None:
            raise TrajectoryServiceError(name, str(future.exception()))
        return future.result()

    def finish_trajectory(self, trajectory_id: int) -> ServiceStatus:
        request = FinishTrajectory.Request()
        request.trajectory_id = int(trajectory_id)
        response = self._call(self._finish, request, "finish_trajectory")
        return ServiceStatus(int(response.status.code), str(response.status.message))

    def start_trajectory(self, request: StartTrajectoryRequest) -> StartTrajectoryResult:
        msg = StartTrajectory.Request()
        msg.configuration_directory = request.configuration_directory
        msg.configuration_basename = request.configuration_basename
        msg.use_initial_pose = bool(request.use_initial_pose)
        msg.relative_to_trajectory_id = int(request.relative_to_trajectory_id)
        fill_pose_msg(request.initial_pose, msg.initial_pose)
        response = self._call(self._start, msg, "start_trajectory")
        return StartTrajectoryResult(
            status=ServiceStatus(int(response.status.code), str(response.status.message)),
            trajectory_id=int(response.trajectory_id),
        )

    def query_trajectory_origin(self, trajectory_id: int) -> Optional[Pose]:
        request = TrajectoryQuery.Request()
        request.trajectory_id = int(trajectory_id)
        response = self._call(self._query, request, "trajectory_query")
        code = int(response.status.code)
        if code == constants.STATUS_NOT_FOUND:
            return None
        if code != constants.STATUS_OK:
            raise TrajectoryServiceError("trajectory_query", str(response.status.message), code)
        try:
            return reference_origin_from_nodes(
                [pose_from_msg(p.pose) for p in response.trajectory], trajectory_id
            )
        except MissingReferenceOriginError:
            return None


class InitposeNode(Node):
    """
    Restarts localization at each /initialpose hint.

    Keeps the latest /submap_list as the map snapshot source; each hint
    freezes a MapSnapshot copy of it before reconciling.
    """

    def __init__(self, parameter_overrides: Optional[Dict[str, Any]] = None) -> None:
        overrides = None
        if parameter_overrides:
            overrides = [Parameter(k, value=v) for k, v in parameter_overrides.items()]
        super().__init__("initpose_node", parameter_overrides=overrides)

        # Parameters
        self.declare_parameter("configuration_directory", "")
        self.declare_parameter("configuration_basename", "")
        self.declare_parameter("initial_pose_topic", constants.INITIAL_POSE_TOPIC_DEFAULT)
        self.declare_parameter("submap_list_topic", constants.SUBMAP_LIST_TOPIC_DEFAULT)
        self.declare_parameter("report_topic", constants.REPORT_TOPIC_DEFAULT)
        self.declare_parameter("finish_trajectory_service", constants.FINISH_TRAJECTORY_SERVICE_DEFAULT)
        self.declare_parameter("start_trajectory_service", constants.START_TRAJECTORY_SERVICE_DEFAULT)
        self.declare_parameter("trajectory_query_service", constants.TRAJECTORY_QUERY_SERVICE_DEFAULT)
        self.declare_parameter("reference_trajectory_id", constants.FROZEN_TRAJECTORY_ID)
        self.declare_parameter("initial_trajectory_id", constants.INITIAL_TRAJECTORY_ID_DEFAULT)
        self.declare_parameter("service_timeout_sec", constants.SERVICE_TIMEOUT_SEC_DEFAULT)
        self.declare_parameter("service_wait_sec", constants.SERVICE_WAIT_SEC_DEFAULT)

        self.params = InitposeParams(
            use_sim_time=bool(self.get_parameter("use_sim_time").value),
            configuration_directory=str(self.get_parameter("configuration_directory").value),
            configuration_basename=str(self.get_parameter("configuration_basename").value),
            initial_pose_topic=str(self.get_parameter("initial_pose_topic").value),
            submap_list_topic=str(self.get_parameter("submap_list_topic").value),
            report_topic=str(self.get_parameter("report_topic").value),
            finish_trajectory_service=str(self.get_parameter("finish_trajectory_service").value),
            start_trajectory_service=str(self.get_parameter("start_trajectory_service").value),
            trajectory_query_service=str(self.get_parameter("trajectory_query_service").value),
            reference_trajectory_id=int(self.get_parameter("reference_trajectory_id").value),
            initial_trajectory_id=int(self.get_parameter("initial_trajectory_id").value),
            service_timeout_sec=float(self.get_parameter("service_timeout_sec").value),
            service_wait_sec=float(self.get_parameter("service_wait_sec").value),
        )
        p = self.params

        self.controller = TrajectoryController(
            RosTrajectoryServices(self, p),
            configuration_directory=p.configuration_directory,
            configuration_basename=p.configuration_basename,
            reference_trajectory_id=p.reference_trajectory_id,
            initial_trajectory_id=p.initial_trajectory_id,
        )

        # QoS:
        # - /initialpose from RViz: RELIABLE, depth 1 (only the latest click matters).
        # - /submap_list from cartographer_node: RELIABLE, latest kept.
        qos_hint = QoSProfile(
            reliability=ReliabilityPolicy.RELIABLE,
            durability=DurabilityPolicy.VOLATILE,
            history=HistoryPolicy.KEEP_LAST,
            depth=1,
        )
        qos_submaps = QoSProfile(
            reliability=ReliabilityPolicy.RELIABLE,
            durability=DurabilityPolicy.VOLATILE,
            history=HistoryPolicy.KEEP_LAST,
            depth=1,
        )

        self._submap_lock = threading.Lock()
        self._latest_submaps: Optional[SubmapList] = None

        self.sub_submaps = self.create_subscription(
            SubmapList, p.submap_list_topic, self._on_submap_list, qos_submaps,
            callback_group=MutuallyExclusiveCallbackGroup(),
        )
        self.sub_hint = self.create_subscription(
            PoseWithCovarianceStamped, p.initial_pose_topic, self._on_initial_pose, qos_hint,
            callback_group=MutuallyExclusiveCallbackGroup(),
        )
        self.pub_report = None
        if p.report_topic:
            self.pub_report = self.create_publisher(String, p.report_topic, 10)

        self._restart_count = 0

        self.get_logger().info("=" * 60)
        self.get_logger().info("INITPOSE NODE")
        self.get_logger().info("=" * 60)
        self.get_logger().info(f"  Hint:        {p.initial_pose_topic}")
        self.get_logger().info(f"  Submaps:     {p.submap_list_topic}")
        self.get_logger().info(f"  Config:      {p.configuration_directory}/{p.configuration_basename}")
        self.get_logger().info(f"  Reference:   trajectory {p.reference_trajectory_id}")
        self.get_logger().info(f"  Running:     trajectory {p.initial_trajectory_id}")
        if self.pub_report is not None:
            self.get_logger().info(f"  Report:      {p.report_topic}")
        self.get_logger().info("=" * 60)

    def _on_submap_list(self, msg: SubmapList) -> None:
        with self._submap_lock:
            self._latest_submaps = msg

    def freeze_snapshot(self) -> MapSnapshot:
        """Copy of the latest submap list; empty if none has been received."""
        with self._submap_lock:
            msg = self._latest_submaps
            if msg is None:
                return MapSnapshot()
            return MapSnapshot.from_submap_list(msg)

    def _on_initial_pose(self, msg: PoseWithCovarianceStamped) -> None:
        try:
            hint = pose_from_msg(msg.pose.pose)
        except ValueError as e:
            self.get_logger().error(f"Ignoring invalid initial pose hint: {e}")
            return
        self.get_logger().info(
            f"Initial pose hint at ({hint.x:.3f}, {hint.y:.3f}), yaw {hint.yaw:.3f} rad"
        )
        snapshot = self.freeze_snapshot()

        try:
            result = self.controller.restart(hint, snapshot)
        except ReconcileError as e:
            self.get_logger().error(f"Cannot reconcile initial pose, trajectory not restarted: {e}")
            return
        except TrajectoryServiceError as e:
            self.get_logger().error(str(e))
            return

        self._restart_count += 1
        self.get_logger().info(
            f"Restart #{self._restart_count}: trajectory {result.finished_trajectory_id} -> "
            f"{result.started_trajectory_id}; {result.report.summary()}"
        )
        if self.pub_report is not None:
            out = String()
            out.data = result.report.to_json()
            self.pub_report.publish(out)


def main() -> None:
    """Entry point for initpose_node."""
    rclpy.init()
    node = InitposeNode()
    executor = MultiThreadedExecutor()
    executor.add_node(node)

    try:
        executor.spin()
    except KeyboardInterrupt:
        pass
    finally:
        executor.shutdown()
        node.destroy_node()
        rclpy.shutdown()


if __name__ == "__main__":
    main()
