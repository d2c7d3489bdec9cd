"""
carto_initpose constants.

=============================================================================
CONVENTION QUICK REFERENCE
=============================================================================

POSES:
  translation: [x, y, z] in meters, map frame
  rotation:    unit quaternion in ROS order [qx, qy, qz, qw]
  Composition: T_a * T_b -> t = t_a + R_a t_b, q = q_a q_b

RELATIVE POSE:
  T_rel = T_ref^{-1} * T_hint
  T_ref is the first node pose of the frozen (reference) trajectory.

SUBMAP ORDER:
  Submaps iterate in (trajectory_id, submap_index) order, the order of
  Cartographer's MapById. Nearest-submap ties keep the first in that order.
=============================================================================
"""

# =============================================================================
# TRAJECTORIES
# =============================================================================

# The frozen trajectory loaded from the pbstream; new trajectories are
# started relative to its origin.
FROZEN_TRAJECTORY_ID = 0

# cartographer_node starts its first live trajectory right after the frozen
# state, so the trajectory to finish on the first restart is 1.
INITIAL_TRAJECTORY_ID_DEFAULT = 1

# =============================================================================
# TOPICS AND SERVICES (cartographer_ros node_constants)
# =============================================================================

INITIAL_POSE_TOPIC_DEFAULT = "/initialpose"
SUBMAP_LIST_TOPIC_DEFAULT = "/submap_list"
REPORT_TOPIC_DEFAULT = "/initpose/report"

FINISH_TRAJECTORY_SERVICE_DEFAULT = "finish_trajectory"
START_TRAJECTORY_SERVICE_DEFAULT = "start_trajectory"
TRAJECTORY_QUERY_SERVICE_DEFAULT = "trajectory_query"

SERVICE_TIMEOUT_SEC_DEFAULT = 5.0
SERVICE_WAIT_SEC_DEFAULT = 1.0

# =============================================================================
# STATUS CODES (cartographer_ros_msgs/StatusCode)
# =============================================================================

STATUS_OK = 0
STATUS_CANCELLED = 1
STATUS_UNKNOWN = 2
STATUS_INVALID_ARGUMENT = 3
STATUS_DEADLINE_EXCEEDED = 4
STATUS_NOT_FOUND = 5
STATUS_ALREADY_EXISTS = 6
STATUS_PERMISSION_DENIED = 7
STATUS_RESOURCE_EXHAUSTED = 8
STATUS_FAILED_PRECONDITION = 9
STATUS_ABORTED = 10
STATUS_OUT_OF_RANGE = 11
STATUS_UNIMPLEMENTED = 12
STATUS_INTERNAL = 13
STATUS_UNAVAILABLE = 14
STATUS_DATA_LOSS = 15

STATUS_NAMES = {
    STATUS_OK: "OK",
    STATUS_CANCELLED: "CANCELLED",
    STATUS_UNKNOWN: "UNKNOWN",
    STATUS_INVALID_ARGUMENT: "INVALID_ARGUMENT",
    STATUS_DEADLINE_EXCEEDED: "DEADLINE_EXCEEDED",
    STATUS_NOT_FOUND: "NOT_FOUND",
    STATUS_ALREADY_EXISTS: "ALREADY_EXISTS",
    STATUS_PERMISSION_DENIED: "PERMISSION_DENIED",
    STATUS_RESOURCE_EXHAUSTED: "RESOURCE_EXHAUSTED",
    STATUS_FAILED_PRECONDITION: "FAILED_PRECONDITION",
    STATUS_ABORTED: "ABORTED",
    STATUS_OUT_OF_RANGE: "OUT_OF_RANGE",
    STATUS_UNIMPLEMENTED: "UNIMPLEMENTED",
    STATUS_INTERNAL: "INTERNAL",
    STATUS_UNAVAILABLE: "UNAVAILABLE",
    STATUS_DATA_LOSS: "DATA_LOSS",
}

# =============================================================================
# NUMERICS (stability, not policy)
# =============================================================================

# Quaternions with a norm below this are rejected as degenerate.
QUAT_NORM_EPSILON = 1e-12

# Tolerance used by Pose.allclose and the round-trip checks.
POSE_ATOL = 1e-9
