"""Pydantic parameter models for carto_initpose nodes."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from carto_initpose.common import constants


class InitposeParams(BaseModel):
    """initpose_node parameter model."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    use_sim_time: bool = False

    # Forwarded to StartTrajectory; same Lua configuration cartographer_node runs with.
    configuration_directory: str
    configuration_basename: str

    initial_pose_topic: str = constants.INITIAL_POSE_TOPIC_DEFAULT
    submap_list_topic: str = constants.SUBMAP_LIST_TOPIC_DEFAULT
    report_topic: str = constants.REPORT_TOPIC_DEFAULT

    finish_trajectory_service: str = constants.FINISH_TRAJECTORY_SERVICE_DEFAULT
    start_trajectory_service: str = constants.START_TRAJECTORY_SERVICE_DEFAULT
    trajectory_query_service: str = constants.TRAJECTORY_QUERY_SERVICE_DEFAULT

    reference_trajectory_id: int = Field(constants.FROZEN_TRAJECTORY_ID, ge=0)
    initial_trajectory_id: int = Field(constants.INITIAL_TRAJECTORY_ID_DEFAULT, ge=0)
    service_timeout_sec: float = Field(constants.SERVICE_TIMEOUT_SEC_DEFAULT, gt=0.0)
    service_wait_sec: float = Field(constants.SERVICE_WAIT_SEC_DEFAULT, ge=0.0)

    @field_validator("configuration_directory", "configuration_basename")
    @classmethod
    def _non_empty(cls, value: str, info) -> str:
        if not value.strip():
            raise ValueError(f"{info.field_name} is missing")
        return value

    @field_validator("initial_pose_topic", "submap_list_topic")
    @classmethod
    def _topic_non_empty(cls, value: str, info) -> str:
        if not value.strip():
            raise ValueError(f"{info.field_name} must name a topic")
        return value


def unwrap_ros_parameters(data: Dict[str, Any], node_name: str = "initpose_node") -> Dict[str, Any]:
    """
    Strip the ROS 2 `<node>: ros__parameters:` wrapper from a parameter YAML.

    Accepts the node's own name, the `/**` wildcard, or an already flat dict.
    """
    for key in (node_name, f"/{node_name}", "/**"):
        section = data.get(key)
        if isinstance(section, dict) and "ros__parameters" in section:
            return dict(section["ros__parameters"] or {})
    return dict(data)


def load_params_yaml(path: str, node_name: str = "initpose_node") -> InitposeParams:
    """Load and validate node parameters from a ROS 2 parameter YAML file."""
    import yaml

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return InitposeParams(**unwrap_ros_parameters(data, node_name))
