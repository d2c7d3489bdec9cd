"""
Initpose Launch File.

Launches initpose_node next to an already running cartographer_node that has
loaded a pbstream (frozen trajectory 0) and is localizing on trajectory 1.

Architecture:
    RViz "2D Pose Estimate" → /initialpose → initpose_node
        → finish_trajectory / start_trajectory (cartographer_node)
"""

import os

from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node

from ament_index_python.packages import get_package_share_directory


def generate_launch_description():
    """Generate launch description for initpose_node."""

    # =========================================================================
    # Launch Arguments
    # =========================================================================
    config_path_arg = DeclareLaunchArgument(
        "config_path",
        default_value=os.path.join(get_package_share_directory("carto_initpose"), "config", "initpose.yaml"),
        description="initpose_node parameter file.",
    )
    configuration_directory_arg = DeclareLaunchArgument(
        "configuration_directory",
        description="Cartographer Lua configuration directory (same as cartographer_node).",
    )
    configuration_basename_arg = DeclareLaunchArgument(
        "configuration_basename",
        description="Cartographer Lua configuration basename (same as cartographer_node).",
    )
    use_sim_time_arg = DeclareLaunchArgument(
        "use_sim_time",
        default_value="false",
        description="Use /clock time.",
    )

    # =========================================================================
    # Nodes
    # =========================================================================
    initpose_node = Node(
        package="carto_initpose",
        executable="initpose_node",
        name="initpose_node",
        output="screen",
        parameters=[
            LaunchConfiguration("config_path"),
            {
                "configuration_directory": LaunchConfiguration("configuration_directory"),
                "configuration_basename": LaunchConfiguration("configuration_basename"),
                "use_sim_time": LaunchConfiguration("use_sim_time"),
            },
        ],
    )

    return LaunchDescription([
        config_path_arg,
        configuration_directory_arg,
        configuration_basename_arg,
        use_sim_time_arg,
        initpose_node,
    ])
