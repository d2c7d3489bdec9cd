"""ROS 2 nodes for carto_initpose."""
