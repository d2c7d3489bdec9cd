from setuptools import find_packages, setup

package_name = "carto_initpose"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    data_files=[
        ("share/ament_index/resource_index/packages", ["resource/" + package_name]),
        ("share/" + package_name, ["package.xml"]),
        (
            "share/" + package_name + "/launch",
            [
                "launch/initpose.launch.py",
            ],
        ),
        (
            "share/" + package_name + "/config",
            [
                "config/initpose.yaml",
                "config/example_snapshot.yaml",
            ],
        ),
    ],
    install_requires=["setuptools", "numpy", "pyyaml", "pydantic>=2"],
    extras_require={
        "test": ["pytest", "scipy"],
    },
    zip_safe=True,
    maintainer="Will Haber",
    maintainer_email="whab13@mit.edu",
    description="Restart Cartographer localization at an RViz 2D pose estimate, anchored to the frozen map (ROS 2)",
    license="Apache-2.0",
    tests_require=["pytest", "scipy"],
    entry_points={
        "console_scripts": [
            # /initialpose -> finish_trajectory + start_trajectory
            "initpose_node = carto_initpose.nodes.initpose_node:main",
            # Offline reconciliation against a snapshot YAML (no ROS)
            "initpose_offline = carto_initpose.tools.offline_reconcile:main",
        ],
    },
)
