import os
import sys
from types import SimpleNamespace
from typing import Any, Dict

import numpy as np
import pytest

# Ensure local package import works for pytest collection.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

from carto_initpose.common.pose import Pose  # noqa: E402

CONFIG_DIR = os.path.join(_PKG_ROOT, "config")


# =============================================================================
# Config Fixtures
# =============================================================================


def _load_yaml_file(path: str) -> Dict[str, Any]:
    """Load a YAML config file, handling the ros__parameters wrapper."""
    import yaml
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    for key in ("initpose_node", "/**"):
        if key in data and "ros__parameters" in data.get(key, {}):
            return data[key]["ros__parameters"]
    return data


@pytest.fixture
def node_config_path() -> str:
    return os.path.join(CONFIG_DIR, "initpose.yaml")


@pytest.fixture
def prod_config(node_config_path) -> Dict[str, Any]:
    """Parameters shipped in config/initpose.yaml (unwrapped)."""
    return _load_yaml_file(node_config_path)


@pytest.fixture
def example_snapshot_path() -> str:
    return os.path.join(CONFIG_DIR, "example_snapshot.yaml")


# =============================================================================
# Pose Fixtures
# =============================================================================


def random_quat(rng: np.random.Generator) -> np.ndarray:
    q = rng.normal(size=4)
    return q / np.linalg.norm(q)


def random_pose(rng: np.random.Generator, scale: float = 10.0) -> Pose:
    return Pose(rng.uniform(-scale, scale, size=3), random_quat(rng))


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def identity_pose() -> Pose:
    return Pose.identity()


@pytest.fixture
def random_poses(rng):
    """Twenty random rigid transforms."""
    return [random_pose(rng) for _ in range(20)]


# =============================================================================
# Message Doubles
# =============================================================================


def pose_msg(x=0.0, y=0.0, z=0.0, qx=0.0, qy=0.0, qz=0.0, qw=1.0) -> SimpleNamespace:
    """Stand-in for geometry_msgs/Pose."""
    return SimpleNamespace(
        position=SimpleNamespace(x=x, y=y, z=z),
        orientation=SimpleNamespace(x=qx, y=qy, z=qz, w=qw),
    )


def submap_entry(trajectory_id: int, submap_index: int, x: float, y: float, z: float) -> SimpleNamespace:
    """Stand-in for cartographer_ros_msgs/SubmapEntry."""
    return SimpleNamespace(
        trajectory_id=trajectory_id,
        submap_index=submap_index,
        submap_version=1,
        pose=pose_msg(x, y, z),
        is_frozen=trajectory_id == 0,
    )
