"""
Tests for TrajectoryController with in-memory trajectory services.

The controller must reconcile before finishing the running trajectory,
and must own the running-trajectory id (no process-wide counter).
"""

import logging
from typing import List, Optional

import numpy as np
import pytest

from carto_initpose.common import constants
from carto_initpose.common.pose import Pose
from carto_initpose.controller import (
    ServiceStatus,
    StartTrajectoryRequest,
    StartTrajectoryResult,
    TrajectoryController,
    TrajectoryServiceError,
)
from carto_initpose.reconcile import EmptyMapError, MapSnapshot, MissingReferenceOriginError, SubmapId


def _at(x: float, y: float, z: float) -> Pose:
    return Pose([x, y, z], [0.0, 0.0, 0.0, 1.0])


class FakeServices:
    """Records calls; hands out sequential trajectory ids like cartographer_node."""

    def __init__(self, origin: Optional[Pose] = None, next_id: int = 2) -> None:
        self.origin = origin
        self.next_id = next_id
        self.finish_status = ServiceStatus(constants.STATUS_OK, "")
        self.start_status = ServiceStatus(constants.STATUS_OK, "")
        self.return_id = True
        self.calls: List[tuple] = []

    def finish_trajectory(self, trajectory_id: int) -> ServiceStatus:
        self.calls.append(("finish", trajectory_id))
        return self.finish_status

    def start_trajectory(self, request: StartTrajectoryRequest) -> StartTrajectoryResult:
        self.calls.append(("start", request))
        if not self.start_status.ok:
            return StartTrajectoryResult(self.start_status)
        trajectory_id = self.next_id
        self.next_id += 1
        return StartTrajectoryResult(self.start_status, trajectory_id if self.return_id else None)

    def query_trajectory_origin(self, trajectory_id: int) -> Optional[Pose]:
        self.calls.append(("query", trajectory_id))
        return self.origin


@pytest.fixture
def snapshot() -> MapSnapshot:
    return MapSnapshot({
        SubmapId(0, 0): _at(0.0, 0.0, 1.0),
        SubmapId(0, 1): _at(2.0, 3.0, 7.0),
        SubmapId(0, 2): _at(5.0, 5.0, 2.0),
    })


def _controller(services: FakeServices) -> TrajectoryController:
    return TrajectoryController(
        services,
        configuration_directory="/config",
        configuration_basename="localization.lua",
    )


class TestRestart:

    def test_finish_then_start(self, snapshot):
        services = FakeServices(origin=Pose.identity())
        controller = _controller(services)
        result = controller.restart(_at(2.0, 3.0, 0.0), snapshot)

        kinds = [c[0] for c in services.calls]
        assert kinds == ["query", "finish", "start"]
        assert services.calls[1] == ("finish", 1)
        request = services.calls[2][1]
        assert request.configuration_directory == "/config"
        assert request.configuration_basename == "localization.lua"
        assert request.use_initial_pose is True
        assert request.relative_to_trajectory_id == 0
        assert np.array_equal(request.initial_pose.translation, [2.0, 3.0, 7.0])

        assert result.finished_trajectory_id == 1
        assert result.started_trajectory_id == 2
        assert controller.current_trajectory_id == 2
        assert result.report.nearest_submap == SubmapId(0, 1)

    def test_trajectory_id_advances(self, snapshot):
        services = FakeServices(origin=Pose.identity())
        controller = _controller(services)
        controller.restart(_at(2.0, 3.0, 0.0), snapshot)
        controller.restart(_at(5.0, 5.0, 0.0), snapshot)
        finished = [c[1] for c in services.calls if c[0] == "finish"]
        assert finished == [1, 2]
        assert controller.current_trajectory_id == 3

    def test_controllers_do_not_share_ids(self, snapshot):
        a = _controller(FakeServices(origin=Pose.identity()))
        b = _controller(FakeServices(origin=Pose.identity(), next_id=7))
        a.restart(_at(0.0, 0.0, 0.0), snapshot)
        b.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert a.current_trajectory_id == 2
        assert b.current_trajectory_id == 7

    def test_missing_started_id_falls_back_to_increment(self, snapshot):
        services = FakeServices(origin=Pose.identity())
        services.return_id = False
        controller = _controller(services)
        controller.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert controller.current_trajectory_id == 2

    def test_snapshot_origin_skips_query(self, snapshot):
        services = FakeServices(origin=None)
        controller = _controller(services)
        result = controller.restart(_at(2.0, 3.0, 0.0), snapshot.with_origin(0, _at(1.0, 1.0, 0.0)))
        assert "query" not in [c[0] for c in services.calls]
        assert np.allclose(result.relative_pose.translation, [1.0, 2.0, 7.0])


class TestReconcileFailures:
    """A hint that cannot be reconciled leaves the running trajectory alone."""

    def test_empty_map_does_not_finish(self):
        services = FakeServices(origin=Pose.identity())
        controller = _controller(services)
        with pytest.raises(EmptyMapError):
            controller.restart(_at(0.0, 0.0, 0.0), MapSnapshot())
        assert "finish" not in [c[0] for c in services.calls]
        assert controller.current_trajectory_id == 1

    def test_missing_origin_does_not_finish(self, snapshot):
        services = FakeServices(origin=None)
        controller = _controller(services)
        with pytest.raises(MissingReferenceOriginError):
            controller.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert [c[0] for c in services.calls] == ["query"]
        assert controller.current_trajectory_id == 1


class TestServiceFailures:

    def test_finish_failure_raises_and_keeps_trajectory(self, snapshot):
        services = FakeServices(origin=Pose.identity())
        services.finish_status = ServiceStatus(constants.STATUS_NOT_FOUND, "Trajectory 1 not found")
        controller = _controller(services)
        with pytest.raises(TrajectoryServiceError, match="NOT_FOUND") as exc:
            controller.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert exc.value.service == "finish_trajectory"
        assert exc.value.code == constants.STATUS_NOT_FOUND
        assert "start" not in [c[0] for c in services.calls]
        assert controller.current_trajectory_id == 1

    def test_start_failure_leaves_no_running_trajectory(self, snapshot):
        services = FakeServices(origin=Pose.identity())
        services.start_status = ServiceStatus(constants.STATUS_INVALID_ARGUMENT, "bad config")
        controller = _controller(services)
        with pytest.raises(TrajectoryServiceError, match="bad config"):
            controller.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert controller.current_trajectory_id is None

        # Next restart has nothing to finish.
        services.start_status = ServiceStatus(constants.STATUS_OK, "")
        services.calls.clear()
        controller.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert "finish" not in [c[0] for c in services.calls]
        assert controller.current_trajectory_id == 2

    def test_start_without_response_warns_untracked(self, snapshot, caplog):
        services = FakeServices(origin=Pose.identity())

        def no_response(request):
            services.calls.append(("start", request))
            raise TrajectoryServiceError("start_trajectory", "no response within 5.0s")

        services.start_trajectory = no_response
        controller = _controller(services)
        with caplog.at_level(logging.WARNING, logger="carto_initpose.controller.trajectory_controller"):
            with pytest.raises(TrajectoryServiceError, match="Failed to call start_trajectory"):
                controller.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert controller.current_trajectory_id is None
        assert "does not track" in caplog.text

    def test_start_status_error_does_not_warn(self, snapshot, caplog):
        services = FakeServices(origin=Pose.identity())
        services.start_status = ServiceStatus(constants.STATUS_INVALID_ARGUMENT, "bad config")
        controller = _controller(services)
        with caplog.at_level(logging.WARNING):
            with pytest.raises(TrajectoryServiceError):
                controller.restart(_at(0.0, 0.0, 0.0), snapshot)
        assert "does not track" not in caplog.text

    def test_error_message_without_code(self):
        err = TrajectoryServiceError("start_trajectory", "service not available")
        assert str(err) == "Failed to call start_trajectory: service not available"
        assert err.code is None


class TestServiceStatus:

    def test_ok(self):
        assert ServiceStatus(constants.STATUS_OK).ok
        assert not ServiceStatus(constants.STATUS_ABORTED).ok

    def test_code_name(self):
        assert ServiceStatus(constants.STATUS_FAILED_PRECONDITION).code_name == "FAILED_PRECONDITION"
        assert ServiceStatus(99).code_name == "99"
