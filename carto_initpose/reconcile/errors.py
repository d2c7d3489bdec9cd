"""Errors raised by pose reconciliation."""

from typing import Optional


class ReconcileError(RuntimeError):
    """Base class: the hint cannot be turned into a relative initial pose."""


class EmptyMapError(ReconcileError):
    """No submap poses are available to recover the hint's height from."""

    def __init__(self, message: str = "Map snapshot has no submaps; cannot recover height") -> None:
        super().__init__(message)


class MissingReferenceOriginError(ReconcileError):
    """The reference trajectory has no recorded node to anchor to."""

    def __init__(self, trajectory_id: Optional[int] = None) -> None:
        self.trajectory_id = trajectory_id
        if trajectory_id is None:
            message = "Reference trajectory has no recorded origin"
        else:
            message = f"Reference trajectory {trajectory_id} has no recorded origin"
        super().__init__(message)
