"""Errors raised by the trajectory controller."""

from typing import Optional

from carto_initpose.common import constants


class TrajectoryServiceError(RuntimeError):
    """A cartographer trajectory service failed or returned a non-OK status."""

    def __init__(self, service: str, message: str, code: Optional[int] = None) -> None:
        self.service = service
        self.code = code
        self.message = message
        if code is None:
            text = f"Failed to call {service}: {message}"
        else:
            name = constants.STATUS_NAMES.get(code, str(code))
            text = f"{service} returned {name} ({code}): '{message}'"
        super().__init__(text)
