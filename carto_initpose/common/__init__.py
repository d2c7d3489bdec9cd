"""
Common package for carto_initpose.

Shared geometry, configuration and reporting used by the reconciler, the
trajectory controller and the ROS node.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "Pose",
    "ReconcileReport",
    "InitposeParams",
    "constants",
    "se3",
]

_LAZY_ATTRS: dict[str, tuple[str, str | None]] = {
    "Pose": ("carto_initpose.common.pose", "Pose"),
    "ReconcileReport": ("carto_initpose.common.report", "ReconcileReport"),
    "InitposeParams": ("carto_initpose.common.param_models", "InitposeParams"),
    # Expose these as submodules, but do not eagerly import them at package import time.
    "constants": ("carto_initpose.common.constants", None),
    "se3": ("carto_initpose.common.se3", None),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = import_module(module_name)
    return module if attr_name is None else getattr(module, attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
