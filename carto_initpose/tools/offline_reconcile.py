#!/usr/bin/env python3
"""
Reconcile a 2D pose hint against a saved map snapshot, without ROS.

Prints the height-corrected pose, the submap that supplied the height and
the initial pose StartTrajectory would receive.

Usage:
    initpose_offline --snapshot map_snapshot.yaml --x 2.0 --y 3.0 --yaw 1.57
    initpose_offline --snapshot map_snapshot.yaml --x 2.0 --y 3.0 --json
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from carto_initpose.common import constants
from carto_initpose.common.pose import Pose
from carto_initpose.reconcile import ReconcileError, load_snapshot, reconcile_snapshot

EXIT_RECONCILE_ERROR = 2


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Compute the relative initial pose for a 2D hint from a map snapshot YAML."
    )
    ap.add_argument("--snapshot", required=True, help="Map snapshot YAML (submaps + trajectory_origins)")
    ap.add_argument("--x", type=float, required=True, help="Hint x in the map frame (m)")
    ap.add_argument("--y", type=float, required=True, help="Hint y in the map frame (m)")
    ap.add_argument("--yaw", type=float, default=0.0, help="Hint heading (rad)")
    ap.add_argument(
        "--reference-trajectory-id",
        type=int,
        default=constants.FROZEN_TRAJECTORY_ID,
        help="Trajectory whose origin the result is relative to",
    )
    ap.add_argument("--json", action="store_true", help="Print the full report as JSON")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def _fmt(pose: Pose) -> str:
    return (
        f"xyz=({pose.x:.4f}, {pose.y:.4f}, {pose.z:.4f}) "
        f"q=({pose.rotation[0]:.4f}, {pose.rotation[1]:.4f}, "
        f"{pose.rotation[2]:.4f}, {pose.rotation[3]:.4f})"
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    snapshot = load_snapshot(args.snapshot)
    hint = Pose.from_xyz_yaw(args.x, args.y, 0.0, args.yaw)

    try:
        relative, report = reconcile_snapshot(hint, snapshot, args.reference_trajectory_id)
    except ReconcileError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_RECONCILE_ERROR

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
        return 0

    print(f"Corrected pose (map):   {_fmt(report.corrected)}")
    print(
        f"Nearest submap:         {report.nearest_submap} at "
        f"{report.horizontal_distance:.4f} m ({report.candidates} candidates)"
    )
    print(f"Reference trajectory:   {report.reference_trajectory_id}")
    print(f"Initial pose (relative): {_fmt(relative)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
