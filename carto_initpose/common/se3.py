"""
Rigid-transform geometry on unit quaternions.

Rotation representation: (qx, qy, qz, qw), the ROS / tf2 ordering.
Translation: (x, y, z) in the parent frame.

A transform T = (t, q) maps a point p to R(q) p + t. Composition follows
tf2::Transform::operator*:

    T_a * T_b = (t_a + R(q_a) t_b, q_a q_b)
    T^{-1}    = (R(q)^T (-t), conj(q))

Numerical Policy:
    QUAT_NORM_EPSILON rejects degenerate quaternions. A quaternion whose
    norm is already within NORMALIZED_TOLERANCE of 1 is returned as-is, so
    normalizing a unit quaternion is the identity operation and identity
    compositions are exact.

References:
- Sola (2017): Quaternion kinematics for the error-state Kalman filter
- tf2 LinearMath (Transform.h, Quaternion.h)
"""

import math
from typing import Tuple

import numpy as np

from carto_initpose.common.constants import QUAT_NORM_EPSILON


# Norm deviation below which a quaternion counts as already normalized.
NORMALIZED_TOLERANCE: float = 1e-12


# =============================================================================
# Quaternion algebra
# =============================================================================


def quat_identity() -> np.ndarray:
    return np.array([0.0, 0.0, 0.0, 1.0], dtype=float)


def quat_normalize(q: np.ndarray) -> np.ndarray:
    """
    Normalize quaternion (x, y, z, w).

    Raises ValueError for non-finite or zero-norm input.
    """
    q = np.asarray(q, dtype=float).reshape(-1)
    if q.shape != (4,):
        raise ValueError(f"Quaternion must have 4 components, got shape {q.shape}")
    if not np.all(np.isfinite(q)):
        raise ValueError(f"Quaternion has non-finite components: {q.tolist()}")
    n = math.sqrt(float(q @ q))
    if n < QUAT_NORM_EPSILON:
        raise ValueError("Quaternion has zero norm")
    if abs(n - 1.0) <= NORMALIZED_TOLERANCE:
        return q.copy()
    return q / n


def quat_conjugate(q: np.ndarray) -> np.ndarray:
    """Conjugate (inverse for unit quaternions)."""
    q = np.asarray(q, dtype=float).reshape(-1)
    return np.array([-q[0], -q[1], -q[2], q[3]], dtype=float)


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Hamilton product a * b, both (x, y, z, w)."""
    ax, ay, az, aw = np.asarray(a, dtype=float).reshape(-1)
    bx, by, bz, bw = np.asarray(b, dtype=float).reshape(-1)
    return np.array([
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    ], dtype=float)


def quat_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Rotate vector(s) v by unit quaternion q.

    Uses v' = v + 2w (u x v) + 2 u x (u x v) with q = (u, w).
    v: (3,) or (N, 3).
    """
    q = np.asarray(q, dtype=float).reshape(-1)
    v = np.asarray(v, dtype=float)
    u = q[:3]
    w = q[3]
    uv = np.cross(u, v)
    return v + 2.0 * w * uv + 2.0 * np.cross(u, uv)


def quat_canonical(q: np.ndarray) -> np.ndarray:
    """Pick the sign of q with w >= 0 (q and -q are the same rotation)."""
    q = np.asarray(q, dtype=float).reshape(-1)
    return -q if q[3] < 0.0 else q.copy()


# =============================================================================
# Conversions
# =============================================================================


def yaw_to_quat(yaw: float) -> np.ndarray:
    """Rotation of `yaw` radians about +Z, as (x, y, z, w)."""
    half = 0.5 * float(yaw)
    return np.array([0.0, 0.0, math.sin(half), math.cos(half)], dtype=float)


def quat_to_yaw(qx: float, qy: float, qz: float, qw: float) -> float:
    """Heading (rotation about +Z) of a quaternion, in (-pi, pi]."""
    siny_cosp = 2.0 * (qw * qz + qx * qy)
    cosy_cosp = 1.0 - 2.0 * (qy * qy + qz * qz)
    return math.atan2(siny_cosp, cosy_cosp)


# =============================================================================
# Rigid transforms on (t, q) pairs
# =============================================================================


def se3_compose(
    t_a: np.ndarray, q_a: np.ndarray, t_b: np.ndarray, q_b: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compose two rigid transforms: T_a * T_b.

    This is exact group composition; the rotation is renormalized.
    """
    t_out = np.asarray(t_a, dtype=float) + quat_rotate(q_a, t_b)
    q_out = quat_normalize(quat_multiply(q_a, q_b))
    return t_out, q_out


def se3_inverse(t: np.ndarray, q: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Inverse of a rigid transform.

    For T = (t, q), T^{-1} = (R(q)^T (-t), conj(q)).
    """
    q_inv = quat_conjugate(q)
    t_inv = quat_rotate(q_inv, -np.asarray(t, dtype=float))
    return t_inv, q_inv
