"""Quaternion helpers used to build node transforms.

Conventions:
- Storage order: [w, x, y, z]
- Quaternion represents local->parent rotation.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .vector import norm, unit


ArrayF = NDArray[np.float64]


def quat_normalize(q: ArrayF) -> ArrayF:
    """Normalize quaternion(s); zero quaternions become identity."""
    q = np.asarray(q, dtype=np.float64)
    n = norm(q, axis=-1)[..., np.newaxis]
    identity = np.zeros_like(q)
    identity[..., 0] = 1.0
    with np.errstate(divide="ignore", invalid="ignore"):
        qn = np.where(n > 0.0, q / n, identity)
    return qn


def quat_to_rotmat(q: ArrayF) -> ArrayF:
    """Convert quaternion(s) to rotation matrix/matrices."""
    w, x, y, z = np.moveaxis(quat_normalize(q), -1, 0)
    rows = [
        [1.0 - 2.0 * (y * y + z * z), 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
        [2.0 * (x * y + w * z), 1.0 - 2.0 * (x * x + z * z), 2.0 * (y * z - w * x)],
        [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), 1.0 - 2.0 * (x * x + y * y)],
    ]
    return np.stack([np.stack(r, axis=-1) for r in rows], axis=-2)


def quat_from_axis_angle(axis: ArrayF, angle_rad: ArrayF) -> ArrayF:
    """Create quaternion(s) from axis-angle."""
    axis_unit = unit(np.asarray(axis, dtype=np.float64), axis=-1)
    half = 0.5 * np.asarray(angle_rad, dtype=np.float64)
    w = np.cos(half)[..., np.newaxis]
    xyz = axis_unit * np.sin(half)[..., np.newaxis]
    return np.concatenate([w, xyz], axis=-1)
