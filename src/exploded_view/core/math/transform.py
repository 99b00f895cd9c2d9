"""Affine transform helpers.

Matrices are 4x4 and act on column vectors: ``p_world = M @ [p, 1]``.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .quat import quat_to_rotmat


ArrayF = NDArray[np.float64]


def compose_matrix(
    position: ArrayF,
    quat: ArrayF | None = None,
    scale: ArrayF | None = None,
) -> ArrayF:
    """Build translation * rotation * scale."""
    mat = np.eye(4, dtype=np.float64)
    rot = np.eye(3) if quat is None else quat_to_rotmat(quat)
    s = np.ones(3) if scale is None else np.asarray(scale, dtype=np.float64)
    if s.shape != (3,):
        raise ValueError("scale must have shape (3,)")
    mat[:3, :3] = rot * s[np.newaxis, :]
    mat[:3, 3] = np.asarray(position, dtype=np.float64)
    return mat


def transform_points(mat: ArrayF, points: ArrayF) -> ArrayF:
    """Apply an affine 4x4 matrix to point(s) shaped (..., 3)."""
    pts = np.asarray(points, dtype=np.float64)
    return pts @ mat[:3, :3].T + mat[:3, 3]


def transform_direction(mat: ArrayF, vectors: ArrayF) -> ArrayF:
    """Apply only the linear part of ``mat`` to direction(s)."""
    return np.asarray(vectors, dtype=np.float64) @ mat[:3, :3].T


def normal_matrix(mat: ArrayF) -> ArrayF:
    """Return the inverse-transpose of the linear part of ``mat``.

    Singular linear parts (zero scale) use the pseudo-inverse so the result is
    always finite.
    """
    linear = np.asarray(mat, dtype=np.float64)[:3, :3]
    if abs(np.linalg.det(linear)) > 1e-300:
        return np.linalg.inv(linear).T
    return np.linalg.pinv(linear).T


def invert_affine(mat: ArrayF) -> ArrayF:
    """Invert an affine matrix, falling back to the pseudo-inverse when singular."""
    mat = np.asarray(mat, dtype=np.float64)
    try:
        return np.linalg.inv(mat)
    except np.linalg.LinAlgError:
        return np.linalg.pinv(mat)
