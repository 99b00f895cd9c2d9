"""Vector utilities for NumPy arrays.

All vectors are expected to be shaped (..., 3).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


ArrayF = NDArray[np.float64]


def norm(v: ArrayF, axis: int = -1) -> ArrayF:
    """Return the L2 norm along an axis."""
    return np.linalg.norm(v, axis=axis)


def unit(v: ArrayF, axis: int = -1) -> ArrayF:
    """Return unit vectors; zero vectors stay zero."""
    v = np.asarray(v, dtype=np.float64)
    n = np.linalg.norm(v, axis=axis, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        u = np.where(n > 0.0, v / n, 0.0)
    return u


def unit_or(v: ArrayF, fallback: ArrayF, tol: float = 1e-12) -> ArrayF:
    """Return unit vector(s), substituting ``fallback`` where the length is ~0."""
    v = np.asarray(v, dtype=np.float64)
    fb = unit(np.asarray(fallback, dtype=np.float64))
    n = np.linalg.norm(v, axis=-1, keepdims=True)
    with np.errstate(divide="ignore", invalid="ignore"):
        u = np.where(n > tol, v / n, fb)
    return u
