"""Pure helpers for viewport geometry."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core.geometry import Box, box_corners


# Triangles over box_corners() ordering (x-major, then y, then z).
_BOX_FACES = np.array(
    [
        [0, 1, 3], [0, 3, 2],
        [4, 6, 7], [4, 7, 5],
        [0, 4, 5], [0, 5, 1],
        [2, 3, 7], [2, 7, 6],
        [0, 2, 6], [0, 6, 4],
        [1, 5, 7], [1, 7, 3],
    ],
    dtype=np.int32,
)

_PALETTE = np.array(
    [
        [0.90, 0.45, 0.20, 1.0],
        [0.25, 0.60, 0.90, 1.0],
        [0.40, 0.80, 0.35, 1.0],
        [0.85, 0.30, 0.60, 1.0],
        [0.95, 0.80, 0.25, 1.0],
        [0.55, 0.45, 0.90, 1.0],
    ],
    dtype=np.float32,
)

STATIC_COLOR = np.array([0.55, 0.55, 0.58, 1.0], dtype=np.float32)


def compute_bounds(points: np.ndarray) -> tuple[np.ndarray, float]:
    if points.size == 0:
        return np.zeros(3, dtype=np.float32), 0.0
    pts = np.asarray(points, dtype=np.float32).reshape(-1, 3)
    center = (pts.min(axis=0) + pts.max(axis=0)) * 0.5
    radius = float(np.max(np.linalg.norm(pts - center, axis=1)))
    return center, radius


def box_mesh(box: Box) -> tuple[np.ndarray, np.ndarray]:
    """Return (vertices (8, 3), faces (12, 3)) for a box."""
    return box_corners(box).astype(np.float32), _BOX_FACES.copy()


def boxes_mesh(boxes: Sequence[Box]) -> tuple[np.ndarray, np.ndarray]:
    """Merge boxes into one triangle mesh; box ``i`` owns vertices ``8i..8i+7``."""
    if not boxes:
        return np.zeros((0, 3), dtype=np.float32), np.zeros((0, 3), dtype=np.int32)
    verts = np.concatenate([box_corners(b) for b in boxes]).astype(np.float32)
    offsets = (np.arange(len(boxes), dtype=np.int32) * 8)[:, None, None]
    faces = (_BOX_FACES[None, :, :] + offsets).reshape(-1, 3)
    return verts, faces


def cluster_colors(cluster_ids: np.ndarray) -> np.ndarray:
    """RGBA per part; parts outside any cluster get ``STATIC_COLOR``."""
    ids = np.asarray(cluster_ids, dtype=np.int64)
    colors = np.tile(STATIC_COLOR, (ids.shape[0], 1))
    moving = ids >= 0
    colors[moving] = _PALETTE[ids[moving] % len(_PALETTE)]
    return colors


def vertex_colors(part_colors: np.ndarray) -> np.ndarray:
    """Expand per-part colors to the 8 vertices of each part box."""
    return np.repeat(np.asarray(part_colors, dtype=np.float32), 8, axis=0)


def plane_outline(normal: np.ndarray, point: np.ndarray, size: float) -> np.ndarray:
    """Closed square (5, 3) lying in the plane, centered at ``point``."""
    n = np.asarray(normal, dtype=np.float64)
    helper = np.array([1.0, 0.0, 0.0]) if abs(n[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
    u = np.cross(n, helper)
    u /= np.linalg.norm(u)
    v = np.cross(n, u)
    half = 0.5 * size
    corners = [(-1, -1), (1, -1), (1, 1), (-1, 1), (-1, -1)]
    p = np.asarray(point, dtype=np.float64)
    return np.array([p + half * (a * u + b * v) for a, b in corners], dtype=np.float32)
