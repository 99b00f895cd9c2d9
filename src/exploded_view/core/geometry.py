"""Plane and axis-aligned box geometry.

Boxes are world-space AABBs stored as ``min``/``max`` corners. Planes follow
the normalized ``n . p + constant = 0`` form so signed distances are metric.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product

import numpy as np
from numpy.typing import NDArray

from .math.transform import normal_matrix, transform_points
from .math.vector import unit_or


ArrayF = NDArray[np.float64]

_AXES = np.eye(3, dtype=np.float64)


@dataclass(frozen=True, slots=True, eq=False)
class Box:
    min: ArrayF
    max: ArrayF

    def __post_init__(self) -> None:
        lo = np.asarray(self.min, dtype=np.float64).reshape(3)
        hi = np.asarray(self.max, dtype=np.float64).reshape(3)
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @classmethod
    def empty(cls) -> "Box":
        return cls(np.full(3, np.inf), np.full(3, -np.inf))

    @classmethod
    def from_points(cls, points: ArrayF) -> "Box":
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if pts.shape[0] == 0:
            return cls.empty()
        return cls(pts.min(axis=0), pts.max(axis=0))

    def is_empty(self) -> bool:
        return bool(np.any(self.max < self.min))

    def size(self) -> ArrayF:
        if self.is_empty():
            return np.zeros(3)
        return self.max - self.min

    def center(self) -> ArrayF:
        if self.is_empty():
            return np.zeros(3)
        return 0.5 * (self.min + self.max)

    def diagonal(self) -> float:
        return float(np.linalg.norm(self.size()))

    def union(self, other: "Box") -> "Box":
        return Box(np.minimum(self.min, other.min), np.maximum(self.max, other.max))

    def expanded(self, gap: float) -> "Box":
        return Box(self.min - gap, self.max + gap)

    def intersects(self, other: "Box") -> bool:
        return bool(np.all(self.min <= other.max) and np.all(self.max >= other.min))

    def transformed(self, mat: ArrayF) -> "Box":
        """Return the AABB of this box's corners after an affine transform."""
        if self.is_empty():
            return Box.empty()
        return Box.from_points(transform_points(mat, box_corners(self)))


@dataclass(frozen=True, slots=True, eq=False)
class Plane:
    normal: ArrayF
    constant: float

    @classmethod
    def from_normal_and_point(cls, normal: ArrayF, point: ArrayF) -> "Plane":
        n = np.asarray(normal, dtype=np.float64)
        p = np.asarray(point, dtype=np.float64)
        return cls(n, float(-np.dot(n, p))).normalized()

    def normalized(self) -> "Plane":
        length = float(np.linalg.norm(self.normal))
        if length == 0.0:
            raise ValueError("plane normal must be non-zero")
        return Plane(np.asarray(self.normal, dtype=np.float64) / length, self.constant / length)

    def coplanar_point(self) -> ArrayF:
        return -self.constant * self.normal


def signed_distance(plane: Plane, points: ArrayF) -> ArrayF | float:
    """Signed distance of point(s) to ``plane``; positive on the normal side."""
    pts = np.asarray(points, dtype=np.float64)
    d = pts @ plane.normal + plane.constant
    if d.ndim == 0:
        return float(d)
    return d


def boxes_near(box_a: Box, box_b: Box, gap: float) -> bool:
    """True if ``box_a`` grown by ``gap`` on every side still touches ``box_b``."""
    return box_a.expanded(gap).intersects(box_b)


def box_corners(box: Box) -> ArrayF:
    """Return the 8 corners of ``box`` as an (8, 3) array."""
    bounds = np.stack([box.min, box.max])
    return np.array(
        [[bounds[i, 0], bounds[j, 1], bounds[k, 2]] for i, j, k in product((0, 1), repeat=3)],
        dtype=np.float64,
    )


def thinnest_axis(size: ArrayF) -> int:
    """Index of the smallest extent; ties resolve to the earliest of x, y, z."""
    return int(np.argmin(np.asarray(size, dtype=np.float64)))


def plane_from_anchor(
    anchor_bounds: Box,
    anchor_world: ArrayF,
    offset: float,
    fallback_normal: ArrayF = (0.0, 1.0, 0.0),
) -> Plane:
    """Build the reference plane from an anchor's local geometry bounds.

    The plane normal is the anchor's thinnest local axis mapped to world space
    with the normal matrix. The plane passes through the anchor's world box
    center shifted by ``offset`` along that normal.
    """
    axis = _AXES[thinnest_axis(anchor_bounds.size())]
    n_world = normal_matrix(anchor_world) @ axis
    normal = unit_or(n_world, fallback_normal)
    center = anchor_bounds.transformed(anchor_world).center()
    return Plane.from_normal_and_point(normal, center + normal * offset)
