"""Same-layer adjacency graph and rigid cluster extraction."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .geometry import Box, Plane, signed_distance


ArrayF = NDArray[np.float64]


def layer_distances(plane: Plane, boxes: Sequence[Box]) -> ArrayF:
    """Signed plane distance of each box center."""
    if not boxes:
        return np.zeros(0, dtype=np.float64)
    centers = np.stack([b.center() for b in boxes])
    return np.asarray(signed_distance(plane, centers), dtype=np.float64)


def build_adjacency(
    distances: ArrayF,
    boxes: Sequence[Box],
    layer_tolerance: float,
    gap: float,
) -> list[list[int]]:
    """Edge i-j iff the parts share a layer and their gap-grown boxes touch.

    All pairs are tested at once; N is one assembly's part count. The
    proximity half is the broadcast form of ``geometry.boxes_near``.
    """
    n = len(boxes)
    dist = np.asarray(distances, dtype=np.float64)
    if dist.shape != (n,):
        raise ValueError("distances must have shape (N,)")
    adj: list[list[int]] = [[] for _ in range(n)]
    if n < 2:
        return adj

    lo = np.stack([b.min for b in boxes])
    hi = np.stack([b.max for b in boxes])
    same_layer = np.abs(dist[:, None] - dist[None, :]) <= layer_tolerance
    near = np.all(
        ((lo[:, None, :] - gap) <= hi[None, :, :]) & ((hi[:, None, :] + gap) >= lo[None, :, :]),
        axis=-1,
    )
    linked = np.triu(same_layer & near, k=1)
    for i, j in zip(*np.nonzero(linked)):
        adj[int(i)].append(int(j))
        adj[int(j)].append(int(i))
    return adj


def connected_components(adj: Sequence[Sequence[int]]) -> list[list[int]]:
    """Return components as index lists, ordered by their smallest member."""
    seen = [False] * len(adj)
    comps: list[list[int]] = []
    for start in range(len(adj)):
        if seen[start]:
            continue
        seen[start] = True
        stack = [start]
        comp: list[int] = []
        while stack:
            u = stack.pop()
            comp.append(u)
            for v in adj[u]:
                if not seen[v]:
                    seen[v] = True
                    stack.append(v)
        comps.append(sorted(comp))
    return comps


def cluster_indices(
    plane: Plane,
    boxes: Sequence[Box],
    layer_tolerance: float,
    gap: float,
) -> list[list[int]]:
    distances = layer_distances(plane, boxes)
    return connected_components(build_adjacency(distances, boxes, layer_tolerance, gap))
