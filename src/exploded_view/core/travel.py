"""Per-cluster travel direction and magnitude."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .clustering import cluster_indices
from .config import ExplodeConfig
from .geometry import Box, Plane, box_corners, signed_distance
from .math.vector import unit_or
from .parts import Part


ArrayF = NDArray[np.float64]

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class Cluster:
    """Parts that move as one rigid unit along ``direction``.

    ``origins`` holds each member's world position at preparation time.
    """

    parts: tuple[Part, ...]
    origins: ArrayF
    direction: ArrayF
    s_abs: float
    base_push: float
    depth_scale: float

    def magnitude(self, explosion: float) -> float:
        return self.base_push * explosion + self.depth_scale * self.s_abs * explosion

    def displacement(self, explosion: float) -> ArrayF:
        return self.direction * self.magnitude(explosion)

    def targets(self, explosion: float) -> ArrayF:
        """World positions of every member at ``explosion``."""
        return self.origins + self.displacement(explosion)


def depth_extent(plane: Plane, boxes: Sequence[Box], epsilon: float) -> float:
    """Distance from the plane to the nearer face of the boxes' combined extent."""
    corners = np.concatenate([box_corners(b) for b in boxes], axis=0)
    d = signed_distance(plane, corners)
    min_d = float(np.min(d))
    max_d = float(np.max(d))
    return max(epsilon, min(abs(min_d), abs(max_d)))


def plane_clusters(
    parts: Sequence[Part],
    plane: Plane,
    diagonal: float,
    config: ExplodeConfig,
) -> list[Cluster]:
    """Group parts into same-layer clusters and scale travel by depth."""
    if not parts:
        return []
    boxes = [p.world_box for p in parts]
    groups = cluster_indices(plane, boxes, config.same_layer_tolerance, config.near_gap)

    eps = config.epsilon_on_plane
    extents = [depth_extent(plane, [boxes[i] for i in g], eps) for g in groups]
    max_s = max([eps, *extents])
    max_abs_travel = config.max_travel_fraction * diagonal
    depth_scale = max_abs_travel / max_s
    base_push = config.base_push_fraction * diagonal

    clusters: list[Cluster] = []
    for group, s_abs in zip(groups, extents):
        members = tuple(parts[i] for i in group)
        log.debug(
            "cluster %s s_abs=%.6g",
            [p.name for p in members],
            s_abs,
        )
        if s_abs < config.near_band_exclusion:
            continue
        clusters.append(
            Cluster(
                parts=members,
                origins=np.stack([p.origin for p in members]),
                direction=plane.normal.copy(),
                s_abs=s_abs,
                base_push=base_push,
                depth_scale=depth_scale,
            )
        )
    dropped = len(groups) - len(clusters)
    if dropped:
        log.info("%d cluster(s) inside the near band stay assembled", dropped)
    return clusters


def radial_clusters(
    parts: Sequence[Part],
    center: ArrayF,
    diagonal: float,
    config: ExplodeConfig,
) -> list[Cluster]:
    """One cluster per part, pushed away from ``center`` by a uniform amount."""
    center = np.asarray(center, dtype=np.float64)
    scale = diagonal * config.radial_fraction
    clusters: list[Cluster] = []
    for part in parts:
        direction = unit_or(part.center - center, config.fallback_direction)
        clusters.append(
            Cluster(
                parts=(part,),
                origins=part.origin[np.newaxis, :].copy(),
                direction=direction,
                s_abs=1.0,
                base_push=0.0,
                depth_scale=scale,
            )
        )
    return clusters
