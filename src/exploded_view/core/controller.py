"""Explosion state, assembly preparation and per-frame scene updates."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .config import ExplodeConfig
from .geometry import Box, Plane, plane_from_anchor
from .parts import Part, classify_node, collect_parts
from .scene import SceneNode
from .travel import Cluster, plane_clusters, radial_clusters


ArrayF = NDArray[np.float64]

log = logging.getLogger(__name__)


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(slots=True)
class ExplosionState:
    """Current and target explosion factor, both kept in [0, 1]."""

    current: float = 0.0
    target: float = 0.0

    def set_target(self, value: float, snap: bool = False) -> None:
        self.target = _clamp01(value)
        if snap:
            self.current = self.target

    def advance(self, dt: float, rate: float) -> float:
        """Move ``current`` toward ``target`` by exponential approach."""
        if not math.isfinite(dt) or dt < 0.0:
            raise ValueError("dt must be a finite value >= 0")
        alpha = min(1.0, rate * dt)
        self.current += (self.target - self.current) * alpha
        return self.current

    def reset(self) -> None:
        self.current = 0.0
        self.target = 0.0


@dataclass(frozen=True, slots=True, eq=False)
class ExplodedAssembly:
    """Everything derived from one scene at load time."""

    root: SceneNode
    config: ExplodeConfig
    parts: tuple[Part, ...]
    clusters: tuple[Cluster, ...]
    bounds: Box
    anchor: SceneNode | None = None
    plane: Plane | None = None

    @property
    def diagonal(self) -> float:
        return self.bounds.diagonal()

    def cluster_of(self, name: str) -> Cluster | None:
        for cluster in self.clusters:
            if any(p.name == name for p in cluster.parts):
                return cluster
        return None


def prepare_assembly(root: SceneNode, config: ExplodeConfig | None = None) -> ExplodedAssembly:
    """Classify parts, build clusters and their travel laws for ``root``."""
    config = config or ExplodeConfig()
    bounds = root.world_bounds()
    diagonal = bounds.diagonal()

    if config.mode == "radial":
        parts = collect_parts(root)
        clusters = radial_clusters(parts, bounds.center(), diagonal, config)
        anchor = None
        plane = None
    else:
        anchor = root.find(config.anchor_name)
        if anchor is None:
            raise ValueError(f"anchor part not found: {config.anchor_name}")
        if classify_node(anchor) != "part":
            raise ValueError(f"anchor {config.anchor_name!r} has no rigid geometry")
        plane = plane_from_anchor(
            anchor.bounds,
            anchor.world_matrix(),
            config.plane_offset,
            config.fallback_direction,
        )
        parts = collect_parts(root, exclude=[anchor])
        clusters = plane_clusters(parts, plane, diagonal, config)

    log.info(
        "prepared %s assembly: %d part(s), %d animated cluster(s)",
        config.mode,
        len(parts),
        len(clusters),
    )
    return ExplodedAssembly(
        root=root,
        config=config,
        parts=tuple(parts),
        clusters=tuple(clusters),
        bounds=bounds,
        anchor=anchor,
        plane=plane,
    )


def _place(clusters: tuple[Cluster, ...], explosion: float) -> None:
    for cluster in clusters:
        for part, target in zip(cluster.parts, cluster.targets(explosion)):
            node = part.node
            node.set_local_position(node.parent_world_to_local(target))


class ExplosionController:
    """Owns one prepared assembly and its explosion state.

    Drive it with ``advance(dt)`` then ``apply_to_scene()`` once per frame.
    """

    def __init__(self, config: ExplodeConfig | None = None) -> None:
        self.config = config or ExplodeConfig()
        self.state = ExplosionState()
        self.assembly: ExplodedAssembly | None = None

    def load(self, root: SceneNode, config: ExplodeConfig | None = None) -> ExplodedAssembly:
        """Prepare ``root`` and swap it in; on failure nothing changes.

        Reloading the scene that is already attached first puts its parts
        back at their assembled positions so the new snapshot is clean.
        """
        current = self.assembly
        reloading = current is not None and current.root is root
        if reloading:
            _place(current.clusters, 0.0)
        try:
            assembly = prepare_assembly(root, config or self.config)
        except Exception:
            if reloading:
                self.apply_to_scene()
            raise
        self.attach(assembly)
        return assembly

    def attach(self, assembly: ExplodedAssembly) -> None:
        self.assembly = assembly
        self.config = assembly.config
        self.state = ExplosionState()
        self.state.set_target(0.0, snap=True)
        self.apply_to_scene()

    def unload(self) -> None:
        self.assembly = None
        self.state = ExplosionState()

    @property
    def clusters(self) -> tuple[Cluster, ...]:
        if self.assembly is None:
            return ()
        return self.assembly.clusters

    def set_target(self, value: float, snap: bool = False) -> None:
        self.state.set_target(value, snap=snap)

    def set_target_absolute(self, value: float) -> None:
        self.state.set_target(value)

    def adjust_target(self, delta: float) -> None:
        self.state.set_target(self.state.target + delta)

    def wheel(self, delta_y: float) -> None:
        """Scrolling up (negative delta) explodes, scrolling down assembles."""
        if delta_y == 0:
            return
        step = self.config.wheel_step
        self.adjust_target(step if delta_y < 0 else -step)

    def explode(self) -> None:
        self.set_target_absolute(1.0)

    def assemble(self) -> None:
        self.set_target_absolute(0.0)

    def toggle(self) -> None:
        self.set_target_absolute(0.0 if self.state.target >= 0.5 else 1.0)

    def advance(self, dt: float) -> float:
        return self.state.advance(dt, self.config.smoothing_rate)

    def apply_to_scene(self) -> None:
        _place(self.clusters, self.state.current)

    def step(self, dt: float) -> float:
        value = self.advance(dt)
        self.apply_to_scene()
        return value

    def is_settled(self, tol: float = 1e-4) -> bool:
        return abs(self.state.target - self.state.current) <= tol

    def part_names(self) -> list[str]:
        if self.assembly is None:
            return []
        return [p.name for p in self.assembly.parts]

    def part_world_positions(self) -> ArrayF:
        if self.assembly is None:
            return np.zeros((0, 3), dtype=np.float64)
        if not self.assembly.parts:
            return np.zeros((0, 3), dtype=np.float64)
        return np.stack([p.node.world_position() for p in self.assembly.parts])

    def diagnostics(self) -> dict[str, float | int | str]:
        info: dict[str, float | int | str] = {
            "mode": self.config.mode,
            "parts": 0,
            "clusters": 0,
            "explosion": self.state.current,
            "target": self.state.target,
            "max_displacement": 0.0,
        }
        if self.assembly is None:
            return info
        info["parts"] = len(self.assembly.parts)
        info["clusters"] = len(self.assembly.clusters)
        info["max_displacement"] = max(
            (c.magnitude(self.state.current) for c in self.assembly.clusters),
            default=0.0,
        )
        return info
