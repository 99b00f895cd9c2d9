"""Headless exploded-view controller for the desktop app."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from ..core.config import ExplodeConfig
from ..core.controller import ExplodedAssembly, ExplosionController, prepare_assembly
from ..core.geometry import Box
from ..io.assembly import assembly_to_scene, open_assembly


log = logging.getLogger(__name__)

# Explosion gap below which a frame no longer counts as motion.
SETTLE_TOLERANCE = 1e-6


class ExplodeViewController:
    """Loads assemblies and turns frame ticks and input into scene updates."""

    def __init__(self, config: ExplodeConfig | None = None) -> None:
        self.assembly_path: Path | None = None
        self.config_override = config
        self.engine = ExplosionController(config)
        self.elapsed = 0.0

    def load_assembly(self, path: str | Path) -> ExplodedAssembly:
        """Load and prepare ``path``; the current assembly survives any failure."""
        assembly_path = Path(path)
        try:
            root, config = open_assembly(assembly_path, self.config_override)
            assembly = prepare_assembly(root, config)
        except Exception:
            log.warning("keeping previous assembly; failed to load %s", assembly_path)
            raise
        self.engine.attach(assembly)
        self.assembly_path = assembly_path
        self.elapsed = 0.0
        return assembly

    def load_definition(self, defn: dict[str, Any]) -> ExplodedAssembly:
        root, config = assembly_to_scene(defn)
        assembly = prepare_assembly(root, self.config_override or config)
        self.engine.attach(assembly)
        self.assembly_path = None
        self.elapsed = 0.0
        return assembly

    @property
    def assembly(self) -> ExplodedAssembly | None:
        return self.engine.assembly

    def has_assembly(self) -> bool:
        return self.engine.assembly is not None

    def reset(self) -> bool:
        if self.engine.assembly is None:
            return False
        self.engine.set_target(0.0, snap=True)
        self.engine.apply_to_scene()
        self.elapsed = 0.0
        return True

    def tick(self, dt: float) -> bool:
        """Advance one frame; returns True when part positions may have changed."""
        if not self.engine.clusters:
            return False
        moving = not self.engine.is_settled(SETTLE_TOLERANCE)
        self.engine.step(dt)
        self.elapsed += dt
        return moving

    def on_wheel(self, delta_y: float) -> None:
        self.engine.wheel(delta_y)

    def on_key(self, key: str) -> bool:
        key = key.lower()
        if key == "e":
            self.engine.explode()
        elif key == "a":
            self.engine.assemble()
        elif key == "space":
            self.engine.toggle()
        elif key == "r":
            return self.reset()
        else:
            return False
        return True

    def part_boxes(self) -> list[Box]:
        """Current world boxes of every part, in part order."""
        assembly = self.engine.assembly
        if assembly is None:
            return []
        return [p.node.bounds.transformed(p.node.world_matrix()) for p in assembly.parts]

    def anchor_box(self) -> Box | None:
        assembly = self.engine.assembly
        if assembly is None or assembly.anchor is None:
            return None
        return assembly.anchor.world_bounds()

    def part_cluster_ids(self) -> np.ndarray:
        """Cluster index per part; -1 for parts that stay assembled."""
        assembly = self.engine.assembly
        if assembly is None:
            return np.zeros(0, dtype=np.int64)
        index = {id(p): -1 for p in assembly.parts}
        for ci, cluster in enumerate(assembly.clusters):
            for part in cluster.parts:
                index[id(part)] = ci
        return np.array([index[id(p)] for p in assembly.parts], dtype=np.int64)

    def diagnostics(self) -> dict[str, float | int | str]:
        info = self.engine.diagnostics()
        info["time"] = self.elapsed
        return info

    def window_title(self, app_name: str = "Exploded View") -> str:
        name = self.assembly_path.name if self.assembly_path is not None else "Untitled"
        return f"{app_name} - {name}"
