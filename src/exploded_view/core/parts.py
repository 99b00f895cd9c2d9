"""Classification of scene nodes into rigid part records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from .geometry import Box
from .scene import SceneNode


ArrayF = NDArray[np.float64]


@dataclass(frozen=True, slots=True, eq=False)
class Part:
    """A rigid leaf body captured at load time.

    ``world_box``, ``center`` and ``origin`` are snapshots; the live local
    position stays on ``node``.
    """

    node: SceneNode
    world_box: Box
    center: ArrayF
    origin: ArrayF

    @property
    def name(self) -> str:
        return self.node.name


def classify_node(node: SceneNode) -> str:
    if node.kind == "skinned_mesh":
        return "skinned"
    if node.kind == "mesh" and node.bounds is not None:
        return "part"
    return "group"


def collect_parts(root: SceneNode, exclude: Iterable[SceneNode] = ()) -> list[Part]:
    """Return one ``Part`` per rigid geometry node under ``root``."""
    skip = {id(node) for node in exclude}
    parts: list[Part] = []
    for node in root.traverse():
        if id(node) in skip or classify_node(node) != "part":
            continue
        world = node.world_matrix()
        box = node.bounds.transformed(world)
        parts.append(
            Part(node=node, world_box=box, center=box.center(), origin=world[:3, 3].copy())
        )
    return parts
