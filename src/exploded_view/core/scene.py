"""Minimal scene tree used as the engine's scene-graph source.

Each node carries a local affine transform split into a linear ``basis``
(rotation * scale, possibly sheared) and a ``position``. Geometry nodes also
carry local-space ``bounds``.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
from numpy.typing import NDArray

from .geometry import Box
from .math.transform import compose_matrix, invert_affine, transform_points


ArrayF = NDArray[np.float64]

NODE_KINDS = ("group", "mesh", "skinned_mesh")


class SceneNode:
    def __init__(
        self,
        name: str,
        kind: str = "group",
        position: ArrayF | None = None,
        basis: ArrayF | None = None,
        bounds: Box | None = None,
    ) -> None:
        if kind not in NODE_KINDS:
            raise ValueError(f"unsupported node kind: {kind}")
        if kind != "group" and bounds is None:
            raise ValueError(f"node {name!r} of kind {kind} requires bounds")
        self.name = name
        self.kind = kind
        self.position = np.zeros(3) if position is None else np.asarray(position, dtype=np.float64).copy()
        self.basis = np.eye(3) if basis is None else np.asarray(basis, dtype=np.float64).copy()
        if self.position.shape != (3,):
            raise ValueError("position must have shape (3,)")
        if self.basis.shape != (3, 3):
            raise ValueError("basis must have shape (3, 3)")
        self.bounds = bounds
        self.parent: SceneNode | None = None
        self.children: list[SceneNode] = []

    @classmethod
    def from_trs(
        cls,
        name: str,
        kind: str = "group",
        position: ArrayF | None = None,
        quat: ArrayF | None = None,
        scale: ArrayF | None = None,
        bounds: Box | None = None,
    ) -> "SceneNode":
        mat = compose_matrix(np.zeros(3) if position is None else position, quat, scale)
        return cls(name, kind=kind, position=mat[:3, 3], basis=mat[:3, :3], bounds=bounds)

    @classmethod
    def from_matrix(
        cls, name: str, matrix: ArrayF, kind: str = "group", bounds: Box | None = None
    ) -> "SceneNode":
        mat = np.asarray(matrix, dtype=np.float64)
        if mat.shape != (4, 4):
            raise ValueError("matrix must have shape (4, 4)")
        return cls(name, kind=kind, position=mat[:3, 3], basis=mat[:3, :3], bounds=bounds)

    def __repr__(self) -> str:
        return f"SceneNode({self.name!r}, kind={self.kind!r})"

    def add(self, child: "SceneNode") -> "SceneNode":
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def traverse(self) -> Iterator["SceneNode"]:
        """Depth-first, parent-before-children."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, name: str) -> "SceneNode | None":
        for node in self.traverse():
            if node.name == name:
                return node
        return None

    def local_matrix(self) -> ArrayF:
        mat = np.eye(4, dtype=np.float64)
        mat[:3, :3] = self.basis
        mat[:3, 3] = self.position
        return mat

    def world_matrix(self) -> ArrayF:
        mat = self.local_matrix()
        node = self.parent
        while node is not None:
            mat = node.local_matrix() @ mat
            node = node.parent
        return mat

    def parent_world_matrix(self) -> ArrayF:
        if self.parent is None:
            return np.eye(4, dtype=np.float64)
        return self.parent.world_matrix()

    def world_position(self) -> ArrayF:
        return self.world_matrix()[:3, 3].copy()

    def world_to_local(self, point: ArrayF) -> ArrayF:
        """Convert world point(s) into this node's local frame."""
        return transform_points(invert_affine(self.world_matrix()), point)

    def local_to_world(self, point: ArrayF) -> ArrayF:
        return transform_points(self.world_matrix(), point)

    def parent_world_to_local(self, point: ArrayF) -> ArrayF:
        """Convert world point(s) into the frame ``position`` is expressed in."""
        if self.parent is None:
            return np.asarray(point, dtype=np.float64).copy()
        return self.parent.world_to_local(point)

    def set_local_position(self, position: ArrayF) -> None:
        self.position = np.asarray(position, dtype=np.float64).reshape(3).copy()

    def world_bounds(self) -> Box:
        """AABB of all geometry in this subtree, in world space."""
        box = Box.empty()
        for node in self.traverse():
            if node.bounds is None:
                continue
            box = box.union(node.bounds.transformed(node.world_matrix()))
        return box
