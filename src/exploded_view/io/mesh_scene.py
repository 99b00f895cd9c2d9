"""Mesh-file scene loading via trimesh (glTF/GLB, OBJ, STL, ...)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from ..core.geometry import Box
from ..core.scene import SceneNode
from .assembly import AssemblyLoadError


log = logging.getLogger(__name__)


def loader_available() -> bool:
    try:
        import trimesh  # noqa: F401
    except ImportError:
        return False
    return True


def load_mesh_scene(path: str | Path) -> SceneNode:
    """Load a mesh file and rebuild its node hierarchy as a ``SceneNode`` tree."""
    try:
        import trimesh
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise AssemblyLoadError("trimesh is required to load mesh assets") from exc

    path = Path(path)
    if not path.is_file():
        raise AssemblyLoadError(f"mesh file not found: {path}")
    log.info("loading mesh scene %s", path)
    try:
        loaded = trimesh.load(str(path))
    except Exception as exc:
        raise AssemblyLoadError(f"unable to load mesh {path}: {exc}") from exc
    if loaded is None:
        raise AssemblyLoadError(f"unable to load mesh {path}")

    if isinstance(loaded, trimesh.Scene):
        return scene_from_trimesh(loaded)
    root = SceneNode(path.stem or "root")
    root.add(SceneNode(_mesh_name(loaded, "mesh"), kind="mesh", bounds=_geometry_bounds(loaded)))
    return root


def scene_from_trimesh(scene: Any) -> SceneNode:
    """Convert a ``trimesh.Scene`` graph to a ``SceneNode`` tree."""
    base = scene.graph.base_frame
    root = SceneNode(str(base))
    nodes: dict[str, SceneNode] = {str(base): root}
    links: list[tuple[str, str]] = []

    for parent, child, attr in scene.graph.to_edgelist():
        matrix = np.asarray(attr.get("matrix", np.eye(4)), dtype=np.float64)
        geom_name = attr.get("geometry")
        geometry = scene.geometry.get(geom_name) if geom_name is not None else None
        bounds = _geometry_bounds(geometry) if geometry is not None else None
        kind = "mesh" if bounds is not None else "group"
        nodes[str(child)] = SceneNode.from_matrix(str(child), matrix, kind=kind, bounds=bounds)
        links.append((str(parent), str(child)))

    for parent, child in links:
        if parent not in nodes:
            nodes[parent] = root.add(SceneNode(parent))
        nodes[parent].add(nodes[child])
    return root


def _geometry_bounds(geometry: Any) -> Box | None:
    bounds = getattr(geometry, "bounds", None)
    if bounds is None:
        return None
    b = np.asarray(bounds, dtype=np.float64)
    if b.shape != (2, 3) or not np.all(np.isfinite(b)):
        return None
    return Box(b[0], b[1])


def _mesh_name(mesh: Any, default: str) -> str:
    meta = getattr(mesh, "metadata", None) or {}
    return str(meta.get("name") or meta.get("file_name") or default)
