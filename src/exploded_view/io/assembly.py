"""Assembly definition I/O and scene adapters."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np

from ..core.config import ExplodeConfig
from ..core.geometry import Box
from ..core.scene import NODE_KINDS, SceneNode


AssemblyDefinition = dict[str, Any]

log = logging.getLogger(__name__)


class AssemblyLoadError(RuntimeError):
    """Raised when an assembly source cannot be read."""


def open_assembly(
    path: str | Path, config: ExplodeConfig | None = None
) -> tuple[SceneNode, ExplodeConfig]:
    """Load a JSON assembly or a mesh file into a scene tree.

    ``config`` overrides the definition's explode options; mesh files have
    none of their own and use defaults.
    """
    path = Path(path)
    if path.suffix.lower() == ".json":
        root, file_config = assembly_to_scene(load_assembly(path))
    else:
        from .mesh_scene import load_mesh_scene

        root, file_config = load_mesh_scene(path), ExplodeConfig()
    return root, config or file_config


def load_assembly(path: str | Path) -> AssemblyDefinition:
    path = Path(path)
    log.info("loading assembly %s", path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise AssemblyLoadError(f"unable to read assembly {path}: {exc}") from exc
    return validate_assembly(data)


def save_assembly(path: str | Path, defn: AssemblyDefinition) -> None:
    Path(path).write_text(
        json.dumps(defn, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def assembly_to_scene(defn: AssemblyDefinition) -> tuple[SceneNode, ExplodeConfig]:
    """Build the scene tree and engine config described by ``defn``.

    ``defn`` is validated first, so malformed input raises ``ValueError``.
    """
    defn = validate_assembly(defn)
    config = ExplodeConfig.from_dict(defn.get("explode"))
    nodes: dict[str, SceneNode] = {}
    for entry in defn["nodes"]:
        bounds = None
        if "bounds" in entry:
            lo, hi = entry["bounds"]
            bounds = Box(np.asarray(lo, dtype=np.float64), np.asarray(hi, dtype=np.float64))
        if "basis" in entry:
            node = SceneNode(
                entry["name"],
                kind=entry.get("kind", "group"),
                position=entry.get("position"),
                basis=entry["basis"],
                bounds=bounds,
            )
        else:
            node = SceneNode.from_trs(
                entry["name"],
                kind=entry.get("kind", "group"),
                position=entry.get("position"),
                quat=entry.get("quat"),
                scale=entry.get("scale"),
                bounds=bounds,
            )
        nodes[node.name] = node
        parent = entry.get("parent")
        if parent is not None:
            nodes[parent].add(node)
    return nodes[defn["nodes"][0]["name"]], config


def scene_to_definition(
    root: SceneNode,
    config: ExplodeConfig | None = None,
    name: str = "Untitled",
) -> AssemblyDefinition:
    """Serialize a scene tree; transforms are written as position plus matrix basis."""
    entries: list[dict[str, Any]] = []
    for node in root.traverse():
        entry: dict[str, Any] = {
            "name": node.name,
            "parent": node.parent.name if node.parent is not None else None,
            "kind": node.kind,
            "position": node.position.tolist(),
        }
        if not np.allclose(node.basis, np.eye(3)):
            entry["basis"] = node.basis.tolist()
        if node.bounds is not None:
            entry["bounds"] = [node.bounds.min.tolist(), node.bounds.max.tolist()]
        entries.append(entry)
    defn: AssemblyDefinition = {
        "schema_version": 1,
        "metadata": {"name": name},
        "nodes": entries,
    }
    if config is not None:
        defn["explode"] = config.to_dict()
    return validate_assembly(defn)


def _require(obj: dict[str, Any], key: str, ctx: str) -> Any:
    if key not in obj:
        raise ValueError(f"missing required field: {ctx}.{key}")
    return obj[key]


def _validate_vector(value: Any, length: int, ctx: str) -> None:
    a = np.asarray(value, dtype=np.float64)
    if a.shape != (length,):
        raise ValueError(f"{ctx} must have length {length}")
    if not np.all(np.isfinite(a)):
        raise ValueError(f"{ctx} must be finite")


def _validate_node(entry: Any, idx: int, names: set[str]) -> None:
    ctx = f"nodes[{idx}]"
    if not isinstance(entry, dict):
        raise ValueError(f"{ctx} must be an object")
    name = _require(entry, "name", ctx)
    if not isinstance(name, str) or not name:
        raise ValueError(f"{ctx}.name must be a non-empty string")
    if name in names:
        raise ValueError(f"duplicate node name: {name}")

    parent = entry.get("parent")
    if parent is not None and parent not in names:
        raise ValueError(f"{ctx}.parent {parent!r} must name an earlier node")

    kind = entry.get("kind", "group")
    if kind not in NODE_KINDS:
        raise ValueError(f"{ctx}.kind must be one of {', '.join(NODE_KINDS)}")

    if "position" in entry:
        _validate_vector(entry["position"], 3, f"{ctx}.position")
    if "scale" in entry:
        _validate_vector(entry["scale"], 3, f"{ctx}.scale")
    if "quat" in entry:
        _validate_vector(entry["quat"], 4, f"{ctx}.quat")
        if np.linalg.norm(entry["quat"]) == 0.0:
            raise ValueError(f"{ctx}.quat must be non-zero")
    if "basis" in entry:
        if "quat" in entry or "scale" in entry:
            raise ValueError(f"{ctx}.basis cannot be combined with quat/scale")
        basis = np.asarray(entry["basis"], dtype=np.float64)
        if basis.shape != (3, 3) or not np.all(np.isfinite(basis)):
            raise ValueError(f"{ctx}.basis must be a finite 3x3 matrix")

    if kind != "group":
        bounds = _require(entry, "bounds", ctx)
        b = np.asarray(bounds, dtype=np.float64)
        if b.shape != (2, 3) or not np.all(np.isfinite(b)):
            raise ValueError(f"{ctx}.bounds must be [[min x, y, z], [max x, y, z]]")
        if np.any(b[0] > b[1]):
            raise ValueError(f"{ctx}.bounds min must be <= max")
    elif "bounds" in entry:
        raise ValueError(f"{ctx}.bounds is only valid on mesh nodes")
    names.add(name)


def validate_assembly(data: Any) -> AssemblyDefinition:
    if not isinstance(data, dict):
        raise ValueError("assembly must be a JSON object")
    if data.get("schema_version") != 1:
        raise ValueError("schema_version must be 1")

    if "explode" in data:
        ExplodeConfig.from_dict(data["explode"])

    nodes = _require(data, "nodes", "assembly")
    if not isinstance(nodes, list) or not nodes:
        raise ValueError("assembly.nodes must be a non-empty list")
    names: set[str] = set()
    roots = 0
    for idx, entry in enumerate(nodes):
        _validate_node(entry, idx, names)
        if entry.get("parent") is None:
            roots += 1
    if roots != 1:
        raise ValueError("assembly must have exactly one root node")
    if nodes[0].get("parent") is not None:
        raise ValueError("the first node must be the root")
    return data
