from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from exploded_view.core.controller import prepare_assembly
from exploded_view.io import (
    AssemblyLoadError,
    assembly_to_scene,
    load_assembly,
    open_assembly,
    save_assembly,
    scene_to_definition,
    validate_assembly,
)


EXAMPLE = Path(__file__).resolve().parents[1] / "examples" / "assemblies" / "mirror_v1.json"


def _base_defn() -> dict:
    return {
        "schema_version": 1,
        "nodes": [
            {"name": "root", "parent": None},
            {
                "name": "bottom",
                "parent": "root",
                "kind": "mesh",
                "bounds": [[-1.0, -0.01, -1.0], [1.0, 0.01, 1.0]],
            },
            {
                "name": "lid",
                "parent": "root",
                "kind": "mesh",
                "position": [0.0, 0.5, 0.0],
                "quat": [1.0, 0.0, 0.0, 0.0],
                "scale": [1.0, 1.0, 1.0],
                "bounds": [[-0.5, -0.1, -0.5], [0.5, 0.1, 0.5]],
            },
        ],
    }


def test_example_assembly_clusters() -> None:
    root, config = open_assembly(EXAMPLE)
    assert config.anchor_name == "bottom"
    assembly = prepare_assembly(root, config)
    assert np.allclose(assembly.plane.normal, [0.0, 0.0, 1.0])
    names = [p.name for p in assembly.parts]
    assert "bottom" not in names
    assert "hanger" not in names
    assert len(names) == 9

    glass = assembly.cluster_of("glass")
    assert {p.name for p in glass.parts} == {
        "glass",
        "frame_top",
        "frame_bottom",
        "frame_left",
        "frame_right",
    }
    assert assembly.cluster_of("clip_left") is not assembly.cluster_of("clip_right")
    assert assembly.cluster_of("gasket") is None
    assert len(assembly.clusters) == 4

    badge = assembly.cluster_of("badge")
    assert badge.magnitude(1.0) > assembly.cluster_of("clip_left").magnitude(1.0)
    assert assembly.cluster_of("clip_left").magnitude(1.0) > glass.magnitude(1.0)


def test_round_trip(tmp_path: Path) -> None:
    defn = load_assembly(EXAMPLE)
    out = tmp_path / "roundtrip.json"
    save_assembly(out, defn)
    assert load_assembly(out) == defn


def test_scene_to_definition_round_trip() -> None:
    root, config = open_assembly(EXAMPLE)
    defn = scene_to_definition(root, config, name="mirror")
    root2, config2 = assembly_to_scene(json.loads(json.dumps(defn)))
    assert config2 == config
    for a, b in zip(root.traverse(), root2.traverse()):
        assert a.name == b.name
        assert a.kind == b.kind
        assert np.allclose(a.world_matrix(), b.world_matrix())


def test_builds_scene_from_definition() -> None:
    root, config = assembly_to_scene(_base_defn())
    assert config.mode == "plane"
    lid = root.find("lid")
    assert lid.parent is root
    assert np.allclose(lid.world_position(), [0.0, 0.5, 0.0])
    assert np.allclose(root.world_bounds().max, [1.0, 0.6, 1.0])


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda d: d.update(schema_version=2), "schema_version"),
        (lambda d: d.update(nodes=[]), "non-empty"),
        (lambda d: d["nodes"][1].update(name="root"), "duplicate"),
        (lambda d: d["nodes"][1].update(parent="nope"), "earlier node"),
        (lambda d: d["nodes"][1].update(kind="camera"), "kind"),
        (lambda d: d["nodes"][1].pop("bounds"), "bounds"),
        (lambda d: d["nodes"][1].update(bounds=[[1, 1, 1], [0, 0, 0]]), "min must be"),
        (lambda d: d["nodes"][0].update(bounds=[[0, 0, 0], [1, 1, 1]]), "only valid"),
        (lambda d: d["nodes"][2].update(position=[0.0, 1.0]), "position"),
        (lambda d: d["nodes"][2].update(quat=[0.0, 0.0, 0.0, 0.0]), "quat"),
        (lambda d: d["nodes"][2].update(basis=np.eye(3).tolist()), "basis"),
        (lambda d: d["nodes"].append({"name": "other"}), "exactly one root"),
        (lambda d: d.update(explode={"smoothing_rate": 0}), "smoothing_rate"),
    ],
)
def test_validation_errors(mutate, message: str) -> None:
    defn = _base_defn()
    mutate(defn)
    with pytest.raises(ValueError, match=message):
        validate_assembly(defn)


def test_load_missing_file_raises_load_error(tmp_path: Path) -> None:
    with pytest.raises(AssemblyLoadError):
        load_assembly(tmp_path / "missing.json")


def test_load_malformed_json_raises_load_error(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(AssemblyLoadError):
        load_assembly(path)


def test_open_assembly_config_override() -> None:
    from exploded_view.core.config import ExplodeConfig

    _, config = open_assembly(EXAMPLE, ExplodeConfig(mode="radial"))
    assert config.mode == "radial"


def test_assembly_to_scene_validates_definition() -> None:
    defn = _base_defn()
    defn["nodes"][1]["parent"] = "nope"
    with pytest.raises(ValueError, match="earlier node"):
        assembly_to_scene(defn)
    with pytest.raises(ValueError, match="schema_version"):
        assembly_to_scene({"nodes": [{"name": "root", "parent": None}]})
