from __future__ import annotations

import numpy as np
import pytest

from exploded_view.core.config import ExplodeConfig
from exploded_view.core.controller import (
    ExplosionController,
    ExplosionState,
    prepare_assembly,
)
from exploded_view.core.geometry import Box
from exploded_view.core.math.quat import quat_from_axis_angle
from exploded_view.core.scene import SceneNode


def _cube(name: str, pos: tuple[float, float, float]) -> SceneNode:
    return SceneNode(
        name, kind="mesh", position=np.array(pos), bounds=Box(np.full(3, -0.5), np.full(3, 0.5))
    )


def _plate_with_grid() -> SceneNode:
    root = SceneNode("root")
    root.add(
        SceneNode(
            "bottom",
            kind="mesh",
            bounds=Box(np.array([-1.5, -0.005, -1.5]), np.array([1.5, 0.005, 1.5])),
        )
    )
    for i, (x, z) in enumerate([(-0.5, -0.5), (0.5, -0.5), (-0.5, 0.5), (0.5, 0.5)]):
        root.add(_cube(f"cube{i}", (x, 0.505, z)))
    return root


def _positions(root: SceneNode, names: list[str]) -> np.ndarray:
    return np.stack([root.find(n).world_position() for n in names])


CUBES = [f"cube{i}" for i in range(4)]


def test_state_clamps_targets() -> None:
    state = ExplosionState()
    state.set_target(5.0)
    assert state.target == 1.0
    assert state.current == 0.0
    state.set_target(-3.0)
    assert state.target == 0.0
    state.set_target(0.25, snap=True)
    assert state.current == 0.25


def test_smoothing_converges_monotonically() -> None:
    state = ExplosionState()
    state.set_target(1.0)
    rate = 6.0
    prev = state.current
    steps = 0
    while abs(state.target - state.current) > 1e-3:
        value = state.advance(1.0 / 60.0, rate)
        assert prev <= value <= 1.0
        prev = value
        steps += 1
        assert steps < 200
    assert steps <= 70


def test_large_dt_does_not_overshoot() -> None:
    state = ExplosionState()
    state.set_target(0.8)
    assert state.advance(10.0, 6.0) == 0.8
    state.set_target(0.2)
    state.advance(0.05, 6.0)
    assert 0.2 < state.current < 0.8


def test_negative_dt_rejected() -> None:
    with pytest.raises(ValueError):
        ExplosionState().advance(-0.1, 6.0)


def test_grid_scenario_single_cluster() -> None:
    root = _plate_with_grid()
    assembly = prepare_assembly(root, ExplodeConfig())
    assert len(assembly.parts) == 4
    assert len(assembly.clusters) == 1
    assert assembly.anchor is root.find("bottom")
    assert np.allclose(assembly.plane.normal, [0.0, 1.0, 0.0])


def test_grid_scenario_displacements() -> None:
    root = _plate_with_grid()
    original = _positions(root, CUBES)
    diag = root.world_bounds().diagonal()
    controller = ExplosionController()
    controller.load(root)
    assert np.allclose(_positions(root, CUBES), original)

    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    full = _positions(root, CUBES) - original
    assert np.allclose(full[:, [0, 2]], 0.0)
    assert np.allclose(full[:, 1], 0.42 * diag)

    controller.set_target(0.5, snap=True)
    controller.apply_to_scene()
    half = _positions(root, CUBES) - original
    assert np.allclose(half[:, 1], 0.21 * diag)
    assert np.all((half[:, 1] > 0.0) & (half[:, 1] < full[:, 1]))

    controller.set_target(0.0, snap=True)
    controller.apply_to_scene()
    assert np.allclose(_positions(root, CUBES), original)


def test_reloading_exploded_scene_keeps_assembled_snapshot() -> None:
    root = _plate_with_grid()
    original = _positions(root, CUBES)
    controller = ExplosionController()
    controller.load(root)
    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()

    controller.load(root, ExplodeConfig(mode="radial"))
    assert np.allclose(_positions(root, CUBES), original)

    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    controller.load(root)
    assert np.allclose(_positions(root, CUBES), original)
    assert np.allclose(root.find("bottom").world_position(), 0.0)

    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    exploded = _positions(root, CUBES)
    controller.set_target(0.0, snap=True)
    controller.apply_to_scene()
    assert np.allclose(_positions(root, CUBES), original)
    assert not np.allclose(exploded, original)


def test_failed_reload_of_same_scene_restores_explosion() -> None:
    root = _plate_with_grid()
    controller = ExplosionController()
    first = controller.load(root)
    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    exploded = _positions(root, CUBES)

    with pytest.raises(ValueError, match="anchor part not found"):
        controller.load(root, ExplodeConfig(anchor_name="missing"))
    assert controller.assembly is first
    assert controller.state.current == 1.0
    assert np.allclose(_positions(root, CUBES), exploded)


def test_anchor_never_moves() -> None:
    root = _plate_with_grid()
    controller = ExplosionController()
    controller.load(root)
    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    assert np.allclose(root.find("bottom").world_position(), 0.0)


def test_apply_is_idempotent() -> None:
    root = _plate_with_grid()
    controller = ExplosionController()
    controller.load(root)
    controller.set_target_absolute(1.0)
    controller.advance(0.05)
    controller.apply_to_scene()
    first = _positions(root, CUBES)
    controller.apply_to_scene()
    assert np.array_equal(first, _positions(root, CUBES))


def test_near_plane_part_never_moves() -> None:
    root = _plate_with_grid()
    flat = root.add(
        SceneNode(
            "shim",
            kind="mesh",
            position=np.array([5.0, -0.008, 0.0]),
            bounds=Box(np.full(3, -0.0005), np.full(3, 0.0005)),
        )
    )
    controller = ExplosionController()
    assembly = controller.load(root)
    assert assembly.cluster_of("shim") is None
    for value in (0.3, 1.0):
        controller.set_target(value, snap=True)
        controller.apply_to_scene()
        assert np.allclose(flat.world_position(), [5.0, -0.008, 0.0])


def test_displacement_through_transformed_parent() -> None:
    root = SceneNode("root")
    root.add(
        SceneNode(
            "bottom",
            kind="mesh",
            bounds=Box(np.array([-2.0, -0.005, -2.0]), np.array([2.0, 0.005, 2.0])),
        )
    )
    group = root.add(
        SceneNode.from_trs(
            "group",
            position=np.array([0.0, 1.0, 0.0]),
            quat=quat_from_axis_angle(np.array([0.0, 0.0, 1.0]), np.pi / 3),
            scale=np.array([0.5, 2.0, 1.0]),
        )
    )
    child = group.add(_cube("child", (0.2, 0.1, 0.0)))
    origin = child.world_position()
    controller = ExplosionController()
    assembly = controller.load(root)
    cluster = assembly.cluster_of("child")
    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    expected = origin + np.array([0.0, 1.0, 0.0]) * cluster.magnitude(1.0)
    assert np.allclose(child.world_position(), expected)


def test_empty_assembly_is_inert() -> None:
    root = SceneNode("root")
    root.add(
        SceneNode("bottom", kind="mesh", bounds=Box(np.full(3, -1.0), np.array([1.0, -0.9, 1.0])))
    )
    controller = ExplosionController()
    assembly = controller.load(root)
    assert assembly.clusters == ()
    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    assert controller.diagnostics()["max_displacement"] == 0.0


def test_missing_anchor_fails_and_keeps_previous() -> None:
    controller = ExplosionController()
    first = controller.load(_plate_with_grid())
    controller.set_target(0.7, snap=True)
    bad = SceneNode("root")
    bad.add(_cube("lonely", (0.0, 0.0, 0.0)))
    with pytest.raises(ValueError):
        controller.load(bad)
    assert controller.assembly is first
    assert controller.state.current == 0.7


def test_load_resets_state() -> None:
    controller = ExplosionController()
    controller.load(_plate_with_grid())
    controller.set_target(1.0, snap=True)
    controller.load(_plate_with_grid())
    assert controller.state.current == 0.0
    assert controller.state.target == 0.0


def test_input_mapping() -> None:
    controller = ExplosionController(ExplodeConfig(wheel_step=0.1))
    controller.wheel(-120.0)
    assert np.isclose(controller.state.target, 0.1)
    controller.wheel(53.0)
    controller.wheel(53.0)
    assert controller.state.target == 0.0
    controller.adjust_target(0.4)
    assert np.isclose(controller.state.target, 0.4)
    controller.toggle()
    assert controller.state.target == 1.0
    controller.toggle()
    assert controller.state.target == 0.0
    controller.explode()
    assert controller.state.target == 1.0
    controller.assemble()
    assert controller.state.target == 0.0


def test_radial_mode_moves_every_part() -> None:
    root = SceneNode("root")
    root.add(_cube("left", (-1.0, 0.0, 0.0)))
    root.add(_cube("right", (1.0, 0.0, 0.0)))
    cfg = ExplodeConfig(mode="radial", radial_fraction=0.25)
    controller = ExplosionController(cfg)
    assembly = controller.load(root)
    assert assembly.plane is None
    assert len(assembly.clusters) == 2
    diag = root.world_bounds().diagonal()
    controller.set_target(1.0, snap=True)
    controller.apply_to_scene()
    assert np.allclose(root.find("left").world_position(), [-1.0 - 0.25 * diag, 0.0, 0.0])
    assert np.allclose(root.find("right").world_position(), [1.0 + 0.25 * diag, 0.0, 0.0])
