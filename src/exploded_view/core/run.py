"""Fixed-step animation loop with optional sampling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .controller import ExplosionController


@dataclass(slots=True)
class RunResult:
    final_explosion: float
    time: np.ndarray | None = None
    explosion: np.ndarray | None = None
    part_pos: np.ndarray | None = None


def run(
    controller: ExplosionController,
    dt: float,
    steps: int,
    sample_every: int | None = None,
    callback: Callable[[int, ExplosionController], None] | None = None,
) -> RunResult:
    if sample_every is not None and sample_every <= 0:
        raise ValueError("sample_every must be > 0")
    if steps < 0:
        raise ValueError("steps must be >= 0")

    times: list[float] = []
    values: list[float] = []
    positions: list[np.ndarray] = []

    def sample(step: int) -> None:
        times.append(step * dt)
        values.append(controller.state.current)
        positions.append(controller.part_world_positions())

    if sample_every is not None:
        sample(0)

    for step in range(1, steps + 1):
        controller.step(dt)
        if callback is not None:
            callback(step, controller)
        if sample_every is not None and step % sample_every == 0:
            sample(step)

    if sample_every is None:
        return RunResult(final_explosion=controller.state.current)

    return RunResult(
        final_explosion=controller.state.current,
        time=np.asarray(times, dtype=np.float64),
        explosion=np.asarray(values, dtype=np.float64),
        part_pos=np.asarray(positions, dtype=np.float64),
    )
