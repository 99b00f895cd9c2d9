"""Explosion engine configuration."""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, fields
from typing import Any

import numpy as np


MODES = ("plane", "radial")


@dataclass(frozen=True, slots=True)
class ExplodeConfig:
    """Tunable constants for clustering, travel and smoothing.

    Fractions are relative to the assembly's bounding-box diagonal. Gaps and
    tolerances are absolute world-space lengths and are not rescaled per
    assembly.
    """

    mode: str = "plane"
    anchor_name: str = "bottom"
    plane_offset: float = -0.008
    max_travel_fraction: float = 0.4
    base_push_fraction: float = 0.02
    epsilon_on_plane: float = 1e-5
    near_gap: float = 0.015
    same_layer_tolerance: float = 0.0007
    near_band_exclusion: float = 0.002
    smoothing_rate: float = 6.0
    wheel_step: float = 0.06
    radial_fraction: float = 0.4
    fallback_direction: tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"mode must be one of {', '.join(MODES)}")
        if not isinstance(self.anchor_name, str):
            raise ValueError("anchor_name must be a string")
        if self.mode == "plane" and not self.anchor_name:
            raise ValueError("anchor_name must be a non-empty string in plane mode")
        _check_number("plane_offset", self.plane_offset)
        for name in (
            "max_travel_fraction",
            "base_push_fraction",
            "near_gap",
            "same_layer_tolerance",
            "near_band_exclusion",
            "radial_fraction",
        ):
            _check_non_negative(name, getattr(self, name))
        for name in ("epsilon_on_plane", "smoothing_rate", "wheel_step"):
            _check_positive(name, getattr(self, name))

        direction = self.fallback_direction
        if not isinstance(direction, (tuple, list, np.ndarray)):
            raise ValueError("fallback_direction must be three finite numbers")
        direction = tuple(direction)
        if len(direction) != 3 or not all(_is_finite_number(v) for v in direction):
            raise ValueError("fallback_direction must be three finite numbers")
        if np.linalg.norm(direction) == 0.0:
            raise ValueError("fallback_direction must be non-zero")
        object.__setattr__(self, "fallback_direction", tuple(float(v) for v in direction))

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ExplodeConfig":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("explode config must be an object")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown explode option(s): {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["fallback_direction"] = list(self.fallback_direction)
        return out


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def _check_number(name: str, value: Any) -> None:
    if not _is_finite_number(value):
        raise ValueError(f"{name} must be a finite number")


def _check_non_negative(name: str, value: float) -> None:
    _check_number(name, value)
    if value < 0:
        raise ValueError(f"{name} must be >= 0")


def _check_positive(name: str, value: float) -> None:
    _check_number(name, value)
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
