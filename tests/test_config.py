from __future__ import annotations

from dataclasses import replace

import pytest

from exploded_view.core.config import ExplodeConfig


def test_defaults_are_valid() -> None:
    cfg = ExplodeConfig()
    assert cfg.mode == "plane"
    assert cfg.smoothing_rate == 6.0
    assert cfg.fallback_direction == (0.0, 1.0, 0.0)


@pytest.mark.parametrize(
    "overrides",
    [
        {"smoothing_rate": 0.0},
        {"smoothing_rate": -1.0},
        {"max_travel_fraction": -0.1},
        {"base_push_fraction": -0.01},
        {"near_gap": -1e-3},
        {"same_layer_tolerance": float("nan")},
        {"epsilon_on_plane": 0.0},
        {"wheel_step": 0.0},
        {"radial_fraction": -1.0},
        {"plane_offset": float("inf")},
        {"mode": "spiral"},
        {"anchor_name": ""},
        {"fallback_direction": (0.0, 0.0, 0.0)},
        {"fallback_direction": (1.0, 0.0)},
        {"fallback_direction": (0.0, True, 0.0)},
        {"fallback_direction": 1.0},
        {"plane_offset": "-0.008"},
        {"plane_offset": None},
        {"near_gap": True},
        {"smoothing_rate": "6"},
        {"anchor_name": 3},
    ],
)
def test_invalid_config_fails_fast(overrides: dict) -> None:
    with pytest.raises(ValueError):
        ExplodeConfig(**overrides)


def test_radial_mode_allows_empty_anchor() -> None:
    cfg = ExplodeConfig(mode="radial", anchor_name="")
    assert cfg.mode == "radial"


def test_replace_revalidates() -> None:
    with pytest.raises(ValueError):
        replace(ExplodeConfig(), smoothing_rate=0.0)


def test_dict_round_trip() -> None:
    cfg = ExplodeConfig(mode="radial", radial_fraction=0.3, fallback_direction=(0, 0, 2))
    data = cfg.to_dict()
    assert data["fallback_direction"] == [0.0, 0.0, 2.0]
    assert ExplodeConfig.from_dict(data) == cfg


def test_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="unknown explode option"):
        ExplodeConfig.from_dict({"speed": 3})
    with pytest.raises(ValueError):
        ExplodeConfig.from_dict([1, 2])
    assert ExplodeConfig.from_dict(None) == ExplodeConfig()


def test_from_dict_type_errors_are_value_errors() -> None:
    with pytest.raises(ValueError, match="plane_offset must be a finite number"):
        ExplodeConfig.from_dict({"plane_offset": "low"})
    with pytest.raises(ValueError, match="wheel_step must be a finite number"):
        ExplodeConfig.from_dict({"wheel_step": False})
    with pytest.raises(ValueError, match="fallback_direction"):
        ExplodeConfig.from_dict({"fallback_direction": ["0", "1", "0"]})
    cfg = ExplodeConfig.from_dict({"fallback_direction": [0, 0, 1], "near_gap": 0})
    assert cfg.fallback_direction == (0.0, 0.0, 1.0)
    assert cfg.near_gap == 0
