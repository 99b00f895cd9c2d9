"""CLI entrypoint: print exploded part positions or launch the viewer."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from . import __version__
from .core.config import MODES
from .core.controller import ExplosionController
from .io.assembly import open_assembly


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="exploded-view")
    parser.add_argument("assembly", type=Path)
    parser.add_argument("--explosion", type=float, default=1.0)
    parser.add_argument("--mode", choices=MODES, default=None)
    parser.add_argument("--anchor", default=None)
    parser.add_argument("--gui", action="store_true")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"exploded_view v{__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    root, config = open_assembly(args.assembly)
    overrides = {}
    if args.mode is not None:
        overrides["mode"] = args.mode
    if args.anchor is not None:
        overrides["anchor_name"] = args.anchor
    if overrides:
        config = replace(config, **overrides)

    if args.gui:
        from .app.main import main as gui_main
        from .app.view_controller import ExplodeViewController

        return gui_main(ExplodeViewController(config), args.assembly)

    controller = ExplosionController(config)
    controller.load(root)
    controller.set_target(args.explosion, snap=True)
    controller.apply_to_scene()

    info = controller.diagnostics()
    print(f"mode: {info['mode']}")
    print(f"parts: {info['parts']}  clusters: {info['clusters']}")
    print(f"explosion: {controller.state.current:.3f}")
    for name, pos in zip(controller.part_names(), controller.part_world_positions()):
        print(f"{name}: {pos[0]:.6f} {pos[1]:.6f} {pos[2]:.6f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
