"""Desktop app entrypoint."""

from __future__ import annotations

import sys
from pathlib import Path

from PySide6 import QtWidgets

from .view_controller import ExplodeViewController
from .window import MainWindow


def main(controller: ExplodeViewController | None = None, path: str | Path | None = None) -> int:
    qt_app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    window = MainWindow(controller)
    if path is not None:
        window.load_assembly(path)
    window.show()
    return int(qt_app.exec())


if __name__ == "__main__":
    raise SystemExit(main())
