"""Main window for the exploded-view app."""

from __future__ import annotations

from pathlib import Path

from PySide6 import QtCore, QtGui, QtWidgets

from .view_controller import ExplodeViewController
from .viewport import ViewportWidget
from .viz_utils import cluster_colors


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, controller: ExplodeViewController | None = None) -> None:
        super().__init__()
        self.resize(1200, 800)

        self._controller = controller or ExplodeViewController()
        self._clock = QtCore.QElapsedTimer()
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(16)
        self._timer.timeout.connect(self._on_tick)

        self._viewport = ViewportWidget(self)
        self._viewport.wheel_scrolled.connect(self._on_wheel)
        self._viewport.key_pressed.connect(self._on_key)
        self.setCentralWidget(self._viewport)

        self._build_toolbar()
        self._build_menus()
        if self._controller.has_assembly():
            self._sync_viewport(frame=True)
        self._update_window_title()
        self.statusBar().showMessage("Ready")

        self._clock.start()
        self._timer.start()

    def _build_toolbar(self) -> None:
        self._toolbar = QtWidgets.QToolBar("Main", self)
        self._toolbar.setMovable(False)
        self.addToolBar(QtCore.Qt.ToolBarArea.TopToolBarArea, self._toolbar)

        self._action_explode = QtGui.QAction("Explode", self)
        self._action_explode.triggered.connect(lambda: self._on_key("E"))
        self._toolbar.addAction(self._action_explode)

        self._action_assemble = QtGui.QAction("Assemble", self)
        self._action_assemble.triggered.connect(lambda: self._on_key("A"))
        self._toolbar.addAction(self._action_assemble)

        self._action_reset = QtGui.QAction("Reset", self)
        self._action_reset.triggered.connect(lambda: self._on_key("R"))
        self._toolbar.addAction(self._action_reset)

        self._toolbar.addSeparator()

        self._action_frame_all = QtGui.QAction("Frame All", self)
        self._action_frame_all.triggered.connect(
            lambda: self._viewport.frame_all(self._controller.part_boxes())
        )
        self._toolbar.addAction(self._action_frame_all)

        self._plane_toggle = QtWidgets.QToolButton(self)
        self._plane_toggle.setText("Show Plane")
        self._plane_toggle.setCheckable(True)
        self._plane_toggle.toggled.connect(self._viewport.set_plane_visible)
        self._toolbar.addWidget(self._plane_toggle)

    def _build_menus(self) -> None:
        self._action_load = QtGui.QAction("Load", self)
        self._action_load.setShortcut(QtGui.QKeySequence.Open)
        self._action_load.triggered.connect(self._on_load)

        self._action_quit = QtGui.QAction("Quit", self)
        self._action_quit.setShortcut(QtGui.QKeySequence.Quit)
        self._action_quit.triggered.connect(self.close)

        file_menu = self.menuBar().addMenu("File")
        file_menu.addAction(self._action_load)
        file_menu.addSeparator()
        file_menu.addAction(self._action_quit)

    def load_assembly(self, path: str | Path) -> None:
        self._controller.load_assembly(path)
        self._sync_viewport(frame=True)
        self._update_window_title()

    def _on_load(self) -> None:
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Load Assembly",
            "",
            "Assemblies (*.json *.glb *.gltf *.obj *.stl *.ply)",
        )
        if not path:
            return
        try:
            self.load_assembly(path)
        except Exception as exc:  # pragma: no cover - Qt error path
            QtWidgets.QMessageBox.critical(self, "Load Failed", str(exc))
            return
        self.statusBar().showMessage(f"Loaded {Path(path).name}")

    def _on_wheel(self, delta_y: float) -> None:
        self._controller.on_wheel(delta_y)

    def _on_key(self, key: str) -> None:
        if self._controller.on_key(key):
            self._sync_viewport()

    def _on_tick(self) -> None:
        dt = self._clock.restart() / 1000.0
        if self._controller.tick(dt):
            self._sync_viewport()
        self._update_status()

    def _sync_viewport(self, frame: bool = False) -> None:
        boxes = self._controller.part_boxes()
        if frame:
            assembly = self._controller.assembly
            self._viewport.set_part_colors(cluster_colors(self._controller.part_cluster_ids()))
            self._viewport.set_anchor(self._controller.anchor_box())
            if assembly is not None:
                self._viewport.set_plane(assembly.plane, assembly.diagonal)
            self._viewport.frame_all(boxes)
        self._viewport.set_parts(boxes)

    def _update_status(self) -> None:
        info = self._controller.diagnostics()
        self.statusBar().showMessage(
            f"parts {info['parts']}  clusters {info['clusters']}  "
            f"explosion {float(info['explosion']):.3f} -> {float(info['target']):.2f}"
        )

    def _update_window_title(self) -> None:
        self.setWindowTitle(self._controller.window_title())
