"""3D viewport backed by VisPy."""

from __future__ import annotations

import numpy as np
from PySide6 import QtCore, QtWidgets
from vispy import app, scene

from ..core.geometry import Box, Plane
from .viz_utils import boxes_mesh, compute_bounds, plane_outline, vertex_colors

app.use_app("pyside6")


class NoZoomTurntableCamera(scene.TurntableCamera):
    """Turntable camera that leaves the wheel to the explosion control."""

    def viewbox_mouse_event(self, event: object) -> None:
        if getattr(event, "type", None) == "mouse_wheel":
            return
        super().viewbox_mouse_event(event)


class ViewportWidget(QtWidgets.QWidget):
    wheel_scrolled = QtCore.Signal(float)
    key_pressed = QtCore.Signal(str)

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)

        self._canvas = scene.SceneCanvas(
            keys=None,
            bgcolor="#0b0b0e",
            size=(800, 600),
        )
        self._view = self._canvas.central_widget.add_view()
        self._view.camera = NoZoomTurntableCamera(
            fov=45, azimuth=45, elevation=25, distance=6
        )

        self._parts = scene.visuals.Mesh(parent=self._view.scene, shading=None)
        self._anchor = scene.visuals.Mesh(parent=self._view.scene, shading=None)
        self._plane = scene.visuals.Line(parent=self._view.scene, color=(1.0, 1.0, 0.3, 0.6))
        self._plane.set_gl_state("translucent", depth_test=False)
        self._plane.visible = False
        self._part_colors = np.zeros((0, 4), dtype=np.float32)

        self._canvas.events.mouse_wheel.connect(self._on_mouse_wheel)
        self._canvas.events.key_press.connect(self._on_key_press)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._canvas.native)

    def set_part_colors(self, colors: np.ndarray) -> None:
        self._part_colors = np.asarray(colors, dtype=np.float32)

    def set_parts(self, boxes: list[Box]) -> None:
        verts, faces = boxes_mesh(boxes)
        if verts.shape[0] == 0:
            self._parts.visible = False
            return
        colors = self._part_colors
        if colors.shape[0] != len(boxes):
            colors = np.full((len(boxes), 4), 0.8, dtype=np.float32)
        self._parts.set_data(vertices=verts, faces=faces, vertex_colors=vertex_colors(colors))
        self._parts.visible = True

    def set_anchor(self, box: Box | None) -> None:
        if box is None or box.is_empty():
            self._anchor.visible = False
            return
        verts, faces = boxes_mesh([box])
        self._anchor.set_data(vertices=verts, faces=faces, color=(0.35, 0.35, 0.38, 1.0))
        self._anchor.visible = True

    def set_plane(self, plane: Plane | None, size: float) -> None:
        if plane is None or size <= 0.0:
            self._plane.visible = False
            return
        self._plane.set_data(pos=plane_outline(plane.normal, plane.coplanar_point(), size))

    def set_plane_visible(self, visible: bool) -> None:
        self._plane.visible = visible

    def frame_all(self, boxes: list[Box]) -> None:
        if not boxes:
            return
        pts = np.concatenate([np.stack([b.min, b.max]) for b in boxes])
        center, radius = compute_bounds(pts)
        camera = self._view.camera
        camera.center = center
        camera.distance = max(radius * 3.0, 1e-3)

    def _on_mouse_wheel(self, event: object) -> None:
        delta = getattr(event, "delta", (0.0, 0.0))
        # vispy reports scroll-up as positive y; the engine expects DOM-style sign
        self.wheel_scrolled.emit(-float(delta[1]))

    def _on_key_press(self, event: object) -> None:
        key = getattr(event, "key", None)
        name = getattr(key, "name", None)
        if name:
            self.key_pressed.emit(str(name))
