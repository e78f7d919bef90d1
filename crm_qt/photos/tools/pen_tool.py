from __future__ import annotations
from typing import TYPE_CHECKING

from PySide6 import QtCore, QtGui
from PySide6.QtCore import QEvent, QPointF, Qt

from crm_qt.photos.core.data_models import Point

if TYPE_CHECKING:
    from crm_qt.photos.core.canvas_widget import AnnotationCanvas


class PenTool:
    """Freehand markup pen: forwards left-button / stylus drags to the canvas session."""

    def __init__(self, canvas: 'AnnotationCanvas'):
        self.canvas = canvas

    def on_activate(self):
        pass

    def on_deactivate(self):
        # switching tools mid-drag behaves like pointer-up
        self.finish()

    def _point(self, pos: QPointF) -> Point:
        return self.canvas.map_to_canvas(pos)

    # ---- shared press / move / release ----
    def _press(self, pos: QPointF, button):
        if button != Qt.LeftButton:
            return
        self.canvas.session.begin_stroke(self._point(pos))
        self.canvas.update()

    def _move(self, pos: QPointF, buttons):
        session = self.canvas.session
        if not session.is_drawing or not (buttons & Qt.LeftButton):
            return
        session.extend_stroke(self._point(pos))
        self.canvas.update()

    def _release(self, button):
        if button != Qt.LeftButton:
            return
        self.finish()

    # ---- mouse ----
    def mousePressEvent(self, e: QtGui.QMouseEvent):
        self._press(e.position(), e.button())

    def mouseMoveEvent(self, e: QtGui.QMouseEvent):
        self._move(e.position(), e.buttons())

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent):
        self._release(e.button())

    # ---- stylus: pen tip reports as LeftButton ----
    def tabletEvent(self, e: QtGui.QTabletEvent):
        t = e.type()
        if t == QEvent.TabletPress:
            self._press(e.position(), e.button())
        elif t == QEvent.TabletMove:
            self._move(e.position(), e.buttons())
        elif t == QEvent.TabletRelease:
            self._release(e.button())
        else:
            e.ignore()
            return
        # no synthesized mouse event for this one
        e.accept()

    def leaveEvent(self, e: QtCore.QEvent):
        self.finish()

    def finish(self):
        session = self.canvas.session
        if not session.is_drawing:
            return
        before = session.stroke_count
        session.end_stroke()
        if session.stroke_count != before:
            self.canvas.strokesChanged.emit(session.stroke_count)
        self.canvas.update()
