from __future__ import annotations
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets
from PySide6.QtCore import Qt, QSize, QPointF, Signal
from PySide6.QtGui import QPainter

from crm_qt.photos.core.data_models import Point, StrokeStyle
from crm_qt.photos.core.letterbox import fit_placement
from crm_qt.photos.io.image_io import ImageSource
from crm_qt.photos.state.annotation_session import AnnotationSession
from crm_qt.photos.tools.pen_tool import PenTool


class AnnotationCanvas(QtWidgets.QWidget):
    """
    Hosts one AnnotationSession and shows its buffer scaled to fit the widget.

    Mouse events go to the pen tool; widget coordinates are mapped into
    buffer coordinates with map_to_canvas() before reaching the session.
    """
    strokesChanged = Signal(int)

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None, *, width: int = 800, height: int = 450,
                 image_source: Optional[ImageSource] = None, style: Optional[StrokeStyle] = None,
                 fill=Qt.transparent, backdrop=Qt.black):
        super().__init__(parent)
        self.setAttribute(Qt.WA_OpaquePaintEvent, False)
        self.setMouseTracking(False)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setCursor(Qt.CrossCursor)
        self._backdrop = QtGui.QColor(backdrop)

        self.session: Optional[AnnotationSession] = AnnotationSession(
            width, height, image_source, style=style, fill=fill)
        self.tool = PenTool(self)
        self.tool.on_activate()

    # ---- infra ----
    def sizeHint(self) -> QSize:
        return QSize(self.session.width, self.session.height) if self.session else QSize(800, 450)

    def minimumSizeHint(self) -> QSize:
        return QSize(160, 90)

    def _target_rect(self) -> QtCore.QRectF:
        """Where the buffer is drawn inside the widget (aspect preserved)."""
        pl = fit_placement(self.session.width, self.session.height, max(1, self.width()), max(1, self.height()))
        return QtCore.QRectF(pl.x, pl.y, pl.width, pl.height)

    def map_to_canvas(self, pos: QPointF) -> Point:
        r = self._target_rect()
        sx = self.session.width / r.width()
        sy = self.session.height / r.height()
        return Point((pos.x() - r.x()) * sx, (pos.y() - r.y()) * sy)

    def load_image(self, image_source: ImageSource) -> bool:
        if self.session is None:
            return False
        ok = self.session.initialize(image_source)
        self.update()
        return ok

    # ---- actions ----
    def undo(self) -> bool:
        if self.session is None:
            return False
        removed = self.session.undo()
        if removed:
            self.strokesChanged.emit(self.session.stroke_count)
            self.update()
        return removed

    def clear(self, keep_background: bool = True):
        if self.session is None:
            return
        self.session.clear(keep_background)
        self.strokesChanged.emit(0)
        self.update()

    def discard(self):
        """Drop the session (dialog closed or saved)."""
        if self.session is not None:
            self.tool.on_deactivate()
            self.session = None
            self.update()

    # ---- paint ----
    def paintEvent(self, e: QtGui.QPaintEvent):
        p = QPainter(self)
        p.fillRect(self.rect(), self._backdrop)
        if self.session is not None:
            p.setRenderHint(QPainter.SmoothPixmapTransform, True)
            p.drawImage(self._target_rect(), self.session.buffer)
        p.end()

    # ---- events -> pen tool ----
    def mousePressEvent(self, e: QtGui.QMouseEvent):
        if self.session is not None:
            self.tool.mousePressEvent(e)

    def mouseMoveEvent(self, e: QtGui.QMouseEvent):
        if self.session is not None:
            self.tool.mouseMoveEvent(e)

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent):
        if self.session is not None:
            self.tool.mouseReleaseEvent(e)

    def tabletEvent(self, e: QtGui.QTabletEvent):
        if self.session is not None:
            self.tool.tabletEvent(e)
        else:
            e.ignore()

    def leaveEvent(self, e: QtCore.QEvent):
        if self.session is not None:
            self.tool.leaveEvent(e)
        super().leaveEvent(e)

    def keyPressEvent(self, e: QtGui.QKeyEvent):
        if e.matches(QtGui.QKeySequence.Undo):
            self.undo()
        else:
            super().keyPressEvent(e)
