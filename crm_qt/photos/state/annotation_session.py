from __future__ import annotations
import logging
from typing import List, Optional

from PySide6 import QtCore, QtGui
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage, QPainter, QPen

from crm_qt.photos.core.data_models import Point, Stroke, StrokeStyle, Placement
from crm_qt.photos.core.letterbox import fit_placement
from crm_qt.photos.io import image_io
from crm_qt.photos.io.image_io import ImageSource

logger = logging.getLogger(__name__)


class AnnotationSession:
    """
    One markup session: background photo + committed strokes + in-progress stroke.

    Owns its pixel buffer and decoded image. Every mutation ends in a full
    repaint of the buffer (clear -> background -> committed strokes -> current
    stroke). No method raises to the caller; failures are logged and degrade
    to a no-op or a blank background.

    Idle --begin_stroke--> Drawing --end_stroke--> Idle; undo/clear stay Idle.
    """

    def __init__(self, width: int, height: int, image_source: Optional[ImageSource] = None,
                 style: Optional[StrokeStyle] = None,
                 fill: QtGui.QColor | Qt.GlobalColor = Qt.transparent):
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.style = style or StrokeStyle()
        self._fill = fill

        self._buffer = QImage(self.width, self.height, QImage.Format_ARGB32_Premultiplied)
        self._background: Optional[QImage] = None
        self._placement: Optional[Placement] = None
        self._strokes: List[Stroke] = []
        self._current: List[Point] = []
        self._drawing = False

        if image_source is not None:
            self.initialize(image_source)
        else:
            self.repaint()

    # ---- background ----
    def initialize(self, image_source: ImageSource) -> bool:
        """Load the background. On failure logs and keeps the canvas blank (no retry)."""
        try:
            img = image_io.load_image(image_source)
            placement = fit_placement(img.width(), img.height(), self.width, self.height)
        except ValueError as e:
            logger.error("Error loading image: %s", e)
            self._background = None
            self._placement = None
        else:
            self._background = img
            self._placement = placement
            logger.debug("background %dx%d placed at %s", img.width(), img.height(), placement)
        self.repaint()
        return self._background is not None

    @property
    def has_background(self) -> bool:
        return self._background is not None

    @property
    def placement(self) -> Optional[Placement]:
        return self._placement

    # ---- read-only views ----
    @property
    def strokes(self) -> List[Stroke]:
        return list(self._strokes)

    @property
    def current_points(self) -> List[Point]:
        return list(self._current)

    @property
    def stroke_count(self) -> int:
        return len(self._strokes)

    @property
    def is_drawing(self) -> bool:
        return self._drawing

    @property
    def is_empty(self) -> bool:
        return not self._strokes

    # ---- strokes ----
    def begin_stroke(self, point: Point):
        self._drawing = True
        self._current = [point]

    def extend_stroke(self, point: Point):
        if not self._drawing:
            return
        self._current.append(point)
        self.repaint()

    def end_stroke(self) -> Optional[Stroke]:
        """Commit the in-progress stroke if it has >= 2 points; a tap is dropped."""
        if not self._drawing:
            return None
        committed = None
        if len(self._current) >= 2:
            committed = self.style.make_stroke(self._current)
            self._strokes.append(committed)
        else:
            logger.debug("discarding stroke with %d point(s)", len(self._current))
        self._drawing = False
        self._current = []
        self.repaint()
        return committed

    def undo(self) -> bool:
        if not self._strokes:
            return False
        self._strokes.pop()
        self.repaint()
        return True

    def clear(self, keep_background: bool = True):
        self._strokes.clear()
        self._current = []
        self._drawing = False
        if not keep_background:
            self._background = None
            self._placement = None
        self.repaint()

    # ---- geometry ----
    def resize(self, width: int, height: int):
        """Reallocate the buffer; strokes are kept as-is, the background is re-fitted."""
        width, height = max(1, int(width)), max(1, int(height))
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = width, height
        self._buffer = QImage(width, height, QImage.Format_ARGB32_Premultiplied)
        if self._background is not None:
            self._placement = fit_placement(self._background.width(), self._background.height(), width, height)
        self.repaint()

    # ---- render ----
    def repaint(self):
        self._buffer.fill(self._fill)
        p = QPainter(self._buffer)
        p.setRenderHint(QPainter.Antialiasing, True)
        p.setRenderHint(QPainter.SmoothPixmapTransform, True)

        # a) background
        if self._background is not None and self._placement is not None:
            pl = self._placement
            p.drawImage(QtCore.QRectF(pl.x, pl.y, pl.width, pl.height), self._background)

        # b) committed strokes
        for s in self._strokes:
            _draw_polyline(p, s.points, s.rgba, s.width)

        # c) in-progress stroke
        if len(self._current) > 1:
            _draw_polyline(p, self._current, self.style.rgba, self.style.width)
        p.end()

    @property
    def buffer(self) -> QImage:
        return self._buffer

    # ---- export ----
    def export(self) -> QImage:
        """Flattened copy of the buffer; same size as the canvas. State is left untouched."""
        if self._drawing:
            # Export reflects committed strokes only.
            current, self._current = self._current, []
            self.repaint()
            out = self._buffer.copy()
            self._current = current
            self.repaint()
            return out
        return self._buffer.copy()

    def _encode(self, fmt: str, quality: int):
        """(fmt, bytes) of the export; an unusable format falls back to PNG."""
        img = self.export()
        try:
            return fmt, image_io.encode_image(img, fmt, quality)
        except ValueError as e:
            logger.warning("%s; exporting PNG instead", e)
            return "PNG", image_io.encode_image(img, "PNG")

    def export_bytes(self, fmt: str = "PNG", quality: int = -1) -> bytes:
        return self._encode(fmt, quality)[1]

    def export_data_url(self, fmt: str = "PNG", quality: int = -1) -> str:
        used, data = self._encode(fmt, quality)
        return image_io.encode_data_url(data, image_io.mime_for(used))


def _draw_polyline(p: QPainter, points, rgba, width: int):
    if len(points) < 2:
        return
    path = QtGui.QPainterPath(QtCore.QPointF(points[0].x, points[0].y))
    for pt in points[1:]:
        path.lineTo(QtCore.QPointF(pt.x, pt.y))
    p.setCompositionMode(QPainter.CompositionMode_SourceOver)
    p.setPen(QPen(QtGui.QColor(*rgba), width, Qt.SolidLine, Qt.RoundCap, Qt.RoundJoin))
    p.setBrush(Qt.NoBrush)
    p.drawPath(path)
