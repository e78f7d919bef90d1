from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional

from PySide6 import QtCore

from crm_qt.photos.core.data_models import RGBA, MARKUP_RED, StrokeStyle

logger = logging.getLogger(__name__)

ORGANIZATION = "RoofCRM"
APPLICATION = "PhotoMarkup"

MIN_WIDTH, MAX_WIDTH = 1, 100


def _clamp_width(v) -> int:
    return max(MIN_WIDTH, min(MAX_WIDTH, int(v)))


def _parse_rgba(value) -> RGBA:
    # QSettings returns lists or "r,g,b,a" strings depending on backend
    if isinstance(value, str):
        value = [v for v in value.split(",") if v.strip()]
    try:
        parts = [max(0, min(255, int(v))) for v in value]
    except (TypeError, ValueError):
        return MARKUP_RED
    if len(parts) == 3:
        parts.append(255)
    if len(parts) != 4:
        return MARKUP_RED
    return tuple(parts)  # type: ignore[return-value]


@dataclass
class AnnotationSettings:
    """Pen + canvas preferences, persisted through QSettings."""
    pen_width: int = 5
    pen_rgba: RGBA = MARKUP_RED
    canvas_width: int = 800
    canvas_height: int = 450              # 16:9
    export_format: str = "PNG"            # "PNG" | "JPEG"
    _qsettings: Optional[QtCore.QSettings] = field(default=None, repr=False, compare=False)

    @classmethod
    def load(cls, qsettings: Optional[QtCore.QSettings] = None) -> "AnnotationSettings":
        s = qsettings if qsettings is not None else QtCore.QSettings(ORGANIZATION, APPLICATION)
        d = cls()
        try:
            fmt = str(s.value("export_format", d.export_format)).upper()
            obj = cls(
                pen_width=_clamp_width(s.value("pen_width", d.pen_width)),
                pen_rgba=_parse_rgba(s.value("pen_rgba", list(d.pen_rgba))),
                canvas_width=max(1, int(s.value("canvas_width", d.canvas_width))),
                canvas_height=max(1, int(s.value("canvas_height", d.canvas_height))),
                export_format=fmt if fmt in ("PNG", "JPEG") else d.export_format,
            )
        except (TypeError, ValueError) as e:
            logger.warning("Invalid markup settings, using defaults: %s", e)
            obj = cls()
        obj._qsettings = s
        return obj

    def save(self):
        s = self._qsettings if self._qsettings is not None else QtCore.QSettings(ORGANIZATION, APPLICATION)
        s.setValue("pen_width", self.pen_width)
        s.setValue("pen_rgba", ",".join(str(c) for c in self.pen_rgba))
        s.setValue("canvas_width", self.canvas_width)
        s.setValue("canvas_height", self.canvas_height)
        s.setValue("export_format", self.export_format)
        s.sync()

    def set_pen_width(self, value: int):
        self.pen_width = _clamp_width(value)

    def stroke_style(self) -> StrokeStyle:
        return StrokeStyle(rgba=self.pen_rgba, width=self.pen_width)
