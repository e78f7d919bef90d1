from __future__ import annotations
import argparse
import logging
import sys
from typing import Callable, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from crm_qt.photos.core.canvas_widget import AnnotationCanvas
from crm_qt.photos.io import image_io
from crm_qt.photos.io.image_io import ImageSource
from crm_qt.photos.settings import AnnotationSettings, ORGANIZATION, APPLICATION
from crm_qt.photos.ui.toolbar import MarkupToolbar

logger = logging.getLogger(__name__)


class PhotoAnnotationDialog(QtWidgets.QDialog):
    """Markup dialog for a captured photo: draw, undo, Done -> on_saved(data_url)."""

    def __init__(self, image_source: ImageSource, parent=None,
                 on_saved: Optional[Callable[[str], None]] = None,
                 settings: Optional[AnnotationSettings] = None):
        super().__init__(parent)
        self.setWindowTitle("Mark up photo")
        self._on_saved_cb = on_saved
        self.settings = settings or AnnotationSettings.load()
        self.exported: Optional[QtGui.QImage] = None

        self._build_ui(image_source)
        self.resize(self.settings.canvas_width, self.settings.canvas_height + self.toolbar.sizeHint().height())

    # ========== UI ==========
    def _build_ui(self, image_source: ImageSource):
        lay = QtWidgets.QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.setSpacing(0)

        self.toolbar = MarkupToolbar(self)
        self.toolbar.requestUndo.connect(self.undo)
        self.toolbar.requestClear.connect(self.clear)
        self.toolbar.requestDone.connect(self.done_and_save)
        self.toolbar.requestCancel.connect(self.reject)
        lay.addWidget(self.toolbar)

        self.canvas = AnnotationCanvas(self, width=self.settings.canvas_width,
                                       height=self.settings.canvas_height,
                                       image_source=image_source,
                                       style=self.settings.stroke_style())
        self.canvas.strokesChanged.connect(self.toolbar.reflect_strokes)
        lay.addWidget(self.canvas, 1)

        if not self.canvas.session.has_background:
            self.setWindowTitle("Mark up photo (image unavailable)")

    # ========== actions ==========
    def undo(self):
        self.canvas.undo()

    def clear(self):
        self.canvas.clear()

    def done_and_save(self):
        session = self.canvas.session
        if session is None:
            return
        fmt = self.settings.export_format
        self.exported = session.export()
        data_url = image_io.to_data_url(self.exported, fmt)
        if self._on_saved_cb:
            try:
                self._on_saved_cb(data_url)
            except Exception:
                logger.exception("on_saved callback failed")
        self.canvas.discard()
        self.accept()

    def reject(self):
        self.canvas.discard()
        super().reject()

    def closeEvent(self, e: QtGui.QCloseEvent):
        self.canvas.discard()
        super().closeEvent(e)


# ======= Entrypoint (standalone) =======
def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Mark up a job-site photo.")
    ap.add_argument("image", help="path or data URL of the photo")
    ap.add_argument("-o", "--output", help="write the marked-up image here when Done is pressed")
    ap.add_argument("--width", type=int, help="canvas width (px)")
    ap.add_argument("--height", type=int, help="canvas height (px)")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv[:1])
    QtCore.QCoreApplication.setOrganizationName(ORGANIZATION)
    QtCore.QCoreApplication.setApplicationName(APPLICATION)

    settings = AnnotationSettings.load()
    if args.width:
        settings.canvas_width = max(1, args.width)
    if args.height:
        settings.canvas_height = max(1, args.height)

    dlg = PhotoAnnotationDialog(args.image, settings=settings)
    if dlg.exec() == QtWidgets.QDialog.DialogCode.Accepted.value and args.output and dlg.exported is not None:
        image_io.save_image(dlg.exported, args.output)
        logger.info("saved %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
