from __future__ import annotations

from PySide6 import QtWidgets
from PySide6.QtCore import Qt, Signal

from crm_qt.photos.core.canvas_widget import AnnotationCanvas
from crm_qt.photos.core.data_models import SIGNATURE_BLACK, StrokeStyle


class SignaturePad(QtWidgets.QWidget):
    """
    Contract signature box: black 2px ink on a blank canvas.

    signatureChanged carries a PNG data URL after every committed stroke
    and an empty string after clear().
    """
    signatureChanged = Signal(str)

    def __init__(self, parent=None, value: str = "", width: int = 600, height: int = 128):
        super().__init__(parent)
        lay = QtWidgets.QVBoxLayout(self)
        lay.setContentsMargins(4, 4, 4, 4)

        self.canvas = AnnotationCanvas(self, width=width, height=height,
                                       image_source=value or None,
                                       style=StrokeStyle(rgba=SIGNATURE_BLACK, width=2),
                                       backdrop=Qt.lightGray)
        self.canvas.strokesChanged.connect(self._on_strokes_changed)
        lay.addWidget(self.canvas, 1)

        row = QtWidgets.QHBoxLayout()
        hint = QtWidgets.QLabel("Sign above using mouse or touch")
        hint.setStyleSheet("color: gray;")
        row.addWidget(hint, 1)
        self.btn_clear = QtWidgets.QPushButton("🗑 Clear")
        self.btn_clear.clicked.connect(self.clear)
        row.addWidget(self.btn_clear)
        lay.addLayout(row)

    def _on_strokes_changed(self, count: int):
        if count == 0 and not self.canvas.session.has_background:
            self.signatureChanged.emit("")
            return
        self.signatureChanged.emit(self.to_data_url())

    def is_empty(self) -> bool:
        session = self.canvas.session
        return session.is_empty and not session.has_background

    def clear(self):
        # a previously loaded signature is dropped as well
        self.canvas.clear(keep_background=False)

    def to_data_url(self) -> str:
        return self.canvas.session.export_data_url("PNG")
