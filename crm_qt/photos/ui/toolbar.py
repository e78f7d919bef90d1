from __future__ import annotations
from PySide6 import QtWidgets
from PySide6.QtCore import Signal
from PySide6.QtGui import QAction, QKeySequence


class MarkupToolbar(QtWidgets.QToolBar):
    # ==== Signals (dialog connects) ====
    requestUndo = Signal()
    requestClear = Signal()
    requestDone = Signal()
    requestCancel = Signal()

    def __init__(self, parent=None):
        super().__init__("Markup", parent)
        self.setMovable(False)

        self.act_undo = self._act("↶ Undo", self.requestUndo.emit)
        self.act_undo.setShortcut(QKeySequence.Undo)
        self.act_undo.setEnabled(False)
        self.addAction(self.act_undo)

        self.act_clear = self._act("🗑 Clear", self.requestClear.emit)
        self.act_clear.setEnabled(False)
        self.addAction(self.act_clear)

        self.addSeparator()

        self.act_cancel = self._act("✖ Cancel", self.requestCancel.emit)
        self.act_cancel.setShortcut(QKeySequence.Cancel)
        self.addAction(self.act_cancel)

        self.act_done = self._act("✔ Done", self.requestDone.emit)
        self.addAction(self.act_done)

    # ---- helpers ----
    def _act(self, text, slot):
        a = QAction(text, self); a.triggered.connect(slot); return a

    def reflect_strokes(self, count: int):
        self.act_undo.setEnabled(count > 0)
        self.act_clear.setEnabled(count > 0)
