import gc
import os

# Qt needs a platform plugin even for off-screen QImage/QWidget work
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6 import QtCore, QtWidgets
from PySide6.QtCore import Qt
from PySide6.QtGui import QImage


@pytest.fixture(scope="session")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app
    # release Qt wrappers while the interpreter is still fully alive
    for w in QtWidgets.QApplication.topLevelWidgets():
        w.close()
        w.deleteLater()
    app.sendPostedEvents(None, QtCore.QEvent.DeferredDelete)
    app.processEvents()
    gc.collect()


@pytest.fixture(autouse=True)
def _collect_qt_garbage():
    yield
    gc.collect()


@pytest.fixture
def make_image(qapp):
    def _make(w: int, h: int, color=Qt.blue) -> QImage:
        img = QImage(w, h, QImage.Format_ARGB32)
        img.fill(color)
        return img
    return _make


@pytest.fixture
def qsettings(tmp_path):
    return QtCore.QSettings(str(tmp_path / "markup.ini"), QtCore.QSettings.IniFormat)
