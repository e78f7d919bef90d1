import pytest
from PySide6 import QtWidgets

from crm_qt.photos.core.data_models import Point
from crm_qt.photos.io import image_io
from crm_qt.photos.settings import AnnotationSettings
from crm_qt.photos.window import PhotoAnnotationDialog, build_arg_parser


@pytest.fixture
def settings(qsettings):
    s = AnnotationSettings.load(qsettings)
    s.canvas_width, s.canvas_height = 400, 300
    return s


def _stroke(dlg):
    session = dlg.canvas.session
    session.begin_stroke(Point(5, 5))
    session.extend_stroke(Point(100, 100))
    dlg.canvas.tool.finish()


def test_done_hands_data_url_to_callback(qapp, make_image, settings):
    saved = []
    dlg = PhotoAnnotationDialog(make_image(640, 480), on_saved=saved.append, settings=settings)
    _stroke(dlg)

    dlg.done_and_save()

    assert len(saved) == 1
    assert saved[0].startswith("data:image/png;base64,")
    img = image_io.load_image(saved[0])
    assert (img.width(), img.height()) == (400, 300)
    assert dlg.canvas.session is None
    assert dlg.result() == QtWidgets.QDialog.DialogCode.Accepted.value


def test_jpeg_export_format(qapp, make_image, settings):
    settings.export_format = "JPEG"
    saved = []
    dlg = PhotoAnnotationDialog(make_image(10, 10), on_saved=saved.append, settings=settings)
    dlg.done_and_save()
    assert saved[0].startswith("data:image/jpeg;base64,")


def test_callback_error_is_logged_and_dialog_closes(qapp, make_image, settings, caplog):
    def boom(_):
        raise RuntimeError("upload failed")

    dlg = PhotoAnnotationDialog(make_image(10, 10), on_saved=boom, settings=settings)
    dlg.done_and_save()
    assert "on_saved callback failed" in caplog.text
    assert dlg.result() == QtWidgets.QDialog.DialogCode.Accepted.value


def test_toolbar_tracks_strokes(qapp, make_image, settings):
    dlg = PhotoAnnotationDialog(make_image(10, 10), settings=settings)
    assert not dlg.toolbar.act_undo.isEnabled()
    _stroke(dlg)
    assert dlg.toolbar.act_undo.isEnabled()
    dlg.undo()
    assert not dlg.toolbar.act_undo.isEnabled()


def test_cancel_discards_without_callback(qapp, make_image, settings):
    saved = []
    dlg = PhotoAnnotationDialog(make_image(10, 10), on_saved=saved.append, settings=settings)
    dlg.reject()
    assert saved == []
    assert dlg.canvas.session is None


def test_broken_image_still_opens(qapp, settings):
    dlg = PhotoAnnotationDialog(b"nope", settings=settings)
    assert not dlg.canvas.session.has_background
    assert "unavailable" in dlg.windowTitle()


def test_arg_parser():
    args = build_arg_parser().parse_args(["roof.jpg", "-o", "out.png", "--width", "640"])
    assert args.image == "roof.jpg"
    assert args.output == "out.png"
    assert args.width == 640
    assert args.height is None
