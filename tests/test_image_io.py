import base64
import functools
import http.server
import threading

import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor

from crm_qt.photos.io import image_io


def test_decode_data_url():
    mime, raw = image_io.decode_data_url("data:image/png;base64," + base64.b64encode(b"abc").decode())
    assert mime == "image/png"
    assert raw == b"abc"


@pytest.mark.parametrize("url", [
    "image/png;base64,AAAA",          # no scheme
    "data:image/png,AAAA",            # not base64
    "data:image/png;base64,@@@@",     # bad payload
])
def test_decode_data_url_rejects(url):
    with pytest.raises(ValueError):
        image_io.decode_data_url(url)


def test_png_data_url_loads_back(make_image):
    url = image_io.to_data_url(make_image(30, 20, Qt.red), "PNG")
    img = image_io.load_image(url)
    assert (img.width(), img.height()) == (30, 20)
    assert img.pixelColor(5, 5) == QColor(Qt.red)


def test_jpeg_export_mime(make_image):
    url = image_io.to_data_url(make_image(16, 16), "jpg")
    assert url.startswith("data:image/jpeg;base64,")


def test_load_from_path_and_file_url(make_image, tmp_path):
    path = tmp_path / "roof.png"
    image_io.save_image(make_image(12, 8), str(path))

    assert image_io.load_image(path).width() == 12
    assert image_io.load_image(str(path)).height() == 8
    assert image_io.load_image(path.as_uri()).width() == 12


def test_load_from_bytes(make_image):
    raw = image_io.encode_image(make_image(7, 3), "PNG")
    assert image_io.load_image(raw).width() == 7


@pytest.mark.parametrize("source", [b"", b"garbage", 42])
def test_load_image_rejects(qapp, source):
    with pytest.raises(ValueError):
        image_io.load_image(source)


def test_unknown_format_rejected(make_image):
    with pytest.raises(ValueError):
        image_io.encode_image(make_image(2, 2), "TIFFX")


class _BytesPath:
    def __init__(self, raw: bytes):
        self._raw = raw

    def __fspath__(self):
        return self._raw


def test_load_from_bytes_pathlike(make_image, tmp_path):
    path = tmp_path / "ridge.png"
    image_io.save_image(make_image(9, 4), str(path))
    assert image_io.load_image(_BytesPath(bytes(path))).width() == 9


def test_missing_bytes_pathlike_is_value_error(qapp, tmp_path):
    with pytest.raises(ValueError):
        image_io.load_image(_BytesPath(bytes(tmp_path / "gone.png")))


# ---- http(s) ----
@pytest.fixture
def photo_server(tmp_path):
    class _QuietHandler(http.server.SimpleHTTPRequestHandler):
        def log_message(self, *args):
            pass

    handler = functools.partial(_QuietHandler, directory=str(tmp_path))
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), handler)
    t = threading.Thread(target=server.serve_forever, daemon=True)
    t.start()
    yield tmp_path, f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()
    t.join(5)


def test_load_from_http_url(make_image, photo_server):
    root, base = photo_server
    image_io.save_image(make_image(40, 30, Qt.red), str(root / "lead-17.png"))

    img = image_io.load_image(f"{base}/lead-17.png")

    assert (img.width(), img.height()) == (40, 30)
    assert img.pixelColor(3, 3) == QColor(Qt.red)


def test_http_not_found_is_value_error(qapp, photo_server):
    _, base = photo_server
    with pytest.raises(ValueError, match="could not fetch"):
        image_io.load_image(f"{base}/missing.jpg")
