from __future__ import annotations
import base64
import logging
import os
from pathlib import Path
from typing import Tuple, Union

from PySide6 import QtCore
from PySide6.QtGui import QImage
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest

logger = logging.getLogger(__name__)

ImageSource = Union[QImage, bytes, bytearray, str, os.PathLike]

_MIME_BY_FMT = {"PNG": "image/png", "JPEG": "image/jpeg", "JPG": "image/jpeg"}


def _normalize_fmt(fmt: str) -> str:
    f = (fmt or "PNG").upper()
    if f == "JPG":
        f = "JPEG"
    if f not in _MIME_BY_FMT:
        raise ValueError(f"unsupported export format: {fmt!r}")
    return f


def mime_for(fmt: str) -> str:
    return _MIME_BY_FMT[_normalize_fmt(fmt)]


# ---- data URLs ----
def decode_data_url(url: str) -> Tuple[str, bytes]:
    """Split `data:<mime>;base64,<payload>` into (mime, bytes)."""
    if not url.startswith("data:") or "," not in url:
        raise ValueError("not a data URL")
    header, payload = url[5:].split(",", 1)
    parts = header.split(";")
    mime = parts[0] or "text/plain"
    if "base64" not in parts[1:]:
        raise ValueError("only base64 data URLs are supported")
    try:
        return mime, base64.b64decode(payload, validate=True)
    except ValueError as e:
        raise ValueError(f"invalid base64 payload: {e}") from e


def encode_data_url(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


# ---- remote ----
FETCH_TIMEOUT_MS = 15000


def fetch_url(url: str, timeout_ms: int = FETCH_TIMEOUT_MS) -> bytes:
    """
    Download an http(s) image synchronously with a local event loop.

    Raises:
        ValueError: network error, HTTP error status or timeout
    """
    manager = QNetworkAccessManager()
    reply = manager.get(QNetworkRequest(QtCore.QUrl(url)))

    loop = QtCore.QEventLoop()
    timer = QtCore.QTimer()
    timer.setSingleShot(True)
    timer.timeout.connect(reply.abort)
    reply.finished.connect(loop.quit)
    timer.start(timeout_ms)
    if not reply.isFinished():
        loop.exec()
    timed_out = not timer.isActive()
    timer.stop()

    try:
        if reply.error() != QNetworkReply.NetworkError.NoError:
            reason = "timed out" if timed_out else reply.errorString()
            raise ValueError(f"could not fetch {url}: {reason}")
        data = bytes(reply.readAll().data())
    finally:
        reply.deleteLater()
    logger.debug("fetched %d bytes from %s", len(data), url)
    return data


# ---- decode ----
def load_image(source: ImageSource) -> QImage:
    """
    Decode an image reference into a QImage.

    Accepts a QImage, raw encoded bytes, a filesystem path (str / PathLike),
    a file:// URL, an http(s) URL or a base64 data URL.

    Raises:
        ValueError: source type unknown or the bytes cannot be decoded
    """
    if isinstance(source, QImage):
        img = source.copy()
    elif isinstance(source, (bytes, bytearray)):
        img = QImage.fromData(bytes(source))
    elif isinstance(source, str) and source.startswith("data:"):
        _, raw = decode_data_url(source)
        img = QImage.fromData(raw)
    elif isinstance(source, str) and source.startswith(("http://", "https://")):
        img = QImage.fromData(fetch_url(source))
    elif isinstance(source, (str, os.PathLike)):
        path = os.fsdecode(source)
        if path.startswith("file://"):
            path = QtCore.QUrl(path).toLocalFile()
        if not Path(path).is_file():
            raise ValueError(f"image not found: {path}")
        img = QImage(path)
    else:
        raise ValueError(f"unsupported image source: {type(source).__name__}")

    if img.isNull():
        raise ValueError("image could not be decoded")
    return img


# ---- encode ----
def encode_image(img: QImage, fmt: str = "PNG", quality: int = -1) -> bytes:
    f = _normalize_fmt(fmt)
    buf = QtCore.QBuffer()
    buf.open(QtCore.QIODevice.WriteOnly)
    if not img.save(buf, f, quality):
        raise ValueError(f"could not encode image as {f}")
    return bytes(buf.data())


def to_data_url(img: QImage, fmt: str = "PNG", quality: int = -1) -> str:
    return encode_data_url(encode_image(img, fmt, quality), mime_for(fmt))


def save_image(img: QImage, path: str, fmt: str = "") -> None:
    if not fmt:
        ext = Path(path).suffix.lstrip(".")
        fmt = ext or "PNG"
    data = encode_image(img, fmt)
    with open(path, "wb") as f:
        f.write(data)
