from __future__ import annotations

import hashlib
import logging
from typing import Callable, Optional, Set

import requests
from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QColor, QIcon, QPixmap, QPixmapCache

from colectorpro.core.image_data import decode_data_uri, is_data_uri
from colectorpro.ui.tasks import QtTaskRunner

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_S = 5
CACHE_LIMIT_KB = 64 * 1024


def fetch_image_bytes(url: str) -> bytes:
    resp = requests.get(url, timeout=FETCH_TIMEOUT_S)
    resp.raise_for_status()
    return resp.content


def cache_key(payload: str, size: Optional[QSize]) -> str:
    """Short cache key for a payload (data URIs can be megabytes long)."""
    digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()
    if size is None:
        return f"{digest}:source"
    return f"{digest}:{size.width()}x{size.height()}"


def placeholder(size: QSize) -> QPixmap:
    pix = QPixmap(size)
    pix.fill(QColor("#3f3f46"))
    return pix


def scaled(pix: QPixmap, size: QSize) -> QPixmap:
    return pix.scaled(size, Qt.KeepAspectRatio, Qt.SmoothTransformation)


class ImageCache:
    """Scaled pixmaps for data URIs and remote URLs, held in Qt's bounded QPixmapCache.

    Entries are keyed by a digest of the payload plus the target size. Inline
    images keep only their scaled copies; downloaded originals share the same
    bounded cache and are fetched again in the background once evicted.
    """

    def __init__(self, runner: QtTaskRunner, limit_kb: int = CACHE_LIMIT_KB) -> None:
        self._runner = runner
        QPixmapCache.setCacheLimit(limit_kb)
        self._pending: Set[str] = set()
        self._failed: Set[str] = set()
        self.on_loaded: Callable[[], None] = lambda: None

    def pixmap(self, payload: str, size: QSize) -> QPixmap:
        if not payload:
            return placeholder(size)
        key = cache_key(payload, size)
        pix = QPixmapCache.find(key)
        if pix is not None and not pix.isNull():
            return pix
        source = self._source(payload)
        if source is None or source.isNull():
            return placeholder(size)
        pix = scaled(source, size)
        QPixmapCache.insert(key, pix)
        return pix

    def icon(self, payload: str, size: QSize) -> QIcon:
        return QIcon(self.pixmap(payload, size))

    def _source(self, payload: str) -> QPixmap | None:
        if is_data_uri(payload):
            data = decode_data_uri(payload)
            pix = QPixmap()
            if data is None or not pix.loadFromData(data):
                logger.warning("Could not decode inline image")
                return None
            return pix
        if payload.startswith(("http://", "https://")):
            pix = QPixmapCache.find(cache_key(payload, None))
            if pix is not None and not pix.isNull():
                return pix
            self._fetch(payload)
        return None

    def _fetch(self, url: str) -> None:
        if url in self._pending or url in self._failed:
            return
        self._pending.add(url)

        def _done(data: bytes) -> None:
            self._pending.discard(url)
            pix = QPixmap()
            if not pix.loadFromData(data):
                logger.warning("Could not decode image from %s", url)
                self._failed.add(url)
                return
            QPixmapCache.insert(cache_key(url, None), pix)
            self.on_loaded()

        def _error(exc: Exception) -> None:
            self._pending.discard(url)
            self._failed.add(url)
            logger.warning("Failed to fetch %s: %s", url, exc)

        self._runner.submit(lambda: fetch_image_bytes(url), on_success=_done, on_error=_error)
