# Path: gui/widgets/detail_dialog.py
# Purpose: Show a single image with its path and, for search hits, its match score.
# Layer: gui.
# Details: Opened for the GalleryViewModel's detail entry; closing it clears the selection.

from __future__ import annotations

import logging
from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import QDialog, QDialogButtonBox, QLabel, QVBoxLayout, QWidget

from core.errors import ImaceError
from core.models.domain import DisplayEntry, ImageRef, SearchEntry

logger = logging.getLogger(__name__)


class DetailDialog(QDialog):
    """Modal detail view shared by the gallery and the spatial map."""

    def __init__(
        self,
        entry: DisplayEntry,
        fetcher: Callable[[ImageRef], bytes],
        on_close: Optional[Callable[[], None]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.entry = entry
        self.on_close = on_close
        self.setWindowTitle(entry.path)
        self.resize(720, 640)

        layout = QVBoxLayout(self)
        self.image_label = QLabel("loading")
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setMinimumSize(320, 320)
        layout.addWidget(self.image_label, 1)

        path_label = QLabel(entry.path)
        path_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        layout.addWidget(path_label)
        if isinstance(entry, SearchEntry):
            score = QLabel(entry.label)
            score.setStyleSheet("color: #4f46e5; font-weight: 600;")
            layout.addWidget(score)

        buttons = QDialogButtonBox(QDialogButtonBox.Close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self._pixmap = QPixmap()
        try:
            self._pixmap.loadFromData(fetcher(entry.path))
        except ImaceError as exc:
            logger.warning("Could not load %s: %s", entry.path, exc)
        if self._pixmap.isNull():
            self.image_label.setText("Image unavailable")
        self._apply_pixmap()

    def done(self, result: int) -> None:  # type: ignore[override]
        super().done(result)
        if self.on_close is not None:
            self.on_close()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._apply_pixmap()

    def _apply_pixmap(self) -> None:
        if self._pixmap.isNull():
            return
        self.image_label.setPixmap(
            self._pixmap.scaled(self.image_label.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation)
        )
