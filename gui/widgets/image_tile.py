# Path: gui/widgets/image_tile.py
# Purpose: Provide a reusable card for displaying one gallery entry.
# Layer: gui.
# Details: Shows the scaled image, its path, and for search hits a similarity bar; emits clicked.

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QPixmap
from PySide6.QtWidgets import QFrame, QLabel, QProgressBar, QVBoxLayout, QWidget

from core.models.domain import DisplayEntry, SearchEntry


class ImageTile(QFrame):
    """Clickable card wrapping an image label, caption, and optional match score."""

    clicked = Signal(object)

    def __init__(self, entry: DisplayEntry, parent: Optional[QWidget] = None, placeholder_text: str = "loading") -> None:
        super().__init__(parent)
        self.entry = entry
        self.placeholder_text = placeholder_text
        self._pixmap: Optional[QPixmap] = None
        self.setCursor(Qt.PointingHandCursor)
        self.setObjectName("imageTile")
        self.setStyleSheet(
            "#imageTile { border: 1px solid #c7d2fe; border-radius: 8px; background: #ffffff; }"
        )

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(4)

        self.image_label = QLabel(placeholder_text)
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setMinimumSize(96, 96)
        layout.addWidget(self.image_label, 1)

        if isinstance(entry, SearchEntry):
            bar = QProgressBar()
            bar.setRange(0, 100)
            bar.setValue(int(round(entry.similarity)))
            bar.setTextVisible(False)
            bar.setFixedHeight(6)
            layout.addWidget(bar)
            score = QLabel(entry.label)
            score.setStyleSheet("color: #4f46e5; font-weight: 600;")
            layout.addWidget(score)

        caption = QLabel(entry.path)
        caption.setToolTip(entry.path)
        caption.setStyleSheet("color: #111827;")
        caption.setTextInteractionFlags(Qt.NoTextInteraction)
        caption.setMaximumWidth(10_000)
        caption.setWordWrap(False)
        layout.addWidget(caption)

    def set_image(self, pixmap: Optional[QPixmap] = None) -> None:
        self._pixmap = pixmap
        if self._pixmap and not self._pixmap.isNull():
            self.image_label.setText("")
        else:
            self.image_label.setText("unavailable" if pixmap is not None else self.placeholder_text)
        self._apply_pixmap()

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.LeftButton:
            self.clicked.emit(self.entry)
        super().mousePressEvent(event)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._apply_pixmap()

    def _apply_pixmap(self) -> None:
        if not self._pixmap or self._pixmap.isNull():
            self.image_label.setPixmap(QPixmap())
            return
        scaled = self._pixmap.scaled(self.image_label.size(), Qt.KeepAspectRatioByExpanding, Qt.SmoothTransformation)
        self.image_label.setPixmap(scaled)
