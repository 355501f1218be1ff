# Path: gui/widgets/error_panel.py
# Purpose: Explain a failed backend call and offer a retry.
# Layer: gui.
# Details: Connection failures get a hint about the backend address; other failures show the server message.

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

from core.models.domain import ErrorKind, ErrorState


class ErrorPanel(QWidget):
    retryRequested = Signal()

    def __init__(self, base_url: str = "", parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.base_url = base_url
        layout = QVBoxLayout(self)
        layout.setAlignment(Qt.AlignCenter)
        self.title = QLabel()
        self.title.setStyleSheet("font-size: 16px; font-weight: 600; color: #b91c1c;")
        self.title.setAlignment(Qt.AlignCenter)
        self.message = QLabel()
        self.message.setWordWrap(True)
        self.message.setAlignment(Qt.AlignCenter)
        self.retry_btn = QPushButton("Retry")
        self.retry_btn.clicked.connect(self.retryRequested)
        layout.addWidget(self.title)
        layout.addWidget(self.message)
        layout.addWidget(self.retry_btn, 0, Qt.AlignCenter)

    def set_error(self, error: Optional[ErrorState]) -> None:
        if error is None:
            self.title.clear()
            self.message.clear()
            return
        if error.kind is ErrorKind.CONNECTION:
            self.title.setText("Cannot reach the image server")
            hint = f" Make sure it is running at {self.base_url}." if self.base_url else ""
            self.message.setText(f"{error.message}.{hint}")
        else:
            self.title.setText("Something went wrong")
            self.message.setText(error.message)
