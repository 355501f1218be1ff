# Path: gui/widgets/search_bar.py
# Purpose: Query input with debounced search, example queries, and recent searches.
# Layer: gui.
# Details: Keystrokes update the store query at once; the fetch runs after the debounce interval.

from __future__ import annotations

from typing import Iterable, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QHBoxLayout, QLabel, QLineEdit, QPushButton, QVBoxLayout, QWidget

from ..image_store import ImageStore


class SearchBar(QWidget):
    """Search input bound to the ImageStore."""

    def __init__(self, store: ImageStore, examples: Iterable[str] = (), debounce_ms: int = 350, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store

        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(debounce_ms)
        self._debounce.timeout.connect(self._run_search)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        input_row = QHBoxLayout()
        self.input = QLineEdit()
        self.input.setPlaceholderText("Search images by describing what you're looking for...")
        self.input.setClearButtonEnabled(True)
        self.input.textEdited.connect(self._on_text_edited)
        self.input.returnPressed.connect(self._run_search_now)
        input_row.addWidget(self.input, 1)
        self.busy_label = QLabel("Searching…")
        self.busy_label.setVisible(False)
        input_row.addWidget(self.busy_label)
        layout.addLayout(input_row)

        examples_row = QHBoxLayout()
        examples_row.addWidget(QLabel("Try:"))
        for example in examples:
            examples_row.addWidget(self._chip(example))
        examples_row.addStretch(1)
        layout.addLayout(examples_row)

        self._recent_row = QHBoxLayout()
        layout.addLayout(self._recent_row)

        store.query_changed.connect(self._on_query_changed)
        store.searching_changed.connect(self.busy_label.setVisible)
        store.recent_searches_changed.connect(self._show_recent)
        self._show_recent(store.recent_searches)

    def apply_query(self, query: str) -> None:
        self.input.setText(query)
        self._debounce.stop()
        self.store.search(query)

    def _chip(self, text: str) -> QPushButton:
        button = QPushButton(text)
        button.setFlat(True)
        button.setStyleSheet("color: #4f46e5;")
        button.clicked.connect(lambda _checked=False, q=text: self.apply_query(q))
        return button

    def _on_text_edited(self, text: str) -> None:
        self.store.set_search_query(text)
        if not text.strip():
            self._debounce.stop()
            self.store.clear_search()
            return
        self._debounce.start()

    def _run_search_now(self) -> None:
        self._debounce.stop()
        self._run_search()

    def _run_search(self) -> None:
        self.store.search(self.input.text())

    def _on_query_changed(self, query: str) -> None:
        if self.input.text() != query:
            self.input.setText(query)

    def _show_recent(self, items: Iterable[str]) -> None:
        while self._recent_row.count():
            widget = self._recent_row.takeAt(0).widget()
            if widget is not None:
                widget.setParent(None)
                widget.deleteLater()
        items = list(items)
        if not items:
            return
        label = QLabel("Recent:")
        label.setAlignment(Qt.AlignVCenter)
        self._recent_row.addWidget(label)
        for item in items:
            self._recent_row.addWidget(self._chip(item))
        clear = QPushButton("Clear")
        clear.setFlat(True)
        clear.clicked.connect(self.store.clear_recent_searches)
        self._recent_row.addWidget(clear)
        self._recent_row.addStretch(1)
