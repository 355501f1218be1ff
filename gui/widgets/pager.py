# Path: gui/widgets/pager.py
# Purpose: Render the browse pager and page-size selector from a GalleryView.
# Layer: gui.
# Details: Buttons for previous/next and each window entry; ellipsis markers become inert labels.

from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QPushButton, QWidget

from core.pagination.engine import ELLIPSIS
from ..view_models import GalleryView


class Pager(QWidget):
    """Pager row; hidden whenever the view says pagination controls are not shown."""

    pageRequested = Signal(int)
    pageSizeRequested = Signal(int)

    def __init__(self, page_sizes: Sequence[int], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._page = 1
        self._layout = QHBoxLayout(self)
        self._layout.setContentsMargins(0, 8, 0, 8)
        self._buttons = QHBoxLayout()
        self._layout.addLayout(self._buttons)
        self._layout.addStretch(1)

        self.size_combo = QComboBox()
        for size in page_sizes:
            self.size_combo.addItem(f"{size} per page", size)
        self.size_combo.activated.connect(self._on_size_activated)
        self._layout.addWidget(self.size_combo)
        self.hide()

    def set_view(self, view: GalleryView) -> None:
        self.setVisible(view.show_pagination)
        self._page = view.page
        index = self.size_combo.findData(view.page_size)
        if index >= 0:
            self.size_combo.setCurrentIndex(index)
        self._clear_buttons()
        if not view.show_pagination:
            return
        if view.has_previous:
            self._add_button("Previous", view.page - 1)
        for item in view.window:
            if item is ELLIPSIS:
                self._buttons.addWidget(QLabel("…"))
                continue
            button = self._add_button(str(item), item)
            if item == view.page:
                button.setEnabled(False)
                button.setStyleSheet("font-weight: bold;")
        if view.has_next:
            self._add_button("Next", view.page + 1)

    def _add_button(self, text: str, page: int) -> QPushButton:
        button = QPushButton(text)
        button.setFlat(True)
        button.clicked.connect(lambda _checked=False, p=page: self.pageRequested.emit(p))
        self._buttons.addWidget(button)
        return button

    def _clear_buttons(self) -> None:
        while self._buttons.count():
            item = self._buttons.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.setParent(None)
                widget.deleteLater()

    def _on_size_activated(self, index: int) -> None:
        self.pageSizeRequested.emit(int(self.size_combo.itemData(index)))
