# Path: gui/main_window.py
# Purpose: Define the main desktop application window with tabbed navigation.
# Layer: gui.
# Details: Gallery, Explore and Manage tabs share one ImageStore; implements fullscreen toggle (F11).

from __future__ import annotations

import logging
import sys
from typing import Optional, Tuple

from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QApplication,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QScrollArea,
    QSlider,
    QStackedWidget,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from config import AppSettings, configure_logging
from core.models.domain import DisplayEntry, Mode
from .image_store import ImageStore, get_image_store
from .view_models import GalleryState, GalleryView, GalleryViewModel, SpatialViewModel
from .widgets.detail_dialog import DetailDialog
from .widgets.error_panel import ErrorPanel
from .widgets.image_grid import ImageGrid
from .widgets.management_panel import ManagementPanel
from .widgets.pager import Pager
from .widgets.search_bar import SearchBar
from .widgets.spatial_view import SpatialView

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window hosting the gallery, the spatial explorer and image management."""

    def __init__(self, store: ImageStore, settings: Optional[AppSettings] = None) -> None:
        super().__init__()
        self.store = store
        self.settings = settings or store.settings
        self.gallery_vm = GalleryViewModel(store, self)
        self.spatial_vm = SpatialViewModel(store, self.gallery_vm, self)
        self._detail_dialog: Optional[DetailDialog] = None
        self._shown_entries: Tuple[DisplayEntry, ...] = ()
        self.gallery_scroll: Optional[QScrollArea] = None
        self.setWindowTitle("Imace")
        self.tabs = QTabWidget()
        self._build_tabs()
        self._configure_shortcuts()
        self.setCentralWidget(self.tabs)
        self.resize(1280, 900)

        self.gallery_vm.view_changed.connect(self._render_gallery)
        self.gallery_vm.detail_changed.connect(self._show_detail)
        store.scroll_to_top_requested.connect(self._scroll_to_top)
        self._render_gallery(self.gallery_vm.view)

    def _configure_shortcuts(self) -> None:
        toggle_action = QAction(self)
        toggle_action.setShortcut(QKeySequence(Qt.Key_F11))
        toggle_action.triggered.connect(self.toggle_fullscreen)
        self.addAction(toggle_action)

    def _build_tabs(self) -> None:
        self.tabs.addTab(self._build_gallery_tab(), "Gallery")
        self.tabs.addTab(SpatialView(self.spatial_vm, self.store), "Explore")
        self.tabs.addTab(ManagementPanel(self.store, preview_size=self.settings.gallery.thumbnail_size // 2), "Manage")

    def _build_gallery_tab(self) -> QWidget:
        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(10)

        self.search_bar = SearchBar(self.store, self.settings.search.examples, self.settings.search.debounce_ms)
        layout.addWidget(self.search_bar)

        header = QHBoxLayout()
        self.title_label = QLabel()
        self.title_label.setStyleSheet("font-size: 18px; font-weight: 600;")
        self.subtitle_label = QLabel()
        self.subtitle_label.setStyleSheet("color: #6b7280;")
        header.addWidget(self.title_label)
        header.addWidget(self.subtitle_label)
        header.addStretch(1)
        header.addWidget(QLabel("Grid density"))
        self.scale_slider = QSlider(Qt.Horizontal)
        self.scale_slider.setRange(1, 8)
        self.scale_slider.setValue(self.settings.gallery.columns)
        self.scale_slider.setFixedWidth(160)
        self.scale_slider.valueChanged.connect(self._on_scale_changed)
        header.addWidget(self.scale_slider)
        self.scale_value_label = QLabel(f"Columns: {self.scale_slider.value()}")
        header.addWidget(self.scale_value_label)
        layout.addLayout(header)

        divider = QFrame()
        divider.setFrameShape(QFrame.HLine)
        divider.setFrameShadow(QFrame.Sunken)
        layout.addWidget(divider)

        self.gallery_stack = QStackedWidget()
        self.gallery_grid = ImageGrid(self.store.client.fetch_image, columns=self.scale_slider.value())
        self.gallery_grid.entryActivated.connect(self.gallery_vm.open_detail)
        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setWidget(self.gallery_grid)
        scroll_area.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        scroll_area.viewport().installEventFilter(self)
        self.gallery_scroll = scroll_area
        self.gallery_grid.set_available_width(scroll_area.viewport().width())

        self.status_label = QLabel()
        self.status_label.setAlignment(Qt.AlignCenter)
        self.status_label.setStyleSheet("color: #6b7280; font-size: 15px;")
        self.error_panel = ErrorPanel(self.settings.backend.base_url)
        self.error_panel.retryRequested.connect(self.store.retry)

        self.gallery_stack.addWidget(scroll_area)
        self.gallery_stack.addWidget(self.status_label)
        self.gallery_stack.addWidget(self.error_panel)
        layout.addWidget(self.gallery_stack, 1)

        self.pager = Pager(self.settings.gallery.page_size_options)
        self.pager.pageRequested.connect(self.store.change_page)
        self.pager.pageSizeRequested.connect(self.store.change_page_size)
        layout.addWidget(self.pager)
        return container

    def _render_gallery(self, view: GalleryView) -> None:
        self.title_label.setText(view.title)
        subtitle = view.subtitle
        query = self.store.no_match_query
        if view.mode is Mode.BROWSE and query:
            subtitle = f"No matches for \"{query}\"; showing all images. {subtitle}"
        self.subtitle_label.setText(subtitle)
        self.pager.set_view(view)
        if view.state is GalleryState.ERROR:
            self.error_panel.set_error(view.error)
            self.gallery_stack.setCurrentWidget(self.error_panel)
            return
        if view.state is GalleryState.LOADING:
            self.status_label.setText("Searching…" if self.store.is_searching else "Loading images…")
            self.gallery_stack.setCurrentWidget(self.status_label)
            return
        if view.state is GalleryState.EMPTY:
            if self.store.search_query.strip():
                self.status_label.setText("No images match your search. Try a different description.")
            else:
                self.status_label.setText("No images yet. Upload some from the Manage tab.")
            self.gallery_stack.setCurrentWidget(self.status_label)
            return
        if view.entries != self._shown_entries:
            self._shown_entries = view.entries
            self.gallery_grid.set_entries(view.entries)
        self.gallery_stack.setCurrentWidget(self.gallery_scroll)

    def _show_detail(self, entry: Optional[DisplayEntry]) -> None:
        if self._detail_dialog is not None:
            dialog, self._detail_dialog = self._detail_dialog, None
            dialog.on_close = None
            dialog.close()
        if entry is None:
            return
        self._detail_dialog = DetailDialog(
            entry, self.store.client.fetch_image, on_close=self._on_detail_closed, parent=self
        )
        self._detail_dialog.open()

    def _on_detail_closed(self) -> None:
        self._detail_dialog = None
        self.gallery_vm.close_detail()

    def _scroll_to_top(self) -> None:
        if self.gallery_scroll is not None:
            self.gallery_scroll.verticalScrollBar().setValue(0)

    def _on_scale_changed(self, value: int) -> None:
        self.scale_value_label.setText(f"Columns: {value}")
        self.gallery_grid.set_columns(value)

    def toggle_fullscreen(self) -> None:
        if self.isFullScreen():
            self.showNormal()
        else:
            self.showFullScreen()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key_F11:
            self.toggle_fullscreen()
        else:
            super().keyPressEvent(event)

    def eventFilter(self, watched, event):  # type: ignore[override]
        if (
            self.gallery_scroll
            and watched is self.gallery_scroll.viewport()
            and event.type() == QEvent.Resize
        ):
            self.gallery_grid.set_available_width(event.size().width())
        return super().eventFilter(watched, event)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.store.client.close()
        super().closeEvent(event)


def main() -> int:
    settings = AppSettings()
    configure_logging(settings.log_level)
    app = QApplication(sys.argv)
    store = get_image_store(settings)
    window = MainWindow(store, settings)
    window.show()
    logger.info("Connecting to %s", settings.backend.base_url)
    store.load()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
