# Path: gui/widgets/image_grid.py
# Purpose: Provide a scroll-friendly grid of ImageTile widgets with adjustable columns.
# Layer: gui.
# Details: Reflows tiles on resize and column changes; image bytes are fetched from the backend off the UI thread.

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from PySide6.QtCore import QObject, QRunnable, QSize, Qt, QThreadPool, Signal
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import QGridLayout, QSizePolicy, QWidget

from core.errors import ImaceError
from core.models.domain import DisplayEntry, ImageRef
from .image_tile import ImageTile

logger = logging.getLogger(__name__)

ImageFetcher = Callable[[ImageRef], bytes]


class _LoaderSignals(QObject):
    imageLoaded = Signal(int, str, QImage)


class ImageGrid(QWidget):
    """Grid container that arranges ImageTile widgets for the displayed entries."""

    entryActivated = Signal(object)

    def __init__(self, fetcher: ImageFetcher, parent: Optional[QWidget] = None, columns: int = 3) -> None:
        super().__init__(parent)
        self._fetcher = fetcher
        self._columns = max(1, columns)
        self._grid = QGridLayout(self)
        self._grid.setSpacing(12)
        self._grid.setContentsMargins(8, 8, 8, 8)
        self._grid.setAlignment(Qt.AlignTop)
        self._tiles: List[ImageTile] = []
        self._tile_size = 200
        self._available_width: Optional[int] = None
        self._path_to_tile: Dict[str, ImageTile] = {}
        self._generation = 0
        self._loader_signals = _LoaderSignals()
        self._loader_signals.imageLoaded.connect(self._on_image_loaded)
        self._thread_pool = QThreadPool.globalInstance()
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

    def set_columns(self, columns: int) -> None:
        self._columns = max(1, columns)
        self._relayout()

    def set_available_width(self, width: int) -> None:
        """Provide viewport width to avoid horizontal scrollbars."""

        self._available_width = max(0, width)
        self._relayout()

    def set_entries(self, entries: Iterable[DisplayEntry]) -> None:
        self._destroy_tiles()
        self._generation += 1
        self._compute_tile_size()
        for entry in entries:
            tile = ImageTile(entry)
            tile.setFixedSize(self._tile_size, self._tile_height())
            tile.clicked.connect(self.entryActivated)
            self._tiles.append(tile)
            self._path_to_tile[entry.path] = tile
            self._queue_load(entry.path)
        self._relayout()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._relayout()

    def _tile_height(self) -> int:
        return self._tile_size + 56

    def _compute_tile_size(self) -> None:
        margins = self._grid.contentsMargins()
        spacing = self._grid.spacing()
        available_width = self._available_width or self.width()
        available = available_width - margins.left() - margins.right()
        if self._columns > 0:
            width = (available - spacing * (self._columns - 1)) / float(self._columns)
            self._tile_size = max(96, int(width))

    def _relayout(self) -> None:
        if not self._tiles:
            return
        self._compute_tile_size()
        self._clear_grid_positions()
        for idx, tile in enumerate(self._tiles):
            tile.setFixedSize(self._tile_size, self._tile_height())
            self._grid.addWidget(tile, idx // self._columns, idx % self._columns)

    def _destroy_tiles(self) -> None:
        while self._grid.count():
            item = self._grid.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.setParent(None)
                widget.deleteLater()
        self._tiles = []
        self._path_to_tile.clear()

    def _clear_grid_positions(self) -> None:
        while self._grid.count():
            item = self._grid.takeAt(0)
            widget = item.widget()
            if widget is not None:
                self._grid.removeWidget(widget)

    def _queue_load(self, ref: ImageRef) -> None:
        task = _ImageLoadTask(self._generation, ref, self._tile_size, self._fetcher, self._loader_signals)
        self._thread_pool.start(task)

    def _on_image_loaded(self, generation: int, ref: str, image: QImage) -> None:
        if generation != self._generation:
            return
        tile = self._path_to_tile.get(ref)
        if tile is None:
            return
        tile.set_image(pixmap=QPixmap.fromImage(image))


class _ImageLoadTask(QRunnable):
    """Fetch and scale one image off the UI thread."""

    def __init__(self, generation: int, ref: ImageRef, target_size: int, fetcher: ImageFetcher, signals: _LoaderSignals) -> None:
        super().__init__()
        self.generation = generation
        self.ref = ref
        self.target_size = target_size
        self.fetcher = fetcher
        self.signals = signals

    def run(self) -> None:
        image = QImage()
        try:
            image.loadFromData(self.fetcher(self.ref))
        except ImaceError as exc:
            logger.debug("Thumbnail for %s unavailable: %s", self.ref, exc)
        if not image.isNull() and self.target_size > 0:
            image = image.scaled(
                QSize(self.target_size, self.target_size),
                Qt.KeepAspectRatioByExpanding,
                Qt.SmoothTransformation,
            )
        self.signals.imageLoaded.emit(self.generation, self.ref, image)
