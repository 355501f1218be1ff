# Path: gui/view_models.py
# Purpose: Provide view models mediating between the ImageStore and the gallery and spatial widgets.
# Layer: gui.
# Details: Derives the single displayable list, owns detail selection, and feeds the spatial adapter.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from PySide6.QtCore import QObject, Signal

from core import pagination
from core.models.domain import (
    BrowseEntry,
    BrowsePage,
    DisplayEntry,
    ErrorState,
    FetchKey,
    ImageRef,
    Mode,
    PaginationState,
    SearchEntry,
    SearchResult,
)
from core.pagination.engine import WindowItem
from core.spatial.adapter import SceneEntity, SpatialMapAdapter
from .image_store import ImageStore


class GalleryState(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class GalleryView:
    """Everything the gallery widgets need to render one frame."""

    mode: Mode
    entries: Tuple[DisplayEntry, ...]
    total_count: int
    state: GalleryState
    show_pagination: bool = False
    window: Tuple[WindowItem, ...] = ()
    page: int = 1
    page_size: int = 12
    has_previous: bool = False
    has_next: bool = False
    refreshing: bool = False
    error: Optional[ErrorState] = None

    @property
    def title(self) -> str:
        return "Search Results" if self.mode is Mode.SEARCH else "Gallery"

    @property
    def subtitle(self) -> str:
        if self.mode is Mode.SEARCH:
            return f"Found {self.total_count} results"
        return f"{self.total_count} items"


def derive_gallery_view(
    mode: Mode,
    search_results: Sequence[SearchResult],
    browse_page: Optional[BrowsePage],
    pagination_state: PaginationState,
    error: Optional[ErrorState] = None,
    searching: bool = False,
    current_key: Optional[FetchKey] = None,
) -> GalleryView:
    """Select exactly one data source for display.

    Search mode shows the ranked results with their similarity and never a
    pager. Browse mode shows the current page and a pager only when there is
    more than one page. A surfaced error replaces either list with the error
    panel. A browse page whose key differs from ``current_key`` is shown as
    refreshing while its replacement loads.
    """

    if mode is Mode.SEARCH:
        entries: Tuple[DisplayEntry, ...] = tuple(
            SearchEntry(path=result.path, similarity=result.similarity) for result in search_results
        )
        if error is not None:
            state = GalleryState.ERROR
        elif entries:
            state = GalleryState.READY
        elif searching:
            state = GalleryState.LOADING
        else:
            state = GalleryState.EMPTY
        return GalleryView(
            mode=mode,
            entries=entries,
            total_count=len(entries),
            state=state,
            page=pagination_state.page,
            page_size=pagination_state.page_size,
            error=error,
        )

    if browse_page is None:
        entries, total = (), 0
    else:
        entries = tuple(BrowseEntry(path=path) for path in browse_page.images)
        total = browse_page.total
    if error is not None:
        state = GalleryState.ERROR
    elif browse_page is None:
        state = GalleryState.LOADING
    elif entries:
        state = GalleryState.READY
    else:
        state = GalleryState.EMPTY

    state_for_pager = pagination.with_total(pagination_state, total)
    pages = state_for_pager.total_pages
    show = pagination.show_pager(pages) and state is not GalleryState.ERROR
    return GalleryView(
        mode=mode,
        entries=entries,
        total_count=total,
        state=state,
        show_pagination=show,
        window=pagination.compute_window(state_for_pager.page, pages) if show else (),
        page=state_for_pager.page,
        page_size=state_for_pager.page_size,
        has_previous=pagination.has_previous(state_for_pager),
        has_next=pagination.has_next(state_for_pager),
        refreshing=browse_page is not None and current_key is not None and browse_page.key != current_key,
        error=error,
    )


class GalleryViewModel(QObject):
    """Keep a derived GalleryView in sync with the store and track the open detail view."""

    view_changed = Signal(object)
    detail_changed = Signal(object)

    def __init__(self, store: ImageStore, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.store = store
        self._detail: Optional[DisplayEntry] = None
        self._view = self._derive()
        for signal in (
            store.mode_changed,
            store.search_results_changed,
            store.searching_changed,
            store.browse_page_changed,
            store.pagination_changed,
            store.error_changed,
        ):
            signal.connect(self.refresh)

    @property
    def view(self) -> GalleryView:
        return self._view

    @property
    def detail(self) -> Optional[DisplayEntry]:
        return self._detail

    def refresh(self, *_args) -> None:
        view = self._derive()
        if view == self._view:
            return
        self._view = view
        self.view_changed.emit(view)

    def open_detail(self, target: Union[DisplayEntry, ImageRef]) -> DisplayEntry:
        """Open the detail view for an entry or a bare reference from any surface.

        Bare references are resolved against the displayed entries first so a
        search hit keeps its similarity; anything else is shown as a plain
        browse record.
        """

        entry = target if isinstance(target, (SearchEntry, BrowseEntry)) else self.resolve(target)
        if entry != self._detail:
            self._detail = entry
            self.detail_changed.emit(entry)
        return entry

    def close_detail(self) -> None:
        if self._detail is None:
            return
        self._detail = None
        self.detail_changed.emit(None)

    def resolve(self, ref: ImageRef) -> DisplayEntry:
        for entry in self._view.entries:
            if entry.path == ref:
                return entry
        for result in self.store.search_results:
            if result.path == ref:
                return SearchEntry(path=result.path, similarity=result.similarity)
        return BrowseEntry(path=ref)

    def _derive(self) -> GalleryView:
        return derive_gallery_view(
            mode=self.store.mode,
            search_results=self.store.search_results,
            browse_page=self.store.browse_page,
            pagination_state=self.store.pagination,
            error=self.store.error,
            searching=self.store.is_searching,
            current_key=self.store.browse_fetch_key(),
        )


class SpatialViewModel(QObject):
    """Bridge the store's point cloud to the SpatialMapAdapter and the shared detail view."""

    scene_changed = Signal(object)
    auto_rotate_changed = Signal(bool)

    def __init__(self, store: ImageStore, gallery: GalleryViewModel, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.gallery = gallery
        self.adapter = SpatialMapAdapter(on_open_detail=gallery.open_detail)
        store.image_points_changed.connect(self._rebuild)
        store.all_images_changed.connect(self._rebuild)
        gallery.detail_changed.connect(self._on_detail_changed)
        self._rebuild()

    @property
    def entities(self) -> Tuple[SceneEntity, ...]:
        return self.adapter.entities

    @property
    def auto_rotate(self) -> bool:
        return self.adapter.auto_rotate

    def hover(self, entity_id: object) -> None:
        if self.adapter.hover(entity_id):
            self.scene_changed.emit(self.adapter.entities)

    def unhover(self, entity_id: object) -> None:
        if self.adapter.unhover(entity_id):
            self.scene_changed.emit(self.adapter.entities)

    def click(self, entity_id: object) -> Optional[ImageRef]:
        return self.adapter.click(entity_id)

    def _rebuild(self, *_args) -> None:
        before = self.adapter.auto_rotate
        self.adapter.set_points(self.store.image_points, labels=self.store.all_images)
        self.scene_changed.emit(self.adapter.entities)
        self._emit_rotation(before)

    def _on_detail_changed(self, entry: Optional[DisplayEntry]) -> None:
        before = self.adapter.auto_rotate
        self.adapter.set_detail_open(entry is not None)
        self._emit_rotation(before)

    def _emit_rotation(self, before: bool) -> None:
        if self.adapter.auto_rotate != before:
            self.auto_rotate_changed.emit(self.adapter.auto_rotate)
