# Path: gui/image_store.py
# Purpose: Single source of truth for search, browse, upload, delete, and spatial state.
# Layer: gui.
# Details: Qt-signalling coordinator composing pagination, UploadQueue, and DeletionGuard over a BackendClient.

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Set, Tuple

from PySide6.QtCore import QObject, Signal

from config.settings import AppSettings
from core import pagination
from core.client.backend import BackendClient
from core.deletion.guard import DeletionGuard
from core.errors import BackendConnectionError
from core.history.recent_searches import RecentSearches
from core.models.domain import (
    BrowsePage,
    DeleteState,
    ErrorKind,
    ErrorState,
    FetchKey,
    ImageRef,
    Mode,
    PaginationState,
    SearchResult,
    SpatialPoint,
    StorageInfo,
    UploadItem,
    derive_mode,
)
from core.tasks.base import InflightRegistry, SynchronousRunner, TaskCallback, TaskOutcome, TaskRunner
from core.uploads.queue import UploadQueue

logger = logging.getLogger(__name__)

OP_ALL_IMAGES = "all_images"
OP_IMAGE_POINTS = "image_points"
OP_STORAGE = "storage_size"
OP_BROWSE = "paginated_images"
OP_SEARCH = "search"
OP_UPLOAD = "upload"
OP_DELETE = "delete_all"


class ImageStore(QObject):
    """Process-wide state coordinator for the client.

    Every mutation goes through a named operation so the invariants hold:
    exactly one of search results and paginated browse data is authoritative,
    no paginated request is issued while search mode is active, and a
    response is applied only if its FetchKey is still the active one.
    """

    query_changed = Signal(str)
    mode_changed = Signal(object)
    search_results_changed = Signal(object)
    searching_changed = Signal(bool)
    pagination_changed = Signal(object)
    browse_page_changed = Signal(object)
    all_images_changed = Signal(object)
    image_points_changed = Signal(object)
    uploads_changed = Signal(object)
    deletion_changed = Signal(object)
    storage_changed = Signal(object)
    error_changed = Signal(object)
    points_error_changed = Signal(object)
    recent_searches_changed = Signal(object)
    scroll_to_top_requested = Signal()

    def __init__(
        self,
        client: BackendClient,
        runner: Optional[TaskRunner] = None,
        settings: Optional[AppSettings] = None,
        history: Optional[RecentSearches] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings or AppSettings()
        self.client = client
        self.runner: TaskRunner = runner or SynchronousRunner()
        self.history = history or RecentSearches(limit=self.settings.search.recent_limit)
        self._uploads = UploadQueue()
        self._deletion = DeletionGuard()
        self._inflight = InflightRegistry()

        self._query = ""
        self._results: Tuple[SearchResult, ...] = ()
        self._search_key: Optional[FetchKey] = None
        self._search_requests: Set[FetchKey] = set()
        self._no_match_query: Optional[str] = None
        self._mode = Mode.BROWSE

        page_size = pagination.validate_page_size(
            self.settings.gallery.default_page_size, self.settings.gallery.page_size_options
        )
        self._pagination = PaginationState(page=1, page_size=page_size, total=0)
        self._browse_page: Optional[BrowsePage] = None
        self._active_browse_key: Optional[FetchKey] = None
        self._browse_requests: Dict[FetchKey, int] = {}
        # Bumped by every successful upload or delete-all; older responses are stale.
        self._generation = 0

        self._all_images: Tuple[ImageRef, ...] = ()
        self._points: Tuple[SpatialPoint, ...] = ()
        self._storage: Optional[StorageInfo] = None
        self._error: Optional[ErrorState] = None
        self._points_error: Optional[ErrorState] = None

    # Read-only views
    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def search_query(self) -> str:
        return self._query

    @property
    def search_results(self) -> Tuple[SearchResult, ...]:
        return self._results

    @property
    def is_searching(self) -> bool:
        return self._search_key is not None

    @property
    def no_match_query(self) -> Optional[str]:
        """The last completed query that returned nothing, while it is still the active query."""

        return self._no_match_query

    @property
    def pagination(self) -> PaginationState:
        return self._pagination

    @property
    def browse_page(self) -> Optional[BrowsePage]:
        return self._browse_page

    @property
    def all_images(self) -> Tuple[ImageRef, ...]:
        return self._all_images

    @property
    def image_points(self) -> Tuple[SpatialPoint, ...]:
        return self._points

    @property
    def storage(self) -> Optional[StorageInfo]:
        return self._storage

    @property
    def error(self) -> Optional[ErrorState]:
        return self._error

    @property
    def points_error(self) -> Optional[ErrorState]:
        return self._points_error

    @property
    def staged_files(self) -> Tuple[UploadItem, ...]:
        return self._uploads.items

    @property
    def is_uploading(self) -> bool:
        return self._uploads.is_uploading

    @property
    def upload_error(self) -> Optional[str]:
        return self._uploads.last_error

    @property
    def delete_state(self) -> DeleteState:
        return self._deletion.state

    @property
    def is_deleting(self) -> bool:
        return self._deletion.is_deleting

    @property
    def delete_error(self) -> Optional[str]:
        return self._deletion.last_error

    @property
    def recent_searches(self) -> Tuple[str, ...]:
        return self.history.items

    def browse_fetch_key(self) -> Optional[FetchKey]:
        """Key of the paginated request the gallery needs, or None while searching."""

        if self._mode is Mode.SEARCH:
            return None
        return FetchKey.of(OP_BROWSE, page=self._pagination.page, page_size=self._pagination.page_size)

    def image_url(self, ref: ImageRef) -> str:
        return self.client.image_url(ref)

    def is_loading(self, operation: str) -> bool:
        """True while a corpus-wide request for ``operation`` is in flight."""

        return self._inflight.is_active(operation)

    # Startup and manual retry
    def load(self) -> None:
        """Issue the initial fetches for every surface."""

        self.fetch_all_images()
        self.refresh_browse()
        self.fetch_image_points()
        self.fetch_storage_size()

    def retry(self) -> None:
        """Clear surfaced errors and reload every current data source."""

        self._set_error(None)
        self._set_points_error(None)
        if self._query.strip():
            self.search(self._query)
        self.refresh_browse(force=True)
        self.fetch_all_images()
        self.fetch_image_points()
        self.fetch_storage_size()

    # Search
    def set_search_query(self, query: str) -> bool:
        """Replace the query text; setting the current value again does nothing."""

        if query == self._query:
            return False
        self._query = query
        self._no_match_query = None
        self.query_changed.emit(query)
        self._update_mode()
        return True

    def set_search_results(self, results: Iterable[SearchResult]) -> None:
        self._results = tuple(results)
        self.search_results_changed.emit(self._results)
        self._update_mode()

    def clear_search(self) -> None:
        """Drop query and results, return to browse mode on page 1."""

        changed_query = self._query != ""
        self._query = ""
        self._results = ()
        self._no_match_query = None
        self._set_searching(None)
        if changed_query:
            self.query_changed.emit("")
        self.search_results_changed.emit(self._results)
        self._set_pagination(pagination.reset_page(self._pagination))
        self._update_mode()
        self.refresh_browse()

    def search(self, query: str) -> bool:
        """Fetch results for ``query``; a blank query clears the search instead.

        Only the response for the latest requested query is applied.
        """

        self.set_search_query(query)
        if not query.strip():
            self.clear_search()
            return False
        key = FetchKey.of(OP_SEARCH, query=query)
        if self._search_key == key and key in self._search_requests:
            return False
        self._no_match_query = None
        self._set_searching(key)
        self._update_mode()
        self._search_requests.add(key)
        self.runner.submit(key, lambda: self.client.search(query), self._on_search_done)
        return True

    def clear_recent_searches(self) -> None:
        if self.history.clear():
            self.recent_searches_changed.emit(self.history.items)

    def _on_search_done(self, outcome: TaskOutcome) -> None:
        self._search_requests.discard(outcome.key)
        query = dict(outcome.key.params).get("query", "")
        if outcome.key != self._search_key or query != self._query:
            logger.debug("Discarding stale search response for %s", outcome.key)
            if outcome.key == self._search_key:
                self._set_searching(None)
                self._update_mode()
            return
        self._set_searching(None)
        if not outcome.ok:
            self._record_failure(outcome)
            self.set_search_results(())
            return
        self._clear_error_for(OP_SEARCH)
        if self.history.add(query):
            self.recent_searches_changed.emit(self.history.items)
        self._no_match_query = None if outcome.result else query
        self.set_search_results(outcome.result)

    # Browse pagination
    def change_page(self, page: int) -> bool:
        updated = pagination.change_page(self._pagination, page)
        if updated is self._pagination:
            return False
        self._set_pagination(updated)
        self.scroll_to_top_requested.emit()
        self.refresh_browse()
        return True

    def change_page_size(self, page_size: int) -> bool:
        updated = pagination.change_page_size(self._pagination, page_size, self.settings.gallery.page_size_options)
        if updated == self._pagination:
            return False
        self._set_pagination(updated)
        self.scroll_to_top_requested.emit()
        self.refresh_browse()
        return True

    def refresh_browse(self, force: bool = False) -> bool:
        """Request the current browse page unless search mode is active.

        Without ``force`` nothing is issued when the cached page already
        matches the current key. Identical keys already in flight are never
        requested twice unless the corpus changed since they were issued.
        """

        key = self.browse_fetch_key()
        if key is None:
            return False
        self._active_browse_key = key
        if not force and self._browse_page is not None and self._browse_page.key == key:
            return False
        generation = self._generation
        if self._browse_requests.get(key) == generation:
            return False
        self._browse_requests[key] = generation
        page, page_size = self._pagination.page, self._pagination.page_size
        self.runner.submit(
            key,
            lambda: self.client.paginated_images(page, page_size),
            lambda outcome: self._on_browse_done(outcome, generation),
        )
        return True

    def _on_browse_done(self, outcome: TaskOutcome, generation: int) -> None:
        if self._browse_requests.get(outcome.key) == generation:
            del self._browse_requests[outcome.key]
        if generation != self._generation:
            logger.debug("Discarding browse response for %s from before the corpus changed", outcome.key)
            return
        if outcome.key != self._active_browse_key or self._mode is Mode.SEARCH:
            logger.debug("Discarding stale browse response for %s", outcome.key)
            return
        if not outcome.ok:
            self._record_failure(outcome)
            return
        self._clear_error_for(OP_BROWSE)
        page: BrowsePage = outcome.result
        self._browse_page = BrowsePage(images=page.images, total=page.total, key=outcome.key)
        clamped = pagination.with_total(self._pagination, page.total)
        self.browse_page_changed.emit(self._browse_page)
        if clamped != self._pagination:
            moved = clamped.page != self._pagination.page
            self._set_pagination(clamped)
            if moved:
                # The corpus shrank below the current page; fetch the last valid one.
                self.refresh_browse()

    # Corpus-wide refreshes
    def fetch_all_images(self) -> bool:
        return self._fetch_once(FetchKey.of(OP_ALL_IMAGES), self.client.list_images, self._on_all_images_done)

    def fetch_image_points(self) -> bool:
        return self._fetch_once(FetchKey.of(OP_IMAGE_POINTS), self.client.image_points, self._on_points_done)

    def fetch_storage_size(self) -> bool:
        return self._fetch_once(FetchKey.of(OP_STORAGE), self.client.storage_size, self._on_storage_done)

    def _fetch_once(self, key: FetchKey, work: Callable[[], object], on_done: TaskCallback) -> bool:
        generation = self._generation
        if not self._inflight.begin(key, generation):
            return False

        def finish(outcome: TaskOutcome) -> None:
            if not self._inflight.finish(outcome.key, generation):
                logger.debug("Discarding superseded response for %s", outcome.key)
                return
            on_done(outcome)

        self.runner.submit(key, work, finish)
        return True

    def _on_all_images_done(self, outcome: TaskOutcome) -> None:
        if not outcome.ok:
            self._record_failure(outcome)
            return
        self._clear_error_for(OP_ALL_IMAGES)
        self._all_images = tuple(outcome.result)
        self.all_images_changed.emit(self._all_images)

    def _on_points_done(self, outcome: TaskOutcome) -> None:
        if not outcome.ok:
            logger.warning("Loading image points failed: %s", outcome.error)
            self._set_points_error(self._error_state(outcome))
            return
        self._set_points_error(None)
        self._points = tuple(outcome.result)
        self.image_points_changed.emit(self._points)

    def _on_storage_done(self, outcome: TaskOutcome) -> None:
        if not outcome.ok:
            # Storage size is informational; the listing panels already surface connectivity.
            logger.warning("Loading storage size failed: %s", outcome.error)
            return
        self._storage = outcome.result
        self.storage_changed.emit(self._storage)

    def _corpus_changed(self) -> None:
        self._generation += 1
        logger.debug("Corpus changed; generation %d", self._generation)

    def _refresh_corpus(self, force_browse: bool = True) -> None:
        self.fetch_all_images()
        self.refresh_browse(force=force_browse)
        self.fetch_image_points()
        self.fetch_storage_size()

    # Uploads
    def set_selected_files(self, files: Iterable[Path]) -> bool:
        accepted = self._uploads.stage(files)
        if accepted:
            self.uploads_changed.emit(self._uploads.items)
        return accepted

    def cancel_staged_file(self, index: int) -> bool:
        removed = self._uploads.remove_staged(index)
        if removed is None:
            return False
        self.uploads_changed.emit(self._uploads.items)
        return True

    def clear_staged_files(self) -> bool:
        if not self._uploads.clear_staged():
            return False
        self.uploads_changed.emit(self._uploads.items)
        return True

    def upload(self) -> bool:
        """Send the staged set as one batch; a second call while uploading is ignored."""

        batch = self._uploads.begin_upload()
        if not batch:
            return False
        self.uploads_changed.emit(self._uploads.items)
        self.runner.submit(FetchKey.of(OP_UPLOAD), lambda: self.client.upload(batch), self._on_upload_done)
        return True

    def _on_upload_done(self, outcome: TaskOutcome) -> None:
        self._uploads.finish_upload(outcome.error)
        self.uploads_changed.emit(self._uploads.items)
        if outcome.ok:
            self._corpus_changed()
            self._refresh_corpus()

    # Delete all
    def request_delete(self) -> bool:
        if not self._deletion.request_delete():
            return False
        self.deletion_changed.emit(self._deletion.state)
        return True

    def cancel_delete_confirm(self) -> bool:
        if not self._deletion.cancel_delete_confirm():
            return False
        self.deletion_changed.emit(self._deletion.state)
        return True

    def confirm_delete(self) -> bool:
        if not self._deletion.confirm_delete():
            return False
        self.deletion_changed.emit(self._deletion.state)
        self.runner.submit(FetchKey.of(OP_DELETE), self.client.delete_all, self._on_delete_done)
        return True

    def _on_delete_done(self, outcome: TaskOutcome) -> None:
        succeeded = self._deletion.finish_delete(outcome.error)
        self.deletion_changed.emit(self._deletion.state)
        if not succeeded:
            return
        self._corpus_changed()
        self._browse_page = None
        self._all_images = ()
        self._points = ()
        self.browse_page_changed.emit(None)
        self.all_images_changed.emit(self._all_images)
        self.image_points_changed.emit(self._points)
        self._set_pagination(PaginationState(page=1, page_size=self._pagination.page_size, total=0))
        self.clear_search()
        self._refresh_corpus(force_browse=False)

    # Internal state helpers
    def _update_mode(self) -> None:
        mode = derive_mode(self._query, self._results, self._search_key is not None)
        if mode is self._mode:
            return
        self._mode = mode
        logger.debug("Mode switched to %s", mode.value)
        if mode is Mode.SEARCH:
            # In-flight browse responses lose relevance; they are dropped on arrival.
            self._active_browse_key = None
        self.mode_changed.emit(mode)
        if mode is Mode.BROWSE:
            self.refresh_browse()

    def _set_searching(self, key: Optional[FetchKey]) -> None:
        was_searching = self._search_key is not None
        self._search_key = key
        if was_searching != (key is not None):
            self.searching_changed.emit(key is not None)

    def _set_pagination(self, state: PaginationState) -> None:
        if state == self._pagination:
            return
        self._pagination = state
        self.pagination_changed.emit(state)

    def _set_error(self, error: Optional[ErrorState]) -> None:
        if error == self._error:
            return
        self._error = error
        self.error_changed.emit(error)

    def _set_points_error(self, error: Optional[ErrorState]) -> None:
        if error == self._points_error:
            return
        self._points_error = error
        self.points_error_changed.emit(error)

    def _clear_error_for(self, operation: str) -> None:
        if self._error is not None and self._error.operation == operation:
            self._set_error(None)

    def _record_failure(self, outcome: TaskOutcome) -> None:
        logger.warning("%s failed: %s", outcome.key, outcome.error)
        self._set_error(self._error_state(outcome))

    @staticmethod
    def _error_state(outcome: TaskOutcome) -> ErrorState:
        error = outcome.error
        kind = ErrorKind.CONNECTION if isinstance(outcome.error, BackendConnectionError) else ErrorKind.RESPONSE
        return ErrorState(kind=kind, message=str(outcome.error), operation=outcome.key.operation)


_store: Optional[ImageStore] = None


def get_image_store(settings: Optional[AppSettings] = None) -> ImageStore:
    """Return the process-wide store, creating it on first use.

    Must first be called after the QApplication exists, since the default
    runner is a Qt thread pool.
    """

    global _store
    if _store is None:
        from .workers import ThreadPoolRunner

        settings = settings or AppSettings()
        _store = ImageStore(
            client=BackendClient(settings.backend),
            runner=ThreadPoolRunner(settings.backend.max_workers),
            settings=settings,
            history=RecentSearches(settings.search.history_path, settings.search.recent_limit),
        )
    return _store
