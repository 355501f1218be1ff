"""Shared test fixtures: a Qt core application, controllable task runners and an in-memory backend."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np
import pytest
from PySide6.QtCore import QCoreApplication

from config.settings import AppSettings
from core.history.recent_searches import RecentSearches
from core.models.domain import BrowsePage, FetchKey, ImageRef, SearchResult, SpatialPoint, StorageInfo, UploadItem
from core.tasks.base import SynchronousRunner, TaskCallback, TaskOutcome, run_task
from gui.image_store import ImageStore


class ManualRunner:
    """Queue submitted tasks so a test decides when, and in which order, each completes."""

    def __init__(self) -> None:
        self.pending: List[Tuple[FetchKey, Callable[[], object], TaskCallback]] = []

    def submit(self, key: FetchKey, work: Callable[[], object], on_done: TaskCallback) -> None:
        self.pending.append((key, work, on_done))

    @property
    def keys(self) -> List[FetchKey]:
        return [key for key, _, _ in self.pending]

    def operations(self) -> List[str]:
        return [key.operation for key, _, _ in self.pending]

    def resolve(self, index: int = 0) -> TaskOutcome:
        key, work, on_done = self.pending.pop(index)
        outcome = run_task(key, work)
        on_done(outcome)
        return outcome

    def resolve_key(self, key: FetchKey) -> TaskOutcome:
        return self.resolve(self.keys.index(key))

    def resolve_operation(self, operation: str) -> TaskOutcome:
        return self.resolve(self.operations().index(operation))

    def resolve_all(self) -> None:
        while self.pending:
            self.resolve(0)

    def run_ahead(self) -> None:
        """Execute every pending call now but hold its delivery until it is resolved."""

        self.pending = [(key, _replay(run_task(key, work)), on_done) for key, work, on_done in self.pending]


def _replay(outcome: TaskOutcome) -> Callable[[], object]:
    def work() -> object:
        if outcome.error is not None:
            raise outcome.error
        return outcome.result

    return work


class FakeBackend:
    """In-memory stand-in for BackendClient that records every call."""

    def __init__(self, images: Iterable[ImageRef] = ()) -> None:
        self.images: List[ImageRef] = list(images)
        self.search_results: Dict[str, Tuple[SearchResult, ...]] = {}
        self.points: List[SpatialPoint] = []
        self.failures: Dict[str, Exception] = {}
        self.calls: List[Tuple[str, tuple]] = []

    def calls_to(self, name: str) -> List[tuple]:
        return [args for called, args in self.calls if called == name]

    def reset_calls(self) -> None:
        self.calls.clear()

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    def image_url(self, ref: ImageRef) -> str:
        return f"http://backend.test/image/{ref}"

    def paginated_images(self, page: int, page_size: int) -> BrowsePage:
        self._record("paginated_images", page, page_size)
        start = (page - 1) * page_size
        return BrowsePage(images=tuple(self.images[start : start + page_size]), total=len(self.images))

    def list_images(self) -> Tuple[ImageRef, ...]:
        self._record("list_images")
        return tuple(self.images)

    def search(self, query: str) -> Tuple[SearchResult, ...]:
        self._record("search", query)
        return self.search_results.get(query, ())

    def image_points(self) -> Tuple[SpatialPoint, ...]:
        self._record("image_points")
        return tuple(self.points)

    def storage_size(self) -> StorageInfo:
        self._record("storage_size")
        return StorageInfo(size_bytes=len(self.images) * 1024)

    def fetch_image(self, ref: ImageRef) -> bytes:
        self._record("fetch_image", ref)
        return b""

    def upload(self, items: Iterable[UploadItem]) -> None:
        items = tuple(items)
        self._record("upload", items)
        self.images.extend(item.name for item in items)

    def delete_all(self) -> None:
        self._record("delete_all")
        self.images.clear()
        self.points.clear()

    def close(self) -> None:
        pass


def make_point(point_id: object, position: Tuple[float, float, float], path: Optional[str] = None) -> SpatialPoint:
    return SpatialPoint(id=point_id, position=np.array(position, dtype=np.float64), image_ref=path)


@pytest.fixture(scope="session")
def qapp() -> QCoreApplication:
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(images=[f"img{i:03d}.jpg" for i in range(100)])


@pytest.fixture
def history(tmp_path: Path) -> RecentSearches:
    return RecentSearches(tmp_path / "recent_searches.json", limit=5)


@pytest.fixture
def store(qapp, backend: FakeBackend, history: RecentSearches) -> ImageStore:
    """Store whose background calls complete immediately."""

    return ImageStore(client=backend, runner=SynchronousRunner(), settings=AppSettings(), history=history)


@pytest.fixture
def manual_runner() -> ManualRunner:
    return ManualRunner()


@pytest.fixture
def manual_store(qapp, backend: FakeBackend, history: RecentSearches, manual_runner: ManualRunner) -> ImageStore:
    """Store whose background calls wait until the test resolves them."""

    return ImageStore(client=backend, runner=manual_runner, settings=AppSettings(), history=history)
