# Path: core/models/domain.py
# Purpose: Define domain models shared across the store, view models, and backend client.
# Layer: core/models.
# Details: Immutable dataclasses and enums; every mutation produces a new value object.

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Literal, Optional, Tuple, Union

import numpy as np

ImageRef = str


class Mode(str, Enum):
    """Which data source is authoritative for the displayed image set."""

    SEARCH = "search"
    BROWSE = "browse"


def derive_mode(query: str, results: Tuple["SearchResult", ...], search_pending: bool) -> Mode:
    """Return the single authoritative mode for the given search state.

    Search mode holds while results are present, or while a non-empty query is
    still waiting for its response. Everything else is browse mode.
    """

    if results:
        return Mode.SEARCH
    if query.strip() and search_pending:
        return Mode.SEARCH
    return Mode.BROWSE


@dataclass(frozen=True)
class SearchResult:
    """One ranked hit returned by the backend for a semantic query."""

    path: ImageRef
    similarity: float

    @classmethod
    def from_payload(cls, payload: dict) -> "SearchResult":
        return cls(path=str(payload["path"]), similarity=round(float(payload.get("similarity", 0.0)), 2))


@dataclass(frozen=True)
class SearchEntry:
    """Displayable entry produced by a search; carries its similarity score."""

    path: ImageRef
    similarity: float
    kind: Literal["search"] = "search"

    @property
    def label(self) -> str:
        return f"{self.similarity:.2f}% match"


@dataclass(frozen=True)
class BrowseEntry:
    """Displayable entry produced by paginated browsing."""

    path: ImageRef
    kind: Literal["browse"] = "browse"

    @property
    def label(self) -> str:
        return self.path


DisplayEntry = Union[SearchEntry, BrowseEntry]


@dataclass(frozen=True)
class PaginationState:
    """Browse pagination inputs; ``page`` is 1-based."""

    page: int = 1
    page_size: int = 12
    total: int = 0

    @property
    def total_pages(self) -> int:
        if self.total <= 0:
            return 0
        return math.ceil(self.total / self.page_size)


@dataclass(frozen=True)
class FetchKey:
    """Identity of a background request, used for de-duplication and stale-response checks."""

    operation: str
    params: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def of(cls, operation: str, **params: Any) -> "FetchKey":
        return cls(operation=operation, params=tuple(sorted(params.items())))

    def __str__(self) -> str:
        if not self.params:
            return self.operation
        args = ", ".join(f"{name}={value!r}" for name, value in self.params)
        return f"{self.operation}({args})"


@dataclass(frozen=True)
class BrowsePage:
    """One page of the corpus listing as returned by ``/paginated_images``."""

    images: Tuple[ImageRef, ...]
    total: int
    key: Optional[FetchKey] = None


class UploadStatus(str, Enum):
    STAGED = "staged"
    UPLOADING = "uploading"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadItem:
    """A user-selected file and its position in the upload lifecycle."""

    path: Path
    preview: str
    status: UploadStatus = UploadStatus.STAGED

    @classmethod
    def staged(cls, path: Path) -> "UploadItem":
        resolved = Path(path).resolve()
        return cls(path=resolved, preview=resolved.as_uri())

    @property
    def name(self) -> str:
        return self.path.name

    def with_status(self, status: UploadStatus) -> "UploadItem":
        return UploadItem(path=self.path, preview=self.preview, status=status)


class DeleteState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    DELETING = "deleting"


@dataclass(frozen=True)
class SpatialPoint:
    """A corpus image positioned in 3-D embedding space."""

    id: Any
    position: np.ndarray = field(compare=False)
    image_ref: Optional[ImageRef] = None
    image_data: str = ""

    @classmethod
    def from_payload(cls, payload: dict) -> "SpatialPoint":
        position = np.asarray(payload.get("position", (0.0, 0.0, 0.0)), dtype=np.float64)
        if position.shape != (3,):
            raise ValueError(f"Point {payload.get('id')!r} has position of shape {position.shape}, expected (3,)")
        path = payload.get("path")
        return cls(
            id=payload["id"],
            position=position,
            image_ref=str(path) if path else None,
            image_data=str(payload.get("imageData") or ""),
        )


@dataclass(frozen=True)
class StorageInfo:
    """Disk space consumed by the stored corpus."""

    size_bytes: int

    @property
    def human_readable(self) -> str:
        size = float(self.size_bytes)
        for unit in ("B", "KB", "MB", "GB"):
            if size < 1024 or unit == "GB":
                return f"{size:.1f}{unit}"
            size /= 1024.0
        return f"{size:.1f}GB"


class ErrorKind(str, Enum):
    CONNECTION = "connection"
    RESPONSE = "response"


@dataclass(frozen=True)
class ErrorState:
    """Last failure surfaced to the user, with the operation that produced it."""

    kind: ErrorKind
    message: str
    operation: str = ""
