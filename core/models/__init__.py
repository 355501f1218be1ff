# Path: core/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: core/models.
# Details: Exposes value objects used across the store, view models, and backend client.

from .domain import (
    BrowseEntry,
    BrowsePage,
    DeleteState,
    DisplayEntry,
    ErrorKind,
    ErrorState,
    FetchKey,
    ImageRef,
    Mode,
    PaginationState,
    SearchEntry,
    SearchResult,
    SpatialPoint,
    StorageInfo,
    UploadItem,
    UploadStatus,
    derive_mode,
)

__all__ = [
    "BrowseEntry",
    "BrowsePage",
    "DeleteState",
    "DisplayEntry",
    "ErrorKind",
    "ErrorState",
    "FetchKey",
    "ImageRef",
    "Mode",
    "PaginationState",
    "SearchEntry",
    "SearchResult",
    "SpatialPoint",
    "StorageInfo",
    "UploadItem",
    "UploadStatus",
    "derive_mode",
]
