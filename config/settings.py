# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes backend connection, gallery paging, search history, and logging settings.

from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, Field

PAGE_SIZE_OPTIONS: Tuple[int, ...] = (12, 18, 24, 36, 48)

EXAMPLE_SEARCHES: Tuple[str, ...] = (
    "mountains with snow",
    "sunset over the ocean",
    "people smiling",
    "dogs playing",
    "city skyline",
)


class BackendSettings(BaseModel):
    """Settings describing how to reach the image search backend."""

    base_url: str = Field(default="http://127.0.0.1:8000", description="Root URL of the backend HTTP service.")
    request_timeout: Optional[float] = Field(
        default=None,
        description="Seconds to wait for a backend response; None leaves the transport without a timeout.",
    )
    max_workers: int = Field(default=4, description="Upper bound for concurrent background fetches.")


class GallerySettings(BaseModel):
    """Settings controlling gallery paging and tile presentation."""

    default_page_size: int = Field(default=12, description="Images per page when the client starts.")
    page_size_options: Tuple[int, ...] = Field(default=PAGE_SIZE_OPTIONS, description="Page sizes offered in the pager.")
    columns: int = Field(default=3, description="Initial number of grid columns.")
    thumbnail_size: int = Field(default=240, description="Longest edge in pixels for staged file previews.")


class SearchSettings(BaseModel):
    """Settings for query handling and the recently-used search list."""

    debounce_ms: int = Field(default=350, description="Delay after the last keystroke before a search is issued.")
    recent_limit: int = Field(default=5, description="Number of recent searches retained across restarts.")
    history_path: Path = Field(
        default=Path.home() / ".imace" / "recent_searches.json",
        description="JSON file holding the recently-used search list.",
    )
    examples: Tuple[str, ...] = Field(default=EXAMPLE_SEARCHES, description="Suggested queries shown under the search bar.")


class AppSettings(BaseModel):
    """Top-level application settings shared across the store, widgets, and client."""

    backend: BackendSettings = Field(default_factory=BackendSettings)
    gallery: GallerySettings = Field(default_factory=GallerySettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")


__all__ = [
    "AppSettings",
    "BackendSettings",
    "EXAMPLE_SEARCHES",
    "GallerySettings",
    "PAGE_SIZE_OPTIONS",
    "SearchSettings",
]
