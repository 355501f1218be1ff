# Path: config/__init__.py
# Purpose: Package initializer for configuration module.
# Layer: config.
# Details: Exposes settings models and the logging bootstrap for application-wide configuration.

from .logging import configure_logging
from .settings import AppSettings, BackendSettings, GallerySettings, PAGE_SIZE_OPTIONS, SearchSettings

__all__ = [
    "AppSettings",
    "BackendSettings",
    "GallerySettings",
    "PAGE_SIZE_OPTIONS",
    "SearchSettings",
    "configure_logging",
]
