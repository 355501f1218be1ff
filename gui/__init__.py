# Path: gui/__init__.py
# Purpose: Package initializer for GUI layer.
# Layer: gui.
# Details: Provide lightweight exports without importing MainWindow to avoid side effects.

from .image_store import ImageStore, get_image_store
from .view_models import GalleryState, GalleryView, GalleryViewModel, SpatialViewModel, derive_gallery_view

__all__ = [
    "GalleryState",
    "GalleryView",
    "GalleryViewModel",
    "ImageStore",
    "SpatialViewModel",
    "derive_gallery_view",
    "get_image_store",
]
