# Path: core/uploads/__init__.py
# Purpose: Package initializer for the upload lifecycle.
# Layer: core/uploads.
# Details: Exposes the staged-file queue and the image MIME filter.

from .queue import UploadQueue, is_image_file

__all__ = ["UploadQueue", "is_image_file"]
