# Path: core/deletion/__init__.py
# Purpose: Package initializer for the delete-all confirmation flow.
# Layer: core/deletion.
# Details: Exposes DeletionGuard.

from .guard import DeletionGuard

__all__ = ["DeletionGuard"]
