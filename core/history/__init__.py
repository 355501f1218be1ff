# Path: core/history/__init__.py
# Purpose: Package initializer for persisted client history.
# Layer: core/history.
# Details: Exposes RecentSearches.

from .recent_searches import RecentSearches

__all__ = ["RecentSearches"]
