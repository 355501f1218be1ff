# Path: core/pagination/__init__.py
# Purpose: Package initializer for pagination helpers.
# Layer: core/pagination.
# Details: Exposes the pager window algorithm and PaginationState transitions.

from .engine import (
    ELLIPSIS,
    WindowItem,
    change_page,
    change_page_size,
    compute_window,
    has_next,
    has_previous,
    reset_page,
    show_pager,
    total_pages,
    validate_page_size,
    with_total,
)

__all__ = [
    "ELLIPSIS",
    "WindowItem",
    "change_page",
    "change_page_size",
    "compute_window",
    "has_next",
    "has_previous",
    "reset_page",
    "show_pager",
    "total_pages",
    "validate_page_size",
    "with_total",
]
