# Path: core/pagination/engine.py
# Purpose: Compute page counts, pager windows, and pagination state transitions.
# Layer: core/pagination.
# Details: Pure functions over the immutable PaginationState value object.

from __future__ import annotations

import math
from typing import Iterable, List, Tuple, Union

from config.settings import PAGE_SIZE_OPTIONS
from core.models.domain import PaginationState


class _Ellipsis:
    """Marker standing in for a run of omitted page numbers."""

    _instance = None

    def __new__(cls) -> "_Ellipsis":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ELLIPSIS"


ELLIPSIS = _Ellipsis()

WindowItem = Union[int, _Ellipsis]

NEIGHBOURS = 2


def total_pages(total: int, page_size: int) -> int:
    """Return ``ceil(total / page_size)``; an empty corpus has zero pages."""

    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


def show_pager(pages: int) -> bool:
    """The pager is only rendered when there is somewhere else to go."""

    return pages > 1


def compute_window(page: int, pages: int) -> Tuple[WindowItem, ...]:
    """Return the ordered pager entries for ``page`` out of ``pages``.

    Page 1, the last page, and every page within two of ``page`` are shown.
    Each run of omitted pages between two shown pages collapses into a single
    ELLIPSIS marker, so at most one marker appears on each side of the
    current-page cluster.
    """

    if pages <= 0:
        return ()
    page = max(1, min(page, pages))

    shown = {1, pages}
    shown.update(n for n in range(page - NEIGHBOURS, page + NEIGHBOURS + 1) if 1 <= n <= pages)

    window: List[WindowItem] = []
    previous = 0
    for number in sorted(shown):
        if previous and number - previous > 1:
            window.append(ELLIPSIS)
        window.append(number)
        previous = number
    return tuple(window)


def validate_page_size(page_size: int, options: Iterable[int] = PAGE_SIZE_OPTIONS) -> int:
    allowed = tuple(options)
    if page_size not in allowed:
        raise ValueError(f"page_size must be one of {allowed}, got {page_size}")
    return page_size


def change_page_size(
    state: PaginationState, page_size: int, options: Iterable[int] = PAGE_SIZE_OPTIONS
) -> PaginationState:
    """Switch page size; prior offsets are meaningless so the page resets to 1."""

    validate_page_size(page_size, options)
    return PaginationState(page=1, page_size=page_size, total=state.total)


def change_page(state: PaginationState, page: int) -> PaginationState:
    """Move to ``page``; out-of-range targets return ``state`` unchanged."""

    if page < 1 or page > state.total_pages:
        return state
    if page == state.page:
        return state
    return PaginationState(page=page, page_size=state.page_size, total=state.total)


def with_total(state: PaginationState, total: int) -> PaginationState:
    """Record a new corpus total, pulling ``page`` back into ``[1, max(pages, 1)]``."""

    total = max(0, int(total))
    pages = total_pages(total, state.page_size)
    page = max(1, min(state.page, max(pages, 1)))
    if page == state.page and total == state.total:
        return state
    return PaginationState(page=page, page_size=state.page_size, total=total)


def reset_page(state: PaginationState) -> PaginationState:
    if state.page == 1:
        return state
    return PaginationState(page=1, page_size=state.page_size, total=state.total)


def has_previous(state: PaginationState) -> bool:
    return state.page > 1


def has_next(state: PaginationState) -> bool:
    return state.page < state.total_pages
