# Path: core/history/recent_searches.py
# Purpose: Keep the recently-used search strings across restarts.
# Layer: core/history.
# Details: Most-recent-first, de-duplicated, bounded list persisted as JSON next to user settings.

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class RecentSearches:
    """Bounded most-recently-used list of search queries."""

    def __init__(self, path: Optional[Path] = None, limit: int = 5) -> None:
        self.path = Path(path) if path is not None else None
        self.limit = max(1, limit)
        self._items: List[str] = self._load()

    @property
    def items(self) -> Tuple[str, ...]:
        return tuple(self._items)

    def add(self, query: str) -> bool:
        """Move ``query`` to the front; returns True when the list changed."""

        query = query.strip()
        if not query:
            return False
        if self._items and self._items[0] == query:
            return False
        self._items = [query] + [item for item in self._items if item != query]
        del self._items[self.limit :]
        self._save()
        return True

    def clear(self) -> bool:
        if not self._items:
            return False
        self._items = []
        self._save()
        return True

    def _load(self) -> List[str]:
        if self.path is None or not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable search history %s: %s", self.path, exc)
            return []
        items: List[str] = []
        for raw in payload.get("recent", []) if isinstance(payload, dict) else []:
            text = str(raw).strip()
            if text and text not in items:
                items.append(text)
        return items[: self.limit]

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            temp_path.write_text(json.dumps({"recent": self._items}, indent=2), encoding="utf-8")
            os.replace(temp_path, self.path)
        except OSError as exc:
            logger.warning("Could not persist search history to %s: %s", self.path, exc)
