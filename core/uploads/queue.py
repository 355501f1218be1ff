# Path: core/uploads/queue.py
# Purpose: Own the staged file set and drive its upload lifecycle.
# Layer: core/uploads.
# Details: staged -> uploading -> done|failed, staged -> cancelled; one in-flight batch per queue.

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from core.models.domain import UploadItem, UploadStatus

logger = logging.getLogger(__name__)

# mimetypes has no entry for these on some platforms.
mimetypes.add_type("image/webp", ".webp")
mimetypes.add_type("image/avif", ".avif")


def is_image_file(path: Path) -> bool:
    """Return True when the file's guessed MIME type is an image type."""

    mime, _ = mimetypes.guess_type(str(path))
    return bool(mime and mime.startswith("image/"))


class UploadQueue:
    """Staged files awaiting upload as a single batch.

    A fresh selection replaces the whole staged set. Individual items can be
    pulled out only before the batch starts; once ``begin_upload`` hands the
    batch to the transport the queue refuses every mutation until
    ``finish_upload`` reports the outcome.
    """

    def __init__(self) -> None:
        self._items: Tuple[UploadItem, ...] = ()
        self._last_error: Optional[str] = None

    @property
    def items(self) -> Tuple[UploadItem, ...]:
        return self._items

    @property
    def is_uploading(self) -> bool:
        return any(item.status is UploadStatus.UPLOADING for item in self._items)

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def pending(self) -> Tuple[UploadItem, ...]:
        """Items that the next ``begin_upload`` would send (staged and previously failed)."""

        return tuple(item for item in self._items if item.status in (UploadStatus.STAGED, UploadStatus.FAILED))

    def __len__(self) -> int:
        return len(self._items)

    def stage(self, files: Iterable[Path]) -> bool:
        """Replace the staged set with the image files among ``files``."""

        if self.is_uploading:
            logger.info("Ignoring new selection while an upload batch is in flight")
            return False
        candidates = [Path(f) for f in files]
        accepted: List[UploadItem] = [UploadItem.staged(path) for path in candidates if is_image_file(path)]
        skipped = len(candidates) - len(accepted)
        if skipped:
            logger.info("Skipped %d non-image file(s) from selection", skipped)
        self._items = tuple(accepted)
        self._last_error = None
        return True

    def remove_staged(self, index: int) -> Optional[UploadItem]:
        """Pull one not-yet-sent item out of the set and return it marked cancelled."""

        if self.is_uploading or index < 0 or index >= len(self._items):
            return None
        item = self._items[index]
        if item.status not in (UploadStatus.STAGED, UploadStatus.FAILED):
            return None
        self._items = self._items[:index] + self._items[index + 1 :]
        return item.with_status(UploadStatus.CANCELLED)

    def clear_staged(self) -> bool:
        if self.is_uploading:
            return False
        self._items = ()
        self._last_error = None
        return True

    def begin_upload(self) -> Tuple[UploadItem, ...]:
        """Move every pending item to ``uploading`` and return the batch.

        Returns an empty tuple when a batch is already in flight or nothing is
        pending, in which case the caller must not issue a request.
        """

        if self.is_uploading:
            return ()
        batch = self.pending
        if not batch:
            return ()
        self._items = tuple(
            item.with_status(UploadStatus.UPLOADING) if item in batch else item for item in self._items
        )
        self._last_error = None
        logger.info("Uploading batch of %d file(s)", len(batch))
        return tuple(item for item in self._items if item.status is UploadStatus.UPLOADING)

    def finish_upload(self, error: Optional[BaseException] = None) -> Tuple[UploadItem, ...]:
        """Apply the batch outcome and return the items as they ended up.

        Success marks the batch ``done`` and clears the staged set. Failure
        marks every batch item ``failed`` and keeps it visible for retry.
        """

        if not self.is_uploading:
            return ()
        if error is None:
            finished = tuple(
                item.with_status(UploadStatus.DONE) for item in self._items if item.status is UploadStatus.UPLOADING
            )
            self._items = ()
            logger.info("Upload batch of %d file(s) completed", len(finished))
            return finished

        self._items = tuple(
            item.with_status(UploadStatus.FAILED) if item.status is UploadStatus.UPLOADING else item
            for item in self._items
        )
        self._last_error = str(error) or error.__class__.__name__
        logger.warning("Upload batch failed: %s", self._last_error)
        return tuple(item for item in self._items if item.status is UploadStatus.FAILED)
