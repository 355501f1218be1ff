# Path: gui/widgets/management_panel.py
# Purpose: Upload staging area and the delete-all danger zone.
# Layer: gui.
# Details: Mirrors UploadQueue and DeletionGuard state from the store; file selection via dialog or drag and drop.

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional

from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QIcon, QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.imaging import make_preview
from core.models.domain import DeleteState, StorageInfo, UploadItem, UploadStatus
from ..image_store import ImageStore

_STATUS_TEXT = {
    UploadStatus.STAGED: "",
    UploadStatus.UPLOADING: "uploading…",
    UploadStatus.FAILED: "failed",
    UploadStatus.DONE: "done",
    UploadStatus.CANCELLED: "cancelled",
}


class ManagementPanel(QWidget):
    """Image management: stage and upload files, or delete every stored image."""

    def __init__(self, store: ImageStore, preview_size: int = 96, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.preview_size = preview_size
        self._preview_cache: Dict[Path, QPixmap] = {}
        self.setAcceptDrops(True)
        self._build_ui()

        store.uploads_changed.connect(self._render_uploads)
        store.deletion_changed.connect(self._render_deletion)
        store.storage_changed.connect(self._render_storage)
        self._render_uploads(store.staged_files)
        self._render_deletion(store.delete_state)
        self._render_storage(store.storage)

    def _build_ui(self) -> None:
        root = QHBoxLayout(self)

        upload_box = QGroupBox("Upload Images")
        upload_layout = QVBoxLayout(upload_box)
        self.drop_hint = QLabel("Drop images here or click Browse")
        self.drop_hint.setAlignment(Qt.AlignCenter)
        self.drop_hint.setStyleSheet("border: 2px dashed #a5b4fc; border-radius: 8px; padding: 18px; color: #4b5563;")
        upload_layout.addWidget(self.drop_hint)

        self.staged_list = QListWidget()
        self.staged_list.setViewMode(QListWidget.IconMode)
        self.staged_list.setIconSize(QSize(self.preview_size, self.preview_size))
        self.staged_list.setResizeMode(QListWidget.Adjust)
        self.staged_list.setMaximumHeight(self.preview_size * 2 + 48)
        upload_layout.addWidget(self.staged_list)

        buttons = QHBoxLayout()
        self.browse_btn = QPushButton("Browse…")
        self.remove_btn = QPushButton("Remove selected")
        self.clear_btn = QPushButton("Clear all")
        self.upload_btn = QPushButton("Upload")
        self.browse_btn.clicked.connect(self._browse)
        self.remove_btn.clicked.connect(self._remove_selected)
        self.clear_btn.clicked.connect(self.store.clear_staged_files)
        self.upload_btn.clicked.connect(self.store.upload)
        for button in (self.browse_btn, self.remove_btn, self.clear_btn, self.upload_btn):
            buttons.addWidget(button)
        upload_layout.addLayout(buttons)
        self.upload_status = QLabel()
        upload_layout.addWidget(self.upload_status)
        root.addWidget(upload_box, 2)

        danger_box = QGroupBox("Danger Zone")
        danger_layout = QVBoxLayout(danger_box)
        warning = QLabel(
            "This will permanently delete all your images and associated data. This action cannot be undone."
        )
        warning.setWordWrap(True)
        warning.setStyleSheet("color: #b91c1c;")
        danger_layout.addWidget(warning)
        self.storage_label = QLabel("Storage used: n/a")
        danger_layout.addWidget(self.storage_label)

        self.delete_btn = QPushButton("Delete All Data")
        self.delete_btn.clicked.connect(self.store.request_delete)
        danger_layout.addWidget(self.delete_btn)

        self.confirm_row = QWidget()
        confirm_layout = QHBoxLayout(self.confirm_row)
        confirm_layout.setContentsMargins(0, 0, 0, 0)
        self.confirm_btn = QPushButton("Yes, Delete All")
        self.confirm_btn.setStyleSheet("background: #dc2626; color: white;")
        self.cancel_btn = QPushButton("Cancel")
        self.confirm_btn.clicked.connect(self.store.confirm_delete)
        self.cancel_btn.clicked.connect(self.store.cancel_delete_confirm)
        confirm_layout.addWidget(self.confirm_btn)
        confirm_layout.addWidget(self.cancel_btn)
        danger_layout.addWidget(self.confirm_row)
        self.delete_status = QLabel()
        danger_layout.addWidget(self.delete_status)
        danger_layout.addStretch(1)
        root.addWidget(danger_box, 1)

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        paths = [Path(url.toLocalFile()) for url in event.mimeData().urls() if url.isLocalFile()]
        if paths:
            self.store.set_selected_files(paths)
        event.acceptProposedAction()

    def _browse(self) -> None:
        files, _ = QFileDialog.getOpenFileNames(
            self, "Select images", "", "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp *.tif *.tiff)"
        )
        if files:
            self.store.set_selected_files(Path(f) for f in files)

    def _remove_selected(self) -> None:
        row = self.staged_list.currentRow()
        if row >= 0:
            self.store.cancel_staged_file(row)

    def _render_uploads(self, items: Iterable[UploadItem]) -> None:
        items = list(items)
        self.staged_list.clear()
        for item in items:
            entry = QListWidgetItem(self._preview_icon(item.path), self._item_text(item))
            entry.setToolTip(str(item.path))
            self.staged_list.addItem(entry)
        self._preview_cache = {path: pixmap for path, pixmap in self._preview_cache.items() if any(i.path == path for i in items)}

        uploading = self.store.is_uploading
        has_pending = any(item.status in (UploadStatus.STAGED, UploadStatus.FAILED) for item in items)
        self.browse_btn.setEnabled(not uploading)
        self.remove_btn.setEnabled(not uploading and bool(items))
        self.clear_btn.setEnabled(not uploading and bool(items))
        self.upload_btn.setEnabled(not uploading and has_pending)
        if uploading:
            self.upload_btn.setText("Uploading…")
        else:
            count = len(items)
            self.upload_btn.setText(f"Upload {count} Image{'s' if count != 1 else ''}" if count else "Upload")

        if self.store.upload_error:
            self.upload_status.setText(f"Upload failed: {self.store.upload_error}. Retry or remove files.")
        elif items:
            self.upload_status.setText(f"Selected Images ({len(items)})")
        else:
            self.upload_status.setText("")

    def _render_deletion(self, state: DeleteState) -> None:
        self.delete_btn.setVisible(state is DeleteState.IDLE)
        self.confirm_row.setVisible(state is not DeleteState.IDLE)
        deleting = state is DeleteState.DELETING
        self.confirm_btn.setEnabled(not deleting)
        self.cancel_btn.setEnabled(not deleting)
        self.confirm_btn.setText("Deleting…" if deleting else "Yes, Delete All")
        if state is DeleteState.CONFIRMING:
            self.delete_status.setText("Are you sure? This cannot be undone.")
        elif self.store.delete_error:
            self.delete_status.setText(f"Delete failed: {self.store.delete_error}")
        else:
            self.delete_status.setText("")

    def _render_storage(self, storage: Optional[StorageInfo]) -> None:
        text = storage.human_readable if storage is not None else "n/a"
        self.storage_label.setText(f"Storage used: {text}")

    def _preview_icon(self, path: Path) -> QIcon:
        pixmap = self._preview_cache.get(path)
        if pixmap is None:
            pixmap = QPixmap()
            data = make_preview(path, self.preview_size)
            if data is not None:
                pixmap.loadFromData(data, "PNG")
            self._preview_cache[path] = pixmap
        return QIcon(pixmap)

    @staticmethod
    def _item_text(item: UploadItem) -> str:
        status = _STATUS_TEXT[item.status]
        return f"{item.name}\n{status}" if status else item.name
