# Path: gui/widgets/spatial_view.py
# Purpose: Paint the projected image cloud and route hover and click to the spatial view model.
# Layer: gui.
# Details: Orbits the camera on a timer while auto-rotation is on; drag rotates manually, wheel zooms.

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Tuple

import numpy as np
from PySide6.QtCore import QPointF, QRectF, Qt, QTimer
from PySide6.QtGui import QColor, QImage, QPainter, QPen
from PySide6.QtWidgets import QWidget

from core.imaging import decode_data_url, is_data_url
from core.spatial.adapter import (
    MAX_CAMERA_DISTANCE,
    MIN_CAMERA_DISTANCE,
    CameraFit,
    SceneEntity,
    orbit_project,
)
from ..image_store import OP_IMAGE_POINTS, ImageStore
from ..view_models import SpatialViewModel

logger = logging.getLogger(__name__)

ROTATION_STEP = 0.004
FRAME_INTERVAL_MS = 33
BASE_QUAD_SIZE = 36.0


class ThumbnailCache:
    """Decoded point thumbnails keyed by point id and image payload.

    Ids are positions in the point listing, so a re-fetched point may reuse
    an id with different image data and must be decoded again.
    """

    def __init__(self) -> None:
        self._images: Dict[Tuple[object, str], QImage] = {}

    def sync(self, entities: Tuple[SceneEntity, ...]) -> None:
        known = {(entity.id, entity.image_data) for entity in entities}
        self._images = {key: image for key, image in self._images.items() if key in known}
        for entity in entities:
            key = (entity.id, entity.image_data)
            if key not in self._images:
                self._images[key] = decode_thumbnail(entity)

    def get(self, entity: SceneEntity) -> Optional[QImage]:
        return self._images.get((entity.id, entity.image_data))

    def __len__(self) -> int:
        return len(self._images)


def decode_thumbnail(entity: SceneEntity) -> QImage:
    image = QImage()
    if entity.image_data and is_data_url(entity.image_data):
        try:
            image.loadFromData(decode_data_url(entity.image_data))
        except ValueError as exc:
            logger.debug("Undecodable image data for point %r: %s", entity.id, exc)
    return image


class SpatialView(QWidget):
    """Interactive 3-D overview of the whole corpus."""

    def __init__(self, view_model: SpatialViewModel, store: ImageStore, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.view_model = view_model
        self.store = store
        self._yaw = 0.0
        self._zoom = 1.0
        self._fit = view_model.adapter.camera_fit()
        self._thumbnails = ThumbnailCache()
        self._hit_boxes: List[Tuple[object, QRectF]] = []
        self._drag_origin: Optional[QPointF] = None
        self._dragged = False
        self.setMouseTracking(True)
        self.setMinimumHeight(320)

        self._timer = QTimer(self)
        self._timer.setInterval(FRAME_INTERVAL_MS)
        self._timer.timeout.connect(self._advance)

        view_model.scene_changed.connect(self._on_scene_changed)
        view_model.auto_rotate_changed.connect(self._set_rotating)
        store.points_error_changed.connect(lambda _error: self.update())
        self._on_scene_changed(view_model.entities)
        self._set_rotating(view_model.auto_rotate)

    def _on_scene_changed(self, entities: Tuple[SceneEntity, ...]) -> None:
        self._thumbnails.sync(entities)
        self._fit = self.view_model.adapter.camera_fit()
        self.update()

    def _set_rotating(self, enabled: bool) -> None:
        if enabled:
            self._timer.start()
        else:
            self._timer.stop()

    def _advance(self) -> None:
        self._yaw = (self._yaw + ROTATION_STEP) % (2 * math.pi)
        self.update()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor("#0f172a"))
        self._hit_boxes = []

        message = self._status_message()
        if message is not None:
            painter.setPen(QColor("#e2e8f0"))
            painter.drawText(self.rect(), Qt.AlignCenter, message)
            return

        entities = self.view_model.entities
        fit = CameraFit(
            target=self._fit.target,
            distance=float(np.clip(self._fit.distance / self._zoom, MIN_CAMERA_DISTANCE, MAX_CAMERA_DISTANCE)),
        )
        screen, factor = orbit_project(np.array([e.position for e in entities]), fit, self._yaw)
        half = min(self.width(), self.height()) / 2.0
        center = QPointF(self.width() / 2.0, self.height() / 2.0)

        # Far quads first so nearer ones are drawn on top.
        for index in np.argsort(factor):
            entity = entities[index]
            size = BASE_QUAD_SIZE * float(factor[index]) * entity.scale
            x = center.x() + float(screen[index, 0]) * half
            y = center.y() - float(screen[index, 1]) * half
            rect = QRectF(x - size / 2.0, y - size / 2.0, size, size)
            image = self._thumbnails.get(entity)
            if image is not None and not image.isNull():
                painter.drawImage(rect, image)
            else:
                painter.setPen(Qt.NoPen)
                painter.setBrush(QColor("#6366f1"))
                painter.drawRect(rect)
            if entity.hovered:
                pen = QPen(QColor("#facc15"))
                pen.setWidth(2)
                painter.setPen(pen)
                painter.setBrush(Qt.NoBrush)
                painter.drawRect(rect)
            self._hit_boxes.append((entity.id, rect))

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.LeftButton:
            self._drag_origin = event.position()
            self._dragged = False
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        pos = event.position()
        if self._drag_origin is not None and event.buttons() & Qt.LeftButton:
            dx = pos.x() - self._drag_origin.x()
            if abs(dx) > 2:
                self._dragged = True
                self._yaw = (self._yaw + dx * 0.01) % (2 * math.pi)
                self._drag_origin = pos
                self.update()
            return
        self._update_hover(self._entity_at(pos))

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.button() == Qt.LeftButton and not self._dragged:
            entity_id = self._entity_at(event.position())
            if entity_id is not None:
                self.view_model.click(entity_id)
        self._drag_origin = None
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event) -> None:  # type: ignore[override]
        steps = event.angleDelta().y() / 120.0
        self._zoom = float(np.clip(self._zoom * (1.1 ** steps), 0.25, 4.0))
        self.update()

    def leaveEvent(self, event) -> None:  # type: ignore[override]
        self._update_hover(None)
        super().leaveEvent(event)

    def _update_hover(self, entity_id: Optional[object]) -> None:
        current = self.view_model.adapter.hovered
        if current is not None and current.id != entity_id:
            self.view_model.unhover(current.id)
        if entity_id is not None:
            self.view_model.hover(entity_id)
        self.setCursor(Qt.PointingHandCursor if entity_id is not None else Qt.ArrowCursor)

    def _entity_at(self, pos: QPointF) -> Optional[object]:
        for entity_id, rect in reversed(self._hit_boxes):
            if rect.contains(pos):
                return entity_id
        return None

    def _status_message(self) -> Optional[str]:
        if self.store.points_error is not None:
            return f"Could not load the image map: {self.store.points_error.message}"
        if self.view_model.adapter.is_empty:
            if self.store.is_loading(OP_IMAGE_POINTS):
                return "Loading image map…"
            return "No images to explore yet. Upload some to get started."
        return None
