# Path: core/spatial/adapter.py
# Purpose: Map server-projected image positions into interactive scene entities.
# Layer: core/spatial.
# Details: Tracks hover and selection, emits open-detail on click, and pauses auto-rotation while detail is open.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from core.models.domain import ImageRef, SpatialPoint

logger = logging.getLogger(__name__)

HOVER_SCALE = 1.2
MIN_CAMERA_DISTANCE = 5.0
MAX_CAMERA_DISTANCE = 30.0
DEFAULT_CAMERA_DISTANCE = 20.0


@dataclass(frozen=True)
class SceneEntity:
    """One image quad placed in the exploratory scene."""

    id: object
    position: Tuple[float, float, float]
    image_ref: ImageRef
    image_data: str
    hovered: bool = False

    @property
    def scale(self) -> float:
        return HOVER_SCALE if self.hovered else 1.0


@dataclass(frozen=True)
class CameraFit:
    target: Tuple[float, float, float]
    distance: float


class SpatialMapAdapter:
    """Scene-side counterpart of the gallery.

    ``on_open_detail`` is the same callback the gallery uses, so clicking a
    point and clicking a tile open the identical detail view.
    """

    def __init__(self, on_open_detail: Optional[Callable[[ImageRef], None]] = None) -> None:
        self.on_open_detail = on_open_detail
        self._entities: Dict[object, SceneEntity] = {}
        self._order: List[object] = []
        self._hovered: Optional[object] = None
        self._auto_rotate_enabled = True
        self._detail_open = False

    @property
    def entities(self) -> Tuple[SceneEntity, ...]:
        return tuple(self._entities[key] for key in self._order)

    @property
    def is_empty(self) -> bool:
        return not self._order

    @property
    def hovered(self) -> Optional[SceneEntity]:
        if self._hovered is None:
            return None
        return self._entities.get(self._hovered)

    @property
    def auto_rotate(self) -> bool:
        """Rotation runs only with something to look at and no detail view open."""

        return self._auto_rotate_enabled and not self._detail_open and not self.is_empty

    def set_auto_rotate_enabled(self, enabled: bool) -> None:
        self._auto_rotate_enabled = enabled

    def set_detail_open(self, is_open: bool) -> None:
        self._detail_open = is_open

    def set_points(self, points: Iterable[SpatialPoint], labels: Sequence[ImageRef] = ()) -> None:
        """Replace every entity with one per point.

        Points without a path are labelled from ``labels`` (the full corpus
        listing) when their id is an index into it.
        """

        self._entities.clear()
        self._order.clear()
        self._hovered = None
        for point in points:
            entity = SceneEntity(
                id=point.id,
                position=tuple(float(v) for v in point.position),
                image_ref=self._resolve_ref(point, labels),
                image_data=point.image_data,
            )
            if entity.id in self._entities:
                logger.warning("Duplicate point id %r; keeping the latest", entity.id)
            else:
                self._order.append(entity.id)
            self._entities[entity.id] = entity

    def hover(self, entity_id: object) -> bool:
        if entity_id not in self._entities or self._hovered == entity_id:
            return False
        self._clear_hover()
        self._hovered = entity_id
        self._entities[entity_id] = self._replace_hover(self._entities[entity_id], True)
        return True

    def unhover(self, entity_id: object) -> bool:
        if self._hovered != entity_id:
            return False
        self._clear_hover()
        return True

    def click(self, entity_id: object) -> Optional[ImageRef]:
        entity = self._entities.get(entity_id)
        if entity is None:
            return None
        if self.on_open_detail is not None:
            self.on_open_detail(entity.image_ref)
        return entity.image_ref

    def camera_fit(self) -> CameraFit:
        """Aim at the cloud's centroid from a distance that keeps it in view."""

        if self.is_empty:
            return CameraFit(target=(0.0, 0.0, 0.0), distance=DEFAULT_CAMERA_DISTANCE)
        positions = np.array([self._entities[key].position for key in self._order], dtype=np.float64)
        centroid = positions.mean(axis=0)
        radius = float(np.linalg.norm(positions - centroid, axis=1).max())
        distance = float(np.clip(radius * 2.0, MIN_CAMERA_DISTANCE, MAX_CAMERA_DISTANCE))
        return CameraFit(target=tuple(float(v) for v in centroid), distance=distance)

    def _clear_hover(self) -> None:
        if self._hovered is not None and self._hovered in self._entities:
            self._entities[self._hovered] = self._replace_hover(self._entities[self._hovered], False)
        self._hovered = None

    @staticmethod
    def _replace_hover(entity: SceneEntity, hovered: bool) -> SceneEntity:
        return SceneEntity(
            id=entity.id,
            position=entity.position,
            image_ref=entity.image_ref,
            image_data=entity.image_data,
            hovered=hovered,
        )

    @staticmethod
    def _resolve_ref(point: SpatialPoint, labels: Sequence[ImageRef]) -> ImageRef:
        if point.image_ref:
            return point.image_ref
        if isinstance(point.id, int) and 0 <= point.id < len(labels):
            return labels[point.id]
        return str(point.id)


def orbit_project(positions: np.ndarray, fit: CameraFit, yaw: float) -> Tuple[np.ndarray, np.ndarray]:
    """Project world positions for a camera orbiting ``fit.target`` at angle ``yaw``.

    Returns normalized screen coordinates (x right, y up; the target maps to
    the origin) and a per-point perspective factor that is 1.0 at the target's
    depth and grows for points nearer the camera.
    """

    points = np.asarray(positions, dtype=np.float64).reshape(-1, 3) - np.asarray(fit.target, dtype=np.float64)
    cos_yaw, sin_yaw = np.cos(yaw), np.sin(yaw)
    x = points[:, 0] * cos_yaw + points[:, 2] * sin_yaw
    z = -points[:, 0] * sin_yaw + points[:, 2] * cos_yaw
    depth = np.maximum(fit.distance - z, 1e-3)
    factor = fit.distance / depth
    screen = np.stack([x * factor, points[:, 1] * factor], axis=1) / fit.distance
    return screen, factor
