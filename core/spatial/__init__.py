# Path: core/spatial/__init__.py
# Purpose: Package initializer for the 3-D exploration adapter.
# Layer: core/spatial.
# Details: Exposes SpatialMapAdapter and its scene entity value objects.

from .adapter import CameraFit, SceneEntity, SpatialMapAdapter, orbit_project

__all__ = ["CameraFit", "SceneEntity", "SpatialMapAdapter", "orbit_project"]
