"""
AlertLayer Render Module

Drawing surface, host map boundary, tile fetch lifecycle and the
viewport-driven CanvasLayer.
"""

from alertlayer.render.base import (
    EXTENT_CHANGE,
    PAN_START,
    ZOOM_START,
    DrawingSurface,
    MapView,
    TileOverlay,
)
from alertlayer.render.fetch import (
    COMPOSITED,
    DECODED,
    DISCARDED,
    DOWNLOADED,
    FAILED,
    REQUESTED,
    TileJob,
    TileLoader,
    TileRequest,
)
from alertlayer.render.host import MercatorMapView
from alertlayer.render.layer import CanvasLayer
from alertlayer.render.surface import ArraySurface

__all__ = [
    "COMPOSITED",
    "DECODED",
    "DISCARDED",
    "DOWNLOADED",
    "EXTENT_CHANGE",
    "FAILED",
    "PAN_START",
    "REQUESTED",
    "ZOOM_START",
    "ArraySurface",
    "CanvasLayer",
    "DrawingSurface",
    "MapView",
    "MercatorMapView",
    "TileJob",
    "TileLoader",
    "TileOverlay",
    "TileRequest",
]
