"""
AlertLayer Core Module

Exceptions shared by every layer component.
"""

from alertlayer.core.exceptions import (
    AlertLayerError,
    LayerStateError,
    PixelDecodeError,
    PixelEncodeError,
    TileDecodeError,
    TileFetchError,
    ValidationError,
)

__all__ = [
    "AlertLayerError",
    "LayerStateError",
    "PixelDecodeError",
    "PixelEncodeError",
    "TileDecodeError",
    "TileFetchError",
    "ValidationError",
]
