"""
AlertLayer Grid Module

Slippy-map tile addressing and Web Mercator helpers.
"""

from alertlayer.grid.base import Extent, TileCoordinate, TileGridSpec
from alertlayer.grid.tile_math import (
    WEB_MERCATOR_GRID,
    TileRange,
    latitude_from_tile,
    lonlat_from_mercator,
    longitude_from_tile,
    mercator_from_lonlat,
    resolution_for_zoom,
    tile_bounds,
    tile_column,
    tile_rectangle,
    tile_row,
    tiles_for_extent,
)

__all__ = [
    "WEB_MERCATOR_GRID",
    "Extent",
    "TileCoordinate",
    "TileGridSpec",
    "TileRange",
    "latitude_from_tile",
    "lonlat_from_mercator",
    "longitude_from_tile",
    "mercator_from_lonlat",
    "resolution_for_zoom",
    "tile_bounds",
    "tile_column",
    "tile_rectangle",
    "tile_row",
    "tiles_for_extent",
]
