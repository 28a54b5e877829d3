"""
Tile Coordinate Math

Converts between map coordinates, tile (column, row, zoom) addresses and
geographic tile boundaries for a north-up slippy-map tile grid.

Rows grow southward while map Y grows northward, so the row axis is inverted
relative to latitude: the northern edge of a viewport gives the *minimum* row.

Examples:
    >>> from alertlayer.grid import WEB_MERCATOR_GRID, mercator_from_lonlat, resolution_for_zoom
    >>> from alertlayer.grid import tile_column, tile_row
    >>> res = resolution_for_zoom(5)
    >>> x, y = mercator_from_lonlat(-60.0, -10.0)
    >>> tile_column(WEB_MERCATOR_GRID, x, res), tile_row(WEB_MERCATOR_GRID, y, res)
    (10, 16)
"""

import math
from dataclasses import dataclass

from alertlayer.core.exceptions import ValidationError
from alertlayer.grid.base import Extent, TileCoordinate, TileGridSpec

# WGS84 equatorial radius used by spherical Web Mercator (EPSG:3857)
EARTH_RADIUS_M = 6378137.0

# Half the projected world width in metres
ORIGIN_SHIFT_M = math.pi * EARTH_RADIUS_M

# Latitude at which the square Web Mercator world ends
MAX_LATITUDE = 85.0511287798066

TILE_SIZE = 256

WEB_MERCATOR_GRID = TileGridSpec(
    origin_x=-ORIGIN_SHIFT_M,
    origin_y=ORIGIN_SHIFT_M,
    cols=TILE_SIZE,
    rows=TILE_SIZE,
)


def tile_column(grid: TileGridSpec, longitude: float, resolution: float) -> int:
    """
    Column of the tile containing a map X coordinate

    Args:
        grid: Tile grid specification
        longitude: X coordinate in map projection units
        resolution: Map units per pixel at the current zoom

    Returns:
        Tile column index
    """
    tile_size_map_units = grid.cols * resolution
    return int(math.floor((longitude - grid.origin_x) / tile_size_map_units))


def tile_row(grid: TileGridSpec, latitude: float, resolution: float) -> int:
    """
    Row of the tile containing a map Y coordinate

    Rows are counted downward from the grid origin, so pass the viewport's
    maximum Y to get its minimum row.

    Args:
        grid: Tile grid specification
        latitude: Y coordinate in map projection units
        resolution: Map units per pixel at the current zoom

    Returns:
        Tile row index
    """
    tile_size_map_units = grid.rows * resolution
    return int(math.floor((grid.origin_y - latitude) / tile_size_map_units))


def longitude_from_tile(column: float, zoom: int) -> float:
    """Longitude in degrees of a tile's western edge."""
    return column / math.pow(2, zoom) * 360.0 - 180.0


def latitude_from_tile(row: float, zoom: int) -> float:
    """Latitude in degrees of a tile's northern edge."""
    n = math.pi - 2.0 * math.pi * row / math.pow(2, zoom)
    return 180.0 / math.pi * math.atan(math.sinh(n))


def tile_bounds(column: int, row: int, zoom: int) -> tuple[float, float, float, float]:
    """
    Geographic bounds of a tile

    Returns:
        (west, south, east, north) in decimal degrees

    Examples:
        >>> tile_bounds(0, 0, 0)
        (-180.0, -85.0511287798066, 180.0, 85.0511287798066)
    """
    west = longitude_from_tile(column, zoom)
    east = longitude_from_tile(column + 1, zoom)
    north = latitude_from_tile(row, zoom)
    south = latitude_from_tile(row + 1, zoom)
    return (west, south, east, north)


def tile_rectangle(
    column_min: int, column_max: int, row_min: int, row_max: int, zoom: int
) -> list[TileCoordinate]:
    """
    Every tile in an inclusive column/row rectangle

    Output is column-major (all rows of a column before the next column).
    An inverted range yields an empty list.
    """
    return [
        TileCoordinate(column=column, row=row, zoom=zoom)
        for column in range(column_min, column_max + 1)
        for row in range(row_min, row_max + 1)
    ]


@dataclass(frozen=True)
class TileRange:
    """Inclusive column/row bounds of the tiles covering a viewport."""

    column_min: int
    column_max: int
    row_min: int
    row_max: int
    zoom: int

    def tiles(self) -> list[TileCoordinate]:
        return tile_rectangle(
            self.column_min, self.column_max, self.row_min, self.row_max, self.zoom
        )

    def __len__(self) -> int:
        columns = max(0, self.column_max - self.column_min + 1)
        rows = max(0, self.row_max - self.row_min + 1)
        return columns * rows


def tiles_for_extent(
    grid: TileGridSpec, extent: Extent, resolution: float, zoom: int
) -> TileRange:
    """
    Tile range needed to cover a viewport extent

    Args:
        grid: Tile grid specification
        extent: Viewport extent in map projection units
        resolution: Map units per pixel
        zoom: Zoom level the tiles are requested at

    Returns:
        TileRange with min/max column and row

    Raises:
        ValidationError: If resolution is not positive
    """
    if not resolution > 0:
        raise ValidationError(f"Resolution must be positive, got {resolution}")

    return TileRange(
        column_min=tile_column(grid, extent.xmin, resolution),
        column_max=tile_column(grid, extent.xmax, resolution),
        # Northern edge → smallest row
        row_min=tile_row(grid, extent.ymax, resolution),
        row_max=tile_row(grid, extent.ymin, resolution),
        zoom=zoom,
    )


def resolution_for_zoom(zoom: int, tile_size: int = TILE_SIZE) -> float:
    """Web Mercator metres per pixel at a zoom level."""
    return 2.0 * ORIGIN_SHIFT_M / (tile_size * math.pow(2, zoom))


def mercator_from_lonlat(lon: float, lat: float) -> tuple[float, float]:
    """Project WGS84 degrees to spherical Web Mercator metres."""
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    x = EARTH_RADIUS_M * math.radians(lon)
    y = EARTH_RADIUS_M * math.log(math.tan(math.pi / 4.0 + math.radians(lat) / 2.0))
    return (x, y)


def lonlat_from_mercator(x: float, y: float) -> tuple[float, float]:
    """Unproject spherical Web Mercator metres to WGS84 degrees."""
    lon = math.degrees(x / EARTH_RADIUS_M)
    lat = math.degrees(2.0 * math.atan(math.exp(y / EARTH_RADIUS_M)) - math.pi / 2.0)
    return (lon, lat)
