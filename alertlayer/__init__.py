"""
AlertLayer - Client-side rendering of date-encoded alert raster tiles

Fetches pre-rendered RGBA alert tiles for a map viewport, decodes the
observation date, confidence and intensity packed into each pixel, and
composites only the alerts inside the selected date range.

Quick Start:
    >>> import asyncio
    >>> from datetime import date
    >>> import alertlayer as al
    >>>
    >>> async def render():
    ...     view = al.MercatorMapView.centered(-60.0, -10.0, zoom=6, width=800, height=600)
    ...     async with al.TileLoader(al.BUILTIN_LAYERS["glad_alerts"].url_template) as loader:
    ...         layer = al.CanvasLayer(loader=loader)
    ...         surface = layer.attach(view)
    ...         layer.set_date_range(date(2016, 1, 1), date(2016, 6, 30))
    ...         layer.update()
    ...         await layer.wait_idle()
    ...     return surface.to_png()
    >>>
    >>> png = asyncio.run(render())
"""

from alertlayer.catalog import (
    BUILTIN_LAYERS,
    LayerConfig,
    get_registry,
    register_layer,
)
from alertlayer.codec import (
    DecodedPixel,
    date_from_value,
    date_value,
    decode_pixel,
    decode_pixels,
    encode_pixel,
)
from alertlayer.core import (
    AlertLayerError,
    LayerStateError,
    PixelDecodeError,
    PixelEncodeError,
    TileDecodeError,
    TileFetchError,
    ValidationError,
)
from alertlayer.filter import FilterState, filter_buffer
from alertlayer.grid import (
    WEB_MERCATOR_GRID,
    Extent,
    TileCoordinate,
    TileGridSpec,
    tile_rectangle,
    tiles_for_extent,
)
from alertlayer.render import (
    ArraySurface,
    CanvasLayer,
    MercatorMapView,
    TileJob,
    TileLoader,
    TileOverlay,
    TileRequest,
)

__version__ = "0.1.0"

__all__ = [
    "BUILTIN_LAYERS",
    "WEB_MERCATOR_GRID",
    "AlertLayerError",
    "ArraySurface",
    "CanvasLayer",
    "DecodedPixel",
    "Extent",
    "FilterState",
    "LayerConfig",
    "LayerStateError",
    "MercatorMapView",
    "PixelDecodeError",
    "PixelEncodeError",
    "TileCoordinate",
    "TileDecodeError",
    "TileFetchError",
    "TileGridSpec",
    "TileJob",
    "TileLoader",
    "TileOverlay",
    "TileRequest",
    "ValidationError",
    "__version__",
    "date_from_value",
    "date_value",
    "decode_pixel",
    "decode_pixels",
    "encode_pixel",
    "filter_buffer",
    "get_registry",
    "register_layer",
    "tile_rectangle",
    "tiles_for_extent",
]
