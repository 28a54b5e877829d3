"""
Headless Web Mercator map view

A minimal MapView for rendering without a GUI map widget, and for driving a
layer from scripts or tests. Navigation methods fire the same events a host
map would: ``pan-start``/``zoom-start`` first, then ``extent-change``.
"""

import logging
from collections import defaultdict
from collections.abc import Callable

from alertlayer.core.exceptions import ValidationError
from alertlayer.grid.base import Extent, TileGridSpec
from alertlayer.grid.tile_math import (
    WEB_MERCATOR_GRID,
    mercator_from_lonlat,
    resolution_for_zoom,
)
from alertlayer.render.base import EXTENT_CHANGE, PAN_START, ZOOM_START

logger = logging.getLogger(__name__)


class MercatorMapView:
    """
    Map viewport over the standard Web Mercator tile grid

    Attributes:
        width: Viewport width in pixels
        height: Viewport height in pixels
        extent: Visible extent in EPSG:3857 metres
        zoom: Zoom level used to address tiles
        tile_grid: Always WEB_MERCATOR_GRID

    Examples:
        >>> view = MercatorMapView.centered(-60.0, -10.0, zoom=6, width=800, height=600)
        >>> layer.attach(view)
        >>> view.set_center(-61.0, -10.5)   # fires pan-start, then extent-change
    """

    tile_grid: TileGridSpec = WEB_MERCATOR_GRID

    def __init__(self, extent: Extent, zoom: int, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValidationError(f"Viewport size must be positive, got {width}x{height}")
        if extent.width <= 0 or extent.height <= 0:
            raise ValidationError(f"Extent must have positive area: {extent}")
        self.extent = extent
        self.zoom = zoom
        self.width = width
        self.height = height
        self._subscribers: dict[str, list[Callable[[], None]]] = defaultdict(list)

    @classmethod
    def centered(
        cls, lon: float, lat: float, zoom: int, width: int = 256, height: int = 256
    ) -> "MercatorMapView":
        """Viewport of width x height pixels centred on (lon, lat) at the zoom's native resolution."""
        return cls(_centered_extent(lon, lat, zoom, width, height), zoom, width, height)

    @property
    def resolution(self) -> float:
        return self.extent.width / self.width

    def to_screen(self, lon: float, lat: float) -> tuple[float, float]:
        x, y = mercator_from_lonlat(lon, lat)
        return (
            (x - self.extent.xmin) / self.resolution,
            (self.extent.ymax - y) / (self.extent.height / self.height),
        )

    def subscribe(self, event: str, callback: Callable[[], None]) -> Callable[[], None]:
        self._subscribers[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[event]:
                self._subscribers[event].remove(callback)

        return unsubscribe

    def emit(self, event: str) -> None:
        """Call every subscriber of an event in registration order."""
        for callback in list(self._subscribers[event]):
            callback()

    def set_extent(self, extent: Extent, zoom: int | None = None) -> None:
        """Move the viewport, firing pan-start or zoom-start then extent-change."""
        if extent.width <= 0 or extent.height <= 0:
            raise ValidationError(f"Extent must have positive area: {extent}")
        zooming = zoom is not None and zoom != self.zoom
        self.emit(ZOOM_START if zooming else PAN_START)

        self.extent = extent
        if zoom is not None:
            self.zoom = zoom
        logger.debug("View moved to %s at zoom %d", extent, self.zoom)
        self.emit(EXTENT_CHANGE)

    def set_center(self, lon: float, lat: float, zoom: int | None = None) -> None:
        target_zoom = self.zoom if zoom is None else zoom
        extent = _centered_extent(lon, lat, target_zoom, self.width, self.height)
        self.set_extent(extent, zoom)

    def __repr__(self) -> str:
        return f"<MercatorMapView {self.width}x{self.height} zoom={self.zoom}>"


def _centered_extent(lon: float, lat: float, zoom: int, width: int, height: int) -> Extent:
    cx, cy = mercator_from_lonlat(lon, lat)
    half_w = width * resolution_for_zoom(zoom) / 2.0
    half_h = height * resolution_for_zoom(zoom) / 2.0
    return Extent(xmin=cx - half_w, ymin=cy - half_h, xmax=cx + half_w, ymax=cy + half_h)
