"""
Rendering Protocols

Boundaries between the alert layer and the things it does not own: the host
map widget and the drawing surface.

- MapView: viewport state, projection and navigation events from the host map
- DrawingSurface: RGBA canvas the layer composites tiles onto
- TileOverlay: what the host map holds a reference to
"""

from collections.abc import Callable
from typing import Protocol

from numpy.typing import NDArray

from alertlayer.grid.base import Extent, TileGridSpec

# Events a MapView emits
EXTENT_CHANGE = "extent-change"
PAN_START = "pan-start"
ZOOM_START = "zoom-start"


class MapView(Protocol):
    """
    Host map viewport

    Attributes:
        width: Viewport width in screen pixels
        height: Viewport height in screen pixels
        extent: Visible extent in map projection units
        resolution: Map units per screen pixel
        zoom: Current zoom level
        tile_grid: Tile grid of the map's tiling scheme
    """

    width: int
    height: int
    extent: Extent
    resolution: float
    zoom: int
    tile_grid: TileGridSpec

    def to_screen(self, lon: float, lat: float) -> tuple[float, float]:
        """
        Project a WGS84 coordinate to screen pixels

        Returns:
            (x, y) with the origin at the viewport's top-left corner
        """
        ...

    def subscribe(self, event: str, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Register a callback for a navigation event

        Args:
            event: One of EXTENT_CHANGE, PAN_START, ZOOM_START
            callback: Called with no arguments when the event fires

        Returns:
            Function that removes the subscription
        """
        ...


class DrawingSurface(Protocol):
    """RGBA drawing surface with canvas-style blit primitives."""

    width: int
    height: int
    visible: bool

    def clear(self) -> None:
        """Reset every pixel to transparent black"""
        ...

    def draw_image(self, image: NDArray, x: int, y: int) -> None:
        """Composite an (H, W, 4) image with its top-left corner at (x, y)"""
        ...

    def get_image_data(self, x: int, y: int, width: int, height: int) -> NDArray:
        """Copy of a (height, width, 4) region; off-surface pixels are transparent"""
        ...

    def put_image_data(self, data: NDArray, x: int, y: int) -> None:
        """Overwrite a region without blending; off-surface pixels are dropped"""
        ...


class TileOverlay(Protocol):
    """Layer interface the host map drives."""

    def attach(self, view: MapView) -> DrawingSurface:
        """Bind to a map view and return the surface to stack over the map"""
        ...

    def detach(self) -> None:
        """Release the map view and its event subscriptions"""
        ...

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...

    def update(self) -> None:
        """Request and draw the tiles for the current viewport"""
        ...
