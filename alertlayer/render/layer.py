"""
Viewport Orchestrator

CanvasLayer is the TileOverlay the host map holds. It owns the drawing
surface, listens to the map's navigation events, works out which tiles the
viewport needs and runs one fetch lifecycle per tile on the asyncio loop.

Redraw policy:
- ``pan-start`` / ``zoom-start``: clear the surface immediately
- ``extent-change``: request every tile covering the new extent
- hidden layers ignore viewport changes; showing again does clear + update

There is no tile cache; every update fetches its tiles again. Tiles still in
flight when the view moves are not cancelled. By default they composite at
their old screen position; with ``discard_stale_tiles`` they are dropped once
a newer clear or update has happened.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import date

from numpy.typing import NDArray

from alertlayer.catalog.layer_config import DEFAULT_LAYER_ID, LayerConfig, get_registry
from alertlayer.codec.dates import date_value
from alertlayer.core.exceptions import LayerStateError
from alertlayer.filter.pipeline import filter_buffer
from alertlayer.grid.tile_math import latitude_from_tile, longitude_from_tile, tiles_for_extent
from alertlayer.render.base import EXTENT_CHANGE, PAN_START, ZOOM_START, DrawingSurface, MapView
from alertlayer.render.fetch import TileJob, TileLoader, TileRequest
from alertlayer.render.surface import ArraySurface

logger = logging.getLogger(__name__)


def _as_date_value(value: int | date) -> int:
    if isinstance(value, date):
        return date_value(value)
    return int(value)


class CanvasLayer:
    """
    Alert tile layer drawn onto its own surface above the host map

    Attributes:
        config: LayerConfig the layer was built from
        filter_state: Live date/confidence filter read by every composite
        loader: TileLoader used for downloads
        visible: Whether viewport changes are rendered
        discard_stale_tiles: Drop tile results from superseded generations
        last_batch: TileJobs dispatched by the most recent update

    Examples:
        >>> async def main():
        ...     view = MercatorMapView.centered(-60.0, -10.0, zoom=6, width=800, height=600)
        ...     async with TileLoader(config.url_template) as loader:
        ...         layer = CanvasLayer(config, loader=loader)
        ...         surface = layer.attach(view)
        ...         layer.set_date_range(date(2016, 1, 1), date(2016, 6, 30))
        ...         layer.force_redraw()
        ...         await layer.wait_idle()
        ...     return surface.to_png()
    """

    def __init__(
        self,
        config: LayerConfig | None = None,
        loader: TileLoader | None = None,
        surface_factory: Callable[[int, int], DrawingSurface] = ArraySurface,
    ):
        """
        Args:
            config: Layer settings (default: the built-in GLAD alert layer)
            loader: Tile loader; one is created from config.url_template if omitted
            surface_factory: Builds the surface in attach() from (width, height)
        """
        if config is None:
            config = get_registry().get(DEFAULT_LAYER_ID)
        self.config = config
        self.filter_state = config.filter_state()
        self.loader = loader or TileLoader(config.url_template)
        self._owns_loader = loader is None
        self.visible = config.visible
        self.discard_stale_tiles = config.discard_stale_tiles
        self.last_batch: list[TileJob] = []

        self._surface_factory = surface_factory
        self._view: MapView | None = None
        self._surface: DrawingSurface | None = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Host-facing lifecycle
    # ------------------------------------------------------------------

    @property
    def surface(self) -> DrawingSurface | None:
        return self._surface

    @property
    def view(self) -> MapView | None:
        return self._view

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> int:
        """Number of tile lifecycles still in flight"""
        return len(self._tasks)

    def attach(self, view: MapView) -> DrawingSurface:
        """
        Bind the layer to a map view

        Creates the surface at the view's size and subscribes to its
        navigation events. Nothing is drawn until the next extent change or
        an explicit update.

        Returns:
            The surface to stack over the map

        Raises:
            LayerStateError: If the layer is already attached
        """
        if self._view is not None:
            raise LayerStateError(f"Layer '{self.config.layer_id}' is already attached")

        self._view = view
        self._surface = self._surface_factory(view.width, view.height)
        self._surface.visible = self.visible
        self._unsubscribers = [
            view.subscribe(EXTENT_CHANGE, self.update),
            view.subscribe(PAN_START, self._on_navigation_start),
            view.subscribe(ZOOM_START, self._on_navigation_start),
        ]
        logger.info("Attached layer '%s' (%dx%d)", self.config.layer_id, view.width, view.height)
        return self._surface

    def detach(self) -> None:
        """Unsubscribe from the view and release the surface; late tiles are dropped."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._view = None
        self._surface = None
        self._generation += 1
        logger.info("Detached layer '%s'", self.config.layer_id)

    def show(self) -> None:
        self.visible = True
        if self._surface is None:
            return
        self._surface.visible = True
        self.clear()
        self.update()

    def hide(self) -> None:
        self.visible = False
        if self._surface is None:
            return
        self._surface.visible = False
        # The extent will likely change while hidden; do not keep old tiles around
        self.clear()

    def force_redraw(self) -> None:
        """Clear and re-request every tile for the current viewport."""
        if self._surface is None or not self.visible:
            return
        self.clear()
        self.update()

    # ------------------------------------------------------------------
    # Filter configuration
    # ------------------------------------------------------------------

    def set_min_date_value(self, value: int | date) -> None:
        self.filter_state.min_date_value = _as_date_value(value)

    def set_max_date_value(self, value: int | date) -> None:
        self.filter_state.max_date_value = _as_date_value(value)

    def set_date_range(self, start: int | date, end: int | date) -> None:
        """
        Set both date bounds (inclusive)

        Takes effect on the next redraw; call force_redraw() to apply it to
        tiles already on the surface.

        Args:
            start: YYDDD value or calendar date
            end: YYDDD value or calendar date
        """
        self.set_min_date_value(start)
        self.set_max_date_value(end)

    # ------------------------------------------------------------------
    # Redraw
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Wipe the whole surface and start a new generation."""
        self._generation += 1
        if self._surface is not None:
            self._surface.clear()

    def _on_navigation_start(self) -> None:
        if not self.visible:
            return
        self.clear()

    def update(self) -> None:
        """
        Request the tiles covering the current viewport

        Must be called from a running asyncio event loop; each tile runs as
        its own task.

        Raises:
            LayerStateError: If no event loop is running
        """
        if not self.visible:
            return
        view = self._view
        if view is None or self._surface is None:
            logger.debug("Layer '%s' is not attached; skipping update", self.config.layer_id)
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise LayerStateError("CanvasLayer.update() needs a running asyncio event loop") from None

        tile_range = tiles_for_extent(view.tile_grid, view.extent, view.resolution, view.zoom)
        self._generation += 1

        batch = []
        for coordinate in tile_range.tiles():
            request = TileRequest(
                coordinate=coordinate,
                origin_column=tile_range.column_min,
                origin_row=tile_range.row_min,
                generation=self._generation,
            )
            job = TileJob(request)
            task = loop.create_task(self.loader.run(job, self._composite))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            batch.append(job)

        self.last_batch = batch
        logger.info(
            "Requested %d tiles at zoom %d (columns %d-%d, rows %d-%d)",
            len(batch),
            tile_range.zoom,
            tile_range.column_min,
            tile_range.column_max,
            tile_range.row_min,
            tile_range.row_max,
        )

    def _composite(self, request: TileRequest, image: NDArray) -> bool:
        """Draw, filter and write back one decoded tile. Returns False if dropped."""
        view, surface = self._view, self._surface
        if view is None or surface is None:
            return False
        if self.discard_stale_tiles and request.generation != self._generation:
            logger.debug(
                "Discarding stale tile %s (generation %d, now %d)",
                request.coordinate,
                request.generation,
                self._generation,
            )
            return False

        coordinate = request.coordinate
        lon = longitude_from_tile(coordinate.column, coordinate.zoom)
        lat = latitude_from_tile(coordinate.row, coordinate.zoom)
        screen_x, screen_y = view.to_screen(lon, lat)
        x, y = int(round(screen_x)), int(round(screen_y))
        height, width = image.shape[:2]

        surface.draw_image(image, x, y)
        region = surface.get_image_data(x, y, width, height)
        filter_buffer(region, self.filter_state)
        surface.put_image_data(region, x, y)
        return True

    async def wait_idle(self) -> None:
        """Wait until every dispatched tile has reached a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def aclose(self) -> None:
        """Close the tile loader if this layer created it; a passed-in loader is left open."""
        if self._owns_loader:
            await self.loader.aclose()

    async def __aenter__(self) -> "CanvasLayer":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        state = "attached" if self._view is not None else "detached"
        return f"<CanvasLayer '{self.config.layer_id}' ({state}, visible={self.visible})>"
