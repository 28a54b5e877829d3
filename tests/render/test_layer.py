"""
Tests for CanvasLayer orchestration

Tile downloads go through httpx.MockTransport; each test drives the layer
inside its own asyncio.run() loop.
"""

import asyncio
from datetime import date

import httpx
import numpy as np
import pytest

from alertlayer.catalog.layer_config import LayerConfig
from alertlayer.core.exceptions import LayerStateError
from alertlayer.grid.tile_math import latitude_from_tile, longitude_from_tile
from alertlayer.io.tile_image import write_tile_image
from alertlayer.render.base import EXTENT_CHANGE, PAN_START, ZOOM_START
from alertlayer.render.fetch import COMPOSITED, DISCARDED, FAILED, TileLoader
from alertlayer.render.host import MercatorMapView
from alertlayer.render.layer import CanvasLayer
from alertlayer.render.surface import ArraySurface


@pytest.fixture
def tile_png(alert_tile):
    return write_tile_image(alert_tile)


@pytest.fixture
def make_layer(url_template, make_client, tile_png):
    """Build a layer whose tiles are served by a handler (default: the alert tile everywhere)."""

    def serve_tile(request):
        return httpx.Response(200, content=tile_png)

    def factory(handler=serve_tile, **config_kwargs):
        config = LayerConfig(layer_id="test_alerts", url_template=url_template, **config_kwargs)
        loader = TileLoader(url_template, client=make_client(handler))
        return CanvasLayer(config, loader=loader)

    return factory


def alpha(surface, x, y):
    return int(surface.pixels[y, x, 3])


class TestAttach:
    def test_attach_creates_surface(self, make_layer, single_tile_view):
        layer = make_layer()
        surface = layer.attach(single_tile_view)

        assert isinstance(surface, ArraySurface)
        assert (surface.width, surface.height) == (200, 200)
        assert layer.surface is surface
        assert layer.view is single_tile_view

    def test_attach_twice(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.attach(single_tile_view)
        with pytest.raises(LayerStateError):
            layer.attach(single_tile_view)

    def test_starts_hidden_from_config(self, make_layer, single_tile_view):
        layer = make_layer(visible=False)
        assert layer.attach(single_tile_view).visible is False

    def test_update_without_event_loop(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.attach(single_tile_view)
        with pytest.raises(LayerStateError):
            layer.update()

    def test_update_before_attach_is_noop(self, make_layer):
        layer = make_layer()
        layer.update()
        assert layer.last_batch == []

    def test_detach_unsubscribes(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.attach(single_tile_view)
        layer.detach()

        single_tile_view.emit(EXTENT_CHANGE)

        assert layer.surface is None
        assert layer.pending == 0
        layer.attach(single_tile_view)

    def test_default_config(self):
        layer = CanvasLayer()
        assert layer.config.layer_id == "glad_alerts"
        assert layer.loader.url_template.endswith("/{z}/{x}/{y}.png")
        assert layer.filter_state.min_date_value == 15000


class TestClose:
    def test_aclose_closes_own_loader(self):
        layer = CanvasLayer()

        async def main():
            client = layer.loader._get_client()
            await layer.aclose()
            return client

        assert asyncio.run(main()).is_closed

    def test_aclose_leaves_passed_loader_open(self, url_template, make_client):
        client = make_client(lambda request: httpx.Response(404))
        layer = CanvasLayer(
            LayerConfig(layer_id="test_alerts", url_template=url_template),
            loader=TileLoader(url_template, client=client),
        )

        asyncio.run(layer.aclose())

        assert not client.is_closed

    def test_async_context_manager(self):
        async def main():
            async with CanvasLayer() as layer:
                client = layer.loader._get_client()
            return client

        assert asyncio.run(main()).is_closed


class TestRedraw:
    def test_extent_change_draws_filtered_tile(self, make_layer, single_tile_view, alert_tile):
        layer = make_layer()

        async def main():
            surface = layer.attach(single_tile_view)
            single_tile_view.emit(EXTENT_CHANGE)
            await layer.wait_idle()
            return surface

        surface = asyncio.run(main())

        assert [job.state for job in layer.last_batch] == [COMPOSITED]
        assert str(layer.last_batch[0].request.coordinate) == "5/10/16"
        assert alpha(surface, 0, 0) == 150
        assert alpha(surface, 1, 0) == 0
        assert alpha(surface, 0, 1) == 255
        assert alpha(surface, 1, 1) == 0
        np.testing.assert_array_equal(surface.pixels[:2, :2, :3], alert_tile[..., :3])
        assert not surface.pixels[:, 2:].any()

    def test_navigation_start_clears(self, make_layer, single_tile_view):
        layer = make_layer()

        async def main():
            surface = layer.attach(single_tile_view)
            layer.update()
            await layer.wait_idle()
            drawn = surface.pixels.any()
            single_tile_view.emit(PAN_START)
            return drawn, surface

        drawn, surface = asyncio.run(main())

        assert drawn
        assert not surface.pixels.any()

    def test_zoom_start_clears(self, make_layer, single_tile_view):
        layer = make_layer()

        async def main():
            surface = layer.attach(single_tile_view)
            layer.update()
            await layer.wait_idle()
            single_tile_view.emit(ZOOM_START)
            return surface

        assert not asyncio.run(main()).pixels.any()

    def test_every_update_refetches(self, make_layer, single_tile_view, tile_png):
        requests = []

        def handler(request):
            requests.append(request.url.path)
            return httpx.Response(200, content=tile_png)

        layer = make_layer(handler)

        async def main():
            layer.attach(single_tile_view)
            layer.update()
            await layer.wait_idle()
            layer.update()
            await layer.wait_idle()

        asyncio.run(main())

        assert requests == ["/alerts/5/10/16.png"] * 2

    def test_multi_tile_viewport(self, make_layer, tile_png):
        def handler(request):
            if request.url.path == "/alerts/5/10/16.png":
                return httpx.Response(404)
            return httpx.Response(200, content=tile_png)

        view = MercatorMapView.centered(
            longitude_from_tile(11, 5), latitude_from_tile(17, 5), zoom=5, width=256, height=256
        )
        layer = make_layer(handler)

        async def main():
            surface = layer.attach(view)
            layer.update()
            await layer.wait_idle()
            return surface

        surface = asyncio.run(main())

        states = {str(job.request.coordinate): job.state for job in layer.last_batch}
        assert states == {
            "5/10/16": FAILED,
            "5/10/17": COMPOSITED,
            "5/11/16": COMPOSITED,
            "5/11/17": COMPOSITED,
        }
        assert alpha(surface, 128, 128) == 150
        assert alpha(surface, 128, 0) == 0


class TestVisibility:
    def test_hide_clears_and_ignores_extent_changes(self, make_layer, single_tile_view):
        layer = make_layer()

        async def main():
            surface = layer.attach(single_tile_view)
            layer.update()
            await layer.wait_idle()
            batch = layer.last_batch

            layer.hide()
            single_tile_view.emit(EXTENT_CHANGE)
            return surface, batch

        surface, batch = asyncio.run(main())

        assert surface.visible is False
        assert not surface.pixels.any()
        assert layer.last_batch is batch
        assert layer.pending == 0

    def test_show_redraws(self, make_layer, single_tile_view):
        layer = make_layer(visible=False)

        async def main():
            surface = layer.attach(single_tile_view)
            single_tile_view.emit(EXTENT_CHANGE)
            empty = not surface.pixels.any()

            layer.show()
            await layer.wait_idle()
            return empty, surface

        empty, surface = asyncio.run(main())

        assert empty
        assert surface.visible is True
        assert alpha(surface, 0, 0) == 150

    def test_hide_before_attach(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.hide()
        assert layer.visible is False
        assert layer.attach(single_tile_view).visible is False


class TestFilterSetters:
    def test_integer_date_range(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.set_date_range(15000, 15200)

        async def main():
            surface = layer.attach(single_tile_view)
            layer.force_redraw()
            await layer.wait_idle()
            return surface

        surface = asyncio.run(main())

        assert alpha(surface, 0, 0) == 150
        assert alpha(surface, 0, 1) == 0

    def test_calendar_date_range(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.set_date_range(date(2015, 1, 1), date(2015, 12, 31))

        assert layer.filter_state.min_date_value == 15000
        assert layer.filter_state.max_date_value == 15364

        async def main():
            surface = layer.attach(single_tile_view)
            layer.force_redraw()
            await layer.wait_idle()
            return surface

        surface = asyncio.run(main())

        assert alpha(surface, 0, 0) == 150
        assert alpha(surface, 0, 1) == 0

    def test_single_calendar_day_keeps_its_alerts(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.set_date_range(date(2016, 1, 1), date(2016, 1, 1))

        async def main():
            surface = layer.attach(single_tile_view)
            layer.force_redraw()
            await layer.wait_idle()
            return surface

        surface = asyncio.run(main())

        # Row 1, column 0 of alert_tile is encode_pixel(16000, 1, 55)
        assert alpha(surface, 0, 1) == 255
        assert alpha(surface, 0, 0) == 0

    def test_setters_do_not_redraw(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.attach(single_tile_view)

        layer.set_min_date_value(16000)
        layer.set_max_date_value(16100)

        assert layer.last_batch == []
        assert (layer.filter_state.min_date_value, layer.filter_state.max_date_value) == (16000, 16100)


class TestStaleTiles:
    def run_with_pan_during_fetch(self, layer, view, tile_png):
        """Dispatch one tile, clear the layer while it downloads, then let it finish."""

        async def main():
            release = asyncio.Event()

            async def handler(request):
                await release.wait()
                return httpx.Response(200, content=tile_png)

            layer.loader = TileLoader(
                layer.loader.url_template,
                client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            )
            surface = layer.attach(view)
            layer.update()
            await asyncio.sleep(0)
            view.emit(PAN_START)
            release.set()
            await layer.wait_idle()
            return surface

        return asyncio.run(main())

    def test_stale_tile_composites_by_default(self, make_layer, single_tile_view, tile_png):
        layer = make_layer()

        surface = self.run_with_pan_during_fetch(layer, single_tile_view, tile_png)

        assert layer.last_batch[0].state == COMPOSITED
        assert alpha(surface, 0, 0) == 150

    def test_stale_tile_discarded(self, make_layer, single_tile_view, tile_png):
        layer = make_layer(discard_stale_tiles=True)

        surface = self.run_with_pan_during_fetch(layer, single_tile_view, tile_png)

        assert layer.last_batch[0].state == DISCARDED
        assert not surface.pixels.any()

    def test_detached_tile_discarded(self, make_layer, single_tile_view, tile_png):
        layer = make_layer()

        async def main():
            release = asyncio.Event()

            async def handler(request):
                await release.wait()
                return httpx.Response(200, content=tile_png)

            layer.loader = TileLoader(
                layer.loader.url_template,
                client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            )
            layer.attach(single_tile_view)
            layer.update()
            await asyncio.sleep(0)
            layer.detach()
            release.set()
            await layer.wait_idle()

        asyncio.run(main())

        assert layer.last_batch[0].state == DISCARDED

    def test_clear_bumps_generation(self, make_layer, single_tile_view):
        layer = make_layer()
        layer.attach(single_tile_view)
        before = layer.generation
        layer.clear()
        assert layer.generation == before + 1
