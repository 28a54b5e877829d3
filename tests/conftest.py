"""
AlertLayer Test Configuration

Shared pytest fixtures for all tests.
"""

import httpx
import numpy as np
import pytest

from alertlayer.codec.pixel import encode_pixel
from alertlayer.grid.base import Extent
from alertlayer.grid.tile_math import WEB_MERCATOR_GRID, resolution_for_zoom
from alertlayer.render.host import MercatorMapView

TILE_URL_TEMPLATE = "https://tiles.test/alerts/{z}/{x}/{y}.png"


@pytest.fixture
def url_template():
    return TILE_URL_TEMPLATE


@pytest.fixture
def alert_tile():
    """
    2x2 alert tile

    (0, 0): 15100, confidence 0, intensity 150  (inside 2015-2016)
    (0, 1): 17000, confidence 1, intensity 250  (after 2016)
    (1, 0): 16000, confidence 1, intensity 255  (inside 2015-2016)
    (1, 1): transparent background
    """
    return np.array(
        [
            [encode_pixel(15100, 0, 3), encode_pixel(17000, 1, 5)],
            [encode_pixel(16000, 1, 55), (0, 0, 0, 0)],
        ],
        dtype=np.uint8,
    )


def single_tile_extent(column: int, row: int, zoom: int, size_px: int = 200) -> Extent:
    """Extent of size_px pixels lying inside one tile, a quarter pixel in from its NW corner."""
    res = resolution_for_zoom(zoom)
    tile_span = WEB_MERCATOR_GRID.cols * res
    xmin = WEB_MERCATOR_GRID.origin_x + column * tile_span + 0.25 * res
    ymax = WEB_MERCATOR_GRID.origin_y - row * tile_span - 0.25 * res
    return Extent(xmin=xmin, ymin=ymax - size_px * res, xmax=xmin + size_px * res, ymax=ymax)


@pytest.fixture
def single_tile_view():
    """200x200 view inside tile 5/10/16; the tile's NW corner lands on screen (0, 0)."""
    return MercatorMapView(single_tile_extent(10, 16, 5), zoom=5, width=200, height=200)


@pytest.fixture
def make_client():
    """Build an AsyncClient whose requests are answered by a handler function."""

    def factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
