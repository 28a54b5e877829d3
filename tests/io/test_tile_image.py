"""
Tests for PNG tile decode/encode
"""

import asyncio
import threading

import numpy as np
import pytest
from rasterio.io import MemoryFile

from alertlayer.core.exceptions import TileDecodeError, ValidationError
from alertlayer.io.tile_image import decode_tile_image, read_tile_image, write_tile_image


def rgb_png(bands: np.ndarray) -> bytes:
    """Encode (count, H, W) uint8 bands as a PNG without going through write_tile_image."""
    count, height, width = bands.shape
    with MemoryFile() as memfile:
        with memfile.open(driver="PNG", width=width, height=height, count=count, dtype="uint8") as dst:
            dst.write(bands)
        memfile.seek(0)
        return memfile.read()


class TestReadTileImage:
    def test_rgba_png(self, alert_tile):
        pixels = read_tile_image(write_tile_image(alert_tile))

        assert pixels.shape == (2, 2, 4)
        assert pixels.dtype == np.uint8
        np.testing.assert_array_equal(pixels, alert_tile)

    def test_rgb_png_gets_opaque_alpha(self):
        bands = np.arange(3 * 2 * 3, dtype=np.uint8).reshape(3, 2, 3)

        pixels = read_tile_image(rgb_png(bands))

        assert pixels.shape == (2, 3, 4)
        np.testing.assert_array_equal(pixels[..., 0], bands[0])
        np.testing.assert_array_equal(pixels[..., 2], bands[2])
        assert (pixels[..., 3] == 255).all()

    def test_greyscale_png(self):
        bands = np.full((1, 2, 2), 7, dtype=np.uint8)
        pixels = read_tile_image(rgb_png(bands))
        assert pixels[0, 0].tolist() == [7, 7, 7, 255]

    def test_empty_bytes(self):
        with pytest.raises(TileDecodeError):
            read_tile_image(b"")

    def test_garbage_bytes(self):
        with pytest.raises(TileDecodeError):
            read_tile_image(b"<html>Not Found</html>")

    def test_decode_coroutine(self, alert_tile):
        pixels = asyncio.run(decode_tile_image(write_tile_image(alert_tile)))
        np.testing.assert_array_equal(pixels, alert_tile)

    def test_decode_runs_off_the_event_loop(self, monkeypatch):
        threads = []

        def fake_read(data):
            threads.append(threading.get_ident())
            return np.zeros((1, 1, 4), dtype=np.uint8)

        monkeypatch.setattr("alertlayer.io.tile_image.read_tile_image", fake_read)

        async def main():
            ticks = []

            async def ticker():
                ticks.append(threading.get_ident())

            tick = asyncio.create_task(ticker())
            await decode_tile_image(b"png")
            await tick
            return ticks[0]

        loop_thread = asyncio.run(main())

        assert len(threads) == 1
        assert threads[0] != loop_thread

    def test_decode_coroutine_raises_decode_error(self):
        with pytest.raises(TileDecodeError):
            asyncio.run(decode_tile_image(b"not a png"))


class TestWriteTileImage:
    def test_png_signature(self, alert_tile):
        assert write_tile_image(alert_tile)[:8] == b"\x89PNG\r\n\x1a\n"

    @pytest.mark.parametrize("shape", [(2, 2), (2, 2, 3), (4, 4, 4, 1)])
    def test_invalid_shape(self, shape):
        with pytest.raises(ValidationError):
            write_tile_image(np.zeros(shape, dtype=np.uint8))
