"""
PNG tile decode/encode using Rasterio

Tiles are ungeoreferenced RGBA rasters; placement comes from the tile address,
so rasterio's georeferencing warnings are silenced here.
"""

import asyncio
import warnings

import numpy as np
from numpy.typing import ArrayLike, NDArray
from rasterio.errors import NotGeoreferencedWarning, RasterioError
from rasterio.io import MemoryFile

from alertlayer.core.exceptions import TileDecodeError, ValidationError


def _to_rgba(bands: NDArray) -> NDArray[np.uint8]:
    """Expand (count, H, W) bands into an (H, W, 4) RGBA array."""
    count, height, width = bands.shape
    opaque = np.full((height, width), 255, dtype=np.uint8)

    if count >= 4:
        channels = [bands[0], bands[1], bands[2], bands[3]]
    elif count == 3:
        channels = [bands[0], bands[1], bands[2], opaque]
    elif count == 2:
        channels = [bands[0], bands[0], bands[0], bands[1]]
    else:
        channels = [bands[0], bands[0], bands[0], opaque]

    return np.ascontiguousarray(np.stack(channels, axis=-1))


def read_tile_image(data: bytes) -> NDArray[np.uint8]:
    """
    Decode tile image bytes into an RGBA pixel array

    Args:
        data: Encoded image (PNG or any other 8-bit format GDAL reads)

    Returns:
        Array of shape (height, width, 4), dtype uint8

    Raises:
        TileDecodeError: If the bytes are empty, unreadable, or not 8-bit

    Examples:
        >>> pixels = read_tile_image(response.content)
        >>> pixels.shape
        (256, 256, 4)
    """
    if not data:
        raise TileDecodeError("Tile image is empty")

    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with MemoryFile(data) as memfile:
                with memfile.open() as dataset:
                    bands = dataset.read()
    except (RasterioError, ValueError) as e:
        raise TileDecodeError(f"Tile image could not be decoded: {e}") from e

    if bands.dtype != np.uint8:
        raise TileDecodeError(f"Tile image must be 8-bit, got {bands.dtype}")

    return _to_rgba(bands)


async def decode_tile_image(data: bytes) -> NDArray[np.uint8]:
    """Decode tile bytes in a worker thread so the event loop keeps running."""
    return await asyncio.to_thread(read_tile_image, data)


def write_tile_image(pixels: ArrayLike) -> bytes:
    """
    Encode an RGBA pixel array as PNG bytes

    Used to author synthetic alert tiles (see
    :func:`alertlayer.codec.encode_pixel`).

    Args:
        pixels: Array of shape (height, width, 4)

    Returns:
        PNG-encoded bytes

    Raises:
        ValidationError: If the array is not (H, W, 4)
    """
    arr = np.asarray(pixels)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise ValidationError(f"Tile pixels must have shape (H, W, 4), got {arr.shape}")

    height, width, _ = arr.shape
    bands = np.moveaxis(arr.astype(np.uint8), -1, 0)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NotGeoreferencedWarning)
        with MemoryFile() as memfile:
            with memfile.open(
                driver="PNG", width=width, height=height, count=4, dtype="uint8"
            ) as dst:
                dst.write(bands)
            memfile.seek(0)
            return memfile.read()
