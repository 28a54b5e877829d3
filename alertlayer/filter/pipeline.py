"""
Date/confidence filter for alert pixel buffers.

Every 4-channel group is decoded and either made visible (alpha set to the
decoded intensity) or hidden (alpha 0). The decision depends on nothing but
the pixel itself and the FilterState, so whole tiles are processed in one
vectorised NumPy pass.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from alertlayer.codec.pixel import DecodedPixel, DecodedPixels, decode_pixels
from alertlayer.core.exceptions import PixelDecodeError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MIN_DATE_VALUE = 15000
DEFAULT_MAX_DATE_VALUE = 16365


@dataclass
class FilterState:
    """
    Mutable filter configuration owned by a layer

    Attributes:
        min_date_value: Earliest visible date (YYDDD, inclusive)
        max_date_value: Latest visible date (YYDDD, inclusive)
        confidence_levels: If set, only these confidence classes stay visible
        highlight_color: If set, visible pixels are recoloured to this RGB.
                         Off by default; recolouring is not reversible by the codec.

    An inverted range (min > max) is allowed and hides every pixel.
    """

    min_date_value: int = DEFAULT_MIN_DATE_VALUE
    max_date_value: int = DEFAULT_MAX_DATE_VALUE
    confidence_levels: frozenset[int] | None = None
    highlight_color: tuple[int, int, int] | None = None

    def __post_init__(self):
        if self.confidence_levels is not None:
            self.confidence_levels = frozenset(self.confidence_levels)
        if self.highlight_color is not None:
            color = tuple(self.highlight_color)
            if len(color) != 3 or not all(0 <= c <= 255 for c in color):
                raise ValidationError(f"highlight_color must be an RGB triple, got {color}")
            self.highlight_color = color

    def is_visible(self, pixel: DecodedPixel) -> bool:
        """Whether a single decoded pixel passes the filter."""
        if not self.min_date_value <= pixel.date <= self.max_date_value:
            return False
        if self.confidence_levels is not None:
            return pixel.confidence in self.confidence_levels
        return True

    def visibility_mask(self, decoded: DecodedPixels) -> NDArray[np.bool_]:
        """Vectorised :meth:`is_visible` over a decoded batch."""
        mask = (decoded.date >= self.min_date_value) & (decoded.date <= self.max_date_value)
        if self.confidence_levels is not None:
            mask &= np.isin(decoded.confidence, list(self.confidence_levels))
        return mask


def _as_buffer(pixels: ArrayLike) -> NDArray:
    if isinstance(pixels, np.ndarray):
        arr = pixels
    elif isinstance(pixels, bytearray):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    elif isinstance(pixels, bytes):
        # Read-only; filtered into a new array
        arr = np.frombuffer(pixels, dtype=np.uint8).copy()
    else:
        arr = np.array(pixels)
        if arr.size == 0:
            arr = arr.astype(np.uint8)

    if arr.ndim <= 1:
        if arr.size % 4:
            raise PixelDecodeError(f"Buffer length {arr.size} is not a multiple of 4")
    elif arr.shape[-1] != 4:
        raise PixelDecodeError(f"Pixel array must have 4 channels on the last axis, got {arr.shape}")
    return arr


def filter_buffer(pixels: ArrayLike, state: FilterState) -> NDArray:
    """
    Rewrite the alpha channel of a pixel buffer from the decoded alert values

    In-range pixels get ``alpha = intensity``; everything else gets
    ``alpha = 0``. RGB is untouched unless ``state.highlight_color`` is set.

    Args:
        pixels: Flat RGBA sequence (length multiple of 4) or an array whose
                last axis is 4. NumPy arrays and bytearrays are modified in place;
                bytes and other sequences are filtered into a new array.
        state: Date/confidence filter

    Returns:
        The filtered buffer, same shape and length as the input

    Raises:
        PixelDecodeError: If the buffer violates the pixel encoding

    Examples:
        >>> buf = np.array([[0, 1, 131, 255], [3, 0, 131, 255]], dtype=np.uint8)
        >>> filter_buffer(buf, FilterState(15000, 15364))[:, 3]
        array([255,   0], dtype=uint8)
    """
    arr = _as_buffer(pixels)
    groups = arr.reshape(-1, 4)

    decoded = decode_pixels(groups)
    visible = state.visibility_mask(decoded)

    groups[:, 3] = np.where(visible, decoded.intensity, 0)
    if state.highlight_color is not None:
        groups[visible, :3] = state.highlight_color

    # reshape() copies non-contiguous input
    if not np.shares_memory(groups, arr):
        arr[...] = groups.reshape(arr.shape)

    logger.debug("Filtered %d pixels, %d visible", len(decoded), int(visible.sum()))
    return arr
