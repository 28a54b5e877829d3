"""
Alert Pixel Codec

Decodes the date, confidence class and intensity packed into the RGB channels
of an alert tile pixel, and encodes them back the way the tile origin does.

Encoding contract (alpha is not used):

- ``r * 255 + g`` is the number of days since the start of the 2015 epoch year,
  counted in 365-day years
- the blue channel, written as a zero-padded 3-digit decimal, holds the
  confidence class code (1 or 2) in its leading digit and the raw intensity
  (0-55) in its last two digits

Confidence is the leading blue digit minus one, not the whole blue value
minus one; only the digit keeps classes within 0/1.

Decoded dates use the ``YYDDD`` form (``year_offset * 1000 + julian_day``),
e.g. 15000 is the first day of 2015 and 16364 the last encodable day of 2016.
"""

import operator
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from alertlayer.core.exceptions import PixelDecodeError, PixelEncodeError

# Additive year offset of the encoding epoch (offset 15 == 2015)
EPOCH_YEAR_OFFSET = 15

DAYS_PER_YEAR = 365

# Red channel multiplier; note this is 255, not 256
CHANNEL_BASE = 255

INTENSITY_SCALE = 50
MAX_INTENSITY = 255
MAX_RAW_INTENSITY = 55

# Confidence code stored in the blue channel's leading digit is class + 1
NO_CONFIDENCE = -1
CONFIDENCE_CLASSES = (0, 1)


@dataclass(frozen=True)
class DecodedPixel:
    """
    Semantic values of one alert pixel

    Attributes:
        date: Observation date as YYDDD (e.g. 15001)
        confidence: 0 (provisional), 1 (confirmed) or -1 (no class, e.g.
                    transparent background or resampled edge pixels)
        intensity: Detection intensity scaled to an alpha value (0-255)
    """

    date: int
    confidence: int
    intensity: int


@dataclass(frozen=True)
class DecodedPixels:
    """Vectorised decode result; every array has the pixel grid's shape."""

    date: NDArray[np.int32]
    confidence: NDArray[np.int32]
    intensity: NDArray[np.int32]

    def __len__(self) -> int:
        return int(self.date.size)

    def __getitem__(self, index) -> DecodedPixel:
        return DecodedPixel(
            date=int(self.date.flat[index]),
            confidence=int(self.confidence.flat[index]),
            intensity=int(self.intensity.flat[index]),
        )


def _channel(value, name: str) -> int:
    try:
        channel = operator.index(value)
    except TypeError:
        raise PixelDecodeError(f"Channel {name} is not an integer: {value!r}") from None
    if not 0 <= channel <= 255:
        raise PixelDecodeError(f"Channel {name} out of range 0-255: {channel}")
    return channel


def decode_pixel(pixel: Sequence[int]) -> DecodedPixel:
    """
    Decode one RGBA pixel

    Args:
        pixel: Four channel values [r, g, b, a] (alpha is ignored)

    Returns:
        DecodedPixel with date, confidence and intensity

    Raises:
        PixelDecodeError: If the pixel does not have four 8-bit channels

    Examples:
        >>> decode_pixel([1, 110, 205, 255])
        DecodedPixel(date=16000, confidence=1, intensity=250)
    """
    if len(pixel) != 4:
        raise PixelDecodeError(f"Expected 4 channels, got {len(pixel)}")

    r = _channel(pixel[0], "r")
    g = _channel(pixel[1], "g")
    b = _channel(pixel[2], "b")

    total_days = r * CHANNEL_BASE + g
    year = (total_days // DAYS_PER_YEAR + EPOCH_YEAR_OFFSET) * 1000
    julian_day = total_days % DAYS_PER_YEAR

    # Digits of the zero-padded 3-digit blue value
    confidence = b // 100 - 1
    raw_intensity = b % 100

    return DecodedPixel(
        date=year + julian_day,
        confidence=confidence,
        intensity=min(raw_intensity * INTENSITY_SCALE, MAX_INTENSITY),
    )


def _as_channels(pixels: ArrayLike) -> NDArray:
    arr = np.asarray(pixels)

    if arr.ndim == 0 or arr.shape[-1] != 4:
        raise PixelDecodeError(f"Pixel array must have 4 channels on the last axis, got {arr.shape}")

    if arr.dtype == np.uint8:
        return arr

    if not np.issubdtype(arr.dtype, np.integer):
        raise PixelDecodeError(f"Pixel array must hold integers, got dtype {arr.dtype}")

    if arr.size and (arr.min() < 0 or arr.max() > 255):
        raise PixelDecodeError(
            f"Pixel channels out of range 0-255 (min={arr.min()}, max={arr.max()})"
        )
    return arr


def decode_pixels(pixels: ArrayLike) -> DecodedPixels:
    """
    Decode a whole pixel array at once

    Gives the same per-pixel result as :func:`decode_pixel`.

    Args:
        pixels: Array whose last axis holds [r, g, b, a]; any leading shape
                (e.g. ``(N, 4)`` or ``(H, W, 4)``)

    Returns:
        DecodedPixels with arrays shaped like ``pixels.shape[:-1]``

    Raises:
        PixelDecodeError: If the array is not 4-channel integer data in 0-255

    Examples:
        >>> decoded = decode_pixels(np.array([[0, 1, 131, 255]], dtype=np.uint8))
        >>> decoded.date
        array([15001], dtype=int32)
    """
    arr = _as_channels(pixels)

    r = arr[..., 0].astype(np.int32)
    g = arr[..., 1].astype(np.int32)
    b = arr[..., 2].astype(np.int32)

    total_days = r * CHANNEL_BASE + g
    date = (total_days // DAYS_PER_YEAR + EPOCH_YEAR_OFFSET) * 1000 + total_days % DAYS_PER_YEAR

    confidence = b // 100 - 1
    intensity = np.minimum((b % 100) * INTENSITY_SCALE, MAX_INTENSITY)

    return DecodedPixels(
        date=date.astype(np.int32),
        confidence=confidence.astype(np.int32),
        intensity=intensity.astype(np.int32),
    )


def encode_pixel(
    date_value: int, confidence: int, raw_intensity: int, alpha: int = 255
) -> tuple[int, int, int, int]:
    """
    Encode alert values into RGBA channels as the tile origin does

    Args:
        date_value: Date as YYDDD, 15000 or later, julian day below 365
        confidence: Confidence class, 0 or 1
        raw_intensity: Undecoded intensity, 0-55
        alpha: Alpha channel to emit

    Returns:
        (r, g, b, a) tuple

    Raises:
        PixelEncodeError: If any value is outside the encoding's range

    Examples:
        >>> encode_pixel(16000, 1, 5)
        (1, 110, 205, 255)
    """
    year_offset, julian_day = divmod(date_value, 1000)
    if year_offset < EPOCH_YEAR_OFFSET:
        raise PixelEncodeError(f"Date {date_value} is before the encoding epoch")
    if julian_day >= DAYS_PER_YEAR:
        raise PixelEncodeError(f"Julian day {julian_day} of {date_value} exceeds {DAYS_PER_YEAR - 1}")
    if confidence not in CONFIDENCE_CLASSES:
        raise PixelEncodeError(f"Confidence must be 0 or 1, got {confidence}")
    if not 0 <= raw_intensity <= MAX_RAW_INTENSITY:
        raise PixelEncodeError(f"Raw intensity must be 0-{MAX_RAW_INTENSITY}, got {raw_intensity}")
    if not 0 <= alpha <= 255:
        raise PixelEncodeError(f"Alpha must be 0-255, got {alpha}")

    total_days = (year_offset - EPOCH_YEAR_OFFSET) * DAYS_PER_YEAR + julian_day
    r, g = divmod(total_days, CHANNEL_BASE)
    if r > 255:
        raise PixelEncodeError(f"Date {date_value} overflows the red channel")

    b = (confidence + 1) * 100 + raw_intensity
    return (r, g, b, alpha)
