"""
AlertLayer Codec Module

Pixel encode/decode contract and YYDDD date helpers.
"""

from alertlayer.codec.dates import date_from_value, date_value
from alertlayer.codec.pixel import (
    DecodedPixel,
    DecodedPixels,
    decode_pixel,
    decode_pixels,
    encode_pixel,
)

__all__ = [
    "DecodedPixel",
    "DecodedPixels",
    "date_from_value",
    "date_value",
    "decode_pixel",
    "decode_pixels",
    "encode_pixel",
]
