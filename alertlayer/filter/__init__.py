"""
AlertLayer Filter Module

Date-range and confidence filtering of alert pixel buffers.
"""

from alertlayer.filter.pipeline import (
    DEFAULT_MAX_DATE_VALUE,
    DEFAULT_MIN_DATE_VALUE,
    FilterState,
    filter_buffer,
)

__all__ = [
    "DEFAULT_MAX_DATE_VALUE",
    "DEFAULT_MIN_DATE_VALUE",
    "FilterState",
    "filter_buffer",
]
