"""
AlertLayer Exceptions

Exception hierarchy for error handling.
"""


class AlertLayerError(Exception):
    """Base exception for AlertLayer"""

    pass


class ValidationError(AlertLayerError):
    """Configuration or grid validation failed"""

    pass


class PixelDecodeError(AlertLayerError):
    """Pixel channels violate the alert encoding contract"""

    pass


class PixelEncodeError(AlertLayerError):
    """Values cannot be represented by the alert encoding"""

    pass


class TileFetchError(AlertLayerError):
    """Tile download failed (transport error or non-200 status)"""

    pass


class TileDecodeError(AlertLayerError):
    """Tile bytes could not be decoded into a raster"""

    pass


class LayerStateError(AlertLayerError):
    """Layer lifecycle method called in the wrong state"""

    pass
