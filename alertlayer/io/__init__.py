"""
AlertLayer I/O Module

Tile image decode/encode.
"""

from alertlayer.io.tile_image import decode_tile_image, read_tile_image, write_tile_image

__all__ = ["decode_tile_image", "read_tile_image", "write_tile_image"]
