"""
NumPy-backed drawing surface

ArraySurface behaves like an HTML canvas 2D context for the operations the
layer needs: source-over draw, raw region reads and writes, and clear.
"""

import numpy as np
from numpy.typing import NDArray

from alertlayer.core.exceptions import ValidationError
from alertlayer.io.tile_image import write_tile_image


class ArraySurface:
    """
    RGBA surface stored as a (height, width, 4) uint8 array

    Attributes:
        pixels: Surface contents, row-major with the origin at the top-left
        visible: Display flag toggled by the owning layer

    Examples:
        >>> surface = ArraySurface(512, 256)
        >>> surface.draw_image(tile_pixels, 10, -20)
        >>> region = surface.get_image_data(10, -20, 256, 256)
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValidationError(f"Surface size must be positive, got {width}x{height}")
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self.visible = True

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def _clip(self, x: int, y: int, width: int, height: int):
        """Return (surface slices, region slices) of the overlap, or None."""
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + width, self.width), min(y + height, self.height)
        if x1 <= x0 or y1 <= y0:
            return None
        dst = (slice(y0, y1), slice(x0, x1))
        src = (slice(y0 - y, y1 - y), slice(x0 - x, x1 - x))
        return dst, src

    def clear(self) -> None:
        self.pixels[...] = 0

    def draw_image(self, image: NDArray, x: int, y: int) -> None:
        """
        Composite an RGBA image using source-over blending

        Args:
            image: Array of shape (H, W, 4), uint8
            x: Left edge on the surface (may be negative)
            y: Top edge on the surface (may be negative)
        """
        height, width = image.shape[:2]
        clipped = self._clip(x, y, width, height)
        if clipped is None:
            return
        dst_slices, src_slices = clipped

        src = image[src_slices].astype(np.float32) / 255.0
        dst = self.pixels[dst_slices].astype(np.float32) / 255.0

        src_a = src[..., 3:4]
        dst_a = dst[..., 3:4]
        out_a = src_a + dst_a * (1.0 - src_a)

        premultiplied = src[..., :3] * src_a + dst[..., :3] * dst_a * (1.0 - src_a)
        out_rgb = np.zeros_like(premultiplied)
        np.divide(premultiplied, out_a, out=out_rgb, where=out_a > 0)

        out = np.concatenate([out_rgb, out_a], axis=-1)
        self.pixels[dst_slices] = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)

    def get_image_data(self, x: int, y: int, width: int, height: int) -> NDArray[np.uint8]:
        region = np.zeros((height, width, 4), dtype=np.uint8)
        clipped = self._clip(x, y, width, height)
        if clipped is not None:
            dst_slices, src_slices = clipped
            region[src_slices] = self.pixels[dst_slices]
        return region

    def put_image_data(self, data: NDArray, x: int, y: int) -> None:
        height, width = data.shape[:2]
        clipped = self._clip(x, y, width, height)
        if clipped is None:
            return
        dst_slices, src_slices = clipped
        self.pixels[dst_slices] = data[src_slices]

    def to_png(self) -> bytes:
        """Encode the current surface contents as PNG."""
        return write_tile_image(self.pixels)

    def __repr__(self) -> str:
        state = "visible" if self.visible else "hidden"
        return f"<ArraySurface {self.width}x{self.height} ({state})>"
