"""
Tile Grid Types

Value types shared by the coordinate math and the viewport orchestrator.
"""

from dataclasses import dataclass

from alertlayer.core.exceptions import ValidationError


@dataclass(frozen=True)
class TileGridSpec:
    """
    Tile grid specification supplied by the host map

    Attributes:
        origin_x: Grid origin X in map projection units (left edge)
        origin_y: Grid origin Y in map projection units (top edge)
        cols: Tile width in pixels
        rows: Tile height in pixels

    Examples:
        >>> grid = TileGridSpec(origin_x=-20037508.342789244,
        ...                     origin_y=20037508.342789244,
        ...                     cols=256, rows=256)
    """

    origin_x: float
    origin_y: float
    cols: int = 256
    rows: int = 256

    def __post_init__(self):
        if self.cols <= 0 or self.rows <= 0:
            raise ValidationError(
                f"Tile size must be positive, got {self.cols}x{self.rows}"
            )

    @property
    def origin(self) -> tuple[float, float]:
        return (self.origin_x, self.origin_y)


@dataclass(frozen=True)
class TileCoordinate:
    """One tile image at a given zoom level."""

    column: int
    row: int
    zoom: int

    def __str__(self) -> str:
        return f"{self.zoom}/{self.column}/{self.row}"


@dataclass(frozen=True)
class Extent:
    """
    Viewport extent in map projection units

    Attributes:
        xmin: Western edge
        ymin: Southern edge
        xmax: Eastern edge
        ymax: Northern edge
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin
