"""
Layer configuration profiles.

A LayerConfig names an alert tile source and the initial filter/render
settings of a CanvasLayer built from it. Built-in configs cover the GLAD
forest-change alert tiles; more can be registered at runtime.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from alertlayer.core.exceptions import ValidationError
from alertlayer.filter.pipeline import (
    DEFAULT_MAX_DATE_VALUE,
    DEFAULT_MIN_DATE_VALUE,
    FilterState,
)

logger = logging.getLogger(__name__)

# Recolour used by the highlighted GLAD preset
ALERT_PINK = (255, 102, 153)

DEFAULT_LAYER_ID = "glad_alerts"


@dataclass
class LayerConfig:
    """
    Settings for one alert tile layer.

    Attributes:
        layer_id: Unique identifier (e.g. "glad_alerts")
        url_template: Tile URL with {z}, {x} (column) and {y} (row) placeholders
        min_date_value: Initial earliest visible date (YYDDD)
        max_date_value: Initial latest visible date (YYDDD)
        confidence_levels: Confidence classes kept visible (None = all)
        highlight_color: RGB recolour for visible pixels (None = keep tile colours)
        discard_stale_tiles: Drop tiles that finish after a newer clear/update
        visible: Whether the layer starts visible
        description: Human-readable description

    Examples:
        >>> config = LayerConfig(
        ...     layer_id="my_alerts",
        ...     url_template="https://tiles.example.com/alerts/{z}/{x}/{y}.png",
        ...     min_date_value=16000,
        ... )
    """

    layer_id: str
    url_template: str
    min_date_value: int = DEFAULT_MIN_DATE_VALUE
    max_date_value: int = DEFAULT_MAX_DATE_VALUE
    confidence_levels: list[int] | None = None
    highlight_color: tuple[int, int, int] | None = None
    discard_stale_tiles: bool = False
    visible: bool = True
    description: str = ""

    def __post_init__(self):
        for placeholder in ("{z}", "{x}", "{y}"):
            if placeholder not in self.url_template:
                raise ValidationError(
                    f"url_template of '{self.layer_id}' is missing {placeholder}: {self.url_template}"
                )
        if self.min_date_value > self.max_date_value:
            raise ValidationError(
                f"min_date_value {self.min_date_value} is after max_date_value {self.max_date_value}"
            )
        if self.highlight_color is not None:
            self.highlight_color = tuple(self.highlight_color)

    def filter_state(self) -> FilterState:
        """Fresh FilterState initialised from this config."""
        return FilterState(
            min_date_value=self.min_date_value,
            max_date_value=self.max_date_value,
            confidence_levels=(
                frozenset(self.confidence_levels) if self.confidence_levels is not None else None
            ),
            highlight_color=self.highlight_color,
        )

    def to_dict(self) -> dict[str, Any]:
        d = {
            "layer_id": self.layer_id,
            "url_template": self.url_template,
            "min_date_value": self.min_date_value,
            "max_date_value": self.max_date_value,
            "discard_stale_tiles": self.discard_stale_tiles,
            "visible": self.visible,
            "description": self.description,
        }
        if self.confidence_levels is not None:
            d["confidence_levels"] = list(self.confidence_levels)
        if self.highlight_color is not None:
            d["highlight_color"] = list(self.highlight_color)
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LayerConfig":
        highlight = data.get("highlight_color")
        return cls(
            layer_id=data["layer_id"],
            url_template=data["url_template"],
            min_date_value=data.get("min_date_value", DEFAULT_MIN_DATE_VALUE),
            max_date_value=data.get("max_date_value", DEFAULT_MAX_DATE_VALUE),
            confidence_levels=data.get("confidence_levels"),
            highlight_color=tuple(highlight) if highlight is not None else None,
            discard_stale_tiles=data.get("discard_stale_tiles", False),
            visible=data.get("visible", True),
            description=data.get("description", ""),
        )

    def __repr__(self):
        return (
            f"<LayerConfig: {self.layer_id}>\n"
            f"  Tiles: {self.url_template}\n"
            f"  Dates: {self.min_date_value}-{self.max_date_value}"
        )


_GLAD_TILES = "https://wri-tiles.s3.amazonaws.com/glad_test/test2/{z}/{x}/{y}.png"

# Built-in layer configs
BUILTIN_LAYERS = {
    "glad_alerts": LayerConfig(
        layer_id="glad_alerts",
        url_template=_GLAD_TILES,
        description="GLAD forest-change alerts, 2015-2016",
    ),
    "glad_alerts_confirmed": LayerConfig(
        layer_id="glad_alerts_confirmed",
        url_template=_GLAD_TILES,
        confidence_levels=[1],
        highlight_color=ALERT_PINK,
        description="Confirmed GLAD alerts only, drawn in pink",
    ),
}


class LayerRegistry:
    """
    In-memory registry of layer configs.

    Starts with the built-in configs; user configs override by layer_id.
    """

    def __init__(self):
        self._layers: dict[str, LayerConfig] = dict(BUILTIN_LAYERS)

    def register(self, config: LayerConfig) -> None:
        self._layers[config.layer_id] = config
        logger.info("Registered layer config: %s", config.layer_id)

    def get(self, layer_id: str) -> LayerConfig | None:
        return self._layers.get(layer_id)

    def list_layers(self) -> list[str]:
        return sorted(self._layers.keys())

    def to_dict(self) -> dict[str, Any]:
        return {lid: c.to_dict() for lid, c in self._layers.items()}

    def load_from_dict(self, data: dict[str, Any]) -> None:
        for lid, cdata in data.items():
            self._layers[lid] = LayerConfig.from_dict(cdata)


# Global registry instance
_global_registry = LayerRegistry()


def register_layer(
    layer_id: str,
    url_template: str,
    min_date_value: int = DEFAULT_MIN_DATE_VALUE,
    max_date_value: int = DEFAULT_MAX_DATE_VALUE,
    confidence_levels: list[int] | None = None,
    highlight_color: tuple[int, int, int] | None = None,
    discard_stale_tiles: bool = False,
    description: str = "",
) -> LayerConfig:
    """
    Register a layer config in the global registry.

    Args:
        layer_id: Unique identifier
        url_template: Tile URL template with {z}/{x}/{y}
        min_date_value: Earliest visible date (YYDDD)
        max_date_value: Latest visible date (YYDDD)
        confidence_levels: Confidence classes kept visible
        highlight_color: RGB recolour for visible pixels
        discard_stale_tiles: Drop tiles superseded by a newer viewport
        description: Human-readable description

    Returns:
        The created LayerConfig

    Examples:
        >>> register_layer(
        ...     "radd_alerts",
        ...     "https://tiles.example.com/radd/{z}/{x}/{y}.png",
        ...     min_date_value=19000,
        ...     max_date_value=20364,
        ... )
    """
    config = LayerConfig(
        layer_id=layer_id,
        url_template=url_template,
        min_date_value=min_date_value,
        max_date_value=max_date_value,
        confidence_levels=confidence_levels,
        highlight_color=highlight_color,
        discard_stale_tiles=discard_stale_tiles,
        description=description,
    )
    _global_registry.register(config)
    return config


def get_registry() -> LayerRegistry:
    """Get the global layer registry."""
    return _global_registry
