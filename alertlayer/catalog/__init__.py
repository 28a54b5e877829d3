"""
AlertLayer Catalog Module

Layer configuration profiles and their registry.
"""

from alertlayer.catalog.layer_config import (
    ALERT_PINK,
    BUILTIN_LAYERS,
    DEFAULT_LAYER_ID,
    LayerConfig,
    LayerRegistry,
    get_registry,
    register_layer,
)

__all__ = [
    "ALERT_PINK",
    "BUILTIN_LAYERS",
    "DEFAULT_LAYER_ID",
    "LayerConfig",
    "LayerRegistry",
    "get_registry",
    "register_layer",
]
