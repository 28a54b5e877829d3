"""
AlertLayer Render Demo

Renders GLAD forest-change alerts for one viewport into a PNG, filtered to a
date range.

Usage:
    python examples/demo_render.py --lon -60 --lat -10 --zoom 6 \
        --start 2016-01-01 --end 2016-06-30 --output alerts.png
"""

import argparse
import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

import numpy as np

from alertlayer.catalog.layer_config import get_registry
from alertlayer.render.fetch import COMPOSITED, DISCARDED, FAILED, TileLoader
from alertlayer.render.host import MercatorMapView
from alertlayer.render.layer import CanvasLayer


def parse_args():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="AlertLayer Render Demo")
    parser.add_argument(
        "--layer",
        type=str,
        default="glad_alerts",
        help="Layer config id (default: glad_alerts)",
    )
    parser.add_argument("--lon", type=float, default=-60.0, help="Centre longitude")
    parser.add_argument("--lat", type=float, default=-10.0, help="Centre latitude")
    parser.add_argument("--zoom", type=int, default=6, help="Zoom level (default: 6)")
    parser.add_argument("--width", type=int, default=800, help="Viewport width in pixels")
    parser.add_argument("--height", type=int, default=600, help="Viewport height in pixels")
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=None,
        help="First visible day, YYYY-MM-DD (default: layer config)",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=None,
        help="Last visible day, YYYY-MM-DD (default: layer config)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-tile request timeout in seconds (default: 30)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="alerts.png",
        help="Output PNG path (default: alerts.png)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log tile lifecycle details")
    return parser.parse_args()


async def render(args, config):
    view = MercatorMapView.centered(args.lon, args.lat, args.zoom, args.width, args.height)

    async with TileLoader(config.url_template, timeout=args.timeout) as loader:
        layer = CanvasLayer(config, loader=loader)
        surface = layer.attach(view)
        if args.start is not None:
            layer.set_min_date_value(args.start)
        if args.end is not None:
            layer.set_max_date_value(args.end)

        layer.update()
        await layer.wait_idle()

    return layer, surface


def main():
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    print("=" * 60)
    print("AlertLayer Render Demo")
    print("=" * 60)

    config = get_registry().get(args.layer)
    if config is None:
        print(f"❌ Unknown layer: {args.layer}")
        print(f"  Available: {', '.join(get_registry().list_layers())}")
        sys.exit(1)

    print(f"\n[Step 1] Layer: {config.layer_id}")
    print(f"  Tiles: {config.url_template}")

    print(f"\n[Step 2] Rendering {args.width}x{args.height} at zoom {args.zoom}...")
    layer, surface = asyncio.run(render(args, config))

    states = [job.state for job in layer.last_batch]
    print(f"  Tiles requested:  {len(states)}")
    print(f"  Composited:       {states.count(COMPOSITED)}")
    print(f"  Discarded:        {states.count(DISCARDED)}")
    print(f"  Failed:           {states.count(FAILED)}")
    print(
        f"  Date range:       {layer.filter_state.min_date_value}"
        f" → {layer.filter_state.max_date_value}"
    )

    visible = int(np.count_nonzero(surface.pixels[..., 3]))
    print(f"\n[Step 3] Visible alert pixels: {visible}")

    output = Path(args.output)
    output.write_bytes(surface.to_png())

    print("\n" + "=" * 60)
    print("✓ Demo complete!")
    print("=" * 60)
    print(f"\nOutput: {output.absolute()}")


if __name__ == "__main__":
    main()
