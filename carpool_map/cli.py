"""Command-line entry point.

Usage:
    python -m carpool_map render snapshot.json -o map.html [--direction from]
    python -m carpool_map parse-link "https://maps.google.com/?q=43.65,-79.38"
    python -m carpool_map distance 43.65 -79.38 43.70 -79.40
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import get_config
from .container import Container
from .domain.errors import CarpoolMapError
from .domain.models import Coordinate, ViewDirection
from .geo.distance import format_distance, haversine_m
from .geo.links import parse_maps_link
from .logging_setup import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="carpool_map",
        description="Event carpool map tools.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render an event snapshot to an HTML map")
    render.add_argument("snapshot", type=Path, help="JSON snapshot with event, carpools, registrations")
    render.add_argument("-o", "--output", type=Path, default=Path("carpool_map.html"))
    render.add_argument(
        "--direction",
        choices=[d.value for d in ViewDirection],
        default=ViewDirection.ALL.value,
    )
    render.add_argument("--all-riders", action="store_true",
                        help="Show every rider with a location, not only those needing a ride")
    render.add_argument("--hide-riders", action="store_true", help="Do not draw riders")

    link = sub.add_parser("parse-link", help="Extract place name and coordinates from a maps link")
    link.add_argument("url")

    dist = sub.add_parser("distance", help="Great-circle distance between two points")
    for name in ("lat1", "lng1", "lat2", "lng2"):
        dist.add_argument(name, type=float)

    return p


def _render(args: argparse.Namespace) -> int:
    from .adapters.store import JsonFileRecordStore
    from .ports.store import RecordStorePort
    from .services import MapViewService, ViewState

    store = JsonFileRecordStore(path=args.snapshot)
    event_id = store.load()

    container = Container.create_default(get_config())
    container.register(RecordStorePort, lambda: store)
    service: MapViewService = container.resolve(MapViewService)

    state = ViewState(
        direction=ViewDirection.parse(args.direction),
        show_riders=not args.hide_riders,
        show_all_riders=args.all_riders,
    )
    view = asyncio.run(service.build(event_id, state))
    path = asyncio.run(service.render(event_id, args.output, state))

    print(f"Wrote {path}")
    print(f"Carpools on map: {len(view.listed) - len(view.off_map)}, off map: {len(view.off_map)}")
    print(f"Riders: {len(view.riders)}")
    return 0


def _parse_link(args: argparse.Namespace) -> int:
    result = parse_maps_link(args.url)
    print(
        json.dumps(
            {
                "is_valid_link": result.is_valid_link,
                "has_coordinates": result.has_coordinates,
                "name": result.name,
                "lat": result.lat,
                "lng": result.lng,
            },
            indent=2,
        )
    )
    return 0 if result.is_valid_link else 1


def _distance(args: argparse.Namespace) -> int:
    a = Coordinate.parse(args.lat1, args.lng1)
    b = Coordinate.parse(args.lat2, args.lng2)
    if a is None or b is None:
        print("Coordinates out of range", file=sys.stderr)
        return 2
    print(format_distance(haversine_m(a, b)))
    return 0


COMMANDS = {
    "render": _render,
    "parse-link": _parse_link,
    "distance": _distance,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_config().observability)
    try:
        return COMMANDS[args.command](args)
    except CarpoolMapError as e:
        logger.error("Command failed", extra={"command": args.command, "error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 1
