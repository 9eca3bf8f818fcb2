#!/usr/bin/env python3
"""Reconstruct the driving route of one line from a built dataset.

The line's points are read from the dataset written by the batch run, sorted
by timestamp and sent to the Directions API chunk by chunk.

Environment requirements:
- ``LINETRACE_DIRECTIONS_API_KEY`` should be set (or stored in ``.env``).

Usage examples:

    # Print the legs of line 3222357531 as JSON
    python -m linetrace.tools.route_line --line 3222357531

    # Write them to a file
    python -m linetrace.tools.route_line \
        --dataset public/data/layers.geojson.json \
        --line line-3222357531 \
        --output-file route_3222357531.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from linetrace.config import OUTPUT_FILE
from linetrace.dataset import CENTERS, find_layer, load_dataset
from linetrace.errors import DirectionsAPIError
from linetrace.models import GeoPoint, RouteLeg
from linetrace.routing.legs import route_to_dict
from linetrace.services.route_service import RouteService

LOGGER = logging.getLogger("route_line")


def reconstruct_line_route(
    dataset_path: str | Path,
    line: str,
    *,
    service: RouteService | None = None,
) -> Optional[List[RouteLeg]]:
    """Load ``line`` from the dataset and return its route legs.

    Raises:
        LookupError: when the dataset has no line layer matching ``line``.
    """

    layers = load_dataset(dataset_path)
    layer = find_layer(layers, line)
    if layer is None or layer.type == CENTERS:
        raise LookupError(f"No line layer '{line}' in {dataset_path}")
    points = [point for point in layer.points if isinstance(point, GeoPoint)]
    LOGGER.info("Line %s: %d points loaded", layer.label, len(points))
    return (service or RouteService()).fetch_route(points)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reconstruct a driving route through the points of one line"
    )
    parser.add_argument(
        "--line",
        required=True,
        help="Line id or layer id (e.g. 3222357531 or line-3222357531)",
    )
    parser.add_argument(
        "--dataset",
        default=OUTPUT_FILE,
        help=f"Dataset produced by the batch run (default: {OUTPUT_FILE})",
    )
    parser.add_argument(
        "--output-file",
        help="Write the legs JSON here instead of printing to stdout",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the route_line tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        legs = reconstruct_line_route(args.dataset, args.line)
    except (LookupError, FileNotFoundError) as exc:
        LOGGER.error("%s", exc)
        return 1
    except DirectionsAPIError as exc:
        LOGGER.error("Route request failed: %s", exc)
        return 1

    if legs is None:
        LOGGER.warning("No route available for line %s", args.line)
        return 0

    output = json.dumps(route_to_dict(legs), indent=2)
    if args.output_file:
        output_path = Path(args.output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(output)
        LOGGER.info("Route with %d legs written to %s", len(legs), output_path)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
