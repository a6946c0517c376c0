#!/usr/bin/env python3
"""Thin the vertices of a region GeoJSON file offline.

Runs the same distance-based ring simplification the server applies at load
time and reports how many vertices were removed.

Usage:
    python3 scripts/simplify_regions.py <input.geojson> [options]

Options:
    --min-distance KM   Minimum kept-vertex spacing in km (default: 0.35)
    --output PATH       Write the simplified collection here
    --indent N          JSON indent for the output (default: compact)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from loguru import logger

from engine.geo.simplify import simplify_feature_collection


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simplify region polygons by vertex spacing")
    parser.add_argument("input", type=Path, help="GeoJSON FeatureCollection")
    parser.add_argument("--min-distance", type=float, default=0.35,
                        help="Minimum spacing between kept vertices, km")
    parser.add_argument("--output", type=Path, default=None,
                        help="Output path (omit for a dry run)")
    parser.add_argument("--indent", type=int, default=None,
                        help="JSON indent for the output file")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.min_distance <= 0:
        logger.error("--min-distance must be positive")
        return 2
    if not args.input.exists():
        logger.error(f"Input not found: {args.input}")
        return 1

    with args.input.open("r", encoding="utf-8") as f:
        data = json.load(f)

    simplified, stats = simplify_feature_collection(data, args.min_distance)
    logger.info(
        f"{stats.features} features: {stats.vertices_before} -> {stats.vertices_after} vertices "
        f"({stats.removed} removed, {stats.ratio:.1%} kept)"
    )

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with args.output.open("w", encoding="utf-8") as f:
            json.dump(simplified, f, indent=args.indent, ensure_ascii=False)
        logger.info(f"Wrote {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
