"""Distance-based vertex thinning for polygon rings.

A greedy filter, not Douglas-Peucker: walking a ring in order, a vertex is
kept only when it lies further than ``min_distance_km`` from the last vertex
that was kept.  The result is force-closed.  Any ring that would end up with
fewer than four positions is returned untouched, so a simplified polygon is
never open or zero-area.

No guarantee is made against self-intersection or overlaps between features.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Callable, Sequence

from engine.geo.distance import haversine_km

# Three distinct vertices plus the closing position.
MIN_RING_LENGTH = 4

# Nesting depth of rings inside ``coordinates`` per geometry type.
# Polygon: [ring, ...]; MultiPolygon: [[ring, ...], ...]
RING_DEPTH = {
    "Polygon": 1,
    "MultiPolygon": 2,
}

Ring = Sequence[Sequence[float]]


def _same_position(a: Sequence[float], b: Sequence[float]) -> bool:
    return a[0] == b[0] and a[1] == b[1]


def simplify_ring(ring: Ring, min_distance_km: float) -> Ring:
    """Thin one closed ring.

    Args:
        ring: Positions as [lng, lat] pairs, first == last.
        min_distance_km: A position is kept only if it is strictly further
            than this from the previously kept one.

    Returns:
        A new list of positions, or ``ring`` itself when the input or the
        result has fewer than ``MIN_RING_LENGTH`` positions.  The input is
        never mutated; kept positions are shared with it, not copied.
    """
    if len(ring) < MIN_RING_LENGTH:
        return ring

    kept = [ring[0]]
    for position in ring[1:]:
        if haversine_km(kept[-1], position) > min_distance_km:
            kept.append(position)

    if not _same_position(kept[0], kept[-1]):
        kept.append(ring[0])

    if len(kept) < MIN_RING_LENGTH:
        return ring
    return kept


def _map_rings(coordinates: list, depth: int, fn: Callable[[Ring], Ring]) -> list:
    if depth == 0:
        return fn(coordinates)
    return [_map_rings(child, depth - 1, fn) for child in coordinates]


def simplify_geometry(geometry: dict, min_distance_km: float) -> dict:
    """Return a deep copy of a GeoJSON geometry with every ring simplified.

    Polygon and MultiPolygon rings are processed independently; any other
    geometry type comes back as an unmodified copy.
    """
    result = copy.deepcopy(geometry)
    depth = RING_DEPTH.get(result.get("type", ""))
    coordinates = result.get("coordinates")
    if depth is None or coordinates is None:
        return result

    result["coordinates"] = _map_rings(
        coordinates, depth, lambda ring: simplify_ring(ring, min_distance_km)
    )
    return result


def iter_rings(geometry: dict):
    """Yield every ring of a Polygon/MultiPolygon geometry."""
    depth = RING_DEPTH.get(geometry.get("type", ""))
    coordinates = geometry.get("coordinates")
    if depth is None or coordinates is None:
        return

    def _walk(node, level):
        if level == 0:
            yield node
            return
        for child in node:
            yield from _walk(child, level - 1)

    yield from _walk(coordinates, depth)


def count_vertices(geometry: dict) -> int:
    """Total number of ring positions in a polygonal geometry."""
    return sum(len(ring) for ring in iter_rings(geometry))


@dataclass
class SimplifyStats:
    """Vertex totals before and after a collection-wide simplification."""

    features: int = 0
    vertices_before: int = 0
    vertices_after: int = 0

    @property
    def removed(self) -> int:
        return self.vertices_before - self.vertices_after

    @property
    def ratio(self) -> float:
        if self.vertices_before == 0:
            return 1.0
        return self.vertices_after / self.vertices_before


def simplify_geometries(
    geometries: Sequence, min_distance_km: float
) -> tuple[list, SimplifyStats]:
    """Simplify each geometry in turn and total the vertices.

    Entries that are not geometry dicts (e.g. a null geometry) are passed
    through and still counted as features.
    """
    stats = SimplifyStats()
    results = []
    for geometry in geometries:
        stats.features += 1
        if isinstance(geometry, dict):
            simplified = simplify_geometry(geometry, min_distance_km)
            stats.vertices_before += count_vertices(geometry)
            stats.vertices_after += count_vertices(simplified)
            geometry = simplified
        results.append(geometry)
    return results, stats


def simplify_feature_collection(
    feature_collection: dict, min_distance_km: float
) -> tuple[dict, SimplifyStats]:
    """Simplify every feature of a raw GeoJSON FeatureCollection dict.

    Returns the new collection and vertex statistics.  The input dict is
    left untouched.
    """
    source = feature_collection.get("features", [])
    geometries, stats = simplify_geometries(
        [feature.get("geometry") for feature in source], min_distance_km
    )
    features = []
    for feature, geometry in zip(source, geometries):
        new_feature = dict(feature)
        if isinstance(geometry, dict):
            new_feature["geometry"] = geometry
        features.append(new_feature)

    result = dict(feature_collection)
    result["features"] = features
    return result, stats
