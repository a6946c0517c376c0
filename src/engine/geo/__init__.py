"""Geometry helpers — great-circle distance and ring simplification."""

from engine.geo.distance import EARTH_RADIUS_KM, haversine_km
from engine.geo.simplify import (
    MIN_RING_LENGTH,
    SimplifyStats,
    count_vertices,
    simplify_feature_collection,
    simplify_geometries,
    simplify_geometry,
    simplify_ring,
)

__all__ = [
    "EARTH_RADIUS_KM",
    "MIN_RING_LENGTH",
    "SimplifyStats",
    "count_vertices",
    "haversine_km",
    "simplify_feature_collection",
    "simplify_geometries",
    "simplify_geometry",
    "simplify_ring",
]
