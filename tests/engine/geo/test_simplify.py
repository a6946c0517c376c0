"""Tests for engine.geo.simplify — greedy distance-based ring thinning."""

import copy
import random

import pytest

from engine.geo.distance import haversine_km
from engine.geo.simplify import (
    MIN_RING_LENGTH,
    count_vertices,
    iter_rings,
    simplify_feature_collection,
    simplify_geometries,
    simplify_geometry,
    simplify_ring,
)


pytestmark = pytest.mark.unit

SQUARE = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.1], [0.0, 0.1], [0.0, 0.0]]


class TestSimplifyRing:
    """simplify_ring() keeps vertices further apart than the threshold."""

    def test_clustered_ring_falls_back_to_original(self):
        ring = [[0, 0], [0, 0.001], [0, 0.002], [0, 0.003], [0, 0]]
        result = simplify_ring(ring, 0.35)
        assert result is ring

    def test_widely_spaced_points_all_kept(self):
        ring = [[0, 0], [0.01, 0], [0.02, 0], [0.01, 0], [0, 0]]
        result = simplify_ring(ring, 0.35)
        assert result == ring

    def test_close_intermediate_vertex_dropped(self):
        ring = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.0005], [0.1, 0.1], [0.0, 0.1], [0.0, 0.0]]
        result = simplify_ring(ring, 0.35)
        assert result == SQUARE

    def test_open_ring_is_closed(self):
        ring = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.1], [0.0, 0.1]]
        result = simplify_ring(ring, 0.35)
        assert len(result) == 5
        assert result[0] == result[-1] == [0.0, 0.0]

    def test_dropped_closing_vertex_is_restored(self):
        ring = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.1], [0.0, 0.1], [0.0, 0.0005], [0.0, 0.0]]
        result = simplify_ring(ring, 0.35)
        assert result is not ring
        assert result[-1] == result[0]

    def test_short_ring_returned_untouched(self):
        ring = [[0, 0], [1, 1], [0, 0]]
        assert simplify_ring(ring, 0.35) is ring

    def test_result_under_four_points_falls_back(self):
        ring = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.001], [0.1, 0.002], [0.0, 0.0]]
        assert simplify_ring(ring, 0.35) is ring

    def test_input_not_mutated(self):
        ring = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.0005], [0.1, 0.1], [0.0, 0.1], [0.0, 0.0]]
        before = copy.deepcopy(ring)
        simplify_ring(ring, 0.35)
        assert ring == before

    def test_zero_threshold_keeps_distinct_points(self):
        ring = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.0], [0.1, 0.1], [0.0, 0.1], [0.0, 0.0]]
        result = simplify_ring(ring, 0.0)
        assert result == SQUARE

    def test_random_rings_hold_invariants(self):
        rng = random.Random(1234)
        for _ in range(200):
            n = rng.randint(3, 40)
            ring = [[rng.uniform(36.0, 36.05), rng.uniform(-1.05, -1.0)] for _ in range(n)]
            ring.append(list(ring[0]))
            threshold = rng.choice([0.1, 0.35, 1.0, 3.0])

            result = simplify_ring(ring, threshold)

            if result is ring:
                continue
            assert len(result) >= MIN_RING_LENGTH
            assert result[0] == result[-1]
            assert len(result) <= len(ring) + 1
            for a, b in zip(result[:-2], result[1:-1]):
                assert haversine_km(a, b) > threshold


class TestSimplifyGeometry:
    """simplify_geometry() deep-copies and thins every ring."""

    def test_polygon_with_hole(self):
        hole = [[0.02, 0.02], [0.08, 0.02], [0.08, 0.0201], [0.08, 0.08], [0.02, 0.08], [0.02, 0.02]]
        geometry = {"type": "Polygon", "coordinates": [copy.deepcopy(SQUARE), hole]}
        result = simplify_geometry(geometry, 0.35)
        assert result["coordinates"][0] == SQUARE
        assert len(result["coordinates"][1]) == 5

    def test_multipolygon_rings_processed_independently(self):
        tiny = [[5.0, 5.0], [5.0, 5.001], [5.001, 5.001], [5.0, 5.0]]
        geometry = {"type": "MultiPolygon", "coordinates": [[copy.deepcopy(SQUARE)], [tiny]]}
        result = simplify_geometry(geometry, 0.35)
        assert result["coordinates"][0][0] == SQUARE
        assert result["coordinates"][1][0] == tiny

    def test_returns_deep_copy(self):
        geometry = {"type": "Polygon", "coordinates": [copy.deepcopy(SQUARE)]}
        before = copy.deepcopy(geometry)
        result = simplify_geometry(geometry, 0.35)
        assert geometry == before
        assert result is not geometry
        assert result["coordinates"] is not geometry["coordinates"]
        assert result["coordinates"][0][0] is not geometry["coordinates"][0][0]

    def test_non_polygon_passes_through_as_copy(self):
        geometry = {"type": "Point", "coordinates": [36.8, -1.3]}
        result = simplify_geometry(geometry, 0.35)
        assert result == geometry
        assert result is not geometry

    def test_missing_coordinates(self):
        assert simplify_geometry({"type": "Polygon"}, 0.35) == {"type": "Polygon"}


class TestVertexCounting:
    def test_iter_rings_multipolygon(self):
        geometry = {"type": "MultiPolygon", "coordinates": [[SQUARE, SQUARE], [SQUARE]]}
        assert len(list(iter_rings(geometry))) == 3

    def test_iter_rings_point_yields_nothing(self):
        assert list(iter_rings({"type": "Point", "coordinates": [0, 0]})) == []

    def test_count_vertices(self):
        assert count_vertices({"type": "Polygon", "coordinates": [SQUARE]}) == 5


class TestSimplifyFeatureCollection:
    """simplify_feature_collection() on raw GeoJSON dicts."""

    def _collection(self):
        noisy = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.0005], [0.1, 0.1], [0.0, 0.1], [0.0, 0.0]]
        return {
            "type": "FeatureCollection",
            "name": "sample",
            "features": [
                {"type": "Feature", "properties": {"code": 1},
                 "geometry": {"type": "Polygon", "coordinates": [noisy]}},
                {"type": "Feature", "properties": {"code": 2}, "geometry": None},
            ],
        }

    def test_stats(self):
        _, stats = simplify_feature_collection(self._collection(), 0.35)
        assert stats.features == 2
        assert stats.vertices_before == 6
        assert stats.vertices_after == 5
        assert stats.removed == 1
        assert stats.ratio == pytest.approx(5 / 6)

    def test_keeps_collection_members_and_untouched_input(self):
        source = self._collection()
        before = copy.deepcopy(source)
        result, _ = simplify_feature_collection(source, 0.35)
        assert source == before
        assert result["name"] == "sample"
        assert result["features"][0]["properties"] == {"code": 1}
        assert result["features"][1]["geometry"] is None

    def test_empty_collection_ratio(self):
        _, stats = simplify_feature_collection({"type": "FeatureCollection", "features": []}, 0.35)
        assert stats.features == 0
        assert stats.ratio == 1.0


class TestSimplifyGeometries:
    """simplify_geometries() is the shared per-feature loop."""

    def test_order_and_stats(self):
        noisy = [[0.0, 0.0], [0.1, 0.0], [0.1, 0.0005], [0.1, 0.1], [0.0, 0.1], [0.0, 0.0]]
        point = {"type": "Point", "coordinates": [1.0, 1.0]}
        geometries, stats = simplify_geometries(
            [{"type": "Polygon", "coordinates": [noisy]}, None, point], 0.35
        )
        assert geometries[0] == {"type": "Polygon", "coordinates": [SQUARE]}
        assert geometries[1] is None
        assert geometries[2] == point
        assert stats.features == 3
        assert stats.vertices_before == 6
        assert stats.vertices_after == 5

    def test_matches_feature_collection_stats(self):
        collection = TestSimplifyFeatureCollection()._collection()
        _, expected = simplify_feature_collection(collection, 0.35)
        _, stats = simplify_geometries(
            [feature["geometry"] for feature in collection["features"]], 0.35
        )
        assert stats == expected
