"""Shared fixtures: small region collections and a ready map engine."""

from __future__ import annotations

import pytest

from engine.map.engine import MapEngine
from engine.map.surface import SceneSurface
from engine.regions.region import Region, RegionAttributes, RegionCollection

DEFAULT_CENTER = (0.0236, 37.9062)


def square_ring(lng: float, lat: float, half: float = 0.1) -> list[list[float]]:
    """Closed square ring centred on (lng, lat); 0.1 deg half-size is ~11 km."""
    return [
        [lng - half, lat - half],
        [lng + half, lat - half],
        [lng + half, lat + half],
        [lng - half, lat + half],
        [lng - half, lat - half],
    ]


@pytest.fixture
def make_region():
    """Factory: make_region(code, name=None, lng=..., lat=...) -> Region."""

    def _make(code: int, name: str | None = None, lng: float = 37.0, lat: float = -1.0) -> Region:
        name = name or f"Region {code}"
        properties = {
            "county_name": name,
            "county_code": code,
            "area_sq_km": "1234.5",
            "population": 1000 * code,
            "capital": f"{name} Town",
            "sub_counties": [f"{name.upper()} NORTH", f"{name.upper()} SOUTH"],
        }
        return Region(
            attributes=RegionAttributes(
                name=name,
                code=code,
                capital=f"{name} Town",
                population=1000 * code,
                area_sq_km="1234.5",
                sub_regions=(f"{name.upper()} NORTH", f"{name.upper()} SOUTH"),
            ),
            geometry={"type": "Polygon", "coordinates": [square_ring(lng, lat)]},
            properties=properties,
        )

    return _make


@pytest.fixture
def regions(make_region) -> RegionCollection:
    return RegionCollection(
        [
            make_region(1, "Mombasa", lng=39.66, lat=-4.04),
            make_region(2, "Kwale", lng=39.2, lat=-4.2),
            make_region(47, "Nairobi", lng=36.82, lat=-1.29),
        ],
        name="test-counties",
    )


@pytest.fixture
def surface() -> SceneSurface:
    return SceneSurface(center=DEFAULT_CENTER, zoom=6)


@pytest.fixture
def engine(surface, regions) -> MapEngine:
    eng = MapEngine(surface)
    eng.bind(regions)
    return eng
