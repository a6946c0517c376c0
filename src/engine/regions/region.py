"""Region and RegionCollection — the immutable data model bound to the map.

All coordinates are stored in GeoJSON convention: [lng, lat].
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Iterator

from engine.geo.simplify import SimplifyStats, simplify_geometries

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")


@dataclass(frozen=True)
class RegionAttributes:
    """Fixed attribute set carried by every region.

    Attributes:
        name: Display name.
        code: Numeric identity, unique within a collection.
        capital: Seat of the region's government.
        population: Head count.
        area_sq_km: Area in km²; may be string-encoded in source data and is
            not validated here.
        sub_regions: Ordered names of the region's subdivisions.
    """

    name: str
    code: int
    capital: str = ""
    population: int = 0
    area_sq_km: float | str = 0.0
    sub_regions: tuple[str, ...] = ()

    @property
    def code_label(self) -> str:
        return f"{self.code:03d}"

    @property
    def area_display(self) -> str:
        """Area with thousands separators when numeric, else the raw value."""
        try:
            value = float(self.area_sq_km)
        except (TypeError, ValueError):
            return str(self.area_sq_km)
        if value.is_integer():
            return f"{value:,.0f}"
        return f"{value:,.3f}".rstrip("0").rstrip(".")


@dataclass(frozen=True)
class Region:
    """A polygonal region and its attributes.

    ``properties`` keeps the source feature's attribute object verbatim so the
    full feature can be handed back to whoever asked for it.
    """

    attributes: RegionAttributes
    geometry: dict
    properties: dict = field(default_factory=dict)
    feature_id: str | int | None = None

    @property
    def code(self) -> int:
        return self.attributes.code

    @property
    def name(self) -> str:
        return self.attributes.name

    @property
    def geometry_type(self) -> str:
        return self.geometry.get("type", "")

    @property
    def is_polygonal(self) -> bool:
        return self.geometry_type in POLYGONAL_TYPES

    def to_feature(self) -> dict:
        """Return the region as a GeoJSON Feature dict."""
        feature = {
            "type": "Feature",
            "geometry": self.geometry,
            "properties": dict(self.properties),
        }
        if self.feature_id is not None:
            feature["id"] = self.feature_id
        return feature

    def detail(self) -> dict:
        """Attribute summary for display; values are formatted best-effort."""
        attrs = self.attributes
        return {
            "code": attrs.code,
            "code_label": attrs.code_label,
            "name": attrs.name,
            "capital": attrs.capital,
            "population": attrs.population,
            "area_sq_km": attrs.area_sq_km,
            "area_display": attrs.area_display,
            "sub_regions": [name.lower() for name in attrs.sub_regions],
        }


class RegionCollection:
    """Ordered, code-indexed, read-only set of regions."""

    def __init__(self, regions=(), name: str = "") -> None:
        self._regions: tuple[Region, ...] = tuple(regions)
        self._by_code: dict[int, Region] = {}
        for region in self._regions:
            if region.code in self._by_code:
                raise ValueError(f"Duplicate region code: {region.code}")
            self._by_code[region.code] = region
        self.name = name

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __repr__(self) -> str:
        return f"RegionCollection(name={self.name!r}, regions={len(self._regions)})"

    @property
    def codes(self) -> tuple[int, ...]:
        return tuple(region.code for region in self._regions)

    def get(self, code: int) -> Region | None:
        return self._by_code.get(code)

    def to_geojson(self) -> dict:
        """Export as a GeoJSON FeatureCollection dict."""
        collection = {
            "type": "FeatureCollection",
            "features": [region.to_feature() for region in self._regions],
        }
        if self.name:
            collection["name"] = self.name
        return collection


def simplify_regions(
    collection: RegionCollection, min_distance_km: float
) -> tuple[RegionCollection, SimplifyStats]:
    """Return a new collection whose geometries have every ring thinned.

    Attributes are carried over unchanged; the source collection and its
    geometries are never modified.
    """
    geometries, stats = simplify_geometries(
        [region.geometry for region in collection], min_distance_km
    )
    simplified = [
        dataclasses.replace(region, geometry=geometry)
        for region, geometry in zip(collection, geometries)
    ]
    return RegionCollection(simplified, name=collection.name), stats
