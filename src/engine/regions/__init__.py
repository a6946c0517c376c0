"""Region data model — parsing, simplification at load time, async loading."""

from engine.regions.geojson import parse_regions, read_regions
from engine.regions.loader import RegionLoader, load_regions
from engine.regions.region import Region, RegionAttributes, RegionCollection, simplify_regions

__all__ = [
    "Region",
    "RegionAttributes",
    "RegionCollection",
    "RegionLoader",
    "load_regions",
    "parse_regions",
    "read_regions",
    "simplify_regions",
]
