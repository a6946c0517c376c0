"""Parse GeoJSON (RFC 7946) into a RegionCollection using stdlib json.

Attribute names are matched against a short list of candidates so that both
the county dataset (``county_name``, ``county_code``, ``sub_counties``) and
generic files (``name``, ``code``, ``sub_regions``) load.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

from loguru import logger

from engine.regions.region import POLYGONAL_TYPES, Region, RegionAttributes, RegionCollection

NAME_KEYS = ("county_name", "name", "NAME")
CODE_KEYS = ("county_code", "code", "CODE")
CAPITAL_KEYS = ("capital", "CAPITAL")
POPULATION_KEYS = ("population", "POPULATION", "pop")
AREA_KEYS = ("area_sq_km", "area", "AREA")
SUB_REGION_KEYS = ("sub_counties", "sub_regions", "subdivisions")


def _first_present(properties: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in properties and properties[key] is not None:
            return properties[key]
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def parse_attributes(properties: Mapping[str, Any]) -> RegionAttributes | None:
    """Build RegionAttributes from a feature's properties.

    Returns None when no usable integer code is present.  Other fields fall
    back to empty values; the area is passed through as found.
    """
    code = _as_int(_first_present(properties, CODE_KEYS))
    if code is None:
        return None

    name = _first_present(properties, NAME_KEYS)
    capital = _first_present(properties, CAPITAL_KEYS)
    population = _as_int(_first_present(properties, POPULATION_KEYS))
    area = _first_present(properties, AREA_KEYS)
    subs = _first_present(properties, SUB_REGION_KEYS)
    if not isinstance(subs, (list, tuple)):
        subs = ()

    return RegionAttributes(
        name=str(name) if name is not None else f"Region {code}",
        code=code,
        capital=str(capital) if capital is not None else "",
        population=population or 0,
        area_sq_km=area if area is not None else 0.0,
        sub_regions=tuple(str(s) for s in subs),
    )


def _parse_feature(raw: Any, idx: int) -> Region | None:
    """Parse a single GeoJSON Feature dict into a Region."""
    if not isinstance(raw, dict):
        logger.warning(f"GeoJSON feature #{idx} is not an object, skipped")
        return None

    geometry = raw.get("geometry")
    if not isinstance(geometry, dict) or "type" not in geometry:
        logger.warning(f"GeoJSON feature #{idx} has no geometry, skipped")
        return None
    if geometry["type"] not in POLYGONAL_TYPES:
        logger.warning(f"GeoJSON feature #{idx} has {geometry['type']} geometry; kept as-is")

    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}

    attributes = parse_attributes(properties)
    if attributes is None:
        logger.warning(f"GeoJSON feature #{idx} has no integer region code, skipped")
        return None

    return Region(
        attributes=attributes,
        geometry=geometry,
        properties=properties,
        feature_id=raw.get("id"),
    )


def parse_regions(source: str | bytes | dict) -> RegionCollection:
    """Parse GeoJSON text (or an already-decoded dict) into a RegionCollection.

    Malformed JSON produces an empty collection.  A repeated region code keeps
    the first feature that carried it.
    """
    if isinstance(source, dict):
        data = source
    else:
        try:
            data = json.loads(source)
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as e:
            logger.warning(f"Region data is not valid JSON: {e}")
            return RegionCollection()

    if not isinstance(data, dict):
        logger.warning("Region data is not a GeoJSON object")
        return RegionCollection()

    if data.get("type") == "FeatureCollection":
        raw_features = data.get("features") or []
    elif data.get("type") == "Feature":
        raw_features = [data]
    else:
        logger.warning(f"Unsupported GeoJSON type: {data.get('type')!r}")
        return RegionCollection()

    regions: list[Region] = []
    seen: set[int] = set()
    for idx, raw in enumerate(raw_features):
        region = _parse_feature(raw, idx)
        if region is None:
            continue
        if region.code in seen:
            logger.warning(f"Duplicate region code {region.code} in feature #{idx}, skipped")
            continue
        seen.add(region.code)
        regions.append(region)

    return RegionCollection(regions, name=str(data.get("name", "")))


def read_regions(path: str | Path) -> RegionCollection:
    """Read and parse a GeoJSON file."""
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    return parse_regions(content)
