"""Map API — region data, selection state, selection and overlay controls."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

router = APIRouter(prefix="/api/map", tags=["map"])


class OverlayUpdate(BaseModel):
    sub_regions: bool | None = None
    wards: bool | None = None
    constituencies: bool | None = None


def _get_engine(request: Request):
    """Retrieve the MapEngine from app state."""
    engine = getattr(request.app.state, "map_engine", None)
    if engine is None or engine.closed:
        raise HTTPException(503, "Map engine not available")
    return engine


def _get_loaded_engine(request: Request):
    engine = _get_engine(request)
    if not engine.loaded:
        raise HTTPException(503, "Region data is still loading")
    return engine


@router.get("/state")
async def get_map_state(request: Request):
    """Current view mode, selection, hover and overlay toggles."""
    engine = _get_engine(request)
    return engine.state()


@router.get("/regions")
async def get_regions(request: Request):
    """The bound (simplified) region collection as GeoJSON."""
    engine = _get_loaded_engine(request)
    return engine.collection.to_geojson()


@router.get("/regions/{code}")
async def get_region(code: int, request: Request):
    """Attribute detail for one region."""
    engine = _get_loaded_engine(request)
    region = engine.collection.get(code)
    if region is None:
        raise HTTPException(404, f"Region {code} not found")
    return region.detail()


@router.get("/scene")
async def get_scene(request: Request):
    """Full scene snapshot for clients that connect mid-session."""
    engine = _get_engine(request)
    snapshot = getattr(engine.surface, "snapshot", None)
    if snapshot is None:
        raise HTTPException(501, "Map surface does not provide snapshots")
    return snapshot()


@router.post("/select/{code}")
async def select_region(code: int, request: Request):
    """Focus a region; selecting the focused region returns to overview."""
    engine = _get_loaded_engine(request)
    if code not in engine.layers:
        raise HTTPException(404, f"Region {code} not found")
    engine.select(code)
    return engine.state()


@router.post("/deselect")
async def deselect_region(request: Request):
    """Back to the overview map."""
    engine = _get_engine(request)
    engine.deselect()
    return engine.state()


@router.put("/overlays")
async def set_overlays(update: OverlayUpdate, request: Request):
    """Toggle outline overlays drawn over the focused region."""
    engine = _get_engine(request)
    toggles = engine.set_overlays(
        sub_regions=update.sub_regions,
        wards=update.wards,
        constituencies=update.constituencies,
    )
    return toggles.to_dict()
