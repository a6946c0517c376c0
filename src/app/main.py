"""County Explorer - interactive region map.

Main FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.config import settings
from app.routers import map_router, ws_router
from app.routers.ws import snapshot_message, start_scene_bridge
from engine.comms.event_bus import EventBus
from engine.map.engine import MapEngine
from engine.map.selection import CameraSettings
from engine.map.surface import SceneSurface
from engine.regions.loader import RegionLoader

VERSION = "0.1.0"


def _create_map_engine(event_bus: EventBus) -> MapEngine:
    """Create the scene surface and the engine that drives it."""
    surface = SceneSurface(
        center=settings.map_center,
        zoom=settings.map_default_zoom,
        event_bus=event_bus,
    )
    camera = CameraSettings(
        default_center=settings.map_center,
        default_zoom=settings.map_default_zoom,
        duration=settings.fly_duration,
        ease_linearity=settings.fly_ease_linearity,
        padding=(settings.fit_padding_px, settings.fit_padding_px),
    )

    def _publish_selection(region):
        event_bus.publish("selection", {"region": region.detail() if region else None})

    return MapEngine(
        surface,
        camera=camera,
        on_selection_change=_publish_selection,
        shadow_offset=settings.shadow_offset,
        shadow_z_index=settings.shadow_z_index,
        surface_z_index=settings.surface_z_index,
        overlay_z_index=settings.overlay_z_index,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"{settings.app_name} v{VERSION} - initializing")

    event_bus = EventBus()
    engine = _create_map_engine(event_bus)
    app.state.event_bus = event_bus
    app.state.map_engine = engine

    bridge = start_scene_bridge(event_bus, snapshot=lambda: snapshot_message(engine))

    if settings.regions_path.exists():
        loader = RegionLoader(
            settings.regions_path,
            min_distance_km=settings.simplify_min_distance_km,
            delay=settings.regions_load_delay,
        )
        engine.load(loader)
        logger.info(f"Loading regions from {settings.regions_path}")
    else:
        logger.warning(f"Region data not found: {settings.regions_path}")

    yield

    engine.teardown()
    bridge.cancel()
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Interactive region map with focus and relief shading",
    version=VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(map_router)
app.include_router(ws_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": VERSION,
        "system": settings.app_name,
    }


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
