"""API routers for the county explorer."""

from app.routers.map import router as map_router
from app.routers.ws import router as ws_router

__all__ = ["map_router", "ws_router"]
