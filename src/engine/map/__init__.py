"""Interactive region map — layered shapes, hover/selection, camera flights."""

from engine.map.engine import MapEngine
from engine.map.interaction import InteractionController
from engine.map.layers import LayerManager
from engine.map.overlays import OverlayLayer, OverlayToggles
from engine.map.selection import CameraSettings, SelectionStateMachine, ViewMode
from engine.map.styles import OverlayKind, Role, StyleDescriptor, VisualState, resolve_style
from engine.map.surface import (
    Bounds,
    Gesture,
    MapSurface,
    PointerEvent,
    PointerKind,
    SceneSurface,
    SurfaceError,
)

__all__ = [
    "Bounds",
    "CameraSettings",
    "Gesture",
    "InteractionController",
    "LayerManager",
    "MapEngine",
    "MapSurface",
    "OverlayKind",
    "OverlayLayer",
    "OverlayToggles",
    "PointerEvent",
    "PointerKind",
    "Role",
    "SceneSurface",
    "SelectionStateMachine",
    "StyleDescriptor",
    "SurfaceError",
    "ViewMode",
    "VisualState",
    "resolve_style",
]
