"""Map surface — the capability surface of the map rendering collaborator.

``MapSurface`` lists what the engine needs from a slippy-map library: panes
with a pixel offset and z-order, polygon shapes with per-shape styling and
pointer bindings, bounds, camera flights, gesture switches and a floating
label.

``SceneSurface`` is the server-side implementation.  It keeps the live scene
in memory and publishes every mutation on the EventBus as a command that a
browser client replays onto its own map.  Pointer events travel the other
way through ``dispatch()``.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Sequence

from engine.map.styles import GradientDef, StyleDescriptor

if TYPE_CHECKING:
    from engine.comms.event_bus import EventBus

SURFACE_TOPIC = "surface"


class SurfaceError(Exception):
    """Raised when the rendering collaborator cannot honour a request."""


class Gesture(str, Enum):
    DRAGGING = "dragging"
    TOUCH_ZOOM = "touch_zoom"
    DOUBLE_CLICK_ZOOM = "double_click_zoom"
    SCROLL_WHEEL_ZOOM = "scroll_wheel_zoom"
    BOX_ZOOM = "box_zoom"


class PointerKind(str, Enum):
    ENTER = "pointer_enter"
    LEAVE = "pointer_leave"
    MOVE = "pointer_move"
    CLICK = "click"


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event on one shape, at a geographic position."""

    kind: PointerKind
    shape_id: str
    lat: float = 0.0
    lng: float = 0.0


PointerHandler = Callable[[PointerEvent], None]


@dataclass(frozen=True)
class Bounds:
    """Geographic bounding box in degrees."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_positions(cls, positions: Iterable[Sequence[float]]) -> Bounds | None:
        lngs: list[float] = []
        lats: list[float] = []
        for position in positions:
            lngs.append(position[0])
            lats.append(position[1])
        if not lngs:
            return None
        return cls(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))

    @classmethod
    def from_geometry(cls, geometry: Mapping) -> Bounds | None:
        """Bounds of any GeoJSON geometry, None when it has no positions."""
        return cls.from_positions(_iter_positions(geometry.get("coordinates")))

    def to_list(self) -> list[list[float]]:
        """[[south, west], [north, east]], the corner order map clients expect."""
        return [[self.south, self.west], [self.north, self.east]]


def _iter_positions(node):
    if not node:
        return
    if isinstance(node[0], (int, float)):
        yield node
        return
    for child in node:
        yield from _iter_positions(child)


@dataclass(frozen=True)
class Pane:
    """A draw layer with its own stacking order and pixel translation."""

    name: str
    z_index: int = 400
    offset: tuple[int, int] = (0, 0)

    def to_dict(self) -> dict:
        return {"name": self.name, "z_index": self.z_index, "offset": list(self.offset)}


@dataclass(frozen=True)
class CameraRequest:
    """One viewport animation.  A newer request always interrupts an older one."""

    animation_id: int
    target: str  # "bounds" or "center"
    duration: float
    ease_linearity: float
    bounds: Bounds | None = None
    padding: tuple[int, int] = (0, 0)
    center: tuple[float, float] | None = None
    zoom: float | None = None

    def to_dict(self) -> dict:
        data = {
            "animation_id": self.animation_id,
            "target": self.target,
            "duration": self.duration,
            "ease_linearity": self.ease_linearity,
        }
        if self.bounds is not None:
            data["bounds"] = self.bounds.to_list()
            data["padding"] = list(self.padding)
        if self.center is not None:
            data["center"] = list(self.center)
            data["zoom"] = self.zoom
        return data


@dataclass
class Label:
    text: str
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"text": self.text, "lat": self.lat, "lng": self.lng}


class MapSurface(ABC):
    """Operations the engine needs from a map rendering library."""

    @abstractmethod
    def create_pane(self, pane: Pane) -> None:
        """Create a draw pane; re-creating an existing pane replaces its settings."""

    @abstractmethod
    def install_gradients(self, gradients: Sequence[GradientDef]) -> None:
        """Attach gradient definitions.  Raises SurfaceError if unsupported."""

    @abstractmethod
    def add_shape(
        self,
        shape_id: str,
        geometry: dict,
        style: StyleDescriptor,
        pane: str,
        interactive: bool = True,
    ) -> None:
        """Render a polygonal geometry on ``pane``, on top of that pane."""

    @abstractmethod
    def remove_shape(self, shape_id: str) -> None:
        """Remove a shape and any pointer bindings it still has."""

    @abstractmethod
    def set_style(self, shape_id: str, style: StyleDescriptor) -> None: ...

    @abstractmethod
    def set_interactive(self, shape_id: str, interactive: bool) -> None: ...

    @abstractmethod
    def bring_to_front(self, shape_id: str) -> None: ...

    @abstractmethod
    def shape_bounds(self, shape_id: str) -> Bounds | None: ...

    @abstractmethod
    def bind_events(self, shape_id: str, handlers: Mapping[PointerKind, PointerHandler]) -> None: ...

    @abstractmethod
    def unbind_events(self, shape_id: str) -> None: ...

    @abstractmethod
    def fly_to_bounds(
        self,
        bounds: Bounds,
        padding: tuple[int, int],
        duration: float,
        ease_linearity: float,
    ) -> CameraRequest: ...

    @abstractmethod
    def fly_to(
        self,
        center: tuple[float, float],
        zoom: float,
        duration: float,
        ease_linearity: float,
    ) -> CameraRequest: ...

    @abstractmethod
    def set_gesture_enabled(self, gesture: Gesture, enabled: bool) -> None: ...

    @abstractmethod
    def show_label(self, text: str, lat: float, lng: float) -> None: ...

    @abstractmethod
    def move_label(self, lat: float, lng: float) -> None: ...

    @abstractmethod
    def hide_label(self) -> None: ...

    @abstractmethod
    def teardown(self) -> None:
        """Release the map.  Safe to call more than once."""


@dataclass
class _SceneShape:
    shape_id: str
    geometry: dict
    pane: str
    style: StyleDescriptor
    interactive: bool
    handlers: dict[PointerKind, PointerHandler] = field(default_factory=dict)


class SceneSurface(MapSurface):
    """In-memory scene that mirrors itself to clients through the EventBus.

    Args:
        center: Initial (lat, lng) of the viewport.
        zoom: Initial zoom level.
        event_bus: Where commands are published; None keeps the scene local.
        supports_gradients: False emulates a renderer without SVG
            definitions; ``install_gradients`` then raises SurfaceError.
    """

    def __init__(
        self,
        center: tuple[float, float] = (0.0, 0.0),
        zoom: float = 6,
        event_bus: EventBus | None = None,
        supports_gradients: bool = True,
    ) -> None:
        self.center = center
        self.zoom = zoom
        self._bus = event_bus
        self._supports_gradients = supports_gradients
        self._panes: dict[str, Pane] = {}
        self._shapes: dict[str, _SceneShape] = {}
        self._order: dict[str, list[str]] = {}
        self._gestures: dict[Gesture, bool] = {g: True for g in Gesture}
        self._gradients: tuple[GradientDef, ...] = ()
        self._animation_ids = itertools.count(1)
        self.label: Label | None = None
        self.camera: CameraRequest | None = None
        self.closed = False

    # -- helpers -----------------------------------------------------------

    def _emit(self, op: str, **payload) -> None:
        if self._bus is not None:
            self._bus.publish(SURFACE_TOPIC, {"op": op, **payload})

    def _check_open(self) -> None:
        if self.closed:
            raise SurfaceError("Map surface has been torn down")

    def _shape(self, shape_id: str) -> _SceneShape:
        shape = self._shapes.get(shape_id)
        if shape is None:
            raise KeyError(f"Shape not found: {shape_id}")
        return shape

    @property
    def gradients_enabled(self) -> bool:
        return bool(self._gradients)

    def _style_dict(self, style: StyleDescriptor) -> dict:
        return style.to_dict(self.gradients_enabled)

    # -- MapSurface --------------------------------------------------------

    def create_pane(self, pane: Pane) -> None:
        self._check_open()
        self._panes[pane.name] = pane
        self._order.setdefault(pane.name, [])
        self._emit("create_pane", pane=pane.to_dict())

    def install_gradients(self, gradients: Sequence[GradientDef]) -> None:
        self._check_open()
        if not self._supports_gradients:
            raise SurfaceError("Renderer does not accept gradient definitions")
        self._gradients = tuple(gradients)
        self._emit("install_gradients", gradients=[g.to_dict() for g in self._gradients])

    def add_shape(
        self,
        shape_id: str,
        geometry: dict,
        style: StyleDescriptor,
        pane: str,
        interactive: bool = True,
    ) -> None:
        self._check_open()
        if pane not in self._panes:
            raise SurfaceError(f"Unknown pane: {pane}")
        if shape_id in self._shapes:
            raise SurfaceError(f"Shape already exists: {shape_id}")
        self._shapes[shape_id] = _SceneShape(shape_id, geometry, pane, style, interactive)
        self._order[pane].append(shape_id)
        self._emit(
            "add_shape",
            shape_id=shape_id,
            geometry=geometry,
            style=self._style_dict(style),
            pane=pane,
            interactive=interactive,
        )

    def remove_shape(self, shape_id: str) -> None:
        self._check_open()
        shape = self._shapes.pop(shape_id, None)
        if shape is None:
            return
        shape.handlers.clear()
        self._order[shape.pane].remove(shape_id)
        self._emit("remove_shape", shape_id=shape_id)

    def set_style(self, shape_id: str, style: StyleDescriptor) -> None:
        self._check_open()
        self._shape(shape_id).style = style
        self._emit("set_style", shape_id=shape_id, style=self._style_dict(style))

    def set_interactive(self, shape_id: str, interactive: bool) -> None:
        self._check_open()
        self._shape(shape_id).interactive = interactive
        self._emit("set_interactive", shape_id=shape_id, interactive=interactive)

    def bring_to_front(self, shape_id: str) -> None:
        self._check_open()
        shape = self._shape(shape_id)
        order = self._order[shape.pane]
        order.remove(shape_id)
        order.append(shape_id)
        self._emit("bring_to_front", shape_id=shape_id)

    def shape_bounds(self, shape_id: str) -> Bounds | None:
        return Bounds.from_geometry(self._shape(shape_id).geometry)

    def bind_events(self, shape_id: str, handlers: Mapping[PointerKind, PointerHandler]) -> None:
        self._check_open()
        self._shape(shape_id).handlers = {PointerKind(k): h for k, h in handlers.items()}

    def unbind_events(self, shape_id: str) -> None:
        shape = self._shapes.get(shape_id)
        if shape is not None:
            shape.handlers.clear()

    def fly_to_bounds(
        self,
        bounds: Bounds,
        padding: tuple[int, int],
        duration: float,
        ease_linearity: float,
    ) -> CameraRequest:
        self._check_open()
        self.camera = CameraRequest(
            animation_id=next(self._animation_ids),
            target="bounds",
            duration=duration,
            ease_linearity=ease_linearity,
            bounds=bounds,
            padding=padding,
        )
        self._emit("fly", camera=self.camera.to_dict())
        return self.camera

    def fly_to(
        self,
        center: tuple[float, float],
        zoom: float,
        duration: float,
        ease_linearity: float,
    ) -> CameraRequest:
        self._check_open()
        self.camera = CameraRequest(
            animation_id=next(self._animation_ids),
            target="center",
            duration=duration,
            ease_linearity=ease_linearity,
            center=center,
            zoom=zoom,
        )
        self.center = center
        self.zoom = zoom
        self._emit("fly", camera=self.camera.to_dict())
        return self.camera

    def set_gesture_enabled(self, gesture: Gesture, enabled: bool) -> None:
        self._check_open()
        gesture = Gesture(gesture)
        self._gestures[gesture] = enabled
        self._emit("set_gesture", gesture=gesture.value, enabled=enabled)

    def show_label(self, text: str, lat: float, lng: float) -> None:
        self._check_open()
        self.label = Label(text, lat, lng)
        self._emit("show_label", label=self.label.to_dict())

    def move_label(self, lat: float, lng: float) -> None:
        self._check_open()
        if self.label is None:
            return
        self.label.lat = lat
        self.label.lng = lng
        self._emit("move_label", lat=lat, lng=lng)

    def hide_label(self) -> None:
        self._check_open()
        if self.label is None:
            return
        self.label = None
        self._emit("hide_label")

    def teardown(self) -> None:
        if self.closed:
            return
        for shape in self._shapes.values():
            shape.handlers.clear()
        self._shapes.clear()
        self._order.clear()
        self.label = None
        self.closed = True
        self._emit("teardown")

    # -- client side -------------------------------------------------------

    def dispatch(self, event: PointerEvent) -> bool:
        """Route a client pointer event to the handler bound on its shape.

        Events for unknown or non-interactive shapes, or kinds without a
        handler, are dropped.  Returns True if a handler ran.
        """
        if self.closed:
            return False
        shape = self._shapes.get(event.shape_id)
        if shape is None or not shape.interactive:
            return False
        handler = shape.handlers.get(PointerKind(event.kind))
        if handler is None:
            return False
        handler(event)
        return True

    def snapshot(self) -> dict:
        """The whole scene, for clients connecting mid-session."""
        shapes = []
        for pane in sorted(self._panes.values(), key=lambda p: p.z_index):
            for shape_id in self._order.get(pane.name, []):
                shape = self._shapes[shape_id]
                shapes.append({
                    "shape_id": shape_id,
                    "pane": shape.pane,
                    "geometry": shape.geometry,
                    "style": self._style_dict(shape.style),
                    "interactive": shape.interactive,
                })
        return {
            "center": list(self.center),
            "zoom": self.zoom,
            "panes": [p.to_dict() for p in self._panes.values()],
            "gradients": [g.to_dict() for g in self._gradients],
            "shapes": shapes,
            "gestures": {g.value: enabled for g, enabled in self._gestures.items()},
            "label": self.label.to_dict() if self.label else None,
            "camera": self.camera.to_dict() if self.camera else None,
        }

    # -- inspection --------------------------------------------------------

    def has_shape(self, shape_id: str) -> bool:
        return shape_id in self._shapes

    @property
    def shape_ids(self) -> list[str]:
        return list(self._shapes)

    def style_of(self, shape_id: str) -> StyleDescriptor:
        return self._shape(shape_id).style

    def is_interactive(self, shape_id: str) -> bool:
        return self._shape(shape_id).interactive

    def pane_of(self, shape_id: str) -> str:
        return self._shape(shape_id).pane

    def handler_count(self, shape_id: str) -> int:
        shape = self._shapes.get(shape_id)
        return len(shape.handlers) if shape else 0

    def z_order(self, pane: str) -> list[str]:
        """Shape ids on ``pane``, bottom to top."""
        return list(self._order.get(pane, []))

    def get_pane(self, name: str) -> Pane | None:
        return self._panes.get(name)

    def gesture_enabled(self, gesture: Gesture) -> bool:
        return self._gestures[Gesture(gesture)]

    @property
    def gestures(self) -> dict[Gesture, bool]:
        return dict(self._gestures)
