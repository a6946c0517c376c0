"""SelectionStateMachine — overview / focused view of the region map.

Two states only:

    overview          no region selected; every shape idle and interactive,
                      all navigation gestures enabled, camera on the default
                      view.
    focused(code)     one region selected; it is drawn "selected" and raised,
                      every other surface shape is transparent and ignores the
                      pointer, shadows follow suit, gestures are disabled and
                      the camera fits the region.

``select(code)`` on the focused code toggles back to overview.  ``select`` of
another code while focused refocuses directly (single transition, single
camera request).  Each transition issues exactly one fresh camera request;
interrupting an in-flight flight is the surface's job.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from loguru import logger

from engine.map.styles import Role, VisualState, resolve_style
from engine.map.surface import Gesture, MapSurface

if TYPE_CHECKING:
    from engine.map.layers import LayerManager
    from engine.regions.region import Region

SelectionListener = Callable[["Region | None"], None]

# Most recent transitions kept in ``SelectionStateMachine.history``.
HISTORY_LIMIT = 100


class ViewMode(str, Enum):
    OVERVIEW = "overview"
    FOCUSED = "focused"


@dataclass(frozen=True)
class CameraSettings:
    """Default view and flight parameters."""

    default_center: tuple[float, float] = (0.0236, 37.9062)
    default_zoom: float = 6
    duration: float = 1.2
    ease_linearity: float = 0.5
    padding: tuple[int, int] = (50, 50)


@dataclass(frozen=True)
class Transition:
    source: ViewMode
    target: ViewMode
    code: int | None


class SelectionStateMachine:
    """Holds the current selection and drives styling, gestures and camera.

    Args:
        surface: Map surface for gestures and camera flights.
        layers: Layer manager holding the rendered shapes.
        camera: Default view and flight parameters.
        on_change: Outbound callback, called with the selected Region or None
            after internal listeners have run.
    """

    def __init__(
        self,
        surface: MapSurface,
        layers: LayerManager,
        camera: CameraSettings | None = None,
        on_change: SelectionListener | None = None,
    ) -> None:
        self._surface = surface
        self._layers = layers
        self.camera = camera or CameraSettings()
        self.on_change = on_change
        self._listeners: list[SelectionListener] = []
        self._code: int | None = None
        self.history: deque[Transition] = deque(maxlen=HISTORY_LIMIT)

    # -- state -------------------------------------------------------------

    @property
    def current_code(self) -> int | None:
        return self._code

    @property
    def current(self) -> Region | None:
        if self._code is None:
            return None
        return self._layers.region(self._code)

    @property
    def mode(self) -> ViewMode:
        return ViewMode.OVERVIEW if self._code is None else ViewMode.FOCUSED

    @property
    def is_focused(self) -> bool:
        return self._code is not None

    def subscribe(self, listener: SelectionListener) -> None:
        """Register an internal listener; runs before ``on_change``."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SelectionListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    # -- transitions -------------------------------------------------------

    def select(self, code: int) -> ViewMode:
        """Focus ``code``; selecting the focused code returns to overview.

        Codes that are not bound are ignored.
        """
        if code == self._code:
            return self.deselect()
        region = self._layers.region(code)
        if region is None:
            logger.warning(f"Ignoring selection of unknown region code {code}")
            return self.mode

        source = self.mode
        self._code = code
        self._apply_focus(code)
        self._record(source, ViewMode.FOCUSED, code)
        self._notify(region)

        bounds = self._layers.bounds_of(code)
        if bounds is not None:
            self._surface.fly_to_bounds(
                bounds,
                padding=self.camera.padding,
                duration=self.camera.duration,
                ease_linearity=self.camera.ease_linearity,
            )
        return self.mode

    def deselect(self) -> ViewMode:
        """Return to overview.  A no-op when nothing is selected."""
        if self._code is None:
            return self.mode
        code = self._code
        self._code = None
        self._apply_overview()
        self._record(ViewMode.FOCUSED, ViewMode.OVERVIEW, code)
        self._notify(None)
        self._fly_home()
        return self.mode

    def refresh(self) -> None:
        """Re-apply state after the layer manager was rebound.

        A selection whose region is gone falls back to overview.  One that
        survives is re-focused and listeners get the Region of the new
        collection.
        """
        if self._code is None:
            return
        if self._code not in self._layers:
            logger.info(f"Selected region {self._code} is no longer bound, back to overview")
            self.deselect()
            return
        self._apply_focus(self._code)
        self._notify(self._layers.region(self._code))

    # -- internals ---------------------------------------------------------

    def _apply_focus(self, code: int) -> None:
        selected = resolve_style(Role.SURFACE, VisualState.SELECTED)
        hidden = resolve_style(Role.SURFACE, VisualState.HIDDEN)
        shadow_selected = resolve_style(Role.SHADOW, VisualState.SELECTED)
        shadow_hidden = resolve_style(Role.SHADOW, VisualState.HIDDEN)

        for other in self._layers.codes:
            if other == code:
                continue
            self._layers.apply_style(other, hidden)
            self._layers.set_interactive(other, False)
            self._layers.apply_shadow_style(other, shadow_hidden)

        self._layers.apply_style(code, selected)
        self._layers.set_interactive(code, True)
        self._layers.bring_to_front(code)
        self._layers.apply_shadow_style(code, shadow_selected)

        for gesture in Gesture:
            self._surface.set_gesture_enabled(gesture, False)

    def _apply_overview(self) -> None:
        self._layers.reset_all()
        for gesture in Gesture:
            self._surface.set_gesture_enabled(gesture, True)

    def _fly_home(self) -> None:
        self._surface.fly_to(
            self.camera.default_center,
            self.camera.default_zoom,
            duration=self.camera.duration,
            ease_linearity=self.camera.ease_linearity,
        )

    def _record(self, source: ViewMode, target: ViewMode, code: int | None) -> None:
        self.history.append(Transition(source, target, code))
        logger.debug(f"Selection: {source.value} -> {target.value} ({code})")

    def _notify(self, region: Region | None) -> None:
        for listener in list(self._listeners):
            listener(region)
        if self.on_change is not None:
            self.on_change(region)
