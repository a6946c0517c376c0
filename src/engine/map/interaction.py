"""InteractionController — pointer events on surface shapes.

Turns hover, move, leave and click on a region's surface shape into hover
styling, the floating name label, and select/deselect requests.  It owns
the hover target only; the selection is always read live from the state
machine at event time.  While a region is focused, hover feedback is off.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from engine.map.styles import Role, VisualState, resolve_style
from engine.map.surface import MapSurface, PointerEvent, PointerHandler, PointerKind

if TYPE_CHECKING:
    from engine.map.layers import LayerManager
    from engine.map.selection import SelectionStateMachine
    from engine.regions.region import Region


class InteractionController:
    """Forwards pointer intents; holds no selection state of its own."""

    def __init__(
        self,
        surface: MapSurface,
        layers: LayerManager,
        selection: SelectionStateMachine,
    ) -> None:
        self._surface = surface
        self._layers = layers
        self._selection = selection
        self._hovered: int | None = None
        selection.subscribe(self._on_selection_changed)

    @property
    def hovered_code(self) -> int | None:
        return self._hovered

    def handlers_for(self, region: Region) -> dict[PointerKind, PointerHandler]:
        """Pointer handlers to bind on ``region``'s surface shape."""
        code = region.code
        name = region.name
        return {
            PointerKind.ENTER: lambda event: self.pointer_enter(code, name, event),
            PointerKind.MOVE: lambda event: self.pointer_move(code, event),
            PointerKind.LEAVE: lambda event: self.pointer_leave(code, event),
            PointerKind.CLICK: lambda event: self.click(code, event),
        }

    def pointer_enter(self, code: int, name: str, event: PointerEvent) -> None:
        if self._selection.is_focused:
            return
        self._hovered = code
        self._surface.show_label(name, event.lat, event.lng)
        self._layers.apply_style(code, resolve_style(Role.SURFACE, VisualState.HOVER))
        self._layers.bring_to_front(code)

    def pointer_move(self, code: int, event: PointerEvent) -> None:
        if self._hovered != code:
            return
        self._surface.move_label(event.lat, event.lng)

    def pointer_leave(self, code: int, event: PointerEvent) -> None:
        self._surface.hide_label()
        if self._hovered == code:
            self._hovered = None
        # Leaving the focused shape keeps it selected; other shapes are
        # hidden while focused and must stay hidden.
        if self._selection.is_focused:
            return
        self._layers.reset_shape(code)

    def click(self, code: int, event: PointerEvent | None = None) -> None:
        if self._selection.current_code == code:
            self._selection.deselect()
        else:
            self._selection.select(code)

    def clear_hover(self) -> None:
        self._hovered = None
        self._surface.hide_label()

    def _on_selection_changed(self, region: Region | None) -> None:
        if region is not None:
            self.clear_hover()
