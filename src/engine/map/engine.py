"""MapEngine — wires surface, layers, interaction, selection and overlays.

The engine owns exactly one map surface for its whole life: panes and
gradient definitions are installed at construction, region collections are
bound and rebound as they arrive, and ``teardown()`` releases everything
once.  Nothing reads global state; all collaborators are injected.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from loguru import logger

from engine.map.interaction import InteractionController
from engine.map.layers import LayerManager
from engine.map.overlays import OverlayLayer, OverlayToggles
from engine.map.selection import CameraSettings, SelectionListener, SelectionStateMachine, ViewMode
from engine.map.surface import MapSurface

if TYPE_CHECKING:
    from engine.regions.loader import RegionLoader
    from engine.regions.region import Region, RegionCollection


class MapEngine:
    """Interactive region map: render, hover, select, animate.

    Args:
        surface: The rendering collaborator; torn down with the engine.
        camera: Default view and flight parameters.
        on_selection_change: Called with the selected Region, or None when
            the map returns to overview.
        shadow_offset: Pixel translation of the shadow pane.
        shadow_z_index: Stacking order of the shadow pane.
        surface_z_index: Stacking order of the region pane.
        overlay_z_index: Stacking order of the overlay pane.
    """

    def __init__(
        self,
        surface: MapSurface,
        camera: CameraSettings | None = None,
        on_selection_change: SelectionListener | None = None,
        shadow_offset: tuple[int, int] = (-3, -5),
        shadow_z_index: int = 399,
        surface_z_index: int = 400,
        overlay_z_index: int = 410,
    ) -> None:
        self.surface = surface
        self.layers = LayerManager(
            surface,
            shadow_offset=shadow_offset,
            shadow_z_index=shadow_z_index,
            surface_z_index=surface_z_index,
        )
        self.selection = SelectionStateMachine(
            surface, self.layers, camera=camera, on_change=on_selection_change
        )
        self.interaction = InteractionController(surface, self.layers, self.selection)
        self.overlays = OverlayLayer(surface, z_index=overlay_z_index)
        self.selection.subscribe(self.overlays.on_selection_changed)

        self.layers.install()
        self.overlays.install()

        self._loader: RegionLoader | None = None
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise RuntimeError("MapEngine has been torn down")

    # -- data --------------------------------------------------------------

    @property
    def collection(self) -> RegionCollection | None:
        return self.layers.collection

    @property
    def loaded(self) -> bool:
        return self.layers.collection is not None

    def bind(self, collection: RegionCollection) -> bool:
        """Render ``collection``, replacing whatever was bound before.

        Binding the collection that is already bound does nothing and
        returns False.
        """
        self._check_open()
        if collection is self.layers.collection:
            return False
        self.interaction.clear_hover()
        self.layers.bind(collection, self.interaction.handlers_for)
        self.selection.refresh()
        return True

    def load(self, loader: RegionLoader) -> asyncio.Task:
        """Start ``loader`` and bind its collection when it completes."""
        self._check_open()
        self._loader = loader
        return loader.start(self.bind)

    # -- selection ---------------------------------------------------------

    @property
    def mode(self) -> ViewMode:
        return self.selection.mode

    @property
    def selected(self) -> Region | None:
        return self.selection.current

    def select(self, code: int) -> ViewMode:
        self._check_open()
        return self.selection.select(code)

    def deselect(self) -> ViewMode:
        self._check_open()
        return self.selection.deselect()

    def set_overlays(
        self,
        sub_regions: bool | None = None,
        wards: bool | None = None,
        constituencies: bool | None = None,
    ) -> OverlayToggles:
        """Change overlay toggles; None leaves a toggle unchanged."""
        self._check_open()
        toggles = self.overlays.toggles.with_changes(
            sub_regions=sub_regions, wards=wards, constituencies=constituencies
        )
        self.overlays.set_toggles(toggles)
        return toggles

    def state(self) -> dict:
        collection = self.layers.collection
        return {
            "mode": self.mode.value,
            "selected_code": self.selection.current_code,
            "hovered_code": self.interaction.hovered_code,
            "overlays": self.overlays.toggles.to_dict(),
            "loaded": collection is not None,
            "region_count": len(collection) if collection is not None else 0,
        }

    # -- lifecycle ---------------------------------------------------------

    def teardown(self) -> None:
        """Cancel a pending load, remove all shapes and handlers, release the surface."""
        if self.closed:
            return
        if self._loader is not None and self._loader.cancel():
            logger.info("Pending region load cancelled")
        self.selection.unsubscribe(self.overlays.on_selection_changed)
        self.overlays.clear()
        self.layers.clear()
        self.surface.teardown()
        self.closed = True
        logger.info("Map engine torn down")
