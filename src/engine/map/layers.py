"""LayerManager — owns the surface and shadow shape of every bound region.

Each region is drawn twice: an interactive surface shape, and a
non-interactive shadow copy on a pane translated a few pixels and stacked
just below the surface pane, which reads as a raised relief.

Shapes are created and destroyed wholesale by ``bind()``; afterwards only
their style and interactivity change.  Every per-code operation on a code
that is not bound is a no-op returning False.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Mapping

from loguru import logger

from engine.map.styles import GRADIENTS, Role, StyleDescriptor, VisualState, resolve_style
from engine.map.surface import Bounds, MapSurface, Pane, PointerHandler, PointerKind, SurfaceError

if TYPE_CHECKING:
    from engine.regions.region import Region, RegionCollection

SURFACE_PANE = "regions"
SHADOW_PANE = "regions-shadow"

# Handler factory: region -> pointer handlers for its surface shape
HandlerFactory = Callable[["Region"], Mapping[PointerKind, PointerHandler]]


def surface_shape_id(code: int) -> str:
    return f"region:{code}"


def shadow_shape_id(code: int) -> str:
    return f"shadow:{code}"


@dataclass
class RenderedShape:
    """The pair of live shapes standing for one region."""

    region: Region
    surface_id: str
    shadow_id: str

    @property
    def code(self) -> int:
        return self.region.code


class LayerManager:
    """Creates, restyles and destroys rendered region shapes.

    Args:
        surface: The map surface shapes are drawn on.
        shadow_offset: Pixel translation (x, y) of the shadow pane.
        shadow_z_index: Stacking order of the shadow pane.
        surface_z_index: Stacking order of the surface pane.
    """

    def __init__(
        self,
        surface: MapSurface,
        shadow_offset: tuple[int, int] = (-3, -5),
        shadow_z_index: int = 399,
        surface_z_index: int = 400,
    ) -> None:
        self._surface = surface
        self._shapes: dict[int, RenderedShape] = {}
        self._collection: RegionCollection | None = None
        self.surface_pane = Pane(SURFACE_PANE, z_index=surface_z_index)
        self.shadow_pane = Pane(SHADOW_PANE, z_index=shadow_z_index, offset=shadow_offset)
        self.gradients_installed = False
        self._installed = False

    def install(self) -> None:
        """Create the panes and gradient definitions.  Runs once.

        A renderer that rejects the gradients still works with flat fills,
        so that failure is logged and swallowed.
        """
        if self._installed:
            return
        self._surface.create_pane(self.shadow_pane)
        self._surface.create_pane(self.surface_pane)
        try:
            self._surface.install_gradients(GRADIENTS)
            self.gradients_installed = True
        except SurfaceError as e:
            logger.warning(f"Could not install gradient definitions, using flat fills: {e}")
        self._installed = True

    # -- binding -----------------------------------------------------------

    @property
    def collection(self) -> RegionCollection | None:
        return self._collection

    def bind(self, collection: RegionCollection, handlers_for: HandlerFactory | None = None) -> int:
        """Replace all shapes with fresh ones for ``collection``.

        Shadows are added first so each surface shape sits over its shadow.
        Returns the number of regions bound.
        """
        self.install()
        self.clear()
        for region in collection:
            shape = RenderedShape(
                region=region,
                surface_id=surface_shape_id(region.code),
                shadow_id=shadow_shape_id(region.code),
            )
            self._surface.add_shape(
                shape.shadow_id,
                region.geometry,
                resolve_style(Role.SHADOW, VisualState.IDLE),
                pane=SHADOW_PANE,
                interactive=False,
            )
            self._surface.add_shape(
                shape.surface_id,
                region.geometry,
                resolve_style(Role.SURFACE, VisualState.IDLE),
                pane=SURFACE_PANE,
                interactive=True,
            )
            if handlers_for is not None:
                self._surface.bind_events(shape.surface_id, handlers_for(region))
            self._shapes[region.code] = shape
        self._collection = collection
        logger.info(f"Bound {len(self._shapes)} regions to the map")
        return len(self._shapes)

    def clear(self) -> None:
        """Unbind pointer handlers and remove every shape."""
        for shape in self._shapes.values():
            self._surface.unbind_events(shape.surface_id)
            self._surface.remove_shape(shape.surface_id)
            self._surface.remove_shape(shape.shadow_id)
        self._shapes.clear()
        self._collection = None

    # -- lookup ------------------------------------------------------------

    def __contains__(self, code: object) -> bool:
        return code in self._shapes

    def __len__(self) -> int:
        return len(self._shapes)

    @property
    def codes(self) -> list[int]:
        return list(self._shapes)

    def shape(self, code: int) -> RenderedShape | None:
        return self._shapes.get(code)

    def region(self, code: int) -> Region | None:
        shape = self._shapes.get(code)
        return shape.region if shape else None

    def bounds_of(self, code: int) -> Bounds | None:
        shape = self._shapes.get(code)
        if shape is None:
            return None
        return self._surface.shape_bounds(shape.surface_id)

    # -- styling -----------------------------------------------------------

    def apply_style(self, code: int, style: StyleDescriptor) -> bool:
        shape = self._shapes.get(code)
        if shape is None:
            return False
        self._surface.set_style(shape.surface_id, style)
        return True

    def apply_shadow_style(self, code: int, style: StyleDescriptor) -> bool:
        shape = self._shapes.get(code)
        if shape is None:
            return False
        self._surface.set_style(shape.shadow_id, style)
        return True

    def set_interactive(self, code: int, interactive: bool) -> bool:
        shape = self._shapes.get(code)
        if shape is None:
            return False
        self._surface.set_interactive(shape.surface_id, interactive)
        return True

    def bring_to_front(self, code: int) -> bool:
        shape = self._shapes.get(code)
        if shape is None:
            return False
        self._surface.bring_to_front(shape.surface_id)
        return True

    def reset_shape(self, code: int) -> bool:
        """Restore one surface shape to its idle style."""
        return self.apply_style(code, resolve_style(Role.SURFACE, VisualState.IDLE))

    def reset_all(self) -> None:
        """Idle style and pointer interactivity back on every surface and shadow."""
        surface_idle = resolve_style(Role.SURFACE, VisualState.IDLE)
        shadow_idle = resolve_style(Role.SHADOW, VisualState.IDLE)
        for code in self._shapes:
            self.apply_style(code, surface_idle)
            self.set_interactive(code, True)
            self.apply_shadow_style(code, shadow_idle)
