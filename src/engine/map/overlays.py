"""Outline overlays drawn over the focused region.

Three independent toggles (sub-regions, wards, constituencies).  The data
model has no separate boundary sets yet, so each enabled overlay outlines the
selected region's own geometry with its own dashed style.  Overlay shapes are
never interactive and are only present while a region is focused.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import TYPE_CHECKING

from engine.map.styles import OverlayKind, overlay_style
from engine.map.surface import MapSurface, Pane

if TYPE_CHECKING:
    from engine.regions.region import Region

OVERLAY_PANE = "overlays"


@dataclass(frozen=True)
class OverlayToggles:
    sub_regions: bool = False
    wards: bool = False
    constituencies: bool = False

    def enabled(self) -> list[OverlayKind]:
        return [kind for kind in OverlayKind if getattr(self, kind.value)]

    def with_changes(self, **changes: bool | None) -> OverlayToggles:
        """Copy with the given flags changed; None leaves a flag as it is."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_dict(self) -> dict:
        return asdict(self)


def overlay_shape_id(kind: OverlayKind, code: int) -> str:
    return f"overlay:{kind.value}:{code}"


class OverlayLayer:
    """Keeps the overlay shapes in line with the toggles and the selection."""

    def __init__(self, surface: MapSurface, z_index: int = 410) -> None:
        self._surface = surface
        self.pane = Pane(OVERLAY_PANE, z_index=z_index)
        self.toggles = OverlayToggles()
        self._region: Region | None = None
        self._shape_ids: list[str] = []
        self._installed = False

    @property
    def shape_ids(self) -> list[str]:
        return list(self._shape_ids)

    def install(self) -> None:
        if self._installed:
            return
        self._surface.create_pane(self.pane)
        self._installed = True

    def set_toggles(self, toggles: OverlayToggles) -> None:
        self.toggles = toggles
        self.sync()

    def on_selection_changed(self, region: Region | None) -> None:
        self._region = region
        self.sync()

    def sync(self) -> None:
        """Redraw overlay outlines for the current region and toggles."""
        self.install()
        self.clear()
        if self._region is None:
            return
        for kind in self.toggles.enabled():
            shape_id = overlay_shape_id(kind, self._region.code)
            self._surface.add_shape(
                shape_id,
                self._region.geometry,
                overlay_style(kind),
                pane=OVERLAY_PANE,
                interactive=False,
            )
            self._shape_ids.append(shape_id)

    def clear(self) -> None:
        for shape_id in self._shape_ids:
            self._surface.remove_shape(shape_id)
        self._shape_ids.clear()
