"""Style resolver — (role, visual state) to style descriptor lookup.

Every valid pair lives in ``STYLE_TABLE``; there is no string building and no
per-shape variation.  Surface fills reference a gradient that fakes a single
light source: dark at the top-left corner, brightening toward a white
highlight at the bottom-right.  Shadows sit on an offset pane underneath.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    SURFACE = "surface"
    SHADOW = "shadow"


class VisualState(str, Enum):
    IDLE = "idle"
    HOVER = "hover"
    SELECTED = "selected"
    HIDDEN = "hidden"


class OverlayKind(str, Enum):
    SUB_REGIONS = "sub_regions"
    WARDS = "wards"
    CONSTITUENCIES = "constituencies"


@dataclass(frozen=True)
class GradientStop:
    offset: str
    color: str


@dataclass(frozen=True)
class GradientDef:
    """Linear gradient from (x1, y1) to (x2, y2), in percent of the shape box."""

    gradient_id: str
    stops: tuple[GradientStop, ...]
    x1: str = "0%"
    y1: str = "0%"
    x2: str = "100%"
    y2: str = "100%"

    @property
    def ref(self) -> str:
        return f"url(#{self.gradient_id})"

    def to_dict(self) -> dict:
        return {
            "id": self.gradient_id,
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "stops": [{"offset": s.offset, "color": s.color} for s in self.stops],
        }


@dataclass(frozen=True)
class StyleDescriptor:
    """Visual attributes applied to one rendered shape.

    ``fill_color`` is always set so a surface without gradient support still
    has something to paint with.
    """

    fill_color: str
    stroke_color: str
    stroke_weight: float
    fill_opacity: float
    stroke_opacity: float = 1.0
    gradient: GradientDef | None = None
    dash_array: str | None = None

    @property
    def visible(self) -> bool:
        return self.fill_opacity > 0 or (self.stroke_opacity > 0 and self.stroke_weight > 0)

    def fill(self, gradients_enabled: bool = True) -> str:
        if self.gradient is not None and gradients_enabled:
            return self.gradient.ref
        return self.fill_color

    def to_dict(self, gradients_enabled: bool = True) -> dict:
        style = {
            "fillColor": self.fill(gradients_enabled),
            "color": self.stroke_color,
            "weight": self.stroke_weight,
            "fillOpacity": self.fill_opacity,
            "opacity": self.stroke_opacity,
        }
        if self.dash_array is not None:
            style["dashArray"] = self.dash_array
        return style


# Main body colours and the slightly darker tone the gradient starts from
SURFACE_COLORS = {
    VisualState.IDLE: ("#FAFAFA", "#F5F5F5"),
    VisualState.HOVER: ("#FFFFFF", "#FAFAFA"),
    VisualState.SELECTED: ("#FFFFFF", "#FAFAFA"),
}


def make_gradient(gradient_id: str, main: str, shadow: str, highlight: float) -> GradientDef:
    """Shadow corner -> body colour -> white highlight corner."""
    return GradientDef(
        gradient_id=gradient_id,
        stops=(
            GradientStop("0%", shadow),
            GradientStop("68%", main),
            GradientStop("80%", f"rgba(255,255,255,{highlight * 0.15:g})"),
            GradientStop("100%", f"rgba(255,255,255,{highlight:g})"),
        ),
    )


BASE_GRADIENT = make_gradient("baseGradient", *SURFACE_COLORS[VisualState.IDLE], 0.675)
HOVER_GRADIENT = make_gradient("hoverGradient", *SURFACE_COLORS[VisualState.HOVER], 0.7)
SELECTED_GRADIENT = make_gradient("selectedGradient", *SURFACE_COLORS[VisualState.SELECTED], 0.7)

GRADIENTS: tuple[GradientDef, ...] = (BASE_GRADIENT, HOVER_GRADIENT, SELECTED_GRADIENT)

_SHADOW_IDLE = StyleDescriptor(
    fill_color="#2d3748",
    stroke_color="#2d3748",
    stroke_weight=0,
    fill_opacity=0.6,
)

STYLE_TABLE: dict[tuple[Role, VisualState], StyleDescriptor] = {
    (Role.SURFACE, VisualState.IDLE): StyleDescriptor(
        fill_color=SURFACE_COLORS[VisualState.IDLE][0],
        stroke_color="#BDBDBD",
        stroke_weight=1.5,
        fill_opacity=1.0,
        gradient=BASE_GRADIENT,
    ),
    (Role.SURFACE, VisualState.HOVER): StyleDescriptor(
        fill_color=SURFACE_COLORS[VisualState.HOVER][0],
        stroke_color="#9E9E9E",
        stroke_weight=3,
        fill_opacity=1.0,
        gradient=HOVER_GRADIENT,
    ),
    (Role.SURFACE, VisualState.SELECTED): StyleDescriptor(
        fill_color=SURFACE_COLORS[VisualState.SELECTED][0],
        stroke_color="#9E9E9E",
        stroke_weight=2.5,
        fill_opacity=1.0,
        gradient=SELECTED_GRADIENT,
    ),
    (Role.SURFACE, VisualState.HIDDEN): StyleDescriptor(
        fill_color=SURFACE_COLORS[VisualState.IDLE][0],
        stroke_color="#BDBDBD",
        stroke_weight=0,
        fill_opacity=0.0,
        stroke_opacity=0.0,
    ),
    (Role.SHADOW, VisualState.IDLE): _SHADOW_IDLE,
    (Role.SHADOW, VisualState.HOVER): _SHADOW_IDLE,
    (Role.SHADOW, VisualState.SELECTED): StyleDescriptor(
        fill_color="#1a202c",
        stroke_color="#1a202c",
        stroke_weight=0,
        fill_opacity=0.75,
    ),
    (Role.SHADOW, VisualState.HIDDEN): StyleDescriptor(
        fill_color="#2d3748",
        stroke_color="#2d3748",
        stroke_weight=0,
        fill_opacity=0.0,
    ),
}

OVERLAY_STYLES: dict[OverlayKind, StyleDescriptor] = {
    OverlayKind.SUB_REGIONS: StyleDescriptor(
        fill_color="#4A5568",
        stroke_color="#4A5568",
        stroke_weight=1.0,
        fill_opacity=0.0,
        stroke_opacity=0.8,
        dash_array="4 4",
    ),
    OverlayKind.WARDS: StyleDescriptor(
        fill_color="#718096",
        stroke_color="#718096",
        stroke_weight=0.75,
        fill_opacity=0.0,
        stroke_opacity=0.7,
        dash_array="2 4",
    ),
    OverlayKind.CONSTITUENCIES: StyleDescriptor(
        fill_color="#2B6CB0",
        stroke_color="#2B6CB0",
        stroke_weight=1.25,
        fill_opacity=0.0,
        stroke_opacity=0.9,
        dash_array="6 3",
    ),
}


def resolve_style(role: Role, state: VisualState) -> StyleDescriptor:
    """Look up the style for a (role, state) pair."""
    return STYLE_TABLE[(Role(role), VisualState(state))]


def overlay_style(kind: OverlayKind) -> StyleDescriptor:
    return OVERLAY_STYLES[OverlayKind(kind)]
