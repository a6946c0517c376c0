"""Tests for engine.map.layers — surface and shadow shapes per region."""

import pytest

from engine.map.layers import (
    SHADOW_PANE,
    SURFACE_PANE,
    LayerManager,
    shadow_shape_id,
    surface_shape_id,
)
from engine.map.styles import Role, VisualState, resolve_style
from engine.map.surface import PointerKind, SceneSurface
from engine.regions.region import RegionCollection


pytestmark = pytest.mark.unit


class RecordingSurface(SceneSurface):
    """SceneSurface that remembers which shapes had their handlers unbound."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.unbound: list[str] = []

    def unbind_events(self, shape_id):
        self.unbound.append(shape_id)
        super().unbind_events(shape_id)


def _handlers(region):
    return {kind: (lambda event: None) for kind in PointerKind}


class TestInstall:
    def test_panes_created_with_offset_and_order(self, surface):
        layers = LayerManager(surface)
        layers.install()
        shadow = surface.get_pane(SHADOW_PANE)
        regions = surface.get_pane(SURFACE_PANE)
        assert shadow.offset == (-3, -5)
        assert shadow.z_index < regions.z_index
        assert layers.gradients_installed
        assert surface.gradients_enabled

    def test_install_runs_once(self, surface):
        layers = LayerManager(surface, shadow_offset=(2, 2))
        layers.install()
        layers.install()
        assert surface.get_pane(SHADOW_PANE).offset == (2, 2)

    def test_gradient_failure_falls_back_to_flat_fill(self, regions):
        surface = SceneSurface(supports_gradients=False)
        layers = LayerManager(surface)
        assert layers.bind(regions) == 3
        assert not layers.gradients_installed
        shape = surface.snapshot()["shapes"][-1]
        assert shape["style"]["fillColor"] == "#FAFAFA"


class TestBind:
    def test_two_shapes_per_region(self, surface, regions):
        layers = LayerManager(surface)
        assert layers.bind(regions, _handlers) == 3
        assert len(layers) == 3
        assert layers.codes == [1, 2, 47]
        assert layers.collection is regions
        for code in regions.codes:
            assert surface.pane_of(surface_shape_id(code)) == SURFACE_PANE
            assert surface.pane_of(shadow_shape_id(code)) == SHADOW_PANE
            assert surface.is_interactive(surface_shape_id(code))
            assert not surface.is_interactive(shadow_shape_id(code))
            assert surface.handler_count(surface_shape_id(code)) == 4
            assert surface.handler_count(shadow_shape_id(code)) == 0

    def test_initial_styles(self, surface, regions):
        layers = LayerManager(surface)
        layers.bind(regions)
        assert surface.style_of("region:47") == resolve_style(Role.SURFACE, VisualState.IDLE)
        assert surface.style_of("shadow:47") == resolve_style(Role.SHADOW, VisualState.IDLE)

    def test_rebind_replaces_shapes_and_unbinds_handlers(self, make_region, regions):
        surface = RecordingSurface()
        layers = LayerManager(surface)
        layers.bind(regions, _handlers)

        replacement = RegionCollection([make_region(1), make_region(3)])
        layers.bind(replacement, _handlers)

        assert set(surface.unbound) == {"region:1", "region:2", "region:47"}
        assert not surface.has_shape("region:47")
        assert not surface.has_shape("shadow:47")
        assert surface.has_shape("region:3")
        assert layers.codes == [1, 3]

    def test_clear(self, surface, regions):
        layers = LayerManager(surface)
        layers.bind(regions, _handlers)
        layers.clear()
        assert len(layers) == 0
        assert layers.collection is None
        assert surface.shape_ids == []


class TestPerCodeOperations:
    def test_unknown_code_is_noop(self, surface, regions):
        layers = LayerManager(surface)
        layers.bind(regions)
        hover = resolve_style(Role.SURFACE, VisualState.HOVER)
        assert layers.apply_style(99, hover) is False
        assert layers.apply_shadow_style(99, hover) is False
        assert layers.set_interactive(99, False) is False
        assert layers.bring_to_front(99) is False
        assert layers.reset_shape(99) is False
        assert layers.bounds_of(99) is None
        assert layers.region(99) is None
        assert layers.shape(99) is None

    def test_bring_to_front(self, surface, regions):
        layers = LayerManager(surface)
        layers.bind(regions)
        assert layers.bring_to_front(1)
        assert surface.z_order(SURFACE_PANE)[-1] == "region:1"

    def test_bounds_of(self, surface, regions):
        layers = LayerManager(surface)
        layers.bind(regions)
        bounds = layers.bounds_of(47)
        assert bounds.west == pytest.approx(36.72)
        assert bounds.east == pytest.approx(36.92)

    def test_reset_all(self, surface, regions):
        layers = LayerManager(surface)
        layers.bind(regions)
        hidden = resolve_style(Role.SURFACE, VisualState.HIDDEN)
        for code in regions.codes:
            layers.apply_style(code, hidden)
            layers.set_interactive(code, False)
            layers.apply_shadow_style(code, resolve_style(Role.SHADOW, VisualState.HIDDEN))

        layers.reset_all()

        for code in regions.codes:
            assert surface.style_of(surface_shape_id(code)) == resolve_style(Role.SURFACE, VisualState.IDLE)
            assert surface.style_of(shadow_shape_id(code)) == resolve_style(Role.SHADOW, VisualState.IDLE)
            assert surface.is_interactive(surface_shape_id(code))
