"""Tests for engine.map.engine — wiring, rebinding and lifecycle."""

import asyncio
from pathlib import Path

import pytest

from engine.map.engine import MapEngine
from engine.map.selection import CameraSettings, ViewMode
from engine.map.surface import PointerEvent, PointerKind, SceneSurface
from engine.regions.loader import RegionLoader
from engine.regions.region import RegionCollection


pytestmark = pytest.mark.unit

SAMPLE = Path(__file__).parents[3] / "data" / "counties.geojson"


class TestConstruction:
    def test_panes_installed_up_front(self, surface):
        MapEngine(surface)
        assert surface.get_pane("regions") is not None
        assert surface.get_pane("regions-shadow") is not None
        assert surface.get_pane("overlays") is not None

    def test_custom_pane_settings(self, surface):
        MapEngine(surface, shadow_offset=(-1, -2), shadow_z_index=300, surface_z_index=301)
        assert surface.get_pane("regions-shadow").offset == (-1, -2)
        assert surface.get_pane("regions-shadow").z_index == 300
        assert surface.get_pane("regions").z_index == 301

    def test_state_before_load(self, surface):
        eng = MapEngine(surface)
        assert not eng.loaded
        assert eng.state() == {
            "mode": "overview",
            "selected_code": None,
            "hovered_code": None,
            "overlays": {"sub_regions": False, "wards": False, "constituencies": False},
            "loaded": False,
            "region_count": 0,
        }

    def test_select_before_load_is_ignored(self, surface):
        eng = MapEngine(surface)
        assert eng.select(47) == ViewMode.OVERVIEW


class TestBind:
    def test_bind(self, engine, regions):
        assert engine.loaded
        assert engine.collection is regions
        assert engine.state()["region_count"] == 3

    def test_rebinding_same_collection_is_noop(self, engine, surface, regions):
        engine.select(47)
        assert engine.bind(regions) is False
        assert engine.selection.current_code == 47

    def test_rebind_keeps_selection_when_code_survives(self, engine, surface, make_region):
        engine.select(47)
        replacement = RegionCollection([make_region(47, "Nairobi"), make_region(3)])
        assert engine.bind(replacement) is True
        assert engine.selection.current_code == 47
        assert surface.style_of("region:3").fill_opacity == 0
        assert not surface.is_interactive("region:3")

    def test_rebind_reports_surviving_selection(self, surface, regions, make_region):
        received = []
        eng = MapEngine(surface, on_selection_change=received.append)
        eng.bind(regions)
        eng.select(47)
        replacement = RegionCollection([make_region(47, "Nairobi"), make_region(3)])
        eng.bind(replacement)
        assert received[-1] is replacement.get(47)
        assert received[-1] is not regions.get(47)
        assert len(eng.selection.history) == 1

    def test_rebind_drops_vanished_selection(self, engine, surface, make_region):
        engine.select(47)
        engine.bind(RegionCollection([make_region(1)]))
        assert engine.mode == ViewMode.OVERVIEW
        assert surface.is_interactive("region:1")
        assert surface.camera.target == "center"

    def test_rebind_clears_hover(self, engine, surface, make_region):
        surface.dispatch(PointerEvent(PointerKind.ENTER, "region:2"))
        engine.bind(RegionCollection([make_region(1)]))
        assert engine.interaction.hovered_code is None
        assert surface.label is None

    def test_handlers_bound_to_new_shapes(self, engine, surface, make_region):
        engine.bind(RegionCollection([make_region(5)]))
        assert surface.dispatch(PointerEvent(PointerKind.CLICK, "region:5"))
        assert engine.selection.current_code == 5

    def test_overlays_follow_rebound_region(self, engine, surface, make_region):
        engine.set_overlays(wards=True)
        engine.select(47)
        replacement = RegionCollection([make_region(47, "Nairobi", lng=10.0, lat=10.0)])
        engine.bind(replacement)
        assert engine.overlays.shape_ids == ["overlay:wards:47"]
        assert surface.shape_bounds("overlay:wards:47").west == pytest.approx(9.9)


class TestOutboundNotification:
    def test_selection_callback(self, surface, regions):
        received = []
        eng = MapEngine(surface, on_selection_change=received.append)
        eng.bind(regions)
        eng.select(1)
        eng.deselect()
        assert [r.code if r else None for r in received] == [1, None]


class TestLoad:
    def test_load_binds_when_ready(self, surface):
        async def scenario():
            eng = MapEngine(surface, camera=CameraSettings())
            task = eng.load(RegionLoader(SAMPLE, min_distance_km=0.35))
            await task
            return eng

        eng = asyncio.run(scenario())
        assert eng.loaded
        assert eng.collection.codes == (1, 2, 5, 47)
        assert surface.has_shape("region:5")

    def test_teardown_cancels_pending_load(self, surface):
        async def scenario():
            eng = MapEngine(surface)
            loader = RegionLoader(SAMPLE, delay=10.0)
            task = eng.load(loader)
            await asyncio.sleep(0)
            eng.teardown()
            with pytest.raises(asyncio.CancelledError):
                await task
            return eng, loader

        eng, loader = asyncio.run(scenario())
        assert not eng.loaded
        assert loader.result is None


class TestTeardown:
    def test_removes_shapes_and_handlers(self, engine, surface):
        engine.select(47)
        engine.set_overlays(wards=True)
        engine.teardown()
        assert engine.closed
        assert surface.closed
        assert surface.shape_ids == []
        assert surface.handler_count("region:1") == 0
        assert not engine.loaded

    def test_idempotent(self, engine):
        engine.teardown()
        engine.teardown()

    def test_operations_after_teardown_raise(self, engine, regions):
        engine.teardown()
        with pytest.raises(RuntimeError):
            engine.select(1)
        with pytest.raises(RuntimeError):
            engine.deselect()
        with pytest.raises(RuntimeError):
            engine.bind(regions)
        with pytest.raises(RuntimeError):
            engine.set_overlays(wards=True)

    def test_pointer_events_dropped_after_teardown(self, engine, surface):
        engine.teardown()
        assert surface.dispatch(PointerEvent(PointerKind.CLICK, "region:47")) is False
