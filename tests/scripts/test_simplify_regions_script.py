"""Tests for scripts/simplify_regions.py — offline vertex thinning CLI."""

import importlib.util
import json
from pathlib import Path

import pytest


pytestmark = pytest.mark.unit

ROOT = Path(__file__).parents[2]
SAMPLE = ROOT / "data" / "counties.geojson"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location(
        "simplify_regions", ROOT / "scripts" / "simplify_regions.py"
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestSimplifyRegionsScript:
    def test_writes_simplified_output(self, script, tmp_path):
        out = tmp_path / "out" / "counties.geojson"
        assert script.main([str(SAMPLE), "--output", str(out), "--indent", "2"]) == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert len(data["features"]) == 4
        nairobi = data["features"][-1]
        assert nairobi["properties"]["county_name"] == "Nairobi"
        assert len(nairobi["geometry"]["coordinates"][0]) == 8

    def test_dry_run_writes_nothing(self, script, tmp_path):
        assert script.main([str(SAMPLE)]) == 0
        assert list(tmp_path.iterdir()) == []

    def test_missing_input(self, script, tmp_path):
        assert script.main([str(tmp_path / "absent.geojson")]) == 1

    def test_rejects_non_positive_distance(self, script):
        assert script.main([str(SAMPLE), "--min-distance", "0"]) == 2
