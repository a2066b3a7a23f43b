"""Tests for the export modules."""

from __future__ import annotations

import json

import pytest

from exposure_risk.exporters.geojson_export import export_geojson
from exposure_risk.exporters.json_export import export_json
from exposure_risk.graph import compare_routes
from exposure_risk.optimizer import optimize_for_safety
from exposure_risk.scoring import compare_route_risks


@pytest.fixture
def ranking(sample_routes, healthy_profile):
    return compare_route_risks(sample_routes, healthy_profile)


class TestJSONExport:
    def test_exports_list_of_dicts(self, ranking, tmp_path):
        output = tmp_path / "test.json"
        export_json(ranking, output)

        with open(output) as f:
            data = json.load(f)

        assert isinstance(data, list)
        assert len(data) == 3
        assert data[0]["route_index"] == 0
        assert data[0]["is_safest"] is True
        assert data[0]["segment_risks"][0]["level"] == "low"

    def test_exports_single_result(self, sample_routes, healthy_profile, tmp_path):
        output = tmp_path / "test.json"
        export_json(optimize_for_safety(sample_routes, healthy_profile), output)

        with open(output) as f:
            data = json.load(f)

        assert set(data) == {"strategy", "safest_route", "all_routes", "decision", "metadata"}
        assert data["strategy"] == "optimize"
        assert data["safest_route"]["coordinates"][0] == {
            "latitude": 13.7563, "longitude": 100.5018,
        }

    def test_graph_result_tagged(self, sample_routes, tmp_path):
        output = tmp_path / "test.json"
        export_json(compare_routes(sample_routes), output)

        with open(output) as f:
            data = json.load(f)

        assert data["strategy"] == "graph"
        assert data["safest_route_index"] == 0
        assert len(data["routes"]) == 3

    def test_returns_output_path(self, ranking, tmp_path):
        output = tmp_path / "test.json"
        assert export_json(ranking, output) == output


class TestGeoJSONExport:
    def test_ranking_features(self, ranking, sample_routes, tmp_path):
        output = tmp_path / "test.geojson"
        export_geojson(ranking, output, routes=sample_routes)

        with open(output) as f:
            data = json.load(f)

        assert data["type"] == "FeatureCollection"
        assert data["metadata"]["source"] == "exposure-risk"
        assert data["metadata"]["strategy"] == "rank"

        lines = [f for f in data["features"] if f["properties"]["feature_type"] == "route"]
        peaks = [f for f in data["features"] if f["properties"]["feature_type"] == "peak"]
        assert len(lines) == 3
        assert len(peaks) == 3
        assert data["metadata"]["feature_count"] == 6
        assert lines[0]["properties"]["rank"] == 1
        assert lines[0]["properties"]["is_safest"] is True
        assert lines[0]["geometry"]["coordinates"][0] == [100.5018, 13.7563]
        assert peaks[0]["geometry"]["type"] == "Point"

    def test_ranking_requires_routes(self, ranking, tmp_path):
        with pytest.raises(ValueError, match="Route geometry"):
            export_geojson(ranking, tmp_path / "test.geojson")

    def test_optimizer_segments(self, sample_routes, healthy_profile, tmp_path):
        output = tmp_path / "test.geojson"
        export_geojson(optimize_for_safety(sample_routes, healthy_profile), output)

        with open(output) as f:
            data = json.load(f)

        assert data["metadata"]["strategy"] == "optimize"
        assert len(data["features"]) == 12
        for feature in data["features"]:
            assert feature["properties"]["feature_type"] == "segment"
            assert feature["geometry"]["type"] == "LineString"
            assert len(feature["geometry"]["coordinates"]) == 2
            assert feature["properties"]["color"].startswith("#")

    def test_graph_edges(self, sample_routes, tmp_path):
        output = tmp_path / "test.geojson"
        export_geojson(compare_routes(sample_routes), output)

        with open(output) as f:
            data = json.load(f)

        assert data["metadata"]["strategy"] == "graph"
        assert len(data["features"]) == 9
        safest = [f for f in data["features"] if f["properties"]["is_safest"]]
        assert len(safest) == 3
        assert {f["properties"]["route_index"] for f in safest} == {0}
        assert data["features"][0]["properties"]["road_type"] == "secondary"

    def test_returns_output_path(self, sample_routes, tmp_path):
        output = tmp_path / "test.geojson"
        assert export_geojson(compare_routes(sample_routes), output) == output
