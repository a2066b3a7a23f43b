"""Tests for the Typer command-line interface."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from exposure_risk import __version__
from exposure_risk.cli import app

runner = CliRunner()


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"exposure-risk {__version__}" in result.output


class TestScore:
    def test_prints_breakdown(self):
        result = runner.invoke(app, ["score", "--pm25", "150", "--minutes", "60"])
        assert result.exit_code == 0
        assert "PHRI Breakdown" in result.output
        assert "high" in result.output
        assert "High Risk" in result.output

    def test_mask_and_disease(self):
        result = runner.invoke(
            app,
            ["score", "--pm25", "150", "--mask", "n95", "-D", "asthma", "--age", "70"],
        )
        assert result.exit_code == 0
        assert "Low Risk" in result.output


class TestRoutes:
    def test_rank_strategy(self, route_request_file):
        result = runner.invoke(app, ["routes", str(route_request_file)])
        assert result.exit_code == 0
        assert "Route Health Risk Ranking" in result.output

    def test_optimize_strategy(self, route_request_file):
        result = runner.invoke(app, ["routes", str(route_request_file), "-s", "optimize"])
        assert result.exit_code == 0
        assert "Route Safety Optimization" in result.output
        assert "Data quality" in result.output

    def test_graph_strategy(self, route_request_file):
        result = runner.invoke(app, ["routes", str(route_request_file), "-s", "graph"])
        assert result.exit_code == 0
        assert "Health-Weighted Route Comparison" in result.output

    def test_json_export(self, route_request_file, tmp_path):
        output = tmp_path / "ranking.json"
        result = runner.invoke(app, ["routes", str(route_request_file), "-o", str(output)])
        assert result.exit_code == 0
        assert "JSON written to" in result.output

        with open(output) as f:
            data = json.load(f)
        assert len(data) == 2
        assert data[0]["is_safest"] is True

    def test_geojson_export(self, route_request_file, tmp_path):
        output = tmp_path / "ranking.geojson"
        result = runner.invoke(
            app, ["routes", str(route_request_file), "-o", str(output), "-f", "geojson"],
        )
        assert result.exit_code == 0

        with open(output) as f:
            data = json.load(f)
        assert data["type"] == "FeatureCollection"
        assert data["metadata"]["strategy"] == "rank"

    def test_empty_routes_fail(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"routes": []}), encoding="utf-8")
        for strategy in ("rank", "optimize", "graph"):
            result = runner.invoke(app, ["routes", str(path), "-s", strategy])
            assert result.exit_code == 1
            assert "Route comparison failed" in result.output

    def test_malformed_json_fails(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(app, ["routes", str(path)])
        assert result.exit_code == 1
        assert "Route comparison failed" in result.output

    @pytest.mark.parametrize(
        "request_body",
        [{"routes": ["oops"]}, {"routes": {"a": 1}}, {"routes": [], "profile": "asthma"}],
    )
    def test_wrongly_typed_request_fails(self, tmp_path, request_body):
        path = tmp_path / "typed.json"
        path.write_text(json.dumps(request_body), encoding="utf-8")
        result = runner.invoke(app, ["routes", str(path)])
        assert result.exit_code == 1
        assert "Route comparison failed" in result.output

    def test_non_utf8_file_fails(self, tmp_path):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe{")
        result = runner.invoke(app, ["routes", str(path)])
        assert result.exit_code == 1
        assert "Route comparison failed" in result.output

    def test_missing_file_fails(self, tmp_path):
        result = runner.invoke(app, ["routes", str(tmp_path / "missing.json")])
        assert result.exit_code == 1


class TestAdvise:
    def test_english_decision(self):
        result = runner.invoke(app, ["advise", "--pm25", "200"])
        assert result.exit_code == 0
        assert "Moderate Risk" in result.output
        assert "Options" in result.output

    def test_danger_options(self):
        result = runner.invoke(app, ["advise", "--pm25", "900"])
        assert result.exit_code == 0
        assert "Stay indoors" in result.output

    def test_thai_decision(self):
        result = runner.invoke(app, ["advise", "--pm25", "10", "-l", "th"])
        assert result.exit_code == 0
        assert "Low Risk" in result.output
