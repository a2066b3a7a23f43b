"""Tests for ExposureRiskConfig."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from exposure_risk.config import ExposureRiskConfig
from exposure_risk.models import ActivityLevel


class TestDefaults:
    def test_defaults(self):
        config = ExposureRiskConfig()
        assert config.travel_speed_kmh == 30.0
        assert config.activity_level == ActivityLevel.LIGHT
        assert config.language == "en"
        assert config.max_decision_chars == 150
        assert config.route_strategy == "rank"
        assert config.output_file is None
        assert config.output_format == "json"


class TestEnvironment:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("EXPOSURE_RISK_TRAVEL_SPEED_KMH", "12.5")
        monkeypatch.setenv("EXPOSURE_RISK_LANGUAGE", "th")
        monkeypatch.setenv("EXPOSURE_RISK_OUTPUT_FILE", "routes.geojson")
        config = ExposureRiskConfig()
        assert config.travel_speed_kmh == 12.5
        assert config.language == "th"
        assert config.output_file == Path("routes.geojson")

    def test_arguments_beat_env(self, monkeypatch):
        monkeypatch.setenv("EXPOSURE_RISK_ROUTE_STRATEGY", "graph")
        assert ExposureRiskConfig(route_strategy="optimize").route_strategy == "optimize"


class TestValidation:
    def test_speed_must_be_positive(self):
        with pytest.raises(ValidationError):
            ExposureRiskConfig(travel_speed_kmh=0)

    def test_unknown_language(self):
        with pytest.raises(ValidationError):
            ExposureRiskConfig(language="fr")

    def test_unknown_strategy(self):
        with pytest.raises(ValidationError):
            ExposureRiskConfig(route_strategy="fastest")

    def test_decision_budget_floor(self):
        with pytest.raises(ValidationError):
            ExposureRiskConfig(max_decision_chars=5)
