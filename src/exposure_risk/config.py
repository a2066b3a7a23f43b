"""Configuration model for the exposure risk tools."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from exposure_risk.models import ActivityLevel

Language = Literal["en", "th"]
OutputFormat = Literal["json", "geojson"]
RouteStrategy = Literal["rank", "optimize", "graph"]


class ExposureRiskConfig(BaseSettings):
    """All configurable parameters for the command-line tools.

    Values can be set via constructor arguments, environment variables
    prefixed with EXPOSURE_RISK_, or defaults.
    """

    model_config = {"env_prefix": "EXPOSURE_RISK_"}

    travel_speed_kmh: float = Field(
        default=30.0, gt=0.0, le=200.0, description="Assumed travel speed along a route."
    )
    activity_level: ActivityLevel = Field(
        default=ActivityLevel.LIGHT, description="Activity level while travelling."
    )
    language: Language = Field(default="en", description="Decision text language: en or th.")
    max_decision_chars: int = Field(
        default=150, ge=20, description="Character budget for decision text."
    )
    route_strategy: RouteStrategy = Field(
        default="rank",
        description="Route scoring: 'rank' (PHRI), 'optimize' (composite) or 'graph'.",
    )
    output_file: Path | None = Field(
        default=None, description="Where to write route results. No export when unset."
    )
    output_format: OutputFormat = Field(
        default="json", description="Output format: json or geojson."
    )
