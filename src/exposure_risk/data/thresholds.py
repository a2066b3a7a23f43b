"""Threshold tables shared by the PHRI core and the deterministic risk engine.

PM2.5 bands follow the WHO 2021 guideline and the Thai Pollution Control
Department standard; AQI bands follow US EPA.
"""

from __future__ import annotations

# Hard validation bounds for incoming readings.
PM25_MIN: float = 0.0
PM25_MAX: float = 1000.0
AQI_MIN: float = 0.0
AQI_MAX: float = 500.0

# Concentration that maps to a base exposure of 100 (AQI hazardous).
PM25_REFERENCE: float = 500.0

# Upper bound (inclusive) -> (key, English label)
PM25_BANDS: list[tuple[float, str, str]] = [
    (15.0, "GOOD", "Very good"),
    (25.0, "SATISFACTORY", "Good"),
    (37.5, "MODERATE", "Moderate"),
    (75.0, "UNHEALTHY_SENSITIVE", "Starting to affect health"),
    (150.0, "UNHEALTHY", "Affects health"),
    (250.0, "VERY_UNHEALTHY", "Strongly affects health"),
    (PM25_MAX, "HAZARDOUS", "Hazardous"),
]

AQI_BANDS: list[tuple[float, str, str]] = [
    (50.0, "GOOD", "Good"),
    (100.0, "MODERATE", "Moderate"),
    (150.0, "UNHEALTHY_SENSITIVE", "Unhealthy for Sensitive Groups"),
    (200.0, "UNHEALTHY", "Unhealthy"),
    (300.0, "VERY_UNHEALTHY", "Very Unhealthy"),
    (AQI_MAX, "HAZARDOUS", "Hazardous"),
]

# PHRI level cut-offs on the 0-100 scale: score < cut-off selects the level.
PHRI_LOW_MAX: float = 25.0
PHRI_MODERATE_MAX: float = 50.0
PHRI_HIGH_MAX: float = 75.0

RISK_LEVEL_LABELS: dict[str, tuple[str, str]] = {
    "low": ("ความเสี่ยงต่ำ", "Low Risk"),
    "moderate": ("ความเสี่ยงปานกลาง", "Moderate Risk"),
    "high": ("ความเสี่ยงสูง", "High Risk"),
    "severe": ("ความเสี่ยงรุนแรง", "Severe Risk"),
}
