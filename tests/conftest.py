"""Shared fixtures for exposure_risk tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from exposure_risk.models import (
    ActivityContext,
    ActivityLevel,
    ActivityMode,
    AirQualityReading,
    Coordinate,
    DiseaseProfile,
    EnvironmentalContext,
    LocationContext,
    RouteCandidate,
    TravelerProfile,
    TravelInput,
    TravelMode,
    UserContext,
    UserHealthProfile,
)

BANGKOK = Coordinate(latitude=13.7563, longitude=100.5018)


def _line(start: Coordinate, d_lat: float, d_lon: float, points: int = 4) -> list[Coordinate]:
    return [
        Coordinate(start.latitude + d_lat * i, start.longitude + d_lon * i)
        for i in range(points)
    ]


@pytest.fixture
def healthy_profile() -> UserHealthProfile:
    return UserHealthProfile(age=30)


@pytest.fixture
def asthma_profile() -> UserHealthProfile:
    return UserHealthProfile(age=30, diseases=[DiseaseProfile.ASTHMA])


@pytest.fixture
def clean_route() -> RouteCandidate:
    """Longest and slowest candidate, but through a park corridor."""
    coords = _line(BANGKOK, 0.012, 0.010)
    return RouteCandidate(
        index=0,
        coordinates=coords,
        distance_meters=6000,
        duration_seconds=1200,
        pm25_samples=[20.0, 22.0, 18.0, 20.0],
        sample_locations=coords,
    )


@pytest.fixture
def dirty_route() -> RouteCandidate:
    """Shortest and fastest candidate, along an arterial road."""
    coords = _line(BANGKOK, 0.010, 0.006)
    return RouteCandidate(
        index=1,
        coordinates=coords,
        distance_meters=4000,
        duration_seconds=720,
        pm25_samples=[80.0, 95.0, 110.0, 90.0],
        sample_locations=coords,
    )


@pytest.fixture
def moderate_route() -> RouteCandidate:
    coords = _line(BANGKOK, 0.011, 0.008)
    return RouteCandidate(
        index=2,
        coordinates=coords,
        distance_meters=5000,
        duration_seconds=900,
        pm25_samples=[40.0, 45.0, 50.0, 42.0],
        sample_locations=coords,
    )


@pytest.fixture
def sample_routes(clean_route, dirty_route, moderate_route) -> list[RouteCandidate]:
    return [clean_route, dirty_route, moderate_route]


@pytest.fixture
def traveler() -> TravelerProfile:
    return TravelerProfile(age=30)


@pytest.fixture
def walking_trip() -> TravelInput:
    return TravelInput(mode=TravelMode.WALKING, duration_minutes=30)


@pytest.fixture
def clean_air() -> AirQualityReading:
    return AirQualityReading(pm25=10.0, aqi=40.0)


@pytest.fixture
def outdoor_location() -> LocationContext:
    return LocationContext(latitude=BANGKOK.latitude, longitude=BANGKOK.longitude)


@pytest.fixture
def walking_activity() -> ActivityContext:
    return ActivityContext(
        mode=ActivityMode.WALKING, intensity=ActivityLevel.LIGHT, duration_minutes=60,
    )


@pytest.fixture
def healthy_user() -> UserContext:
    return UserContext(age=30)


@pytest.fixture
def smoggy_environment() -> EnvironmentalContext:
    return EnvironmentalContext(pm25=150.0, aqi=200.0)


@pytest.fixture
def route_request_data() -> dict:
    return {
        "profile": {"age": 45, "diseases": ["asthma"], "smoking_status": "former"},
        "routes": [
            {
                "coordinates": [[100.5018, 13.7563], [100.5118, 13.7683], [100.5218, 13.7803]],
                "distance_meters": 3000,
                "duration_seconds": 600,
                "pm25_samples": [20.0, 25.0, 22.0],
                "sample_locations": [
                    {"lat": 13.7563, "lng": 100.5018},
                    {"lat": 13.7683, "lng": 100.5118},
                    {"lat": 13.7803, "lng": 100.5218},
                ],
            },
            {
                "coordinates": [[100.5018, 13.7563], [100.5060, 13.7700], [100.5218, 13.7803]],
                "distance_meters": 2500,
                "duration_seconds": 420,
                "pm25_samples": [70.0, 85.0, 90.0],
            },
        ],
    }


@pytest.fixture
def route_request_file(tmp_path, route_request_data) -> Path:
    path = tmp_path / "request.json"
    path.write_text(json.dumps(route_request_data), encoding="utf-8")
    return path
