"""Geographic utilities: Haversine distance and route sample selection."""

from __future__ import annotations

import math

from exposure_risk.models import Coordinate

EARTH_RADIUS_KM = 6371.0


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the great-circle distance in km between two points on Earth."""
    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.asin(math.sqrt(a))


def distance_meters(start: Coordinate, end: Coordinate) -> float:
    """Great-circle distance in metres between two coordinates."""
    return haversine(start.latitude, start.longitude, end.latitude, end.longitude) * 1000


def path_length_km(coordinates: list[Coordinate]) -> float:
    """Sum of great-circle legs along an ordered coordinate sequence."""
    return sum(
        haversine(a.latitude, a.longitude, b.latitude, b.longitude)
        for a, b in zip(coordinates, coordinates[1:])
    )


def sample_route_points(
    coordinates: list[Coordinate],
    distance_meters: float,
    interval_meters: float = 1000.0,
) -> list[Coordinate]:
    """Pick evenly spaced geometry points at which PM2.5 should be sampled.

    One sample per *interval_meters* of route length plus the start point,
    each snapped to the nearest preceding vertex of the geometry.  Returns
    the single vertex for a one-point route and an empty list for no route.
    """
    if not coordinates:
        return []
    if len(coordinates) == 1 or distance_meters <= 0:
        return [coordinates[0]]

    num_samples = max(math.ceil(distance_meters / max(interval_meters, 1.0)), 1)
    last = len(coordinates) - 1
    return [
        coordinates[i * last // num_samples]
        for i in range(num_samples + 1)
    ]
