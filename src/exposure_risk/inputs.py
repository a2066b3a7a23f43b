"""Parse JSON route requests into value objects.

Expected request shape::

    {
      "profile": {"age": 30, "diseases": ["asthma"], "smoking_status": "never"},
      "routes": [
        {
          "coordinates": [[100.53, 13.73], [100.54, 13.74]],
          "distance_meters": 1500,
          "duration_seconds": 300,
          "pm25_samples": [42.0, 55.5],
          "sample_locations": [{"lat": 13.73, "lng": 100.53}, ...]
        }
      ]
    }

Coordinates follow GeoJSON order, [longitude, latitude].
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from exposure_risk.geo import path_length_km, sample_route_points
from exposure_risk.models import (
    Coordinate,
    DiseaseProfile,
    RouteCandidate,
    SmokingStatus,
    UserHealthProfile,
)

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when a request file cannot be turned into routes and a profile."""


def _coordinate_from_pair(pair: Any) -> Coordinate:
    if not isinstance(pair, (list, tuple)) or len(pair) < 2:
        raise InvalidInputError(f"Expected [longitude, latitude], got {pair!r}")
    return Coordinate(latitude=float(pair[1]), longitude=float(pair[0]))


def _coordinate_from_point(point: dict[str, Any]) -> Coordinate:
    return Coordinate(latitude=float(point["lat"]), longitude=float(point["lng"]))


def profile_from_dict(data: dict[str, Any]) -> UserHealthProfile:
    """Build a health profile; unknown disease names are skipped with a warning."""
    if not isinstance(data, dict):
        raise InvalidInputError(f"Profile must be a JSON object, got {type(data).__name__}")
    names = data.get("diseases", [])
    if not isinstance(names, list):
        raise InvalidInputError("Profile diseases must be a list")

    diseases: list[DiseaseProfile] = []
    for name in names:
        try:
            diseases.append(DiseaseProfile(name))
        except ValueError:
            logger.warning("Ignoring unknown disease %r", name)

    try:
        smoking = SmokingStatus(data.get("smoking_status", "never"))
        return UserHealthProfile(
            age=int(data.get("age", 30)),
            diseases=diseases,
            smoking_status=smoking,
            baseline_lung_function=data.get("baseline_lung_function"),
        )
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid profile: {exc}") from exc


def route_candidate_from_dict(data: dict[str, Any], index: int) -> RouteCandidate:
    """Build a route candidate, defaulting its index to the list position.

    A missing ``distance_meters`` is measured along the coordinates.  Missing
    ``sample_locations`` are taken from the route geometry at 1 km spacing
    when that yields exactly one point per sample.
    """
    if not isinstance(data, dict):
        raise InvalidInputError(f"Route {index} must be a JSON object")

    try:
        coordinates = [_coordinate_from_pair(p) for p in data.get("coordinates", [])]
        if "distance_meters" in data or len(coordinates) < 2:
            distance = float(data["distance_meters"])
        else:
            distance = path_length_km(coordinates) * 1000
            logger.debug("Route %d: measured %.0f m from geometry", index, distance)
        samples = [float(v) for v in data.get("pm25_samples", [])]
        locations = [_coordinate_from_point(p) for p in data.get("sample_locations", [])]
        if not locations and samples and coordinates:
            points = sample_route_points(coordinates, distance)
            if len(points) == len(samples):
                locations = points

        return RouteCandidate(
            index=int(data.get("index", index)),
            coordinates=coordinates,
            distance_meters=distance,
            duration_seconds=float(data["duration_seconds"]),
            pm25_samples=samples,
            sample_locations=locations,
        )
    except KeyError as exc:
        raise InvalidInputError(f"Route {index} is missing {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Route {index} is invalid: {exc}") from exc


def load_route_request(path: Path) -> tuple[list[RouteCandidate], UserHealthProfile]:
    """Read a route request file and return (routes, profile)."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidInputError(f"{path} is not valid JSON: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise InvalidInputError(f"{path} is not valid UTF-8: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidInputError(f"{path} must contain a JSON object")
    raw_routes = data.get("routes", [])
    if not isinstance(raw_routes, list):
        raise InvalidInputError(f"{path}: routes must be a list")

    routes = [route_candidate_from_dict(r, i) for i, r in enumerate(raw_routes)]
    profile = profile_from_dict(data.get("profile", {}))
    logger.debug("Loaded %d routes from %s", len(routes), path)
    return routes, profile
