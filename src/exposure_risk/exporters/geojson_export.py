"""GeoJSON exporter for route risk results."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from exposure_risk.graph import RouteComparisonResult
from exposure_risk.models import Coordinate, RouteCandidate, RouteRiskComparison
from exposure_risk.optimizer import OptimizedRouteResult


def _point(coord: Coordinate) -> list[float]:
    return [coord.longitude, coord.latitude]


def _optimizer_features(result: OptimizedRouteResult) -> list[dict[str, Any]]:
    """One LineString per scored segment."""
    features: list[dict[str, Any]] = []
    for scored in result.all_routes:
        for segment in scored.segments:
            features.append({
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [_point(segment.start), _point(segment.end)],
                },
                "properties": {
                    "feature_type": "segment",
                    "route_index": scored.route.index,
                    "route_rank": scored.rank,
                    "segment_index": segment.index,
                    "pm25": segment.pm25,
                    "phri": segment.phri,
                    "risk_level": str(segment.risk_level),
                    "color": segment.color,
                },
            })
    return features


def _graph_features(result: RouteComparisonResult) -> list[dict[str, Any]]:
    """One LineString per graph edge, coordinates taken from its nodes."""
    features: list[dict[str, Any]] = []
    for route_index, route in enumerate(result.routes):
        nodes = {n.id: n for n in route.nodes}
        for edge, color in zip(route.edges, route.segment_colors):
            start, end = nodes[edge.from_node], nodes[edge.to_node]
            features.append({
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [
                        [start.longitude, start.latitude],
                        [end.longitude, end.latitude],
                    ],
                },
                "properties": {
                    "feature_type": "edge",
                    "route_index": route_index,
                    "is_safest": route_index == result.safest_route_index,
                    "edge_id": edge.id,
                    "exposure_cost": edge.exposure_cost,
                    "health_weight": edge.health_weight,
                    "risk_level": str(edge.risk_level),
                    "road_type": str(edge.road.road_type),
                    "color": color,
                },
            })
    return features


def _ranking_features(
    comparisons: list[RouteRiskComparison],
    routes: list[RouteCandidate],
) -> list[dict[str, Any]]:
    """One LineString per ranked route plus a Point at each peak location."""
    geometry = {r.index: r.coordinates for r in routes}
    features: list[dict[str, Any]] = []
    for rank, comparison in enumerate(comparisons, start=1):
        coords = geometry.get(comparison.route_index, [])
        features.append({
            "type": "Feature",
            "geometry": {
                "type": "LineString",
                "coordinates": [_point(c) for c in coords],
            },
            "properties": {
                "feature_type": "route",
                "route_index": comparison.route_index,
                "rank": rank,
                "is_safest": comparison.is_safest,
                "average_phri": comparison.average_phri,
                "peak_phri": comparison.peak_phri,
                "average_pm25": comparison.average_pm25,
                "distance_km": comparison.distance_km,
                "duration_minutes": comparison.duration_minutes,
            },
        })
        if comparison.peak_pm25_location is not None:
            features.append({
                "type": "Feature",
                "geometry": {
                    "type": "Point",
                    "coordinates": _point(comparison.peak_pm25_location),
                },
                "properties": {
                    "feature_type": "peak",
                    "route_index": comparison.route_index,
                    "peak_phri": comparison.peak_phri,
                },
            })
    return features


def export_geojson(
    results: OptimizedRouteResult | RouteComparisonResult | list[RouteRiskComparison],
    output_path: Path,
    routes: list[RouteCandidate] | None = None,
) -> Path:
    """Export route results as a GeoJSON FeatureCollection.

    Optimizer results become per-segment lines, graph comparisons per-edge
    lines and PHRI rankings whole-route lines (geometry read from *routes*).
    GeoJSON coordinates are [longitude, latitude].

    Raises:
        ValueError: If a PHRI ranking is exported without its routes.
    """
    if isinstance(results, OptimizedRouteResult):
        features = _optimizer_features(results)
        strategy = "optimize"
    elif isinstance(results, RouteComparisonResult):
        features = _graph_features(results)
        strategy = "graph"
    else:
        if routes is None:
            raise ValueError("Route geometry is required to export a PHRI ranking")
        features = _ranking_features(results, routes)
        strategy = "rank"

    geojson = {
        "type": "FeatureCollection",
        "metadata": {
            "generated": datetime.now(tz=timezone.utc).isoformat(),
            "source": "exposure-risk",
            "strategy": strategy,
            "feature_count": len(features),
        },
        "features": features,
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(geojson, f, indent=2, ensure_ascii=False)

    return output_path
