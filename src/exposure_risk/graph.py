"""Health-weighted route graph: the safest path is not the shortest path.

Nodes are sampled locations, edges carry an exposure cost
(µg/m³ x minutes) and a disease-adjusted health weight taken from the
PHRI formula.  The graph is a :class:`networkx.DiGraph` rebuilt wholesale
for every route.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import StrEnum

import networkx as nx

from exposure_risk.data.coefficients import DEFAULT_PM25_THRESHOLD, DISEASE_COEFFICIENTS
from exposure_risk.data.thresholds import PHRI_HIGH_MAX, PHRI_LOW_MAX, PHRI_MODERATE_MAX
from exposure_risk.geo import distance_meters
from exposure_risk.models import (
    ActivityLevel,
    Coordinate,
    DiseaseProfile,
    ExposureInput,
    NoRoutesError,
    RiskLevel,
    RouteCandidate,
    UserHealthProfile,
)
from exposure_risk.scoring import compute_risk

logger = logging.getLogger(__name__)


class RoadType(StrEnum):
    HIGHWAY = "highway"
    MAIN = "main"
    SECONDARY = "secondary"
    RESIDENTIAL = "residential"
    PEDESTRIAN = "pedestrian"


class TrafficLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


ROAD_TYPE_MODIFIERS: dict[RoadType, float] = {
    RoadType.HIGHWAY: 1.4,
    RoadType.MAIN: 1.2,
    RoadType.SECONDARY: 1.0,
    RoadType.RESIDENTIAL: 0.8,
    RoadType.PEDESTRIAN: 0.6,
}

TRAFFIC_MODIFIERS: dict[TrafficLevel, float] = {
    TrafficLevel.LOW: 0.8,
    TrafficLevel.MEDIUM: 1.0,
    TrafficLevel.HIGH: 1.3,
}

GREEN_COVER_REDUCTION = 0.85

RISK_COLORS: dict[RiskLevel, str] = {
    RiskLevel.LOW: "#22c55e",
    RiskLevel.MODERATE: "#f59e0b",
    RiskLevel.HIGH: "#ef4444",
    RiskLevel.SEVERE: "#7c2d12",
}

DEFAULT_PROFILE = UserHealthProfile(age=30, diseases=[DiseaseProfile.GENERAL])


@dataclass(frozen=True)
class RoadContext:
    road_type: RoadType = RoadType.SECONDARY
    traffic_level: TrafficLevel = TrafficLevel.MEDIUM
    has_green_cover: bool = False

    def modifier(self) -> float:
        value = ROAD_TYPE_MODIFIERS.get(self.road_type, 1.0)
        value *= TRAFFIC_MODIFIERS.get(self.traffic_level, 1.0)
        if self.has_green_cover:
            value *= GREEN_COVER_REDUCTION
        return value


@dataclass(frozen=True)
class GraphNode:
    id: str
    latitude: float
    longitude: float
    pm25: float


@dataclass(frozen=True)
class GraphEdge:
    id: str
    from_node: str
    to_node: str
    distance_meters: float
    duration_seconds: float
    exposure_cost: float  # µg/m³ x minutes
    health_weight: float  # PHRI 0-100
    risk_level: RiskLevel
    road: RoadContext = field(default_factory=RoadContext)


@dataclass(frozen=True)
class RouteResult:
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    total_distance_meters: float
    total_duration_seconds: float
    total_exposure_cost: float
    average_health_weight: float
    max_health_weight: float
    overall_risk_level: RiskLevel
    high_risk_segments: int
    recommendation: str
    segment_colors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RouteComparisonResult:
    routes: list[RouteResult]
    safest_route_index: int
    fastest_route_index: int
    health_savings: int  # % lower average weight than the fastest route
    time_cost: int  # extra minutes taken by the safest route
    recommendation: str


def _overall_risk(average_weight: float, max_weight: float) -> RiskLevel:
    combined = average_weight * 0.7 + max_weight * 0.3
    if combined < PHRI_LOW_MAX:
        return RiskLevel.LOW
    if combined < PHRI_MODERATE_MAX:
        return RiskLevel.MODERATE
    if combined < PHRI_HIGH_MAX:
        return RiskLevel.HIGH
    return RiskLevel.SEVERE


def _route_recommendation(risk: RiskLevel, high_risk_segments: int, total_segments: int) -> str:
    high_risk_percent = round(high_risk_segments / total_segments * 100)
    if risk == RiskLevel.LOW:
        return "This route is safe for your health"
    if risk == RiskLevel.MODERATE:
        if high_risk_percent > 30:
            return f"{high_risk_percent}% of this route is high risk, consider a mask"
        return "Take care through the dustier stretches"
    if risk == RiskLevel.HIGH:
        return "High-risk route, wear an N95 mask or choose another route"
    return "Route not recommended, risk is very high"


class HealthWeightedGraph:
    """Per-route graph whose edge weights are personal health risk.

    Args:
        profile: Health profile used to weight edges.  Defaults to a healthy
            30-year-old.
        activity_level: Activity level applied to every edge.
    """

    def __init__(
        self,
        profile: UserHealthProfile | None = None,
        activity_level: ActivityLevel = ActivityLevel.LIGHT,
    ) -> None:
        self.profile = profile or DEFAULT_PROFILE
        self.activity_level = activity_level
        self._graph = nx.DiGraph()

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    @property
    def nodes(self) -> list[GraphNode]:
        return [data["node"] for _, data in self._graph.nodes(data=True)]

    @property
    def edges(self) -> list[GraphEdge]:
        return [data["edge"] for _, _, data in self._graph.edges(data=True)]

    def build_from_route(
        self,
        coordinates: list[Coordinate],
        pm25_samples: list[float],
        duration_seconds: float,
        road_context: list[RoadContext] | None = None,
    ) -> None:
        """Replace the graph with one node per coordinate and one edge per leg.

        A coordinate without its own sample reuses the last sample (0 when
        there are none).  *road_context* is matched to legs by position;
        legs without an entry get a medium-traffic secondary road.
        """
        self._graph = nx.DiGraph()
        segment_seconds = duration_seconds / max(len(coordinates) - 1, 1)
        fallback = pm25_samples[-1] if pm25_samples else 0.0

        if pm25_samples and len(pm25_samples) < len(coordinates):
            logger.debug(
                "Only %d samples for %d coordinates, reusing the last sample",
                len(pm25_samples), len(coordinates),
            )

        for i, coord in enumerate(coordinates):
            node = GraphNode(
                id=f"node_{i}",
                latitude=coord.latitude,
                longitude=coord.longitude,
                pm25=pm25_samples[i] if i < len(pm25_samples) else fallback,
            )
            self._graph.add_node(node.id, node=node)

        road_context = road_context or []
        for i in range(len(coordinates) - 1):
            start = self._graph.nodes[f"node_{i}"]["node"]
            end = self._graph.nodes[f"node_{i + 1}"]["node"]
            road = road_context[i] if i < len(road_context) else RoadContext()
            edge = self._create_edge(
                f"edge_{i}",
                start,
                end,
                segment_seconds,
                road,
            )
            self._graph.add_edge(start.id, end.id, edge=edge, weight=edge.health_weight)

    def _create_edge(
        self,
        edge_id: str,
        start: GraphNode,
        end: GraphNode,
        duration_seconds: float,
        road: RoadContext,
    ) -> GraphEdge:
        minutes = duration_seconds / 60
        pm25 = (start.pm25 + end.pm25) / 2 * road.modifier()

        result = compute_risk(
            ExposureInput(
                pm25=pm25,
                duration_minutes=minutes,
                activity_level=self.activity_level,
                is_outdoor=True,
                has_mask=False,
            ),
            self.profile,
        )

        return GraphEdge(
            id=edge_id,
            from_node=start.id,
            to_node=end.id,
            distance_meters=distance_meters(
                Coordinate(start.latitude, start.longitude),
                Coordinate(end.latitude, end.longitude),
            ),
            duration_seconds=duration_seconds,
            exposure_cost=round(pm25 * minutes, 1),
            health_weight=result.score,
            risk_level=result.level,
            road=road,
        )

    def _path_edges(self) -> list[GraphEdge]:
        """Edges along the minimum health-weight path from first to last node."""
        order = list(self._graph.nodes)
        if len(order) < 2:
            return []
        try:
            path = nx.shortest_path(self._graph, order[0], order[-1], weight="weight")
        except nx.NetworkXNoPath:
            logger.warning("No path from %s to %s, using every edge", order[0], order[-1])
            return self.edges
        return [self._graph.edges[u, v]["edge"] for u, v in zip(path, path[1:])]

    def calculate_route(self) -> RouteResult:
        """Aggregate the current graph into a route summary."""
        edges = self._path_edges()
        if not edges:
            return RouteResult(
                nodes=self.nodes,
                edges=[],
                total_distance_meters=0,
                total_duration_seconds=0,
                total_exposure_cost=0.0,
                average_health_weight=0.0,
                max_health_weight=0.0,
                overall_risk_level=RiskLevel.LOW,
                high_risk_segments=0,
                recommendation="No route data",
            )

        average = sum(e.health_weight for e in edges) / len(edges)
        peak = max(e.health_weight for e in edges)
        high_risk = sum(1 for e in edges if e.risk_level in (RiskLevel.HIGH, RiskLevel.SEVERE))
        overall = _overall_risk(average, peak)

        return RouteResult(
            nodes=self.nodes,
            edges=edges,
            total_distance_meters=round(sum(e.distance_meters for e in edges)),
            total_duration_seconds=round(sum(e.duration_seconds for e in edges)),
            total_exposure_cost=round(sum(e.exposure_cost for e in edges), 1),
            average_health_weight=round(average, 1),
            max_health_weight=round(peak, 1),
            overall_risk_level=overall,
            high_risk_segments=high_risk,
            recommendation=_route_recommendation(overall, high_risk, len(edges)),
            segment_colors=[RISK_COLORS[e.risk_level] for e in edges],
        )


def build_graph(
    coordinates: list[Coordinate],
    pm25_samples: list[float],
    duration_seconds: float,
    profile: UserHealthProfile | None = None,
    activity_level: ActivityLevel = ActivityLevel.LIGHT,
    road_context: list[RoadContext] | None = None,
) -> RouteResult:
    """Build a health-weighted graph for one route and summarise it."""
    graph = HealthWeightedGraph(profile, activity_level)
    graph.build_from_route(coordinates, pm25_samples, duration_seconds, road_context)
    return graph.calculate_route()


def compare_routes(
    routes: list[RouteCandidate],
    profile: UserHealthProfile | None = None,
    activity_level: ActivityLevel = ActivityLevel.LIGHT,
) -> RouteComparisonResult:
    """Compare candidates by average health weight against the fastest one.

    Raises:
        NoRoutesError: If *routes* is empty.
    """
    if not routes:
        raise NoRoutesError("No routes to compare")

    results = [
        build_graph(r.coordinates, r.pm25_samples, r.duration_seconds, profile, activity_level)
        for r in routes
    ]

    # min() returns the first of equal keys, so ties go to the earlier route.
    safest = min(range(len(results)), key=lambda i: results[i].average_health_weight)
    fastest = min(range(len(results)), key=lambda i: results[i].total_duration_seconds)

    fastest_weight = results[fastest].average_health_weight
    safest_weight = results[safest].average_health_weight
    savings = round((1 - safest_weight / fastest_weight) * 100) if fastest_weight > 0 else 0
    time_cost = round(
        (results[safest].total_duration_seconds - results[fastest].total_duration_seconds) / 60
    )

    if safest == fastest:
        recommendation = "The fastest route is also the safest"
    elif savings > 30:
        recommendation = (
            f"Take route {safest + 1}: {savings}% lower risk for {time_cost} extra minutes"
        )
    elif time_cost > 15:
        recommendation = f"Route {fastest + 1} is much faster with little difference in risk"
    else:
        recommendation = f"Route {safest + 1} recommended, slightly safer"

    logger.debug("Compared %d routes: safest=%d fastest=%d", len(results), safest, fastest)
    return RouteComparisonResult(
        routes=results,
        safest_route_index=safest,
        fastest_route_index=fastest,
        health_savings=savings,
        time_cost=time_cost,
        recommendation=recommendation,
    )


def personalized_threshold(diseases: list[DiseaseProfile]) -> float:
    """Most restrictive PM2.5 threshold across the listed conditions."""
    if not diseases:
        return DEFAULT_PM25_THRESHOLD
    return min(
        DISEASE_COEFFICIENTS[d].pm25_threshold if d in DISEASE_COEFFICIENTS
        else DEFAULT_PM25_THRESHOLD
        for d in diseases
    )


def sensitivity_multiplier(diseases: list[DiseaseProfile]) -> float:
    """Geometric mean of the listed conditions' sensitivity coefficients."""
    if not diseases:
        return 1.0
    coefficients = [
        DISEASE_COEFFICIENTS[d].sensitivity if d in DISEASE_COEFFICIENTS else 1.0
        for d in diseases
    ]
    return math.prod(coefficients) ** (1 / len(coefficients))
