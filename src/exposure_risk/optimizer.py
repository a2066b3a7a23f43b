"""Multi-objective route optimizer.

The safest route is the one with the lowest composite of health cost
(average and peak exposure, PHRI variance) and convenience cost (duration
and distance), weighted 70/30 in favour of health.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Literal

import numpy as np

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
from exposure_risk.scoring import MIN_TRAVEL_SPEED_KMH, RESPIRATORY_DISEASES, compute_risk

logger = logging.getLogger(__name__)

HEALTH_WEIGHT = 0.7
CONVENIENCE_WEIGHT = 0.3

AVERAGE_EXPOSURE_WEIGHT = 0.5
PEAK_EXPOSURE_WEIGHT = 0.3
EXPOSURE_VARIANCE_WEIGHT = 0.2

DURATION_WEIGHT = 0.6
DISTANCE_WEIGHT = 0.4

# Normalization ceilings
AVERAGE_PM25_CEILING = 200.0
PEAK_PM25_CEILING = 300.0
PHRI_VARIANCE_CEILING = 500.0
DURATION_CEILING_MINUTES = 120.0
DISTANCE_CEILING_KM = 50.0

RISK_COLORS: dict[RiskLevel, str] = {
    RiskLevel.LOW: "#22c55e",
    RiskLevel.MODERATE: "#eab308",
    RiskLevel.HIGH: "#f97316",
    RiskLevel.SEVERE: "#ef4444",
}

WarningLevel = Literal["none", "caution", "warning", "danger"]
DataQuality = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class RouteSegment:
    index: int
    start: Coordinate
    end: Coordinate
    distance_km: float
    pm25: float
    phri: float
    risk_level: RiskLevel
    color: str


@dataclass(frozen=True)
class RouteScores:
    cumulative_exposure: float  # average µg/m³ x hours
    average_pm25: float
    peak_pm25: float
    peak_exposure_ratio: float
    average_phri: float
    peak_phri: float
    phri_variance: float
    health_score: float  # 0-100, lower is healthier
    convenience_score: float  # 0-100, lower is more convenient
    overall_score: float


@dataclass(frozen=True)
class ScoredRoute:
    route: RouteCandidate
    scores: RouteScores
    segments: list[RouteSegment]
    rank: int


@dataclass(frozen=True)
class TradeoffAnalysis:
    health_benefit: int  # % lower average PM2.5 than the worst route
    time_cost: int  # extra minutes vs the fastest route
    distance_cost: float  # extra km vs the shortest route


@dataclass(frozen=True)
class RouteDecision:
    recommended_index: int
    decision_text: str  # Thai, two lines
    decision_text_en: str
    tradeoff: TradeoffAnalysis
    should_proceed: bool
    warning_level: WarningLevel
    alternative_text: str | None = None


@dataclass(frozen=True)
class OptimizationMetadata:
    routes_analyzed: int
    samples_per_route: int
    profile_used: bool
    data_quality: DataQuality


@dataclass(frozen=True)
class OptimizedRouteResult:
    safest_route: RouteCandidate
    all_routes: list[ScoredRoute] = field(default_factory=list)
    decision: RouteDecision | None = None
    metadata: OptimizationMetadata | None = None


def normalize(value: float, ceiling: float) -> float:
    """Scale *value* onto 0-100 against a fixed ceiling, clamped."""
    return min(max(value / ceiling * 100, 0.0), 100.0)


def _geometry_point(route: RouteCandidate, position: float) -> Coordinate:
    coords = route.coordinates
    return coords[min(math.floor(position * len(coords)), len(coords) - 1)]


def analyze_segments(
    route: RouteCandidate,
    profile: UserHealthProfile,
    activity_level: ActivityLevel = ActivityLevel.LIGHT,
    travel_speed_kmh: float = 30.0,
) -> list[RouteSegment]:
    """Score each PM2.5 sample as one outdoor segment of the route.

    Segment starts follow :meth:`RouteCandidate.aligned_samples`.  Routes
    without sample locations use the proportional geometry vertex, as do
    segment ends past the last sampled location.
    """
    samples = list(route.aligned_samples())
    count = len(samples)
    if count == 0:
        return []

    speed = max(travel_speed_kmh, MIN_TRAVEL_SPEED_KMH)
    segment_km = route.distance_km / max(count - 1, 1)
    segment_minutes = segment_km / speed * 60
    locations = route.sample_locations

    segments: list[RouteSegment] = []
    for i, (pm25, location) in enumerate(samples):
        result = compute_risk(
            ExposureInput(
                pm25=pm25,
                duration_minutes=segment_minutes,
                activity_level=activity_level,
                is_outdoor=True,
                has_mask=False,
            ),
            profile,
        )
        if location is not None:
            start = location
        elif route.coordinates:
            start = _geometry_point(route, i / count)
        else:
            start = Coordinate(0.0, 0.0)
        if i + 1 < len(locations):
            end = locations[i + 1]
        elif route.coordinates:
            end = _geometry_point(route, (i + 1) / count)
        else:
            end = start

        segments.append(
            RouteSegment(
                index=i,
                start=start,
                end=end,
                distance_km=segment_km,
                pm25=pm25,
                phri=result.score,
                risk_level=result.level,
                color=RISK_COLORS[result.level],
            )
        )
    return segments


def compute_scores(route: RouteCandidate, segments: list[RouteSegment]) -> RouteScores:
    """Health, convenience and overall scores for one route.

    Concentration statistics use only valid (> 0) samples; a route with no
    valid sample scores zero across the board.
    """
    pm25 = np.array([v for v in route.pm25_samples if v > 0], dtype=float)
    if pm25.size == 0:
        return RouteScores(0, 0, 0, 0, 0, 0, 0, 0, 0, 0)

    phri = np.array([s.phri for s in segments], dtype=float)

    average_pm25 = float(pm25.mean())
    peak_pm25 = float(pm25.max())
    average_phri = float(phri.mean())
    peak_phri = float(phri.max())
    phri_variance = float(phri.var())  # population variance

    health = (
        AVERAGE_EXPOSURE_WEIGHT * normalize(average_pm25, AVERAGE_PM25_CEILING)
        + PEAK_EXPOSURE_WEIGHT * normalize(peak_pm25, PEAK_PM25_CEILING)
        + EXPOSURE_VARIANCE_WEIGHT * normalize(phri_variance, PHRI_VARIANCE_CEILING)
    )
    convenience = (
        DURATION_WEIGHT * normalize(route.duration_seconds / 60, DURATION_CEILING_MINUTES)
        + DISTANCE_WEIGHT * normalize(route.distance_km, DISTANCE_CEILING_KM)
    )
    overall = HEALTH_WEIGHT * health + CONVENIENCE_WEIGHT * convenience

    return RouteScores(
        cumulative_exposure=round(average_pm25 * route.duration_seconds / 3600, 1),
        average_pm25=round(average_pm25, 1),
        peak_pm25=round(peak_pm25, 1),
        peak_exposure_ratio=round(peak_pm25 / average_pm25, 2),
        average_phri=round(average_phri, 1),
        peak_phri=round(peak_phri, 1),
        phri_variance=round(phri_variance, 1),
        health_score=round(health, 1),
        convenience_score=round(convenience, 1),
        overall_score=round(overall, 1),
    )


def warning_level(average_pm25: float, diseases: list[DiseaseProfile]) -> WarningLevel:
    """Warning tier for an average concentration.

    Respiratory profiles (asthma, COPD) go straight to danger above 25.
    """
    if RESPIRATORY_DISEASES.intersection(diseases) and average_pm25 > 25:
        return "danger"
    if average_pm25 > 100:
        return "danger"
    if average_pm25 > 50:
        return "warning"
    if average_pm25 > 25:
        return "caution"
    return "none"


def make_decision(
    best: ScoredRoute,
    tradeoff: TradeoffAnalysis,
    diseases: list[DiseaseProfile],
    data_quality: DataQuality = "high",
) -> RouteDecision:
    pm = round(best.scores.average_pm25)
    level = warning_level(best.scores.average_pm25, diseases)
    respiratory = bool(RESPIRATORY_DISEASES.intersection(diseases))
    should_proceed = True
    alternative: str | None = None

    if level == "danger":
        should_proceed = False
        if respiratory and best.scores.average_pm25 <= 100:
            text = (
                "ผู้ป่วยทางเดินหายใจไม่ควรใช้เส้นทางนี้\n"
                f"PM2.5 เฉลี่ย {pm} µg/m³ สูงเกินเกณฑ์ปลอดภัย"
            )
            text_en = (
                "Not safe for respiratory patients.\n"
                f"Average PM2.5 {pm} µg/m³ exceeds the safe threshold."
            )
        else:
            text = (
                f"ไม่แนะนำให้เดินทาง PM2.5 สูงเกินไป ({pm} µg/m³)\n"
                "พิจารณาเลื่อนการเดินทางหรือใช้ขนส่งปิด"
            )
            text_en = (
                f"Travel not recommended. PM2.5 too high ({pm} µg/m³).\n"
                "Consider postponing or using enclosed transport."
            )
        alternative = "พิจารณาใช้ BTS/MRT แทน"
    elif level == "warning":
        text = f"ใช้เส้นทางนี้ได้แต่ต้องสวมหน้ากาก N95\nPM2.5 เฉลี่ย {pm} µg/m³"
        text_en = f"Route usable with an N95 mask.\nAverage PM2.5 {pm} µg/m³"
        alternative = "พิจารณาใช้ BTS/MRT แทน"
    elif level == "caution":
        text = f"เส้นทางยอมรับได้ แนะนำสวมหน้ากากอนามัย\nPM2.5 เฉลี่ย {pm} µg/m³"
        text_en = f"Route acceptable. Surgical mask recommended.\nAverage PM2.5 {pm} µg/m³"
    else:
        text = f"เส้นทางปลอดภัย\nPM2.5 เฉลี่ย {pm} µg/m³"
        text_en = f"Safe route.\nAverage PM2.5 {pm} µg/m³"

    if tradeoff.health_benefit > 20 and tradeoff.time_cost > 0:
        alternative = (
            f"ลดความเสี่ยง {tradeoff.health_benefit}% แม้ใช้เวลาเพิ่ม {tradeoff.time_cost} นาที"
        )

    if data_quality == "low":
        text += "\nข้อมูล PM2.5 มีจำกัด ผลประเมินอาจคลาดเคลื่อน"
        text_en += "\nLimited PM2.5 data, estimate may be unreliable."

    return RouteDecision(
        recommended_index=best.route.index,
        decision_text=text,
        decision_text_en=text_en,
        tradeoff=tradeoff,
        should_proceed=should_proceed,
        warning_level=level,
        alternative_text=alternative,
    )


def assess_data_quality(routes: list[RouteCandidate]) -> DataQuality:
    """Classify sample coverage from the valid (> 0) share and density."""
    if not routes:
        return "low"
    average_samples = sum(len(r.pm25_samples) for r in routes) / len(routes)
    if average_samples == 0:
        return "low"
    valid_samples = sum(sum(1 for v in r.pm25_samples if v > 0) for r in routes) / len(routes)
    valid_ratio = valid_samples / average_samples

    if valid_ratio > 0.8 and average_samples >= 5:
        return "high"
    if valid_ratio > 0.5 and average_samples >= 3:
        return "medium"
    return "low"


def optimize_for_safety(
    routes: list[RouteCandidate],
    profile: UserHealthProfile,
    activity_level: ActivityLevel = ActivityLevel.LIGHT,
    travel_speed_kmh: float = 30.0,
) -> OptimizedRouteResult:
    """Rank candidates by composite score and pick the safest.

    Raises:
        NoRoutesError: If *routes* is empty.
    """
    if not routes:
        raise NoRoutesError("No routes provided for optimization")

    quality = assess_data_quality(routes)
    unranked = []
    for route in routes:
        segments = analyze_segments(route, profile, activity_level, travel_speed_kmh)
        unranked.append((route, segments, compute_scores(route, segments)))

    # Stable sort keeps input order between equal scores.
    unranked.sort(key=lambda item: item[2].overall_score)
    ranked = [
        ScoredRoute(route=route, scores=scores, segments=segments, rank=i + 1)
        for i, (route, segments, scores) in enumerate(unranked)
    ]

    best = ranked[0]
    worst = ranked[-1]
    fastest = min(r.duration_seconds for r in routes)
    shortest = min(r.distance_meters for r in routes)

    tradeoff = TradeoffAnalysis(
        health_benefit=(
            round((1 - best.scores.average_pm25 / worst.scores.average_pm25) * 100)
            if worst.scores.average_pm25 > 0 else 0
        ),
        time_cost=round((best.route.duration_seconds - fastest) / 60),
        distance_cost=round((best.route.distance_meters - shortest) / 1000, 1),
    )

    logger.debug(
        "Optimized %d routes: best=%d overall=%.1f",
        len(ranked), best.route.index, best.scores.overall_score,
    )
    return OptimizedRouteResult(
        safest_route=best.route,
        all_routes=ranked,
        decision=make_decision(best, tradeoff, profile.diseases, quality),
        metadata=OptimizationMetadata(
            routes_analyzed=len(routes),
            samples_per_route=len(routes[0].pm25_samples),
            profile_used=bool(profile.diseases),
            data_quality=quality,
        ),
    )
