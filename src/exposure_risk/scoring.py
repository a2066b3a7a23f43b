"""Personal Health Risk Index (PHRI) scoring and route risk comparison."""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from exposure_risk.data.coefficients import (
    ACTIVITY_INTAKE,
    AGE_BRACKETS,
    DISEASE_COEFFICIENTS,
    INDOOR_ACTIVITY_FACTOR,
    MASK_PROTECTION,
    SENIOR_AGE_FACTOR,
    SMOKING_MODIFIERS,
)
from exposure_risk.data.thresholds import (
    PHRI_HIGH_MAX,
    PHRI_LOW_MAX,
    PHRI_MODERATE_MAX,
    PM25_MAX,
    PM25_MIN,
    PM25_REFERENCE,
    RISK_LEVEL_LABELS,
)
from exposure_risk.models import (
    ActivityLevel,
    Coordinate,
    DiseaseProfile,
    ExposureInput,
    MaskType,
    PHRIBreakdown,
    PHRIResult,
    RiskLevel,
    RouteCandidate,
    RouteRiskComparison,
    SegmentRisk,
    SmokingStatus,
    UserHealthProfile,
)

logger = logging.getLogger(__name__)

DISEASE_FACTOR_CAP = 3.0
COMORBIDITY_BONUS = 0.1
DURATION_FACTOR_CAP = 1.5
MIN_TRAVEL_SPEED_KMH = 1.0
ROUTE_DELTA_THRESHOLD = 10.0
RESPIRATORY_DISEASES = frozenset({DiseaseProfile.ASTHMA, DiseaseProfile.COPD})


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def base_exposure(pm25: float) -> float:
    """Base exposure index: PM2.5 relative to the 500 µg/m³ hazardous level."""
    if pm25 < 0:
        return 0.0
    return min(pm25 / PM25_REFERENCE * 100, 100.0)


def duration_factor(duration_minutes: float) -> float:
    """Non-linear duration response.

    Short exposures are discounted (0.5-0.8 up to 15 min), the 15-60 min
    band saturates from 0.8 towards 1.0 (about 0.89 at one hour), longer
    exposures rise linearly from 1.0 to 1.3 at three hours, and anything
    beyond creeps towards a hard ceiling of 1.5.
    """
    m = duration_minutes
    if m <= 0:
        return 0.0
    if m <= 15:
        return 0.5 + (m / 15) * 0.3
    if m <= 60:
        return 0.8 + 0.2 * (m - 15) / (m + 40)
    if m <= 180:
        return 1.0 + ((m - 60) / 120) * 0.3
    return min(1.3 + ((m - 180) / 180) * 0.2, DURATION_FACTOR_CAP)


def activity_factor(activity_level: ActivityLevel, is_outdoor: bool) -> float:
    """Relative PM2.5 intake from minute ventilation; indoor is a flat 0.3."""
    if not is_outdoor:
        return INDOOR_ACTIVITY_FACTOR
    return ACTIVITY_INTAKE.get(activity_level, 1.0)


def disease_factor(diseases: list[DiseaseProfile]) -> float:
    """Combined disease sensitivity.

    Multiple conditions use the geometric mean of their coefficients plus a
    10% bonus per extra condition, capped at 3x.  The combination is taken
    over the k most sensitive conditions for the best k, so adding a
    condition never lowers the factor.
    """
    unique = list(dict.fromkeys(diseases))
    if not unique:
        return 1.0

    coefficients = sorted(
        (
            DISEASE_COEFFICIENTS[d].sensitivity if d in DISEASE_COEFFICIENTS else 1.0
            for d in unique
        ),
        reverse=True,
    )
    if len(coefficients) == 1:
        return coefficients[0]

    best = 1.0
    for k in range(1, len(coefficients) + 1):
        geometric_mean = math.prod(coefficients[:k]) ** (1 / k)
        bonus = 1 + (k - 1) * COMORBIDITY_BONUS
        best = max(best, geometric_mean * bonus)
    return min(best, DISEASE_FACTOR_CAP)


def age_factor(age: float) -> float:
    if age < 0 or age > 120:
        return 1.0
    for upper, factor in AGE_BRACKETS:
        if age <= upper:
            return factor
    return SENIOR_AGE_FACTOR


def smoking_modifier(status: SmokingStatus) -> float:
    return SMOKING_MODIFIERS.get(status, 1.0)


def protection_factor(has_mask: bool, mask_type: MaskType | None = None) -> float:
    """Residual fraction of PM2.5 that reaches the lungs.

    A mask worn without a stated type is treated as a surgical mask.
    """
    if not has_mask:
        return MASK_PROTECTION[MaskType.NONE]
    return MASK_PROTECTION.get(mask_type or MaskType.SURGICAL, 1.0)


def risk_level(score: float) -> RiskLevel:
    if score < PHRI_LOW_MAX:
        return RiskLevel.LOW
    if score < PHRI_MODERATE_MAX:
        return RiskLevel.MODERATE
    if score < PHRI_HIGH_MAX:
        return RiskLevel.HIGH
    return RiskLevel.SEVERE


def _dominant_factors(
    base: float, duration: float, activity: float, disease: float, protection: float,
) -> list[str]:
    dominant: list[str] = []
    if base > 30:
        dominant.append("High PM2.5")
    if duration > 1.2:
        dominant.append("Long exposure")
    if activity > 3:
        dominant.append("Strenuous activity")
    if disease > 1.3:
        dominant.append("Pre-existing conditions")
    if protection > 0.7:
        dominant.append("No mask protection")
    return dominant[:3]


def _confidence(pm25: float, duration_minutes: float, profile: UserHealthProfile) -> float:
    confidence = 1.0
    if pm25 > 300:
        confidence *= 0.8
    if duration_minutes > 480:
        confidence *= 0.9
    if profile.age > 100:
        confidence *= 0.8

    if profile.diseases:
        confidence *= 1.05
    if profile.baseline_lung_function:
        confidence *= 1.1
    return min(confidence, 1.0)


def compute_risk(exposure: ExposureInput, profile: UserHealthProfile) -> PHRIResult:
    """Compute the Personal Health Risk Index for one exposure episode.

    PHRI = Base x Duration x Activity x Disease x Age x Smoking x Protection,
    clamped to [0, 100].  Out-of-range concentrations and durations are
    clamped rather than rejected; *exposure* itself is never modified.
    """
    pm25 = _clamp(exposure.pm25, PM25_MIN, PM25_MAX)
    minutes = max(exposure.duration_minutes, 0.0)

    base = base_exposure(pm25)
    duration = duration_factor(minutes)
    activity = activity_factor(exposure.activity_level, exposure.is_outdoor)
    disease = disease_factor(profile.diseases)
    age = age_factor(profile.age)
    smoking = smoking_modifier(profile.smoking_status)
    protection = protection_factor(exposure.has_mask, exposure.mask_type)

    raw = base * duration * activity * disease * age * smoking * protection
    score = _clamp(raw, 0.0, 100.0)
    level = risk_level(score)
    label, label_en = RISK_LEVEL_LABELS[level]

    return PHRIResult(
        score=round(score, 1),
        normalized_score=round(score / 10, 1),
        level=level,
        level_label=label,
        level_label_en=label_en,
        breakdown=PHRIBreakdown(
            base_exposure=round(base, 1),
            duration_factor=round(duration, 2),
            activity_factor=round(activity, 2),
            disease_factor=round(disease, 2),
            age_factor=round(age, 2),
            smoking_modifier=round(smoking, 2),
            protection_factor=round(protection, 2),
        ),
        dominant_factors=_dominant_factors(base, duration, activity, disease, protection),
        confidence=round(_confidence(pm25, minutes, profile), 2),
    )


def _score_route(
    route: RouteCandidate,
    profile: UserHealthProfile,
    travel_speed_kmh: float,
    activity_level: ActivityLevel,
) -> RouteRiskComparison:
    samples = list(route.aligned_samples())
    if route.sample_locations and len(route.sample_locations) != len(route.pm25_samples):
        logger.warning(
            "Route %d: %d samples vs %d locations, reusing the last location",
            route.index, len(route.pm25_samples), len(route.sample_locations),
        )

    segment_km = route.distance_km / max(len(samples) - 1, 1)
    segment_minutes = segment_km / travel_speed_kmh * 60

    cumulative = 0.0
    peak = 0.0
    peak_location: Coordinate | None = None
    segments: list[SegmentRisk] = []

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
        cumulative += result.score
        if result.score > peak:
            peak = result.score
            if location is not None:
                peak_location = location
        segments.append(
            SegmentRisk(
                start_km=round(i * segment_km, 3),
                end_km=round((i + 1) * segment_km, 3),
                pm25=pm25,
                phri=result.score,
                level=result.level,
            )
        )

    average = cumulative / len(samples) if samples else 0.0
    average_pm25 = sum(pm for pm, _ in samples) / len(samples) if samples else 0.0

    return RouteRiskComparison(
        route_index=route.index,
        cumulative_phri=round(cumulative, 1),
        average_phri=round(average, 1),
        peak_phri=round(peak, 1),
        average_pm25=round(average_pm25, 1),
        peak_pm25_location=peak_location,
        duration_minutes=round(route.distance_km / travel_speed_kmh * 60),
        distance_km=route.distance_km,
        segment_risks=segments,
    )


def compare_route_risks(
    routes: list[RouteCandidate],
    profile: UserHealthProfile,
    travel_speed_kmh: float = 30.0,
    activity_level: ActivityLevel = ActivityLevel.LIGHT,
) -> list[RouteRiskComparison]:
    """Rank routes by cumulative health risk rather than distance or time.

    Each PM2.5 sample is scored as one outdoor segment at the given travel
    speed.  Routes are returned safest first (ascending average PHRI, ties
    broken by average PM2.5 and then route index) with the first flagged as
    safest.
    """
    speed = max(travel_speed_kmh, MIN_TRAVEL_SPEED_KMH)
    comparisons = [_score_route(r, profile, speed, activity_level) for r in routes]
    comparisons.sort(key=lambda c: (c.average_phri, c.average_pm25, c.route_index))

    if not comparisons:
        return comparisons

    safest = comparisons[0]
    recommendation = "Lowest health risk of the available routes"
    if len(comparisons) > 1:
        worst = comparisons[-1]
        risk_diff = worst.average_phri - safest.average_phri
        time_diff = safest.duration_minutes - worst.duration_minutes
        if risk_diff > ROUTE_DELTA_THRESHOLD:
            if time_diff > 0:
                recommendation = (
                    f"Cuts risk by {risk_diff:.0f} points for {time_diff} extra minutes"
                )
            else:
                recommendation = f"Cuts risk by {risk_diff:.0f} points versus the worst route"

    comparisons[0] = replace(safest, is_safest=True, recommendation=recommendation)
    logger.debug(
        "Ranked %d routes, safest=%d (avg PHRI %.1f)",
        len(comparisons), safest.route_index, safest.average_phri,
    )
    return comparisons


def generate_route_decision(
    comparison: RouteRiskComparison,
    diseases: list[DiseaseProfile],
) -> str:
    """Two-line decision statement for a ranked route."""
    if RESPIRATORY_DISEASES.intersection(diseases) and comparison.peak_phri > 50:
        return "Route may be unsafe for respiratory patients\nConsider postponing the trip"

    if comparison.is_safest:
        if comparison.average_phri < PHRI_LOW_MAX:
            return f"Safe route\nAverage PM2.5 {round(comparison.average_pm25)} µg/m³"
        return "Best route available right now\nWear a mask for the whole trip"

    return "Moderate risk\nA better route is available"
