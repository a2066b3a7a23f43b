"""Deterministic weighted risk engine used by the travel-context screens.

Formula::

    base   = clamp((pm25/500 * 100 * 0.6 + aqi/500 * 100 * 0.3) * weather, 0, 100)
    score  = clamp(base * vulnerability * travel * duration, 0, 100)

The engine is independent of the PHRI core but shares its threshold tables.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from exposure_risk.data.thresholds import (
    AQI_BANDS,
    AQI_MAX,
    AQI_MIN,
    PM25_BANDS,
    PM25_MAX,
    PM25_MIN,
    PM25_REFERENCE,
    PHRI_HIGH_MAX,
    PHRI_LOW_MAX,
    PHRI_MODERATE_MAX,
)
from exposure_risk.models import (
    AirQualityReading,
    HealthCondition,
    MaskType,
    RiskCategory,
    RiskScore,
    SensitivityLevel,
    TravelerProfile,
    TravelInput,
    TravelMode,
)

logger = logging.getLogger(__name__)

PM25_WEIGHT = 0.6
AQI_WEIGHT = 0.3
SECONDARY_CONDITION_WEIGHT = 0.3

# (inclusive upper age, modifier); older -> ELDERLY_MODIFIER
AGE_MODIFIERS: list[tuple[int, float]] = [(12, 1.3), (18, 1.1), (64, 1.0)]
ELDERLY_MODIFIER = 1.4

CONDITION_MODIFIERS: dict[HealthCondition, float] = {
    HealthCondition.ASTHMA: 1.5,
    HealthCondition.COPD: 1.6,
    HealthCondition.HEART_DISEASE: 1.4,
    HealthCondition.DIABETES: 1.2,
    HealthCondition.HYPERTENSION: 1.2,
    HealthCondition.ALLERGY: 1.3,
    HealthCondition.SINUSITIS: 1.2,
    HealthCondition.PREGNANT: 1.4,
    HealthCondition.IMMUNOCOMPROMISED: 1.5,
}

SENSITIVITY_MODIFIERS: dict[SensitivityLevel, float] = {
    SensitivityLevel.HIGH: 1.4,
    SensitivityLevel.MODERATE: 1.2,
    SensitivityLevel.LOW: 1.0,
}

# This engine treats surgical masks more conservatively than the PHRI core.
MASK_MODIFIERS: dict[MaskType, float] = {
    MaskType.N95: 0.05,
    MaskType.SURGICAL: 0.5,
    MaskType.CLOTH: 0.7,
    MaskType.NONE: 1.0,
}

TRAVEL_MODIFIERS: dict[TravelMode, float] = {
    TravelMode.WALKING: 1.5,
    TravelMode.CYCLING: 1.6,
    TravelMode.MOTORCYCLE: 1.4,
    TravelMode.CAR: 1.0,
    TravelMode.BUS: 1.1,
    TravelMode.BTS_MRT: 0.9,
    TravelMode.INDOOR: 0.3,
}

TRAVEL_LABELS: dict[TravelMode, str] = {
    TravelMode.WALKING: "Walking",
    TravelMode.CYCLING: "Cycling",
    TravelMode.MOTORCYCLE: "Motorcycle",
    TravelMode.CAR: "Car",
    TravelMode.BUS: "Bus",
    TravelMode.BTS_MRT: "BTS/MRT",
    TravelMode.INDOOR: "Indoors",
}

# (inclusive upper minutes, modifier); longer -> EXTENDED_DURATION_MODIFIER
DURATION_MODIFIERS: list[tuple[float, float]] = [(15, 0.7), (60, 1.0), (180, 1.3)]
EXTENDED_DURATION_MODIFIER = 1.6

CATEGORY_LABELS: dict[RiskCategory, tuple[str, str]] = {
    RiskCategory.LOW: ("ความเสี่ยงต่ำ", "Low Risk"),
    RiskCategory.MODERATE: ("ความเสี่ยงปานกลาง", "Moderate Risk"),
    RiskCategory.HIGH: ("ความเสี่ยงสูง", "High Risk"),
    RiskCategory.SEVERE: ("ความเสี่ยงรุนแรง", "Severe Risk"),
}

Impact = Literal["positive", "neutral", "negative"]


@dataclass(frozen=True)
class RiskFactor:
    name: str
    value: float
    impact: Impact
    description: str


@dataclass(frozen=True)
class RiskBreakdown:
    score: RiskScore
    factors: list[RiskFactor] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def is_valid_reading(air_quality: AirQualityReading) -> bool:
    if not PM25_MIN <= air_quality.pm25 <= PM25_MAX:
        return False
    if air_quality.aqi is not None and not AQI_MIN <= air_quality.aqi <= AQI_MAX:
        return False
    return True


def pm25_category(pm25: float) -> str:
    """Return the PM2.5 band key (GOOD ... HAZARDOUS) for a concentration."""
    for upper, key, _ in PM25_BANDS:
        if pm25 <= upper:
            return key
    return PM25_BANDS[-1][1]


def pm25_category_label(pm25: float) -> str:
    for upper, _, label in PM25_BANDS:
        if pm25 <= upper:
            return label
    return PM25_BANDS[-1][2]


def aqi_category(aqi: float) -> str:
    """Return the US EPA AQI band key for an index value."""
    for upper, key, _ in AQI_BANDS:
        if aqi <= upper:
            return key
    return AQI_BANDS[-1][1]


def base_exposure(air_quality: AirQualityReading) -> float:
    pm25_score = air_quality.pm25 / PM25_REFERENCE * 100 * PM25_WEIGHT
    aqi_score = air_quality.aqi / 500 * 100 * AQI_WEIGHT if air_quality.aqi else 0.0

    # Hot and dry air disperses particulates poorly; cool humid air helps.
    weather = 1.0
    if air_quality.temperature is not None and air_quality.humidity is not None:
        if air_quality.temperature > 35 and air_quality.humidity < 40:
            weather = 1.1
        elif air_quality.temperature < 20 and air_quality.humidity > 80:
            weather = 0.95

    return _clamp((pm25_score + aqi_score) * weather, 0.0, 100.0)


def vulnerability_modifier(profile: TravelerProfile) -> float:
    """Age bracket x conditions x sensitivity x mask.

    Conditions combine with diminishing returns: the strongest applies in
    full, each further one adds 30% of its excess over 1.0.
    """
    modifier = ELDERLY_MODIFIER
    for upper, value in AGE_MODIFIERS:
        if profile.age <= upper:
            modifier = value
            break

    condition_mods = sorted(
        (CONDITION_MODIFIERS.get(c, 1.0) for c in profile.conditions), reverse=True,
    )
    if condition_mods:
        primary = condition_mods[0]
        secondary = sum((m - 1) * SECONDARY_CONDITION_WEIGHT for m in condition_mods[1:])
        modifier *= primary + secondary

    modifier *= SENSITIVITY_MODIFIERS.get(profile.sensitivity, 1.0)

    if profile.has_mask and profile.mask_type:
        modifier *= MASK_MODIFIERS.get(profile.mask_type, 1.0)

    return modifier


def travel_modifier(mode: TravelMode) -> float:
    return TRAVEL_MODIFIERS.get(mode, 1.0)


def duration_modifier(duration_minutes: float) -> float:
    for upper, value in DURATION_MODIFIERS:
        if duration_minutes <= upper:
            return value
    return EXTENDED_DURATION_MODIFIER


def risk_category(score: float) -> RiskCategory:
    if score <= PHRI_LOW_MAX:
        return RiskCategory.LOW
    if score <= PHRI_MODERATE_MAX:
        return RiskCategory.MODERATE
    if score <= PHRI_HIGH_MAX:
        return RiskCategory.HIGH
    return RiskCategory.SEVERE


def compute(
    air_quality: AirQualityReading,
    profile: TravelerProfile,
    travel: TravelInput,
) -> RiskScore:
    """Compute a reproducible 0-100 risk score.

    Readings outside the validation ranges (PM2.5 0-1000, AQI 0-500) are
    replaced by a zero reading instead of raising.
    """
    if not is_valid_reading(air_quality):
        logger.warning(
            "Invalid air quality reading (pm25=%s, aqi=%s), scoring as zero",
            air_quality.pm25, air_quality.aqi,
        )
        air_quality = AirQualityReading(pm25=0.0, aqi=0.0)

    base = base_exposure(air_quality)
    vulnerability = vulnerability_modifier(profile)
    travel_mod = travel_modifier(travel.mode)
    duration_mod = duration_modifier(travel.duration_minutes)

    total = _clamp(base * vulnerability * travel_mod * duration_mod, 0.0, 100.0)
    category = risk_category(total)
    label, label_en = CATEGORY_LABELS[category]

    return RiskScore(
        total=round(total, 1),
        base_exposure=round(base, 1),
        vulnerability_modifier=round(vulnerability, 2),
        travel_modifier=travel_mod,
        duration_modifier=duration_mod,
        category=category,
        category_label=label,
        category_label_en=label_en,
    )


def generate_recommendations(
    score: RiskScore,
    air_quality: AirQualityReading,
    travel: TravelInput,
) -> list[str]:
    if score.category == RiskCategory.SEVERE:
        return [
            "Avoid all outdoor activity",
            "Run an air purifier indoors",
            "Wear an N95 mask if you must go outside",
        ]
    if score.category == RiskCategory.HIGH:
        recommendations = ["Cut down time spent outdoors", "Wear a face mask"]
        if travel.mode in (TravelMode.WALKING, TravelMode.CYCLING):
            recommendations.append("Consider taking the BTS/MRT instead")
        return recommendations
    if score.category == RiskCategory.MODERATE:
        recommendations = ["Watch for unusual symptoms"]
        if air_quality.pm25 > 37.5:
            recommendations.append("Sensitive groups should limit outdoor activity")
        return recommendations
    return ["Air quality is good", "Outdoor activities can continue as normal"]


def compute_with_breakdown(
    air_quality: AirQualityReading,
    profile: TravelerProfile,
    travel: TravelInput,
) -> RiskBreakdown:
    """Score plus the factors behind it and matching recommendations."""
    score = compute(air_quality, profile, travel)
    pm25 = air_quality.pm25

    factors = [
        RiskFactor(
            name="PM2.5",
            value=pm25,
            impact="negative" if pm25 > 50 else "neutral" if pm25 > 25 else "positive",
            description=pm25_category_label(pm25),
        )
    ]
    if profile.conditions:
        factors.append(
            RiskFactor(
                name="Health conditions",
                value=len(profile.conditions),
                impact="negative",
                description=f"{len(profile.conditions)} condition(s) raise the risk",
            )
        )

    mod = score.travel_modifier
    factors.append(
        RiskFactor(
            name="Travel mode",
            value=mod,
            impact="negative" if mod > 1.2 else "positive" if mod < 0.9 else "neutral",
            description=TRAVEL_LABELS.get(travel.mode, str(travel.mode)),
        )
    )

    return RiskBreakdown(
        score=score,
        factors=factors,
        recommendations=generate_recommendations(score, air_quality, travel),
    )


def should_proceed(
    air_quality: AirQualityReading,
    profile: TravelerProfile,
    travel: TravelInput,
) -> tuple[bool, str]:
    """Quick go/no-go check.

    Returns (proceed, reason).
    """
    score = compute(air_quality, profile, travel)
    if score.category == RiskCategory.SEVERE:
        return False, "Risk is too severe"
    if score.category == RiskCategory.HIGH and profile.conditions:
        return False, "Not recommended for people with health conditions"
    return True, "Activity can go ahead"
