"""Context fusion: the same AQI does not mean the same risk.

Combines who (profile), what (transport mode), where (location type, area,
nearby sources) and how long into one adjusted score with decision-ready
text, ranked mitigation options and a suggested safe window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from exposure_risk.data.coefficients import DISEASE_COEFFICIENTS
from exposure_risk.data.thresholds import PHRI_HIGH_MAX, PHRI_LOW_MAX, PHRI_MODERATE_MAX
from exposure_risk.models import (
    ActivityContext,
    ActivityMode,
    AreaType,
    DecisionLevel,
    EnvironmentalContext,
    ExposureInput,
    LocationContext,
    LocationType,
    PHRIResult,
    UserContext,
    UserHealthProfile,
    WeatherCondition,
)
from exposure_risk.scoring import compute_risk

logger = logging.getLogger(__name__)

Ventilation = Literal["low", "medium", "high", "very_high"]
Feasibility = Literal["easy", "moderate", "difficult"]


@dataclass(frozen=True)
class ModeProfile:
    exposure_multiplier: float
    ventilation: Ventilation
    label: str


MODE_PROFILES: dict[ActivityMode, ModeProfile] = {
    ActivityMode.WALKING: ModeProfile(1.0, "high", "Walking"),
    ActivityMode.CYCLING: ModeProfile(1.2, "very_high", "Cycling"),
    ActivityMode.MOTORCYCLE: ModeProfile(0.9, "high", "Motorcycle"),
    ActivityMode.CAR: ModeProfile(0.4, "low", "Car"),
    ActivityMode.BUS: ModeProfile(0.5, "medium", "Bus"),
    ActivityMode.BTS: ModeProfile(0.3, "low", "BTS"),
    ActivityMode.MRT: ModeProfile(0.2, "low", "MRT"),
    ActivityMode.STATIONARY: ModeProfile(0.8, "low", "Standing or sitting"),
}

VENTILATION_MULTIPLIERS: dict[str, float] = {
    "low": 1.0,
    "medium": 1.3,
    "high": 1.6,
    "very_high": 2.0,
}

WEATHER_MODIFIERS: dict[WeatherCondition, float] = {
    WeatherCondition.CLEAR: 1.0,
    WeatherCondition.CLOUDY: 0.95,
    WeatherCondition.RAIN: 0.6,
    WeatherCondition.HAZE: 1.2,
    WeatherCondition.STORM: 0.5,
}

LOCATION_MODIFIERS: dict[LocationType, float] = {
    LocationType.OUTDOOR: 1.0,
    LocationType.INDOOR: 0.3,
    LocationType.TRANSIT: 0.5,
    LocationType.VEHICLE: 0.4,
}

AREA_MODIFIERS: dict[AreaType, float] = {
    AreaType.URBAN: 1.0,
    AreaType.SUBURBAN: 0.8,
    AreaType.RURAL: 0.6,
    AreaType.INDUSTRIAL: 1.3,
}

CONTEXT_MULTIPLIER_CAP = 3.0
SAFE_WINDOW_MIN_PM25 = 25.0
MAX_FACTS = 4
MAX_OPTIONS = 4

PRIMARY_DECISIONS: dict[DecisionLevel, str] = {
    DecisionLevel.SAFE: "Carry on with your activity as normal",
    DecisionLevel.CAUTION: "Watch for unusual symptoms during the activity",
    DecisionLevel.WARNING: "Avoid strenuous outdoor activity",
    DecisionLevel.DANGER: "Avoid all outdoor activity",
}


@dataclass(frozen=True)
class FusedOption:
    id: str
    action: str
    risk_reduction: int  # percent
    feasibility: Feasibility
    time_to_implement: str


@dataclass(frozen=True)
class SafeWindow:
    start: str
    end: str


@dataclass(frozen=True)
class FusedHealthContext:
    environment: EnvironmentalContext
    location: LocationContext
    activity: ActivityContext
    user: UserContext
    effective_pm25: float
    context_multiplier: float
    risk_score: float
    risk_level: DecisionLevel
    phri: PHRIResult
    primary_decision: str
    supporting_facts: list[str] = field(default_factory=list)
    options: list[FusedOption] = field(default_factory=list)
    safe_window: SafeWindow | None = None


def _mode_profile(mode: ActivityMode) -> ModeProfile:
    return MODE_PROFILES.get(mode, MODE_PROFILES[ActivityMode.WALKING])


def effective_pm25(
    environment: EnvironmentalContext,
    location: LocationContext,
    activity: ActivityContext,
) -> float:
    """PM2.5 actually reaching the person after mode, weather and place modifiers."""
    effective = environment.pm25 * _mode_profile(activity.mode).exposure_multiplier

    if environment.weather is not None:
        effective *= WEATHER_MODIFIERS.get(environment.weather, 1.0)
    effective *= LOCATION_MODIFIERS.get(location.location_type, 1.0)
    if location.area_type is not None:
        effective *= AREA_MODIFIERS.get(location.area_type, 1.0)

    if environment.temperature is not None and environment.humidity is not None:
        if environment.temperature > 35 and environment.humidity < 30:
            effective *= 1.15
        if environment.temperature < 25 and environment.humidity > 60:
            effective *= 0.9

    if environment.wind_speed is not None:
        if environment.wind_speed > 20:
            effective *= 0.7
        elif environment.wind_speed < 5:
            effective *= 1.1

    return max(effective, 0.0)


def context_multiplier(
    location: LocationContext,
    activity: ActivityContext,
    user: UserContext,
) -> float:
    """Breathing-rate, exertion and sensitivity multiplier, capped at 3x."""
    multiplier = VENTILATION_MULTIPLIERS[_mode_profile(activity.mode).ventilation]

    if activity.is_exercising:
        multiplier *= 1.5
    if user.recent_exposure_hours is not None and user.recent_exposure_hours > 4:
        multiplier *= 1.0 + (user.recent_exposure_hours - 4) * 0.05
    if user.current_symptoms:
        multiplier *= 1.0 + len(user.current_symptoms) * 0.1
    if location.nearby_sources:
        multiplier *= 1.0 + len(location.nearby_sources) * 0.1

    return min(multiplier, CONTEXT_MULTIPLIER_CAP)


def decision_level(score: float) -> DecisionLevel:
    if score < PHRI_LOW_MAX:
        return DecisionLevel.SAFE
    if score < PHRI_MODERATE_MAX:
        return DecisionLevel.CAUTION
    if score < PHRI_HIGH_MAX:
        return DecisionLevel.WARNING
    return DecisionLevel.DANGER


def _supporting_facts(
    environment: EnvironmentalContext,
    activity: ActivityContext,
    user: UserContext,
) -> list[str]:
    facts = [f"PM2.5: {environment.pm25:g} µg/m³"]

    mode = _mode_profile(activity.mode)
    if mode.exposure_multiplier > 1:
        facts.append(
            f"{mode.label} raises exposure by {round((mode.exposure_multiplier - 1) * 100)}%"
        )
    elif mode.exposure_multiplier < 1:
        facts.append(
            f"{mode.label} cuts exposure by {round((1 - mode.exposure_multiplier) * 100)}%"
        )

    if user.diseases:
        coefficient = DISEASE_COEFFICIENTS.get(user.diseases[0])
        if coefficient is not None:
            facts.append(
                f"Sensitivity to pollution is {round((coefficient.sensitivity - 1) * 100)}% "
                "above normal"
            )

    if activity.duration_minutes > 60:
        facts.append(f"{activity.duration_minutes:g} minutes adds to cumulative risk")

    if environment.weather == WeatherCondition.RAIN:
        facts.append("Rain is washing particulates out of the air")
    elif environment.weather == WeatherCondition.HAZE:
        facts.append("Haze indicates poor dispersion")

    return facts[:MAX_FACTS]


def _options(
    level: DecisionLevel,
    activity: ActivityContext,
    user: UserContext,
) -> list[FusedOption]:
    if level == DecisionLevel.SAFE:
        return [FusedOption("proceed", "Go ahead", 0, "easy", "Now")]

    options: list[FusedOption] = []
    if not user.has_mask:
        options.append(FusedOption("wear_n95", "Wear an N95 mask", 75, "easy", "Now"))
    if activity.mode in (ActivityMode.WALKING, ActivityMode.CYCLING):
        options.append(
            FusedOption("use_transit", "Take the BTS/MRT instead", 60, "moderate", "10-15 min")
        )
    if activity.mode == ActivityMode.MOTORCYCLE:
        options.append(
            FusedOption(
                "use_car", "Go by car with the air conditioning on", 50, "moderate",
                "Depends on access",
            )
        )
    if activity.duration_minutes > 30:
        options.append(
            FusedOption(
                "reduce_duration", "Halve the time spent outdoors", 40, "moderate", "Replan",
            )
        )
    if level in (DecisionLevel.WARNING, DecisionLevel.DANGER):
        options.append(
            FusedOption(
                "postpone", "Postpone the activity to 18:00-20:00", 50, "difficult", "Wait 4-6 h",
            )
        )
    if level == DecisionLevel.DANGER:
        options.append(
            FusedOption("stay_indoor", "Stay indoors with filtered air", 80, "easy", "Now")
        )

    # Stable sort keeps insertion order between equal reductions.
    options.sort(key=lambda o: o.risk_reduction, reverse=True)
    return options[:MAX_OPTIONS]


def safe_window(
    pm25: float,
    level: DecisionLevel,
    hour: int | None = None,
) -> SafeWindow | None:
    """Suggest a lower-pollution window from the typical Bangkok daily cycle.

    Morning (07-10) and evening (16-19) rush hours point to the following
    dip; any other hour gets the early-evening window.
    """
    if level == DecisionLevel.SAFE or pm25 < SAFE_WINDOW_MIN_PM25:
        return None
    if hour is None:
        hour = datetime.now().hour
    if 7 <= hour < 10:
        return SafeWindow("11:00", "14:00")
    if 16 <= hour < 19:
        return SafeWindow("20:00", "22:00")
    return SafeWindow("19:00", "21:00")


def fuse(
    environment: EnvironmentalContext,
    location: LocationContext,
    activity: ActivityContext,
    user: UserContext,
    *,
    hour: int | None = None,
) -> FusedHealthContext:
    """Fuse all context into one assessment.

    The PHRI is computed on the effective concentration (outdoor only when
    the location is outdoor) and then scaled by the context multiplier.
    """
    effective = effective_pm25(environment, location, activity)
    multiplier = context_multiplier(location, activity, user)

    phri = compute_risk(
        ExposureInput(
            pm25=effective,
            duration_minutes=activity.duration_minutes,
            activity_level=activity.intensity,
            is_outdoor=location.location_type == LocationType.OUTDOOR,
            has_mask=user.has_mask,
            mask_type=user.mask_type,
        ),
        UserHealthProfile(
            age=user.age,
            diseases=list(user.diseases),
            smoking_status=user.smoking_status,
        ),
    )

    score = min(phri.score * multiplier, 100.0)
    level = decision_level(score)
    logger.debug(
        "Fused context: effective pm25=%.1f multiplier=%.2f score=%.1f level=%s",
        effective, multiplier, score, level,
    )

    return FusedHealthContext(
        environment=environment,
        location=location,
        activity=activity,
        user=user,
        effective_pm25=round(effective, 1),
        context_multiplier=round(multiplier, 2),
        risk_score=round(score, 1),
        risk_level=level,
        phri=phri,
        primary_decision=PRIMARY_DECISIONS[level],
        supporting_facts=_supporting_facts(environment, activity, user),
        options=_options(level, activity, user),
        safe_window=safe_window(environment.pm25, level, hour),
    )


def quick_check(
    pm25: float,
    mode: ActivityMode,
    duration_minutes: float,
    has_conditions: bool,
) -> tuple[bool, str]:
    """Go/no-go without a full profile.

    The base threshold (35 with conditions, 50 without) is divided by the
    mode's exposure multiplier.
    """
    profile = _mode_profile(mode)
    threshold = (35.0 if has_conditions else 50.0) / profile.exposure_multiplier

    if pm25 > threshold:
        return False, f"PM2.5 {pm25:g} µg/m³ is above the limit for {profile.label.lower()}"
    if duration_minutes > 120 and pm25 > 25:
        return False, "Too long an exposure for this PM2.5 level"
    return True, "Activity can go ahead"
