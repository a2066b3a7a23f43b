"""Data models for the exposure risk engine."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum


class DiseaseProfile(StrEnum):
    """Chronic condition or vulnerable group used by the PHRI formula."""

    ASTHMA = "asthma"
    COPD = "copd"
    CARDIOVASCULAR = "cardiovascular"
    DIABETES = "diabetes"
    ELDERLY = "elderly"
    CHILD = "child"
    PREGNANT = "pregnant"
    IMMUNOCOMPROMISED = "immunocompromised"
    GENERAL = "general"


class ActivityLevel(StrEnum):
    REST = "rest"
    LIGHT = "light"
    MODERATE = "moderate"
    VIGOROUS = "vigorous"


class RiskLevel(StrEnum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"


class SmokingStatus(StrEnum):
    NEVER = "never"
    FORMER = "former"
    CURRENT = "current"


class MaskType(StrEnum):
    N95 = "n95"
    SURGICAL = "surgical"
    CLOTH = "cloth"
    NONE = "none"


class WeatherCondition(StrEnum):
    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"
    HAZE = "haze"
    STORM = "storm"


class RiskCategory(StrEnum):
    """Category produced by the deterministic risk engine."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    SEVERE = "SEVERE"


class HealthCondition(StrEnum):
    """Condition keys understood by the deterministic risk engine."""

    ASTHMA = "asthma"
    COPD = "copd"
    HEART_DISEASE = "heart_disease"
    DIABETES = "diabetes"
    HYPERTENSION = "hypertension"
    ALLERGY = "allergy"
    SINUSITIS = "sinusitis"
    PREGNANT = "pregnant"
    IMMUNOCOMPROMISED = "immunocompromised"


class SensitivityLevel(StrEnum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class TravelMode(StrEnum):
    WALKING = "walking"
    CYCLING = "cycling"
    MOTORCYCLE = "motorcycle"
    CAR = "car"
    BUS = "bus"
    BTS_MRT = "bts_mrt"
    INDOOR = "indoor"


class ActivityMode(StrEnum):
    """Transport or activity mode used by context fusion."""

    WALKING = "walking"
    CYCLING = "cycling"
    MOTORCYCLE = "motorcycle"
    CAR = "car"
    BUS = "bus"
    BTS = "bts"
    MRT = "mrt"
    STATIONARY = "stationary"


class LocationType(StrEnum):
    OUTDOOR = "outdoor"
    INDOOR = "indoor"
    TRANSIT = "transit"
    VEHICLE = "vehicle"


class AreaType(StrEnum):
    URBAN = "urban"
    SUBURBAN = "suburban"
    RURAL = "rural"
    INDUSTRIAL = "industrial"


class PollutionSource(StrEnum):
    TRAFFIC = "traffic"
    INDUSTRIAL = "industrial"
    CONSTRUCTION = "construction"
    AGRICULTURAL = "agricultural"


class DecisionLevel(StrEnum):
    """Advisory bucket shared by context fusion and the decision advisor."""

    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"
    DANGER = "danger"


class NoRoutesError(ValueError):
    """Raised when a route comparison is asked to rank zero candidates."""


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class AirQualityReading:
    """A single air-quality snapshot supplied by the data collaborator."""

    pm25: float
    aqi: float | None = None
    temperature: float | None = None
    humidity: float | None = None
    wind_speed: float | None = None
    weather: WeatherCondition | None = None


@dataclass(frozen=True)
class UserHealthProfile:
    """Health profile consumed by the PHRI formula."""

    age: int
    diseases: list[DiseaseProfile] = field(default_factory=list)
    smoking_status: SmokingStatus = SmokingStatus.NEVER
    baseline_lung_function: float | None = None  # FEV1 % predicted


@dataclass(frozen=True)
class ExposureInput:
    """Parameters of one exposure episode."""

    pm25: float
    duration_minutes: float
    activity_level: ActivityLevel = ActivityLevel.LIGHT
    is_outdoor: bool = True
    has_mask: bool = False
    mask_type: MaskType | None = None


@dataclass(frozen=True)
class RouteCandidate:
    """A candidate route with PM2.5 sampled along its geometry.

    ``pm25_samples`` and ``sample_locations`` are expected to line up
    one-to-one.  Every sample is scored even when locations run short.
    """

    index: int
    coordinates: list[Coordinate]
    distance_meters: float
    duration_seconds: float
    pm25_samples: list[float] = field(default_factory=list)
    sample_locations: list[Coordinate] = field(default_factory=list)

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000

    def aligned_samples(self) -> Iterator[tuple[float, Coordinate | None]]:
        """Yield a (pm25, location) pair for every sample.

        Samples past the end of ``sample_locations`` reuse the last known
        location.  The location is None only when none were sampled.
        """
        last: Coordinate | None = None
        for i, pm25 in enumerate(self.pm25_samples):
            if i < len(self.sample_locations):
                last = self.sample_locations[i]
            yield pm25, last


@dataclass(frozen=True)
class TravelerProfile:
    """Profile shape used by the deterministic risk engine."""

    age: int
    conditions: list[HealthCondition] = field(default_factory=list)
    sensitivity: SensitivityLevel = SensitivityLevel.LOW
    has_mask: bool = False
    mask_type: MaskType | None = None


@dataclass(frozen=True)
class TravelInput:
    mode: TravelMode
    duration_minutes: float
    is_outdoor: bool = True


@dataclass(frozen=True)
class EnvironmentalContext:
    pm25: float
    aqi: float | None = None
    temperature: float | None = None
    humidity: float | None = None
    wind_speed: float | None = None  # km/h
    wind_direction: str | None = None
    weather: WeatherCondition | None = None
    uv_index: float | None = None


@dataclass(frozen=True)
class LocationContext:
    latitude: float
    longitude: float
    location_type: LocationType = LocationType.OUTDOOR
    nearby_sources: list[PollutionSource] = field(default_factory=list)
    area_type: AreaType | None = None
    elevation: float | None = None


@dataclass(frozen=True)
class ActivityContext:
    mode: ActivityMode
    intensity: ActivityLevel
    duration_minutes: float
    is_exercising: bool = False


@dataclass(frozen=True)
class UserContext:
    age: int
    diseases: list[DiseaseProfile] = field(default_factory=list)
    smoking_status: SmokingStatus = SmokingStatus.NEVER
    has_mask: bool = False
    mask_type: MaskType | None = None
    current_symptoms: list[str] = field(default_factory=list)
    recent_exposure_hours: float | None = None  # PM2.5 exposure in last 24h


@dataclass(frozen=True)
class PHRIBreakdown:
    """Rounded multiplicative factors behind a PHRI score."""

    base_exposure: float
    duration_factor: float
    activity_factor: float
    disease_factor: float
    age_factor: float
    smoking_modifier: float
    protection_factor: float


@dataclass(frozen=True)
class PHRIResult:
    """Personal Health Risk Index for one exposure episode."""

    score: float  # 0-100
    normalized_score: float  # 0-10
    level: RiskLevel
    level_label: str
    level_label_en: str
    breakdown: PHRIBreakdown
    dominant_factors: list[str] = field(default_factory=list)
    confidence: float = 1.0


@dataclass(frozen=True)
class SegmentRisk:
    start_km: float
    end_km: float
    pm25: float
    phri: float
    level: RiskLevel


@dataclass(frozen=True)
class RouteRiskComparison:
    """Per-route PHRI aggregate used to rank candidates by health cost."""

    route_index: int
    cumulative_phri: float
    average_phri: float
    peak_phri: float
    average_pm25: float
    peak_pm25_location: Coordinate | None
    duration_minutes: int
    distance_km: float
    segment_risks: list[SegmentRisk] = field(default_factory=list)
    recommendation: str = ""
    is_safest: bool = False


@dataclass(frozen=True)
class RiskScore:
    """Output of the deterministic risk engine."""

    total: float
    base_exposure: float
    vulnerability_modifier: float
    travel_modifier: float
    duration_modifier: float
    category: RiskCategory
    category_label: str
    category_label_en: str
