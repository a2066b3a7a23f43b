"""Literature-derived coefficients for the PHRI formula.

References:
    Pope CA III, Dockery DW. "Health effects of fine particulate air
    pollution." J Air Waste Manag Assoc. 2006;56(6):709-742.

    Kunzli N, et al. "Public-health impact of outdoor and traffic-related
    air pollution." Lancet. 2000;356(9232):795-801.

    Brook RD, et al. "Particulate matter air pollution and cardiovascular
    disease." Circulation. 2010;121(21):2331-2378.

    Johnson AT. "Biomechanics and Exercise Physiology: Quantitative
    Modeling." CRC Press, 2007.

    WHO Global Air Quality Guidelines, 2021.

These tables are built once at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass

from exposure_risk.models import ActivityLevel, DiseaseProfile, MaskType, SmokingStatus


@dataclass(frozen=True)
class DiseaseCoefficient:
    sensitivity: float  # relative risk multiplier vs. general population
    pm25_threshold: float  # personal safe threshold, µg/m³
    description: str
    reference: str


DISEASE_COEFFICIENTS: dict[DiseaseProfile, DiseaseCoefficient] = {
    DiseaseProfile.ASTHMA: DiseaseCoefficient(
        1.8, 25.0, "Asthma raises PM2.5 sensitivity by about 80%", "Kunzli N, et al. Lancet 2000",
    ),
    DiseaseProfile.COPD: DiseaseCoefficient(
        2.0, 20.0, "COPD patients face very high PM2.5 risk", "Pope CA III, Dockery DW. JAWMA 2006",
    ),
    DiseaseProfile.CARDIOVASCULAR: DiseaseCoefficient(
        1.5, 35.0, "Heart disease raises PM2.5 risk by about 50%", "Brook RD, et al. Circulation 2010",
    ),
    DiseaseProfile.DIABETES: DiseaseCoefficient(
        1.3, 37.5, "Diabetes raises sensitivity to air pollution", "Pope CA III, Dockery DW. JAWMA 2006",
    ),
    DiseaseProfile.ELDERLY: DiseaseCoefficient(
        1.6, 25.0, "Adults over 65 carry about 60% higher risk", "WHO Air Quality Guidelines 2021",
    ),
    DiseaseProfile.CHILD: DiseaseCoefficient(
        1.4, 25.0, "Developing lungs are vulnerable to long-term harm", "WHO Air Quality Guidelines 2021",
    ),
    DiseaseProfile.PREGNANT: DiseaseCoefficient(
        1.4, 25.0, "Exposure affects both mother and fetus", "WHO Air Quality Guidelines 2021",
    ),
    DiseaseProfile.IMMUNOCOMPROMISED: DiseaseCoefficient(
        1.7, 25.0, "Weakened immunity raises infection risk", "Pope CA III, Dockery DW. JAWMA 2006",
    ),
    DiseaseProfile.GENERAL: DiseaseCoefficient(
        1.0, 50.0, "General population", "Thai PCD Standard",
    ),
}

DEFAULT_PM25_THRESHOLD: float = 50.0
"""Thai PCD 24-hour standard, used when a profile lists no condition."""

# Intake relative to resting minute ventilation (8, 20, 40, 80 L/min).
ACTIVITY_INTAKE: dict[ActivityLevel, float] = {
    ActivityLevel.REST: 1.0,
    ActivityLevel.LIGHT: 2.5,
    ActivityLevel.MODERATE: 5.0,
    ActivityLevel.VIGOROUS: 10.0,
}

INDOOR_ACTIVITY_FACTOR: float = 0.3

# Fraction of PM2.5 that passes the mask (1 - filtration efficiency).
MASK_PROTECTION: dict[MaskType, float] = {
    MaskType.N95: 0.05,
    MaskType.SURGICAL: 0.40,
    MaskType.CLOTH: 0.70,
    MaskType.NONE: 1.0,
}

SMOKING_MODIFIERS: dict[SmokingStatus, float] = {
    SmokingStatus.CURRENT: 1.3,
    SmokingStatus.FORMER: 1.1,
    SmokingStatus.NEVER: 1.0,
}

# (inclusive upper age, factor), checked in order; older than the last bracket -> 1.5
AGE_BRACKETS: list[tuple[int, float]] = [
    (5, 1.5),
    (12, 1.3),
    (18, 1.1),
    (65, 1.0),
    (75, 1.3),
]

SENIOR_AGE_FACTOR: float = 1.5
