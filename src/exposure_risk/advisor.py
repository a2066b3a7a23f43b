"""Decision advisor: one short decision sentence plus 2-4 actionable options.

Sentences are picked from fixed templates with a stable hash of the rounded
PM2.5 and travel mode, so identical inputs always reproduce the same text.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field, replace
from typing import Literal

from exposure_risk import risk_engine
from exposure_risk.models import (
    AirQualityReading,
    DecisionLevel,
    RiskCategory,
    RiskScore,
    TravelerProfile,
    TravelInput,
    TravelMode,
)

Language = Literal["en", "th"]
OptionAction = Literal["proceed", "modify", "avoid", "info"]

MAX_DECISION_CHARS = 150
MAX_OPTIONS = 4

CATEGORY_LEVELS: dict[RiskCategory, DecisionLevel] = {
    RiskCategory.LOW: DecisionLevel.SAFE,
    RiskCategory.MODERATE: DecisionLevel.CAUTION,
    RiskCategory.HIGH: DecisionLevel.WARNING,
    RiskCategory.SEVERE: DecisionLevel.DANGER,
}

DECISION_TEMPLATES: dict[Language, dict[DecisionLevel, tuple[str, ...]]] = {
    "en": {
        DecisionLevel.SAFE: (
            "Air quality is good, safe to travel",
            "Conditions suit outdoor activity",
            "No significant risk, carry on as normal",
        ),
        DecisionLevel.CAUTION: (
            "Air quality is moderate, take care",
            "You can travel but cut your time outdoors",
            "Sensitive groups should consider another option",
        ),
        DecisionLevel.WARNING: (
            "Air quality is poor, consider postponing",
            "High risk, go by car or BTS instead",
            "Wear an N95 mask if you have to go outside",
        ),
        DecisionLevel.DANGER: (
            "Hazardous air, avoid outdoor activity",
            "Severe risk, travel is not recommended",
            "Stay indoors with an air purifier",
        ),
    },
    "th": {
        DecisionLevel.SAFE: (
            "คุณภาพอากาศดี เดินทางได้ปลอดภัย",
            "สภาพอากาศเหมาะสม ทำกิจกรรมกลางแจ้งได้",
            "ไม่มีความเสี่ยงสำคัญ ดำเนินการได้ตามปกติ",
        ),
        DecisionLevel.CAUTION: (
            "คุณภาพอากาศปานกลาง ควรระมัดระวัง",
            "สามารถเดินทางได้ แต่ลดเวลากลางแจ้ง",
            "กลุ่มเสี่ยงควรพิจารณาทางเลือกอื่น",
        ),
        DecisionLevel.WARNING: (
            "คุณภาพอากาศไม่ดี ควรเลื่อนกิจกรรม",
            "ความเสี่ยงสูง แนะนำใช้รถยนต์หรือ BTS",
            "ควรสวมหน้ากาก N95 หากต้องออกนอกอาคาร",
        ),
        DecisionLevel.DANGER: (
            "อากาศอันตราย หลีกเลี่ยงกิจกรรมกลางแจ้ง",
            "ความเสี่ยงรุนแรง ไม่แนะนำให้เดินทาง",
            "ควรอยู่ในอาคารที่มีเครื่องฟอกอากาศ",
        ),
    },
}

# Word in each language's templates that takes the destination.
TRAVEL_WORD: dict[Language, tuple[str, str]] = {
    "en": ("travel", "travel to {}"),
    "th": ("เดินทาง", "เดินทางไป{}"),
}

MARKDOWN_RE = re.compile(r"[*#_`]")
URL_RE = re.compile(r"https?://\S+")


@dataclass(frozen=True)
class AdvisorContext:
    air_quality: AirQualityReading
    profile: TravelerProfile
    travel: TravelInput
    destination: str | None = None


@dataclass(frozen=True)
class AdvisorOption:
    id: str
    label: str
    action: OptionAction
    travel_mode: TravelMode | None = None
    description: str = ""
    risk_delta: int | None = None  # change in risk points, negative is better


@dataclass(frozen=True)
class AdvisorResponse:
    decision: str
    decision_level: DecisionLevel
    risk_score: RiskScore
    options: list[AdvisorOption] = field(default_factory=list)


def stable_hash(text: str) -> int:
    """32-bit signed string hash (``h = 31 * h + c``), stable across runs."""
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    return h - 0x100000000 if h >= 0x80000000 else h


def _context_key(context: AdvisorContext) -> str:
    # Half-up rounding so 42.5 and 43 share phrasing.
    pm25 = math.floor(context.air_quality.pm25 + 0.5)
    return json.dumps({"pm25": pm25, "mode": str(context.travel.mode)}, separators=(",", ":"))


def decision_level(score: RiskScore) -> DecisionLevel:
    return CATEGORY_LEVELS.get(score.category, DecisionLevel.CAUTION)


def _decision_text(
    level: DecisionLevel,
    context: AdvisorContext,
    language: Language,
    max_chars: int,
) -> str:
    templates = DECISION_TEMPLATES[language][level]
    decision = templates[abs(stable_hash(_context_key(context))) % len(templates)]

    destination = context.destination
    if destination:
        word, with_destination = TRAVEL_WORD[language]
        candidate = decision.replace(word, with_destination.format(destination), 1)
        if len(candidate) <= max_chars:
            return candidate
    return decision


def _safe_options(context: AdvisorContext) -> list[AdvisorOption]:
    return [
        AdvisorOption(
            "proceed", "Travel as planned", "proceed",
            travel_mode=context.travel.mode, description="Carry on with your plan",
        ),
        AdvisorOption("info", "See details", "info", description="More air quality information"),
    ]


def _caution_options(context: AdvisorContext) -> list[AdvisorOption]:
    mode = context.travel.mode
    options = [
        AdvisorOption(
            "proceed-mask", "Go with a mask", "proceed",
            travel_mode=mode, description="Wear a mask for the whole trip", risk_delta=-15,
        )
    ]
    if mode in (TravelMode.WALKING, TravelMode.CYCLING, TravelMode.MOTORCYCLE):
        options.append(
            AdvisorOption(
                "switch-car", "Switch to car", "modify",
                travel_mode=TravelMode.CAR, description="Less exposure to pollution",
                risk_delta=-20,
            )
        )
        options.append(
            AdvisorOption(
                "switch-bts", "Take the BTS/MRT", "modify",
                travel_mode=TravelMode.BTS_MRT, description="Less time outdoors",
                risk_delta=-25,
            )
        )
    options.append(
        AdvisorOption(
            "postpone", "Postpone", "avoid",
            description="Wait until the air improves", risk_delta=-100,
        )
    )
    return options[:MAX_OPTIONS]


def _warning_options(context: AdvisorContext) -> list[AdvisorOption]:
    return [
        AdvisorOption(
            "switch-bts", "Take the BTS/MRT instead", "modify",
            travel_mode=TravelMode.BTS_MRT, description="A safer alternative", risk_delta=-30,
        ),
        AdvisorOption(
            "switch-car", "Go by car (AC on)", "modify",
            travel_mode=TravelMode.CAR, description="Cabin air is filtered", risk_delta=-25,
        ),
        AdvisorOption(
            "postpone", "Postpone to tomorrow", "avoid",
            description="Wait for better conditions", risk_delta=-100,
        ),
        AdvisorOption(
            "stay-indoor", "Stay indoors", "avoid",
            travel_mode=TravelMode.INDOOR, description="The safest choice", risk_delta=-100,
        ),
    ]


def _danger_options(context: AdvisorContext) -> list[AdvisorOption]:
    return [
        AdvisorOption(
            "stay-indoor", "Stay indoors", "avoid",
            travel_mode=TravelMode.INDOOR, description="Strongly recommended", risk_delta=-100,
        ),
        AdvisorOption(
            "emergency", "Contact a hospital", "info",
            description="If you notice unusual symptoms",
        ),
        AdvisorOption(
            "postpone", "Postpone indefinitely", "avoid",
            description="Wait until it is safe", risk_delta=-100,
        ),
    ]


OPTION_BUILDERS = {
    DecisionLevel.SAFE: _safe_options,
    DecisionLevel.CAUTION: _caution_options,
    DecisionLevel.WARNING: _warning_options,
    DecisionLevel.DANGER: _danger_options,
}


def format_for_display(text: str, max_chars: int = MAX_DECISION_CHARS) -> str:
    """Strip markdown symbols and URLs, then truncate to *max_chars* with '...'."""
    text = URL_RE.sub("", text)
    text = MARKDOWN_RE.sub("", text)
    if len(text) > max_chars:
        text = text[: max_chars - 3] + "..."
    return text


def generate_decision(
    context: AdvisorContext,
    *,
    risk_score: RiskScore | None = None,
    language: Language = "en",
    max_chars: int = MAX_DECISION_CHARS,
) -> AdvisorResponse:
    """Build the decision sentence and options for a travel context.

    The deterministic risk engine scores *context* unless *risk_score* is
    supplied.
    """
    if risk_score is None:
        risk_score = risk_engine.compute(context.air_quality, context.profile, context.travel)

    level = decision_level(risk_score)
    decision = _decision_text(level, context, language, max_chars)

    return AdvisorResponse(
        decision=format_for_display(decision, max_chars),
        decision_level=level,
        risk_score=risk_score,
        options=OPTION_BUILDERS[level](context),
    )


def simulate_option(option: AdvisorOption, context: AdvisorContext) -> RiskScore:
    """Re-score *context* as if *option*'s travel mode were chosen."""
    if option.travel_mode is not None:
        context = replace(context, travel=replace(context.travel, mode=option.travel_mode))
    return risk_engine.compute(context.air_quality, context.profile, context.travel)
