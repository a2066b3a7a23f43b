"""Tests for the PHRI scoring module."""

from __future__ import annotations

import itertools
from dataclasses import replace

import pytest

from exposure_risk.models import (
    ActivityLevel,
    DiseaseProfile,
    ExposureInput,
    MaskType,
    RiskLevel,
    SmokingStatus,
    UserHealthProfile,
)
from exposure_risk.scoring import (
    activity_factor,
    age_factor,
    base_exposure,
    compare_route_risks,
    compute_risk,
    disease_factor,
    duration_factor,
    generate_route_decision,
    protection_factor,
    risk_level,
    smoking_modifier,
)


def _exposure(**overrides) -> ExposureInput:
    values = {
        "pm25": 150.0,
        "duration_minutes": 60,
        "activity_level": ActivityLevel.LIGHT,
        "is_outdoor": True,
        "has_mask": False,
    }
    values.update(overrides)
    return ExposureInput(**values)


class TestBaseExposure:
    def test_reference_concentration_is_100(self):
        assert base_exposure(500) == pytest.approx(100.0)

    def test_negative_is_zero(self):
        assert base_exposure(-10) == 0.0

    def test_capped_at_100(self):
        assert base_exposure(900) == 100.0


class TestDurationFactor:
    def test_zero_duration(self):
        assert duration_factor(0) == 0.0

    def test_short_exposure_discounted(self):
        assert duration_factor(15) == pytest.approx(0.8)

    def test_one_hour(self):
        assert duration_factor(60) == pytest.approx(0.89)

    def test_three_hours(self):
        assert duration_factor(180) == pytest.approx(1.3)

    def test_ceiling(self):
        assert duration_factor(10_000) == 1.5

    def test_non_decreasing_and_bounded(self):
        values = [duration_factor(m / 2) for m in range(0, 2000)]
        assert all(a <= b for a, b in zip(values, values[1:]))
        assert max(values) <= 1.5


class TestActivityFactor:
    def test_outdoor_intake(self):
        assert activity_factor(ActivityLevel.VIGOROUS, True) == 10.0

    def test_indoor_is_flat(self):
        assert activity_factor(ActivityLevel.VIGOROUS, False) == 0.3
        assert activity_factor(ActivityLevel.REST, False) == 0.3


class TestDiseaseFactor:
    def test_no_disease(self):
        assert disease_factor([]) == 1.0

    def test_single_disease(self):
        assert disease_factor([DiseaseProfile.COPD]) == 2.0

    def test_duplicates_ignored(self):
        assert disease_factor([DiseaseProfile.ASTHMA, DiseaseProfile.ASTHMA]) == 1.8

    def test_comorbidity_exceeds_single(self):
        combined = disease_factor([DiseaseProfile.COPD, DiseaseProfile.ASTHMA])
        assert combined > 2.0

    def test_never_exceeds_cap(self):
        assert disease_factor(list(DiseaseProfile)) <= 3.0

    @pytest.mark.parametrize("seed", range(5))
    def test_adding_conditions_never_lowers_factor(self, seed):
        diseases = list(DiseaseProfile)
        order = diseases[seed:] + diseases[:seed]
        for prefix_len in range(1, len(order)):
            before = disease_factor(order[:prefix_len])
            after = disease_factor(order[: prefix_len + 1])
            assert after >= before

    def test_low_coefficient_does_not_dilute(self):
        strong = [DiseaseProfile.COPD, DiseaseProfile.ASTHMA]
        for extra in (DiseaseProfile.DIABETES, DiseaseProfile.GENERAL):
            assert disease_factor([*strong, extra]) >= disease_factor(strong)

    def test_all_pairs_bounded(self):
        for a, b in itertools.combinations(DiseaseProfile, 2):
            assert 1.0 <= disease_factor([a, b]) <= 3.0


class TestModifiers:
    @pytest.mark.parametrize(
        ("age", "expected"),
        [(3, 1.5), (10, 1.3), (16, 1.1), (40, 1.0), (70, 1.3), (80, 1.5), (-1, 1.0), (130, 1.0)],
    )
    def test_age_factor(self, age, expected):
        assert age_factor(age) == expected

    def test_smoking(self):
        assert smoking_modifier(SmokingStatus.CURRENT) == 1.3
        assert smoking_modifier(SmokingStatus.NEVER) == 1.0

    def test_no_mask(self):
        assert protection_factor(False, MaskType.N95) == 1.0

    def test_untyped_mask_is_surgical(self):
        assert protection_factor(True) == 0.40

    def test_n95(self):
        assert protection_factor(True, MaskType.N95) == 0.05

    def test_risk_level_boundaries(self):
        assert risk_level(24.9) == RiskLevel.LOW
        assert risk_level(25) == RiskLevel.MODERATE
        assert risk_level(50) == RiskLevel.HIGH
        assert risk_level(75) == RiskLevel.SEVERE


class TestComputeRisk:
    def test_worked_example_is_high(self, healthy_profile):
        result = compute_risk(_exposure(), healthy_profile)
        assert result.score == pytest.approx(66.8, abs=0.1)
        assert result.level == RiskLevel.HIGH
        assert result.level_label_en == "High Risk"
        assert result.breakdown.base_exposure == 30.0
        assert result.breakdown.duration_factor == 0.89
        assert result.breakdown.activity_factor == 2.5

    def test_n95_cuts_score_twentyfold(self, healthy_profile):
        bare = compute_risk(_exposure(), healthy_profile)
        masked = compute_risk(
            _exposure(has_mask=True, mask_type=MaskType.N95), healthy_profile,
        )
        assert masked.score == pytest.approx(bare.score / 20, abs=0.1)
        assert masked.level == RiskLevel.LOW

    def test_negative_pm_same_as_zero(self, healthy_profile):
        assert compute_risk(_exposure(pm25=-20), healthy_profile) == compute_risk(
            _exposure(pm25=0), healthy_profile
        )

    def test_pm_above_ceiling_same_as_ceiling(self, asthma_profile):
        assert compute_risk(_exposure(pm25=5000, duration_minutes=5), asthma_profile) == (
            compute_risk(_exposure(pm25=1000, duration_minutes=5), asthma_profile)
        )

    def test_input_not_modified(self, healthy_profile):
        exposure = _exposure(pm25=-5, duration_minutes=-10)
        compute_risk(exposure, healthy_profile)
        assert exposure.pm25 == -5
        assert exposure.duration_minutes == -10

    def test_score_clamped(self):
        frail = UserHealthProfile(
            age=80,
            diseases=[DiseaseProfile.COPD, DiseaseProfile.ASTHMA],
            smoking_status=SmokingStatus.CURRENT,
        )
        result = compute_risk(
            _exposure(pm25=800, duration_minutes=300, activity_level=ActivityLevel.VIGOROUS),
            frail,
        )
        assert result.score == 100.0
        assert result.normalized_score == 10.0
        assert result.level == RiskLevel.SEVERE

    def test_dominant_factors_limited_to_three(self):
        profile = UserHealthProfile(age=30, diseases=[DiseaseProfile.COPD])
        result = compute_risk(
            _exposure(pm25=300, duration_minutes=240, activity_level=ActivityLevel.VIGOROUS),
            profile,
        )
        assert len(result.dominant_factors) == 3
        assert result.dominant_factors[0] == "High PM2.5"

    def test_confidence_reduced_for_extremes(self):
        profile = UserHealthProfile(age=105)
        result = compute_risk(_exposure(pm25=400, duration_minutes=600), profile)
        assert result.confidence < 0.6

    def test_confidence_never_above_one(self):
        profile = UserHealthProfile(
            age=30, diseases=[DiseaseProfile.ASTHMA], baseline_lung_function=85.0,
        )
        assert compute_risk(_exposure(), profile).confidence == 1.0


class TestCompareRouteRisks:
    def test_empty_returns_empty(self, healthy_profile):
        assert compare_route_risks([], healthy_profile) == []

    def test_clean_route_ranked_first(self, sample_routes, healthy_profile):
        ranked = compare_route_risks(sample_routes, healthy_profile)
        assert ranked[0].route_index == 0
        assert ranked[0].is_safest
        assert not any(r.is_safest for r in ranked[1:])

    def test_ordered_by_average_phri(self, sample_routes, asthma_profile):
        ranked = compare_route_risks(sample_routes, asthma_profile)
        averages = [r.average_phri for r in ranked]
        assert averages == sorted(averages)

    def test_scaled_samples_never_rank_safer(self, clean_route, healthy_profile):
        scaled = replace(
            clean_route, index=1, pm25_samples=[v * 3 for v in clean_route.pm25_samples],
        )
        ranked = compare_route_risks([scaled, clean_route], healthy_profile)
        assert [r.route_index for r in ranked] == [0, 1]
        assert ranked[1].average_phri >= ranked[0].average_phri
        assert ranked[1].peak_phri >= ranked[0].peak_phri

    def test_segments_per_sample(self, clean_route, healthy_profile):
        (result,) = compare_route_risks([clean_route], healthy_profile)
        assert len(result.segment_risks) == 4
        assert result.segment_risks[0].start_km == 0.0
        assert result.segment_risks[0].end_km == pytest.approx(2.0)

    def test_duration_from_speed(self, clean_route, healthy_profile):
        (result,) = compare_route_risks([clean_route], healthy_profile, travel_speed_kmh=12)
        assert result.duration_minutes == 30

    def test_speed_floor(self, clean_route, healthy_profile):
        (result,) = compare_route_risks([clean_route], healthy_profile, travel_speed_kmh=0)
        assert result.duration_minutes == 360

    def test_peak_location(self, dirty_route, healthy_profile):
        (result,) = compare_route_risks([dirty_route], healthy_profile)
        assert result.peak_pm25_location == dirty_route.sample_locations[2]

    def test_misaligned_locations_keep_every_sample(self, clean_route, healthy_profile, caplog):
        short = replace(
            clean_route,
            pm25_samples=[20.0, 22.0, 18.0, 90.0],
            sample_locations=clean_route.sample_locations[:2],
        )
        with caplog.at_level("WARNING"):
            (result,) = compare_route_risks([short], healthy_profile)
        assert len(result.segment_risks) == 4
        assert result.segment_risks[-1].pm25 == 90.0
        assert result.average_pm25 == 37.5
        assert result.peak_pm25_location == clean_route.sample_locations[1]
        assert "reusing the last location" in caplog.text

    def test_recommendation_mentions_risk_gap(self, sample_routes, asthma_profile):
        ranked = compare_route_risks(sample_routes, asthma_profile)
        assert "Cuts risk by" in ranked[0].recommendation


class TestGenerateRouteDecision:
    def test_respiratory_warning(self, dirty_route, asthma_profile):
        (result,) = compare_route_risks(
            [dirty_route], asthma_profile, activity_level=ActivityLevel.VIGOROUS,
        )
        text = generate_route_decision(result, [DiseaseProfile.ASTHMA])
        assert text.startswith("Route may be unsafe for respiratory patients")
        assert text.count("\n") == 1

    def test_safe_route(self, clean_route, healthy_profile):
        (result,) = compare_route_risks([clean_route], healthy_profile)
        text = generate_route_decision(result, [])
        assert text == "Safe route\nAverage PM2.5 20 µg/m³"

    def test_not_safest(self, sample_routes, healthy_profile):
        ranked = compare_route_risks(sample_routes, healthy_profile)
        assert generate_route_decision(ranked[-1], []).startswith("Moderate risk")
