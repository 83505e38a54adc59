"""
Tests for the MSI formula and message exposure metrics.
"""

from datetime import datetime, timedelta

import pytest

from hcp_datagen.constants import AdoptionStage, Channel
from hcp_datagen.generators.saturation import (
    avg_time_between_touches,
    engagement_decay,
    engagement_delta,
    shannon_entropy,
)
from hcp_datagen.msi import (
    calculate_msi,
    calculate_msi_components,
    determine_msi_direction,
    msi_to_risk_level,
)

DAY = datetime(2025, 1, 1)


class TestShannonEntropy:
    def test_single_channel_is_zero(self):
        assert shannon_entropy({"email": 12}) == 0.0

    def test_even_split_is_one(self):
        assert shannon_entropy({"email": 5, "phone": 5, "webinar": 5}) == pytest.approx(1.0)

    def test_even_split_over_all_channels_is_one(self):
        counts = {channel.value: 4 for channel in Channel}
        assert len(counts) == 6
        assert shannon_entropy(counts) == 1.0

    def test_uneven_six_channel_split_below_one(self):
        counts = {channel.value: 4 for channel in Channel}
        counts[Channel.EMAIL.value] = 20
        assert 0 < shannon_entropy(counts) < 1

    def test_skewed_split_between(self):
        assert 0 < shannon_entropy({"email": 9, "phone": 1}) < 1

    def test_empty(self):
        assert shannon_entropy({}) == 0.0


class TestEngagementDecay:
    def test_needs_two_points(self):
        assert engagement_decay([(DAY, 2.0)]) == 0.0

    def test_same_date_is_zero(self):
        assert engagement_decay([(DAY, 1.0), (DAY, 3.0)]) == 0.0

    def test_declining_engagement_positive(self):
        """Delta falling by 0.1 per day is a decay of +3 per 30 days."""
        points = [(DAY + timedelta(days=d), 5.0 - 0.1 * d) for d in range(10)]
        assert engagement_decay(points) == pytest.approx(3.0)

    def test_rising_engagement_negative(self):
        points = [(DAY + timedelta(days=d), 1.0 + 0.2 * d) for d in range(5)]
        assert engagement_decay(points) == pytest.approx(-6.0)


class TestExposureHelpers:
    def test_average_gap(self):
        dates = [DAY, DAY + timedelta(days=4), DAY + timedelta(days=10)]
        assert avg_time_between_touches(dates) == 5.0

    def test_average_gap_single_touch(self):
        assert avg_time_between_touches([DAY]) is None

    def test_engagement_delta_prefers_actual(self):
        stimulus = {"actual_engagement_delta": 4.0, "predicted_engagement_delta": 1.0}
        assert engagement_delta(stimulus, responded=False) == 4.0

    def test_engagement_delta_predicted_only_when_answered(self):
        stimulus = {"actual_engagement_delta": None, "predicted_engagement_delta": 1.5}
        assert engagement_delta(stimulus, responded=True) == 1.5
        assert engagement_delta(stimulus, responded=False) is None


class TestMsiFormula:
    def test_neutral_inputs_consideration(self):
        """10 touches, no diversity or decay data: 20 + 10 + 20 = 50, x 0.85."""
        c = calculate_msi_components(10, None, None, AdoptionStage.CONSIDERATION)
        assert (c.frequency, c.diversity, c.decay) == pytest.approx((50 / 3, 10, 20))
        assert calculate_msi(10, None, None, AdoptionStage.CONSIDERATION) == pytest.approx(
            round((50 / 3 + 30) * 0.85, 2)
        )

    def test_neutral_inputs_awareness(self):
        c = calculate_msi_components(10, None, None, AdoptionStage.AWARENESS)
        assert c.raw == pytest.approx(12.5 + 10 + 20)
        assert calculate_msi(10, None, None, AdoptionStage.AWARENESS) == pytest.approx(29.75)

    def test_loyalty_saturates(self):
        msi = calculate_msi(20, 0.0, 25, AdoptionStage.LOYALTY)
        assert msi == 100.0

    def test_components_clamped(self):
        c = calculate_msi_components(1000, -1, 1000, AdoptionStage.TRIAL)
        assert (c.frequency, c.diversity, c.decay) == (40, 20, 40)

    def test_missing_stage_uses_consideration(self):
        assert calculate_msi(10, 0.5, 0, None) == calculate_msi(
            10, 0.5, 0, AdoptionStage.CONSIDERATION
        )

    @pytest.mark.parametrize(
        "msi, risk",
        [(0, "low"), (25.99, "low"), (26, "medium"), (50.9, "medium"), (51, "high"), (76, "critical")],
    )
    def test_risk_levels(self, msi, risk):
        assert msi_to_risk_level(msi) == risk

    @pytest.mark.parametrize(
        "current, previous, direction",
        [(50, None, "stable"), (50, 44, "increasing"), (50, 45, "stable"), (40, 46, "decreasing")],
    )
    def test_direction(self, current, previous, direction):
        assert determine_msi_direction(current, previous) == direction


class TestGeneratedExposures:
    def test_one_row_per_hcp_theme(self, small_run):
        keys = [(e["hcp_id"], e["message_theme_id"]) for e in small_run.data["message_exposures"]]
        assert len(keys) == len(set(keys))

    def test_touch_frequency_matches_stimuli(self, small_run):
        exposures = small_run.data["message_exposures"]
        assert sum(e["touch_frequency"] for e in exposures) == len(
            small_run.data["stimuli_events"]
        )

    def test_bounds_and_labels(self, small_run):
        for e in small_run.data["message_exposures"]:
            assert 0 <= e["msi"] <= 100
            assert 0 <= e["channel_diversity"] <= 1
            assert 0 <= e["engagement_rate"] <= 1
            assert e["saturation_risk"] == msi_to_risk_level(e["msi"])
            assert e["msi_direction"] == determine_msi_direction(e["msi"], e["previous_msi"])
            assert e["measurement_period"] == "trailing-6mo"
            if e["unique_channels"] == 1:
                assert e["channel_diversity"] == 0
