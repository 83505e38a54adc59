"""
Tests for outcome derivation: probability model, causality and attribution.
"""

from datetime import datetime

import pytest

from hcp_datagen.constants import Channel, Segment, Tier
from hcp_datagen.generators import OutcomeGenerator
from hcp_datagen.generators.outcome import attribution_weight, response_probability, touch_decay


class TestResponseProbability:
    @pytest.mark.parametrize(
        "touches, expected",
        [(1, 1.0), (3, 1.0), (4, 0.9), (5, 0.9), (6, 0.8), (10, 0.8), (11, 0.6), (80, 0.6)],
    )
    def test_touch_decay_steps(self, touches, expected):
        assert touch_decay(touches) == expected

    def test_multiplies_modifiers(self):
        p = response_probability(Channel.WEBINAR, Tier.TIER_2, Segment.GROWTH_POTENTIAL, 1)
        assert p == pytest.approx(0.35)

    def test_clamped_high(self):
        p = response_probability(
            Channel.CONFERENCE, Tier.TIER_1, Segment.ENGAGED_DIGITAL, 1, noise=1.2
        )
        assert p == 0.6

    def test_clamped_low(self):
        p = response_probability(
            Channel.DIGITAL_AD, Tier.TIER_3, Segment.NEW_TARGET, 20, noise=0.8
        )
        assert p == 0.02


class TestAttributionWeight:
    def test_direct_and_organic_fixed(self):
        assert attribution_weight("direct", 7) == 1.0
        assert attribution_weight("organic", 7) == 0.1

    def test_assisted_floor(self):
        assert attribution_weight("assisted", 2) == 0.5
        assert attribution_weight("assisted", 10) == 0.3


class TestOutcomeTiming:
    def test_same_day_after_last_business_minute(self, ctx):
        """A 20:59 touch answered the same day lands at 21:00, never before."""
        gen = OutcomeGenerator(ctx)
        stimulus_date = datetime(2025, 3, 10, 20, 59)
        for _ in range(200):
            when = gen._outcome_date(stimulus_date, "email_open")
            assert when > stimulus_date

    def test_later_day_in_business_hours(self, ctx):
        gen = OutcomeGenerator(ctx)
        stimulus_date = datetime(2025, 3, 10, 9, 0)
        for _ in range(200):
            when = gen._outcome_date(stimulus_date, "rx_written")
            if when.date() != stimulus_date.date():
                assert 7 <= when.hour <= 20


class TestGeneratedOutcomes:
    def test_outcome_after_stimulus(self, small_run):
        stimuli = {s["id"]: s for s in small_run.data["stimuli_events"]}
        for o in small_run.data["outcome_events"]:
            stimulus = stimuli[o["stimulus_id"]]
            assert o["event_date"] > stimulus["event_date"]
            assert o["hcp_id"] == stimulus["hcp_id"]
            assert o["channel"] == stimulus["channel"]
            assert o["campaign_id"] == stimulus["campaign_id"]

    def test_at_most_one_outcome_per_stimulus(self, small_run):
        ids = [o["stimulus_id"] for o in small_run.data["outcome_events"]]
        assert len(ids) == len(set(ids))

    def test_first_touch_never_assisted(self, small_run):
        for o in small_run.data["outcome_events"]:
            if o["touches_in_window"] == 1:
                assert o["attribution_type"] in ("direct", "organic")

    def test_value_and_quality_fields(self, small_run):
        for o in small_run.data["outcome_events"]:
            if o["outcome_type"] == "rx_written":
                assert 100 <= o["outcome_value"] <= 2000
            if o["quality_score"] is not None:
                assert 5 <= o["quality_score"] <= 10

    def test_response_rate_plausible(self, small_run):
        rate = len(small_run.data["outcome_events"]) / len(small_run.data["stimuli_events"])
        assert 0.05 <= rate <= 0.40
