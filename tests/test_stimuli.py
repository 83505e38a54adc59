"""
Tests for stimulus generation and campaign/rep linkage.
"""

from datetime import datetime, timedelta

import pytest

from hcp_datagen.constants import REP_CHANNELS, STIMULI_COUNT_BY_TIER, STIMULUS_TYPES_BY_CHANNEL, Channel, Tier
from hcp_datagen.generators import StimuliGenerator


@pytest.fixture
def small_stimuli(small_run):
    return small_run.data["stimuli_events"]


class TestStimulusCounts:
    def test_count_per_hcp_within_tier_range(self, small_run, small_stimuli):
        counts = {}
        for s in small_stimuli:
            counts[s["hcp_id"]] = counts.get(s["hcp_id"], 0) + 1
        for hcp in small_run.data["hcp_profiles"]:
            lo, hi = STIMULI_COUNT_BY_TIER[Tier(hcp["tier"])]
            assert lo <= counts[hcp["id"]] <= hi


class TestStimulusContent:
    def test_subtype_belongs_to_channel(self, small_stimuli):
        for s in small_stimuli:
            assert s["stimulus_type"] in STIMULUS_TYPES_BY_CHANNEL[Channel(s["channel"])]

    def test_dates_inside_window_and_business_hours(self, small_run, small_stimuli):
        start = small_run.ctx.window_start
        end = small_run.ctx.as_of + timedelta(days=2)
        for s in small_stimuli:
            assert start <= s["event_date"] <= end
            assert 7 <= s["event_date"].hour <= 19

    def test_mostly_weekdays(self, small_stimuli):
        weekend = sum(1 for s in small_stimuli if s["event_date"].weekday() >= 5)
        assert weekend / len(small_stimuli) < 0.1

    def test_prediction_interval_contains_estimate(self, small_stimuli):
        for s in small_stimuli:
            assert s["confidence_lower"] <= s["predicted_engagement_delta"] <= s["confidence_upper"]
            assert s["status"] == "predicted"
            assert s["actual_engagement_delta"] is None

    def test_rep_only_on_rep_channels(self, small_stimuli):
        for s in small_stimuli:
            if Channel(s["channel"]) in REP_CHANNELS:
                assert s["rep_id"] is not None
            else:
                assert s["rep_id"] is None

    def test_each_hcp_chronological(self, small_stimuli):
        last: dict = {}
        for s in small_stimuli:
            previous = last.get(s["hcp_id"])
            if previous is not None:
                assert s["event_date"] >= previous
            last[s["hcp_id"]] = s["event_date"]


class TestCampaignLinkage:
    def test_linked_touch_inside_active_enrollment(self, small_run, small_stimuli):
        campaigns = {c["id"]: c for c in small_run.data["campaigns"]}
        enrollments = {
            (p["campaign_id"], p["hcp_id"]): p for p in small_run.data["campaign_participation"]
        }
        linked = [s for s in small_stimuli if s["campaign_id"] is not None]
        assert linked
        for s in linked:
            campaign = campaigns[s["campaign_id"]]
            enrollment = enrollments[(s["campaign_id"], s["hcp_id"])]
            assert campaign["start_date"] <= s["event_date"] <= campaign["end_date"]
            assert s["event_date"] >= enrollment["enrolled_at"]
            if enrollment["opt_out_at"] is not None:
                assert s["event_date"] < enrollment["opt_out_at"]

    def test_earliest_starting_campaign_wins(self):
        day = datetime(2025, 3, 10, 12)
        early = {"id": 1, "start_date": day - timedelta(days=30), "end_date": day + timedelta(days=30)}
        late = {"id": 2, "start_date": day - timedelta(days=5), "end_date": day + timedelta(days=5)}
        enrolled = {"enrolled_at": day - timedelta(days=40), "opt_out_at": None}
        assert StimuliGenerator._campaign_for(day, [(early, enrolled), (late, enrolled)]) == 1

    def test_opted_out_campaign_skipped(self):
        day = datetime(2025, 3, 10, 12)
        campaign = {"id": 1, "start_date": day - timedelta(days=30), "end_date": day + timedelta(days=30)}
        opted_out = {"enrolled_at": day - timedelta(days=20), "opt_out_at": day - timedelta(days=1)}
        assert StimuliGenerator._campaign_for(day, [(campaign, opted_out)]) is None
