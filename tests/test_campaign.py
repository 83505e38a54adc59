"""
Tests for campaign scheduling and participation.
"""

import warnings
from datetime import datetime, timedelta

import pytest
from conftest import small_config, with_ids

from hcp_datagen.constants import MAX_CONCURRENT_CAMPAIGNS, PRODUCTS, Specialty
from hcp_datagen.generators import (
    CampaignGenerator,
    GeneratorContext,
    ParticipationGenerator,
    PersonaGenerator,
)
from hcp_datagen.generators.campaign import peak_concurrency


@pytest.fixture
def campaigns(ctx):
    with pytest.warns(UserWarning):
        CampaignGenerator(ctx).generate()
    ctx.data["campaigns"] = with_ids(ctx.data["campaigns"])
    return ctx


class TestPeakConcurrency:
    def test_disjoint_periods(self):
        day = datetime(2025, 1, 1)
        periods = [(day, day + timedelta(days=5)), (day + timedelta(days=10), day + timedelta(days=15))]
        assert peak_concurrency(periods, day, day + timedelta(days=20)) == 1

    def test_overlap_found_inside_interval(self):
        """The busiest instant may be a later period's start, not the interval start."""
        day = datetime(2025, 1, 1)
        periods = [
            (day, day + timedelta(days=10)),
            (day + timedelta(days=5), day + timedelta(days=20)),
        ]
        assert peak_concurrency(periods, day - timedelta(days=1), day + timedelta(days=30)) == 2

    def test_closed_interval_touching_end(self):
        day = datetime(2025, 1, 1)
        periods = [(day, day + timedelta(days=5))]
        assert peak_concurrency(periods, day + timedelta(days=5), day + timedelta(days=9)) == 1


class TestCampaignSchedule:
    def test_never_more_than_three_concurrent(self, campaigns):
        periods = [(c["start_date"], c["end_date"]) for c in campaigns.data["campaigns"]]
        for start, _ in periods:
            assert peak_concurrency(periods, start, start) <= MAX_CONCURRENT_CAMPAIGNS

    def test_count_is_best_effort(self, campaigns):
        """Skipped campaigns shrink the count below round(12 x 4.2) but some are scheduled."""
        assert 0 < len(campaigns.data["campaigns"]) <= round(12 * 4.2)

    def test_codes_unique_and_formatted(self, campaigns):
        codes = [c["campaign_code"] for c in campaigns.data["campaigns"]]
        assert len(set(codes)) == len(codes)
        assert codes[0] == "CAMP-2025-001"

    def test_dates_within_window(self, campaigns):
        for c in campaigns.data["campaigns"]:
            assert campaigns.window_start <= c["start_date"] <= c["end_date"]


class TestCampaignContent:
    def test_channel_mix_sums_to_100(self, campaigns):
        for c in campaigns.data["campaigns"]:
            mix = c["channel_mix"]
            assert sum(mix.values()) == 100
            assert len(mix) == 6
            assert 30 <= mix[c["primary_channel"]] <= 50

    def test_targeting_includes_therapeutic_area(self, campaigns):
        for c in campaigns.data["campaigns"]:
            assert c["therapeutic_area"] in c["target_specialties"]
            assert c["product"] == PRODUCTS[Specialty(c["therapeutic_area"])]
            assert 1 <= len(c["target_segments"]) <= 3
            assert 1 <= len(c["target_specialties"]) <= 4
            assert 1 <= len(c["target_tiers"]) <= 2

    def test_status_matches_dates(self, campaigns):
        as_of = campaigns.as_of
        for c in campaigns.data["campaigns"]:
            if c["end_date"] < as_of:
                assert c["status"] in ("completed", "cancelled")
            else:
                assert c["status"] in ("active", "paused")

    def test_spend_within_budget(self, campaigns):
        for c in campaigns.data["campaigns"]:
            assert 0 <= c["spent_to_date"] <= c["budget"]


class TestParticipation:
    @pytest.fixture
    def enrolled(self, campaigns):
        ctx = campaigns
        ctx.data["hcp_profiles"] = with_ids(PersonaGenerator(ctx).generate_hcp_batch(400))
        ParticipationGenerator(ctx).generate()
        return ctx

    def test_only_eligible_hcps_enrolled(self, enrolled):
        hcps = {h["id"]: h for h in enrolled.data["hcp_profiles"]}
        campaigns = {c["id"]: c for c in enrolled.data["campaigns"]}
        for p in enrolled.data["campaign_participation"]:
            hcp, campaign = hcps[p["hcp_id"]], campaigns[p["campaign_id"]]
            assert hcp["segment"] in campaign["target_segments"]
            assert hcp["specialty"] in campaign["target_specialties"]
            assert hcp["tier"] in campaign["target_tiers"]

    def test_no_duplicate_enrollment(self, enrolled):
        keys = [(p["campaign_id"], p["hcp_id"]) for p in enrolled.data["campaign_participation"]]
        assert len(keys) == len(set(keys))

    def test_opt_out_after_enrollment(self, enrolled):
        for p in enrolled.data["campaign_participation"]:
            if p["status"] == "opted_out":
                assert p["opt_out_reason"] in ("too_frequent", "not_relevant", "request")
                assert p["opt_out_at"] > p["enrolled_at"]
            else:
                assert p["opt_out_at"] is None and p["opt_out_reason"] is None


class TestShortWindow:
    def test_long_campaigns_run_past_as_of(self):
        """With a one-month window, campaigns longer than the window stay in flight."""
        running = []
        for seed in range(1, 6):
            ctx = GeneratorContext.create(small_config(seed=seed, months=1))
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", UserWarning)
                CampaignGenerator(ctx).generate()
            for c in ctx.data["campaigns"]:
                assert ctx.window_start <= c["start_date"] <= ctx.as_of
                assert c["status"] != "draft"
                if c["end_date"] > ctx.as_of:
                    running.append(c)
        assert running
        for c in running:
            assert c["status"] in ("active", "paused")
            assert c["spent_to_date"] <= c["budget"] * 0.7
