"""
Tests for the persona stage: correlation chain, bounds and NPI uniqueness.
"""

from collections import Counter

import pytest
from conftest import small_config

from hcp_datagen.constants import CHANNEL_ORDER, SPECIALTY_WEIGHTS
from hcp_datagen.errors import ConfigurationError, GenerationExhaustedError
from hcp_datagen.generators import GeneratorContext, PersonaGenerator
from hcp_datagen.random_source import is_valid_npi
from hcp_datagen.validation import expected_tier_shares


@pytest.fixture(scope="module")
def large_batch():
    """10,000 profiles for distribution checks."""
    ctx = GeneratorContext.create(small_config(hcps=10_000))
    return PersonaGenerator(ctx).generate_hcp_batch(10_000)


class TestDistributions:
    """Realized shares within 3 percentage points of the configured tables."""

    def test_specialty_shares(self, large_batch):
        counts = Counter(h["specialty"] for h in large_batch)
        total = sum(SPECIALTY_WEIGHTS.values())
        for specialty, weight in SPECIALTY_WEIGHTS.items():
            realized = counts[specialty.value] / len(large_batch) * 100
            assert abs(realized - weight / total * 100) <= 3, specialty

    def test_tier_shares(self, large_batch):
        counts = Counter(h["tier"] for h in large_batch)
        for tier, share in expected_tier_shares().items():
            realized = counts[tier] / len(large_batch) * 100
            assert abs(realized - share * 100) <= 3, tier

    def test_tier_drives_engagement(self, large_batch):
        """Tier 1 HCPs are more engaged and prescribe more than Tier 3."""
        by_tier = {t: [h for h in large_batch if h["tier"] == t] for t in ("Tier 1", "Tier 3")}
        mean = lambda rows, key: sum(r[key] for r in rows) / len(rows)
        assert mean(by_tier["Tier 1"], "overall_engagement_score") > mean(
            by_tier["Tier 3"], "overall_engagement_score"
        )
        assert mean(by_tier["Tier 1"], "monthly_rx_volume") > mean(
            by_tier["Tier 3"], "monthly_rx_volume"
        )


class TestProfileBounds:
    def test_scores_in_range(self, large_batch):
        for h in large_batch:
            assert 0 <= h["overall_engagement_score"] <= 100
            assert 1 <= h["market_share_pct"] <= 80
            assert 5 <= h["conversion_likelihood"] <= 95
            assert 5 <= h["churn_risk"] <= 90
            assert h["monthly_rx_volume"] >= 1

    def test_channel_engagements(self, large_batch):
        for h in large_batch[:500]:
            engagements = h["channel_engagements"]
            assert [e["channel"] for e in engagements] == [c.value for c in CHANNEL_ORDER]
            for e in engagements:
                assert 0 <= e["score"] <= 100
                assert 0 <= e["response_rate"] <= 100
                assert (e["last_contact_date"] is None) == (e["total_touches"] == 0)

    def test_prescribing_trend_has_twelve_months(self, large_batch):
        trend = large_batch[0]["prescribing_trend"]
        assert len(trend) == 12
        assert trend[-1]["month"] == "2025-06"
        assert all(p["rx_count"] >= 1 for p in trend)


class TestNpiUniqueness:
    def test_npis_unique_and_valid(self, large_batch):
        npis = [h["npi"] for h in large_batch]
        assert len(set(npis)) == len(npis)
        assert all(is_valid_npi(n) for n in npis)

    def test_collisions_exhaust(self, ctx):
        """A generator that can only produce one NPI gives up on the second slot."""
        gen = PersonaGenerator(ctx)
        gen.generate_hcp = lambda: {"npi": "1234567893"}
        with pytest.raises(GenerationExhaustedError):
            gen.generate_hcp_batch(2)

    def test_empty_batch(self, ctx):
        assert PersonaGenerator(ctx).generate_hcp_batch(0) == []

    def test_negative_batch_rejected(self, ctx):
        with pytest.raises(ConfigurationError):
            PersonaGenerator(ctx).generate_hcp_batch(-1)
