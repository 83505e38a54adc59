"""
Stage 1 Generator: HCP profiles.

Tables generated:
- hcp_profiles (config.hcps rows)

Attributes follow one correlation chain:
    specialty -> tier -> segment -> preferred channel
    tier + segment -> engagement score -> per-channel engagement
    tier -> prescribing volume / market share
    engagement -> conversion likelihood / churn risk
"""

from datetime import timedelta
from typing import Any

from .base import BaseStageGenerator
from ..constants import (
    BASE_TOUCHES_BY_TIER,
    CHANNEL_ORDER,
    CHANNEL_RESPONSE_RATES,
    CHANNEL_WEIGHTS_BY_SEGMENT,
    CHURN_BASE_BY_TIER,
    CITIES,
    CLINIC_NAMES,
    CONVERSION_BASE_BY_SEGMENT,
    CREDENTIALS,
    ENGAGEMENT_BY_TIER,
    HOSPITAL_NAMES,
    MARKET_SHARE_BASE_BY_TIER,
    ORGANIZATION_SUFFIXES,
    RX_VOLUME_BY_TIER,
    SEGMENT_ENGAGEMENT_MODIFIER,
    SEGMENT_WEIGHTS_BY_TIER,
    SPECIALTY_WEIGHTS,
    TIER_WEIGHTS_BY_SPECIALTY,
    Channel,
    Segment,
    Tier,
)
from ..errors import ConfigurationError, GenerationExhaustedError
from ..helpers import add_months, clamp, month_key

CITY_WEIGHTS: list[tuple[tuple[str, str], float]] = [
    ((city, state), weight) for city, state, weight in CITIES
]

TREND_POINTS = 12


class PersonaGenerator(BaseStageGenerator):
    """
    Generate HCP profile rows.

    Each profile is internally consistent: a Tier 1 oncologist is drawn from
    oncology's tier weights, gets a Tier 1 segment mix, a higher engagement
    mean and a larger prescribing volume.
    """

    STAGE = 1
    NAME = "persona"
    OUTPUT = "hcp_profiles"

    # Attempts per slot before a run of NPI collisions is fatal
    MAX_NPI_ATTEMPTS = 25

    def generate(self) -> None:
        """Generate config.hcps profiles."""
        print("  Stage 1: HCP profiles (specialty -> tier -> segment -> channel)")
        rows = self.generate_hcp_batch(self.ctx.config.hcps)
        self.data[self.OUTPUT].extend(rows)
        self._mark_done()
        print(f"    Generated: {len(rows):,} HCPs")

    def generate_hcp_batch(self, n: int) -> list[dict[str, Any]]:
        """
        Generate exactly n profiles with pairwise-unique NPIs.

        A profile whose NPI was already issued is discarded and a fresh one
        drawn in its place.

        Raises:
            ConfigurationError: If n is negative
            GenerationExhaustedError: If one slot collides MAX_NPI_ATTEMPTS times
        """
        if n < 0:
            raise ConfigurationError(f"HCP batch size must be >= 0, got {n}")

        seen: set[str] = set()
        batch: list[dict[str, Any]] = []
        while len(batch) < n:
            for _ in range(self.MAX_NPI_ATTEMPTS):
                hcp = self.generate_hcp()
                if hcp["npi"] not in seen:
                    break
            else:
                raise GenerationExhaustedError("a unique NPI", self.MAX_NPI_ATTEMPTS)
            seen.add(hcp["npi"])
            batch.append(hcp)
        return batch

    def generate_hcp(self) -> dict[str, Any]:
        """Generate one profile row."""
        rng = self.rng

        specialty = rng.weighted_pick(SPECIALTY_WEIGHTS)
        tier = rng.weighted_pick(TIER_WEIGHTS_BY_SPECIALTY[specialty])
        segment = rng.weighted_pick(SEGMENT_WEIGHTS_BY_TIER[tier])
        preferred = rng.weighted_pick(CHANNEL_WEIGHTS_BY_SEGMENT[segment])

        first_name, last_name = self.ctx.pool.full_name(rng)
        city, state = rng.weighted_pick(CITY_WEIGHTS)
        score = self._engagement_score(tier, segment)
        monthly, yearly, share = self._prescribing_metrics(tier)

        return {
            "npi": rng.npi(),
            "first_name": first_name,
            "last_name": last_name,
            "credentials": rng.weighted_pick(CREDENTIALS),
            "specialty": specialty.value,
            "tier": tier.value,
            "segment": segment.value,
            "organization": self._organization(city),
            "city": city,
            "state": state,
            "channel_preference": preferred.value,
            "channel_engagements": self._channel_engagements(tier, preferred, score),
            "overall_engagement_score": score,
            "monthly_rx_volume": monthly,
            "yearly_rx_volume": yearly,
            "market_share_pct": share,
            "prescribing_trend": self._prescribing_trend(monthly, share),
            "conversion_likelihood": self._conversion_likelihood(segment, score),
            "churn_risk": self._churn_risk(tier, score),
            "created_at": self.ctx.as_of,
        }

    def _organization(self, city: str) -> str:
        """Hospital, city clinic, or surname-led practice."""
        style = self.rng.integer(0, 2)
        if style == 0:
            return self.rng.pick(HOSPITAL_NAMES)
        if style == 1:
            return f"{city} {self.rng.pick(CLINIC_NAMES)}"
        return f"{self.ctx.pool.sample('last_names', self.rng)} {self.rng.pick(ORGANIZATION_SUFFIXES)}"

    def _engagement_score(self, tier: Tier, segment: Segment) -> int:
        mean, std = ENGAGEMENT_BY_TIER[tier]
        mean += SEGMENT_ENGAGEMENT_MODIFIER[segment]
        return int(clamp(round(self.rng.normal(mean, std)), 0, 100))

    def _channel_engagements(
        self, tier: Tier, preferred: Channel, score: int
    ) -> list[dict[str, Any]]:
        """
        One engagement sub-record per channel.

        The preferred channel gets a 1.5x response-rate lift, a +15 score
        bonus and up to double the tier's base touch count.
        """
        rng = self.rng
        base_touches = BASE_TOUCHES_BY_TIER[tier]
        engagements = []

        for channel in CHANNEL_ORDER:
            is_preferred = channel is preferred
            modifier = 1.5 if is_preferred else rng.uniform(0.5, 1.2)
            response_rate = (
                CHANNEL_RESPONSE_RATES[channel] * 100 * modifier * (1 + (score - 50) / 100)
            )
            channel_score = round(score * rng.uniform(0.7, 1.3) + (15 if is_preferred else 0))
            touches = rng.integer(
                base_touches // 2, base_touches * 2 if is_preferred else base_touches
            )
            last_contact = (
                (self.ctx.as_of - timedelta(days=rng.integer(1, 90))).isoformat()
                if touches > 0
                else None
            )
            engagements.append(
                {
                    "channel": channel.value,
                    "score": int(clamp(channel_score, 0, 100)),
                    "total_touches": touches,
                    "response_rate": round(clamp(response_rate, 0, 100), 1),
                    "last_contact_date": last_contact,
                }
            )
        return engagements

    def _prescribing_metrics(self, tier: Tier) -> tuple[int, int, float]:
        """(monthly volume, yearly volume, market share %)"""
        mean, std = RX_VOLUME_BY_TIER[tier]
        monthly = max(1, round(self.rng.normal(mean, std)))
        yearly = monthly * 12 + self.rng.integer(-monthly, monthly)
        share = round(clamp(self.rng.normal(MARKET_SHARE_BASE_BY_TIER[tier], 10), 1, 80), 1)
        return monthly, yearly, share

    def _prescribing_trend(self, monthly: int, share: float) -> list[dict[str, Any]]:
        """
        Trailing 12-month trend ending at the as_of month.

        Random walk with a per-HCP drift in [-5%, +8%] per month, jittered
        +-2% per step, observed through +-15% noise.
        """
        rng = self.rng
        drift = rng.uniform(-0.05, 0.08)
        current = float(monthly)
        trend = []
        for i in range(TREND_POINTS):
            month = month_key(add_months(self.ctx.as_of, i - (TREND_POINTS - 1)))
            trend.append(
                {
                    "month": month,
                    "rx_count": max(1, round(current * rng.uniform(0.85, 1.15))),
                    "market_share": round(clamp(share + rng.uniform(-3, 3), 0, 100), 1),
                }
            )
            current *= 1 + drift + rng.uniform(-0.02, 0.02)
        return trend

    def _conversion_likelihood(self, segment: Segment, score: int) -> int:
        base = CONVERSION_BASE_BY_SEGMENT[segment]
        value = round(base + (score - 50) * 0.5 + self.rng.normal(0, 10))
        return int(clamp(value, 5, 95))

    def _churn_risk(self, tier: Tier, score: int) -> int:
        base = CHURN_BASE_BY_TIER[tier]
        value = round(base - (score - 50) * 0.3 + self.rng.normal(0, 10))
        return int(clamp(value, 5, 90))
