"""
Stage 3-4 Generators: Campaigns and campaign participation.

Tables generated:
- campaigns (~4.2 per modeled month, never more than 3 running at once)
- campaign_participation (60-90% of each campaign's eligible HCPs)

The concurrency cap is enforced while scheduling: a candidate start date is
only accepted if the busiest instant of its interval has fewer than 3
campaigns already running.
"""

import math
import warnings
from datetime import datetime, timedelta
from typing import Any

from .base import BaseStageGenerator
from ..constants import (
    CAMPAIGN_BUDGET_RANGE,
    CAMPAIGN_DURATION_WEEKS,
    CAMPAIGN_GOALS,
    CAMPAIGN_NAME_PREFIXES,
    CAMPAIGN_TYPE_WEIGHTS,
    CAMPAIGNS_PER_MONTH,
    CHANNEL_ORDER,
    MAX_CONCURRENT_CAMPAIGNS,
    MAX_START_ATTEMPTS,
    OPT_OUT_REASONS,
    PARTICIPATION_SOURCES,
    PRODUCTS,
    Channel,
    Segment,
    Specialty,
    Tier,
)

Period = tuple[datetime, datetime]


def peak_concurrency(periods: list[Period], start: datetime, end: datetime) -> int:
    """
    Largest number of periods running at any instant of [start, end].

    Periods are closed intervals. The maximum is reached either at start or
    at the start of some period that begins inside the interval.
    """
    probes = [start] + [s for s, _ in periods if start < s <= end]
    return max(sum(1 for s, e in periods if s <= p <= e) for p in probes)


class CampaignGenerator(BaseStageGenerator):
    """
    Generate campaign definitions over the modeled window.

    Target count is round(months x 4.2). When the window is already saturated
    for a candidate, even at the type's shortest duration, the campaign is
    dropped instead of breaking the concurrency cap.
    """

    STAGE = 3
    NAME = "campaign"
    OUTPUT = "campaigns"

    def generate(self) -> None:
        print("  Stage 3: Campaigns (schedule, channel mix, targeting)")
        rng = self.rng
        target = round(self.ctx.months * CAMPAIGNS_PER_MONTH)
        periods: list[Period] = []
        rows: list[dict[str, Any]] = []

        for _ in range(target):
            campaign_type = rng.weighted_pick(CAMPAIGN_TYPE_WEIGHTS)
            window = self._schedule(campaign_type, periods)
            if window is None:
                continue
            periods.append(window)
            rows.append(self._build_campaign(len(rows) + 1, campaign_type, *window))

        if len(rows) < target:
            warnings.warn(
                f"Scheduled {len(rows)} of {target} campaigns; the window has no room "
                f"for more without exceeding {MAX_CONCURRENT_CAMPAIGNS} concurrent campaigns",
                stacklevel=2,
            )

        self.data[self.OUTPUT].extend(rows)
        self._mark_done()
        print(f"    Generated: {len(rows)} campaigns (target {target})")

    def _schedule(self, campaign_type: str, periods: list[Period]) -> Period | None:
        """
        Pick (start, end) for a campaign, or None if the window is full.

        Tries MAX_START_ATTEMPTS random starts at the drawn duration, then
        as many at the type's minimum duration.
        """
        rng = self.rng
        min_weeks, max_weeks = CAMPAIGN_DURATION_WEEKS[campaign_type]
        window_start, window_end = self.ctx.window_start, self.ctx.as_of

        for weeks in (rng.integer(min_weeks, max_weeks), min_weeks):
            duration = timedelta(weeks=weeks)
            latest_start = max(window_start, window_end - duration)
            for _ in range(MAX_START_ATTEMPTS):
                start = rng.date_between(window_start, latest_start)
                end = start + duration
                if peak_concurrency(periods, start, end) < MAX_CONCURRENT_CAMPAIGNS:
                    return start, end
        return None

    def _build_campaign(
        self, index: int, campaign_type: str, start: datetime, end: datetime
    ) -> dict[str, Any]:
        rng = self.rng

        area = rng.pick(list(Specialty))
        product = PRODUCTS[area]
        primary = rng.pick(CHANNEL_ORDER)
        other_areas = [s for s in Specialty if s is not area]
        specialties = [area] + rng.pick_many(other_areas, rng.integer(0, 3))
        segments = rng.pick_many(list(Segment), rng.integer(1, 3))
        tiers = rng.pick_many(list(Tier), rng.integer(1, 2))

        goal_type = rng.pick(list(CAMPAIGN_GOALS))
        goal_lo, goal_hi = CAMPAIGN_GOALS[goal_type]
        budget = rng.integer(*CAMPAIGN_BUDGET_RANGE)
        status = self._status(start, end)
        if status == "draft":
            spent = 0.0
        elif status == "completed":
            spent = round(budget * rng.uniform(0.85, 1.0), 2)
        else:
            spent = round(budget * rng.uniform(0.0, 0.7), 2)

        quarter = (start.month - 1) // 3 + 1
        prefix = rng.pick(CAMPAIGN_NAME_PREFIXES[campaign_type])

        return {
            "campaign_code": f"CAMP-{self.ctx.as_of.year}-{index:03d}",
            "name": f"{prefix} {product} Q{quarter} {start.year}",
            "description": (
                f"{campaign_type.title()} campaign for {product} reaching "
                f"{', '.join(s.value for s in segments)}"
            ),
            "campaign_type": campaign_type,
            "therapeutic_area": area.value,
            "product": product,
            "brand": product,
            "status": status,
            "start_date": start,
            "end_date": end,
            "budget": budget,
            "spent_to_date": spent,
            "primary_channel": primary.value,
            "channel_mix": self._channel_mix(primary),
            "target_segments": [s.value for s in segments],
            "target_specialties": [s.value for s in specialties],
            "target_tiers": [t.value for t in tiers],
            "goal_type": goal_type,
            "goal_value": rng.integer(goal_lo, goal_hi),
            "created_by": "system",
        }

    def _status(self, start: datetime, end: datetime) -> str:
        """Status from dates relative to as_of, with a small chance of the rarer state."""
        now = self.ctx.as_of
        if end < now:
            return "completed" if self.rng.boolean(0.95) else "cancelled"
        if start <= now:
            return "active" if self.rng.boolean(0.9) else "paused"
        return "draft"

    def _channel_mix(self, primary: Channel) -> dict[str, int]:
        """
        Percent of touches per channel, summing to exactly 100.

        Primary gets 30-50; every other channel gets at least 5 and the last
        one absorbs whatever remains.
        """
        rng = self.rng
        mix = {primary.value: rng.integer(30, 50)}
        remaining = 100 - mix[primary.value]
        others = rng.shuffle([c for c in CHANNEL_ORDER if c is not primary])

        for i, channel in enumerate(others):
            left = len(others) - i - 1
            if left == 0:
                mix[channel.value] = remaining
            else:
                share = rng.integer(5, min(25, remaining - left * 5))
                mix[channel.value] = share
                remaining -= share
        return mix


class ParticipationGenerator(BaseStageGenerator):
    """
    Enroll eligible HCPs into campaigns.

    Eligibility requires the HCP's segment, specialty and tier to all be in
    the campaign's targeting lists.
    """

    STAGE = 4
    NAME = "participation"
    OUTPUT = "campaign_participation"

    def generate(self) -> None:
        print("  Stage 4: Campaign participation")
        rng = self.rng
        hcps = self.data["hcp_profiles"]
        rows: list[dict[str, Any]] = []

        for campaign in self.data["campaigns"]:
            eligible = [h for h in hcps if self._is_eligible(campaign, h)]
            if not eligible:
                continue
            count = math.floor(len(eligible) * rng.uniform(0.6, 0.9))
            for hcp in rng.pick_many(eligible, count):
                rows.append(self._participation(campaign, hcp))

        self.data[self.OUTPUT].extend(rows)
        self._mark_done()
        print(f"    Generated: {len(rows):,} enrollments")

    @staticmethod
    def _is_eligible(campaign: dict[str, Any], hcp: dict[str, Any]) -> bool:
        return (
            hcp["segment"] in campaign["target_segments"]
            and hcp["specialty"] in campaign["target_specialties"]
            and hcp["tier"] in campaign["target_tiers"]
        )

    def _participation(self, campaign: dict[str, Any], hcp: dict[str, Any]) -> dict[str, Any]:
        """
        One enrollment row.

        Status ladder: 5% opted_out, 25% completed, 40% active, 30% enrolled.
        """
        rng = self.rng
        enrolled_at = campaign["start_date"] + timedelta(days=rng.integer(0, 7))
        roll = rng.uniform(0, 1)
        if roll < 0.05:
            status = "opted_out"
        elif roll < 0.30:
            status = "completed"
        elif roll < 0.70:
            status = "active"
        else:
            status = "enrolled"

        opt_out_reason = None
        opt_out_at = None
        if status == "opted_out":
            opt_out_reason = rng.pick(OPT_OUT_REASONS)
            latest = max(self.ctx.as_of, enrolled_at + timedelta(days=1))
            opt_out_at = rng.date_between(enrolled_at + timedelta(hours=1), latest)

        return {
            "campaign_id": campaign["id"],
            "hcp_id": hcp["id"],
            "status": status,
            "enrolled_at": enrolled_at,
            "enrolled_by": rng.pick(PARTICIPATION_SOURCES),
            "opt_out_reason": opt_out_reason,
            "opt_out_at": opt_out_at,
        }
