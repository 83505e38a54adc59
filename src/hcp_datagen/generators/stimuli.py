"""
Stage 5 Generator: Stimulus events (outbound touches).

Tables generated:
- stimuli_events (Tier 1: 50-80, Tier 2: 30-50, Tier 3: 15-30 per HCP)

Channels follow the HCP's segment weights. Timestamps lean toward weekdays
and business hours. Touches are tied to a campaign only when the HCP was
enrolled (and not yet opted out) in a campaign running that day, and to a
rep only for rep-delivered channels.
"""

from datetime import datetime, timedelta
from typing import Any

from .base import BaseStageGenerator
from ..constants import (
    CALLS_TO_ACTION,
    CHANNEL_IMPACT_MULTIPLIER,
    CHANNEL_WEIGHTS_BY_SEGMENT,
    CONTENT_CATEGORIES,
    CONTENT_TYPES_BY_CHANNEL,
    DELIVERY_STATUS_WEIGHTS,
    PREDICTED_IMPACT_BASE_BY_TIER,
    REP_CHANNELS,
    STIMULI_COUNT_BY_TIER,
    STIMULUS_TYPES_BY_CHANNEL,
    Channel,
    Segment,
    Tier,
)
from ..lookup_builder import LookupBuilder

WEEKEND_SHIFT_PROBABILITY = 0.8
MESSAGE_VARIANTS = 5

Enrollment = tuple[dict[str, Any], dict[str, Any]]


class StimuliGenerator(BaseStageGenerator):
    """
    Generate dated touches for every HCP.

    Reads hcp_profiles, territory_assignments, campaigns and
    campaign_participation. Each HCP's events are emitted in date order.
    """

    STAGE = 5
    NAME = "stimuli"
    OUTPUT = "stimuli_events"

    def generate(self) -> None:
        print("  Stage 5: Stimuli (channel-weighted touches)")
        primary_reps = LookupBuilder.build_primary_rep_by_hcp(self.data["territory_assignments"])
        participation = LookupBuilder.build_participation_by_hcp(
            self.data["campaign_participation"]
        )
        campaigns = LookupBuilder.build_unique(self.data["campaigns"], "id")

        rows: list[dict[str, Any]] = []
        linked = 0
        for hcp in self.data["hcp_profiles"]:
            enrollments = sorted(
                ((campaigns[p["campaign_id"]], p) for p in participation.get(hcp["id"])),
                key=lambda pair: (pair[0]["start_date"], pair[0]["id"]),
            )
            rep = primary_reps.get(hcp["id"])
            events = self.generate_for_hcp(hcp, rep["rep_id"] if rep else None, enrollments)
            linked += sum(1 for e in events if e["campaign_id"] is not None)
            rows.extend(events)

        self.data[self.OUTPUT].extend(rows)
        self._mark_done()
        print(f"    Generated: {len(rows):,} stimuli ({linked:,} campaign-linked)")

    def generate_for_hcp(
        self,
        hcp: dict[str, Any],
        rep_id: str | None,
        enrollments: list[Enrollment],
    ) -> list[dict[str, Any]]:
        """All touches for one HCP, sorted by event_date."""
        tier = Tier(hcp["tier"])
        segment = Segment(hcp["segment"])
        lo, hi = STIMULI_COUNT_BY_TIER[tier]
        events = [
            self._event(hcp["id"], tier, segment, rep_id, enrollments)
            for _ in range(self.rng.integer(lo, hi))
        ]
        events.sort(key=lambda e: e["event_date"])
        return events

    def _event(
        self,
        hcp_id: Any,
        tier: Tier,
        segment: Segment,
        rep_id: str | None,
        enrollments: list[Enrollment],
    ) -> dict[str, Any]:
        rng = self.rng
        channel = rng.weighted_pick(CHANNEL_WEIGHTS_BY_SEGMENT[segment])
        stimulus_type = rng.pick(STIMULUS_TYPES_BY_CHANNEL[channel])
        event_date = self._event_date()
        engagement, conversion, lower, upper = self._predicted_impact(tier, channel)

        return {
            "hcp_id": hcp_id,
            "stimulus_type": stimulus_type,
            "channel": channel.value,
            "content_type": rng.pick(CONTENT_TYPES_BY_CHANNEL[channel]),
            "message_variant": f"V{rng.integer(1, MESSAGE_VARIANTS)}",
            "call_to_action": rng.pick(CALLS_TO_ACTION[stimulus_type]),
            "campaign_id": self._campaign_for(event_date, enrollments),
            "rep_id": rep_id if channel in REP_CHANNELS else None,
            "content_category": rng.pick(CONTENT_CATEGORIES),
            "delivery_status": rng.weighted_pick(DELIVERY_STATUS_WEIGHTS),
            "predicted_engagement_delta": engagement,
            "predicted_conversion_delta": conversion,
            "confidence_lower": lower,
            "confidence_upper": upper,
            "actual_engagement_delta": None,
            "actual_conversion_delta": None,
            "outcome_recorded_at": None,
            "status": "predicted",
            "event_date": event_date,
        }

    def _event_date(self) -> datetime:
        """
        Uniform day in the window, nudged to weekdays and business hours.

        Saturday moves +2 days and Sunday +1 (to Monday) 80% of the time;
        the hour is normal around noon, clamped to 07-19.
        """
        rng = self.rng
        day = rng.date_between(self.ctx.window_start, self.ctx.as_of)
        if day.weekday() >= 5 and rng.boolean(WEEKEND_SHIFT_PROBABILITY):
            day += timedelta(days=7 - day.weekday())
        return day.replace(
            hour=rng.normal_int(12, 3, 7, 19),
            minute=rng.integer(0, 59),
            second=0,
            microsecond=0,
        )

    @staticmethod
    def _campaign_for(event_date: datetime, enrollments: list[Enrollment]) -> Any:
        """Earliest-starting campaign the HCP was actively enrolled in on event_date."""
        for campaign, enrollment in enrollments:
            if not campaign["start_date"] <= event_date <= campaign["end_date"]:
                continue
            if event_date < enrollment["enrolled_at"]:
                continue
            opt_out_at = enrollment["opt_out_at"]
            if opt_out_at is not None and event_date >= opt_out_at:
                continue
            return campaign["id"]
        return None

    def _predicted_impact(self, tier: Tier, channel: Channel) -> tuple[float, float, float, float]:
        """
        (engagement delta, conversion delta, CI lower, CI upper)

        Conversion is ~30% of engagement; the interval half-width is 30-60%
        of |engagement|.
        """
        rng = self.rng
        expected = PREDICTED_IMPACT_BASE_BY_TIER[tier] * CHANNEL_IMPACT_MULTIPLIER[channel]
        engagement = round(expected + rng.normal(0, 0.5), 2)
        conversion = round(expected * 0.3 + rng.normal(0, 0.2), 2)
        half_width = abs(engagement) * rng.uniform(0.3, 0.6)
        return (
            engagement,
            conversion,
            round(engagement - half_width, 2),
            round(engagement + half_width, 2),
        )
