"""
Stage 6 Generator: Outcome events (responses to stimuli).

Tables generated:
- outcome_events (~15% of stimuli)

Stimuli are replayed per HCP in date order so the running touch count is
known at each touch. A touch converts with probability

    channel rate x tier modifier x segment modifier x touch decay x U[0.8, 1.2]

clamped to [0.02, 0.6]. The outcome timestamp is never before the stimulus
and is strictly later on the same day.
"""

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Any

from .base import BaseStageGenerator
from ..constants import (
    ATTRIBUTION_WEIGHTS,
    CHANNEL_RESPONSE_RATES,
    CONTENT_NAMES_BY_OUTCOME,
    DEFAULT_RESPONSE_WINDOW_DAYS,
    MIN_ASSISTED_WEIGHT,
    OUTCOME_TYPE_WEIGHTS,
    OUTCOME_VALUE_RANGES,
    OUTCOMES_BY_STIMULUS,
    QUALITY_SCORED_OUTCOMES,
    RESPONSE_PROBABILITY_BOUNDS,
    RESPONSE_WINDOW_DAYS,
    SEGMENT_RESPONSE_MODIFIER,
    TIER_RESPONSE_MODIFIER,
    TOUCH_DECAY_FLOOR,
    TOUCH_DECAY_STEPS,
    Channel,
    Segment,
    Tier,
)
from ..errors import ConsistencyError
from ..helpers import clamp
from ..lookup_builder import LookupBuilder

EARLIEST_RESPONSE_MINUTE = 7 * 60
LATEST_RESPONSE_MINUTE = 20 * 60 + 59


def touch_decay(touch_count: int) -> float:
    """Step multiplier: 1.0 for touches 1-3, 0.9 for 4-5, 0.8 for 6-10, then 0.6."""
    for max_touches, multiplier in TOUCH_DECAY_STEPS:
        if touch_count <= max_touches:
            return multiplier
    return TOUCH_DECAY_FLOOR


def response_probability(
    channel: Channel,
    tier: Tier,
    segment: Segment,
    touch_count: int,
    noise: float = 1.0,
) -> float:
    """Probability that a touch produces an outcome, clamped to [0.02, 0.6]."""
    p = (
        CHANNEL_RESPONSE_RATES[channel]
        * TIER_RESPONSE_MODIFIER[tier]
        * SEGMENT_RESPONSE_MODIFIER[segment]
        * touch_decay(touch_count)
        * noise
    )
    return clamp(p, *RESPONSE_PROBABILITY_BOUNDS)


def attribution_weight(attribution_type: str, touch_count: int) -> float:
    if attribution_type == "assisted":
        return round(max(MIN_ASSISTED_WEIGHT, 1 / touch_count), 3)
    return ATTRIBUTION_WEIGHTS[attribution_type]


class OutcomeGenerator(BaseStageGenerator):
    """
    Derive outcome events from stimuli.

    Reads hcp_profiles and stimuli_events. Every outcome keeps the id of the
    touch it answers, including organic ones.
    """

    STAGE = 6
    NAME = "outcome"
    OUTPUT = "outcome_events"

    def generate(self) -> None:
        print("  Stage 6: Outcomes (response probability, attribution)")
        hcps = LookupBuilder.build_unique(self.data["hcp_profiles"], "id")
        hcp_position = {hcp_id: i for i, hcp_id in enumerate(hcps)}

        def replay_order(stimulus: dict[str, Any]) -> tuple:
            hcp_id = stimulus["hcp_id"]
            if hcp_id not in hcp_position:
                raise ConsistencyError(f"Stimulus {stimulus['id']} references unknown HCP {hcp_id}")
            return hcp_position[hcp_id], stimulus["event_date"], stimulus["id"]

        touches: dict[Any, int] = defaultdict(int)
        rows: list[dict[str, Any]] = []
        for stimulus in sorted(self.data["stimuli_events"], key=replay_order):
            hcp = hcps[stimulus["hcp_id"]]
            touches[hcp["id"]] += 1
            outcome = self.evaluate(stimulus, hcp, touches[hcp["id"]])
            if outcome is not None:
                rows.append(outcome)

        self.data[self.OUTPUT].extend(rows)
        self._mark_done()
        total = len(self.data["stimuli_events"])
        rate = len(rows) / total * 100 if total else 0
        print(f"    Generated: {len(rows):,} outcomes ({rate:.1f}% response)")

    def evaluate(
        self, stimulus: dict[str, Any], hcp: dict[str, Any], touch_count: int
    ) -> dict[str, Any] | None:
        """
        Roll one stimulus; return its outcome row or None.

        Args:
            stimulus: Read-back stimulus row
            hcp: The stimulus's HCP
            touch_count: 1-based position of this touch in the HCP's history
        """
        rng = self.rng
        p = response_probability(
            Channel(stimulus["channel"]),
            Tier(hcp["tier"]),
            Segment(hcp["segment"]),
            touch_count,
            rng.uniform(0.8, 1.2),
        )
        if not rng.boolean(p):
            return None

        candidates = OUTCOMES_BY_STIMULUS.get(stimulus["stimulus_type"], [])
        if not candidates:
            return None
        outcome_type = rng.weighted_pick(
            [(o, OUTCOME_TYPE_WEIGHTS.get(o, 1)) for o in candidates]
        )

        event_date = self._outcome_date(stimulus["event_date"], outcome_type)
        attribution_type = self._attribution_type(touch_count)

        value = None
        if outcome_type in OUTCOME_VALUE_RANGES:
            value = rng.integer(*OUTCOME_VALUE_RANGES[outcome_type])
        quality = rng.integer(5, 10) if outcome_type in QUALITY_SCORED_OUTCOMES else None
        content_id = content_name = None
        if outcome_type in CONTENT_NAMES_BY_OUTCOME:
            content_id = f"CNT-{rng.integer(1000, 9999)}"
            content_name = rng.pick(CONTENT_NAMES_BY_OUTCOME[outcome_type])

        return {
            "hcp_id": hcp["id"],
            "stimulus_id": stimulus["id"],
            "campaign_id": stimulus["campaign_id"],
            "outcome_type": outcome_type,
            "channel": stimulus["channel"],
            "outcome_value": value,
            "quality_score": quality,
            "content_id": content_id,
            "content_name": content_name,
            "attribution_type": attribution_type,
            "attribution_weight": attribution_weight(attribution_type, touch_count),
            "touches_in_window": touch_count,
            "days_since_last_touch": (event_date - stimulus["event_date"]).days,
            "event_date": event_date,
        }

    def _outcome_date(self, stimulus_date: datetime, outcome_type: str) -> datetime:
        """
        Stimulus date plus the outcome type's response window.

        Same-day responses land strictly after the stimulus minute (up to
        20:59); later days use 07:00-20:59.
        """
        rng = self.rng
        lo, hi = RESPONSE_WINDOW_DAYS.get(outcome_type, DEFAULT_RESPONSE_WINDOW_DAYS)
        days = rng.integer(lo, hi)

        if days == 0:
            stimulus_minute = stimulus_date.hour * 60 + stimulus_date.minute
            earliest = stimulus_minute + 1
            minute_of_day = rng.integer(earliest, max(earliest, LATEST_RESPONSE_MINUTE))
        else:
            minute_of_day = rng.integer(EARLIEST_RESPONSE_MINUTE, LATEST_RESPONSE_MINUTE)

        day = stimulus_date.replace(hour=0, minute=0, second=0, microsecond=0)
        return day + timedelta(days=days, minutes=minute_of_day)

    def _attribution_type(self, touch_count: int) -> str:
        """
        Attribution ladder by touch count.

        First touch: 85% direct, else organic. Touches 2-3: 60% direct, 30%
        assisted, 10% organic. Later: 40% direct, 45% assisted, 15% organic.
        """
        roll = self.rng.uniform(0, 1)
        if touch_count == 1:
            return "direct" if roll < 0.85 else "organic"
        if touch_count <= 3:
            if roll < 0.6:
                return "direct"
            return "assisted" if roll < 0.9 else "organic"
        if roll < 0.4:
            return "direct"
        return "assisted" if roll < 0.85 else "organic"
