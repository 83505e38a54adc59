"""
Stage 8 Generator: Message exposures and saturation (MSI).

Tables generated:
- message_exposures (one row per HCP per message theme touched)

Each stimulus's content category maps to a message theme. For every
(HCP, theme) group the stage measures how often and through how many
channels the theme reached the HCP, how engagement with it is trending,
and scores the result with the Message Saturation Index.
"""

import math
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping

from .base import BaseStageGenerator
from ..constants import CONTENT_CATEGORY_THEMES, SEGMENT_ADOPTION_STAGE, Segment
from ..errors import ConsistencyError
from ..lookup_builder import LookupBuilder, LookupIndex
from ..msi import calculate_msi, determine_msi_direction, msi_to_risk_level

SECONDS_PER_DAY = 86400
PREVIOUS_MSI_LOOKBACK = timedelta(days=30)


def shannon_entropy(channel_counts: Mapping[str, int]) -> float:
    """
    Channel diversity in [0, 1].

    Shannon entropy of the channel distribution divided by log2 of the
    number of channels used; a single channel scores 0.
    """
    counts = [c for c in channel_counts.values() if c > 0]
    total = sum(counts)
    if total == 0 or len(counts) < 2:
        return 0.0
    entropy = -sum((c / total) * math.log2(c / total) for c in counts)
    return round(entropy / math.log2(len(counts)), 4)


def engagement_decay(points: list[tuple[datetime, float]]) -> float:
    """
    Least-squares slope of engagement delta against elapsed days, scaled
    to 30 days and inverted so that positive means declining engagement.

    Returns 0 with fewer than two points or when every point shares a date.
    """
    if len(points) < 2:
        return 0.0
    ordered = sorted(points, key=lambda p: p[0])
    first = ordered[0][0]
    xs = [(d - first).total_seconds() / SECONDS_PER_DAY for d, _ in ordered]
    ys = [delta for _, delta in ordered]
    n = len(ordered)

    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_xx = sum(x * x for x in xs)
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    return round(-slope * 30, 4)


def avg_time_between_touches(dates: Iterable[datetime]) -> float | None:
    """Mean gap in days between consecutive touches (None below two touches)."""
    ordered = sorted(dates)
    if len(ordered) < 2:
        return None
    span = (ordered[-1] - ordered[0]).total_seconds() / SECONDS_PER_DAY
    return round(span / (len(ordered) - 1), 2)


def engagement_delta(stimulus: dict[str, Any], responded: bool) -> float | None:
    """
    Observed engagement delta for one touch.

    A recorded actual delta wins; otherwise a touch that produced an outcome
    contributes its predicted delta and an unanswered touch contributes none.
    """
    if stimulus.get("actual_engagement_delta") is not None:
        return stimulus["actual_engagement_delta"]
    if responded:
        return stimulus["predicted_engagement_delta"]
    return None


class SaturationGenerator(BaseStageGenerator):
    """
    Build message exposure facts with MSI scores.

    Reads message_themes, hcp_profiles, stimuli_events and outcome_events.
    The previous MSI is the same group's score measured with only the
    activity up to 30 days before as_of.
    """

    STAGE = 8
    NAME = "saturation"
    OUTPUT = "message_exposures"

    def generate(self) -> None:
        print("  Stage 8: Message exposures (entropy, decay, MSI)")
        theme_ids = {t["code"]: t["id"] for t in self.data["message_themes"]}
        hcps = LookupBuilder.build_unique(self.data["hcp_profiles"], "id")
        outcomes = LookupBuilder.build_outcomes_by_stimulus(self.data["outcome_events"])

        groups: dict[tuple[Any, Any], list[dict[str, Any]]] = defaultdict(list)
        for stimulus in self.data["stimuli_events"]:
            category = stimulus.get("content_category")
            if category is None:
                continue
            code = CONTENT_CATEGORY_THEMES[category]
            if code not in theme_ids:
                raise ConsistencyError(f"Message theme {code} has not been seeded")
            groups[(stimulus["hcp_id"], theme_ids[code])].append(stimulus)

        rows: list[dict[str, Any]] = []
        for (hcp_id, theme_id), events in groups.items():
            if hcp_id not in hcps:
                raise ConsistencyError(f"Stimulus references unknown HCP {hcp_id}")
            rows.append(self.exposure_for_group(hcps[hcp_id], theme_id, events, outcomes))

        self.data[self.OUTPUT].extend(rows)
        self._mark_done()
        at_risk = sum(1 for r in rows if r["saturation_risk"] in ("high", "critical"))
        print(f"    Generated: {len(rows):,} exposures ({at_risk:,} high/critical risk)")

    def exposure_for_group(
        self,
        hcp: dict[str, Any],
        theme_id: Any,
        events: list[dict[str, Any]],
        outcomes: LookupIndex,
    ) -> dict[str, Any]:
        stage = SEGMENT_ADOPTION_STAGE[Segment(hcp["segment"])]
        metrics = self._metrics(events, outcomes, None)
        msi = calculate_msi(
            metrics["touch_frequency"],
            metrics["channel_diversity"],
            metrics["engagement_decay"],
            stage,
        )

        cutoff = self.ctx.as_of - PREVIOUS_MSI_LOOKBACK
        earlier = [e for e in events if e["event_date"] <= cutoff]
        previous_msi = None
        if earlier:
            before = self._metrics(earlier, outcomes, cutoff)
            previous_msi = calculate_msi(
                before["touch_frequency"],
                before["channel_diversity"],
                before["engagement_decay"],
                stage,
            )

        return {
            "hcp_id": hcp["id"],
            "message_theme_id": theme_id,
            **metrics,
            "adoption_stage": stage.value,
            "measurement_period": f"trailing-{self.ctx.months}mo",
            "msi": msi,
            "msi_direction": determine_msi_direction(msi, previous_msi),
            "saturation_risk": msi_to_risk_level(msi),
            "previous_msi": previous_msi,
        }

    @staticmethod
    def _metrics(
        events: list[dict[str, Any]],
        outcomes: LookupIndex,
        cutoff: datetime | None,
    ) -> dict[str, Any]:
        """Exposure metrics for one group, counting outcomes up to cutoff."""
        channels = Counter(e["channel"] for e in events)
        points: list[tuple[datetime, float]] = []
        for event in events:
            responses = [
                o for o in outcomes.get(event["id"])
                if cutoff is None or o["event_date"] <= cutoff
            ]
            delta = engagement_delta(event, bool(responses))
            if delta is not None:
                points.append((event["event_date"], delta))

        return {
            "touch_frequency": len(events),
            "unique_channels": len(channels),
            "channel_diversity": shannon_entropy(channels),
            "avg_time_between_touches": avg_time_between_touches(
                e["event_date"] for e in events
            ),
            "engagement_rate": round(len(points) / len(events), 4),
            "engagement_decay": engagement_decay(points),
            "last_engagement_date": max(e["event_date"] for e in events),
        }
