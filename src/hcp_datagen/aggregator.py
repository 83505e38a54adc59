"""
Activity aggregates derived from the generated event tables.

Each function reads read-back rows from a data dict and returns new rows for
its own entity kind; nothing upstream is modified.

- campaign_metrics: reach, touches and responses per campaign
- participation_activity: touch/response counts per enrollment
- engagement_snapshots: observed per-HCP, per-channel engagement
"""

from collections import defaultdict
from datetime import datetime
from typing import Any, Callable

from .constants import CHANNEL_ORDER

Rows = list[dict[str, Any]]


def _response_rate(responses: int, touches: int) -> float:
    if touches == 0:
        return 0.0
    return round(responses / touches * 100, 2)


def campaign_metrics(data: dict[str, Rows], as_of: datetime) -> Rows:
    """One row per campaign; campaigns with no linked touches report zeros."""
    touches: dict[Any, int] = defaultdict(int)
    reach: dict[Any, set] = defaultdict(set)
    responses: dict[Any, int] = defaultdict(int)

    for stimulus in data["stimuli_events"]:
        campaign_id = stimulus["campaign_id"]
        if campaign_id is not None:
            touches[campaign_id] += 1
            reach[campaign_id].add(stimulus["hcp_id"])
    for outcome in data["outcome_events"]:
        if outcome["campaign_id"] is not None:
            responses[outcome["campaign_id"]] += 1

    return [
        {
            "campaign_id": c["id"],
            "total_reach": len(reach[c["id"]]),
            "total_touches": touches[c["id"]],
            "total_responses": responses[c["id"]],
            "response_rate": _response_rate(responses[c["id"]], touches[c["id"]]),
            "measured_at": as_of,
        }
        for c in data["campaigns"]
    ]


def participation_activity(data: dict[str, Rows], as_of: datetime) -> Rows:
    """Touch and response totals for every (campaign, HCP) enrollment."""
    touches: dict[tuple, list[datetime]] = defaultdict(list)
    responses: dict[tuple, list[datetime]] = defaultdict(list)

    for stimulus in data["stimuli_events"]:
        if stimulus["campaign_id"] is not None:
            touches[(stimulus["campaign_id"], stimulus["hcp_id"])].append(stimulus["event_date"])
    for outcome in data["outcome_events"]:
        if outcome["campaign_id"] is not None:
            responses[(outcome["campaign_id"], outcome["hcp_id"])].append(outcome["event_date"])

    rows: Rows = []
    for enrollment in data["campaign_participation"]:
        key = (enrollment["campaign_id"], enrollment["hcp_id"])
        touch_dates = touches.get(key, [])
        response_dates = responses.get(key, [])
        rows.append(
            {
                "participation_id": enrollment["id"],
                "campaign_id": enrollment["campaign_id"],
                "hcp_id": enrollment["hcp_id"],
                "touch_count": len(touch_dates),
                "response_count": len(response_dates),
                "last_touch_at": max(touch_dates, default=None),
                "last_response_at": max(response_dates, default=None),
            }
        )
    return rows


def engagement_score(response_rate: float, days_since_last_touch: int | None, touches: int) -> int:
    """
    Observed 0-100 channel score.

    Up to 50 points from response rate, up to 30 for recency (one point lost
    per day since the last touch) and up to 20 for depth (2 per touch).
    """
    if touches == 0:
        return 0
    score = min(50.0, response_rate)
    if days_since_last_touch is not None:
        score += max(0, 30 - days_since_last_touch)
    score += min(20, touches * 2)
    return round(min(100.0, score))


def engagement_snapshots(data: dict[str, Rows], as_of: datetime) -> Rows:
    """Six rows per HCP, one per channel, in channel order."""
    touches: dict[tuple, int] = defaultdict(int)
    last_touch: dict[tuple, datetime] = {}
    responses: dict[tuple, int] = defaultdict(int)

    for stimulus in data["stimuli_events"]:
        key = (stimulus["hcp_id"], stimulus["channel"])
        touches[key] += 1
        if key not in last_touch or stimulus["event_date"] > last_touch[key]:
            last_touch[key] = stimulus["event_date"]
    for outcome in data["outcome_events"]:
        responses[(outcome["hcp_id"], outcome["channel"])] += 1

    rows: Rows = []
    for hcp in data["hcp_profiles"]:
        for channel in CHANNEL_ORDER:
            key = (hcp["id"], channel.value)
            count = touches[key]
            rate = round(responses[key] / count * 100, 1) if count else 0.0
            last = last_touch.get(key)
            days = (as_of - last).days if last is not None else None
            rows.append(
                {
                    "hcp_id": hcp["id"],
                    "channel": channel.value,
                    "total_touches": count,
                    "total_responses": responses[key],
                    "response_rate": rate,
                    "last_contact_date": last,
                    "score": engagement_score(rate, days, count),
                    "snapshot_date": as_of,
                }
            )
    return rows


# Aggregate kind -> builder, in persistence order
AGGREGATES: dict[str, Callable[[dict[str, Rows], datetime], Rows]] = {
    "campaign_metrics": campaign_metrics,
    "participation_activity": participation_activity,
    "engagement_snapshots": engagement_snapshots,
}
