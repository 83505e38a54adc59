"""
Helper functions and sizing for HCP data generation.

Contains:
- clamp(): Bound a number to a closed interval
- add_months() / month_key() / modeled_months(): Calendar arithmetic for
  monthly series
- expected_row_counts(): Approximate row count per entity kind for a run
"""

import calendar
from datetime import datetime

from .constants import STIMULI_COUNT_BY_TIER, Tier


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def add_months(dt: datetime, months: int) -> datetime:
    """
    Shift a timestamp by whole calendar months.

    The day is clamped to the length of the target month
    (Jan 31 + 1 month -> Feb 28/29).
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def month_key(dt: datetime) -> str:
    """Format as the YYYY-MM key used by monthly series."""
    return f"{dt.year:04d}-{dt.month:02d}"


def modeled_months(start: datetime, months: int) -> list[str]:
    """Month keys for each month of a window starting at ``start``."""
    return [month_key(add_months(start, i)) for i in range(months)]


def expected_row_counts(hcps: int, months: int) -> dict[str, int]:
    """
    Rough row count targets for a run, used by the record-count check.

    Stimuli use the tier-2 midpoint; outcomes assume ~15% response.
    """
    lo, hi = STIMULI_COUNT_BY_TIER[Tier.TIER_2]
    stimuli = hcps * (lo + hi) // 2
    return {
        "hcp_profiles": hcps,
        "territory_assignments": int(hcps * 1.2),
        "stimuli_events": stimuli,
        "outcome_events": int(stimuli * 0.15),
        "prescribing_history": hcps * months,
    }
