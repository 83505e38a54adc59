"""
Stage 7 Generator: Monthly prescribing history.

Tables generated:
- prescribing_history (one row per HCP per modeled month)

Each HCP walks forward from its profile volume and market share. Written
prescriptions recorded as outcomes in a month lift that month's total.
"""

from collections import defaultdict
from typing import Any

from .base import BaseStageGenerator
from ..constants import COMPETITORS, PRODUCTS, Specialty
from ..helpers import add_months, clamp, modeled_months, month_key


def aggregate_outcomes_for_rx(outcomes: list[dict[str, Any]]) -> dict[tuple[Any, str], int]:
    """Count rx_written outcomes per (hcp_id, "YYYY-MM")."""
    counts: dict[tuple[Any, str], int] = defaultdict(int)
    for outcome in outcomes:
        if outcome["outcome_type"] == "rx_written":
            counts[(outcome["hcp_id"], month_key(outcome["event_date"]))] += 1
    return dict(counts)


def product_breakdown(
    total: int, market_share: float, names: tuple[str, str, str]
) -> list[dict[str, Any]]:
    """
    Split a month's total across home product, two competitors and Other.

    The home product takes its market share; the rest goes 40% / 35% to the
    named competitors and Other absorbs the remainder, so the parts always
    sum to total.
    """
    product, competitor_a, competitor_b = names
    home = round(total * market_share / 100)
    rest = total - home
    first = round(rest * 0.4)
    second = round(rest * 0.35)
    return [
        {"product": product, "rx": home},
        {"product": competitor_a, "rx": first},
        {"product": competitor_b, "rx": second},
        {"product": "Other", "rx": rest - first - second},
    ]


def pct_change(current: float, previous: float) -> float | None:
    if not previous:
        return None
    return round((current - previous) / previous * 100, 1)


class PrescribingGenerator(BaseStageGenerator):
    """
    Generate prescribing history.

    Reads hcp_profiles and outcome_events. The modeled months end at the
    as_of month.
    """

    STAGE = 7
    NAME = "prescribing"
    OUTPUT = "prescribing_history"

    def generate(self) -> None:
        print("  Stage 7: Prescribing history (monthly Rx walk)")
        boosts = aggregate_outcomes_for_rx(self.data["outcome_events"])
        months = modeled_months(add_months(self.ctx.as_of, -(self.ctx.months - 1)), self.ctx.months)

        rows: list[dict[str, Any]] = []
        for hcp in self.data["hcp_profiles"]:
            rows.extend(self.history_for_hcp(hcp, months, boosts))

        self.data[self.OUTPUT].extend(rows)
        self._mark_done()
        print(
            f"    Generated: {len(rows):,} monthly records "
            f"({sum(boosts.values()):,} outcome-driven Rx boosts)"
        )

    def history_for_hcp(
        self,
        hcp: dict[str, Any],
        months: list[str],
        boosts: dict[tuple[Any, str], int],
    ) -> list[dict[str, Any]]:
        """
        One record per month for one HCP.

        total = max(1, round(prev x (1 + trend) x U[0.85, 1.15]) + boost x int(1, 3))
        """
        rng = self.rng
        specialty = Specialty(hcp["specialty"])
        product = PRODUCTS[specialty]
        names = (product, *COMPETITORS[specialty])

        trend = rng.uniform(-0.02, 0.04)
        previous_total = hcp["monthly_rx_volume"]
        share = float(hcp["market_share_pct"])
        records: list[dict[str, Any]] = []

        for i, month in enumerate(months):
            boost = boosts.get((hcp["id"], month), 0)
            total = max(
                1,
                round(previous_total * (1 + trend) * rng.uniform(0.85, 1.15))
                + boost * rng.integer(1, 3),
            )
            new_rx = round(total * rng.uniform(0.2, 0.4))
            share = clamp(share * (1 + trend * 0.5 + rng.uniform(-0.03, 0.03)), 1, 80)
            competitor_share = clamp(100 - share - rng.uniform(20, 40), 5, 60)

            records.append(
                {
                    "hcp_id": hcp["id"],
                    "month": month,
                    "therapeutic_area": specialty.value,
                    "product": product,
                    "total_rx": total,
                    "new_rx": new_rx,
                    "refill_rx": total - new_rx,
                    "market_share_pct": round(share, 1),
                    "competitor_share_pct": round(competitor_share, 1),
                    "product_breakdown": product_breakdown(total, share, names),
                    "mom_change": pct_change(total, previous_total),
                    "yoy_change": (
                        pct_change(total, records[i - 12]["total_rx"]) if i >= 12 else None
                    ),
                }
            )
            previous_total = total
        return records
