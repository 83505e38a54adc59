"""
Validation checks for generated HCP data.

Contains all validation checks for a generated (or read-back) dataset:
- Record counts against sizing targets
- NPI uniqueness and checksum
- Territory coverage (one active primary per HCP, secondary rules)
- Referential integrity across every foreign key
- Temporal consistency (outcome after stimulus, opt-out after enrollment)
- Campaign concurrency, code uniqueness and channel-mix accounting
- Product-breakdown accounting and score bounds
- Tier distribution and overall response rate

Every check returns (passed, message) and never raises on bad data.
"""

from collections import Counter, defaultdict
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from .generators import GeneratorContext

from .constants import (
    MAX_CONCURRENT_CAMPAIGNS,
    SPECIALTY_WEIGHTS,
    STATE_TO_REGION,
    TIER_WEIGHTS_BY_SPECIALTY,
    Tier,
)
from .generators.campaign import peak_concurrency
from .helpers import expected_row_counts
from .random_source import is_valid_npi

# (kind, column, parent kind); nullable columns are only checked when set
FOREIGN_KEYS: list[tuple[str, str, str]] = [
    ("territory_assignments", "hcp_id", "hcp_profiles"),
    ("campaign_participation", "campaign_id", "campaigns"),
    ("campaign_participation", "hcp_id", "hcp_profiles"),
    ("stimuli_events", "hcp_id", "hcp_profiles"),
    ("stimuli_events", "campaign_id", "campaigns"),
    ("outcome_events", "hcp_id", "hcp_profiles"),
    ("outcome_events", "stimulus_id", "stimuli_events"),
    ("outcome_events", "campaign_id", "campaigns"),
    ("prescribing_history", "hcp_id", "hcp_profiles"),
    ("message_exposures", "hcp_id", "hcp_profiles"),
    ("message_exposures", "message_theme_id", "message_themes"),
    ("campaign_metrics", "campaign_id", "campaigns"),
    ("participation_activity", "participation_id", "campaign_participation"),
    ("engagement_snapshots", "hcp_id", "hcp_profiles"),
]

# (kind, column, lo, hi) for numeric columns with fixed ranges
SCORE_BOUNDS: list[tuple[str, str, float, float]] = [
    ("hcp_profiles", "overall_engagement_score", 0, 100),
    ("hcp_profiles", "market_share_pct", 1, 80),
    ("hcp_profiles", "conversion_likelihood", 5, 95),
    ("hcp_profiles", "churn_risk", 5, 90),
    ("outcome_events", "quality_score", 5, 10),
    ("prescribing_history", "market_share_pct", 1, 80),
    ("prescribing_history", "competitor_share_pct", 5, 60),
    ("message_exposures", "msi", 0, 100),
    ("message_exposures", "channel_diversity", 0, 1),
    ("engagement_snapshots", "score", 0, 100),
]


def expected_tier_shares() -> dict[str, float]:
    """Population share of each tier implied by the specialty and tier tables."""
    total = sum(SPECIALTY_WEIGHTS.values())
    shares: dict[str, float] = defaultdict(float)
    for specialty, weight in SPECIALTY_WEIGHTS.items():
        tier_weights = TIER_WEIGHTS_BY_SPECIALTY[specialty]
        tier_total = sum(tier_weights.values())
        for tier, tier_weight in tier_weights.items():
            shares[tier.value] += weight / total * tier_weight / tier_total
    return dict(shares)


class DataValidator:
    """
    Validator for generated HCP data.

    Works with GeneratorContext: reads ctx.data (store read-back rows) and
    the tolerances in ctx.config.
    """

    def __init__(self, ctx: "GeneratorContext") -> None:
        self.ctx = ctx
        self.tolerances = ctx.config.tolerances

    @property
    def data(self) -> dict[str, list[dict]]:
        return self.ctx.data

    def run_all(self) -> dict[str, tuple[bool, str]]:
        """Run every check, keyed by check name."""
        return {
            "record_counts": self.validate_record_counts(),
            "npi": self.validate_npis(),
            "territory_coverage": self.validate_territory_coverage(),
            "referential_integrity": self.validate_referential_integrity(),
            "temporal_consistency": self.validate_temporal_consistency(),
            "campaign_concurrency": self.validate_campaign_concurrency(),
            "campaign_codes": self.validate_campaign_codes(),
            "channel_mix": self.validate_channel_mix(),
            "product_breakdown": self.validate_product_breakdown(),
            "score_bounds": self.validate_score_bounds(),
            "tier_distribution": self.validate_tier_distribution(),
            "response_rate": self.validate_response_rate(),
        }

    def validate_record_counts(self) -> tuple[bool, str]:
        """
        Compare counts against sizing targets for the realized HCP count.

        Prescribing history must be exact (one row per HCP per month); the
        other kinds must fall within row_count_tolerance_pct of target.
        """
        hcps = len(self.data["hcp_profiles"])
        if hcps == 0:
            return False, "No hcp_profiles data"

        targets = expected_row_counts(hcps, self.ctx.months)
        tolerance = self.tolerances.row_count_tolerance_pct
        errors = []
        for kind, target in targets.items():
            actual = len(self.data.get(kind, []))
            if kind in ("hcp_profiles", "prescribing_history"):
                if actual != target:
                    errors.append(f"{kind}: {actual:,} != {target:,}")
            elif target and abs(actual - target) / target > tolerance:
                errors.append(f"{kind}: {actual:,} (target ~{target:,})")

        if errors:
            return False, "; ".join(errors)
        total = sum(len(rows) for rows in self.data.values())
        return True, f"{total:,} rows for {hcps:,} HCPs"

    def validate_npis(self) -> tuple[bool, str]:
        npis = [h["npi"] for h in self.data["hcp_profiles"]]
        duplicates = len(npis) - len(set(npis))
        invalid = sum(1 for n in npis if not is_valid_npi(n))
        if duplicates or invalid:
            return False, f"{duplicates} duplicate and {invalid} invalid NPIs"
        return True, f"{len(npis):,} unique, checksum-valid NPIs"

    def validate_territory_coverage(self) -> tuple[bool, str]:
        """Exactly one active primary per HCP; secondaries use another rep in the region."""
        primaries: dict[Any, list[dict]] = defaultdict(list)
        secondaries: list[dict] = []
        for a in self.data["territory_assignments"]:
            if a["assignment_type"] == "primary" and a["is_active"]:
                primaries[a["hcp_id"]].append(a)
            elif a["assignment_type"] == "secondary":
                secondaries.append(a)

        errors = []
        hcps = self.data["hcp_profiles"]
        uncovered = sum(1 for h in hcps if len(primaries.get(h["id"], [])) != 1)
        if uncovered:
            errors.append(f"{uncovered} HCPs without exactly one active primary")

        hcp_states = {h["id"]: h["state"] for h in hcps}
        bad_secondary = 0
        for s in secondaries:
            primary = primaries.get(s["hcp_id"])
            if not primary or primary[0]["rep_id"] == s["rep_id"]:
                bad_secondary += 1
            elif s["region"] != STATE_TO_REGION.get(hcp_states.get(s["hcp_id"])):
                bad_secondary += 1
        if bad_secondary:
            errors.append(f"{bad_secondary} invalid secondary assignments")

        if errors:
            return False, "; ".join(errors)
        return True, f"{len(primaries):,} primaries, {len(secondaries):,} secondaries"

    def validate_referential_integrity(self) -> tuple[bool, str]:
        errors = []
        for kind, column, parent in FOREIGN_KEYS:
            rows = self.data.get(kind, [])
            if not rows:
                continue
            parent_ids = {p["id"] for p in self.data.get(parent, [])}
            bad = [r for r in rows if r[column] is not None and r[column] not in parent_ids]
            if bad:
                errors.append(f"{kind}: {len(bad)} invalid {column} refs")

        # An outcome answers a touch made to the same HCP
        stimulus_hcp = {s["id"]: s["hcp_id"] for s in self.data.get("stimuli_events", [])}
        crossed = sum(
            1 for o in self.data.get("outcome_events", [])
            if o["stimulus_id"] in stimulus_hcp and stimulus_hcp[o["stimulus_id"]] != o["hcp_id"]
        )
        if crossed:
            errors.append(f"outcome_events: {crossed} outcomes reference another HCP's stimulus")

        if not errors:
            return True, f"{len(FOREIGN_KEYS)} foreign keys checked"
        return False, "; ".join(errors)

    def validate_temporal_consistency(self) -> tuple[bool, str]:
        """Outcomes strictly after their stimulus; opt-outs after enrollment; campaigns end after start."""
        stimulus_dates = {s["id"]: s["event_date"] for s in self.data["stimuli_events"]}
        early_outcomes = sum(
            1 for o in self.data["outcome_events"]
            if o["stimulus_id"] in stimulus_dates
            and o["event_date"] <= stimulus_dates[o["stimulus_id"]]
        )
        early_opt_outs = sum(
            1 for p in self.data["campaign_participation"]
            if p["opt_out_at"] is not None and p["opt_out_at"] <= p["enrolled_at"]
        )
        bad_campaigns = sum(
            1 for c in self.data["campaigns"] if c["end_date"] < c["start_date"]
        )

        errors = []
        if early_outcomes:
            errors.append(f"{early_outcomes} outcomes not after their stimulus")
        if early_opt_outs:
            errors.append(f"{early_opt_outs} opt-outs not after enrollment")
        if bad_campaigns:
            errors.append(f"{bad_campaigns} campaigns ending before they start")
        if errors:
            return False, "; ".join(errors)
        return True, "All event sequences causally ordered"

    def validate_campaign_concurrency(self) -> tuple[bool, str]:
        periods = [(c["start_date"], c["end_date"]) for c in self.data["campaigns"]]
        if not periods:
            return True, "No campaigns"
        peak = max(peak_concurrency(periods, start, start) for start, _ in periods)
        if peak > MAX_CONCURRENT_CAMPAIGNS:
            return False, f"{peak} concurrent campaigns (max {MAX_CONCURRENT_CAMPAIGNS})"
        return True, f"Peak concurrency {peak} across {len(periods)} campaigns"

    def validate_campaign_codes(self) -> tuple[bool, str]:
        codes = Counter(c["campaign_code"] for c in self.data["campaigns"])
        duplicates = [code for code, n in codes.items() if n > 1]
        if duplicates:
            return False, f"Duplicate campaign codes: {', '.join(sorted(duplicates))}"
        return True, f"{len(codes)} unique campaign codes"

    def validate_channel_mix(self) -> tuple[bool, str]:
        bad = [
            c["campaign_code"] for c in self.data["campaigns"]
            if sum(c["channel_mix"].values()) != 100
        ]
        if bad:
            return False, f"{len(bad)} campaigns with channel mix != 100%"
        return True, "Every channel mix sums to 100%"

    def validate_product_breakdown(self) -> tuple[bool, str]:
        bad = 0
        for row in self.data["prescribing_history"]:
            parts = [p["rx"] for p in row["product_breakdown"]]
            if sum(parts) != row["total_rx"] or min(parts) < 0:
                bad += 1
            elif row["new_rx"] + row["refill_rx"] != row["total_rx"]:
                bad += 1
        if bad:
            return False, f"{bad} prescribing records that do not add up"
        return True, f"{len(self.data['prescribing_history']):,} prescribing records add up"

    def validate_score_bounds(self) -> tuple[bool, str]:
        errors = []
        for kind, column, lo, hi in SCORE_BOUNDS:
            out = sum(
                1 for r in self.data.get(kind, [])
                if r[column] is not None and not lo <= r[column] <= hi
            )
            if out:
                errors.append(f"{kind}.{column}: {out} outside [{lo}, {hi}]")

        for hcp in self.data["hcp_profiles"]:
            for engagement in hcp["channel_engagements"]:
                if not 0 <= engagement["score"] <= 100 or not 0 <= engagement["response_rate"] <= 100:
                    errors.append(f"hcp {hcp['npi']}: channel engagement out of range")
                    break

        if errors:
            return False, "; ".join(errors[:5])
        return True, f"{len(SCORE_BOUNDS)} bounded columns within range"

    def validate_tier_distribution(self) -> tuple[bool, str]:
        """
        Realized tier shares against the configured marginals.

        Small populations only report the shares; sampling noise makes a
        percentage-point tolerance meaningless there.
        """
        hcps = self.data["hcp_profiles"]
        if not hcps:
            return False, "No hcp_profiles data"
        counts = Counter(h["tier"] for h in hcps)
        expected = expected_tier_shares()
        realized = {t.value: counts.get(t.value, 0) / len(hcps) * 100 for t in Tier}
        summary = ", ".join(f"{tier} {share:.1f}%" for tier, share in realized.items())

        if len(hcps) < self.tolerances.min_population_for_distribution:
            return True, f"{summary} (n={len(hcps):,}, below tolerance population)"

        off = [
            tier for tier, share in realized.items()
            if abs(share - expected[tier] * 100) > self.tolerances.tier_tolerance_pp
        ]
        if off:
            return False, f"{summary} (outside +-{self.tolerances.tier_tolerance_pp}pp: {', '.join(off)})"
        return True, summary

    def validate_response_rate(self) -> tuple[bool, str]:
        stimuli = len(self.data["stimuli_events"])
        if stimuli == 0:
            return False, "No stimuli_events data"
        rate = len(self.data["outcome_events"]) / stimuli
        lo, hi = self.tolerances.response_rate_range
        if lo <= rate <= hi:
            return True, f"Response rate {rate:.1%}"
        return False, f"Response rate {rate:.1%} (target: {lo:.0%}-{hi:.0%})"
