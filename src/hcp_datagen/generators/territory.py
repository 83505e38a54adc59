"""
Stage 2 Generator: Sales territories.

Tables generated:
- territory_assignments (one active primary per HCP, ~20% secondaries)

HCPs are grouped by region through their state, each region gets
ceil(count / 11) reps, and HCPs are dealt out to reps by a shuffled split.
"""

import math
import re
from collections import defaultdict
from typing import Any

from .base import BaseStageGenerator
from ..constants import REGIONS, STATE_TO_REGION
from ..errors import ConsistencyError

HCPS_PER_REP = 11
SECONDARY_SHARE = 0.2
REP_EMAIL_DOMAIN = "meridianpharma.com"


def region_for_state(state: str) -> str:
    """
    Map a state code to its sales region.

    Raises:
        ConsistencyError: For a state no region covers
    """
    try:
        return STATE_TO_REGION[state]
    except KeyError:
        raise ConsistencyError(f"State '{state}' is not mapped to a sales region") from None


def rep_for_hcp(assignments: list[dict[str, Any]], hcp_id: Any) -> dict[str, Any] | None:
    """The active primary assignment of one HCP, or None."""
    for a in assignments:
        if a["hcp_id"] == hcp_id and a["assignment_type"] == "primary" and a["is_active"]:
            return a
    return None


class TerritoryGenerator(BaseStageGenerator):
    """
    Generate rep territories and HCP assignments.

    Reads hcp_profiles (with store-assigned ids). Regions with no HCPs
    get no reps.
    """

    STAGE = 2
    NAME = "territory"
    OUTPUT = "territory_assignments"

    def generate(self) -> None:
        """Generate primary then secondary assignments."""
        print("  Stage 2: Territories (regions, reps, assignments)")

        hcps_by_region: dict[str, list[dict]] = defaultdict(list)
        for hcp in self.data["hcp_profiles"]:
            hcps_by_region[region_for_state(hcp["state"])].append(hcp)

        reps: list[dict[str, Any]] = []
        primaries: list[dict[str, Any]] = []
        for region in REGIONS:
            members = hcps_by_region.get(region, [])
            if not members:
                continue
            region_reps = self._create_reps(region, len(members), first_number=len(reps) + 1)
            reps.extend(region_reps)
            primaries.extend(self._assign_primary(members, region_reps))

        secondaries = self._assign_secondary(primaries, reps)
        self.data[self.OUTPUT].extend(primaries + secondaries)
        self._mark_done()
        print(
            f"    Generated: {len(reps)} reps, {len(primaries):,} primary, "
            f"{len(secondaries):,} secondary assignments"
        )

    def _create_reps(self, region: str, hcp_count: int, first_number: int) -> list[dict[str, Any]]:
        """ceil(hcp_count / 11) reps, numbered REP-0001 onwards across regions."""
        rng = self.rng
        reps = []
        for i in range(max(1, math.ceil(hcp_count / HCPS_PER_REP))):
            first, last = self.ctx.pool.full_name(rng)
            territory = rng.pick(REGIONS[region])
            local_part = re.sub(r"[^a-z.]", "", f"{first}.{last}".lower())
            reps.append(
                {
                    "rep_id": f"REP-{first_number + i:04d}",
                    "rep_name": f"{first} {last}",
                    "rep_email": f"{local_part}@{REP_EMAIL_DOMAIN}",
                    "territory": territory,
                    "region": region,
                    "district": f"{territory} District {rng.integer(1, 3)}",
                }
            )
        return reps

    def _assignment(self, rep: dict[str, Any], hcp_id: Any, assignment_type: str) -> dict[str, Any]:
        return {
            "rep_id": rep["rep_id"],
            "rep_name": rep["rep_name"],
            "rep_email": rep["rep_email"],
            "hcp_id": hcp_id,
            "assignment_type": assignment_type,
            "territory": rep["territory"],
            "region": rep["region"],
            "district": rep["district"],
            "effective_from": self.ctx.window_start,
            "effective_to": None,
            "is_active": True,
        }

    def _assign_primary(
        self, hcps: list[dict[str, Any]], reps: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Shuffle, then give rep i the slice [floor(i*n/r), floor((i+1)*n/r))."""
        shuffled = self.rng.shuffle(hcps)
        n, r = len(shuffled), len(reps)
        rows = []
        for i, rep in enumerate(reps):
            for hcp in shuffled[i * n // r:(i + 1) * n // r]:
                rows.append(self._assignment(rep, hcp["id"], "primary"))
        return rows

    def _assign_secondary(
        self, primaries: list[dict[str, Any]], reps: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """
        Second rep for a random 20% of primary assignments.

        The secondary rep is another rep from the same region; single-rep
        regions cannot supply one and are skipped.
        """
        reps_by_region: dict[str, list[dict]] = defaultdict(list)
        for rep in reps:
            reps_by_region[rep["region"]].append(rep)

        count = math.floor(len(primaries) * SECONDARY_SHARE)
        rows = []
        for primary in self.rng.shuffle(primaries)[:count]:
            others = [
                r for r in reps_by_region[primary["region"]]
                if r["rep_id"] != primary["rep_id"]
            ]
            if not others:
                continue
            rows.append(self._assignment(self.rng.pick(others), primary["hcp_id"], "secondary"))
        return rows
