"""
Cross-stage indices over read-back rows.

Later stages never assume an id exists; they resolve references through
indices built from what the store handed back for earlier stages:

    primary rep        <- territory_assignments (active, primary)
    enrollments        <- campaign_participation, per HCP
    outcomes           <- outcome_events, per stimulus
    HCPs / campaigns   <- unique by id

Usage:
    enrollments = LookupBuilder.build_participation_by_hcp(data["campaign_participation"])
    for p in enrollments.get(hcp["id"]):
        ...
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Generic, Hashable, TypeVar

from .errors import ConsistencyError

K = TypeVar("K", bound=Hashable)
Row = dict[str, Any]
V = TypeVar("V")


class LookupIndex(Generic[K, V]):
    """Grouped rows keyed by one column; missing keys read as empty."""

    __slots__ = ("_groups", "column")

    def __init__(self, groups: dict[K, list[V]], column: str) -> None:
        self._groups = groups
        self.column = column

    def get(self, key: K) -> list[V]:
        return self._groups.get(key, [])

    def count(self, key: K) -> int:
        return len(self._groups.get(key, ()))

    def __contains__(self, key: K) -> bool:
        return key in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self) -> str:
        rows = sum(len(g) for g in self._groups.values())
        return f"LookupIndex({self.column}: {len(self)} keys, {rows} rows)"


class LookupBuilder:
    """Factory for the indices the stage generators share."""

    @staticmethod
    def build(rows: list[Row], column: str) -> LookupIndex[Any, Row]:
        """Group rows by column, keeping row order; null keys are dropped."""
        groups: dict[Any, list[Row]] = defaultdict(list)
        for row in rows:
            if row.get(column) is not None:
                groups[row[column]].append(row)
        return LookupIndex(dict(groups), column)

    @staticmethod
    def build_unique(rows: list[Row], column: str) -> dict[Any, Row]:
        """
        Map a 1:1 column to its row.

        Raises:
            ConsistencyError: If two rows share a key
        """
        index: dict[Any, Row] = {}
        for row in rows:
            key = row.get(column)
            if key is None:
                continue
            if key in index:
                raise ConsistencyError(f"Duplicate {column}={key!r}")
            index[key] = row
        return index

    @classmethod
    def build_primary_rep_by_hcp(cls, assignments: list[Row]) -> dict[Any, Row]:
        """The single active primary assignment of each HCP."""
        primaries = [
            a for a in assignments
            if a["assignment_type"] == "primary" and a["is_active"]
        ]
        return cls.build_unique(primaries, "hcp_id")

    @classmethod
    def build_participation_by_hcp(cls, participation: list[Row]) -> LookupIndex[Any, Row]:
        return cls.build(participation, "hcp_id")

    @classmethod
    def build_outcomes_by_stimulus(cls, outcomes: list[Row]) -> LookupIndex[Any, Row]:
        return cls.build(outcomes, "stimulus_id")
