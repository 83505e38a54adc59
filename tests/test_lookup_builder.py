"""
Tests for cross-stage lookup indices.
"""

import pytest

from hcp_datagen.errors import ConsistencyError
from hcp_datagen.lookup_builder import LookupBuilder


class TestBuild:
    def test_groups_in_row_order(self):
        rows = [{"hcp_id": 1, "n": "a"}, {"hcp_id": 2, "n": "b"}, {"hcp_id": 1, "n": "c"}]
        index = LookupBuilder.build(rows, "hcp_id")
        assert [r["n"] for r in index.get(1)] == ["a", "c"]
        assert index.count(2) == 1
        assert len(index) == 2

    def test_missing_and_null_keys(self):
        index = LookupBuilder.build([{"stimulus_id": None}], "stimulus_id")
        assert index.get(99) == []
        assert None not in index

    def test_unique_rejects_duplicates(self):
        with pytest.raises(ConsistencyError):
            LookupBuilder.build_unique([{"id": 1}, {"id": 1}], "id")


class TestPrimaryRep:
    def test_only_active_primaries(self):
        assignments = [
            {"hcp_id": 1, "rep_id": "R1", "assignment_type": "primary", "is_active": True},
            {"hcp_id": 1, "rep_id": "R2", "assignment_type": "secondary", "is_active": True},
            {"hcp_id": 2, "rep_id": "R3", "assignment_type": "primary", "is_active": False},
        ]
        reps = LookupBuilder.build_primary_rep_by_hcp(assignments)
        assert reps[1]["rep_id"] == "R1"
        assert 2 not in reps

    def test_generated_territories_have_one_primary(self, small_run):
        reps = LookupBuilder.build_primary_rep_by_hcp(small_run.data["territory_assignments"])
        assert set(reps) == {h["id"] for h in small_run.data["hcp_profiles"]}
