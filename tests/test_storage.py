"""
Tests for the data stores and the COPY seed writer.

PostgreSQL tests need a disposable database in HCP_DATAGEN_DSN; every
table in it is emptied.
"""

from datetime import datetime

import pytest

from hcp_datagen.constants import MESSAGE_THEMES
from hcp_datagen.errors import PersistenceError
from hcp_datagen.generators import ENTITY_KINDS
from hcp_datagen.storage import (
    TABLE_COLUMNS,
    InMemoryStore,
    PostgresStore,
    _copy_value,
)


class TestInMemoryStore:
    def test_sequential_ids_per_kind(self):
        store = InMemoryStore()
        store.batch_insert("message_themes", [{"code": "a"}, {"code": "b"}])
        store.batch_insert("message_themes", [{"code": "c"}])
        store.batch_insert("campaigns", [{"campaign_code": "X"}])
        assert [r["id"] for r in store.select_all("message_themes")] == [1, 2, 3]
        assert store.select_all("campaigns")[0]["id"] == 1

    def test_rows_are_copies(self):
        store = InMemoryStore()
        row = {"code": "a", "nested": {"k": 1}}
        store.batch_insert("message_themes", [row])
        row["nested"]["k"] = 2
        selected = store.select_all("message_themes")
        selected[0]["code"] = "changed"
        assert store.select_all("message_themes")[0] == {"code": "a", "nested": {"k": 1}, "id": 1}
        assert "id" not in row

    def test_delete_all_keeps_id_sequence(self):
        store = InMemoryStore()
        store.batch_insert("message_themes", [{"code": "a"}])
        store.delete_all("message_themes")
        assert store.count("message_themes") == 0
        store.batch_insert("message_themes", [{"code": "b"}])
        assert store.select_all("message_themes")[0]["id"] == 2

    def test_unknown_kind(self):
        store = InMemoryStore()
        for call in (store.count, store.select_all, store.delete_all):
            with pytest.raises(PersistenceError):
                call("hcp_notes")
        with pytest.raises(PersistenceError):
            store.batch_insert("hcp_notes", [])


class TestSchema:
    def test_every_kind_has_a_table(self):
        assert list(TABLE_COLUMNS) == ENTITY_KINDS


class TestCopyValue:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, "\\N"),
            (True, "t"),
            (False, "f"),
            (3, "3"),
            (2.5, "2.5"),
            (datetime(2025, 3, 1, 9, 30), "2025-03-01T09:30:00"),
            ("a\tb\nc\\d", "a\\tb\\nc\\\\d"),
            ({"email": {"score": 1}}, '{"email": {"score": 1}}'),
            ([{"product": "A", "rx": 2}], '[{"product": "A", "rx": 2}]'),
        ],
    )
    def test_rendering(self, value, expected):
        assert _copy_value(value) == expected


@pytest.mark.postgres
class TestPostgresStore:
    @pytest.fixture
    def store(self, pg_dsn):
        with PostgresStore(pg_dsn) as store:
            for kind in reversed(ENTITY_KINDS):
                store.delete_all(kind)
            yield store

    def test_insert_and_read_back(self, store):
        store.batch_insert("message_themes", [dict(t) for t in MESSAGE_THEMES])
        rows = store.select_all("message_themes")
        assert [r["code"] for r in rows] == [t["code"] for t in MESSAGE_THEMES]
        assert all(isinstance(r["id"], int) for r in rows)
        assert store.count("message_themes") == len(MESSAGE_THEMES)

    def test_jsonb_round_trip(self, store, small_run):
        hcp = {k: v for k, v in small_run.data["hcp_profiles"][0].items() if k != "id"}
        store.batch_insert("hcp_profiles", [hcp])
        row = store.select_all("hcp_profiles")[0]
        assert row["channel_engagements"] == hcp["channel_engagements"]
        assert row["prescribing_trend"] == hcp["prescribing_trend"]

    def test_constraint_violation_surfaces(self, store, small_run):
        hcp = {k: v for k, v in small_run.data["hcp_profiles"][0].items() if k != "id"}
        with pytest.raises(PersistenceError):
            store.batch_insert("hcp_profiles", [hcp, hcp])
        assert store.count("hcp_profiles") == 0

    def test_bad_dsn(self):
        with pytest.raises(PersistenceError):
            PostgresStore("postgresql://nobody@127.0.0.1:1/none")
