"""
Persistence for generated entities.

The pipeline talks to a DataStore: it inserts each stage's rows in batches
and immediately reads the whole kind back, so every later stage works with
store-assigned ids.

Implementations:
- InMemoryStore: sequential integer ids per kind; used by tests and by runs
  that only write a seed file
- PostgresStore: psycopg2 against the schema in TABLE_COLUMNS (BIGSERIAL
  ids, JSONB for nested values)

write_seed_sql() dumps any set of tables as a PostgreSQL COPY script.
"""

import copy
import json
import time
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol, TextIO

import psycopg2
from psycopg2.extensions import connection as PgConnection
from psycopg2.extras import Json, RealDictCursor, execute_values

from .errors import ConsistencyError, PersistenceError
from .generators.base import ENTITY_KINDS

# Column name -> PostgreSQL type, per entity kind (id is implicit)
TABLE_COLUMNS: dict[str, dict[str, str]] = {
    "message_themes": {
        "code": "TEXT NOT NULL UNIQUE",
        "name": "TEXT NOT NULL",
        "category": "TEXT NOT NULL",
        "description": "TEXT",
    },
    "hcp_profiles": {
        "npi": "CHAR(10) NOT NULL UNIQUE",
        "first_name": "TEXT NOT NULL",
        "last_name": "TEXT NOT NULL",
        "credentials": "TEXT",
        "specialty": "TEXT NOT NULL",
        "tier": "TEXT NOT NULL",
        "segment": "TEXT NOT NULL",
        "organization": "TEXT",
        "city": "TEXT",
        "state": "CHAR(2)",
        "channel_preference": "TEXT NOT NULL",
        "channel_engagements": "JSONB NOT NULL",
        "overall_engagement_score": "INTEGER NOT NULL",
        "monthly_rx_volume": "INTEGER NOT NULL",
        "yearly_rx_volume": "INTEGER NOT NULL",
        "market_share_pct": "DOUBLE PRECISION NOT NULL",
        "prescribing_trend": "JSONB NOT NULL",
        "conversion_likelihood": "INTEGER NOT NULL",
        "churn_risk": "INTEGER NOT NULL",
        "created_at": "TIMESTAMP NOT NULL",
    },
    "territory_assignments": {
        "rep_id": "TEXT NOT NULL",
        "rep_name": "TEXT NOT NULL",
        "rep_email": "TEXT NOT NULL",
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "assignment_type": "TEXT NOT NULL",
        "territory": "TEXT NOT NULL",
        "region": "TEXT NOT NULL",
        "district": "TEXT NOT NULL",
        "effective_from": "TIMESTAMP NOT NULL",
        "effective_to": "TIMESTAMP",
        "is_active": "BOOLEAN NOT NULL",
    },
    "campaigns": {
        "campaign_code": "TEXT NOT NULL UNIQUE",
        "name": "TEXT NOT NULL",
        "description": "TEXT",
        "campaign_type": "TEXT NOT NULL",
        "therapeutic_area": "TEXT NOT NULL",
        "product": "TEXT NOT NULL",
        "brand": "TEXT",
        "status": "TEXT NOT NULL",
        "start_date": "TIMESTAMP NOT NULL",
        "end_date": "TIMESTAMP NOT NULL",
        "budget": "DOUBLE PRECISION NOT NULL",
        "spent_to_date": "DOUBLE PRECISION NOT NULL",
        "primary_channel": "TEXT NOT NULL",
        "channel_mix": "JSONB NOT NULL",
        "target_segments": "JSONB NOT NULL",
        "target_specialties": "JSONB NOT NULL",
        "target_tiers": "JSONB NOT NULL",
        "goal_type": "TEXT NOT NULL",
        "goal_value": "INTEGER NOT NULL",
        "created_by": "TEXT",
    },
    "campaign_participation": {
        "campaign_id": "BIGINT NOT NULL REFERENCES campaigns(id)",
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "status": "TEXT NOT NULL",
        "enrolled_at": "TIMESTAMP NOT NULL",
        "enrolled_by": "TEXT NOT NULL",
        "opt_out_reason": "TEXT",
        "opt_out_at": "TIMESTAMP",
    },
    "stimuli_events": {
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "stimulus_type": "TEXT NOT NULL",
        "channel": "TEXT NOT NULL",
        "content_type": "TEXT",
        "message_variant": "TEXT",
        "call_to_action": "TEXT",
        "campaign_id": "BIGINT REFERENCES campaigns(id)",
        "rep_id": "TEXT",
        "content_category": "TEXT",
        "delivery_status": "TEXT NOT NULL",
        "predicted_engagement_delta": "DOUBLE PRECISION",
        "predicted_conversion_delta": "DOUBLE PRECISION",
        "confidence_lower": "DOUBLE PRECISION",
        "confidence_upper": "DOUBLE PRECISION",
        "actual_engagement_delta": "DOUBLE PRECISION",
        "actual_conversion_delta": "DOUBLE PRECISION",
        "outcome_recorded_at": "TIMESTAMP",
        "status": "TEXT NOT NULL",
        "event_date": "TIMESTAMP NOT NULL",
    },
    "outcome_events": {
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "stimulus_id": "BIGINT REFERENCES stimuli_events(id)",
        "campaign_id": "BIGINT REFERENCES campaigns(id)",
        "outcome_type": "TEXT NOT NULL",
        "channel": "TEXT NOT NULL",
        "outcome_value": "DOUBLE PRECISION",
        "quality_score": "INTEGER",
        "content_id": "TEXT",
        "content_name": "TEXT",
        "attribution_type": "TEXT NOT NULL",
        "attribution_weight": "DOUBLE PRECISION NOT NULL",
        "touches_in_window": "INTEGER NOT NULL",
        "days_since_last_touch": "INTEGER",
        "event_date": "TIMESTAMP NOT NULL",
    },
    "prescribing_history": {
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "month": "CHAR(7) NOT NULL",
        "therapeutic_area": "TEXT NOT NULL",
        "product": "TEXT NOT NULL",
        "total_rx": "INTEGER NOT NULL",
        "new_rx": "INTEGER NOT NULL",
        "refill_rx": "INTEGER NOT NULL",
        "market_share_pct": "DOUBLE PRECISION NOT NULL",
        "competitor_share_pct": "DOUBLE PRECISION NOT NULL",
        "product_breakdown": "JSONB NOT NULL",
        "mom_change": "DOUBLE PRECISION",
        "yoy_change": "DOUBLE PRECISION",
    },
    "message_exposures": {
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "message_theme_id": "BIGINT NOT NULL REFERENCES message_themes(id)",
        "touch_frequency": "INTEGER NOT NULL",
        "unique_channels": "INTEGER NOT NULL",
        "channel_diversity": "DOUBLE PRECISION NOT NULL",
        "avg_time_between_touches": "DOUBLE PRECISION",
        "engagement_rate": "DOUBLE PRECISION NOT NULL",
        "engagement_decay": "DOUBLE PRECISION NOT NULL",
        "last_engagement_date": "TIMESTAMP",
        "adoption_stage": "TEXT NOT NULL",
        "measurement_period": "TEXT NOT NULL",
        "msi": "DOUBLE PRECISION NOT NULL",
        "msi_direction": "TEXT NOT NULL",
        "saturation_risk": "TEXT NOT NULL",
        "previous_msi": "DOUBLE PRECISION",
    },
    "campaign_metrics": {
        "campaign_id": "BIGINT NOT NULL REFERENCES campaigns(id)",
        "total_reach": "INTEGER NOT NULL",
        "total_touches": "INTEGER NOT NULL",
        "total_responses": "INTEGER NOT NULL",
        "response_rate": "DOUBLE PRECISION NOT NULL",
        "measured_at": "TIMESTAMP NOT NULL",
    },
    "participation_activity": {
        "participation_id": "BIGINT NOT NULL REFERENCES campaign_participation(id)",
        "campaign_id": "BIGINT NOT NULL REFERENCES campaigns(id)",
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "touch_count": "INTEGER NOT NULL",
        "response_count": "INTEGER NOT NULL",
        "last_touch_at": "TIMESTAMP",
        "last_response_at": "TIMESTAMP",
    },
    "engagement_snapshots": {
        "hcp_id": "BIGINT NOT NULL REFERENCES hcp_profiles(id)",
        "channel": "TEXT NOT NULL",
        "total_touches": "INTEGER NOT NULL",
        "total_responses": "INTEGER NOT NULL",
        "response_rate": "DOUBLE PRECISION NOT NULL",
        "last_contact_date": "TIMESTAMP",
        "score": "INTEGER NOT NULL",
        "snapshot_date": "TIMESTAMP NOT NULL",
    },
}

if list(TABLE_COLUMNS) != ENTITY_KINDS:
    raise ConsistencyError("TABLE_COLUMNS must list every entity kind in foreign-key order")


class DataStore(Protocol):
    """What the pipeline needs from a backing store."""

    def batch_insert(self, kind: str, records: list[dict[str, Any]]) -> None: ...

    def select_all(self, kind: str) -> list[dict[str, Any]]: ...

    def delete_all(self, kind: str) -> None: ...

    def count(self, kind: str) -> int: ...


def _check_kind(kind: str) -> None:
    if kind not in TABLE_COLUMNS:
        raise PersistenceError(f"Unknown entity kind: {kind}")


class InMemoryStore:
    """
    Dict-backed store with sequential integer ids per kind.

    Rows are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {k: [] for k in TABLE_COLUMNS}
        self._next_id: dict[str, int] = {k: 1 for k in TABLE_COLUMNS}

    def batch_insert(self, kind: str, records: list[dict[str, Any]]) -> None:
        _check_kind(kind)
        for record in records:
            row = copy.deepcopy(record)
            row["id"] = self._next_id[kind]
            self._next_id[kind] += 1
            self._tables[kind].append(row)

    def select_all(self, kind: str) -> list[dict[str, Any]]:
        _check_kind(kind)
        return copy.deepcopy(self._tables[kind])

    def delete_all(self, kind: str) -> None:
        _check_kind(kind)
        self._tables[kind] = []

    def count(self, kind: str) -> int:
        _check_kind(kind)
        return len(self._tables[kind])


def get_connection(dsn: str) -> PgConnection:
    """
    Open a PostgreSQL connection.

    Raises:
        PersistenceError: If the server cannot be reached
    """
    try:
        return psycopg2.connect(dsn)
    except psycopg2.Error as e:
        raise PersistenceError(f"Cannot connect to PostgreSQL: {e}") from e


def _adapt(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return Json(value)
    return value


class PostgresStore:
    """
    DataStore over a PostgreSQL database.

    Each call runs in its own transaction; any psycopg2 error rolls it back
    and surfaces as PersistenceError.
    """

    def __init__(self, dsn: str, create_schema: bool = True) -> None:
        self.conn = get_connection(dsn)
        if create_schema:
            self.create_schema()

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "PostgresStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _execute(self, action: str, fn) -> Any:
        try:
            with self.conn:
                with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                    return fn(cur)
        except psycopg2.Error as e:
            raise PersistenceError(f"{action} failed: {e}") from e

    def create_schema(self) -> None:
        """CREATE TABLE IF NOT EXISTS for every kind, parents first."""

        def run(cur) -> None:
            for kind, columns in TABLE_COLUMNS.items():
                body = ",\n    ".join(f"{name} {sql_type}" for name, sql_type in columns.items())
                cur.execute(
                    f"CREATE TABLE IF NOT EXISTS {kind} (\n"
                    f"    id BIGSERIAL PRIMARY KEY,\n    {body}\n)"
                )

        self._execute("create schema", run)

    def batch_insert(self, kind: str, records: list[dict[str, Any]]) -> None:
        _check_kind(kind)
        if not records:
            return
        columns = list(TABLE_COLUMNS[kind])
        values = [tuple(_adapt(r.get(c)) for c in columns) for r in records]
        query = f"INSERT INTO {kind} ({', '.join(columns)}) VALUES %s"
        self._execute(
            f"insert into {kind}",
            lambda cur: execute_values(cur, query, values, page_size=len(values)),
        )

    def select_all(self, kind: str) -> list[dict[str, Any]]:
        _check_kind(kind)

        def run(cur) -> list[dict[str, Any]]:
            cur.execute(f"SELECT * FROM {kind} ORDER BY id")
            return [dict(row) for row in cur.fetchall()]

        return self._execute(f"read {kind}", run)

    def delete_all(self, kind: str) -> None:
        _check_kind(kind)
        self._execute(f"delete from {kind}", lambda cur: cur.execute(f"DELETE FROM {kind}"))

    def count(self, kind: str) -> int:
        _check_kind(kind)

        def run(cur) -> int:
            cur.execute(f"SELECT COUNT(*) AS n FROM {kind}")
            return cur.fetchone()["n"]

        return self._execute(f"count {kind}", run)


# =============================================================================
# COPY seed file
# =============================================================================


def _copy_value(value: Any) -> str:
    """Render one value in PostgreSQL COPY text format."""
    if value is None:
        return "\\N"
    if isinstance(value, bool):
        return "t" if value else "f"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        value = json.dumps(value)
    elif not isinstance(value, str):
        return str(value)
    # Escape backslashes, tabs and newlines
    return value.replace("\\", "\\\\").replace("\t", "\\t").replace("\n", "\\n")


def _write_table_copy(f: TextIO, table_name: str, rows: list[dict[str, Any]]) -> None:
    """Write one table's rows as a COPY block (id first when present)."""
    columns = list(TABLE_COLUMNS.get(table_name, rows[0]))
    if "id" in rows[0]:
        columns = ["id"] + columns

    f.write(f"\n-- {table_name}: {len(rows):,} rows\n")
    f.write(f"COPY {table_name} ({', '.join(columns)}) FROM stdin;\n")
    for row in rows:
        f.write("\t".join(_copy_value(row.get(col)) for col in columns) + "\n")
    f.write("\\.\n")


def write_seed_sql(
    data: dict[str, list[dict[str, Any]]],
    output_path: Path,
    seed: int,
) -> int:
    """
    Write generated tables to a SQL file using COPY format.

    Tables are written in foreign-key order and each id sequence is advanced
    past the largest id written. Returns the number of rows written.
    """
    print()
    print(f"Writing SQL to {output_path}...")
    write_start = time.time()
    tables = [(kind, data[kind]) for kind in ENTITY_KINDS if data.get(kind)]
    total_rows = sum(len(rows) for _, rows in tables)

    with open(output_path, "w") as f:
        f.write("-- ============================================\n")
        f.write("-- HCP Engagement - Synthetic Seed Data\n")
        f.write(f"-- Generated: {datetime.now().isoformat()}\n")
        f.write(f"-- Seed: {seed}\n")
        f.write(f"-- Total rows: {total_rows:,}\n")
        f.write("-- ============================================\n\n")

        # Disable triggers for bulk load
        f.write("SET session_replication_role = replica;\n\n")
        for kind, rows in tables:
            _write_table_copy(f, kind, rows)
        f.write("\nSET session_replication_role = DEFAULT;\n")

        f.write("\n-- Update sequences\n")
        for kind, rows in tables:
            if "id" in rows[0]:
                max_id = max(r["id"] for r in rows)
                f.write(f"SELECT setval('{kind}_id_seq', {max_id});\n")

    write_elapsed = time.time() - write_start
    rows_per_sec = total_rows / write_elapsed if write_elapsed > 0 else 0
    print(f"Done. {total_rows:,} rows written in {write_elapsed:.2f}s ({rows_per_sec:,.0f} rows/sec)")
    return total_rows
