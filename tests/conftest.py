"""
Pytest fixtures for hcp_datagen tests.

Provides:
- A fixed reference instant so runs do not depend on today's date
- Fresh GeneratorContext instances for single-stage tests
- One session-scoped small pipeline run on the in-memory store
- A PostgreSQL DSN (tests using it skip when HCP_DATAGEN_DSN is unset)
"""

import os
from datetime import datetime

import pytest

from hcp_datagen.config import GenerationConfig
from hcp_datagen.generators import GeneratorContext
from hcp_datagen.pipeline import HCPDataGenerator
from hcp_datagen.storage import InMemoryStore

AS_OF = datetime(2025, 6, 30)
SMALL_HCPS = 150
SMALL_MONTHS = 6


def small_config(**overrides) -> GenerationConfig:
    values = {
        "seed": 42,
        "hcps": SMALL_HCPS,
        "months": SMALL_MONTHS,
        "as_of": AS_OF,
        "batch_size": 100,
    }
    values.update(overrides)
    return GenerationConfig(**values)


def with_ids(rows: list[dict]) -> list[dict]:
    """Assign sequential ids the way a store would."""
    return [{**row, "id": i} for i, row in enumerate(rows, start=1)]


@pytest.fixture
def ctx() -> GeneratorContext:
    """Fresh context for a 12-month window ending at AS_OF."""
    return GeneratorContext.create(small_config(months=12))


@pytest.fixture(scope="session")
def small_run() -> HCPDataGenerator:
    """A complete 150 HCP / 6 month run against an in-memory store."""
    generator = HCPDataGenerator(small_config(), InMemoryStore())
    generator.run()
    return generator


@pytest.fixture(scope="session")
def pg_dsn() -> str:
    dsn = os.environ.get("HCP_DATAGEN_DSN")
    if not dsn:
        pytest.skip("HCP_DATAGEN_DSN not set")
    return dsn
