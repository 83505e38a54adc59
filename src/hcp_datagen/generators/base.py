"""
Base classes for the stage generators.

This module provides:
- GeneratorContext: Shared state passed to every stage generator
- BaseStageGenerator: Abstract base class for a pipeline stage

Design Principles:
- Context owns all mutable state (data tables, random streams, timings)
- Generators read earlier stages' rows from ctx.data and append their own
- Rows in ctx.data are whatever the store handed back, so ids are
  store-assigned by the time a later stage reads them
- Each stage draws from its own RandomSource stream, derived from the seed
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from ..config import GenerationConfig
from ..random_source import RandomSource
from ..static_pool import StaticDataPool

# Entity kinds in foreign-key order (parents first)
ENTITY_KINDS: list[str] = [
    "message_themes",
    "hcp_profiles",
    "territory_assignments",
    "campaigns",
    "campaign_participation",
    "stimuli_events",
    "outcome_events",
    "prescribing_history",
    "message_exposures",
    "campaign_metrics",
    "participation_activity",
    "engagement_snapshots",
]

# Everything an additive run regenerates
ACTIVITY_KINDS: list[str] = [
    k for k in ENTITY_KINDS if k not in ("message_themes", "hcp_profiles")
]


@dataclass
class GeneratorContext:
    """
    Shared state for all stage generators.

    Attributes:
        config: Run parameters (seed, sizes, as_of)
        rng: Root RandomSource; stages use stream(name) instead
        pool: Pre-generated name pool
        data: Table name -> list of row dicts
        generated_stages: Names of stages that have run
    """

    config: GenerationConfig
    rng: RandomSource
    pool: StaticDataPool
    data: dict[str, list[dict]] = field(default_factory=dict)
    generated_stages: set[str] = field(default_factory=set)

    _streams: dict[str, RandomSource] = field(default_factory=dict, repr=False)
    _stage_times: dict[str, float] = field(default_factory=dict, repr=False)
    _stage_rows: dict[str, int] = field(default_factory=dict, repr=False)

    @classmethod
    def create(cls, config: GenerationConfig) -> GeneratorContext:
        """Build a context with a root stream and name pool for config.seed."""
        ctx = cls(
            config=config,
            rng=RandomSource(config.seed),
            pool=StaticDataPool(seed=config.seed),
        )
        ctx.init_data_tables()
        return ctx

    def init_data_tables(self) -> None:
        for kind in ENTITY_KINDS:
            self.data[kind] = []

    def stream(self, name: str) -> RandomSource:
        """The RandomSource dedicated to one stage (created on first use)."""
        if name not in self._streams:
            self._streams[name] = self.rng.spawn(name)
        return self._streams[name]

    def reset_stream(self, name: str) -> None:
        self._streams.pop(name, None)

    @property
    def as_of(self) -> datetime:
        return self.config.as_of

    @property
    def window_start(self) -> datetime:
        return self.config.window_start

    @property
    def months(self) -> int:
        return self.config.months


class BaseStageGenerator(ABC):
    """
    Abstract base class for a pipeline stage.

    Subclasses set STAGE (ordinal, for progress output), NAME (random
    stream key) and OUTPUT (the entity kind they append to), and implement
    generate(). A stage must only read kinds produced by earlier stages.
    """

    STAGE: int = 0
    NAME: str = ""
    OUTPUT: str = ""

    def __init__(self, ctx: GeneratorContext) -> None:
        self.ctx = ctx

    @abstractmethod
    def generate(self) -> None:
        """Append this stage's rows to ctx.data[OUTPUT]."""
        pass

    @property
    def rng(self) -> RandomSource:
        return self.ctx.stream(self.NAME)

    @property
    def data(self) -> dict[str, list[dict]]:
        return self.ctx.data

    def _mark_done(self) -> None:
        self.ctx.generated_stages.add(self.NAME)
