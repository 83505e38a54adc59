"""
Pipeline orchestrator: runs the stage generators in dependency order against
a DataStore.

    themes -> personas -> territories -> campaigns -> participation
           -> stimuli -> outcomes -> prescribing -> exposures -> aggregates

After every stage the new rows are inserted in batches and the whole kind is
read back, so the next stage sees store-assigned ids.

Modes:
- wipe: delete every kind, then generate everything
- additive: keep HCP profiles, delete and regenerate every activity kind
- default: generate everything, unless HCP profiles already exist
"""

import time
from pathlib import Path
from typing import Any

from .aggregator import AGGREGATES
from .config import GenerationConfig
from .constants import MESSAGE_THEMES
from .generators import (
    ACTIVITY_KINDS,
    ENTITY_KINDS,
    STAGE_GENERATORS,
    BaseStageGenerator,
    GeneratorContext,
    PersonaGenerator,
)
from .helpers import expected_row_counts
from .storage import DataStore, write_seed_sql
from .validation import DataValidator


class HCPDataGenerator:
    """
    Orchestrates generation of all HCP engagement data.

    Stages run in a fixed order, each from its own seeded random stream;
    every stage's output is persisted and read back before the next starts.
    """

    def __init__(self, config: GenerationConfig, store: DataStore) -> None:
        """
        Args:
            config: Run parameters (validated here)
            store: Backing store for inserts and read-back

        Raises:
            ConfigurationError: If config is invalid
        """
        config.validate()
        self.config = config
        self.store = store
        self.ctx = GeneratorContext.create(config)
        self._generators: list[BaseStageGenerator] = [g(self.ctx) for g in STAGE_GENERATORS]

    def run(self) -> bool:
        """
        Generate according to the configured mode.

        Returns:
            True if data was generated, False if existing HCP data was left
            in place (default mode)
        """
        print("=" * 60)
        print("HCP Engagement - Synthetic Data Generation")
        print("=" * 60)
        print(f"Seed: {self.config.seed}")
        print(f"As of: {self.config.as_of:%Y-%m-%d} ({self.config.months} months)")
        mode = "wipe" if self.config.wipe else "additive" if self.config.additive else "default"
        print(f"Mode: {mode}")
        targets = expected_row_counts(self.config.hcps, self.config.months)
        print(f"Target: ~{sum(targets.values()):,} core rows for {self.config.hcps:,} HCPs")
        print()

        if self.config.wipe:
            self._delete(ENTITY_KINDS)
        self._seed_themes()

        existing = self.store.count("hcp_profiles")
        if self.config.additive and existing:
            print(f"Additive run: keeping {existing:,} HCP profiles")
            self._delete(ACTIVITY_KINDS)
            self.ctx.data["hcp_profiles"] = self.store.select_all("hcp_profiles")
            stages = [g for g in self._generators if not isinstance(g, PersonaGenerator)]
        elif existing:
            print(f"Store already holds {existing:,} HCP profiles; use wipe or additive to regenerate.")
            self.load_all()
            return False
        else:
            if self.config.additive:
                self._delete(ACTIVITY_KINDS)
            stages = self._generators

        gen_start = time.time()
        print("Generating stages...")
        print()
        for generator in stages:
            self._run_stage(generator)
        self._run_aggregates()
        gen_elapsed = time.time() - gen_start

        self._print_summary(gen_elapsed)
        return True

    def load_all(self) -> None:
        """Replace every in-memory table with the store's contents."""
        for kind in ENTITY_KINDS:
            self.ctx.data[kind] = self.store.select_all(kind)

    def _delete(self, kinds: list[str]) -> None:
        # Children first
        for kind in reversed(kinds):
            self.store.delete_all(kind)

    def _seed_themes(self) -> None:
        """Insert the fixed message themes once; later runs read them back."""
        if self.store.count("message_themes") == 0:
            self.ctx.data["message_themes"] = [dict(t) for t in MESSAGE_THEMES]
            self._persist("message_themes")
        else:
            self.ctx.data["message_themes"] = self.store.select_all("message_themes")

    def _run_stage(self, generator: BaseStageGenerator) -> None:
        stage_start = time.time()
        generator.generate()
        self._persist(generator.OUTPUT)
        elapsed = time.time() - stage_start

        rows = len(self.ctx.data[generator.OUTPUT])
        self.ctx._stage_times[generator.NAME] = elapsed
        self.ctx._stage_rows[generator.NAME] = rows
        rows_per_sec = rows / elapsed if elapsed > 0 else 0
        print(f"    {elapsed:.2f}s ({rows_per_sec:,.0f} rows/sec)")

    def _run_aggregates(self) -> None:
        print("  Aggregates: campaign metrics, participation activity, engagement snapshots")
        for kind, build in AGGREGATES.items():
            self.ctx.data[kind] = build(self.ctx.data, self.config.as_of)
            self._persist(kind)
            print(f"    {kind}: {len(self.ctx.data[kind]):,} rows")

    def _persist(self, kind: str) -> None:
        """
        Insert ctx.data[kind] in batches, then read the kind back.

        Progress is printed every 10 batches for large tables.
        """
        rows = self.ctx.data[kind]
        batch_size = self.config.batch_size
        batches = 0
        for start in range(0, len(rows), batch_size):
            self.store.batch_insert(kind, rows[start:start + batch_size])
            batches += 1
            if batches % 10 == 0:
                done = min(start + batch_size, len(rows))
                print(f"    Inserting {kind}... {done / len(rows):.0%} ({done:,}/{len(rows):,})")
        self.ctx.data[kind] = self.store.select_all(kind)

    def _print_summary(self, elapsed: float) -> None:
        print()
        print("=" * 60)
        print("Generation Summary")
        print("=" * 60)
        total_rows = sum(len(rows) for rows in self.ctx.data.values())
        rows_per_sec = total_rows / elapsed if elapsed > 0 else 0
        print(f"Total rows: {total_rows:,}")
        print(f"Total time: {elapsed:.2f}s ({rows_per_sec:,.0f} rows/sec)")

        if self.ctx._stage_times:
            print()
            print("Stage Performance:")
            for generator in self._generators:
                if generator.NAME not in self.ctx._stage_times:
                    continue
                t = self.ctx._stage_times[generator.NAME]
                r = self.ctx._stage_rows.get(generator.NAME, 0)
                rps = r / t if t > 0 else 0
                print(f"  Stage {generator.STAGE}: {t:6.2f}s - {r:8,} {generator.OUTPUT} ({rps:,.0f}/sec)")

    def validate(self) -> dict[str, tuple[bool, str]]:
        """
        Run the validation suite over ctx.data.

        Returns dict of {check_name: (passed, message)}
        """
        print()
        print("=" * 60)
        print("Validation Suite")
        print("=" * 60)

        results = DataValidator(self.ctx).run_all()

        print()
        print("-" * 40)
        passed_checks = sum(1 for p, _ in results.values() if p)
        print(f"Validation: {passed_checks}/{len(results)} checks passed")
        for name, (ok, msg) in results.items():
            status = "+" if ok else "x"
            print(f"  {status} {name}: {msg}")
        return results

    def write_sql(self, output_path: Path) -> int:
        return write_seed_sql(self.ctx.data, output_path, self.config.seed)

    @property
    def data(self) -> dict[str, list[dict[str, Any]]]:
        return self.ctx.data
