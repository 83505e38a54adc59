"""
End-to-end tests for the pipeline orchestrator, validation and CLI.
"""

import pytest
from conftest import small_config

from hcp_datagen.cli import main
from hcp_datagen.errors import ConfigurationError
from hcp_datagen.generators import ENTITY_KINDS
from hcp_datagen.pipeline import HCPDataGenerator
from hcp_datagen.storage import InMemoryStore

ACTIVITY_COUNTS = ("stimuli_events", "outcome_events", "prescribing_history")


def strip_ids(rows: list[dict]) -> list[dict]:
    return [{k: v for k, v in r.items() if k != "id" and not k.endswith("_id")} for r in rows]


class TestDeterminism:
    def test_same_seed_same_data(self, small_run):
        again = HCPDataGenerator(small_config(), InMemoryStore())
        again.run()
        for kind in ENTITY_KINDS:
            assert again.data[kind] == small_run.data[kind], kind

    def test_different_seed_differs(self, small_run):
        other = HCPDataGenerator(small_config(seed=7), InMemoryStore())
        other.run()
        npis = {h["npi"] for h in small_run.data["hcp_profiles"]}
        assert npis != {h["npi"] for h in other.data["hcp_profiles"]}


class TestModes:
    def test_every_kind_persisted(self, small_run):
        for kind in ENTITY_KINDS:
            assert small_run.data[kind], kind
            assert len(small_run.data[kind]) == small_run.store.count(kind)
            assert all("id" in row for row in small_run.data[kind])

    def test_additive_matches_wipe_run(self):
        """An additive run over the same HCPs reproduces the activity counts."""
        store = InMemoryStore()
        first = HCPDataGenerator(small_config(wipe=True), store)
        first.run()
        hcp_ids = [h["id"] for h in first.data["hcp_profiles"]]
        counts = {kind: len(first.data[kind]) for kind in ACTIVITY_COUNTS}

        second = HCPDataGenerator(small_config(additive=True), store)
        assert second.run()
        assert [h["id"] for h in second.data["hcp_profiles"]] == hcp_ids
        assert {kind: len(second.data[kind]) for kind in ACTIVITY_COUNTS} == counts
        assert store.count("hcp_profiles") == len(hcp_ids)
        assert store.count("stimuli_events") == counts["stimuli_events"]
        assert strip_ids(second.data["outcome_events"]) == strip_ids(first.data["outcome_events"])

    def test_default_mode_keeps_existing_data(self):
        store = InMemoryStore()
        HCPDataGenerator(small_config(hcps=30), store).run()
        stimuli = store.count("stimuli_events")

        generator = HCPDataGenerator(small_config(hcps=30, seed=99), store)
        assert generator.run() is False
        assert store.count("hcp_profiles") == 30
        assert store.count("stimuli_events") == stimuli
        assert len(generator.data["stimuli_events"]) == stimuli

    def test_wipe_replaces_everything(self):
        store = InMemoryStore()
        HCPDataGenerator(small_config(hcps=30), store).run()
        HCPDataGenerator(small_config(hcps=20, wipe=True), store).run()
        assert store.count("hcp_profiles") == 20
        assert store.count("message_themes") == 8
        assert store.count("prescribing_history") == 20 * 6

    def test_wipe_and_additive_rejected(self):
        with pytest.raises(ConfigurationError):
            HCPDataGenerator(small_config(wipe=True, additive=True), InMemoryStore())


class TestValidation:
    def test_small_run_passes(self, small_run):
        results = small_run.validate()
        failed = {name: msg for name, (ok, msg) in results.items() if not ok}
        assert not failed

    def test_reference_scenario(self):
        """500 HCPs over 6 months: every check passes."""
        generator = HCPDataGenerator(small_config(hcps=500), InMemoryStore())
        generator.run()
        results = generator.validate()
        assert all(ok for ok, _ in results.values()), results

    def test_broken_reference_detected(self, small_run):
        generator = HCPDataGenerator(small_config(), InMemoryStore())
        generator.ctx.data.update({k: list(v) for k, v in small_run.data.items()})
        generator.ctx.data["outcome_events"] = generator.ctx.data["outcome_events"] + [
            {**small_run.data["outcome_events"][0], "stimulus_id": -1}
        ]
        ok, msg = generator.validate()["referential_integrity"]
        assert not ok
        assert "stimulus_id" in msg

    def test_outcome_on_other_hcps_stimulus_detected(self, small_run):
        """An outcome pointed at an earlier touch of a different HCP fails integrity."""
        generator = HCPDataGenerator(small_config(), InMemoryStore())
        generator.ctx.data.update({k: list(v) for k, v in small_run.data.items()})
        outcomes = generator.ctx.data["outcome_events"]
        first = outcomes[0]
        other = next(
            s for s in small_run.data["stimuli_events"]
            if s["hcp_id"] != first["hcp_id"] and s["event_date"] < first["event_date"]
        )
        outcomes[0] = {**first, "stimulus_id": other["id"]}

        results = generator.validate()
        ok, msg = results["referential_integrity"]
        assert not ok
        assert "another HCP" in msg
        assert results["temporal_consistency"][0]


class TestSeedFile:
    def test_write_sql(self, small_run, tmp_path):
        output = tmp_path / "seed.sql"
        rows = small_run.write_sql(output)
        text = output.read_text()
        assert rows == sum(len(v) for v in small_run.data.values())
        assert "COPY hcp_profiles (id, npi," in text
        assert "SELECT setval('stimuli_events_id_seq'" in text
        assert text.index("COPY hcp_profiles") < text.index("COPY stimuli_events")


class TestCli:
    def test_generate_and_write(self, tmp_path, monkeypatch):
        monkeypatch.delenv("HCP_DATAGEN_DSN", raising=False)
        output = tmp_path / "seed.sql"
        code = main([
            "--hcps", "40", "--months", "3", "--as-of", "2025-06-30",
            "--output", str(output), "--skip-validation",
        ])
        assert code == 0
        assert output.exists()

    def test_config_file_and_flags(self, tmp_path, monkeypatch):
        monkeypatch.delenv("HCP_DATAGEN_DSN", raising=False)
        config = tmp_path / "run.yaml"
        config.write_text("hcps: 25\nmonths: 2\nas_of: 2025-06-30\n")
        output = tmp_path / "seed.sql"
        code = main(["--config", str(config), "--seed", "3", "--output", str(output), "--skip-validation"])
        assert code == 0
        assert "-- Seed: 3" in output.read_text()

    def test_invalid_config_exits_nonzero(self, monkeypatch):
        monkeypatch.delenv("HCP_DATAGEN_DSN", raising=False)
        assert main(["--hcps", "0", "--validate-only"]) == 1

    def test_wipe_and_additive_flags_conflict(self):
        with pytest.raises(SystemExit):
            main(["--wipe", "--additive"])
