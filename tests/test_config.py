"""
Tests for run configuration: defaults, YAML loading and validation.
"""

from datetime import date, datetime

import pytest

from hcp_datagen.config import DEFAULT_HCPS, GenerationConfig
from hcp_datagen.errors import ConfigurationError


class TestDefaults:
    def test_as_of_defaults_to_midnight_today(self):
        config = GenerationConfig()
        assert config.as_of == datetime.combine(date.today(), datetime.min.time())
        assert config.hcps == DEFAULT_HCPS

    def test_date_promoted_to_datetime(self):
        config = GenerationConfig(as_of=date(2025, 6, 30))
        assert config.as_of == datetime(2025, 6, 30)

    def test_window_start(self):
        config = GenerationConfig(as_of=datetime(2025, 6, 30), months=6)
        assert config.window_start == datetime(2024, 12, 30)


class TestValidate:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"hcps": 0},
            {"hcps": -5},
            {"months": 0},
            {"batch_size": 0},
            {"wipe": True, "additive": True},
        ],
    )
    def test_rejects(self, overrides):
        with pytest.raises(ConfigurationError):
            GenerationConfig(**overrides).validate()

    def test_rejects_inverted_rate_range(self):
        config = GenerationConfig()
        config.tolerances.response_rate_range = (0.4, 0.05)
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_accepts_defaults(self):
        GenerationConfig().validate()


class TestFromYaml:
    def test_load_with_tolerances(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text(
            "seed: 7\n"
            "hcps: 500\n"
            "as_of: 2025-06-30\n"
            "validation:\n"
            "  response_rate_range: [0.1, 0.3]\n"
            "  tier_tolerance_pp: 5.0\n"
        )
        config = GenerationConfig.from_yaml(path)
        assert (config.seed, config.hcps) == (7, 500)
        assert config.as_of == datetime(2025, 6, 30)
        assert config.tolerances.response_rate_range == (0.1, 0.3)
        assert config.tolerances.tier_tolerance_pp == 5.0

    def test_overrides_win_unless_none(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("seed: 7\nhcps: 500\n")
        config = GenerationConfig.from_yaml(path, seed=11, hcps=None)
        assert (config.seed, config.hcps) == (11, 500)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("hpcs: 500\n")
        with pytest.raises(ConfigurationError, match="hpcs"):
            GenerationConfig.from_yaml(path)

    def test_unknown_tolerance(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("validation:\n  strictness: high\n")
        with pytest.raises(ConfigurationError, match="strictness"):
            GenerationConfig.from_yaml(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("")
        assert GenerationConfig.from_yaml(path).seed == 42

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigurationError):
            GenerationConfig.from_yaml(path)
