"""
Run configuration for the generation pipeline.

Values come from dataclass defaults, optionally overlaid by a YAML file,
then by CLI flags. validate() rejects bad parameters before any stage runs.

Example YAML:
    seed: 7
    hcps: 500
    months: 6
    as_of: 2025-06-30
    validation:
      response_rate_range: [0.05, 0.40]
      tier_tolerance_pp: 3.0
"""

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .helpers import add_months

DEFAULT_SEED = 42
DEFAULT_HCPS = 2000
DEFAULT_MONTHS = 12
BATCH_SIZE = 500


@dataclass
class ValidationTolerances:
    """Thresholds used by DataValidator."""

    # Fraction of stimuli that produce an outcome
    response_rate_range: tuple[float, float] = (0.05, 0.40)
    # Allowed gap (percentage points) between realized and configured tier share
    tier_tolerance_pp: float = 3.0
    # Below this population the tier distribution check only reports
    min_population_for_distribution: int = 5000
    row_count_tolerance_pct: float = 0.5


@dataclass
class GenerationConfig:
    """
    Parameters of one generation run.

    Attributes:
        seed: Root seed; every stage stream derives from it
        hcps: Number of HCP profiles to generate
        months: Length of the modeled activity window
        wipe: Delete every entity kind before generating
        additive: Keep HCP profiles, regenerate activity entities
        validate_only: Skip generation and validate what the store holds
        as_of: The run's "now"; defaults to today at midnight
        batch_size: Rows per batch_insert call
        dsn: PostgreSQL DSN; None means the in-memory store
        tolerances: Validation thresholds
    """

    seed: int = DEFAULT_SEED
    hcps: int = DEFAULT_HCPS
    months: int = DEFAULT_MONTHS
    wipe: bool = False
    additive: bool = False
    validate_only: bool = False
    as_of: datetime | None = None
    batch_size: int = BATCH_SIZE
    dsn: str | None = None
    tolerances: ValidationTolerances = field(default_factory=ValidationTolerances)

    def __post_init__(self) -> None:
        if self.as_of is None:
            self.as_of = datetime.combine(date.today(), datetime.min.time())
        elif type(self.as_of) is date:
            self.as_of = datetime.combine(self.as_of, datetime.min.time())

    @property
    def window_start(self) -> datetime:
        """First instant of the modeled activity window."""
        return add_months(self.as_of, -self.months)

    def validate(self) -> None:
        """
        Reject parameters that would make generation meaningless.

        Raises:
            ConfigurationError: On the first invalid parameter
        """
        if not isinstance(self.hcps, int) or self.hcps <= 0:
            raise ConfigurationError(f"hcps must be a positive integer, got {self.hcps!r}")
        if not isinstance(self.months, int) or self.months <= 0:
            raise ConfigurationError(f"months must be a positive integer, got {self.months!r}")
        if self.batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {self.batch_size}")
        if self.wipe and self.additive:
            raise ConfigurationError("wipe and additive are mutually exclusive")
        lo, hi = self.tolerances.response_rate_range
        if not 0 <= lo <= hi <= 1:
            raise ConfigurationError(f"response_rate_range must satisfy 0 <= lo <= hi <= 1, got {(lo, hi)}")

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> "GenerationConfig":
        """
        Load a config file, then apply keyword overrides (None values ignored).

        Raises:
            ConfigurationError: If the file holds unknown keys
        """
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path}: expected a mapping at the top level")

        tolerances = ValidationTolerances()
        for key, value in (raw.pop("validation", None) or {}).items():
            if not hasattr(tolerances, key):
                raise ConfigurationError(f"{path}: unknown validation setting '{key}'")
            if key == "response_rate_range":
                value = tuple(value)
            setattr(tolerances, key, value)

        known = {f.name for f in fields(cls)} - {"tolerances"}
        unknown = set(raw) - known
        if unknown:
            raise ConfigurationError(f"{path}: unknown settings {sorted(unknown)}")

        values = {**raw, **{k: v for k, v in overrides.items() if v is not None}}
        return cls(tolerances=tolerances, **values)
