"""
Message Saturation Index (MSI).

A 0-100 estimate of how fatigued an HCP is with one message theme, built
from three components and scaled by adoption stage:

    frequency  0-40  touches relative to the stage's saturation threshold
    diversity  0-20  low channel diversity saturates faster
    decay      0-40  falling engagement saturates faster

    msi = clamp((frequency + diversity + decay) x stage modifier, 0, 100)

Missing diversity counts as 0.5 and missing decay as 0 (neutral).
"""

from dataclasses import dataclass

from .constants import AdoptionStage
from .helpers import clamp

# Touches at which a theme is considered saturated for the stage
STAGE_THRESHOLDS: dict[AdoptionStage, float] = {
    AdoptionStage.AWARENESS: 20,
    AdoptionStage.CONSIDERATION: 15,
    AdoptionStage.TRIAL: 12,
    AdoptionStage.LOYALTY: 8,
}

STAGE_MODIFIERS: dict[AdoptionStage, float] = {
    AdoptionStage.AWARENESS: 0.7,
    AdoptionStage.CONSIDERATION: 0.85,
    AdoptionStage.TRIAL: 0.9,
    AdoptionStage.LOYALTY: 1.1,
}

DEFAULT_STAGE = AdoptionStage.CONSIDERATION

# MSI levels used by next-best-action rules
NBA_THRESHOLDS = {
    "do_not_push": 80,
    "shift_theme": 65,
    "approaching": 50,
    "safe": 40,
    "underexposed": 20,
}

DIRECTION_DEADBAND = 5


@dataclass(frozen=True)
class MsiComponents:
    frequency: float
    diversity: float
    decay: float
    stage_modifier: float

    @property
    def raw(self) -> float:
        return self.frequency + self.diversity + self.decay


def calculate_msi_components(
    touch_frequency: float,
    channel_diversity: float | None,
    engagement_decay: float | None,
    adoption_stage: AdoptionStage | None,
) -> MsiComponents:
    stage = adoption_stage or DEFAULT_STAGE
    frequency = clamp(touch_frequency / STAGE_THRESHOLDS[stage] * 25, 0, 40)
    diversity = clamp(
        (1 - (0.5 if channel_diversity is None else channel_diversity)) * 20, 0, 20
    )
    decay = clamp((((engagement_decay or 0) + 25) / 50) * 40, 0, 40)
    return MsiComponents(frequency, diversity, decay, STAGE_MODIFIERS[stage])


def calculate_msi(
    touch_frequency: float,
    channel_diversity: float | None,
    engagement_decay: float | None,
    adoption_stage: AdoptionStage | None,
) -> float:
    """Composite MSI in [0, 100], rounded to 2 decimals."""
    components = calculate_msi_components(
        touch_frequency, channel_diversity, engagement_decay, adoption_stage
    )
    return round(clamp(components.raw * components.stage_modifier, 0, 100), 2)


def msi_to_risk_level(msi: float) -> str:
    if msi >= 76:
        return "critical"
    if msi >= 51:
        return "high"
    if msi >= 26:
        return "medium"
    return "low"


def determine_msi_direction(current: float, previous: float | None) -> str:
    """increasing / decreasing when MSI moved more than 5 points, else stable."""
    if previous is None:
        return "stable"
    change = current - previous
    if change > DIRECTION_DEADBAND:
        return "increasing"
    if change < -DIRECTION_DEADBAND:
        return "decreasing"
    return "stable"
