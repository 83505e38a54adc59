"""
Generators Package - stage generators for HCP data generation.

Base Classes:
- GeneratorContext: Shared state dataclass passed to all generators
- BaseStageGenerator: Abstract base class for a pipeline stage

Stage Generators:
- PersonaGenerator (1): HCP profiles
- TerritoryGenerator (2): Rep territory assignments
- CampaignGenerator (3): Campaign definitions
- ParticipationGenerator (4): Campaign enrollments
- StimuliGenerator (5): Outbound touches
- OutcomeGenerator (6): Responses to touches
- PrescribingGenerator (7): Monthly prescribing history
- SaturationGenerator (8): Message exposures and MSI
"""

from .base import ACTIVITY_KINDS, ENTITY_KINDS, BaseStageGenerator, GeneratorContext
from .campaign import CampaignGenerator, ParticipationGenerator
from .outcome import OutcomeGenerator
from .persona import PersonaGenerator
from .prescribing import PrescribingGenerator
from .saturation import SaturationGenerator
from .stimuli import StimuliGenerator
from .territory import TerritoryGenerator

# Stages in execution order
STAGE_GENERATORS: list[type[BaseStageGenerator]] = [
    PersonaGenerator,
    TerritoryGenerator,
    CampaignGenerator,
    ParticipationGenerator,
    StimuliGenerator,
    OutcomeGenerator,
    PrescribingGenerator,
    SaturationGenerator,
]

__all__ = [
    # Base classes
    "GeneratorContext",
    "BaseStageGenerator",
    "ENTITY_KINDS",
    "ACTIVITY_KINDS",
    # Stages
    "PersonaGenerator",
    "TerritoryGenerator",
    "CampaignGenerator",
    "ParticipationGenerator",
    "StimuliGenerator",
    "OutcomeGenerator",
    "PrescribingGenerator",
    "SaturationGenerator",
    "STAGE_GENERATORS",
]
