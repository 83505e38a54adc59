"""
Reference enumerations and the persona correlation-chain weight tables.

Every table keyed by an enum is checked for completeness at import time,
so adding a Specialty without its tier weights fails on import instead of
silently falling back to a default at generation time.
"""

from enum import Enum
from typing import Any, Iterable

from ..errors import ConsistencyError


class Specialty(Enum):
    ONCOLOGY = "Oncology"
    CARDIOLOGY = "Cardiology"
    NEUROLOGY = "Neurology"
    ENDOCRINOLOGY = "Endocrinology"
    RHEUMATOLOGY = "Rheumatology"
    PULMONOLOGY = "Pulmonology"
    GASTROENTEROLOGY = "Gastroenterology"
    NEPHROLOGY = "Nephrology"
    DERMATOLOGY = "Dermatology"
    PSYCHIATRY = "Psychiatry"


class Tier(Enum):
    TIER_1 = "Tier 1"
    TIER_2 = "Tier 2"
    TIER_3 = "Tier 3"


class Segment(Enum):
    HIGH_PRESCRIBER = "High Prescriber"
    GROWTH_POTENTIAL = "Growth Potential"
    NEW_TARGET = "New Target"
    ENGAGED_DIGITAL = "Engaged Digital"
    TRADITIONAL_PREFERENCE = "Traditional Preference"
    ACADEMIC_LEADER = "Academic Leader"


class Channel(Enum):
    EMAIL = "email"
    REP_VISIT = "rep_visit"
    WEBINAR = "webinar"
    CONFERENCE = "conference"
    DIGITAL_AD = "digital_ad"
    PHONE = "phone"


class AdoptionStage(Enum):
    AWARENESS = "awareness"
    CONSIDERATION = "consideration"
    TRIAL = "trial"
    LOYALTY = "loyalty"


def require_exhaustive(table: dict, members: Iterable[Enum], name: str) -> None:
    """Raise ConsistencyError if table is missing a key for any enum member."""
    missing = [m.value for m in members if m not in table]
    if missing:
        raise ConsistencyError(f"{name} has no entry for: {', '.join(missing)}")


# =============================================================================
# Correlation chain: specialty -> tier -> segment -> preferred channel
# =============================================================================

SPECIALTY_WEIGHTS: dict[Specialty, float] = {
    Specialty.ONCOLOGY: 15,
    Specialty.CARDIOLOGY: 18,
    Specialty.NEUROLOGY: 10,
    Specialty.ENDOCRINOLOGY: 12,
    Specialty.RHEUMATOLOGY: 8,
    Specialty.PULMONOLOGY: 9,
    Specialty.GASTROENTEROLOGY: 11,
    Specialty.NEPHROLOGY: 6,
    Specialty.DERMATOLOGY: 7,
    Specialty.PSYCHIATRY: 4,
}


def _tiers(t1: float, t2: float, t3: float) -> dict[Tier, float]:
    return {Tier.TIER_1: t1, Tier.TIER_2: t2, Tier.TIER_3: t3}


TIER_WEIGHTS_BY_SPECIALTY: dict[Specialty, dict[Tier, float]] = {
    Specialty.ONCOLOGY: _tiers(25, 45, 30),
    Specialty.CARDIOLOGY: _tiers(20, 50, 30),
    Specialty.NEUROLOGY: _tiers(22, 48, 30),
    Specialty.ENDOCRINOLOGY: _tiers(18, 47, 35),
    Specialty.RHEUMATOLOGY: _tiers(15, 45, 40),
    Specialty.PULMONOLOGY: _tiers(17, 48, 35),
    Specialty.GASTROENTEROLOGY: _tiers(20, 50, 30),
    Specialty.NEPHROLOGY: _tiers(12, 43, 45),
    Specialty.DERMATOLOGY: _tiers(14, 46, 40),
    Specialty.PSYCHIATRY: _tiers(10, 40, 50),
}

SEGMENT_WEIGHTS_BY_TIER: dict[Tier, dict[Segment, float]] = {
    Tier.TIER_1: {
        Segment.HIGH_PRESCRIBER: 40,
        Segment.ACADEMIC_LEADER: 25,
        Segment.ENGAGED_DIGITAL: 15,
        Segment.TRADITIONAL_PREFERENCE: 10,
        Segment.GROWTH_POTENTIAL: 5,
        Segment.NEW_TARGET: 5,
    },
    Tier.TIER_2: {
        Segment.HIGH_PRESCRIBER: 20,
        Segment.GROWTH_POTENTIAL: 30,
        Segment.ENGAGED_DIGITAL: 20,
        Segment.TRADITIONAL_PREFERENCE: 15,
        Segment.NEW_TARGET: 10,
        Segment.ACADEMIC_LEADER: 5,
    },
    Tier.TIER_3: {
        Segment.NEW_TARGET: 35,
        Segment.GROWTH_POTENTIAL: 25,
        Segment.ENGAGED_DIGITAL: 15,
        Segment.TRADITIONAL_PREFERENCE: 15,
        Segment.HIGH_PRESCRIBER: 5,
        Segment.ACADEMIC_LEADER: 5,
    },
}

CHANNEL_WEIGHTS_BY_SEGMENT: dict[Segment, dict[Channel, float]] = {
    Segment.HIGH_PRESCRIBER: {
        Channel.REP_VISIT: 35,
        Channel.PHONE: 25,
        Channel.EMAIL: 20,
        Channel.WEBINAR: 10,
        Channel.CONFERENCE: 8,
        Channel.DIGITAL_AD: 2,
    },
    Segment.GROWTH_POTENTIAL: {
        Channel.EMAIL: 30,
        Channel.REP_VISIT: 25,
        Channel.WEBINAR: 20,
        Channel.PHONE: 15,
        Channel.DIGITAL_AD: 7,
        Channel.CONFERENCE: 3,
    },
    Segment.NEW_TARGET: {
        Channel.EMAIL: 35,
        Channel.DIGITAL_AD: 25,
        Channel.WEBINAR: 20,
        Channel.REP_VISIT: 10,
        Channel.PHONE: 7,
        Channel.CONFERENCE: 3,
    },
    Segment.ENGAGED_DIGITAL: {
        Channel.EMAIL: 30,
        Channel.DIGITAL_AD: 25,
        Channel.WEBINAR: 25,
        Channel.PHONE: 10,
        Channel.REP_VISIT: 8,
        Channel.CONFERENCE: 2,
    },
    Segment.TRADITIONAL_PREFERENCE: {
        Channel.REP_VISIT: 40,
        Channel.PHONE: 30,
        Channel.CONFERENCE: 15,
        Channel.EMAIL: 10,
        Channel.WEBINAR: 4,
        Channel.DIGITAL_AD: 1,
    },
    Segment.ACADEMIC_LEADER: {
        Channel.CONFERENCE: 30,
        Channel.WEBINAR: 25,
        Channel.REP_VISIT: 20,
        Channel.EMAIL: 15,
        Channel.PHONE: 8,
        Channel.DIGITAL_AD: 2,
    },
}

# =============================================================================
# Engagement and prescribing parameters
# =============================================================================

# (mean, std) of the overall engagement score
ENGAGEMENT_BY_TIER: dict[Tier, tuple[float, float]] = {
    Tier.TIER_1: (70, 15),
    Tier.TIER_2: (50, 18),
    Tier.TIER_3: (30, 20),
}

SEGMENT_ENGAGEMENT_MODIFIER: dict[Segment, float] = {
    Segment.HIGH_PRESCRIBER: 10,
    Segment.ENGAGED_DIGITAL: 15,
    Segment.ACADEMIC_LEADER: 5,
    Segment.GROWTH_POTENTIAL: 0,
    Segment.TRADITIONAL_PREFERENCE: -5,
    Segment.NEW_TARGET: -10,
}

BASE_TOUCHES_BY_TIER: dict[Tier, int] = {
    Tier.TIER_1: 20,
    Tier.TIER_2: 12,
    Tier.TIER_3: 6,
}

# (mean, std) of monthly Rx volume
RX_VOLUME_BY_TIER: dict[Tier, tuple[float, float]] = {
    Tier.TIER_1: (150, 50),
    Tier.TIER_2: (80, 30),
    Tier.TIER_3: (30, 15),
}

MARKET_SHARE_BASE_BY_TIER: dict[Tier, float] = {
    Tier.TIER_1: 35,
    Tier.TIER_2: 20,
    Tier.TIER_3: 10,
}

CONVERSION_BASE_BY_SEGMENT: dict[Segment, float] = {
    Segment.HIGH_PRESCRIBER: 60,
    Segment.GROWTH_POTENTIAL: 50,
    Segment.ENGAGED_DIGITAL: 55,
    Segment.ACADEMIC_LEADER: 45,
    Segment.TRADITIONAL_PREFERENCE: 40,
    Segment.NEW_TARGET: 35,
}

CHURN_BASE_BY_TIER: dict[Tier, float] = {
    Tier.TIER_1: 15,
    Tier.TIER_2: 25,
    Tier.TIER_3: 40,
}

SEGMENT_ADOPTION_STAGE: dict[Segment, AdoptionStage] = {
    Segment.HIGH_PRESCRIBER: AdoptionStage.LOYALTY,
    Segment.ACADEMIC_LEADER: AdoptionStage.LOYALTY,
    Segment.GROWTH_POTENTIAL: AdoptionStage.CONSIDERATION,
    Segment.ENGAGED_DIGITAL: AdoptionStage.CONSIDERATION,
    Segment.TRADITIONAL_PREFERENCE: AdoptionStage.TRIAL,
    Segment.NEW_TARGET: AdoptionStage.AWARENESS,
}

CREDENTIALS: list[tuple[str, float]] = [("MD", 80), ("DO", 15), ("MD, PhD", 5)]


def _check_tables() -> None:
    require_exhaustive(SPECIALTY_WEIGHTS, Specialty, "SPECIALTY_WEIGHTS")
    require_exhaustive(TIER_WEIGHTS_BY_SPECIALTY, Specialty, "TIER_WEIGHTS_BY_SPECIALTY")
    for specialty, weights in TIER_WEIGHTS_BY_SPECIALTY.items():
        require_exhaustive(weights, Tier, f"tier weights for {specialty.value}")

    tier_tables: list[tuple[str, dict[Any, Any]]] = [
        ("SEGMENT_WEIGHTS_BY_TIER", SEGMENT_WEIGHTS_BY_TIER),
        ("ENGAGEMENT_BY_TIER", ENGAGEMENT_BY_TIER),
        ("BASE_TOUCHES_BY_TIER", BASE_TOUCHES_BY_TIER),
        ("RX_VOLUME_BY_TIER", RX_VOLUME_BY_TIER),
        ("MARKET_SHARE_BASE_BY_TIER", MARKET_SHARE_BASE_BY_TIER),
        ("CHURN_BASE_BY_TIER", CHURN_BASE_BY_TIER),
    ]
    for name, table in tier_tables:
        require_exhaustive(table, Tier, name)
    for tier, weights in SEGMENT_WEIGHTS_BY_TIER.items():
        require_exhaustive(weights, Segment, f"segment weights for {tier.value}")

    segment_tables: list[tuple[str, dict[Any, Any]]] = [
        ("CHANNEL_WEIGHTS_BY_SEGMENT", CHANNEL_WEIGHTS_BY_SEGMENT),
        ("SEGMENT_ENGAGEMENT_MODIFIER", SEGMENT_ENGAGEMENT_MODIFIER),
        ("CONVERSION_BASE_BY_SEGMENT", CONVERSION_BASE_BY_SEGMENT),
        ("SEGMENT_ADOPTION_STAGE", SEGMENT_ADOPTION_STAGE),
    ]
    for name, table in segment_tables:
        require_exhaustive(table, Segment, name)
    for segment, weights in CHANNEL_WEIGHTS_BY_SEGMENT.items():
        require_exhaustive(weights, Channel, f"channel weights for {segment.value}")


_check_tables()
