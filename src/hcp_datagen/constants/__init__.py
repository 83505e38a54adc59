"""
Constants Package - reference data and weight tables for HCP data generation.

Modules:
- reference: Enums (Specialty, Tier, Segment, Channel, AdoptionStage) and the
  persona correlation-chain weight tables
- engagement: Stimulus subtypes, content metadata, outcome mapping and
  response-probability modifiers
- geography: Regions, territories, state map, city table, organization names
- campaigns: Products, competitors, campaign types, message themes

Usage:
    from hcp_datagen.constants import Channel, Tier, TIER_WEIGHTS_BY_SPECIALTY
"""

from ..errors import ConsistencyError
from .campaigns import (
    CAMPAIGN_BUDGET_RANGE,
    CAMPAIGN_DURATION_WEEKS,
    CAMPAIGN_GOALS,
    CAMPAIGN_NAME_PREFIXES,
    CAMPAIGN_TYPE_WEIGHTS,
    CAMPAIGNS_PER_MONTH,
    COMPETITORS,
    MAX_CONCURRENT_CAMPAIGNS,
    MAX_START_ATTEMPTS,
    MESSAGE_THEMES,
    OPT_OUT_REASONS,
    PARTICIPATION_SOURCES,
    PRODUCTS,
)
from .engagement import (
    ATTRIBUTION_WEIGHTS,
    CALLS_TO_ACTION,
    CHANNEL_IMPACT_MULTIPLIER,
    CHANNEL_ORDER,
    CHANNEL_RESPONSE_RATES,
    CONTENT_CATEGORIES,
    CONTENT_CATEGORY_THEMES,
    CONTENT_NAMES_BY_OUTCOME,
    CONTENT_TYPES_BY_CHANNEL,
    DEFAULT_RESPONSE_WINDOW_DAYS,
    DELIVERY_STATUS_WEIGHTS,
    MIN_ASSISTED_WEIGHT,
    OUTCOME_TYPE_WEIGHTS,
    OUTCOME_VALUE_RANGES,
    OUTCOMES_BY_STIMULUS,
    PREDICTED_IMPACT_BASE_BY_TIER,
    QUALITY_SCORED_OUTCOMES,
    REP_CHANNELS,
    RESPONSE_PROBABILITY_BOUNDS,
    RESPONSE_WINDOW_DAYS,
    SEGMENT_RESPONSE_MODIFIER,
    STIMULI_COUNT_BY_TIER,
    STIMULUS_TYPES_BY_CHANNEL,
    TIER_RESPONSE_MODIFIER,
    TOUCH_DECAY_FLOOR,
    TOUCH_DECAY_STEPS,
)
from .geography import (
    CITIES,
    CLINIC_NAMES,
    HOSPITAL_NAMES,
    ORGANIZATION_SUFFIXES,
    REGIONS,
    STATE_TO_REGION,
)
from .reference import (
    BASE_TOUCHES_BY_TIER,
    CHANNEL_WEIGHTS_BY_SEGMENT,
    CHURN_BASE_BY_TIER,
    CONVERSION_BASE_BY_SEGMENT,
    CREDENTIALS,
    ENGAGEMENT_BY_TIER,
    MARKET_SHARE_BASE_BY_TIER,
    RX_VOLUME_BY_TIER,
    SEGMENT_ADOPTION_STAGE,
    SEGMENT_ENGAGEMENT_MODIFIER,
    SEGMENT_WEIGHTS_BY_TIER,
    SPECIALTY_WEIGHTS,
    TIER_WEIGHTS_BY_SPECIALTY,
    AdoptionStage,
    Channel,
    Segment,
    Specialty,
    Tier,
)

_theme_codes = {t["code"] for t in MESSAGE_THEMES}
for _category, _theme in CONTENT_CATEGORY_THEMES.items():
    if _theme not in _theme_codes:
        raise ConsistencyError(f"Content category {_category} maps to unknown theme {_theme}")

__all__ = [
    # Enums
    "Specialty",
    "Tier",
    "Segment",
    "Channel",
    "AdoptionStage",
    # Persona correlation chain
    "SPECIALTY_WEIGHTS",
    "TIER_WEIGHTS_BY_SPECIALTY",
    "SEGMENT_WEIGHTS_BY_TIER",
    "CHANNEL_WEIGHTS_BY_SEGMENT",
    "ENGAGEMENT_BY_TIER",
    "SEGMENT_ENGAGEMENT_MODIFIER",
    "BASE_TOUCHES_BY_TIER",
    "RX_VOLUME_BY_TIER",
    "MARKET_SHARE_BASE_BY_TIER",
    "CONVERSION_BASE_BY_SEGMENT",
    "CHURN_BASE_BY_TIER",
    "SEGMENT_ADOPTION_STAGE",
    "CREDENTIALS",
    # Engagement
    "CHANNEL_ORDER",
    "CHANNEL_RESPONSE_RATES",
    "STIMULUS_TYPES_BY_CHANNEL",
    "CONTENT_TYPES_BY_CHANNEL",
    "REP_CHANNELS",
    "CONTENT_CATEGORY_THEMES",
    "CONTENT_CATEGORIES",
    "CALLS_TO_ACTION",
    "DELIVERY_STATUS_WEIGHTS",
    "STIMULI_COUNT_BY_TIER",
    "PREDICTED_IMPACT_BASE_BY_TIER",
    "CHANNEL_IMPACT_MULTIPLIER",
    "OUTCOMES_BY_STIMULUS",
    "OUTCOME_TYPE_WEIGHTS",
    "RESPONSE_WINDOW_DAYS",
    "DEFAULT_RESPONSE_WINDOW_DAYS",
    "TIER_RESPONSE_MODIFIER",
    "SEGMENT_RESPONSE_MODIFIER",
    "TOUCH_DECAY_STEPS",
    "TOUCH_DECAY_FLOOR",
    "RESPONSE_PROBABILITY_BOUNDS",
    "OUTCOME_VALUE_RANGES",
    "QUALITY_SCORED_OUTCOMES",
    "CONTENT_NAMES_BY_OUTCOME",
    "ATTRIBUTION_WEIGHTS",
    "MIN_ASSISTED_WEIGHT",
    # Geography
    "REGIONS",
    "STATE_TO_REGION",
    "CITIES",
    "HOSPITAL_NAMES",
    "CLINIC_NAMES",
    "ORGANIZATION_SUFFIXES",
    # Campaigns
    "PRODUCTS",
    "COMPETITORS",
    "CAMPAIGN_TYPE_WEIGHTS",
    "CAMPAIGN_DURATION_WEEKS",
    "CAMPAIGN_NAME_PREFIXES",
    "CAMPAIGN_GOALS",
    "CAMPAIGNS_PER_MONTH",
    "MAX_CONCURRENT_CAMPAIGNS",
    "MAX_START_ATTEMPTS",
    "CAMPAIGN_BUDGET_RANGE",
    "PARTICIPATION_SOURCES",
    "OPT_OUT_REASONS",
    "MESSAGE_THEMES",
]
