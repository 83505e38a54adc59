"""
Stimulus and outcome tables: what each channel can send, how HCPs respond.

Probabilities and breakpoints here are empirical and are kept exactly as
calibrated; adjusting them shifts every downstream distribution.
"""

from ..errors import ConsistencyError
from .reference import Channel, Segment, Tier, require_exhaustive

CHANNEL_ORDER: list[Channel] = list(Channel)

CHANNEL_RESPONSE_RATES: dict[Channel, float] = {
    Channel.EMAIL: 0.15,
    Channel.REP_VISIT: 0.45,
    Channel.WEBINAR: 0.35,
    Channel.CONFERENCE: 0.55,
    Channel.DIGITAL_AD: 0.05,
    Channel.PHONE: 0.25,
}

STIMULUS_TYPES_BY_CHANNEL: dict[Channel, list[str]] = {
    Channel.EMAIL: ["email_send", "email_open", "email_click"],
    Channel.REP_VISIT: ["rep_visit", "sample_delivery"],
    Channel.WEBINAR: ["webinar_invite", "webinar_attend"],
    Channel.CONFERENCE: ["conference_meeting"],
    Channel.DIGITAL_AD: ["digital_ad_impression", "digital_ad_click"],
    Channel.PHONE: ["phone_call"],
}

CONTENT_TYPES_BY_CHANNEL: dict[Channel, list[str]] = {
    Channel.EMAIL: ["newsletter", "product_update", "clinical_study", "invitation"],
    Channel.REP_VISIT: ["detail_aid", "leave_behind", "product_sample", "discussion"],
    Channel.WEBINAR: ["live_presentation", "on_demand", "panel_discussion"],
    Channel.CONFERENCE: ["booth_visit", "symposium", "poster_session", "kol_meeting"],
    Channel.DIGITAL_AD: ["banner", "video", "native", "sponsored_content"],
    Channel.PHONE: ["follow_up", "appointment_confirm", "product_info", "survey"],
}

# Channels whose touches are delivered by the HCP's field rep
REP_CHANNELS: frozenset[Channel] = frozenset({Channel.REP_VISIT, Channel.PHONE})

# content category -> message theme code
CONTENT_CATEGORY_THEMES: dict[str, str] = {
    "clinical_data": "efficacy",
    "patient_outcomes": "patient_outcomes",
    "dosing_guide": "dosing_convenience",
    "formulary_update": "cost_value",
    "safety_info": "safety",
    "peer_insights": "peer_validation",
    "case_study": "rwe",
    "promotional": "mechanism_of_action",
}
CONTENT_CATEGORIES: list[str] = list(CONTENT_CATEGORY_THEMES)

CALLS_TO_ACTION: dict[str, list[str]] = {
    "email_send": ["Learn More", "Download Guide", "Register Now", "Contact Rep", "Request Sample"],
    "email_open": ["Read Full Article", "View Details", "Get Started"],
    "email_click": ["Download Now", "Schedule Meeting", "View Product Info"],
    "rep_visit": ["Schedule Follow-up", "Request Samples", "Review Data"],
    "webinar_invite": ["Register Now", "Add to Calendar", "Learn More"],
    "webinar_attend": ["Download Materials", "Ask a Question", "Connect with Speaker"],
    "conference_meeting": ["Schedule Booth Visit", "View Poster", "Connect"],
    "digital_ad_impression": ["Click to Learn More", "Visit Site"],
    "digital_ad_click": ["Get Started", "Request Demo", "Download"],
    "phone_call": ["Confirm Appointment", "Request Information", "Schedule Visit"],
    "sample_delivery": ["Provide Feedback", "Reorder", "Contact Support"],
}

DELIVERY_STATUS_WEIGHTS: dict[str, float] = {
    "delivered": 85,
    "bounced": 5,
    "pending": 3,
    "failed": 2,
    "scheduled": 5,
}

# (min, max) events per HCP across the modeled window
STIMULI_COUNT_BY_TIER: dict[Tier, tuple[int, int]] = {
    Tier.TIER_1: (50, 80),
    Tier.TIER_2: (30, 50),
    Tier.TIER_3: (15, 30),
}

PREDICTED_IMPACT_BASE_BY_TIER: dict[Tier, float] = {
    Tier.TIER_1: 2.5,
    Tier.TIER_2: 1.8,
    Tier.TIER_3: 1.2,
}

CHANNEL_IMPACT_MULTIPLIER: dict[Channel, float] = {
    Channel.REP_VISIT: 1.5,
    Channel.CONFERENCE: 1.4,
    Channel.WEBINAR: 1.2,
    Channel.PHONE: 1.1,
    Channel.EMAIL: 1.0,
    Channel.DIGITAL_AD: 0.7,
}

# =============================================================================
# Outcomes
# =============================================================================

OUTCOMES_BY_STIMULUS: dict[str, list[str]] = {
    "email_send": ["email_open", "email_click", "content_download"],
    "email_open": ["email_click", "content_download"],
    "email_click": ["content_download", "form_submit"],
    "rep_visit": ["meeting_completed", "sample_request", "rx_written"],
    "webinar_invite": ["webinar_register", "webinar_attend"],
    "webinar_attend": ["content_download", "form_submit"],
    "conference_meeting": ["meeting_completed", "referral"],
    "digital_ad_impression": ["digital_ad_click"],
    "digital_ad_click": ["content_download", "form_submit"],
    "phone_call": ["call_completed", "meeting_scheduled"],
    "sample_delivery": ["rx_written"],
}

# Low-effort responses dominate; unlisted outcome types weigh 1
OUTCOME_TYPE_WEIGHTS: dict[str, float] = {
    "email_open": 10,
    "email_click": 6,
    "content_download": 4,
    "form_submit": 3,
    "webinar_register": 5,
    "webinar_attend": 3,
    "sample_request": 4,
    "meeting_scheduled": 2,
    "meeting_completed": 1.5,
    "call_completed": 3,
    "rx_written": 0.5,
    "referral": 0.3,
}

# (min, max) days between stimulus and outcome
RESPONSE_WINDOW_DAYS: dict[str, tuple[int, int]] = {
    "email_open": (0, 3),
    "email_click": (0, 2),
    "content_download": (0, 5),
    "form_submit": (0, 7),
    "webinar_register": (0, 14),
    "webinar_attend": (1, 30),
    "sample_request": (0, 7),
    "meeting_scheduled": (1, 14),
    "meeting_completed": (3, 21),
    "call_completed": (0, 3),
    "rx_written": (1, 45),
    "referral": (7, 60),
}
DEFAULT_RESPONSE_WINDOW_DAYS = (0, 7)

TIER_RESPONSE_MODIFIER: dict[Tier, float] = {
    Tier.TIER_1: 1.3,
    Tier.TIER_2: 1.0,
    Tier.TIER_3: 0.7,
}

SEGMENT_RESPONSE_MODIFIER: dict[Segment, float] = {
    Segment.HIGH_PRESCRIBER: 1.2,
    Segment.ENGAGED_DIGITAL: 1.4,
    Segment.ACADEMIC_LEADER: 1.1,
    Segment.GROWTH_POTENTIAL: 1.0,
    Segment.TRADITIONAL_PREFERENCE: 0.9,
    Segment.NEW_TARGET: 0.7,
}

# (max touch count, multiplier) steps; beyond the last step the floor applies
TOUCH_DECAY_STEPS: list[tuple[int, float]] = [(3, 1.0), (5, 0.9), (10, 0.8)]
TOUCH_DECAY_FLOOR = 0.6

RESPONSE_PROBABILITY_BOUNDS = (0.02, 0.6)

# (min, max) monetized value
OUTCOME_VALUE_RANGES: dict[str, tuple[int, int]] = {
    "rx_written": (100, 2000),
    "sample_request": (50, 200),
    "meeting_completed": (200, 500),
    "referral": (500, 2500),
    "webinar_attend": (100, 300),
}

QUALITY_SCORED_OUTCOMES: frozenset[str] = frozenset(
    {"meeting_completed", "call_completed", "webinar_attend", "referral"}
)

CONTENT_NAMES_BY_OUTCOME: dict[str, list[str]] = {
    "content_download": [
        "Clinical Study Summary",
        "Dosing Guide",
        "Patient Case Studies",
        "Product Monograph",
        "Safety Information",
        "Formulary Comparison",
    ],
    "email_click": ["Product Overview", "Latest Research", "Upcoming Events", "Clinical Update"],
    "webinar_attend": [
        "Q1 Clinical Update Webinar",
        "Expert Panel Discussion",
        "New Data Presentation",
        "Best Practices Workshop",
    ],
    "form_submit": [
        "Sample Request Form",
        "Contact Request",
        "Meeting Request",
        "Information Request",
    ],
}

ATTRIBUTION_WEIGHTS = {"direct": 1.0, "organic": 0.1}
MIN_ASSISTED_WEIGHT = 0.3

for _name, _table in [
    ("CHANNEL_RESPONSE_RATES", CHANNEL_RESPONSE_RATES),
    ("STIMULUS_TYPES_BY_CHANNEL", STIMULUS_TYPES_BY_CHANNEL),
    ("CONTENT_TYPES_BY_CHANNEL", CONTENT_TYPES_BY_CHANNEL),
    ("CHANNEL_IMPACT_MULTIPLIER", CHANNEL_IMPACT_MULTIPLIER),
]:
    require_exhaustive(_table, Channel, _name)
for _name, _table in [
    ("STIMULI_COUNT_BY_TIER", STIMULI_COUNT_BY_TIER),
    ("PREDICTED_IMPACT_BASE_BY_TIER", PREDICTED_IMPACT_BASE_BY_TIER),
    ("TIER_RESPONSE_MODIFIER", TIER_RESPONSE_MODIFIER),
]:
    require_exhaustive(_table, Tier, _name)
require_exhaustive(SEGMENT_RESPONSE_MODIFIER, Segment, "SEGMENT_RESPONSE_MODIFIER")
for _types in STIMULUS_TYPES_BY_CHANNEL.values():
    for _stimulus_type in _types:
        if _stimulus_type not in CALLS_TO_ACTION or _stimulus_type not in OUTCOMES_BY_STIMULUS:
            raise ConsistencyError(f"Stimulus type {_stimulus_type} has no CTA or outcome mapping")
