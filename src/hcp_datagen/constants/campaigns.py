"""
Campaign, product and message-theme reference data.
"""

from .reference import Specialty, require_exhaustive

# One marketed product per therapeutic area
PRODUCTS: dict[Specialty, str] = {
    Specialty.ONCOLOGY: "Novax-1",
    Specialty.CARDIOLOGY: "Cardiozen",
    Specialty.NEUROLOGY: "NeuroCalm",
    Specialty.ENDOCRINOLOGY: "EndoBalance",
    Specialty.RHEUMATOLOGY: "RheumaFlex",
    Specialty.PULMONOLOGY: "PulmoEase",
    Specialty.GASTROENTEROLOGY: "GastroShield",
    Specialty.NEPHROLOGY: "NephroGuard",
    Specialty.DERMATOLOGY: "DermaClear",
    Specialty.PSYCHIATRY: "MindWell",
}

# Two named competitors per therapeutic area; "Other" absorbs the rest
COMPETITORS: dict[Specialty, tuple[str, str]] = {
    Specialty.ONCOLOGY: ("Tumorex", "Oncavia"),
    Specialty.CARDIOLOGY: ("Vasotril", "Cardiomax"),
    Specialty.NEUROLOGY: ("Neurolix", "Synaptor"),
    Specialty.ENDOCRINOLOGY: ("Glucora", "Thyrevex"),
    Specialty.RHEUMATOLOGY: ("Arthrinol", "Jointara"),
    Specialty.PULMONOLOGY: ("Breathix", "Airvane"),
    Specialty.GASTROENTEROLOGY: ("Digestra", "Colonix"),
    Specialty.NEPHROLOGY: ("Renalis", "Kidnova"),
    Specialty.DERMATOLOGY: ("Dermavive", "Cutisol"),
    Specialty.PSYCHIATRY: ("Serenova", "Moodrex"),
}

CAMPAIGN_TYPE_WEIGHTS: dict[str, float] = {
    "launch": 20,
    "maintenance": 35,
    "awareness": 25,
    "retention": 20,
}

# (min, max) duration in weeks
CAMPAIGN_DURATION_WEEKS: dict[str, tuple[int, int]] = {
    "launch": (8, 16),
    "maintenance": (12, 26),
    "awareness": (4, 8),
    "retention": (8, 16),
}

CAMPAIGN_NAME_PREFIXES: dict[str, list[str]] = {
    "launch": ["Launch:", "Introducing", "New:"],
    "maintenance": ["Sustain:", "Continuing", "Ongoing:"],
    "awareness": ["Discover", "Spotlight:", "Focus on"],
    "retention": ["Loyalty:", "Partnership:", "Commitment:"],
}

# (min, max) goal value per goal type
CAMPAIGN_GOALS: dict[str, tuple[int, int]] = {
    "engagement": (20, 50),
    "conversion": (5, 20),
    "awareness": (30, 60),
    "rx_lift": (5, 15),
}

CAMPAIGNS_PER_MONTH = 4.2
MAX_CONCURRENT_CAMPAIGNS = 3
MAX_START_ATTEMPTS = 50

CAMPAIGN_BUDGET_RANGE = (50_000, 500_000)

PARTICIPATION_SOURCES: list[str] = ["auto", "manual", "import"]
OPT_OUT_REASONS: list[str] = ["too_frequent", "not_relevant", "request"]

MESSAGE_THEMES: list[dict[str, str]] = [
    {
        "code": "efficacy",
        "name": "Clinical Efficacy",
        "category": "clinical",
        "description": "Trial endpoints and head-to-head efficacy data",
    },
    {
        "code": "patient_outcomes",
        "name": "Patient Outcomes",
        "category": "clinical",
        "description": "Quality-of-life and long-term outcome evidence",
    },
    {
        "code": "dosing_convenience",
        "name": "Dosing Convenience",
        "category": "practical",
        "description": "Administration schedule and titration guidance",
    },
    {
        "code": "cost_value",
        "name": "Cost & Value",
        "category": "access",
        "description": "Formulary status, coverage and affordability",
    },
    {
        "code": "safety",
        "name": "Safety Profile",
        "category": "clinical",
        "description": "Adverse-event rates and monitoring requirements",
    },
    {
        "code": "peer_validation",
        "name": "Peer Validation",
        "category": "social",
        "description": "KOL opinion and peer prescribing experience",
    },
    {
        "code": "rwe",
        "name": "Real-World Evidence",
        "category": "clinical",
        "description": "Registry and case-study evidence outside trials",
    },
    {
        "code": "mechanism_of_action",
        "name": "Mechanism of Action",
        "category": "scientific",
        "description": "How the molecule works and why it differentiates",
    },
]

require_exhaustive(PRODUCTS, Specialty, "PRODUCTS")
require_exhaustive(COMPETITORS, Specialty, "COMPETITORS")
