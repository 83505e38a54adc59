"""
Geography: sales regions, their territories, and the city table HCPs are
placed in.

CITIES weights are rough metro populations (hundreds of thousands); HCP
density follows population.
"""

from ..errors import ConsistencyError

REGIONS: dict[str, list[str]] = {
    "Northeast": ["NY Metro", "New England", "Mid-Atlantic"],
    "Southeast": ["Florida", "Gulf Coast", "Carolinas", "Atlanta Metro"],
    "Midwest": ["Great Lakes", "Chicago Metro", "Plains"],
    "Southwest": ["Texas", "Arizona", "Mountain"],
    "West": ["California North", "California South", "Pacific Northwest"],
}

_STATES_BY_REGION: dict[str, list[str]] = {
    "Northeast": ["NY", "NJ", "PA", "MA", "CT", "RI", "VT", "NH", "ME", "MD", "DE", "DC"],
    "Southeast": ["FL", "GA", "NC", "SC", "VA", "TN", "AL", "MS", "KY", "LA"],
    "Midwest": ["IL", "OH", "MI", "IN", "WI", "MN", "IA", "MO", "NE", "KS", "ND", "SD"],
    "Southwest": ["TX", "AZ", "NM", "OK", "CO", "UT", "NV"],
    "West": ["CA", "WA", "OR", "HI"],
}

STATE_TO_REGION: dict[str, str] = {
    state: region for region, states in _STATES_BY_REGION.items() for state in states
}

# (city, state, weight)
CITIES: list[tuple[str, str, float]] = [
    ("New York", "NY", 84),
    ("Philadelphia", "PA", 16),
    ("Pittsburgh", "PA", 3),
    ("Boston", "MA", 7),
    ("Newark", "NJ", 3),
    ("Baltimore", "MD", 6),
    ("Washington", "DC", 7),
    ("Hartford", "CT", 1),
    ("Providence", "RI", 2),
    ("Miami", "FL", 4),
    ("Tampa", "FL", 4),
    ("Orlando", "FL", 3),
    ("Jacksonville", "FL", 9),
    ("Atlanta", "GA", 5),
    ("Charlotte", "NC", 9),
    ("Raleigh", "NC", 5),
    ("Nashville", "TN", 7),
    ("Memphis", "TN", 6),
    ("Richmond", "VA", 2),
    ("Birmingham", "AL", 2),
    ("New Orleans", "LA", 4),
    ("Louisville", "KY", 6),
    ("Chicago", "IL", 27),
    ("Detroit", "MI", 6),
    ("Ann Arbor", "MI", 1),
    ("Columbus", "OH", 9),
    ("Cleveland", "OH", 4),
    ("Cincinnati", "OH", 3),
    ("Indianapolis", "IN", 9),
    ("Milwaukee", "WI", 6),
    ("Minneapolis", "MN", 4),
    ("Rochester", "MN", 1),
    ("St. Louis", "MO", 3),
    ("Kansas City", "MO", 5),
    ("Omaha", "NE", 5),
    ("Houston", "TX", 23),
    ("Dallas", "TX", 13),
    ("San Antonio", "TX", 15),
    ("Austin", "TX", 10),
    ("Phoenix", "AZ", 16),
    ("Tucson", "AZ", 5),
    ("Denver", "CO", 7),
    ("Salt Lake City", "UT", 2),
    ("Las Vegas", "NV", 6),
    ("Albuquerque", "NM", 6),
    ("Oklahoma City", "OK", 7),
    ("Los Angeles", "CA", 39),
    ("San Diego", "CA", 14),
    ("San Francisco", "CA", 8),
    ("San Jose", "CA", 10),
    ("Sacramento", "CA", 5),
    ("Seattle", "WA", 7),
    ("Portland", "OR", 6),
    ("Honolulu", "HI", 3),
]

HOSPITAL_NAMES: list[str] = [
    "Mercy Medical Center",
    "St. Luke's Hospital",
    "University Medical Center",
    "Memorial Regional Hospital",
    "Good Samaritan Hospital",
    "Providence Health System",
    "Baptist Health",
    "Presbyterian Hospital",
    "Methodist Medical Center",
    "Sacred Heart Medical Center",
]

CLINIC_NAMES: list[str] = [
    "Family Care Associates",
    "Specialty Physicians Group",
    "Integrated Health Partners",
    "Premier Medical Group",
    "Advanced Care Clinic",
    "Community Health Center",
    "Wellness Medical Associates",
]

ORGANIZATION_SUFFIXES: list[str] = [
    "Medical Group",
    "Health Partners",
    "Specialty Clinic",
    "Physicians Associates",
    "Care Center",
]

for _city, _state, _weight in CITIES:
    if _state not in STATE_TO_REGION:
        raise ConsistencyError(f"City {_city} is in unmapped state {_state}")
