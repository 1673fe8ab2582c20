"""
Application-wide constants.

Source names, API endpoints, category lookup tables and scoring
multipliers live here.
"""

# Source names (also the keys for API keys, rate limits and cache entries)
CONGRESS_GOV = "congress.gov"
GOVTRACK = "govtrack.us"
PROMISE_TRACKER = "promise-tracker"

DEFAULT_SOURCES = [CONGRESS_GOV, GOVTRACK, PROMISE_TRACKER]

# API Base URLs
CONGRESS_GOV_BASE_URL = "https://api.congress.gov/v3"
GOVTRACK_BASE_URL = "https://www.govtrack.us/api/v2"
PROMISE_TRACKER_BASE_URL = "https://api.promisetracker.org/v1"

# Rate Limiting (requests per hour)
DEFAULT_RATE_LIMITS = {
    CONGRESS_GOV: 1000,
    GOVTRACK: 1000,
    PROMISE_TRACKER: 500,
}
RATE_LIMIT_WINDOW_SECONDS = 3600

# Cache
DEFAULT_CACHE_DURATION_MS = 24 * 60 * 60 * 1000

# Default evaluation window when the caller gives none
DEFAULT_EVALUATION_DAYS = 365

# Policy categories (closed set)
CATEGORY_NAMES = [
    "economic",
    "social_welfare",
    "environmental",
    "security",
    "civil_rights",
    "healthcare",
    "education",
    "infrastructure",
    "foreign_policy",
    "transparency",
]

DEFAULT_CATEGORY_WEIGHT = 1.0 / len(CATEGORY_NAMES)

# Congress.gov / GovTrack policy area names -> category
POLICY_AREA_TO_CATEGORY = {
    "Economics and Public Finance": "economic",
    "Finance and Financial Sector": "economic",
    "Commerce": "economic",
    "Taxation": "economic",
    "Labor and Employment": "economic",
    "Agriculture and Food": "economic",
    "Social Welfare": "social_welfare",
    "Families": "social_welfare",
    "Housing and Community Development": "social_welfare",
    "Social Sciences and History": "social_welfare",
    "Environmental Protection": "environmental",
    "Energy": "environmental",
    "Public Lands and Natural Resources": "environmental",
    "Water Resources Development": "environmental",
    "Animals": "environmental",
    "Armed Forces and National Security": "security",
    "Crime and Law Enforcement": "security",
    "Emergency Management": "security",
    "Civil Rights and Liberties, Minority Issues": "civil_rights",
    "Immigration": "civil_rights",
    "Native Americans": "civil_rights",
    "Law": "civil_rights",
    "Health": "healthcare",
    "Education": "education",
    "Science, Technology, Communications": "education",
    "Arts, Culture, Religion": "education",
    "Transportation and Public Works": "infrastructure",
    "Foreign Trade and International Finance": "foreign_policy",
    "International Affairs": "foreign_policy",
    "Government Operations and Politics": "transparency",
    "Congress": "transparency",
}

# Default ideological axis per category, used by the weight-skew check.
# Categories without an entry are treated as axis-neutral.
DEFAULT_CATEGORY_AXES = {
    "social_welfare": "progressive",
    "environmental": "progressive",
    "civil_rights": "progressive",
    "healthcare": "progressive",
    "education": "progressive",
    "economic": "conservative",
    "security": "conservative",
    "foreign_policy": "conservative",
}

# Scoring multipliers
ACTION_MULTIPLIERS = {
    "sponsored": 1.0,
    "co-sponsored": 0.8,
    "voted_for": 0.6,
    "voted_against": 0.6,
    "abstained": 0.2,
}

IMPACT_VALUES = {
    "positive": 1.0,
    "neutral": 0.0,
    "negative": -1.0,
}

PROMISE_STATUS_VALUES = {
    "fulfilled": 1.0,
    "partially_fulfilled": 0.5,
    "broken": -1.0,
    "pending": 0.0,
}

PROMISE_EVIDENCE_WEIGHT = 1.0

# Categories holding less than this share of the effective weight do not
# cap the overall confidence.
NONTRIVIAL_WEIGHT_SHARE = 0.05

# MongoDB Collection Names
COLLECTION_EVALUATION_REPORTS = "evaluation_reports"
