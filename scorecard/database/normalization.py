"""
Data Normalization Module

Centralized functions to turn raw source values into the closed vocabularies
used by evidence records. Every source client goes through these helpers so
that records from different providers compare equal.

Usage:
    from scorecard.database.normalization import normalize_category, parse_timestamp

    category = normalize_category(raw["policyArea"]["name"])
    when = parse_timestamp(raw["introducedDate"])
"""
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from scorecard.config.constants import CATEGORY_NAMES, POLICY_AREA_TO_CATEGORY

logger = logging.getLogger(__name__)


# ============================================================================
# State Normalization
# ============================================================================

STATE_NAME_TO_CODE = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR",
    "California": "CA", "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE",
    "Florida": "FL", "Georgia": "GA", "Hawaii": "HI", "Idaho": "ID",
    "Illinois": "IL", "Indiana": "IN", "Iowa": "IA", "Kansas": "KS",
    "Kentucky": "KY", "Louisiana": "LA", "Maine": "ME", "Maryland": "MD",
    "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN", "Mississippi": "MS",
    "Missouri": "MO", "Montana": "MT", "Nebraska": "NE", "Nevada": "NV",
    "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM", "New York": "NY",
    "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH", "Oklahoma": "OK",
    "Oregon": "OR", "Pennsylvania": "PA", "Rhode Island": "RI", "South Carolina": "SC",
    "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX", "Utah": "UT",
    "Vermont": "VT", "Virginia": "VA", "Washington": "WA", "West Virginia": "WV",
    "Wisconsin": "WI", "Wyoming": "WY",
    "District of Columbia": "DC", "Puerto Rico": "PR"
}

STATE_CODE_TO_NAME = {v: k for k, v in STATE_NAME_TO_CODE.items()}


def normalize_state(state: Optional[str]) -> Optional[str]:
    """
    Normalize state to 2-letter code.

    Examples:
        >>> normalize_state("Utah")
        'UT'
        >>> normalize_state("ut")
        'UT'
    """
    if not state:
        return None

    state_clean = state.strip()

    if len(state_clean) == 2:
        code = state_clean.upper()
        return code if code in STATE_CODE_TO_NAME else None

    for full_name, code in STATE_NAME_TO_CODE.items():
        if full_name.lower() == state_clean.lower():
            return code

    return None


# ============================================================================
# Party Normalization
# ============================================================================

PARTY_MAPPINGS = {
    "republican": "R",
    "democrat": "D",
    "democratic": "D",
    "independent": "I",
    "libertarian": "L",
    "green": "G",
    "r": "R",
    "d": "D",
    "i": "I",
    "l": "L",
    "g": "G",
}


def normalize_party(party: Optional[str], default: str = "I") -> str:
    """
    Normalize party affiliation to single-letter code.

    Examples:
        >>> normalize_party("Democratic")
        'D'
        >>> normalize_party("Unknown")
        'I'
    """
    if not party:
        return default

    party_clean = party.strip().lower()
    if party_clean in PARTY_MAPPINGS:
        return PARTY_MAPPINGS[party_clean]

    if party_clean not in ("unknown", "other", "none"):
        logger.warning(f"Unexpected party value '{party}', using default '{default}'")
    return default


# ============================================================================
# Evidence vocabularies
# ============================================================================

def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", value.strip().lower()).strip("_")


CATEGORY_ALIASES = {
    "economic_impact": "economic",
    "economy": "economic",
    "environmental_protection": "environmental",
    "environment": "environmental",
    "national_security": "security",
    "defense": "security",
    "health": "healthcare",
    "government_transparency": "transparency",
    "foreign_affairs": "foreign_policy",
}


def normalize_category(value: Optional[str]) -> Optional[str]:
    """
    Map a category name or a Congress.gov policy area onto one of the ten
    policy categories. Returns None when there is no sensible mapping.

    Examples:
        >>> normalize_category("Health")
        'healthcare'
        >>> normalize_category("economic_impact")
        'economic'
    """
    if not value:
        return None

    if value in POLICY_AREA_TO_CATEGORY:
        return POLICY_AREA_TO_CATEGORY[value]

    slug = _slug(value)
    if slug in CATEGORY_NAMES:
        return slug
    return CATEGORY_ALIASES.get(slug)


ACTION_MAPPINGS = {
    "sponsored": "sponsored",
    "sponsor": "sponsored",
    "co_sponsored": "co-sponsored",
    "cosponsored": "co-sponsored",
    "cosponsor": "co-sponsored",
    "voted_for": "voted_for",
    "yea": "voted_for",
    "aye": "voted_for",
    "yes": "voted_for",
    "+": "voted_for",
    "voted_against": "voted_against",
    "nay": "voted_against",
    "no": "voted_against",
    "-": "voted_against",
    "abstained": "abstained",
    "present": "abstained",
    "not_voting": "abstained",
    "0": "abstained",
    "p": "abstained",
}


def normalize_action(value: Optional[str]) -> Optional[str]:
    """Map a vote position or sponsorship role onto an action kind."""
    if value is None:
        return None
    raw = value.strip().lower()
    if raw in ACTION_MAPPINGS:
        return ACTION_MAPPINGS[raw]
    return ACTION_MAPPINGS.get(_slug(value))


IMPACT_MAPPINGS = {
    "positive": "positive",
    "beneficial": "positive",
    "neutral": "neutral",
    "mixed": "neutral",
    "negative": "negative",
    "harmful": "negative",
}


def normalize_impact(value: Optional[str], default: str = "neutral") -> str:
    """Directional impact annotation; missing annotations are neutral."""
    if not value:
        return default
    impact = IMPACT_MAPPINGS.get(_slug(value))
    if impact is None:
        raise ValueError(f"Unknown impact value: {value}")
    return impact


PROMISE_STATUS_MAPPINGS = {
    "fulfilled": "fulfilled",
    "kept": "fulfilled",
    "promise_kept": "fulfilled",
    "partially_fulfilled": "partially_fulfilled",
    "compromise": "partially_fulfilled",
    "partial": "partially_fulfilled",
    "broken": "broken",
    "promise_broken": "broken",
    "pending": "pending",
    "in_the_works": "pending",
    "stalled": "pending",
    "not_yet_rated": "pending",
}


def normalize_promise_status(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return PROMISE_STATUS_MAPPINGS.get(_slug(value))


# ============================================================================
# Timestamps
# ============================================================================

def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a date or datetime string into a UTC-aware datetime.

    Accepts "2024-03-15", "2024-03-15T10:00:00" and "2024-03-15T10:00:00Z".

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str) and value:
        if "T" in value:
            moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
        else:
            moment = datetime.strptime(value[:10], "%Y-%m-%d")
    else:
        raise ValueError(f"Missing or invalid timestamp: {value!r}")

    return as_utc(moment)


def normalize_bill_number(value: str) -> str:
    """
    Canonical bill reference used to match the same bill across sources.

    Examples:
        >>> normalize_bill_number("H.R. 1234")
        'hr1234'
        >>> normalize_bill_number("S. 5")
        's5'
    """
    return re.sub(r"[^a-z0-9]", "", value.lower())
