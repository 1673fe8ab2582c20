"""Ingestion module - rate limiting, caching, source clients and collection."""

from scorecard.ingestion.rate_limiter import RateLimiter
from scorecard.ingestion.cache import ResponseCache
from scorecard.ingestion.base import SourceClient
from scorecard.ingestion.congress_gov import CongressGovClient
from scorecard.ingestion.govtrack import GovTrackClient
from scorecard.ingestion.promises import PromiseTrackerClient
from scorecard.ingestion.collector import DataCollector, merge_evidence

__all__ = [
    "RateLimiter",
    "ResponseCache",
    "SourceClient",
    "CongressGovClient",
    "GovTrackClient",
    "PromiseTrackerClient",
    "DataCollector",
    "merge_evidence",
]
