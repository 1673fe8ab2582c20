"""
Error taxonomy for the evaluation pipeline.

Source- and record-level errors are absorbed by the collector; subject-level
errors are surfaced to the caller of a single evaluation and recorded as a
per-subject failure in batch runs.
"""
from typing import Optional


class ScorecardError(Exception):
    """Base exception for evaluation errors."""

    pass


class SourceUnavailable(ScorecardError):
    """One data source could not be queried."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        super().__init__(f"Source {source} unavailable: {reason}" if reason else f"Source {source} unavailable")


class NoDataAvailable(ScorecardError):
    """Every configured source failed for a subject."""

    pass


class RateLimited(ScorecardError):
    """Quota exhausted and the admission wait timed out."""

    def __init__(self, source: str, waited: float = 0.0):
        self.source = source
        self.waited = waited
        super().__init__(f"Rate limit for {source} exhausted after waiting {waited:.1f}s")


class InvalidEvidence(ScorecardError):
    """A single malformed record returned by a source."""

    def __init__(self, source: str, reason: str, record_id: Optional[str] = None):
        self.source = source
        self.record_id = record_id
        super().__init__(f"Invalid record from {source} ({record_id or 'no id'}): {reason}")


class BiasCheckInconclusive(ScorecardError):
    """A bias check could not reach a verdict. Never fatal."""

    pass


class EvaluationTimeout(ScorecardError, TimeoutError):
    """A subject evaluation exceeded its time budget."""

    pass
