"""Data models module."""

from scorecard.models.politician import (
    Party,
    Subject,
    TimeRange,
)

from scorecard.models.evidence import (
    ActionKind,
    CampaignPromise,
    Category,
    EvidenceRecord,
    EvidenceSet,
    Impact,
    LegislativeAction,
    PromiseStatus,
)

from scorecard.models.scoring import (
    BiasCheck,
    BiasKind,
    CategoryScore,
    PoliticianScore,
    Severity,
)

from scorecard.models.report import (
    EvaluationMetadata,
    EvaluationReport,
    promise_fulfillment_rate,
)

__all__ = [
    # Subject
    "Party",
    "Subject",
    "TimeRange",
    # Evidence
    "ActionKind",
    "CampaignPromise",
    "Category",
    "EvidenceRecord",
    "EvidenceSet",
    "Impact",
    "LegislativeAction",
    "PromiseStatus",
    # Scoring
    "BiasCheck",
    "BiasKind",
    "CategoryScore",
    "PoliticianScore",
    "Severity",
    # Report
    "EvaluationMetadata",
    "EvaluationReport",
    "promise_fulfillment_rate",
]
