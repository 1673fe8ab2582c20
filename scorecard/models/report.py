"""
Evaluation report models.

The report is the serialization boundary of the pipeline: every timestamp
is explicit and every enum is a closed string set, so a report survives a
JSON round trip unchanged.
"""
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from scorecard.models.evidence import CampaignPromise, LegislativeAction, PromiseStatus
from scorecard.models.politician import Subject
from scorecard.models.scoring import BiasCheck, PoliticianScore


class EvaluationMetadata(BaseModel):
    total_data_points: int
    evaluation_duration: float  # seconds
    bias_checks: List[BiasCheck] = Field(default_factory=list)
    last_updated: datetime
    meets_confidence_threshold: bool = False
    unavailable_sources: List[str] = Field(default_factory=list)


class EvaluationReport(BaseModel):
    """Everything produced by one subject evaluation."""
    politician: Subject
    score: PoliticianScore
    legislative_actions: List[LegislativeAction] = Field(default_factory=list)
    campaign_promises: List[CampaignPromise] = Field(default_factory=list)
    promise_fulfillment_rate: float = Field(0.0, ge=0.0, le=1.0)
    data_sources: List[str] = Field(default_factory=list)
    evaluation_metadata: EvaluationMetadata

    def evidence_json(self) -> str:
        """JSON of the evidence sections only."""
        return self.model_dump_json(include={"legislative_actions", "campaign_promises"})


def promise_fulfillment_rate(promises: List[CampaignPromise]) -> float:
    """
    (fulfilled + 0.5 * partially_fulfilled) / total promises, or 0.0 when
    there are no promises.
    """
    if not promises:
        return 0.0
    fulfilled = sum(1 for p in promises if p.status == PromiseStatus.FULFILLED)
    partial = sum(1 for p in promises if p.status == PromiseStatus.PARTIALLY_FULFILLED)
    return (fulfilled + 0.5 * partial) / len(promises)
