"""
Scoring data models.

Per-category scores, the combined politician score and bias-check findings.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from scorecard.models.evidence import Category


class CategoryScore(BaseModel):
    """Score for one policy category."""
    category: Category
    score: float = Field(..., ge=-100.0, le=100.0)
    weight: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(..., ge=0.0, le=1.0)
    evidence: List[str] = Field(default_factory=list)  # supporting citations
    data_points: int = 0
    sources: List[str] = Field(default_factory=list)


class PoliticianScore(BaseModel):
    """
    Overall weighted score for one subject.

    `confidence` never exceeds the lowest confidence among categories that
    carry a non-trivial share of the effective weight.
    """
    politician_id: str
    overall_score: float = Field(..., ge=-100.0, le=100.0)
    category_scores: List[CategoryScore] = Field(default_factory=list)
    evaluation_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    data_points: int = 0
    confidence: float = Field(..., ge=0.0, le=1.0)
    bias_detected: bool = False
    bias_mitigation_applied: List[str] = Field(default_factory=list)

    def category(self, category: Category) -> Optional[CategoryScore]:
        for item in self.category_scores:
            if item.category == category:
                return item
        return None


class BiasKind(str, Enum):
    SOURCE_CONCENTRATION = "source_concentration"
    CATEGORY_WEIGHT_SKEW = "category_weight_skew"
    TEMPORAL_SKEW = "temporal_skew"
    ALGORITHMIC = "algorithmic"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BiasCheck(BaseModel):
    """
    Outcome of one bias check.

    Recorded for every check that ran, whether or not it fired, so reports
    carry a complete audit trail.
    """
    kind: BiasKind
    detected: bool = False
    severity: Severity = Severity.LOW
    description: str
    mitigation: Optional[str] = None
    applied: bool = False
    categories: List[Category] = Field(default_factory=list)

    def __str__(self) -> str:
        state = "applied" if self.applied else "not applied"
        return f"[{self.kind.value}/{self.severity.value}] {self.description} ({state})"
