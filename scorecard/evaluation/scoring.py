"""
Scoring engine.

Turns merged evidence into per-category scores, an overall weighted score and
a confidence estimate. Pure: the result depends only on the evidence and the
settings it was built with.

Per record:
    legislative action -> impact (+1 / 0 / -1), weighted by the action-kind
                          multiplier (sponsored 1.0 ... abstained 0.2)
    campaign promise   -> fulfilled +1, partially +0.5, broken -1, pending 0,
                          weight 1.0

Per category:
    score      = 100 * sum(weight * value) / sum(weight)
    confidence = 1 - exp(-n / CONFIDENCE_GROWTH_RATE)

Overall:
    effective weight = declared weight * category confidence
    score            = effective-weight average of category scores
    confidence       = effective-weight average of category confidences,
                       times 1 - COVERAGE_PENALTY * (share of the ten
                       categories without evidence), capped by the lowest
                       confidence among non-trivially weighted categories
"""
import logging
import math
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple, Union

from scorecard.config.constants import (
    ACTION_MULTIPLIERS,
    CATEGORY_NAMES,
    IMPACT_VALUES,
    NONTRIVIAL_WEIGHT_SHARE,
    PROMISE_EVIDENCE_WEIGHT,
    PROMISE_STATUS_VALUES,
)
from scorecard.config.settings import Settings
from scorecard.models import (
    CampaignPromise,
    Category,
    CategoryScore,
    EvidenceSet,
    LegislativeAction,
    PoliticianScore,
)

logger = logging.getLogger(__name__)

Record = Union[LegislativeAction, CampaignPromise]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ScoringEngine:
    """Weighted, confidence-annotated scoring across policy categories."""

    def __init__(self, settings: Settings):
        self.settings = settings

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @staticmethod
    def record_value(record: Record) -> Tuple[float, float]:
        """(value in [-1, 1], weight) for one evidence record."""
        if isinstance(record, LegislativeAction):
            return IMPACT_VALUES[record.impact.value], ACTION_MULTIPLIERS[record.action.value]
        if isinstance(record, CampaignPromise):
            return PROMISE_STATUS_VALUES[record.status.value], PROMISE_EVIDENCE_WEIGHT
        raise TypeError(f"Unsupported evidence record: {type(record).__name__}")

    def category_confidence(self, count: int) -> float:
        """Monotonically increasing in `count`, 0 for no evidence, below 1.0."""
        if count <= 0:
            return 0.0
        return min(1.0, 1.0 - math.exp(-count / self.settings.CONFIDENCE_GROWTH_RATE))

    def score_category(self, category: Category, records: List[Record]) -> CategoryScore:
        weighted = 0.0
        total_weight = 0.0
        citations = set()
        for record in records:
            value, weight = self.record_value(record)
            weighted += value * weight
            total_weight += weight
            citations.update(record.evidence)

        score = 100.0 * weighted / total_weight if total_weight > 0 else 0.0
        return CategoryScore(
            category=category,
            score=_clamp(score, -100.0, 100.0),
            weight=self.settings.category_weight(category.value),
            confidence=self.category_confidence(len(records)),
            evidence=sorted(citations),
            data_points=len(records),
            sources=sorted({record.source for record in records}),
        )

    # ------------------------------------------------------------------
    # Subject
    # ------------------------------------------------------------------

    def score(
        self,
        politician_id: str,
        evidence: Union[EvidenceSet, Iterable[Record]],
        evaluated_at: Optional[datetime] = None,
    ) -> PoliticianScore:
        """
        Draft score for one subject.

        Categories without evidence are left out rather than scored at zero.
        """
        records = evidence.records if isinstance(evidence, EvidenceSet) else list(evidence)

        by_category: Dict[Category, List[Record]] = defaultdict(list)
        for record in records:
            by_category[record.category].append(record)

        category_scores = [
            self.score_category(category, by_category[category])
            for category in Category
            if by_category.get(category)
        ]
        return self.combine(politician_id, category_scores, len(records), evaluated_at)

    def combine(
        self,
        politician_id: str,
        category_scores: List[CategoryScore],
        data_points: int,
        evaluated_at: Optional[datetime] = None,
    ) -> PoliticianScore:
        """Overall score and confidence from (possibly adjusted) category scores."""
        overall, confidence = self.overall(category_scores)
        extra = {"evaluation_date": evaluated_at} if evaluated_at is not None else {}
        return PoliticianScore(
            politician_id=politician_id,
            overall_score=overall,
            category_scores=category_scores,
            data_points=data_points,
            confidence=confidence,
            **extra,
        )

    def overall(self, category_scores: List[CategoryScore]) -> Tuple[float, float]:
        effective = [cs.weight * cs.confidence for cs in category_scores]
        total = sum(effective)
        if total <= 0:
            return 0.0, 0.0

        score = sum(w * cs.score for w, cs in zip(effective, category_scores)) / total
        mean_confidence = sum(w * cs.confidence for w, cs in zip(effective, category_scores)) / total

        missing = len(CATEGORY_NAMES) - len({cs.category for cs in category_scores})
        coverage_factor = 1.0 - self.settings.COVERAGE_PENALTY * missing / len(CATEGORY_NAMES)
        confidence = mean_confidence * coverage_factor

        nontrivial = [
            cs.confidence
            for w, cs in zip(effective, category_scores)
            if w / total >= NONTRIVIAL_WEIGHT_SHARE
        ]
        if nontrivial:
            confidence = min(confidence, min(nontrivial))

        return _clamp(score, -100.0, 100.0), _clamp(confidence, 0.0, 1.0)
