"""
Bias detection and mitigation.

Runs on a draft PoliticianScore before it is accepted. Every check produces a
BiasCheck, fired or not, so the report keeps a full audit trail. Mitigations
adjust confidence or weights and are always listed on the final score; the
per-category scores themselves are never rewritten.
"""
import logging
from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, List, Tuple

from scorecard.config.constants import CATEGORY_NAMES, DEFAULT_CATEGORY_WEIGHT
from scorecard.config.settings import Settings
from scorecard.errors import BiasCheckInconclusive
from scorecard.evaluation.scoring import ScoringEngine
from scorecard.models import (
    BiasCheck,
    BiasKind,
    Category,
    CategoryScore,
    EvidenceSet,
    PoliticianScore,
    Severity,
    TimeRange,
)

logger = logging.getLogger(__name__)


@dataclass
class BiasReview:
    score: PoliticianScore
    checks: List[BiasCheck]


class BiasDetector:
    """
    Four independent checks: source concentration, category weight skew,
    temporal skew and an algorithmic sanity check on extreme scores.
    """

    def __init__(self, settings: Settings, engine: ScoringEngine):
        self.settings = settings
        self.engine = engine

    def review(self, draft: PoliticianScore, evidence: EvidenceSet, time_range: TimeRange) -> BiasReview:
        categories = list(draft.category_scores)
        checks: List[BiasCheck] = []

        for kind, check in (
            (BiasKind.CATEGORY_WEIGHT_SKEW, self.check_weight_skew),
            (BiasKind.SOURCE_CONCENTRATION, self.check_source_concentration),
            (BiasKind.TEMPORAL_SKEW, self.check_temporal_skew),
        ):
            try:
                finding, categories = check(categories, evidence, time_range)
            except BiasCheckInconclusive as e:
                finding = BiasCheck(kind=kind, description=f"Inconclusive: {e}")
            checks.append(finding)

        score = self.engine.combine(
            draft.politician_id, categories, draft.data_points, draft.evaluation_date
        )

        try:
            finding, score = self.check_algorithmic(score)
        except BiasCheckInconclusive as e:
            finding = BiasCheck(kind=BiasKind.ALGORITHMIC, description=f"Inconclusive: {e}")
        checks.append(finding)

        applied = [check.mitigation for check in checks if check.applied and check.mitigation]
        score = score.model_copy(update={
            "bias_detected": any(check.detected for check in checks),
            "bias_mitigation_applied": applied,
        })

        for check in checks:
            if check.detected:
                logger.warning(f"Bias check fired for {draft.politician_id}: {check}")

        return BiasReview(score=score, checks=checks)

    # ------------------------------------------------------------------
    # Source concentration
    # ------------------------------------------------------------------

    def check_source_concentration(
        self, categories: List[CategoryScore], evidence: EvidenceSet, time_range: TimeRange
    ) -> Tuple[BiasCheck, List[CategoryScore]]:
        threshold = self.settings.SOURCE_CONCENTRATION_THRESHOLD
        penalty = self.settings.SOURCE_CONCENTRATION_PENALTY

        by_category: Dict[Category, Counter] = defaultdict(Counter)
        for record in evidence.records:
            by_category[record.category][record.source] += 1

        flagged: List[Category] = []
        details: List[str] = []
        adjusted: List[CategoryScore] = []
        for cs in categories:
            counts = by_category.get(cs.category)
            if counts:
                source, top = counts.most_common(1)[0]
                share = top / sum(counts.values())
                if share >= threshold:
                    flagged.append(cs.category)
                    details.append(f"{cs.category.value}: {share:.0%} from {source}")
                    cs = cs.model_copy(update={"confidence": cs.confidence * penalty})
            adjusted.append(cs)

        if not flagged:
            return BiasCheck(
                kind=BiasKind.SOURCE_CONCENTRATION,
                description=f"No category draws {threshold:.0%} or more of its evidence from one source",
            ), adjusted

        return BiasCheck(
            kind=BiasKind.SOURCE_CONCENTRATION,
            detected=True,
            severity=Severity.MEDIUM,
            description="Evidence concentrated in a single source (" + "; ".join(details) + ")",
            mitigation=f"Reduced confidence by factor {penalty} for " + ", ".join(c.value for c in flagged),
            applied=True,
            categories=flagged,
        ), adjusted

    # ------------------------------------------------------------------
    # Category weight skew
    # ------------------------------------------------------------------

    def check_weight_skew(
        self, categories: List[CategoryScore], evidence: EvidenceSet, time_range: TimeRange
    ) -> Tuple[BiasCheck, List[CategoryScore]]:
        axes = self.settings.CATEGORY_AXES
        tolerance = self.settings.WEIGHT_SKEW_TOLERANCE

        axis_weight: Dict[str, float] = defaultdict(float)
        axis_count: Dict[str, int] = defaultdict(int)
        for name in CATEGORY_NAMES:
            axis = axes.get(name)
            if axis is None:
                continue
            axis_weight[axis] += self.settings.category_weight(name)
            axis_count[axis] += 1

        if len(axis_count) < 2:
            raise BiasCheckInconclusive("category-to-axis mapping needs at least two axes")
        total_weight = sum(axis_weight.values())
        if total_weight <= 0:
            raise BiasCheckInconclusive("no declared weight on any axis")
        total_count = sum(axis_count.values())

        deviations = {
            axis: axis_weight[axis] / total_weight - axis_count[axis] / total_count
            for axis in axis_count
        }
        dominant = max(deviations, key=lambda axis: (deviations[axis], axis))
        deviation = deviations[dominant]

        if deviation <= tolerance:
            return BiasCheck(
                kind=BiasKind.CATEGORY_WEIGHT_SKEW,
                description=f"Declared weights are balanced across axes (max deviation {deviation:.2f})",
            ), categories

        adjusted = [
            cs.model_copy(update={"weight": (cs.weight + DEFAULT_CATEGORY_WEIGHT) / 2.0})
            for cs in categories
        ]
        return BiasCheck(
            kind=BiasKind.CATEGORY_WEIGHT_SKEW,
            detected=True,
            severity=Severity.HIGH if deviation > 2 * tolerance else Severity.MEDIUM,
            description=(
                f"Declared weights favour the {dominant} axis by {deviation:.0%} "
                f"over its share of categories"
            ),
            mitigation="Renormalized category weights halfway toward uniform",
            applied=True,
            categories=[cs.category for cs in categories if axes.get(cs.category.value) == dominant],
        ), adjusted

    # ------------------------------------------------------------------
    # Temporal skew
    # ------------------------------------------------------------------

    def check_temporal_skew(
        self, categories: List[CategoryScore], evidence: EvidenceSet, time_range: TimeRange
    ) -> Tuple[BiasCheck, List[CategoryScore]]:
        dates = sorted(record.date for record in evidence.records)
        if len(dates) < self.settings.TEMPORAL_MIN_RECORDS:
            raise BiasCheckInconclusive(
                f"only {len(dates)} dated records, need {self.settings.TEMPORAL_MIN_RECORDS}"
            )
        if time_range.span_seconds <= 0:
            raise BiasCheckInconclusive("time range has zero length")

        width = time_range.span_seconds * self.settings.TEMPORAL_WINDOW_FRACTION
        densest = 0
        tail = 0
        for head, moment in enumerate(dates):
            while (moment - dates[tail]).total_seconds() > width:
                tail += 1
            densest = max(densest, head - tail + 1)
        share = densest / len(dates)

        fraction = self.settings.TEMPORAL_WINDOW_FRACTION
        if share <= self.settings.TEMPORAL_CONCENTRATION_THRESHOLD:
            return BiasCheck(
                kind=BiasKind.TEMPORAL_SKEW,
                description=f"At most {share:.0%} of evidence falls in any {fraction:.0%} slice of the range",
            ), categories

        penalty = self.settings.TEMPORAL_PENALTY
        adjusted = [cs.model_copy(update={"confidence": cs.confidence * penalty}) for cs in categories]
        return BiasCheck(
            kind=BiasKind.TEMPORAL_SKEW,
            detected=True,
            severity=Severity.MEDIUM if share >= 0.95 else Severity.LOW,
            description=f"{share:.0%} of evidence falls within {fraction:.0%} of the requested range",
            mitigation=f"Reduced confidence by factor {penalty} (advisory, scores unchanged)",
            applied=True,
            categories=[cs.category for cs in categories],
        ), adjusted

    # ------------------------------------------------------------------
    # Algorithmic
    # ------------------------------------------------------------------

    def check_algorithmic(self, score: PoliticianScore) -> Tuple[BiasCheck, PoliticianScore]:
        extreme = self.settings.EXTREME_SCORE_THRESHOLD
        minimum = self.settings.MIN_EVIDENCE_FOR_EXTREME_SCORE

        if abs(score.overall_score) <= extreme or score.data_points >= minimum:
            return BiasCheck(
                kind=BiasKind.ALGORITHMIC,
                description=(
                    f"Overall score {score.overall_score:.1f} is supported by "
                    f"{score.data_points} data points"
                ),
            ), score

        cap = self.settings.ALGORITHMIC_CONFIDENCE_CAP
        clamped = score.model_copy(update={"confidence": min(score.confidence, cap)})
        return BiasCheck(
            kind=BiasKind.ALGORITHMIC,
            detected=True,
            severity=Severity.MEDIUM,
            description=(
                f"Extreme overall score {score.overall_score:.1f} from only "
                f"{score.data_points} data points (minimum {minimum})"
            ),
            mitigation=f"Clamped confidence to at most {cap}",
            applied=True,
        ), clamped
